"""
Roll Polar
==========

Decodes precomputed vessel roll response datasets (.bpolar), fits operating
parameters onto the stored dataset grid and densifies response matrices for
polar contour display.
"""

__version__ = "0.1.0"
