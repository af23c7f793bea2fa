"""Polar interpolation and chart data preparation."""

from .interpolator import (
    DenseGrid,
    circular_distance,
    densify,
    interpolate_point,
    nearest_angle_indices,
    radius_bracket,
)
from .chart import chart_data, dense_grid_dict, dense_grid_for, heatmap_points

__all__ = [
    'DenseGrid',
    'circular_distance',
    'densify',
    'interpolate_point',
    'nearest_angle_indices',
    'radius_bracket',
    'chart_data',
    'dense_grid_dict',
    'dense_grid_for',
    'heatmap_points',
]
