"""
Storage key derivation for fitted datasets.

Numbers are always written with a '.' decimal point and one fraction digit;
the 'f' format type never consults the locale.
"""

from .fitter import GridKey


def _draft_dir(key: GridKey) -> str:
    return f"{key.draft_category.value}/GM={key.gm:.1f}m"


def dataset_filename(hs: float, tz: float) -> str:
    return f"MAXROLL_H{hs:.1f}_T{tz:.1f}.bpolar"


def image_filename(hs: float, tz: float) -> str:
    return f"POLAR_ROLL_H{hs:.1f}_T{tz:.1f}_polarplot.gif"


def storage_key(key: GridKey) -> str:
    """Relative key of the .bpolar dataset, e.g. scantling/GM=1.5m/bin/MAXROLL_H5.5_T7.5.bpolar"""
    return f"{_draft_dir(key)}/bin/{dataset_filename(key.hs, key.tz)}"


def image_key(key: GridKey) -> str:
    """Relative key of the companion polar plot image."""
    return f"{_draft_dir(key)}/plots/{image_filename(key.hs, key.tz)}"
