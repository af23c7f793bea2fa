"""Control file parsing and dataset grid fitting."""

from .control_file import (
    ControlFileData,
    ParameterBound,
    RepresentativeDraft,
    VesselInfo,
    load_control_file,
    parse_control_file,
)
from .fitter import (
    DraftCategory,
    FitParameters,
    GridKey,
    RoundingMode,
    available_gm_values,
    available_hs_values,
    available_tz_values,
    determine_draft,
    fit,
    half_steps,
    snap_to_half,
)
from .naming import dataset_filename, image_filename, image_key, storage_key

__all__ = [
    'ControlFileData', 'ParameterBound', 'RepresentativeDraft', 'VesselInfo',
    'load_control_file', 'parse_control_file',
    'DraftCategory', 'FitParameters', 'GridKey', 'RoundingMode',
    'available_gm_values', 'available_hs_values', 'available_tz_values',
    'determine_draft', 'fit', 'half_steps', 'snap_to_half',
    'dataset_filename', 'image_filename', 'image_key', 'storage_key',
]
