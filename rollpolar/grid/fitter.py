"""
Grid Fitter
===========

Maps continuous operating parameters onto the stored dataset grid.

Datasets exist for GM, Hs and Tz in 0.5 steps and for three draft categories.
The fitter snaps each value to the nearest 0.5 and picks the draft category
from the mean of the aft and fore peak drafts.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .control_file import ControlFileData, ParameterBound

logger = logging.getLogger(__name__)

GRID_STEP = 0.5

# Mean draft thresholds (m) used when no control file is loaded
DEFAULT_SCANTLING_THRESHOLD = 8.0
DEFAULT_DESIGN_THRESHOLD = 6.0


class DraftCategory(str, Enum):
    """Vessel loading condition; the value is the dataset directory name."""
    SCANTLING = 'scantling'
    DESIGN = 'design'
    INTERMEDIATE = 'intermediate'


class RoundingMode(str, Enum):
    """Tie-breaking rule when snapping to the 0.5 grid."""
    HALF_AWAY_FROM_ZERO = 'half_away_from_zero'
    HALF_EVEN = 'half_even'


@dataclass(frozen=True)
class GridKey:
    """Identifies one stored dataset. gm/hs/tz are multiples of 0.5."""
    draft_category: DraftCategory
    gm: float
    hs: float
    tz: float


@dataclass
class FitParameters:
    """User-facing parameters for a dataset lookup."""
    draft: DraftCategory = DraftCategory.SCANTLING
    gm: float = 1.5     # Metacentric height (m)
    hs: float = 5.5     # Significant wave height (m)
    tz: float = 7.5     # Zero-crossing period (s)
    draft_aft_peak: Optional[float] = None   # m
    draft_fore_peak: Optional[float] = None  # m


def snap_to_half(value: float,
                 rounding: RoundingMode = RoundingMode.HALF_AWAY_FROM_ZERO) -> float:
    """
    Snap a value to the nearest multiple of 0.5.

    HALF_AWAY_FROM_ZERO: 1.25 -> 1.5, 1.75 -> 2.0, -1.25 -> -1.5
    HALF_EVEN:           1.25 -> 1.0, 1.75 -> 2.0 (Python round())

    Raises:
        ValueError: value is NaN or infinite
    """
    if not math.isfinite(value):
        raise ValueError(f"Cannot snap non-finite value {value} to the grid")
    doubled = value * 2
    if rounding == RoundingMode.HALF_EVEN:
        steps = round(doubled)
    else:
        steps = math.copysign(math.floor(abs(doubled) + 0.5), doubled)
    # + 0.0 turns -0.0 into 0.0
    return steps / 2 + 0.0


def determine_draft(draft_aft_peak: float, draft_fore_peak: float,
                    control: Optional[ControlFileData] = None) -> DraftCategory:
    """
    Draft category from the mean peak draft.

    With control data the thresholds are the midpoints between the
    representative drafts, otherwise fixed 8 m / 6 m thresholds.
    """
    mean_draft = 0.5 * (draft_aft_peak + draft_fore_peak)

    if control is not None:
        rd = control.drafts
        scantling_threshold = 0.5 * (rd.ts + rd.td)
        design_threshold = 0.5 * (rd.td + rd.ti)
    else:
        scantling_threshold = DEFAULT_SCANTLING_THRESHOLD
        design_threshold = DEFAULT_DESIGN_THRESHOLD

    if mean_draft > scantling_threshold:
        return DraftCategory.SCANTLING
    elif mean_draft > design_threshold:
        return DraftCategory.DESIGN
    return DraftCategory.INTERMEDIATE


def _has_peak_drafts(params: FitParameters) -> bool:
    return (params.draft_aft_peak is not None and params.draft_fore_peak is not None
            and params.draft_aft_peak > 0 and params.draft_fore_peak > 0)


def fit(params: FitParameters, control: Optional[ControlFileData] = None,
        rounding: RoundingMode = RoundingMode.HALF_AWAY_FROM_ZERO) -> GridKey:
    """
    Fit parameters onto the dataset grid.

    Args:
        params: Requested draft / GM / Hs / Tz
        control: Loaded control file, if any
        rounding: Tie-breaking rule for the 0.5 snap

    Returns:
        GridKey of the dataset to load
    """
    if _has_peak_drafts(params):
        draft = determine_draft(params.draft_aft_peak, params.draft_fore_peak, control)
    else:
        draft = DraftCategory(params.draft)

    key = GridKey(
        draft_category=draft,
        gm=snap_to_half(params.gm, rounding),
        hs=snap_to_half(params.hs, rounding),
        tz=snap_to_half(params.tz, rounding),
    )
    logger.debug(f"Fitted GM={params.gm} Hs={params.hs} Tz={params.tz} -> {key}")
    return key


def half_steps(lower: float, upper: float) -> List[float]:
    """Grid values from lower to upper inclusive in 0.5 steps."""
    start = snap_to_half(lower)
    count = int(math.floor((upper - start) / GRID_STEP + 1e-9)) + 1
    return [start + i * GRID_STEP for i in range(max(count, 0))]


def available_gm_values() -> List[float]:
    bounds = ParameterBound.dataset()
    return half_steps(bounds.gm_lower, bounds.gm_upper)


def available_hs_values() -> List[float]:
    bounds = ParameterBound.dataset()
    return half_steps(bounds.hs_lower, bounds.hs_upper)


def available_tz_values() -> List[float]:
    bounds = ParameterBound.dataset()
    return half_steps(bounds.tz_lower, bounds.tz_upper)
