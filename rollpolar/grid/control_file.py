"""
Control File Parser
===================

Parses the vessel control file (proll.ctl) shipped alongside the datasets.

    9876543 OCEAN STAR        <- IMO number, vessel name
    10.0 7.0 4.0              <- scantling, design, intermediate drafts (m)
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from ..errors import MalformedControlFileError, PolarNotFoundError, ReadFailureError

logger = logging.getLogger(__name__)

# Fixed '.' decimal point; rejects '7,5', 'nan', 'inf' and '1_0'
_DECIMAL_RE = re.compile(r'^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$')


@dataclass(frozen=True)
class VesselInfo:
    """Vessel identity from the first control file line."""
    imo: str = ''
    name: str = ''


@dataclass(frozen=True)
class RepresentativeDraft:
    """Representative drafts (m) separating the draft categories."""
    ts: float = 0.0   # Scantling
    td: float = 0.0   # Design
    ti: float = 0.0   # Intermediate


@dataclass(frozen=True)
class ParameterBound:
    """Inclusive GM / Hs / Tz bounds offered to the user."""
    gm_lower: float
    gm_upper: float
    hs_lower: float
    hs_upper: float
    tz_lower: float
    tz_upper: float

    @classmethod
    def default(cls) -> 'ParameterBound':
        """Bounds used while no control file is loaded."""
        return cls(gm_lower=0.5, gm_upper=5.0,
                   hs_lower=3.0, hs_upper=12.0,
                   tz_lower=5.0, tz_upper=18.0)

    @classmethod
    def dataset(cls) -> 'ParameterBound':
        """Bounds of the stored dataset grid."""
        return cls(gm_lower=1.0, gm_upper=2.0,
                   hs_lower=3.0, hs_upper=12.0,
                   tz_lower=5.0, tz_upper=18.0)

    def contains(self, gm: float, hs: float, tz: float) -> bool:
        return (self.gm_lower <= gm <= self.gm_upper
                and self.hs_lower <= hs <= self.hs_upper
                and self.tz_lower <= tz <= self.tz_upper)


@dataclass(frozen=True)
class ControlFileData:
    """Parsed control file."""
    vessel: VesselInfo
    drafts: RepresentativeDraft
    bounds: ParameterBound = field(default_factory=ParameterBound.dataset)


def _parse_decimal(token: str, label: str) -> float:
    if not _DECIMAL_RE.match(token):
        raise MalformedControlFileError(f"Invalid {label} draft: {token!r}")
    return float(token)


def parse_control_file(text: str) -> ControlFileData:
    """
    Parse control file text.

    Args:
        text: Full file contents

    Returns:
        ControlFileData with bounds set to the dataset grid

    Raises:
        MalformedControlFileError: fewer than two non-blank lines, or the
            draft line is not exactly three decimal numbers
    """
    lines = [line for line in re.split(r'[\r\n]+', text) if line.strip()]
    if len(lines) < 2:
        raise MalformedControlFileError(
            f"Control file needs at least 2 non-empty lines, got {len(lines)}"
        )

    # str.split() with no separator collapses runs of spaces and tabs
    ident = lines[0].split()
    vessel = VesselInfo(imo=ident[0], name=' '.join(ident[1:]))

    draft_tokens = lines[1].split()
    if len(draft_tokens) != 3:
        raise MalformedControlFileError(
            f"Expected 3 drafts (scantling, design, intermediate), got {len(draft_tokens)}"
        )
    drafts = RepresentativeDraft(
        ts=_parse_decimal(draft_tokens[0], 'scantling'),
        td=_parse_decimal(draft_tokens[1], 'design'),
        ti=_parse_decimal(draft_tokens[2], 'intermediate'),
    )

    return ControlFileData(vessel=vessel, drafts=drafts, bounds=ParameterBound.dataset())


def load_control_file(filepath: Union[str, Path]) -> ControlFileData:
    """Read and parse a control file from disk."""
    filepath = Path(filepath)
    if not filepath.is_file():
        raise PolarNotFoundError(str(filepath))

    try:
        text = filepath.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise ReadFailureError(f"Error reading control file: {filepath}") from e

    data = parse_control_file(text)
    logger.info(f"Loaded control file for {data.vessel.name or data.vessel.imo} "
                f"(IMO {data.vessel.imo})")
    return data
