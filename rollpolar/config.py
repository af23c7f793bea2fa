"""
Configuration for the roll polar service, API and CLI.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Union

from .grid.fitter import RoundingMode
from .polar.interpolator import DEFAULT_ANGLE_COUNT, DEFAULT_RADIAL_DENSITY

logger = logging.getLogger(__name__)


@dataclass
class PolarConfig:
    """Polar data service configuration."""
    # Data location
    data_root: str = "PolarData"
    control_file: str = "proll.ctl"

    # Grid fitting
    rounding: RoundingMode = RoundingMode.HALF_AWAY_FROM_ZERO

    # Dense grid
    target_angle_count: int = DEFAULT_ANGLE_COUNT
    radial_density_factor: int = DEFAULT_RADIAL_DENSITY
    angle_weighted: bool = False

    def __post_init__(self):
        self.rounding = RoundingMode(self.rounding)
        if self.target_angle_count < 1:
            raise ValueError(f"target_angle_count must be >= 1, got {self.target_angle_count}")
        if self.radial_density_factor < 1:
            raise ValueError(f"radial_density_factor must be >= 1, got {self.radial_density_factor}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PolarConfig':
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        return cls(**data)

    @classmethod
    def from_json(cls, filepath: Union[str, Path]) -> 'PolarConfig':
        """Load configuration from a JSON file."""
        with open(filepath, 'r') as f:
            data = json.load(f)
        config = cls.from_dict(data)
        logger.debug(f"Loaded config from {filepath}")
        return config

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['rounding'] = self.rounding.value
        return data
