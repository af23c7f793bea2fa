"""
Polar Service
=============

Session facade over the data store: loads the control file, fits user
parameters onto the dataset grid and loads the matching response matrix.

Codec and parser errors are turned into fallbacks here:
- a missing or malformed control file falls back to default bounds and the
  fixed draft thresholds
- a missing or corrupt dataset yields an unsuccessful PolarLoadResult
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..codec.bpolar import ResponseMatrix, decode
from ..config import PolarConfig
from ..errors import PolarDataError, PolarNotFoundError
from ..grid import fitter, naming
from ..grid.control_file import (
    ControlFileData,
    ParameterBound,
    RepresentativeDraft,
    VesselInfo,
    parse_control_file,
)
from ..grid.fitter import DraftCategory, FitParameters, GridKey
from .store import PolarDataStore

logger = logging.getLogger(__name__)


@dataclass
class PolarLoadResult:
    """Outcome of a dataset load."""
    success: bool
    key: GridKey
    storage_key: str
    image_key: str
    data: Optional[ResponseMatrix] = None
    error_message: Optional[str] = None
    not_found: bool = False

    @property
    def fitted_gm(self) -> float:
        return self.key.gm

    @property
    def fitted_hs(self) -> float:
        return self.key.hs

    @property
    def fitted_tz(self) -> float:
        return self.key.tz


class PolarService:
    """
    Roll polar data access for one session.

    Holds the loaded control file; not intended to be shared across threads.
    """

    def __init__(self, config: Optional[PolarConfig] = None,
                 store: Optional[PolarDataStore] = None):
        self.config = config or PolarConfig()
        self.store = store or PolarDataStore(self.config.data_root)
        self._control: Optional[ControlFileData] = None

    def load_control_file(self, name: Optional[str] = None) -> bool:
        """
        Load (or reload) the control file.

        Returns:
            True if loaded. On failure the previous control data is dropped
            and default bounds apply.
        """
        name = name or self.config.control_file
        try:
            text = self.store.read_text(name)
            self._control = parse_control_file(text)
        except PolarDataError as e:
            logger.warning(f"Control file '{name}' not loaded, using defaults: {e}")
            self._control = None
            return False

        vessel = self._control.vessel
        logger.info(f"Control file loaded: IMO {vessel.imo} {vessel.name}")
        return True

    @property
    def control_data(self) -> Optional[ControlFileData]:
        return self._control

    @property
    def is_control_file_loaded(self) -> bool:
        return self._control is not None

    @property
    def vessel_info(self) -> Optional[VesselInfo]:
        return self._control.vessel if self._control else None

    @property
    def representative_drafts(self) -> Optional[RepresentativeDraft]:
        return self._control.drafts if self._control else None

    def get_parameter_bounds(self) -> ParameterBound:
        if self._control is not None:
            return self._control.bounds
        return ParameterBound.default()

    def determine_draft(self, draft_aft_peak: float, draft_fore_peak: float) -> DraftCategory:
        return fitter.determine_draft(draft_aft_peak, draft_fore_peak, self._control)

    def fit(self, params: FitParameters) -> GridKey:
        return fitter.fit(params, self._control, self.config.rounding)

    def load_polar(self, params: FitParameters) -> PolarLoadResult:
        """
        Fit parameters and load the matching dataset.

        Args:
            params: Requested draft / GM / Hs / Tz

        Returns:
            PolarLoadResult; on failure success is False and error_message
            names the attempted key
        """
        key = self.fit(params)
        dataset_key = naming.storage_key(key)
        result = PolarLoadResult(
            success=False,
            key=key,
            storage_key=dataset_key,
            image_key=naming.image_key(key),
        )

        if not self.get_parameter_bounds().contains(key.gm, key.hs, key.tz):
            logger.warning(f"Fitted parameters outside bounds: {key}")

        logger.info(f"Looking for {dataset_key}")
        try:
            raw = self.store.read_bytes(dataset_key)
            result.data = decode(raw, source_key=dataset_key)
        except PolarNotFoundError:
            result.not_found = True
            result.error_message = (f"Data file not found: "
                                    f"{naming.dataset_filename(key.hs, key.tz)}\n"
                                    f"Path: {dataset_key}")
            logger.warning(f"Dataset not found: {dataset_key}")
            return result
        except PolarDataError as e:
            result.error_message = f"Error loading polar data: {e}\nPath: {dataset_key}"
            logger.error(f"Failed to load {dataset_key}: {e}")
            return result

        result.success = True
        logger.info(f"Loaded {dataset_key}: {result.data.speed_count} speeds x "
                    f"{result.data.heading_count} headings")
        return result

    def image_key_for(self, params: FitParameters) -> Optional[str]:
        """Companion image key if the image exists in the store."""
        key = naming.image_key(self.fit(params))
        if self.store.exists(key):
            return key
        logger.debug(f"No image at {key}")
        return None

    def available_gm_values(self) -> List[float]:
        return fitter.available_gm_values()

    def available_hs_values(self) -> List[float]:
        return fitter.available_hs_values()

    def available_tz_values(self) -> List[float]:
        return fitter.available_tz_values()
