"""
Polar Data Store
================

Byte access to datasets, images and the control file beneath a data root.

    <root>/proll.ctl
    <root>/<draft>/GM=<gm>m/bin/MAXROLL_H<hs>_T<tz>.bpolar
    <root>/<draft>/GM=<gm>m/plots/POLAR_ROLL_H<hs>_T<tz>_polarplot.gif
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from ..errors import PolarNotFoundError, ReadFailureError

logger = logging.getLogger(__name__)


def sanitize_path(base_dir: Path, name: Optional[str]) -> Optional[Path]:
    """
    Resolve a relative key under base_dir.

    Args:
        base_dir: The allowed base directory
        name: Relative key, '/' separated

    Returns:
        Path under base_dir, or None if the key is empty or escapes it
    """
    if not name or not name.strip():
        return None

    base_path = os.path.abspath(str(base_dir))
    full_path = os.path.normpath(os.path.join(base_path, name))

    # Separator suffix stops /base/dir matching /base/dir_other
    if not full_path.startswith(base_path + os.sep) and full_path != base_path:
        return None

    return Path(full_path)


class PolarDataStore:
    """Filesystem-backed store rooted at a data directory."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def resolve(self, key: str) -> Path:
        """
        Absolute path for a key.

        Raises:
            ReadFailureError: key is empty or points outside the root
        """
        path = sanitize_path(self.root, key)
        if path is None:
            raise ReadFailureError(f"Invalid data key: {key!r}")
        return path

    def exists(self, key: str) -> bool:
        try:
            return self.resolve(key).is_file()
        except ReadFailureError:
            return False

    def read_bytes(self, key: str) -> bytes:
        """
        Read the bytes stored under key.

        Raises:
            PolarNotFoundError: nothing stored under key
            ReadFailureError: invalid key or OS error
        """
        path = self.resolve(key)
        if not path.is_file():
            raise PolarNotFoundError(key)

        logger.debug(f"Reading {path}")
        try:
            data = path.read_bytes()
        except OSError as e:
            raise ReadFailureError(f"Error reading '{key}'") from e

        logger.debug(f"Read {len(data)} bytes from {key}")
        return data

    def read_text(self, key: str, encoding: str = 'utf-8') -> str:
        data = self.read_bytes(key)
        try:
            return data.decode(encoding)
        except UnicodeDecodeError as e:
            raise ReadFailureError(f"'{key}' is not valid {encoding} text") from e
