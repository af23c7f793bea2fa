"""
Error types raised while locating, reading and parsing roll polar data.

Each error also derives from the closest built-in exception so callers that
only know about FileNotFoundError / ValueError / EOFError keep working.
"""

from typing import Optional


class PolarDataError(Exception):
    """Base class for all dataset and control file failures."""


class PolarNotFoundError(PolarDataError, FileNotFoundError):
    """Dataset or control file is absent."""

    def __init__(self, key: str):
        super().__init__(f"Polar data not found: {key}")
        self.key = key


class InvalidDimensionsError(PolarDataError, ValueError):
    """Header dimensions outside the supported range."""

    def __init__(self, message: str, speed_count: Optional[int] = None,
                 heading_count: Optional[int] = None):
        super().__init__(message)
        self.speed_count = speed_count
        self.heading_count = heading_count


class TruncatedError(PolarDataError, EOFError):
    """Buffer ended before all expected bytes were read."""

    def __init__(self, offset: int, needed: int, source_key: str = ""):
        where = f" in {source_key}" if source_key else ""
        super().__init__(
            f"Unexpected end of data{where}: needed {needed} bytes at offset {offset}"
        )
        self.offset = offset
        self.needed = needed


class ReadFailureError(PolarDataError, IOError):
    """Any other fault while reading; the original error is chained."""


class MalformedControlFileError(PolarDataError, ValueError):
    """Control file text could not be parsed."""
