"""
Bpolar Codec
============

Reads and writes .bpolar response matrix files.

Layout (little-endian throughout):

    header1        7-bit length prefixed UTF-8 string
    header2        7-bit length prefixed UTF-8 string
    speed_count    int32
    heading_count  int32
    status         7-bit length prefixed UTF-8 string
    data           heading_count x speed_count triplets of float64
                   (speed[i], heading[j], max_roll[i][j]), heading outermost

Every triplet repeats its speed and heading, so speed[i] is written once per
heading and heading[j] once per speed. Readers keep the last write, which for a
well-formed file equals all the earlier ones.
"""

import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Tuple, Union

import numpy as np

from ..errors import (
    InvalidDimensionsError,
    PolarNotFoundError,
    ReadFailureError,
    TruncatedError,
)

logger = logging.getLogger(__name__)

MIN_COUNT = 1
MAX_SPEED_COUNT = 100
MAX_HEADING_COUNT = 360

TRIPLET_SIZE = 24  # three float64
_INT32 = struct.Struct('<i')
_TRIPLET_DTYPE = np.dtype('<f8')


def _validate_counts(speed_count: int, heading_count: int):
    if not MIN_COUNT <= speed_count <= MAX_SPEED_COUNT:
        raise InvalidDimensionsError(
            f"Invalid speed count: {speed_count}",
            speed_count=speed_count, heading_count=heading_count,
        )
    if not MIN_COUNT <= heading_count <= MAX_HEADING_COUNT:
        raise InvalidDimensionsError(
            f"Invalid heading count: {heading_count}",
            speed_count=speed_count, heading_count=heading_count,
        )


def _frozen(values, ndim: int) -> np.ndarray:
    arr = np.array(values, dtype=np.float64)
    if arr.ndim != ndim:
        raise InvalidDimensionsError(f"Expected {ndim}D array, got shape {arr.shape}")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class ResponseMatrix:
    """
    Maximum roll (degrees) indexed by speed and relative heading.

    max_roll is shaped [speed_count][heading_count]. The three header strings
    are not interpreted; they are kept so encode() reproduces the file.
    """
    speeds: np.ndarray
    headings: np.ndarray
    max_roll: np.ndarray
    source_key: str = ''
    header1: str = ''
    header2: str = ''
    status: str = ''

    def __post_init__(self):
        speeds = _frozen(self.speeds, 1)
        headings = _frozen(self.headings, 1)
        max_roll = _frozen(self.max_roll, 2)

        _validate_counts(len(speeds), len(headings))
        if max_roll.shape != (len(speeds), len(headings)):
            raise InvalidDimensionsError(
                f"max_roll shape {max_roll.shape} does not match "
                f"({len(speeds)}, {len(headings)})",
                speed_count=len(speeds), heading_count=len(headings),
            )

        object.__setattr__(self, 'speeds', speeds)
        object.__setattr__(self, 'headings', headings)
        object.__setattr__(self, 'max_roll', max_roll)

    @property
    def speed_count(self) -> int:
        return len(self.speeds)

    @property
    def heading_count(self) -> int:
        return len(self.headings)

    def peak(self) -> Tuple[float, float, float]:
        """Largest roll value as (max_roll, speed, heading)."""
        i, j = np.unravel_index(int(np.argmax(self.max_roll)), self.max_roll.shape)
        return (float(self.max_roll[i, j]), float(self.speeds[i]), float(self.headings[j]))

    def __eq__(self, other) -> bool:
        if not isinstance(other, ResponseMatrix):
            return NotImplemented
        # source_key is provenance only
        return (
            self.header1 == other.header1
            and self.header2 == other.header2
            and self.status == other.status
            and np.array_equal(self.speeds, other.speeds, equal_nan=True)
            and np.array_equal(self.headings, other.headings, equal_nan=True)
            and np.array_equal(self.max_roll, other.max_roll, equal_nan=True)
        )

    __hash__ = None


class _ByteReader:
    """Sequential little-endian reader over an immutable buffer."""

    def __init__(self, data: bytes, source_key: str = ''):
        self._view = memoryview(data)
        self._pos = 0
        self._source_key = source_key

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._view) - self._pos

    def take(self, size: int) -> memoryview:
        if size > self.remaining:
            raise TruncatedError(self._pos, size, self._source_key)
        chunk = self._view[self._pos:self._pos + size]
        self._pos += size
        return chunk

    def read_int32(self) -> int:
        return _INT32.unpack(self.take(_INT32.size))[0]

    def read_7bit_int(self) -> int:
        """Length prefix: 7 bits per byte, low group first, high bit continues."""
        result = 0
        for shift in range(0, 35, 7):
            byte = self.take(1)[0]
            result |= (byte & 0x7F) << shift
            if not byte & 0x80:
                return result
        raise ReadFailureError(
            f"Bad 7-bit encoded length at offset {self._pos - 5} in {self._source_key or 'buffer'}"
        )

    def read_string(self) -> str:
        length = self.read_7bit_int()
        if length > 0x7FFFFFFF:
            raise ReadFailureError(f"String length {length} out of range")
        raw = self.take(length)
        try:
            return bytes(raw).decode('utf-8')
        except UnicodeDecodeError as e:
            raise ReadFailureError(
                f"Invalid UTF-8 string at offset {self._pos - length}"
            ) from e


def _write_7bit_int(out: bytearray, value: int):
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)


def _write_string(out: bytearray, text: str):
    raw = text.encode('utf-8')
    _write_7bit_int(out, len(raw))
    out.extend(raw)


def _log_inconsistent_repeats(block: np.ndarray, source_key: str):
    """Debug-log when repeated speed/heading writes disagree."""
    speeds_ok = np.array_equal(block[:, :, 0], np.broadcast_to(block[-1, :, 0], block.shape[:2]),
                               equal_nan=True)
    headings_ok = np.array_equal(block[:, :, 1], np.broadcast_to(block[:, -1:, 1], block.shape[:2]),
                                 equal_nan=True)
    if not (speeds_ok and headings_ok):
        logger.debug(f"Repeated speed/heading values differ in {source_key or 'buffer'}; "
                     f"using last written values")


def decode(data: bytes, source_key: str = '') -> ResponseMatrix:
    """
    Decode a .bpolar buffer.

    Args:
        data: Complete file contents
        source_key: Path or logical key recorded on the result

    Returns:
        ResponseMatrix

    Raises:
        InvalidDimensionsError: speed or heading count out of range
        TruncatedError: buffer shorter than the header declares
        ReadFailureError: malformed string prefix or UTF-8
    """
    reader = _ByteReader(data, source_key)

    header1 = reader.read_string()
    header2 = reader.read_string()

    speed_count = reader.read_int32()
    heading_count = reader.read_int32()
    _validate_counts(speed_count, heading_count)

    status = reader.read_string()

    cells = heading_count * speed_count
    raw = reader.take(cells * TRIPLET_SIZE)
    block = np.frombuffer(raw, dtype=_TRIPLET_DTYPE).reshape(heading_count, speed_count, 3)

    _log_inconsistent_repeats(block, source_key)

    if reader.remaining:
        logger.debug(f"Ignoring {reader.remaining} trailing bytes in {source_key or 'buffer'}")

    # Last write wins: speed[i] from the final heading pass,
    # heading[j] from the final speed of each pass.
    return ResponseMatrix(
        speeds=block[-1, :, 0].copy(),
        headings=block[:, -1, 1].copy(),
        max_roll=block[:, :, 2].T.copy(),
        source_key=source_key,
        header1=header1,
        header2=header2,
        status=status,
    )


def encode(matrix: ResponseMatrix) -> bytes:
    """Encode a ResponseMatrix in .bpolar layout."""
    out = bytearray()
    _write_string(out, matrix.header1)
    _write_string(out, matrix.header2)
    out.extend(_INT32.pack(matrix.speed_count))
    out.extend(_INT32.pack(matrix.heading_count))
    _write_string(out, matrix.status)

    block = np.empty((matrix.heading_count, matrix.speed_count, 3), dtype=_TRIPLET_DTYPE)
    block[:, :, 0] = matrix.speeds[np.newaxis, :]
    block[:, :, 1] = matrix.headings[:, np.newaxis]
    block[:, :, 2] = matrix.max_roll.T
    out.extend(block.tobytes())

    return bytes(out)


def from_lists(speeds: Sequence[float], headings: Sequence[float],
               max_roll: Sequence[Sequence[float]], **kwargs) -> ResponseMatrix:
    """Build a ResponseMatrix from plain lists."""
    return ResponseMatrix(
        speeds=np.asarray(speeds, dtype=np.float64),
        headings=np.asarray(headings, dtype=np.float64),
        max_roll=np.asarray(max_roll, dtype=np.float64),
        **kwargs,
    )


def read_bpolar(filepath: Union[str, Path]) -> ResponseMatrix:
    """
    Read a .bpolar file from disk.

    Raises:
        PolarNotFoundError: file does not exist
        ReadFailureError: OS error while reading
    """
    filepath = Path(filepath)
    if not filepath.is_file():
        raise PolarNotFoundError(str(filepath))

    try:
        data = filepath.read_bytes()
    except OSError as e:
        raise ReadFailureError(f"Error reading polar file: {filepath}") from e

    matrix = decode(data, source_key=str(filepath))
    logger.info(f"Loaded {filepath.name}: {matrix.speed_count} speeds x "
                f"{matrix.heading_count} headings")
    return matrix


def write_bpolar(filepath: Union[str, Path], matrix: ResponseMatrix):
    """Write a ResponseMatrix to disk."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    filepath.write_bytes(encode(matrix))
    logger.debug(f"Wrote {filepath}")
