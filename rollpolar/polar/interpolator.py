"""
Polar Interpolator
==================

Densifies a sparse angle/radius response matrix for contour display.

Angles are relative headings (degrees, circular), radii are speeds. Each
dense cell blends the two circularly-nearest stored angles and the stored
radii bracketing the query radius.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_ANGLE_COUNT = 360      # 1 degree resolution
DEFAULT_RADIAL_DENSITY = 3


@dataclass
class DenseGrid:
    """Interpolated grid; values is shaped [radius][angle]."""
    angles: np.ndarray
    radii: np.ndarray
    values: np.ndarray

    @property
    def shape(self) -> Tuple[int, int]:
        return self.values.shape


def circular_distance(angles, query: float) -> np.ndarray:
    """Angular distance in degrees, 0-180, across the 0/360 boundary."""
    diff = np.abs(np.asarray(angles, dtype=np.float64) - query) % 360.0
    return np.minimum(diff, 360.0 - diff)


def nearest_angle_indices(angles: Sequence[float], query: float) -> Tuple[int, int]:
    """
    Indices of the nearest and second-nearest stored angles.

    Ties go to the lowest index. With a single stored angle both
    indices are 0.
    """
    dist = circular_distance(angles, query)
    a1 = int(np.argmin(dist))
    if len(dist) == 1:
        return (a1, a1)
    dist[a1] = np.inf
    return (a1, int(np.argmin(dist)))


def radius_bracket(radii: Sequence[float], value: float) -> Tuple[int, int, float]:
    """
    Find bracketing radius indices and interpolation factor.

    Clamps to the smallest / largest stored radius, never extrapolates.
    """
    arr = np.asarray(radii, dtype=np.float64)
    lo = int(np.argmin(arr))
    hi = int(np.argmax(arr))
    if value < arr[lo]:
        return (lo, lo, 0.0)
    if value > arr[hi]:
        return (hi, hi, 0.0)

    for i in range(len(arr) - 1):
        if arr[i] <= value <= arr[i + 1]:
            r1, r2 = arr[i], arr[i + 1]
            frac = (value - r1) / (r2 - r1) if r2 > r1 else 0.0
            return (i, i + 1, float(frac))

    # Unsorted radii with no consecutive bracket
    nearest = int(np.argmin(np.abs(arr - value)))
    return (nearest, nearest, 0.0)


def _padded_matrix(matrix, n_radii: int, n_angles: int) -> np.ndarray:
    """Copy matrix into a [n_radii][n_angles] array; missing cells are 0."""
    out = np.zeros((n_radii, n_angles), dtype=np.float64)
    if isinstance(matrix, np.ndarray) and matrix.ndim == 2:
        rows = min(n_radii, matrix.shape[0])
        cols = min(n_angles, matrix.shape[1])
        out[:rows, :cols] = matrix[:rows, :cols]
        return out

    for i, row in enumerate(matrix[:n_radii]):
        if row is None:
            continue
        for j, cell in enumerate(row[:n_angles]):
            if cell is not None:
                out[i, j] = cell
    return out


def _angle_weight(d1: np.ndarray, d2: np.ndarray) -> np.ndarray:
    """Weight of the nearest angle for the distance-weighted blend."""
    total = d1 + d2
    with np.errstate(invalid='ignore', divide='ignore'):
        w1 = np.where(total > 0, d2 / total, 0.5)
    return w1


def _blend(m: np.ndarray, r1: int, r2: int, t: float,
           a1: np.ndarray, a2: np.ndarray,
           w1: Optional[np.ndarray]) -> np.ndarray:
    v1 = m[r1, a1] * (1 - t) + m[r2, a1] * t
    v2 = m[r1, a2] * (1 - t) + m[r2, a2] * t
    if w1 is None:
        # Equal average of both angular neighbours
        return (v1 + v2) / 2
    return v1 * w1 + v2 * (1 - w1)


def _check_inputs(angles, radii):
    if len(angles) == 0:
        raise ValueError("angles must not be empty")
    if len(radii) == 0:
        raise ValueError("radii must not be empty")


def interpolate_point(angles: Sequence[float], radii: Sequence[float], matrix,
                      angle: float, radius: float, angle_weighted: bool = False) -> float:
    """
    Interpolated value at a single (angle, radius).

    Args:
        angles: Stored angles (degrees)
        radii: Stored radii
        matrix: Values indexed [radius_idx][angle_idx]
        angle: Query angle (degrees)
        radius: Query radius
        angle_weighted: Weight the two angular neighbours by distance
            instead of averaging them equally

    Returns:
        Interpolated value
    """
    _check_inputs(angles, radii)
    m = _padded_matrix(matrix, len(radii), len(angles))
    a1, a2 = nearest_angle_indices(angles, angle)
    r1, r2, t = radius_bracket(radii, radius)

    w1 = None
    if angle_weighted:
        dist = circular_distance(angles, angle)
        w1 = _angle_weight(dist[a1], dist[a2])
    return float(_blend(m, r1, r2, t, np.array(a1), np.array(a2), w1))


def densify(angles: Sequence[float], radii: Sequence[float], matrix,
            target_angle_count: int = DEFAULT_ANGLE_COUNT,
            radial_density_factor: int = DEFAULT_RADIAL_DENSITY,
            angle_weighted: bool = False) -> DenseGrid:
    """
    Resample a sparse polar matrix onto a dense uniform grid.

    Args:
        angles: Stored angles (degrees), any order
        radii: Stored radii, ascending for bracket interpolation
        matrix: Values indexed [radius_idx][angle_idx]; missing cells read as 0
        target_angle_count: Dense angles, spaced 360/target_angle_count apart
        radial_density_factor: Dense radii per stored radius
        angle_weighted: See interpolate_point

    Returns:
        DenseGrid with values shaped [len(radii) * factor][target_angle_count]

    Raises:
        ValueError: empty angles/radii or non-positive counts
    """
    _check_inputs(angles, radii)
    if target_angle_count < 1:
        raise ValueError(f"target_angle_count must be >= 1, got {target_angle_count}")
    if radial_density_factor < 1:
        raise ValueError(f"radial_density_factor must be >= 1, got {radial_density_factor}")

    stored_angles = np.asarray(angles, dtype=np.float64)
    stored_radii = np.asarray(radii, dtype=np.float64)
    m = _padded_matrix(matrix, len(stored_radii), len(stored_angles))

    dense_angles = np.arange(target_angle_count) * (360.0 / target_angle_count)
    dense_radii = np.linspace(stored_radii.min(), stored_radii.max(),
                              len(stored_radii) * radial_density_factor)

    # Angular neighbours depend only on the angle; resolve them once per column
    dist = np.abs(stored_angles[np.newaxis, :] - dense_angles[:, np.newaxis]) % 360.0
    dist = np.minimum(dist, 360.0 - dist)
    cols = np.arange(target_angle_count)
    a1 = np.argmin(dist, axis=1)
    d1 = dist[cols, a1]
    if len(stored_angles) > 1:
        masked = dist.copy()
        masked[cols, a1] = np.inf
        a2 = np.argmin(masked, axis=1)
    else:
        a2 = a1
    d2 = dist[cols, a2]
    w1 = _angle_weight(d1, d2) if angle_weighted else None

    values = np.empty((len(dense_radii), target_angle_count), dtype=np.float64)
    for k, r in enumerate(dense_radii):
        r1, r2, t = radius_bracket(stored_radii, r)
        values[k] = _blend(m, r1, r2, t, a1, a2, w1)

    logger.debug(f"Densified {len(stored_radii)}x{len(stored_angles)} -> "
                 f"{values.shape[0]}x{values.shape[1]}")
    return DenseGrid(angles=dense_angles, radii=dense_radii, values=values)
