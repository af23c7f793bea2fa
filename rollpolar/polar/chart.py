"""
Chart data preparation.

Turns response matrices and dense grids into plain lists that a chart layer
can consume directly (headings as angles, speeds as radii).
"""

from typing import Any, Dict, List

from ..codec.bpolar import ResponseMatrix
from .interpolator import (
    DEFAULT_ANGLE_COUNT,
    DEFAULT_RADIAL_DENSITY,
    DenseGrid,
    densify,
)


def chart_data(matrix: ResponseMatrix) -> Dict[str, Any]:
    """Angles, radii and [radius][angle] values of a response matrix."""
    peak_roll, peak_speed, peak_heading = matrix.peak()
    return {
        'angles': matrix.headings.tolist(),
        'radii': matrix.speeds.tolist(),
        'matrix': matrix.max_roll.tolist(),
        'peak': {
            'max_roll': peak_roll,
            'speed': peak_speed,
            'heading': peak_heading,
        },
    }


def dense_grid_for(matrix: ResponseMatrix,
                   target_angle_count: int = DEFAULT_ANGLE_COUNT,
                   radial_density_factor: int = DEFAULT_RADIAL_DENSITY,
                   angle_weighted: bool = False) -> DenseGrid:
    """Densify a response matrix with headings as angles and speeds as radii."""
    return densify(
        matrix.headings,
        matrix.speeds,
        matrix.max_roll,
        target_angle_count=target_angle_count,
        radial_density_factor=radial_density_factor,
        angle_weighted=angle_weighted,
    )


def heatmap_points(grid: DenseGrid) -> List[List[float]]:
    """[angle, radius, value] triples, radius-major then angle."""
    points = []
    for i, radius in enumerate(grid.radii):
        for j, angle in enumerate(grid.angles):
            points.append([float(angle), float(radius), float(grid.values[i, j])])
    return points


def dense_grid_dict(grid: DenseGrid) -> Dict[str, Any]:
    """JSON-friendly form of a dense grid."""
    return {
        'angles': grid.angles.tolist(),
        'radii': grid.radii.tolist(),
        'values': grid.values.tolist(),
    }
