"""
Coverage scoring for circular target zones.

A regular sample_count x sample_count grid is laid over the target's bounding
square. Only grid points inside the circle count as samples. A sample is
covered when any segment passes strictly closer than radius * 0.15 to it,
measured to the closest point on the finite segment.

The work is O(samples x segments) and is done in numpy chunks over segments.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from lumen.config import GrowthSegment, Point

if TYPE_CHECKING:
    from lumen.challenges import ChallengeTarget

COVERAGE_THRESHOLD_FRACTION = 0.15
DEFAULT_SAMPLE_COUNT = 12
_SEGMENT_CHUNK = 4096


def distance_point_to_segment(point: Point, start: Point, end: Point) -> float:
    """Distance from point to the closest point of the segment start-end."""
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length_sq = dx * dx + dy * dy

    if length_sq == 0:
        return math.hypot(point[0] - start[0], point[1] - start[1])

    t = ((point[0] - start[0]) * dx + (point[1] - start[1]) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(point[0] - (start[0] + t * dx), point[1] - (start[1] + t * dy))


def sample_points(center: Point, radius: float, sample_count: int) -> np.ndarray:
    """
    World coordinates of the grid samples that fall inside the circle.

    Returns:
        Array of shape (n, 2); empty when sample_count < 2
    """
    if sample_count < 2:
        return np.empty((0, 2), dtype=np.float64)

    local = np.arange(sample_count, dtype=np.float64) / (sample_count - 1) * 2 - 1
    u, v = np.meshgrid(local, local, indexing="ij")
    inside = np.hypot(u, v) <= 1.0
    xs = center[0] + u[inside] * radius
    ys = center[1] + v[inside] * radius
    return np.stack([xs, ys], axis=-1)


def _segment_distances(points: np.ndarray, starts: np.ndarray, ends: np.ndarray) -> np.ndarray:
    """Point-to-segment distances, shape (points, segments)."""
    d = ends - starts
    length_sq = np.einsum("ij,ij->i", d, d)
    rel = points[:, None, :] - starts[None, :, :]
    safe = np.where(length_sq > 0, length_sq, 1.0)
    t = np.einsum("pij,ij->pi", rel, d) / safe
    t = np.where(length_sq > 0, np.clip(t, 0.0, 1.0), 0.0)
    closest = starts[None, :, :] + t[..., None] * d[None, :, :]
    return np.hypot(points[:, None, 0] - closest[..., 0], points[:, None, 1] - closest[..., 1])


def calculate_coverage(
    target: ChallengeTarget,
    segments: Sequence[GrowthSegment],
    sample_count: int = DEFAULT_SAMPLE_COUNT,
) -> float:
    """
    Fraction of the target's in-circle samples covered by segments.

    Args:
        target: Anything with `position` and `radius`
        segments: Growth segments in any order
        sample_count: Grid resolution per axis (10-12 in practice)

    Returns:
        Coverage in [0, 1]; 0 for no samples or no segments
    """
    points = sample_points(target.position, target.radius, sample_count)
    total = len(points)
    if total == 0 or not segments:
        return 0.0

    threshold = target.radius * COVERAGE_THRESHOLD_FRACTION
    starts = np.array([seg.start for seg in segments], dtype=np.float64)
    ends = np.array([seg.end for seg in segments], dtype=np.float64)

    covered = np.zeros(total, dtype=bool)
    for offset in range(0, len(segments), _SEGMENT_CHUNK):
        pending = ~covered
        if not pending.any():
            break
        distances = _segment_distances(
            points[pending],
            starts[offset:offset + _SEGMENT_CHUNK],
            ends[offset:offset + _SEGMENT_CHUNK],
        )
        covered[pending] = (distances < threshold).any(axis=1)

    return int(covered.sum()) / max(1, total)
