"""Congestion hot-spot ranking."""

from __future__ import annotations

from collections.abc import Iterable

from coursesim.simulation.runner import CongestionPoint


def aggregate_congestion(
    points: Iterable[CongestionPoint],
    top: int | None = None,
) -> list[CongestionPoint]:
    """Rank congestion points by how often runners were blocked there.

    Args:
        points: Congestion points, e.g. ``RaceSimulation.congestion_points``.
        top: Optional number of hot spots to keep.

    Returns:
        Points ordered by descending count, then by course distance.
    """
    ranked = sorted(points, key=lambda point: (-point.count, point.distance))
    if top is not None:
        return ranked[: max(top, 0)]
    return ranked


def total_blocking_events(points: Iterable[CongestionPoint]) -> int:
    """Sum the blocking events over all congestion points.

    Args:
        points: Congestion points.

    Returns:
        Total event count.
    """
    return sum(point.count for point in points)
