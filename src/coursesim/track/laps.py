"""Lap detection for courses that return to their own start."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from coursesim.track.geodesy import angular_difference, distance
from coursesim.utils.exceptions import ConfigurationError

if TYPE_CHECKING:
    from coursesim.track.models import Course

DEFAULT_LAP_STEP = 5.0
DEFAULT_LAP_BEARING_TOLERANCE = 90.0
DEFAULT_LAP_CROSSING_TOLERANCE = 10.0
MAX_BEARING_TOLERANCE = 180.0

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LapDetectionParams:
    """Sampling and matching controls for lap-crossing detection.

    Args:
        step_meters: Sampling interval along the course [m].
        bearing_tolerance_deg: Maximum heading difference to the start
            heading for a sample to count as a crossing [deg].
        crossing_tolerance_meters: Maximum distance to the start point for a
            sample to count as a crossing [m].
    """

    step_meters: float = DEFAULT_LAP_STEP
    bearing_tolerance_deg: float = DEFAULT_LAP_BEARING_TOLERANCE
    crossing_tolerance_meters: float = DEFAULT_LAP_CROSSING_TOLERANCE

    def validate(self) -> None:
        """Validate lap-detection settings.

        Raises:
            coursesim.utils.exceptions.ConfigurationError: If any value
                violates its bound.
        """
        if self.step_meters <= 0.0:
            msg = "step_meters must be positive"
            raise ConfigurationError(msg)
        if not 0.0 <= self.bearing_tolerance_deg <= MAX_BEARING_TOLERANCE:
            msg = "bearing_tolerance_deg must be within [0, 180]"
            raise ConfigurationError(msg)
        if self.crossing_tolerance_meters < 0.0:
            msg = "crossing_tolerance_meters must be non-negative"
            raise ConfigurationError(msg)


def compute_lap_crossings(course: Course, params: LapDetectionParams) -> list[float]:
    """Find distances where the course passes its start with the start heading.

    The detector arms once a sample lies outside the crossing tolerance of the
    start point. An armed sample inside the tolerance whose heading matches
    the start heading is a crossing; detection then skips forward and waits
    to leave the start neighbourhood again, so one physical pass yields one
    crossing.

    Args:
        course: Course to scan.
        params: Validated lap-detection settings.

    Returns:
        Ascending crossing distances along the course [m].
    """
    start = course.start_point
    start_bearing = course.get_bearing_at_distance(0.0)
    total = course.length
    skip = max(params.step_meters, 2.0 * params.crossing_tolerance_meters)

    crossings: list[float] = []
    armed = False
    sample = min(params.step_meters, total)
    while True:
        gap = distance(course.get_position_at_distance(sample), start)
        next_sample = sample + params.step_meters
        if gap > params.crossing_tolerance_meters:
            armed = True
        elif armed:
            heading_error = angular_difference(course.get_bearing_at_distance(sample), start_bearing)
            if heading_error <= params.bearing_tolerance_deg:
                crossings.append(sample)
                armed = False
                next_sample = sample + skip

        if sample >= total:
            break
        sample = min(next_sample, total)

    logger.debug("Detected %d lap crossing(s) over %.1f m", len(crossings), total)
    return crossings
