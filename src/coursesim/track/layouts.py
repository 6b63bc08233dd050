"""Synthetic course layout builders for geometry and congestion scenarios."""

from __future__ import annotations

from coursesim.track.geodesy import LatLon, destination
from coursesim.track.laps import LapDetectionParams
from coursesim.track.models import Course
from coursesim.utils.exceptions import ConfigurationError

NORTH = 0.0
EAST = 90.0
SOUTH = 180.0
WEST = 270.0

DEFAULT_ORIGIN: LatLon = (0.0, 0.0)
DEFAULT_STRAIGHT_LENGTH = 500.0
DEFAULT_OUT_AND_BACK_LENGTH = 250.0
DEFAULT_OUT_AND_BACK_OFFSET = 1.0
DEFAULT_ZIGZAG_STEP_COUNT = 5
DEFAULT_ZIGZAG_STEP_OFFSET = 1.0
DEFAULT_ZIGZAG_LEG_LENGTH = 100.0
DEFAULT_LOOP_WIDTH = 200.0
DEFAULT_LOOP_HEIGHT = 100.0


def _validate_positive(name: str, value: float) -> None:
    """Validate that a layout parameter is strictly positive.

    Args:
        name: Parameter name used in error messages.
        value: Parameter value to validate.

    Raises:
        coursesim.utils.exceptions.ConfigurationError: If ``value`` is not
            strictly positive.
    """
    if value <= 0.0:
        msg = f"{name} must be positive"
        raise ConfigurationError(msg)


def build_straight_course(
    length: float = DEFAULT_STRAIGHT_LENGTH,
    heading: float = EAST,
    origin: LatLon = DEFAULT_ORIGIN,
    sample_count: int = 2,
) -> Course:
    """Build a straight course along a constant initial bearing.

    Args:
        length: Course length [m].
        heading: Initial bearing of the course [deg].
        origin: Start point ``(lat, lon)`` [deg].
        sample_count: Number of evenly spaced points, at least two.

    Returns:
        Straight course.

    Raises:
        coursesim.utils.exceptions.ConfigurationError: If ``length`` is not
            positive or ``sample_count`` is below two.
    """
    _validate_positive("length", length)
    if sample_count < 2:
        msg = "sample_count must be at least 2"
        raise ConfigurationError(msg)

    spacing = float(length) / (sample_count - 1)
    points = [origin]
    for _ in range(sample_count - 1):
        points.append(destination(points[-1], heading, spacing))
    return Course(points)


def build_out_and_back_course(
    out_length: float = DEFAULT_OUT_AND_BACK_LENGTH,
    offset: float = DEFAULT_OUT_AND_BACK_OFFSET,
    origin: LatLon = DEFAULT_ORIGIN,
) -> Course:
    """Build a course that runs east, steps south, and returns west in parallel.

    Args:
        out_length: Length of the outbound and return legs [m].
        offset: Perpendicular gap between the legs [m].
        origin: Start point ``(lat, lon)`` [deg].

    Returns:
        Out-and-back course whose width equals ``offset`` where legs overlap.
    """
    _validate_positive("out_length", out_length)
    _validate_positive("offset", offset)

    turn = destination(origin, EAST, out_length)
    step = destination(turn, SOUTH, offset)
    finish = destination(step, WEST, out_length)
    return Course([origin, turn, step, finish])


def build_zigzag_course(
    step_count: int = DEFAULT_ZIGZAG_STEP_COUNT,
    step_offset: float = DEFAULT_ZIGZAG_STEP_OFFSET,
    leg_length: float = DEFAULT_ZIGZAG_LEG_LENGTH,
    origin: LatLon = DEFAULT_ORIGIN,
) -> Course:
    """Build a staircase course with a single straight return leg.

    Each stair steps ``step_offset`` south and runs ``leg_length`` east, so
    the ``k``-th eastbound leg lies ``k * step_offset`` from the return leg,
    which runs west along the origin latitude.

    Args:
        step_count: Number of stairs.
        step_offset: Southward step per stair [m].
        leg_length: Eastward leg length per stair [m].
        origin: Start point ``(lat, lon)`` [deg].

    Returns:
        Staircase course whose inferred width grows stair by stair.

    Raises:
        coursesim.utils.exceptions.ConfigurationError: If a parameter is not
            positive.
    """
    if step_count < 1:
        msg = "step_count must be at least 1"
        raise ConfigurationError(msg)
    _validate_positive("step_offset", step_offset)
    _validate_positive("leg_length", leg_length)

    points = [origin]
    for _ in range(step_count):
        points.append(destination(points[-1], SOUTH, step_offset))
        points.append(destination(points[-1], EAST, leg_length))
    corner = (origin[0], points[-1][1])
    points.append(corner)
    points.append(destination(corner, WEST, step_count * leg_length))
    return Course(points)


def build_rectangular_loop(
    width: float = DEFAULT_LOOP_WIDTH,
    height: float = DEFAULT_LOOP_HEIGHT,
    laps: int = 1,
    origin: LatLon = DEFAULT_ORIGIN,
    lap_detection_params: LapDetectionParams | None = None,
) -> Course:
    """Build an anticlockwise rectangular loop that starts mid-way along its base.

    The course leaves ``origin`` heading east and every lap ends back at
    ``origin`` heading east, so each return to the start matches the start
    heading.

    Args:
        width: East-west extent of the rectangle [m].
        height: North-south extent of the rectangle [m].
        laps: Number of times the rectangle is traversed.
        origin: Start point on the base of the rectangle ``(lat, lon)`` [deg].
        lap_detection_params: Optional lap-detection settings.

    Returns:
        Closed-loop course.

    Raises:
        coursesim.utils.exceptions.ConfigurationError: If a parameter is not
            positive.
    """
    _validate_positive("width", width)
    _validate_positive("height", height)
    if laps < 1:
        msg = "laps must be at least 1"
        raise ConfigurationError(msg)

    base_right = destination(origin, EAST, 0.5 * width)
    top_right = destination(base_right, NORTH, height)
    top_left = destination(top_right, WEST, width)
    base_left = destination(top_left, SOUTH, height)
    lap = [base_right, top_right, top_left, base_left, origin]

    points = [origin]
    for _ in range(laps):
        points.extend(lap)
    return Course(points, lap_detection_params=lap_detection_params)
