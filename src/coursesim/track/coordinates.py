"""Validating constructors for geographic coordinates."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

import numpy as np

from coursesim.track.geodesy import LatLon
from coursesim.utils.exceptions import InvalidPointError

MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0


def _as_finite_float(name: str, value: object) -> float:
    """Convert a coordinate component to a finite float.

    Args:
        name: Component name used in error messages.
        value: Raw component value.

    Returns:
        Component as ``float``.

    Raises:
        coursesim.utils.exceptions.InvalidPointError: If ``value`` is not a
            finite real number.
    """
    if isinstance(value, bool):
        msg = f"Invalid {name}: must be a number, got {value!r}"
        raise InvalidPointError(msg)
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        msg = f"Invalid {name}: must be a number, got {value!r}"
        raise InvalidPointError(msg) from exc
    if not math.isfinite(number):
        msg = f"Invalid {name}: must be finite, got {value!r}"
        raise InvalidPointError(msg)
    return number


def validate_latitude(value: object) -> float:
    """Validate a latitude value.

    Args:
        value: Candidate latitude [deg].

    Returns:
        Latitude as ``float`` [deg].

    Raises:
        coursesim.utils.exceptions.InvalidPointError: If the value is not a
            number or lies outside ``[-90, 90]``.
    """
    latitude = _as_finite_float("latitude", value)
    if not MIN_LATITUDE <= latitude <= MAX_LATITUDE:
        msg = f"Invalid latitude: must be between -90 and 90 degrees, got {latitude}"
        raise InvalidPointError(msg)
    return latitude


def validate_longitude(value: object) -> float:
    """Validate a longitude value.

    Args:
        value: Candidate longitude [deg].

    Returns:
        Longitude as ``float`` [deg].

    Raises:
        coursesim.utils.exceptions.InvalidPointError: If the value is not a
            number or lies outside ``[-180, 180]``.
    """
    longitude = _as_finite_float("longitude", value)
    if not MIN_LONGITUDE <= longitude <= MAX_LONGITUDE:
        msg = f"Invalid longitude: must be between -180 and 180 degrees, got {longitude}"
        raise InvalidPointError(msg)
    return longitude


def validate_point(point: object) -> LatLon:
    """Validate a ``(latitude, longitude)`` pair.

    Args:
        point: Candidate two-element sequence ``(lat, lon)`` [deg].

    Returns:
        Normalized ``(lat, lon)`` float tuple.

    Raises:
        coursesim.utils.exceptions.InvalidPointError: If the point does not
            have exactly two numeric components in valid ranges.
    """
    if isinstance(point, (str, bytes)) or not isinstance(point, (Sequence, np.ndarray)):
        msg = f"Invalid point: expected a (latitude, longitude) pair, got {point!r}"
        raise InvalidPointError(msg)
    if len(point) != 2:
        msg = f"Invalid point: expected 2 components, got {len(point)}"
        raise InvalidPointError(msg)
    return (validate_latitude(point[0]), validate_longitude(point[1]))


def validate_points(points: Iterable[object]) -> list[LatLon]:
    """Validate every point of a sequence.

    Args:
        points: Iterable of candidate ``(lat, lon)`` pairs.

    Returns:
        List of normalized ``(lat, lon)`` tuples.
    """
    return [validate_point(point) for point in points]


def remove_consecutive_duplicates(points: Sequence[LatLon]) -> list[LatLon]:
    """Drop points that exactly repeat their predecessor.

    Args:
        points: Ordered ``(lat, lon)`` points.

    Returns:
        New list without consecutive exact duplicates.
    """
    result: list[LatLon] = []
    for point in points:
        if not result or result[-1] != point:
            result.append(point)
    return result
