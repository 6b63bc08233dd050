"""Spherical geodesy helpers operating on ``(latitude, longitude)`` degrees."""

from __future__ import annotations

import math

import numpy as np
import numpy.typing as npt

from coursesim.utils.constants import EARTH_RADIUS, SMALL_EPS

FloatArray = npt.NDArray[np.float64]
LatLon = tuple[float, float]

FULL_CIRCLE_DEG = 360.0
HALF_CIRCLE_DEG = 180.0


def _normalize_bearing(bearing_deg: float) -> float:
    """Wrap a bearing into ``[0, 360)``.

    Args:
        bearing_deg: Bearing angle in degrees, any range.

    Returns:
        Equivalent bearing in ``[0, 360)``.
    """
    wrapped = bearing_deg % FULL_CIRCLE_DEG
    if wrapped >= FULL_CIRCLE_DEG:
        # Float modulo can round a tiny negative input up to exactly 360.
        wrapped -= FULL_CIRCLE_DEG
    return wrapped


def _normalize_longitude(lon_deg: float) -> float:
    """Wrap a longitude into ``[-180, 180]``.

    Args:
        lon_deg: Longitude in degrees, any range.

    Returns:
        Equivalent longitude in ``[-180, 180]``.
    """
    if -HALF_CIRCLE_DEG <= lon_deg <= HALF_CIRCLE_DEG:
        return lon_deg
    return (lon_deg + HALF_CIRCLE_DEG) % FULL_CIRCLE_DEG - HALF_CIRCLE_DEG


def distance(a: LatLon, b: LatLon) -> float:
    """Compute the great-circle (haversine) distance between two points.

    Args:
        a: First point ``(lat, lon)`` [deg].
        b: Second point ``(lat, lon)`` [deg].

    Returns:
        Distance along the sphere surface [m].
    """
    phi1 = math.radians(a[0])
    phi2 = math.radians(b[0])
    delta_phi = phi2 - phi1
    delta_lambda = math.radians(b[1] - a[1])

    h = (
        math.sin(delta_phi / 2.0) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2.0) ** 2
    )
    return 2.0 * EARTH_RADIUS * math.atan2(math.sqrt(h), math.sqrt(max(0.0, 1.0 - h)))


def bearing(a: LatLon, b: LatLon) -> float:
    """Compute the initial great-circle bearing from ``a`` towards ``b``.

    Args:
        a: Start point ``(lat, lon)`` [deg].
        b: End point ``(lat, lon)`` [deg].

    Returns:
        Initial bearing in ``[0, 360)`` [deg], clockwise from north.
    """
    phi1 = math.radians(a[0])
    phi2 = math.radians(b[0])
    delta_lambda = math.radians(b[1] - a[1])

    y = math.sin(delta_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(delta_lambda)
    return _normalize_bearing(math.degrees(math.atan2(y, x)))


def destination(a: LatLon, bearing_deg: float, distance_m: float) -> LatLon:
    """Project a point a given distance along an initial bearing.

    Args:
        a: Start point ``(lat, lon)`` [deg].
        bearing_deg: Initial bearing [deg].
        distance_m: Distance travelled along the great circle [m].

    Returns:
        Destination point ``(lat, lon)`` [deg].
    """
    delta = distance_m / EARTH_RADIUS
    theta = math.radians(bearing_deg)
    phi1 = math.radians(a[0])
    lambda1 = math.radians(a[1])

    sin_phi2 = math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(theta)
    phi2 = math.asin(max(-1.0, min(1.0, sin_phi2)))
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * sin_phi2,
    )
    return (math.degrees(phi2), _normalize_longitude(math.degrees(lambda2)))


def interpolate(a: LatLon, b: LatLon, fraction: float) -> LatLon:
    """Return the great-circle intermediate point at ``fraction`` from ``a`` to ``b``.

    Args:
        a: Start point ``(lat, lon)`` [deg].
        b: End point ``(lat, lon)`` [deg].
        fraction: Fraction of the way from ``a`` to ``b``; ``0`` returns
            ``a`` and ``1`` returns ``b`` exactly.

    Returns:
        Interpolated point ``(lat, lon)`` [deg].
    """
    if fraction <= 0.0:
        return (float(a[0]), float(a[1]))
    if fraction >= 1.0:
        return (float(b[0]), float(b[1]))

    delta = distance(a, b) / EARTH_RADIUS
    if delta < SMALL_EPS:
        return (
            a[0] + fraction * (b[0] - a[0]),
            a[1] + fraction * (b[1] - a[1]),
        )

    phi1, lambda1 = math.radians(a[0]), math.radians(a[1])
    phi2, lambda2 = math.radians(b[0]), math.radians(b[1])
    weight_a = math.sin((1.0 - fraction) * delta) / math.sin(delta)
    weight_b = math.sin(fraction * delta) / math.sin(delta)

    x = weight_a * math.cos(phi1) * math.cos(lambda1) + weight_b * math.cos(phi2) * math.cos(lambda2)
    y = weight_a * math.cos(phi1) * math.sin(lambda1) + weight_b * math.cos(phi2) * math.sin(lambda2)
    z = weight_a * math.sin(phi1) + weight_b * math.sin(phi2)
    return (
        math.degrees(math.atan2(z, math.hypot(x, y))),
        math.degrees(math.atan2(y, x)),
    )


def angular_difference(a_deg: float, b_deg: float) -> float:
    """Compute the smallest absolute difference between two bearings.

    Args:
        a_deg: First bearing [deg].
        b_deg: Second bearing [deg].

    Returns:
        Difference in ``[0, 180]`` [deg], respecting wraparound at 0/360.
    """
    diff = abs(a_deg - b_deg) % FULL_CIRCLE_DEG
    return min(diff, FULL_CIRCLE_DEG - diff)


def nearest_point_on_segment(p: LatLon, start: LatLon, end: LatLon) -> tuple[LatLon, float]:
    """Project a point onto a finite segment.

    The projection uses a local equirectangular plane centred on ``p``; this
    is accurate for segments shorter than roughly one kilometre.

    Args:
        p: Point to project ``(lat, lon)`` [deg].
        start: Segment start ``(lat, lon)`` [deg].
        end: Segment end ``(lat, lon)`` [deg].

    Returns:
        Tuple ``(closest_point, distance)`` with the closest point on the
        segment and its great-circle distance from ``p`` [m].
    """
    scale = math.cos(math.radians(p[0]))
    dx = (end[1] - start[1]) * scale
    dy = end[0] - start[0]
    length_sq = dx * dx + dy * dy
    if length_sq == 0.0:
        closest = (float(start[0]), float(start[1]))
        return closest, distance(p, closest)

    t = ((p[1] - start[1]) * scale * dx + (p[0] - start[0]) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    closest = (
        start[0] + t * (end[0] - start[0]),
        start[1] + t * (end[1] - start[1]),
    )
    return closest, distance(p, closest)


def distances(
    lat1: FloatArray,
    lon1: FloatArray,
    lat2: FloatArray,
    lon2: FloatArray,
) -> FloatArray:
    """Vectorised haversine distance.

    Args:
        lat1: Start latitudes [deg].
        lon1: Start longitudes [deg].
        lat2: End latitudes [deg].
        lon2: End longitudes [deg].

    Returns:
        Element-wise great-circle distances [m].
    """
    phi1 = np.radians(lat1)
    phi2 = np.radians(lat2)
    delta_phi = phi2 - phi1
    delta_lambda = np.radians(np.asarray(lon2) - np.asarray(lon1))
    h = np.sin(delta_phi / 2.0) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(delta_lambda / 2.0) ** 2
    h = np.clip(h, 0.0, 1.0)
    return np.asarray(2.0 * EARTH_RADIUS * np.arctan2(np.sqrt(h), np.sqrt(1.0 - h)), dtype=np.float64)


def bearings(
    lat1: FloatArray,
    lon1: FloatArray,
    lat2: FloatArray,
    lon2: FloatArray,
) -> FloatArray:
    """Vectorised initial bearing.

    Args:
        lat1: Start latitudes [deg].
        lon1: Start longitudes [deg].
        lat2: End latitudes [deg].
        lon2: End longitudes [deg].

    Returns:
        Element-wise initial bearings in ``[0, 360)`` [deg].
    """
    phi1 = np.radians(lat1)
    phi2 = np.radians(lat2)
    delta_lambda = np.radians(np.asarray(lon2) - np.asarray(lon1))
    y = np.sin(delta_lambda) * np.cos(phi2)
    x = np.cos(phi1) * np.sin(phi2) - np.sin(phi1) * np.cos(phi2) * np.cos(delta_lambda)
    wrapped = np.mod(np.degrees(np.arctan2(y, x)), FULL_CIRCLE_DEG)
    wrapped = np.where(wrapped >= FULL_CIRCLE_DEG, wrapped - FULL_CIRCLE_DEG, wrapped)
    return np.asarray(wrapped, dtype=np.float64)


def project_onto_segments(
    p: LatLon,
    starts: FloatArray,
    ends: FloatArray,
) -> tuple[FloatArray, FloatArray]:
    """Vectorised :func:`nearest_point_on_segment` over many segments.

    Args:
        p: Point to project ``(lat, lon)`` [deg].
        starts: Segment start points, shape ``(n, 2)`` [deg].
        ends: Segment end points, shape ``(n, 2)`` [deg].

    Returns:
        Tuple ``(closest, distance)`` with closest points of shape ``(n, 2)``
        [deg] and their distances from ``p`` of shape ``(n,)`` [m].
    """
    scale = math.cos(math.radians(p[0]))
    dlat = ends[:, 0] - starts[:, 0]
    dlon = ends[:, 1] - starts[:, 1]
    dx = dlon * scale
    dy = dlat
    length_sq = dx * dx + dy * dy

    numerator = (p[1] - starts[:, 1]) * scale * dx + (p[0] - starts[:, 0]) * dy
    safe_length_sq = np.where(length_sq > 0.0, length_sq, 1.0)
    t = np.where(length_sq > 0.0, numerator / safe_length_sq, 0.0)
    t = np.clip(t, 0.0, 1.0)

    closest = np.column_stack((starts[:, 0] + t * dlat, starts[:, 1] + t * dlon))
    dist = distances(
        np.full(closest.shape[0], p[0], dtype=np.float64),
        np.full(closest.shape[0], p[1], dtype=np.float64),
        closest[:, 0],
        closest[:, 1],
    )
    return np.asarray(closest, dtype=np.float64), dist
