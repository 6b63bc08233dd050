"""Unit tests for spherical geodesy helpers."""

from __future__ import annotations

import math
import unittest

import numpy as np

from coursesim.track.geodesy import (
    angular_difference,
    bearing,
    bearings,
    destination,
    distance,
    distances,
    interpolate,
    nearest_point_on_segment,
    project_onto_segments,
)
from coursesim.utils.constants import EARTH_RADIUS

ONE_DEGREE_ARC = EARTH_RADIUS * math.pi / 180.0


class DistanceAndBearingTests(unittest.TestCase):
    """Validate haversine distance and initial bearing."""

    def test_distance_of_one_equatorial_degree(self) -> None:
        """Match the arc length of one degree along the equator."""
        self.assertAlmostEqual(distance((0.0, 0.0), (0.0, 1.0)), ONE_DEGREE_ARC, delta=1e-6)
        self.assertAlmostEqual(distance((0.0, 0.0), (1.0, 0.0)), ONE_DEGREE_ARC, delta=1e-6)

    def test_distance_is_symmetric_and_zero_for_identical_points(self) -> None:
        """Return symmetric distances and zero for coincident points."""
        a = (51.5, -0.12)
        b = (48.85, 2.35)
        self.assertAlmostEqual(distance(a, b), distance(b, a), delta=1e-9)
        self.assertEqual(distance(a, a), 0.0)

    def test_bearing_cardinal_directions(self) -> None:
        """Report cardinal bearings from the origin."""
        origin = (0.0, 0.0)
        self.assertAlmostEqual(bearing(origin, (1.0, 0.0)), 0.0, delta=1e-9)
        self.assertAlmostEqual(bearing(origin, (0.0, 1.0)), 90.0, delta=1e-9)
        self.assertAlmostEqual(bearing(origin, (-1.0, 0.0)), 180.0, delta=1e-9)
        self.assertAlmostEqual(bearing(origin, (0.0, -1.0)), 270.0, delta=1e-9)

    def test_bearing_stays_in_half_open_range(self) -> None:
        """Keep bearings inside ``[0, 360)`` for nearly-north headings."""
        value = bearing((0.0, 0.0), (1.0, -1e-15))
        self.assertGreaterEqual(value, 0.0)
        self.assertLess(value, 360.0)

    def test_vectorised_helpers_match_scalar_versions(self) -> None:
        """Agree element-wise with the scalar distance and bearing."""
        lat1 = np.array([0.0, 10.0, -33.9])
        lon1 = np.array([0.0, 20.0, 151.2])
        lat2 = np.array([0.5, 10.1, -33.8])
        lon2 = np.array([0.5, 19.9, 151.3])

        dist = distances(lat1, lon1, lat2, lon2)
        bear = bearings(lat1, lon1, lat2, lon2)
        for idx in range(3):
            a = (float(lat1[idx]), float(lon1[idx]))
            b = (float(lat2[idx]), float(lon2[idx]))
            self.assertAlmostEqual(float(dist[idx]), distance(a, b), delta=1e-6)
            self.assertAlmostEqual(float(bear[idx]), bearing(a, b), delta=1e-9)


class DestinationAndInterpolationTests(unittest.TestCase):
    """Validate forward geodesic and great-circle interpolation."""

    def test_destination_travels_requested_distance(self) -> None:
        """Land one equatorial degree east after one degree of arc."""
        lat, lon = destination((0.0, 0.0), 90.0, ONE_DEGREE_ARC)
        self.assertAlmostEqual(lat, 0.0, delta=1e-9)
        self.assertAlmostEqual(lon, 1.0, delta=1e-9)

    def test_destination_is_consistent_with_distance_and_bearing(self) -> None:
        """Recover distance and bearing from a computed destination."""
        start = (47.3, 8.5)
        end = destination(start, 37.0, 1_250.0)
        self.assertAlmostEqual(distance(start, end), 1_250.0, delta=1e-6)
        self.assertAlmostEqual(bearing(start, end), 37.0, delta=1e-6)

    def test_destination_normalizes_longitude(self) -> None:
        """Wrap longitudes past the antimeridian back into range."""
        _, lon = destination((0.0, 179.9995), 90.0, 200.0)
        self.assertGreaterEqual(lon, -180.0)
        self.assertLess(lon, -179.99)

    def test_interpolate_returns_exact_endpoints(self) -> None:
        """Return the exact endpoints for fractions zero and one."""
        a = (12.345678, 98.765432)
        b = (12.346, 98.766)
        self.assertEqual(interpolate(a, b, 0.0), a)
        self.assertEqual(interpolate(a, b, 1.0), b)

    def test_interpolate_midpoint_on_equator(self) -> None:
        """Place the midpoint halfway along an equatorial arc."""
        lat, lon = interpolate((0.0, 0.0), (0.0, 2.0), 0.5)
        self.assertAlmostEqual(lat, 0.0, delta=1e-12)
        self.assertAlmostEqual(lon, 1.0, delta=1e-12)

    def test_interpolate_handles_coincident_points(self) -> None:
        """Return the shared point when both ends coincide."""
        point = (1.0, 1.0)
        self.assertEqual(interpolate(point, point, 0.3), point)

    def test_angular_difference_wraps_around_north(self) -> None:
        """Measure the short way around the compass."""
        self.assertAlmostEqual(angular_difference(350.0, 10.0), 20.0)
        self.assertAlmostEqual(angular_difference(90.0, 270.0), 180.0)
        self.assertAlmostEqual(angular_difference(45.0, 45.0), 0.0)


class SegmentProjectionTests(unittest.TestCase):
    """Validate point-to-segment projection."""

    def test_projection_onto_segment_interior(self) -> None:
        """Drop a perpendicular onto an east-west segment."""
        start = (0.0, 0.0)
        end = destination(start, 90.0, 100.0)
        query_point = destination(destination(start, 90.0, 40.0), 0.0, 3.0)

        closest, gap = nearest_point_on_segment(query_point, start, end)
        self.assertAlmostEqual(gap, 3.0, delta=1e-3)
        self.assertAlmostEqual(distance(start, closest), 40.0, delta=1e-3)

    def test_projection_clamps_to_segment_end(self) -> None:
        """Clamp projections beyond the segment to its endpoint."""
        start = (0.0, 0.0)
        end = destination(start, 90.0, 100.0)
        query_point = destination(start, 90.0, 130.0)

        closest, gap = nearest_point_on_segment(query_point, start, end)
        self.assertAlmostEqual(gap, 30.0, delta=1e-3)
        self.assertAlmostEqual(closest[1], end[1], delta=1e-12)

    def test_degenerate_segment_projects_onto_start(self) -> None:
        """Treat a zero-length segment as its start point."""
        start = (0.0, 0.0)
        query_point = destination(start, 0.0, 5.0)
        closest, gap = nearest_point_on_segment(query_point, start, start)
        self.assertEqual(closest, start)
        self.assertAlmostEqual(gap, 5.0, delta=1e-6)

    def test_vectorised_projection_matches_scalar_projection(self) -> None:
        """Agree with the scalar projection for several segments at once."""
        origin = (10.0, 10.0)
        points = [origin]
        for heading in (90.0, 0.0, 270.0):
            points.append(destination(points[-1], heading, 50.0))
        coords = np.asarray(points)
        query_point = destination(destination(origin, 90.0, 25.0), 0.0, 10.0)

        closest, gaps = project_onto_segments(query_point, coords[:-1], coords[1:])
        self.assertEqual(closest.shape, (3, 2))
        for idx in range(3):
            expected_point, expected_gap = nearest_point_on_segment(query_point, points[idx], points[idx + 1])
            self.assertAlmostEqual(float(gaps[idx]), expected_gap, delta=1e-9)
            self.assertAlmostEqual(float(closest[idx, 0]), expected_point[0], delta=1e-12)
            self.assertAlmostEqual(float(closest[idx, 1]), expected_point[1], delta=1e-12)


if __name__ == "__main__":
    unittest.main()
