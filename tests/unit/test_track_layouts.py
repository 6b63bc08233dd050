"""Unit tests for synthetic course-layout builders."""

from __future__ import annotations

import unittest

from coursesim.track import (
    build_out_and_back_course,
    build_rectangular_loop,
    build_straight_course,
    build_zigzag_course,
)
from coursesim.track.geodesy import distance
from coursesim.track.layouts import NORTH
from coursesim.utils.exceptions import ConfigurationError


class CourseLayoutBuilderTests(unittest.TestCase):
    """Validate geometry properties of synthetic course-layout helpers."""

    def test_straight_layout_has_expected_length_and_heading(self) -> None:
        """Build a straight course with evenly spaced samples."""
        course = build_straight_course(length=1_000.0, heading=NORTH, sample_count=11)

        self.assertAlmostEqual(course.length, 1_000.0, delta=1e-6)
        self.assertEqual(len(course.points), 11)
        self.assertAlmostEqual(course.get_bearing_at_distance(500.0), 0.0, delta=1e-6)
        self.assertAlmostEqual(
            distance(course.points[0], course.points[1]), 100.0, delta=1e-6
        )

    def test_out_and_back_layout_returns_beside_the_start(self) -> None:
        """Finish one offset away from the start after two equal legs."""
        course = build_out_and_back_course(out_length=300.0, offset=2.0)

        self.assertAlmostEqual(course.length, 602.0, delta=1e-6)
        self.assertAlmostEqual(distance(course.start_point, course.finish_point), 2.0, delta=1e-6)
        self.assertEqual(course.segment_count, 3)

    def test_zigzag_layout_has_one_return_leg(self) -> None:
        """Build stairs followed by a corner and a single return leg."""
        course = build_zigzag_course(step_count=3, step_offset=1.0, leg_length=50.0)

        self.assertEqual(course.segment_count, 2 * 3 + 2)
        self.assertAlmostEqual(course.length, 3 * 51.0 + 3.0 + 150.0, delta=1e-6)
        self.assertAlmostEqual(course.get_bearing_at_distance(course.length - 1.0), 270.0, delta=1e-6)

    def test_rectangular_loop_returns_to_start(self) -> None:
        """Close every lap at the origin."""
        course = build_rectangular_loop(width=200.0, height=100.0, laps=3)

        self.assertAlmostEqual(course.length, 1_800.0, delta=1e-6)
        self.assertLess(distance(course.start_point, course.finish_point), 1e-6)
        self.assertEqual(course.get_lap_count(), 4)

    def test_layout_builders_reject_invalid_parameters(self) -> None:
        """Reject non-physical geometric parameters for layout generation."""
        with self.assertRaises(ConfigurationError):
            build_straight_course(length=0.0)
        with self.assertRaises(ConfigurationError):
            build_straight_course(sample_count=1)
        with self.assertRaises(ConfigurationError):
            build_out_and_back_course(offset=-1.0)
        with self.assertRaises(ConfigurationError):
            build_zigzag_course(step_count=0)
        with self.assertRaises(ConfigurationError):
            build_rectangular_loop(laps=0)


if __name__ == "__main__":
    unittest.main()
