"""Width-inference checks on canonical synthetic courses."""

from __future__ import annotations

import unittest

from coursesim.track import build_out_and_back_course, build_straight_course, build_zigzag_course
from coursesim.utils.constants import DEFAULT_WIDTH
from coursesim.utils.exceptions import OutOfBoundsError


class WidthScenarioTests(unittest.TestCase):
    """Validate inferred widths against known parallel-leg spacings."""

    def test_straight_course_uses_default_width(self) -> None:
        """Fall back to the default width without any returning leg."""
        course = build_straight_course(length=500.0)
        for target in (0.0, 100.0, 250.0, 500.0):
            with self.subTest(distance=target):
                self.assertEqual(course.get_width_at(target), DEFAULT_WIDTH)
        with self.assertRaises(OutOfBoundsError):
            course.get_width_at(501.0)

    def test_out_and_back_width_equals_leg_spacing(self) -> None:
        """Infer the gap to the opposite leg on both legs."""
        course = build_out_and_back_course(out_length=250.0, offset=1.0)
        for target in (0.0, 125.0, 350.0):
            with self.subTest(distance=target):
                self.assertEqual(course.get_width_at(target), 1.0)

    def test_wider_leg_spacing_is_rounded_to_the_metre(self) -> None:
        """Round inferred widths to whole metres."""
        course = build_out_and_back_course(out_length=250.0, offset=2.6)
        self.assertEqual(course.get_width_at(100.0), 3.0)

    def test_leg_spacing_beyond_maximum_uses_default(self) -> None:
        """Ignore return legs further away than the maximum width."""
        course = build_out_and_back_course(out_length=250.0, offset=6.0)
        self.assertEqual(course.get_width_at(100.0), DEFAULT_WIDTH)

    def test_zigzag_width_grows_stair_by_stair(self) -> None:
        """Widen by one metre per stair until the maximum is exceeded."""
        course = build_zigzag_course(step_count=5, step_offset=1.0, leg_length=100.0)
        expected = {50.0: 1.0, 150.0: 2.0, 250.0: 3.0, 350.0: 4.0, 450.0: DEFAULT_WIDTH}
        for target, width in expected.items():
            with self.subTest(distance=target):
                self.assertEqual(course.get_width_at(target), width)

    def test_width_info_finds_narrowest_stair(self) -> None:
        """Locate the narrowest sample on the first stair."""
        course = build_zigzag_course(step_count=5, step_offset=1.0, leg_length=100.0)
        info = course.get_course_width_info()

        self.assertEqual(info.narrowest_width, 1.0)
        self.assertLess(info.narrowest_distance, 101.0)
        self.assertEqual(info.widest_width, 4.0)


if __name__ == "__main__":
    unittest.main()
