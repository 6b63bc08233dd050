"""Unit tests for coordinate validation."""

from __future__ import annotations

import math
import unittest

import numpy as np

from coursesim.track.coordinates import (
    remove_consecutive_duplicates,
    validate_latitude,
    validate_longitude,
    validate_point,
)
from coursesim.utils.exceptions import CourseDataError, InvalidPointError


class CoordinateValidationTests(unittest.TestCase):
    """Validate latitude, longitude and point checks."""

    def test_accepts_range_limits(self) -> None:
        """Accept the inclusive limits of both coordinate ranges."""
        self.assertEqual(validate_latitude(-90), -90.0)
        self.assertEqual(validate_latitude(90.0), 90.0)
        self.assertEqual(validate_longitude(-180.0), -180.0)
        self.assertEqual(validate_longitude(180), 180.0)

    def test_rejects_out_of_range_values(self) -> None:
        """Reject coordinates just outside the valid ranges."""
        with self.assertRaises(InvalidPointError):
            validate_latitude(90.0001)
        with self.assertRaises(InvalidPointError):
            validate_longitude(-180.5)

    def test_rejects_non_numeric_and_non_finite_values(self) -> None:
        """Reject strings, booleans, NaN and infinity."""
        for value in ("north", True, math.nan, math.inf, None):
            with self.subTest(value=value), self.assertRaises(InvalidPointError):
                validate_latitude(value)

    def test_point_validation_normalizes_sequences_and_arrays(self) -> None:
        """Accept lists, tuples and numpy rows as points."""
        self.assertEqual(validate_point([1, 2]), (1.0, 2.0))
        self.assertEqual(validate_point((1.5, -2.5)), (1.5, -2.5))
        self.assertEqual(validate_point(np.array([3.0, 4.0])), (3.0, 4.0))

    def test_point_validation_rejects_wrong_shapes(self) -> None:
        """Reject scalars, strings and sequences of the wrong length."""
        for value in (1.0, "1,2", (1.0,), (1.0, 2.0, 3.0)):
            with self.subTest(value=value), self.assertRaises(InvalidPointError):
                validate_point(value)

    def test_invalid_point_error_is_a_value_error(self) -> None:
        """Let callers catch invalid points as ``ValueError``."""
        with self.assertRaises(ValueError):
            validate_point((100.0, 0.0))
        with self.assertRaises(CourseDataError):
            validate_point((0.0, 200.0))

    def test_remove_consecutive_duplicates_keeps_later_repeats(self) -> None:
        """Drop only exact repeats of the preceding point."""
        points = [(0.0, 0.0), (0.0, 0.0), (1.0, 1.0), (0.0, 0.0), (0.0, 0.0)]
        self.assertEqual(
            remove_consecutive_duplicates(points),
            [(0.0, 0.0), (1.0, 1.0), (0.0, 0.0)],
        )


if __name__ == "__main__":
    unittest.main()
