"""Course geometry, width inference, lap detection and synthetic layouts."""

from coursesim.track.laps import LapDetectionParams
from coursesim.track.layouts import (
    build_out_and_back_course,
    build_rectangular_loop,
    build_straight_course,
    build_zigzag_course,
)
from coursesim.track.models import Course, CourseWidthInfo

__all__ = [
    "Course",
    "CourseWidthInfo",
    "LapDetectionParams",
    "build_out_and_back_course",
    "build_rectangular_loop",
    "build_straight_course",
    "build_zigzag_course",
]
