"""Custom exceptions for course geometry and race simulation."""


class CourseSimError(Exception):
    """Base exception for course and simulation errors."""


class ConfigurationError(CourseSimError):
    """Raised when simulation or detection configuration is invalid."""


class CourseDataError(CourseSimError):
    """Base exception for invalid course geometry or course queries."""


class InvalidCourseError(CourseDataError, ValueError):
    """Raised when fewer than two distinct course points remain."""


class InvalidPointError(CourseDataError, ValueError):
    """Raised when a point is malformed or outside valid coordinate ranges."""


class OutOfBoundsError(CourseDataError, IndexError):
    """Raised when a strict distance query falls outside the course."""


class InvalidIndexError(CourseDataError, IndexError):
    """Raised when a point or segment index is outside the valid range."""
