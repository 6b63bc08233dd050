"""Utility helpers."""

from coursesim.utils.constants import DEFAULT_WIDTH, EARTH_RADIUS, MAX_WIDTH
from coursesim.utils.logging import configure_logging

__all__ = ["DEFAULT_WIDTH", "EARTH_RADIUS", "MAX_WIDTH", "configure_logging"]
