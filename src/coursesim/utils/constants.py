"""Geometric constants used across the library."""

EARTH_RADIUS: float = 6_371_000.0
DEFAULT_WIDTH: float = 2.0
MAX_WIDTH: float = 4.0
WIDTH_PRECISION_ALLOWANCE: float = 1.01
WIDTH_SAMPLE_INTERVAL: float = 10.0
PARALLEL_SEARCH_RADIUS: float = 1_000.0
PARALLEL_BEARING_TOLERANCE: float = 20.0
DISTANCE_TOLERANCE: float = 1e-6
SMALL_EPS: float = 1e-12
