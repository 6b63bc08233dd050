"""Course geometry model with width inference and lap structure."""

from __future__ import annotations

import bisect
import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

import numpy as np

from coursesim.track.coordinates import (
    remove_consecutive_duplicates,
    validate_point,
    validate_points,
)
from coursesim.track.geodesy import (
    FloatArray,
    LatLon,
    bearings,
    distance,
    distances,
    interpolate,
    project_onto_segments,
)
from coursesim.track.laps import LapDetectionParams, compute_lap_crossings
from coursesim.utils.constants import (
    DEFAULT_WIDTH,
    DISTANCE_TOLERANCE,
    MAX_WIDTH,
    PARALLEL_BEARING_TOLERANCE,
    PARALLEL_SEARCH_RADIUS,
    WIDTH_PRECISION_ALLOWANCE,
    WIDTH_SAMPLE_INTERVAL,
)
from coursesim.utils.exceptions import (
    ConfigurationError,
    InvalidCourseError,
    InvalidIndexError,
    OutOfBoundsError,
)

MIN_COURSE_POINT_COUNT = 2
SEGMENT_CACHE_LIMIT = 4_096

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CourseWidthInfo:
    """Narrowest and widest sampled course widths.

    Args:
        narrowest_width: Smallest sampled width [m].
        narrowest_distance: Course distance of the narrowest sample [m].
        narrowest_point: Position ``(lat, lon)`` of the narrowest sample [deg].
        widest_width: Largest sampled width [m].
        widest_distance: Course distance of the widest sample [m].
        widest_point: Position ``(lat, lon)`` of the widest sample [deg].
    """

    narrowest_width: float
    narrowest_distance: float
    narrowest_point: LatLon
    widest_width: float
    widest_distance: float
    widest_point: LatLon


@dataclass(frozen=True)
class _CourseGeometry:
    """Arc-length geometry derived from one point sequence."""

    coords: FloatArray
    segment_lengths: FloatArray
    segment_bearings: FloatArray
    cumulative: FloatArray

    @property
    def length(self) -> float:
        """Total path length [m].

        Returns:
            Final cumulative distance [m].
        """
        return float(self.cumulative[-1])


def _build_geometry(points: Sequence[LatLon]) -> _CourseGeometry:
    """Derive segment lengths, bearings and cumulative distances.

    Args:
        points: Validated, de-duplicated course points.

    Returns:
        Geometry arrays for the point sequence.

    Raises:
        coursesim.utils.exceptions.InvalidCourseError: If the points span no
            measurable length.
    """
    coords = np.asarray(points, dtype=np.float64)
    starts = coords[:-1]
    ends = coords[1:]
    segment_lengths = distances(starts[:, 0], starts[:, 1], ends[:, 0], ends[:, 1])
    cumulative = np.zeros(coords.shape[0], dtype=np.float64)
    cumulative[1:] = np.cumsum(segment_lengths)
    if cumulative[-1] <= 0.0:
        msg = "A course must span a positive length"
        raise InvalidCourseError(msg)

    return _CourseGeometry(
        coords=coords,
        segment_lengths=segment_lengths,
        segment_bearings=bearings(starts[:, 0], starts[:, 1], ends[:, 0], ends[:, 1]),
        cumulative=cumulative,
    )


def _prepare_points(points: Iterable[object]) -> list[LatLon]:
    """Validate and de-duplicate a raw point sequence.

    Args:
        points: Raw ``(lat, lon)`` pairs.

    Returns:
        Validated points without consecutive duplicates.

    Raises:
        coursesim.utils.exceptions.InvalidPointError: If any point is
            malformed or out of range.
        coursesim.utils.exceptions.InvalidCourseError: If fewer than two
            distinct points remain.
    """
    prepared = remove_consecutive_duplicates(validate_points(points))
    if len(prepared) < MIN_COURSE_POINT_COUNT:
        msg = f"A course must have at least {MIN_COURSE_POINT_COUNT} distinct points"
        raise InvalidCourseError(msg)
    return prepared


def _validate_index(index: object, upper: int, what: str) -> int:
    """Validate an integer index within ``[0, upper]``.

    Args:
        index: Candidate index.
        upper: Inclusive upper bound.
        what: Description used in error messages.

    Returns:
        Index as ``int``.

    Raises:
        coursesim.utils.exceptions.InvalidIndexError: If ``index`` is not an
            integer or lies outside ``[0, upper]``.
    """
    if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
        msg = f"{what} index must be an integer, got {index!r}"
        raise InvalidIndexError(msg)
    if not 0 <= int(index) <= upper:
        msg = f"{what} index {index} out of range [0, {upper}]"
        raise InvalidIndexError(msg)
    return int(index)


class Course:
    """Race route as an ordered sequence of GPS points.

    The course owns its points and every structure derived from them:
    cumulative arc length, the width cache, the segment lookup cache and the
    lap crossings. All mutations go through methods that rebuild the derived
    state before returning, and reads hand out copies.

    Args:
        points: Ordered ``(lat, lon)`` pairs [deg]. Consecutive duplicates are
            removed.
        lap_detection_params: Optional lap-detection settings. Defaults to
            :class:`~coursesim.track.laps.LapDetectionParams`.

    Raises:
        coursesim.utils.exceptions.InvalidPointError: If a point is malformed
            or out of range.
        coursesim.utils.exceptions.InvalidCourseError: If fewer than two
            distinct points are given.
        coursesim.utils.exceptions.ConfigurationError: If lap-detection
            settings are invalid.
    """

    def __init__(
        self,
        points: Iterable[object],
        lap_detection_params: LapDetectionParams | None = None,
    ) -> None:
        """Build the course geometry and populate its caches.

        Args:
            points: Ordered ``(lat, lon)`` pairs [deg].
            lap_detection_params: Optional lap-detection settings.
        """
        params = lap_detection_params or LapDetectionParams()
        params.validate()
        prepared = _prepare_points(points)
        geometry = _build_geometry(prepared)

        self._lap_params = params
        self._segment_width_overrides: dict[int, float] = {}
        self._install(prepared, geometry)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def points(self) -> list[LatLon]:
        """Course points.

        Returns:
            Copy of the ordered ``(lat, lon)`` points [deg].
        """
        return list(self._points)

    @property
    def start_point(self) -> LatLon:
        """First course point.

        Returns:
            Start ``(lat, lon)`` [deg].
        """
        return self._points[0]

    @property
    def finish_point(self) -> LatLon:
        """Last course point.

        Returns:
            Finish ``(lat, lon)`` [deg].
        """
        return self._points[-1]

    @property
    def length(self) -> float:
        """Total course length [m].

        Returns:
            Geodesic path length from start to finish [m].
        """
        return self._geometry.length

    @property
    def segment_count(self) -> int:
        """Number of segments between consecutive points.

        Returns:
            Point count minus one.
        """
        return len(self._points) - 1

    @property
    def cumulative_distances(self) -> FloatArray:
        """Cumulative path length at every point.

        Returns:
            Copy of the cumulative distance array [m].
        """
        return self._geometry.cumulative.copy()

    # ------------------------------------------------------------------
    # Distance queries
    # ------------------------------------------------------------------

    def get_position_at_distance(self, distance_m: float) -> LatLon:
        """Return the course position at a distance from the start.

        Distances outside ``[0, length]`` are clamped rather than rejected.

        Args:
            distance_m: Distance along the course [m].

        Returns:
            Interpolated ``(lat, lon)`` [deg].
        """
        if distance_m <= 0.0:
            return self.start_point
        if distance_m >= self.length:
            return self.finish_point

        idx = self._segment_index_at(distance_m)
        segment_length = float(self._geometry.segment_lengths[idx])
        if segment_length <= 0.0:
            return self._points[idx]
        fraction = (distance_m - float(self._geometry.cumulative[idx])) / segment_length
        return interpolate(self._points[idx], self._points[idx + 1], fraction)

    def get_bearing_at_distance(self, distance_m: float) -> float:
        """Return the initial bearing of the segment containing a distance.

        Args:
            distance_m: Distance along the course [m], clamped to the course.

        Returns:
            Segment bearing in ``[0, 360)`` [deg].
        """
        return float(self._geometry.segment_bearings[self._segment_index_at(distance_m)])

    def get_distance_at_position(self, position: object) -> float:
        """Translate an arbitrary point into a distance along the course.

        The point is projected onto every segment and the globally closest
        projection wins.

        Args:
            position: ``(lat, lon)`` pair [deg].

        Returns:
            Distance from the start to the closest course point [m].
        """
        point = validate_point(position)
        coords = self._geometry.coords
        closest, gaps = project_onto_segments(point, coords[:-1], coords[1:])
        idx = int(np.argmin(gaps))
        along = distance(self._points[idx], (float(closest[idx, 0]), float(closest[idx, 1])))
        return min(float(self._geometry.cumulative[idx]) + along, self.length)

    # ------------------------------------------------------------------
    # Width inference
    # ------------------------------------------------------------------

    def get_width_at(self, distance_m: float, clamp: bool = False) -> float:
        """Return the course width at a distance.

        Segment overrides take precedence; otherwise the width comes from the
        sampled cache, inferring and caching missing samples on demand.

        Args:
            distance_m: Distance along the course [m].
            clamp: If ``True``, clamp out-of-range distances instead of
                raising.

        Returns:
            Course width [m].

        Raises:
            coursesim.utils.exceptions.OutOfBoundsError: If ``distance_m`` is
                NaN, or if ``clamp`` is ``False`` and ``distance_m`` lies
                outside ``[0, length]``.
        """
        if math.isnan(distance_m):
            msg = "Distance must be a number, got NaN"
            raise OutOfBoundsError(msg)
        if not clamp and not (
            -DISTANCE_TOLERANCE <= distance_m <= self.length + DISTANCE_TOLERANCE
        ):
            msg = f"Distance {distance_m} is outside the course [0, {self.length}]"
            raise OutOfBoundsError(msg)
        clamped = min(max(float(distance_m), 0.0), self.length)

        override = self._segment_width_overrides.get(self._segment_index_at(clamped))
        if override is not None:
            return override

        key = int(math.floor(clamped / WIDTH_SAMPLE_INTERVAL + 0.5))
        cached = self._width_cache.get(key)
        if cached is not None:
            return cached

        width = self._infer_width(min(key * WIDTH_SAMPLE_INTERVAL, self.length))
        self._width_cache[key] = width
        return width

    def find_closest_parallel_path(self, position: LatLon, bearing_deg: float) -> int | None:
        """Find the nearest nearby segment running opposite to a heading.

        Only segments within a window around the segment nearest to
        ``position`` are considered, and only those whose bearing lies within
        the parallel tolerance of ``bearing_deg + 180``.

        Args:
            position: Point on the course ``(lat, lon)`` [deg].
            bearing_deg: Heading of the course at ``position`` [deg].

        Returns:
            Distance to the closest antiparallel segment rounded to the metre,
            or ``None`` if no segment is within the maximum width.
        """
        current = self._segment_index_at(self.get_distance_at_position(position))
        segment_count = self.segment_count
        average_length = self.length / segment_count
        window = int(math.ceil(PARALLEL_SEARCH_RADIUS / average_length))
        lo = max(0, current - window)
        hi = min(segment_count, current + window + 1)

        indices = np.arange(lo, hi)
        opposite = (bearing_deg + 180.0) % 360.0
        heading_error = np.abs(self._geometry.segment_bearings[lo:hi] - opposite) % 360.0
        heading_error = np.minimum(heading_error, 360.0 - heading_error)
        candidates = indices[(indices != current) & (heading_error <= PARALLEL_BEARING_TOLERANCE)]
        if candidates.size == 0:
            return None

        coords = self._geometry.coords
        _, gaps = project_onto_segments(position, coords[candidates], coords[candidates + 1])
        nearest = float(np.min(gaps))
        if nearest > MAX_WIDTH * WIDTH_PRECISION_ALLOWANCE:
            return None
        return int(math.floor(nearest + 0.5))

    def get_course_width_info(self) -> CourseWidthInfo:
        """Report the narrowest and widest sampled widths.

        Returns:
            Extreme widths with their distances and positions.
        """
        if not self._width_cache:
            self._populate_width_cache()

        samples: list[tuple[float, float]] = []
        for key in sorted(self._width_cache):
            sample_distance = min(key * WIDTH_SAMPLE_INTERVAL, self.length)
            width = self._segment_width_overrides.get(
                self._segment_index_at(sample_distance), self._width_cache[key]
            )
            samples.append((width, sample_distance))

        # Ties resolve to the sample nearest the start.
        narrowest = min(samples, key=lambda sample: sample[0])
        widest = max(samples, key=lambda sample: sample[0])
        return CourseWidthInfo(
            narrowest_width=narrowest[0],
            narrowest_distance=narrowest[1],
            narrowest_point=self.get_position_at_distance(narrowest[1]),
            widest_width=widest[0],
            widest_distance=widest[1],
            widest_point=self.get_position_at_distance(widest[1]),
        )

    # ------------------------------------------------------------------
    # Segment width overrides
    # ------------------------------------------------------------------

    def set_segment_width(self, segment_index: int, width: float) -> None:
        """Force the width of one segment regardless of inferred geometry.

        Args:
            segment_index: Segment index in ``[0, segment_count - 1]``.
            width: Explicit width [m].

        Raises:
            coursesim.utils.exceptions.InvalidIndexError: If the segment index
                is out of range.
            coursesim.utils.exceptions.ConfigurationError: If ``width`` is not
                a positive finite number.
        """
        idx = _validate_index(segment_index, self.segment_count - 1, "Segment")
        if not math.isfinite(width) or width <= 0.0:
            msg = f"Segment width must be positive, got {width}"
            raise ConfigurationError(msg)
        self._segment_width_overrides[idx] = float(width)

    def clear_segment_width(self, segment_index: int) -> None:
        """Remove a segment width override, if any.

        Args:
            segment_index: Segment index in ``[0, segment_count - 1]``.
        """
        idx = _validate_index(segment_index, self.segment_count - 1, "Segment")
        self._segment_width_overrides.pop(idx, None)

    def get_segment_width_overrides(self) -> dict[int, float]:
        """Return all segment width overrides.

        Returns:
            Copy of the segment-index-to-width mapping [m].
        """
        return dict(self._segment_width_overrides)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_point(self, point: object, index: int | None = None) -> None:
        """Insert a point, appending when no index is given.

        Args:
            point: New ``(lat, lon)`` pair [deg].
            index: Insert position in ``[0, len(points)]``.

        Raises:
            coursesim.utils.exceptions.InvalidPointError: If the point is
                invalid.
            coursesim.utils.exceptions.InvalidIndexError: If the index is out
                of range.
        """
        new_point = validate_point(point)
        position = len(self._points) if index is None else _validate_index(index, len(self._points), "Point")
        points = list(self._points)
        points.insert(position, new_point)
        self._commit(points, keep_overrides=False)

    def move_point(self, index: int, point: object) -> None:
        """Replace the point at an index.

        Segment width overrides survive the move unless the new point
        duplicates a neighbour and the point count shrinks.

        Args:
            index: Point index in ``[0, len(points) - 1]``.
            point: Replacement ``(lat, lon)`` pair [deg].

        Raises:
            coursesim.utils.exceptions.InvalidPointError: If the point is
                invalid.
            coursesim.utils.exceptions.InvalidIndexError: If the index is out
                of range.
            coursesim.utils.exceptions.InvalidCourseError: If the move leaves
                fewer than two distinct points.
        """
        new_point = validate_point(point)
        idx = _validate_index(index, len(self._points) - 1, "Point")
        points = list(self._points)
        points[idx] = new_point
        self._commit(points, keep_overrides=True)

    def delete_point(self, index: int) -> None:
        """Remove the point at an index.

        Args:
            index: Point index in ``[0, len(points) - 1]``.

        Raises:
            coursesim.utils.exceptions.InvalidIndexError: If only two points
                remain or the index is out of range.
            coursesim.utils.exceptions.InvalidCourseError: If the deletion
                leaves fewer than two distinct points.
        """
        if len(self._points) <= MIN_COURSE_POINT_COUNT:
            msg = f"A course must have at least {MIN_COURSE_POINT_COUNT} points"
            raise InvalidIndexError(msg)
        idx = _validate_index(index, len(self._points) - 1, "Point")
        points = list(self._points)
        del points[idx]
        self._commit(points, keep_overrides=False)

    def set_points(self, points: Iterable[object]) -> None:
        """Replace the whole point sequence, e.g. when restoring a snapshot.

        Args:
            points: Ordered ``(lat, lon)`` pairs [deg].
        """
        self._commit(list(points), keep_overrides=False)

    # ------------------------------------------------------------------
    # Laps
    # ------------------------------------------------------------------

    def get_lap_detection_params(self) -> LapDetectionParams:
        """Return the active lap-detection settings.

        Returns:
            Current (immutable) lap-detection parameters.
        """
        return self._lap_params

    def set_lap_detection_params(
        self,
        step_meters: float | None = None,
        bearing_tolerance_deg: float | None = None,
        crossing_tolerance_meters: float | None = None,
    ) -> None:
        """Update some lap-detection settings and recompute crossings.

        Omitted arguments keep their current values.

        Args:
            step_meters: New sampling interval [m].
            bearing_tolerance_deg: New heading tolerance [deg].
            crossing_tolerance_meters: New start-proximity tolerance [m].

        Raises:
            coursesim.utils.exceptions.ConfigurationError: If the updated
                settings are invalid.
        """
        changes = {
            name: float(value)
            for name, value in (
                ("step_meters", step_meters),
                ("bearing_tolerance_deg", bearing_tolerance_deg),
                ("crossing_tolerance_meters", crossing_tolerance_meters),
            )
            if value is not None
        }
        params = replace(self._lap_params, **changes)
        params.validate()
        self._lap_params = params
        self._lap_crossings = compute_lap_crossings(self, params)

    def get_lap_crossings(self) -> list[float]:
        """Return detected lap-crossing distances.

        Returns:
            Copy of the ascending crossing distances [m].
        """
        return list(self._lap_crossings)

    def get_lap_count(self) -> int:
        """Return the number of laps in the course.

        Returns:
            Crossing count plus one.
        """
        return len(self._lap_crossings) + 1

    def get_lap_index_at_distance(self, distance_m: float) -> int:
        """Return the 1-based lap index at a distance.

        Args:
            distance_m: Distance along the course [m].

        Returns:
            One plus the number of crossings at or before ``distance_m``.
        """
        return 1 + bisect.bisect_right(self._lap_crossings, distance_m)

    # ------------------------------------------------------------------
    # Internal state management
    # ------------------------------------------------------------------

    def _commit(self, points: Sequence[object], keep_overrides: bool) -> None:
        """Validate a new point sequence and atomically swap it in.

        Args:
            points: Candidate point sequence.
            keep_overrides: Whether the caller preserves segment indices.
                Overrides are still cleared when duplicate removal changes
                the point count.
        """
        prepared = _prepare_points(points)
        geometry = _build_geometry(prepared)

        if keep_overrides and len(prepared) == len(self._points):
            overrides = dict(self._segment_width_overrides)
        else:
            if self._segment_width_overrides:
                logger.debug("Clearing %d segment width override(s)", len(self._segment_width_overrides))
            overrides = {}
        self._segment_width_overrides = overrides
        self._install(prepared, geometry)

    def _install(self, points: list[LatLon], geometry: _CourseGeometry) -> None:
        """Adopt new points and rebuild all derived caches.

        Args:
            points: Validated, de-duplicated points.
            geometry: Geometry derived from ``points``.
        """
        self._points = points
        self._geometry = geometry
        self._segment_cache: dict[float, int] = {}
        self._width_cache: dict[int, float] = {}
        self._populate_width_cache()
        self._lap_crossings = compute_lap_crossings(self, self._lap_params)
        logger.debug(
            "Rebuilt course: %d points, %.1f m, %d width samples, %d lap(s)",
            len(points),
            geometry.length,
            len(self._width_cache),
            self.get_lap_count(),
        )

    def _populate_width_cache(self) -> None:
        """Infer the width at every sampling interval over the course."""
        sample_count = int(math.floor(self.length / WIDTH_SAMPLE_INTERVAL)) + 1
        for key in range(sample_count):
            self._width_cache[key] = self._infer_width(key * WIDTH_SAMPLE_INTERVAL)

    def _infer_width(self, distance_m: float) -> float:
        """Infer the width at a distance from nearby antiparallel segments.

        Args:
            distance_m: Distance along the course [m].

        Returns:
            Parallel-path distance, or the default width [m].
        """
        position = self.get_position_at_distance(distance_m)
        heading = self.get_bearing_at_distance(distance_m)
        parallel = self.find_closest_parallel_path(position, heading)
        if parallel is None:
            return DEFAULT_WIDTH
        return float(parallel)

    def _segment_index_at(self, distance_m: float) -> int:
        """Locate the segment containing a distance by binary search.

        Args:
            distance_m: Distance along the course [m], clamped to the course.

        Returns:
            Segment index in ``[0, segment_count - 1]``.
        """
        cached = self._segment_cache.get(distance_m)
        if cached is not None:
            return cached
        idx = int(np.searchsorted(self._geometry.cumulative, distance_m, side="right")) - 1
        idx = min(max(idx, 0), self.segment_count - 1)
        if len(self._segment_cache) >= SEGMENT_CACHE_LIMIT:
            self._segment_cache.clear()
        self._segment_cache[distance_m] = idx
        return idx
