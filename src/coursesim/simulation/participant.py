"""Simulated race participants and pace helpers."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping

import numpy as np

from coursesim.track.geodesy import LatLon
from coursesim.track.models import Course
from coursesim.utils.exceptions import ConfigurationError

DEFAULT_PACE = "4:00"
DEFAULT_PARTICIPANT_WIDTH = 0.5
DEFAULT_FASTEST_PACE = "2:30"
DEFAULT_SLOWEST_PACE = "12:00"
MIN_FIELD_SIZE = 1
MAX_FIELD_SIZE = 2_000
METERS_PER_KM = 1_000.0
SECONDS_PER_MINUTE = 60

_PACE_PATTERN = re.compile(r"^(\d+):(\d{1,2})$")


def parse_pace(pace: str | float) -> float:
    """Convert a pace to seconds per kilometre.

    Args:
        pace: Either a ``"m:ss"`` string or a number of seconds per km.

    Returns:
        Pace [s/km].

    Raises:
        coursesim.utils.exceptions.ConfigurationError: If the pace is
            malformed or not positive.
    """
    if isinstance(pace, str):
        match = _PACE_PATTERN.match(pace.strip())
        if match is None:
            msg = f"Pace must look like 'm:ss', got {pace!r}"
            raise ConfigurationError(msg)
        minutes, seconds = int(match.group(1)), int(match.group(2))
        if seconds >= SECONDS_PER_MINUTE:
            msg = f"Pace seconds must be below 60, got {pace!r}"
            raise ConfigurationError(msg)
        value = float(minutes * SECONDS_PER_MINUTE + seconds)
    else:
        value = float(pace)

    if not math.isfinite(value) or value <= 0.0:
        msg = f"Pace must be positive, got {pace!r}"
        raise ConfigurationError(msg)
    return value


def format_pace(seconds_per_km: float) -> str:
    """Format a pace as ``"m:ss"``.

    Args:
        seconds_per_km: Pace [s/km].

    Returns:
        Pace rounded to the nearest second.
    """
    minutes, seconds = divmod(int(round(seconds_per_km)), SECONDS_PER_MINUTE)
    return f"{minutes}:{seconds:02d}"


def combine_external_factors(external_factors: Mapping[str, float] | None) -> float:
    """Multiply named speed factors such as terrain or weather.

    Args:
        external_factors: Mapping of factor name to multiplier.

    Returns:
        Product of all factors, ``1.0`` when none are given.

    Raises:
        coursesim.utils.exceptions.ConfigurationError: If a factor is negative
            or not finite.
    """
    combined = 1.0
    for name, factor in (external_factors or {}).items():
        value = float(factor)
        if not math.isfinite(value) or value < 0.0:
            msg = f"External factor {name!r} must be non-negative, got {factor!r}"
            raise ConfigurationError(msg)
        combined *= value
    return combined


class ParticipantState:
    """One simulated entrant moving along a shared course.

    The participant holds a reference to the course and never copies its
    geometry; position, lap and finish status are derived from the
    cumulative distance.

    Args:
        course: Course the participant runs on.
        pace: Target pace as ``"m:ss"`` or seconds per km.
        width: Lateral footprint [m].
        participant_id: Identifier used in results and blocking events.
    """

    def __init__(
        self,
        course: Course,
        pace: str | float = DEFAULT_PACE,
        width: float = DEFAULT_PARTICIPANT_WIDTH,
        participant_id: str = "participant",
    ) -> None:
        """Create a participant at the start line.

        Args:
            course: Course the participant runs on.
            pace: Target pace as ``"m:ss"`` or seconds per km.
            width: Lateral footprint [m].
            participant_id: Identifier used in results and blocking events.

        Raises:
            coursesim.utils.exceptions.ConfigurationError: If pace or width is
                not positive.
        """
        if not math.isfinite(width) or width <= 0.0:
            msg = f"Participant width must be positive, got {width!r}"
            raise ConfigurationError(msg)
        self._course = course
        self._pace = parse_pace(pace)
        self._width = float(width)
        self._participant_id = participant_id
        self._cumulative_distance = 0.0
        self._finish_time: float | None = None

    def __repr__(self) -> str:
        """Return a compact debugging representation.

        Returns:
            Identifier, pace and distance summary.
        """
        return (
            f"ParticipantState(id={self._participant_id!r}, pace={format_pace(self._pace)}, "
            f"distance={self._cumulative_distance:.1f})"
        )

    @property
    def course(self) -> Course:
        """Course the participant runs on.

        Returns:
            Shared course instance.
        """
        return self._course

    @property
    def participant_id(self) -> str:
        """Participant identifier.

        Returns:
            Identifier string.
        """
        return self._participant_id

    @property
    def pace(self) -> float:
        """Target pace [s/km].

        Returns:
            Seconds needed per kilometre.
        """
        return self._pace

    @property
    def width(self) -> float:
        """Lateral footprint [m].

        Returns:
            Participant width [m].
        """
        return self._width

    @property
    def cumulative_distance(self) -> float:
        """Distance travelled so far [m].

        Returns:
            Distance in ``[0, course.length]`` [m].
        """
        return self._cumulative_distance

    @property
    def position(self) -> LatLon:
        """Current position on the course.

        Returns:
            ``(lat, lon)`` [deg].
        """
        return self._course.get_position_at_distance(self._cumulative_distance)

    @property
    def lap_index(self) -> int:
        """Current 1-based lap.

        Returns:
            Lap index at the current distance.
        """
        return self._course.get_lap_index_at_distance(self._cumulative_distance)

    @property
    def finished(self) -> bool:
        """Whether the participant reached the finish.

        Returns:
            ``True`` once the distance reaches the course length.
        """
        return self._cumulative_distance >= self._course.length

    @property
    def finish_time(self) -> float | None:
        """Simulated finish time, if recorded.

        Returns:
            Finish time [s] or ``None`` while still running.
        """
        return self._finish_time

    def distance_for_tick(self, tick_seconds: float, external_factor: float = 1.0) -> float:
        """Distance the participant would cover in one unobstructed tick.

        Args:
            tick_seconds: Tick duration [s].
            external_factor: Combined speed multiplier.

        Returns:
            Unconstrained advance [m].
        """
        return tick_seconds / self._pace * METERS_PER_KM * external_factor

    def move(self, tick_seconds: float, external_factors: Mapping[str, float] | None = None) -> float:
        """Advance without collision checks, clamped at the finish.

        Args:
            tick_seconds: Tick duration [s].
            external_factors: Named speed multipliers.

        Returns:
            Distance actually advanced [m].
        """
        before = self._cumulative_distance
        advance = self.distance_for_tick(tick_seconds, combine_external_factors(external_factors))
        self.set_cumulative_distance(before + advance)
        return self._cumulative_distance - before

    def set_cumulative_distance(self, distance_m: float) -> None:
        """Place the participant at a distance, clamped to the course.

        Args:
            distance_m: Target distance [m].
        """
        self._cumulative_distance = min(max(float(distance_m), 0.0), self._course.length)

    def record_finish(self, finish_time: float) -> None:
        """Store the simulated finish time.

        Args:
            finish_time: Elapsed time at the finish line [s].
        """
        self._finish_time = float(finish_time)

    def reset(self) -> None:
        """Return the participant to the start line."""
        self._cumulative_distance = 0.0
        self._finish_time = None


def build_participant_field(
    course: Course,
    count: int,
    fastest_pace: str | float = DEFAULT_FASTEST_PACE,
    slowest_pace: str | float = DEFAULT_SLOWEST_PACE,
    width: float = DEFAULT_PARTICIPANT_WIDTH,
) -> list[ParticipantState]:
    """Create a field with paces spread evenly from fastest to slowest.

    Participants are returned fastest first, which also makes the fastest
    runner the front of the start line.

    Args:
        course: Course shared by the field.
        count: Number of participants.
        fastest_pace: Fastest pace as ``"m:ss"`` or seconds per km.
        slowest_pace: Slowest pace as ``"m:ss"`` or seconds per km.
        width: Lateral footprint of every participant [m].

    Returns:
        Participants with identifiers ``participant-1`` to ``participant-n``.

    Raises:
        coursesim.utils.exceptions.ConfigurationError: If ``count`` is out of
            range or the fastest pace is slower than the slowest pace.
    """
    if not MIN_FIELD_SIZE <= count <= MAX_FIELD_SIZE:
        msg = f"count must be within [{MIN_FIELD_SIZE}, {MAX_FIELD_SIZE}], got {count}"
        raise ConfigurationError(msg)
    fastest = parse_pace(fastest_pace)
    slowest = parse_pace(slowest_pace)
    if fastest > slowest:
        msg = "Fastest pace must be less than slowest pace"
        raise ConfigurationError(msg)

    paces = np.linspace(fastest, slowest, count)
    return [
        ParticipantState(
            course,
            pace=float(pace),
            width=width,
            participant_id=f"participant-{idx + 1}",
        )
        for idx, pace in enumerate(paces)
    ]
