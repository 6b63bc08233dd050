"""Race simulation orchestration around the tick engine."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from coursesim.simulation.config import SimulationConfig
from coursesim.simulation.engine import BlockEvent, TickResult, advance_participants
from coursesim.simulation.participant import ParticipantState, combine_external_factors
from coursesim.track.models import Course
from coursesim.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CongestionPoint:
    """A course location where runners were prevented from overtaking.

    Args:
        id: Stable identifier derived from the distance bucket.
        latitude: Bucket position latitude [deg].
        longitude: Bucket position longitude [deg].
        distance: Bucket distance along the course [m].
        count: Number of blocking events recorded in the bucket.
    """

    id: str
    latitude: float
    longitude: float
    distance: float
    count: int


class RaceSimulation:
    """Tick-driven simulation of a field of participants on one course.

    The simulation owns the simulated clock, finish times and the congestion
    tally; an external scheduler decides when to call :meth:`tick`.

    Args:
        course: Course all participants run on.
        participants: Participants in start order, front first.
        config: Validated simulation settings.
    """

    def __init__(
        self,
        course: Course,
        participants: Sequence[ParticipantState],
        config: SimulationConfig | None = None,
    ) -> None:
        """Bind participants to a course and validate settings.

        Args:
            course: Course all participants run on.
            participants: Participants in start order, front first.
            config: Optional simulation settings. Defaults to
                :class:`~coursesim.simulation.config.SimulationConfig`.

        Raises:
            coursesim.utils.exceptions.ConfigurationError: If settings are
                invalid or a participant runs on another course.
        """
        resolved = config or SimulationConfig()
        resolved.validate()
        if any(participant.course is not course for participant in participants):
            msg = "All participants must run on the simulated course"
            raise ConfigurationError(msg)

        self._course = course
        self._participants = list(participants)
        self._config = resolved
        self._elapsed_time = 0.0
        self._tick_count = 0
        self._congestion_counts: dict[int, int] = {}

    @property
    def course(self) -> Course:
        """Simulated course.

        Returns:
            Course shared by all participants.
        """
        return self._course

    @property
    def participants(self) -> list[ParticipantState]:
        """Participants in start order.

        Returns:
            Copy of the participant list.
        """
        return list(self._participants)

    @property
    def config(self) -> SimulationConfig:
        """Simulation settings.

        Returns:
            Active configuration.
        """
        return self._config

    @property
    def elapsed_time(self) -> float:
        """Simulated time since the start [s].

        Returns:
            Elapsed simulated time [s].
        """
        return self._elapsed_time

    @property
    def tick_count(self) -> int:
        """Number of ticks executed since the start.

        Returns:
            Tick counter.
        """
        return self._tick_count

    @property
    def all_finished(self) -> bool:
        """Whether every participant reached the finish.

        Returns:
            ``True`` when no participant is still running.
        """
        return all(participant.finished for participant in self._participants)

    @property
    def congestion_points(self) -> list[CongestionPoint]:
        """Congestion tally ordered along the course.

        Returns:
            One entry per distance bucket with at least one blocking event.
        """
        points = []
        for bucket in sorted(self._congestion_counts):
            bucket_distance = min(bucket * self._config.congestion_bucket, self._course.length)
            lat, lon = self._course.get_position_at_distance(bucket_distance)
            points.append(
                CongestionPoint(
                    id=f"congestion-{bucket}",
                    latitude=lat,
                    longitude=lon,
                    distance=bucket_distance,
                    count=self._congestion_counts[bucket],
                )
            )
        return points

    def tick(self, external_factors: Mapping[str, float] | None = None) -> TickResult:
        """Advance the simulation by one tick.

        Args:
            external_factors: Named speed multipliers applied to every runner.

        Returns:
            Engine result for the tick.
        """
        tick_seconds = self._config.tick_seconds
        before = [participant.cumulative_distance for participant in self._participants]
        result = advance_participants(
            self._course,
            self._participants,
            tick_seconds,
            external_factors=external_factors,
            following_gap=self._config.following_gap,
        )

        factor = combine_external_factors(external_factors)
        for idx in result.newly_finished:
            full_advance = self._participants[idx].distance_for_tick(tick_seconds, factor)
            self._record_finish(idx, before[idx], full_advance, tick_seconds)
        for event in result.blocks:
            self._record_block(event)

        self._elapsed_time += tick_seconds
        self._tick_count += 1
        return result

    def run(
        self,
        max_ticks: int | None = None,
        external_factors: Mapping[str, float] | None = None,
    ) -> int:
        """Tick until every participant finished or the tick cap is reached.

        Args:
            max_ticks: Optional tick cap. Defaults to ``config.max_ticks``.
            external_factors: Named speed multipliers applied every tick.

        Returns:
            Number of ticks executed by this call.
        """
        limit = self._config.max_ticks if max_ticks is None else max_ticks
        executed = 0
        while executed < limit and not self.all_finished:
            self.tick(external_factors=external_factors)
            executed += 1

        if not self.all_finished:
            logger.warning(
                "Stopped after %d tick(s) with %d participant(s) still running",
                executed,
                sum(not participant.finished for participant in self._participants),
            )
        return executed

    def reset(self) -> None:
        """Return all participants to the start and clear clock and tallies."""
        for participant in self._participants:
            participant.reset()
        self._elapsed_time = 0.0
        self._tick_count = 0
        self._congestion_counts.clear()

    def _record_finish(self, idx: int, before: float, advance: float, tick_seconds: float) -> None:
        """Store an interpolated finish time for a participant.

        Args:
            idx: Participant input index.
            before: Distance at the start of the tick [m].
            advance: Unobstructed distance for the tick [m].
            tick_seconds: Tick duration [s].
        """
        remaining = self._course.length - before
        fraction = remaining / advance if advance > 0.0 else 1.0
        participant = self._participants[idx]
        participant.record_finish(self._elapsed_time + min(fraction, 1.0) * tick_seconds)
        logger.debug("%s finished at %.1f s", participant.participant_id, participant.finish_time)

    def _record_block(self, event: BlockEvent) -> None:
        """Count a blocking event in its congestion bucket.

        Args:
            event: Blocking event from the tick engine.
        """
        bucket = int(math.floor(event.distance / self._config.congestion_bucket))
        self._congestion_counts[bucket] = self._congestion_counts.get(bucket, 0) + 1
