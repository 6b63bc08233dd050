"""Tick engine advancing participants under the no-collision policy."""

from __future__ import annotations

import bisect
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from coursesim.simulation.config import DEFAULT_FOLLOWING_GAP
from coursesim.simulation.participant import ParticipantState, combine_external_factors
from coursesim.track.models import Course
from coursesim.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockEvent:
    """A runner held behind a slower runner because the course is too narrow.

    Args:
        participant_id: Identifier of the blocked runner.
        blocked_by: Identifier of the runner ahead.
        distance: Contested course distance, the position of the runner
            ahead [m].
        available_width: Course width at the contested distance [m].
        required_width: Combined width of both runners [m].
    """

    participant_id: str
    blocked_by: str
    distance: float
    available_width: float
    required_width: float


@dataclass(frozen=True)
class TickResult:
    """Outcome of one simulated tick.

    Args:
        advances: Distance advanced by each participant, in input order [m].
        blocks: Blocking events raised during the tick.
        newly_finished: Input indices of participants that finished during
            the tick.
    """

    advances: tuple[float, ...]
    blocks: tuple[BlockEvent, ...]
    newly_finished: tuple[int, ...]


def order_participants(participants: Sequence[ParticipantState]) -> list[int]:
    """Order unfinished participants from the front of the race to the back.

    Args:
        participants: Participants in input order.

    Returns:
        Input indices sorted by descending distance; equal distances keep
        input order, so earlier entries count as ahead.
    """
    active = [idx for idx, participant in enumerate(participants) if not participant.finished]
    return sorted(active, key=lambda idx: (-participants[idx].cumulative_distance, idx))


def advance_participants(
    course: Course,
    participants: Sequence[ParticipantState],
    tick_seconds: float,
    external_factors: Mapping[str, float] | None = None,
    following_gap: float = DEFAULT_FOLLOWING_GAP,
) -> TickResult:
    """Advance every unfinished participant by one tick.

    Runners are processed from the front, so a runner is only ever
    constrained by runners already placed ahead of it in this tick. A runner
    whose advance would bring it within ``following_gap`` of a runner ahead
    may pass only where the course width fits both side by side; otherwise it
    is held ``following_gap`` behind. Eligibility is evaluated afresh every
    tick.

    Args:
        course: Course shared by all participants.
        participants: Participants in input order.
        tick_seconds: Tick duration [s].
        external_factors: Named speed multipliers applied to every runner.
        following_gap: Gap kept behind a blocking runner [m].

    Returns:
        Per-participant advances, blocking events and newly finished indices.

    Raises:
        coursesim.utils.exceptions.ConfigurationError: If the tick settings
            are invalid or a participant runs on a different course.
    """
    if tick_seconds <= 0.0:
        msg = "tick_seconds must be positive"
        raise ConfigurationError(msg)
    if following_gap < 0.0:
        msg = "following_gap must be non-negative"
        raise ConfigurationError(msg)
    if any(participant.course is not course for participant in participants):
        msg = "All participants must run on the simulated course"
        raise ConfigurationError(msg)

    factor = combine_external_factors(external_factors)
    total = course.length
    advances = [0.0] * len(participants)
    blocks: list[BlockEvent] = []
    newly_finished: list[int] = []
    # (distance, placement order, input index) of runners already placed.
    placed: list[tuple[float, int, int]] = []

    for order, idx in enumerate(order_participants(participants)):
        runner = participants[idx]
        start = runner.cumulative_distance
        target = min(start + runner.distance_for_tick(tick_seconds, factor), total)
        new_distance = target

        first_ahead = bisect.bisect_left(placed, (start, -1, -1))
        for leader_distance, _, leader_idx in placed[first_ahead:]:
            leader = participants[leader_idx]
            if leader.finished:
                continue
            if target <= leader_distance - following_gap:
                break

            available = course.get_width_at(leader_distance, clamp=True)
            required = runner.width + leader.width
            if available >= required:
                continue

            new_distance = max(start, min(target, leader_distance - following_gap))
            blocks.append(
                BlockEvent(
                    participant_id=runner.participant_id,
                    blocked_by=leader.participant_id,
                    distance=leader_distance,
                    available_width=available,
                    required_width=required,
                )
            )
            logger.debug(
                "%s blocked by %s at %.1f m (width %.2f < %.2f)",
                runner.participant_id,
                leader.participant_id,
                leader_distance,
                available,
                required,
            )
            break

        runner.set_cumulative_distance(new_distance)
        advances[idx] = runner.cumulative_distance - start
        if runner.finished:
            newly_finished.append(idx)
        bisect.insort(placed, (runner.cumulative_distance, order, idx))

    return TickResult(
        advances=tuple(advances),
        blocks=tuple(blocks),
        newly_finished=tuple(newly_finished),
    )
