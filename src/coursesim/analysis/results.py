"""Finishing results derived from a race simulation."""

from __future__ import annotations

from dataclasses import dataclass

from coursesim.simulation.participant import METERS_PER_KM
from coursesim.simulation.runner import RaceSimulation

PACE_DELTA_THRESHOLD = 30.0


@dataclass(frozen=True)
class ParticipantResult:
    """Result line for one participant.

    Args:
        participant_id: Participant identifier.
        place: 1-based placing; finishers first by time, then runners still
            on course by distance covered.
        finish_time: Finish time, ``None`` if not finished [s].
        distance: Distance covered [m].
        actual_pace: Achieved pace over the covered distance, ``None`` before
            any distance is covered [s/km].
        target_pace: Configured pace [s/km].
        pace_delta: ``actual_pace - target_pace``; positive when slower than
            planned [s/km].
        pace_rating: ``"happy"``, ``"neutral"`` or ``"sad"`` classification
            of ``pace_delta``, ``None`` when there is no pace yet.
    """

    participant_id: str
    place: int
    finish_time: float | None
    distance: float
    actual_pace: float | None
    target_pace: float
    pace_delta: float | None
    pace_rating: str | None


def classify_pace_delta(pace_delta: float | None) -> str | None:
    """Rate how a runner did against the planned pace.

    Args:
        pace_delta: Achieved minus target pace [s/km].

    Returns:
        ``"happy"`` when more than :data:`PACE_DELTA_THRESHOLD` faster than
        planned, ``"sad"`` when more than that slower, ``"neutral"`` in
        between, and ``None`` without a delta.
    """
    if pace_delta is None:
        return None
    if pace_delta < -PACE_DELTA_THRESHOLD:
        return "happy"
    if pace_delta > PACE_DELTA_THRESHOLD:
        return "sad"
    return "neutral"


def compute_results(simulation: RaceSimulation) -> list[ParticipantResult]:
    """Rank participants and compare achieved with target pace.

    Args:
        simulation: Simulation after any number of ticks.

    Returns:
        Result lines ordered by place.
    """
    participants = simulation.participants

    def _sort_key(idx: int) -> tuple[int, float, int]:
        """Build the ranking key for one participant.

        Args:
            idx: Participant input index.

        Returns:
            Tuple ranking finishers by time, then others by distance.
        """
        participant = participants[idx]
        if participant.finish_time is not None:
            return (0, participant.finish_time, idx)
        return (1, -participant.cumulative_distance, idx)

    results = []
    for place, idx in enumerate(sorted(range(len(participants)), key=_sort_key), start=1):
        participant = participants[idx]
        elapsed = participant.finish_time if participant.finish_time is not None else simulation.elapsed_time
        covered = participant.cumulative_distance
        actual_pace = elapsed / covered * METERS_PER_KM if covered > 0.0 else None
        pace_delta = None if actual_pace is None else actual_pace - participant.pace
        results.append(
            ParticipantResult(
                participant_id=participant.participant_id,
                place=place,
                finish_time=participant.finish_time,
                distance=covered,
                actual_pace=actual_pace,
                target_pace=participant.pace,
                pace_delta=pace_delta,
                pace_rating=classify_pace_delta(pace_delta),
            )
        )
    return results
