"""Shared test helpers."""

from __future__ import annotations

from coursesim.simulation.participant import ParticipantState
from coursesim.track.models import Course


def place_participant(
    course: Course,
    distance: float,
    pace: str | float = "4:00",
    width: float = 0.5,
    participant_id: str = "participant",
) -> ParticipantState:
    """Create a participant positioned at a course distance.

    Args:
        course: Course shared by the test participants.
        distance: Starting distance along the course [m].
        pace: Target pace as ``"m:ss"`` or seconds per km.
        width: Lateral footprint [m].
        participant_id: Identifier used in assertions.

    Returns:
        Participant placed at ``distance``.
    """
    participant = ParticipantState(course, pace=pace, width=width, participant_id=participant_id)
    participant.set_cumulative_distance(distance)
    return participant


def rectangle_loop_points() -> list[tuple[float, float]]:
    """Return a small closed rectangle that ends where it started.

    Returns:
        Five ``(lat, lon)`` points with the last equal to the first [deg].
    """
    return [
        (0.0, 0.0),
        (0.0, 0.001),
        (0.001, 0.001),
        (0.001, 0.0),
        (0.0, 0.0),
    ]
