"""Course geometry and participant congestion simulation package."""

from coursesim.analysis.results import ParticipantResult, compute_results
from coursesim.simulation.participant import ParticipantState
from coursesim.simulation.runner import RaceSimulation
from coursesim.track.models import Course

__all__ = [
    "Course",
    "ParticipantResult",
    "ParticipantState",
    "RaceSimulation",
    "compute_results",
]
