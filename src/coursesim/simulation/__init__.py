"""Participant state, tick engine and race runner."""

from coursesim.simulation.config import SimulationConfig, build_simulation_config
from coursesim.simulation.engine import (
    BlockEvent,
    TickResult,
    advance_participants,
    order_participants,
)
from coursesim.simulation.participant import (
    ParticipantState,
    build_participant_field,
    format_pace,
    parse_pace,
)
from coursesim.simulation.runner import CongestionPoint, RaceSimulation

__all__ = [
    "BlockEvent",
    "CongestionPoint",
    "ParticipantState",
    "RaceSimulation",
    "SimulationConfig",
    "TickResult",
    "advance_participants",
    "build_participant_field",
    "build_simulation_config",
    "format_pace",
    "order_participants",
    "parse_pace",
]
