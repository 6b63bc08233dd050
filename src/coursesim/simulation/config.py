"""Simulation configuration dataclasses."""

from __future__ import annotations

from dataclasses import dataclass

from coursesim.utils.exceptions import ConfigurationError

DEFAULT_TICK_SECONDS = 1.0
DEFAULT_FOLLOWING_GAP = 0.1
DEFAULT_CONGESTION_BUCKET = 10.0
DEFAULT_MAX_TICKS = 100_000


@dataclass(frozen=True)
class SimulationConfig:
    """Runtime controls for a tick-driven race simulation.

    Args:
        tick_seconds: Simulated time advanced by one tick [s].
        following_gap: Minimum gap a blocked runner keeps behind the runner
            ahead [m].
        congestion_bucket: Distance bucket used to aggregate blocking events
            into congestion points [m].
        max_ticks: Safety cap on ticks executed by
            :meth:`~coursesim.simulation.runner.RaceSimulation.run`.
    """

    tick_seconds: float = DEFAULT_TICK_SECONDS
    following_gap: float = DEFAULT_FOLLOWING_GAP
    congestion_bucket: float = DEFAULT_CONGESTION_BUCKET
    max_ticks: int = DEFAULT_MAX_TICKS

    def validate(self) -> None:
        """Validate simulation settings.

        Raises:
            coursesim.utils.exceptions.ConfigurationError: If any value
                violates its bound.
        """
        if self.tick_seconds <= 0.0:
            msg = "tick_seconds must be positive"
            raise ConfigurationError(msg)
        if self.following_gap < 0.0:
            msg = "following_gap must be non-negative"
            raise ConfigurationError(msg)
        if self.congestion_bucket <= 0.0:
            msg = "congestion_bucket must be positive"
            raise ConfigurationError(msg)
        if self.max_ticks < 1:
            msg = "max_ticks must be at least 1"
            raise ConfigurationError(msg)


def build_simulation_config(
    tick_seconds: float = DEFAULT_TICK_SECONDS,
    following_gap: float = DEFAULT_FOLLOWING_GAP,
    congestion_bucket: float = DEFAULT_CONGESTION_BUCKET,
    max_ticks: int = DEFAULT_MAX_TICKS,
) -> SimulationConfig:
    """Build a validated simulation config.

    Args:
        tick_seconds: Simulated time advanced by one tick [s].
        following_gap: Minimum gap kept behind a blocking runner [m].
        congestion_bucket: Congestion aggregation bucket [m].
        max_ticks: Safety cap on ticks executed by a full run.

    Returns:
        Fully validated simulation configuration.

    Raises:
        coursesim.utils.exceptions.ConfigurationError: If any value violates
            its bound.
    """
    config = SimulationConfig(
        tick_seconds=tick_seconds,
        following_gap=following_gap,
        congestion_bucket=congestion_bucket,
        max_ticks=max_ticks,
    )
    config.validate()
    return config
