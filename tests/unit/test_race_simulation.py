"""Unit tests for the tick-driven race simulation."""

from __future__ import annotations

import unittest

from coursesim.analysis import total_blocking_events
from coursesim.simulation import RaceSimulation, SimulationConfig, build_simulation_config
from coursesim.track import build_straight_course
from coursesim.utils.exceptions import ConfigurationError
from tests.helpers import place_participant


class SimulationConfigTests(unittest.TestCase):
    """Validate simulation configuration bounds."""

    def test_builder_returns_validated_config(self) -> None:
        """Build a config carrying the requested values."""
        config = build_simulation_config(tick_seconds=0.5, following_gap=0.2)
        self.assertEqual(config.tick_seconds, 0.5)
        self.assertEqual(config.following_gap, 0.2)
        self.assertEqual(config.congestion_bucket, SimulationConfig().congestion_bucket)

    def test_builder_rejects_invalid_values(self) -> None:
        """Reject values outside their bounds."""
        with self.assertRaises(ConfigurationError):
            build_simulation_config(tick_seconds=0.0)
        with self.assertRaises(ConfigurationError):
            build_simulation_config(following_gap=-1.0)
        with self.assertRaises(ConfigurationError):
            build_simulation_config(congestion_bucket=0.0)
        with self.assertRaises(ConfigurationError):
            build_simulation_config(max_ticks=0)


class RaceSimulationTests(unittest.TestCase):
    """Validate clock, finish times and congestion bookkeeping."""

    def setUp(self) -> None:
        """Create a 500 m straight course."""
        self.course = build_straight_course(length=500.0)

    def test_single_runner_finish_time_is_interpolated(self) -> None:
        """Record the finish inside the tick where the line is crossed."""
        runner = place_participant(self.course, 0.0, pace="4:00", participant_id="solo")
        simulation = RaceSimulation(self.course, [runner], build_simulation_config(tick_seconds=7.0))

        simulation.run()

        self.assertTrue(simulation.all_finished)
        self.assertAlmostEqual(runner.finish_time, self.course.length * 0.24, places=6)
        self.assertEqual(simulation.tick_count, 18)
        self.assertAlmostEqual(simulation.elapsed_time, 126.0)

    def test_run_stops_at_tick_cap_with_warning(self) -> None:
        """Stop at the tick cap and warn about unfinished participants."""
        runner = place_participant(self.course, 0.0, pace="4:00")
        simulation = RaceSimulation(self.course, [runner])

        with self.assertLogs("coursesim.simulation.runner", level="WARNING"):
            executed = simulation.run(max_ticks=5)

        self.assertEqual(executed, 5)
        self.assertFalse(simulation.all_finished)
        self.assertAlmostEqual(simulation.elapsed_time, 5.0)

    def test_blocking_events_are_bucketed_into_congestion_points(self) -> None:
        """Count one congestion event per blocked tick."""
        self.course.set_segment_width(0, 0.8)
        slow = place_participant(self.course, 0.0, pace="10:00", participant_id="slow")
        fast = place_participant(self.course, 0.0, pace="3:00", participant_id="fast")
        simulation = RaceSimulation(self.course, [slow, fast])

        blocks = 0
        for _ in range(10):
            blocks += len(simulation.tick().blocks)

        points = simulation.congestion_points
        self.assertEqual(blocks, 10)
        self.assertEqual(total_blocking_events(points), 10)
        self.assertEqual(points[0].id, "congestion-0")
        self.assertEqual(points[0].distance, 0.0)
        self.assertEqual((points[0].latitude, points[0].longitude), self.course.start_point)
        self.assertEqual([p.distance for p in points], sorted(p.distance for p in points))
        self.assertLess(fast.cumulative_distance, slow.cumulative_distance)

    def test_external_factors_slow_every_runner(self) -> None:
        """Apply external factors to the whole field."""
        runner = place_participant(self.course, 0.0, pace="4:00")
        simulation = RaceSimulation(self.course, [runner])

        simulation.tick(external_factors={"headwind": 0.5})
        self.assertAlmostEqual(runner.cumulative_distance, 0.5 * 1_000.0 / 240.0)

    def test_reset_clears_clock_and_tallies(self) -> None:
        """Return participants to the start and clear recorded state."""
        self.course.set_segment_width(0, 0.8)
        slow = place_participant(self.course, 0.0, pace="10:00")
        fast = place_participant(self.course, 0.0, pace="3:00")
        simulation = RaceSimulation(self.course, [slow, fast])
        simulation.run(max_ticks=3)

        simulation.reset()

        self.assertEqual(simulation.elapsed_time, 0.0)
        self.assertEqual(simulation.tick_count, 0)
        self.assertEqual(simulation.congestion_points, [])
        self.assertEqual(slow.cumulative_distance, 0.0)

    def test_rejects_participants_on_another_course(self) -> None:
        """Refuse to simulate participants bound to a different course."""
        other = build_straight_course(length=200.0)
        runner = place_participant(other, 0.0)
        with self.assertRaises(ConfigurationError):
            RaceSimulation(self.course, [runner])


if __name__ == "__main__":
    unittest.main()
