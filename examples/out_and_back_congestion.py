"""Simulate a reverse-seeded field on a narrow out-and-back course."""

from __future__ import annotations

import logging
from pathlib import Path

from coursesim.analysis import (
    aggregate_congestion,
    compute_results,
    export_congestion_json,
    export_results_json,
    export_standard_plots,
)
from coursesim.simulation import RaceSimulation, build_participant_field, build_simulation_config
from coursesim.simulation.participant import format_pace
from coursesim.track import build_out_and_back_course
from coursesim.utils import configure_logging

OUT_LENGTH = 1_000.0
LEG_OFFSET = 1.0
FIELD_SIZE = 40
PARTICIPANT_WIDTH = 0.6
HOT_SPOT_COUNT = 5


def main() -> None:
    """Run the scenario and export results, congestion and plots."""
    configure_logging(logging.INFO)
    logger = logging.getLogger("out_and_back_congestion")

    project_root = Path(__file__).resolve().parents[1]
    output_dir = project_root / "examples" / "output" / "out_and_back"

    course = build_out_and_back_course(out_length=OUT_LENGTH, offset=LEG_OFFSET)
    info = course.get_course_width_info()
    logger.info(
        "Course length %.0f m, width %.0f-%.0f m",
        course.length,
        info.narrowest_width,
        info.widest_width,
    )

    field = build_participant_field(
        course,
        FIELD_SIZE,
        fastest_pace="3:00",
        slowest_pace="8:00",
        width=PARTICIPANT_WIDTH,
    )
    simulation = RaceSimulation(
        course,
        list(reversed(field)),
        build_simulation_config(tick_seconds=1.0, congestion_bucket=25.0),
    )
    ticks = simulation.run()
    logger.info("Finished after %d tick(s), %.0f s simulated", ticks, simulation.elapsed_time)

    results = compute_results(simulation)
    for result in results[:3]:
        logger.info(
            "#%d %s: %.1f s (target %s/km, %s)",
            result.place,
            result.participant_id,
            result.finish_time,
            format_pace(result.target_pace),
            result.pace_rating,
        )
    for point in aggregate_congestion(simulation.congestion_points, top=HOT_SPOT_COUNT):
        logger.info("Congestion at %.0f m: %d blocking event(s)", point.distance, point.count)

    export_results_json(results, output_dir / "results.json")
    export_congestion_json(simulation.congestion_points, output_dir / "congestion.json")
    export_standard_plots(simulation, output_dir / "plots")
    logger.info("Scenario artifacts written to %s", output_dir)


if __name__ == "__main__":
    main()
