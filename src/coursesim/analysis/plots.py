"""Plot generation for course and congestion analysis."""

from __future__ import annotations

from pathlib import Path

import matplotlib
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from coursesim.simulation.runner import RaceSimulation
from coursesim.track.models import Course
from coursesim.utils.constants import WIDTH_SAMPLE_INTERVAL

matplotlib.use("Agg")


def _save_dual_format(fig: Figure, out_base: Path) -> None:
    """Write a figure to PNG and PDF with a shared base path.

    Args:
        fig: Figure object to persist.
        out_base: Output path without suffix.
    """
    out_base.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_base.with_suffix(".png"), dpi=180, bbox_inches="tight")
    fig.savefig(out_base.with_suffix(".pdf"), bbox_inches="tight")


def plot_course_map(simulation: RaceSimulation, out_base: Path) -> None:
    """Plot the course outline with congestion points sized by event count.

    Args:
        simulation: Simulation providing the course and congestion tally.
        out_base: Output path without suffix.
    """
    coords = np.asarray(simulation.course.points)
    fig, ax = plt.subplots(figsize=(7, 6))
    ax.plot(coords[:, 1], coords[:, 0], lw=1.5, color="tab:blue", label="Course")
    ax.scatter(coords[0, 1], coords[0, 0], marker="o", color="tab:green", zorder=3, label="Start")
    ax.scatter(coords[-1, 1], coords[-1, 0], marker="s", color="tab:gray", zorder=3, label="Finish")

    points = simulation.congestion_points
    if points:
        ax.scatter(
            [p.longitude for p in points],
            [p.latitude for p in points],
            s=[12.0 + 6.0 * p.count for p in points],
            color="tab:red",
            alpha=0.6,
            zorder=4,
            label="Congestion",
        )
    ax.set_xlabel("Longitude [deg]")
    ax.set_ylabel("Latitude [deg]")
    ax.set_title("Course Map")
    ax.grid(True, alpha=0.3)
    ax.legend()
    _save_dual_format(fig, out_base)
    plt.close(fig)


def plot_width_profile(course: Course, out_base: Path) -> None:
    """Plot the course width over distance at the sampling interval.

    Args:
        course: Course whose widths are sampled.
        out_base: Output path without suffix.
    """
    samples = np.append(np.arange(0.0, course.length, WIDTH_SAMPLE_INTERVAL), course.length)
    widths = [course.get_width_at(float(sample), clamp=True) for sample in samples]

    fig, ax = plt.subplots(figsize=(9, 4))
    ax.step(samples, widths, where="mid", lw=2.0)
    ax.set_xlabel("Distance [m]")
    ax.set_ylabel("Width [m]")
    ax.set_title("Course Width Profile")
    ax.grid(True, alpha=0.3)
    _save_dual_format(fig, out_base)
    plt.close(fig)


def plot_congestion_histogram(simulation: RaceSimulation, out_base: Path) -> None:
    """Plot blocking events per congestion bucket along the course.

    Args:
        simulation: Simulation providing the congestion tally.
        out_base: Output path without suffix.
    """
    points = simulation.congestion_points
    fig, ax = plt.subplots(figsize=(9, 4))
    ax.bar(
        [p.distance for p in points],
        [p.count for p in points],
        width=simulation.config.congestion_bucket,
        align="edge",
        color="tab:red",
    )
    ax.set_xlim(0.0, simulation.course.length)
    ax.set_xlabel("Distance [m]")
    ax.set_ylabel("Blocking events")
    ax.set_title("Congestion Along the Course")
    ax.grid(True, alpha=0.3)
    _save_dual_format(fig, out_base)
    plt.close(fig)


def export_standard_plots(simulation: RaceSimulation, output_dir: str | Path) -> None:
    """Export all standard analysis plots in PNG and PDF format.

    Args:
        simulation: Simulation used as plotting input.
        output_dir: Destination directory for all generated plots.
    """
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    plot_course_map(simulation, out_dir / "course_map")
    plot_width_profile(simulation.course, out_dir / "width_profile")
    plot_congestion_histogram(simulation, out_dir / "congestion")
