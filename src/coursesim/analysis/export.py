"""Export helpers for simulation outputs."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import asdict
from pathlib import Path

from coursesim.analysis.results import ParticipantResult
from coursesim.simulation.runner import CongestionPoint


def _write_json(payload: object, path: str | Path) -> None:
    """Write a JSON document, creating parent directories.

    Args:
        payload: JSON-serializable payload.
        path: Output file path.
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def export_results_json(results: Sequence[ParticipantResult], path: str | Path) -> None:
    """Persist participant results as JSON.

    Args:
        results: Result lines returned by
            :func:`coursesim.analysis.results.compute_results`.
        path: Output file path for the JSON document.
    """
    _write_json([asdict(result) for result in results], path)


def export_congestion_json(points: Sequence[CongestionPoint], path: str | Path) -> None:
    """Persist congestion points as JSON.

    Args:
        points: Congestion points, e.g. ``RaceSimulation.congestion_points``.
        path: Output file path for the JSON document.
    """
    _write_json([asdict(point) for point in points], path)
