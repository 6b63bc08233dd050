"""Simulation analysis tools."""

from coursesim.analysis.congestion import aggregate_congestion, total_blocking_events
from coursesim.analysis.export import export_congestion_json, export_results_json
from coursesim.analysis.plots import export_standard_plots
from coursesim.analysis.results import ParticipantResult, classify_pace_delta, compute_results

__all__ = [
    "ParticipantResult",
    "aggregate_congestion",
    "classify_pace_delta",
    "compute_results",
    "export_congestion_json",
    "export_results_json",
    "export_standard_plots",
    "total_blocking_events",
]
