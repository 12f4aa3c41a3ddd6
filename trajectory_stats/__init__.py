"""
Trajectory Stats - Kinematic, geometric and terrain statistics for GPS tracks.

This package provides tools for:
- Reconstructing a physically plausible speed profile from noisy positions
- Detecting hard acceleration/braking while rejecting GPS-dropout artifacts
- Classifying curvature into tight turns, hairpins and straight sections
- Summarizing stops, terrain and the speed distribution
- Visualizing a track and its statistics

Example usage:
    from trajectory_stats import calculate_stats_from_dataframe, generate_sample_trajectory
    from trajectory_stats.visualization import plot_track_events

    # Generate sample data
    df = generate_sample_trajectory('mixed')

    # Compute statistics
    summary = calculate_stats_from_dataframe(df)
    print(summary.total_distance, summary.tight_turns_count)
"""

from .analyzer import (
    TrackAnalyzer,
    analyze_segments,
    calculate_stats,
    calculate_stats_from_dataframe,
    calculate_stats_range,
)
from .config import DEFAULT_CONFIG, StatsConfig
from .coordinates import compute_bearing, haversine_distance, normalize_angle
from .formatting import format_distance, format_duration, format_speed, preview_polyline
from .limits import LimitedStats, calculate_limited_stats, collapse_distribution_at_limit
from .sample_data import TrackBuilder, generate_sample_trajectory
from .samples import Sample, samples_from_dataframe, samples_to_dataframe
from .summary import Event, EventKind, SpeedBucket, StatsSummary, summary_to_series

__version__ = "0.1.0"
__all__ = [
    "TrackAnalyzer",
    "analyze_segments",
    "calculate_stats",
    "calculate_stats_from_dataframe",
    "calculate_stats_range",
    "DEFAULT_CONFIG",
    "StatsConfig",
    "compute_bearing",
    "haversine_distance",
    "normalize_angle",
    "format_distance",
    "format_duration",
    "format_speed",
    "preview_polyline",
    "LimitedStats",
    "calculate_limited_stats",
    "collapse_distribution_at_limit",
    "TrackBuilder",
    "generate_sample_trajectory",
    "Sample",
    "samples_from_dataframe",
    "samples_to_dataframe",
    "Event",
    "EventKind",
    "SpeedBucket",
    "StatsSummary",
    "summary_to_series",
]
