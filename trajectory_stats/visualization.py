"""
Visualization tools for trajectory statistics.

Provides plotting functions for:
- Track map with located events (stops, turns, hairpins, accel/brake)
- Per-segment profiles (speed, acceleration, gradient)
- Speed distribution histogram
- A one-page statistics report
"""

import numpy as np
import pandas as pd
from typing import Optional, Sequence, Tuple
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches

from .analyzer import TrackAnalyzer
from .config import StatsConfig
from .formatting import format_distance, format_duration, format_speed
from .samples import Sample
from .summary import EventKind, StatsSummary


# Color scheme for event kinds
EVENT_COLORS = {
    EventKind.STOP: '#e74c3c',        # Red
    EventKind.TIGHT_TURN: '#3498db',  # Blue
    EventKind.HAIRPIN: '#9b59b6',     # Purple
    EventKind.ACCEL: '#2ecc71',       # Green
    EventKind.BRAKE: '#e67e22',       # Orange
}

EVENT_MARKERS = {
    EventKind.STOP: 's',
    EventKind.TIGHT_TURN: '^',
    EventKind.HAIRPIN: 'D',
    EventKind.ACCEL: 'o',
    EventKind.BRAKE: 'v',
}


def _elapsed_minutes(segments: pd.DataFrame) -> np.ndarray:
    """Cumulative time at the end of each segment, in minutes."""
    return np.cumsum(segments['time_delta_s'].to_numpy()) / 60.0


def plot_track_events(
    samples: Sequence[Sample],
    summary: StatsSummary,
    ax: Optional[plt.Axes] = None,
    color: str = '#7f8c8d',
    linewidth: float = 2,
    marker_size: float = 40,
    title: Optional[str] = None,
    show_legend: bool = True,
) -> plt.Axes:
    """
    Plot the track on a 2D map (lat/lon) with its events marked.

    Args:
        samples: The samples the summary was computed from
        summary: StatsSummary from calculate_stats()
        ax: Matplotlib axes (creates new figure if None)
        color: Track line color
        linewidth: Line width
        marker_size: Size of event markers
        title: Plot title
        show_legend: If True, show legend

    Returns:
        Matplotlib axes
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 8))

    lat = np.array([s.latitude for s in samples])
    lon = np.array([s.longitude for s in samples])

    ax.plot(lon, lat, color=color, linewidth=linewidth, zorder=2)

    if len(lon) > 0:
        ax.scatter(lon[0], lat[0], c='black', s=marker_size * 2, marker='o',
                   zorder=4, edgecolors='white', linewidth=2)
        ax.scatter(lon[-1], lat[-1], c='black', s=marker_size * 2, marker='s',
                   zorder=4, edgecolors='white', linewidth=2)

    present = []
    for event in summary.events():
        ax.scatter(event.lon, event.lat, c=EVENT_COLORS[event.kind], s=marker_size,
                   marker=EVENT_MARKERS[event.kind], zorder=3,
                   edgecolors='white', linewidth=1)
        if event.kind not in present:
            present.append(event.kind)

    ax.set_xlabel('Longitude')
    ax.set_ylabel('Latitude')
    ax.grid(True, alpha=0.3)

    if show_legend and present:
        patches = [mpatches.Patch(color=EVENT_COLORS[k], label=k.value) for k in present]
        ax.legend(handles=patches, loc='best')

    if title:
        ax.set_title(title)
    else:
        ax.set_title(f'{format_distance(summary.total_distance)}, '
                     f'{summary.tight_turns_count} tight turns, '
                     f'{summary.hairpin_count} hairpins, {summary.stop_count} stops')

    return ax


def plot_speed_profile(
    samples: Sequence[Sample],
    config: Optional[StatsConfig] = None,
    figsize: Tuple[float, float] = (14, 9),
    title: Optional[str] = None,
) -> plt.Figure:
    """
    Plot per-segment speed, acceleration and gradient over elapsed time.

    Invalid (gap-suppressed) segments are shaded on the acceleration plot.

    Args:
        samples: Ordered samples
        config: Optional threshold overrides
        figsize: Figure size
        title: Overall title

    Returns:
        Matplotlib figure
    """
    analyzer = TrackAnalyzer(config)
    segments = analyzer.analyze_segments(samples)
    cfg = analyzer.config

    fig, axes = plt.subplots(3, 1, figsize=figsize, sharex=True)
    time = _elapsed_minutes(segments)

    # Speed
    ax = axes[0]
    ax.plot(time, segments['speed_kmh'], color='#bdc3c7', linewidth=1, label='Robust')
    ax.plot(time, segments['smoothed_speed_kmh'], color='#3498db', linewidth=1.5,
            label='Smoothed')
    ax.set_ylabel('Speed (km/h)')
    ax.grid(True, alpha=0.3)
    ax.legend(loc='upper right')

    # Acceleration
    ax = axes[1]
    ax.plot(time, segments['acceleration_mps2'], color='#9b59b6', linewidth=1.5)
    ax.axhline(y=cfg.hard_accel_mps2, color='#2ecc71', linestyle='--', alpha=0.7)
    ax.axhline(y=cfg.hard_brake_mps2, color='#e67e22', linestyle='--', alpha=0.7)
    invalid = ~segments['valid'].to_numpy(dtype=bool)
    if invalid.any():
        ax.fill_between(time, 0, 1, where=invalid, color='gray', alpha=0.2,
                        transform=ax.get_xaxis_transform())
    ax.set_ylabel('Accel (m/s²)')
    ax.grid(True, alpha=0.3)

    # Gradient
    ax = axes[2]
    ax.plot(time, segments['gradient_pct'], color='#e67e22', linewidth=1.5)
    ax.axhline(y=0, color='gray', linestyle='--', alpha=0.5)
    ax.set_ylabel('Gradient (%)')
    ax.set_xlabel('Time (min)')
    ax.grid(True, alpha=0.3)

    if title:
        fig.suptitle(title, fontsize=14, fontweight='bold')

    plt.tight_layout()
    return fig


def plot_speed_distribution(
    summary: StatsSummary,
    ax: Optional[plt.Axes] = None,
    color: str = '#3498db',
    title: Optional[str] = None,
) -> plt.Axes:
    """
    Bar chart of minutes spent in each speed band.

    Args:
        summary: StatsSummary from calculate_stats()
        ax: Matplotlib axes
        color: Bar color
        title: Plot title

    Returns:
        Matplotlib axes
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 5))

    labels = [b.range_label for b in summary.speed_distribution]
    minutes = [b.time_min for b in summary.speed_distribution]

    bars = ax.bar(labels, minutes, color=color, edgecolor='white', linewidth=1.5)
    for bar, value in zip(bars, minutes):
        if value > 0:
            ax.text(bar.get_x() + bar.get_width() / 2, bar.get_height(),
                    f'{value:.1f}', ha='center', va='bottom', fontsize=9)

    ax.set_xlabel('Speed (km/h)')
    ax.set_ylabel('Time (min)')
    ax.set_title(title or 'Speed Distribution')
    return ax


def create_stats_report(
    samples: Sequence[Sample],
    summary: StatsSummary,
    config: Optional[StatsConfig] = None,
    save_path: Optional[str] = None,
    figsize: Tuple[float, float] = (16, 12),
) -> plt.Figure:
    """
    Create a one-page visual report for a trajectory.

    Args:
        samples: The samples the summary was computed from
        summary: StatsSummary from calculate_stats()
        config: Thresholds used for the per-segment profile
        save_path: If provided, save figure to this path
        figsize: Figure size

    Returns:
        Matplotlib figure
    """
    fig = plt.figure(figsize=figsize)
    gs = fig.add_gridspec(3, 3, hspace=0.4, wspace=0.3)

    # Track map (spans 2 rows, 2 cols)
    ax1 = fig.add_subplot(gs[0:2, 0:2])
    plot_track_events(samples, summary, ax=ax1, title='Track')

    # Key figures
    ax2 = fig.add_subplot(gs[0, 2])
    ax2.axis('off')
    lines = [
        f'Distance: {format_distance(summary.total_distance)}',
        f'Total time: {format_duration(summary.total_time)}',
        f'Moving time: {format_duration(summary.moving_time)}',
        f'Avg speed: {format_speed(summary.avg_speed)}',
        f'Moving avg: {format_speed(summary.moving_avg_speed)}',
        f'Max speed: {format_speed(summary.max_speed)}',
        f'Elevation gain: {summary.elevation_gain:.0f} m',
        f'Twistiness: {summary.twistiness_score:.0f} °/km',
        f'Hard accel / brake: {summary.hard_acceleration_count} / {summary.hard_braking_count}',
    ]
    ax2.text(0.0, 1.0, '\n'.join(lines), transform=ax2.transAxes, va='top', fontsize=11,
             family='monospace')

    # Motion time split
    ax3 = fig.add_subplot(gs[1, 2])
    sizes = [summary.time_accelerating, summary.time_braking, summary.time_cruising]
    labels = ['Accelerating', 'Braking', 'Cruising']
    colors = [EVENT_COLORS[EventKind.ACCEL], EVENT_COLORS[EventKind.BRAKE], '#95a5a6']
    non_zero = [(s, l, c) for s, l, c in zip(sizes, labels, colors) if s > 0]
    if non_zero:
        sizes, labels, colors = zip(*non_zero)
        ax3.pie(sizes, labels=labels, colors=colors, autopct='%1.1f%%', startangle=90)
    ax3.set_title('Motion')

    # Speed over time
    ax4 = fig.add_subplot(gs[2, 0:2])
    segments = TrackAnalyzer(config).analyze_segments(samples)
    ax4.plot(_elapsed_minutes(segments), segments['smoothed_speed_kmh'],
             color='#3498db', linewidth=1)
    ax4.set_xlabel('Time (min)')
    ax4.set_ylabel('Speed (km/h)')
    ax4.set_title('Speed')
    ax4.grid(True, alpha=0.3)

    # Speed distribution
    ax5 = fig.add_subplot(gs[2, 2])
    plot_speed_distribution(summary, ax=ax5)
    ax5.tick_params(axis='x', labelrotation=45)

    fig.suptitle(f'Trajectory Statistics Report ({summary.point_count} points)',
                 fontsize=14, fontweight='bold')

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig
