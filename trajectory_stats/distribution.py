"""
Speed distribution histogram.

Time and distance are accumulated per fixed-width speed band. The top of the
histogram is trimmed: bands above the highest one holding at least
bucket_min_duration_s are GPS noise and dropped, while every band below it is
reported (zero-filled) so the histogram range is continuous.
"""

from typing import Dict, List

import numpy as np

from .config import DEFAULT_CONFIG, StatsConfig
from .summary import SpeedBucket


def _format_edge(value: float) -> str:
    return f"{value:g}"


def build_speed_distribution(
    smoothed_speeds: np.ndarray,
    deltas: np.ndarray,
    distances_km: np.ndarray,
    config: StatsConfig = DEFAULT_CONFIG,
) -> List[SpeedBucket]:
    """
    Bucket smoothed speeds into bands of bucket_size_kmh.

    Args:
        smoothed_speeds: Per-segment smoothed robust speed (km/h)
        deltas: Per-segment time delta (s)
        distances_km: Per-segment distance
        config: Thresholds

    Returns:
        Buckets in ascending speed order, starting at 0
    """
    size = config.bucket_size_kmh
    times: Dict[int, float] = {}  # seconds
    distances: Dict[int, float] = {}
    max_index = 0

    for speed, dt, distance in zip(smoothed_speeds, deltas, distances_km):
        if speed < config.bucket_min_speed_kmh:
            continue
        index = int(np.floor(speed / size))
        times[index] = times.get(index, 0.0) + dt
        distances[index] = distances.get(index, 0.0) + distance
        max_index = max(max_index, index)

    buckets = []
    found_top = False
    for index in range(max_index, -1, -1):
        duration = times.get(index, 0.0)
        if not found_top:
            if duration < config.bucket_min_duration_s:
                continue
            found_top = True

        low = index * size
        buckets.append(SpeedBucket(
            range_label=f"{_format_edge(low)}-{_format_edge(low + size)}",
            min_speed=low,
            time_min=duration / 60.0,
            distance_km=distances.get(index, 0.0),
        ))

    buckets.reverse()
    return buckets
