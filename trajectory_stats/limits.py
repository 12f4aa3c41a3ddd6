"""
"What if" speed-limit calculations.

Independent of the main pipeline: works on the raw segment speeds and answers
how long the trajectory would have taken had it never exceeded a limit.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .config import DEFAULT_CONFIG, StatsConfig
from .coordinates import segment_distances
from .samples import Sample, to_arrays
from .speed import time_deltas
from .summary import SpeedBucket


@dataclass(frozen=True)
class LimitedStats:
    """Original vs. simulated time when speed is capped."""
    original_time: float  # seconds
    simulated_time: float  # seconds
    time_added: float  # seconds
    original_avg_speed: float  # km/h
    new_avg_speed: float  # km/h
    percent_slower: float
    capped_segments: int
    total_segments: int


def calculate_limited_stats(
    samples: Sequence[Sample],
    speed_limit_kmh: float,
    config: StatsConfig = DEFAULT_CONFIG,
) -> Optional[LimitedStats]:
    """
    Simulate the trajectory with speed capped at speed_limit_kmh.

    Segments faster than the limit keep their distance but take
    distance / limit instead of their recorded time. Segments above the
    display sanity cap are GPS glitches and keep their recorded time.

    Args:
        samples: Ordered samples
        speed_limit_kmh: Cap to simulate
        config: Thresholds (display_speed_cap_kmh)

    Returns:
        LimitedStats, or None if the limit is not positive or the samples
        carry no timed distance
    """
    if len(samples) < 2 or speed_limit_kmh <= 0:
        return None

    arrays = to_arrays(samples)
    distances = segment_distances(arrays.lat, arrays.lon)
    deltas = time_deltas(arrays.time_s)

    total_distance = float(np.sum(distances))
    original_time = 0.0
    simulated_time = 0.0
    capped_segments = 0
    total_segments = 0

    for distance_km, dt in zip(distances, deltas):
        if dt <= 0:
            continue
        original_time += dt
        total_segments += 1

        speed_kmh = distance_km / (dt / 3600.0)
        if speed_limit_kmh < speed_kmh < config.display_speed_cap_kmh:
            simulated_time += distance_km / speed_limit_kmh * 3600.0
            capped_segments += 1
        else:
            simulated_time += dt

    if original_time == 0 or total_distance == 0:
        return None

    original_avg = total_distance / (original_time / 3600.0)
    new_avg = total_distance / (simulated_time / 3600.0)

    return LimitedStats(
        original_time=original_time,
        simulated_time=simulated_time,
        time_added=simulated_time - original_time,
        original_avg_speed=original_avg,
        new_avg_speed=new_avg,
        percent_slower=(original_avg - new_avg) / original_avg * 100 if original_avg > 0 else 0.0,
        capped_segments=capped_segments,
        total_segments=total_segments,
    )


def collapse_distribution_at_limit(
    buckets: Sequence[SpeedBucket],
    speed_limit_kmh: float,
    bucket_size_kmh: float = DEFAULT_CONFIG.bucket_size_kmh,
) -> List[SpeedBucket]:
    """
    Fold every bucket at or above a speed limit into the bucket below it.

    The folded distance is retimed as if driven at the limit. Buckets are
    returned unchanged when the limit is not positive.
    """
    if speed_limit_kmh <= 0 or not buckets:
        return list(buckets)

    limit_bucket_min = speed_limit_kmh - bucket_size_kmh
    kept = [b for b in buckets if b.min_speed < speed_limit_kmh]
    over_distance = sum(b.distance_km for b in buckets if b.min_speed >= speed_limit_kmh)
    over_time_min = over_distance / speed_limit_kmh * 60.0

    if over_distance <= 0:
        return kept

    for i, bucket in enumerate(kept):
        if bucket.min_speed == limit_bucket_min:
            kept[i] = SpeedBucket(
                range_label=bucket.range_label,
                min_speed=bucket.min_speed,
                time_min=bucket.time_min + over_time_min,
                distance_km=bucket.distance_km + over_distance,
            )
            return kept

    kept.append(SpeedBucket(
        range_label=f"{limit_bucket_min:g}-{speed_limit_kmh:g}",
        min_speed=limit_bucket_min,
        time_min=over_time_min,
        distance_km=over_distance,
    ))
    kept.sort(key=lambda b: b.min_speed)
    return kept
