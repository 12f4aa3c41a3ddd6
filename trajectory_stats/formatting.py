"""
Display helpers for summary values.
"""

from typing import List, Sequence, Tuple

from .samples import Sample


def format_duration(seconds: float) -> str:
    """Format seconds as '1h 2m 3s', '2m 3s' or '3s'."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_distance(km: float) -> str:
    if km < 1:
        return f"{km * 1000:.0f} m"
    return f"{km:.2f} km"


def format_speed(kmh: float) -> str:
    return f"{kmh:.1f} km/h"


def preview_polyline(samples: Sequence[Sample], target_count: int = 100) -> List[Tuple[float, float]]:
    """
    Downsample a track to about target_count (lat, lon) pairs for thumbnails.

    Sampling is uniform by index; the last sample is always included.
    """
    if len(samples) <= target_count:
        return [(s.latitude, s.longitude) for s in samples]

    step = len(samples) / target_count
    sampled = []
    for i in range(target_count):
        s = samples[min(int(i * step), len(samples) - 1)]
        sampled.append((s.latitude, s.longitude))

    last = samples[-1]
    sampled.append((last.latitude, last.longitude))
    return sampled
