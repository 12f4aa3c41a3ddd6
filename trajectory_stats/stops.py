"""
Stop detection with a minimum-duration hysteresis.

A stretch of consecutive slow segments only becomes a stop once it has lasted
stop_min_duration_s; shorter slow stretches are treated as moving.
"""

from dataclasses import dataclass, field
from typing import List

import numpy as np

from .config import DEFAULT_CONFIG, StatsConfig
from .summary import Event, EventKind


@dataclass
class SlowRun:
    """Consecutive slow segments that may turn into a stop."""
    start: int = -1
    duration: float = 0.0  # seconds

    @property
    def open(self) -> bool:
        return self.start >= 0


@dataclass
class StopResult:
    """Counted stops and the per-segment stopped mask."""
    stops: List[Event] = field(default_factory=list)
    stopped_time: float = 0.0  # seconds, counted stops only
    stopped: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=bool))

    def close(self, run: SlowRun, end: int, lat: np.ndarray, lon: np.ndarray,
              config: StatsConfig = DEFAULT_CONFIG) -> None:
        """Count run as a stop if it lasted long enough; end is exclusive."""
        if run.duration < config.stop_min_duration_s:
            return
        start = run.start
        self.stops.append(Event(
            kind=EventKind.STOP, lat=float(lat[start]), lon=float(lon[start]), index=start,
        ))
        self.stopped_time += run.duration
        self.stopped[start:end] = True


def detect_stops(
    smoothed_speeds: np.ndarray,
    deltas: np.ndarray,
    lat: np.ndarray,
    lon: np.ndarray,
    config: StatsConfig = DEFAULT_CONFIG,
) -> StopResult:
    """
    Find sustained low-speed intervals.

    Args:
        smoothed_speeds: Per-segment smoothed speed (km/h)
        deltas: Per-segment time delta (s)
        lat, lon: Per-sample coordinates; a stop sits on its first sample
        config: Thresholds

    Returns:
        StopResult in ascending sample order
    """
    n = len(smoothed_speeds)
    result = StopResult(stopped=np.zeros(n, dtype=bool))
    run = SlowRun()

    for i in range(n):
        if smoothed_speeds[i] < config.stop_speed_kmh:
            if not run.open:
                run = SlowRun(start=i)
            run.duration += deltas[i]
        elif run.open:
            result.close(run, i, lat, lon, config)
            run = SlowRun()

    if run.open:
        result.close(run, n, lat, lon, config)

    return result
