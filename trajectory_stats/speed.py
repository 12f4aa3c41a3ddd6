"""
Robust speed estimation.

GPS jitter produces position jumps that imply physically impossible speeds.
Each segment's speed is bounded by a dynamic acceleration envelope: a vehicle
can launch at up to 9 m/s² from standstill, losing 1 m/s² of capability per
25 km/h, down to a 2 m/s² floor. Speeds above the absolute sanity ceiling fall
back to the previous accepted speed.
"""

import logging
from dataclasses import dataclass
from typing import List

import numpy as np

from .config import DEFAULT_CONFIG, StatsConfig
from .coordinates import segment_distances
from .samples import SampleArrays

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RobustSegment:
    """Speed estimate for the segment between samples i and i + 1."""
    distance_km: float
    time_delta_s: float
    speed_kmh: float
    clamped: bool = False


def max_acceleration(prev_speed_kmh: float, config: StatsConfig = DEFAULT_CONFIG) -> float:
    """Maximum plausible acceleration (m/s²) given the previous speed."""
    return max(
        config.min_accel_mps2,
        config.launch_accel_mps2 - prev_speed_kmh / config.accel_decay_kmh,
    )


def time_deltas(time_s: np.ndarray) -> np.ndarray:
    """Per-segment time delta in seconds, 0 where either timestamp is missing."""
    if len(time_s) < 2:
        return np.zeros(0)
    dt = np.diff(time_s)
    return np.where(np.isnan(dt), 0.0, dt)


def compute_robust_segments(
    arrays: SampleArrays,
    config: StatsConfig = DEFAULT_CONFIG,
) -> List[RobustSegment]:
    """
    Estimate a physically bounded speed for every consecutive sample pair.

    Args:
        arrays: Sample columns from samples.to_arrays()
        config: Thresholds

    Returns:
        One RobustSegment per consecutive pair (len(arrays) - 1 entries)
    """
    distances = segment_distances(arrays.lat, arrays.lon)
    deltas = time_deltas(arrays.time_s)

    segments = []
    prev_speed_mps = 0.0

    for distance_km, dt in zip(distances, deltas):
        speed_kmh = 0.0
        clamped = False

        if dt > 0:
            raw_speed_kmh = distance_km / (dt / 3600.0)
            raw_speed_mps = raw_speed_kmh / 3.6

            # Envelope is evaluated at the previous speed for causality
            limit = max_acceleration(prev_speed_mps * 3.6, config)
            accel = (raw_speed_mps - prev_speed_mps) / dt

            if accel > limit:
                speed_kmh = (prev_speed_mps + limit * dt) * 3.6
                clamped = True
            else:
                speed_kmh = raw_speed_kmh

            if speed_kmh > config.max_speed_kmh:
                speed_kmh = prev_speed_mps * 3.6
                clamped = True

        segments.append(RobustSegment(
            distance_km=float(distance_km),
            time_delta_s=float(dt),
            speed_kmh=float(speed_kmh),
            clamped=clamped,
        ))
        prev_speed_mps = speed_kmh / 3.6

    logger.debug(
        "Estimated %d robust segments (%d clamped)",
        len(segments), sum(seg.clamped for seg in segments),
    )
    return segments


def raw_accelerations(speeds_kmh: np.ndarray, deltas: np.ndarray) -> np.ndarray:
    """
    Acceleration (m/s²) between consecutive segment speeds.

    The first segment and segments without a positive time delta get 0.
    """
    speeds_kmh = np.asarray(speeds_kmh, dtype=float)
    accel = np.zeros(len(speeds_kmh))
    for i in range(1, len(speeds_kmh)):
        if deltas[i] > 0:
            accel[i] = (speeds_kmh[i] / 3.6 - speeds_kmh[i - 1] / 3.6) / deltas[i]
    return accel
