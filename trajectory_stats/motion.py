"""
Hard acceleration and braking detection.

Detection runs on the smoothed acceleration series in five passes:

1. Segments around GPS dropouts (unusually long time gaps) and around clamped
   speed estimates are invalidated within a time buffer.
2. Runs of valid segments beyond the hard thresholds become candidates.
3. Braking candidates close together in time are merged into one cluster.
4. An acceleration candidate and a braking cluster close together in time are
   treated as a curvature/noise artifact and both are discarded.
5. Survivors are reported; everything invalid or discarded is zeroed in the
   authoritative acceleration series so time profiles agree with the counts.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np

from .config import DEFAULT_CONFIG, StatsConfig
from .summary import Event, EventKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MotionCandidate:
    """A run of consecutive segments beyond a hard threshold."""
    kind: EventKind
    first_segment: int
    last_segment: int  # inclusive
    time_s: float  # time of the later sample of the first segment
    magnitude: float  # signed acceleration at run entry (m/s²)

    @property
    def sample_index(self) -> int:
        return self.first_segment + 1


@dataclass
class MotionResult:
    """Surviving events plus the authoritative acceleration series."""
    accel_events: List[Event] = field(default_factory=list)
    brake_events: List[Event] = field(default_factory=list)
    acceleration: np.ndarray = field(default_factory=lambda: np.zeros(0))
    valid: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=bool))
    cancelled_pairs: int = 0


def segment_midpoints(time_s: np.ndarray) -> np.ndarray:
    """Temporal midpoint of each segment, NaN where a timestamp is missing."""
    if len(time_s) < 2:
        return np.zeros(0)
    return (time_s[:-1] + time_s[1:]) / 2


def invalid_mask(
    deltas: np.ndarray,
    clamped: np.ndarray,
    time_s: np.ndarray,
    config: StatsConfig = DEFAULT_CONFIG,
) -> np.ndarray:
    """
    Mark segments whose acceleration cannot be trusted.

    A segment is flagged when its time delta exceeds both the configured
    percentile of all deltas and the absolute gap floor, or when its speed was
    clamped. Each flagged segment invalidates every segment whose midpoint
    falls within invalid_buffer_s of the flagged segment's time span, so a long
    dropout is buffered from both of its edges.

    Args:
        deltas: Per-segment time delta (s)
        clamped: Per-segment clamped flag from the robust speed estimator
        time_s: Per-sample elapsed time (s), NaN where missing
        config: Thresholds

    Returns:
        Boolean array, True for invalid segments
    """
    n = len(deltas)
    if n == 0:
        return np.zeros(0, dtype=bool)

    threshold = np.percentile(deltas, config.gap_percentile)
    gaps = (deltas > threshold) & (deltas > config.gap_min_s)
    flagged = gaps | np.asarray(clamped, dtype=bool)
    invalid = flagged.copy()

    midpoints = segment_midpoints(time_s)
    order = np.argsort(midpoints, kind='mergesort')  # NaN sorts last
    sorted_mid = midpoints[order]

    for idx in np.flatnonzero(flagged):
        span_start, span_end = time_s[idx], time_s[idx + 1]
        if np.isnan(span_start) or np.isnan(span_end):
            continue
        lo = np.searchsorted(sorted_mid, span_start - config.invalid_buffer_s, side='left')
        hi = np.searchsorted(sorted_mid, span_end + config.invalid_buffer_s, side='right')
        invalid[order[lo:hi]] = True

    logger.debug(
        "Motion validity: %d gaps, %d clamped, %d segments invalidated",
        int(gaps.sum()), int(np.sum(clamped)), int(invalid.sum()),
    )
    return invalid


def find_candidates(
    acceleration: np.ndarray,
    valid: np.ndarray,
    time_s: np.ndarray,
    kind: EventKind,
    config: StatsConfig = DEFAULT_CONFIG,
) -> List[MotionCandidate]:
    """Entries of contiguous valid runs beyond the hard threshold for kind."""
    if kind == EventKind.ACCEL:
        beyond = acceleration > config.hard_accel_mps2
    else:
        beyond = acceleration < config.hard_brake_mps2
    active = beyond & valid

    candidates = []
    i = 0
    n = len(active)
    while i < n:
        if not active[i]:
            i += 1
            continue
        start = i
        while i < n and active[i]:
            i += 1
        candidates.append(MotionCandidate(
            kind=kind,
            first_segment=start,
            last_segment=i - 1,
            time_s=float(time_s[start + 1]),
            magnitude=float(acceleration[start]),
        ))
    return candidates


def cluster_brakes(
    candidates: List[MotionCandidate],
    config: StatsConfig = DEFAULT_CONFIG,
) -> List[List[MotionCandidate]]:
    """Merge braking candidates that follow each other within brake_cluster_s."""
    clusters: List[List[MotionCandidate]] = []
    for candidate in candidates:
        if clusters and candidate.time_s - clusters[-1][-1].time_s <= config.brake_cluster_s:
            clusters[-1].append(candidate)
        else:
            clusters.append([candidate])
    return clusters


def cluster_representative(cluster: List[MotionCandidate]) -> MotionCandidate:
    """Strongest member of a braking cluster (first one on ties)."""
    return max(cluster, key=lambda c: abs(c.magnitude))


def cancel_pairs(
    accels: List[MotionCandidate],
    brake_reps: List[MotionCandidate],
    config: StatsConfig = DEFAULT_CONFIG,
) -> Tuple[List[int], List[int]]:
    """
    Greedy accel/brake cancellation.

    Each acceleration candidate, in order, is paired with the first unused
    braking representative within cancel_window_s. Every candidate is used at
    most once.

    Returns:
        Tuple of (cancelled accel indices, cancelled brake representative indices)
    """
    used = [False] * len(brake_reps)
    cancelled_accels = []
    cancelled_brakes = []

    for a_idx, accel in enumerate(accels):
        for b_idx, brake in enumerate(brake_reps):
            if used[b_idx]:
                continue
            if abs(accel.time_s - brake.time_s) <= config.cancel_window_s:
                used[b_idx] = True
                cancelled_accels.append(a_idx)
                cancelled_brakes.append(b_idx)
                break

    return cancelled_accels, cancelled_brakes


def _zero_run(series: np.ndarray, candidate: MotionCandidate) -> None:
    series[candidate.first_segment:candidate.last_segment + 1] = 0.0


def detect_motion_events(
    smoothed_accel: np.ndarray,
    deltas: np.ndarray,
    clamped: np.ndarray,
    time_s: np.ndarray,
    lat: np.ndarray,
    lon: np.ndarray,
    config: StatsConfig = DEFAULT_CONFIG,
) -> MotionResult:
    """
    Detect hard acceleration and braking events.

    Args:
        smoothed_accel: Per-segment smoothed acceleration (m/s²)
        deltas: Per-segment time delta (s)
        clamped: Per-segment clamped flag
        time_s: Per-sample elapsed time (s)
        lat, lon: Per-sample coordinates; events sit on the later sample
        config: Thresholds

    Returns:
        MotionResult with surviving events and the authoritative series
    """
    invalid = invalid_mask(deltas, clamped, time_s, config)
    valid = ~invalid
    acceleration = np.where(invalid, 0.0, np.asarray(smoothed_accel, dtype=float))

    accels = find_candidates(acceleration, valid, time_s, EventKind.ACCEL, config)
    brakes = find_candidates(acceleration, valid, time_s, EventKind.BRAKE, config)
    clusters = cluster_brakes(brakes, config)
    reps = [cluster_representative(cluster) for cluster in clusters]

    cancelled_accels, cancelled_brakes = cancel_pairs(accels, reps, config)
    for a_idx in cancelled_accels:
        _zero_run(acceleration, accels[a_idx])
    for b_idx in cancelled_brakes:
        for member in clusters[b_idx]:
            _zero_run(acceleration, member)

    cancelled_accel_set = set(cancelled_accels)
    cancelled_brake_set = set(cancelled_brakes)

    accel_events = [
        Event(
            kind=EventKind.ACCEL,
            lat=float(lat[c.sample_index]),
            lon=float(lon[c.sample_index]),
            index=c.sample_index,
            magnitude=c.magnitude,
        )
        for i, c in enumerate(accels) if i not in cancelled_accel_set
    ]
    brake_events = [
        Event(
            kind=EventKind.BRAKE,
            lat=float(lat[c.sample_index]),
            lon=float(lon[c.sample_index]),
            index=c.sample_index,
            magnitude=abs(c.magnitude),
        )
        for i, c in enumerate(reps) if i not in cancelled_brake_set
    ]

    logger.debug(
        "Motion events: %d accel, %d brake survived, %d pairs cancelled",
        len(accel_events), len(brake_events), len(cancelled_accels),
    )
    return MotionResult(
        accel_events=accel_events,
        brake_events=brake_events,
        acceleration=acceleration,
        valid=valid,
        cancelled_pairs=len(cancelled_accels),
    )


def motion_time_buckets(
    acceleration: np.ndarray,
    deltas: np.ndarray,
    moving: np.ndarray,
    config: StatsConfig = DEFAULT_CONFIG,
) -> Tuple[float, float, float]:
    """
    Split moving time into accelerating, braking and cruising.

    Returns:
        Tuple of (time_accelerating, time_braking, time_cruising) in seconds
    """
    accelerating = braking = cruising = 0.0
    for accel, dt, is_moving in zip(acceleration, deltas, moving):
        if not is_moving:
            continue
        if accel > config.motion_accel_mps2:
            accelerating += dt
        elif accel < -config.motion_accel_mps2:
            braking += dt
        else:
            cruising += dt
    return accelerating, braking, cruising


def turbulence_score(acceleration: np.ndarray) -> float:
    """Mean absolute change of acceleration between segments, scaled by 10."""
    n = len(acceleration)
    if n == 0:
        return 0.0
    return float(np.sum(np.abs(np.diff(acceleration))) / n * 10)
