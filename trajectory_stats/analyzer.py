"""
Trajectory statistics pipeline.

Runs every stage over one complete sample sequence and assembles the
immutable StatsSummary:

    samples -> robust speeds -> smoothing -> {turns, motion events, terrain,
    stops, speed distribution} -> summary

The analyzer keeps no state between calls; analysing a sub-range is simply
analysing the sliced sample list.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .config import DEFAULT_CONFIG, StatsConfig
from .coordinates import segment_bearings
from .distribution import build_speed_distribution
from .motion import MotionResult, detect_motion_events, motion_time_buckets, turbulence_score
from .samples import Sample, SampleArrays, clamp_range, samples_from_dataframe, to_arrays
from .smoothing import moving_average
from .speed import compute_robust_segments, raw_accelerations
from .stops import detect_stops
from .summary import StatsSummary, empty_summary
from .terrain import classify_terrain, segment_gradients
from .turns import TurnClassifier, moving_mask

logger = logging.getLogger(__name__)


@dataclass
class SegmentSeries:
    """Per-segment arrays shared by the analysis stages."""
    distance_km: np.ndarray
    time_delta_s: np.ndarray
    speed_kmh: np.ndarray  # robust
    smoothed_speed_kmh: np.ndarray
    clamped: np.ndarray
    bearing_deg: np.ndarray  # of the smoothed path
    smoothed_accel: np.ndarray
    moving: np.ndarray  # trailing-speed gate used by the turn classifier


def _finite(value: float) -> float:
    return float(value) if math.isfinite(value) else 0.0


class TrackAnalyzer:
    """
    Computes a StatsSummary for trajectories.

    All thresholds come from the StatsConfig passed at construction, so the
    same analyzer can be reused for any number of sequences.
    """

    def __init__(self, config: Optional[StatsConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.turn_classifier = TurnClassifier(self.config)

    def segment_series(self, arrays: SampleArrays) -> SegmentSeries:
        """Robust speeds and the smoothed series derived from them."""
        cfg = self.config
        segments = compute_robust_segments(arrays, cfg)

        distances = np.array([s.distance_km for s in segments], dtype=float)
        deltas = np.array([s.time_delta_s for s in segments], dtype=float)
        speeds = np.array([s.speed_kmh for s in segments], dtype=float)
        clamped = np.array([s.clamped for s in segments], dtype=bool)

        smooth_lat = moving_average(arrays.lat, cfg.coordinate_window)
        smooth_lon = moving_average(arrays.lon, cfg.coordinate_window)

        accel = raw_accelerations(speeds, deltas)

        return SegmentSeries(
            distance_km=distances,
            time_delta_s=deltas,
            speed_kmh=speeds,
            smoothed_speed_kmh=moving_average(speeds, cfg.speed_window),
            clamped=clamped,
            bearing_deg=segment_bearings(smooth_lat, smooth_lon),
            smoothed_accel=moving_average(accel, cfg.accel_window),
            moving=moving_mask(speeds, cfg),
        )

    def _motion(self, arrays: SampleArrays, series: SegmentSeries) -> MotionResult:
        return detect_motion_events(
            series.smoothed_accel,
            series.time_delta_s,
            series.clamped,
            arrays.time_s,
            arrays.lat,
            arrays.lon,
            self.config,
        )

    def analyze(self, samples: Sequence[Sample]) -> StatsSummary:
        """
        Compute the full statistics summary of a trajectory.

        Args:
            samples: Ordered samples; fewer than two yield an all-zero summary

        Returns:
            StatsSummary
        """
        cfg = self.config
        start_time = samples[0].timestamp if len(samples) > 0 else None
        if len(samples) < 2:
            logger.debug("Sequence of %d samples is too short to analyse", len(samples))
            return empty_summary(point_count=len(samples), start_time=start_time)

        logger.debug("Analysing %d samples", len(samples))
        arrays = to_arrays(samples)
        series = self.segment_series(arrays)

        total_distance = float(np.sum(series.distance_km))
        total_time = 0.0
        if not (np.isnan(arrays.time_s[0]) or np.isnan(arrays.time_s[-1])):
            total_time = float(arrays.time_s[-1] - arrays.time_s[0])

        # Stops
        stops = detect_stops(
            series.smoothed_speed_kmh, series.time_delta_s, arrays.lat, arrays.lon, cfg
        )
        moving_time = max(0.0, total_time - stops.stopped_time)

        # Motion
        motion = self._motion(arrays, series)
        time_accel, time_brake, time_cruise = motion_time_buckets(
            motion.acceleration, series.time_delta_s, ~stops.stopped, cfg
        )
        accel_brake_ratio = time_accel / time_brake if time_brake > 0 else time_accel

        below_cap = series.smoothed_speed_kmh[series.smoothed_speed_kmh < cfg.display_speed_cap_kmh]
        max_speed = float(below_cap.max()) if len(below_cap) > 0 else 0.0

        # Geometry
        turns = self.turn_classifier.classify(
            series.bearing_deg, series.distance_km, series.moving, arrays.lat, arrays.lon
        )

        # Terrain
        terrain = classify_terrain(
            arrays.elevation, series.distance_km, series.time_delta_s, cfg
        )

        distribution = build_speed_distribution(
            series.smoothed_speed_kmh, series.time_delta_s, series.distance_km, cfg
        )

        return StatsSummary(
            point_count=len(samples),
            start_time=start_time,
            total_distance=_finite(total_distance),
            total_time=_finite(total_time),
            moving_time=_finite(moving_time),
            stopped_time=_finite(stops.stopped_time),
            stop_count=len(stops.stops),
            avg_speed=_finite(total_distance / (total_time / 3600) if total_time > 0 else 0.0),
            moving_avg_speed=_finite(
                total_distance / (moving_time / 3600) if moving_time > 0 else 0.0
            ),
            max_speed=_finite(max_speed),
            clamped_segment_count=int(series.clamped.sum()),
            hard_acceleration_count=len(motion.accel_events),
            hard_braking_count=len(motion.brake_events),
            time_accelerating=_finite(time_accel),
            time_braking=_finite(time_brake),
            time_cruising=_finite(time_cruise),
            accel_brake_ratio=_finite(accel_brake_ratio),
            turbulence_score=_finite(turbulence_score(motion.acceleration)),
            elevation_gain=_finite(terrain.elevation_gain),
            elevation_loss=_finite(terrain.elevation_loss),
            max_elevation=_finite(terrain.max_elevation),
            min_elevation=_finite(terrain.min_elevation),
            steepest_climb=_finite(terrain.steepest_climb),
            steepest_descent=_finite(terrain.steepest_descent),
            time_climbing=_finite(terrain.time_climbing),
            time_descending=_finite(terrain.time_descending),
            time_level=_finite(terrain.time_level),
            hilliness_score=_finite(terrain.hilliness(total_distance)),
            climb_distance=_finite(terrain.climb_distance),
            total_heading_change=_finite(turns.total_heading_change),
            tight_turns_count=len(turns.tight_turns),
            hairpin_count=len(turns.hairpins),
            twistiness_score=_finite(turns.twistiness(total_distance)),
            longest_straight_section=_finite(turns.longest_straight),
            median_straight_length=_finite(turns.median_straight),
            percent_straight=_finite(turns.percent_straight(total_distance)),
            stop_points=tuple(stops.stops),
            tight_turn_points=tuple(turns.tight_turns),
            hairpin_points=tuple(turns.hairpins),
            hard_accel_points=tuple(motion.accel_events),
            hard_brake_points=tuple(motion.brake_events),
            speed_distribution=tuple(distribution),
        )

    def analyze_range(self, samples: Sequence[Sample], start: int, end: int) -> StatsSummary:
        """
        Analyse the inclusive index range [start, end] of a trajectory.

        The range is clamped to the sequence bounds; an inverted or
        out-of-bounds range yields an empty summary. Event indices in the
        result are relative to start.
        """
        lo, hi = clamp_range(len(samples), start, end)
        if lo > hi:
            logger.debug("Range [%d, %d] selects no samples", start, end)
            return empty_summary()
        return self.analyze(list(samples[lo:hi + 1]))

    def analyze_segments(self, samples: Sequence[Sample]) -> pd.DataFrame:
        """
        Per-segment series for map and chart rendering.

        Returns:
            DataFrame with one row per segment: distance_km, time_delta_s,
            speed_kmh, smoothed_speed_kmh, acceleration_mps2 (authoritative),
            gradient_pct, bearing_deg, clamped, valid
        """
        columns = [
            'distance_km', 'time_delta_s', 'speed_kmh', 'smoothed_speed_kmh',
            'acceleration_mps2', 'gradient_pct', 'bearing_deg', 'clamped', 'valid',
        ]
        if len(samples) < 2:
            return pd.DataFrame(columns=columns)

        cfg = self.config
        arrays = to_arrays(samples)
        series = self.segment_series(arrays)
        motion = self._motion(arrays, series)
        smoothed_elevation = moving_average(arrays.elevation, cfg.elevation_window)
        gradients = moving_average(
            segment_gradients(smoothed_elevation, series.distance_km, cfg), cfg.gradient_window
        )

        return pd.DataFrame({
            'distance_km': series.distance_km,
            'time_delta_s': series.time_delta_s,
            'speed_kmh': series.speed_kmh,
            'smoothed_speed_kmh': series.smoothed_speed_kmh,
            'acceleration_mps2': motion.acceleration,
            'gradient_pct': gradients,
            'bearing_deg': series.bearing_deg,
            'clamped': series.clamped,
            'valid': motion.valid,
        }, columns=columns)


def calculate_stats(
    samples: Sequence[Sample],
    config: Optional[StatsConfig] = None,
) -> StatsSummary:
    """
    Convenience function to compute the statistics of a trajectory.

    Args:
        samples: Ordered samples
        config: Optional threshold overrides

    Returns:
        StatsSummary
    """
    return TrackAnalyzer(config).analyze(samples)


def calculate_stats_range(
    samples: Sequence[Sample],
    start: int,
    end: int,
    config: Optional[StatsConfig] = None,
) -> StatsSummary:
    """Statistics of the inclusive sample range [start, end]."""
    return TrackAnalyzer(config).analyze_range(samples, start, end)


def calculate_stats_from_dataframe(
    df: pd.DataFrame,
    time_col: str = 'timestamp',
    lat_col: str = 'latitude',
    lon_col: str = 'longitude',
    alt_col: str = 'altitude',
    config: Optional[StatsConfig] = None,
) -> StatsSummary:
    """Statistics of a trajectory DataFrame (see samples_from_dataframe)."""
    samples = samples_from_dataframe(df, time_col, lat_col, lon_col, alt_col)
    return TrackAnalyzer(config).analyze(samples)


def analyze_segments(
    samples: Sequence[Sample],
    config: Optional[StatsConfig] = None,
) -> pd.DataFrame:
    """Per-segment series of a trajectory (see TrackAnalyzer.analyze_segments)."""
    return TrackAnalyzer(config).analyze_segments(samples)
