"""
Elevation and gradient statistics.

Gain, loss and the terrain time buckets use smoothed elevation so barometric
and GPS altitude noise does not inflate them. Steepest grades use the raw
deltas but only over segments long and steep enough to be real.
"""

import logging
from dataclasses import dataclass

import numpy as np

from .config import DEFAULT_CONFIG, StatsConfig
from .smoothing import moving_average

logger = logging.getLogger(__name__)


@dataclass
class TerrainResult:
    """Elevation-derived metrics of one trajectory."""
    elevation_gain: float = 0.0  # meters
    elevation_loss: float = 0.0
    max_elevation: float = 0.0
    min_elevation: float = 0.0
    steepest_climb: float = 0.0  # percent
    steepest_descent: float = 0.0  # percent (negative)
    time_climbing: float = 0.0  # seconds
    time_descending: float = 0.0
    time_level: float = 0.0
    climb_distance: float = 0.0  # km

    def hilliness(self, total_distance_km: float) -> float:
        """Meters of elevation gained per km."""
        return self.elevation_gain / total_distance_km if total_distance_km > 0 else 0.0


def segment_gradients(
    smoothed_elevation: np.ndarray,
    distances_km: np.ndarray,
    config: StatsConfig = DEFAULT_CONFIG,
) -> np.ndarray:
    """
    Per-segment gradient (%) from smoothed elevation.

    Segments shorter than gradient_min_distance_m, or lacking elevation on
    either end, get 0.
    """
    if len(smoothed_elevation) < 2:
        return np.zeros(0)
    ele_diff = np.diff(smoothed_elevation)
    distance_m = np.asarray(distances_km, dtype=float) * 1000.0
    usable = ~np.isnan(ele_diff) & (distance_m > config.gradient_min_distance_m)
    gradients = np.zeros(len(ele_diff))
    gradients[usable] = ele_diff[usable] / distance_m[usable] * 100
    return gradients


def classify_terrain(
    elevation: np.ndarray,
    distances_km: np.ndarray,
    deltas: np.ndarray,
    config: StatsConfig = DEFAULT_CONFIG,
) -> TerrainResult:
    """
    Compute elevation gain/loss, extremes, steepest grades and terrain time.

    Args:
        elevation: Per-sample raw elevation (m), NaN where missing
        distances_km: Per-segment distance
        deltas: Per-segment time delta (s)
        config: Thresholds

    Returns:
        TerrainResult; all zeros when no sample carries elevation
    """
    elevation = np.asarray(elevation, dtype=float)
    if len(elevation) < 2 or np.all(np.isnan(elevation)):
        return TerrainResult()

    smoothed = moving_average(elevation, config.elevation_window)
    result = TerrainResult(
        max_elevation=float(np.nanmax(smoothed)),
        min_elevation=float(np.nanmin(smoothed)),
    )

    smoothed_diff = np.diff(smoothed)
    rising = smoothed_diff > 0
    falling = smoothed_diff < 0
    result.elevation_gain = float(np.sum(smoothed_diff[rising]))
    result.elevation_loss = float(-np.sum(smoothed_diff[falling]))

    # Steepest grades from raw deltas over meaningful segments only
    raw_diff = np.diff(elevation)
    distance_m = np.asarray(distances_km, dtype=float) * 1000.0
    steep = (
        ~np.isnan(raw_diff)
        & (distance_m > config.steep_min_distance_m)
        & (np.abs(np.nan_to_num(raw_diff)) > config.steep_min_elevation_m)
    )
    if np.any(steep):
        grades = raw_diff[steep] / distance_m[steep] * 100
        result.steepest_climb = float(max(0.0, grades.max()))
        result.steepest_descent = float(min(0.0, grades.min()))

    gradients = moving_average(
        segment_gradients(smoothed, distances_km, config), config.gradient_window
    )
    for grade, dt, distance_km in zip(gradients, deltas, distances_km):
        if grade > config.climb_grade_pct:
            result.time_climbing += dt
            result.climb_distance += distance_km
        elif grade < -config.climb_grade_pct:
            result.time_descending += dt
        else:
            result.time_level += dt

    logger.debug(
        "Terrain: gain %.1f m, loss %.1f m, steepest %.1f%% / %.1f%%",
        result.elevation_gain, result.elevation_loss,
        result.steepest_climb, result.steepest_descent,
    )
    return result
