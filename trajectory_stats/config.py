"""
Named thresholds used throughout the statistics pipeline.

Every constant lives on StatsConfig so tests and callers can override any of
them without touching the algorithms:

    from dataclasses import replace
    config = replace(DEFAULT_CONFIG, stop_min_duration_s=5.0)
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class StatsConfig:
    """Thresholds for speed, smoothing, turns, motion events, terrain and stops."""

    # === Robust speed estimation ===
    launch_accel_mps2: float = 9.0  # envelope at standstill
    accel_decay_kmh: float = 25.0  # envelope loses 1 m/s² per this many km/h
    min_accel_mps2: float = 2.0  # envelope floor
    max_speed_kmh: float = 350.0  # hard sanity ceiling
    display_speed_cap_kmh: float = 200.0  # max speed reported in the summary

    # === Smoothing windows (odd) ===
    coordinate_window: int = 5
    elevation_window: int = 5
    speed_window: int = 5
    gradient_window: int = 5
    accel_window: int = 3

    # === Turn / curvature ===
    bearing_min_distance_m: float = 2.0
    moving_speed_window: int = 5  # trailing segments
    moving_speed_kmh: float = 3.0
    jitter_deg: float = 1.0
    wobble_deg: float = 10.0
    wobble_min_sum_deg: float = 30.0
    turn_min_distance_m: float = 15.0
    turn_min_sum_deg: float = 60.0
    turn_min_density_deg_per_m: float = 0.6
    turn_min_net_change_deg: float = 30.0
    hairpin_sum_deg: float = 135.0
    straight_delta_deg: float = 5.0
    straight_flush_m: float = 25.0
    straight_min_section_m: float = 20.0

    # === Motion events ===
    gap_percentile: float = 90.0
    gap_min_s: float = 5.0
    invalid_buffer_s: float = 10.0
    hard_accel_mps2: float = 2.5
    hard_brake_mps2: float = -3.0
    brake_cluster_s: float = 30.0
    cancel_window_s: float = 30.0
    motion_accel_mps2: float = 0.2  # accelerating/braking vs cruising

    # === Terrain ===
    gradient_min_distance_m: float = 1.0
    climb_grade_pct: float = 1.0
    steep_min_distance_m: float = 5.0
    steep_min_elevation_m: float = 0.5

    # === Stops ===
    stop_speed_kmh: float = 3.0
    stop_min_duration_s: float = 10.0

    # === Speed distribution ===
    bucket_size_kmh: float = 10.0
    bucket_min_speed_kmh: float = 0.1
    bucket_min_duration_s: float = 20.0


DEFAULT_CONFIG = StatsConfig()
