"""
Tests for the robust speed estimator.
"""

import numpy as np
import pytest

import sys
sys.path.insert(0, str(__file__).rsplit('/', 2)[0])

from trajectory_stats import DEFAULT_CONFIG, TrackBuilder
from trajectory_stats.coordinates import EARTH_RADIUS_KM
from trajectory_stats.samples import SampleArrays, to_arrays
from trajectory_stats.speed import (
    compute_robust_segments,
    max_acceleration,
    raw_accelerations,
    time_deltas,
)

KM_PER_DEG_LAT = EARTH_RADIUS_KM * np.pi / 180


def north_line(distances_km, times_s):
    """Sample columns for a track heading due north."""
    lat = np.concatenate([[0.0], np.cumsum(distances_km)]) / KM_PER_DEG_LAT
    n = len(lat)
    return SampleArrays(
        lat=lat,
        lon=np.zeros(n),
        elevation=np.full(n, np.nan),
        time_s=np.asarray(times_s, dtype=float),
    )


class TestEnvelope:
    """Tests for the acceleration envelope."""

    @pytest.mark.parametrize("prev_kmh,expected", [
        (0.0, 9.0),
        (100.0, 5.0),
        (175.0, 2.0),
        (300.0, 2.0),
    ])
    def test_max_acceleration(self, prev_kmh, expected):
        """Envelope decays by 1 m/s² per 25 km/h down to a 2 m/s² floor."""
        assert max_acceleration(prev_kmh) == pytest.approx(expected)


class TestRobustSegments:
    """Tests for compute_robust_segments."""

    def test_plausible_speed_unclamped(self):
        """1 km in 60 s from standstill is 60 km/h and within the envelope."""
        segments = compute_robust_segments(north_line([1.0], [0.0, 60.0]))

        assert len(segments) == 1
        assert segments[0].speed_kmh == pytest.approx(60.0, rel=1e-6)
        assert segments[0].distance_km == pytest.approx(1.0, rel=1e-9)
        assert segments[0].time_delta_s == pytest.approx(60.0)
        assert not segments[0].clamped

    def test_jump_clamped_to_envelope(self):
        """A 100 m jump in 1 s from standstill is limited to 9 m/s."""
        segments = compute_robust_segments(north_line([0.1], [0.0, 1.0]))

        assert segments[0].clamped
        assert segments[0].speed_kmh == pytest.approx(9.0 * 3.6)

    def test_ceiling_reuses_previous_speed(self):
        """A clamped speed above 350 km/h falls back to the previous speed."""
        # 300 km/h for 100 s, then a position jump implying 1000 km/h
        arrays = north_line([300 / 36, 1000 / 120], [0.0, 100.0, 130.0])
        segments = compute_robust_segments(arrays)

        assert segments[0].speed_kmh == pytest.approx(300.0, rel=1e-6)
        assert not segments[0].clamped
        assert segments[1].speed_kmh == pytest.approx(300.0, rel=1e-6)
        assert segments[1].clamped

    def test_untimed_segments_zero_speed(self):
        """Segments without timestamps have zero speed and are not flagged."""
        arrays = north_line([0.1, 0.1], [np.nan, np.nan, np.nan])
        segments = compute_robust_segments(arrays)

        assert all(s.speed_kmh == 0 for s in segments)
        assert all(s.time_delta_s == 0 for s in segments)
        assert not any(s.clamped for s in segments)
        assert segments[0].distance_km == pytest.approx(0.1)

    def test_speeds_bounded_on_noisy_track(self):
        """Robust speeds never exceed the sanity ceiling."""
        samples = (TrackBuilder(sample_rate=10, noise_std=5.0, seed=3)
                   .straight(2000, speed=60)
                   .samples())
        segments = compute_robust_segments(to_arrays(samples))

        assert max(s.speed_kmh for s in segments) <= DEFAULT_CONFIG.max_speed_kmh

    def test_clamped_acceleration_within_envelope(self):
        """A clamped segment's implied acceleration does not exceed the envelope."""
        samples = (TrackBuilder(sample_rate=5, noise_std=3.0, seed=11)
                   .straight(1000, speed=30)
                   .samples())
        segments = compute_robust_segments(to_arrays(samples))

        prev = 0.0
        for seg in segments:
            if seg.clamped and seg.time_delta_s > 0 and seg.speed_kmh > prev:
                accel = (seg.speed_kmh - prev) / 3.6 / seg.time_delta_s
                assert accel <= max_acceleration(prev) + 1e-9
            prev = seg.speed_kmh


class TestAccelerations:
    """Tests for time deltas and raw accelerations."""

    def test_time_deltas_missing(self):
        """Missing timestamps give a zero delta."""
        deltas = time_deltas(np.array([0.0, 1.0, np.nan, 4.0]))
        assert deltas == pytest.approx([1.0, 0.0, 0.0])

    def test_raw_accelerations(self):
        """Acceleration between consecutive segment speeds."""
        accel = raw_accelerations(np.array([0.0, 36.0, 72.0]), np.array([1.0, 1.0, 2.0]))
        assert accel == pytest.approx([0.0, 10.0, 5.0])

    def test_raw_accelerations_zero_delta(self):
        """Segments without a positive delta get zero acceleration."""
        accel = raw_accelerations(np.array([10.0, 50.0]), np.array([1.0, 0.0]))
        assert accel == pytest.approx([0.0, 0.0])
