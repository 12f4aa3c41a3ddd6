"""
Tests for hard acceleration/braking detection.
"""

import numpy as np
import pytest

import sys
sys.path.insert(0, str(__file__).rsplit('/', 2)[0])

from trajectory_stats.motion import (
    MotionCandidate,
    cancel_pairs,
    cluster_brakes,
    cluster_representative,
    detect_motion_events,
    find_candidates,
    invalid_mask,
    motion_time_buckets,
    turbulence_score,
)
from trajectory_stats.summary import EventKind


def candidate(time_s, magnitude=-4.0, kind=EventKind.BRAKE, first=0):
    return MotionCandidate(kind=kind, first_segment=first, last_segment=first,
                           time_s=time_s, magnitude=magnitude)


def uniform_track(n_segments):
    """Per-segment deltas, clamped flags and sample times at 1 Hz."""
    time_s = np.arange(n_segments + 1, dtype=float)
    return np.ones(n_segments), np.zeros(n_segments, dtype=bool), time_s


class TestInvalidMask:
    """Tests for gap and clamp invalidation."""

    def test_gap_invalidates_buffer(self):
        """A 13 s gap invalidates segments within 10 s of either gap edge."""
        # Samples 0..20 at t = 0..20, samples 21..40 at t = 33..52
        time_s = np.concatenate([np.arange(21.0), np.arange(21.0, 41.0) + 12.0])
        deltas = np.diff(time_s)
        invalid = invalid_mask(deltas, np.zeros(len(deltas), dtype=bool), time_s)

        assert np.flatnonzero(invalid).tolist() == list(range(10, 31))

    def test_clamped_invalidates_buffer(self):
        """A clamped segment invalidates its temporal neighbourhood."""
        deltas, clamped, time_s = uniform_track(20)
        clamped[3] = True
        invalid = invalid_mask(deltas, clamped, time_s)

        assert np.flatnonzero(invalid).tolist() == list(range(0, 14))

    def test_uniform_sampling_all_valid(self):
        """No gaps and no clamping leaves every segment valid."""
        deltas, clamped, time_s = uniform_track(30)
        assert not invalid_mask(deltas, clamped, time_s).any()

    def test_short_gap_below_floor(self):
        """A gap beyond the percentile but under 5 s is not a dropout."""
        time_s = np.concatenate([np.arange(11.0), np.arange(11.0, 21.0) + 3.0])
        deltas = np.diff(time_s)
        invalid = invalid_mask(deltas, np.zeros(len(deltas), dtype=bool), time_s)

        assert not invalid.any()


class TestCandidates:
    """Tests for candidate runs, clustering and cancellation."""

    def test_find_candidates_runs(self):
        """Each contiguous run above threshold is one candidate."""
        accel = np.array([0.0, 3.0, 3.2, 0.0, 4.0, 0.0])
        time_s = np.arange(7, dtype=float)
        found = find_candidates(accel, np.ones(6, dtype=bool), time_s, EventKind.ACCEL)

        assert len(found) == 2
        assert (found[0].first_segment, found[0].last_segment) == (1, 2)
        assert found[0].magnitude == pytest.approx(3.0)
        assert found[0].time_s == pytest.approx(2.0)
        assert found[0].sample_index == 2
        assert found[1].first_segment == 4

    def test_find_candidates_respects_validity(self):
        """Invalid segments never produce candidates."""
        accel = np.array([0.0, -5.0, -5.0, 0.0])
        valid = np.array([True, False, False, True])
        found = find_candidates(accel, valid, np.arange(5, dtype=float), EventKind.BRAKE)
        assert found == []

    def test_cluster_brakes(self):
        """Brakes within 30 s of the previous one share a cluster."""
        clusters = cluster_brakes([candidate(10), candidate(30), candidate(70)])
        assert [[c.time_s for c in cluster] for cluster in clusters] == [[10, 30], [70]]

    def test_cluster_representative(self):
        """Strongest member wins, first on ties."""
        cluster = [candidate(1, -3.5, first=1), candidate(2, -5.0, first=2),
                   candidate(3, -5.0, first=3)]
        assert cluster_representative(cluster).first_segment == 2

    def test_cancel_pairs_greedy(self):
        """Each accel takes the first unused brake within 30 s."""
        accels = [candidate(0, 3.0, EventKind.ACCEL), candidate(20, 3.0, EventKind.ACCEL)]
        brakes = [candidate(25), candidate(100)]

        assert cancel_pairs(accels, brakes) == ([0], [0])


class TestDetectMotionEvents:
    """Tests for the full detector."""

    def test_pair_cancelled_lone_brake_survives(self):
        """An accel/brake pair 10 s apart cancels; an isolated brake survives."""
        deltas, clamped, time_s = uniform_track(100)
        accel = np.zeros(100)
        accel[10:12] = 3.0
        accel[20:22] = -4.0
        accel[70:72] = -4.0
        lat = np.linspace(0, 1, 101)
        lon = np.zeros(101)

        result = detect_motion_events(accel, deltas, clamped, time_s, lat, lon)

        assert result.accel_events == []
        assert len(result.brake_events) == 1
        assert result.brake_events[0].index == 71
        assert result.brake_events[0].magnitude == pytest.approx(4.0)
        assert result.brake_events[0].lat == pytest.approx(lat[71])
        assert result.cancelled_pairs == 1
        assert result.acceleration[10:12] == pytest.approx([0.0, 0.0])
        assert result.acceleration[20:22] == pytest.approx([0.0, 0.0])
        assert result.acceleration[70] == pytest.approx(-4.0)

    def test_cancelled_cluster_zeroes_every_member(self):
        """Cancelling a brake cluster removes all of its runs from the series."""
        deltas, clamped, time_s = uniform_track(100)
        accel = np.zeros(100)
        accel[40] = 3.0
        accel[45] = -3.5
        accel[55] = -6.0

        result = detect_motion_events(accel, deltas, clamped, time_s,
                                      np.zeros(101), np.zeros(101))

        assert result.accel_events == []
        assert result.brake_events == []
        assert not np.any(result.acceleration)

    def test_invalid_segments_zeroed(self):
        """Acceleration near a clamped segment is forced to 0."""
        deltas, clamped, time_s = uniform_track(50)
        clamped[25] = True
        accel = np.full(50, 5.0)

        result = detect_motion_events(accel, deltas, clamped, time_s,
                                      np.zeros(51), np.zeros(51))

        assert result.acceleration[25] == 0.0
        assert result.acceleration[20] == 0.0
        assert not result.valid[25]
        assert result.valid[0]


class TestMotionBuckets:
    """Tests for the motion time split and turbulence."""

    def test_time_buckets(self):
        """Moving time splits by the 0.2 m/s² threshold."""
        buckets = motion_time_buckets(
            np.array([0.5, -0.5, 0.1, 1.0]),
            np.array([1.0, 2.0, 3.0, 4.0]),
            np.array([True, True, True, False]),
        )
        assert buckets == pytest.approx((1.0, 2.0, 3.0))

    def test_turbulence(self):
        """Mean absolute acceleration change scaled by 10."""
        assert turbulence_score(np.array([0.0, 1.0, 0.0, 1.0])) == pytest.approx(7.5)
        assert turbulence_score(np.zeros(0)) == 0.0
