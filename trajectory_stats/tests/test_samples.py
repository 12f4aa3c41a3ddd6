"""
Tests for sample records, the DataFrame seam, formatting helpers and the
synthetic track generator.
"""

from datetime import datetime, timedelta

import numpy as np
import pandas as pd
import pytest

import sys
sys.path.insert(0, str(__file__).rsplit('/', 2)[0])

from trajectory_stats import (
    Sample,
    TrackBuilder,
    format_distance,
    format_duration,
    format_speed,
    generate_sample_trajectory,
    haversine_distance,
    preview_polyline,
    samples_from_dataframe,
    samples_to_dataframe,
)
from trajectory_stats.samples import clamp_range, to_arrays

T0 = datetime(2024, 6, 1, 9, 30, 0)


class TestSample:
    """Tests for the Sample record."""

    def test_defaults(self):
        """Elevation and timestamp are optional."""
        sample = Sample(37.0, -122.0)
        assert sample.elevation is None
        assert sample.timestamp is None

    @pytest.mark.parametrize("lat,lon", [(np.nan, 0.0), (0.0, np.inf)])
    def test_non_finite_coordinates_rejected(self, lat, lon):
        """Coordinates must be finite numbers."""
        with pytest.raises(ValueError):
            Sample(lat, lon)

    def test_to_arrays(self):
        """Timestamps become seconds since the first one; gaps become NaN."""
        samples = [
            Sample(0.0, 0.0, 5.0, T0),
            Sample(0.001, 0.0, None, None),
            Sample(0.002, 0.0, 7.0, T0 + timedelta(seconds=12)),
        ]
        arrays = to_arrays(samples)

        assert len(arrays) == 3
        assert arrays.time_s[0] == 0.0
        assert np.isnan(arrays.time_s[1])
        assert arrays.time_s[2] == pytest.approx(12.0)
        assert np.isnan(arrays.elevation[1])
        assert arrays.elevation[2] == pytest.approx(7.0)

    def test_clamp_range(self):
        """Ranges are clamped to valid indices."""
        assert clamp_range(10, -5, 20) == (0, 9)
        assert clamp_range(10, 2, 4) == (2, 4)

    @pytest.mark.parametrize("start,end", [(0, -5), (6, 3), (12, 20)])
    def test_clamp_range_empty(self, start, end):
        """Inverted or out-of-bounds ranges stay empty instead of wrapping."""
        lo, hi = clamp_range(10, start, end)
        assert lo > hi


class TestDataFrameSeam:
    """Tests for DataFrame conversion."""

    def test_from_dataframe(self):
        """Rows become samples; NaN altitude becomes None."""
        df = pd.DataFrame({
            'timestamp': [T0, T0 + timedelta(seconds=1)],
            'latitude': [37.0, 37.001],
            'longitude': [-122.0, -122.0],
            'altitude': [12.0, np.nan],
        })
        samples = samples_from_dataframe(df)

        assert len(samples) == 2
        assert samples[0].elevation == pytest.approx(12.0)
        assert samples[1].elevation is None
        assert samples[1].timestamp == T0 + timedelta(seconds=1)

    def test_optional_columns(self):
        """Time and altitude columns may be absent."""
        df = pd.DataFrame({'lat': [1.0, 2.0], 'lon': [3.0, 4.0]})
        samples = samples_from_dataframe(df, lat_col='lat', lon_col='lon')

        assert samples[1].latitude == 2.0
        assert samples[1].timestamp is None
        assert samples[1].elevation is None

    def test_missing_coordinates_raise(self):
        """Latitude and longitude columns are required."""
        with pytest.raises(ValueError):
            samples_from_dataframe(pd.DataFrame({'latitude': [1.0]}))

    def test_to_dataframe_columns(self):
        """Samples convert back to the standard columns."""
        df = samples_to_dataframe([Sample(1.0, 2.0, 3.0, T0)])
        assert list(df.columns) == ['timestamp', 'latitude', 'longitude', 'altitude']
        assert df['altitude'].iloc[0] == 3.0


class TestFormatting:
    """Tests for display helpers."""

    @pytest.mark.parametrize("seconds,expected", [
        (3725, "1h 2m 5s"),
        (125, "2m 5s"),
        (5, "5s"),
        (0, "0s"),
    ])
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_format_distance(self):
        assert format_distance(0.5) == "500 m"
        assert format_distance(12.3456) == "12.35 km"

    def test_format_speed(self):
        assert format_speed(45.67) == "45.7 km/h"

    def test_preview_short_track(self):
        """Short tracks are returned point for point."""
        samples = [Sample(float(i), 0.0) for i in range(10)]
        assert preview_polyline(samples) == [(float(i), 0.0) for i in range(10)]

    def test_preview_downsamples(self):
        """Long tracks are thinned and keep their endpoints."""
        samples = [Sample(i * 0.001, 0.0) for i in range(1000)]
        preview = preview_polyline(samples, target_count=100)

        assert len(preview) == 101
        assert preview[0] == (0.0, 0.0)
        assert preview[-1] == (samples[-1].latitude, 0.0)


class TestSampleData:
    """Tests for the synthetic trajectory generator."""

    @pytest.mark.parametrize("trajectory_type", [
        'straight', 'turn', 'hairpin', 'stop', 'hilly', 'mixed',
    ])
    def test_generate_types(self, trajectory_type):
        """Every trajectory type has the standard columns and increasing time."""
        df = generate_sample_trajectory(trajectory_type, seed=42)

        assert list(df.columns) == ['timestamp', 'latitude', 'longitude', 'altitude']
        assert len(df) > 50
        assert df['timestamp'].is_monotonic_increasing

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            generate_sample_trajectory('spiral')

    def test_seed_reproducible(self):
        """Same seed, same noise."""
        df1 = generate_sample_trajectory('turn', seed=7)
        df2 = generate_sample_trajectory('turn', seed=7)
        pd.testing.assert_frame_equal(df1, df2)

    def test_straight_length(self):
        """A noiseless straight covers the requested distance."""
        samples = TrackBuilder(sample_rate=1).straight(500, speed=10).samples()
        start, end = samples[0], samples[-1]

        assert len(samples) == 51
        dist_m = haversine_distance(start.latitude, start.longitude,
                                    end.latitude, end.longitude) * 1000
        assert dist_m == pytest.approx(500, rel=0.01)
        assert (end.timestamp - start.timestamp).total_seconds() == pytest.approx(50)

    def test_right_turn_heads_east(self):
        """A 90 degree right turn from north continues east."""
        builder = TrackBuilder(sample_rate=2).turn(90, radius=20, speed=10)
        assert builder.heading == pytest.approx(90.0)

        samples = builder.straight(100, speed=10).samples()
        assert samples[-1].longitude > samples[0].longitude

    def test_stop_and_gap(self):
        """A stop stays in place; a gap adds a single later sample."""
        builder = TrackBuilder(sample_rate=1).straight(100, speed=10)
        idx = builder.index
        builder.stop(10)
        assert builder.index == idx + 10

        builder.gap(30, distance=200)
        assert builder.index == idx + 11
        assert builder.time == pytest.approx(50.0)

        samples = builder.samples()
        assert samples[idx].latitude == samples[idx + 10].latitude
        assert samples[idx + 11].latitude > samples[idx + 10].latitude

    def test_untimed_without_elevation(self):
        """Builders can omit timestamps and elevation."""
        samples = TrackBuilder(start_time=None, start_alt=None).straight(50, speed=5).samples()

        assert all(s.timestamp is None for s in samples)
        assert all(s.elevation is None for s in samples)
