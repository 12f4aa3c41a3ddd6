"""
Sample records and the pandas seam.

A trajectory is an ordered sequence of Sample. Trajectory DataFrames use the
columns timestamp, latitude, longitude and altitude, the same layout
sample_data.generate_sample_trajectory produces.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class Sample:
    """One raw position fix."""
    latitude: float  # degrees
    longitude: float  # degrees
    elevation: Optional[float] = None  # meters
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            raise ValueError(
                f"Sample coordinates must be finite, got ({self.latitude}, {self.longitude})"
            )


@dataclass
class SampleArrays:
    """Column view of a sample sequence used by the pipeline stages."""
    lat: np.ndarray
    lon: np.ndarray
    elevation: np.ndarray  # NaN where missing
    time_s: np.ndarray  # seconds since first timestamp, NaN where missing

    def __len__(self) -> int:
        return len(self.lat)


def to_arrays(samples: Sequence[Sample]) -> SampleArrays:
    """Convert samples to float64 arrays, timestamps to elapsed seconds."""
    n = len(samples)
    lat = np.array([s.latitude for s in samples], dtype=float)
    lon = np.array([s.longitude for s in samples], dtype=float)
    elevation = np.array(
        [np.nan if s.elevation is None else s.elevation for s in samples], dtype=float
    )

    time_s = np.full(n, np.nan)
    origin = next((s.timestamp for s in samples if s.timestamp is not None), None)
    if origin is not None:
        for i, s in enumerate(samples):
            if s.timestamp is not None:
                time_s[i] = (s.timestamp - origin).total_seconds()

    return SampleArrays(lat=lat, lon=lon, elevation=elevation, time_s=time_s)


def _optional_float(value) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


def _optional_timestamp(value) -> Optional[datetime]:
    if value is None or pd.isna(value):
        return None
    return pd.Timestamp(value).to_pydatetime()


def samples_from_dataframe(
    df: pd.DataFrame,
    time_col: str = 'timestamp',
    lat_col: str = 'latitude',
    lon_col: str = 'longitude',
    alt_col: str = 'altitude',
) -> List[Sample]:
    """
    Build a sample list from a trajectory DataFrame.

    The time and altitude columns are optional; missing cells become None.

    Args:
        df: DataFrame with trajectory data
        time_col: Name of timestamp column
        lat_col: Name of latitude column (degrees)
        lon_col: Name of longitude column (degrees)
        alt_col: Name of altitude column (meters)

    Returns:
        List of Sample in row order
    """
    missing = [col for col in (lat_col, lon_col) if col not in df.columns]
    if missing:
        raise ValueError(f"Trajectory DataFrame is missing columns: {missing}")

    lats = df[lat_col].to_numpy(dtype=float)
    lons = df[lon_col].to_numpy(dtype=float)
    alts = df[alt_col].tolist() if alt_col in df.columns else [None] * len(df)
    times = df[time_col].tolist() if time_col in df.columns else [None] * len(df)

    return [
        Sample(
            latitude=float(lat),
            longitude=float(lon),
            elevation=_optional_float(alt),
            timestamp=_optional_timestamp(ts),
        )
        for lat, lon, alt, ts in zip(lats, lons, alts, times)
    ]


def samples_to_dataframe(samples: Sequence[Sample]) -> pd.DataFrame:
    """Inverse of samples_from_dataframe."""
    return pd.DataFrame({
        'timestamp': [s.timestamp for s in samples],
        'latitude': [s.latitude for s in samples],
        'longitude': [s.longitude for s in samples],
        'altitude': [s.elevation for s in samples],
    })


def clamp_range(n: int, start: int, end: int) -> Tuple[int, int]:
    """
    Clamp an inclusive index range to [0, n - 1].

    The result is empty (lo > hi) when the range is inverted or lies wholly
    outside the sequence; negative indices are never wrapped around.
    """
    return max(0, start), min(n - 1, end)
