"""
Sample trajectory data generation for testing and development.

Generates vehicle trajectories from a sequence of maneuvers:
- Straight segments (optionally on a constant grade)
- Turn segments (circular arcs, positive angle = clockwise/right)
- Stops (stationary samples)
- Data gaps (time passes, no samples, optional position jump)

Positions are computed in a local East/North frame in meters and converted
to lat/lon with a flat-earth approximation around the start point.
"""

from datetime import datetime, timedelta
from typing import List, Optional

import numpy as np
import pandas as pd

from .samples import Sample


# Reference location: San Francisco area
DEFAULT_START_LAT = 37.7749
DEFAULT_START_LON = -122.4194
DEFAULT_START_ALT = 10.0  # meters
DEFAULT_START_TIME = datetime(2024, 1, 1, 12, 0, 0)


def _meters_to_degrees_lat(meters: float) -> float:
    """Convert meters to degrees latitude (approximate)."""
    return meters / 111320.0


def _meters_to_degrees_lon(meters: float, lat: float) -> float:
    """Convert meters to degrees longitude at given latitude."""
    return meters / (111320.0 * np.cos(np.radians(lat)))


class TrackBuilder:
    """
    Chainable builder for synthetic trajectories.

    Example:
        samples = (TrackBuilder(sample_rate=5)
                   .straight(500, speed=25)
                   .turn(90, radius=25, speed=25)
                   .straight(300, speed=25)
                   .samples())
    """

    def __init__(
        self,
        start_lat: float = DEFAULT_START_LAT,
        start_lon: float = DEFAULT_START_LON,
        start_alt: Optional[float] = DEFAULT_START_ALT,
        start_time: Optional[datetime] = DEFAULT_START_TIME,
        heading: float = 0.0,  # degrees, 0 = North
        sample_rate: float = 1.0,  # Hz
        noise_std: float = 0.0,  # meters
        seed: Optional[int] = None,
    ):
        self.start_lat = start_lat
        self.start_lon = start_lon
        self.start_time = start_time
        self.sample_rate = sample_rate
        self.noise_std = noise_std
        self.rng = np.random.default_rng(seed)

        self.x = 0.0  # East (m)
        self.y = 0.0  # North (m)
        self.alt = start_alt
        self.t = 0.0  # seconds
        self.heading = heading

        self._times: List[float] = []
        self._xs: List[float] = []
        self._ys: List[float] = []
        self._alts: List[Optional[float]] = []
        self._emit()

    def __len__(self) -> int:
        return len(self._times)

    @property
    def index(self) -> int:
        """Index of the most recent sample."""
        return len(self._times) - 1

    @property
    def time(self) -> float:
        """Elapsed seconds at the most recent sample."""
        return self.t

    def _emit(self) -> None:
        self._times.append(self.t)
        self._xs.append(self.x)
        self._ys.append(self.y)
        self._alts.append(self.alt)

    def _steps(self, duration: float) -> int:
        return max(1, int(round(duration * self.sample_rate)))

    def straight(self, distance: float, speed: float, grade: float = 0.0) -> 'TrackBuilder':
        """Drive distance meters at constant speed (m/s) on grade percent."""
        steps = self._steps(distance / speed)
        heading_rad = np.radians(self.heading)
        x0, y0, t0, alt0 = self.x, self.y, self.t, self.alt
        duration = distance / speed

        for k in range(1, steps + 1):
            frac = k / steps
            self.x = x0 + distance * frac * np.sin(heading_rad)
            self.y = y0 + distance * frac * np.cos(heading_rad)
            self.t = t0 + duration * frac
            if alt0 is not None:
                self.alt = alt0 + distance * frac * grade / 100.0
            self._emit()
        return self

    def turn(self, angle: float, radius: float, speed: float) -> 'TrackBuilder':
        """Follow a circular arc; positive angle turns clockwise (right)."""
        arc_length = abs(angle) * np.pi / 180 * radius
        duration = arc_length / speed
        steps = self._steps(duration)
        side = 1.0 if angle > 0 else -1.0

        h0 = self.heading
        center_rad = np.radians(h0 + side * 90)
        cx = self.x + radius * np.sin(center_rad)
        cy = self.y + radius * np.cos(center_rad)
        t0 = self.t

        for k in range(1, steps + 1):
            frac = k / steps
            heading = h0 + angle * frac
            back_rad = np.radians(heading - side * 90)
            self.x = cx + radius * np.sin(back_rad)
            self.y = cy + radius * np.cos(back_rad)
            self.t = t0 + duration * frac
            self._emit()

        self.heading = (h0 + angle) % 360
        return self

    def stop(self, duration: float) -> 'TrackBuilder':
        """Stay in place for duration seconds."""
        steps = self._steps(duration)
        t0 = self.t
        for k in range(1, steps + 1):
            self.t = t0 + duration * k / steps
            self._emit()
        return self

    def gap(self, duration: float, distance: float = 0.0) -> 'TrackBuilder':
        """Lose signal for duration seconds, resuming distance meters ahead."""
        heading_rad = np.radians(self.heading)
        self.x += distance * np.sin(heading_rad)
        self.y += distance * np.cos(heading_rad)
        self.t += duration
        self._emit()
        return self

    def dataframe(self) -> pd.DataFrame:
        """Trajectory as a DataFrame with timestamp, latitude, longitude, altitude."""
        n = len(self._times)
        xs = np.array(self._xs)
        ys = np.array(self._ys)
        if self.noise_std > 0:
            xs = xs + self.rng.normal(0, self.noise_std, n)
            ys = ys + self.rng.normal(0, self.noise_std, n)

        lats = self.start_lat + _meters_to_degrees_lat(ys)
        lons = self.start_lon + _meters_to_degrees_lon(xs, self.start_lat)

        alts = [np.nan if a is None else a for a in self._alts]
        if self.noise_std > 0 and self._alts[0] is not None:
            alts = list(np.array(alts) + self.rng.normal(0, self.noise_std * 0.1, n))

        if self.start_time is None:
            timestamps = [None] * n
        else:
            timestamps = [self.start_time + timedelta(seconds=t) for t in self._times]

        return pd.DataFrame({
            'timestamp': timestamps,
            'latitude': lats,
            'longitude': lons,
            'altitude': alts,
        })

    def samples(self) -> List[Sample]:
        """Trajectory as a list of Sample."""
        df = self.dataframe()
        return [
            Sample(
                latitude=float(row.latitude),
                longitude=float(row.longitude),
                elevation=None if pd.isna(row.altitude) else float(row.altitude),
                timestamp=None if self.start_time is None else row.timestamp.to_pydatetime(),
            )
            for row in df.itertuples(index=False)
        ]


def generate_sample_trajectory(
    trajectory_type: str = 'mixed',
    start_lat: float = DEFAULT_START_LAT,
    start_lon: float = DEFAULT_START_LON,
    start_alt: float = DEFAULT_START_ALT,
    start_time: Optional[datetime] = None,
    seed: Optional[int] = None,
) -> pd.DataFrame:
    """
    Generate a sample trajectory DataFrame.

    Args:
        trajectory_type: One of 'straight', 'turn', 'hairpin', 'stop', 'hilly', 'mixed'
        start_lat, start_lon, start_alt: Starting position
        start_time: Starting timestamp (defaults to a fixed time)
        seed: Random seed for the position noise

    Returns:
        DataFrame with columns: timestamp, latitude, longitude, altitude
    """
    builder = TrackBuilder(
        start_lat=start_lat,
        start_lon=start_lon,
        start_alt=start_alt,
        start_time=start_time or DEFAULT_START_TIME,
        sample_rate=2,
        noise_std=0.1,
        seed=seed,
    )

    if trajectory_type == 'straight':
        builder.straight(1000, speed=15)

    elif trajectory_type == 'turn':
        builder.straight(300, speed=15).turn(90, radius=30, speed=12).straight(300, speed=15)

    elif trajectory_type == 'hairpin':
        builder.straight(300, speed=12).turn(-170, radius=15, speed=8).straight(300, speed=12)

    elif trajectory_type == 'stop':
        builder.straight(400, speed=14).stop(45).straight(400, speed=14)

    elif trajectory_type == 'hilly':
        (builder.straight(300, speed=12)
         .straight(800, speed=8, grade=7)
         .straight(300, speed=12)
         .straight(800, speed=15, grade=-6)
         .straight(300, speed=12))

    elif trajectory_type == 'mixed':
        # Realistic mixed drive: straight -> turn -> stop -> climb -> hairpin -> straight
        (builder.straight(400, speed=15)
         .turn(90, radius=25, speed=10)
         .straight(250, speed=13)
         .stop(30)
         .straight(300, speed=12, grade=5)
         .turn(-160, radius=15, speed=8)
         .straight(400, speed=16, grade=-3))

    else:
        raise ValueError(f"Unknown trajectory type: {trajectory_type}")

    return builder.dataframe()
