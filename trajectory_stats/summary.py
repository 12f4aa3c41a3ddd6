"""
Immutable statistics summary produced once per sample sequence.

StatsSummary is the only artifact consumers see: the persistence layer stores
to_dict() verbatim, rendering layers read the event tuples and time buckets.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import pandas as pd


class EventKind(Enum):
    """Kinds of point events located on the track."""
    ACCEL = "accel"
    BRAKE = "brake"
    STOP = "stop"
    TIGHT_TURN = "tight-turn"
    HAIRPIN = "hairpin"


@dataclass(frozen=True)
class Event:
    """A located event; index is the sample the event is pinned to."""
    kind: EventKind
    lat: float
    lon: float
    index: int
    magnitude: Optional[float] = None  # m/s² for accel/brake

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value,
            'lat': self.lat,
            'lon': self.lon,
            'index': self.index,
            'magnitude': self.magnitude,
        }


@dataclass(frozen=True)
class SpeedBucket:
    """Time and distance spent in one speed band."""
    range_label: str  # e.g. "20-30"
    min_speed: float  # km/h
    time_min: float  # minutes
    distance_km: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'range': self.range_label,
            'min_speed': self.min_speed,
            'time_min': self.time_min,
            'distance_km': self.distance_km,
        }


@dataclass(frozen=True)
class StatsSummary:
    """All scalar aggregates and event lists for one trajectory."""

    point_count: int = 0
    start_time: Optional[datetime] = None

    # === Distance / time / speed ===
    total_distance: float = 0.0  # km
    total_time: float = 0.0  # seconds
    moving_time: float = 0.0
    stopped_time: float = 0.0
    stop_count: int = 0
    avg_speed: float = 0.0  # km/h over total time
    moving_avg_speed: float = 0.0  # km/h over moving time
    max_speed: float = 0.0  # km/h, smoothed
    clamped_segment_count: int = 0

    # === Motion ===
    hard_acceleration_count: int = 0
    hard_braking_count: int = 0
    time_accelerating: float = 0.0  # seconds
    time_braking: float = 0.0
    time_cruising: float = 0.0
    accel_brake_ratio: float = 0.0
    turbulence_score: float = 0.0

    # === Elevation ===
    elevation_gain: float = 0.0  # meters
    elevation_loss: float = 0.0
    max_elevation: float = 0.0
    min_elevation: float = 0.0
    steepest_climb: float = 0.0  # percent
    steepest_descent: float = 0.0  # percent (negative)
    time_climbing: float = 0.0  # seconds
    time_descending: float = 0.0
    time_level: float = 0.0
    hilliness_score: float = 0.0  # meters gained per km
    climb_distance: float = 0.0  # km

    # === Geometry ===
    total_heading_change: float = 0.0  # degrees
    tight_turns_count: int = 0
    hairpin_count: int = 0
    twistiness_score: float = 0.0  # degrees per km
    longest_straight_section: float = 0.0  # km
    median_straight_length: float = 0.0  # km
    percent_straight: float = 0.0

    # === Event lists (ascending sample index) ===
    stop_points: Tuple[Event, ...] = field(default_factory=tuple)
    tight_turn_points: Tuple[Event, ...] = field(default_factory=tuple)
    hairpin_points: Tuple[Event, ...] = field(default_factory=tuple)
    hard_accel_points: Tuple[Event, ...] = field(default_factory=tuple)
    hard_brake_points: Tuple[Event, ...] = field(default_factory=tuple)

    speed_distribution: Tuple[SpeedBucket, ...] = field(default_factory=tuple)

    def events(self) -> Tuple[Event, ...]:
        """Every event of every kind, ordered by sample index."""
        merged = (
            self.stop_points + self.tight_turn_points + self.hairpin_points
            + self.hard_accel_points + self.hard_brake_points
        )
        return tuple(sorted(merged, key=lambda e: e.index))

    def to_dict(self) -> Dict[str, Any]:
        """Plain, JSON-serializable representation."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == 'start_time':
                value = value.isoformat() if value is not None else None
            elif isinstance(value, tuple):
                value = [item.to_dict() for item in value]
            result[f.name] = value
        return result


def empty_summary(point_count: int = 0, start_time: Optional[datetime] = None) -> StatsSummary:
    """All-zero summary for sequences too short to analyse."""
    return StatsSummary(point_count=point_count, start_time=start_time)


def summary_to_series(summary: StatsSummary) -> pd.Series:
    """Scalar fields of a summary as a pandas Series (event lists omitted)."""
    scalars = {
        key: value for key, value in summary.to_dict().items()
        if not isinstance(value, list)
    }
    return pd.Series(scalars)
