"""
Turn and straight-section classification.

Bearing changes along the (smoothed) path are folded into a running turn:
deltas of the same sign accumulate, small opposite wobbles inside a large turn
are tolerated, and a real sign flip closes the turn. A closed turn only counts
when it is sharp (accumulated angle), dense (angle per meter) and actually
changes the direction of travel (net bearing change), which keeps slow
meandering on a straight road from adding up to phantom turns.

An independent accumulator measures straight sections. A straight stretch long
enough also force-closes any turn that is still pending, so accumulated angle
cannot bleed across a genuinely straight piece of road.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .config import DEFAULT_CONFIG, StatsConfig
from .coordinates import normalize_angle
from .smoothing import trailing_average
from .summary import Event, EventKind

logger = logging.getLogger(__name__)


@dataclass
class TurnState:
    """Running state of the turn currently being accumulated."""
    sum: float = 0.0  # signed degrees
    distance_m: float = 0.0
    peak_delta: float = 0.0  # largest |delta| seen
    peak_index: int = -1  # sample index of the peak
    start_bearing: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self.sum != 0.0

    def add(self, delta: float, distance_m: float, sample_index: int) -> None:
        self.sum += delta
        self.distance_m += distance_m
        if abs(delta) > self.peak_delta:
            self.peak_delta = abs(delta)
            self.peak_index = sample_index


@dataclass
class TurnResult:
    """Turn events and straight sections of one trajectory."""
    tight_turns: List[Event] = field(default_factory=list)
    hairpins: List[Event] = field(default_factory=list)
    total_heading_change: float = 0.0  # degrees
    straight_sections: List[float] = field(default_factory=list)  # km

    @property
    def longest_straight(self) -> float:
        return max(self.straight_sections) if self.straight_sections else 0.0

    @property
    def median_straight(self) -> float:
        if not self.straight_sections:
            return 0.0
        ordered = sorted(self.straight_sections)
        return ordered[len(ordered) // 2]

    def twistiness(self, total_distance_km: float) -> float:
        """Heading change in degrees per km."""
        return self.total_heading_change / total_distance_km if total_distance_km > 0 else 0.0

    def percent_straight(self, total_distance_km: float) -> float:
        if total_distance_km <= 0:
            return 0.0
        return min(100.0, sum(self.straight_sections) / total_distance_km * 100)


def moving_mask(speeds_kmh: np.ndarray, config: StatsConfig = DEFAULT_CONFIG) -> np.ndarray:
    """True where the trailing average of robust speed says the vehicle moves."""
    trailing = trailing_average(speeds_kmh, config.moving_speed_window)
    return trailing > config.moving_speed_kmh


class TurnClassifier:
    """
    Folds per-segment bearings into tight turns, hairpins and straights.

    Only segments longer than bearing_min_distance_m that belong to a moving
    stretch are evaluated; everything else keeps the bearing untouched.
    """

    def __init__(self, config: StatsConfig = DEFAULT_CONFIG):
        self.config = config

    def _continues(self, turn: TurnState, delta: float) -> bool:
        """Whether delta extends the current turn instead of flipping it."""
        cfg = self.config
        if not turn.pending:
            return True
        if np.sign(delta) == np.sign(turn.sum):
            return True
        # Wobble in the middle of a committed turn
        return abs(delta) < cfg.wobble_deg and abs(turn.sum) > cfg.wobble_min_sum_deg

    def _close(
        self,
        turn: TurnState,
        current_bearing: float,
        lat: np.ndarray,
        lon: np.ndarray,
    ) -> Optional[Event]:
        """Run a finished turn through the sharpness/density/net-change gate."""
        cfg = self.config
        if not turn.pending or turn.distance_m <= cfg.turn_min_distance_m:
            return None

        abs_sum = abs(turn.sum)
        density = abs_sum / turn.distance_m
        net_change = abs(normalize_angle(current_bearing - turn.start_bearing))

        if (abs_sum > cfg.turn_min_sum_deg
                and density > cfg.turn_min_density_deg_per_m
                and net_change > cfg.turn_min_net_change_deg):
            kind = EventKind.HAIRPIN if abs_sum > cfg.hairpin_sum_deg else EventKind.TIGHT_TURN
            idx = turn.peak_index
            return Event(kind=kind, lat=float(lat[idx]), lon=float(lon[idx]), index=idx)

        return None

    @staticmethod
    def _record(event: Optional[Event], result: TurnResult) -> None:
        if event is None:
            return
        if event.kind == EventKind.HAIRPIN:
            result.hairpins.append(event)
        else:
            result.tight_turns.append(event)

    def classify(
        self,
        bearings: np.ndarray,
        distances_km: np.ndarray,
        moving: np.ndarray,
        lat: np.ndarray,
        lon: np.ndarray,
    ) -> TurnResult:
        """
        Classify a trajectory's curvature.

        Args:
            bearings: Per-segment bearing (degrees) of the smoothed path
            distances_km: Per-segment distance
            moving: Per-segment moving flag (see moving_mask)
            lat, lon: Raw sample coordinates, used to locate turn events

        Returns:
            TurnResult with events in ascending sample order
        """
        cfg = self.config
        result = TurnResult()
        turn = TurnState()
        last_bearing: Optional[float] = None
        straight_run_m = 0.0

        for i in range(len(bearings)):
            distance_m = distances_km[i] * 1000.0

            if distance_m <= cfg.bearing_min_distance_m or not moving[i]:
                if straight_run_m > 0:
                    straight_run_m += distance_m
                continue

            bearing = float(bearings[i])
            if last_bearing is None:
                last_bearing = bearing
                straight_run_m = distance_m
                continue

            delta = normalize_angle(bearing - last_bearing)
            abs_delta = abs(delta)

            if abs_delta >= cfg.jitter_deg:
                result.total_heading_change += abs_delta
                if self._continues(turn, delta):
                    if not turn.pending:
                        turn.start_bearing = last_bearing
                    turn.add(delta, distance_m, i + 1)
                else:
                    self._record(self._close(turn, last_bearing, lat, lon), result)
                    turn = TurnState(start_bearing=last_bearing)
                    turn.add(delta, distance_m, i + 1)
                last_bearing = bearing

            if abs_delta < cfg.straight_delta_deg:
                straight_run_m += distance_m
                if turn.pending and straight_run_m > cfg.straight_flush_m:
                    self._record(self._close(turn, last_bearing, lat, lon), result)
                    turn = TurnState()
            else:
                if straight_run_m > cfg.straight_min_section_m:
                    result.straight_sections.append(straight_run_m / 1000.0)
                straight_run_m = 0.0

        if turn.pending and last_bearing is not None:
            self._record(self._close(turn, last_bearing, lat, lon), result)
        if straight_run_m > cfg.straight_min_section_m:
            result.straight_sections.append(straight_run_m / 1000.0)

        logger.debug(
            "Turn classification: %d tight turns, %d hairpins, %d straight sections",
            len(result.tight_turns), len(result.hairpins), len(result.straight_sections),
        )
        return result
