"""Data types shared by the local planner and its waypoint generator."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from .geometry import PolarPoint
from .quaternion import Quaternion


def _nan3() -> np.ndarray:
    return np.full(3, math.nan)


@dataclass(frozen=True)
class CandidateDirection:
    """A direction (degrees) with its cost; ordered by cost."""

    cost: float
    elevation_angle: float
    azimuth_angle: float

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CandidateDirection):
            return NotImplemented
        return self.cost < other.cost

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, CandidateDirection):
            return NotImplemented
        return self.cost > other.cost

    def to_polar(self, r: float) -> PolarPoint:
        """The direction as a polar point at range ``r``."""
        return PolarPoint(self.elevation_angle, self.azimuth_angle, r)


@dataclass
class CostParameters:
    """Weights of the histogram cost function."""

    yaw_cost_param: float = 0.5
    pitch_cost_param: float = 3.0
    velocity_cost_param: float = 1.5
    obstacle_cost_param: float = 5.0


class WaypointChoice(enum.IntEnum):
    """How the next waypoint is chosen."""

    HOVER = 0
    TRY_PATH = 1
    DIRECT = 2
    REACH_HEIGHT = 3


@dataclass
class AvoidanceOutput:
    """Result of one planner iteration."""

    cruise_velocity: float = math.nan
    last_path_time: float = 0.0
    path_node_positions: list[np.ndarray] = field(default_factory=list)


@dataclass
class SimulationState:
    """Kinematic state of a simulated vehicle."""

    time: float = math.nan
    position: np.ndarray = field(default_factory=_nan3)
    velocity: np.ndarray = field(default_factory=_nan3)
    acceleration: np.ndarray = field(default_factory=_nan3)


@dataclass
class SimulationLimits:
    """Kinematic limits used when simulating a trajectory."""

    max_z_velocity: float = math.nan
    min_z_velocity: float = math.nan
    max_xy_velocity_norm: float = math.nan
    max_acceleration_norm: float = math.nan
    max_jerk_norm: float = math.nan


class PlannerState(enum.Enum):
    """States of the waypoint generator."""

    TRY_PATH = enum.auto()
    ALTITUDE_CHANGE = enum.auto()
    LOITER = enum.auto()
    DIRECT = enum.auto()


@dataclass
class WaypointResult:
    """Setpoints to send to the flight controller and intermediate results."""

    waypoint_type: PlannerState = PlannerState.TRY_PATH
    position_wp: np.ndarray = field(default_factory=_nan3)
    orientation_wp: Quaternion = field(default_factory=Quaternion)
    linear_velocity_wp: np.ndarray = field(default_factory=_nan3)
    angular_velocity_wp: np.ndarray = field(default_factory=_nan3)
    goto_position: np.ndarray = field(default_factory=_nan3)
    adapted_goto_position: np.ndarray = field(default_factory=_nan3)
    smoothed_goto_position: np.ndarray = field(default_factory=_nan3)


def norm_clamp(val: Sequence[float], max_norm: float) -> np.ndarray:
    """``val`` scaled down so its Euclidean norm does not exceed ``max_norm``."""
    vec = np.asarray(val, dtype=float)
    norm_sq = float(np.dot(vec, vec))
    if norm_sq > max_norm * max_norm:
        return vec * (max_norm / math.sqrt(norm_sq))
    return vec.copy()