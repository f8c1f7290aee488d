"""Trajectory setpoint messages sent to the flight controller."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from .geometry import to_enu, yaw_to_enu_rad
from .quaternion import Quaternion

WAYPOINTS = 0
BEZIER = 1
POINT_COUNT = 5


def _nan3() -> np.ndarray:
    return np.full(3, math.nan)


@dataclass
class PositionTarget:
    """One trajectory point; NaN marks an unused value."""

    position: np.ndarray = field(default_factory=_nan3)
    velocity: np.ndarray = field(default_factory=_nan3)
    acceleration_or_force: np.ndarray = field(default_factory=_nan3)
    yaw: float = math.nan
    yaw_rate: float = math.nan


@dataclass
class Trajectory:
    """Five trajectory points with their time horizons and validity flags."""

    type: int
    points: tuple[PositionTarget, ...]
    time_horizon: tuple[float, ...]
    point_valid: tuple[bool, ...]
    stamp: float = field(default_factory=time.time)


def unused_point() -> PositionTarget:
    """A trajectory point with every value set to NaN."""
    return PositionTarget()


def control_point_target(point: Sequence[float]) -> PositionTarget:
    """Bezier control point ``(x, y, z, yaw)`` in NED converted to an ENU target."""
    values = np.asarray(point, dtype=float).reshape(4)
    return PositionTarget(position=to_enu(values[:3]), yaw=yaw_to_enu_rad(float(values[3])))


def trajectory_from_setpoint(
    position: Sequence[float],
    orientation: Quaternion,
    linear_velocity: Sequence[float],
    angular_velocity: Sequence[float],
) -> Trajectory:
    """Waypoint trajectory holding a single position/velocity setpoint."""
    first = PositionTarget(
        position=np.asarray(position, dtype=float).reshape(3).copy(),
        velocity=np.asarray(linear_velocity, dtype=float).reshape(3).copy(),
        yaw=orientation.yaw(),
        yaw_rate=-float(angular_velocity[2]),
    )
    points = (first,) + tuple(unused_point() for _ in range(POINT_COUNT - 1))
    return Trajectory(
        type=WAYPOINTS,
        points=points,
        time_horizon=(math.nan,) * POINT_COUNT,
        point_valid=(True,) + (False,) * (POINT_COUNT - 1),
    )


def trajectory_from_bezier(control_points: Sequence[Sequence[float]], duration: float) -> Trajectory:
    """Bezier trajectory from five ``(x, y, z, yaw)`` control points."""
    control_points = list(control_points)
    if len(control_points) != POINT_COUNT:
        raise ValueError(f"a bezier trajectory needs {POINT_COUNT} control points, got {len(control_points)}")
    return Trajectory(
        type=BEZIER,
        points=tuple(control_point_target(p) for p in control_points),
        time_horizon=(math.nan,) * (POINT_COUNT - 1) + (float(duration),),
        point_valid=(True,) * POINT_COUNT,
    )