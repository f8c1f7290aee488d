"""Angle arithmetic and polar/cartesian conversions used by the planner."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, replace
from typing import Optional, Sequence

import numpy as np

DEG_TO_RAD = math.pi / 180.0
RAD_TO_DEG = 180.0 / math.pi


class MavState(enum.IntEnum):
    """Companion process states reported to the flight controller."""

    UNINIT = 0
    BOOT = 1
    CALIBRATING = 2
    STANDBY = 3
    ACTIVE = 4
    CRITICAL = 5
    EMERGENCY = 6
    POWEROFF = 7
    FLIGHT_TERMINATION = 8


class NavigationState(enum.Enum):
    """Navigation mode of the vehicle."""

    MISSION = enum.auto()
    AUTO_TAKEOFF = enum.auto()
    AUTO_LAND = enum.auto()
    AUTO_RTL = enum.auto()
    AUTO_RTGS = enum.auto()
    OFFBOARD = enum.auto()
    AUTO_LOITER = enum.auto()
    NONE = enum.auto()


class MavCommand(enum.IntEnum):
    """Mission item commands the planner reacts to."""

    NAV_LAND = 21
    NAV_TAKEOFF = 22
    DO_CHANGE_SPEED = 178


@dataclass
class ModelParameters:
    """Flight controller parameters used for model based planning."""

    mpc_auto_mode: int = -1
    mpc_jerk_min: float = math.nan
    mpc_jerk_max: float = math.nan
    mpc_acc_up_max: float = math.nan
    mpc_z_vel_max_up: float = math.nan
    mpc_acc_down_max: float = math.nan
    mpc_z_vel_max_dn: float = math.nan
    mpc_acc_hor: float = math.nan
    mpc_xy_cruise: float = math.nan
    mpc_tko_speed: float = math.nan
    mpc_land_speed: float = math.nan
    mpc_yawrauto_max: float = math.nan
    nav_acc_rad: float = math.nan
    cp_dist: float = math.nan


# Flight controller parameter id -> ModelParameters field.
PX4_PARAMETER_FIELDS = {
    "MPC_ACC_DOWN_MAX": "mpc_acc_down_max",
    "MPC_ACC_HOR": "mpc_acc_hor",
    "MPC_ACC_UP_MAX": "mpc_acc_up_max",
    "MPC_AUTO_MODE": "mpc_auto_mode",
    "MPC_JERK_MIN": "mpc_jerk_min",
    "MPC_JERK_MAX": "mpc_jerk_max",
    "MPC_LAND_SPEED": "mpc_land_speed",
    "MPC_TKO_SPEED": "mpc_tko_speed",
    "MPC_XY_CRUISE": "mpc_xy_cruise",
    "MPC_Z_VEL_MAX_DN": "mpc_z_vel_max_dn",
    "MPC_Z_VEL_MAX_UP": "mpc_z_vel_max_up",
    "CP_DIST": "cp_dist",
    "NAV_ACC_RAD": "nav_acc_rad",
    "MPC_YAWRAUTO_MAX": "mpc_yawrauto_max",
}


@dataclass(frozen=True)
class PolarPoint:
    """Direction and range: elevation ``e`` and azimuth ``z`` in degrees, radius ``r``."""

    e: float = 0.0
    z: float = 0.0
    r: float = 0.0


def _vec3(v: Sequence[float]) -> np.ndarray:
    return np.asarray(v, dtype=float).reshape(3)


def wrap_angle_to_plus_minus_pi(angle: float) -> float:
    """Wrap an angle in radians to [-pi, pi)."""
    two_pi = 2.0 * math.pi
    return angle - two_pi * math.floor(angle / two_pi + 0.5)


def wrap_angle_to_plus_minus_180(angle: float) -> float:
    """Wrap an angle in degrees to [-180, 180)."""
    return angle - 360.0 * math.floor(angle / 360.0 + 0.5)


def angle_difference(a: float, b: float) -> float:
    """Signed difference ``a - b`` in degrees, wrapped to [-180, 180)."""
    angle = math.fmod(a - b, 360.0)
    if angle >= 0.0:
        return angle if angle < 180.0 else angle - 360.0
    return angle if angle >= -180.0 else angle + 360.0


def index_angle_difference(a: float, b: float) -> float:
    """Smallest absolute difference of two angles in degrees."""
    d = a - b
    return min(abs(d), abs(d - 360.0), abs(d + 360.0))


def get_angular_velocity(desired_yaw: float, curr_yaw: float) -> float:
    """Yaw rate (rad/s) towards ``desired_yaw`` along the shorter direction."""
    desired_yaw = wrap_angle_to_plus_minus_pi(desired_yaw)
    yaw_vel1 = desired_yaw - curr_yaw
    if yaw_vel1 > 0.0:
        yaw_vel2 = -(2.0 * math.pi - yaw_vel1)
    else:
        yaw_vel2 = 2.0 * math.pi + yaw_vel1
    vel = yaw_vel1 if abs(yaw_vel1) <= abs(yaw_vel2) else yaw_vel2
    return 0.5 * vel


def distance_2d_polar(p1: PolarPoint, p2: PolarPoint) -> float:
    """Distance between two points in the (elevation, azimuth) plane."""
    return math.hypot(p1.e - p2.e, p1.z - p2.z)


def polar_histogram_to_cartesian(p_pol: PolarPoint, pos: Sequence[float]) -> np.ndarray:
    """Cartesian point at ``p_pol`` (histogram convention) from ``pos``.

    Azimuth zero is the positive y axis, increasing clockwise; elevation
    is positive upward.
    """
    e = p_pol.e * DEG_TO_RAD
    z = p_pol.z * DEG_TO_RAD
    offset = p_pol.r * np.array([math.cos(e) * math.sin(z), math.cos(e) * math.cos(z), math.sin(e)])
    return _vec3(pos) + offset


def polar_fcu_to_cartesian(p_pol: PolarPoint, pos: Sequence[float]) -> np.ndarray:
    """Cartesian point at ``p_pol`` (flight controller convention) from ``pos``."""
    polar = (90.0 - p_pol.e) * DEG_TO_RAD
    z = p_pol.z * DEG_TO_RAD
    offset = p_pol.r * np.array([math.sin(polar) * math.cos(z), math.sin(polar) * math.sin(z), math.cos(polar)])
    return _vec3(pos) + offset


def histogram_index_to_polar(e: int, z: int, res: int, radius: float) -> PolarPoint:
    """Polar direction at the centre of histogram cell (``e``, ``z``)."""
    return PolarPoint(
        float(e * res + res // 2 - 90),
        float(z * res + res // 2 - 180),
        radius,
    )


def cartesian_to_polar_histogram(pos: Sequence[float], origin: Sequence[float]) -> PolarPoint:
    """Polar vector from ``origin`` to ``pos`` in histogram convention."""
    d = _vec3(pos) - _vec3(origin)
    den = math.hypot(d[0], d[1])
    return PolarPoint(
        math.atan2(d[2], den) * RAD_TO_DEG,
        math.atan2(d[0], d[1]) * RAD_TO_DEG,
        float(np.linalg.norm(d)),
    )


def cartesian_to_polar_fcu(pos: Sequence[float], origin: Optional[Sequence[float]] = None) -> PolarPoint:
    """Polar vector from ``origin`` (default: zero) to ``pos`` in FCU convention.

    Yaw is counter-clockwise from the positive x axis; pitch is positive
    when pointing downward.
    """
    if origin is None:
        origin = (0.0, 0.0, 0.0)
    p = cartesian_to_polar_histogram(pos, origin)
    return wrap_polar(PolarPoint(-p.e, -p.z + 90.0, p.r))


def polar_to_histogram_index(p_pol: PolarPoint, res: int) -> tuple[int, int]:
    """Histogram cell of a direction as ``(azimuth_index, elevation_index)``."""
    wrapped = wrap_polar(p_pol)
    elevation_idx = int(math.floor(wrapped.e / res + 90.0 / res))
    azimuth_idx = int(math.floor(wrapped.z / res + 180.0 / res))
    azimuth_idx = min(max(azimuth_idx, 0), 360 // res - 1)
    elevation_idx = min(max(elevation_idx, 0), 180 // res - 1)
    return azimuth_idx, elevation_idx


def wrap_polar(p_pol: PolarPoint) -> PolarPoint:
    """Bring elevation into [-90, 90] and azimuth into [-180, 180)."""
    e = wrap_angle_to_plus_minus_180(p_pol.e)
    z = wrap_angle_to_plus_minus_180(p_pol.z)
    wrapped = False
    if e > 90.0:
        e = 180.0 - e
        wrapped = True
    elif e < -90.0:
        e = -(180.0 + e)
        wrapped = True
    if wrapped:
        z = z + 180.0 if z < 0.0 else z - 180.0
    return replace(p_pol, e=e, z=z)


def next_yaw(u: Sequence[float], v: Sequence[float]) -> float:
    """Heading in radians from ``u`` towards ``v`` in the x-y plane."""
    return math.atan2(v[1] - u[1], v[0] - u[0])


def to_ned(xyz_enu: Sequence[float]) -> np.ndarray:
    """Convert an ENU vector to NED."""
    x, y, z = _vec3(xyz_enu)
    return np.array([y, x, -z])


def to_enu(xyz_ned: Sequence[float]) -> np.ndarray:
    """Convert an NED vector to ENU."""
    x, y, z = _vec3(xyz_ned)
    return np.array([y, x, -z])


def yaw_to_ned_deg(yaw_enu: float) -> float:
    return 90.0 - yaw_enu


def yaw_to_ned_rad(yaw_enu: float) -> float:
    return math.pi / 2.0 - yaw_enu


def pitch_to_ned(pitch_enu: float) -> float:
    return -pitch_enu


def yaw_to_enu_deg(yaw_ned: float) -> float:
    return 90.0 - yaw_ned


def yaw_to_enu_rad(yaw_ned: float) -> float:
    return math.pi / 2.0 - yaw_ned


def pitch_to_enu(pitch_ned: float) -> float:
    return -pitch_ned