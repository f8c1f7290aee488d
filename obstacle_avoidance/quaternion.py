"""Unit quaternions for vehicle orientation and frame conversions."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass(frozen=True)
class Quaternion:
    """A quaternion ``w + xi + yj + zk``."""

    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_axis_angle(cls, angle: float, axis: Sequence[float]) -> Quaternion:
        """Rotation of ``angle`` radians about ``axis``."""
        ax = np.asarray(axis, dtype=float)
        length = float(np.linalg.norm(ax))
        if length == 0.0:
            raise ValueError("rotation axis must not be zero")
        ax = ax / length
        half = angle / 2.0
        s = math.sin(half)
        return cls(math.cos(half), ax[0] * s, ax[1] * s, ax[2] * s)

    @classmethod
    def from_rpy(cls, roll: float, pitch: float, yaw: float) -> Quaternion:
        """Rotation composed as yaw about Z, then pitch about Y, then roll about X."""
        return (
            cls.from_axis_angle(yaw, (0.0, 0.0, 1.0))
            * cls.from_axis_angle(pitch, (0.0, 1.0, 0.0))
            * cls.from_axis_angle(roll, (1.0, 0.0, 0.0))
        )

    def __mul__(self, other: object) -> Quaternion:
        if not isinstance(other, Quaternion):
            return NotImplemented
        w1, x1, y1, z1 = self.w, self.x, self.y, self.z
        w2, x2, y2, z2 = other.w, other.x, other.y, other.z
        return Quaternion(
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
        )

    def __neg__(self) -> Quaternion:
        return Quaternion(-self.w, -self.x, -self.y, -self.z)

    def _dot(self, other: Quaternion) -> float:
        return self.w * other.w + self.x * other.x + self.y * other.y + self.z * other.z

    def _scaled(self, factor: float) -> Quaternion:
        return Quaternion(self.w * factor, self.x * factor, self.y * factor, self.z * factor)

    def _plus(self, other: Quaternion) -> Quaternion:
        return Quaternion(self.w + other.w, self.x + other.x, self.y + other.y, self.z + other.z)

    def norm(self) -> float:
        """Euclidean length of the four components."""
        return math.sqrt(self._dot(self))

    def normalized(self) -> Quaternion:
        """The quaternion scaled to unit length."""
        length = self.norm()
        if length == 0.0:
            raise ValueError("cannot normalize a zero quaternion")
        return self._scaled(1.0 / length)

    def slerp(self, other: Quaternion, t: float) -> Quaternion:
        """Spherical linear interpolation along the shortest path."""
        dot = self._dot(other)
        if dot < 0.0:
            other = -other
            dot = -dot
        if dot > 0.9995:
            return self._scaled(1.0 - t)._plus(other._scaled(t)).normalized()
        theta = math.acos(min(dot, 1.0))
        sin_theta = math.sin(theta)
        s0 = math.sin((1.0 - t) * theta) / sin_theta
        s1 = math.sin(t * theta) / sin_theta
        return self._scaled(s0)._plus(other._scaled(s1))

    def yaw(self) -> float:
        """Heading about the Z axis in radians."""
        siny_cosp = 2.0 * (self.w * self.z + self.x * self.y)
        cosy_cosp = 1.0 - 2.0 * (self.y * self.y + self.z * self.z)
        return math.atan2(siny_cosp, cosy_cosp)


NED_ENU_RPY = (math.pi, 0.0, math.pi / 2.0)
AIRCRAFT_BASELINK_RPY = (math.pi, 0.0, 0.0)


def quaternion_from_rpy(rpy: Sequence[float]) -> Quaternion:
    """Quaternion from a (roll, pitch, yaw) triple in radians."""
    roll, pitch, yaw = rpy
    return Quaternion.from_rpy(roll, pitch, yaw)


def orientation_to_ned(q: Quaternion) -> Quaternion:
    """Convert an ENU/baselink orientation to NED/aircraft."""
    ned_enu_q = quaternion_from_rpy(NED_ENU_RPY)
    aircraft_baselink_q = quaternion_from_rpy(AIRCRAFT_BASELINK_RPY)
    return ned_enu_q * (q * aircraft_baselink_q)


def orientation_to_enu(q: Quaternion) -> Quaternion:
    """Convert an NED/aircraft orientation to ENU/baselink."""
    ned_enu_q = quaternion_from_rpy(NED_ENU_RPY)
    aircraft_baselink_q = quaternion_from_rpy(AIRCRAFT_BASELINK_RPY)
    return (ned_enu_q * q) * aircraft_baselink_q


def get_yaw_from_quaternion(q: Quaternion) -> float:
    """Yaw angle of ``q`` in degrees."""
    return math.degrees(q.yaw())


def get_pitch_from_quaternion(q: Quaternion) -> float:
    """Pitch angle of ``q`` in degrees, saturated at +-90."""
    sinp = 2.0 * (q.w * q.y - q.z * q.x)
    if abs(sinp) >= 1.0:
        pitch = math.copysign(math.pi / 2.0, sinp)
    else:
        pitch = math.asin(sinp)
    return math.degrees(pitch)


def create_pose(waypoint: Sequence[float], yaw: float) -> tuple[np.ndarray, Quaternion]:
    """A pose at ``waypoint`` with zero roll and pitch and the given yaw (rad)."""
    position = np.array(waypoint, dtype=float)
    orientation = (
        Quaternion.from_axis_angle(0.0, (1.0, 0.0, 0.0))
        * Quaternion.from_axis_angle(0.0, (0.0, 1.0, 0.0))
        * Quaternion.from_axis_angle(yaw, (0.0, 0.0, 1.0))
    )
    return position, orientation