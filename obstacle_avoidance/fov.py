"""Sensor field of view: containment tests and estimation from point clouds."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Sequence, Union

import numpy as np

from .geometry import (
    PolarPoint,
    cartesian_to_polar_fcu,
    histogram_index_to_polar,
    polar_histogram_to_cartesian,
    wrap_angle_to_plus_minus_180,
    wrap_polar,
)
from .histogram import ALPHA_RES, GRID_LENGTH_E

_SENTINEL = 9999.0


@dataclass(frozen=True)
class FOV:
    """Field of view of one sensor in FCU convention, all angles in degrees."""

    yaw_deg: float = 0.0
    pitch_deg: float = 0.0
    h_fov_deg: float = 0.0
    v_fov_deg: float = 0.0

    def contains_yaw(self, p_pol: PolarPoint) -> bool:
        """True if the azimuth of ``p_pol`` lies inside the horizontal field of view."""
        half = self.h_fov_deg / 2.0
        upper = wrap_angle_to_plus_minus_180(self.yaw_deg + half)
        lower = wrap_angle_to_plus_minus_180(self.yaw_deg - half)
        return lower <= p_pol.z <= upper

    def contains(self, p_pol: PolarPoint) -> bool:
        """True if ``p_pol`` lies inside both the horizontal and vertical field of view."""
        half = self.v_fov_deg / 2.0
        return self.contains_yaw(p_pol) and self.pitch_deg - half <= p_pol.e <= self.pitch_deg + half


FOVs = Union[FOV, Iterable[FOV]]


def _as_list(fovs: FOVs) -> list[FOV]:
    if isinstance(fovs, FOV):
        return [fovs]
    return list(fovs)


def point_inside_fov(fovs: FOVs, p_pol: PolarPoint) -> bool:
    """True if any of the given fields of view contains ``p_pol``."""
    return any(fov.contains(p_pol) for fov in _as_list(fovs))


def point_inside_yaw_fov(fovs: FOVs, p_pol: PolarPoint) -> bool:
    """True if the azimuth of ``p_pol`` lies inside any horizontal field of view."""
    return any(fov.contains_yaw(p_pol) for fov in _as_list(fovs))


def histogram_index_yaw_inside_fov(
    fovs: FOVs, idx: int, position: Sequence[float], yaw_fcu_frame: float
) -> bool:
    """True if at least one azimuth edge of histogram column ``idx`` is inside a field of view.

    ``yaw_fcu_frame`` is the vehicle heading in the global FCU frame (degrees).
    """
    pol_hist = histogram_index_to_polar(GRID_LENGTH_E // 2, idx, ALPHA_RES, 1.0)
    cart = polar_histogram_to_cartesian(pol_hist, position)
    pol_fcu = cartesian_to_polar_fcu(cart, position)
    body_z = pol_fcu.z - yaw_fcu_frame
    half_res = ALPHA_RES / 2.0
    plus = wrap_polar(replace(pol_fcu, z=body_z + half_res))
    minus = wrap_polar(replace(pol_fcu, z=body_z - half_res))
    fov_list = _as_list(fovs)
    return point_inside_fov(fov_list, plus) or point_inside_fov(fov_list, minus)


def which_fov(fovs: FOVs, p_pol: PolarPoint) -> Optional[int]:
    """Index of the only field of view whose yaw range holds ``p_pol``.

    Returns None when no camera, or more than one, sees the point.
    """
    found: Optional[int] = None
    for i, fov in enumerate(_as_list(fovs)):
        if fov.contains_yaw(p_pol):
            if found is not None:
                return None
            found = i
    return found


def edge_of_fov(fovs: FOVs, p_pol: PolarPoint) -> Optional[int]:
    """Index of the field of view on whose outer edge ``p_pol`` lies, or None."""
    fov_list = _as_list(fovs)
    idx = which_fov(fov_list, p_pol)
    if idx is None:
        return None
    fov = fov_list[idx]
    half_res = ALPHA_RES / 2.0
    if wrap_angle_to_plus_minus_180(p_pol.z - fov.yaw_deg) > 0.0:
        outside_z = wrap_angle_to_plus_minus_180(fov.yaw_deg + fov.h_fov_deg / 2.0 + half_res)
    else:
        outside_z = wrap_angle_to_plus_minus_180(fov.yaw_deg - fov.h_fov_deg / 2.0 - half_res)
    just_outside = replace(p_pol, z=outside_z)
    if point_inside_yaw_fov(fov_list, just_outside):
        return None
    return idx


def scale_to_fov(fovs: FOVs, p_pol: PolarPoint) -> float:
    """Visibility weight in [0, 1] of direction ``p_pol``, fading towards FOV edges."""
    fov_list = _as_list(fovs)
    idx = edge_of_fov(fov_list, p_pol)
    if idx is not None:
        fov = fov_list[idx]
        angle_diff = abs(fov.yaw_deg - p_pol.z)
        angle_diff = min(angle_diff, abs(360.0 - angle_diff))
        angle_diff = min(fov.h_fov_deg / 2.0, angle_diff)
        return 1.0 - 2.0 * angle_diff / fov.h_fov_deg
    return 1.0 if point_inside_yaw_fov(fov_list, p_pol) else 0.0


def remove_nan_and_get_maxima(cloud: Sequence[Sequence[float]]) -> tuple[np.ndarray, np.ndarray]:
    """Drop non-finite points and find the extreme points of the cloud.

    Returns ``(filtered, maxima)``: the finite points in their original
    order, and the points holding the largest x, y, z followed by the
    smallest x, y, z.
    """
    points = np.asarray(cloud, dtype=float).reshape(-1, 3)
    filtered = points[np.isfinite(points).all(axis=1)]
    if len(filtered) == 0:
        return filtered, np.empty((0, 3))
    indices = [
        int(i)
        for col in range(3)
        for i in [np.argmax(filtered[:, col])]
        if filtered[i, col] > -_SENTINEL
    ]
    indices += [
        int(i)
        for col in range(3)
        for i in [np.argmin(filtered[:, col])]
        if filtered[i, col] < _SENTINEL
    ]
    return filtered, filtered[indices].reshape(-1, 3)


def update_fov_from_maxima(fov: FOV, maxima: Sequence[Sequence[float]]) -> FOV:
    """Widen ``fov`` to cover the given extreme points (never narrows it)."""
    h_min, h_max = _SENTINEL, -_SENTINEL
    v_min, v_max = _SENTINEL, -_SENTINEL
    for point in np.asarray(maxima, dtype=float).reshape(-1, 3):
        p = cartesian_to_polar_fcu(point)
        h = p.z + 180.0
        v = p.e + 90.0
        h_min, h_max = min(h, h_min), max(h, h_max)
        v_min, v_max = min(v, v_min), max(v, v_max)

    h_diff = min(h_max - h_min, 360.0 - h_max + h_min)
    v_diff = min(v_max - v_min, 360.0 - v_max + v_min)

    if h_diff > fov.h_fov_deg:
        # assumes a single camera sees less than 180 degrees
        if h_diff >= h_max - h_min:
            yaw = wrap_angle_to_plus_minus_180((h_max + h_min) / 2.0 - 180.0)
        else:
            yaw = wrap_angle_to_plus_minus_180((h_max + h_min) / 2.0)
        fov = replace(fov, h_fov_deg=h_diff, yaw_deg=yaw)

    if v_diff > fov.v_fov_deg:
        fov = replace(fov, v_fov_deg=v_diff, pitch_deg=(v_max + v_min) / 2.0 - 90.0)
    return fov