"""Polar obstacle histogram."""

from __future__ import annotations

import numpy as np

# 180 must be divisible by 2 * ALPHA_RES.
ALPHA_RES = 6
GRID_LENGTH_Z = 360 // ALPHA_RES
GRID_LENGTH_E = 180 // ALPHA_RES

_FLT_MIN = float(np.finfo(np.float32).tiny)


class Histogram:
    """Obstacle distance per (elevation, azimuth) cell."""

    def __init__(self, res: int) -> None:
        self._resolution = res
        self._z_dim = 360 // res
        self._e_dim = 180 // res
        self._dist = np.zeros((self._e_dim, self._z_dim), dtype=np.float32)

    @property
    def resolution(self) -> int:
        return self._resolution

    @property
    def e_dim(self) -> int:
        return self._e_dim

    @property
    def z_dim(self) -> int:
        return self._z_dim

    @property
    def dist(self) -> np.ndarray:
        """A copy of the distance matrix, shape (e_dim, z_dim)."""
        return self._dist.copy()

    def get_dist(self, x: int, y: int) -> float:
        """Distance at elevation index ``x`` and azimuth index ``y``, wrapping around."""
        return float(self._dist[x % self._e_dim, y % self._z_dim])

    def set_dist(self, x: int, y: int, value: float) -> None:
        """Set the distance at elevation index ``x`` and azimuth index ``y``."""
        if not (0 <= x < self._e_dim and 0 <= y < self._z_dim):
            raise IndexError(f"histogram index ({x}, {y}) out of range")
        self._dist[x, y] = value

    def upsample(self) -> None:
        """Double the resolution of a half resolution histogram in place."""
        if self._resolution != ALPHA_RES * 2:
            raise ValueError("upsample() can only be used on a half resolution histogram")
        self._resolution //= 2
        self._z_dim *= 2
        self._e_dim *= 2
        self._dist = np.repeat(np.repeat(self._dist, 2, axis=0), 2, axis=1)

    def downsample(self) -> None:
        """Halve the resolution of a full resolution histogram, averaging 2x2 blocks."""
        if self._resolution != ALPHA_RES:
            raise ValueError("downsample() can only be used on a full resolution histogram")
        self._resolution *= 2
        self._z_dim //= 2
        self._e_dim //= 2
        blocks = self._dist.reshape(self._e_dim, 2, self._z_dim, 2)
        self._dist = blocks.mean(axis=(1, 3)).astype(np.float32)

    def set_zero(self) -> None:
        """Reset all cells to zero."""
        self._dist.fill(0.0)

    def is_empty(self) -> bool:
        """True if no cell holds a positive distance."""
        return not bool(np.any(self._dist > _FLT_MIN))