"""Time-indexed buffer of frame transforms with interpolated lookup."""

from __future__ import annotations

import enum
import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, Sequence

import numpy as np

from .quaternion import Quaternion

_log = logging.getLogger(__name__)

# Lookup problems are only reported once the buffer has had time to fill.
_QUIET_PERIOD_S = 3.0


class _Level(enum.Enum):
    ERROR = logging.ERROR
    WARN = logging.WARNING
    INFO = logging.INFO
    DEBUG = logging.DEBUG


@dataclass(frozen=True)
class StampedTransform:
    """A rigid transform (translation and rotation) valid at time ``stamp`` (seconds)."""

    stamp: float
    origin: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: Quaternion = field(default_factory=Quaternion)

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", np.asarray(self.origin, dtype=float).reshape(3).copy())


class TransformLookupError(LookupError):
    """Raised when a transform cannot be retrieved from the buffer."""


def _interpolate(earlier: StampedTransform, later: StampedTransform, stamp: float) -> StampedTransform:
    if stamp > later.stamp or stamp < earlier.stamp:
        raise TransformLookupError("could not interpolate transform")
    tau = (stamp - earlier.stamp) / (later.stamp - earlier.stamp)
    origin = earlier.origin * (1.0 - tau) + later.origin * tau
    rotation = earlier.rotation.slerp(later.rotation, tau)
    return StampedTransform(stamp, origin, rotation)


class TransformBuffer:
    """Keeps the last ``buffer_size_s`` seconds of transforms for each frame pair."""

    def __init__(self, buffer_size_s: float = 10.0, clock: Callable[[], float] = time.time) -> None:
        self._buffer_size = float(buffer_size_s)
        self._clock = clock
        self._startup_time = clock()
        self._buffer: Dict[str, Deque[StampedTransform]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(source_frame: str, target_frame: str) -> str:
        return f"{source_frame}_to_{target_frame}"

    def _report(self, level: _Level, msg: str) -> None:
        if self._clock() - self._startup_time > _QUIET_PERIOD_S:
            _log.log(level.value, msg)

    def insert_transform(self, source_frame: str, target_frame: str, transform: StampedTransform) -> bool:
        """Buffer ``transform``; returns False if it is not newer than the last one buffered."""
        with self._lock:
            entries = self._buffer.setdefault(self._key(source_frame, target_frame), deque())
            if entries and entries[-1].stamp >= transform.stamp:
                return False
            entries.append(transform)
            while transform.stamp - entries[0].stamp > self._buffer_size:
                entries.popleft()
            return True

    def get_transform(self, source_frame: str, target_frame: str, time: float) -> StampedTransform:
        """Transform between the frames at ``time``, interpolated between buffered entries."""
        with self._lock:
            entries = self._buffer.get(self._key(source_frame, target_frame))
            if entries is None:
                msg = "TF Buffer: could not retrieve requested transform from buffer, unregistered"
                self._report(_Level.ERROR, msg)
                raise TransformLookupError(msg)
            if not entries:
                msg = "TF Buffer: could not retrieve requested transform from buffer, buffer is empty"
                self._report(_Level.WARN, msg)
                raise TransformLookupError(msg)
            if entries[-1].stamp < time:
                msg = "TF Buffer: could not retrieve requested transform from buffer, tf has not yet arrived"
                self._report(_Level.DEBUG, msg)
                raise TransformLookupError(msg)
            if entries[0].stamp > time:
                msg = (
                    "TF Buffer: could not retrieve requested transform from buffer, "
                    "tf has already been dropped from buffer"
                )
                self._report(_Level.WARN, msg)
                raise TransformLookupError(msg)
            snapshot: Sequence[StampedTransform] = list(entries)

        later = snapshot[-1]
        for earlier in reversed(snapshot[:-1]):
            if earlier.stamp <= time:
                try:
                    return _interpolate(earlier, later, time)
                except TransformLookupError:
                    self._report(_Level.WARN, "TF Buffer: could not interpolate transform")
                    raise
            later = earlier
        raise TransformLookupError("TF Buffer: no pair of transforms brackets the requested time")