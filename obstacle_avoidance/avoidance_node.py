"""Companion process health, flight controller parameters and mission speed."""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Optional

import numpy as np

from .geometry import PX4_PARAMETER_FIELDS, MavCommand, MavState, ModelParameters

_log = logging.getLogger(__name__)

_FLT_MIN = float(np.finfo(np.float32).tiny)

MAV_COMPONENT_ID_AVOIDANCE = 196

# Parameters requested by polling, in request order.
POLLED_PARAMETERS = (
    "MPC_ACC_HOR",
    "MPC_ACC_DOWN_MAX",
    "MPC_ACC_UP_MAX",
    "MPC_XY_CRUISE",
    "MPC_Z_VEL_MAX_DN",
    "MPC_Z_VEL_MAX_UP",
    "CP_DIST",
    "MPC_LAND_SPEED",
    "MPC_JERK_MAX",
    "NAV_ACC_RAD",
    "MPC_YAWRAUTO_MAX",
)

POLL_INTERVAL_UNINITIALIZED_S = 5.0
POLL_INTERVAL_INITIALIZED_S = 30.0


@dataclass(frozen=True)
class MissionItem:
    """One waypoint of the flight controller mission."""

    command: int
    param1: float = 0.0
    param2: float = 0.0
    is_current: bool = False


@dataclass(frozen=True)
class CompanionStatus:
    """Heartbeat of the avoidance process."""

    state: MavState
    component: int = MAV_COMPONENT_ID_AVOIDANCE
    stamp: float = field(default_factory=time.time)


class AvoidanceNode:
    """Tracks system health and flight controller parameters for the planners.

    ``param_getter(name)`` returns the parameter value or None if it could
    not be fetched; ``publish_status(status)`` sends a heartbeat.
    """

    def __init__(
        self,
        param_getter: Optional[Callable[[str], Optional[float]]] = None,
        publish_status: Optional[Callable[[CompanionStatus], None]] = None,
    ) -> None:
        self._param_getter = param_getter
        self._publish_status = publish_status
        self.status = MavState.STANDBY
        self.timeout_termination = 15.0
        self.timeout_critical = 4.0
        self.timeout_startup = 5.0
        self.position_received = True
        self._mission_item_speed = math.nan
        self._px4 = ModelParameters()
        self._param_lock = threading.Lock()

    @property
    def mission_item_speed(self) -> float:
        """Ground speed set by the last change-speed mission item, NaN if none."""
        return self._mission_item_speed

    def check_failsafe(self, since_last_cloud: float, since_start: float, hover: bool) -> bool:
        """Update the system status from data timeouts (seconds); returns the new hover flag."""
        if since_last_cloud > self.timeout_termination and since_start > self.timeout_termination:
            self.status = MavState.FLIGHT_TERMINATION
            _log.warning("Planner abort: missing required data")
        elif since_last_cloud > self.timeout_critical and since_start > self.timeout_startup:
            if self.position_received:
                hover = True
                self.status = MavState.CRITICAL
            else:
                _log.warning("Pointcloud timeout: No position received, no WP to output....")
        elif not hover:
            self.status = MavState.ACTIVE
        return hover

    def px4_params_callback(self, param_id: str, value: float) -> bool:
        """Store a parameter pushed by the flight controller; False if it is not one we use."""
        name = PX4_PARAMETER_FIELDS.get(param_id)
        if name is None:
            return False
        new_value = int(value) if param_id == "MPC_AUTO_MODE" else float(value)
        with self._param_lock:
            _log.info("parameter %s is set from %s to %s", param_id, getattr(self._px4, name), new_value)
            setattr(self._px4, name, new_value)
        return True

    def poll_px4_parameters(self) -> bool:
        """Request the polled parameters once; True if all of them are now known."""
        with self._param_lock:
            if self._param_getter is not None:
                for param_id in POLLED_PARAMETERS:
                    value = self._param_getter(param_id)
                    if value is not None:
                        setattr(self._px4, PX4_PARAMETER_FIELDS[param_id], float(value))
            return all(
                math.isfinite(getattr(self._px4, PX4_PARAMETER_FIELDS[param_id])) for param_id in POLLED_PARAMETERS
            )

    def run_parameter_poller(self, stop_event: threading.Event) -> None:
        """Poll parameters until ``stop_event`` is set, more often while some are unknown."""
        while not stop_event.is_set():
            initialized = self.poll_px4_parameters()
            stop_event.wait(POLL_INTERVAL_INITIALIZED_S if initialized else POLL_INTERVAL_UNINITIALIZED_S)

    def mission_callback(self, waypoints: Iterable[MissionItem]) -> None:
        """Pick up the ground speed of the latest change-speed item up to the current one."""
        items = list(waypoints)
        current = next((i for i, item in enumerate(items) if item.is_current), None)
        if current is None:
            return
        for item in reversed(items[: current + 1]):
            if (
                item.command == MavCommand.DO_CHANGE_SPEED
                and item.param1 - 1.0 < _FLT_MIN
                and item.param2 > 0.0
            ):
                self._mission_item_speed = float(item.param2)
                break

    def get_px4_parameters(self) -> ModelParameters:
        """A copy of the current flight controller parameters."""
        with self._param_lock:
            return replace(self._px4)

    def publish_system_status(self) -> CompanionStatus:
        """Send and return a heartbeat carrying the current status."""
        status = CompanionStatus(state=self.status)
        if self._publish_status is not None:
            self._publish_status(status)
        return status