import math
import threading

import pytest

from obstacle_avoidance.avoidance_node import (
    POLLED_PARAMETERS,
    AvoidanceNode,
    MissionItem,
)
from obstacle_avoidance.geometry import MavCommand, MavState


def test_failsafe_termination():
    node = AvoidanceNode()
    hover = node.check_failsafe(20.0, 20.0, False)
    assert node.status is MavState.FLIGHT_TERMINATION
    assert hover is False


def test_failsafe_critical_sets_hover():
    node = AvoidanceNode()
    hover = node.check_failsafe(5.0, 6.0, False)
    assert hover is True
    assert node.status is MavState.CRITICAL


def test_failsafe_critical_without_position_keeps_status():
    node = AvoidanceNode()
    node.position_received = False
    hover = node.check_failsafe(5.0, 6.0, False)
    assert hover is False
    assert node.status is MavState.STANDBY


def test_failsafe_healthy_becomes_active():
    node = AvoidanceNode()
    assert node.check_failsafe(1.0, 100.0, False) is False
    assert node.status is MavState.ACTIVE


def test_failsafe_hovering_keeps_status():
    node = AvoidanceNode()
    node.status = MavState.CRITICAL
    assert node.check_failsafe(1.0, 100.0, True) is True
    assert node.status is MavState.CRITICAL


def test_failsafe_during_startup_is_active():
    node = AvoidanceNode()
    node.check_failsafe(5.0, 3.0, False)
    assert node.status is MavState.ACTIVE


def test_params_callback_sets_known_parameter():
    node = AvoidanceNode()
    assert node.px4_params_callback("MPC_XY_CRUISE", 5.0) is True
    assert node.px4_params_callback("MPC_AUTO_MODE", 1) is True
    params = node.get_px4_parameters()
    assert params.mpc_xy_cruise == 5.0
    assert params.mpc_auto_mode == 1


def test_params_callback_ignores_unknown_parameter():
    node = AvoidanceNode()
    assert node.px4_params_callback("SOME_OTHER", 3.0) is False
    assert math.isnan(node.get_px4_parameters().mpc_xy_cruise)


def test_get_px4_parameters_returns_copy():
    node = AvoidanceNode()
    node.px4_params_callback("CP_DIST", 2.0)
    copy = node.get_px4_parameters()
    copy.cp_dist = 7.0
    assert node.get_px4_parameters().cp_dist == 2.0


def test_poll_with_all_values_initializes():
    values = {name: float(i + 1) for i, name in enumerate(POLLED_PARAMETERS)}
    node = AvoidanceNode(param_getter=values.get)
    assert node.poll_px4_parameters() is True
    params = node.get_px4_parameters()
    assert params.mpc_acc_hor == values["MPC_ACC_HOR"]
    assert params.mpc_yawrauto_max == values["MPC_YAWRAUTO_MAX"]


def test_poll_with_missing_value_is_not_initialized():
    values = {name: 1.0 for name in POLLED_PARAMETERS if name != "CP_DIST"}
    node = AvoidanceNode(param_getter=values.get)
    assert node.poll_px4_parameters() is False
    assert node.get_px4_parameters().nav_acc_rad == 1.0


def test_run_parameter_poller_stops_on_event():
    stop = threading.Event()
    calls = []

    def getter(name):
        calls.append(name)
        stop.set()
        return 2.0

    node = AvoidanceNode(param_getter=getter)
    node.run_parameter_poller(stop)
    assert calls == list(POLLED_PARAMETERS)
    assert node.get_px4_parameters().mpc_land_speed == 2.0


def test_mission_speed_from_preceding_change_speed():
    node = AvoidanceNode()
    items = [
        MissionItem(MavCommand.DO_CHANGE_SPEED, 1.0, 3.0),
        MissionItem(16),
        MissionItem(16, is_current=True),
        MissionItem(MavCommand.DO_CHANGE_SPEED, 1.0, 9.0),
    ]
    node.mission_callback(items)
    assert node.mission_item_speed == 3.0


def test_mission_speed_ignores_invalid_speed():
    node = AvoidanceNode()
    items = [
        MissionItem(MavCommand.DO_CHANGE_SPEED, 1.0, 4.0),
        MissionItem(MavCommand.DO_CHANGE_SPEED, 1.0, 0.0, is_current=True),
    ]
    node.mission_callback(items)
    assert node.mission_item_speed == 4.0


def test_mission_speed_ignores_airspeed_type():
    node = AvoidanceNode()
    items = [
        MissionItem(MavCommand.DO_CHANGE_SPEED, 1.0, 4.0),
        MissionItem(MavCommand.DO_CHANGE_SPEED, 2.0, 8.0, is_current=True),
    ]
    node.mission_callback(items)
    assert node.mission_item_speed == 4.0


def test_mission_without_current_item_keeps_speed():
    node = AvoidanceNode()
    node.mission_callback([MissionItem(MavCommand.DO_CHANGE_SPEED, 1.0, 4.0, is_current=True)])
    node.mission_callback([MissionItem(MavCommand.DO_CHANGE_SPEED, 1.0, 9.0)])
    assert node.mission_item_speed == 4.0


def test_publish_system_status():
    sent = []
    node = AvoidanceNode(publish_status=sent.append)
    node.status = MavState.ACTIVE
    status = node.publish_system_status()
    assert sent == [status]
    assert status.component == 196
    assert status.state is MavState.ACTIVE


@pytest.mark.parametrize("state", [MavState.BOOT, MavState.CRITICAL])
def test_published_state_follows_status(state):
    node = AvoidanceNode()
    node.status = state
    assert node.publish_system_status().state is state