import heapq
import math

import numpy as np
import pytest

from obstacle_avoidance.geometry import PolarPoint
from obstacle_avoidance.planner_types import (
    AvoidanceOutput,
    CandidateDirection,
    CostParameters,
    PlannerState,
    SimulationLimits,
    SimulationState,
    WaypointResult,
    norm_clamp,
)


def test_candidate_ordering_by_cost():
    a = CandidateDirection(2.0, 10.0, 20.0)
    b = CandidateDirection(1.0, 30.0, 40.0)
    assert b < a
    assert a > b
    assert not (a < b)
    assert sorted([a, b]) == [b, a]


def test_candidate_heap_pops_cheapest():
    cands = [CandidateDirection(c, 0.0, float(i)) for i, c in enumerate([3.0, 1.0, 2.0])]
    heapq.heapify(cands)
    assert heapq.heappop(cands).azimuth_angle == 1.0


def test_candidate_to_polar():
    c = CandidateDirection(1.0, 12.0, -45.0)
    assert c.to_polar(3.5) == PolarPoint(12.0, -45.0, 3.5)


def test_cost_parameter_defaults():
    p = CostParameters()
    assert (p.yaw_cost_param, p.pitch_cost_param, p.velocity_cost_param, p.obstacle_cost_param) == (
        0.5, 3.0, 1.5, 5.0)


def test_simulation_defaults_are_nan():
    s = SimulationState()
    assert math.isnan(s.time)
    assert np.isnan(s.position).all() and np.isnan(s.acceleration).all()
    limits = SimulationLimits()
    assert math.isnan(limits.max_jerk_norm)


def test_simulation_state_defaults_not_shared():
    a = SimulationState()
    b = SimulationState()
    a.position[0] = 1.0
    assert a.position[0] == 1.0
    assert np.array_equal(b.position, np.full(3, np.nan), equal_nan=True)


def test_avoidance_output_default_path_empty():
    out = AvoidanceOutput()
    out.path_node_positions.append(np.zeros(3))
    assert AvoidanceOutput().path_node_positions == []


def test_waypoint_result_defaults():
    r = WaypointResult()
    assert r.waypoint_type is PlannerState.TRY_PATH
    assert np.isnan(r.smoothed_goto_position).all()


def test_norm_clamp_keeps_short_vector():
    v = np.array([1.0, 2.0, 2.0])
    assert np.allclose(norm_clamp(v, 10.0), v)


@pytest.mark.parametrize("max_norm", [0.5, 1.0, 2.5])
def test_norm_clamp_limits_long_vector(max_norm):
    v = np.array([3.0, 4.0, 12.0])
    out = norm_clamp(v, max_norm)
    assert np.linalg.norm(out) == pytest.approx(max_norm)
    assert np.allclose(out / np.linalg.norm(out), v / np.linalg.norm(v))


def test_norm_clamp_does_not_alias_input():
    v = np.array([0.1, 0.1])
    out = norm_clamp(v, 1.0)
    out[0] = 5.0
    assert v[0] == 0.1