import math

import numpy as np
import pytest

from obstacle_avoidance.geometry import (
    ModelParameters,
    PX4_PARAMETER_FIELDS,
    PolarPoint,
    angle_difference,
    cartesian_to_polar_fcu,
    cartesian_to_polar_histogram,
    distance_2d_polar,
    get_angular_velocity,
    histogram_index_to_polar,
    index_angle_difference,
    next_yaw,
    pitch_to_enu,
    pitch_to_ned,
    polar_fcu_to_cartesian,
    polar_histogram_to_cartesian,
    polar_to_histogram_index,
    to_enu,
    to_ned,
    wrap_angle_to_plus_minus_180,
    wrap_angle_to_plus_minus_pi,
    wrap_polar,
    yaw_to_enu_deg,
    yaw_to_enu_rad,
    yaw_to_ned_deg,
    yaw_to_ned_rad,
)
from obstacle_avoidance.histogram import ALPHA_RES, GRID_LENGTH_E, GRID_LENGTH_Z

ANGLES = [-725.0, -361.0, -180.0, -45.5, 0.0, 12.0, 179.0, 180.0, 359.0, 1000.0]


@pytest.mark.parametrize("angle", ANGLES)
def test_wrap_180_range_and_periodicity(angle):
    w = wrap_angle_to_plus_minus_180(angle)
    assert -180.0 <= w < 180.0
    assert math.remainder(w - angle, 360.0) == pytest.approx(0.0, abs=1e-9)
    assert wrap_angle_to_plus_minus_180(angle + 360.0) == pytest.approx(w)


@pytest.mark.parametrize("angle", [-10.0, -3.5, 0.0, 1.0, 3.2, 7.0])
def test_wrap_pi_range_and_periodicity(angle):
    w = wrap_angle_to_plus_minus_pi(angle)
    assert -math.pi <= w < math.pi
    assert math.remainder(w - angle, 2 * math.pi) == pytest.approx(0.0, abs=1e-9)


@pytest.mark.parametrize("a", [-350.0, -90.0, 0.0, 170.0, 540.0])
@pytest.mark.parametrize("b", [-200.0, 0.0, 45.0, 359.0])
def test_angle_difference_is_wrapped(a, b):
    d = angle_difference(a, b)
    assert -180.0 <= d < 180.0
    assert math.remainder(a - b - d, 360.0) == pytest.approx(0.0, abs=1e-9)


@pytest.mark.parametrize("a,b", [(-170.0, 170.0), (10.0, 20.0), (0.0, 180.0), (90.0, -90.0)])
def test_index_angle_difference_symmetric(a, b):
    d = index_angle_difference(a, b)
    assert d == index_angle_difference(b, a)
    assert 0.0 <= d <= 180.0
    assert d == pytest.approx(abs(angle_difference(a, b)))


@pytest.mark.parametrize("yaw", [-3.0, -1.0, 0.0, 2.0, 3.1])
def test_angular_velocity_zero_at_target(yaw):
    assert get_angular_velocity(yaw, yaw) == pytest.approx(0.0)


def test_angular_velocity_takes_shorter_direction():
    assert get_angular_velocity(math.pi / 2, 0.0) == pytest.approx(math.pi / 4)
    vel = get_angular_velocity(3.0, -3.0)
    assert vel < 0.0
    assert abs(vel) <= math.pi / 2


def test_distance_2d_polar():
    assert distance_2d_polar(PolarPoint(0.0, 0.0, 1.0), PolarPoint(3.0, 4.0, 9.0)) == pytest.approx(5.0)


def test_histogram_index_round_trip():
    for e in range(GRID_LENGTH_E):
        for z in range(GRID_LENGTH_Z):
            p = histogram_index_to_polar(e, z, ALPHA_RES, 1.0)
            assert polar_to_histogram_index(p, ALPHA_RES) == (z, e)


def test_histogram_index_clamped_at_zenith():
    assert polar_to_histogram_index(PolarPoint(90.0, 180.0, 1.0), ALPHA_RES) == (0, GRID_LENGTH_E - 1)


@pytest.mark.parametrize("e,z,r", [(0.0, 0.0, 2.0), (30.0, -120.0, 1.5), (-60.0, 45.0, 3.0), (10.0, 179.0, 0.5)])
def test_polar_histogram_cartesian_round_trip(e, z, r):
    origin = np.array([1.0, -2.0, 0.5])
    p = PolarPoint(e, z, r)
    cart = polar_histogram_to_cartesian(p, origin)
    back = cartesian_to_polar_histogram(cart, origin)
    assert back.e == pytest.approx(e)
    assert back.z == pytest.approx(z)
    assert back.r == pytest.approx(r)


def test_cartesian_to_polar_histogram_along_y():
    p = cartesian_to_polar_histogram([0.0, 2.0, 0.0], [0.0, 0.0, 0.0])
    assert (p.e, p.z, p.r) == pytest.approx((0.0, 0.0, 2.0))


def test_cartesian_to_polar_fcu_along_x():
    p = cartesian_to_polar_fcu([1.0, 0.0, 0.0])
    assert (p.e, p.z, p.r) == pytest.approx((0.0, 0.0, 1.0))


@pytest.mark.parametrize("point", [[1.0, 2.0, 3.0], [-2.0, 0.5, -1.0], [0.3, -4.0, 0.0]])
def test_fcu_conversion_uses_z_down(point):
    origin = np.array([0.5, 0.5, 0.5])
    pol = cartesian_to_polar_fcu(point, origin)
    back = polar_fcu_to_cartesian(pol, origin)
    d = np.asarray(point) - origin
    assert np.allclose(back, origin + np.array([d[0], d[1], -d[2]]))


@pytest.mark.parametrize("e,z", [(100.0, 30.0), (-120.0, -60.0), (250.0, 10.0), (45.0, 400.0)])
def test_wrap_polar_preserves_direction(e, z):
    p = PolarPoint(e, z, 2.0)
    w = wrap_polar(p)
    assert -90.0 <= w.e <= 90.0
    assert -180.0 <= w.z < 180.0
    assert w.r == p.r
    assert np.allclose(polar_histogram_to_cartesian(w, [0, 0, 0]), polar_histogram_to_cartesian(p, [0, 0, 0]))


def test_next_yaw():
    assert next_yaw([1.0, 1.0, 0.0], [1.0, 3.0, 5.0]) == pytest.approx(math.pi / 2)
    assert next_yaw([0.0, 0.0, 0.0], [-1.0, 0.0, 0.0]) == pytest.approx(math.pi)


def test_ned_enu_vectors():
    assert np.allclose(to_ned([1.0, 2.0, 3.0]), [2.0, 1.0, -3.0])
    v = np.array([0.4, -1.2, 7.0])
    assert np.allclose(to_enu(to_ned(v)), v)
    assert np.allclose(to_ned(to_enu(v)), v)


@pytest.mark.parametrize("angle", [-2.0, 0.0, 1.3, 90.0])
def test_yaw_and_pitch_conversions_invert(angle):
    assert yaw_to_enu_deg(yaw_to_ned_deg(angle)) == pytest.approx(angle)
    assert yaw_to_enu_rad(yaw_to_ned_rad(angle)) == pytest.approx(angle)
    assert pitch_to_enu(pitch_to_ned(angle)) == pytest.approx(angle)


def test_model_parameters_defaults_uninitialized():
    params = ModelParameters()
    assert params.mpc_auto_mode == -1
    for field in PX4_PARAMETER_FIELDS.values():
        if field != "mpc_auto_mode":
            assert math.isnan(getattr(params, field))