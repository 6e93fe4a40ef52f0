import math

import pytest

from slamkit.geometry import (
    OrientedPoint,
    Point,
    absolute_difference,
    absolute_sum,
    euclidian_dist,
    interpolate,
    point_max,
    point_min,
    square_dist,
)


POSES = [
    OrientedPoint(0.0, 0.0, 0.0),
    OrientedPoint(1.5, -2.0, 0.7),
    OrientedPoint(-3.0, 4.0, -2.9),
    OrientedPoint(10.0, 0.5, 3.1),
]


@pytest.mark.parametrize("base", POSES)
@pytest.mark.parametrize("target", POSES)
def test_difference_then_sum_round_trip(base, target):
    delta = absolute_difference(target, base)
    result = absolute_sum(base, delta)
    assert result.x == pytest.approx(target.x, abs=1e-9)
    assert result.y == pytest.approx(target.y, abs=1e-9)
    assert math.sin(result.theta) == pytest.approx(math.sin(target.theta), abs=1e-9)
    assert math.cos(result.theta) == pytest.approx(math.cos(target.theta), abs=1e-9)


@pytest.mark.parametrize("pose", POSES)
def test_difference_with_itself_is_zero(pose):
    delta = absolute_difference(pose, pose)
    assert delta == OrientedPoint(0.0, 0.0, 0.0)


def test_absolute_sum_with_plain_point_matches_pose_position():
    base = OrientedPoint(2.0, 1.0, 0.4)
    inc = OrientedPoint(0.3, -0.8, 0.2)
    as_pose = absolute_sum(base, inc)
    as_point = absolute_sum(base, Point(inc.x, inc.y))
    assert isinstance(as_point, Point) and not isinstance(as_point, OrientedPoint)
    assert math.isclose(as_point.x, as_pose.x)
    assert math.isclose(as_point.y, as_pose.y)


@pytest.mark.parametrize("theta", [0.0, 3.5, -3.5, 7.0, -7.0, 20.0, -20.0, math.pi])
def test_normalized_range_and_direction(theta):
    pose = OrientedPoint(1.0, 2.0, theta).normalized()
    assert -math.pi <= pose.theta < math.pi
    assert math.isclose(math.sin(pose.theta), math.sin(theta), abs_tol=1e-9)
    assert math.isclose(math.cos(pose.theta), math.cos(theta), abs_tol=1e-9)
    assert (pose.x, pose.y) == (1.0, 2.0)


def test_normalized_keeps_in_range_pose():
    pose = OrientedPoint(1.0, 2.0, 0.5)
    assert pose.normalized() == pose


def test_rotate_preserves_norm_and_adds_angle():
    pose = OrientedPoint(3.0, -1.0, 0.2)
    rotated = pose.rotate(1.1)
    assert math.isclose(rotated.dot(rotated), pose.dot(pose))
    assert math.isclose(rotated.theta, 1.3)


def test_rotate_by_zero_is_identity():
    pose = OrientedPoint(3.0, -1.0, 0.2)
    rotated = pose.rotate(0.0)
    assert rotated.x == pytest.approx(3.0, abs=1e-9)
    assert rotated.y == pytest.approx(-1.0, abs=1e-9)
    assert rotated.theta == pytest.approx(0.2, abs=1e-9)


def test_arithmetic_round_trip():
    a = OrientedPoint(1.0, 2.0, 0.5)
    b = OrientedPoint(-0.5, 4.0, 1.0)
    assert (a + b) - b == a
    assert a * 2.0 == 2.0 * a
    assert (a * 2.0).theta == a.theta * 2.0


def test_point_arithmetic():
    a = Point(1.0, 2.0)
    b = Point(3.0, -1.0)
    assert (a + b) - b == a
    assert a.dot(b) == b.dot(a)


def test_interpolate_endpoints_for_points():
    p1, p2 = Point(0.0, 1.0), Point(4.0, -3.0)
    assert interpolate(p1, 1.0, p2, 3.0, 1.0) == p1
    assert interpolate(p1, 1.0, p2, 3.0, 3.0) == p2


def test_interpolate_start_for_poses():
    p1 = OrientedPoint(0.0, 1.0, 0.6)
    p2 = OrientedPoint(4.0, -3.0, -1.0)
    result = interpolate(p1, 0.0, p2, 2.0, 0.0)
    assert isinstance(result, OrientedPoint)
    assert result.x == pytest.approx(0.0, abs=1e-9)
    assert result.y == pytest.approx(1.0, abs=1e-9)
    assert result.theta == pytest.approx(0.6, abs=1e-9)


def test_interpolate_midpoint_position_lies_between():
    p1 = OrientedPoint(0.0, 0.0, 0.0)
    p2 = OrientedPoint(2.0, 4.0, 0.0)
    mid = interpolate(p1, 0.0, p2, 2.0, 1.0)
    assert math.isclose(euclidian_dist(mid, p1), euclidian_dist(mid, p2))
    assert math.isclose(mid.theta, 0.0)


def test_distances():
    a, b = Point(0.0, 0.0), Point(3.0, 4.0)
    assert euclidian_dist(a, b) == 5.0
    assert math.isclose(square_dist(a, b), euclidian_dist(a, b) ** 2)
    assert euclidian_dist(OrientedPoint(3.0, 4.0, 1.0), a) == euclidian_dist(b, a)


def test_min_max():
    a, b = Point(1.0, 5.0), Point(3.0, -2.0)
    hi, lo = point_max(a, b), point_min(a, b)
    assert hi == Point(3.0, 5.0)
    assert lo == Point(1.0, -2.0)
    assert point_max(b, a) == hi and point_min(b, a) == lo