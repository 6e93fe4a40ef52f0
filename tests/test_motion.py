import math
import random

import pytest

from slamkit.geometry import OrientedPoint, euclidian_dist
from slamkit.motion import Covariance3, MotionModel


def test_noiseless_straight_motion():
    model = MotionModel()
    result = model.draw_from_motion(OrientedPoint(0.0, 0.0, 0.0), 1.0, 0.0)
    assert result.x == pytest.approx(1.0, abs=1e-9)
    assert result.y == pytest.approx(0.0, abs=1e-9)
    assert result.theta == pytest.approx(0.0, abs=1e-9)


def test_noiseless_rotation_only():
    model = MotionModel()
    start = OrientedPoint(2.0, 3.0, 0.5)
    result = model.draw_from_motion(start, 0.0, 0.25)
    assert math.isclose(result.x, start.x) and math.isclose(result.y, start.y)
    assert math.isclose(result.theta, 0.75)


def test_noiseless_odometry_from_old_pose_reaches_new_pose():
    model = MotionModel()
    pold = OrientedPoint(1.0, 1.0, 0.3)
    pnew = OrientedPoint(1.8, 1.4, 0.6)
    result = model.draw_from_odometry(pold, pnew, pold)
    assert result.x == pytest.approx(1.8, abs=1e-9)
    assert result.y == pytest.approx(1.4, abs=1e-9)
    assert result.theta == pytest.approx(0.6, abs=1e-9)


def test_noiseless_odometry_preserves_step_length():
    model = MotionModel()
    pold = OrientedPoint(0.0, 0.0, 0.0)
    pnew = OrientedPoint(0.6, 0.8, 0.1)
    p = OrientedPoint(5.0, -2.0, 1.3)
    moved = model.draw_from_odometry(p, pnew, pold)
    assert math.isclose(euclidian_dist(moved, p), euclidian_dist(pnew, pold))


def test_noisy_model_is_reproducible_with_seed():
    pold = OrientedPoint(0.0, 0.0, 0.0)
    pnew = OrientedPoint(1.0, 0.2, 0.4)
    a = MotionModel(0.1, 0.1, 0.1, 0.1, rng=random.Random(7))
    b = MotionModel(0.1, 0.1, 0.1, 0.1, rng=random.Random(7))
    assert a.draw_from_odometry(pold, pnew, pold) == b.draw_from_odometry(pold, pnew, pold)
    assert a.draw_from_motion(pold, 1.0, 0.2) == b.draw_from_motion(pold, 1.0, 0.2)


def test_noisy_odometry_heading_stays_in_range():
    model = MotionModel(0.2, 0.2, 0.2, 0.2, rng=random.Random(3))
    pold = OrientedPoint(0.0, 0.0, 0.0)
    pnew = OrientedPoint(2.0, 1.0, 3.0)
    for _ in range(200):
        result = model.draw_from_odometry(pold, pnew, pold)
        assert -math.pi - 1e-12 <= result.theta <= math.pi + 1e-12


def test_noisy_motion_differs_from_noiseless():
    start = OrientedPoint(0.0, 0.0, 0.0)
    noisy = MotionModel(0.5, 0.5, 0.5, 0.5, rng=random.Random(11))
    clean = MotionModel()
    assert noisy.draw_from_motion(start, 1.0, 0.5) != clean.draw_from_motion(start, 1.0, 0.5)
    assert noisy.draw_from_motion(start, 1.0, 0.5).x > -10.0


def test_gaussian_approximation_without_motion_is_conditioning_only():
    model = MotionModel(0.1, 0.2, 0.3, 0.4)
    pose = OrientedPoint(1.0, 2.0, 0.3)
    cov = model.gaussian_approximation(pose, pose)
    assert cov == Covariance3(xx=0.01, yy=0.01, tt=0.001, xy=0.0, xt=0.0, yt=0.0)


def test_gaussian_approximation_grows_with_motion():
    model = MotionModel(0.1, 0.2, 0.3, 0.4)
    pold = OrientedPoint(0.0, 0.0, 0.0)
    small = model.gaussian_approximation(OrientedPoint(0.5, 0.0, 0.0), pold)
    large = model.gaussian_approximation(OrientedPoint(2.0, 0.0, 0.0), pold)
    assert large.xx > small.xx > 0.01
    assert large.tt > small.tt > 0.001
    assert math.isclose(large.yy, 0.01)