import numpy as np
import pytest

from slamkit.calibration import OdomCalibrator


def _random_increments(count, seed=1):
    rng = np.random.default_rng(seed)
    return rng.uniform(-1.0, 1.0, size=(count, 3))


def test_recovers_linear_correction():
    correction = np.array([[1.1, 0.02, 0.0], [0.01, 0.95, 0.03], [0.0, 0.0, 1.2]])
    calib = OdomCalibrator(50)
    for odom in _random_increments(20):
        assert calib.add_data(odom, correction @ odom)
    assert np.allclose(calib.solve(), correction)


def test_ring_buffer_overwrites_oldest_pairs():
    calib = OdomCalibrator(5)
    bad = np.diag([3.0, 3.0, 3.0])
    for odom in _random_increments(5, seed=2):
        calib.add_data(odom, bad @ odom)
    good = np.eye(3) * 0.5
    for odom in _random_increments(5, seed=3):
        calib.add_data(odom, good @ odom)
    assert np.allclose(calib.solve(), good)


def test_is_full_after_whole_buffer():
    calib = OdomCalibrator(2)
    assert not calib.is_full()
    calib.add_data([1, 0, 0], [1, 0, 0])
    assert not calib.is_full()
    calib.add_data([0, 1, 0], [0, 1, 0])
    assert calib.is_full()
    assert calib.count == 2


def test_is_full_resets_counter_to_length():
    calib = OdomCalibrator(2)
    for odom in _random_increments(4):
        calib.add_data(odom, odom)
    assert calib.is_full()
    assert calib.count == calib.data_len


def test_clear_gives_zero_solution():
    calib = OdomCalibrator(10)
    for odom in _random_increments(6):
        calib.add_data(odom, 2 * odom)
    calib.clear()
    assert np.allclose(calib.solve(), np.zeros((3, 3)))


def test_rejects_non_positive_length():
    with pytest.raises(ValueError):
        OdomCalibrator(0)


def test_rejects_wrong_shape():
    calib = OdomCalibrator(3)
    with pytest.raises(ValueError):
        calib.add_data([1.0, 2.0], [1.0, 2.0, 3.0])