"""Odometry calibration session: pose increments, laser data and corrected paths."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .calibration import OdomCalibrator
from .geometry import OrientedPoint, absolute_difference

MIN_LINEAR_MOTION = 0.05
MIN_ANGULAR_MOTION = math.radians(5.0)
MIN_RANGE = 0.1
MAX_RANGE = 20.0


def _pose(values: Sequence[float]) -> np.ndarray:
    vector = np.asarray(values, dtype=float).reshape(-1)
    if vector.shape != (3,):
        raise ValueError("a pose needs exactly three components")
    return vector


def _rotation(theta: float) -> np.ndarray:
    c, s = math.cos(theta), math.sin(theta)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def relative_pose(previous: Sequence[float], current: Sequence[float]) -> np.ndarray:
    """Pose ``current`` expressed in the frame of pose ``previous``."""
    prev = _pose(previous)
    cur = _pose(current)
    delta = absolute_difference(OrientedPoint(*cur), OrientedPoint(*prev))
    return np.array([delta.x, delta.y, delta.theta])


def compose_increment(pose: Sequence[float], increment: Sequence[float]) -> np.ndarray:
    """Apply an increment expressed in the robot frame to ``pose``."""
    base = _pose(pose)
    return base + _rotation(base[2]) @ _pose(increment)


def corrected_path(
    correction: np.ndarray, increments: Sequence[Sequence[float]]
) -> List[np.ndarray]:
    """Integrate the increments after correcting each with ``correction``, from the origin."""
    matrix = np.asarray(correction, dtype=float)
    pose = np.zeros(3)
    path = []
    for increment in increments:
        pose = compose_increment(pose, matrix @ _pose(increment))
        path.append(pose)
    return path


def is_small_motion(delta: Sequence[float]) -> bool:
    """True when an increment is too small to be worth a calibration equation."""
    d = _pose(delta)
    return d[0] < MIN_LINEAR_MOTION and d[1] < MIN_LINEAR_MOTION and d[2] < MIN_ANGULAR_MOTION


@dataclass
class LaserData:
    """A laser scan in the form a point-to-line ICP matcher consumes."""

    valid: List[bool]
    readings: List[float]
    theta: List[float]
    min_theta: float
    max_theta: float
    odometry: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    true_pose: Tuple[float, float, float] = (0.0, 0.0, 0.0)


def scan_to_laser_data(
    ranges: Sequence[float], angle_min: float, angle_increment: float
) -> LaserData:
    """Convert raw ranges; readings outside (0.1, 20) are marked invalid with -1."""
    if not ranges:
        raise ValueError("a scan needs at least one range")
    valid = [MIN_RANGE < r < MAX_RANGE for r in ranges]
    readings = [float(r) if ok else -1.0 for r, ok in zip(ranges, valid)]
    theta = [angle_min + angle_increment * i for i in range(len(ranges))]
    return LaserData(
        valid=valid,
        readings=readings,
        theta=theta,
        min_theta=theta[0],
        max_theta=theta[-1],
    )


@dataclass
class IcpParams:
    """Parameters of the point-to-line ICP scan matcher."""

    min_reading: float = 0.1
    max_reading: float = 20.0
    max_angular_correction_deg: float = 20.0
    max_linear_correction: float = 1.0
    max_iterations: int = 50
    epsilon_xy: float = 0.000001
    epsilon_theta: float = 0.0000001
    max_correspondence_dist: float = 1.0
    sigma: float = 0.01
    use_corr_tricks: bool = True
    restart: bool = False
    restart_threshold_mean_error: float = 0.01
    restart_dt: float = 1.0
    restart_dtheta: float = 0.1
    clustering_threshold: float = 0.2
    orientation_neighbourhood: int = 10
    use_point_to_line_distance: bool = True
    do_alpha_test: bool = False
    do_alpha_test_threshold_deg: float = 5.0
    outliers_max_perc: float = 0.9
    outliers_adaptive_order: float = 0.7
    outliers_adaptive_mult: float = 2.0
    do_visibility_test: bool = True
    outliers_remove_doubles: bool = True
    do_compute_covariance: bool = False
    debug_verify_tricks: bool = False
    use_ml_weights: bool = False
    use_sigma_weights: bool = False


@dataclass
class CalibrationSession:
    """Accumulates odometry and scan-matched increments and calibrates odometry."""

    data_len: int = 12000
    icp_params: IcpParams = field(default_factory=IcpParams)

    def __post_init__(self) -> None:
        self.calibrator = OdomCalibrator(self.data_len)
        self.last_pose = np.zeros(3)
        self.odom_pose = np.zeros(3)
        self.scan_pose = np.zeros(3)
        self.increments: List[np.ndarray] = []
        self.odom_path: List[np.ndarray] = []
        self.scan_path: List[np.ndarray] = []
        self.data_count = 0
        self.finished = False

    def add_scan(
        self, odom_pose: Sequence[float], scan_delta: Optional[Sequence[float]] = None
    ) -> bool:
        """Feed the odometry pose of a scan and the scan-matched increment.

        ``scan_delta`` of ``None`` (no previous scan, or matching failed) falls
        back to the odometry increment. Returns False when the motion since the
        last accepted scan was too small to use.
        """
        if self.finished:
            raise RuntimeError("the session has already been calibrated")
        odom_delta = relative_pose(self.last_pose, odom_pose)
        if is_small_motion(odom_delta):
            return False
        self.last_pose = _pose(odom_pose)
        self.increments.append(odom_delta)
        scan_inc = odom_delta if scan_delta is None else _pose(scan_delta)

        self.scan_pose = compose_increment(self.scan_pose, scan_inc)
        self.odom_pose = compose_increment(self.odom_pose, odom_delta)
        self.odom_path.append(self.odom_pose)
        self.scan_path.append(self.scan_pose)

        self.calibrator.add_data(odom_delta, scan_inc)
        self.data_count += 1
        return True

    def calibrate(self) -> Tuple[np.ndarray, List[np.ndarray]]:
        """Solve for the correction matrix and return it with the corrected path."""
        correction = self.calibrator.solve()
        path = corrected_path(correction, self.increments)
        self.finished = True
        return correction, path