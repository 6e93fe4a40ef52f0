"""Least-squares estimation of a linear odometry correction from scan matching."""

from __future__ import annotations

from typing import Sequence

import numpy as np

INT_MAX = 2**31 - 1


def _vector3(values: Sequence[float]) -> np.ndarray:
    vector = np.asarray(values, dtype=float).reshape(-1)
    if vector.shape != (3,):
        raise ValueError("a pose increment needs exactly three components")
    return vector


class OdomCalibrator:
    """Collects odometry/scan increment pairs and solves for the 3x3 correction.

    Each pair contributes three equations ``scan = M @ odom`` to an
    overdetermined system that is kept as a ring buffer of ``data_len`` pairs.
    """

    def __init__(self, data_len: int = 12000) -> None:
        if data_len <= 0:
            raise ValueError("data_len must be positive")
        self.data_len = data_len
        self._a = np.zeros((3 * data_len, 9))
        self._b = np.zeros(3 * data_len)
        self._count = 0

    @property
    def count(self) -> int:
        """Number of pairs added so far (reset to ``data_len`` once full)."""
        return self._count

    def add_data(self, odom: Sequence[float], scan: Sequence[float]) -> bool:
        """Add one pair of increments; returns False once the counter is exhausted."""
        if self._count >= INT_MAX:
            return False
        odom_vec = _vector3(odom)
        scan_vec = _vector3(scan)
        row = (self._count % self.data_len) * 3
        self._a[row : row + 3] = np.kron(np.eye(3), odom_vec)
        self._b[row : row + 3] = scan_vec
        self._count += 1
        return True

    def is_full(self) -> bool:
        """True when a whole buffer of pairs has been collected."""
        if self._count % self.data_len == 0 and self._count >= 1:
            self._count = self.data_len
            return True
        return False

    def solve(self) -> np.ndarray:
        """Least-squares solution of the system as a 3x3 correction matrix."""
        solution, *_ = np.linalg.lstsq(self._a, self._b, rcond=None)
        return solution.reshape(3, 3)

    def clear(self) -> None:
        """Zero the collected equations."""
        self._a.fill(0.0)
        self._b.fill(0.0)