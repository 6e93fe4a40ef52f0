"""Odometry motion model used to propagate particles."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field

from .geometry import OrientedPoint, absolute_difference, absolute_sum

CONDITIONING_LINEAR_COVARIANCE = 0.01
CONDITIONING_ANGULAR_COVARIANCE = 0.001


@dataclass
class Covariance3:
    """Symmetric 3x3 covariance of a planar pose."""

    xx: float = 0.0
    yy: float = 0.0
    tt: float = 0.0
    xy: float = 0.0
    xt: float = 0.0
    yt: float = 0.0


@dataclass
class MotionModel:
    """Noisy odometry motion model.

    ``srr``: linear error from linear motion, ``srt``: angular error from
    linear motion, ``str_``: linear error from rotation, ``stt``: angular
    error from rotation.
    """

    srr: float = 0.0
    srt: float = 0.0
    str_: float = 0.0
    stt: float = 0.0
    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)

    def _sample(self, sigma: float) -> float:
        if sigma == 0.0:
            return 0.0
        return self.rng.gauss(0.0, sigma)

    def draw_from_motion(
        self, p: OrientedPoint, linear_move: float, angular_move: float
    ) -> OrientedPoint:
        """Move ``p`` forward by a noisy translation and rotation."""
        lin = abs(linear_move)
        ang = abs(angular_move)
        lm = linear_move + lin * self._sample(self.srr) + ang * self._sample(self.str_)
        am = angular_move + lin * self._sample(self.srt) + ang * self._sample(self.stt)
        theta = p.theta + am
        return OrientedPoint(
            p.x + lm * math.cos(p.theta + 0.5 * am),
            p.y + lm * math.sin(p.theta + 0.5 * am),
            math.atan2(math.sin(theta), math.cos(theta)),
        )

    def draw_from_odometry(
        self, p: OrientedPoint, pnew: OrientedPoint, pold: OrientedPoint
    ) -> OrientedPoint:
        """Apply the noisy odometry step from ``pold`` to ``pnew`` to pose ``p``."""
        sxy = 0.3 * self.srr
        delta = absolute_difference(pnew, pold)
        dx, dy, dth = abs(delta.x), abs(delta.y), abs(delta.theta)
        x = delta.x + self._sample(self.srr * dx + self.str_ * dth + sxy * dy)
        y = delta.y + self._sample(self.srr * dy + self.str_ * dth + sxy * dx)
        theta = delta.theta + self._sample(
            self.stt * dth + self.srt * math.hypot(delta.x, delta.y)
        )
        theta = math.fmod(theta, 2 * math.pi)
        if theta > math.pi:
            theta -= 2 * math.pi
        return absolute_sum(p, OrientedPoint(x, y, theta))

    def gaussian_approximation(self, pnew: OrientedPoint, pold: OrientedPoint) -> Covariance3:
        """Gaussian covariance of the motion from ``pold`` to ``pnew``."""
        delta = absolute_difference(pnew, pold)
        linear_move = math.hypot(delta.x, delta.y)
        angular_move = abs(delta.x)
        s11 = self.srr * self.srr * linear_move * linear_move
        s22 = self.stt * self.stt * angular_move * angular_move
        s12 = self.str_ * angular_move * self.srt * linear_move
        s, c = math.sin(pold.theta), math.cos(pold.theta)
        return Covariance3(
            xx=c * c * s11 + CONDITIONING_LINEAR_COVARIANCE,
            yy=s * s * s11 + CONDITIONING_LINEAR_COVARIANCE,
            tt=s22 + CONDITIONING_ANGULAR_COVARIANCE,
            xy=s * c * s11,
            xt=c * s12,
            yt=s * s12,
        )