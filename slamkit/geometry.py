"""Planar points and robot poses with the usual pose algebra."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

_TWO_PI = 2.0 * math.pi


def _wrap(angle: float) -> float:
    return math.atan2(math.sin(angle), math.cos(angle))


@dataclass(frozen=True)
class Point:
    """A point in the plane."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> "Point":
        return Point(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def dot(self, other: "Point") -> float:
        """Inner product of the planar parts."""
        return self.x * other.x + self.y * other.y


@dataclass(frozen=True)
class OrientedPoint(Point):
    """A planar pose: position plus heading ``theta`` in radians."""

    theta: float = 0.0

    def __add__(self, other: "OrientedPoint") -> "OrientedPoint":
        return OrientedPoint(self.x + other.x, self.y + other.y, self.theta + other.theta)

    def __sub__(self, other: "OrientedPoint") -> "OrientedPoint":
        return OrientedPoint(self.x - other.x, self.y - other.y, self.theta - other.theta)

    def __mul__(self, factor: float) -> "OrientedPoint":
        return OrientedPoint(self.x * factor, self.y * factor, self.theta * factor)

    __rmul__ = __mul__

    def normalized(self) -> "OrientedPoint":
        """Return the same pose with the heading brought into [-pi, pi)."""
        theta = self.theta
        if -math.pi <= theta < math.pi:
            return self
        multiplier = int(theta / _TWO_PI)
        theta -= multiplier * _TWO_PI
        if theta >= math.pi:
            theta -= _TWO_PI
        if theta < -math.pi:
            theta += _TWO_PI
        return OrientedPoint(self.x, self.y, theta)

    def rotate(self, alpha: float) -> "OrientedPoint":
        """Rotate the pose about the origin by ``alpha``."""
        s, c = math.sin(alpha), math.cos(alpha)
        return OrientedPoint(
            c * self.x - s * self.y,
            s * self.x + c * self.y,
            _wrap(alpha + self.theta),
        )


AnyPoint = Union[Point, OrientedPoint]


def absolute_difference(p1: OrientedPoint, p2: OrientedPoint) -> OrientedPoint:
    """Express ``p1`` in the frame whose origin is the pose ``p2``."""
    delta = p1 - p2
    s, c = math.sin(p2.theta), math.cos(p2.theta)
    return OrientedPoint(
        c * delta.x + s * delta.y,
        -s * delta.x + c * delta.y,
        _wrap(delta.theta),
    )


def absolute_sum(p1: OrientedPoint, p2: AnyPoint) -> AnyPoint:
    """Apply the increment ``p2`` (expressed in the frame of ``p1``) to ``p1``.

    With a plain point as ``p2`` the result is the point in world coordinates.
    """
    s, c = math.sin(p1.theta), math.cos(p1.theta)
    rx = c * p2.x - s * p2.y
    ry = s * p2.x + c * p2.y
    if isinstance(p2, OrientedPoint):
        return OrientedPoint(rx, ry, p2.theta) + p1
    return Point(rx + p1.x, ry + p1.y)


def interpolate(p1: AnyPoint, t1: float, p2: AnyPoint, t2: float, t3: float) -> AnyPoint:
    """Interpolate between ``p1`` at time ``t1`` and ``p2`` at ``t2`` for time ``t3``."""
    gain = (t3 - t1) / (t2 - t1)
    if isinstance(p1, OrientedPoint) and isinstance(p2, OrientedPoint):
        s = math.sin(p1.theta) + math.sin(p2.theta) * gain
        c = math.cos(p1.theta) + math.cos(p2.theta) * gain
        return OrientedPoint(
            p1.x + (p2.x - p1.x) * gain,
            p1.y + (p2.y - p1.y) * gain,
            math.atan2(s, c),
        )
    return Point(p1.x + (p2.x - p1.x) * gain, p1.y + (p2.y - p1.y) * gain)


def euclidian_dist(p1: AnyPoint, p2: AnyPoint) -> float:
    """Euclidean distance between the planar parts."""
    return math.hypot(p1.x - p2.x, p1.y - p2.y)


def square_dist(p1: AnyPoint, p2: AnyPoint) -> float:
    """Squared Euclidean distance between the planar parts."""
    dx = p1.x - p2.x
    dy = p1.y - p2.y
    return dx * dx + dy * dy


def point_max(p1: AnyPoint, p2: AnyPoint) -> Point:
    """Componentwise maximum of two points."""
    return Point(max(p1.x, p2.x), max(p1.y, p2.y))


def point_min(p1: AnyPoint, p2: AnyPoint) -> Point:
    """Componentwise minimum of two points."""
    return Point(min(p1.x, p2.x), min(p1.y, p2.y))