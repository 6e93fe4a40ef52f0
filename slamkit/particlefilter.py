"""Particle filter helpers: weight forms, resampling and effective sample size."""

from __future__ import annotations

import copy
import math
import random
import sys
from itertools import groupby
from typing import Any, Iterable, List, Optional, Sequence, Tuple


def to_normal_form(log_weights: Iterable[float]) -> Tuple[List[float], float]:
    """Turn log weights into weights relative to the largest one.

    Returns the weights and the maximum log weight that was subtracted.
    """
    values = [float(w) for w in log_weights]
    lmax = max(values, default=-sys.float_info.max)
    return [math.exp(w - lmax) for w in values], lmax


def to_log_form(weights: Iterable[float], lmax: float) -> List[float]:
    """Return ``log(w) - lmax`` for every weight."""
    return [math.log(float(w)) - lmax for w in weights]


def resample_indexes(
    weights: Sequence[float],
    nparticles: int = 0,
    rng: Optional[random.Random] = None,
) -> List[int]:
    """Systematic (low-variance) resampling of indexes proportional to ``weights``.

    ``nparticles`` of 0 keeps the number of samples equal to ``len(weights)``.
    """
    rng = rng or random.Random()
    values = [float(w) for w in weights]
    n = nparticles if nparticles > 0 else len(values)
    if n == 0:
        raise ValueError("cannot resample from an empty weight set")
    interval = sum(values) / n
    target = interval * rng.random()
    indexes: List[int] = []
    cweight = 0.0
    for i, w in enumerate(values):
        cweight += w
        while cweight > target and len(indexes) < n:
            indexes.append(i)
            target += interval
    return indexes


def resample_particles(
    particles: Sequence[Any],
    nparticles: int = 0,
    rng: Optional[random.Random] = None,
) -> List[Any]:
    """Resample particles carrying a ``weight`` attribute.

    The chosen particles are copied and given a uniform weight of ``1/n``.
    """
    indexes = resample_indexes([p.weight for p in particles], nparticles, rng)
    n = nparticles if nparticles > 0 else len(particles)
    uniform = 1.0 / n
    resampled = []
    for i in indexes:
        clone = copy.copy(particles[i])
        clone.weight = uniform
        resampled.append(clone)
    return resampled


def repeat_indexes(indexes: Sequence[int], particles: Sequence[Any]) -> List[Any]:
    """Pick ``particles`` in the order given by ``indexes``."""
    if len(indexes) != len(particles):
        raise ValueError("indexes and particles must have the same length")
    return [particles[i] for i in indexes]


def neff(weights: Iterable[float]) -> float:
    """Effective sample size of a weight set."""
    values = [float(w) for w in weights]
    total = sum(values)
    return 1.0 / sum((w / total) ** 2 for w in values)


def normalize(weights: Iterable[float]) -> List[float]:
    """Scale weights so they sum to one."""
    values = [float(w) for w in weights]
    total = sum(values)
    return [w / total for w in values]


def rle(values: Iterable[int]) -> List[Tuple[int, int]]:
    """Run-length encode a sequence of indexes as ``(value, count)`` pairs."""
    return [(key, sum(1 for _ in group)) for key, group in groupby(int(v) for v in values)]