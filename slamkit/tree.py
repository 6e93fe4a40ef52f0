"""Particle trajectory trees and accumulated weights along them."""

from __future__ import annotations

import copy
from collections import defaultdict, deque
from typing import Any, Dict, Iterator, List, Optional, Sequence

from .geometry import OrientedPoint

_TOLERANCE = 0.0001


class TrajectoryNode:
    """One step of a particle trajectory; ``parent`` points one step back in time."""

    def __init__(
        self,
        pose: OrientedPoint,
        weight: float = 0.0,
        parent: Optional["TrajectoryNode"] = None,
        childs: int = 0,
    ) -> None:
        self.pose = pose
        self.weight = weight
        self.childs = childs
        self.parent = parent
        self.reading: Any = None
        self.gweight = 0.0
        self.flag = False
        self.acc_weight = 0.0
        self.visit_counter = 0
        if parent is not None:
            parent.childs += 1

    def __repr__(self) -> str:
        return (
            f"TrajectoryNode(pose={self.pose!r}, weight={self.weight!r}, "
            f"childs={self.childs}, acc_weight={self.acc_weight!r})"
        )

    def path(self) -> Iterator["TrajectoryNode"]:
        """Yield this node and then each ancestor up to the root."""
        node: Optional[TrajectoryNode] = self
        while node is not None:
            yield node
            node = node.parent


def propagate_weight(node: Optional[TrajectoryNode], weight: float) -> float:
    """Add ``weight`` to ``node`` and pass the total on once all children reported.

    Returns the accumulated weight reaching past the root, or 0 if the
    propagation stopped at a node still waiting for other children.
    """
    while node is not None:
        node.visit_counter += 1
        node.acc_weight += weight
        if node.visit_counter > node.childs:
            raise ValueError("node visited more often than it has children")
        if node.visit_counter != node.childs:
            return 0.0
        weight = node.acc_weight
        node = node.parent
    return weight


def reset_tree(leaves: Sequence[TrajectoryNode]) -> None:
    """Clear accumulated weights and visit counts along every trajectory."""
    for leaf in leaves:
        for node in leaf.path():
            node.acc_weight = 0.0
            node.visit_counter = 0


def propagate_weights(
    leaves: Sequence[TrajectoryNode], weights: Sequence[float]
) -> float:
    """Propagate normalised leaf weights to the roots; returns the roots' total.

    The tree must have been reset first. Raises ValueError if the leaf
    weights or the root total do not sum to one.
    """
    if len(leaves) != len(weights):
        raise ValueError("one weight is needed for every leaf")
    root_weight = 0.0
    leaf_sum = 0.0
    for leaf, weight in zip(leaves, weights):
        leaf_sum += weight
        leaf.acc_weight = weight
        root_weight += propagate_weight(leaf.parent, weight)
    if abs(leaf_sum - 1.0) > _TOLERANCE or abs(root_weight - 1.0) > _TOLERANCE:
        raise ValueError(
            f"root weight {root_weight} and leaf weight sum {leaf_sum} must both be 1"
        )
    return root_weight


def copy_trajectories(leaves: Sequence[TrajectoryNode]) -> List[TrajectoryNode]:
    """Deep-copy the trajectory tree below ``leaves``, keeping shared ancestors shared.

    Returns the copied leaves in the same order.
    """
    for leaf in leaves:
        for node in leaf.path():
            node.flag = False

    copies: List[TrajectoryNode] = []
    waiting: Dict[TrajectoryNode, List[TrajectoryNode]] = defaultdict(list)
    border: deque = deque()

    for leaf in leaves:
        new = copy.copy(leaf)
        if new.childs != 0:
            raise ValueError("trajectories must be copied from their leaves")
        copies.append(new)
        parent = new.parent
        if parent is not None:
            waiting[parent].append(new)
            if not parent.flag:
                parent.flag = True
                border.append(parent)

    while border:
        node = border.popleft()
        new = copy.copy(node)
        node.flag = False
        children = waiting.pop(node, [])
        for child in children:
            child.parent = new
        if len(children) != new.childs:
            raise ValueError("child count does not match the trajectories copied")
        parent = node.parent
        if parent is not None:
            waiting[parent].append(new)
            if not parent.flag:
                parent.flag = True
                border.append(parent)

    return copies