# aad/core/topo.py
from __future__ import annotations
from typing import List

import numpy as np

from .errors import GraphCycleError
from .node import NULL_INDEX, NodeId

_UNSEEN, _OPEN, _DONE = 0, 1, 2


def topological_order(tape, output: NodeId) -> List[int]:
    """
    Depth-first post-order of the nodes reachable from `output`.

    Children appear before their parents and every reachable node appears
    exactly once; `output` is always last. Reversing the list gives a valid
    order for the reverse pass even when the tape is not in creation order
    (e.g. after `Tape.splice`).

    The traversal uses an explicit stack, so graph depth is not limited by
    the interpreter recursion limit. Left children are visited before right
    children, matching a recursive post-order.

    Complexity: O(nodes + edges) time, O(nodes) auxiliary space.

    Raises
    ------
    GraphCycleError
        If a child is reached while it is still open, i.e. a splice made a
        node its own ancestor.
    """
    root = tape.index_of(output)
    lefts, rights = tape.lefts, tape.rights
    state = np.zeros(tape.count, dtype=np.uint8)
    order: List[int] = []

    stack = [(root, False)]
    while stack:
        i, expanded = stack.pop()
        if expanded:
            state[i] = _DONE
            order.append(i)
            continue
        if state[i] != _UNSEEN:
            continue
        state[i] = _OPEN
        stack.append((i, True))
        # push right first so the left subtree is finished first
        for child in (int(rights[i]), int(lefts[i])):
            if child == NULL_INDEX:
                continue
            if state[child] == _OPEN:
                raise GraphCycleError(
                    f"node {child} is its own ancestor on tape{tape.uid}"
                )
            if state[child] == _UNSEEN:
                stack.append((child, False))
    return order
