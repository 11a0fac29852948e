# aad/core/engine.py
from __future__ import annotations
import warnings
from typing import Iterable

import numpy as np

from .errors import StaleGradientWarning
from .node import NodeId, Op
from .topo import topological_order

STRATEGIES = ("auto", "creation", "toposort")

_ONE = np.float32(1.0)


def zero_gradients(tape):
    """
    Set every gradient on the tape to zero.

    Call this before running another reverse pass on a tape that has already
    been differentiated; otherwise the new gradients are summed on top of the
    old ones.
    """
    tape.gradients[:tape.count] = 0.0


def reverse(tape, output: NodeId, *, strategy: str = "auto"):
    """
    Run a single reverse pass from `output`.

    Args:
        tape    : the Tape that holds the graph.
        output  : NodeId of the scalar output; its gradient is set to 1.
        strategy: "creation" scans slots from `output` down to 1, which is a
                  valid reverse topological order whenever every node is newer
                  than its children. "toposort" walks an explicit depth-first
                  post-order from `output`. "auto" (default) uses "creation"
                  unless a splice has cleared `tape.ordered`.

    Notes:
        - For each node y, every child c receives c.grad += y.grad * dy/dc.
          Contributions are summed, so a node consumed by several parents gets
          the total derivative.
        - On an ordered tape "toposort" visits the reachable nodes by
          descending index, the same sequence as "creation", so both give
          bit-identical gradients from zeroed gradients. On a spliced tape
          only "toposort" is valid.
        - The POW rule takes log(base); a non-positive base yields NaN/Inf that
          propagates without a warning.
        - Nodes whose gradient is exactly 0 are not expanded, so 0 * NaN from
          such a node's local derivative never reaches its children. A node
          that received a NaN or non-zero gradient is always expanded.
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"unknown strategy {strategy!r}; expected one of {STRATEGIES}")
    y = tape.index_of(output)

    if np.any(tape.gradients[1:tape.count]):
        warnings.warn(
            "reverse() called on a tape with non-zero gradients; they will be "
            "accumulated into. Call zero_gradients(tape) or use a fresh tape.",
            StaleGradientWarning,
            stacklevel=2,
        )

    tape.gradients[y] = _ONE

    if strategy == "auto":
        strategy = "creation" if tape.ordered else "toposort"
    if strategy == "creation":
        order: Iterable[int] = range(y, 0, -1)
    elif tape.ordered:
        # same visiting sequence as the creation scan, restricted to reachable nodes
        order = sorted(topological_order(tape, output), reverse=True)
    else:
        order = reversed(topological_order(tape, output))

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        for i in order:
            _backprop_node(tape, i)


def reverse_toposort(tape, output: NodeId):
    """`reverse` with the explicit topological sort."""
    reverse(tape, output, strategy="toposort")


def _backprop_node(tape, i: int):
    """
    Push the gradient of slot `i` into its children using the local rule of
    its operator.

    Local derivatives
    -----------------
    ADD     : d/dl = 1,                     d/dr = 1
    SUB     : d/dl = 1,                     d/dr = -1
    MUL     : d/dl = r,                     d/dr = l
    POW     : d/dl = r * l^(r-1),           d/dr = log(l) * l^r
    TANH    : d/dl = 1 - y^2
    RELU    : d/dl = 1 if y > 0 else 0
    SIGMOID : d/dl = y * (1 - y)
    """
    vals, grads = tape.values, tape.gradients
    g = grads[i]
    if g == 0.0:
        return  # nothing to propagate

    op = tape.ops[i]
    l = tape.lefts[i]
    r = tape.rights[i]

    if op == Op.LEAF:
        return
    elif op == Op.ADD:
        grads[l] += g
        grads[r] += g
    elif op == Op.SUB:
        grads[l] += g
        grads[r] -= g
    elif op == Op.MUL:
        # read both operands first: l and r may be the same slot
        lv, rv = vals[l], vals[r]
        grads[l] += g * rv
        grads[r] += g * lv
    elif op == Op.POW:
        lv, rv = vals[l], vals[r]
        grads[l] += g * rv * np.power(lv, rv - _ONE)
        grads[r] += g * np.log(lv) * np.power(lv, rv)
    elif op == Op.TANH:
        y = vals[i]
        grads[l] += g * (_ONE - y * y)
    elif op == Op.RELU:
        if vals[i] > 0:
            grads[l] += g
    elif op == Op.SIGMOID:
        y = vals[i]
        grads[l] += g * y * (_ONE - y)
    else:
        raise ValueError(f"no local derivative rule for operator tag {int(op)}")
