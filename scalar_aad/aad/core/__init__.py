# aad/core/__init__.py

"""
Core public API for the AAD package.

This module exposes the minimal set of symbols that users of the engine
should import from `scalar_aad.aad.core`.

Exports:
    Tape              : Append-only node arena holding one computation graph.
    Op, NodeId, Node  : Operator tags, node handles and node snapshots.
    Var               : Operator-overloading handle over (tape, NodeId).
    reverse           : Run a single reverse pass to accumulate gradients.
    reverse_toposort  : `reverse` with the explicit topological sort.
    topological_order : Depth-first post-order of the nodes under an output.
    zero_gradients    : Reset all gradients on a tape to zero.
    value_of          : Forward value of a node.
    gradient_of       : Accumulated gradient of a node.
    grad / grads      : Convenience: gradients of a function at a point.
"""

from .errors import ForeignNodeError, GraphCycleError, OutOfRangeError, StaleGradientWarning
from .node import Node, NodeId, NodeRef, Op, NULL_INDEX
from .tape import Tape
from .topo import topological_order
from .engine import reverse, reverse_toposort, zero_gradients
from .var import Var
from .seeds import value_of, gradient_of, grad, grads, grads_list

__all__ = [
    "Tape",
    "Op", "NodeId", "Node", "NodeRef", "NULL_INDEX",
    "Var",
    "reverse", "reverse_toposort", "topological_order", "zero_gradients",
    "value_of", "gradient_of", "grad", "grads", "grads_list",
    "OutOfRangeError", "ForeignNodeError", "GraphCycleError", "StaleGradientWarning",
]
