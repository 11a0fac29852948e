# aad/__init__.py
# Automatic Adjoint Differentiation library (scalar, tape-based)

from .core import (
    Tape,
    Op,
    NodeId,
    Var,
    reverse,
    reverse_toposort,
    topological_order,
    zero_gradients,
    value_of,
    gradient_of,
    grad,
    grads,
    grads_list,
    OutOfRangeError,
    ForeignNodeError,
    GraphCycleError,
    StaleGradientWarning,
)
from .ops import leaf, add, sub, mul, pow, neg, total, dot, tanh, sigmoid, relu

# Diagnostics
from .core.graph_utils import dump_tape, tape_frame, print_tape, print_tree, print_graph_summary

__all__ = [
    # Core
    'Tape',
    'Op',
    'NodeId',
    'Var',
    # Graph builder
    'leaf', 'add', 'sub', 'mul', 'pow', 'neg', 'total', 'dot',
    'tanh', 'sigmoid', 'relu',
    # Engine
    'reverse',
    'reverse_toposort',
    'topological_order',
    'zero_gradients',
    'value_of',
    'gradient_of',
    'grad',
    'grads',
    'grads_list',
    # Errors
    'OutOfRangeError',
    'ForeignNodeError',
    'GraphCycleError',
    'StaleGradientWarning',
    # Diagnostics
    'dump_tape',
    'tape_frame',
    'print_tape',
    'print_tree',
    'print_graph_summary',
]
