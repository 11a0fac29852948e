# aad/core/seeds.py

#-----------------------------------------------------------------------------
# We "plant" a seed (dy/dy = 1) at the scalar output and let gradients grow
# backwards through the tape. Every helper below builds its graph on a fresh
# tape and destroys it afterwards, so no gradient leaks between calls.
#-----------------------------------------------------------------------------
from __future__ import annotations
from typing import Callable, Dict, Iterable, List, Union

import numpy as np

from .engine import reverse
from .node import NodeId
from .tape import Tape
from .var import Var


def value_of(tape: Tape, node_id: NodeId) -> np.float32:
    """Forward value of a node."""
    return tape.value_of(node_id)


def gradient_of(tape: Tape, node_id: NodeId) -> np.float32:
    """Accumulated gradient of a node (0 until a reverse pass reaches it)."""
    return tape.gradient_of(node_id)


def _as_var(tape: Tape, y) -> Var:
    # A function that ignores its inputs may return a plain number.
    return y if isinstance(y, Var) else Var.leaf(tape, y)


# ----------------------------- single-input grad ----------------------------- #
def grad(f: Callable[[Var], Var], x0: float) -> np.float32:
    """
    Derivative of a scalar function y=f(x) at x0.
    Runs one reverse pass within a fresh, isolated tape.
    """
    with Tape() as tape:
        x = Var.leaf(tape, x0)
        y = _as_var(tape, f(x))
        reverse(tape, y.id)
        return x.grad


# ----------------------------- multi-input grads ----------------------------- #
def grads(f: Callable[[Dict[str, Var]], Var],
          inputs: Dict[str, float]) -> Dict[str, np.float32]:
    """
    Gradient of a scalar function y=f(vars) w.r.t. ALL inputs (dict form).
    Performs ONE reverse pass to obtain all dy/dvar simultaneously.

    Parameters
    ----------
    f       : function taking a dict {name: Var} and returning a Var
    inputs  : dict {name: numeric}

    Returns
    -------
    dict {name: float32}  # gradients in the same key order as `inputs`
    """
    with Tape() as tape:
        vars_ad = {k: Var.leaf(tape, v) for k, v in inputs.items()}
        y = _as_var(tape, f(vars_ad))
        reverse(tape, y.id)
        return {k: vars_ad[k].grad for k in inputs.keys()}


def grads_list(f: Callable[[List[Var]], Var],
               x0_list: Iterable[Union[float, int]]) -> List[np.float32]:
    """
    Same as grads(), but the inputs are provided as a list and the result is a list
    of partials in the same order.

    Example
    -------
    f = lambda xs: xs[0]*xs[0] + 3*xs[1]
    grads_list(f, [2.0, 4.0]) -> [4.0, 3.0]
    """
    with Tape() as tape:
        xs = [Var.leaf(tape, v) for v in x0_list]
        y = _as_var(tape, f(xs))
        reverse(tape, y.id)
        return [x.grad for x in xs]
