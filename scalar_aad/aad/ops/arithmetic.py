# aad/ops/arithmetic.py
from typing import Sequence

import numpy as np

from ..core.node import NodeId, Op


def leaf(tape, v) -> NodeId:
    """Append an input/parameter node holding `v` (stored as float32)."""
    return tape.append(np.float32(v), Op.LEAF)


def _binary(tape, a, b, f, tag):
    """
    Generic binary primitive:
      - computes out.value = f(a.value, b.value) in float32
      - appends a node tagged `tag` with children (a, b)
    """
    out = f(tape.value_of(a), tape.value_of(b))
    return tape.append(out, tag, a, b)


def add(tape, a, b): return _binary(tape, a, b, lambda x, y: x + y, Op.ADD)
def sub(tape, a, b): return _binary(tape, a, b, lambda x, y: x - y, Op.SUB)
def mul(tape, a, b): return _binary(tape, a, b, lambda x, y: x * y, Op.MUL)


def pow(tape, a, b):
    """
    Power:
      out.value = a.value ** b.value

    Local partials (applied in the reverse pass):
      d/da = b * a^(b-1)
      d/db = a^b * log(a)        (requires a > 0; NaN/Inf otherwise, unguarded)
    """
    with np.errstate(invalid="ignore", divide="ignore", over="ignore"):
        return _binary(tape, a, b, np.power, Op.POW)


def neg(tape, a):
    """-a, recorded as a * (-1) since there is no dedicated negation operator."""
    return mul(tape, a, leaf(tape, -1.0))


def total(tape, xs: Sequence[NodeId]) -> NodeId:
    """Left-to-right sum of `xs`, starting from a 0 leaf."""
    acc = leaf(tape, 0.0)
    for x in xs:
        acc = add(tape, acc, x)
    return acc


def dot(tape, xs: Sequence[NodeId], ws: Sequence[NodeId]) -> NodeId:
    """Dot product sum_i xs[i] * ws[i], built from mul and add nodes."""
    if len(xs) != len(ws):
        raise ValueError(f"dot(): length mismatch {len(xs)} vs {len(ws)}")
    acc = leaf(tape, 0.0)
    for x, w in zip(xs, ws):
        acc = add(tape, acc, mul(tape, x, w))
    return acc
