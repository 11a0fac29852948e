# aad/core/var.py
from __future__ import annotations

import numpy as np

from .node import NodeId


class Var:
    """
    Operator-overloading handle over one node of one tape.

    `Var` only pairs a Tape with a NodeId; all data lives on the tape. Plain
    numbers mixed into an expression are recorded as constant leaves on the
    same tape.

    Attributes
    ----------
    tape : Tape
        The tape the node lives on.
    id   : NodeId
        The node's identity on that tape.
    """
    __slots__ = ("tape", "id")

    def __init__(self, tape, node_id: NodeId):
        self.tape = tape
        self.id = node_id

    @classmethod
    def leaf(cls, tape, value) -> "Var":
        from ..ops.arithmetic import leaf
        return cls(tape, leaf(tape, value))

    @property
    def value(self) -> np.float32:
        return self.tape.value_of(self.id)

    @property
    def grad(self) -> np.float32:
        return self.tape.gradient_of(self.id)

    def __repr__(self):
        return f"Var({self.value!r}, grad={self.grad!r}, id={self.id.index})"

    def _wrap(self, other) -> NodeId:
        if isinstance(other, Var):
            return other.id
        from ..ops.arithmetic import leaf
        return leaf(self.tape, other)

    def _new(self, node_id: NodeId) -> "Var":
        return Var(self.tape, node_id)

    # Operator overloading for arithmetic operations
    def __add__(self, other):
        from ..ops.arithmetic import add
        return self._new(add(self.tape, self.id, self._wrap(other)))

    def __radd__(self, other):
        from ..ops.arithmetic import add
        return self._new(add(self.tape, self._wrap(other), self.id))

    def __sub__(self, other):
        from ..ops.arithmetic import sub
        return self._new(sub(self.tape, self.id, self._wrap(other)))

    def __rsub__(self, other):
        from ..ops.arithmetic import sub
        return self._new(sub(self.tape, self._wrap(other), self.id))

    def __mul__(self, other):
        from ..ops.arithmetic import mul
        return self._new(mul(self.tape, self.id, self._wrap(other)))

    def __rmul__(self, other):
        from ..ops.arithmetic import mul
        return self._new(mul(self.tape, self._wrap(other), self.id))

    def __pow__(self, other):
        from ..ops.arithmetic import pow
        return self._new(pow(self.tape, self.id, self._wrap(other)))

    def __rpow__(self, other):
        from ..ops.arithmetic import pow
        return self._new(pow(self.tape, self._wrap(other), self.id))

    def __neg__(self):
        from ..ops.arithmetic import neg
        return self._new(neg(self.tape, self.id))

    def tanh(self):
        from ..ops.transcendental import tanh
        return self._new(tanh(self.tape, self.id))

    def sigmoid(self):
        from ..ops.transcendental import sigmoid
        return self._new(sigmoid(self.tape, self.id))

    def relu(self):
        from ..ops.piecewise import relu
        return self._new(relu(self.tape, self.id))

    def backward(self, *, strategy: str = "auto"):
        """Run `reverse` with this node as the output."""
        from .engine import reverse
        reverse(self.tape, self.id, strategy=strategy)
