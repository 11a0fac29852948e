# aad/core/node.py
from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import NamedTuple, Optional

import numpy as np


class Op(IntEnum):
    """Operator tag stored for every slot on the tape."""
    LEAF = 0
    ADD = 1
    SUB = 2
    MUL = 3
    POW = 4
    TANH = 5
    RELU = 6
    SIGMOID = 7

    @property
    def arity(self) -> int:
        if self is Op.LEAF:
            return 0
        if self in (Op.TANH, Op.RELU, Op.SIGMOID):
            return 1
        return 2

    @property
    def label(self) -> str:
        return self.name.lower()


# Slot 0 of every tape is reserved; a child index of 0 means "no child".
NULL_INDEX = 0


class NodeId(NamedTuple):
    """
    Opaque handle to one node on one tape.

    `tape_uid` ties the handle to the tape that issued it, so using it
    against any other tape is a checked error instead of a silent alias.
    """
    tape_uid: int
    index: int

    def __repr__(self):
        return f"NodeId({self.index}@tape{self.tape_uid})"


@dataclass(frozen=True)
class Node:
    """
    Snapshot of one tape slot.

    Attributes
    ----------
    id       : NodeId of the slot.
    value    : forward value (float32), fixed at creation.
    gradient : accumulated d(output)/d(this node).
    op       : operator that produced `value`; Op.LEAF for inputs/parameters.
    left     : first operand, or None.
    right    : second operand, or None for unary ops and leaves.
    """
    id: NodeId
    value: np.float32
    gradient: np.float32
    op: Op
    left: Optional[NodeId]
    right: Optional[NodeId]

    @property
    def is_leaf(self) -> bool:
        return self.op is Op.LEAF


class NodeRef:
    """
    Write-through view of one tape slot, returned by `Tape.get_mut`.

    Every access goes back through the tape's bounds check, so a view kept
    past `Tape.destroy` raises OutOfRangeError. Assignments are stored as
    float32.
    """
    __slots__ = ("_tape", "id")

    def __init__(self, tape, node_id: NodeId):
        self._tape = tape
        self.id = node_id

    @property
    def value(self) -> np.float32:
        return self._tape.values[self._tape.index_of(self.id)]

    @value.setter
    def value(self, v):
        self._tape.values[self._tape.index_of(self.id)] = v

    @property
    def gradient(self) -> np.float32:
        return self._tape.gradients[self._tape.index_of(self.id)]

    @gradient.setter
    def gradient(self, g):
        self._tape.gradients[self._tape.index_of(self.id)] = g

    @property
    def op(self) -> Op:
        return Op(int(self._tape.ops[self._tape.index_of(self.id)]))

    def __repr__(self):
        return f"NodeRef({self.op.label}, value={self.value!r}, grad={self.gradient!r})"
