# aad/core/tape.py
from __future__ import annotations
import itertools
from typing import Iterator, Optional

import numpy as np

from .errors import ForeignNodeError, OutOfRangeError
from .node import NULL_INDEX, Node, NodeId, NodeRef, Op


def _extend(capacity: int) -> int:
    return 8 if capacity == 0 else 2 * capacity


class Tape:
    """
    Append-only node arena: records nodes in creation order.

    Storage is five parallel numpy arrays (value, gradient, op, left, right)
    grown by doubling. Slot 0 is reserved so that index 0 can stand for
    "no child"; real nodes start at index 1. Nodes are never freed one by
    one: the whole arena is released by `destroy()` (or on leaving a
    `with Tape() as tape:` block).

    Attributes
    ----------
    uid      : int
        Process-unique tag stamped into every NodeId this tape issues.
    count    : int
        Number of used slots, including the reserved slot 0.
    capacity : int
        Number of allocated slots.
    ordered  : bool
        True while every node's children are older than the node itself,
        which makes a plain backward scan a valid reverse topological order.
        Cleared by `splice` when it breaks that property.
    """
    _uids = itertools.count(1)

    def __init__(self, capacity: int = 0):
        self.uid = next(Tape._uids)
        self.count = 1
        self.capacity = 0
        self.ordered = True
        self.destroyed = False
        self.values = np.zeros(0, dtype=np.float32)
        self.gradients = np.zeros(0, dtype=np.float32)
        self.ops = np.zeros(0, dtype=np.uint8)
        self.lefts = np.zeros(0, dtype=np.int64)
        self.rights = np.zeros(0, dtype=np.int64)
        if capacity > 0:
            self._resize(capacity)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.destroy()

    def __len__(self):
        """Number of live nodes (the reserved slot is not counted)."""
        return self.count - 1

    def __repr__(self):
        return f"Tape(uid={self.uid}, nodes={len(self)}, capacity={self.capacity})"

    # ------------------------------------------------------------------ #
    # storage
    # ------------------------------------------------------------------ #
    def _resize(self, new_capacity: int):
        # MemoryError from numpy propagates; there is no recovery path.
        for name in ("values", "gradients", "ops", "lefts", "rights"):
            old = getattr(self, name)
            new = np.zeros(new_capacity, dtype=old.dtype)
            n = min(old.size, self.count)
            new[:n] = old[:n]
            setattr(self, name, new)
        self.capacity = new_capacity

    def append(self, value, op: Op = Op.LEAF,
               left: Optional[NodeId] = None,
               right: Optional[NodeId] = None) -> NodeId:
        """
        Append a node and return its NodeId.

        `left`/`right` must be NodeIds of this tape (or None). Growth is
        amortized doubling: 0 -> 8 -> 16 -> ...
        """
        if self.destroyed:
            raise RuntimeError("cannot append to a destroyed tape")
        l = NULL_INDEX if left is None else self.index_of(left)
        r = NULL_INDEX if right is None else self.index_of(right)
        while self.count >= self.capacity:
            self._resize(_extend(self.capacity))

        i = self.count
        self.values[i] = value
        self.gradients[i] = 0.0
        self.ops[i] = op
        self.lefts[i] = l
        self.rights[i] = r
        self.count += 1
        return NodeId(self.uid, i)

    def destroy(self):
        """Release all storage. Every NodeId issued by this tape becomes invalid."""
        self.values = np.zeros(0, dtype=np.float32)
        self.gradients = np.zeros(0, dtype=np.float32)
        self.ops = np.zeros(0, dtype=np.uint8)
        self.lefts = np.zeros(0, dtype=np.int64)
        self.rights = np.zeros(0, dtype=np.int64)
        self.count = 1
        self.capacity = 0
        self.destroyed = True

    # ------------------------------------------------------------------ #
    # checked access
    # ------------------------------------------------------------------ #
    def index_of(self, node_id: NodeId) -> int:
        """Validate `node_id` against this tape and return its slot index."""
        if not isinstance(node_id, NodeId):
            raise TypeError(f"expected NodeId, got {type(node_id).__name__}")
        if node_id.tape_uid != self.uid:
            raise ForeignNodeError(
                f"{node_id!r} belongs to another tape, not tape{self.uid}"
            )
        if not NULL_INDEX < node_id.index < self.count:
            raise OutOfRangeError(
                f"{node_id!r} is outside the live range [1, {self.count}) of tape{self.uid}"
            )
        return node_id.index

    def ref(self, index: int) -> NodeId:
        """Build a checked NodeId for a raw slot index of this tape."""
        node_id = NodeId(self.uid, int(index))
        self.index_of(node_id)
        return node_id

    def _child(self, index: int) -> Optional[NodeId]:
        return None if index == NULL_INDEX else NodeId(self.uid, int(index))

    def get(self, node_id: NodeId) -> Node:
        i = self.index_of(node_id)
        return Node(
            id=node_id,
            value=self.values[i],
            gradient=self.gradients[i],
            op=Op(int(self.ops[i])),
            left=self._child(self.lefts[i]),
            right=self._child(self.rights[i]),
        )

    def get_mut(self, node_id: NodeId) -> NodeRef:
        self.index_of(node_id)
        return NodeRef(self, node_id)

    def value_of(self, node_id: NodeId) -> np.float32:
        return self.values[self.index_of(node_id)]

    def gradient_of(self, node_id: NodeId) -> np.float32:
        return self.gradients[self.index_of(node_id)]

    def set_value(self, node_id: NodeId, value):
        """Overwrite the value of a leaf in place (inputs, parameter updates)."""
        self.values[self.index_of(node_id)] = value

    def ids(self) -> Iterator[NodeId]:
        """All live NodeIds in creation order."""
        for i in range(1, self.count):
            yield NodeId(self.uid, i)

    # ------------------------------------------------------------------ #
    # update-by-copy
    # ------------------------------------------------------------------ #
    def splice(self, dst: NodeId, src: NodeId):
        """
        Copy value, op and children of `src` into the pre-allocated slot `dst`.

        The four fields are overwritten together; the gradient of `dst` is left
        alone. If `dst` is older than one of the copied children, the tape no
        longer satisfies the creation-order invariant and `ordered` is cleared.
        """
        d = self.index_of(dst)
        s = self.index_of(src)
        self.values[d] = self.values[s]
        self.ops[d] = self.ops[s]
        self.lefts[d] = self.lefts[s]
        self.rights[d] = self.rights[s]
        if max(self.lefts[d], self.rights[d]) >= d:
            self.ordered = False
