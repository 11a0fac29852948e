"""
Vector and matrix handles over a tape.

A Vector or Matrix is not a container: it is the index of its first element
plus a shape. Elements are consecutive leaf nodes on a tape, matrices stored
row-major (element (i, j) at ptr + i*cols + j). Because the handle stores a raw
index rather than a NodeId, the same handle is valid on any tape that mirrors
the layout of the tape it was created on, which is how the MLP replays its
parameters onto a fresh tape for every step.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import numpy as np

from ..aad.core.node import NodeId
from ..aad.ops.arithmetic import leaf


@dataclass(frozen=True)
class Vector:
    ptr: int
    rows: int

    def id(self, tape, i: int) -> NodeId:
        if not 0 <= i < self.rows:
            raise IndexError(f"vector index {i} out of range for {self.rows} rows")
        return tape.ref(self.ptr + i)

    def ids(self, tape) -> List[NodeId]:
        return [tape.ref(self.ptr + i) for i in range(self.rows)]


@dataclass(frozen=True)
class Matrix:
    ptr: int
    rows: int
    cols: int

    def id(self, tape, i: int, j: int) -> NodeId:
        if not (0 <= i < self.rows and 0 <= j < self.cols):
            raise IndexError(f"matrix index ({i}, {j}) out of range for shape ({self.rows}, {self.cols})")
        return tape.ref(self.ptr + i * self.cols + j)

    def row(self, tape, i: int) -> List[NodeId]:
        return [self.id(tape, i, j) for j in range(self.cols)]


def uniform_init(rng: np.random.Generator) -> Callable[[], float]:
    """Value generator drawing from U(-1, 1)."""
    return lambda: rng.uniform(-1.0, 1.0)


def _create_block(tape, n: int, init: Optional[Callable[[], float]]) -> int:
    if n <= 0:
        raise ValueError(f"cannot create an empty block (n={n})")
    first = leaf(tape, init() if init else 0.0)
    for _ in range(1, n):
        leaf(tape, init() if init else 0.0)
    return first.index


def create_vector(tape, rows: int, init: Optional[Callable[[], float]] = None) -> Vector:
    """Create `rows` consecutive leaves; values come from `init()` or are 0."""
    return Vector(ptr=_create_block(tape, rows, init), rows=rows)


def create_matrix(tape, rows: int, cols: int, init: Optional[Callable[[], float]] = None) -> Matrix:
    """Create a rows x cols block of consecutive leaves (row-major)."""
    return Matrix(ptr=_create_block(tape, rows * cols, init), rows=rows, cols=cols)


def fill_vector(tape, vec: Vector, values: Sequence[float]):
    if len(values) != vec.rows:
        raise ValueError(f"expected {vec.rows} values, got {len(values)}")
    tape.ref(vec.ptr + vec.rows - 1)
    tape.values[vec.ptr:vec.ptr + vec.rows] = np.asarray(values, dtype=np.float32)


def read_vector(tape, vec: Vector) -> np.ndarray:
    """Copy of the vector's values as a float32 array."""
    tape.ref(vec.ptr + vec.rows - 1)
    return tape.values[vec.ptr:vec.ptr + vec.rows].copy()


def format_matrix(tape, mat: Matrix) -> str:
    lines = [f"shape ({mat.rows}, {mat.cols})"]
    for i in range(mat.rows):
        lines.append(" ".join(f"[{tape.value_of(nid):f}]" for nid in mat.row(tape, i)))
    return "\n".join(lines)


def format_vector(tape, vec: Vector) -> str:
    lines = [f"shape ({vec.rows}, 1)"]
    lines.extend(f"[{tape.value_of(nid):f}]" for nid in vec.ids(tape))
    return "\n".join(lines)
