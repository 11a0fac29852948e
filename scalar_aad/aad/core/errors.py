# aad/core/errors.py
"""Exceptions and warnings raised by the tape and the reverse pass."""


class OutOfRangeError(IndexError):
    """A NodeId does not name a live node of the tape it was used with."""


class ForeignNodeError(OutOfRangeError):
    """A NodeId issued by one tape was used against another tape."""


class GraphCycleError(ValueError):
    """The topological sort reached a node that is still being expanded."""


class StaleGradientWarning(UserWarning):
    """`reverse` found non-zero gradients left over from an earlier pass."""
