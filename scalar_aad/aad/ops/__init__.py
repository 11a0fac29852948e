# aad/ops/__init__.py

# Convenience re-exports so users can do: from scalar_aad.aad.ops import mul, tanh, ...
from .arithmetic import leaf, add, sub, mul, pow, neg, total, dot
from .transcendental import tanh, sigmoid
from .piecewise import relu

__all__ = [
    "leaf", "add", "sub", "mul", "pow", "neg", "total", "dot",
    "tanh", "sigmoid",
    "relu",
]
