# scalar_aad/__init__.py
# Scalar reverse-mode automatic differentiation on an append-only tape

from .aad import *  # noqa: F401,F403
from .aad import __all__ as _aad_all
from .mlp import MLP, MLPConfig

__version__ = "0.1.0"

__all__ = list(_aad_all) + ['MLP', 'MLPConfig']
