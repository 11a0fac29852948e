"""
Multilayer perceptron built on the tape engine.

- MLP / Layer: dense layers, per-sample gradient descent, prediction
- MLPConfig: training hyper-parameters
- Vector / Matrix: (index, shape) handles over consecutive tape leaves
"""

from .config import MLPConfig
from .linalg import Matrix, Vector, create_matrix, create_vector, uniform_init
from .model import ACTIVATIONS, MLP, Layer

__all__ = ['MLP', 'Layer', 'ACTIVATIONS', 'MLPConfig',
           'Matrix', 'Vector', 'create_matrix', 'create_vector', 'uniform_init']
