"""
MLP Configuration

Hyper-parameters for the multilayer perceptron and its training loop.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class MLPConfig:
    """Configuration for MLP training."""
    # Optimisation
    learning_rate: float = 1.5
    epochs: int = 1000

    # Initialisation: weights and biases are drawn uniformly from [-1, 1]
    seed: Optional[int] = None  # None -> fresh entropy on every run

    # Graph construction
    strategy: str = 'auto'     # 'auto', 'creation', 'toposort' (see engine.reverse)
    preallocate: bool = False  # allocate layer outputs before their sub-results

    # Logging
    verbose: bool = False
    log_every: int = 100  # epochs between progress lines when verbose
