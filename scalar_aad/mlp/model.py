"""
Multilayer perceptron trained with the tape engine.

The model owns a parameter tape that holds only leaves (all weight matrices
and bias vectors, layer by layer). Every `fit` and `predict` call:

    1. opens a fresh Tape and replays the parameters onto it as leaves at the
       same indices, so the layer handles stay valid;
    2. appends the input vector and runs the forward pass;
    3. (fit only) builds the mean squared error, runs one reverse pass and
       updates the parameter tape with  w <- w - learning_rate * dL/dw;
    4. destroys the tape.

A fresh tape per step is what keeps gradients from one step out of the next.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from ..aad.core.engine import reverse
from ..aad.core.tape import Tape
from ..aad.ops.arithmetic import add, dot, leaf, mul, pow, sub
from ..aad.ops.piecewise import relu
from ..aad.ops.transcendental import sigmoid, tanh
from .config import MLPConfig
from .linalg import (Matrix, Vector, create_matrix, create_vector, fill_vector,
                     format_matrix, format_vector, read_vector, uniform_init)

ACTIVATIONS: Dict[str, Callable] = {
    "relu": relu,
    "tanh": tanh,
    "sigm": sigmoid,
    "sigmoid": sigmoid,
}


@dataclass
class Layer:
    """Dense layer: activation(W @ x + b)."""
    weights: Matrix
    biases: Vector
    activation: str

    @property
    def num_inputs(self) -> int:
        return self.weights.cols

    @property
    def num_neurons(self) -> int:
        return self.weights.rows

    def forward(self, tape, xs: Vector, preallocate: bool = False) -> Vector:
        """
        Append the layer's graph to `tape` and return the output vector.

        Each neuron's result is spliced into a slot of a freshly created output
        vector. With `preallocate=True` that vector is created before the
        neurons are built, so the spliced slots are older than their children
        and the tape is marked out of order.
        """
        if self.weights.cols != xs.rows or self.weights.rows != self.biases.rows:
            raise ValueError(
                f"shape mismatch: weights ({self.weights.rows}, {self.weights.cols}), "
                f"input ({xs.rows}, 1), biases ({self.biases.rows}, 1)"
            )
        act = ACTIVATIONS[self.activation]

        out = create_vector(tape, self.num_neurons) if preallocate else None
        results = []
        x_ids = xs.ids(tape)
        for i in range(self.num_neurons):
            res = dot(tape, x_ids, self.weights.row(tape, i))
            res = add(tape, res, self.biases.id(tape, i))
            results.append(act(tape, res))

        if out is None:
            out = create_vector(tape, self.num_neurons)
        for i, res in enumerate(results):
            tape.splice(out.id(tape, i), res)
        return out


class MLP:
    """
    Multilayer perceptron.

    Usage:
        >>> mlp = MLP(MLPConfig(learning_rate=1.5, seed=0))
        >>> mlp.add_layer(2, 4, "sigm")
        >>> mlp.add_layer(4, 1, "sigm")
        >>> history = mlp.train(X, Y)
        >>> mlp.predict([1.0, 0.0])
    """

    def __init__(self, config: Optional[MLPConfig] = None):
        self.config = config or MLPConfig()
        self.rng = np.random.default_rng(self.config.seed)
        self.params = Tape()
        self.layers: List[Layer] = []

    @property
    def learning_rate(self) -> float:
        return self.config.learning_rate

    @property
    def num_parameters(self) -> int:
        return len(self.params)

    def add_layer(self, num_inputs: int, num_neurons: int, activation: str = "sigm"):
        """
        Add a dense layer.

        Args:
            num_inputs: size of the layer input (must match the previous layer's output)
            num_neurons: number of neurons (size of the layer output)
            activation: "relu", "tanh", "sigm" or "sigmoid"
        """
        if activation not in ACTIVATIONS:
            raise ValueError(
                f"unsupported activation {activation!r}; choose one of {sorted(ACTIVATIONS)}"
            )
        if self.layers and self.layers[-1].num_neurons != num_inputs:
            raise ValueError(
                f"layer expects {num_inputs} inputs but the previous layer "
                f"has {self.layers[-1].num_neurons} neurons"
            )
        init = uniform_init(self.rng)
        weights = create_matrix(self.params, num_neurons, num_inputs, init)
        biases = create_vector(self.params, num_neurons, init)
        self.layers.append(Layer(weights, biases, activation))

    def get_parameters(self) -> np.ndarray:
        """Copy of all parameters in tape order (float32)."""
        return self.params.values[1:self.params.count].copy()

    def set_parameters(self, values: Sequence[float]):
        values = np.asarray(values, dtype=np.float32)
        if values.shape != (self.num_parameters,):
            raise ValueError(f"expected {self.num_parameters} parameters, got shape {values.shape}")
        self.params.values[1:self.params.count] = values

    # ------------------------------------------------------------------ #
    # forward / training
    # ------------------------------------------------------------------ #
    def _forward(self, tape: Tape, xs: Sequence[float]) -> Vector:
        if not self.layers:
            raise ValueError("the MLP has no layers")
        # Replay parameters at identical indices (slot 1 onwards)
        for i in range(1, self.params.count):
            leaf(tape, self.params.values[i])

        out = create_vector(tape, len(xs))
        fill_vector(tape, out, xs)
        for layer in self.layers:
            out = layer.forward(tape, out, preallocate=self.config.preallocate)
        return out

    def fit(self, X: Sequence[float], Y: Sequence[float]) -> float:
        """
        One gradient-descent step on a single sample.

        Returns:
            The sample's mean squared error before the update.
        """
        with Tape() as tape:
            out = self._forward(tape, X)
            if out.rows != len(Y):
                raise ValueError(f"model produces {out.rows} outputs, target has {len(Y)}")
            ys = create_vector(tape, len(Y))
            fill_vector(tape, ys, Y)

            # Mean squared error
            loss = leaf(tape, 0.0)
            for o, y in zip(out.ids(tape), ys.ids(tape)):
                loss = add(tape, loss, pow(tape, sub(tape, o, y), leaf(tape, 2.0)))
            loss = mul(tape, loss, leaf(tape, 1.0 / out.rows))

            reverse(tape, loss, strategy=self.config.strategy)

            # Update rule on the parameter tape
            n = self.params.count
            lr = np.float32(self.config.learning_rate)
            self.params.values[1:n] -= lr * tape.gradients[1:n]

            return float(tape.value_of(loss))

    def predict(self, xs: Sequence[float]) -> np.ndarray:
        with Tape() as tape:
            return read_vector(tape, self._forward(tape, xs))

    def train(self, X: Sequence[Sequence[float]], Y: Sequence[Sequence[float]],
              epochs: Optional[int] = None) -> List[float]:
        """
        Per-sample gradient descent over the whole data set for `epochs` epochs.

        Returns:
            Average loss of every epoch.
        """
        epochs = self.config.epochs if epochs is None else epochs
        if len(X) != len(Y):
            raise ValueError(f"{len(X)} inputs but {len(Y)} targets")

        history = []
        for epoch in range(epochs):
            total = sum(self.fit(x, y) for x, y in zip(X, Y))
            avg = total / len(X)
            history.append(avg)
            if self.config.verbose and (epoch % self.config.log_every == 0 or epoch == epochs - 1):
                print(f"  epoch {epoch:5d} | average loss: {avg:.6g}")
        return history

    # ------------------------------------------------------------------ #
    # printing
    # ------------------------------------------------------------------ #
    def describe(self) -> str:
        lines = ["------------- MLP model -------------",
                 f"learning_rate = {self.learning_rate:g}"]
        if self.layers:
            n_in = self.layers[0].num_inputs
            lines.append(f"Input layer,   (in: {n_in:3d}):             " + "[n]  " * n_in)
        for i, layer in enumerate(self.layers):
            lines.append(
                f"Layer {i + 1}, shape (in: {layer.num_inputs:3d}, out: {layer.num_neurons:3d}):   "
                + "[n]  " * layer.num_neurons + f"({layer.activation})"
            )
        lines.append("-------------------------------------")
        return "\n".join(lines)

    def describe_parameters(self) -> str:
        blocks = []
        for i, layer in enumerate(self.layers):
            blocks.append(f"Layer {i + 1} weights " + format_matrix(self.params, layer.weights))
            blocks.append(f"Layer {i + 1} biases " + format_vector(self.params, layer.biases))
        return "\n".join(blocks)
