# aad/ops/transcendental.py
import numpy as np
from scipy.special import expit

from ..core.node import Op


def tanh(tape, a):
    return tape.append(np.tanh(tape.value_of(a)), Op.TANH, a)


def sigmoid(tape, a):
    """
    Logistic sigmoid 1 / (1 + exp(-a)).

    scipy's expit is used for the value because it does not overflow for
    large negative inputs. The reverse pass only needs the output value:
    d/da = y * (1 - y).
    """
    return tape.append(expit(tape.value_of(a)), Op.SIGMOID, a)
