"""
NumPy-based sequential network trainer.

Layers are composed into a Network, trained one example at a time with
back_propagate (gradients are accumulated by an Optimizer) and updated with step.
"""

from .activations import ACTIVATION_FUNCTIONS, ActivationFunction, Linear, ReLU, Sigmoid, Tanh, get_activation
from .exceptions import ShapeMismatch
from .initializers import make_rng, rand_range, rand_range_xavier
from .layers import Activation, Bias, Dense, Layer, Softmax
from .network import Network, back_propagate, compute_gradients, feed_forward, fit, loss, step
from .optimizers import EPS, OPTIMIZERS, Optimizer, RMSProp, SGD, SGDMomentum, get_optimizer

__version__ = "0.1.0"

__all__ = [
    "ACTIVATION_FUNCTIONS",
    "Activation",
    "ActivationFunction",
    "Bias",
    "Dense",
    "EPS",
    "Layer",
    "Linear",
    "Network",
    "OPTIMIZERS",
    "Optimizer",
    "RMSProp",
    "ReLU",
    "SGD",
    "SGDMomentum",
    "ShapeMismatch",
    "Sigmoid",
    "Softmax",
    "Tanh",
    "back_propagate",
    "compute_gradients",
    "feed_forward",
    "fit",
    "get_activation",
    "get_optimizer",
    "loss",
    "make_rng",
    "rand_range",
    "rand_range_xavier",
    "step",
]
