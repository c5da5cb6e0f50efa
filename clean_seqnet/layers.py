# clean_seqnet/layers.py

"""
Layer building blocks for a sequential network that trains on one example at a time.

Every layer works on 1-D vectors and implements the same capability contract:

    param_num()                                -> number of scalar parameters
    feed_forward(x)                            -> output (inference, no cache)
    forward_with_cache(x)                      -> (output, derivative cache)
    back_propagate(error, cache)               -> error w.r.t. the layer input
    calc_param_grad(error, layer_input)        -> gradient w.r.t. the parameters
    apply_step(delta)                          -> params -= delta, in place

Parameters live in a flat float buffer. Layers without parameters return empty
arrays from calc_param_grad and ignore apply_step.
"""

import numpy as np
from typing import Optional, Tuple, Union
import logging

from .activations import ActivationFunction, get_activation
from .exceptions import ShapeMismatch
from .initializers import RandomSource, rand_range, rand_range_xavier

DEFAULT_BIAS_RANGE = (0.0, 0.6)

_EMPTY = np.zeros(0, dtype=float)


def _as_vector(values, name: str = "input") -> np.ndarray:
    vector = np.asarray(values, dtype=float)
    if vector.ndim != 1:
        raise ShapeMismatch(f"Expected a 1-D {name} vector, got shape {vector.shape}")
    return vector


def _check_width(vector: np.ndarray, expected: Optional[int], what: str, owner: str):
    if expected is not None and vector.shape[0] != expected:
        raise ShapeMismatch(
            f"{owner}: expected {what} of width {expected}, got {vector.shape[0]}",
            expected=expected,
            actual=vector.shape[0],
        )


# --- Base Layer Class ---
class Layer:
    """
    Abstract base class for all layers.

    `input_size` and `output_size` are None for layers that accept any width and
    preserve it.
    """

    @property
    def input_size(self) -> Optional[int]:
        return None

    @property
    def output_size(self) -> Optional[int]:
        return None

    @property
    def params(self) -> np.ndarray:
        """Read-only view of the flat parameter buffer."""
        return _EMPTY

    def param_num(self) -> int:
        return 0

    def feed_forward(self, x: np.ndarray) -> np.ndarray:
        raise NotImplementedError("Each layer must implement its own forward pass.")

    def forward_with_cache(self, x: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Forward pass that also returns the cache needed by back_propagate."""
        return self.feed_forward(x), _EMPTY

    def back_propagate(self, error: np.ndarray, cache: np.ndarray) -> np.ndarray:
        raise NotImplementedError("Each layer must implement its own backward pass.")

    def calc_param_grad(self, error: np.ndarray, layer_input: np.ndarray) -> np.ndarray:
        return _EMPTY

    def apply_step(self, delta: np.ndarray):
        if np.asarray(delta).size != 0:
            raise ShapeMismatch(
                f"{self.__class__.__name__} has no parameters but received a step of size {np.asarray(delta).size}",
                expected=0,
                actual=np.asarray(delta).size,
            )

    def summary(self) -> str:
        """Returns a string summary of the layer's configuration."""
        return (
            f"{self.__class__.__name__}:\n"
            f"  Input size: {self.input_size if self.input_size is not None else 'any'}\n"
            f"  Output size: {self.output_size if self.output_size is not None else 'same as input'}\n"
            f"  Parameters: {self.param_num():,} parameters\n"
        )

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class _ParameterLayer(Layer):
    """Shared flat-buffer handling for layers that own parameters."""

    def __init__(self, params: np.ndarray):
        self._params = np.array(params, dtype=float).ravel()

    @property
    def params(self) -> np.ndarray:
        view = self._params.view()
        view.flags.writeable = False
        return view

    def param_num(self) -> int:
        return self._params.shape[0]

    def apply_step(self, delta: np.ndarray):
        """Subtracts `delta` element-wise from the parameter buffer, in place."""
        delta = _as_vector(delta, "step")
        _check_width(delta, self.param_num(), "step", self.__class__.__name__)
        self._params -= delta


# --- Fully Connected Layer ---

class Dense(_ParameterLayer):
    """
    Fully connected layer without bias.

    The weights are a flat buffer of length in_num * out_num laid out input-major:
    the block [i*out_num, (i+1)*out_num) holds the weights from input i to every
    output. Viewed as a matrix W of shape (in_num, out_num):

        forward:         out = x @ W
        backward:        err_in = W @ err_out
        param gradient:  dW = outer(x, err_out), flattened input-major
    """

    def __init__(self, weights: Union[np.ndarray, list], in_num: int, out_num: int):
        """
        Args:
            weights: Flat input-major weight buffer of length in_num * out_num.
            in_num: Number of inputs.
            out_num: Number of outputs.

        Raises:
            ShapeMismatch: If the buffer length is not in_num * out_num.
        """
        if in_num <= 0 or out_num <= 0:
            raise ValueError(f"Dense layer sizes must be positive, got ({in_num}, {out_num})")
        super().__init__(weights)
        if self._params.shape[0] != in_num * out_num:
            raise ShapeMismatch(
                f"Dense: weight buffer has {self._params.shape[0]} values, "
                f"expected {in_num} * {out_num} = {in_num * out_num}",
                expected=in_num * out_num,
                actual=self._params.shape[0],
            )
        self._in_num = in_num
        self._out_num = out_num
        logging.debug(f"Dense layer created: in_num={in_num}, out_num={out_num}")

    @classmethod
    def xavier(cls, in_num: int, out_num: int, rng: RandomSource = None) -> 'Dense':
        """Dense layer with Xavier-scaled uniform weights."""
        return cls(rand_range_xavier(in_num, out_num, rng), in_num, out_num)

    @property
    def in_num(self) -> int:
        return self._in_num

    @property
    def out_num(self) -> int:
        return self._out_num

    @property
    def input_size(self) -> int:
        return self._in_num

    @property
    def output_size(self) -> int:
        return self._out_num

    @property
    def weight_matrix(self) -> np.ndarray:
        """Weights as a read-only (in_num, out_num) matrix view."""
        return self.params.reshape(self._in_num, self._out_num)

    def feed_forward(self, x: np.ndarray) -> np.ndarray:
        x = _as_vector(x)
        _check_width(x, self._in_num, "input", "Dense")
        # out[o] = sum_i x[i] * W[i, o]
        return x @ self._params.reshape(self._in_num, self._out_num)

    def back_propagate(self, error: np.ndarray, cache: np.ndarray) -> np.ndarray:
        error = _as_vector(error, "error")
        _check_width(error, self._out_num, "error", "Dense")
        # err_in[i] = sum_o W[i, o] * err_out[o]
        return self._params.reshape(self._in_num, self._out_num) @ error

    def calc_param_grad(self, error: np.ndarray, layer_input: np.ndarray) -> np.ndarray:
        error = _as_vector(error, "error")
        layer_input = _as_vector(layer_input)
        _check_width(error, self._out_num, "error", "Dense")
        _check_width(layer_input, self._in_num, "input", "Dense")
        # Row i of the outer product is the block for input i, same layout as the weights
        return np.outer(layer_input, error).ravel()

    def summary(self) -> str:
        return (
            f"Dense:\n"
            f"  Input size: {self._in_num}\n"
            f"  Output size: {self._out_num}\n"
            f"  Weights shape: ({self._in_num}, {self._out_num}) input-major\n"
            f"  Parameters: {self.param_num():,} parameters\n"
        )

    def __repr__(self):
        return f"Dense(in_num={self._in_num}, out_num={self._out_num})"


class Bias(_ParameterLayer):
    """Adds a learned offset to every element: out[i] = x[i] + b[i]."""

    def __init__(self, params: Union[np.ndarray, list]):
        super().__init__(params)
        if self._params.shape[0] == 0:
            raise ShapeMismatch("Bias: parameter buffer must not be empty", actual=0)
        logging.debug(f"Bias layer created: width={self._params.shape[0]}")

    @classmethod
    def uniform(cls, width: int, low: float = DEFAULT_BIAS_RANGE[0], high: float = DEFAULT_BIAS_RANGE[1],
                rng: RandomSource = None) -> 'Bias':
        """Bias layer with values drawn uniformly from [low, high)."""
        return cls(rand_range(width, low, high, rng))

    @property
    def input_size(self) -> int:
        return self._params.shape[0]

    @property
    def output_size(self) -> int:
        return self._params.shape[0]

    def feed_forward(self, x: np.ndarray) -> np.ndarray:
        x = _as_vector(x)
        _check_width(x, self.input_size, "input", "Bias")
        return x + self._params

    def back_propagate(self, error: np.ndarray, cache: np.ndarray) -> np.ndarray:
        return _as_vector(error, "error").copy()

    def calc_param_grad(self, error: np.ndarray, layer_input: np.ndarray) -> np.ndarray:
        error = _as_vector(error, "error")
        _check_width(error, self.output_size, "error", "Bias")
        return error.copy()

    def __repr__(self):
        return f"Bias(width={self._params.shape[0]})"


class Activation(Layer):
    """
    Applies an activation function element-wise.

    The derivative cache produced by forward_with_cache holds f'(x) per element,
    and back_propagate multiplies the incoming error by it (chain rule).
    """

    def __init__(self, function: Union[str, ActivationFunction]):
        if isinstance(function, str):
            function = get_activation(function)
        elif not isinstance(function, ActivationFunction):
            raise TypeError(f"Expected an ActivationFunction or a name, got {type(function).__name__}")
        self.function = function
        logging.debug(f"Activation layer created: function={function.__class__.__name__}")

    def feed_forward(self, x: np.ndarray) -> np.ndarray:
        return self.function.forward(_as_vector(x))

    def forward_with_cache(self, x: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        return self.function.forward_with_derivative(_as_vector(x))

    def back_propagate(self, error: np.ndarray, cache: np.ndarray) -> np.ndarray:
        error = _as_vector(error, "error")
        cache = _as_vector(cache, "cache")
        _check_width(cache, error.shape[0], "cache", "Activation")
        return error * cache

    def summary(self) -> str:
        return (
            f"Activation ({self.function.__class__.__name__}):\n"
            f"  Parameters: 0 parameters\n"
        )

    def __repr__(self):
        return f"Activation({self.function.__class__.__name__})"


# --- Output Layer ---
class Softmax(Layer):
    """
    Numerically stable softmax: subtract the max, exponentiate, normalize.

    back_propagate passes the error through unchanged. That is only correct when
    the output error already is `output - target` (softmax paired with
    cross-entropy), it is not the full softmax Jacobian.
    """

    def feed_forward(self, x: np.ndarray) -> np.ndarray:
        x = _as_vector(x)
        if x.shape[0] == 0:
            raise ShapeMismatch("Softmax: input must not be empty", actual=0)
        exp_x = np.exp(x - np.max(x))
        return exp_x / np.sum(exp_x)

    def back_propagate(self, error: np.ndarray, cache: np.ndarray) -> np.ndarray:
        return _as_vector(error, "error").copy()
