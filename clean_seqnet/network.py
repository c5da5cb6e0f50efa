import numpy as np
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union
import logging
import time

from .activations import ActivationFunction
from .exceptions import ShapeMismatch
from .initializers import RandomSource, make_rng
from .layers import DEFAULT_BIAS_RANGE, Activation, Bias, Dense, Layer, Softmax
from .optimizers import Optimizer


class Network:
    """
    A sequential feed-forward network: an ordered, non-empty list of layers
    where the output of layer i is the input of layer i + 1.

    The layer sequence is fixed at construction. Adjacent widths are checked
    when both sides report one; width-preserving layers (Activation, Softmax)
    carry the width through.
    """

    def __init__(self, layers: Sequence[Layer]):
        """
        Args:
            layers: Layers in forward order. The network takes ownership of them.

        Raises:
            ValueError: If `layers` is empty.
            ShapeMismatch: If the output width of one layer differs from the input
                           width of the next.
        """
        layers = tuple(layers)
        if not layers:
            raise ValueError("Network must have at least one layer.")

        width: Optional[int] = None
        for i, layer in enumerate(layers):
            expected = layer.input_size
            if width is not None and expected is not None and expected != width:
                raise ShapeMismatch(
                    f"Layer {i} ({layer!r}) expects input width {expected}, "
                    f"but the previous layer produces width {width}",
                    expected=expected,
                    actual=width,
                )
            if layer.output_size is not None:
                width = layer.output_size

        self._layers: Tuple[Layer, ...] = layers
        self._input_size = next((l.input_size for l in layers if l.input_size is not None), None)
        self._output_size = width

        logging.info(f"Created sequential network with {len(layers)} layers: {[repr(l) for l in layers]}")

    @classmethod
    def from_layer_sizes(
        cls,
        layer_sizes: List[int],
        activations: Optional[List[Union[str, ActivationFunction]]] = None,
        rng: RandomSource = None,
        bias_range: Tuple[float, float] = DEFAULT_BIAS_RANGE,
    ) -> 'Network':
        """
        Builds a multilayer perceptron as Dense -> Bias -> Activation blocks.

        Args:
            layer_sizes: Widths starting with the input and ending with the output,
                         e.g. [2, 5, 1].
            activations: One activation name or instance per block; defaults to
                         'linear' everywhere. Use 'softmax' to end with a Softmax layer.
            rng: Random source for the Xavier weights and uniform biases.
            bias_range: (low, high) range for the bias initialization.
        """
        if len(layer_sizes) < 2:
            raise ValueError("Network must have at least an input and an output layer size.")
        num_blocks = len(layer_sizes) - 1
        if activations is None:
            activations = ['linear'] * num_blocks
        elif len(activations) != num_blocks:
            raise ValueError(f"Number of activation functions ({len(activations)}) must match "
                             f"number of layers ({num_blocks}).")

        rng = make_rng(rng)
        layers: List[Layer] = []
        for in_num, out_num, activation in zip(layer_sizes[:-1], layer_sizes[1:], activations):
            layers.append(Dense.xavier(in_num, out_num, rng))
            layers.append(Bias.uniform(out_num, bias_range[0], bias_range[1], rng))
            if isinstance(activation, str) and activation.lower() == 'softmax':
                layers.append(Softmax())
            else:
                layers.append(Activation(activation))
        return cls(layers)

    @property
    def layers(self) -> Tuple[Layer, ...]:
        return self._layers

    @property
    def input_size(self) -> Optional[int]:
        return self._input_size

    @property
    def output_size(self) -> Optional[int]:
        return self._output_size

    def param_nums(self) -> List[int]:
        """Per-layer parameter counts, forward order."""
        return [layer.param_num() for layer in self._layers]

    def num_params(self) -> int:
        return sum(self.param_nums())

    def predict(self, x: np.ndarray) -> np.ndarray:
        """Inference for a single example (see feed_forward)."""
        return feed_forward(x, self)

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(self._layers)

    def __getitem__(self, index: int) -> Layer:
        return self._layers[index]

    def summary(self) -> str:
        """
        Generates a text summary of the network architecture and parameters.

        Returns:
            A string containing the network summary.
        """
        summary_str = "\n" + "="*50 + "\n"
        summary_str += "Sequential Network Summary\n"
        summary_str += "="*50 + "\n"
        for i, layer in enumerate(self._layers):
            summary_str += f"Layer {i}: {layer.summary()}"
            summary_str += "-"*50 + "\n"
        summary_str += f"Total Parameters: {self.num_params():,}\n"
        summary_str += "="*50 + "\n"
        return summary_str

    def __repr__(self):
        return f"Network({', '.join(repr(l) for l in self._layers)})"


# --- Propagation ---

def _check_input(x: np.ndarray, network: Network) -> np.ndarray:
    x = np.asarray(x, dtype=float)
    if x.ndim != 1:
        raise ShapeMismatch(f"Expected a single example as a 1-D vector, got shape {x.shape}")
    if network.input_size is not None and x.shape[0] != network.input_size:
        raise ShapeMismatch(
            f"Network expects input width {network.input_size}, got {x.shape[0]}",
            expected=network.input_size,
            actual=x.shape[0],
        )
    return x


def feed_forward(x: np.ndarray, network: Network) -> np.ndarray:
    """
    Inference: passes `x` through every layer's feed_forward in order, keeping
    only the running activation.

    Raises:
        ShapeMismatch: If len(x) differs from the network's input width.
    """
    out = _check_input(x, network)
    for layer in network.layers:
        out = layer.feed_forward(out)
    return out


def compute_gradients(x: np.ndarray, expected_output: np.ndarray, network: Network) -> List[np.ndarray]:
    """
    Training pass for one example, without touching any optimizer.

    1. Forward with caches, recording each layer's input and derivative cache.
    2. Output error = output - expected_output (gradient of the summed squared
       error, up to a constant factor).
    3. Walk the layers in reverse: compute the parameter gradient from the current
       error and the recorded input, then replace the error with the layer's
       back_propagate result.

    Returns:
        Per-layer parameter gradients, last layer first.

    Raises:
        ShapeMismatch: If the input or expected output width is wrong.
    """
    out = _check_input(x, network)
    expected_output = np.asarray(expected_output, dtype=float)

    inputs: List[np.ndarray] = []
    caches: List[np.ndarray] = []
    for layer in network.layers:
        inputs.append(out)
        out, cache = layer.forward_with_cache(out)
        caches.append(cache)

    if expected_output.shape != out.shape:
        raise ShapeMismatch(
            f"Expected output has shape {expected_output.shape}, network produced {out.shape}",
            expected=out.shape,
            actual=expected_output.shape,
        )
    error = out - expected_output

    gradients: List[np.ndarray] = []
    for i in reversed(range(len(network.layers))):
        layer = network.layers[i]
        gradients.append(layer.calc_param_grad(error, inputs[i]))
        error = layer.back_propagate(error, caches[i])
    return gradients


def back_propagate(x: np.ndarray, expected_output: np.ndarray, network: Network,
                   optimizer: Optimizer) -> List[np.ndarray]:
    """
    Runs the training pass for one example and hands the gradients (last layer
    first) to `optimizer.reversed_update`. Parameters are not changed until step().

    Returns:
        The gradients passed to the optimizer, last layer first.
    """
    gradients = compute_gradients(x, expected_output, network)
    optimizer.reversed_update(gradients)
    return gradients


def step(network: Network, optimizer: Optimizer):
    """
    Applies the optimizer's step to every layer, in forward order.

    Raises:
        ShapeMismatch: If the network's parameter layout changed since the
                       optimizer was built.
    """
    current = tuple(network.param_nums())
    if current != tuple(optimizer.param_nums):
        raise ShapeMismatch(
            f"Optimizer was built for parameter counts {list(optimizer.param_nums)}, "
            f"network now has {list(current)}",
            expected=optimizer.param_nums,
            actual=current,
        )
    steps = optimizer.get_step()
    for layer, delta in zip(network.layers, steps):
        layer.apply_step(delta)


def loss(inputs: Sequence[np.ndarray], expected_outputs: Sequence[np.ndarray], network: Network) -> float:
    """
    Sum over examples of the summed squared output differences. Diagnostic only;
    training gradients do not go through this function.
    """
    if len(inputs) != len(expected_outputs):
        raise ValueError("Number of inputs and expected outputs must match.")
    total = 0.0
    for x, expected in zip(inputs, expected_outputs):
        output = feed_forward(x, network)
        total += float(np.sum((output - np.asarray(expected, dtype=float)) ** 2))
    return total


def fit(
    network: Network,
    optimizer: Optimizer,
    inputs: Sequence[np.ndarray],
    targets: Sequence[np.ndarray],
    steps: int,
    batch_size: int = 1,
    rng: RandomSource = None,
    log_every: int = 1000,
    verbose: bool = False,
) -> Dict[str, List]:
    """
    Trains the network by random example selection.

    Each step draws `batch_size` examples uniformly at random (with replacement),
    calls back_propagate for each one and then applies a single optimizer step.
    Gradients are summed over the drawn examples, not averaged.

    Args:
        network: Network to train, updated in place.
        optimizer: Optimizer built for `network`.
        inputs: Training inputs, one vector per example.
        targets: Expected outputs, one vector per example.
        steps: Number of optimizer steps.
        batch_size: Examples accumulated before each step.
        rng: Random source for example selection.
        log_every: Record (and optionally print) the loss every `log_every` steps.
        verbose: Whether to print training progress.

    Returns:
        History dictionary with lists 'step', 'loss' and 'elapsed' (seconds).
    """
    inputs = [np.asarray(x, dtype=float) for x in inputs]
    targets = [np.asarray(y, dtype=float) for y in targets]
    if len(inputs) != len(targets):
        raise ValueError("Number of samples in inputs and targets must match.")
    if not inputs:
        raise ValueError("fit() needs at least one training example.")
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    if log_every <= 0:
        raise ValueError(f"log_every must be positive, got {log_every}")

    rng = make_rng(rng)
    history: Dict[str, List] = {'step': [], 'loss': [], 'elapsed': []}
    logging.info(f"Training for {steps} steps on {len(inputs)} examples, batch_size={batch_size}, optimizer={optimizer!r}")

    start_time = time.time()
    for step_idx in range(1, steps + 1):
        for index in rng.integers(0, len(inputs), size=batch_size):
            back_propagate(inputs[index], targets[index], network, optimizer)
        step(network, optimizer)

        if step_idx % log_every == 0 or step_idx == steps:
            current_loss = loss(inputs, targets, network)
            elapsed = time.time() - start_time
            history['step'].append(step_idx)
            history['loss'].append(current_loss)
            history['elapsed'].append(elapsed)
            if not np.isfinite(current_loss):
                logging.warning(f"Non-finite loss at step {step_idx}. Check the learning rate and inputs.")
            msg = f"Step {step_idx}/{steps} - loss: {current_loss:.5f} - time: {elapsed:.2f}s"
            if verbose:
                print(msg)
            logging.debug(msg)

    logging.info("Training finished.")
    return history
