# clean_seqnet/optimizers.py

"""
Gradient-accumulating optimizers.

An optimizer is built against a network and allocates one accumulator per layer,
sized by that layer's param_num(). Training calls `reversed_update` once per
example with the per-layer gradients in last-layer-first order, and `get_step`
once per update to turn the accumulated state into per-layer step vectors
(forward order) that are subtracted from the parameters.

Accumulation sums across calls; it never divides by the number of examples.
"""

import numpy as np
from typing import Dict, List, Sequence, Tuple, Type
import logging

from .exceptions import ShapeMismatch

EPS = 1e-8


class Optimizer:
    """
    Base class for all optimizers.

    Attributes:
        learning_rate (float): Step size multiplier.
        param_nums (Tuple[int, ...]): Per-layer parameter counts captured at construction.
        accumulators (List[np.ndarray]): Transient per-layer gradient sums, forward order.
    """

    def __init__(self, network, learning_rate: float = 0.01):
        """
        Args:
            network: The network whose parameters this optimizer will update. Only
                     its per-layer parameter counts are read; no reference is kept.
            learning_rate: Step size multiplier.
        """
        if learning_rate <= 0.0:
            raise ValueError(f"learning_rate must be positive, got {learning_rate}")
        self.learning_rate = float(learning_rate)
        self.param_nums: Tuple[int, ...] = tuple(int(n) for n in network.param_nums())
        self.accumulators: List[np.ndarray] = self._zeros()
        logging.debug(
            f"{self.__class__.__name__} created: learning_rate={self.learning_rate}, "
            f"param_nums={list(self.param_nums)}"
        )

    def _zeros(self) -> List[np.ndarray]:
        return [np.zeros(n, dtype=float) for n in self.param_nums]

    def _accumulate(self, accumulator: np.ndarray, gradient: np.ndarray):
        """Adds one layer's gradient into its accumulator, in place."""
        raise NotImplementedError

    def reversed_update(self, gradients: Sequence[np.ndarray]):
        """
        Accumulates one example's gradients.

        Args:
            gradients: Per-layer parameter gradients, last layer first (the order
                       the backward pass produces them).

        Raises:
            ShapeMismatch: If the number of gradients or any gradient's length does
                           not match the accumulators.
        """
        if len(gradients) != len(self.accumulators):
            raise ShapeMismatch(
                f"{self.__class__.__name__}: got {len(gradients)} layer gradients, "
                f"expected {len(self.accumulators)}",
                expected=len(self.accumulators),
                actual=len(gradients),
            )
        for layer_index, gradient in enumerate(reversed(gradients)):
            gradient = np.asarray(gradient, dtype=float)
            accumulator = self.accumulators[layer_index]
            if gradient.shape != accumulator.shape:
                raise ShapeMismatch(
                    f"{self.__class__.__name__}: gradient for layer {layer_index} has shape "
                    f"{gradient.shape}, expected {accumulator.shape}",
                    expected=accumulator.shape,
                    actual=gradient.shape,
                )
            self._accumulate(accumulator, gradient)

    def get_step(self) -> List[np.ndarray]:
        """Converts the accumulated state into per-layer steps (forward order) and resets the accumulators."""
        raise NotImplementedError

    def zero_grad(self):
        """Resets the transient accumulators to zero without producing a step."""
        for accumulator in self.accumulators:
            accumulator.fill(0.0)

    def __repr__(self):
        return f"{self.__class__.__name__}(learning_rate={self.learning_rate})"


class SGD(Optimizer):
    """
    Plain gradient descent.

        accumulate: acc += grad * lr
        step:       delta = acc, then acc = 0
    """

    def _accumulate(self, accumulator: np.ndarray, gradient: np.ndarray):
        accumulator += gradient * self.learning_rate

    def get_step(self) -> List[np.ndarray]:
        steps = [accumulator.copy() for accumulator in self.accumulators]
        self.zero_grad()
        return steps


class SGDMomentum(Optimizer):
    """
    Gradient descent with an exponential moving average of the scaled gradients.

        accumulate: acc += grad * lr
        step:       m = m * beta + acc * (1 - beta); delta = m; acc = 0

    The momentum vectors persist across get_step calls.
    """

    def __init__(self, network, learning_rate: float = 0.01, beta: float = 0.9):
        if not 0.0 <= beta < 1.0:
            raise ValueError(f"beta must be in [0, 1), got {beta}")
        super().__init__(network, learning_rate)
        self.beta = float(beta)
        self.momentum: List[np.ndarray] = self._zeros()

    def _accumulate(self, accumulator: np.ndarray, gradient: np.ndarray):
        accumulator += gradient * self.learning_rate

    def get_step(self) -> List[np.ndarray]:
        for momentum, accumulator in zip(self.momentum, self.accumulators):
            momentum *= self.beta
            momentum += accumulator * (1.0 - self.beta)
        self.zero_grad()
        return [momentum.copy() for momentum in self.momentum]

    def __repr__(self):
        return f"SGDMomentum(learning_rate={self.learning_rate}, beta={self.beta})"


class RMSProp(Optimizer):
    """
    RMSProp: divide the gradient by a running root-mean-square of past gradients.

        accumulate: acc += grad                (no learning-rate scaling here)
        step:       v = v * beta + acc^2 * (1 - beta)
                    delta = acc / (sqrt(v) + EPS) * lr
                    acc = 0

    The second-moment vectors `v` persist across get_step calls.
    """

    def __init__(self, network, learning_rate: float = 1e-3, beta: float = 0.999):
        if not 0.0 <= beta < 1.0:
            raise ValueError(f"beta must be in [0, 1), got {beta}")
        super().__init__(network, learning_rate)
        self.beta = float(beta)
        self.second_moment: List[np.ndarray] = self._zeros()

    def _accumulate(self, accumulator: np.ndarray, gradient: np.ndarray):
        accumulator += gradient

    def get_step(self) -> List[np.ndarray]:
        steps = []
        for second_moment, accumulator in zip(self.second_moment, self.accumulators):
            second_moment *= self.beta
            second_moment += accumulator ** 2 * (1.0 - self.beta)
            steps.append(accumulator / (np.sqrt(second_moment) + EPS) * self.learning_rate)
        self.zero_grad()
        return steps

    def __repr__(self):
        return f"RMSProp(learning_rate={self.learning_rate}, beta={self.beta})"


# Dictionary mapping optimizer names to their classes
OPTIMIZERS: Dict[str, Type[Optimizer]] = {
    'sgd': SGD,
    'momentum': SGDMomentum,
    'rmsprop': RMSProp,
}


def get_optimizer(name: str, network, **kwargs) -> Optimizer:
    """Factory function to build an optimizer for `network` by name.

    Args:
        name: Optimizer name (case-insensitive): 'sgd', 'momentum' or 'rmsprop'.
        network: Network the optimizer is sized against.
        **kwargs: Constructor arguments (learning_rate, beta).

    Raises:
        ValueError: If the optimizer name is not recognized.
    """
    name_lower = name.lower()
    if name_lower not in OPTIMIZERS:
        raise ValueError(
            f"Unknown optimizer '{name}'. "
            f"Available optimizers: {list(OPTIMIZERS.keys())}"
        )
    return OPTIMIZERS[name_lower](network, **kwargs)
