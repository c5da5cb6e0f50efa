import numpy as np
from typing import Tuple
import logging


class ActivationFunction:
    """Base class for all element-wise activation functions.

    An activation function is stateless. It produces the activated values and,
    for the backward pass, the local derivative evaluated at the same input.
    """

    def forward(self, x: np.ndarray) -> np.ndarray:
        """Compute the activation function value.

        Args:
            x: Input vector.

        Returns:
            Activated output, same shape as x.
        """
        raise NotImplementedError

    def forward_with_derivative(self, x: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Compute the activation and its derivative with respect to the input 'x'.

        Args:
            x: Input vector (the pre-activation values).

        Returns:
            Tuple of (activated output, local derivative f'(x)).
        """
        raise NotImplementedError

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class ReLU(ActivationFunction):
    """Rectified Linear Unit.

    Mathematical form:
        forward: f(x) = max(0, x)
        derivative: f'(x) = 1 if x > 0 else 0 (0 at exactly x == 0)
    """

    def forward(self, x: np.ndarray) -> np.ndarray:
        return np.maximum(x, 0.0)

    def forward_with_derivative(self, x: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        positive = x > 0
        return np.where(positive, x, 0.0), positive.astype(float)


class Sigmoid(ActivationFunction):
    """Logistic sigmoid.

    Mathematical form:
        forward: f(x) = 1 / (1 + e^-x)
        derivative: f'(x) = f(x) * (1 - f(x))
    """

    def forward(self, x: np.ndarray) -> np.ndarray:
        # Clip input to avoid overflow in exp(-x) for large negative x
        clipped_x = np.clip(x, -500, 500)
        return 1.0 / (1.0 + np.exp(-clipped_x))

    def forward_with_derivative(self, x: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        # The derivative reuses the same evaluation
        sig = self.forward(x)
        return sig, sig * (1.0 - sig)


class Tanh(ActivationFunction):
    """Hyperbolic tangent.

    Mathematical form:
        forward: f(x) = tanh(x)
        derivative: f'(x) = 1 - tanh^2(x)
    """

    def forward(self, x: np.ndarray) -> np.ndarray:
        return np.tanh(x)

    def forward_with_derivative(self, x: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        t = np.tanh(x)
        return t, 1.0 - t ** 2


class Linear(ActivationFunction):
    """Identity activation: f(x) = x, f'(x) = 1."""

    def forward(self, x: np.ndarray) -> np.ndarray:
        return np.array(x, dtype=float)

    def forward_with_derivative(self, x: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        return np.array(x, dtype=float), np.ones_like(x, dtype=float)


# Dictionary mapping activation function names to their classes
ACTIVATION_FUNCTIONS = {
    'relu': ReLU,
    'sigmoid': Sigmoid,
    'tanh': Tanh,
    'linear': Linear,
}


def get_activation(name: str, **kwargs) -> ActivationFunction:
    """Factory function to get an activation function instance by name.

    Args:
        name: Name of the activation function (case-insensitive).
        **kwargs: Additional arguments passed to the activation's constructor.

    Returns:
        An instance of the requested ActivationFunction class.

    Raises:
        ValueError: If the activation function name is not recognized.
    """
    name_lower = name.lower()
    if name_lower not in ACTIVATION_FUNCTIONS:
        raise ValueError(
            f"Unknown activation function '{name}'. "
            f"Available functions: {list(ACTIVATION_FUNCTIONS.keys())}"
        )
    logging.debug(f"Creating activation function '{name_lower}'")
    return ACTIVATION_FUNCTIONS[name_lower](**kwargs)
