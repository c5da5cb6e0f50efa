"""Random parameter initialization.

Every function takes an explicit random source so that network construction is
reproducible. `rng` may be a `numpy.random.Generator`, an integer seed, or
None for a freshly seeded generator.
"""

import numpy as np
from typing import Union
import logging

RandomSource = Union[np.random.Generator, int, None]


def make_rng(rng: RandomSource = None) -> np.random.Generator:
    """Returns `rng` unchanged if it is already a Generator, otherwise builds one from it."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def rand_range(length: int, low: float, high: float, rng: RandomSource = None) -> np.ndarray:
    """Flat buffer of `length` values drawn uniformly from [low, high)."""
    if length < 0:
        raise ValueError(f"Buffer length must be non-negative, got {length}")
    if high < low:
        raise ValueError(f"Empty range: low={low} is above high={high}")
    return make_rng(rng).uniform(low, high, size=length).astype(float)


def xavier_limit(in_num: int, out_num: int) -> float:
    """Half-width of the Xavier range: sqrt(6) / (in_num + out_num)."""
    return float(np.sqrt(6.0) / (in_num + out_num))


def rand_range_xavier(in_num: int, out_num: int, rng: RandomSource = None) -> np.ndarray:
    """
    Flat, input-major weight buffer of length in_num * out_num for a Dense layer.

    Values are uniform in [-limit, +limit] with limit = sqrt(6) / (in_num + out_num).
    """
    limit = xavier_limit(in_num, out_num)
    logging.debug(f"Xavier uniform init for ({in_num}, {out_num}) with limit {limit:.4f}")
    return rand_range(in_num * out_num, -limit, limit, rng)
