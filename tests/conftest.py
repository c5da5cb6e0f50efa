import logging

import numpy as np
import pytest

from clean_seqnet import Activation, Bias, Dense, Network


@pytest.fixture(autouse=True)
def setup_logging():
    """Set up logging for tests."""
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Suppress construction chatter during tests
    logging.getLogger().setLevel(logging.WARNING)

    yield

    logging.getLogger().setLevel(logging.NOTSET)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def smooth_network(rng):
    """3 -> 4 -> 2 network with differentiable activations everywhere."""
    return Network([
        Dense.xavier(3, 4, rng),
        Bias.uniform(4, -0.5, 0.5, rng),
        Activation("tanh"),
        Dense.xavier(4, 2, rng),
        Bias.uniform(2, -0.5, 0.5, rng),
        Activation("sigmoid"),
    ])
