import numpy as np
import pytest

from clean_seqnet import Activation, Bias, Dense, ShapeMismatch, Softmax
from clean_seqnet.activations import ReLU
from clean_seqnet.initializers import xavier_limit

from tests.helpers import numeric_param_grad


def test_dense_forward_uses_input_major_storage(rng):
    in_num, out_num = 3, 4
    weights = rng.normal(size=in_num * out_num)
    layer = Dense(weights, in_num, out_num)
    x = rng.normal(size=in_num)

    expected = [sum(x[i] * weights[i * out_num + o] for i in range(in_num)) for o in range(out_num)]
    np.testing.assert_allclose(layer.feed_forward(x), expected)


def test_dense_hand_computed_values():
    # W = [[1, 2], [3, 4], [5, 6]] stored input-major
    layer = Dense([1, 2, 3, 4, 5, 6], 3, 2)
    x = np.array([1.0, 0.0, -1.0])
    np.testing.assert_allclose(layer.feed_forward(x), [1 - 5, 2 - 6])
    np.testing.assert_allclose(layer.back_propagate(np.array([1.0, 1.0]), np.zeros(0)), [3, 7, 11])
    np.testing.assert_allclose(
        layer.calc_param_grad(np.array([2.0, -1.0]), x),
        [2, -1, 0, 0, -2, 1],
    )


def test_dense_gradients_match_finite_difference(rng):
    layer = Dense.xavier(4, 3, rng)
    x = rng.normal(size=4)
    c = rng.normal(size=3)

    def objective():
        return float(np.dot(c, layer.feed_forward(x)))

    analytic = layer.calc_param_grad(c, x)
    np.testing.assert_allclose(analytic, numeric_param_grad(layer, objective), rtol=1e-6, atol=1e-8)

    # Input gradient: d(c . W^T x)/dx
    h = 1e-6
    numeric_input = np.array([
        (np.dot(c, layer.feed_forward(x + h * e)) - np.dot(c, layer.feed_forward(x - h * e))) / (2 * h)
        for e in np.eye(4)
    ])
    np.testing.assert_allclose(layer.back_propagate(c, np.zeros(0)), numeric_input, rtol=1e-6, atol=1e-8)


def test_dense_apply_step_subtracts_in_place():
    layer = Dense([1.0, 2.0, 3.0, 4.0], 2, 2)
    layer.apply_step(np.array([0.5, 0.5, 1.0, -1.0]))
    np.testing.assert_allclose(layer.params, [0.5, 1.5, 2.0, 5.0])


def test_dense_rejects_wrong_buffer_length():
    with pytest.raises(ShapeMismatch):
        Dense([1.0, 2.0, 3.0], 2, 2)


def test_dense_rejects_wrong_input_width():
    layer = Dense(np.zeros(6), 3, 2)
    with pytest.raises(ShapeMismatch):
        layer.feed_forward(np.zeros(2))
    with pytest.raises(ShapeMismatch):
        layer.apply_step(np.zeros(5))


def test_dense_params_are_read_only():
    layer = Dense(np.zeros(4), 2, 2)
    with pytest.raises(ValueError):
        layer.params[0] = 1.0


def test_dense_xavier_range(rng):
    layer = Dense.xavier(20, 30, rng)
    limit = xavier_limit(20, 30)
    assert limit == pytest.approx(np.sqrt(6.0) / 50)
    assert layer.param_num() == 600
    assert np.all(np.abs(layer.params) <= limit)


def test_bias_forward_and_identities(rng):
    b = rng.normal(size=5)
    layer = Bias(b)
    x = rng.normal(size=5)
    err = rng.normal(size=5)

    np.testing.assert_allclose(layer.feed_forward(x), x + b)
    np.testing.assert_array_equal(layer.back_propagate(err, np.zeros(0)), err)
    np.testing.assert_array_equal(layer.calc_param_grad(err, x), err)
    assert layer.param_num() == 5


def test_bias_gradient_matches_finite_difference(rng):
    layer = Bias.uniform(4, rng=rng)
    x = rng.normal(size=4)
    c = rng.normal(size=4)
    numeric = numeric_param_grad(layer, lambda: float(np.dot(c, layer.feed_forward(x))))
    np.testing.assert_allclose(layer.calc_param_grad(c, x), numeric, rtol=1e-6, atol=1e-8)


def test_bias_uniform_default_range(rng):
    layer = Bias.uniform(100, rng=rng)
    assert np.all(layer.params >= 0.0)
    assert np.all(layer.params < 0.6)


def test_activation_layer_caches_derivative():
    layer = Activation(ReLU())
    x = np.array([-1.0, 0.0, 2.0])
    out, cache = layer.forward_with_cache(x)
    np.testing.assert_array_equal(out, [0.0, 0.0, 2.0])
    np.testing.assert_array_equal(cache, [0.0, 0.0, 1.0])
    np.testing.assert_array_equal(layer.back_propagate(np.array([5.0, 5.0, 5.0]), cache), [0.0, 0.0, 5.0])
    assert layer.param_num() == 0
    assert layer.calc_param_grad(np.ones(3), x).size == 0


def test_activation_layer_accepts_names():
    assert isinstance(Activation("relu").function, ReLU)
    with pytest.raises(TypeError):
        Activation(42)


def test_softmax_is_a_distribution(rng):
    layer = Softmax()
    for _ in range(20):
        x = rng.normal(scale=10.0, size=6)
        out = layer.feed_forward(x)
        assert np.all(out >= 0.0)
        assert np.sum(out) == pytest.approx(1.0)


def test_softmax_shift_invariance(rng):
    layer = Softmax()
    x = rng.normal(size=5)
    np.testing.assert_allclose(layer.feed_forward(x), layer.feed_forward(x + 1000.0), rtol=1e-9)
    # Would overflow without the max subtraction
    out = layer.feed_forward(np.array([1000.0, 1001.0, 1002.0]))
    assert np.all(np.isfinite(out))


def test_softmax_backward_is_pass_through():
    layer = Softmax()
    err = np.array([0.2, -0.1, -0.1])
    out, cache = layer.forward_with_cache(np.array([1.0, 2.0, 3.0]))
    assert cache.size == 0
    np.testing.assert_array_equal(layer.back_propagate(err, cache), err)
    assert layer.calc_param_grad(err, out).size == 0


def test_parameterless_layers_reject_nonempty_step():
    with pytest.raises(ShapeMismatch):
        Softmax().apply_step(np.ones(2))
    Softmax().apply_step(np.zeros(0))
