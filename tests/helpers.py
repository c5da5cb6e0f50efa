import numpy as np

from clean_seqnet import feed_forward


def half_squared_error(network, x, y):
    """0.5 * sum((f(x) - y)^2); its gradient is exactly what compute_gradients propagates."""
    diff = feed_forward(x, network) - y
    return 0.5 * float(np.dot(diff, diff))


def numeric_param_grad(layer, objective, h=1e-6):
    """Central differences of `objective()` w.r.t. each parameter, perturbed through apply_step."""
    grad = np.zeros(layer.param_num())
    for j in range(layer.param_num()):
        delta = np.zeros(layer.param_num())
        delta[j] = -h
        layer.apply_step(delta)  # p[j] += h
        plus = objective()
        delta[j] = 2 * h
        layer.apply_step(delta)  # p[j] -= 2h
        minus = objective()
        delta[j] = -h
        layer.apply_step(delta)  # restore
        grad[j] = (plus - minus) / (2 * h)
    return grad
