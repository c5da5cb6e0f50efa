import time
import logging
import numpy as np
import matplotlib.pyplot as plt
from sklearn.datasets import make_moons

from clean_seqnet import (
    RMSProp,
    SGDMomentum,
    Activation,
    Bias,
    Dense,
    Network,
    feed_forward,
    fit,
)

# --- Plotting Function ---

def plot_decision_boundary(X: np.ndarray, y_raw: np.ndarray, model: Network, title: str = "Decision Boundary"):
    """Plots the decision boundary of a trained model.

    Args:
        X: Input features (for axis limits and plotting points). Shape (n_samples, 2).
        y_raw: True integer class labels. Shape (n_samples,).
        model: Trained Network instance.
        title: Figure title.
    """
    h = 0.02 # Step size in the mesh

    x_min, x_max = X[:, 0].min() - 0.5, X[:, 0].max() + 0.5
    y_min, y_max = X[:, 1].min() - 0.5, X[:, 1].max() + 0.5
    xx, yy = np.meshgrid(np.arange(x_min, x_max, h),
                         np.arange(y_min, y_max, h))

    # The engine works on one example at a time
    mesh_points = np.c_[xx.ravel(), yy.ravel()]
    Z_probs = np.array([feed_forward(point, model) for point in mesh_points])

    if Z_probs.shape[1] > 1:
        Z = np.argmax(Z_probs, axis=1)
    else:
        Z = (Z_probs >= 0.5).astype(int).ravel()
    Z = Z.reshape(xx.shape)

    plt.figure(title, figsize=(10, 8))
    plt.contourf(xx, yy, Z, cmap=plt.cm.Spectral, alpha=0.8)
    plt.scatter(X[:, 0], X[:, 1], c=y_raw, cmap=plt.cm.Spectral, edgecolor='k', s=35)
    plt.xlabel("Feature 1")
    plt.ylabel("Feature 2")
    plt.title(title)
    plt.xlim(xx.min(), xx.max())
    plt.ylim(yy.min(), yy.max())
    plt.grid(True, alpha=0.2)


def plot_history(history: dict, title: str):
    plt.figure(title, figsize=(8, 5))
    plt.plot(history['step'], history['loss'], label='Training Loss')
    plt.xlabel('Step')
    plt.ylabel('Loss (sum of squared errors)')
    plt.title(title)
    plt.legend()
    plt.grid(True, alpha=0.3)
    plt.ylim(bottom=0)
    plt.tight_layout()


# --- XOR Example ---

def xor_example(seed: int = 0):
    """Trains 2 -> 5 -> 1 on XOR with RMSProp, one example per step."""
    logger = logging.getLogger("XORExample")
    logger.info("--- Running XOR Example ---")
    rng = np.random.default_rng(seed)

    X = np.array([[0, 0], [0, 1], [1, 0], [1, 1]], dtype=float)
    y = np.array([[0], [1], [1], [0]], dtype=float)

    network = Network([
        Dense.xavier(2, 5, rng),
        Bias.uniform(5, 0.0, 0.6, rng),
        Activation('relu'),
        Dense.xavier(5, 1, rng),
        Bias.uniform(1, 0.0, 0.6, rng),
        Activation('sigmoid'),
    ])
    logger.info(f"XOR Network Summary:\n{network.summary()}")
    optimizer = RMSProp(network, learning_rate=1e-3, beta=0.999)

    start_time = time.time()
    history = fit(network, optimizer, X, y, steps=100_000, batch_size=1, rng=rng,
                  log_every=10_000, verbose=True)
    logger.info(f"XOR training took {time.time() - start_time:.2f} seconds")

    correct = 0
    for inputs, target in zip(X, y):
        pred = feed_forward(inputs, network)[0]
        is_correct = (pred >= 0.5) == bool(target[0])
        correct += int(is_correct)
        logger.info(f"Input: {inputs}, Target: {target[0]}, Prediction: {pred:.4f} {'(Correct)' if is_correct else '(Incorrect)'}")
    logger.info(f"XOR Accuracy: {correct / len(X):.2%}")

    plot_history(history, "XOR Training History")
    plot_decision_boundary(X, y.ravel(), network, "XOR Decision Boundary")


# --- Make Moons Example ---

def make_moons_example(seed: int = 42):
    """Two-class moons with a Softmax output and momentum, accumulating 8 examples per step."""
    logger = logging.getLogger("MakeMoonsExample")
    logger.info("Generating make_moons dataset...")
    X_original, y_raw = make_moons(n_samples=300, noise=0.1, random_state=seed)

    # Normalize features
    X = (X_original - X_original.mean(axis=0)) / (X_original.std(axis=0) + 1e-8)
    y_one_hot = np.eye(2)[y_raw]

    network = Network.from_layer_sizes([2, 16, 16, 2], ['tanh', 'tanh', 'softmax'], rng=seed)
    logger.info(network.summary())
    # Gradients are summed over the 8 accumulated examples, so the rate is kept small
    optimizer = SGDMomentum(network, learning_rate=0.01, beta=0.9)

    history = fit(network, optimizer, X, y_one_hot, steps=5000, batch_size=8, rng=seed,
                  log_every=500, verbose=True)

    predictions = np.array([np.argmax(feed_forward(x, network)) for x in X])
    logger.info(f"Moons accuracy (training data): {np.mean(predictions == y_raw):.2%}")

    plot_history(history, "Make Moons Training History")
    plot_decision_boundary(X, y_raw, network, "Make Moons Decision Boundary")


# --- Script Execution ---

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    print("\n" + "="*40)
    print("--- Running XOR Example ---")
    print("="*40)
    xor_example()

    print("\n" + "="*40)
    print("--- Running Make Moons Example ---")
    print("="*40)
    make_moons_example()

    print("\nDisplaying plots. Close plot windows to exit.")
    plt.show()
