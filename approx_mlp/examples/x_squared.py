import time
import logging
import numpy as np
import matplotlib.pyplot as plt

from approx_mlp import Adam, Layer, MSE, NeuralNetwork, TrainingSession, XavierInitializer

N_SAMPLES = 10000
EPOCHS = 1000

# --- Full fit() Example ---

def x_squared_example(rng: np.random.Generator):
    """Fits y = x^2 on [-50, 50] with a 1-32-32-1 network trained by Adam."""
    logger = logging.getLogger("XSquaredExample")
    logger.setLevel(logging.INFO)

    # --- Data ---
    x = rng.random(N_SAMPLES) * 100 - 50
    y = x * x
    logger.info(f"Sampled {N_SAMPLES} points of y = x^2")

    # --- Network ---
    init = XavierInitializer(rng)
    network = NeuralNetwork([
        Layer(1, 32, 'relu', init, id=0),
        Layer(32, 32, 'relu', init, id=1),
        Layer(32, 1, 'linear', init, id=2),
    ])
    network.setup(Adam(network), MSE())
    print(network.summary())

    # --- Training ---
    start_time = time.time()
    history = network.fit(x, y, split=0.2, epochs=EPOCHS, batch_size=256, verbose=True, rng=rng)
    logger.info(f"Training finished. Total training time: {time.time() - start_time:.2f} seconds")

    x_pred = [-30, -20, -4, 4, 12, 30]
    y_pred = [network.predict([value])[0] for value in x_pred]
    logger.info(f"x: {x_pred}")
    logger.info(f"y: {[round(v, 2) for v in y_pred]}")

    # --- Plotting Training History ---
    plt.figure("x^2 Training History", figsize=(8, 5))
    plt.plot(history['epoch'], history['loss'], label='Training Loss')
    plt.xlabel('Epoch')
    plt.ylabel('Loss (MSE)')
    plt.yscale('log')
    plt.title('x^2 Training History')
    plt.legend()
    plt.grid(True, alpha=0.3)
    plt.tight_layout()


# --- Session Example ---

def session_example(rng: np.random.Generator, epochs: int = 200, interval: int = 50):
    """Drives a TrainingSession the way a progress-streaming caller would."""
    logger = logging.getLogger("SessionExample")
    logger.setLevel(logging.INFO)

    x = rng.random(2000) * 6 - 3
    y = np.sin(x)
    session = TrainingSession(x, y, rng)

    order = np.argsort(x)
    plt.figure("sin(x) Session Snapshots", figsize=(8, 5))
    plt.scatter(x[order], y[order], s=2, c='k', alpha=0.3, label='Samples')
    for snapshot in session.snapshots(epochs, interval):
        logger.info(f"Epoch {snapshot.epoch} - loss: {snapshot.loss:.5f} - val_loss: {snapshot.val_loss:.5f}")
        plt.plot(snapshot.x[order], snapshot.predictions[order], label=f'Epoch {snapshot.epoch}')
    plt.xlabel('x')
    plt.ylabel('y')
    plt.title('sin(x) Predictions During Training')
    plt.legend()
    plt.grid(True, alpha=0.3)
    plt.tight_layout()


# --- Script Execution ---

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    rng = np.random.default_rng(42)

    print("\n" + "="*40)
    print("--- Running sin(x) Session Example ---")
    print("="*40)
    session_example(rng)

    print("\n" + "="*40)
    print("--- Running x^2 Example ---")
    print("="*40)
    x_squared_example(rng)

    print("\nDisplaying plots. Close plot windows to exit.")
    plt.show()
