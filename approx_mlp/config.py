"""Default settings for a function-approximation training session."""


class AdamConfig:
    """Adam hyperparameters."""

    learning_rate = 1e-3
    beta1 = 0.9
    beta2 = 0.999
    epsilon = 1e-7


class SessionConfig:
    """Settings used by `TrainingSession` for a one-dimensional function y = f(x)."""

    # Network: 1 -> 32 -> 32 -> 1
    input_size = 1
    hidden_sizes = (32, 32)
    output_size = 1
    hidden_activation = "relu"
    output_activation = "linear"
    initializer = "xavier"

    # Training
    loss = "mse"
    batch_size = 256
    split = 0.2            # Validation share of the samples
    adam = AdamConfig
