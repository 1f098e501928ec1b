import numpy as np
import pytest

from approx_mlp import (
    MSE,
    SGD,
    Adam,
    ConfigurationError,
    Dataset,
    DimensionMismatch,
    Layer,
    Linear,
    NeuralNetwork,
    NullInputError,
    RangeError,
    ReLU,
    UnsupportedOperation,
    XavierInitializer,
)


# ============================================================================
# CONSTRUCTION / SETUP
# ============================================================================

def test_constructor_rejects_empty_layers():
    with pytest.raises(ConfigurationError):
        NeuralNetwork([])


def test_constructor_rejects_none():
    with pytest.raises(NullInputError):
        NeuralNetwork(None)


def test_constructor_rejects_disconnected_layers():
    with pytest.raises(ConfigurationError):
        NeuralNetwork([Layer(1, 3, ReLU()), Layer(2, 1, ReLU())])


def test_constructor_accepts_connected_layers():
    nn = NeuralNetwork([Layer(1, 3, ReLU()), Layer(3, 4, ReLU()), Layer(4, 1, Linear())])
    assert nn.num_layers == 3
    assert nn.trainer is None and nn.loss is None


def test_setup_rejects_none(two_layer_network):
    with pytest.raises(NullInputError):
        two_layer_network.setup(None, MSE())
    with pytest.raises(NullInputError):
        two_layer_network.setup(SGD(two_layer_network, 0.1), None)


def test_setup_binds_loss_into_trainer(two_layer_network):
    trainer = SGD(two_layer_network, 0.1)
    two_layer_network.setup(trainer, MSE())
    assert two_layer_network.trainer is trainer
    assert trainer.backprop is not None
    assert trainer.backprop.network is two_layer_network


# ============================================================================
# PREDICT / LOSS
# ============================================================================

def test_predict_two_layers(two_layer_network):
    # hidden = relu([1.0, 2.0]); out = 0.5 * 1.0 + 1.0 * 2.0
    np.testing.assert_allclose(two_layer_network.predict([1.0]), [2.5])


def test_predict_rejects_wrong_length(two_layer_network):
    with pytest.raises(DimensionMismatch):
        two_layer_network.predict([1.0, 2.0])


def test_predict_works_without_setup(two_layer_network):
    assert two_layer_network.trainer is None
    assert two_layer_network.predict([0.0]).shape == (1,)


def test_calculate_loss_requires_loss(two_layer_network):
    with pytest.raises(ConfigurationError):
        two_layer_network.calculate_loss([[1.0]], [[2.5]])


def test_calculate_loss_flattens_rows(two_layer_network):
    two_layer_network.setup(SGD(two_layer_network, 0.1), MSE())
    # predictions 2.5 and 5.0; errors 0.5 and 1.0
    loss = two_layer_network.calculate_loss([[1.0], [2.0]], [[2.0], [4.0]])
    assert loss == pytest.approx((0.5 * 0.25 + 0.5 * 1.0) / 2)


# ============================================================================
# TRAINING
# ============================================================================

def test_fit_single_sample_gradient_descent(single_layer_network):
    single_layer_network.fit(
        [[0.5, 1.0]], [[1.0, 0.5]],
        split=0.0, epochs=1, batch_size=1, verbose=False,
        rng=np.random.default_rng(0),
    )
    np.testing.assert_allclose(single_layer_network.predict([0.5, 1.0]), [1.0, 0.0])


def test_fit_requires_setup(two_layer_network):
    with pytest.raises(ConfigurationError):
        two_layer_network.fit([1.0], [2.0], epochs=1, batch_size=1, verbose=False)


@pytest.mark.parametrize("kwargs", [
    {"split": 1.0},
    {"split": -0.1},
    {"split": float("nan")},
    {"epochs": 0},
    {"batch_size": 0},
    {"batch_size": -4},
    {"batch_size": 1.5},
    {"epochs": 2.0},
    {"epochs": True},
])
def test_fit_rejects_out_of_range_parameters(single_layer_network, kwargs):
    params = {"split": 0.0, "epochs": 1, "batch_size": 1, "verbose": False}
    params.update(kwargs)
    with pytest.raises(RangeError):
        single_layer_network.fit([[0.5, 1.0]], [[1.0, 0.5]], **params)


def test_fit_rejects_empty_or_unequal_data(single_layer_network):
    with pytest.raises(DimensionMismatch):
        single_layer_network.fit(np.zeros((0, 2)), np.zeros((0, 2)), epochs=1, batch_size=1, verbose=False)
    with pytest.raises(DimensionMismatch):
        single_layer_network.fit(np.zeros((3, 2)), np.zeros((2, 2)), epochs=1, batch_size=1, verbose=False)


def test_fit_accepts_scalar_sequences(rng):
    init = XavierInitializer(rng)
    nn = NeuralNetwork([Layer(1, 8, ReLU(), init), Layer(8, 1, Linear(), init)])
    nn.setup(Adam(nn, learning_rate=1e-2), MSE())

    x = rng.random(64) * 2 - 1
    history = nn.fit(x, 3 * x + 1, split=0.25, epochs=200, batch_size=16, verbose=False, rng=rng)

    assert history['epoch'] == [1, 100, 200]
    assert history['loss'][-1] < history['loss'][0]


def test_fit_history_reports_training_partition_as_val_loss(single_layer_network):
    history = single_layer_network.fit(
        [[0.5, 1.0], [1.0, 0.0], [0.0, 1.0], [2.0, 2.0]],
        [[1.0, 0.5], [0.0, 0.0], [1.0, 1.0], [9.0, 9.0]],
        split=0.5, epochs=1, batch_size=2, verbose=True,
        rng=np.random.default_rng(3),
    )
    assert history['val_loss'] == history['loss']


def test_fit_next_one_step_per_batch(rng):
    init = XavierInitializer(rng)
    nn = NeuralNetwork([Layer(1, 1, Linear(), init)])
    trainer = SGD(nn, 0.01)
    nn.setup(trainer, MSE())

    steps = []
    original_step = trainer.step

    def counting_step():
        steps.append(trainer.count)
        original_step()

    trainer.step = counting_step
    dataset = Dataset(np.arange(10.0), np.arange(10.0), 0.0, rng)
    nn.fit_next(dataset, 4)

    # 10 training rows in batches of 4: 4 + 4 + 2
    assert steps == [4, 4, 2]
    assert trainer.count == 0


def test_fit_next_requires_setup(two_layer_network, rng):
    dataset = Dataset([1.0, 2.0], [1.0, 2.0], 0.0, rng)
    with pytest.raises(ConfigurationError):
        two_layer_network.fit_next(dataset, 1)


def test_fit_next_rejects_bad_batch_size(single_layer_network, rng):
    dataset = Dataset([[0.5, 1.0]], [[1.0, 0.5]], 0.0, rng)
    with pytest.raises(RangeError):
        single_layer_network.fit_next(dataset, 0)


def test_fit_is_deterministic_for_a_seed():
    def train(seed):
        rng = np.random.default_rng(seed)
        init = XavierInitializer(rng)
        nn = NeuralNetwork([Layer(1, 4, ReLU(), init), Layer(4, 1, Linear(), init)])
        nn.setup(Adam(nn), MSE())
        x = np.linspace(-1, 1, 20)
        nn.fit(x, x ** 2, split=0.2, epochs=3, batch_size=5, verbose=False, rng=rng)
        return nn.predict([0.3])

    np.testing.assert_array_equal(train(11), train(11))


# ============================================================================
# PERSISTENCE / SUMMARY
# ============================================================================

def test_save_and_load_are_unsupported(two_layer_network, tmp_path):
    with pytest.raises(UnsupportedOperation):
        two_layer_network.save(str(tmp_path / "model.npz"))
    with pytest.raises(UnsupportedOperation):
        two_layer_network.load(str(tmp_path / "model.npz"))


def test_summary_counts_parameters(two_layer_network):
    text = two_layer_network.summary()
    # (2 weights + 2 biases) + (2 weights + 1 bias)
    assert "Total Parameters: 7" in text
