"""
test_persistence.py
~~~~~~~~~~~~~~~~~~~

Unit tests for saving and restoring networks.
"""

import os

import numpy as np
import pytest

from binary_classifier import Network, PersistenceError, load_network
from binary_classifier.helpers.persistence import FORMAT_VERSION, pack_layers


@pytest.fixture
def net_path(tmp_path):
    return str(tmp_path / "classifier.net")


@pytest.fixture
def simple_network():
    """Create a small network with two hidden layers."""
    return Network(4, 2, 2, 3, learning_rate=0.2, weight_decay=0.01, seed=0)


@pytest.fixture
def trained_network(simple_network):
    """Create a small network with some training applied."""
    rng = np.random.default_rng(1)
    for _ in range(20):
        simple_network.train(rng.random(4), np.array([1.0, 0.0]), rounds=5)
    return simple_network


def write_npz(path, arrays):
    with open(path, "wb") as f:
        np.savez(f, **arrays)


@pytest.mark.unit
class TestRoundTrip:
    """Test that save then load is lossless."""

    def test_save_uses_path_verbatim(self, simple_network, net_path):
        """Test that no .npz suffix is appended to the file name."""
        simple_network.serialize(net_path)

        assert os.path.exists(net_path)
        assert not os.path.exists(net_path + ".npz")

    def test_forward_identical_after_load(self, trained_network, net_path):
        """Test that the restored network gives the same outputs."""
        x = np.array([0.1, 0.5, -0.3, 0.9])

        trained_network.serialize(net_path)
        loaded = Network.load(net_path)

        assert np.allclose(loaded.forward(x), trained_network.forward(x), rtol=0, atol=1e-9)

    def test_weights_bit_exact(self, trained_network, net_path):
        """Test that every weight survives with full precision."""
        trained_network.serialize(net_path)
        loaded = load_network(net_path)

        assert loaded.shapes() == trained_network.shapes()
        for a, b in zip(trained_network.layers, loaded.layers):
            assert a.weights.dtype == b.weights.dtype
            assert np.array_equal(a.weights, b.weights)

    def test_hyperparameters_restored(self, simple_network, net_path):
        simple_network.save(net_path)
        loaded = load_network(net_path)

        for layer in loaded.layers:
            assert layer.learning_rate == 0.2
            assert layer.weight_decay == 0.01

    def test_chain_relinked(self, simple_network, net_path):
        """Test that first/output layers and neighbours are rebuilt."""
        simple_network.serialize(net_path)
        loaded = load_network(net_path)

        assert loaded.first_layer is loaded.layers[0]
        assert loaded.output_layer is loaded.layers[-1]
        assert loaded.upstream_of(0) is None
        assert loaded.downstream_of(len(loaded.layers) - 1) is None
        assert loaded.sizes == simple_network.sizes

    def test_single_layer_round_trip(self, net_path):
        """Test the degenerate single-layer chain."""
        net = Network(3, 1, 0, 0, seed=4)
        net.serialize(net_path)
        loaded = load_network(net_path)

        assert len(loaded.layers) == 1
        assert loaded.first_layer is loaded.output_layer
        assert np.array_equal(loaded.layers[0].weights, net.layers[0].weights)

    def test_loaded_network_keeps_training(self, trained_network, net_path):
        """Test that a restored network trains exactly like the original."""
        x, expected = np.array([0.2, 0.2, 0.7, 0.1]), np.array([0.0, 1.0])
        trained_network.serialize(net_path)
        loaded = load_network(net_path)

        trained_network.train(x, expected, rounds=3)
        loaded.train(x, expected, rounds=3)

        for a, b in zip(trained_network.layers, loaded.layers):
            assert np.array_equal(a.weights, b.weights)


@pytest.mark.unit
class TestLoadFailures:
    """Test that every unusable file raises PersistenceError."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(PersistenceError):
            load_network(str(tmp_path / "nope.net"))

    def test_persistence_error_is_os_error(self, tmp_path):
        with pytest.raises(OSError):
            load_network(str(tmp_path / "nope.net"))

    def test_truncated_file(self, simple_network, net_path):
        """Test that a half-written archive is rejected."""
        simple_network.serialize(net_path)
        with open(net_path, "rb") as f:
            data = f.read()
        with open(net_path, "wb") as f:
            f.write(data[: len(data) // 2])

        with pytest.raises(PersistenceError):
            load_network(net_path)

    def test_empty_file(self, net_path):
        open(net_path, "wb").close()

        with pytest.raises(PersistenceError):
            load_network(net_path)

    def test_garbage_file(self, net_path):
        with open(net_path, "wb") as f:
            f.write(b"this is not a network" * 10)

        with pytest.raises(PersistenceError):
            load_network(net_path)

    def test_version_mismatch(self, simple_network, net_path):
        arrays = pack_layers(simple_network.layers)
        arrays["format_version"] = np.array(FORMAT_VERSION + 1, dtype=np.int64)
        write_npz(net_path, arrays)

        with pytest.raises(PersistenceError, match="version"):
            load_network(net_path)

    def test_missing_layer(self, simple_network, net_path):
        """Test that a layer count larger than the stored layers is rejected."""
        arrays = pack_layers(simple_network.layers)
        arrays["layer_count"] = np.array(len(simple_network.layers) + 1, dtype=np.int64)
        write_npz(net_path, arrays)

        with pytest.raises(PersistenceError):
            load_network(net_path)

    def test_understated_layer_count(self, simple_network, net_path):
        """Test that layers stored beyond the declared count are not silently dropped."""
        arrays = pack_layers(simple_network.layers)
        arrays["layer_count"] = np.array(1, dtype=np.int64)
        write_npz(net_path, arrays)

        with pytest.raises(PersistenceError, match="layer1_"):
            load_network(net_path)

    def test_unknown_entry(self, simple_network, net_path):
        """Test that an archive with entries outside the format is rejected."""
        arrays = pack_layers(simple_network.layers)
        arrays["optimizer_state"] = np.zeros(3)
        write_npz(net_path, arrays)

        with pytest.raises(PersistenceError):
            load_network(net_path)

    def test_incompatible_shapes(self, net_path):
        """Test that adjacent layers must agree on their sizes."""
        write_npz(
            net_path,
            {
                "format_version": np.array(FORMAT_VERSION, dtype=np.int64),
                "layer_count": np.array(2, dtype=np.int64),
                "layer0_weights": np.zeros((3, 3)),
                "layer0_hyperparameters": np.array([0.1, 0.0]),
                "layer1_weights": np.zeros((1, 3)),
                "layer1_hyperparameters": np.array([0.1, 0.0]),
            },
        )

        with pytest.raises(PersistenceError):
            load_network(net_path)

    def test_bad_weight_array(self, net_path):
        write_npz(
            net_path,
            {
                "format_version": np.array(FORMAT_VERSION, dtype=np.int64),
                "layer_count": np.array(1, dtype=np.int64),
                "layer0_weights": np.zeros(4),
                "layer0_hyperparameters": np.array([0.1, 0.0]),
            },
        )

        with pytest.raises(PersistenceError):
            load_network(net_path)

    def test_save_to_missing_directory(self, simple_network, tmp_path):
        with pytest.raises(PersistenceError):
            simple_network.serialize(str(tmp_path / "missing" / "net.net"))
