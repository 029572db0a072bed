# helpers/persistence.py
"""
Binary save/load of a layer chain.

The file is a numpy .npz archive holding, in chain order, each layer's
weight matrix and its [learning_rate, weight_decay] pair. Chain order is
positional: layer0 is input-facing, the last layer is the output layer.
"""
import zipfile

import numpy as np

from ..errors import DimensionError, PersistenceError
from ..layers.SigmoidLayer import SigmoidLayer

FORMAT_VERSION = 1


def _weights_key(i):
    return f"layer{i}_weights"


def _hyper_key(i):
    return f"layer{i}_hyperparameters"


def pack_layers(layers):
    # Pack the chain into a dict of arrays for np.savez
    arrays = {
        "format_version": np.array(FORMAT_VERSION, dtype=np.int64),
        "layer_count": np.array(len(layers), dtype=np.int64),
    }
    for i, layer in enumerate(layers):
        arrays[_weights_key(i)] = np.asarray(layer.weights, dtype=np.float64)
        arrays[_hyper_key(i)] = np.array(
            [layer.learning_rate, layer.weight_decay], dtype=np.float64
        )
    return arrays


def save_layers(layers, path):
    """
    Write the chain to `path`. The path is used verbatim (no .npz suffix is
    appended).
    """
    try:
        with open(path, "wb") as f:
            np.savez(f, **pack_layers(layers))
    except OSError as e:
        raise PersistenceError(f"Could not save network to {path}: {e}") from e
    return str(path)


def unpack_layers(data):
    """Rebuild the layer list from a mapping of arrays written by pack_layers."""
    version = int(data["format_version"])
    if version != FORMAT_VERSION:
        raise PersistenceError(
            f"Unsupported network format version {version}, expected {FORMAT_VERSION}"
        )
    count = int(data["layer_count"])
    if count < 1:
        raise PersistenceError(f"Network file holds {count} layers")

    layers = []
    for i in range(count):
        hyper = np.asarray(data[_hyper_key(i)], dtype=np.float64)
        if hyper.shape != (2,):
            raise PersistenceError(
                f"Layer {i} hyperparameters have shape {hyper.shape}, expected (2,)"
            )
        try:
            layer = SigmoidLayer.from_weights(
                data[_weights_key(i)],
                learning_rate=hyper[0],
                weight_decay=hyper[1],
            )
        except DimensionError as e:
            raise PersistenceError(f"Layer {i}: {e}") from e

        if layers and layer.input_size() != layers[-1].size():
            raise PersistenceError(
                f"Layer {i} takes {layer.input_size()} inputs but layer {i - 1} "
                f"has {layers[-1].size()} nodes"
            )
        layers.append(layer)

    expected_keys = {"format_version", "layer_count"}
    expected_keys.update(_weights_key(i) for i in range(count))
    expected_keys.update(_hyper_key(i) for i in range(count))
    extra = sorted(set(data.keys()) - expected_keys)
    if extra:
        raise PersistenceError(
            f"Network file declares {count} layers but also holds {', '.join(extra)}"
        )
    return layers


def load_layers(path):
    """
    Read a chain written by save_layers. Any failure (missing file,
    truncated or corrupt archive, missing entries, version or shape
    mismatch) raises PersistenceError.
    """
    try:
        with np.load(path, allow_pickle=False) as data:
            return unpack_layers(data)
    except PersistenceError:
        raise
    except (
        OSError,
        EOFError,
        KeyError,
        ValueError,
        TypeError,
        AttributeError,
        zipfile.BadZipFile,
    ) as e:
        raise PersistenceError(f"Could not load network from {path}: {e}") from e
