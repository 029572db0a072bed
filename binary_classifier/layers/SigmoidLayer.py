from collections import namedtuple

import numpy as np

from .Layer import Layer
from ..errors import DimensionError
from ..loss.SquaredErrorLoss import SquaredErrorLoss

# inputs: (input_size + 1,) input with the constant bias node at index 0
# activations: (output_size,) post-sigmoid node values
LayerState = namedtuple("LayerState", ["inputs", "activations"])


def as_vector(x, length, name="input"):
    """
    Convert `x` to a float64 vector and check it has exactly `length`
    components. Never pads or truncates.
    """
    v = np.asarray(x, dtype=np.float64)
    if v.ndim != 1:
        raise DimensionError(
            f"{name} must be one-dimensional, got shape {v.shape}"
        )
    if v.shape[0] != length:
        raise DimensionError(
            f"{name} has length {v.shape[0]}, expected {length}"
        )
    return v


class SigmoidLayer(Layer):
    def __init__(
        self,
        input_size,
        output_size,
        learning_rate=0.001,
        weight_decay=0.0,
        max_initial_weight=0.1,
        rng=None,
    ):
        # weights: (output_size, input_size + 1), column 0 is the bias weight
        # pending_update: unapplied change, same shape
        if input_size < 1 or output_size < 1:
            raise ValueError(
                f"Layer sizes must be positive, got {input_size}x{output_size}"
            )
        if rng is None:
            rng = np.random.default_rng()

        self.learning_rate = float(learning_rate)
        self.weight_decay = float(weight_decay)

        self.weights = rng.uniform(
            -max_initial_weight, max_initial_weight, size=(output_size, input_size + 1)
        )
        self.pending_update = np.zeros_like(self.weights)

    @classmethod
    def from_weights(cls, weights, learning_rate=0.001, weight_decay=0.0):
        """Build a layer around an existing (rows, inputs + 1) weight matrix."""
        weights = np.array(weights, dtype=np.float64)
        if weights.ndim != 2 or weights.shape[0] < 1 or weights.shape[1] < 2:
            raise DimensionError(
                f"Layer weights must be 2-D with at least 2 columns, got shape {weights.shape}"
            )
        layer = cls.__new__(cls)
        layer.learning_rate = float(learning_rate)
        layer.weight_decay = float(weight_decay)
        layer.weights = weights
        layer.pending_update = np.zeros_like(weights)
        return layer

    def activate(self, z):
        # f' = f * (1 - f)
        with np.errstate(over="ignore"):
            return 1.0 / (1.0 + np.exp(-z))

    def forward(self, x):
        x = as_vector(x, self.input_size())
        # the bias node is always one
        inputs = np.concatenate(([1.0], x))
        activations = self.activate(self.weights @ inputs)
        return LayerState(inputs, activations)

    def weight_sqrd(self):
        return float(np.sum(self.weights * self.weights))

    def error(self, expected, activations, chain_weight_sqrd=0.0):
        """
        0.5 * |expected - activations|^2, plus the weight decay penalty over
        the whole chain when weight decay is enabled.
        """
        expected = as_vector(expected, self.size(), name="expected output")
        err = SquaredErrorLoss().forward(activations, expected)
        if self.weight_decay != 0:
            err += 0.5 * self.weight_decay * chain_weight_sqrd
        return err

    def train_output(self, expected, state):
        """
        Output layer step. Stores the weight change in pending_update and
        returns delta, dE/dz for each node, for the upstream layer.
        """
        expected = as_vector(expected, self.size(), name="expected output")
        loss = SquaredErrorLoss()
        loss.forward(state.activations, expected)
        a = state.activations
        delta = loss.backward() * a * (1.0 - a)
        self._store_update(delta, state.inputs)
        return delta

    def backprop(self, delta_downstream, downstream_weights, state):
        """
        Hidden layer step. downstream_weights[:, 0] is the downstream bias
        column and does not connect to any node of this layer.
        """
        a = state.activations
        delta = (downstream_weights[:, 1:].T @ delta_downstream) * a * (1.0 - a)
        self._store_update(delta, state.inputs)
        return delta

    def _store_update(self, delta, inputs):
        # w_ij -= alpha * (delta_i * input_j + lambda * w_ij)
        self.pending_update[...] = -self.learning_rate * (
            np.outer(delta, inputs) + self.weight_decay * self.weights
        )

    def size(self):
        return self.weights.shape[0]

    def input_size(self):
        # don't include bias node
        return self.weights.shape[1] - 1

    def params(self):
        return [self.weights]

    def grads(self):
        return [self.pending_update]

    def __repr__(self):
        return f"<SigmoidLayer {self.input_size()}->{self.size()}>"
