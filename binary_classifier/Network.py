from collections import namedtuple

import numpy as np

from .errors import DimensionError
from .helpers.persistence import load_layers, save_layers
from .layers import SigmoidLayer
from .layers.SigmoidLayer import as_vector

# states: one LayerState per layer, in chain order
# output: activations of the output layer
ForwardPass = namedtuple("ForwardPass", ["states", "output"])


class Network:
    """
    Fully connected feedforward network of sigmoid layers.

    The layers form a simple chain held in `self.layers`: index 0 takes the
    network input, the last layer produces the output. Neighbours are found
    by index, see upstream_of() and downstream_of().

    A Network is not safe to share between threads: forward, train and
    error all run against the same weights and pending updates.
    """

    def __init__(
        self,
        input_size,
        output_size,
        hidden_layer_count=0,
        hidden_layer_width=0,
        learning_rate=0.001,
        weight_decay=0.0,
        seed=None,
        max_initial_weight=0.1,
    ):
        if input_size < 1 or output_size < 1:
            raise ValueError(
                f"input_size and output_size must be positive, got {input_size}, {output_size}"
            )
        if hidden_layer_count < 0:
            raise ValueError(f"hidden_layer_count must be >= 0, got {hidden_layer_count}")
        if hidden_layer_count > 0 and hidden_layer_width < 1:
            raise ValueError(
                f"hidden_layer_width must be positive with hidden layers, got {hidden_layer_width}"
            )

        rng = np.random.default_rng(seed)

        def make(n_in, n_out):
            return SigmoidLayer(
                n_in,
                n_out,
                learning_rate=learning_rate,
                weight_decay=weight_decay,
                max_initial_weight=max_initial_weight,
                rng=rng,
            )

        # with no hidden layers the first layer is also the output layer
        layers = []
        n_in = input_size
        for _ in range(hidden_layer_count):
            layers.append(make(n_in, hidden_layer_width))
            n_in = layers[-1].size()
        layers.append(make(n_in, output_size))
        self.layers = layers

    @classmethod
    def from_layers(cls, layers):
        """Wrap an existing, shape-compatible chain of layers."""
        layers = list(layers)
        if not layers:
            raise ValueError("A network needs at least one layer")
        if len({id(layer) for layer in layers}) != len(layers):
            raise ValueError("A layer instance appears more than once in the chain")
        for i in range(1, len(layers)):
            if layers[i].input_size() != layers[i - 1].size():
                raise DimensionError(
                    f"Layer {i} takes {layers[i].input_size()} inputs but layer "
                    f"{i - 1} has {layers[i - 1].size()} nodes"
                )
        net = cls.__new__(cls)
        net.layers = layers
        return net

    @classmethod
    def load(cls, path):
        """Restore a network saved with serialize(). Raises PersistenceError."""
        return cls.from_layers(load_layers(path))

    def __repr__(self):
        return f"<Network sizes={self.sizes}>"

    # ----- chain structure -----
    @property
    def first_layer(self):
        return self.layers[0]

    @property
    def output_layer(self):
        return self.layers[-1]

    @property
    def input_size(self):
        return self.first_layer.input_size()

    @property
    def output_size(self):
        return self.output_layer.size()

    @property
    def sizes(self):
        return [self.input_size] + [layer.size() for layer in self.layers]

    def shapes(self):
        return [layer.weights.shape for layer in self.layers]

    def upstream_of(self, i):
        # None for the first layer
        return i - 1 if i > 0 else None

    def downstream_of(self, i):
        # None for the output layer
        return i + 1 if i < len(self.layers) - 1 else None

    def weight_sqrd(self):
        """Sum over all layers of the squared weights."""
        return sum(layer.weight_sqrd() for layer in self.layers)

    # ----- propagation -----
    def propagate(self, x):
        states = []
        for layer in self.layers:
            state = layer.forward(x)
            states.append(state)
            x = state.activations
        return ForwardPass(states, x)

    def forward(self, x):
        return self.propagate(x).output

    def backpropagate(self, forward_pass, expected):
        """
        Fill every layer's pending update from one forward pass. Nothing is
        applied to the weights until apply_pending_update().
        """
        i = len(self.layers) - 1
        delta = self.layers[i].train_output(expected, forward_pass.states[i])
        i = self.upstream_of(i)
        while i is not None:
            downstream = self.layers[self.downstream_of(i)]
            delta = self.layers[i].backprop(delta, downstream.weights, forward_pass.states[i])
            i = self.upstream_of(i)

    def apply_pending_update(self):
        for layer in reversed(self.layers):
            layer.apply_pending_update()

    # ----- training -----
    def train(self, x, expected, rounds=1):
        """Online gradient descent on a single example, `rounds` times."""
        expected = as_vector(expected, self.output_size, name="expected output")
        for _ in range(rounds):
            self.backpropagate(self.propagate(x), expected)
            self.apply_pending_update()

    def train_batch(self, inputs, expected_outputs, rounds=1, apply_per_example=False):
        """
        Train on a list of examples.

        Every backpropagation overwrites the pending update, so by default
        only the step computed for the last example is committed, once, at
        the end of the batch. With apply_per_example=True the pending update
        is committed after each example's rounds instead.
        """
        inputs = list(inputs)
        expected_outputs = list(expected_outputs)
        if len(inputs) != len(expected_outputs):
            raise DimensionError(
                f"Got {len(inputs)} inputs but {len(expected_outputs)} expected outputs"
            )
        if not inputs:
            return

        # Reject a bad example before any weight is touched
        inputs = [as_vector(x, self.input_size, name="input") for x in inputs]
        expected_outputs = [
            as_vector(e, self.output_size, name="expected output") for e in expected_outputs
        ]

        for x, expected in zip(inputs, expected_outputs):
            for _ in range(rounds):
                self.backpropagate(self.propagate(x), expected)
            if apply_per_example:
                self.apply_pending_update()
        if not apply_per_example:
            self.apply_pending_update()

    # ----- evaluation -----
    def pass_error(self, forward_pass, expected):
        """Error of an already computed forward pass, without propagating again."""
        out = self.output_layer
        chain_sqrd = self.weight_sqrd() if out.weight_decay != 0 else 0.0
        return out.error(expected, forward_pass.output, chain_weight_sqrd=chain_sqrd)

    def error(self, x, expected):
        return self.pass_error(self.propagate(x), expected)

    def error_batch(self, inputs, expected_outputs):
        """Mean error over a list of examples."""
        inputs = list(inputs)
        expected_outputs = list(expected_outputs)
        if len(inputs) != len(expected_outputs):
            raise DimensionError(
                f"Got {len(inputs)} inputs but {len(expected_outputs)} expected outputs"
            )
        if not inputs:
            raise ValueError("Cannot compute the error of an empty batch")
        total = 0.0
        for x, expected in zip(inputs, expected_outputs):
            total += self.error(x, expected)
        return total / len(inputs)

    # model I/O
    def serialize(self, path):
        return save_layers(self.layers, path)

    save = serialize


def new_network(input_size, output_size, hidden_layer_count, hidden_layer_width, **kwargs):
    return Network(input_size, output_size, hidden_layer_count, hidden_layer_width, **kwargs)


def load_network(path):
    return Network.load(path)
