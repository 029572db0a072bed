import numpy as np


class SquaredErrorLoss:
    def __init__(self):
        # cache from forward
        self.activations = None
        self.expected = None

    def forward(self, activations, expected):
        """
        activations: (n,) -- post-sigmoid outputs
        expected: (n,)
        returns: 0.5 * sum((expected - activations)^2)
        """
        self.activations = np.asarray(activations, dtype=np.float64)
        self.expected = np.asarray(expected, dtype=np.float64)
        diff = self.expected - self.activations
        return 0.5 * float(np.dot(diff, diff))

    def backward(self):
        """
        dL/da = a - expected
        """
        if self.activations is None or self.expected is None:
            raise ValueError("Must call forward() before backward()")
        return self.activations - self.expected
