class Layer:
    # Subclasses override as needed
    def forward(self, x):
        raise NotImplementedError

    def backprop(self, delta_downstream, downstream_weights, state):
        # Return this layer's error signal
        raise NotImplementedError

    def apply_pending_update(self):
        # Commit each pending update onto its parameter, in place
        for p, g in zip(self.params(), self.grads()):
            p += g

    def params(self):
        # Return list of parameter ndarrays (e.g., [W])
        return []

    def grads(self):
        # Return list of pending update ndarrays matching params()
        return []
