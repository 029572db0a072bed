def save_if_improved(network, error, best_error, path, min_delta=0.0):
    """
    Persist `network` to `path` when `error` beats `best_error` by more than
    `min_delta`. Returns the best error after the comparison.
    """
    if best_error is None or error < best_error - min_delta:
        network.serialize(path)
        return error
    return best_error


class EarlyStopping:
    def __init__(self, patience=None, min_delta=0.0, checkpoint_path=None):
        # patience=None never stops; training runs until the caller quits
        self.patience = patience
        self.min_delta = float(min_delta)
        self.checkpoint_path = checkpoint_path

        self.best = None
        self.best_step = -1
        self.wait = 0
        self.stopped = False

    def _is_better(self, current, best):
        return best is None or current < (best - self.min_delta)

    def update(self, step, error, network):
        improved = self._is_better(error, self.best)
        if improved:
            if self.checkpoint_path is not None:
                self.best = save_if_improved(
                    network, error, self.best, self.checkpoint_path, self.min_delta
                )
            else:
                self.best = error
            self.best_step = step
            self.wait = 0
            return False

        self.wait += 1
        if self.patience is not None and self.wait >= self.patience:
            self.stopped = True
            return True
        return False
