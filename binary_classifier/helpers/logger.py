# helpers/logger.py
import csv, json, datetime, pathlib

import matplotlib.pyplot as plt

from .persistence import save_layers


class RunLogger:
    def __init__(self, root="runs", tag="run"):
        ts = datetime.datetime.now().strftime("%Y%m%d-%H%M%S")
        self.root = pathlib.Path(root)
        self.dir = self.root / f"{tag}_{ts}"
        self.dir.mkdir(parents=True, exist_ok=True)
        self.csv_path = self.dir / "history.csv"
        self.json_path = self.dir / "history.json"
        self.best_ckpt = self.dir / "checkpoint_best.net"
        self.last_ckpt = self.dir / "checkpoint_last.net"
        self.metrics = []  # list of dicts per logged step
        self._csv_header_written = False

    # ---------- logging ----------
    def log_step(self, step, **kwargs):
        row = {"step": int(step), **{k: float(v) for k, v in kwargs.items()}}
        self.metrics.append(row)
        with open(self.csv_path, "a", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(row.keys()))
            if not self._csv_header_written:
                writer.writeheader()
                self._csv_header_written = True
            writer.writerow(row)

    def history(self):
        """Logged metrics as {'step': [...], name: [...]}."""
        out = {}
        for row in self.metrics:
            for k, v in row.items():
                out.setdefault(k, []).append(v)
        return out

    def save_json(self):
        with open(self.json_path, "w") as f:
            json.dump(self.metrics, f, indent=2)

    def save_checkpoint(self, network, best=False):
        path = self.best_ckpt if best else self.last_ckpt
        return save_layers(network.layers, path)

    # ---------- plotting ----------
    def plot_error(self, history=None, tag="run", filename=None):
        """
        Saves the error curves as error_curve_<tag>.png.
        Plots 'train_error' and 'test_error' against 'step' when present.
        """
        if history is None:
            history = self.history()
        steps = history.get("step", [])
        train = history.get("train_error", [])
        test = history.get("test_error", [])

        plt.figure()
        if len(train) > 0:
            plt.plot(steps[: len(train)], train, label="training batch error")
        if len(test) > 0:
            plt.plot(steps[: len(test)], test, label="test error")
        plt.xlabel("Training step")
        plt.ylabel("Squared error")
        plt.title(f"Error vs Steps ({tag})")
        if len(train) > 0 or len(test) > 0:
            plt.legend()
        plt.tight_layout()
        path = self.dir / (filename or f"error_curve_{tag}.png")
        plt.savefig(path, dpi=160)
        plt.close()
        return str(path)
