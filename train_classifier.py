import os

import matplotlib
import numpy as np

from binary_classifier import Network
from binary_classifier.early_stopping import EarlyStopping
from binary_classifier.helpers.evaluation import evaluate
from binary_classifier.helpers.images import PICTURE_HEIGHT, PICTURE_WIDTH, input_size, load_corpus
from binary_classifier.helpers.logger import RunLogger


def train_loop(
    net,
    train,
    test,
    batch_size=10,
    eval_every=100,
    max_steps=None,
    patience=None,
    checkpoint_path="models/classifier.net",
    best_error=None,
    logger=None,
    seed=None,
    verbose=True,
):
    """
    Train `net` on random batches drawn from `train`, evaluating on `test`
    every `eval_every` steps and saving the network whenever the test error
    improves on `best_error`. With a `logger`, every evaluation also writes
    the run's last checkpoint, and each improvement its best checkpoint.

    With max_steps=None and patience=None this runs until interrupted.

    Returns:
        (best_error, steps_run)
    """
    rng = np.random.default_rng(seed)
    n = len(train["inputs"])
    batch_size = min(batch_size, n)
    stopper = EarlyStopping(patience=patience, checkpoint_path=checkpoint_path)
    stopper.best = best_error

    step = 0
    while max_steps is None or step < max_steps:
        idx = rng.permutation(n)[:batch_size]
        batch_x = [train["inputs"][i] for i in idx]
        batch_y = [np.array([train["labels"][i]]) for i in idx]
        net.train_batch(batch_x, batch_y, rounds=1)

        if step % eval_every == 0:
            metrics = evaluate(net, test["inputs"], test["labels"], verbose=verbose, names=test["files"])
            batch_error = net.error_batch(batch_x, batch_y)
            if verbose:
                print(
                    f"Step {step} | TrainError {batch_error:.4f} | TestError {metrics['error']:.4f} "
                    f"| right {metrics['right']} uncertain {metrics['uncertain']} wrong {metrics['wrong']}"
                )
            if logger is not None:
                logger.log_step(
                    step,
                    train_error=batch_error,
                    test_error=metrics["error"],
                    right=metrics["right"],
                    uncertain=metrics["uncertain"],
                    wrong=metrics["wrong"],
                )
                logger.plot_error(tag="classifier")
                logger.save_checkpoint(net)
            should_stop = stopper.update(step, metrics["error"], net)
            if logger is not None and stopper.best_step == step:
                logger.save_checkpoint(net, best=True)
            if should_stop:
                if verbose:
                    print(
                        f"Stopping at step {step}. Best test error {stopper.best:.4f} "
                        f"at step {stopper.best_step}."
                    )
                step += 1
                break
        step += 1

    if logger is not None:
        logger.save_json()
    return stopper.best, step


if __name__ == "__main__":
    # charts are only written to files
    matplotlib.use("Agg")

    # ------- Hyperparameters -------
    positive_dir = "images/good"
    negative_dir = "images/bad"
    checkpoint_path = "models/classifier.net"
    resume = False

    test_count_per_class = 30
    hidden_layer_count = 2
    hidden_layer_width = 30
    learning_rate = 0.001
    weight_decay = 0.0
    batch_size = 10
    eval_every = 100
    seed = None

    train, test = load_corpus(
        positive_dir,
        negative_dir,
        test_count_per_class=test_count_per_class,
        rng=np.random.default_rng(seed),
    )
    print(
        f"Loaded {len(train['inputs'])} training and {len(test['inputs'])} test images "
        f"({PICTURE_WIDTH}x{PICTURE_HEIGHT})"
    )

    if resume and os.path.exists(checkpoint_path):
        net = Network.load(checkpoint_path)
        print(f"Resumed {net} from {checkpoint_path}")
    else:
        net = Network(
            input_size(),
            1,
            hidden_layer_count,
            hidden_layer_width,
            learning_rate=learning_rate,
            weight_decay=weight_decay,
            seed=seed,
        )
    os.makedirs(os.path.dirname(checkpoint_path), exist_ok=True)

    logger = RunLogger(root="runs", tag="classifier")
    try:
        best, steps = train_loop(
            net,
            train,
            test,
            batch_size=batch_size,
            eval_every=eval_every,
            checkpoint_path=checkpoint_path,
            logger=logger,
            seed=seed,
        )
        print(f"Finished after {steps} steps, best test error {best:.4f}")
    except KeyboardInterrupt:
        logger.save_checkpoint(net)
        logger.save_json()
        print("Training interrupted.")
