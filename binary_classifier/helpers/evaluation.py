# helpers/evaluation.py
import numpy as np


def score_prediction(score, label, lower=0.1, upper=0.9):
    """
    Grade one network output against a 1.0/0.0 label.

    A positive example is "right" above `upper`, "wrong" at or below
    `lower`; a negative example is "right" below `lower`, "wrong" at or
    above `upper`. Anything in between is "uncertain".
    """
    if label >= 0.5:
        if score > upper:
            return "right"
        if score > lower:
            return "uncertain"
        return "wrong"
    if score < lower:
        return "right"
    if score < upper:
        return "uncertain"
    return "wrong"


def verdict(score, lower=1 / 3, upper=2 / 3):
    if score > upper:
        return "positive"
    if score > lower:
        return "uncertain"
    return "negative"


def evaluate(network, inputs, labels, lower=0.1, upper=0.9, verbose=False, names=None):
    """
    Mean error and right/uncertain/wrong counts of a single-output network
    over labelled examples.

    Args:
        network: Network with one output node
        inputs: list of input vectors
        labels: list of 1.0 (positive) / 0.0 (negative) labels
        names: optional list of example names, printed for misses when verbose

    Returns:
        dict with 'error', 'right', 'uncertain', 'wrong', 'accuracy'
    """
    inputs = list(inputs)
    labels = [float(label) for label in labels]
    if len(inputs) != len(labels):
        raise ValueError(f"Got {len(inputs)} inputs but {len(labels)} labels")
    if not inputs:
        raise ValueError("Cannot evaluate an empty set of examples")

    counts = {"right": 0, "uncertain": 0, "wrong": 0}
    total_error = 0.0
    for i, (x, label) in enumerate(zip(inputs, labels)):
        expected = np.array([label])
        forward_pass = network.propagate(x)
        score = float(forward_pass.output[0])
        grade = score_prediction(score, label, lower=lower, upper=upper)
        counts[grade] += 1
        if verbose and grade != "right":
            name = names[i] if names is not None else i
            print(f"   {grade}: {score:.4f}, {name}")
        total_error += network.pass_error(forward_pass, expected)

    n = len(inputs)
    return {
        "error": total_error / n,
        "right": counts["right"],
        "uncertain": counts["uncertain"],
        "wrong": counts["wrong"],
        "accuracy": counts["right"] / n,
    }
