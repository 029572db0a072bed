import os
import sys

from binary_classifier import Network
from binary_classifier.helpers.evaluation import verdict
from binary_classifier.helpers.images import fetch_image, image_to_input, open_image

MESSAGES = {
    "positive": "Screenshot!",
    "uncertain": "Uncertain...",
    "negative": "Not a screenshot!",
}


def classify(net, source, timeout=10):
    """
    Score one image, given as a URL or a local path.

    Returns:
        (score, verdict) where verdict is 'positive', 'uncertain' or 'negative'
    """
    if source.startswith(("http://", "https://")):
        image = fetch_image(source, timeout=timeout)
    else:
        image = open_image(source)
    with image:
        x = image_to_input(image)
    score = float(net.forward(x)[0])
    return score, verdict(score)


if __name__ == "__main__":
    network_path = os.environ.get("CLASSIFIER_NETWORK", "models/classifier.net")

    if len(sys.argv) < 2:
        print(f"usage: {sys.argv[0]} <image url or path> [...]")
        sys.exit(2)

    net = Network.load(network_path)
    for source in sys.argv[1:]:
        score, label = classify(net, source)
        print(f"{MESSAGES[label]} ({score:.3f}) {source}")
