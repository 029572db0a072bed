# helpers/images.py
"""
Turning images into network input vectors.

Every image is resized to a fixed width x height, converted to RGBA and
flattened row by row, so the vector length is 4 * width * height with each
component in [0, 1].
"""
import os
from io import BytesIO

import numpy as np
import requests
from PIL import Image, UnidentifiedImageError

PICTURE_WIDTH = 160
PICTURE_HEIGHT = 90
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tif", ".tiff", ".webp")


def input_size(width=PICTURE_WIDTH, height=PICTURE_HEIGHT):
    return 4 * width * height


def image_to_input(image, width=PICTURE_WIDTH, height=PICTURE_HEIGHT):
    # high quality resize, then rescale bytes for use in the network
    resized = image.convert("RGBA").resize((width, height), Image.Resampling.BICUBIC)
    pixels = np.asarray(resized, dtype=np.float64)  # (height, width, 4)
    return pixels.reshape(-1) / 255.0


def open_image(source):
    """Open a path or file-like object, raising ValueError if it is not an image."""
    try:
        image = Image.open(source)
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Could not read image {source!r}: {e}") from e
    try:
        image.load()
    except (OSError, SyntaxError) as e:
        image.close()
        raise ValueError(f"Could not read image {source!r}: {e}") from e
    return image


def file_to_input(path, width=PICTURE_WIDTH, height=PICTURE_HEIGHT):
    with open_image(path) as image:
        return image_to_input(image, width=width, height=height)


def fetch_image(url, timeout=10):
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return open_image(BytesIO(response.content))


def list_images(directory):
    """Sorted paths of the image files directly inside `directory`."""
    return sorted(
        os.path.join(directory, name)
        for name in os.listdir(directory)
        if name.lower().endswith(IMAGE_EXTENSIONS)
        and os.path.isfile(os.path.join(directory, name))
    )


def load_corpus(
    positive_dir,
    negative_dir,
    test_count_per_class=30,
    rng=None,
    width=PICTURE_WIDTH,
    height=PICTURE_HEIGHT,
):
    """
    Load two directories of images as labelled examples and hold out
    `test_count_per_class` random files of each class for testing.

    Returns:
        (train, test): dicts with 'inputs', 'labels' (1.0 positive,
        0.0 negative) and 'files'
    """
    if rng is None:
        rng = np.random.default_rng()

    train = {"inputs": [], "labels": [], "files": []}
    test = {"inputs": [], "labels": [], "files": []}
    for directory, label in ((positive_dir, 1.0), (negative_dir, 0.0)):
        files = list_images(directory)
        if len(files) <= test_count_per_class:
            raise ValueError(
                f"{directory} has {len(files)} images, need more than "
                f"{test_count_per_class} to hold some out for testing"
            )
        files = [files[i] for i in rng.permutation(len(files))]
        n_train = len(files) - test_count_per_class
        for split, chunk in ((train, files[:n_train]), (test, files[n_train:])):
            for path in chunk:
                split["inputs"].append(file_to_input(path, width=width, height=height))
                split["labels"].append(label)
                split["files"].append(path)
    return train, test
