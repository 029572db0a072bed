"""
binary_classifier
~~~~~~~~~~~~~~~~~

Sigmoid feedforward network, trained by backpropagation, for telling two
categories of images apart.
"""
from .errors import DimensionError, PersistenceError
from .layers import LayerState, SigmoidLayer
from .Network import ForwardPass, Network, load_network, new_network

__version__ = "1.0.0"

__all__ = [
    "DimensionError",
    "ForwardPass",
    "LayerState",
    "Network",
    "PersistenceError",
    "SigmoidLayer",
    "load_network",
    "new_network",
]
