from .Layer import Layer
from .SigmoidLayer import LayerState, SigmoidLayer

__all__ = [
    "Layer",
    "LayerState",
    "SigmoidLayer",
]
