"""PyTorch integration for qshift circuits.

A marked circuit becomes a trainable ``nn.Module`` whose gradients are
computed with the parameter-shift rule.

Example:
    >>> import torch
    >>> from qshift.blocks import chain, put, ry, cnot
    >>> from qshift.torch import CircuitExpectationLayer
    >>>
    >>> circuit = chain(ry(2, 0, 0.1), cnot(2, 0, 1), ry(2, 1, 0.2))
    >>> layer = CircuitExpectationLayer(circuit, put(2, 1, "Z"))
    >>> optimizer = torch.optim.Adam(layer.parameters(), lr=0.1)
    >>> loss = layer()
    >>> loss.backward()
    >>> optimizer.step()
"""

from .layers import CircuitExpectationLayer
from .param_shift import ShiftExpectation

__all__ = [
    "CircuitExpectationLayer",
    "ShiftExpectation",
]
