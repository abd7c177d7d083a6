"""PyTorch nn.Module integration for marked circuits."""

from __future__ import annotations

import weakref
from typing import Optional, Sequence, Union

import torch
import torch.nn as nn

from ..backend import zero_state
from ..blocks import AbstractBlock
from ..core.device import Device
from ..core.module import QuantumModule
from ..grad import dispatch_to_diff, markdiff, parameters_of_diff
from ..logging import get_logger
from ..operators import ObservableLike, as_observable, expect
from .param_shift import ShiftExpectation
from .utils import as_cpu_float64, validate_params_shape

logger = get_logger(__name__)


class CircuitExpectationLayer(QuantumModule):
    """
    Trainable expectation value ``<0|U(θ)† O U(θ)|0>`` of a circuit.

    The circuit is marked with :func:`markdiff`; every marked node
    contributes one entry of :attr:`params`, in the order of
    :func:`parameters_of_diff`. Gradients come from the parameter-shift
    rule, so they are exact.

    Parameters
    ----------
    circuit:
        Circuit block. Marking happens here; pass an already marked tree to
        control which gates are trained.
    observable:
        Hermitian observable (block, PauliTerm or PauliSum) on the same
        register.
    init_params:
        Optional initial values. If None, the circuit's current parameters
        are used.
    device:
        Simulation device, see :class:`qshift.core.QuantumModule`.
    dtype:
        Complex dtype of the simulated state. Default ``torch.complex128``.

    Example
    -------
    >>> layer = CircuitExpectationLayer(chain(ry(1, 0, 0.3)), put(1, 0, "Z"))
    >>> optimizer = torch.optim.SGD(layer.parameters(), lr=0.1)
    >>> loss = layer()
    >>> loss.backward()
    >>> optimizer.step()
    """

    def __init__(
        self,
        circuit: AbstractBlock,
        observable: ObservableLike,
        init_params: Optional[Union[torch.Tensor, Sequence[float]]] = None,
        device: Device | str | torch.device | None = None,
        dtype: torch.dtype = torch.complex128,
    ) -> None:
        super().__init__(circuit.n_qubits, device=device)

        obs = as_observable(observable)
        if obs.n_qubits != circuit.n_qubits:
            raise ValueError(
                f"observable acts on {obs.n_qubits} qubits, circuit on {circuit.n_qubits}"
            )

        self._circuit = markdiff(circuit)
        self._observable = obs
        self._dtype = dtype

        n_params = len(parameters_of_diff(self._circuit))
        if init_params is None:
            values = as_cpu_float64(parameters_of_diff(self._circuit))
        else:
            values = as_cpu_float64(init_params)
            validate_params_shape(values, n_params)
            dispatch_to_diff(self._circuit, values)

        self.params = nn.Parameter(values.to(device=self.qdevice.as_torch_device()))
        logger.debug("CircuitExpectationLayer: %d trainable parameter(s)", n_params)

    @property
    def circuit(self) -> AbstractBlock:
        """The marked circuit."""
        return self._circuit

    @property
    def observable(self) -> AbstractBlock:
        return self._observable

    @property
    def num_parameters(self) -> int:
        return self.params.shape[0]

    def state(self) -> torch.Tensor:
        """Statevector produced by the circuit's current parameters."""
        psi0 = zero_state(self.n_qubits, device=self.qdevice, dtype=self._dtype)
        return self._circuit.apply(psi0)

    def expectation(self) -> float:
        """Expectation value at the circuit's current parameters."""
        return float(expect(self._observable, self.state()).real.item())

    def forward(self) -> torch.Tensor:
        """
        Return the expectation value at :attr:`params` as a 0-dim tensor.

        Backpropagating through the result fills ``params.grad`` with the
        parameter-shift gradient.
        """
        return ShiftExpectation.apply(weakref.ref(self), self.params)

    def get_parameters(self) -> torch.Tensor:
        """Current parameter values as a detached float64 CPU tensor."""
        return self.params.detach().cpu().clone()

    def set_parameters(self, new_params: Union[torch.Tensor, Sequence[float]]) -> None:
        """
        Overwrite the parameters of the layer and its circuit.

        Raises
        ------
        ValueError
            If new_params has the wrong shape.
        """
        values = as_cpu_float64(new_params)
        validate_params_shape(values, self.num_parameters)
        dispatch_to_diff(self._circuit, values)
        with torch.no_grad():
            self.params.copy_(values.to(device=self.params.device))


__all__ = ["CircuitExpectationLayer"]
