"""Base quantum module class."""

from __future__ import annotations

import torch
import torch.nn as nn

from .device import Device, resolve_device


class QuantumModule(nn.Module):
    """
    Base class for quantum layers, mirroring torch.nn.Module semantics.

    It records the register size and the simulation device; subclasses
    implement ``forward``.
    """

    def __init__(
        self,
        n_qubits: int,
        device: Device | str | torch.device | None = None,
    ) -> None:
        """
        Initialize a QuantumModule.

        Args:
            n_qubits: Number of qubits this module operates on. Must be >= 1.
            device: Device specification. Can be a Device instance, device name string
                ("sv_cpu", "sv_cuda"), torch.device, or None (defaults to "sv_cpu").

        Raises:
            ValueError: If n_qubits < 1.
        """
        super().__init__()
        if n_qubits < 1:
            raise ValueError(f"n_qubits must be >= 1, got {n_qubits}")

        self.n_qubits = n_qubits
        self.qdevice = resolve_device(device)

    @property
    def device(self) -> Device:
        """Return the quantum device associated with this module."""
        return self.qdevice

    def to(
        self,
        device: Device | str | torch.device | None = None,
        *args,
        **kwargs,
    ) -> QuantumModule:
        """
        Move the module to a specified device.

        Updates the simulation device and moves all parameters and buffers to
        the underlying PyTorch device. With ``device=None`` only ``args`` and
        ``kwargs`` are forwarded to ``nn.Module.to``.
        """
        if device is None:
            super().to(*args, **kwargs)
            return self

        self.qdevice = resolve_device(device)
        super().to(self.qdevice.as_torch_device(), *args, **kwargs)
        return self
