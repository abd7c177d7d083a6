"""Core device abstractions and the module base class."""

from .device import Device, default_device, device, resolve_device
from .module import QuantumModule

__all__ = ["Device", "device", "default_device", "resolve_device", "QuantumModule"]
