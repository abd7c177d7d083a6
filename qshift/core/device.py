"""Device abstraction for statevector simulation."""

from __future__ import annotations

import torch


class Device:
    """
    A logical simulation device: a torch device plus default dtypes.

    Instances are treated as immutable once constructed.
    """

    def __init__(
        self,
        name: str,
        torch_device: torch.device,
        dtype: torch.dtype = torch.float32,
        complex_dtype: torch.dtype = torch.complex64,
    ) -> None:
        """
        Initialize a Device.

        Args:
            name: Logical device name ("sv_cpu" or "sv_cuda").
            torch_device: Underlying PyTorch device.
            dtype: Default real dtype.
            complex_dtype: Default complex dtype for states and gates.
        """
        self.name = name
        self.torch_device = torch_device
        self.dtype = dtype
        self.complex_dtype = complex_dtype

    def __repr__(self) -> str:
        return (
            f"Device(name={self.name!r}, torch_device={self.torch_device}, "
            f"complex_dtype={self.complex_dtype})"
        )

    def as_torch_device(self) -> torch.device:
        """Return the underlying PyTorch device."""
        return self.torch_device


_SUPPORTED = ("sv_cpu", "sv_cuda")


def device(name: str) -> Device:
    """
    Create a Device from its name.

    Args:
        name: "sv_cpu" or "sv_cuda".

    Returns:
        A Device instance.

    Raises:
        RuntimeError: If "sv_cuda" is requested but CUDA is unavailable.
        ValueError: If the name is not supported.
    """
    if name == "sv_cpu":
        return Device(name="sv_cpu", torch_device=torch.device("cpu"))
    if name == "sv_cuda":
        if not torch.cuda.is_available():
            raise RuntimeError(
                "CUDA device requested but torch.cuda.is_available() is False"
            )
        return Device(name="sv_cuda", torch_device=torch.device("cuda"))
    raise ValueError(
        f"Unsupported device name: {name!r}. Supported devices: {list(_SUPPORTED)}"
    )


def default_device() -> Device:
    """Return the CPU statevector device."""
    return device("sv_cpu")


def resolve_device(spec: Device | str | torch.device | None) -> Device:
    """
    Normalise any accepted device specification to a Device.

    Args:
        spec: A Device, a device name, a torch.device or None (default device).

    Returns:
        The resolved Device.

    Raises:
        ValueError: For unsupported torch.device types.
        TypeError: For any other kind of argument.
    """
    if spec is None:
        return default_device()
    if isinstance(spec, Device):
        return spec
    if isinstance(spec, str):
        return device(spec)
    if isinstance(spec, torch.device):
        if spec.type == "cpu":
            return device("sv_cpu")
        if spec.type == "cuda":
            return device("sv_cuda")
        raise ValueError(
            f"Unsupported torch.device type: {spec.type}. "
            "Only 'cpu' and 'cuda' are supported."
        )
    raise TypeError(
        f"device must be Device, str, torch.device, or None, got {type(spec)}"
    )
