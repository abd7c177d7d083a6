"""Pytest configuration and shared fixtures for Quantum Shift tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- Small circuits shared by the differentiation tests
"""

import math
import os

import numpy as np
import pytest
import torch

from qshift.blocks import chain, cnot, cphase, put, rx, ry, rz


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).

    Returns:
        A seeded numpy.random.Generator instance.
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic torch RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    Device is determined by default_device().
    """
    from qshift.core.device import default_device

    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    device = default_device().as_torch_device()
    generator = torch.Generator(device=device)
    generator.manual_seed(seed)
    return generator


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds(rng: np.random.Generator, torch_rng: torch.Generator) -> None:
    """Auto-use fixture to set global random seeds for reproducibility."""
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    np.random.seed(seed)
    torch.manual_seed(seed)
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(seed)


@pytest.fixture
def two_qubit_circuit():
    """Rotations around an entangler plus a controlled phase: five parameters."""
    n = 2
    return chain(
        put(n, 0, "H"),
        rx(n, 0, 0.3),
        ry(n, 1, -0.7),
        cnot(n, 0, 1),
        rz(n, 1, 1.1),
        cphase(n, 0, 1, 0.4),
        ry(n, 0, math.pi / 5),
    )
