"""Quantum Shift - parameter-shift differentiation for PyTorch statevector circuits."""

__version__ = "0.1.0"

# Backend operations
from .backend import (
    apply_controlled,
    apply_matrix,
    measure_probs,
    product_state,
    zero_state,
)

# Circuit blocks
from .blocks import (
    AbstractBlock,
    AddBlock,
    BlockKind,
    ChainBlock,
    ControlBlock,
    PrimitiveGate,
    RotationGate,
    ScaleBlock,
    ShiftGate,
    add,
    chain,
    cnot,
    control,
    cphase,
    postwalk,
    prewalk,
    put,
    rx,
    ry,
    rz,
    scale,
    shift,
)
from .core import Device, QuantumModule, default_device, device

# Diagnostics
from .diagnostics import (
    assert_hermitian,
    assert_normalized,
    debug_context,
    is_debug_enabled,
    is_hermitian,
    set_debug_enabled,
    state_norm,
)

# Parameter-shift differentiation
from .grad import (
    DEFAULT_SHIFT_RULE,
    Diff,
    ShiftRule,
    StatFunctional,
    Weights,
    as_weights,
    diff_blocks,
    dispatch_to_diff,
    generator,
    is_controlled_phase,
    markdiff,
    numdiff,
    numgrad,
    opdiff,
    opgrad,
    parameters_of_diff,
    shifted,
    statdiff,
    statgrad,
)

# Logging
from .logging import configure_logging, get_logger, set_log_level

# Observables
from .operators import PauliSum, PauliTerm, expect

# Sampling
from .sampling import outcomes_to_bits, sample_outcomes

__all__ = [
    "__version__",
    # Backend
    "zero_state",
    "product_state",
    "apply_matrix",
    "apply_controlled",
    "measure_probs",
    # Blocks
    "AbstractBlock",
    "BlockKind",
    "PrimitiveGate",
    "RotationGate",
    "ShiftGate",
    "ControlBlock",
    "ChainBlock",
    "AddBlock",
    "ScaleBlock",
    "put",
    "rx",
    "ry",
    "rz",
    "shift",
    "control",
    "cnot",
    "cphase",
    "chain",
    "add",
    "scale",
    "prewalk",
    "postwalk",
    # Core
    "Device",
    "QuantumModule",
    "device",
    "default_device",
    # Diagnostics
    "state_norm",
    "assert_normalized",
    "is_hermitian",
    "assert_hermitian",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
    # Differentiation
    "Diff",
    "markdiff",
    "generator",
    "is_controlled_phase",
    "diff_blocks",
    "parameters_of_diff",
    "dispatch_to_diff",
    "ShiftRule",
    "DEFAULT_SHIFT_RULE",
    "shifted",
    "numdiff",
    "opdiff",
    "statdiff",
    "opgrad",
    "statgrad",
    "numgrad",
    "StatFunctional",
    "Weights",
    "as_weights",
    # Logging
    "get_logger",
    "set_log_level",
    "configure_logging",
    # Observables
    "PauliTerm",
    "PauliSum",
    "expect",
    # Sampling
    "sample_outcomes",
    "outcomes_to_bits",
]
