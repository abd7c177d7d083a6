"""Circuit block trees."""

from .abstract import AbstractBlock, BlockKind
from .composite import AddBlock, ChainBlock, ControlBlock, ScaleBlock
from .constructors import (
    add,
    chain,
    cnot,
    control,
    cphase,
    put,
    rx,
    ry,
    rz,
    scale,
    shift,
)
from .dispatch import combine
from .primitive import GateBlock, ParametricGate, PrimitiveGate, RotationGate, ShiftGate, embed
from .walk import iter_postorder, iter_preorder, postwalk, prewalk

__all__ = [
    "AbstractBlock",
    "BlockKind",
    "GateBlock",
    "ParametricGate",
    "PrimitiveGate",
    "RotationGate",
    "ShiftGate",
    "ControlBlock",
    "ChainBlock",
    "AddBlock",
    "ScaleBlock",
    "embed",
    "combine",
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
    "iter_preorder",
    "iter_postorder",
    "prewalk",
    "postwalk",
]
