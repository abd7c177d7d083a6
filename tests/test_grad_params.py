"""Tests for collecting and dispatching marked parameters."""

from __future__ import annotations

import pytest
import torch

from qshift.blocks import chain, control, cphase, put, rx, ry, rz
from qshift.grad import (
    Diff,
    diff_blocks,
    dispatch_to_diff,
    markdiff,
    parameters_of_diff,
)


def test_collect_in_postwalk_order():
    n = 2
    circuit = markdiff(
        chain(
            chain(rx(n, 0, 1.0), ry(n, 1, 2.0)),
            cphase(n, 0, 1, 3.0),
            chain(chain(rz(n, 1, 4.0)), put(n, 0, "H")),
        )
    )
    assert parameters_of_diff(circuit) == [1.0, 2.0, 3.0, 4.0]


def test_unmarked_parameters_excluded():
    n = 2
    circuit = markdiff(chain(control(n, 0, rx(n, 1, 9.0)), ry(n, 0, 1.0)))
    assert parameters_of_diff(circuit) == [1.0]
    assert circuit.parameters() == (9.0, 1.0)


def test_round_trip_identity(two_qubit_circuit):
    circuit = markdiff(two_qubit_circuit)
    values = parameters_of_diff(circuit)
    dispatch_to_diff(circuit, values)
    assert parameters_of_diff(circuit) == values


def test_dispatch_then_collect(two_qubit_circuit):
    circuit = markdiff(two_qubit_circuit)
    new = [0.5, -1.0, 2.5, 0.125, 3.0]
    dispatch_to_diff(circuit, new)
    assert parameters_of_diff(circuit) == new


def test_dispatch_accepts_tensor(two_qubit_circuit):
    circuit = markdiff(two_qubit_circuit)
    dispatch_to_diff(circuit, torch.arange(5, dtype=torch.float64))
    assert parameters_of_diff(circuit) == [0.0, 1.0, 2.0, 3.0, 4.0]


def test_dispatch_combinators():
    circuit = markdiff(chain(rx(1, 0, 1.0), ry(1, 0, 2.0)))
    dispatch_to_diff(circuit, [0.5, 0.5], "add")
    assert parameters_of_diff(circuit) == [1.5, 2.5]
    dispatch_to_diff(circuit, [1.5, 0.5], "subtract")
    assert parameters_of_diff(circuit) == [0.0, 2.0]
    dispatch_to_diff(circuit, [3.0, 3.0], lambda old, new: old * new)
    assert parameters_of_diff(circuit) == [0.0, 6.0]


def test_length_mismatch_touches_nothing(two_qubit_circuit):
    circuit = markdiff(two_qubit_circuit)
    before = parameters_of_diff(circuit)
    with pytest.raises(ValueError, match="5 differentiable parameter"):
        dispatch_to_diff(circuit, [0.0] * 4)
    with pytest.raises(ValueError):
        dispatch_to_diff(circuit, [0.0] * 6)
    assert parameters_of_diff(circuit) == before


def test_diff_blocks_are_markers(two_qubit_circuit):
    nodes = diff_blocks(markdiff(two_qubit_circuit))
    assert len(nodes) == 5
    assert all(isinstance(node, Diff) for node in nodes)


def test_unmarked_circuit_is_empty():
    circuit = chain(rx(1, 0, 0.1))
    assert diff_blocks(circuit) == []
    assert parameters_of_diff(circuit) == []
    dispatch_to_diff(circuit, [])
