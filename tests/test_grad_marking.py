"""Tests for the Diff marker, the marking pass and generator derivation."""

from __future__ import annotations

import math

import pytest
import torch

from qshift.backend import zero_state
from qshift.blocks import (
    BlockKind,
    ControlBlock,
    PrimitiveGate,
    chain,
    cnot,
    control,
    cphase,
    put,
    rx,
    ry,
    rz,
    shift,
)
from qshift.grad import (
    DIFF_ANNOTATION,
    Diff,
    diff_blocks,
    generator,
    is_controlled_phase,
    markdiff,
)


class TestDiffMarker:
    """The marker is transparent and owns no parameters."""

    def test_delegation(self):
        gate = ry(2, 1, 0.4)
        node = Diff(gate)
        assert node.kind is BlockKind.TAG
        assert node.content is gate
        assert node.unwrap() is gate
        assert node.n_qubits == 2
        assert node.parameters() == (0.4,)
        assert node.nparameters == 1
        assert torch.equal(node.mat(torch.complex128), gate.mat(torch.complex128))
        state = zero_state(2)
        assert torch.equal(node.apply(state), gate.apply(state))

    def test_dispatch_reaches_content(self):
        gate = rx(1, 0, 0.0)
        node = Diff(gate)
        node.dispatch([1.5])
        assert gate.theta == 1.5
        node.dispatch([0.5], "add")
        assert gate.theta == 2.0

    def test_no_stacking(self):
        with pytest.raises(TypeError, match="cannot be stacked"):
            Diff(Diff(rx(1, 0, 0.1)))

    def test_no_marker_inside_content(self):
        """A marker nested anywhere below the content would be counted twice."""
        with pytest.raises(TypeError, match="cannot be stacked"):
            Diff(chain(Diff(rx(1, 0, 0.5))))
        with pytest.raises(TypeError, match="cannot be stacked"):
            Diff(chain(ry(1, 0, 0.1), chain(Diff(rz(1, 0, 0.2)))))

    def test_plain_control_rejected(self):
        with pytest.raises(TypeError, match="controlled phase"):
            Diff(cnot(2, 0, 1))
        with pytest.raises(TypeError):
            Diff(control(2, 0, rx(2, 1, 0.2)))

    def test_controlled_phase_allowed(self):
        node = Diff(cphase(2, 0, 1, 0.3))
        assert node.parameters() == (0.3,)

    def test_adjoint_stays_marked(self):
        node = Diff(rz(1, 0, 0.8))
        adj = node.adjoint()
        assert isinstance(adj, Diff)
        assert adj.parameters() == (-0.8,)

    def test_rewrap_and_chsubblocks(self):
        node = Diff(rx(1, 0, 0.1))
        replacement = rx(1, 0, 0.9)
        for rebuilt in (node.rewrap(replacement), node.chsubblocks((replacement,))):
            assert isinstance(rebuilt, Diff)
            assert rebuilt is not node
            assert rebuilt.content is replacement

    def test_mat_back_forwards(self):
        gate = rx(1, 0, 0.3)
        adjm = torch.ones(2, 2, dtype=torch.complex128)
        direct, via_marker = [], []
        gate.mat_back(torch.complex128, adjm, direct)
        Diff(gate).mat_back(torch.complex128, adjm, via_marker)
        assert via_marker == direct

    def test_rendering(self):
        node = Diff(rx(1, 0, 0.25))
        assert node.label() == DIFF_ANNOTATION + "RX(0.25) @ 0"
        text = chain(node).print_tree()
        assert "  [∂] RX(0.25) @ 0" in text.splitlines()


class TestMarkdiff:
    """Tests for the tree-marking pass."""

    def test_marks_rotations_and_controlled_phase(self):
        n = 2
        circuit = chain(put(n, 0, "H"), rx(n, 0, 0.1), cnot(n, 0, 1), cphase(n, 0, 1, 0.2), shift(n, 1, 0.3))
        marked = markdiff(circuit)
        nodes = diff_blocks(marked)
        assert len(nodes) == 2
        assert nodes[0].content.kind is BlockKind.ROTATION
        assert is_controlled_phase(nodes[1].content)

    def test_bare_shift_not_marked(self):
        circuit = chain(shift(1, 0, 0.3))
        marked = markdiff(circuit)
        assert diff_blocks(marked) == []
        assert marked[0].kind is BlockKind.SHIFT

    def test_control_escape(self):
        """Generic control blocks are returned as-is, content included."""
        ctrl_rot = control(2, 0, rx(2, 1, 0.3))
        assert markdiff(ctrl_rot) is ctrl_rot
        marked = markdiff(chain(ctrl_rot, ry(2, 0, 0.1)))
        assert marked[0] is ctrl_rot
        assert marked[0].content.kind is BlockKind.ROTATION
        assert len(diff_blocks(marked)) == 1

    def test_root_rotation_is_wrapped(self):
        marked = markdiff(ry(1, 0, 0.2))
        assert isinstance(marked, Diff)

    def test_leaf_without_children_unchanged(self):
        gate = put(1, 0, "X")
        assert markdiff(gate) is gate

    def test_idempotent(self, two_qubit_circuit):
        once = markdiff(two_qubit_circuit)
        twice = markdiff(once)
        assert twice.print_tree() == once.print_tree()
        assert [id(b) for b in diff_blocks(twice)] == [id(b) for b in diff_blocks(once)]

    def test_marked_tree_shares_gates(self, two_qubit_circuit):
        """Marking wraps the existing gate objects; parameters stay shared."""
        marked = markdiff(two_qubit_circuit)
        node = diff_blocks(marked)[0]
        node.dispatch([2.0])
        assert two_qubit_circuit.parameters()[0] == 2.0

    def test_marking_preserves_semantics(self, two_qubit_circuit):
        before = two_qubit_circuit.mat(torch.complex128)
        after = markdiff(two_qubit_circuit).mat(torch.complex128)
        assert torch.allclose(before, after)

    def test_nested_chains(self):
        inner = chain(rx(2, 0, 0.1), ry(2, 1, 0.2))
        marked = markdiff(chain(inner, chain(inner, rz(2, 0, 0.3))))
        assert len(diff_blocks(marked)) == 5


class TestGenerator:
    """Tests for generator derivation."""

    @pytest.mark.parametrize("axis", ["X", "Y", "Z"])
    def test_rotation_generator(self, axis):
        gate = ry(3, 2, 0.1) if axis == "Y" else (rx(3, 2, 0.1) if axis == "X" else rz(3, 2, 0.1))
        gen = generator(gate)
        assert isinstance(gen, PrimitiveGate)
        assert gen.name == axis
        assert gen.qubits == (2,)

    def test_generator_through_marker(self):
        gen = generator(Diff(rx(2, 1, 0.5)))
        assert gen.name == "X"
        assert gen.qubits == (1,)

    def test_controlled_phase_generator(self):
        blk = ControlBlock(3, (0, 2), shift(3, 1, 0.4), ctrl_config=(1, 0))
        gen = generator(blk)
        assert isinstance(gen, ControlBlock)
        assert gen.ctrl_qubits == (0, 2)
        assert gen.ctrl_config == (1, 0)
        assert gen.content.name == "Z"
        assert gen.qubits == (1,)

    def test_rotation_is_exponential_of_generator(self):
        theta = 0.73
        gate = ry(2, 0, theta)
        gen = generator(gate).mat(torch.complex128)
        expected = torch.linalg.matrix_exp(-0.5j * theta * gen)
        assert torch.allclose(gate.mat(torch.complex128), expected, atol=1e-12)

    @pytest.mark.parametrize("block", [put(1, 0, "H"), shift(1, 0, 0.1), cnot(2, 0, 1)])
    def test_unsupported(self, block):
        with pytest.raises(TypeError, match="No generator"):
            generator(block)


def test_is_controlled_phase():
    assert is_controlled_phase(cphase(2, 0, 1, math.pi))
    assert not is_controlled_phase(cnot(2, 0, 1))
    assert not is_controlled_phase(shift(1, 0, 0.1))
