"""Tests for circuit block trees."""

import math

import pytest
import torch

from qshift.backend import product_state, zero_state
from qshift.blocks import (
    AddBlock,
    BlockKind,
    ChainBlock,
    ControlBlock,
    PrimitiveGate,
    RotationGate,
    ShiftGate,
    add,
    chain,
    cnot,
    combine,
    control,
    cphase,
    iter_postorder,
    iter_preorder,
    postwalk,
    put,
    rx,
    ry,
    rz,
    scale,
    shift,
)
from qshift.gates import standard as stdgates
from qshift.gates.standard import is_unitary


class TestKinds:
    """Every variant reports its closed kind tag."""

    def test_kinds(self):
        n = 2
        assert put(n, 0, "H").kind is BlockKind.PRIMITIVE
        assert rx(n, 0, 0.1).kind is BlockKind.ROTATION
        assert shift(n, 0, 0.1).kind is BlockKind.SHIFT
        assert cnot(n, 0, 1).kind is BlockKind.CONTROL
        assert chain(put(n, 0, "X")).kind is BlockKind.COMPOSITE
        assert add(put(n, 0, "Z")).kind is BlockKind.COMPOSITE
        assert scale(2.0, put(n, 0, "Z")).kind is BlockKind.COMPOSITE


class TestLeaves:
    """Tests for primitive, rotation and shift gates."""

    def test_primitive_matrix_on_qubit_one(self):
        mat = put(2, 1, "X").mat()
        expected = torch.kron(stdgates.X(), stdgates.I())
        assert torch.allclose(mat, expected)

    def test_primitive_width_checked(self):
        with pytest.raises(ValueError, match="acts on 2 qubit"):
            put(2, 0, "SWAP")
        with pytest.raises(ValueError, match="out of range"):
            put(2, 3, "X")

    def test_s_adjoint(self):
        s = put(1, 0, "S")
        product = s.mat() @ s.adjoint().mat()
        assert torch.allclose(product, torch.eye(2, dtype=torch.complex64))
        assert "†" in s.adjoint().label()

    def test_rotation_matrix_and_parameters(self):
        gate = ry(1, 0, 0.9)
        assert torch.allclose(gate.mat(torch.complex128), stdgates.RY(0.9, dtype=torch.complex128))
        assert gate.parameters() == (0.9,)
        assert gate.nparameters == 1
        assert gate.axis == "Y"

    def test_rotation_adjoint_negates(self):
        gate = rz(1, 0, 0.5)
        assert gate.adjoint().parameters() == (-0.5,)

    def test_shift_gate_matrix(self):
        gate = shift(1, 0, 0.3)
        assert torch.allclose(gate.mat(torch.complex128), stdgates.P(0.3, dtype=torch.complex128))

    def test_bad_axis(self):
        with pytest.raises(ValueError, match="Rotation axis"):
            RotationGate(1, "Q", 0, 0.1)


class TestDispatch:
    """Tests for parameter dispatch and combinators."""

    def test_replace_add_subtract(self):
        gate = rx(1, 0, 1.0)
        gate.dispatch([0.25])
        assert gate.theta == 0.25
        gate.dispatch([0.5], "add")
        assert gate.theta == 0.75
        gate.dispatch([1.0], "subtract")
        assert gate.theta == -0.25

    def test_callable_combinator(self):
        gate = rx(1, 0, 2.0)
        gate.dispatch([3.0], lambda old, new: old * new)
        assert gate.theta == 6.0

    def test_wrong_count(self):
        with pytest.raises(ValueError, match="expects 1 parameter"):
            rx(1, 0, 0.0).dispatch([1.0, 2.0])

    def test_composite_dispatch_in_child_order(self):
        circ = chain(rx(2, 0, 0.0), put(2, 1, "H"), ry(2, 1, 0.0), cphase(2, 0, 1, 0.0))
        assert circ.nparameters == 3
        circ.dispatch([1.0, 2.0, 3.0])
        assert circ.parameters() == (1.0, 2.0, 3.0)
        with pytest.raises(ValueError):
            circ.dispatch([1.0])

    def test_unknown_combinator(self):
        with pytest.raises(ValueError, match="Unknown dispatch combinator"):
            combine("multiply")
        with pytest.raises(TypeError):
            combine(3)


class TestControl:
    """Tests for controlled blocks."""

    def test_cnot_matrix(self):
        mat = cnot(2, 0, 1).mat()
        # Columns are images of basis states; |q1 q0> = |01> -> |11>.
        assert mat[3, 1] == 1.0
        assert mat[1, 3] == 1.0
        assert mat[0, 0] == 1.0
        assert mat[2, 2] == 1.0

    def test_cphase_matrix(self):
        theta = 0.7
        mat = cphase(2, 0, 1, theta).mat(torch.complex128)
        expected = torch.diag(
            torch.tensor([1.0, 1.0, 1.0, complex(math.cos(theta), math.sin(theta))], dtype=torch.complex128)
        )
        assert torch.allclose(mat, expected)

    def test_control_config(self):
        blk = control(2, 0, put(2, 1, "X"), ctrl_config=(0,))
        out = blk.apply(zero_state(2))
        assert out[2] == 1.0

    def test_control_content_must_be_gate(self):
        with pytest.raises(TypeError, match="must be a gate"):
            ControlBlock(2, (0,), chain(put(2, 1, "X")))

    def test_control_overlap(self):
        with pytest.raises(ValueError, match="overlap"):
            control(2, 1, put(2, 1, "X"))

    def test_chsubblocks_keeps_config(self):
        blk = control(3, (0, 2), shift(3, 1, 0.2), ctrl_config=(1, 0))
        rebuilt = blk.chsubblocks((shift(3, 1, 0.9),))
        assert rebuilt.ctrl_qubits == (0, 2)
        assert rebuilt.ctrl_config == (1, 0)
        assert rebuilt.parameters() == (0.9,)


class TestComposite:
    """Tests for chains, sums and scaled blocks."""

    def test_chain_applies_in_order(self):
        circ = chain(put(1, 0, "H"), put(1, 0, "Z"), put(1, 0, "H"))
        # HZH = X
        assert torch.allclose(circ.mat(), stdgates.X(), atol=1e-6)

    def test_chain_adjoint(self):
        circ = chain(rx(2, 0, 0.3), cnot(2, 0, 1), ry(2, 1, 0.8), put(2, 0, "T"))
        product = circ.mat(torch.complex128) @ circ.adjoint().mat(torch.complex128)
        assert torch.allclose(product, torch.eye(4, dtype=torch.complex128), atol=1e-12)
        assert is_unitary(circ.mat())

    def test_add_and_scale(self):
        obs = add(put(1, 0, "Z"), scale(0.5, put(1, 0, "X")))
        expected = stdgates.Z() + 0.5 * stdgates.X()
        assert torch.allclose(obs.mat(), expected)

    def test_chain_requires_blocks(self):
        with pytest.raises(ValueError, match="at least one block"):
            chain()

    def test_width_mismatch(self):
        with pytest.raises(ValueError, match="acts on 1 qubits"):
            ChainBlock(2, [put(1, 0, "X")])
        with pytest.raises(ValueError):
            AddBlock(2, [])

    def test_mat_back_composite_raises(self):
        circ = chain(rx(1, 0, 0.1))
        with pytest.raises(NotImplementedError):
            circ.mat_back(torch.complex128, torch.zeros(2, 2, dtype=torch.complex128), [])

    def test_mat_back_parameter_free_is_noop(self):
        collector = []
        put(1, 0, "H").mat_back(torch.complex128, torch.zeros(2, 2, dtype=torch.complex128), collector)
        assert collector == []


class TestMatBack:
    """The back-propagation hook returns d(loss)/d(theta) for leaves."""

    @pytest.mark.parametrize(
        "make",
        [
            lambda t: RotationGate(2, "X", 1, t),
            lambda t: RotationGate(2, "Y", 0, t),
            lambda t: ShiftGate(2, 1, t),
            lambda t: cphase(2, 0, 1, t),
        ],
    )
    def test_matches_autograd(self, make):
        theta = 0.37
        weights = torch.randn(4, 4, dtype=torch.complex128)

        def loss_of(mat: torch.Tensor) -> torch.Tensor:
            return (weights * mat).real.sum() + (mat.abs() ** 2 * weights.real).sum()

        mat = make(theta).mat(torch.complex128).clone().requires_grad_(True)
        loss_of(mat).backward()
        collector = []
        make(theta).mat_back(torch.complex128, mat.grad, collector)

        eps = 1e-6
        numeric = (
            loss_of(make(theta + eps).mat(torch.complex128)) - loss_of(make(theta - eps).mat(torch.complex128))
        ) / (2 * eps)
        assert len(collector) == 1
        assert collector[0] == pytest.approx(float(numeric), abs=1e-6)


class TestWalks:
    """Tests for tree traversals and rendering."""

    def test_pre_and_post_order(self):
        a, b = rx(2, 0, 0.1), ry(2, 1, 0.2)
        inner = chain(a, b)
        root = chain(inner, put(2, 0, "H"))
        pre = list(iter_preorder(root))
        post = list(iter_postorder(root))
        assert pre[0] is root and pre[1] is inner and pre[2] is a
        assert post[-1] is root and post[0] is a and post[2] is inner

    def test_postwalk_visits_all(self):
        seen = []
        postwalk(seen.append, chain(rx(1, 0, 0.0), chain(put(1, 0, "X"))))
        assert len(seen) == 4

    def test_print_tree(self):
        text = chain(put(2, 0, "H"), cnot(2, 0, 1)).print_tree()
        lines = text.splitlines()
        assert lines[0].startswith("chain")
        assert lines[1].strip().startswith("H @ (0,)")
        assert lines[2].strip().startswith("control")
        assert lines[3].strip().startswith("X @ (1,)")


def test_primitive_apply_matches_mat():
    blk = PrimitiveGate(3, "SWAP", (0, 2))
    state = product_state(3, 1)
    out = blk.apply(state)
    assert out[4] == 1.0
    assert torch.allclose(blk.mat() @ state, out)
