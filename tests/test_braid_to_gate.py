"""
Braid → Gate Compiler Tests
===========================

Generator mapping, phase accumulation, depth, target gate sets and the
gate → braid → gate round trip.
"""

import sys
import os
import cmath
import math
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from topobraid.anyons import AnyonType
from topobraid.braid_to_gate import (
    BraidToGateCompiler,
    CompilationOptions,
    TargetGateSet,
    accumulate_braiding_phase,
    compile_to_gates,
    decompose_rotation,
    display_gate,
    display_gate_sequence,
    display_statistics,
)
from topobraid.braids import BraidGenerator, BraidWord
from topobraid.errors import LogicError, ValidationError
from topobraid.gate_to_braid import compile_gate_sequence
from topobraid.gates import Gate, GateKind, GateSequence


def word(strands, *generators):
    return BraidWord(strands, generators)


class TestIsingMapping(unittest.TestCase):
    """σ_q → S(q), σ_q⁻¹ → S†(q)."""

    def test_literal_mapping(self):
        seq = compile_to_gates(word(2, BraidGenerator.sigma(0), BraidGenerator.sigma(0))).unwrap()
        self.assertEqual([g.kind for g in seq.gates], [GateKind.S, GateKind.S])
        self.assertEqual(seq.num_qubits, 1)

    def test_inverse(self):
        seq = compile_to_gates(word(3, BraidGenerator.sigma_inv(1))).unwrap()
        self.assertEqual(seq.gates, (Gate.sdg(1),))
        self.assertEqual(seq.num_qubits, 2)

    def test_optimized(self):
        options = CompilationOptions(optimization_level=1)
        seq = compile_to_gates(
            word(2, BraidGenerator.sigma(0), BraidGenerator.sigma(0)), options=options
        ).unwrap()
        self.assertEqual(seq.gates, (Gate.z(0),))

    def test_depth(self):
        parallel = compile_to_gates(word(4, BraidGenerator(0), BraidGenerator(2))).unwrap()
        self.assertEqual(parallel.depth, 1)
        serial = compile_to_gates(word(3, BraidGenerator(0), BraidGenerator(1), BraidGenerator(0))).unwrap()
        self.assertEqual(serial.depth, 2)


class TestPhase(unittest.TestCase):

    def test_empty_word_phase_is_one(self):
        seq = compile_to_gates(BraidWord.identity(3)).unwrap()
        self.assertEqual(seq.gates, ())
        self.assertEqual(seq.total_phase, 1 + 0j)
        self.assertEqual(seq.depth, 0)

    def test_ising_phase(self):
        seq = compile_to_gates(word(2, BraidGenerator(0), BraidGenerator(0))).unwrap()
        self.assertAlmostEqual(seq.total_phase, cmath.exp(-1j * math.pi / 4))

    def test_unit_modulus_long_word(self):
        gens = [BraidGenerator(i % 2, i % 3 != 0) for i in range(200)]
        for t in (AnyonType.ISING, AnyonType.FIBONACCI):
            phase = accumulate_braiding_phase(gens, t)
            self.assertAlmostEqual(abs(phase), 1.0, places=12)

    def test_inverse_pair_cancels(self):
        gens = [BraidGenerator.sigma(0), BraidGenerator.sigma_inv(0)]
        self.assertAlmostEqual(accumulate_braiding_phase(gens, AnyonType.FIBONACCI), 1.0)


class TestFibonacciMapping(unittest.TestCase):
    """σ_i → Rz(±4π/5) on qubit i // 2."""

    def test_rotation(self):
        seq = compile_to_gates(word(3, BraidGenerator.sigma(0)), AnyonType.FIBONACCI).unwrap()
        self.assertEqual(len(seq), 1)
        self.assertIs(seq.gates[0].kind, GateKind.RZ)
        self.assertAlmostEqual(seq.gates[0].angle, 4 * math.pi / 5)
        self.assertEqual(seq.num_qubits, 1)

    def test_qubit_layout(self):
        seq = compile_to_gates(word(5, BraidGenerator.sigma_inv(3)), AnyonType.FIBONACCI).unwrap()
        self.assertEqual(seq.gates[0].qubits, (1,))
        self.assertAlmostEqual(seq.gates[0].angle, -4 * math.pi / 5)
        self.assertEqual(seq.num_qubits, 2)

    def test_even_strand_count(self):
        seq = compile_to_gates(word(4, BraidGenerator(2)), AnyonType.FIBONACCI).unwrap()
        self.assertEqual(seq.gates[0].qubits, (1,))
        self.assertEqual(seq.num_qubits, 2)

    def test_clifford_plus_t_rejected(self):
        options = CompilationOptions(target_gate_set=TargetGateSet.CLIFFORD_PLUS_T)
        result = compile_to_gates(word(3, BraidGenerator(0)), AnyonType.FIBONACCI, options)
        self.assertFalse(result.is_ok)
        self.assertIsInstance(result.error, LogicError)

    def test_su2_level_one_fails(self):
        result = compile_to_gates(word(3, BraidGenerator(0)), AnyonType.su2(1))
        self.assertIsInstance(result.error, LogicError)

    def test_invalid_optimization_level(self):
        result = compile_to_gates(word(2), options=CompilationOptions(optimization_level=5))
        self.assertIsInstance(result.error, ValidationError)


class TestRotationLowering(unittest.TestCase):

    def test_quarter_turns(self):
        self.assertEqual(decompose_rotation(Gate.rz(0, math.pi / 4), 1e-10), [Gate.t(0)])
        self.assertEqual(decompose_rotation(Gate.rz(0, -math.pi / 2), 1e-10), [Gate.sdg(0)])
        self.assertEqual(decompose_rotation(Gate.p(1, math.pi), 1e-10), [Gate.z(1)])
        self.assertEqual(decompose_rotation(Gate.rz(0, 2 * math.pi), 1e-10), [])

    def test_off_grid(self):
        self.assertIsNone(decompose_rotation(Gate.rz(0, 0.3), 1e-10))
        self.assertIsNone(decompose_rotation(Gate.h(0), 1e-10))

    def test_clifford_plus_t_accepts_ising(self):
        options = CompilationOptions(target_gate_set=TargetGateSet.CLIFFORD_PLUS_T)
        result = compile_to_gates(word(2, BraidGenerator(0)), options=options)
        self.assertTrue(result.is_ok)


class TestRoundTrip(unittest.TestCase):

    def test_ising_round_trip(self):
        """S(0) Z(1) → braids → S(0) S(1) S(1), or S(0) Z(1) when optimized."""
        forward = compile_gate_sequence(GateSequence((Gate.s(0), Gate.z(1)), 2)).unwrap()
        braid = forward.compiled_braids[0]
        for w in forward.compiled_braids[1:]:
            braid = braid.compose(w)

        literal = compile_to_gates(braid).unwrap()
        self.assertEqual(literal.gates, (Gate.s(0), Gate.s(1), Gate.s(1)))

        optimized = compile_to_gates(braid, options=CompilationOptions(optimization_level=1)).unwrap()
        self.assertEqual(optimized.gates, (Gate.s(0), Gate.z(1)))

    def test_approximated_ising_word_reads_as_phases(self):
        """An approximated H sits on 3 strands and reads back as phase gates."""
        forward = compile_gate_sequence(GateSequence((Gate.h(0),), 1)).unwrap()
        braid = forward.compiled_braids[0]
        self.assertEqual(braid.strand_count, 3)

        back = compile_to_gates(braid).unwrap()
        self.assertEqual(back.num_qubits, 2)
        self.assertNotIn(GateKind.H, [g.kind for g in back.gates])
        self.assertTrue(all(g.kind in (GateKind.S, GateKind.SDG) for g in back.gates))

    def test_stats(self):
        compiler = BraidToGateCompiler(AnyonType.ISING, CompilationOptions(optimization_level=1))
        seq, stats = compiler.compile_with_stats(
            word(2, BraidGenerator.sigma(0), BraidGenerator.sigma_inv(0))
        )
        self.assertEqual(len(seq), 0)
        self.assertEqual(stats.original_gate_count, 2)
        self.assertEqual(stats.gates_removed, 2)


class TestDisplay(unittest.TestCase):

    def test_gate(self):
        self.assertEqual(display_gate(Gate.sdg(0)), "S†(q0)")
        self.assertEqual(display_gate(Gate.rz(1, 0.5)), "Rz(q1, 0.5000)")
        self.assertEqual(display_gate(Gate.cnot(0, 1)), "CNOT(q0, q1)")

    def test_sequence(self):
        seq = compile_to_gates(word(3, BraidGenerator(0), BraidGenerator(1))).unwrap()
        text = display_gate_sequence(seq)
        self.assertIn("2 gates", text)
        self.assertIn("Circuit depth: 1", text)
        self.assertIn("S: 2", display_statistics(seq))


if __name__ == "__main__":
    unittest.main(verbosity=2)
