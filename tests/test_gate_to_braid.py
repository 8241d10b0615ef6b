"""
Gate → Braid Compiler Tests
===========================

Exact Ising compilation, approximated Fibonacci compilation, directives,
transpiled composites and the Result boundary.
"""

import sys
import os
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from topobraid.anyons import AnyonType
from topobraid.braids import BraidGenerator
from topobraid.errors import (
    ErrorCategory,
    LogicError,
    ToleranceExceeded,
    ValidationError,
)
from topobraid.gate_to_braid import (
    GateToBraidCompiler,
    compile_gate_sequence,
    display_compilation_summary,
    display_gate_decomposition,
)
from topobraid.gates import Gate, GateKind, GateSequence


ALL_TYPES = (AnyonType.ISING, AnyonType.FIBONACCI, AnyonType.su2(3))


class TestDispatch(unittest.TestCase):

    def test_handlers_cover_every_kind(self):
        for t in ALL_TYPES:
            compiler = GateToBraidCompiler(t, tolerance=0.5)
            self.assertEqual(set(compiler._handlers), set(GateKind))

    def test_invalid_tolerance(self):
        with self.assertRaises(ValidationError):
            GateToBraidCompiler(tolerance=-1.0)
        result = compile_gate_sequence(GateSequence((Gate.s(0),), 1), tolerance=float("nan"))
        self.assertFalse(result.is_ok)
        self.assertIsInstance(result.error, ValidationError)

    def test_gate_outside_register(self):
        with self.assertRaises(ValidationError):
            GateToBraidCompiler().compile_gate(Gate.s(2), 2)


class TestDirectives(unittest.TestCase):
    """Measure and Barrier carry no braid under any model."""

    def test_empty_word_zero_error(self):
        for t in ALL_TYPES:
            compiler = GateToBraidCompiler(t, tolerance=0.5)
            for gate in (Gate.measure(0), Gate.barrier([0, 1])):
                d = compiler.compile_gate(gate, 2)
                self.assertEqual(d.approximation_error, 0.0)
                self.assertEqual(len(d.braid_sequence), 1)
                self.assertTrue(d.braid_sequence[0].is_identity)
                self.assertIsNotNone(d.notes)

    def test_empty_sequence(self):
        for t in ALL_TYPES:
            result = compile_gate_sequence(GateSequence((), 0), anyon_type=t).unwrap()
            self.assertEqual(result.compiled_braids, ())
            self.assertEqual(result.original_gate_count, 0)
            self.assertEqual(result.total_error, 0.0)
            self.assertTrue(result.is_exact)


class TestIsing(unittest.TestCase):
    """Clifford circuits compile exactly."""

    def test_s_gate(self):
        result = compile_gate_sequence(GateSequence((Gate.s(0),), 1)).unwrap()
        self.assertTrue(result.is_exact)
        self.assertEqual(result.compiled_braids[0].generators, (BraidGenerator.sigma(0),))
        self.assertEqual(result.compiled_braids[0].strand_count, 2)

    def test_z_and_sdg(self):
        result = compile_gate_sequence(GateSequence((Gate.z(0), Gate.sdg(1)), 2)).unwrap()
        self.assertEqual(len(result.compiled_braids[0]), 2)
        self.assertEqual(result.compiled_braids[1].generators, (BraidGenerator.sigma_inv(1),))
        self.assertEqual(result.total_error, 0.0)

    def test_cnot_exact(self):
        result = compile_gate_sequence(GateSequence((Gate.h(0), Gate.cnot(0, 1)), 2)).unwrap()
        self.assertTrue(result.is_exact)
        self.assertEqual(len(result.decompositions[1].braid_sequence), 7)
        self.assertEqual(result.num_qubits, 2)

    def test_t_exceeds_default_tolerance(self):
        result = compile_gate_sequence(GateSequence((Gate.t(0),), 1))
        self.assertFalse(result.is_ok)
        self.assertIsInstance(result.error, ToleranceExceeded)
        self.assertEqual(result.error.category, ErrorCategory.COMPUTATION)

    def test_t_within_loose_tolerance(self):
        result = compile_gate_sequence(GateSequence((Gate.t(0),), 1), tolerance=0.1).unwrap()
        self.assertFalse(result.is_exact)
        self.assertAlmostEqual(result.total_error, 0.0761, places=3)
        self.assertEqual(len(result.warnings), 1)

    def test_toffoli(self):
        seq = GateSequence((Gate.ccx(0, 1, 2),), 3)
        result = compile_gate_sequence(seq, tolerance=0.1).unwrap()
        self.assertEqual(result.original_gate_count, 1)
        self.assertEqual(len(result.decompositions), 15)
        self.assertAlmostEqual(result.total_error, 7 * 0.0761, places=2)
        self.assertGreater(result.braid_count, len(seq))

    def test_multi_controlled_z_ancilla(self):
        seq = GateSequence((Gate.mcz([0, 1, 2], 3),), 4)
        result = compile_gate_sequence(seq, tolerance=0.1).unwrap()
        self.assertEqual(result.num_qubits, 5)
        self.assertTrue(any("ancilla" in w for w in result.warnings))
        self.assertGreater(result.braid_count, len(seq))

    def test_su2_level_two(self):
        result = compile_gate_sequence(
            GateSequence((Gate.s(0),), 1), anyon_type=AnyonType.su2(2)
        ).unwrap()
        self.assertTrue(result.is_exact)


class TestFibonacci(unittest.TestCase):
    """Every unitary gate is approximated."""

    def test_hadamard_t_measure(self):
        seq = GateSequence((Gate.h(0), Gate.t(0), Gate.measure(0)), 1)
        result = compile_gate_sequence(seq, tolerance=0.5, anyon_type=AnyonType.FIBONACCI).unwrap()
        self.assertEqual(len(result.decompositions), 3)
        self.assertFalse(result.is_exact)
        self.assertGreater(result.total_error, 0.0)
        self.assertEqual(result.decompositions[2].approximation_error, 0.0)
        self.assertEqual(len(result.warnings), 3)
        for d in result.decompositions[:2]:
            self.assertLessEqual(d.approximation_error, 0.5)
            self.assertEqual(d.braid_sequence[0].strand_count, 3)

    def test_toffoli(self):
        seq = GateSequence((Gate.ccx(0, 1, 2),), 3)
        result = compile_gate_sequence(seq, tolerance=0.5, anyon_type=AnyonType.FIBONACCI)
        self.assertTrue(result.is_ok)
        self.assertEqual(result.value.num_qubits, 3)
        self.assertGreater(result.value.braid_count, len(seq))

    def test_multi_controlled_z(self):
        seq = GateSequence((Gate.mcz([0, 1, 2], 3),), 4)
        result = compile_gate_sequence(
            seq, tolerance=0.5, anyon_type=AnyonType.FIBONACCI
        ).unwrap()
        self.assertEqual(result.num_qubits, 5)
        self.assertGreater(result.braid_count, len(seq))

    def test_controlled_phase_rejected(self):
        seq = GateSequence((Gate.cp(0, 1, 0.4),), 2)
        result = compile_gate_sequence(seq, tolerance=0.5, anyon_type=AnyonType.FIBONACCI)
        self.assertFalse(result.is_ok)
        self.assertIsInstance(result.error, LogicError)
        self.assertIn("transpiled", str(result.error))

    def test_controlled_phase_handler(self):
        compiler = GateToBraidCompiler(AnyonType.FIBONACCI, tolerance=0.5)
        with self.assertRaises(LogicError) as ctx:
            compiler.compile_gate(Gate.cp(0, 1, 0.4), 2)
        self.assertIn("not supported", str(ctx.exception))

    def test_untranspiled_composite(self):
        compiler = GateToBraidCompiler(AnyonType.FIBONACCI, tolerance=0.5)
        with self.assertRaises(LogicError):
            compiler.compile_gate(Gate.ccx(0, 1, 2), 3)


class TestFailures(unittest.TestCase):

    def test_reset(self):
        result = compile_gate_sequence(GateSequence((Gate.reset(0),), 1))
        self.assertFalse(result.is_ok)
        self.assertIsInstance(result.error, LogicError)
        self.assertTrue(result.error.is_user_error)

    def test_reset_handler(self):
        with self.assertRaises(LogicError):
            GateToBraidCompiler().compile_gate(Gate.reset(0), 1)

    def test_su2_level_one(self):
        result = compile_gate_sequence(
            GateSequence((Gate.h(0),), 1), tolerance=0.5, anyon_type=AnyonType.su2(1)
        )
        self.assertIsInstance(result.error, LogicError)


class TestDisplay(unittest.TestCase):

    def test_summary(self):
        result = compile_gate_sequence(GateSequence((Gate.s(0), Gate.measure(0)), 1)).unwrap()
        text = display_compilation_summary(result)
        self.assertIn("Ising", text)
        self.assertIn("Exact:           yes", text)
        self.assertIn("σ0", display_gate_decomposition(result.decompositions[0]))


if __name__ == "__main__":
    unittest.main(verbosity=2)
