"""
Approximation Search Tests
==========================

Distance, word matrices, memoized base sets and the nearest-word search.
"""

import sys
import os
import unittest

import numpy as np

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from topobraid.anyons import AnyonType, generator_matrices
from topobraid.approximation import (
    BraidOp,
    approximate_gate,
    build_base_set,
    operations_to_braid_word,
    unitary_distance,
    word_matrix,
)
from topobraid.errors import ValidationError
from topobraid.gates import Gate, gate_matrix


H = np.array([[1, 1], [1, -1]], dtype=complex) / np.sqrt(2)


class TestDistance(unittest.TestCase):

    def test_phase_insensitive(self):
        self.assertEqual(unitary_distance(np.eye(2), np.exp(0.3j) * np.eye(2)), 0.0)

    def test_orthogonal(self):
        X = np.array([[0, 1], [1, 0]], dtype=complex)
        self.assertAlmostEqual(unitary_distance(np.eye(2), X), 1.0)


class TestWords(unittest.TestCase):

    def test_inverse_ops(self):
        self.assertIs(BraidOp.SIGMA1.inverse, BraidOp.SIGMA1_INV)
        self.assertIs(BraidOp.SIGMA2_INV.inverse, BraidOp.SIGMA2)
        self.assertFalse(BraidOp.SIGMA2_INV.clockwise)

    def test_word_cancels(self):
        m = word_matrix([BraidOp.SIGMA1, BraidOp.SIGMA2, BraidOp.SIGMA2_INV, BraidOp.SIGMA1_INV],
                        AnyonType.FIBONACCI)
        np.testing.assert_allclose(m, np.eye(2), atol=1e-12)

    def test_left_to_right(self):
        """The word σ1 σ2 runs σ1 first."""
        s1, s2 = generator_matrices(AnyonType.FIBONACCI)
        m = word_matrix([BraidOp.SIGMA1, BraidOp.SIGMA2], AnyonType.FIBONACCI)
        np.testing.assert_allclose(m, s2 @ s1, atol=1e-12)

    def test_layout(self):
        word = operations_to_braid_word([BraidOp.SIGMA1, BraidOp.SIGMA2_INV], 1, 2)
        self.assertEqual(word.strand_count, 5)
        self.assertEqual([(g.index, g.clockwise) for g in word.generators],
                         [(2, True), (3, False)])

    def test_layout_single_qubit(self):
        word = operations_to_braid_word([BraidOp.SIGMA2], 0, 1)
        self.assertEqual(word.strand_count, 3)
        with self.assertRaises(ValidationError):
            operations_to_braid_word([BraidOp.SIGMA1], 1, 1)


class TestBaseSet(unittest.TestCase):

    def test_memoized(self):
        self.assertIs(build_base_set(AnyonType.FIBONACCI, 3),
                      build_base_set(AnyonType.FIBONACCI, 3))

    def test_monotone(self):
        """A longer base set never holds fewer unitaries."""
        sizes = [build_base_set(AnyonType.FIBONACCI, n).size for n in range(1, 6)]
        self.assertEqual(sizes, sorted(sizes))
        self.assertEqual(sizes[0], 4)

    def test_reduced_words(self):
        base = build_base_set(AnyonType.FIBONACCI, 5)
        for level in base.levels:
            self.assertLessEqual(len(level), 4 * 3 ** (level.length - 1))
            if level.length > 1:
                words = level.words.astype(int)
                self.assertFalse(np.any(words[:, 1:] == (words[:, :-1] ^ 1)))

    def test_ising_group_is_finite(self):
        """24 Cliffords times 16 phases bound the Ising braid image."""
        base = build_base_set(AnyonType.ISING, 10)
        self.assertLessEqual(base.size, 24 * 16)
        self.assertLess(base.size, build_base_set(AnyonType.FIBONACCI, 6).size)

    def test_length_limit(self):
        with self.assertRaises(ValidationError):
            build_base_set(AnyonType.FIBONACCI, 13)
        with self.assertRaises(ValidationError):
            build_base_set(AnyonType.FIBONACCI, 0)


class TestSearch(unittest.TestCase):

    def test_ising_hadamard_exact(self):
        result = approximate_gate(H, 1e-10, anyon_type=AnyonType.ISING)
        self.assertLess(result.error, 1e-10)
        self.assertLessEqual(result.length, 3)

    def test_ising_t_gate_floor(self):
        """T sits 1 - cos(π/8) away from the Clifford group."""
        result = approximate_gate(gate_matrix(Gate.t(0)), 1e-10, anyon_type=AnyonType.ISING)
        self.assertAlmostEqual(result.error, 1 - np.cos(np.pi / 8), places=6)

    def test_fibonacci_hadamard(self):
        result = approximate_gate(H, 1e-3, seed_length=4, max_length=8,
                                  anyon_type=AnyonType.FIBONACCI)
        self.assertLess(result.error, 0.05)
        self.assertAlmostEqual(
            unitary_distance(H, word_matrix(result.operations, AnyonType.FIBONACCI)),
            result.error,
        )

    def test_early_stop(self):
        s1, _ = generator_matrices(AnyonType.FIBONACCI)
        result = approximate_gate(s1, 1e-6, seed_length=1, max_length=5,
                                  anyon_type=AnyonType.FIBONACCI)
        self.assertEqual(result.operations, (BraidOp.SIGMA1,))
        self.assertEqual(result.searched_length, 1)
        self.assertEqual(result.error, 0.0)

    def test_deeper_never_worse(self):
        target = gate_matrix(Gate.ry(0, 0.7))
        short = approximate_gate(target, 0.0, 1, 4, AnyonType.FIBONACCI)
        deep = approximate_gate(target, 0.0, 1, 6, AnyonType.FIBONACCI)
        self.assertLessEqual(deep.error, short.error)
        self.assertEqual(deep.searched_length, 6)

    def test_invalid_arguments(self):
        with self.assertRaises(ValidationError):
            approximate_gate(np.eye(3), 0.1)
        with self.assertRaises(ValidationError):
            approximate_gate(H, 0.1, seed_length=6, max_length=4)
        with self.assertRaises(ValidationError):
            approximate_gate(H, 0.1, max_length=13)


if __name__ == "__main__":
    unittest.main(verbosity=2)
