"""
ApproximationSearch: Nearest Braid Word for a Target Unitary
============================================================

Brute-force Solovay-Kitaev style search over short braid words.

Key Concepts:
    - Alphabet {σ1, σ1⁻¹, σ2, σ2⁻¹}, matrices from the anyon algebra
    - Only reduced words are enumerated (no σ next to its own inverse),
      giving 4·3^(L-1) words of length L
    - Numerically identical matrices are kept once (shortest word wins)
    - Base sets are memoized per (anyon type, length), built once
      behind a lock and extended level by level
    - Distance d(U, V) = 1 - |Tr(U† V)| / 2 ignores global phase

Word convention: operations run left to right, so the word g1 g2 … gL
has unitary G_L ⋯ G_2 G_1.
"""

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .anyons import AnyonType, generator_matrices
from .braids import BraidGenerator, BraidWord, approximation_strand_count
from .errors import ValidationError
from .gates import CompilerConstants


logger = logging.getLogger(__name__)


# =============================================================================
# ALPHABET
# =============================================================================

class BraidOp(Enum):
    """Single-qubit braid operations. value ^ 1 is the inverse."""
    SIGMA1 = 0
    SIGMA1_INV = 1
    SIGMA2 = 2
    SIGMA2_INV = 3

    @property
    def inverse(self) -> "BraidOp":
        return BraidOp(self.value ^ 1)

    @property
    def clockwise(self) -> bool:
        return self in (BraidOp.SIGMA1, BraidOp.SIGMA2)

    def __str__(self) -> str:
        return {0: "σ1", 1: "σ1⁻¹", 2: "σ2", 3: "σ2⁻¹"}[self.value]


def alphabet_matrices(anyon_type: AnyonType) -> np.ndarray:
    """(4, 2, 2) stack of the alphabet's matrices, indexed by BraidOp value."""
    sigma1, sigma2 = generator_matrices(anyon_type)
    return np.stack([
        sigma1, sigma1.conj().T,
        sigma2, sigma2.conj().T,
    ])


def word_matrix(operations: Iterable[BraidOp], anyon_type: AnyonType) -> np.ndarray:
    """Unitary of a word (identity for the empty word)."""
    mats = alphabet_matrices(anyon_type)
    result = np.eye(2, dtype=complex)
    for op in operations:
        result = mats[op.value] @ result
    return result


# =============================================================================
# DISTANCE
# =============================================================================

def unitary_distance(u: np.ndarray, v: np.ndarray) -> float:
    """
    Phase-insensitive distance 1 - |Tr(u† v)| / 2.

    Clamped at 0; values under the numerical floor are exactly 0.
    """
    overlap = abs(np.trace(u.conj().T @ v)) / 2
    distance = max(0.0, 1.0 - float(overlap))
    if distance < CompilerConstants.NUMERICAL_FLOOR:
        return 0.0
    return distance


def _batch_distances(target: np.ndarray, mats: np.ndarray) -> np.ndarray:
    overlaps = np.abs(np.einsum("ij,nij->n", target.conj(), mats)) / 2
    distances = np.clip(1.0 - overlaps, 0.0, None)
    distances[distances < CompilerConstants.NUMERICAL_FLOOR] = 0.0
    return distances


# =============================================================================
# BASE SET
# =============================================================================

def _matrix_keys(mats: np.ndarray) -> List[bytes]:
    parts = np.stack([mats.real, mats.imag], axis=-1).reshape(len(mats), 8)
    rounded = np.round(parts, CompilerConstants.DEDUP_DECIMALS) + 0.0
    return [row.tobytes() for row in rounded]


@dataclass(frozen=True, eq=False)
class BaseLevel:
    """All kept words of one length. words: (n, L) op codes; matrices: (n, 2, 2)."""
    length: int
    words: np.ndarray
    matrices: np.ndarray

    def __len__(self) -> int:
        return len(self.words)


@dataclass(frozen=True, eq=False)
class BaseSet:
    """
    Deduplicated braid unitaries of lengths 1..max_length.

    Attributes:
        anyon_type: Theory the matrices come from
        levels: One BaseLevel per length, shortest first
        keys: Rounded matrix fingerprints already present
    """
    anyon_type: AnyonType
    levels: Tuple[BaseLevel, ...]
    keys: FrozenSet[bytes] = field(repr=False)

    @property
    def max_length(self) -> int:
        return len(self.levels)

    @property
    def size(self) -> int:
        return sum(len(level) for level in self.levels)

    def extended(self, alphabet: np.ndarray) -> "BaseSet":
        """This set plus every new unitary of length max_length + 1."""
        if not self.levels:
            words = np.arange(4, dtype=np.int8).reshape(4, 1)
            candidates = alphabet.copy()
        else:
            last = self.levels[-1]
            word_blocks, matrix_blocks = [], []
            for op in range(4):
                mask = last.words[:, -1] != (op ^ 1)
                if not mask.any():
                    continue
                prefix = last.words[mask]
                column = np.full((len(prefix), 1), op, dtype=np.int8)
                word_blocks.append(np.hstack([prefix, column]))
                matrix_blocks.append(np.matmul(alphabet[op], last.matrices[mask]))
            if word_blocks:
                words = np.vstack(word_blocks)
                candidates = np.concatenate(matrix_blocks)
            else:
                words = np.empty((0, self.max_length + 1), dtype=np.int8)
                candidates = np.empty((0, 2, 2), dtype=complex)

        seen = set(self.keys)
        keep = []
        for i, key in enumerate(_matrix_keys(candidates)):
            if key not in seen:
                seen.add(key)
                keep.append(i)

        level = BaseLevel(self.max_length + 1, words[keep], candidates[keep])
        return BaseSet(self.anyon_type, self.levels + (level,), frozenset(seen))


_BASE_SETS: Dict[Tuple[AnyonType, int], BaseSet] = {}
_CACHE_LOCK = threading.Lock()


def _check_length(name: str, length: int) -> None:
    if length < 1 or length > CompilerConstants.MAX_WORD_LENGTH_LIMIT:
        raise ValidationError(
            name,
            f"word length must be in 1..{CompilerConstants.MAX_WORD_LENGTH_LIMIT}, got {length}"
        )


def build_base_set(anyon_type: AnyonType, max_length: int) -> BaseSet:
    """
    Memoized base set of all reduced words up to max_length.

    The longest cached shorter set is extended, and every intermediate
    length is cached too. A larger max_length never yields fewer unitaries.
    """
    _check_length("max_length", max_length)
    key = (anyon_type, max_length)

    with _CACHE_LOCK:
        cached = _BASE_SETS.get(key)
        if cached is not None:
            return cached

        shorter = [length for (t, length) in _BASE_SETS if t == anyon_type and length < max_length]
        if shorter:
            base = _BASE_SETS[(anyon_type, max(shorter))]
        else:
            base = BaseSet(anyon_type, (), frozenset())

        alphabet = alphabet_matrices(anyon_type)
        while base.max_length < max_length:
            base = base.extended(alphabet)
            _BASE_SETS[(anyon_type, base.max_length)] = base

        logger.info(
            f"🧮 {anyon_type} base set ready: length {max_length}, {base.size} unitaries"
        )
        return base


# =============================================================================
# SEARCH
# =============================================================================

@dataclass(frozen=True)
class ApproximationResult:
    """
    Best braid word found for a target.

    Attributes:
        operations: The word (left to right)
        matrix: Its unitary
        error: unitary_distance(target, matrix)
        searched_length: Longest word length examined
    """
    operations: Tuple[BraidOp, ...]
    matrix: np.ndarray = field(repr=False)
    error: float
    searched_length: int

    @property
    def length(self) -> int:
        return len(self.operations)

    def __str__(self) -> str:
        word = " ".join(str(op) for op in self.operations)
        return f"{word} (error {self.error:.3e})"


def approximate_gate(target: np.ndarray,
                     tolerance: float,
                     seed_length: int = CompilerConstants.SEED_LENGTH,
                     max_length: int = CompilerConstants.MAX_WORD_LENGTH,
                     anyon_type: AnyonType = AnyonType.FIBONACCI) -> ApproximationResult:
    """
    Closest braid word to a 2×2 target.

    Word lengths up to seed_length are searched first; the search then
    deepens one length at a time and stops as soon as a candidate is
    within tolerance. Ties go to the shorter word. The best candidate is
    returned even when its error exceeds tolerance.

    Args:
        target: 2×2 unitary
        tolerance: Early-stop threshold on the distance
        seed_length: First search depth
        max_length: Deepest search depth
        anyon_type: Theory supplying σ1, σ2

    Returns:
        ApproximationResult
    """
    target = np.asarray(target, dtype=complex)
    if target.shape != (2, 2):
        raise ValidationError("target", f"expected a 2x2 matrix, got shape {target.shape}")
    _check_length("seed_length", seed_length)
    _check_length("max_length", max_length)
    if seed_length > max_length:
        raise ValidationError("seed_length", f"{seed_length} exceeds max_length {max_length}")

    best_error = np.inf
    best_word: Optional[np.ndarray] = None
    best_matrix: Optional[np.ndarray] = None
    examined = 0

    for length in range(seed_length, max_length + 1):
        base = build_base_set(anyon_type, length)
        for level in base.levels[examined:]:
            if not len(level):
                continue
            distances = _batch_distances(target, level.matrices)
            i = int(np.argmin(distances))
            if distances[i] < best_error - CompilerConstants.NUMERICAL_FLOOR:
                best_error = float(distances[i])
                best_word = level.words[i]
                best_matrix = level.matrices[i]
        examined = base.max_length
        if best_error <= tolerance:
            break

    if best_word is None:
        raise ValidationError("anyon_type", f"{anyon_type} produced no braid unitaries")

    operations = tuple(BraidOp(int(code)) for code in best_word)
    logger.debug(f"   approximation: {len(operations)} ops, error {best_error:.3e}")
    return ApproximationResult(operations, best_matrix.copy(), best_error, examined)


# =============================================================================
# LAYOUT
# =============================================================================

def operations_to_braid_word(operations: Sequence[BraidOp], qubit: int, num_qubits: int) -> BraidWord:
    """
    Place a single-qubit word on the two-generators-per-qubit layout:
    σ1 → index 2q, σ2 → index 2q+1.
    """
    if qubit < 0 or qubit >= max(1, num_qubits):
        raise ValidationError("qubit", f"qubit {qubit} outside 0..{num_qubits - 1}")
    generators = []
    for op in operations:
        index = 2 * qubit if op in (BraidOp.SIGMA1, BraidOp.SIGMA1_INV) else 2 * qubit + 1
        generators.append(BraidGenerator(index, op.clockwise))
    return BraidWord(approximation_strand_count(num_qubits), tuple(generators))
