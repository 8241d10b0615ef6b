"""
Braid Words: Generators and Programs on N Strands
=================================================

The braid group B_n is generated by σ_0 … σ_{n-2}, where σ_i exchanges
strands i and i+1.

Key Concepts:
    - σ_i (clockwise) and σ_i⁻¹ (counter-clockwise) are inverses
    - Far commutativity: σ_i σ_j = σ_j σ_i for |i-j| >= 2
    - A BraidWord is executed left to right

Strand layouts used by the compiler:
    - Exact (phase) braids: qubit q ↔ generator q on n+1 strands
    - Approximated braids: qubit q owns generators 2q (σ1) and 2q+1 (σ2)
      on max(3, 2n+1) strands
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from .errors import ValidationError


# =============================================================================
# GENERATOR
# =============================================================================

@dataclass(frozen=True)
class BraidGenerator:
    """
    One elementary crossing.

    Attributes:
        index: Left strand of the exchanged pair
        clockwise: True for σ_i, False for σ_i⁻¹
    """
    index: int
    clockwise: bool = True

    def __post_init__(self):
        if self.index < 0:
            raise ValidationError("index", f"generator index must be >= 0, got {self.index}")

    @classmethod
    def sigma(cls, index: int) -> "BraidGenerator":
        return cls(index, True)

    @classmethod
    def sigma_inv(cls, index: int) -> "BraidGenerator":
        return cls(index, False)

    def inverse(self) -> "BraidGenerator":
        return BraidGenerator(self.index, not self.clockwise)

    def commutes_with(self, other: "BraidGenerator") -> bool:
        return abs(self.index - other.index) >= 2

    def __str__(self) -> str:
        return f"σ{self.index}" if self.clockwise else f"σ{self.index}⁻¹"


# =============================================================================
# BRAID WORD
# =============================================================================

@dataclass(frozen=True)
class BraidWord:
    """
    An ordered braid program.

    Attributes:
        strand_count: Number of strands (>= 2)
        generators: Generators in execution order
    """
    strand_count: int
    generators: Tuple[BraidGenerator, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.strand_count < 2:
            raise ValidationError(
                "strand_count", f"a braid needs at least 2 strands, got {self.strand_count}"
            )
        object.__setattr__(self, "generators", tuple(self.generators))
        for gen in self.generators:
            if gen.index > self.strand_count - 2:
                raise ValidationError(
                    "generators",
                    f"{gen} is out of range for {self.strand_count} strands"
                )

    @classmethod
    def identity(cls, strand_count: int) -> "BraidWord":
        """The empty braid."""
        return cls(strand_count, ())

    @classmethod
    def from_generators(cls, strand_count: int,
                        generators: Iterable[BraidGenerator]) -> "BraidWord":
        return cls(strand_count, tuple(generators))

    def __len__(self) -> int:
        return len(self.generators)

    @property
    def is_identity(self) -> bool:
        return not self.generators

    def compose(self, other: "BraidWord") -> "BraidWord":
        """This braid followed by other (strand counts must match)."""
        if other.strand_count != self.strand_count:
            raise ValidationError(
                "strand_count",
                f"cannot compose braids on {self.strand_count} and {other.strand_count} strands"
            )
        return BraidWord(self.strand_count, self.generators + other.generators)

    def inverse(self) -> "BraidWord":
        return BraidWord(
            self.strand_count,
            tuple(gen.inverse() for gen in reversed(self.generators))
        )

    def simplify(self) -> "BraidWord":
        """Remove adjacent σ_i σ_i⁻¹ pairs (cascading)."""
        stack: List[BraidGenerator] = []
        for gen in self.generators:
            if stack and stack[-1] == gen.inverse():
                stack.pop()
            else:
                stack.append(gen)
        return BraidWord(self.strand_count, tuple(stack))

    def __str__(self) -> str:
        if not self.generators:
            return f"ε ({self.strand_count} strands)"
        word = " ".join(str(g) for g in self.generators)
        return f"{word} ({self.strand_count} strands)"


# =============================================================================
# STRAND LAYOUTS
# =============================================================================

def exact_strand_count(num_qubits: int) -> int:
    """Strands for the one-generator-per-qubit layout."""
    return max(2, num_qubits + 1)


def approximation_strand_count(num_qubits: int) -> int:
    """Strands for the two-generators-per-qubit layout."""
    return max(3, 2 * num_qubits + 1)


def entangling_braid(qubit_a: int, qubit_b: int, num_qubits: int) -> BraidWord:
    """
    Clockwise generator chain spanning two qubits on n+1 strands.

    Adjacent qubits need one crossing; distant qubits chain every
    generator between them.
    """
    if qubit_a == qubit_b:
        raise ValidationError("qubits", "entangling braid needs two different qubits")
    low, high = min(qubit_a, qubit_b), max(qubit_a, qubit_b)
    return BraidWord(
        exact_strand_count(num_qubits),
        tuple(BraidGenerator.sigma(q) for q in range(low, high))
    )
