"""
Anyon Algebra: Fusion, R-Symbols and F-Matrices
===============================================

The small slice of anyon theory the braid compiler consumes.

Key Concepts:
    - A qubit is stored in the fusion space of identical anyons
      (σ for Ising, τ for Fibonacci, spin-1/2 for SU(2)_k)
    - σ1 (braid of strands 0,1) is diagonal in the fusion basis:
      σ1 = diag(R[a,a;c] for each fusion channel c)
    - σ2 (braid of strands 1,2) is the F-conjugate: σ2 = F σ1 F
    - The relative phase of one clockwise braid is the model's
      fundamental phase (π/2 for Ising, so one braid = S)

Supported theories:
    Ising      {1, σ, ψ}     σ×σ = 1+ψ
    Fibonacci  {1, τ}        τ×τ = 1+τ
    SU(2)_k    {0, ½, …, k/2}  truncated Clebsch-Gordan rule
               SU(2)_2 behaves like Ising, SU(2)_3 like Fibonacci
"""

import cmath
from dataclasses import dataclass
from enum import Enum, auto
from fractions import Fraction
from functools import lru_cache
from typing import Dict, Tuple

import numpy as np

from .errors import LogicError, ValidationError


# =============================================================================
# ANYON CONSTANTS
# =============================================================================

PHI = (1 + np.sqrt(5)) / 2

# Ising (Majorana zero modes)
R_SIGMA_VACUUM = np.exp(-1j * np.pi / 8)
R_SIGMA_PSI = np.exp(3j * np.pi / 8)

# Fibonacci (Kauffman-Lomonaco convention)
R_TAU_VACUUM = np.exp(4j * np.pi / 5)
R_TAU_TAU = np.exp(-3j * np.pi / 5)


# =============================================================================
# ANYON TYPE
# =============================================================================

class AnyonFamily(Enum):
    """Closed set of anyon theories the compiler dispatches over."""
    ISING = auto()
    FIBONACCI = auto()
    SU2 = auto()


@dataclass(frozen=True)
class AnyonType:
    """
    An anyon theory. Hashable, so it doubles as a cache key.

    Attributes:
        family: Theory family
        level: Chern-Simons level k (SU2 only, 0 otherwise)
    """
    family: AnyonFamily
    level: int = 0

    def __post_init__(self):
        if self.family is AnyonFamily.SU2:
            if self.level < 1:
                raise ValidationError("level", f"SU(2)_k needs k >= 1, got {self.level}")
        elif self.level != 0:
            raise ValidationError("level", f"{self.family.name} takes no level")

    @classmethod
    def su2(cls, k: int) -> "AnyonType":
        """SU(2) at level k."""
        return cls(AnyonFamily.SU2, k)

    @property
    def name(self) -> str:
        if self.family is AnyonFamily.ISING:
            return "Ising"
        if self.family is AnyonFamily.FIBONACCI:
            return "Fibonacci"
        return f"SU(2)_{self.level}"

    def __str__(self) -> str:
        return self.name


AnyonType.ISING = AnyonType(AnyonFamily.ISING)
AnyonType.FIBONACCI = AnyonType(AnyonFamily.FIBONACCI)


# =============================================================================
# FUSION RULES
# =============================================================================

_ISING_FUSION: Dict[Tuple[str, str], Tuple[str, ...]] = {
    ("1", "1"): ("1",),
    ("1", "sigma"): ("sigma",),
    ("1", "psi"): ("psi",),
    ("sigma", "sigma"): ("1", "psi"),
    ("sigma", "psi"): ("sigma",),
    ("psi", "psi"): ("1",),
}

_FIBONACCI_FUSION: Dict[Tuple[str, str], Tuple[str, ...]] = {
    ("1", "1"): ("1",),
    ("1", "tau"): ("tau",),
    ("tau", "tau"): ("1", "tau"),
}


def _spin_label(j: Fraction) -> str:
    return str(j)


def vacuum(anyon_type: AnyonType) -> str:
    """Label of the trivial particle."""
    return "0" if anyon_type.family is AnyonFamily.SU2 else "1"


def particles(anyon_type: AnyonType) -> Tuple[str, ...]:
    """Particle labels of a theory (vacuum first)."""
    if anyon_type.family is AnyonFamily.ISING:
        return ("1", "sigma", "psi")
    if anyon_type.family is AnyonFamily.FIBONACCI:
        return ("1", "tau")
    k = anyon_type.level
    return tuple(_spin_label(Fraction(n, 2)) for n in range(k + 1))


def _check_particle(label: str, anyon_type: AnyonType) -> None:
    if label not in particles(anyon_type):
        raise ValidationError("particle", f"'{label}' is not a {anyon_type} anyon")


def fuse(a: str, b: str, anyon_type: AnyonType) -> Tuple[str, ...]:
    """
    Fusion outcomes of a × b.

    Args:
        a: First particle label
        b: Second particle label
        anyon_type: Theory

    Returns:
        Tuple of outcome labels, vacuum-most first
    """
    _check_particle(a, anyon_type)
    _check_particle(b, anyon_type)

    if anyon_type.family is AnyonFamily.SU2:
        j1, j2, k = Fraction(a), Fraction(b), anyon_type.level
        low = abs(j1 - j2)
        high = min(j1 + j2, k - j1 - j2)
        outcomes = []
        j = low
        while j <= high:
            outcomes.append(_spin_label(j))
            j += 1
        return tuple(outcomes)

    table = _ISING_FUSION if anyon_type.family is AnyonFamily.ISING else _FIBONACCI_FUSION
    key = (a, b) if (a, b) in table else (b, a)
    return table[key]


# =============================================================================
# R-SYMBOLS
# =============================================================================

def conformal_weight(label: str, anyon_type: AnyonType) -> float:
    """Topological spin h of a particle."""
    _check_particle(label, anyon_type)
    if anyon_type.family is AnyonFamily.ISING:
        return {"1": 0.0, "sigma": 1 / 16, "psi": 0.5}[label]
    if anyon_type.family is AnyonFamily.FIBONACCI:
        return {"1": 0.0, "tau": 0.4}[label]
    j = Fraction(label)
    return float(j * (j + 1) / (anyon_type.level + 2))


def r_symbol(a: str, b: str, c: str, anyon_type: AnyonType) -> complex:
    """
    Phase acquired by a clockwise exchange of a and b in channel c.

    Raises:
        LogicError: If c is not a fusion outcome of a × b
    """
    if c not in fuse(a, b, anyon_type):
        raise LogicError("R-symbol", f"{a} x {b} cannot fuse to {c} in {anyon_type}")

    if anyon_type.family is AnyonFamily.SU2:
        h = (conformal_weight(c, anyon_type)
             - conformal_weight(a, anyon_type)
             - conformal_weight(b, anyon_type))
        return complex(cmath.exp(1j * np.pi * h))

    if a == "1" or b == "1":
        return 1 + 0j

    if anyon_type.family is AnyonFamily.ISING:
        if a == b == "sigma":
            return complex(R_SIGMA_VACUUM if c == "1" else R_SIGMA_PSI)
        if a == b == "psi":
            return -1 + 0j
        return -1j

    return complex(R_TAU_VACUUM if c == "1" else R_TAU_TAU)


# =============================================================================
# QUBIT ENCODING
# =============================================================================

def qubit_anyon(anyon_type: AnyonType) -> str:
    """
    The anyon whose pairwise fusion space stores a qubit.

    Raises:
        LogicError: If the theory has a one-dimensional fusion space (SU(2)_1)
    """
    if anyon_type.family is AnyonFamily.ISING:
        return "sigma"
    if anyon_type.family is AnyonFamily.FIBONACCI:
        return "tau"
    if anyon_type.level < 2:
        raise LogicError(
            "qubit encoding",
            f"{anyon_type} spin-1/2 anyons have a single fusion channel and cannot encode a qubit"
        )
    return "1/2"


def quantum_dimension(anyon_type: AnyonType) -> float:
    """Quantum dimension d of the qubit anyon."""
    if anyon_type.family is AnyonFamily.ISING:
        return float(np.sqrt(2))
    if anyon_type.family is AnyonFamily.FIBONACCI:
        return float(PHI)
    return float(2 * np.cos(np.pi / (anyon_type.level + 2)))


def f_matrix(anyon_type: AnyonType) -> np.ndarray:
    """
    F-matrix for three qubit anyons fusing to the qubit anyon.

    All supported theories share the real, symmetric, self-inverse form
    [[1/d, s], [s, -1/d]] with s = sqrt(d² - 1)/d.
    """
    qubit_anyon(anyon_type)
    d = quantum_dimension(anyon_type)
    s = np.sqrt(d * d - 1) / d
    return np.array([[1 / d, s], [s, -1 / d]], dtype=complex)


def braiding_phase(anyon_type: AnyonType, clockwise: bool) -> complex:
    """
    Global phase of one elementary exchange (vacuum channel R-symbol).

    Clockwise returns R[a,a;1]; counter-clockwise returns its conjugate.
    """
    a = qubit_anyon(anyon_type)
    phase = r_symbol(a, a, vacuum(anyon_type), anyon_type)
    return phase if clockwise else phase.conjugate()


def rotation_angle(anyon_type: AnyonType) -> float:
    """Angle θ_R of the clockwise braiding phase (4π/5 for Fibonacci)."""
    return cmath.phase(braiding_phase(anyon_type, clockwise=True))


def fundamental_phase(anyon_type: AnyonType) -> float:
    """Relative phase between the two fusion channels for one clockwise braid."""
    a = qubit_anyon(anyon_type)
    vacuum, other = fuse(a, a, anyon_type)
    return cmath.phase(r_symbol(a, a, other, anyon_type) / r_symbol(a, a, vacuum, anyon_type))


def has_exact_phase_braids(anyon_type: AnyonType) -> bool:
    """
    True for theories whose braid image on a qubit is the Clifford group
    (Ising and SU(2)_2). Diagonal phase gates then map exactly onto
    repeated single-strand braids.
    """
    if anyon_type.family is AnyonFamily.ISING:
        return True
    if anyon_type.family is AnyonFamily.FIBONACCI:
        return False
    return anyon_type.level == 2


@lru_cache(maxsize=None)
def _generator_pair(anyon_type: AnyonType) -> Tuple[np.ndarray, np.ndarray]:
    a = qubit_anyon(anyon_type)
    channels = fuse(a, a, anyon_type)
    sigma1 = np.diag([r_symbol(a, a, c, anyon_type) for c in channels]).astype(complex)
    F = f_matrix(anyon_type)
    sigma2 = F @ sigma1 @ F
    sigma1.flags.writeable = False
    sigma2.flags.writeable = False
    return sigma1, sigma2


def generator_matrices(anyon_type: AnyonType) -> Tuple[np.ndarray, np.ndarray]:
    """
    Single-qubit matrices of the two elementary braids (σ1, σ2).

    Returned arrays are read-only and shared.
    """
    return _generator_pair(anyon_type)
