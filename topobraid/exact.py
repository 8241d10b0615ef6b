"""
ExactGateMapper: Zero-Error Phase Gates as Braids
=================================================

When σ1 is diagonal and the braid image is the Clifford group (Ising),
one clockwise braid multiplies the |1⟩ amplitude by e^{iφ₀} relative to
|0⟩, with φ₀ = π/2. A diagonal gate with phase θ is therefore exact iff
θ = n·φ₀, realized by |n| braids on the qubit's strand pair (clockwise
for n > 0, counter-clockwise for n < 0).

    Z  (π)     → σ σ
    S  (π/2)   → σ
    S† (-π/2)  → σ⁻¹
    T  (π/4)   → no exact braid (approximation fallback)
    RZ/P(θ)    → nearest multiple of φ₀, residual reported as the error
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List

from .anyons import AnyonType, fundamental_phase, has_exact_phase_braids
from .braids import BraidGenerator, BraidWord
from .errors import ExactMappingUnavailable, ToleranceExceeded, ValidationError
from .gates import CompilerConstants, Gate, GateKind


logger = logging.getLogger(__name__)


# Fixed diagonal phases (relative phase of |1⟩) of the exactly mappable kinds
_FIXED_PHASES: Dict[GateKind, float] = {
    GateKind.I: 0.0,
    GateKind.Z: math.pi,
    GateKind.S: math.pi / 2,
    GateKind.SDG: -math.pi / 2,
    GateKind.T: math.pi / 4,
    GateKind.TDG: -math.pi / 4,
}

_CONTINUOUS = (GateKind.RZ, GateKind.P)


@dataclass(frozen=True)
class ExactMapping:
    """
    An exact (or rounded) braid for one gate.

    Attributes:
        braid: The braid word
        braid_count: Signed number of braids n (phase = n·φ₀)
        residual: |θ - n·φ₀| (0 for fixed gates)
    """
    braid: BraidWord
    braid_count: int
    residual: float


def normalize_angle(theta: float) -> float:
    """Map theta into (-π, π]."""
    wrapped = math.fmod(theta, 2 * math.pi)
    if wrapped <= -math.pi:
        wrapped += 2 * math.pi
    elif wrapped > math.pi:
        wrapped -= 2 * math.pi
    return wrapped


def nearest_multiple(theta: float, unit: float) -> int:
    """
    n such that theta - n·unit lies in (-unit/2, unit/2].
    """
    return math.ceil(theta / unit - 0.5)


class ExactGateMapper:
    """
    Exact translation between diagonal phase gates and single braids.

    Args:
        anyon_type: Theory; only models with exact phase braids map
    """

    def __init__(self, anyon_type: AnyonType):
        self.anyon_type = anyon_type
        self.exact = has_exact_phase_braids(anyon_type)
        self.unit = fundamental_phase(anyon_type) if self.exact else None

    def gate_phase(self, gate: Gate) -> float:
        """Relative |1⟩ phase of a diagonal gate, normalized into (-π, π]."""
        if gate.kind in _FIXED_PHASES:
            return _FIXED_PHASES[gate.kind]
        if gate.kind in _CONTINUOUS:
            return normalize_angle(gate.angle)
        raise ExactMappingUnavailable(gate.name, "gate is not diagonal")

    def map_gate_to_braid(self, gate: Gate, qubit: int, strand_count: int,
                          tolerance: float = CompilerConstants.DEFAULT_TOLERANCE) -> ExactMapping:
        """
        Braid for a diagonal gate on one qubit.

        Args:
            gate: Single-qubit gate
            qubit: Generator index (one generator per qubit)
            strand_count: Strands of the produced word
            tolerance: Largest accepted residual for RZ/P

        Returns:
            ExactMapping with |n| generators at index `qubit`

        Raises:
            ExactMappingUnavailable: Model or gate has no exact braid
            ToleranceExceeded: RZ/P residual above tolerance
            ValidationError: qubit outside the strand range
        """
        if not self.exact:
            raise ExactMappingUnavailable(
                gate.name, f"{self.anyon_type} braids are not diagonal phase gates"
            )
        if qubit < 0 or qubit > strand_count - 2:
            raise ValidationError(
                "qubit", f"qubit {qubit} has no strand pair among {strand_count} strands"
            )

        theta = self.gate_phase(gate)
        n = nearest_multiple(theta, self.unit)
        residual = abs(theta - n * self.unit)
        if residual < CompilerConstants.NUMERICAL_FLOOR:
            residual = 0.0

        if gate.kind in _CONTINUOUS:
            if residual > tolerance:
                raise ToleranceExceeded(f"{gate.name} exact mapping", residual, tolerance)
        elif residual > 0.0:
            raise ExactMappingUnavailable(
                gate.name,
                f"phase {theta:.4f} is not a multiple of {self.unit:.4f}"
            )

        generator = BraidGenerator(qubit, clockwise=n > 0)
        braid = BraidWord(strand_count, tuple(generator for _ in range(abs(n))))
        logger.debug(f"   {gate} → {len(braid)} braid(s), residual {residual:.2e}")
        return ExactMapping(braid, n, residual)

    def map_generator_to_gates(self, generator: BraidGenerator) -> List[Gate]:
        """
        Exact gate for one generator: σ_q → S(q), σ_q⁻¹ → S†(q).
        """
        if not self.exact:
            raise ExactMappingUnavailable(
                str(generator), f"{self.anyon_type} braids are not Clifford phase gates"
            )
        if generator.clockwise:
            return [Gate.s(generator.index)]
        return [Gate.sdg(generator.index)]
