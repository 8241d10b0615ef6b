"""
BraidToGateCompiler: Braid Words → Gate Sequences
=================================================

The reverse compiler: reads a braid program back as a gate circuit.

Generator mapping:
    Ising / SU(2)_2 (n+1 strands, qubit q = index)
        σ_q   → S(q)
        σ_q⁻¹ → S†(q)
    Fibonacci / SU(2)_k (2n+1 strands, qubit q = index // 2)
        σ_i   → Rz(q, +θ_R)
        σ_i⁻¹ → Rz(q, -θ_R)
        θ_R = arg of the clockwise braiding phase (4π/5 for Fibonacci)

Metrics:
    - depth: longest path of the qubit-dependency DAG
    - total phase: product of per-generator braiding phases, taken
      before optimization (empty word ⇒ exactly 1)
"""

import cmath
import logging
import math
from collections import Counter
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, List, Optional, Tuple

from .anyons import AnyonFamily, AnyonType, braiding_phase, has_exact_phase_braids, rotation_angle
from .braids import BraidGenerator, BraidWord
from .errors import LogicError, Result, TopologicalError
from .exact import ExactGateMapper, normalize_angle
from .gates import CLIFFORD, CompilerConstants, Gate, GateKind, GateSequence
from .optimizer import CircuitOptimizer, OptimizationStats


logger = logging.getLogger(__name__)


# =============================================================================
# OPTIONS
# =============================================================================

class TargetGateSet(Enum):
    """Gate vocabularies the reverse compiler can emit."""
    CLIFFORD_PLUS_T = auto()
    UNIVERSAL = auto()


CLIFFORD_PLUS_T_KINDS = frozenset(CLIFFORD | {GateKind.T, GateKind.TDG})


@dataclass(frozen=True)
class CompilationOptions:
    """
    Reverse compilation settings.

    Attributes:
        target_gate_set: Allowed output vocabulary
        optimization_level: CircuitOptimizer level (0 keeps the literal mapping)
        approximation_tolerance: Angle slack for recognizing π/4 multiples
        decompose_to_basic: Rewrite Rz by multiples of π/4 as Z/S/T gates
    """
    target_gate_set: TargetGateSet = TargetGateSet.UNIVERSAL
    optimization_level: int = 0
    approximation_tolerance: float = CompilerConstants.DEFAULT_TOLERANCE
    decompose_to_basic: bool = True


DEFAULT_OPTIONS = CompilationOptions()


# =============================================================================
# PHASES
# =============================================================================

def accumulate_braiding_phase(generators: Iterable[BraidGenerator],
                              anyon_type: AnyonType) -> complex:
    """
    Product of braiding phases, renormalized to unit modulus.

    The empty product is exactly 1+0j.
    """
    phase = 1 + 0j
    count = 0
    for gen in generators:
        phase *= braiding_phase(anyon_type, gen.clockwise)
        count += 1
    if count:
        phase /= abs(phase)
    return phase


# Rz(m·π/4) up to global phase, m = 0..7
_QUARTER_TURNS: Tuple[Tuple[GateKind, ...], ...] = (
    (),
    (GateKind.T,),
    (GateKind.S,),
    (GateKind.S, GateKind.T),
    (GateKind.Z,),
    (GateKind.Z, GateKind.T),
    (GateKind.SDG,),
    (GateKind.TDG,),
)


def decompose_rotation(gate: Gate, tolerance: float) -> Optional[List[Gate]]:
    """Z/S/T gates equal to an Rz or P gate, or None if the angle is off-grid."""
    if gate.kind not in (GateKind.RZ, GateKind.P):
        return None
    steps = normalize_angle(gate.angle) / (math.pi / 4)
    m = round(steps)
    if abs(steps - m) * (math.pi / 4) > tolerance:
        return None
    return [Gate(kind, gate.qubits) for kind in _QUARTER_TURNS[m % 8]]


# =============================================================================
# COMPILER
# =============================================================================

class BraidToGateCompiler:
    """
    Reads braid words as gate sequences.

    Ising and SU(2)_2 words are read on the exact phase layout: generator
    i acts on qubit i of an (n+1)-strand braid. Words the forward compiler
    approximated (H, X, Y, U3 and the like) sit on the 2n+1 layout with
    σ1 at 2q and σ2 at 2q+1, so they do not round-trip: an Ising H(0)
    word σ0 σ1 σ0 reads back as S(0) S(1) S(0) on two qubits. Only feed
    exact phase words back through this compiler.

    Args:
        anyon_type: Theory the braid was written for
        options: CompilationOptions
    """

    def __init__(self, anyon_type: AnyonType = AnyonType.ISING,
                 options: CompilationOptions = DEFAULT_OPTIONS):
        self.anyon_type = anyon_type
        self.options = options
        self.optimizer = CircuitOptimizer(options.optimization_level)
        self.phase_braids = has_exact_phase_braids(anyon_type)
        self.exact_mapper = ExactGateMapper(anyon_type)

    def num_qubits(self, word: BraidWord) -> int:
        """Register width implied by the word's strand count."""
        if self.phase_braids:
            return word.strand_count - 1
        if self.anyon_type.family in (AnyonFamily.FIBONACCI, AnyonFamily.SU2):
            return max(1, word.strand_count // 2)
        raise LogicError("braid to gate", f"no strand layout for {self.anyon_type}")

    def map_generator(self, gen: BraidGenerator) -> List[Gate]:
        """Gates for one generator, independent of its neighbours."""
        if self.phase_braids:
            return self.exact_mapper.map_generator_to_gates(gen)
        theta = rotation_angle(self.anyon_type)
        return [Gate.rz(gen.index // 2, theta if gen.clockwise else -theta)]

    def _lower_to_target(self, gates: List[Gate]) -> List[Gate]:
        out: List[Gate] = []
        for gate in gates:
            basic = None
            if self.options.decompose_to_basic:
                basic = decompose_rotation(gate, self.options.approximation_tolerance)
            out.extend(basic if basic is not None else [gate])

        if self.options.target_gate_set is TargetGateSet.CLIFFORD_PLUS_T:
            for gate in out:
                if gate.kind not in CLIFFORD_PLUS_T_KINDS:
                    raise LogicError(
                        "braid to gate",
                        f"{gate} is outside the Clifford+T gate set for {self.anyon_type} braids"
                    )
        return out

    def compile_with_stats(self, word: BraidWord) -> Tuple[GateSequence, OptimizationStats]:
        """
        Gate sequence for a braid word plus optimizer statistics.

        Raises:
            TopologicalError: Unsupported theory or target gate set violation
        """
        gates: List[Gate] = []
        for gen in word.generators:
            gates.extend(self.map_generator(gen))
        gates = self._lower_to_target(gates)

        optimized, stats = self.optimizer.optimize(gates)
        phase = accumulate_braiding_phase(word.generators, self.anyon_type)
        sequence = GateSequence(tuple(optimized), self.num_qubits(word), phase)
        logger.debug(
            f"   {len(word)} generator(s) → {len(sequence)} gate(s), depth {sequence.depth}"
        )
        return sequence, stats

    def compile(self, word: BraidWord) -> GateSequence:
        return self.compile_with_stats(word)[0]


def compile_to_gates(braid_word: BraidWord,
                     anyon_type: AnyonType = AnyonType.ISING,
                     options: CompilationOptions = DEFAULT_OPTIONS) -> Result[GateSequence]:
    """
    Compile a braid word to a gate sequence.

    Returns:
        Result holding the GateSequence, or the TopologicalError
    """
    try:
        return Result.ok(BraidToGateCompiler(anyon_type, options).compile(braid_word))
    except TopologicalError as exc:
        logger.warning(f"❌ Braid to gate compilation failed: {exc}")
        return Result.fail(exc)


# =============================================================================
# DISPLAY
# =============================================================================

_SYMBOLS = {GateKind.SDG: "S†", GateKind.TDG: "T†", GateKind.RZ: "Rz", GateKind.P: "Phase"}


def display_gate(gate: Gate) -> str:
    """Compact rendering, e.g. S†(q0) or Rz(q1, 2.5133)."""
    name = _SYMBOLS.get(gate.kind, gate.name)
    qubits = ", ".join(f"q{q}" for q in gate.qubits)
    if gate.params:
        params = ", ".join(f"{p:.4f}" for p in gate.params)
        return f"{name}({qubits}, {params})"
    return f"{name}({qubits})"


def display_gate_sequence(sequence: GateSequence) -> str:
    lines = [
        f"Gate Sequence ({len(sequence)} gates, {sequence.num_qubits} qubits)",
        "━" * 40,
        f"Circuit depth: {sequence.depth}",
        f"T-count: {sequence.t_count}",
        f"Total phase: {sequence.total_phase.real:.6f}{sequence.total_phase.imag:+.6f}i",
        "",
    ]
    lines.extend(f"  {i + 1}. {display_gate(g)}" for i, g in enumerate(sequence.gates))
    return "\n".join(lines)


def display_statistics(sequence: GateSequence) -> str:
    """Gate histogram plus depth, T-count and phase angle."""
    counts = Counter(g.name for g in sequence.gates)
    histogram = ", ".join(f"{name}: {n}" for name, n in sorted(counts.items())) or "none"
    angle = math.degrees(cmath.phase(sequence.total_phase))
    return "\n".join([
        "Gate Statistics",
        f"  Total gates: {len(sequence)}",
        f"  Gate types: {histogram}",
        f"  Depth: {sequence.depth}",
        f"  T-count: {sequence.t_count}",
        f"  Phase: {abs(sequence.total_phase):.6f}∠{angle:.2f}°",
    ])
