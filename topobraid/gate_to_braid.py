"""
GateToBraidCompiler: Gate Sequence → Braid Words
================================================

The forward compiler of the topobraid stack.

Pipeline:
    1. TRANSPILE: composite gates → elementary gates (fixed point)
    2. MAP: each elementary gate → braid word(s)
         - exact phase braid when the anyon model allows it (Ising)
         - otherwise nearest braid word from the approximation search
    3. AGGREGATE: total error, exactness, per-gate notes

Two-qubit support (every model): CNOT, CZ and SWAP, the latter two via
CNOT. CNOT = H(t) · S(c) S(t) · entangle(c,t) · S†(c) S†(t) · H(t).
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .anyons import AnyonType
from .approximation import approximate_gate, operations_to_braid_word
from .braids import BraidWord, entangling_braid, exact_strand_count
from .errors import (
    ExactMappingUnavailable,
    LogicError,
    Result,
    ToleranceExceeded,
    TopologicalError,
    ValidationError,
)
from .exact import ExactGateMapper
from .gates import (
    SINGLE_QUBIT_UNITARY,
    CompilerConstants,
    Gate,
    GateKind,
    GateSequence,
    gate_matrix,
)
from .transpiler import Transpiler


logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class GateDecomposition:
    """
    Braid realization of one gate.

    Attributes:
        name: Gate name
        qubits: Qubits the gate acts on
        braid_sequence: Braid words, executed in order
        approximation_error: Summed residual (0 means exact)
        notes: Human-readable remark, collected as a warning
    """
    name: str
    qubits: Tuple[int, ...]
    braid_sequence: Tuple[BraidWord, ...]
    approximation_error: float = 0.0
    notes: Optional[str] = None

    @property
    def is_exact(self) -> bool:
        return self.approximation_error == 0.0

    @property
    def braid_count(self) -> int:
        return sum(len(word) for word in self.braid_sequence)


@dataclass(frozen=True)
class CompilationResult:
    """
    A compiled circuit.

    Attributes:
        compiled_braids: Braid words in execution order
        original_gate_count: Gates before transpilation
        total_error: Sum of per-gate errors
        anyon_type: Theory compiled for
        warnings: Per-gate notes
        decompositions: Per-gate breakdown
        num_qubits: Register width after ancilla allocation
        is_exact: total_error == 0 (derived)
    """
    compiled_braids: Tuple[BraidWord, ...]
    original_gate_count: int
    total_error: float
    anyon_type: AnyonType
    warnings: Tuple[str, ...] = ()
    decompositions: Tuple[GateDecomposition, ...] = ()
    num_qubits: int = 0
    is_exact: bool = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "is_exact", self.total_error == 0.0)

    @property
    def braid_count(self) -> int:
        """Total elementary crossings."""
        return sum(len(word) for word in self.compiled_braids)


# =============================================================================
# COMPILER
# =============================================================================

class GateToBraidCompiler:
    """
    Compiles gates to braid words for one anyon model.

    Args:
        anyon_type: Target theory
        tolerance: Largest accepted per-gate error
        seed_length: First approximation search depth
        max_length: Deepest approximation search depth
        transpiler: Lowering stage (topological rules by default)
    """

    def __init__(self, anyon_type: AnyonType = AnyonType.ISING,
                 tolerance: float = CompilerConstants.DEFAULT_TOLERANCE,
                 seed_length: int = CompilerConstants.SEED_LENGTH,
                 max_length: int = CompilerConstants.MAX_WORD_LENGTH,
                 transpiler: Optional[Transpiler] = None):
        if math.isnan(tolerance) or tolerance < 0:
            raise ValidationError("tolerance", f"must be a non-negative number, got {tolerance}")
        self.anyon_type = anyon_type
        self.tolerance = tolerance
        self.seed_length = min(seed_length, max_length)
        self.max_length = max_length
        self.transpiler = transpiler or Transpiler()
        self.exact_mapper = ExactGateMapper(anyon_type)

        self._handlers: Dict[GateKind, Callable[[Gate, int], GateDecomposition]] = {
            GateKind.MEASURE: self._compile_directive,
            GateKind.BARRIER: self._compile_directive,
            GateKind.RESET: self._reject_reset,
            GateKind.CNOT: self._compile_cnot,
            GateKind.CZ: self._compile_cz,
            GateKind.SWAP: self._compile_swap,
            GateKind.CP: self._reject_unsupported,
            GateKind.CCX: self._reject_untranspiled,
            GateKind.MCZ: self._reject_untranspiled,
        }
        for kind in GateKind:
            if kind in SINGLE_QUBIT_UNITARY:
                self._handlers[kind] = self._compile_single

    # -------------------------------------------------------------------------
    # Per-gate compilation
    # -------------------------------------------------------------------------

    def compile_gate(self, gate: Gate, num_qubits: int) -> GateDecomposition:
        """
        Braid words for one gate on a num_qubits register.

        Raises:
            LogicError: Reset, or a gate outside the supported set
            ToleranceExceeded: Best braid is worse than the tolerance
            ValidationError: Gate does not fit the register
        """
        for q in gate.qubits:
            if q >= num_qubits:
                raise ValidationError("qubits", f"{gate} does not fit {num_qubits} qubit(s)")
        return self._handlers[gate.kind](gate, num_qubits)

    def _compile_directive(self, gate: Gate, num_qubits: int) -> GateDecomposition:
        if gate.kind is GateKind.MEASURE:
            note = f"Measure q{gate.qubit} is read out by fusion, no braiding"
        else:
            note = "Barrier is a scheduling directive, no braiding"
        return GateDecomposition(
            gate.name, gate.qubits, (BraidWord.identity(exact_strand_count(num_qubits)),), 0.0, note
        )

    def _reject_reset(self, gate: Gate, num_qubits: int) -> GateDecomposition:
        raise LogicError(gate.name, "Reset is non-unitary and cannot be realized by braiding")

    def _reject_unsupported(self, gate: Gate, num_qubits: int) -> GateDecomposition:
        raise LogicError(
            gate.name,
            f"two-qubit gate {gate.name} is not supported for {self.anyon_type} anyons "
            f"(supported: CNOT, CZ, SWAP)"
        )

    def _reject_untranspiled(self, gate: Gate, num_qubits: int) -> GateDecomposition:
        raise LogicError(
            gate.name, f"{gate.name} should have been transpiled before braid compilation"
        )

    def _compile_single(self, gate: Gate, num_qubits: int) -> GateDecomposition:
        if gate.kind is GateKind.I:
            return GateDecomposition(
                gate.name, gate.qubits, (BraidWord.identity(exact_strand_count(num_qubits)),)
            )

        try:
            mapping = self.exact_mapper.map_gate_to_braid(
                gate, gate.qubit, exact_strand_count(num_qubits), self.tolerance
            )
        except ExactMappingUnavailable as exc:
            logger.debug(f"   {exc.message}, searching braid words")
        else:
            notes = None
            if mapping.residual > 0.0:
                notes = (
                    f"{gate} rounded to {abs(mapping.braid_count)} braid(s), "
                    f"residual {mapping.residual:.3e}"
                )
            return GateDecomposition(
                gate.name, gate.qubits, (mapping.braid,), mapping.residual, notes
            )

        approx = approximate_gate(
            gate_matrix(gate), self.tolerance, self.seed_length, self.max_length, self.anyon_type
        )
        if approx.error > self.tolerance:
            raise ToleranceExceeded(f"{gate.name} braid approximation", approx.error, self.tolerance)

        word = operations_to_braid_word(approx.operations, gate.qubit, num_qubits)
        notes = (
            f"{gate} approximated by {len(word)} {self.anyon_type} braid(s), "
            f"error {approx.error:.3e}"
        )
        return GateDecomposition(gate.name, gate.qubits, (word,), approx.error, notes)

    def _compile_cnot(self, gate: Gate, num_qubits: int) -> GateDecomposition:
        c, t = gate.qubits
        parts = [
            self._compile_single(Gate.h(t), num_qubits),
            self._compile_single(Gate.s(c), num_qubits),
            self._compile_single(Gate.s(t), num_qubits),
            None,
            self._compile_single(Gate.sdg(c), num_qubits),
            self._compile_single(Gate.sdg(t), num_qubits),
            self._compile_single(Gate.h(t), num_qubits),
        ]
        braids: List[BraidWord] = []
        for part in parts:
            if part is None:
                braids.append(entangling_braid(c, t, num_qubits))
            else:
                braids.extend(part.braid_sequence)
        error = sum(part.approximation_error for part in parts if part is not None)
        return GateDecomposition(
            gate.name, gate.qubits, tuple(braids), error,
            f"CNOT q{c},q{t} = H · S S · entangle · S† S† · H ({self.anyon_type})"
        )

    def _compile_via_cnot(self, gate: Gate, pieces: List[Gate], num_qubits: int,
                          notes: str) -> GateDecomposition:
        parts = [self.compile_gate(piece, num_qubits) for piece in pieces]
        braids = tuple(word for part in parts for word in part.braid_sequence)
        error = sum(part.approximation_error for part in parts)
        return GateDecomposition(gate.name, gate.qubits, braids, error, notes)

    def _compile_cz(self, gate: Gate, num_qubits: int) -> GateDecomposition:
        c, t = gate.qubits
        return self._compile_via_cnot(
            gate, [Gate.h(t), Gate.cnot(c, t), Gate.h(t)], num_qubits,
            f"CZ q{c},q{t} = H · CNOT · H"
        )

    def _compile_swap(self, gate: Gate, num_qubits: int) -> GateDecomposition:
        a, b = gate.qubits
        return self._compile_via_cnot(
            gate, [Gate.cnot(a, b), Gate.cnot(b, a), Gate.cnot(a, b)], num_qubits,
            f"SWAP q{a},q{b} = CNOT · CNOT · CNOT"
        )

    # -------------------------------------------------------------------------
    # Sequence compilation
    # -------------------------------------------------------------------------

    def compile(self, sequence: GateSequence) -> CompilationResult:
        """
        Transpile and compile a whole circuit.

        Raises:
            TopologicalError: First failing stage or gate
        """
        logger.info(
            f"🧵 Compiling {len(sequence)} gate(s) for {self.anyon_type} anyons "
            f"(tolerance {self.tolerance:.1e})"
        )
        report = self.transpiler.transpile(sequence)
        width = report.sequence.num_qubits

        decompositions = tuple(self.compile_gate(g, width) for g in report.sequence.gates)
        braids = tuple(word for d in decompositions for word in d.braid_sequence)
        total_error = sum(d.approximation_error for d in decompositions)

        warnings = [d.notes for d in decompositions if d.notes]
        if report.ancilla_qubits:
            warnings.append(
                f"{report.ancilla_qubits} ancilla qubit(s) added for multi-controlled gates"
            )

        result = CompilationResult(
            compiled_braids=braids,
            original_gate_count=len(sequence),
            total_error=total_error,
            anyon_type=self.anyon_type,
            warnings=tuple(warnings),
            decompositions=decompositions,
            num_qubits=width,
        )
        logger.info(
            f"✅ {len(braids)} braid word(s), {result.braid_count} crossing(s), "
            f"total error {total_error:.3e}"
        )
        return result


def compile_gate_sequence(sequence: GateSequence,
                          tolerance: float = CompilerConstants.DEFAULT_TOLERANCE,
                          anyon_type: AnyonType = AnyonType.ISING,
                          **kwargs) -> Result[CompilationResult]:
    """
    Compile a gate sequence to braid words.

    Args:
        sequence: Circuit to compile
        tolerance: Largest accepted per-gate error
        anyon_type: Target theory
        **kwargs: seed_length, max_length or transpiler overrides

    Returns:
        Result holding a CompilationResult, or the TopologicalError
    """
    try:
        compiler = GateToBraidCompiler(anyon_type, tolerance, **kwargs)
        return Result.ok(compiler.compile(sequence))
    except TopologicalError as exc:
        logger.warning(f"❌ Compilation failed: {exc}")
        return Result.fail(exc)


# =============================================================================
# DISPLAY
# =============================================================================

def display_gate_decomposition(decomposition: GateDecomposition) -> str:
    """Multi-line rendering of one gate's braids."""
    qubits = ",".join(f"q{q}" for q in decomposition.qubits)
    status = "exact" if decomposition.is_exact else f"error {decomposition.approximation_error:.3e}"
    lines = [f"{decomposition.name} {qubits}: {decomposition.braid_count} crossing(s), {status}"]
    for word in decomposition.braid_sequence:
        lines.append(f"    {word}")
    if decomposition.notes:
        lines.append(f"    note: {decomposition.notes}")
    return "\n".join(lines)


def display_compilation_summary(result: CompilationResult) -> str:
    """Multi-line summary of a compilation."""
    lines = [
        "=" * 60,
        f"  {result.anyon_type} braid compilation",
        "=" * 60,
        f"Original gates:  {result.original_gate_count}",
        f"Braid words:     {len(result.compiled_braids)}",
        f"Crossings:       {result.braid_count}",
        f"Qubits:          {result.num_qubits}",
        f"Total error:     {result.total_error:.3e}",
        f"Exact:           {'yes' if result.is_exact else 'no'}",
    ]
    if result.warnings:
        lines.append(f"Warnings ({len(result.warnings)}):")
        lines.extend(f"  ⚠️  {w}" for w in result.warnings)
    return "\n".join(lines)
