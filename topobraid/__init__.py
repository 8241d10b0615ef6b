"""
topobraid: Bidirectional Gate ↔ Braid Compiler
==============================================

A compiler stack for topological quantum computation: qubits are stored
in the fusion space of anyons and gates are realized by braiding them.

Core Components:
    - anyons: fusion rules, R-symbols, F-matrices (Ising, Fibonacci, SU(2)_k)
    - gates / braids: the circuit and braid data models
    - exact: zero-error phase gates for Ising-type models
    - approximation: memoized nearest-braid-word search
    - transpiler: composite gates → elementary gates (fixed point)
    - gate_to_braid: GateSequence → CompilationResult
    - braid_to_gate: BraidWord → GateSequence
    - optimizer: peephole rewriting of gate lists

Example:
    >>> from topobraid import AnyonType, Gate, GateSequence, compile_gate_sequence
    >>>
    >>> circuit = GateSequence((Gate.h(0), Gate.cnot(0, 1)), num_qubits=2)
    >>> result = compile_gate_sequence(circuit, anyon_type=AnyonType.ISING)
    >>> print(result.unwrap().braid_count)
"""

from .errors import (
    ErrorCategory,
    TopologicalError,
    ValidationError,
    LogicError,
    ComputationError,
    ToleranceExceeded,
    ExactMappingUnavailable,
    Result,
)

from .anyons import (
    AnyonFamily,
    AnyonType,
    fuse,
    r_symbol,
    f_matrix,
    braiding_phase,
    generator_matrices,
    fundamental_phase,
    has_exact_phase_braids,
)

from .braids import (
    BraidGenerator,
    BraidWord,
    exact_strand_count,
    approximation_strand_count,
    entangling_braid,
)

from .gates import (
    CompilerConstants,
    GateKind,
    Gate,
    GateSequence,
    calculate_depth,
    count_t_gates,
    gate_matrix,
)

from .exact import ExactGateMapper, ExactMapping

from .approximation import (
    BraidOp,
    ApproximationResult,
    approximate_gate,
    build_base_set,
    unitary_distance,
)

from .transpiler import Transpiler, TranspileReport, transpile

from .gate_to_braid import (
    GateDecomposition,
    CompilationResult,
    GateToBraidCompiler,
    compile_gate_sequence,
    display_compilation_summary,
)

from .braid_to_gate import (
    TargetGateSet,
    CompilationOptions,
    BraidToGateCompiler,
    compile_to_gates,
    display_gate_sequence,
)

from .optimizer import (
    OptimizationStats,
    CircuitOptimizer,
    optimize,
    optimize_aggressive,
)

__version__ = "1.0.0"
__all__ = [
    # Errors
    "ErrorCategory",
    "TopologicalError",
    "ValidationError",
    "LogicError",
    "ComputationError",
    "ToleranceExceeded",
    "ExactMappingUnavailable",
    "Result",
    # Anyons
    "AnyonFamily",
    "AnyonType",
    "fuse",
    "r_symbol",
    "f_matrix",
    "braiding_phase",
    "generator_matrices",
    "fundamental_phase",
    "has_exact_phase_braids",
    # Braids
    "BraidGenerator",
    "BraidWord",
    "exact_strand_count",
    "approximation_strand_count",
    "entangling_braid",
    # Gates
    "CompilerConstants",
    "GateKind",
    "Gate",
    "GateSequence",
    "calculate_depth",
    "count_t_gates",
    "gate_matrix",
    # Exact mapping
    "ExactGateMapper",
    "ExactMapping",
    # Approximation
    "BraidOp",
    "ApproximationResult",
    "approximate_gate",
    "build_base_set",
    "unitary_distance",
    # Transpiler
    "Transpiler",
    "TranspileReport",
    "transpile",
    # Gate → braid
    "GateDecomposition",
    "CompilationResult",
    "GateToBraidCompiler",
    "compile_gate_sequence",
    "display_compilation_summary",
    # Braid → gate
    "TargetGateSet",
    "CompilationOptions",
    "BraidToGateCompiler",
    "compile_to_gates",
    "display_gate_sequence",
    # Optimizer
    "OptimizationStats",
    "CircuitOptimizer",
    "optimize",
    "optimize_aggressive",
]
