"""
Gate Model: The Circuit-Side Instruction Set
============================================

Gates are a closed tagged union: a GateKind plus qubits and parameters.
Every per-kind table in this module covers every GateKind, so dispatch
over gate kinds is exhaustive.

Key Concepts:
    - Elementary gates are what the braid compiler consumes directly
    - Composite gates (CZ, SWAP, CCX, MCZ, CP) are lowered by the Transpiler
    - Measure / Barrier carry no braid; Reset is non-unitary and rejected
    - GateSequence derives depth (qubit-dependency DAG) and T-count
"""

import cmath
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple

import numpy as np

from qiskit import QuantumCircuit, QuantumRegister, ClassicalRegister
from qiskit.circuit import Gate as QiskitGate
from qiskit.circuit.library import (
    IGate, HGate, XGate, YGate, ZGate,
    SGate, SdgGate, TGate, TdgGate,
    RXGate, RYGate, RZGate, PhaseGate, UGate,
    CXGate, CZGate, CPhaseGate, SwapGate, CCXGate,
)

from .errors import ValidationError


# =============================================================================
# COMPILER CONSTANTS
# =============================================================================

class CompilerConstants:
    """
    Numerical and search parameters shared by the compiler stages.

    Search cost grows as 4·3^(L-1) words for length L, so the hard
    word-length limit doubles as a memory bound.
    """

    # Tolerances
    DEFAULT_TOLERANCE: float = 1e-10
    NUMERICAL_FLOOR: float = 1e-12     # distances below this are exactly 0
    DEDUP_DECIMALS: int = 8            # base-set matrices equal to 1e-8
    PHASE_TOLERANCE: float = 1e-9      # unit-modulus check

    # Approximation search
    SEED_LENGTH: int = 4
    MAX_WORD_LENGTH: int = 10
    MAX_WORD_LENGTH_LIMIT: int = 12

    # Optimizer
    OPTIMIZER_MAX_ITERATIONS: int = 10
    TEMPLATE_MAX_ITERATIONS: int = 1000


# =============================================================================
# GATE KINDS
# =============================================================================

class GateKind(Enum):
    """
    Closed set of circuit operations.

        I, H, X, Y, Z, S, SDG, T, TDG: fixed single-qubit gates
        RX, RY, RZ, P, U3: parameterized single-qubit gates
        CNOT: the only elementary entangling gate
        CZ, CP, SWAP, CCX, MCZ: composite gates (transpiled first)
        MEASURE, BARRIER, RESET: non-unitary directives
    """
    I = auto()
    H = auto()
    X = auto()
    Y = auto()
    Z = auto()
    S = auto()
    SDG = auto()
    T = auto()
    TDG = auto()
    RX = auto()
    RY = auto()
    RZ = auto()
    P = auto()
    U3 = auto()
    CNOT = auto()
    CZ = auto()
    CP = auto()
    SWAP = auto()
    CCX = auto()
    MCZ = auto()
    MEASURE = auto()
    BARRIER = auto()
    RESET = auto()


# Fixed qubit count per kind (None = variable, at least one qubit)
GATE_ARITY: Dict[GateKind, Optional[int]] = {
    GateKind.I: 1, GateKind.H: 1, GateKind.X: 1, GateKind.Y: 1, GateKind.Z: 1,
    GateKind.S: 1, GateKind.SDG: 1, GateKind.T: 1, GateKind.TDG: 1,
    GateKind.RX: 1, GateKind.RY: 1, GateKind.RZ: 1, GateKind.P: 1, GateKind.U3: 1,
    GateKind.CNOT: 2, GateKind.CZ: 2, GateKind.CP: 2, GateKind.SWAP: 2,
    GateKind.CCX: 3, GateKind.MCZ: None,
    GateKind.MEASURE: 1, GateKind.BARRIER: None, GateKind.RESET: 1,
}

GATE_PARAMETERS: Dict[GateKind, int] = {
    kind: 0 for kind in GateKind
}
GATE_PARAMETERS.update({
    GateKind.RX: 1, GateKind.RY: 1, GateKind.RZ: 1, GateKind.P: 1,
    GateKind.CP: 1, GateKind.U3: 3,
})

GATE_NAMES: Dict[GateKind, str] = {kind: kind.name for kind in GateKind}
GATE_NAMES.update({
    GateKind.MEASURE: "Measure",
    GateKind.BARRIER: "Barrier",
    GateKind.RESET: "Reset",
})

SINGLE_QUBIT_UNITARY: FrozenSet[GateKind] = frozenset({
    GateKind.I, GateKind.H, GateKind.X, GateKind.Y, GateKind.Z,
    GateKind.S, GateKind.SDG, GateKind.T, GateKind.TDG,
    GateKind.RX, GateKind.RY, GateKind.RZ, GateKind.P, GateKind.U3,
})

ELEMENTARY: FrozenSet[GateKind] = SINGLE_QUBIT_UNITARY | {
    GateKind.CNOT, GateKind.MEASURE, GateKind.BARRIER,
}

COMPOSITE: FrozenSet[GateKind] = frozenset({
    GateKind.CZ, GateKind.CP, GateKind.SWAP, GateKind.CCX, GateKind.MCZ,
})

NON_UNITARY: FrozenSet[GateKind] = frozenset({
    GateKind.MEASURE, GateKind.BARRIER, GateKind.RESET,
})

CLIFFORD: FrozenSet[GateKind] = frozenset({
    GateKind.I, GateKind.H, GateKind.X, GateKind.Y, GateKind.Z,
    GateKind.S, GateKind.SDG, GateKind.CNOT, GateKind.CZ, GateKind.SWAP,
})

Z_AXIS: FrozenSet[GateKind] = frozenset({
    GateKind.Z, GateKind.S, GateKind.SDG, GateKind.T, GateKind.TDG,
    GateKind.RZ, GateKind.P,
})


# =============================================================================
# GATE
# =============================================================================

@dataclass(frozen=True)
class Gate:
    """
    A single circuit operation.

    Attributes:
        kind: The operation
        qubits: Qubit indices (for MCZ: controls then target)
        params: Angles in radians (RX/RY/RZ/P/CP: one, U3: θ, φ, λ)
    """
    kind: GateKind
    qubits: Tuple[int, ...]
    params: Tuple[float, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "qubits", tuple(int(q) for q in self.qubits))
        object.__setattr__(self, "params", tuple(float(p) for p in self.params))
        name = GATE_NAMES[self.kind]

        arity = GATE_ARITY[self.kind]
        if arity is None:
            if not self.qubits:
                raise ValidationError("qubits", f"{name} needs at least one qubit")
        elif len(self.qubits) != arity:
            raise ValidationError(
                "qubits", f"{name} acts on {arity} qubit(s), got {len(self.qubits)}"
            )

        if len(self.params) != GATE_PARAMETERS[self.kind]:
            raise ValidationError(
                "params",
                f"{name} takes {GATE_PARAMETERS[self.kind]} parameter(s), got {len(self.params)}"
            )

        for q in self.qubits:
            if q < 0:
                raise ValidationError("qubits", f"{name} has negative qubit index {q}")
        if len(set(self.qubits)) != len(self.qubits):
            raise ValidationError("qubits", f"{name} repeats a qubit: {self.qubits}")

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def i(cls, qubit: int) -> "Gate":
        return cls(GateKind.I, (qubit,))

    @classmethod
    def h(cls, qubit: int) -> "Gate":
        return cls(GateKind.H, (qubit,))

    @classmethod
    def x(cls, qubit: int) -> "Gate":
        return cls(GateKind.X, (qubit,))

    @classmethod
    def y(cls, qubit: int) -> "Gate":
        return cls(GateKind.Y, (qubit,))

    @classmethod
    def z(cls, qubit: int) -> "Gate":
        return cls(GateKind.Z, (qubit,))

    @classmethod
    def s(cls, qubit: int) -> "Gate":
        return cls(GateKind.S, (qubit,))

    @classmethod
    def sdg(cls, qubit: int) -> "Gate":
        return cls(GateKind.SDG, (qubit,))

    @classmethod
    def t(cls, qubit: int) -> "Gate":
        return cls(GateKind.T, (qubit,))

    @classmethod
    def tdg(cls, qubit: int) -> "Gate":
        return cls(GateKind.TDG, (qubit,))

    @classmethod
    def rx(cls, qubit: int, theta: float) -> "Gate":
        return cls(GateKind.RX, (qubit,), (theta,))

    @classmethod
    def ry(cls, qubit: int, theta: float) -> "Gate":
        return cls(GateKind.RY, (qubit,), (theta,))

    @classmethod
    def rz(cls, qubit: int, theta: float) -> "Gate":
        return cls(GateKind.RZ, (qubit,), (theta,))

    @classmethod
    def p(cls, qubit: int, theta: float) -> "Gate":
        return cls(GateKind.P, (qubit,), (theta,))

    @classmethod
    def u3(cls, qubit: int, theta: float, phi: float, lam: float) -> "Gate":
        return cls(GateKind.U3, (qubit,), (theta, phi, lam))

    @classmethod
    def cnot(cls, control: int, target: int) -> "Gate":
        return cls(GateKind.CNOT, (control, target))

    @classmethod
    def cz(cls, control: int, target: int) -> "Gate":
        return cls(GateKind.CZ, (control, target))

    @classmethod
    def cp(cls, control: int, target: int, theta: float) -> "Gate":
        return cls(GateKind.CP, (control, target), (theta,))

    @classmethod
    def swap(cls, qubit_a: int, qubit_b: int) -> "Gate":
        return cls(GateKind.SWAP, (qubit_a, qubit_b))

    @classmethod
    def ccx(cls, control1: int, control2: int, target: int) -> "Gate":
        return cls(GateKind.CCX, (control1, control2, target))

    @classmethod
    def mcz(cls, controls: Iterable[int], target: int) -> "Gate":
        return cls(GateKind.MCZ, tuple(controls) + (target,))

    @classmethod
    def measure(cls, qubit: int) -> "Gate":
        return cls(GateKind.MEASURE, (qubit,))

    @classmethod
    def barrier(cls, qubits: Iterable[int]) -> "Gate":
        return cls(GateKind.BARRIER, tuple(qubits))

    @classmethod
    def reset(cls, qubit: int) -> "Gate":
        return cls(GateKind.RESET, (qubit,))

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return GATE_NAMES[self.kind]

    @property
    def qubit(self) -> int:
        """First (or only) qubit."""
        return self.qubits[0]

    @property
    def angle(self) -> float:
        return self.params[0]

    @property
    def controls(self) -> Tuple[int, ...]:
        return self.qubits[:-1]

    @property
    def target(self) -> int:
        return self.qubits[-1]

    @property
    def is_single_qubit_unitary(self) -> bool:
        return self.kind in SINGLE_QUBIT_UNITARY

    @property
    def is_elementary(self) -> bool:
        return self.kind in ELEMENTARY

    @property
    def is_unitary(self) -> bool:
        return self.kind not in NON_UNITARY

    def __str__(self) -> str:
        qubits = ",".join(f"q{q}" for q in self.qubits)
        if self.params:
            params = ", ".join(f"{p:.4f}" for p in self.params)
            return f"{self.name}({params}) {qubits}"
        return f"{self.name} {qubits}"


# =============================================================================
# GATE QUERIES
# =============================================================================

def gate_name(gate: Gate) -> str:
    return gate.name


def affected_qubits(gate: Gate) -> Tuple[int, ...]:
    return gate.qubits


def is_clifford(gate: Gate) -> bool:
    return gate.kind in CLIFFORD


def is_t_gate(gate: Gate) -> bool:
    return gate.kind in (GateKind.T, GateKind.TDG)


def count_t_gates(gates: Iterable[Gate]) -> int:
    """Number of T and T† gates."""
    return sum(1 for g in gates if is_t_gate(g))


def calculate_depth(gates: Iterable[Gate]) -> int:
    """
    Longest path through the qubit-dependency DAG.

    Each gate starts after the latest gate on any qubit it touches, so
    gates on disjoint qubits share a layer regardless of list order.
    Barriers synchronize their qubits without adding a layer.
    """
    level: Dict[int, int] = {}
    depth = 0
    for gate in gates:
        start = max((level.get(q, 0) for q in gate.qubits), default=0)
        end = start if gate.kind is GateKind.BARRIER else start + 1
        for q in gate.qubits:
            level[q] = end
        depth = max(depth, end)
    return depth


# =============================================================================
# QISKIT MAPPING
# =============================================================================

_QISKIT_FACTORIES: Dict[GateKind, Callable[[Gate], QiskitGate]] = {
    GateKind.I: lambda g: IGate(),
    GateKind.H: lambda g: HGate(),
    GateKind.X: lambda g: XGate(),
    GateKind.Y: lambda g: YGate(),
    GateKind.Z: lambda g: ZGate(),
    GateKind.S: lambda g: SGate(),
    GateKind.SDG: lambda g: SdgGate(),
    GateKind.T: lambda g: TGate(),
    GateKind.TDG: lambda g: TdgGate(),
    GateKind.RX: lambda g: RXGate(g.angle),
    GateKind.RY: lambda g: RYGate(g.angle),
    GateKind.RZ: lambda g: RZGate(g.angle),
    GateKind.P: lambda g: PhaseGate(g.angle),
    GateKind.U3: lambda g: UGate(*g.params),
    GateKind.CNOT: lambda g: CXGate(),
    GateKind.CZ: lambda g: CZGate(),
    GateKind.CP: lambda g: CPhaseGate(g.angle),
    GateKind.SWAP: lambda g: SwapGate(),
    GateKind.CCX: lambda g: CCXGate(),
    GateKind.MCZ: lambda g: ZGate().control(len(g.controls)) if g.controls else ZGate(),
}


def to_qiskit_gate(gate: Gate) -> QiskitGate:
    """The qiskit gate object for a unitary Gate."""
    if not gate.is_unitary:
        raise ValidationError("gate", f"{gate.name} is not a unitary gate")
    return _QISKIT_FACTORIES[gate.kind](gate)


def gate_matrix(gate: Gate) -> np.ndarray:
    """2×2 unitary of a single-qubit gate."""
    if not gate.is_single_qubit_unitary:
        raise ValidationError("gate", f"{gate.name} is not a single-qubit unitary")
    return np.asarray(to_qiskit_gate(gate).to_matrix(), dtype=complex)


# =============================================================================
# GATE SEQUENCE
# =============================================================================

@dataclass(frozen=True)
class GateSequence:
    """
    A circuit: gates in execution order on num_qubits qubits.

    Attributes:
        gates: The operations
        num_qubits: Register width (every gate index is below it)
        total_phase: Accumulated global phase (unit modulus)
        depth: Longest path of the qubit-dependency DAG (derived)
        t_count: Number of T/T† gates (derived)
    """
    gates: Tuple[Gate, ...]
    num_qubits: int
    total_phase: complex = 1 + 0j
    depth: int = field(init=False)
    t_count: int = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "gates", tuple(self.gates))
        object.__setattr__(self, "total_phase", complex(self.total_phase))
        if self.num_qubits < 0:
            raise ValidationError("num_qubits", f"must be >= 0, got {self.num_qubits}")
        for gate in self.gates:
            for q in gate.qubits:
                if q >= self.num_qubits:
                    raise ValidationError(
                        "qubits",
                        f"{gate} uses qubit {q} but the circuit has {self.num_qubits}"
                    )
        if abs(abs(self.total_phase) - 1.0) > CompilerConstants.PHASE_TOLERANCE:
            raise ValidationError("total_phase", f"{self.total_phase} is not unit modulus")
        object.__setattr__(self, "depth", calculate_depth(self.gates))
        object.__setattr__(self, "t_count", count_t_gates(self.gates))

    def __len__(self) -> int:
        return len(self.gates)

    def with_gates(self, gates: Iterable[Gate], num_qubits: Optional[int] = None) -> "GateSequence":
        """Same register and phase, new gate list."""
        return GateSequence(
            tuple(gates),
            self.num_qubits if num_qubits is None else num_qubits,
            self.total_phase,
        )

    def to_circuit(self) -> QuantumCircuit:
        """
        Render as a qiskit QuantumCircuit (for drawing and verification).

        The total phase becomes the circuit's global phase; measurements
        write to the classical bit of the same index.
        """
        qr = QuantumRegister(max(1, self.num_qubits), "q")
        cr = ClassicalRegister(max(1, self.num_qubits), "c")
        qc = QuantumCircuit(qr, cr)
        qc.global_phase = cmath.phase(self.total_phase)

        for gate in self.gates:
            if gate.kind is GateKind.MEASURE:
                qc.measure(qr[gate.qubit], cr[gate.qubit])
            elif gate.kind is GateKind.BARRIER:
                qc.barrier(*[qr[q] for q in gate.qubits])
            elif gate.kind is GateKind.RESET:
                qc.reset(qr[gate.qubit])
            else:
                qc.append(to_qiskit_gate(gate), [qr[q] for q in gate.qubits])
        return qc

    def __str__(self) -> str:
        lines: List[str] = [
            f"GateSequence({self.num_qubits} qubits, {len(self.gates)} gates, "
            f"depth {self.depth}, T-count {self.t_count})"
        ]
        lines.extend(f"  {gate}" for gate in self.gates)
        return "\n".join(lines)
