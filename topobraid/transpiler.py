"""
Transpiler: Composite Gates → Elementary Gates
==============================================

Lowers every composite gate into the elementary vocabulary the braid
compiler understands: {I, H, X, Y, Z, S, S†, T, T†, RX, RY, RZ, P, U3,
CNOT, Measure, Barrier}.

Rules:
    CZ(c,t)    = H(t) · CNOT(c,t) · H(t)
    SWAP(a,b)  = CNOT(a,b) · CNOT(b,a) · CNOT(a,b)
    CCX        = 15-gate Clifford+T network (6 CNOT, 7 T/T†, 2 H)
    MCZ([],t)  = Z(t)
    MCZ([c],t) = CZ(c,t)
    MCZ([a,b],t) = H(t) · CCX(a,b,t) · H(t)
    MCZ(n >= 3)  = CCX(c1,c2,a) · MCZ([a, c3, …], t) · CCX(c1,c2,a)
                   with a clean ancilla a above the circuit's qubits
    CP(θ)      = P(θ/2)c · CNOT · P(-θ/2)t · CNOT · P(θ/2)t  (opt-in)

Rules fire repeatedly until no composite gate remains. Each rule output
has a strictly smaller compositeness depth than its input, so the number
of passes is bounded by the deepest input gate.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .errors import ComputationError, LogicError
from .gates import Gate, GateKind, GateSequence


logger = logging.getLogger(__name__)


# =============================================================================
# DECOMPOSITION RULES
# =============================================================================

def decompose_cz(gate: Gate, ancilla_base: int) -> List[Gate]:
    c, t = gate.qubits
    return [Gate.h(t), Gate.cnot(c, t), Gate.h(t)]


def decompose_swap(gate: Gate, ancilla_base: int) -> List[Gate]:
    a, b = gate.qubits
    return [Gate.cnot(a, b), Gate.cnot(b, a), Gate.cnot(a, b)]


def decompose_ccx(gate: Gate, ancilla_base: int) -> List[Gate]:
    c1, c2, t = gate.qubits
    return [
        Gate.h(t),
        Gate.cnot(c2, t), Gate.tdg(t),
        Gate.cnot(c1, t), Gate.t(t),
        Gate.cnot(c2, t), Gate.tdg(t),
        Gate.cnot(c1, t), Gate.t(c2), Gate.t(t),
        Gate.h(t),
        Gate.cnot(c1, c2), Gate.t(c1), Gate.tdg(c2),
        Gate.cnot(c1, c2),
    ]


def decompose_mcz(gate: Gate, ancilla_base: int) -> List[Gate]:
    controls, t = gate.controls, gate.target
    if not controls:
        return [Gate.z(t)]
    if len(controls) == 1:
        return [Gate.cz(controls[0], t)]
    if len(controls) == 2:
        return [Gate.h(t), Gate.ccx(controls[0], controls[1], t), Gate.h(t)]

    # Ancilla sits above every qubit this gate touches, so nested levels
    # get distinct ancillas and each one is returned to |0⟩.
    ancilla = max(ancilla_base, max(gate.qubits) + 1)
    c1, c2, rest = controls[0], controls[1], controls[2:]
    return [
        Gate.ccx(c1, c2, ancilla),
        Gate.mcz((ancilla,) + tuple(rest), t),
        Gate.ccx(c1, c2, ancilla),
    ]


def decompose_cp(gate: Gate, ancilla_base: int) -> List[Gate]:
    c, t = gate.qubits
    half = gate.angle / 2
    return [
        Gate.p(c, half),
        Gate.cnot(c, t),
        Gate.p(t, -half),
        Gate.cnot(c, t),
        Gate.p(t, half),
    ]


Rule = Callable[[Gate, int], List[Gate]]

TOPOLOGICAL_RULES: Dict[GateKind, Rule] = {
    GateKind.CZ: decompose_cz,
    GateKind.SWAP: decompose_swap,
    GateKind.CCX: decompose_ccx,
    GateKind.MCZ: decompose_mcz,
}


def compositeness_depth(gate: Gate) -> int:
    """
    Upper bound on the passes needed to make a gate elementary.

    Elementary gates are 0; every rule maps a gate of depth d to gates
    of depth < d.
    """
    if gate.is_elementary:
        return 0
    if gate.kind is GateKind.MCZ:
        n = len(gate.controls)
        if n == 0:
            return 1
        if n <= 2:
            return 2
        return n
    return 1


# =============================================================================
# TRANSPILE REPORT
# =============================================================================

@dataclass(frozen=True)
class TranspileReport:
    """
    Outcome of transpilation.

    Attributes:
        sequence: Elementary-only gate sequence
        passes: Rule passes applied
        ancilla_qubits: Qubits added for multi-controlled gates
        expansions: Composite gates lowered, by name
    """
    sequence: GateSequence
    passes: int
    ancilla_qubits: int
    expansions: Dict[str, int] = field(default_factory=dict)

    def __str__(self) -> str:
        lowered = ", ".join(f"{name}×{n}" for name, n in sorted(self.expansions.items())) or "none"
        return (
            f"Transpiled to {len(self.sequence)} elementary gates in {self.passes} pass(es); "
            f"lowered: {lowered}; ancillas: {self.ancilla_qubits}"
        )


# =============================================================================
# TRANSPILER
# =============================================================================

class Transpiler:
    """
    Fixed-point gate lowering.

    Args:
        with_controlled_phase: Add the CP rule (off for topological targets,
            where bare CP is rejected)
        rules: Replace the rule table entirely
    """

    def __init__(self, with_controlled_phase: bool = False,
                 rules: Optional[Dict[GateKind, Rule]] = None):
        self.rules: Dict[GateKind, Rule] = dict(TOPOLOGICAL_RULES if rules is None else rules)
        if with_controlled_phase:
            self.rules[GateKind.CP] = decompose_cp

    def needs_transpilation(self, sequence: GateSequence) -> bool:
        return any(not g.is_elementary for g in sequence.gates)

    def transpile(self, sequence: GateSequence) -> TranspileReport:
        """
        Lower every composite gate.

        Raises:
            LogicError: Reset present, or a composite gate has no rule
            ComputationError: Composite gates survive the pass cap
        """
        for gate in sequence.gates:
            if gate.kind is GateKind.RESET:
                raise LogicError(
                    gate.name, "Reset is non-unitary and cannot be realized by braiding"
                )

        gates: List[Gate] = list(sequence.gates)
        base = sequence.num_qubits
        cap = max((compositeness_depth(g) for g in gates), default=0) + 1
        expansions: Counter = Counter()
        passes = 0

        while True:
            pending = [g for g in gates if not g.is_elementary]
            if not pending:
                break
            if passes >= cap:
                raise ComputationError(
                    "transpilation",
                    f"{len(pending)} composite gate(s) remain after {cap} passes "
                    f"(first: {pending[0]})"
                )

            lowered: List[Gate] = []
            progressed = False
            for gate in gates:
                rule = self.rules.get(gate.kind) if not gate.is_elementary else None
                if rule is None:
                    lowered.append(gate)
                    continue
                lowered.extend(rule(gate, base))
                expansions[gate.name] += 1
                progressed = True

            if not progressed:
                stuck = pending[0]
                raise LogicError(
                    stuck.name,
                    f"{stuck} could not be transpiled to the elementary gate set"
                )
            gates = lowered
            passes += 1

        width = max([sequence.num_qubits] + [q + 1 for g in gates for q in g.qubits])
        result = GateSequence(tuple(gates), width, sequence.total_phase)
        if passes:
            logger.info(
                f"🔨 Transpiled {len(sequence)} → {len(result)} gates in {passes} pass(es)"
            )
        return TranspileReport(result, passes, width - sequence.num_qubits, dict(expansions))


def transpile(sequence: GateSequence, with_controlled_phase: bool = False) -> TranspileReport:
    """Convenience wrapper around Transpiler.transpile."""
    return Transpiler(with_controlled_phase).transpile(sequence)


def needs_transpilation(sequence: GateSequence) -> bool:
    return Transpiler().needs_transpilation(sequence)
