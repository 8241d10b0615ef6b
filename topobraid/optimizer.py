"""
CircuitOptimizer: Peephole Rewriting of Gate Lists
==================================================

Every pass maps a gate list to an equivalent one (same unitary up to a
global phase) that is never longer. Passes never fail: a pass that finds
nothing to do returns the list unchanged.

Passes:
    - cancel_inverses: adjacent g · g⁻¹ → nothing
    - merge_adjacent_gates: T·T → S, S·S → Z, Z·Z → nothing, rotation sums
    - commute_cliffords_left: move Cliffords left past commuting non-Cliffords
    - template_match: T⁷ → T†, T⁵ → Z·T, T³ → S·T, S³ → S†, HZH → X, HXH → Z
    - commutation_cancellation: g … g⁻¹ with commuting gates in between

Levels:
    0: no change
    1: cancel_inverses + merge_adjacent_gates
    2: all passes, repeated to a fixed point (bounded)
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import ValidationError
from .gates import (
    Z_AXIS,
    CompilerConstants,
    Gate,
    GateKind,
    GateSequence,
    calculate_depth,
    count_t_gates,
    is_clifford,
)


logger = logging.getLogger(__name__)


# =============================================================================
# GATE ALGEBRA
# =============================================================================

_SELF_INVERSE = frozenset({
    GateKind.H, GateKind.X, GateKind.Y, GateKind.Z,
    GateKind.CNOT, GateKind.CZ, GateKind.SWAP, GateKind.CCX, GateKind.MCZ,
})

_INVERSE_KIND: Dict[GateKind, GateKind] = {kind: kind for kind in _SELF_INVERSE}
_INVERSE_KIND.update({
    GateKind.T: GateKind.TDG,
    GateKind.TDG: GateKind.T,
    GateKind.S: GateKind.SDG,
    GateKind.SDG: GateKind.S,
})

_ROTATIONS = frozenset({GateKind.RX, GateKind.RY, GateKind.RZ, GateKind.P})

# Symmetric gates act the same under any qubit order
_SYMMETRIC = frozenset({GateKind.CZ, GateKind.SWAP, GateKind.MCZ})


def _same_action(a: Gate, b: Gate) -> bool:
    if a.kind in _SYMMETRIC:
        return set(a.qubits) == set(b.qubits)
    if a.kind is GateKind.CCX:
        return set(a.controls) == set(b.controls) and a.target == b.target
    return a.qubits == b.qubits


def is_identity(gate: Gate) -> bool:
    """Identity gate, or a rotation by (numerically) zero."""
    if gate.kind is GateKind.I:
        return True
    return gate.kind in _ROTATIONS and abs(gate.angle) < CompilerConstants.NUMERICAL_FLOOR


def is_inverse_pair(a: Gate, b: Gate) -> bool:
    """True if b undoes a."""
    if a.kind in _INVERSE_KIND:
        return b.kind is _INVERSE_KIND[a.kind] and _same_action(a, b)
    if a.kind in _ROTATIONS:
        return (b.kind is a.kind and a.qubits == b.qubits
                and abs(a.angle + b.angle) < CompilerConstants.NUMERICAL_FLOOR)
    return False


def is_non_clifford(gate: Gate) -> bool:
    return gate.is_unitary and not is_clifford(gate)


def commutes(a: Gate, b: Gate) -> bool:
    """
    Conservative commutation check: False only forgoes an optimization.

    True for identities, gates on disjoint qubits (barriers excepted),
    a gate with itself, and Z-axis gates on the same qubit.
    """
    if is_identity(a) or is_identity(b):
        return True
    if GateKind.BARRIER in (a.kind, b.kind):
        return False
    if not set(a.qubits) & set(b.qubits):
        return True
    if not (a.is_unitary and b.is_unitary):
        return False
    if a == b:
        return True
    return a.kind in Z_AXIS and b.kind in Z_AXIS and a.qubits == b.qubits


# =============================================================================
# LOCAL PASSES
# =============================================================================

def cancel_inverses(gates: Sequence[Gate]) -> List[Gate]:
    """Drop identities and adjacent inverse pairs, cascading in one pass."""
    out: List[Gate] = []
    for gate in gates:
        if is_identity(gate):
            continue
        if out and is_inverse_pair(out[-1], gate):
            out.pop()
        else:
            out.append(gate)
    return out


_PAIR_MERGES: Dict[Tuple[GateKind, GateKind], Optional[GateKind]] = {
    (GateKind.T, GateKind.T): GateKind.S,
    (GateKind.TDG, GateKind.TDG): GateKind.SDG,
    (GateKind.S, GateKind.S): GateKind.Z,
    (GateKind.SDG, GateKind.SDG): GateKind.Z,
    (GateKind.Z, GateKind.Z): None,
}


def _merge(a: Gate, b: Gate) -> Optional[List[Gate]]:
    """Merged replacement for a·b, or None when they do not merge."""
    if len(a.qubits) != 1 or a.qubits != b.qubits:
        return None
    key = (a.kind, b.kind)
    if key in _PAIR_MERGES:
        kind = _PAIR_MERGES[key]
        return [] if kind is None else [Gate(kind, a.qubits)]
    if a.kind in _ROTATIONS and b.kind is a.kind:
        total = a.angle + b.angle
        if abs(total) < CompilerConstants.NUMERICAL_FLOOR:
            return []
        return [Gate(a.kind, a.qubits, (total,))]
    return None


def merge_adjacent_gates(gates: Sequence[Gate]) -> List[Gate]:
    """Algebraic merges of adjacent same-qubit gates, cascading."""
    out: List[Gate] = []
    for gate in gates:
        current = [gate]
        while current and out:
            merged = _merge(out[-1], current[0])
            if merged is None:
                break
            out.pop()
            current = merged
        out.extend(current)
    return out


def commute_cliffords_left(gates: Sequence[Gate]) -> Tuple[List[Gate], bool]:
    """One sweep swapping adjacent (non-Clifford, Clifford) pairs that commute."""
    out = list(gates)
    changed = False
    i = 0
    while i < len(out) - 1:
        a, b = out[i], out[i + 1]
        if is_non_clifford(a) and is_clifford(b) and commutes(a, b):
            out[i], out[i + 1] = b, a
            changed = True
            i += 2
        else:
            i += 1
    return out, changed


def commute_cliffords_until_stable(gates: Sequence[Gate]) -> List[Gate]:
    out = list(gates)
    # Each swap removes one (non-Clifford before Clifford) inversion
    for _ in range(len(out) * len(out) + 1):
        out, changed = commute_cliffords_left(out)
        if not changed:
            break
    return out


_K = GateKind
TEMPLATES: Tuple[Tuple[Tuple[GateKind, ...], Tuple[GateKind, ...]], ...] = (
    ((_K.T,) * 7, (_K.TDG,)),
    ((_K.TDG,) * 7, (_K.T,)),
    ((_K.T,) * 5, (_K.Z, _K.T)),
    ((_K.TDG,) * 5, (_K.Z, _K.TDG)),
    ((_K.T,) * 3, (_K.S, _K.T)),
    ((_K.TDG,) * 3, (_K.SDG, _K.TDG)),
    ((_K.S,) * 3, (_K.SDG,)),
    ((_K.SDG,) * 3, (_K.S,)),
    ((_K.H, _K.Z, _K.H), (_K.X,)),
    ((_K.H, _K.X, _K.H), (_K.Z,)),
)


def _matches(gates: Sequence[Gate], start: int, pattern: Tuple[GateKind, ...]) -> bool:
    window = gates[start:start + len(pattern)]
    if len(window) != len(pattern):
        return False
    qubits = window[0].qubits
    if len(qubits) != 1:
        return False
    return all(g.kind is k and g.qubits == qubits for g, k in zip(window, pattern))


def template_match(gates: Sequence[Gate]) -> Tuple[List[Gate], bool]:
    """One left-to-right sweep of the rewrite templates."""
    out = list(gates)
    changed = False
    i = 0
    while i < len(out):
        for pattern, replacement in TEMPLATES:
            if _matches(out, i, pattern):
                qubits = out[i].qubits
                out[i:i + len(pattern)] = [Gate(kind, qubits) for kind in replacement]
                changed = True
                break
        else:
            i += 1
    return out, changed


def template_match_until_stable(gates: Sequence[Gate]) -> List[Gate]:
    out = list(gates)
    for _ in range(CompilerConstants.TEMPLATE_MAX_ITERATIONS):
        out, changed = template_match(out)
        if not changed:
            break
    return out


def commutation_cancellation(gates: Sequence[Gate]) -> List[Gate]:
    """
    Cancel g with a later g⁻¹ when every gate in between commutes with both.
    """
    out = list(gates)
    i = 0
    while i < len(out):
        a = out[i]
        if is_identity(a):
            del out[i]
            continue
        partner = None
        for j in range(i + 1, len(out)):
            b = out[j]
            if is_inverse_pair(a, b):
                partner = j
                break
            if not (commutes(a, b) and commutes(_inverse_of(a), b)):
                break
        if partner is None:
            i += 1
        else:
            del out[partner]
            del out[i]
    return out


def _inverse_of(gate: Gate) -> Gate:
    if gate.kind in _INVERSE_KIND:
        return Gate(_INVERSE_KIND[gate.kind], gate.qubits)
    if gate.kind in _ROTATIONS:
        return Gate(gate.kind, gate.qubits, (-gate.angle,))
    return gate


# =============================================================================
# OPTIMIZE
# =============================================================================

@dataclass(frozen=True)
class OptimizationStats:
    """Before/after metrics of one optimize() call."""
    original_gate_count: int
    optimized_gate_count: int
    original_t_count: int
    optimized_t_count: int
    original_depth: int
    optimized_depth: int
    passes_applied: Tuple[str, ...] = ()

    @property
    def gates_removed(self) -> int:
        return self.original_gate_count - self.optimized_gate_count


def _basic(gates: Sequence[Gate]) -> List[Gate]:
    return merge_adjacent_gates(cancel_inverses(gates))


def optimize(gates: Iterable[Gate], level: int = 1,
             max_iterations: int = CompilerConstants.OPTIMIZER_MAX_ITERATIONS
             ) -> Tuple[List[Gate], OptimizationStats]:
    """
    Optimize a gate list.

    Args:
        gates: Gates in execution order
        level: 0 (none), 1 (basic) or 2 (aggressive fixed point)
        max_iterations: Round cap for level 2

    Returns:
        (optimized gates, OptimizationStats)
    """
    if level not in (0, 1, 2):
        raise ValidationError("level", f"optimization level must be 0, 1 or 2, got {level}")

    original = list(gates)
    result = list(original)
    passes: List[str] = []

    if level == 1:
        result = _basic(result)
        passes.extend(["cancel_inverses", "merge_adjacent_gates"])
    elif level == 2:
        rounds = (
            ("commutation_cancellation", commutation_cancellation),
            ("commute_cliffords_until_stable", commute_cliffords_until_stable),
            ("template_match_until_stable", template_match_until_stable),
            ("basic", _basic),
        )
        for _ in range(max_iterations):
            before = result
            for name, apply in rounds:
                after = apply(result)
                if after != result:
                    passes.append(name)
                result = after
            if result == before:
                break

    stats = OptimizationStats(
        original_gate_count=len(original),
        optimized_gate_count=len(result),
        original_t_count=count_t_gates(original),
        optimized_t_count=count_t_gates(result),
        original_depth=calculate_depth(original),
        optimized_depth=calculate_depth(result),
        passes_applied=tuple(passes),
    )
    if level:
        logger.debug(f"   optimizer L{level}: {len(original)} → {len(result)} gates")
    return result, stats


class CircuitOptimizer:
    """
    Optimizer bound to a level (used by the braid → gate compiler).

    Args:
        level: 0, 1 or 2
        max_iterations: Round cap for level 2
    """

    def __init__(self, level: int = 1,
                 max_iterations: int = CompilerConstants.OPTIMIZER_MAX_ITERATIONS):
        if level not in (0, 1, 2):
            raise ValidationError("level", f"optimization level must be 0, 1 or 2, got {level}")
        self.level = level
        self.max_iterations = max_iterations

    def optimize(self, gates: Iterable[Gate]) -> Tuple[List[Gate], OptimizationStats]:
        return optimize(gates, self.level, self.max_iterations)

    def optimize_sequence(self, sequence: GateSequence) -> Tuple[GateSequence, OptimizationStats]:
        gates, stats = self.optimize(sequence.gates)
        return sequence.with_gates(gates), stats


def optimize_aggressive(gates: Iterable[Gate]) -> List[Gate]:
    return optimize(gates, level=2)[0]


def display_stats(stats: OptimizationStats) -> str:
    """Before/after table."""
    def ratio(before: int, after: int) -> str:
        if before == 0:
            return "  -"
        return f"{100.0 * (before - after) / before:5.1f}%"

    lines = [
        "Optimization          before   after   saved",
        f"  gates             {stats.original_gate_count:8d} {stats.optimized_gate_count:7d} "
        f"{ratio(stats.original_gate_count, stats.optimized_gate_count)}",
        f"  T-count           {stats.original_t_count:8d} {stats.optimized_t_count:7d} "
        f"{ratio(stats.original_t_count, stats.optimized_t_count)}",
        f"  depth             {stats.original_depth:8d} {stats.optimized_depth:7d} "
        f"{ratio(stats.original_depth, stats.optimized_depth)}",
    ]
    if stats.passes_applied:
        lines.append(f"  passes: {', '.join(stats.passes_applied)}")
    return "\n".join(lines)
