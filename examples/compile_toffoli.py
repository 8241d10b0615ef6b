"""
Compile a Toffoli Circuit to Braids and Back
============================================

This script compiles a small circuit (H, Toffoli, Measure) for Ising and
Fibonacci anyons, prints the braid compilation summary, then reads the
Ising braids back as gates.

Usage:
    python examples/compile_toffoli.py
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from topobraid.anyons import AnyonType
from topobraid.braid_to_gate import CompilationOptions, compile_to_gates, display_gate_sequence
from topobraid.gate_to_braid import compile_gate_sequence, display_compilation_summary
from topobraid.gates import Gate, GateSequence
from topobraid.optimizer import display_stats, optimize


def main():
    print("=" * 60)
    print("    TOPOBRAID: Toffoli on Anyons")
    print("=" * 60)

    circuit = GateSequence(
        (Gate.h(0), Gate.h(1), Gate.ccx(0, 1, 2), Gate.measure(2)),
        num_qubits=3,
    )
    print(f"\n📝 CIRCUIT ({len(circuit)} gates)")
    print(circuit)

    # Ising T gates sit 0.076 away from the nearest braid
    for anyon_type, tolerance in ((AnyonType.ISING, 0.1), (AnyonType.FIBONACCI, 0.05)):
        print(f"\n🧵 COMPILING FOR {anyon_type.name.upper()} ANYONS...")
        result = compile_gate_sequence(circuit, tolerance=tolerance, anyon_type=anyon_type)
        if not result.is_ok:
            print(f"   ❌ {result.error}")
            continue
        print(display_compilation_summary(result.value))

    # Read the exactly-mappable part back
    print("\n🔁 ROUND TRIP (Clifford prefix, Ising)")
    prefix = GateSequence((Gate.s(0), Gate.z(1), Gate.sdg(0)), num_qubits=2)
    forward = compile_gate_sequence(prefix).unwrap()
    braid = forward.compiled_braids[0]
    for word in forward.compiled_braids[1:]:
        braid = braid.compose(word)
    print(f"   Braid: {braid}")

    back = compile_to_gates(braid, options=CompilationOptions(optimization_level=1)).unwrap()
    print(display_gate_sequence(back))

    _, stats = optimize(back.gates, level=2)
    print("\n" + display_stats(stats))


if __name__ == "__main__":
    main()
