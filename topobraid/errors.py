"""
Topological Errors: Failure Taxonomy for the Braid Compiler
===========================================================

Every failure raised inside the compiler is a TopologicalError. The two
pipeline entry points (compile_gate_sequence, compile_to_gates) catch these
and hand them back inside a Result, so callers never see an exception cross
the pipeline boundary.

Categories:
    - VALIDATION: malformed input (negative index, wrong arity)
    - LOGIC: operation not meaningful for anyons (Reset, unsupported gate)
    - COMPUTATION: numeric residual above the caller's tolerance
    - EXACT_MAPPING_UNAVAILABLE: no exact braid exists, try approximation
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Generic, Optional, TypeVar


T = TypeVar("T")


# =============================================================================
# CATEGORIES
# =============================================================================

class ErrorCategory(Enum):
    """High-level error categories (used for logging and dispatch)."""
    VALIDATION = auto()
    LOGIC = auto()
    COMPUTATION = auto()
    EXACT_MAPPING_UNAVAILABLE = auto()


# =============================================================================
# EXCEPTIONS
# =============================================================================

class TopologicalError(Exception):
    """Base class for all compiler failures."""

    category: ErrorCategory = ErrorCategory.COMPUTATION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def is_user_error(self) -> bool:
        """True when the caller can fix the failure by changing the input."""
        return self.category in (ErrorCategory.VALIDATION, ErrorCategory.LOGIC)

    def __str__(self) -> str:
        return f"[{self.category.name}] {self.message}"


class ValidationError(TopologicalError):
    """Raised for malformed input: bad index, wrong arity, bad parameter."""

    category = ErrorCategory.VALIDATION

    def __init__(self, field: str, reason: str):
        super().__init__(f"Validation failed for '{field}': {reason}")
        self.field = field
        self.reason = reason


class LogicError(TopologicalError):
    """Raised when an operation has no meaning in the anyon model."""

    category = ErrorCategory.LOGIC

    def __init__(self, operation: str, reason: str):
        super().__init__(f"Logic error in '{operation}': {reason}")
        self.operation = operation
        self.reason = reason


class ComputationError(TopologicalError):
    """Raised when a numerical or algorithmic step fails."""

    category = ErrorCategory.COMPUTATION

    def __init__(self, operation: str, reason: str):
        super().__init__(f"Computation '{operation}' failed: {reason}")
        self.operation = operation
        self.reason = reason


class ToleranceExceeded(ComputationError):
    """Raised when the best available residual is above the tolerance."""

    def __init__(self, operation: str, error: float, tolerance: float):
        super().__init__(
            operation,
            f"residual {error:.3e} exceeds tolerance {tolerance:.3e}"
        )
        self.error = error
        self.tolerance = tolerance


class ExactMappingUnavailable(TopologicalError):
    """
    The gate has no exact braid in this anyon model.

    Not a hard failure: the compiler catches it and falls back to the
    approximation search.
    """

    category = ErrorCategory.EXACT_MAPPING_UNAVAILABLE

    def __init__(self, gate: str, reason: str):
        super().__init__(f"No exact braid for {gate}: {reason}")
        self.gate = gate
        self.reason = reason


# =============================================================================
# RESULT (pipeline boundary value)
# =============================================================================

@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a pipeline call: either a value or a TopologicalError.

    Attributes:
        value: The produced value (None on failure)
        error: The failure (None on success)
    """
    value: Optional[T] = None
    error: Optional[TopologicalError] = None

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: TopologicalError) -> "Result[T]":
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, re-raising the stored error on failure."""
        if self.error is not None:
            raise self.error
        return self.value

    def __str__(self) -> str:
        if self.is_ok:
            return f"Ok({self.value})"
        return f"Error({self.error})"
