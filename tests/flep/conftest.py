"""Shared fixtures and utilities for FLEP tests."""

import math
from typing import List, Sequence

import pytest

from flep import FLEP, FLEPCompileError, FLEPErrorKind


@pytest.fixture
def flep():
    """Create a fresh FLEP instance for each test."""
    return FLEP()


@pytest.fixture
def flep_unoptimized():
    """FLEP instance with constant folding disabled."""
    return FLEP(optimize=False)


class FLEPTestHelpers:
    """Helper utilities for FLEP testing."""

    @staticmethod
    def evaluate(flep: FLEP, expression: str, variables: Sequence[float] = ()) -> float:
        """Compile, evaluate and release an expression."""
        program = flep.compile(expression)
        try:
            return flep.evaluate(program, variables)

        finally:
            flep.release(program)

    @staticmethod
    def assert_evaluates_to(flep: FLEP, expression: str, expected: float, variables: Sequence[float] = ()) -> None:
        """Assert that an expression evaluates to the expected value."""
        result = FLEPTestHelpers.evaluate(flep, expression, variables)
        assert math.isclose(result, expected, rel_tol=1e-12, abs_tol=1e-12), \
            f"Expected {expression!r} to evaluate to {expected!r}, got {result!r}"

    @staticmethod
    def assert_compile_error(flep: FLEP, expression: str, kind: FLEPErrorKind, position: int) -> FLEPCompileError:
        """Assert that compiling fails with the given kind at the given 1-based position."""
        with pytest.raises(FLEPCompileError) as exc_info:
            flep.compile(expression)

        error = exc_info.value
        assert error.kind == kind, f"Expected {kind.name} for {expression!r}, got {error.kind.name}"
        assert error.position == position, f"Expected position {position} for {expression!r}, got {error.position}"
        return error

    @staticmethod
    def opcode_names(flep: FLEP, expression: str) -> List[str]:
        """Compile an expression and return its opcode names, END included."""
        program = flep.compile(expression)
        names = [instr.opcode.name for instr in program.instructions]
        flep.release(program)
        return names

    @staticmethod
    def build_nested_expression(depth: int, base: str = "a") -> str:
        """Build '((...(a)...))' with depth pairs of parentheses."""
        return "(" * depth + base + ")" * depth


@pytest.fixture
def helpers():
    """Provide test helper utilities."""
    return FLEPTestHelpers
