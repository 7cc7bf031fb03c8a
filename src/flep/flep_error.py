"""Exception classes and error-kind messages for FLEP (Fast Lite Expression Parser)."""

from enum import IntEnum
from types import MappingProxyType
from typing import Mapping, Optional


class FLEPErrorKind(IntEnum):
    """
    Compile error kinds.

    Values are stable integer codes, so callers that store or compare plain integers keep
    working.
    """
    OK = 0
    BAD_SYNTAX = 20
    BAD_TOKEN = 21
    EXPECTED_OPEN = 22
    UNBALANCED = 23
    TOO_DEEP = 24


ERROR_MESSAGES: Mapping[FLEPErrorKind, str] = MappingProxyType({
    FLEPErrorKind.OK: "no error",
    FLEPErrorKind.BAD_SYNTAX: "bad expression syntax",
    FLEPErrorKind.BAD_TOKEN: "bad token",
    FLEPErrorKind.EXPECTED_OPEN: "expected '(' after function name",
    FLEPErrorKind.UNBALANCED: "unbalanced parentheses",
    FLEPErrorKind.TOO_DEEP: "expression nested too deeply",
})


def translate(kind: FLEPErrorKind | int) -> str:
    """
    Return the human-readable text for an error kind.

    Args:
        kind: An FLEPErrorKind, or its integer code

    Returns:
        Message text

    Raises:
        ValueError: If the integer code is not a known error kind
    """
    return ERROR_MESSAGES[FLEPErrorKind(kind)]


class FLEPError(Exception):
    """Base exception for FLEP errors with detailed context information."""

    def __init__(
        self,
        message: str,
        context: Optional[str] = None,
        expected: Optional[str] = None,
        received: Optional[str] = None,
        suggestion: Optional[str] = None,
        position: Optional[int] = None
    ):
        """
        Initialize detailed error.

        Args:
            message: Core error description
            context: Additional context information
            expected: What was expected
            received: What was actually received
            suggestion: Suggestion for fixing the error
            position: 1-based character position where the error occurred
        """
        self.message = message
        self.context = context
        self.expected = expected
        self.received = received
        self.suggestion = suggestion
        self.position = position

        super().__init__(self._format_detailed_message())

    def _format_detailed_message(self) -> str:
        """Format the error message with all available details."""
        parts = [f"Error: {self.message}"]

        if self.position is not None:
            parts.append(f"Position: {self.position}")

        if self.received:
            parts.append(f"Received: {self.received}")

        if self.expected:
            parts.append(f"Expected: {self.expected}")

        if self.context:
            parts.append(f"Context: {self.context}")

        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")

        return "\n".join(parts)


class FLEPCompileError(FLEPError):
    """Compilation failure: an error kind plus the 1-based offset where it was detected."""

    def __init__(
        self,
        kind: FLEPErrorKind,
        position: int,
        source: str,
        received: Optional[str] = None,
        expected: Optional[str] = None,
        suggestion: Optional[str] = None
    ):
        self.kind = kind
        self.source = source
        super().__init__(
            message=translate(kind),
            context=self._caret_context(source, position),
            expected=expected,
            received=received,
            suggestion=suggestion,
            position=position
        )

    @staticmethod
    def _caret_context(source: str, position: int) -> str:
        """Show the source with a caret under the failing position."""
        return f"\n  {source}\n  {' ' * (position - 1)}^"


class FLEPEvalError(FLEPError):
    """Evaluation called with a released program or too few variable values."""


class FLEPValidationError(FLEPError):
    """A finished program breaks its structural invariants."""
