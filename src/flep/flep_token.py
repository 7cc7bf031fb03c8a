"""Token types and token representation for FLEP expressions."""

from dataclasses import dataclass
from enum import Enum


class FLEPTokenType(Enum):
    """Token types for FLEP expressions."""
    START = "START"
    END = "END"
    OPEN = "("
    CLOSE = ")"
    PLUS = "+"
    MINUS = "-"
    MULT = "*"
    DIV = "/"
    POWER = "^"
    VARIABLE = "VARIABLE"
    CONSTANT = "CONSTANT"
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    EXP = "exp"
    LOG = "log"
    ABS = "abs"
    SQRT = "sqrt"
    BAD_TOKEN = "BAD_TOKEN"


@dataclass
class FLEPToken:
    """
    Represents a single token in a FLEP expression.

    `value` is the float for CONSTANT tokens and the variable index for VARIABLE tokens.
    `position` is the 0-based offset of the first character of the token.
    """
    type: FLEPTokenType
    value: float | int | None
    position: int
    length: int = 1

    def __repr__(self) -> str:
        return f"FLEPToken({self.type.name}, {self.value!r}, pos={self.position})"
