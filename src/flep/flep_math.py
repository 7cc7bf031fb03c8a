"""
Numeric semantics for FLEP operations.

Python's math module raises on domain and range errors where the C math library returns
IEEE-754 special values. The functions here return the C results instead, so a program
evaluated over a grid of inputs yields inf/nan at singular points rather than aborting.
Both the constant folder and the VM use these tables, which keeps folded and evaluated
results identical.
"""

import math
from typing import Callable, Dict

from flep.flep_bytecode import Opcode


def _is_odd_integer(x: float) -> bool:
    return math.isfinite(x) and abs(math.fmod(x, 2.0)) == 1.0


def negate(x: float) -> float:
    """Unary minus."""
    return -x


def add(a: float, b: float) -> float:
    """a + b."""
    return a + b


def subtract(a: float, b: float) -> float:
    """a - b."""
    return a - b


def multiply(a: float, b: float) -> float:
    """a * b."""
    return a * b


def divide(a: float, b: float) -> float:
    """a / b, with division by zero giving +-inf, or nan for 0/0 and nan/0."""
    try:
        return a / b

    except ZeroDivisionError:
        if math.isnan(a) or a == 0:
            return math.nan

        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def power(a: float, b: float) -> float:
    """a ^ b with C pow() semantics."""
    try:
        return math.pow(a, b)

    except OverflowError:
        if a < 0 and _is_odd_integer(b):
            return -math.inf

        return math.inf

    except ValueError:
        # Zero to a negative power is a pole; anything else is a domain error
        if a == 0:
            if _is_odd_integer(b):
                return math.copysign(math.inf, a)

            return math.inf

        return math.nan


def sin(x: float) -> float:
    """Sine; nan for infinite input."""
    try:
        return math.sin(x)

    except ValueError:
        return math.nan


def cos(x: float) -> float:
    """Cosine; nan for infinite input."""
    try:
        return math.cos(x)

    except ValueError:
        return math.nan


def tan(x: float) -> float:
    """Tangent; nan for infinite input."""
    try:
        return math.tan(x)

    except ValueError:
        return math.nan


def exp(x: float) -> float:
    """e ^ x; inf on overflow."""
    try:
        return math.exp(x)

    except OverflowError:
        return math.inf


def log(x: float) -> float:
    """Natural logarithm; -inf at zero, nan for negative input."""
    try:
        return math.log(x)

    except ValueError:
        if x == 0:
            return -math.inf

        return math.nan


def fabs(x: float) -> float:
    """Absolute value."""
    return math.fabs(x)


def sqrt(x: float) -> float:
    """Square root; nan for negative input."""
    try:
        return math.sqrt(x)

    except ValueError:
        return math.nan


UNARY_FUNCTIONS: Dict[Opcode, Callable[[float], float]] = {
    Opcode.NEG: negate,
    Opcode.SIN: sin,
    Opcode.COS: cos,
    Opcode.TAN: tan,
    Opcode.EXP: exp,
    Opcode.LOG: log,
    Opcode.ABS: fabs,
    Opcode.SQRT: sqrt,
}

BINARY_FUNCTIONS: Dict[Opcode, Callable[[float, float], float]] = {
    Opcode.ADD: add,
    Opcode.SUB: subtract,
    Opcode.MUL: multiply,
    Opcode.DIV: divide,
    Opcode.POW: power,
}
