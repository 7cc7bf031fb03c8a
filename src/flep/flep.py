"""Main FLEP (Fast Lite Expression Parser) class."""

import logging
from typing import Sequence

from flep.flep_bytecode import FLEPProgram
from flep.flep_compiler import FLEPCompiler
from flep.flep_error import FLEPCompileError, FLEPErrorKind, translate
from flep.flep_optimizer import FLEPOptimizer
from flep.flep_vm import FLEPVM


class FLEP:
    """
    Compile arithmetic expressions once, evaluate them many times.

    Expressions may use:
    - up to seven variables, named by the letters a, b, c, x, y, z, w
    - the operators +, -, *, / and ^ (power, right-associative)
    - parentheses
    - the functions sin, cos, tan, exp, log, abs and sqrt
    - the constants e and pi

    Example:
        flep = FLEP()
        program = flep.compile("sin(2.2 * a) + cos(pi / b)")
        value = flep.evaluate(program, [0.5, 2.0])
        flep.release(program)
    """

    def __init__(self, max_depth: int = FLEPCompiler.DEFAULT_MAX_DEPTH, optimize: bool = True) -> None:
        """
        Initialize FLEP.

        Args:
            max_depth: Maximum nesting depth accepted by the compiler
            optimize: Whether to fold constant subexpressions

        Raises:
            ValueError: If max_depth is outside what the interpreter recursion limit supports
        """
        self.max_depth = max_depth
        self.optimize = optimize
        self._compiler = FLEPCompiler(
            max_depth=max_depth,
            optimizer=FLEPOptimizer() if optimize else None
        )
        self._vm = FLEPVM()
        self._logger = logging.getLogger("FLEP")

    def compile(self, source: str) -> FLEPProgram:
        """
        Compile an expression.

        Args:
            source: Expression text

        Returns:
            A finished program owned by the caller

        Raises:
            FLEPCompileError: With the error kind and 1-based position of the failure
        """
        try:
            return self._compiler.compile(source)

        except FLEPCompileError as e:
            self._logger.debug("Failed to compile '%s': %s at position %d", source, e.kind.name, e.position)
            raise

    def evaluate(self, program: FLEPProgram, variables: Sequence[float] = ()) -> float:
        """
        Evaluate a compiled program.

        Args:
            program: Program returned by compile
            variables: Values for a, b, c, x, y, z, w in that order

        Returns:
            Result value

        Raises:
            FLEPEvalError: If the program was released or too few variables are supplied
        """
        return self._vm.execute(program, variables)

    @staticmethod
    def release(program: FLEPProgram) -> None:
        """Release a program. It must not be evaluated afterwards; releasing again is a no-op."""
        program.release()

    @staticmethod
    def translate(kind: FLEPErrorKind | int) -> str:
        """Return the human-readable text for an error kind."""
        return translate(kind)

    @staticmethod
    def dump(program: FLEPProgram) -> str:
        """Return the program's opcode listing."""
        return program.disassemble()
