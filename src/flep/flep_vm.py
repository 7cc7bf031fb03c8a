"""FLEP Virtual Machine - executes compiled programs."""

import math
from typing import Callable, List, Sequence

from flep.flep_bytecode import FLEPProgram, Opcode
from flep.flep_error import FLEPEvalError
from flep.flep_math import UNARY_FUNCTIONS, divide, power

# Plain ints for dispatch, so the hot loop compares ints rather than enum members
_NEG = int(Opcode.NEG)
_ADD = int(Opcode.ADD)
_SUB = int(Opcode.SUB)
_MUL = int(Opcode.MUL)
_DIV = int(Opcode.DIV)
_POW = int(Opcode.POW)
_LOAD_VAR = int(Opcode.LOAD_VAR)
_LOAD_CONST = int(Opcode.LOAD_CONST)
_END = int(Opcode.END)


def _unimplemented(_x: float) -> float:
    raise FLEPEvalError("Unimplemented opcode")


class FLEPVM:
    """
    Stack machine for FLEP programs.

    Execution is a single iterative loop over the program's instructions. The operand
    stack is a local list sized to the program's proven maximum depth, so the VM holds no
    per-call state and one instance can serve any number of concurrent callers.
    """

    def __init__(self) -> None:
        # Fast versions raise on domain/range errors; the fallbacks return IEEE results
        self._fast_unary: List[Callable[[float], float]] = [_unimplemented] * 256
        self._safe_unary: List[Callable[[float], float]] = [_unimplemented] * 256
        fast = {
            Opcode.SIN: math.sin,
            Opcode.COS: math.cos,
            Opcode.TAN: math.tan,
            Opcode.EXP: math.exp,
            Opcode.LOG: math.log,
            Opcode.ABS: math.fabs,
            Opcode.SQRT: math.sqrt,
        }
        for opcode, function in fast.items():
            self._fast_unary[opcode] = function
            self._safe_unary[opcode] = UNARY_FUNCTIONS[opcode]

    def execute(self, program: FLEPProgram, variables: Sequence[float]) -> float:
        """
        Evaluate a program against a vector of variable values.

        Args:
            program: Program produced by a successful compile
            variables: Values for a, b, c, x, y, z, w in that order; only as many as the
                program reads are required

        Returns:
            Result value

        Raises:
            FLEPEvalError: If the program was released or too few variables are supplied
        """
        if program.released:
            raise FLEPEvalError(
                "Cannot evaluate a released program",
                received=repr(program),
                suggestion="Compile the expression again"
            )

        if len(variables) < program.variable_count:
            raise FLEPEvalError(
                f"Program reads {program.variable_count} variables, got {len(variables)}",
                expected=f"at least {program.variable_count} values for 'abcxyzw'[:{program.variable_count}]",
                received=f"{len(variables)} values"
            )

        stack = [0.0] * program.max_stack_depth
        sp = -1
        fast_unary = self._fast_unary
        safe_unary = self._safe_unary
        pow_ = math.pow

        for opcode, arg in program.code:
            if opcode == _LOAD_VAR:
                sp += 1
                stack[sp] = variables[arg]

            elif opcode == _LOAD_CONST:
                sp += 1
                stack[sp] = arg

            elif opcode == _ADD:
                sp -= 1
                stack[sp] = stack[sp] + stack[sp + 1]

            elif opcode == _SUB:
                sp -= 1
                stack[sp] = stack[sp] - stack[sp + 1]

            elif opcode == _MUL:
                sp -= 1
                stack[sp] = stack[sp] * stack[sp + 1]

            elif opcode == _DIV:
                sp -= 1
                try:
                    stack[sp] = stack[sp] / stack[sp + 1]

                except ZeroDivisionError:
                    stack[sp] = divide(stack[sp], stack[sp + 1])

            elif opcode == _POW:
                sp -= 1
                try:
                    stack[sp] = pow_(stack[sp], stack[sp + 1])

                except (ValueError, OverflowError):
                    stack[sp] = power(stack[sp], stack[sp + 1])

            elif opcode == _NEG:
                stack[sp] = -stack[sp]

            elif opcode == _END:
                break

            else:
                try:
                    stack[sp] = fast_unary[opcode](stack[sp])

                except (ValueError, OverflowError):
                    stack[sp] = safe_unary[opcode](stack[sp])

        return float(stack[0])
