"""
Bytecode validator for the FLEP stack machine.

FLEP programs are straight-line postfix code, so a single forward walk is enough to prove
the properties the evaluator relies on:
- every opcode finds enough operands on the stack
- the program ends with END, and END sees exactly one value
- constant references index a valid pool slot and variable references index 0-6
- the maximum stack depth, which the evaluator uses to size its stack exactly

Validating once when a program is finished keeps all of these checks out of the hot
evaluation loop.
"""

from dataclasses import dataclass
from enum import Enum
from typing import NoReturn

from flep.flep_bytecode import FLEPCodeBuffer, Opcode, VARIABLE_COUNT
from flep.flep_error import FLEPValidationError


class ValidationErrorType(Enum):
    """Types of validation errors."""
    STACK_UNDERFLOW = "stack_underflow"
    STACK_INCONSISTENT = "stack_inconsistent"
    INDEX_OUT_OF_BOUNDS = "index_out_of_bounds"
    MISSING_END = "missing_end"
    UNREACHABLE_CODE = "unreachable_code"


class ValidationError(FLEPValidationError):
    """Validation failure that records which invariant was broken."""

    def __init__(self, error_type: ValidationErrorType, message: str, received: str) -> None:
        self.error_type = error_type
        super().__init__(message=message, received=received, context=error_type.value)


@dataclass
class ValidationResult:
    """Facts proven about a valid program."""
    max_stack_depth: int
    variable_count: int


class BytecodeValidator:
    """Validates FLEP bytecode for correctness and computes its stack bound."""

    def validate(self, buffer: FLEPCodeBuffer) -> ValidationResult:
        """
        Validate a finished code buffer.

        Args:
            buffer: Code buffer whose last instruction should be END

        Returns:
            The proven maximum stack depth and number of variables read

        Raises:
            FLEPValidationError: If any invariant is broken
        """
        instructions = buffer.instructions
        depth = 0
        max_depth = 0
        variable_count = 0

        for i, instr in enumerate(instructions):
            opcode = instr.opcode

            if opcode == Opcode.END:
                if depth != 1:
                    self._fail(
                        ValidationErrorType.STACK_INCONSISTENT, i, opcode,
                        f"END reached with {depth} values on the stack, expected 1"
                    )

                if i != len(instructions) - 1:
                    self._fail(ValidationErrorType.UNREACHABLE_CODE, i, opcode, "instructions follow END")

                return ValidationResult(max_stack_depth=max_depth, variable_count=variable_count)

            if opcode == Opcode.LOAD_CONST:
                if not 0 <= instr.arg < buffer.constant_count:
                    self._fail(
                        ValidationErrorType.INDEX_OUT_OF_BOUNDS, i, opcode,
                        f"constant index {instr.arg} outside pool of {buffer.constant_count}"
                    )

            elif opcode == Opcode.LOAD_VAR:
                if not 0 <= instr.arg < VARIABLE_COUNT:
                    self._fail(
                        ValidationErrorType.INDEX_OUT_OF_BOUNDS, i, opcode,
                        f"variable index {instr.arg} outside 0-{VARIABLE_COUNT - 1}"
                    )

                variable_count = max(variable_count, instr.arg + 1)

            arity = opcode.arity
            if depth < arity:
                self._fail(
                    ValidationErrorType.STACK_UNDERFLOW, i, opcode,
                    f"needs {arity} operands, stack holds {depth}"
                )

            # Loads push one value, unary opcodes replace one, binary opcodes replace two with one
            depth += 1 - arity
            max_depth = max(max_depth, depth)

        self._fail(ValidationErrorType.MISSING_END, len(instructions), None, "program does not end with END")

    def _fail(self, error_type: ValidationErrorType, index: int, opcode: Opcode | None, message: str) -> NoReturn:
        opcode_name = opcode.name if opcode is not None else "<none>"
        raise ValidationError(
            error_type,
            f"Bytecode validation error: {message}",
            f"{opcode_name} at instruction {index}"
        )


def validate_bytecode(buffer: FLEPCodeBuffer) -> ValidationResult:
    """Validate a code buffer with a fresh validator."""
    return BytecodeValidator().validate(buffer)
