"""FLEP (Fast Lite Expression Parser) package."""

# Main API
from flep.flep import FLEP

# Exceptions and error kinds
from flep.flep_error import (
    FLEPError, FLEPCompileError, FLEPEvalError, FLEPValidationError, FLEPErrorKind, ERROR_MESSAGES, translate
)

# Compiled program representation
from flep.flep_bytecode import FLEPProgram, FLEPCodeBuffer, Instruction, Opcode

# Lower-level components (for advanced usage)
from flep.flep_token import FLEPToken, FLEPTokenType
from flep.flep_lexer import FLEPLexer
from flep.flep_compiler import FLEPCompiler
from flep.flep_optimizer import FLEPOptimizer
from flep.flep_constant_folder import FLEPConstantFolder
from flep.flep_vm import FLEPVM


__all__ = [
    # Main API
    "FLEP",

    # Exceptions
    "FLEPError", "FLEPCompileError", "FLEPEvalError", "FLEPValidationError", "FLEPErrorKind", "ERROR_MESSAGES",
    "translate",

    # Programs
    "FLEPProgram", "FLEPCodeBuffer", "Instruction", "Opcode",

    # Lower-level components
    "FLEPToken", "FLEPTokenType", "FLEPLexer", "FLEPCompiler", "FLEPOptimizer", "FLEPConstantFolder", "FLEPVM"
]
