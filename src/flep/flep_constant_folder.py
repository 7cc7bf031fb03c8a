"""
FLEP constant folder - precomputes operations whose operands are literals.
"""

from flep.flep_bytecode import BINARY_OPCODES, UNARY_OPCODES, FLEPCodeBuffer, Opcode
from flep.flep_math import BINARY_FUNCTIONS, UNARY_FUNCTIONS
from flep.flep_optimization_pass import FLEPOptimizationPass


class FLEPConstantFolder(FLEPOptimizationPass):
    """
    Fold constant operations in a single backward scan.

    Rewrites applied at each position, re-checked at the same position after any rewrite
    so that folds cascade:
        NEG NEG                     -> (nothing)
        LOAD_CONST c, unary op      -> LOAD_CONST op(c)
        LOAD_CONST c, LOAD_CONST d, binary op -> LOAD_CONST op(c, d)

    Results overwrite the first constant's pool slot. Slots that are no longer referenced
    stay in the pool.

    Examples:
        2+3*4       -> LOAD_CONST 14
        -(-a)       -> LOAD_VAR a
        sqrt(4)*a   -> LOAD_CONST 2, LOAD_VAR a, MUL
    """

    name = "constant_folding"

    def optimize(self, buffer: FLEPCodeBuffer) -> int:
        """
        Fold constants in place.

        Args:
            buffer: Code buffer to rewrite

        Returns:
            Number of rewrites applied
        """
        rewrites = 0
        i = buffer.instruction_count - 1
        while i >= 0:
            if i < buffer.instruction_count and self._rewrite_at(buffer, i):
                rewrites += 1
                continue

            i -= 1

        return rewrites

    def _rewrite_at(self, buffer: FLEPCodeBuffer, i: int) -> bool:
        """Apply the first rewrite that matches at position i."""
        count = buffer.instruction_count
        if i + 1 >= count:
            return False

        instr = buffer.instruction(i)
        following = buffer.instruction(i + 1)

        if instr.opcode == Opcode.NEG and following.opcode == Opcode.NEG:
            buffer.delete_instructions(i, 2)
            return True

        if instr.opcode != Opcode.LOAD_CONST:
            return False

        if following.opcode in UNARY_OPCODES:
            unary = UNARY_FUNCTIONS[following.opcode]
            buffer.set_constant(instr.arg, unary(buffer.constant(instr.arg)))
            buffer.delete_instructions(i + 1, 1)
            return True

        if following.opcode != Opcode.LOAD_CONST or i + 2 >= count:
            return False

        operator = buffer.instruction(i + 2).opcode
        if operator not in BINARY_OPCODES:
            return False

        binary = BINARY_FUNCTIONS[operator]
        buffer.set_constant(instr.arg, binary(buffer.constant(instr.arg), buffer.constant(following.arg)))
        buffer.delete_instructions(i + 1, 2)
        return True
