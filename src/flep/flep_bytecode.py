"""Bytecode definitions for the FLEP stack machine."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, List, Tuple, cast


def _op(n: int, arity: int, has_operand: bool = False) -> Tuple[int, int, bool]:
    """Helper to construct an Opcode value: (integer_value, stack_arity, has_operand).

    arity is the number of values the opcode pops from the evaluation stack:
      0 - pushes a value (constant or variable reference) or halts (END)
      1 - transforms the top of the stack in place (negate, functions)
      2 - pops two values and pushes one (binary operators)
    has_operand is True when the instruction carries an index (constant pool slot or
    variable number).
    """
    return (n, arity, has_operand)


class Opcode(IntEnum):
    """Bytecode operation codes.

    Each member's value is an (integer_value, arity, has_operand) tuple. The integer
    value is used for VM dispatch; arity and has_operand are exposed as properties.
    """

    _arity: int
    _has_operand: bool

    def __new__(cls, int_value: int, arity: int = 0, has_operand: bool = False) -> 'Opcode':
        obj = int.__new__(cls, int_value)
        obj._value_ = int_value
        obj._arity = arity
        obj._has_operand = has_operand
        return obj

    @property
    def arity(self) -> int:
        """Number of stack values consumed (0, 1 or 2)."""
        return self._arity

    @property
    def has_operand(self) -> bool:
        """True if the instruction carries a pool or variable index."""
        return self._has_operand

    NEG = _op(1, 1)                     # Unary minus
    ADD = _op(4, 2)                     # a + b
    SUB = _op(5, 2)                     # a - b
    MUL = _op(6, 2)                     # a * b
    DIV = _op(7, 2)                     # a / b
    POW = _op(8, 2)                     # a ^ b
    LOAD_VAR = _op(9, 0, True)          # LOAD_VAR variable_index
    LOAD_CONST = _op(10, 0, True)       # LOAD_CONST const_index
    SIN = _op(11, 1)
    COS = _op(12, 1)
    TAN = _op(13, 1)
    EXP = _op(14, 1)
    LOG = _op(15, 1)
    ABS = _op(16, 1)
    SQRT = _op(17, 1)
    END = _op(19, 0)                    # Halt, result is the single stack value


UNARY_OPCODES = frozenset(op for op in Opcode if op.arity == 1)
BINARY_OPCODES = frozenset(op for op in Opcode if op.arity == 2)

# Number of variable slots addressable by LOAD_VAR
VARIABLE_COUNT = 7


@dataclass(frozen=True, slots=True)
class Instruction:
    """Single bytecode instruction: an opcode and, for loads, its operand index."""
    opcode: Opcode
    arg: int = 0

    def __repr__(self) -> str:
        if self.opcode.has_operand:
            return f"{self.opcode.name} {self.arg}"

        return f"{self.opcode.name}"


class FLEPCodeBuffer:
    """
    Growable instruction and constant storage used while compiling one expression.

    Both sequences keep an explicit capacity that doubles whenever an append would
    exceed it. Deletions only shrink the logical length, never the capacity. Once
    frozen, any further mutation is an error.
    """

    INITIAL_CAPACITY = 16

    def __init__(self, capacity: int = INITIAL_CAPACITY) -> None:
        capacity = max(1, capacity)
        self._instructions: List[Instruction | None] = [None] * capacity
        self._constants: List[float] = [0.0] * capacity
        self.instruction_count = 0
        self.constant_count = 0
        self.frozen = False

    @property
    def instruction_capacity(self) -> int:
        """Number of instruction slots allocated."""
        return len(self._instructions)

    @property
    def constant_capacity(self) -> int:
        """Number of constant pool slots allocated."""
        return len(self._constants)

    @staticmethod
    def _grow(storage: List[Any], needed: int, fill: Any) -> None:
        capacity = len(storage)
        if needed <= capacity:
            return

        new_capacity = capacity
        while new_capacity < needed:
            new_capacity *= 2

        storage.extend([fill] * (new_capacity - capacity))

    def _check_mutable(self) -> None:
        if self.frozen:
            raise RuntimeError("Code buffer is frozen")

    def add_instruction(self, opcode: Opcode, arg: int = 0) -> int:
        """
        Append an instruction.

        Returns:
            Index of the new instruction
        """
        self._check_mutable()
        self._grow(self._instructions, self.instruction_count + 1, None)
        index = self.instruction_count
        self._instructions[index] = Instruction(opcode, arg)
        self.instruction_count += 1
        return index

    def add_constant(self, value: float) -> int:
        """
        Append a value to the constant pool.

        Returns:
            Pool index of the new constant
        """
        self._check_mutable()
        self._grow(self._constants, self.constant_count + 1, 0.0)
        index = self.constant_count
        self._constants[index] = value
        self.constant_count += 1
        return index

    def instruction(self, index: int) -> Instruction:
        """
        Return the instruction at index.

        Raises:
            IndexError: If index is not below instruction_count
        """
        if not 0 <= index < self.instruction_count:
            raise IndexError(f"Instruction index {index} out of range for {self.instruction_count} instructions")

        # Slots below instruction_count are always filled
        return cast(Instruction, self._instructions[index])

    def constant(self, index: int) -> float:
        """Return the constant pool value at index."""
        return self._constants[index]

    def set_constant(self, index: int, value: float) -> None:
        """Overwrite a constant pool slot in place."""
        self._check_mutable()
        self._constants[index] = value

    def delete_instructions(self, index: int, count: int) -> None:
        """Remove count instructions starting at index, keeping the allocated capacity."""
        self._check_mutable()
        del self._instructions[index:index + count]
        self._instructions.extend([None] * count)
        self.instruction_count -= count

    @property
    def instructions(self) -> List[Instruction]:
        """Snapshot of the used instructions."""
        return [instr for instr in self._instructions[:self.instruction_count] if instr is not None]

    @property
    def constants(self) -> List[float]:
        """Snapshot of the used constant pool slots."""
        return self._constants[:self.constant_count]

    def freeze(self) -> None:
        """Disallow any further mutation."""
        self.frozen = True

    def clear(self) -> None:
        """Drop both sequences."""
        self._instructions = []
        self._constants = []
        self.instruction_count = 0
        self.constant_count = 0


class FLEPProgram:
    """
    A compiled expression: postfix instructions, the constant pool and the metadata the
    evaluator needs.

    Programs are created by the compiler from a frozen code buffer and are read-only from
    then on. They can be evaluated any number of times, from any number of callers, until
    release() is called.
    """

    def __init__(self, buffer: FLEPCodeBuffer, max_stack_depth: int, variable_count: int, source: str = "") -> None:
        """
        Args:
            buffer: Frozen code buffer ending with an END instruction
            max_stack_depth: Proven maximum evaluation stack depth
            variable_count: One more than the highest variable index read
            source: Expression text the program was compiled from
        """
        self._buffer = buffer
        self.max_stack_depth = max_stack_depth
        self.variable_count = variable_count
        self.source = source
        self.released = False

        # Pre-resolved form for the evaluator: constants are inlined as their value
        code: List[Tuple[int, Any]] = []
        for instr in buffer.instructions:
            if instr.opcode == Opcode.LOAD_CONST:
                code.append((int(instr.opcode), buffer.constant(instr.arg)))

            else:
                code.append((int(instr.opcode), instr.arg))

        self.code: Tuple[Tuple[int, Any], ...] = tuple(code)

    @property
    def instructions(self) -> List[Instruction]:
        """Instructions in execution order, including the terminal END."""
        return self._buffer.instructions

    @property
    def constants(self) -> List[float]:
        """Constant pool, including slots left unreferenced by folding."""
        return self._buffer.constants

    @property
    def instruction_capacity(self) -> int:
        """Allocated instruction slots."""
        return self._buffer.instruction_capacity

    @property
    def constant_capacity(self) -> int:
        """Allocated constant pool slots."""
        return self._buffer.constant_capacity

    def to_code_buffer(self) -> FLEPCodeBuffer:
        """
        Return an unfrozen copy of the program's code without the terminal END.

        The copy can be fed back to an optimizer, for example to check that folding has
        already reached a fixed point.
        """
        buffer = FLEPCodeBuffer(self._buffer.instruction_capacity)
        for value in self.constants:
            buffer.add_constant(value)

        for instr in self.instructions:
            if instr.opcode != Opcode.END:
                buffer.add_instruction(instr.opcode, instr.arg)

        return buffer

    def release(self) -> None:
        """Free the program's storage. Releasing twice is a no-op."""
        if self.released:
            return

        self.released = True
        self._buffer.clear()
        self.code = ()

    def disassemble(self) -> str:
        """Return a one-line-per-instruction listing for diagnostics."""
        if self.released:
            return "<released program>"

        lines = []
        for i, instr in enumerate(self.instructions):
            if instr.opcode == Opcode.LOAD_CONST:
                lines.append(f"{i}: {instr.opcode.name} ({self._buffer.constant(instr.arg):12.6f})")

            elif instr.opcode == Opcode.LOAD_VAR:
                lines.append(f"{i}: {instr.opcode.name} ({instr.arg})")

            else:
                lines.append(f"{i}: {instr.opcode.name}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        state = "released" if self.released else f"{len(self.code)} instructions"
        return f"FLEPProgram({self.source!r}, {state})"
