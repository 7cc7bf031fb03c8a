"""FLEP compiler - recursive-descent parser that emits postfix bytecode directly."""

import logging
import sys
from dataclasses import dataclass, field
from typing import NoReturn

from flep.flep_bytecode import FLEPCodeBuffer, FLEPProgram, Opcode
from flep.flep_bytecode_validator import BytecodeValidator
from flep.flep_error import FLEPCompileError, FLEPErrorKind
from flep.flep_lexer import FLEPLexer
from flep.flep_optimizer import FLEPOptimizer
from flep.flep_token import FLEPToken, FLEPTokenType


@dataclass
class CompilationContext:
    """State for compiling one expression: token stream, output buffer and nesting depth."""
    lexer: FLEPLexer
    buffer: FLEPCodeBuffer = field(default_factory=FLEPCodeBuffer)
    depth: int = 0


class FLEPCompiler:
    """
    Compiles FLEP expressions to postfix bytecode.

    Grammar, one method per level, lowest precedence first:

        sum     := product (('+' | '-')+ product)*
        product := power (('*' | '/') power)*
        power   := operand ('^' power)?
        operand := '(' sum ')' | sign operand | function operand | constant | variable

    Every parse method leaves the token that follows its production as the lexer's current
    token and returns it, so callers decide whether to continue a loop without peeking.
    Instructions are emitted as each production completes, which yields postfix order.
    """

    DEFAULT_MAX_DEPTH = 200

    # Each nesting unit costs at most two Python frames; the rest of the limit is left to callers
    FRAMES_PER_DEPTH = 2
    RECURSION_RESERVE = 200

    # Token kinds after which '+' is a prefix sign
    UNARY_PLUS_CONTEXTS = frozenset({
        FLEPTokenType.START, FLEPTokenType.OPEN, FLEPTokenType.PLUS,
        FLEPTokenType.MULT, FLEPTokenType.DIV, FLEPTokenType.POWER,
    })

    # Token kinds after which '-' negates a whole product
    NEGATE_PRODUCT_CONTEXTS = frozenset({
        FLEPTokenType.START, FLEPTokenType.OPEN, FLEPTokenType.MULT, FLEPTokenType.DIV,
    })

    FUNCTION_OPCODES = {
        FLEPTokenType.SIN: Opcode.SIN,
        FLEPTokenType.COS: Opcode.COS,
        FLEPTokenType.TAN: Opcode.TAN,
        FLEPTokenType.EXP: Opcode.EXP,
        FLEPTokenType.LOG: Opcode.LOG,
        FLEPTokenType.ABS: Opcode.ABS,
        FLEPTokenType.SQRT: Opcode.SQRT,
    }

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH, optimizer: FLEPOptimizer | None = None) -> None:
        """
        Initialize the compiler.

        Args:
            max_depth: Maximum nesting of operands and power chains before compilation fails
            optimizer: Optimizer run over the bytecode before END is appended, or None to skip

        Raises:
            ValueError: If max_depth is below 1 or deeper than the interpreter's recursion limit allows
        """
        limit = self.max_supported_depth()
        if not 1 <= max_depth <= limit:
            raise ValueError(
                f"max_depth must be between 1 and {limit} for recursion limit {sys.getrecursionlimit()}, "
                f"got {max_depth}"
            )

        self.max_depth = max_depth
        self.optimizer = optimizer
        self._validator = BytecodeValidator()
        self._logger = logging.getLogger("FLEPCompiler")

    @classmethod
    def max_supported_depth(cls) -> int:
        """Deepest max_depth the parser can reach under the current recursion limit."""
        return max(1, (sys.getrecursionlimit() - cls.RECURSION_RESERVE) // cls.FRAMES_PER_DEPTH)

    def compile(self, source: str) -> FLEPProgram:
        """
        Compile an expression into a finished program.

        Args:
            source: Expression text

        Returns:
            The compiled, optimized and validated program

        Raises:
            FLEPCompileError: If the expression is malformed
        """
        self._logger.debug("Compiling expression: %s", source)
        ctx = CompilationContext(lexer=FLEPLexer(source))
        ctx.lexer.advance()

        try:
            token = self._parse_sum(ctx)

        except RecursionError:
            self._fail(
                ctx, FLEPErrorKind.TOO_DEEP,
                suggestion="Reduce nesting or raise the interpreter recursion limit"
            )

        if token.type != FLEPTokenType.END:
            self._fail(ctx, FLEPErrorKind.BAD_SYNTAX, expected="end of expression")

        buffer = ctx.buffer
        if self.optimizer is not None:
            self.optimizer.optimize(buffer)

        buffer.add_instruction(Opcode.END)
        buffer.freeze()
        result = self._validator.validate(buffer)

        self._logger.debug(
            "Compiled '%s' to %d instructions, %d constants, stack depth %d",
            source, buffer.instruction_count, buffer.constant_count, result.max_stack_depth
        )
        return FLEPProgram(buffer, result.max_stack_depth, result.variable_count, source)

    def _fail(
        self,
        ctx: CompilationContext,
        kind: FLEPErrorKind,
        expected: str | None = None,
        suggestion: str | None = None
    ) -> NoReturn:
        """Raise a compile error at the current token; a bad token always reports as such."""
        token = ctx.lexer.current
        if token.type == FLEPTokenType.BAD_TOKEN:
            kind = FLEPErrorKind.BAD_TOKEN
            expected = "a number, variable (a b c x y z w), constant (e pi), function, operator or parenthesis"
            suggestion = None

        raise FLEPCompileError(
            kind,
            token.position + 1,
            ctx.lexer.expression,
            received=self._describe(token),
            expected=expected,
            suggestion=suggestion
        )

    @staticmethod
    def _describe(token: FLEPToken) -> str:
        if token.type == FLEPTokenType.END:
            return "end of expression"

        if token.type == FLEPTokenType.BAD_TOKEN:
            return f"'{token.value}'"

        if token.type == FLEPTokenType.CONSTANT:
            return f"number {token.value!r}"

        if token.type == FLEPTokenType.VARIABLE:
            return f"variable '{FLEPLexer.VARIABLE_LETTERS[int(token.value or 0)]}'"

        return f"'{token.type.value}'"

    def _enter(self, ctx: CompilationContext) -> None:
        ctx.depth += 1
        if ctx.depth > self.max_depth:
            self._fail(
                ctx, FLEPErrorKind.TOO_DEEP,
                suggestion=f"Reduce nesting below {self.max_depth} levels"
            )

    def _parse_sum(self, ctx: CompilationContext) -> FLEPToken:
        """Parse a left-associative chain of products joined by runs of '+' and '-'."""
        lexer = ctx.lexer
        token = self._parse_product(ctx)
        while token.type in (FLEPTokenType.PLUS, FLEPTokenType.MINUS):
            sign = token.type
            token = lexer.advance()

            # Collapse sign runs such as "a+-b" or "a--b": an odd number of minuses is a minus
            while token.type in (FLEPTokenType.PLUS, FLEPTokenType.MINUS):
                sign = FLEPTokenType.PLUS if sign == token.type else FLEPTokenType.MINUS
                token = lexer.advance()

            token = self._parse_product(ctx)
            ctx.buffer.add_instruction(Opcode.ADD if sign == FLEPTokenType.PLUS else Opcode.SUB)

        return token

    def _parse_product(self, ctx: CompilationContext) -> FLEPToken:
        """Parse a left-associative chain of powers joined by '*' and '/'."""
        token = self._parse_power(ctx)
        while token.type in (FLEPTokenType.MULT, FLEPTokenType.DIV):
            opcode = Opcode.MUL if token.type == FLEPTokenType.MULT else Opcode.DIV
            ctx.lexer.advance()
            token = self._parse_power(ctx)
            ctx.buffer.add_instruction(opcode)

        return token

    def _parse_power(self, ctx: CompilationContext) -> FLEPToken:
        """Parse a right-associative power chain: right recursion makes 2^3^2 mean 2^(3^2)."""
        self._enter(ctx)
        token = self._parse_operand(ctx)
        if token.type == FLEPTokenType.POWER:
            ctx.lexer.advance()
            token = self._parse_power(ctx)
            ctx.buffer.add_instruction(Opcode.POW)

        ctx.depth -= 1
        return token

    def _parse_operand(self, ctx: CompilationContext) -> FLEPToken:
        """Parse a parenthesized sum, a signed operand, a function call, a constant or a variable."""
        self._enter(ctx)
        lexer = ctx.lexer
        buffer = ctx.buffer
        token = lexer.current
        token_type = token.type

        if token_type == FLEPTokenType.OPEN:
            lexer.advance()
            if self._parse_sum(ctx).type != FLEPTokenType.CLOSE:
                self._fail(ctx, FLEPErrorKind.UNBALANCED, expected="')'", suggestion="Add the missing ')'")

            result = lexer.advance()

        elif token_type == FLEPTokenType.PLUS:
            if lexer.previous_type not in self.UNARY_PLUS_CONTEXTS:
                self._fail(ctx, FLEPErrorKind.BAD_SYNTAX, expected="an operand")

            lexer.advance()
            result = self._parse_operand(ctx)

        elif token_type == FLEPTokenType.MINUS:
            previous_type = lexer.previous_type
            lexer.advance()
            if previous_type in self.NEGATE_PRODUCT_CONTEXTS:
                # "-a*b" negates the product; binds looser than '^', tighter than '+'
                result = self._parse_product(ctx)

            elif previous_type == FLEPTokenType.POWER:
                # "2^-a^b" negates only the power-level operand
                result = self._parse_power(ctx)

            else:
                # A sign following a prefix sign, as in "--a" or "+-a"
                result = self._parse_operand(ctx)

            buffer.add_instruction(Opcode.NEG)

        elif token_type in self.FUNCTION_OPCODES:
            opcode = self.FUNCTION_OPCODES[token_type]
            if lexer.advance().type != FLEPTokenType.OPEN:
                self._fail(
                    ctx, FLEPErrorKind.EXPECTED_OPEN,
                    expected="'('",
                    suggestion=f"Write the argument in parentheses: {token_type.value}(x)"
                )

            result = self._parse_operand(ctx)
            buffer.add_instruction(opcode)

        elif token_type == FLEPTokenType.CONSTANT:
            index = buffer.add_constant(float(token.value or 0.0))
            buffer.add_instruction(Opcode.LOAD_CONST, index)
            result = lexer.advance()

        elif token_type == FLEPTokenType.VARIABLE:
            buffer.add_instruction(Opcode.LOAD_VAR, int(token.value or 0))
            result = lexer.advance()

        else:
            self._fail(ctx, FLEPErrorKind.BAD_SYNTAX, expected="an operand")

        ctx.depth -= 1
        return result
