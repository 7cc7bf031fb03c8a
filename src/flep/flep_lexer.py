"""Streaming lexer for FLEP expressions."""

import math
import re
import string
from typing import List

from flep.flep_token import FLEPToken, FLEPTokenType


class FLEPLexer:
    """
    Lexes a FLEP expression one token at a time.

    The compiler only ever needs the current token and the kind of the token before it
    (unary sign handling depends on it), so the lexer produces tokens on demand rather
    than building a list up front.
    """

    # Single-letter variables, indexed by their position in this string
    VARIABLE_LETTERS = "abcxyzw"

    # Three-letter function keywords, in match priority order
    THREE_LETTER_FUNCTIONS = {
        'sin': FLEPTokenType.SIN,
        'cos': FLEPTokenType.COS,
        'tan': FLEPTokenType.TAN,
        'exp': FLEPTokenType.EXP,
        'log': FLEPTokenType.LOG,
        'abs': FLEPTokenType.ABS,
    }

    SYMBOLS = {
        '(': FLEPTokenType.OPEN,
        ')': FLEPTokenType.CLOSE,
        '+': FLEPTokenType.PLUS,
        '-': FLEPTokenType.MINUS,
        '*': FLEPTokenType.MULT,
        '/': FLEPTokenType.DIV,
        '^': FLEPTokenType.POWER,
    }

    # Integer part, optional fraction, optional exponent
    _NUMBER_PATTERN = re.compile(r'[0-9]+(?:\.[0-9]*)?(?:[eE][+-]?[0-9]+)?')

    _LETTERS = frozenset(string.ascii_letters)
    _DIGITS = frozenset(string.digits)
    _WHITESPACE = frozenset(string.whitespace)

    def __init__(self, expression: str) -> None:
        """
        Initialize the lexer positioned before the first token.

        Args:
            expression: The expression string to lex
        """
        self.expression = expression
        self._next_index = 0
        self.current = FLEPToken(FLEPTokenType.START, None, 0, 0)
        self.previous = self.current

    @property
    def previous_type(self) -> FLEPTokenType:
        """Kind of the token before the current one."""
        return self.previous.type

    def advance(self) -> FLEPToken:
        """
        Move to the next token.

        Returns:
            The new current token
        """
        self.previous = self.current
        self.current = self._read_token()
        return self.current

    def _read_token(self) -> FLEPToken:
        expression = self.expression
        i = self._next_index
        while i < len(expression) and expression[i] in self._WHITESPACE:
            i += 1

        if i >= len(expression):
            self._next_index = i
            return FLEPToken(FLEPTokenType.END, None, i, 0)

        next_char = expression[i]

        if next_char in self._LETTERS:
            end = i + 1
            while end < len(expression) and expression[end] in self._LETTERS:
                end += 1

            self._next_index = end
            return self._classify_word(expression[i:end], i)

        if next_char in self._DIGITS:
            match = self._NUMBER_PATTERN.match(expression, i)
            if match is None:
                self._next_index = i + 1
                return FLEPToken(FLEPTokenType.BAD_TOKEN, next_char, i)

            self._next_index = match.end()
            return FLEPToken(FLEPTokenType.CONSTANT, float(match.group()), i, match.end() - i)

        self._next_index = i + 1
        symbol_type = self.SYMBOLS.get(next_char)
        if symbol_type is None:
            return FLEPToken(FLEPTokenType.BAD_TOKEN, next_char, i)

        return FLEPToken(symbol_type, None, i)

    def _classify_word(self, word: str, position: int) -> FLEPToken:
        """Map an alphabetic run to a variable, constant, function or bad token."""
        length = len(word)
        if length == 1:
            if word == 'e':
                return FLEPToken(FLEPTokenType.CONSTANT, math.e, position)

            index = self.VARIABLE_LETTERS.find(word)
            if index >= 0:
                return FLEPToken(FLEPTokenType.VARIABLE, index, position)

        elif length == 2:
            if word == 'pi':
                return FLEPToken(FLEPTokenType.CONSTANT, math.pi, position, 2)

        elif length == 3:
            function_type = self.THREE_LETTER_FUNCTIONS.get(word)
            if function_type is not None:
                return FLEPToken(function_type, None, position, 3)

        elif length == 4:
            if word == 'sqrt':
                return FLEPToken(FLEPTokenType.SQRT, None, position, 4)

        return FLEPToken(FLEPTokenType.BAD_TOKEN, word, position, length)

    @staticmethod
    def lex(expression: str) -> List[FLEPToken]:
        """
        Lex a whole expression, used by the dump command's token listing and by tests.

        Bad tokens are included and lexing continues after them.

        Args:
            expression: The expression string to lex

        Returns:
            List of tokens, always terminated by an END token
        """
        lexer = FLEPLexer(expression)
        tokens = []
        while True:
            token = lexer.advance()
            tokens.append(token)
            if token.type == FLEPTokenType.END:
                return tokens

