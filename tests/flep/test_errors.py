"""Tests for compile error kinds, positions, messages and the translate table."""

import pytest

from flep import (
    ERROR_MESSAGES, FLEP, FLEPCompileError, FLEPError, FLEPErrorKind, FLEPEvalError, translate
)


class TestCompileErrorKinds:
    """Test error kinds and their 1-based positions."""

    def test_function_without_parenthesis(self, flep, helpers):
        """Test that sin2 fails with expected-open at the offset of 2."""
        helpers.assert_compile_error(flep, "sin2", FLEPErrorKind.EXPECTED_OPEN, 4)

    def test_missing_close_parenthesis(self, flep, helpers):
        """Test that (a+b fails as unbalanced at end of input."""
        helpers.assert_compile_error(flep, "(a+b", FLEPErrorKind.UNBALANCED, 5)

    def test_bad_token_after_operator(self, flep, helpers):
        """Test that a+$ fails with bad-token at the offset of $."""
        helpers.assert_compile_error(flep, "a+$", FLEPErrorKind.BAD_TOKEN, 3)

    def test_undefined_identifier(self, flep, helpers):
        """Test that an unknown variable name is a bad token."""
        helpers.assert_compile_error(flep, "d", FLEPErrorKind.BAD_TOKEN, 1)

    @pytest.mark.parametrize("expression,kind,position", [
        ("", FLEPErrorKind.BAD_SYNTAX, 1),
        ("   ", FLEPErrorKind.BAD_SYNTAX, 4),
        ("a+", FLEPErrorKind.BAD_SYNTAX, 3),
        ("a*", FLEPErrorKind.BAD_SYNTAX, 3),
        ("*a", FLEPErrorKind.BAD_SYNTAX, 1),
        ("a b", FLEPErrorKind.BAD_SYNTAX, 3),
        ("2(3)", FLEPErrorKind.BAD_SYNTAX, 2),
        ("a)", FLEPErrorKind.BAD_SYNTAX, 2),
        ("()", FLEPErrorKind.BAD_SYNTAX, 2),
        ("(a+)", FLEPErrorKind.BAD_SYNTAX, 4),
        ("a^", FLEPErrorKind.BAD_SYNTAX, 3),
        ("((a)", FLEPErrorKind.UNBALANCED, 5),
        ("sin(a", FLEPErrorKind.UNBALANCED, 6),
        ("(a b)", FLEPErrorKind.UNBALANCED, 4),
        ("sin a", FLEPErrorKind.EXPECTED_OPEN, 5),
        ("sqrt", FLEPErrorKind.EXPECTED_OPEN, 5),
        ("2*cos+1", FLEPErrorKind.EXPECTED_OPEN, 6),
        ("a $", FLEPErrorKind.BAD_TOKEN, 3),
        ("(a$", FLEPErrorKind.BAD_TOKEN, 3),
        # A bad token outranks the grammar error, so sin$ reports BAD_TOKEN rather than EXPECTED_OPEN
        ("sin$", FLEPErrorKind.BAD_TOKEN, 4),
        ("SIN(a)", FLEPErrorKind.BAD_TOKEN, 1),
        ("a+foo", FLEPErrorKind.BAD_TOKEN, 3),
        ("1.5.2", FLEPErrorKind.BAD_TOKEN, 4),
    ])
    def test_error_table(self, flep, helpers, expression, kind, position):
        """Test kind and position for a range of malformed expressions."""
        helpers.assert_compile_error(flep, expression, kind, position)

    def test_errors_independent_of_optimization(self, flep_unoptimized, helpers):
        """Test that folding has no influence on error reporting."""
        helpers.assert_compile_error(flep_unoptimized, "(2+3", FLEPErrorKind.UNBALANCED, 5)
        helpers.assert_compile_error(flep_unoptimized, "2+#", FLEPErrorKind.BAD_TOKEN, 3)


class TestCompileErrorDetails:
    """Test the exception object and its message."""

    def test_error_fields(self, flep):
        """Test that the error carries kind, position and source."""
        with pytest.raises(FLEPCompileError) as exc_info:
            flep.compile("(a+b")

        error = exc_info.value
        assert isinstance(error, FLEPError)
        assert error.kind == FLEPErrorKind.UNBALANCED
        assert error.position == 5
        assert error.source == "(a+b"
        assert error.message == "unbalanced parentheses"
        assert error.received == "end of expression"
        assert error.expected == "')'"

    def test_message_contains_caret(self, flep):
        """Test that the message points at the failing position."""
        with pytest.raises(FLEPCompileError) as exc_info:
            flep.compile("(a+b")

        message = str(exc_info.value)
        assert message.startswith("Error: unbalanced parentheses")
        assert "Position: 5" in message
        assert "  (a+b\n      ^" in message

    def test_bad_token_received(self, flep):
        """Test that a bad token is quoted in the message."""
        with pytest.raises(FLEPCompileError, match="Received: '\\$'"):
            flep.compile("a+$")

    def test_expected_open_suggestion(self, flep):
        """Test that a missing function parenthesis suggests the fix."""
        with pytest.raises(FLEPCompileError, match="Suggestion: Write the argument in parentheses: sin\\(x\\)"):
            flep.compile("sin2")

    def test_compile_failure_returns_nothing(self, flep):
        """Test that a failed compile leaves no program behind."""
        program = None
        with pytest.raises(FLEPCompileError):
            program = flep.compile("a+")

        assert program is None


class TestTranslate:
    """Test the static error message table."""

    @pytest.mark.parametrize("kind,text", [
        (FLEPErrorKind.OK, "no error"),
        (FLEPErrorKind.BAD_SYNTAX, "bad expression syntax"),
        (FLEPErrorKind.BAD_TOKEN, "bad token"),
        (FLEPErrorKind.EXPECTED_OPEN, "expected '(' after function name"),
        (FLEPErrorKind.UNBALANCED, "unbalanced parentheses"),
        (FLEPErrorKind.TOO_DEEP, "expression nested too deeply"),
    ])
    def test_messages(self, kind, text):
        """Test each error kind's text."""
        assert translate(kind) == text
        assert FLEP.translate(kind) == text

    @pytest.mark.parametrize("code,kind", [
        (0, FLEPErrorKind.OK),
        (20, FLEPErrorKind.BAD_SYNTAX),
        (21, FLEPErrorKind.BAD_TOKEN),
        (22, FLEPErrorKind.EXPECTED_OPEN),
        (23, FLEPErrorKind.UNBALANCED),
        (24, FLEPErrorKind.TOO_DEEP),
    ])
    def test_integer_codes(self, code, kind):
        """Test that legacy integer codes translate like their kinds."""
        assert translate(code) == ERROR_MESSAGES[kind]

    def test_unknown_code(self):
        """Test that an unknown code is rejected."""
        with pytest.raises(ValueError):
            translate(99)

    def test_table_is_read_only(self):
        """Test that the message table cannot be modified."""
        with pytest.raises(TypeError):
            ERROR_MESSAGES[FLEPErrorKind.OK] = "changed"  # type: ignore[index]

    def test_every_kind_has_text(self):
        """Test that the table covers every error kind."""
        assert set(ERROR_MESSAGES) == set(FLEPErrorKind)


class TestEvalErrors:
    """Test evaluation contract checks."""

    def test_released_program(self, flep):
        """Test that evaluating a released program fails cleanly."""
        program = flep.compile("a+1")
        flep.release(program)
        with pytest.raises(FLEPEvalError, match="released program"):
            flep.evaluate(program, [1.0])

    def test_too_few_variables(self, flep):
        """Test that a short variable vector is rejected before evaluation."""
        program = flep.compile("a+w")
        with pytest.raises(FLEPEvalError, match="reads 7 variables, got 6"):
            flep.evaluate(program, [1.0] * 6)

        assert flep.evaluate(program, [1.0] * 7) == 2.0

    def test_constant_program_needs_no_variables(self, flep):
        """Test that a program without variables accepts an empty vector."""
        program = flep.compile("2*3")
        assert program.variable_count == 0
        assert flep.evaluate(program) == 6.0
