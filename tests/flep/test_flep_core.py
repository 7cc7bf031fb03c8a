"""Tests for the FLEP facade: compile, evaluate, release, translate and dump together."""

import logging
import math

import pytest

from flep import FLEP, FLEPCompileError, FLEPErrorKind


class TestFLEPBasics:
    """Test the public operation surface end to end."""

    def test_initialization(self):
        """Test constructor settings."""
        flep = FLEP(max_depth=50, optimize=False)
        assert flep.max_depth == 50
        assert flep.optimize is False

    def test_defaults(self, flep):
        """Test default settings."""
        assert flep.max_depth == 200
        assert flep.optimize is True

    def test_round_trip(self, flep):
        """Test the full compile, evaluate, release cycle."""
        program = flep.compile("sin(2.2 * a) + cos(pi / b)")
        value = flep.evaluate(program, [0.5, 2.0])
        assert value == pytest.approx(math.sin(1.1) + math.cos(math.pi / 2.0))
        flep.release(program)
        assert program.released

    def test_independent_programs(self, flep):
        """Test that programs share no state."""
        first = flep.compile("a+1")
        second = flep.compile("a*10")
        flep.release(first)
        assert flep.evaluate(second, [2.0]) == 20.0

    def test_translate_error_from_compile(self, flep):
        """Test translating the kind carried by a compile error."""
        with pytest.raises(FLEPCompileError) as exc_info:
            flep.compile("cos 1")

        assert exc_info.value.kind == FLEPErrorKind.EXPECTED_OPEN
        assert flep.translate(exc_info.value.kind) == "expected '(' after function name"

    def test_whitespace_tolerated(self, flep, helpers):
        """Test that whitespace between tokens is ignored."""
        helpers.assert_evaluates_to(flep, "  2 *\t( a +  1 )  ", 8.0, [3.0])


class TestFLEPLogging:
    """Test diagnostic logging."""

    def test_compile_failure_logged(self, flep, caplog):
        """Test that compile failures are logged at debug level."""
        caplog.set_level(logging.DEBUG, logger="FLEP")
        with pytest.raises(FLEPCompileError):
            flep.compile("a+")

        assert "Failed to compile 'a+': BAD_SYNTAX at position 3" in caplog.text

    def test_compile_progress_logged(self, flep, caplog):
        """Test that the compiler reports what it produced."""
        caplog.set_level(logging.DEBUG, logger="FLEPCompiler")
        flep.compile("a*b")
        assert "Compiled 'a*b' to 4 instructions, 0 constants, stack depth 2" in caplog.text

    def test_folding_logged(self, flep, caplog):
        """Test that applied passes are logged."""
        caplog.set_level(logging.DEBUG, logger="FLEPOptimizer")
        flep.compile("2+3*4")
        assert "Pass 'constant_folding' applied 2 rewrites: 5 -> 1 instructions" in caplog.text
