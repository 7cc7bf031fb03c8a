"""
Command-line interface for the FLEP driver.
"""

import argparse
import logging
from logging.handlers import RotatingFileHandler
import os
import sys
from typing import List, TextIO

from flep import FLEP, FLEPCompileError, FLEPError, FLEPLexer

from flep_driver.benchmark import FLEPBenchmark
from flep_driver.config import FLEPDriverConfig


def setup_logging(verbose: bool, log_file: str | None) -> None:
    """Configure driver logging, to a rotating file if one is given, otherwise stderr."""
    handlers: List[logging.Handler] = []
    if log_file:
        handlers.append(RotatingFileHandler(
            log_file,
            maxBytes=1024*1024,  # 1MB
            backupCount=9,
            encoding='utf-8'
        ))

    else:
        handlers.append(logging.StreamHandler(sys.stderr))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )


def read_expressions(stream: TextIO) -> List[str]:
    """Read one expression per line, skipping blank lines and '#' comments."""
    expressions = []
    for line in stream:
        expression = line.strip()
        if not expression or expression.startswith('#'):
            continue

        expressions.append(expression)

    return expressions


def format_compile_error(error: FLEPCompileError, expression: str) -> str:
    """Describe a compile failure with a caret under the failing position."""
    return f"FLEP failed to parse ({FLEP.translate(error.kind)})\n{expression}\n{'^':>{error.position}}"


def parse_variable_assignments(assignments: List[str]) -> dict[str, float]:
    """
    Parse "a=1.5" style assignments.

    Raises:
        ValueError: If an assignment is malformed or names an unknown variable
    """
    variables = {}
    for assignment in assignments:
        name, sep, value = assignment.partition('=')
        name = name.strip()
        if not sep or len(name) != 1 or name not in FLEPLexer.VARIABLE_LETTERS:
            raise ValueError(
                f"Invalid variable assignment '{assignment}', expected <letter>=<value> "
                f"with letter in '{FLEPLexer.VARIABLE_LETTERS}'"
            )

        variables[name] = float(value)

    return variables


def main(argv: List[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="flep",
        description="FLEP - Fast Lite Expression Parser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s parse expressions.txt          # Compile every expression in a file
  %(prog)s eval "a^2 + b" -v a=3 -v b=1   # Evaluate one expression
  %(prog)s dump "2+3*4" --tokens          # Show the tokens and compiled opcodes
  %(prog)s bench                          # Compare against native Python
  %(prog)s init-config --config flep.yaml # Write a default configuration
        """
    )
    parser.add_argument('--config', '-c', help='YAML configuration file')
    parser.add_argument('--no-optimize', action='store_true', help='Disable constant folding')
    parser.add_argument('--log-file', help='Write logs to this file')
    parser.add_argument('--verbose', action='store_true', help='Verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    parse_parser = subparsers.add_parser('parse', help='Compile expressions from a file')
    parse_parser.add_argument('file', help='File with one expression per line')
    parse_parser.add_argument('--dump', action='store_true', help='Show opcodes of each compiled expression')

    eval_parser = subparsers.add_parser('eval', help='Evaluate one expression')
    eval_parser.add_argument('expression', help='Expression to evaluate')
    eval_parser.add_argument('--var', '-v', action='append', default=[], help='Variable value, e.g. a=1.5')

    dump_parser = subparsers.add_parser('dump', help='Show the opcodes of one expression')
    dump_parser.add_argument('expression', help='Expression to compile')
    dump_parser.add_argument('--tokens', action='store_true', help='Show the lexer tokens before the opcodes')

    bench_parser = subparsers.add_parser('bench', help='Benchmark built-in expressions against native code')
    bench_parser.add_argument('--iterations', '-n', type=int, help='Evaluations per timing run')

    init_parser = subparsers.add_parser('init-config', help='Write a default configuration file')
    init_parser.add_argument('--force', action='store_true', help='Overwrite an existing file')

    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.log_file)
    logger = logging.getLogger("FLEPDriver")

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == 'init-config':
            return handle_init_config(args)

        config = load_config(args)
        errors = config.validate()
        if errors:
            print("Configuration errors found:")
            for error in errors:
                print(f"  - {error}")

            return 1

        if args.command == 'parse':
            return handle_parse(args, config)

        if args.command == 'eval':
            return handle_eval(args, config)

        if args.command == 'dump':
            return handle_dump(args, config)

        if args.command == 'bench':
            return handle_bench(args, config)

        print(f"Unknown command: {args.command}")
        return 1

    except (OSError, ValueError, FLEPError) as e:
        logger.error("Command '%s' failed: %s", args.command, e, exc_info=args.verbose)
        print(f"Error: {e}")
        return 1


def load_config(args: argparse.Namespace) -> FLEPDriverConfig:
    """Load the configuration file, if any, and apply command-line overrides."""
    config = FLEPDriverConfig.load_from_file(args.config) if args.config else FLEPDriverConfig()
    if args.no_optimize:
        config.optimize = False

    if getattr(args, 'dump', False):
        config.dump = True

    if getattr(args, 'iterations', None) is not None:
        config.benchmark_iterations = args.iterations

    return config


def handle_parse(args: argparse.Namespace, config: FLEPDriverConfig) -> int:
    """Handle the parse command: compile only, report failures, summarize."""
    with open(args.file, 'r', encoding='utf-8') as f:
        expressions = read_expressions(f)

    print(f"Reading expressions from \"{args.file}\" (compile only).")
    flep = FLEP(max_depth=config.max_depth, optimize=config.optimize)
    bad = 0
    for expression in expressions:
        try:
            program = flep.compile(expression)

        except FLEPCompileError as e:
            print(format_compile_error(e, expression))
            bad += 1
            continue

        print(f"\"{expression}\"")
        if config.dump:
            print(flep.dump(program))

        flep.release(program)

    total = len(expressions)
    print(f"Successfully parsed {total - bad} of {total} expressions from \"{args.file}\"")
    return 0 if bad == 0 else 1


def handle_eval(args: argparse.Namespace, config: FLEPDriverConfig) -> int:
    """Handle the eval command."""
    config.variables.update(parse_variable_assignments(args.var))
    errors = config.validate()
    if errors:
        for error in errors:
            print(f"  - {error}")

        return 1

    flep = FLEP(max_depth=config.max_depth, optimize=config.optimize)
    try:
        program = flep.compile(args.expression)

    except FLEPCompileError as e:
        print(format_compile_error(e, args.expression))
        return 1

    try:
        print(repr(flep.evaluate(program, config.variable_vector())))

    finally:
        flep.release(program)

    return 0


def handle_dump(args: argparse.Namespace, config: FLEPDriverConfig) -> int:
    """Handle the dump command."""
    if args.tokens:
        for token in FLEPLexer.lex(args.expression):
            print(repr(token))

        print()

    flep = FLEP(max_depth=config.max_depth, optimize=config.optimize)
    try:
        program = flep.compile(args.expression)

    except FLEPCompileError as e:
        print(format_compile_error(e, args.expression))
        return 1

    print(flep.dump(program))
    flep.release(program)
    return 0


def handle_bench(_args: argparse.Namespace, config: FLEPDriverConfig) -> int:
    """Handle the bench command."""
    print("Using built-in test expressions (compile and run).")
    print(f"Expressions will be evaluated {config.benchmark_iterations} times in benchmark\n")
    print("Column A: relative error of FLEP to native implementation in %")
    print("Column B: relative time of FLEP to native implementation (ratio)")
    print("Column C: test expression\n")
    print(f" {'A':>8} | {'B':>6} | C")

    benchmark = FLEPBenchmark(config)
    for result in benchmark.run():
        print(f" {result.relative_error_percent:7.4f}% | {result.time_ratio:6.2f} | {result.expression}")

    return 0


def handle_init_config(args: argparse.Namespace) -> int:
    """Handle the init-config command."""
    config_path = args.config or 'flep.yaml'
    if os.path.exists(config_path) and not args.force:
        print(f"Configuration file already exists: {config_path}")
        print("Use --force to overwrite.")
        return 1

    FLEPDriverConfig.create_default().save_to_file(config_path)
    print(f"Created configuration file: {config_path}")
    return 0
