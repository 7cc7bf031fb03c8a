"""
Accuracy and speed comparison of FLEP against native Python code.

Each reference expression is paired with a hand-written function over the math module.
Accuracy is the mean relative error over a grid of (a, b) values; speed is the ratio of
FLEP evaluation time to native evaluation time.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from flep import FLEP, FLEPProgram

from flep_driver.config import FLEPDriverConfig


NativeFunction = Callable[[Sequence[float]], float]


BUILT_IN_EXPRESSIONS: List[Tuple[str, NativeFunction]] = [
    ("sin(2.2 * a) + cos(pi / b)", lambda ab: math.sin(2.2 * ab[0]) + math.cos(math.pi / ab[1])),
    ("1 - sin(2.2 * a) + cos(pi / b)", lambda ab: 1 - math.sin(2.2 * ab[0]) + math.cos(math.pi / ab[1])),
    ("sqrt(3 + sin(2.2 * a) + cos(pi / b) / 3.3)",
     lambda ab: math.sqrt(3 + math.sin(2.2 * ab[0]) + math.cos(math.pi / ab[1]) / 3.3)),
    ("(a^2 / sin(2 * pi / b)) -a / 2.2",
     lambda ab: (math.pow(ab[0], 2) / math.sin(2 * math.pi / ab[1])) - ab[0] / 2.2),
    ("1-(a/b*0.5)", lambda ab: 1 - (ab[0] / ab[1] * 0.5)),
    ("e^log(7*a)", lambda ab: math.exp(math.log(7 * ab[0]))),
    ("10^log(3+b)", lambda ab: math.pow(10, math.log(3 + ab[1]))),
    ("(cos(2.41)/b)", lambda ab: math.cos(2.41) / ab[1]),
    ("-(sin(pi+a)+1)", lambda ab: -(math.sin(math.pi + ab[0]) + 1)),
    ("a-(e^(log(7+b)))", lambda ab: ab[0] - math.exp(math.log(7 + ab[1]))),
    ("(1.123*sin(a)+2.1234)/3.1237", lambda ab: (1.123 * math.sin(ab[0]) + 2.1234) / 3.1237),
    ("(1.123*cos(a)-3.1235)/3.1238", lambda ab: (1.123 * math.cos(ab[0]) - 3.1235) / 3.1238),
    ("(1.123*tan(a)+2.1236)/3.1239", lambda ab: (1.123 * math.tan(ab[0]) + 2.1236) / 3.1239),
    ("(b+a/b) * (a-b/a)", lambda ab: (ab[1] + ab[0] / ab[1]) * (ab[0] - ab[1] / ab[0])),
    ("a/((a+b)*(a-b))/b", lambda ab: ab[0] / ((ab[0] + ab[1]) * (ab[0] - ab[1])) / ab[1]),
    ("1.1-((a*b)+(a/b))-3.3", lambda ab: 1.1 - ((ab[0] * ab[1]) + (ab[0] / ab[1])) - 3.3),
    ("a+b", lambda ab: ab[0] + ab[1]),
    ("(a+b)*3.3", lambda ab: (ab[0] + ab[1]) * 3.3),
    ("(2*a+2*a)", lambda ab: 2 * ab[0] + 2 * ab[0]),
    ("2*(2*a)", lambda ab: 2 * (2 * ab[0])),
    ("(2*a)*2", lambda ab: (2 * ab[0]) * 2),
    ("-(b^1.1)", lambda ab: -math.pow(ab[1], 1.1)),
    ("a+b*(a+b)", lambda ab: ab[0] + ab[1] * (ab[0] + ab[1])),
    ("(1.1+b)*(-3.3)", lambda ab: (1.1 + ab[1]) * (-3.3)),
    ("a+b-e*pi/5^6", lambda ab: ab[0] + ab[1] - math.e * math.pi / math.pow(5, 6)),
    ("a^b/e*pi-5+6", lambda ab: math.pow(ab[0], ab[1]) / math.e * math.pi - 5 + 6),
    ("2.2*(a+b)", lambda ab: 2.2 * (ab[0] + ab[1])),
]


@dataclass
class BenchmarkResult:
    """Accuracy and relative speed for one expression."""
    expression: str
    relative_error_percent: float
    time_ratio: float


class FLEPBenchmark:
    """Runs the reference expressions through FLEP and native code."""

    def __init__(self, config: FLEPDriverConfig, flep: FLEP | None = None) -> None:
        self.config = config
        self.flep = flep or FLEP(max_depth=config.max_depth, optimize=config.optimize)
        self._logger = logging.getLogger("FLEPBenchmark")

    def compare(self, program: FLEPProgram, native: NativeFunction) -> float:
        """
        Return the mean relative error, in percent, of FLEP against native code over the sample grid.

        Points where the native result is zero contribute zero error.
        """
        points = self.config.sample_grid.points()
        if not points:
            return 0.0

        total = 0.0
        for a, b in points:
            ab = [a, b]
            x = self.flep.evaluate(program, ab)
            y = native(ab)
            total += abs((x - y) / y) if y else 0.0

        return 100.0 * total / len(points)

    def time_ratio(self, program: FLEPProgram, native: NativeFunction) -> float:
        """Return FLEP evaluation time divided by native evaluation time."""
        iterations = self.config.benchmark_iterations
        evaluate = self.flep.evaluate

        ab = [1.1, 2.2]
        keep = 0.0
        for _ in range(self.config.discard_iterations):
            keep += evaluate(program, ab)
            ab[0], ab[1] = ab[1], ab[0]

        start = time.perf_counter()
        for _ in range(iterations):
            keep += evaluate(program, ab)
            ab[0], ab[1] = ab[1], ab[0]

        flep_time = time.perf_counter() - start

        ab = [1.1, 2.2]
        start = time.perf_counter()
        for _ in range(iterations):
            keep += native(ab)
            ab[0], ab[1] = ab[1], ab[0]

        native_time = time.perf_counter() - start

        self._logger.debug("Checksum %r after %d iterations", keep, iterations)
        if native_time <= 0:
            return math.inf

        return flep_time / native_time

    def run(self, expressions: List[Tuple[str, NativeFunction]] | None = None) -> List[BenchmarkResult]:
        """
        Compile, compare and time each expression.

        Raises:
            FLEPCompileError: If a reference expression fails to compile
        """
        results = []
        for expression, native in expressions or BUILT_IN_EXPRESSIONS:
            program = self.flep.compile(expression)
            try:
                error = self.compare(program, native)
                ratio = self.time_ratio(program, native)

            finally:
                self.flep.release(program)

            self._logger.info("%s: error %.4f%%, time ratio %.2f", expression, error, ratio)
            results.append(BenchmarkResult(expression, error, ratio))

        return results
