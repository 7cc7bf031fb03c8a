"""
FLEP driver

Batch parsing, one-off evaluation and benchmarking of FLEP expressions from the command line.
"""

__version__ = "1.0.0"

from .config import FLEPDriverConfig, SampleGrid
from .benchmark import FLEPBenchmark, BenchmarkResult, BUILT_IN_EXPRESSIONS

__all__ = [
    "FLEPDriverConfig",
    "SampleGrid",
    "FLEPBenchmark",
    "BenchmarkResult",
    "BUILT_IN_EXPRESSIONS"
]
