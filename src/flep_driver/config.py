"""
Configuration management for the FLEP driver.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

import yaml

from flep.flep_compiler import FLEPCompiler
from flep.flep_lexer import FLEPLexer


@dataclass
class SampleGrid:
    """Ranges of a and b used when comparing FLEP results against native code."""
    a_start: float = 0.1
    a_stop: float = 3.0
    b_start: float = 0.2
    b_stop: float = 3.0
    step: float = 0.2

    def points(self) -> List[Tuple[float, float]]:
        """Return every (a, b) pair of the grid, accumulating the step as floats do."""
        result = []
        a = self.a_start
        while a <= self.a_stop:
            b = self.b_start
            while b <= self.b_stop:
                result.append((a, b))
                b += self.step

            a += self.step

        return result


@dataclass
class FLEPDriverConfig:
    """Settings for compiling, evaluating and benchmarking expressions."""

    optimize: bool = True
    max_depth: int = FLEPCompiler.DEFAULT_MAX_DEPTH
    variables: Dict[str, float] = field(default_factory=dict)
    benchmark_iterations: int = 100000
    discard_iterations: int = 10
    dump: bool = False
    sample_grid: SampleGrid = field(default_factory=SampleGrid)

    @classmethod
    def load_from_file(cls, config_path: str) -> 'FLEPDriverConfig':
        """Load configuration from YAML file."""
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {config_path}")

        defaults = cls()
        grid_data = data.get('sample_grid', {}) or {}
        grid = SampleGrid(
            a_start=float(grid_data.get('a_start', defaults.sample_grid.a_start)),
            a_stop=float(grid_data.get('a_stop', defaults.sample_grid.a_stop)),
            b_start=float(grid_data.get('b_start', defaults.sample_grid.b_start)),
            b_stop=float(grid_data.get('b_stop', defaults.sample_grid.b_stop)),
            step=float(grid_data.get('step', defaults.sample_grid.step))
        )

        return cls(
            optimize=bool(data.get('optimize', defaults.optimize)),
            max_depth=int(data.get('max_depth', defaults.max_depth)),
            variables={str(k): float(v) for k, v in (data.get('variables', {}) or {}).items()},
            benchmark_iterations=int(data.get('benchmark_iterations', defaults.benchmark_iterations)),
            discard_iterations=int(data.get('discard_iterations', defaults.discard_iterations)),
            dump=bool(data.get('dump', defaults.dump)),
            sample_grid=grid
        )

    @classmethod
    def create_default(cls) -> 'FLEPDriverConfig':
        """Create a default configuration with every variable set to zero."""
        return cls(variables={letter: 0.0 for letter in FLEPLexer.VARIABLE_LETTERS})

    def to_dict(self) -> Dict[str, Any]:
        """Return the configuration as plain data suitable for YAML."""
        return {
            'optimize': self.optimize,
            'max_depth': self.max_depth,
            'variables': dict(self.variables),
            'benchmark_iterations': self.benchmark_iterations,
            'discard_iterations': self.discard_iterations,
            'dump': self.dump,
            'sample_grid': {
                'a_start': self.sample_grid.a_start,
                'a_stop': self.sample_grid.a_stop,
                'b_start': self.sample_grid.b_start,
                'b_stop': self.sample_grid.b_stop,
                'step': self.sample_grid.step,
            },
        }

    def save_to_file(self, config_path: str) -> None:
        """Save configuration to YAML file."""
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def validate(self) -> List[str]:
        """Validate the configuration and return a list of errors."""
        errors = []

        for name in self.variables:
            if len(name) != 1 or name not in FLEPLexer.VARIABLE_LETTERS:
                errors.append(f"Unknown variable '{name}', expected one of '{FLEPLexer.VARIABLE_LETTERS}'")

        max_supported = FLEPCompiler.max_supported_depth()
        if self.max_depth < 1:
            errors.append(f"max_depth must be at least 1, got {self.max_depth}")

        elif self.max_depth > max_supported:
            errors.append(
                f"max_depth must be at most {max_supported} under the current recursion limit, got {self.max_depth}"
            )

        if self.benchmark_iterations < 1:
            errors.append(f"benchmark_iterations must be at least 1, got {self.benchmark_iterations}")

        if self.discard_iterations < 0:
            errors.append(f"discard_iterations must not be negative, got {self.discard_iterations}")

        if self.sample_grid.step <= 0:
            errors.append(f"sample_grid.step must be positive, got {self.sample_grid.step}")

        return errors

    def variable_vector(self) -> List[float]:
        """Return the variable values in 'abcxyzw' order, unset variables as 0.0."""
        return [self.variables.get(letter, 0.0) for letter in FLEPLexer.VARIABLE_LETTERS]
