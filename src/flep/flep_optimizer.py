"""
FLEP Optimizer - runs bytecode optimization passes after parsing.

Passes run after the whole expression has been parsed and before the terminal END
instruction is appended. They only ever shrink the instruction sequence.
"""

import logging
from typing import List

from flep.flep_bytecode import FLEPCodeBuffer
from flep.flep_constant_folder import FLEPConstantFolder


class FLEPOptimizer:
    """
    Orchestrates bytecode optimization passes.

    This class manages the registered passes and applies them in sequence.
    """

    def __init__(self, enable_passes: List[str] | None = None):
        """
        Initialize with optional pass selection.

        Args:
            enable_passes: List of pass names to enable, or None for all passes
        """
        all_passes = {
            'constant_folding': FLEPConstantFolder(),
        }

        if enable_passes is None:
            self.passes = list(all_passes.values())

        else:
            self.passes = [all_passes[name] for name in enable_passes if name in all_passes]

        self._logger = logging.getLogger("FLEPOptimizer")

    def optimize(self, buffer: FLEPCodeBuffer) -> int:
        """
        Run all enabled optimization passes in sequence.

        Args:
            buffer: Code buffer to rewrite in place

        Returns:
            Total number of rewrites applied
        """
        total = 0
        for pass_instance in self.passes:
            before = buffer.instruction_count
            rewrites = pass_instance.optimize(buffer)
            if rewrites:
                self._logger.debug(
                    "Pass '%s' applied %d rewrites: %d -> %d instructions",
                    pass_instance.name, rewrites, before, buffer.instruction_count
                )

            total += rewrites

        return total
