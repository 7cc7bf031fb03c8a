"""
FLEP bytecode optimization pass
"""

from flep.flep_bytecode import FLEPCodeBuffer


class FLEPOptimizationPass:
    """Base class for passes that rewrite a code buffer in place."""

    name = "pass"

    def optimize(self, buffer: FLEPCodeBuffer) -> int:
        """
        Rewrite the buffer in place, preserving the value the program computes.

        Args:
            buffer: Unfrozen code buffer, before END is appended

        Returns:
            Number of rewrites applied
        """
        raise NotImplementedError
