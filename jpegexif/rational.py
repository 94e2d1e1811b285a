# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Rational number value type for RATIONAL and SRATIONAL components.

Copyright 2025 DNAi inc.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Rational:
    """
    One EXIF rational component: an exact numerator/denominator pair.

    The pair is stored as given (no reduction), so values read from a file
    are written back unchanged.
    """
    numerator: int
    denominator: int

    @classmethod
    def from_float(cls, value: float, denominator: int = 10000) -> "Rational":
        """
        Approximate a float with a fixed denominator.

        Args:
            value: Value to approximate
            denominator: Denominator to use (precision of the result)

        Returns:
            Rational with round(value * denominator) as numerator
        """
        return cls(int(round(value * denominator)), denominator)

    def to_float(self) -> float:
        """Lossy conversion to float. A zero denominator yields 0.0."""
        if self.denominator == 0:
            return 0.0
        return self.numerator / self.denominator

    def __float__(self) -> float:
        return self.to_float()

    def __str__(self) -> str:
        return f"{self.numerator}/{self.denominator}"
