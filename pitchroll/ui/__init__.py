"""Console output for PitchRoll."""

from .summary import PitchSummaryPrinter

__all__ = ["PitchSummaryPrinter"]
