"""Scanner output analyzers, one per scanner family."""

from scangate.analyzers.base import BaseAnalyzer
from scangate.analyzers.retirejs import RetirejsAnalyzer

__all__ = ["BaseAnalyzer", "RetirejsAnalyzer"]
