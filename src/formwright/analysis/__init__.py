"""Analysis stages: primary pass, second opinion, validation and refinement."""

from __future__ import annotations

from formwright.analysis.consensus import EnsembleBuilder, build_consensus, labels_match
from formwright.analysis.normalize import normalize_analysis, normalize_validation
from formwright.analysis.primary import PrimaryAnalyzer
from formwright.analysis.refiner import AnalysisRefiner
from formwright.analysis.validator import AnalysisValidator

__all__ = [
    "AnalysisRefiner",
    "AnalysisValidator",
    "EnsembleBuilder",
    "PrimaryAnalyzer",
    "build_consensus",
    "labels_match",
    "normalize_analysis",
    "normalize_validation",
]
