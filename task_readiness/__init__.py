"""Task dependency graph and readiness scoring."""

from task_readiness.core.config import AnalyzerConfig
from task_readiness.core.engine import DependencyAnalyzer
from task_readiness.core.score.readiness import ScoringWeights

__all__ = ["AnalyzerConfig", "DependencyAnalyzer", "ScoringWeights"]
