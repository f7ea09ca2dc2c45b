from __future__ import annotations

import logging
from dataclasses import dataclass

from task_readiness.core.model import DependencyStatus, Graph, Node, ReadinessScore, ScoreFactors

logger = logging.getLogger(__name__)


PRIORITY_SCORES: dict[str, float] = {"high": 1.0, "medium": 0.6, "low": 0.3}
DEFAULT_PRIORITY_SCORE = 0.5

# Context heuristic bonuses. There is no recency signal in here; callers who
# have one should tune the context weight instead of these numbers.
CONTEXT_BASE = 0.5
CONTEXT_PRIORITY_BONUS: dict[str, float] = {"high": 0.3, "medium": 0.1}
CONTEXT_STATUS_BONUS: dict[str, float] = {"in-progress": 0.4, "pending": 0.2}

CLOSED_STATUSES: set[str] = {"done", "cancelled"}


@dataclass(frozen=True)
class ScoringWeights:
    dependency: float = 0.8
    complexity: float = 0.6
    context: float = 0.9
    priority: float = 0.7

    @property
    def total(self) -> float:
        return self.dependency + self.complexity + self.context + self.priority


def score_node(node: Node, graph: Graph, weights: ScoringWeights) -> ReadinessScore:
    """Four-factor readiness score for one node.

    Closed nodes (done/cancelled) score zero with a reason attached.
    """
    if node.status in CLOSED_STATUSES:
        return ReadinessScore(node_id=node.id, reason=f"Task is {node.status}")

    deps = dependency_status(node, graph)
    dependency = dependency_score(node, graph)
    complexity = complexity_score(node)
    context = context_score(node)
    priority = priority_score(node)

    total = 0.0
    if weights.total > 0:
        total = (
            dependency * weights.dependency
            + complexity * weights.complexity
            + context * weights.context
            + priority * weights.priority
        ) / weights.total

    return ReadinessScore(
        node_id=node.id,
        total=total,
        dependency=dependency,
        complexity=complexity,
        context=context,
        priority=priority,
        factors=ScoreFactors(dependencies=deps, complexity=node.complexity, priority=node.priority),
    )


def score_all(graph: Graph, weights: ScoringWeights) -> dict[str, ReadinessScore]:
    """Score every node in graph order.

    A failure on one node yields a zero score carrying the error; the rest of
    the batch still gets scored.
    """
    scores: dict[str, ReadinessScore] = {}
    for node in graph.nodes:
        try:
            scores[node.id] = score_node(node, graph, weights)
        except Exception as e:
            logger.warning("error scoring task %s: %s", node.id, e)
            scores[node.id] = ReadinessScore(node_id=node.id, error=str(e))
    return scores


def dependency_score(node: Node, graph: Graph) -> float:
    deps = graph.prerequisite_nodes(node.id)
    if not deps:
        return 1.0
    done = sum(1 for d in deps if d.status == "done")
    return done / len(deps)


def complexity_score(node: Node) -> float:
    return _clamp((10 - node.complexity) / 9)


def context_score(node: Node) -> float:
    return _clamp(
        CONTEXT_BASE
        + CONTEXT_PRIORITY_BONUS.get(node.priority, 0.0)
        + CONTEXT_STATUS_BONUS.get(node.status, 0.0)
    )


def priority_score(node: Node) -> float:
    return PRIORITY_SCORES.get(node.priority, DEFAULT_PRIORITY_SCORE)


def dependency_status(node: Node, graph: Graph) -> DependencyStatus:
    deps = graph.prerequisite_nodes(node.id)
    completed = sum(1 for d in deps if d.status == "done")
    pending = sum(1 for d in deps if d.status == "pending")
    in_progress = sum(1 for d in deps if d.status == "in-progress")
    return DependencyStatus(
        total=len(deps),
        completed=completed,
        pending=pending,
        in_progress=in_progress,
        blocked=len(deps) - completed - pending - in_progress,
    )


def _clamp(v: float) -> float:
    return max(0.0, min(1.0, v))
