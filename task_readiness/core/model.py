from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal, Optional

from task_readiness.core.errors import AnalysisError


Status = Literal["pending", "in-progress", "done", "cancelled", "deferred", "blocked", "review"]
Priority = Literal["low", "medium", "high"]
EdgeKind = Literal["dependency", "parent-child"]

ALLOWED_STATUSES: set[str] = {
    "pending",
    "in-progress",
    "done",
    "cancelled",
    "deferred",
    "blocked",
    "review",
}
ALLOWED_PRIORITIES: set[str] = {"low", "medium", "high"}


def id_sort_key(node_id: str) -> tuple[tuple[int, int, str], ...]:
    """Order ids the way people number tasks: "2" < "10" and "3.2" < "3.10".

    Dotted parts compare numerically when they are digits; other parts compare
    as text and sort after numbers.
    """
    return tuple((0, int(p), "") if p.isdigit() else (1, 0, p) for p in node_id.split("."))


@dataclass(frozen=True)
class Node:
    id: str
    title: str
    status: str
    priority: str
    tag: str
    complexity: int

    parent_id: Optional[str] = None
    is_subtask: bool = False


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    kind: EdgeKind


@dataclass(frozen=True)
class Graph:
    """Arena of nodes addressed by position.

    ``prerequisites[i]`` lists the arena positions node ``i`` depends on and
    ``dependents[i]`` the positions that depend on node ``i``, both in edge order.
    """

    nodes: list[Node]
    edges: list[Edge]
    index: dict[str, int]
    prerequisites: list[list[int]]
    dependents: list[list[int]]

    def node(self, node_id: str) -> Node:
        return self.nodes[self.index[node_id]]

    def prerequisite_nodes(self, node_id: str) -> list[Node]:
        return [self.nodes[j] for j in self.prerequisites[self.index[node_id]]]

    def dependent_count(self, node_id: str) -> int:
        return len(self.dependents[self.index[node_id]])

    @property
    def dependency_edge_count(self) -> int:
        return sum(len(p) for p in self.prerequisites)


@dataclass(frozen=True)
class DependencyStatus:
    total: int
    completed: int
    pending: int
    in_progress: int
    blocked: int


@dataclass(frozen=True)
class ScoreFactors:
    dependencies: DependencyStatus
    complexity: int
    priority: str


@dataclass(frozen=True)
class ReadinessScore:
    node_id: str
    total: float = 0.0
    dependency: float = 0.0
    complexity: float = 0.0
    context: float = 0.0
    priority: float = 0.0

    factors: Optional[ScoreFactors] = None
    reason: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "node_id": self.node_id,
            "total": round(self.total, 2),
            "dependency": round(self.dependency, 2),
            "complexity": round(self.complexity, 2),
            "context": round(self.context, 2),
            "priority": round(self.priority, 2),
            "factors": asdict(self.factors) if self.factors else None,
            "reason": self.reason,
            "error": self.error,
        }


@dataclass(frozen=True)
class PathDuration:
    complexity_points: int
    estimated_days: int
    confidence: Literal["low"] = "low"


@dataclass(frozen=True)
class CriticalPath:
    nodes: list[Node]
    duration: PathDuration

    @property
    def length(self) -> int:
        return len(self.nodes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": [asdict(n) for n in self.nodes],
            "length": self.length,
            "estimated_duration": asdict(self.duration),
        }


@dataclass(frozen=True)
class Bottleneck:
    node: Node
    dependent_count: int
    complexity: int
    severity: float
    reason: str


@dataclass(frozen=True)
class CycleMember:
    id: str
    title: str


Cycle = list[CycleMember]


@dataclass(frozen=True)
class ReadyTask:
    node: Node
    readiness_score: float
    factors: Optional[ScoreFactors]

    def to_dict(self) -> dict[str, Any]:
        return {
            "task": asdict(self.node),
            "readiness_score": round(self.readiness_score, 2),
            "factors": asdict(self.factors) if self.factors else None,
        }


@dataclass(frozen=True)
class Insight:
    kind: str
    message: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Recommendation:
    kind: str
    priority: str
    message: str
    action: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GraphSummary:
    nodes: int
    edges: int
    dependency_edges: int
    components: int


@dataclass(frozen=True)
class AnalysisResult:
    ok: bool
    timestamp: str
    analysis_time_ms: float

    graph: Optional[GraphSummary] = None
    readiness_scores: dict[str, ReadinessScore] = field(default_factory=dict)
    critical_path: Optional[CriticalPath] = None
    bottlenecks: list[Bottleneck] = field(default_factory=list)
    ready_tasks: list[ReadyTask] = field(default_factory=list)
    cycles: list[Cycle] = field(default_factory=list)
    insights: list[Insight] = field(default_factory=list)
    recommendations: list[Recommendation] = field(default_factory=list)
    error: Optional[AnalysisError] = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable view of the result."""
        out: dict[str, Any] = {
            "ok": self.ok,
            "timestamp": self.timestamp,
            "analysis_time_ms": round(self.analysis_time_ms, 3),
        }
        if not self.ok:
            out["error"] = (
                {
                    "code": self.error.code,
                    "message": self.error.message,
                    "file": self.error.file,
                    "path": self.error.path,
                }
                if self.error
                else None
            )
            return out

        out.update(
            {
                "graph": asdict(self.graph) if self.graph else None,
                "readiness_scores": {k: v.to_dict() for k, v in self.readiness_scores.items()},
                "critical_path": self.critical_path.to_dict() if self.critical_path else None,
                "bottlenecks": [
                    {
                        "task": asdict(b.node),
                        "dependent_count": b.dependent_count,
                        "complexity": b.complexity,
                        "severity": b.severity,
                        "reason": b.reason,
                    }
                    for b in self.bottlenecks
                ],
                "ready_tasks": [r.to_dict() for r in self.ready_tasks],
                "cycles": [[asdict(m) for m in c] for c in self.cycles],
                "insights": [asdict(i) for i in self.insights],
                "recommendations": [asdict(r) for r in self.recommendations],
            }
        )
        return out
