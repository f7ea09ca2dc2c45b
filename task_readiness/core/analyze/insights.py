from __future__ import annotations

from task_readiness.core.model import (
    Bottleneck,
    CriticalPath,
    Cycle,
    Graph,
    Insight,
    ReadinessScore,
    ReadyTask,
    Recommendation,
)


PARALLEL_THRESHOLD = 0.7
PARALLEL_SLOTS = 3
READY_INSIGHT_THRESHOLD = 0.5


def generate_insights(
    graph: Graph,
    scores: dict[str, ReadinessScore],
    critical_path: CriticalPath,
    bottlenecks: list[Bottleneck],
    cycles: list[Cycle] | None = None,
) -> list[Insight]:
    insights: list[Insight] = []

    total = len(graph.nodes)
    completed = sum(1 for n in graph.nodes if n.status == "done")
    progress = (completed / total) * 100 if total else 0.0
    insights.append(
        Insight(
            kind="progress",
            message=f"Project is {round(progress)}% complete ({completed}/{total} tasks)",
            data={"progress": progress, "completed_tasks": completed, "total_tasks": total},
        )
    )

    if critical_path.length > 0:
        insights.append(
            Insight(
                kind="critical-path",
                message=(
                    f"Critical path has {critical_path.length} tasks, "
                    f"estimated {critical_path.duration.estimated_days} days"
                ),
                data={
                    "length": critical_path.length,
                    "task_ids": [n.id for n in critical_path.nodes],
                    "estimated_days": critical_path.duration.estimated_days,
                    "confidence": critical_path.duration.confidence,
                },
            )
        )

    if bottlenecks:
        insights.append(
            Insight(
                kind="bottlenecks",
                message=f"Found {len(bottlenecks)} potential bottlenecks",
                data={
                    "count": len(bottlenecks),
                    "top": [
                        {"id": b.node.id, "severity": b.severity, "reason": b.reason}
                        for b in bottlenecks[:3]
                    ],
                },
            )
        )

    ready_count = sum(
        1 for s in scores.values() if s.dependency == 1.0 and s.total > READY_INSIGHT_THRESHOLD
    )
    if ready_count > 0:
        insights.append(
            Insight(
                kind="ready-tasks",
                message=f"{ready_count} tasks are ready for execution",
                data={"ready_count": ready_count},
            )
        )

    if cycles:
        insights.append(
            Insight(
                kind="cycles",
                message=f"Found {len(cycles)} circular dependency chains",
                data={"cycles": [[m.id for m in c] for c in cycles]},
            )
        )

    return insights


def generate_recommendations(
    ready_tasks: list[ReadyTask],
    bottlenecks: list[Bottleneck],
    cycles: list[Cycle] | None = None,
) -> list[Recommendation]:
    recommendations: list[Recommendation] = []

    if cycles:
        first = cycles[0]
        recommendations.append(
            Recommendation(
                kind="break-cycle",
                priority="high",
                message="Remove one dependency in the cycle " + " -> ".join(m.id for m in first),
                action="fix-dependencies",
                data={"cycle": [m.id for m in first]},
            )
        )

    if ready_tasks:
        top = ready_tasks[0]
        recommendations.append(
            Recommendation(
                kind="next-task",
                priority="high",
                message=f'Start with "{top.node.title}" (readiness score: {top.readiness_score:.2f})',
                action="start-task",
                data={"id": top.node.id, "readiness_score": round(top.readiness_score, 2)},
            )
        )

    if bottlenecks:
        top_b = bottlenecks[0]
        recommendations.append(
            Recommendation(
                kind="bottleneck",
                priority="medium",
                message=f'Consider breaking down "{top_b.node.title}" to reduce project risk',
                action="expand-task",
                data={"id": top_b.node.id, "severity": top_b.severity, "reason": top_b.reason},
            )
        )

    parallel = [r for r in ready_tasks[:PARALLEL_SLOTS] if r.readiness_score > PARALLEL_THRESHOLD]
    if len(parallel) > 1:
        recommendations.append(
            Recommendation(
                kind="parallel-work",
                priority="medium",
                message=f"{len(parallel)} tasks can be worked on in parallel",
                action="parallel-execution",
                data={"ids": [r.node.id for r in parallel]},
            )
        )

    return recommendations
