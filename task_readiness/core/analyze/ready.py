from __future__ import annotations

from task_readiness.core.model import Graph, ReadinessScore, ReadyTask, id_sort_key


NOT_READY_STATUSES: set[str] = {"done", "cancelled", "in-progress"}


def find_ready_tasks(graph: Graph, scores: dict[str, ReadinessScore]) -> list[ReadyTask]:
    """Open nodes whose direct prerequisites are all done.

    Highest readiness first; equal scores fall back to ascending id.
    """
    ready: list[ReadyTask] = []
    for node in graph.nodes:
        if node.status in NOT_READY_STATUSES:
            continue
        score = scores.get(node.id)
        if score is None or score.error is not None or score.dependency != 1.0:
            continue
        ready.append(ReadyTask(node=node, readiness_score=score.total, factors=score.factors))

    return sorted(ready, key=lambda r: (-r.readiness_score, id_sort_key(r.node.id)))
