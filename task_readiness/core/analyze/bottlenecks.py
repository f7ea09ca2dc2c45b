from __future__ import annotations

from task_readiness.core.model import Bottleneck, Graph, id_sort_key


MANY_DEPENDENTS = 3
HIGH_COMPLEXITY = 8
SOME_DEPENDENTS = 2
MODERATE_COMPLEXITY = 6


def detect_bottlenecks(graph: Graph) -> list[Bottleneck]:
    """Nodes whose fan-out and/or complexity concentrate risk, most severe first."""
    out: list[Bottleneck] = []
    for i, node in enumerate(graph.nodes):
        dependent_count = len(graph.dependents[i])
        complexity = node.complexity
        if not is_bottleneck(dependent_count, complexity):
            continue
        out.append(
            Bottleneck(
                node=node,
                dependent_count=dependent_count,
                complexity=complexity,
                severity=severity(dependent_count, complexity),
                reason=bottleneck_reason(dependent_count, complexity),
            )
        )

    return sorted(out, key=lambda b: (-b.severity, id_sort_key(b.node.id)))


def is_bottleneck(dependent_count: int, complexity: int) -> bool:
    return (
        dependent_count >= MANY_DEPENDENTS
        or complexity >= HIGH_COMPLEXITY
        or (dependent_count >= SOME_DEPENDENTS and complexity >= MODERATE_COMPLEXITY)
    )


def severity(dependent_count: int, complexity: int) -> float:
    return round(dependent_count * 0.6 + complexity * 0.4, 2)


def bottleneck_reason(dependent_count: int, complexity: int) -> str:
    if dependent_count >= MANY_DEPENDENTS and complexity >= HIGH_COMPLEXITY:
        return "High complexity with many dependents"
    if dependent_count >= MANY_DEPENDENTS:
        return "Many tasks depend on this one"
    if complexity >= HIGH_COMPLEXITY:
        return "High complexity task"
    return "Moderate complexity with multiple dependents"
