from __future__ import annotations

import math

from task_readiness.core.model import CriticalPath, Graph, Node, PathDuration


def find_critical_path(graph: Graph) -> CriticalPath:
    """Longest prerequisite chain ending at a leaf.

    A leaf is a node nothing depends on. For each leaf the longest backward
    chain is computed once per node (memoized); the first longest prerequisite
    wins ties, and the first longest leaf wins overall. A node already on the
    current descent counts as length 0, so cycles truncate the branch.
    """

    if graph.dependency_edge_count == 0:
        return CriticalPath(nodes=[], duration=estimate_duration([]))

    n = len(graph.nodes)
    length = [0] * n
    previous = [-1] * n
    computed = [False] * n
    on_stack = [False] * n

    def longest(i: int) -> int:
        if on_stack[i]:
            return 0
        if computed[i]:
            return length[i]

        on_stack[i] = True
        best, best_prev = 0, -1
        for j in graph.prerequisites[i]:
            candidate = longest(j)
            if candidate > best:
                best, best_prev = candidate, j
        on_stack[i] = False

        length[i] = best + 1
        previous[i] = best_prev
        computed[i] = True
        return length[i]

    best_leaf, best_len = -1, 0
    for i in range(n):
        if graph.dependents[i]:
            continue
        candidate = longest(i)
        if candidate > best_len:
            best_leaf, best_len = i, candidate

    chain: list[Node] = []
    cur = best_leaf
    while cur != -1:
        chain.append(graph.nodes[cur])
        cur = previous[cur]
    chain.reverse()

    return CriticalPath(nodes=chain, duration=estimate_duration(chain))


def estimate_duration(chain: list[Node]) -> PathDuration:
    """Two complexity points per day. Always low confidence."""
    points = sum(n.complexity for n in chain)
    return PathDuration(complexity_points=points, estimated_days=math.ceil(points / 2))
