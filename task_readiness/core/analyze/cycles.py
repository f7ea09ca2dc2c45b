from __future__ import annotations

from task_readiness.core.model import Cycle, CycleMember, Graph, id_sort_key


def detect_cycles(graph: Graph) -> list[Cycle]:
    """Circular prerequisite chains, each reported once.

    DFS from every unvisited node through its prerequisites. Reaching a node that
    is still on the stack closes a cycle: the path slice from that node to the
    current one. Cycles are de-duplicated after rotating to the lowest id.
    """

    WHITE, GRAY, BLACK = 0, 1, 2
    state = [WHITE] * len(graph.nodes)
    stack: list[int] = []
    emitted: set[tuple[str, ...]] = set()
    out: list[Cycle] = []

    def dfs(u: int) -> None:
        state[u] = GRAY
        stack.append(u)
        for v in graph.prerequisites[u]:
            if state[v] == GRAY:
                # cycle: v ... u, and u requires v
                ids = [graph.nodes[i].id for i in stack[stack.index(v) :]]
                key = _canonical(ids)
                if key not in emitted:
                    emitted.add(key)
                    out.append([CycleMember(id=i, title=graph.node(i).title) for i in ids])
            elif state[v] == WHITE:
                dfs(v)
        stack.pop()
        state[u] = BLACK

    for i in range(len(graph.nodes)):
        if state[i] == WHITE:
            dfs(i)

    return out


def _canonical(ids: list[str]) -> tuple[str, ...]:
    start = ids.index(min(ids, key=id_sort_key))
    return tuple(ids[start:] + ids[:start])
