from __future__ import annotations

import logging
from collections import defaultdict, deque
from typing import Any, Iterator, Optional

from task_readiness.core.errors import AnalysisInputError
from task_readiness.core.io.complexity import DEFAULT_COMPLEXITY, ComplexityMap, clamp_complexity
from task_readiness.core.io.load_tasks import tag_groups
from task_readiness.core.model import Edge, Graph, Node

logger = logging.getLogger(__name__)


def build_graph(
    tasks_data: Any,
    complexity: Optional[ComplexityMap] = None,
    *,
    default_complexity: int = DEFAULT_COMPLEXITY,
) -> Graph:
    """Flatten a task collection into a node/edge graph.

    Accepts the tagged form ``{"tags": {name: {"tasks": [...]}}}`` (``groups`` is an
    alias, and a bare ``{name: {"tasks": [...]}}`` mapping also works) or the flat
    ``{"tasks": [...]}`` form, which is tagged ``master``.

    Nodes are materialized first and linked second, so dependencies may point
    forward. Dependencies on unknown ids are dropped without error.
    """

    scores = complexity or {}
    tagged = list(_iter_tagged_tasks(tasks_data))

    nodes: list[Node] = []
    index: dict[str, int] = {}
    # (node id, raw record, parent id) for every record that produced a node
    linked: list[tuple[str, dict[str, Any], Optional[str]]] = []

    def add(node: Node, raw: dict[str, Any], parent: Optional[str]) -> bool:
        if node.id in index:
            logger.debug("duplicate task id %s ignored", node.id)
            return False
        index[node.id] = len(nodes)
        nodes.append(node)
        linked.append((node.id, raw, parent))
        return True

    # Pass 1: nodes.
    for tag, task in tagged:
        tid = _norm_id(task.get("id"))
        if tid is None:
            continue
        priority = _str_or(task.get("priority"), "medium")
        if not add(
            Node(
                id=tid,
                title=_str_or(task.get("title"), ""),
                status=_str_or(task.get("status"), "pending"),
                priority=priority,
                tag=tag,
                complexity=_complexity_for(tid, scores, default_complexity),
            ),
            task,
            None,
        ):
            continue

        for sub in _list_of_dicts(task.get("subtasks")):
            sid = _subtask_id(tid, sub.get("id"))
            if sid is None:
                continue
            add(
                Node(
                    id=sid,
                    title=_str_or(sub.get("title"), ""),
                    status=_str_or(sub.get("status"), "pending"),
                    priority=_str_or(sub.get("priority"), priority),
                    tag=tag,
                    complexity=_complexity_for(sid, scores, default_complexity),
                    parent_id=tid,
                    is_subtask=True,
                ),
                sub,
                tid,
            )

    # Pass 2: edges.
    edges: list[Edge] = []
    prerequisites: list[list[int]] = [[] for _ in nodes]
    dependents: list[list[int]] = [[] for _ in nodes]

    for nid, raw, parent in linked:
        if parent is not None:
            edges.append(Edge(source=parent, target=nid, kind="parent-child"))
        target = index[nid]
        for dep in _list(raw.get("dependencies")):
            dep_id = _resolve_dependency(dep, parent, index)
            if dep_id is None:
                continue
            source = index[dep_id]
            if source in prerequisites[target]:
                continue
            edges.append(Edge(source=dep_id, target=nid, kind="dependency"))
            prerequisites[target].append(source)
            dependents[source].append(target)

    return Graph(
        nodes=nodes,
        edges=edges,
        index=index,
        prerequisites=prerequisites,
        dependents=dependents,
    )


def count_components(graph: Graph) -> int:
    """Weakly connected components over every edge kind."""

    adjacent: dict[str, set[str]] = defaultdict(set)
    for e in graph.edges:
        adjacent[e.source].add(e.target)
        adjacent[e.target].add(e.source)

    seen: set[str] = set()
    components = 0
    for n in graph.nodes:
        if n.id in seen:
            continue
        components += 1
        q: deque[str] = deque([n.id])
        while q:
            cur = q.popleft()
            if cur in seen:
                continue
            seen.add(cur)
            for nxt in adjacent.get(cur, ()):
                if nxt not in seen:
                    q.append(nxt)
    return components


def _iter_tagged_tasks(tasks_data: Any) -> Iterator[tuple[str, dict[str, Any]]]:
    if not isinstance(tasks_data, dict):
        raise AnalysisInputError(
            code="E_INVALID_TASKS_SHAPE",
            message="task collection must be a mapping/object",
            path="<root>",
        )

    groups = tag_groups(tasks_data)
    if groups is None:
        file = tasks_data.get("__file__")
        raise AnalysisInputError(
            code="E_INVALID_TASKS_SHAPE",
            message="expected {tags: {name: {tasks: [...]}}} or {tasks: [...]}",
            file=file if isinstance(file, str) else None,
            path="<root>",
        )

    for tag, tasks in groups.items():
        for task in tasks:
            yield tag, task


def _resolve_dependency(dep: Any, parent: Optional[str], index: dict[str, int]) -> Optional[str]:
    dep_id = _norm_id(dep)
    if dep_id is None:
        return None
    # Subtasks name siblings by their bare number.
    if parent is not None and "." not in dep_id:
        sibling = f"{parent}.{dep_id}"
        if sibling in index:
            return sibling
    return dep_id if dep_id in index else None


def _subtask_id(parent_id: str, raw_id: Any) -> Optional[str]:
    sid = _norm_id(raw_id)
    if sid is None:
        return None
    if sid.isdigit():
        return f"{parent_id}.{sid}"
    return sid


def _complexity_for(node_id: str, scores: ComplexityMap, default: int) -> int:
    return clamp_complexity(scores.get(node_id, default), default)


def _norm_id(v: Any) -> Optional[str]:
    if isinstance(v, bool) or v is None:
        return None
    if isinstance(v, (int, float, str)):
        s = str(v).strip()
        return s or None
    return None


def _str_or(v: Any, default: str) -> str:
    return v if isinstance(v, str) and v.strip() else default


def _list(v: Any) -> list[Any]:
    return v if isinstance(v, list) else []


def _list_of_dicts(v: Any) -> list[dict[str, Any]]:
    return [x for x in _list(v) if isinstance(x, dict)]
