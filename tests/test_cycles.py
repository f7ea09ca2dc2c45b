from pathlib import Path

from task_readiness.core.analyze.cycles import detect_cycles
from task_readiness.core.graph.build_graph import build_graph
from task_readiness.core.io.load_tasks import load_tasks

EXAMPLES = Path(__file__).resolve().parent.parent / "examples"


def test_three_node_cycle_is_found():
    cycles = detect_cycles(build_graph(load_tasks(str(EXAMPLES / "cyclic-tasks.yaml"))))
    assert len(cycles) == 1
    assert {m.id for m in cycles[0]} == {"A", "B", "C"}
    assert [m.id for m in cycles[0]] == ["A", "C", "B"]
    assert cycles[0][0].title == "Alpha"


def test_acyclic_graph_has_no_cycles():
    g = build_graph(load_tasks(str(EXAMPLES / "tasks.json")))
    assert detect_cycles(g) == []


def test_self_dependency_is_a_cycle():
    g = build_graph({"tasks": [{"id": 1, "title": "me", "dependencies": [1]}]})
    cycles = detect_cycles(g)
    assert [[m.id for m in c] for c in cycles] == [["1"]]


def test_same_cycle_reached_from_several_roots_is_reported_once():
    g = build_graph(
        {
            "tasks": [
                {"id": "x", "title": "x", "dependencies": ["b"]},
                {"id": "y", "title": "y", "dependencies": ["a"]},
                {"id": "a", "title": "a", "dependencies": ["b"]},
                {"id": "b", "title": "b", "dependencies": ["a"]},
            ]
        }
    )
    cycles = detect_cycles(g)
    assert len(cycles) == 1
    assert {m.id for m in cycles[0]} == {"a", "b"}


def test_two_independent_cycles():
    g = build_graph(
        {
            "tasks": [
                {"id": 1, "title": "a", "dependencies": [2]},
                {"id": 2, "title": "b", "dependencies": [1]},
                {"id": 3, "title": "c", "dependencies": [4]},
                {"id": 4, "title": "d", "dependencies": [3]},
            ]
        }
    )
    assert sorted(sorted(m.id for m in c) for c in detect_cycles(g)) == [["1", "2"], ["3", "4"]]


def test_cycle_reached_twice_over_numeric_ids_is_reported_once():
    # 2 -> 10 -> 2, also entered from 11 which needs 10
    g = build_graph(
        {
            "tasks": [
                {"id": 11, "title": "entry", "dependencies": [10]},
                {"id": 10, "title": "ten", "dependencies": [2]},
                {"id": 2, "title": "two", "dependencies": [10]},
            ]
        }
    )
    found = detect_cycles(g)
    assert len(found) == 1
    assert sorted(m.id for m in found[0]) == ["10", "2"]
