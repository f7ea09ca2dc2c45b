from pathlib import Path

import pytest

from task_readiness.core.errors import AnalysisInputError
from task_readiness.core.graph.build_graph import build_graph, count_components
from task_readiness.core.io.load_tasks import load_tasks
from task_readiness.core.model import id_sort_key

EXAMPLES = Path(__file__).resolve().parent.parent / "examples"


def _dep_edges(graph):
    return [(e.source, e.target) for e in graph.edges if e.kind == "dependency"]


def test_every_task_and_subtask_becomes_one_node():
    graph = build_graph(load_tasks(str(EXAMPLES / "tasks.json")))
    ids = [n.id for n in graph.nodes]
    assert ids == ["1", "2", "3", "3.1", "3.2", "4", "5", "6"]
    assert len(set(ids)) == len(ids)

    sub = graph.node("3.2")
    assert sub.is_subtask
    assert sub.parent_id == "3"
    assert sub.priority == "high"  # inherited from the parent
    assert graph.node("3").is_subtask is False


def test_one_parent_child_edge_per_subtask():
    graph = build_graph(load_tasks(str(EXAMPLES / "tasks.json")))
    pc = [(e.source, e.target) for e in graph.edges if e.kind == "parent-child"]
    assert pc == [("3", "3.1"), ("3", "3.2")]


def test_dependency_edges_point_from_prerequisite_to_dependent():
    graph = build_graph(load_tasks(str(EXAMPLES / "tasks.json")))
    assert _dep_edges(graph) == [
        ("1", "2"),
        ("2", "3"),
        ("3.1", "3.2"),
        ("1", "4"),
        ("2", "5"),
        ("3", "6"),
        ("4", "6"),
        ("5", "6"),
    ]
    assert graph.dependency_edge_count == 8
    assert len(graph.edges) == 10
    assert [n.id for n in graph.prerequisite_nodes("6")] == ["3", "4", "5"]
    assert graph.dependent_count("2") == 2


def test_dangling_dependency_is_dropped_without_error():
    graph = build_graph({"tasks": [{"id": 1, "title": "a", "dependencies": [42, "nope"]}]})
    assert len(graph.nodes) == 1
    assert graph.edges == []


def test_forward_references_resolve():
    graph = build_graph(
        {
            "tasks": [
                {"id": 1, "title": "first", "dependencies": [2]},
                {"id": 2, "title": "second", "dependencies": []},
            ]
        }
    )
    assert _dep_edges(graph) == [("2", "1")]


def test_tagged_collection_sets_tag_and_links_across_tags():
    graph = build_graph(load_tasks(str(EXAMPLES / "tagged-tasks.yaml")))
    assert [(n.id, n.tag) for n in graph.nodes] == [
        ("1", "master"),
        ("2", "master"),
        ("10", "feature-x"),
    ]
    assert _dep_edges(graph) == [("1", "2"), ("2", "10")]


def test_bare_tag_mapping_is_accepted():
    graph = build_graph({"master": {"tasks": [{"id": 1, "title": "x"}]}})
    assert graph.node("1").tag == "master"


def test_defaults_for_missing_fields_and_complexity_lookup():
    graph = build_graph(
        {"tasks": [{"id": 1, "title": "a"}, {"id": 2}]},
        {"1": 9, "2": 42},
    )
    a, b = graph.nodes
    assert a.status == "pending"
    assert a.priority == "medium"
    assert a.complexity == 9
    assert b.complexity == 10  # clamped
    assert b.title == ""


def test_missing_complexity_uses_default():
    graph = build_graph({"tasks": [{"id": 1, "title": "a"}]}, default_complexity=3)
    assert graph.node("1").complexity == 3


def test_subtask_sibling_and_dotted_references():
    graph = build_graph(
        {
            "tasks": [
                {"id": 1, "title": "one", "subtasks": [{"id": 1, "title": "s1"}]},
                {
                    "id": 2,
                    "title": "two",
                    "subtasks": [
                        {"id": 1, "title": "s1"},
                        {"id": 2, "title": "s2", "dependencies": [1, "1.1"]},
                    ],
                },
            ]
        }
    )
    assert _dep_edges(graph) == [("2.1", "2.2"), ("1.1", "2.2")]


def test_duplicate_ids_keep_first_node_and_repeated_deps_collapse():
    graph = build_graph(
        {
            "tasks": [
                {"id": 1, "title": "first"},
                {"id": 1, "title": "again"},
                {"id": 2, "title": "b", "dependencies": [1, 1]},
            ]
        }
    )
    assert [n.title for n in graph.nodes] == ["first", "b"]
    assert _dep_edges(graph) == [("1", "2")]


def test_non_dict_tasks_are_skipped():
    graph = build_graph({"tasks": ["junk", None, {"id": 1, "title": "ok"}]})
    assert [n.id for n in graph.nodes] == ["1"]


@pytest.mark.parametrize("data", [[], "tasks", {"items": []}, {}])
def test_unrecognized_shape_raises_input_error(data):
    with pytest.raises(AnalysisInputError) as exc:
        build_graph(data)
    assert exc.value.code == "E_INVALID_TASKS_SHAPE"


def test_shape_error_names_the_source_file():
    with pytest.raises(AnalysisInputError) as exc:
        build_graph({"__file__": "plan/tasks.json"})
    assert exc.value.file == "plan/tasks.json"
    assert str(exc.value).startswith("plan/tasks.json:<root>: E_INVALID_TASKS_SHAPE")


def test_loader_metadata_is_not_a_tag():
    graph = build_graph({"master": {"tasks": [{"id": 1, "title": "x"}]}, "__file__": "t.yaml"})
    assert [(n.id, n.tag) for n in graph.nodes] == [("1", "master")]


def test_components_count_weakly_connected_parts():
    graph = build_graph(
        {
            "tasks": [
                {"id": 1, "title": "a"},
                {"id": 2, "title": "b", "dependencies": [1]},
                {"id": 3, "title": "c"},
            ]
        }
    )
    assert count_components(graph) == 2


def test_id_sort_key_orders_dotted_numeric_ids():
    ids = ["10", "3.10", "2", "a", "3.2", "3"]
    assert sorted(ids, key=id_sort_key) == ["2", "3", "3.2", "3.10", "10", "a"]
