from pathlib import Path

import pytest

from task_readiness.core.errors import TaskLoadError
from task_readiness.core.io.load_tasks import load_tasks, tag_groups

EXAMPLES = Path(__file__).resolve().parent.parent / "examples"


def test_flat_file_becomes_master_tag():
    p = EXAMPLES / "tasks.json"
    data = load_tasks(str(p))
    assert set(data) == {"tags", "__file__"}
    assert data["__file__"] == str(p)
    tasks = data["tags"]["master"]["tasks"]
    assert [t["id"] for t in tasks] == [1, 2, 3, 4, 5, 6]


def test_tagged_yaml_keeps_tags():
    data = load_tasks(str(EXAMPLES / "tagged-tasks.yaml"))
    assert set(data["tags"]) == {"master", "feature-x"}
    assert [t["id"] for t in data["tags"]["feature-x"]["tasks"]] == [10]


def test_bare_tag_mapping_and_groups_alias_are_normalized(tmp_path):
    bare = tmp_path / "bare.yaml"
    bare.write_text("ops:\n  tasks:\n    - {id: 1, title: a}\n", encoding="utf-8")
    assert load_tasks(str(bare))["tags"] == {"ops": {"tasks": [{"id": 1, "title": "a"}]}}

    groups = tmp_path / "groups.yaml"
    groups.write_text("groups:\n  ops:\n    tasks: [{id: 2}]\n  junk: 3\n", encoding="utf-8")
    assert load_tasks(str(groups))["tags"] == {"ops": {"tasks": [{"id": 2}]}}


def test_unknown_shape_is_left_for_the_analysis():
    p = EXAMPLES / "invalid-shape.json"
    data = load_tasks(str(p))
    assert data == {"__file__": str(p)}


def test_tag_groups_drops_non_mapping_records():
    assert tag_groups({"tasks": [{"id": 1}, "junk", None]}) == {"master": [{"id": 1}]}
    assert tag_groups({"tasks": "nope"}) is None
    assert tag_groups({"__file__": "x.json"}) is None


def test_load_missing_file():
    with pytest.raises(TaskLoadError) as exc:
        load_tasks(str(EXAMPLES / "does-not-exist.json"))
    assert exc.value.code == "E_FILE_NOT_FOUND"


def test_load_unsupported_format(tmp_path):
    p = tmp_path / "tasks.txt"
    p.write_text("hello", encoding="utf-8")
    with pytest.raises(TaskLoadError) as exc:
        load_tasks(str(p))
    assert exc.value.code == "E_UNSUPPORTED_FORMAT"


def test_load_parse_errors(tmp_path):
    bad_json = tmp_path / "tasks.json"
    bad_json.write_text("{not json", encoding="utf-8")
    with pytest.raises(TaskLoadError) as exc:
        load_tasks(str(bad_json))
    assert exc.value.code == "E_JSON_PARSE"

    bad_yaml = tmp_path / "tasks.yaml"
    bad_yaml.write_text("tasks: [unclosed", encoding="utf-8")
    with pytest.raises(TaskLoadError) as exc:
        load_tasks(str(bad_yaml))
    assert exc.value.code == "E_YAML_PARSE"


def test_load_rejects_non_mapping(tmp_path):
    p = tmp_path / "tasks.json"
    p.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(TaskLoadError) as exc:
        load_tasks(str(p))
    assert exc.value.code == "E_INVALID_TOP_LEVEL"
    assert str(exc.value).endswith("E_INVALID_TOP_LEVEL: top-level document must be a mapping/object")
