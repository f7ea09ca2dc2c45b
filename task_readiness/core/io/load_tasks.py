from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import yaml

from task_readiness.core.errors import TaskLoadError

DEFAULT_TAG = "master"

TagGroups = dict[str, list[dict[str, Any]]]


def load_tasks(path: str) -> dict[str, Any]:
    """Load a YAML/JSON task collection file.

    Every recognized shape is normalized to the tagged form
    ``{"tags": {name: {"tasks": [...]}}}``; a flat ``{"tasks": [...]}`` file
    becomes the ``master`` tag. An unrecognized shape is passed on without
    ``tags`` so the analysis reports it. The source path is kept under
    ``__file__``.
    """

    p = Path(path)
    if not p.exists():
        raise TaskLoadError(
            code="E_FILE_NOT_FOUND",
            message="task file does not exist",
            file=str(p),
        )

    suffix = p.suffix.lower()
    if suffix not in {".yaml", ".yml", ".json"}:
        raise TaskLoadError(
            code="E_UNSUPPORTED_FORMAT",
            message="task files must be .yaml/.yml or .json",
            file=str(p),
        )

    try:
        raw_text = p.read_text(encoding="utf-8")
    except OSError as e:  # pragma: no cover
        raise TaskLoadError(code="E_FILE_READ", message=str(e), file=str(p)) from e

    try:
        data = json.loads(raw_text) if suffix == ".json" else yaml.safe_load(raw_text)
    except (ValueError, yaml.YAMLError) as e:
        code = "E_JSON_PARSE" if suffix == ".json" else "E_YAML_PARSE"
        raise TaskLoadError(code=code, message=str(e), file=str(p)) from e

    if not isinstance(data, dict):
        raise TaskLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="top-level document must be a mapping/object",
            file=str(p),
        )

    normalized: dict[str, Any] = {}
    groups = tag_groups(data)
    if groups is not None:
        normalized["tags"] = {tag: {"tasks": tasks} for tag, tasks in groups.items()}

    normalized["__file__"] = str(p)
    return normalized


def tag_groups(data: dict[str, Any]) -> Optional[TagGroups]:
    """Map tag name -> task records, or None when ``data`` is no known task shape.

    Recognized, in order: ``tags`` (or ``groups``) mapping, flat ``tasks`` list,
    and a bare ``{name: {"tasks": [...]}}`` mapping. Keys starting with ``__``
    are loader metadata and never count as tags.
    """

    groups = data.get("tags", data.get("groups"))
    if isinstance(groups, dict):
        return {
            str(tag): _list_of_dicts(group.get("tasks"))
            for tag, group in groups.items()
            if isinstance(group, dict)
        }

    tasks = data.get("tasks")
    if isinstance(tasks, list):
        return {DEFAULT_TAG: _list_of_dicts(tasks)}

    bare = {k: v for k, v in data.items() if not str(k).startswith("__")}
    if bare and all(isinstance(g, dict) and isinstance(g.get("tasks"), list) for g in bare.values()):
        return {str(tag): _list_of_dicts(group["tasks"]) for tag, group in bare.items()}

    return None


def _list_of_dicts(v: Any) -> list[dict[str, Any]]:
    return [x for x in v if isinstance(x, dict)] if isinstance(v, list) else []
