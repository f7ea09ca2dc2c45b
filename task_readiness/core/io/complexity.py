from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_COMPLEXITY = 5

# Where the task tool writes its report, relative to the project root.
DEFAULT_REPORT_PATH = Path(".taskmaster") / "reports" / "task-complexity-report.json"

ComplexityMap = Mapping[str, int]


def clamp_complexity(value: Any, default: int = DEFAULT_COMPLEXITY) -> int:
    """Coerce a raw score into the 1..10 range; non-numeric values fall back to ``default``."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return max(1, min(10, int(round(value))))


def parse_complexity_report(data: Any) -> dict[str, int]:
    """Extract ``{task_id: score}`` from a complexity report document.

    Accepted shapes:
      {"complexityAnalysis": [{"taskId": 1, "complexityScore": 7}, ...]}
      {"tasks": [{"id": 1, "complexityScore": 7}, ...]}
      {"1": 7, "2": 3}
    Entries that cannot be read are skipped.
    """

    out: dict[str, int] = {}
    if not isinstance(data, dict):
        return out

    entries = data.get("complexityAnalysis")
    id_key = "taskId"
    if not isinstance(entries, list):
        entries = data.get("tasks")
        id_key = "id"

    if isinstance(entries, list):
        for item in entries:
            if not isinstance(item, dict) or item.get(id_key) is None:
                continue
            score = item.get("complexityScore")
            if score is None:
                continue
            out[str(item[id_key])] = clamp_complexity(score)
        return out

    for k, v in data.items():
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            out[str(k)] = clamp_complexity(v)
    return out


def load_complexity_report(path: Optional[str]) -> dict[str, int]:
    """Read a JSON complexity report.

    A missing or unreadable report is not an error: the map comes back empty and
    every task is scored with the default complexity.
    """

    if not path:
        return {}
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.info("no complexity report at %s, using default complexity scoring", p)
        return {}
    except (OSError, ValueError) as e:
        logger.warning("could not read complexity report %s: %s", p, e)
        return {}

    scores = parse_complexity_report(data)
    logger.info("loaded complexity report %s (%d tasks)", p, len(scores))
    return scores


async def aload_complexity_report(path: Optional[str]) -> dict[str, int]:
    return await asyncio.to_thread(load_complexity_report, path)


def resolve_report_path(report: Optional[str], project_root: Optional[str]) -> Optional[Path]:
    """Pick the complexity report to read.

    An explicit ``report`` wins; a relative one is taken from ``project_root``
    when that is set. Without a report, a project root falls back to
    ``DEFAULT_REPORT_PATH`` under it. With neither, there is nothing to read.
    """

    if report:
        p = Path(report)
        if project_root and not p.is_absolute():
            p = Path(project_root) / p
        return p
    if project_root:
        return Path(project_root) / DEFAULT_REPORT_PATH
    return None
