import asyncio
import json
from pathlib import Path

from task_readiness.core.io.complexity import (
    aload_complexity_report,
    clamp_complexity,
    load_complexity_report,
    parse_complexity_report,
    resolve_report_path,
)

EXAMPLES = Path(__file__).resolve().parent.parent / "examples"


def test_host_report_format():
    scores = load_complexity_report(str(EXAMPLES / "complexity-report.json"))
    assert scores == {"2": 9, "3": 7, "6": 3}


def test_alternate_formats():
    assert parse_complexity_report({"tasks": [{"id": "a", "complexityScore": 4}, {"id": "b"}]}) == {
        "a": 4
    }
    assert parse_complexity_report({"1": 2, "2": 15, "meta": "x"}) == {"1": 2, "2": 10}
    assert parse_complexity_report(["not", "a", "report"]) == {}


def test_clamp():
    assert clamp_complexity(0) == 1
    assert clamp_complexity(7.6) == 8
    assert clamp_complexity("7") == 5
    assert clamp_complexity(True) == 5


def test_missing_or_broken_report_degrades_to_empty(tmp_path):
    assert load_complexity_report(None) == {}
    assert load_complexity_report(str(tmp_path / "missing.json")) == {}
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    assert load_complexity_report(str(broken)) == {}


def test_async_load(tmp_path):
    p = tmp_path / "report.json"
    p.write_text(json.dumps({"complexityAnalysis": [{"taskId": 1, "complexityScore": 6}]}), encoding="utf-8")
    assert asyncio.run(aload_complexity_report(str(p))) == {"1": 6}


def test_resolve_report_path(tmp_path):
    root = str(tmp_path)
    assert resolve_report_path(None, None) is None
    assert resolve_report_path(None, root) == tmp_path / ".taskmaster" / "reports" / "task-complexity-report.json"
    assert resolve_report_path("r.json", root) == tmp_path / "r.json"
    assert resolve_report_path("/abs/r.json", root) == Path("/abs/r.json")
    assert resolve_report_path("r.json", None) == Path("r.json")
