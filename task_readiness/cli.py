from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from task_readiness.core.config import ConfigError, load_and_merge
from task_readiness.core.engine import DependencyAnalyzer
from task_readiness.core.errors import AnalysisError, TaskLoadError
from task_readiness.core.io.load_tasks import load_tasks
from task_readiness.core.model import AnalysisResult

app = typer.Typer(add_completion=False, no_args_is_help=True)
console = Console(markup=False, highlight=False)


@app.callback()
def _callback(
    log_level: str = typer.Option("WARNING", "--log-level", help="Python logging level"),
) -> None:
    """Task dependency and readiness analysis."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("analyze")
def analyze(
    path: str = typer.Argument(..., help="Path to a tasks file (.json/.yaml/.yml)"),
    complexity_report: str | None = typer.Option(
        None, "--complexity-report", help="JSON complexity report (task id -> score 1-10)"
    ),
    project_root: str | None = typer.Option(
        None,
        "--project-root",
        help="Project directory holding .taskmaster/reports/task-complexity-report.json",
    ),
    config_file: str | None = typer.Option(None, "--config", help="YAML analyzer settings"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    limit: int = typer.Option(10, "--limit", help="Max ready tasks to show in text output"),
) -> None:
    """Score task readiness and report critical path, bottlenecks and cycles."""
    _check_format(format, "E_ANALYZE_UNKNOWN_FORMAT")

    def _emit_json(ok: bool, errors: list[AnalysisError], result: dict | None, exit_code: int) -> None:
        payload = {
            "tool": "readiness",
            "command": "analyze",
            "ok": ok,
            "error_count": len(errors),
            "errors": [_to_item(e) for e in errors],
            "result": result,
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        raise typer.Exit(code=exit_code)

    analyzer = _make_analyzer(config_file, complexity_report, project_root, format, _emit_json)

    try:
        tasks = load_tasks(path)
    except TaskLoadError as e:
        if format == "json":
            _emit_json(False, [e], None, 1)
        _print_errors([e])
        raise typer.Exit(code=1)

    result = analyzer.analyze(tasks)
    if not result.ok:
        err = _result_error(result)
        if format == "json":
            _emit_json(False, [err], None, 2)
        _print_errors([err])
        raise typer.Exit(code=2)

    if format == "json":
        _emit_json(True, [], result.to_dict(), 0)

    _render_text(result, limit)


@app.command("cycles")
def cycles(
    path: str = typer.Argument(..., help="Path to a tasks file (.json/.yaml/.yml)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """List circular dependency chains. Exits 2 when any exist."""
    _check_format(format, "E_CYCLES_UNKNOWN_FORMAT")

    try:
        tasks = load_tasks(path)
    except TaskLoadError as e:
        _print_errors([e])
        raise typer.Exit(code=1)

    result = DependencyAnalyzer().analyze(tasks)
    if not result.ok:
        _print_errors([_result_error(result)])
        raise typer.Exit(code=2)

    found = [[m.id for m in c] for c in result.cycles]
    if format == "json":
        typer.echo(
            json.dumps(
                {"tool": "readiness", "command": "cycles", "ok": not found, "cycles": found},
                indent=2,
                sort_keys=True,
            )
        )
    elif found:
        for ids in found:
            typer.echo("cycle: " + " -> ".join(ids + ids[:1]))
    else:
        typer.echo("OK: no circular dependencies")

    if found:
        raise typer.Exit(code=2)


@app.command("weights")
def weights(
    config_file: str | None = typer.Option(None, "--config", help="YAML analyzer settings"),
) -> None:
    """Print the effective readiness weights."""
    try:
        cfg = load_and_merge(config_file)
    except FileNotFoundError:
        _print_errors([_config_not_found(config_file)])
        raise typer.Exit(code=1)
    except ConfigError as e:
        _print_errors([_config_invalid(e)])
        raise typer.Exit(code=2)

    typer.echo("Weights:")
    for k, v in asdict(cfg.weights).items():
        typer.echo(f"- {k}: {v}")


def _make_analyzer(
    config_file: str | None,
    complexity_report: str | None,
    project_root: str | None,
    format: str,
    emit_json: Any,
) -> DependencyAnalyzer:
    try:
        cfg = load_and_merge(config_file)
    except FileNotFoundError:
        err = _config_not_found(config_file)
        if format == "json":
            emit_json(False, [err], None, 1)
        _print_errors([err])
        raise typer.Exit(code=1)
    except ConfigError as e:
        err = _config_invalid(e)
        if format == "json":
            emit_json(False, [err], None, 2)
        _print_errors([err])
        raise typer.Exit(code=2)

    if complexity_report:
        # Given on the command line, so relative to the working directory.
        cfg = replace(cfg, complexity_report=str(Path(complexity_report).resolve()))
    if project_root:
        cfg = replace(cfg, project_root=project_root)

    analyzer = DependencyAnalyzer(cfg)
    asyncio.run(analyzer.initialize())
    return analyzer


def _render_text(result: AnalysisResult, limit: int) -> None:
    for insight in result.insights:
        console.print(f"* {insight.message}")

    if result.ready_tasks:
        table = Table(title="Ready tasks")
        table.add_column("id")
        table.add_column("title")
        table.add_column("priority")
        table.add_column("score", justify="right")
        for r in result.ready_tasks[: max(0, limit)]:
            table.add_row(r.node.id, r.node.title, r.node.priority, f"{r.readiness_score:.2f}")
        console.print(table)

    if result.critical_path and result.critical_path.length:
        ids = " -> ".join(n.id for n in result.critical_path.nodes)
        console.print(f"Critical path: {ids}")

    for b in result.bottlenecks[:3]:
        console.print(f"Bottleneck {b.node.id} (severity {b.severity}): {b.reason}")

    for c in result.cycles:
        console.print("Cycle: " + " -> ".join(m.id for m in c))

    for rec in result.recommendations:
        console.print(f"[{rec.priority}] {rec.message}")


def _check_format(format: str, code: str) -> None:
    if format not in ("text", "json"):
        _print_errors(
            [
                AnalysisError(
                    code=code,
                    message=f"unknown format: {format} (choose one of: text, json)",
                    file=None,
                    path="format",
                )
            ]
        )
        raise typer.Exit(code=2)


def _result_error(result: AnalysisResult) -> AnalysisError:
    return result.error or AnalysisError(code="E_ANALYSIS_FAILED", message="analysis failed")


def _config_not_found(config_file: str | None) -> AnalysisError:
    return TaskLoadError(
        code="E_CONFIG_FILE_NOT_FOUND",
        message=f"config file not found: {config_file}",
        file=None,
        path="config",
    )


def _config_invalid(e: ConfigError) -> AnalysisError:
    return AnalysisError(code="E_CONFIG_FILE_INVALID", message=str(e), file=None, path="config")


def _to_item(e: AnalysisError) -> dict:
    source = "load" if isinstance(e, TaskLoadError) else "analyze"
    return {
        "code": e.code,
        "message": e.message,
        "file": e.file,
        "path": e.path,
        "severity": "error",
        "source": source,
    }


def _print_errors(errors: list[AnalysisError]) -> None:
    errors_sorted = sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
    for e in errors_sorted:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="readiness")


if __name__ == "__main__":
    main()
