from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from task_readiness.core.io.complexity import DEFAULT_COMPLEXITY
from task_readiness.core.score.readiness import ScoringWeights


WEIGHT_KEYS: tuple[str, ...] = ("dependency", "complexity", "context", "priority")


@dataclass(frozen=True)
class AnalyzerConfig:
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    cache_results: bool = True
    # Recorded only; a slower analysis is logged, never interrupted.
    max_analysis_time_ms: int = 5000
    default_complexity: int = DEFAULT_COMPLEXITY
    complexity_report: Optional[str] = None
    # Base for a relative complexity_report and for the default report location.
    project_root: Optional[str] = None


class ConfigError(ValueError):
    pass


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Load analyzer settings from a YAML file.

    Format:
      weights: {dependency: 0.8, complexity: 0.6, context: 0.9, priority: 0.7}
      cache_results: true
      max_analysis_time_ms: 5000
      default_complexity: 5
      complexity_report: reports/task-complexity-report.json
      project_root: .

    Every key is optional. Returns the validated (partial) mapping.
    """
    p = Path(path)
    raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("config file must be a mapping")
    return validate_overrides(raw)


def validate_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    known = {f.name for f in fields(AnalyzerConfig)}
    for k in raw:
        if k not in known:
            raise ConfigError(f"unknown config key: {k}")

    out: dict[str, Any] = {}
    if "weights" in raw:
        out["weights"] = validate_weights(raw["weights"])

    if "cache_results" in raw:
        if not isinstance(raw["cache_results"], bool):
            raise ConfigError("cache_results must be a boolean")
        out["cache_results"] = raw["cache_results"]

    if "max_analysis_time_ms" in raw:
        v = raw["max_analysis_time_ms"]
        if isinstance(v, bool) or not isinstance(v, int) or v <= 0:
            raise ConfigError("max_analysis_time_ms must be a positive integer")
        out["max_analysis_time_ms"] = v

    if "default_complexity" in raw:
        v = raw["default_complexity"]
        if isinstance(v, bool) or not isinstance(v, int) or not 1 <= v <= 10:
            raise ConfigError("default_complexity must be an integer in 1..10")
        out["default_complexity"] = v

    if "complexity_report" in raw:
        v = raw["complexity_report"]
        if v is not None and (not isinstance(v, str) or not v.strip()):
            raise ConfigError("complexity_report must be a non-empty string")
        out["complexity_report"] = v

    if "project_root" in raw:
        v = raw["project_root"]
        if v is not None and (not isinstance(v, str) or not v.strip()):
            raise ConfigError("project_root must be a non-empty string")
        out["project_root"] = v

    return out


def validate_weights(raw: Any) -> dict[str, float]:
    if not isinstance(raw, dict):
        raise ConfigError("weights must be a mapping of factor -> number")
    out: dict[str, float] = {}
    for k, v in raw.items():
        if k not in WEIGHT_KEYS:
            raise ConfigError(f"unknown weight '{k}' (choose from: {', '.join(WEIGHT_KEYS)})")
        if isinstance(v, bool) or not isinstance(v, (int, float)) or v < 0:
            raise ConfigError(f"weight '{k}' must be a non-negative number")
        out[k] = float(v)
    return out


def merged_config(
    overrides: dict[str, Any] | None = None, base: AnalyzerConfig | None = None
) -> AnalyzerConfig:
    """Return ``base`` (defaults when omitted) with validated overrides applied.

    Weight overrides merge factor by factor; other keys replace.
    """
    cfg = base or AnalyzerConfig()
    if not overrides:
        return cfg
    checked = validate_overrides(overrides)
    weights = checked.pop("weights", None)
    if weights:
        checked["weights"] = replace(cfg.weights, **weights)
    return replace(cfg, **checked)


def load_and_merge(config_file: str | None) -> AnalyzerConfig:
    if not config_file:
        return merged_config()
    return merged_config(load_config_file(config_file))
