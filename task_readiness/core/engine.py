from __future__ import annotations

import logging
import threading
import time
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional

from task_readiness.core.analyze.bottlenecks import detect_bottlenecks
from task_readiness.core.analyze.critical_path import find_critical_path
from task_readiness.core.analyze.cycles import detect_cycles
from task_readiness.core.analyze.insights import generate_insights, generate_recommendations
from task_readiness.core.analyze.ready import find_ready_tasks
from task_readiness.core.cache import AnalysisCache, cache_key
from task_readiness.core.config import AnalyzerConfig, ConfigError, merged_config, validate_weights
from task_readiness.core.errors import AnalysisError
from task_readiness.core.graph.build_graph import build_graph, count_components
from task_readiness.core.io.complexity import aload_complexity_report, resolve_report_path
from task_readiness.core.model import AnalysisResult, Graph, GraphSummary
from task_readiness.core.score.readiness import score_all

logger = logging.getLogger(__name__)

ANALYSIS_COMPLETE = "analysis-complete"
CONFIG_UPDATED = "config-updated"

Observer = Callable[[str, Any], None]


@dataclass(frozen=True)
class AnalyzerStats:
    analysis_count: int
    cache_hits: int
    cache_size: int
    average_analysis_time_ms: float
    last_analysis_time_ms: float
    last_analysis_timestamp: Optional[str]
    graph_nodes: int
    graph_edges: int


class DependencyAnalyzer:
    """Builds the task graph and runs every analysis over it.

    Each instance owns its own result cache; there is no shared state between
    instances. ``analyze`` never raises: input problems come back as a failed
    ``AnalysisResult``.

    One instance may be shared by threads. The cache has its own lock, and the
    run counters with ``last_result``/``last_graph`` are written under
    ``_stats_lock``. ``update_config`` and ``set_complexity`` swap whole values
    and take effect from the next ``analyze``.
    """

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        *,
        complexity: Optional[Mapping[str, int]] = None,
        observer: Optional[Observer] = None,
    ) -> None:
        self._config = config or AnalyzerConfig()
        self._complexity: dict[str, int] = dict(complexity or {})
        self._observer = observer
        self._cache = AnalysisCache()

        self._stats_lock = threading.Lock()
        self._analysis_count = 0
        self._average_ms = 0.0
        self._last_ms = 0.0
        self.last_result: Optional[AnalysisResult] = None
        self.last_graph: Optional[Graph] = None

    @property
    def config(self) -> AnalyzerConfig:
        return self._config

    @property
    def complexity(self) -> Mapping[str, int]:
        return self._complexity

    async def initialize(self) -> int:
        """Load the complexity report.

        Reads ``complexity_report`` when set, otherwise
        ``<project_root>/.taskmaster/reports/task-complexity-report.json`` when a
        project root is set. Returns the number of task scores loaded. A missing
        or unreadable report leaves the default complexity in place.
        """
        report = resolve_report_path(self._config.complexity_report, self._config.project_root)
        if report is None:
            return 0
        scores = await aload_complexity_report(str(report))
        if scores:
            self.set_complexity(scores)
        return len(scores)

    def set_complexity(self, complexity: Mapping[str, int]) -> None:
        self._complexity = dict(complexity)

    def analyze(
        self, tasks_data: Any, options: Optional[dict[str, Any]] = None
    ) -> AnalysisResult:
        """Run the full analysis, or return the memoized result for identical input."""
        start = time.perf_counter()
        options = options or {}

        try:
            weights = self._config.weights
            if "weights" in options:
                weights = replace(weights, **validate_weights(options["weights"]))

            key = cache_key(
                tasks_data,
                options,
                asdict(weights),
                self._config.default_complexity,
                sorted(self._complexity.items()),
            )
            if self._config.cache_results:
                cached = self._cache.get(key)
                if cached is not None:
                    logger.debug("analysis cache hit %s", key)
                    return cached

            graph = build_graph(
                tasks_data,
                self._complexity,
                default_complexity=self._config.default_complexity,
            )
            scores = score_all(graph, weights)
            critical_path = find_critical_path(graph)
            bottlenecks = detect_bottlenecks(graph)
            ready = find_ready_tasks(graph, scores)
            cycles = detect_cycles(graph)

            elapsed_ms = (time.perf_counter() - start) * 1000
            result = AnalysisResult(
                ok=True,
                timestamp=_now(),
                analysis_time_ms=elapsed_ms,
                graph=GraphSummary(
                    nodes=len(graph.nodes),
                    edges=len(graph.edges),
                    dependency_edges=graph.dependency_edge_count,
                    components=count_components(graph),
                ),
                readiness_scores=scores,
                critical_path=critical_path,
                bottlenecks=bottlenecks,
                ready_tasks=ready,
                cycles=cycles,
                insights=generate_insights(graph, scores, critical_path, bottlenecks, cycles),
                recommendations=generate_recommendations(ready, bottlenecks, cycles),
            )
        except AnalysisError as e:
            return self._failure(e, start)
        except ConfigError as e:
            return self._failure(
                AnalysisError(code="E_INVALID_OPTIONS", message=str(e), path="options.weights"),
                start,
            )
        except Exception as e:
            logger.exception("dependency analysis failed")
            return self._failure(AnalysisError(code="E_ANALYSIS_FAILED", message=str(e)), start)

        if self._config.cache_results:
            self._cache.put(key, result)

        if elapsed_ms > self._config.max_analysis_time_ms:
            logger.warning(
                "analysis took %.0fms (budget %dms)", elapsed_ms, self._config.max_analysis_time_ms
            )

        self._record(elapsed_ms, result, graph)
        self._emit(ANALYSIS_COMPLETE, result)
        return result

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.info("dependency analysis cache cleared")

    def update_config(self, **overrides: Any) -> AnalyzerConfig:
        """Apply config overrides.

        Any change to weights or the default complexity drops every cached result.
        """
        previous = self._config
        self._config = merged_config(overrides, base=previous)
        if (
            self._config.weights != previous.weights
            or self._config.default_complexity != previous.default_complexity
        ):
            self.clear_cache()
        self._emit(CONFIG_UPDATED, self._config)
        return self._config

    @property
    def stats(self) -> AnalyzerStats:
        with self._stats_lock:
            last_result, last_graph = self.last_result, self.last_graph
            return AnalyzerStats(
                analysis_count=self._analysis_count,
                cache_hits=self._cache.hits,
                cache_size=len(self._cache),
                average_analysis_time_ms=self._average_ms,
                last_analysis_time_ms=self._last_ms,
                last_analysis_timestamp=last_result.timestamp if last_result else None,
                graph_nodes=len(last_graph.nodes) if last_graph else 0,
                graph_edges=len(last_graph.edges) if last_graph else 0,
            )

    def _record(self, elapsed_ms: float, result: AnalysisResult, graph: Graph) -> None:
        with self._stats_lock:
            self._analysis_count += 1
            self._last_ms = elapsed_ms
            self._average_ms += (elapsed_ms - self._average_ms) / self._analysis_count
            self.last_result = result
            self.last_graph = graph

    def _failure(self, error: AnalysisError, start: float) -> AnalysisResult:
        return AnalysisResult(
            ok=False,
            timestamp=_now(),
            analysis_time_ms=(time.perf_counter() - start) * 1000,
            error=error,
        )

    def _emit(self, event: str, payload: Any) -> None:
        if self._observer is None:
            return
        try:
            self._observer(event, payload)
        except Exception:
            logger.exception("observer failed handling %s", event)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
