"""Memo of full analysis results keyed by a content digest.

The cache is unbounded; the owner empties it with ``clear()``.
"""

from __future__ import annotations

import hashlib
import json
import threading
from typing import Any, Optional

from task_readiness.core.model import AnalysisResult


def cache_key(*parts: Any) -> str:
    """BLAKE2b digest over the canonical JSON of ``parts``."""
    canonical = json.dumps(parts, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.blake2b(canonical.encode("utf-8"), digest_size=16).hexdigest()


class AnalysisCache:
    """Thread-safe map of digest -> ``AnalysisResult`` with hit/miss counters."""

    def __init__(self) -> None:
        self._entries: dict[str, AnalysisResult] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[AnalysisResult]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._hits += 1
            else:
                self._misses += 1
            return entry

    def put(self, key: str, result: AnalysisResult) -> None:
        with self._lock:
            self._entries[key] = result

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
