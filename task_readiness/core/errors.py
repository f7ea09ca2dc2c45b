from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AnalysisError(Exception):
    """Coded failure for a task file or an analysis run.

    ``code`` is a stable ``E_*`` identifier; ``file`` is the task file and
    ``path`` the offending location inside it (``<root>``, ``options.weights``).
    Loading raises ``TaskLoadError``. ``DependencyAnalyzer.analyze`` catches
    everything else and returns it as ``AnalysisResult.error``; the CLI prints it
    as ``file:path: code: message`` or as an item in the JSON ``errors`` list.
    """

    code: str
    message: str
    file: Optional[str] = None
    path: Optional[str] = None

    def __str__(self) -> str:
        parts: list[str] = []
        if self.file:
            parts.append(self.file)
        if self.path:
            parts.append(self.path)
        loc = ":".join(parts) if parts else "<tasks>"
        return f"{loc}: {self.code}: {self.message}"


class TaskLoadError(AnalysisError):
    """The task file could not be read as a mapping. CLI exit code 1."""


class AnalysisInputError(AnalysisError):
    """The loaded data is not a task collection. CLI exit code 2."""
