"""Sinks for human-readable rule compilation diagnostics."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class Diagnostics(Protocol):
    """Receives errors and warnings produced while compiling rules."""

    def error(self, message: str) -> None:
        """Report a problem that made part of a rule unusable."""

    def warning(self, message: str) -> None:
        """Report a degraded but usable rule."""


class DiagnosticLevel(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    level: DiagnosticLevel
    message: str


class LoggingDiagnostics:
    """Forwards diagnostics to a standard logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("mc_rules.diagnostics")

    def error(self, message: str) -> None:
        self._logger.error(message)

    def warning(self, message: str) -> None:
        self._logger.warning(message)


class CollectingDiagnostics(LoggingDiagnostics):
    """Records every diagnostic in order and still logs it."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        super().__init__(logger)
        self.entries: list[Diagnostic] = []

    def error(self, message: str) -> None:
        self.entries.append(Diagnostic(DiagnosticLevel.ERROR, message))
        super().error(message)

    def warning(self, message: str) -> None:
        self.entries.append(Diagnostic(DiagnosticLevel.WARNING, message))
        super().warning(message)

    @property
    def errors(self) -> list[str]:
        return [entry.message for entry in self.entries if entry.level is DiagnosticLevel.ERROR]

    @property
    def warnings(self) -> list[str]:
        return [entry.message for entry in self.entries if entry.level is DiagnosticLevel.WARNING]
