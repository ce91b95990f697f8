"""Diagnostics records and the exception hierarchy used across the pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, List, Sequence


class Severity(str, enum.Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


PARSE_FAILURE = "parse-failure"
PLUGIN_FAILURE = "plugin-failure"
PLUGIN_UNAVAILABLE = "plugin-unavailable"
UNRESOLVED_REFERENCE = "unresolved-reference"
CYCLIC_INHERITANCE = "cyclic-inheritance"
DUPLICATE_TAG = "duplicate-tag"
SYNTAX_ERROR = "syntax-error"
MERGE_VALIDATION_FAILURE = "merge-validation-failure"


@dataclass(frozen=True)
class Diagnostic:
    """A single (module path, severity, message) record surfaced to callers."""

    path: str
    severity: Severity
    message: str
    code: str = ""

    def __str__(self) -> str:
        location = self.path or "<run>"
        return f"{location}: {self.severity.value}: {self.message}"


def info(path: str, message: str, code: str = "") -> Diagnostic:
    return Diagnostic(path=path, severity=Severity.INFO, message=message, code=code)


def warning(path: str, message: str, code: str = "") -> Diagnostic:
    return Diagnostic(path=path, severity=Severity.WARNING, message=message, code=code)


def error(path: str, message: str, code: str = "") -> Diagnostic:
    return Diagnostic(path=path, severity=Severity.ERROR, message=message, code=code)


def sort_diagnostics(diagnostics: Iterable[Diagnostic]) -> List[Diagnostic]:
    """Order diagnostics by module path, keeping emission order within a module."""
    indexed = list(enumerate(diagnostics))
    indexed.sort(key=lambda item: (item[1].path, item[0]))
    return [diagnostic for _, diagnostic in indexed]


class AnalysisError(RuntimeError):
    """Base class for errors raised by the analysis pipeline."""


class ParseFailure(AnalysisError):
    """Raised when a module's source cannot be turned into a syntax tree."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to parse {path}: {reason}")
        self.path = path
        self.reason = reason


class PluginLoadError(AnalysisError):
    """Raised when a configured plugin spec cannot be turned into a plugin."""


class NoAnalyzableModulesError(AnalysisError):
    """Raised when a run ends without a single successfully analyzed module."""

    def __init__(self, diagnostics: Sequence[Diagnostic]) -> None:
        super().__init__("No analyzable modules; manifest was not emitted")
        self.diagnostics = list(diagnostics)


@dataclass(frozen=True)
class ValidationIssue:
    """Represents a single structural problem found in the merged manifest."""

    path: str
    pointer: str
    detail: str


class ManifestValidationError(AnalysisError):
    """Raised when the merged manifest violates a structural invariant."""

    def __init__(self, message: str, issues: Sequence[ValidationIssue]) -> None:
        super().__init__(message)
        self.issues = list(issues)

    def diagnostics(self) -> List[Diagnostic]:
        return [
            Diagnostic(
                path=issue.path,
                severity=Severity.FATAL,
                message=f"{issue.pointer}: {issue.detail}",
                code=MERGE_VALIDATION_FAILURE,
            )
            for issue in self.issues
        ]


__all__ = [
    "AnalysisError",
    "CYCLIC_INHERITANCE",
    "DUPLICATE_TAG",
    "Diagnostic",
    "MERGE_VALIDATION_FAILURE",
    "ManifestValidationError",
    "NoAnalyzableModulesError",
    "PARSE_FAILURE",
    "PLUGIN_FAILURE",
    "PLUGIN_UNAVAILABLE",
    "ParseFailure",
    "PluginLoadError",
    "SYNTAX_ERROR",
    "Severity",
    "UNRESOLVED_REFERENCE",
    "ValidationIssue",
    "error",
    "info",
    "sort_diagnostics",
    "warning",
]
