"""Diagnostic records shared by the resolver, validator and pipeline."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from viewdsl.nodes import ViewNode

type Severity = Literal["error", "warning", "info"]

# Stable codes consumed by downstream tooling. Do not rename.
UNKNOWN_WIDGET_TYPE = "unknown-widget-type"
MISSING_REQUIRED_PROP = "missing-required-prop"
UNKNOWN_REF_TARGET = "unknown-ref-target"
UNKNOWN_REF_SECTION = "unknown-ref-section"
ACCESSIBILITY_WARNING = "accessibility-warning"
MISSING_LOADER_FOR_BINDING = "missing-loader-for-binding"
CIRCULAR_REF = "circular-ref"
UNKNOWN_PARTIAL = "unknown-partial"
PAGE_MISSING_NAME = "page-missing-name"
PAGE_MISSING_ROUTE = "page-missing-route"
EMPTY_SECTIONS = "empty-sections"
UNRESOLVED_REF = "unresolved-ref"
UNRESOLVED_PARTIAL = "unresolved-partial"
PARSE_ERROR = "parse-error"


@dataclass(frozen=True)
class Diagnostic:
    """A severity-tagged, stably-coded problem report."""

    severity: Severity
    code: str
    message: str
    file: str
    line: int = 1
    col: int = 1

    @classmethod
    def at(
        cls,
        node: ViewNode,
        code: str,
        message: str,
        severity: Severity = "error",
    ) -> Diagnostic:
        """Build a diagnostic positioned at ``node``."""
        return cls(
            severity=severity,
            code=code,
            message=message,
            file=node.loc.file,
            line=node.loc.line,
            col=node.loc.col,
        )

    def __str__(self) -> str:
        return (
            f"{self.file}:{self.line}:{self.col}: "
            f"{self.severity}[{self.code}]: {self.message}"
        )


@dataclass(frozen=True)
class DiagnosticReport:
    """All diagnostics of a build, partitioned by severity on demand."""

    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def errors(self) -> tuple[Diagnostic, ...]:
        """Error diagnostics, in report order."""
        return self._with_severity("error")

    @property
    def warnings(self) -> tuple[Diagnostic, ...]:
        """Warning diagnostics, in report order."""
        return self._with_severity("warning")

    @property
    def infos(self) -> tuple[Diagnostic, ...]:
        """Informational diagnostics, in report order."""
        return self._with_severity("info")

    @property
    def has_errors(self) -> bool:
        """Return True if any diagnostic should fail the build."""
        return any(d.severity == "error" for d in self.diagnostics)

    def by_code(self) -> dict[str, list[Diagnostic]]:
        """Group diagnostics by code, preserving report order."""
        grouped: defaultdict[str, list[Diagnostic]] = defaultdict(list)
        for diagnostic in self.diagnostics:
            grouped[diagnostic.code].append(diagnostic)
        return dict(grouped)

    def _with_severity(self, severity: Severity) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity == severity)

    def __len__(self) -> int:
        return len(self.diagnostics)

    def __bool__(self) -> bool:
        return not self.has_errors

    def __str__(self) -> str:
        if not self.diagnostics:
            return "DiagnosticReport: clean"
        lines = "\n  ".join(str(d) for d in self.diagnostics)
        return (
            f"DiagnosticReport: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s), {len(self.infos)} info\n  {lines}"
        )
