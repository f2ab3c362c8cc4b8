"""In-memory build driver: parse, resolve, validate.

Document discovery and reading are left to the caller; ``build`` takes the
already-loaded document trees keyed by file name.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from viewdsl.diagnostics import PARSE_ERROR, Diagnostic, DiagnosticReport
from viewdsl.nodes import PageNode
from viewdsl.parser import ParseError, parse_page
from viewdsl.registry import WidgetRegistry
from viewdsl.resolver import PartialDef, resolve_all
from viewdsl.validator import validate_pages

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildResult:
    """Resolved pages and every diagnostic of the build."""

    pages: tuple[PageNode, ...]
    report: DiagnosticReport

    @property
    def ok(self) -> bool:
        """Return True if no error-severity diagnostic was produced."""
        return not self.report.has_errors

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        """Every diagnostic of the build, in pass order."""
        return self.report.diagnostics


def parse_documents(
    documents: Mapping[str, Any],
) -> tuple[list[PageNode], list[Diagnostic]]:
    """Parse each document on its own; a bad document does not stop the rest."""
    pages: list[PageNode] = []
    failures: list[Diagnostic] = []
    for file, raw in documents.items():
        try:
            pages.append(parse_page(raw, file))
        except ParseError as exc:
            logger.warning("Skipping %s: %s", file, exc)
            failures.append(
                Diagnostic(
                    severity="error",
                    code=PARSE_ERROR,
                    message=str(exc),
                    file=file,
                ),
            )
    return pages, failures


def build(
    documents: Mapping[str, Any],
    *,
    registry: WidgetRegistry | None = None,
    partials: Mapping[str, PartialDef] | Iterable[PartialDef] | None = None,
) -> BuildResult:
    """Compile view documents into resolved pages.

    Args:
        documents: Raw document trees keyed by originating file name
        registry: Widget registry; a registry of built-ins when omitted
        partials: Partial templates available to ``$partial`` nodes

    Returns:
        Resolved pages plus parse, resolution and validation diagnostics

    """
    registry = registry if registry is not None else WidgetRegistry()

    pages, diagnostics = parse_documents(documents)
    resolved = resolve_all(pages, registry, partials)
    diagnostics.extend(resolved.errors)
    diagnostics.extend(validate_pages(resolved.pages, registry))

    report = DiagnosticReport(tuple(diagnostics))
    logger.info(
        "Built %d page(s): %d error(s), %d warning(s)",
        len(resolved.pages),
        len(report.errors),
        len(report.warnings),
    )
    return BuildResult(pages=resolved.pages, report=report)
