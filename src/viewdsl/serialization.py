"""Build export for downstream code generators.

A generator consumes one envelope per build::

    {
        "format": "viewdsl.build",
        "version": 1,
        "ok": true,
        "pages": [{"kind": "page", ...}, ...],
        "diagnostics": [{"severity": "warning", "code": ..., ...}, ...]
    }

Pages are the resolved trees, written node by node with a ``kind``
discriminant through :class:`~viewdsl.adapters.JSONAdapter`. Single nodes can
be exported on their own with :func:`to_dict` / :func:`from_dict`.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from typing import Any

from viewdsl.adapters import JSONAdapter
from viewdsl.diagnostics import Diagnostic, DiagnosticReport
from viewdsl.nodes import PageNode, ViewNode
from viewdsl.pipeline import BuildResult

EXPORT_FORMAT = "viewdsl.build"
EXPORT_VERSION = 1

_adapter = JSONAdapter()
_DIAGNOSTIC_KEYS = tuple(f.name for f in dataclasses.fields(Diagnostic))


# =============================================================================
# Nodes
# =============================================================================


def to_dict(node: ViewNode) -> dict[str, Any]:
    """Export one node, and its whole subtree, as plain data.

    Raises:
        TypeError: If ``node`` is not a view node

    """
    if not isinstance(node, ViewNode):
        msg = f"to_dict expects a view node, got {type(node).__name__}"
        raise TypeError(msg)
    return _adapter.serialize_node(node)


def from_dict(data: Mapping[str, Any]) -> ViewNode:
    """Rebuild a node exported by :func:`to_dict`.

    Raises:
        KeyError: If ``data`` has no ``kind`` discriminant
        ValueError: If ``kind`` names no registered node class

    """
    if "kind" not in data:
        msg = "Node data has no 'kind' discriminant"
        raise KeyError(msg)
    kind = data["kind"]
    if kind not in ViewNode.registry:
        known = ", ".join(sorted(ViewNode.registry))
        msg = f"'{kind}' is not a view node kind (known kinds: {known})"
        raise ValueError(msg)
    return _adapter.deserialize_node(dict(data))


# =============================================================================
# Diagnostics
# =============================================================================


def diagnostic_to_dict(diagnostic: Diagnostic) -> dict[str, Any]:
    """Export a diagnostic as plain data."""
    return dataclasses.asdict(diagnostic)


def diagnostic_from_dict(data: Mapping[str, Any]) -> Diagnostic:
    """Rebuild a diagnostic; ``line`` and ``col`` default to 1."""
    return Diagnostic(**{key: data[key] for key in _DIAGNOSTIC_KEYS if key in data})


# =============================================================================
# Build envelope
# =============================================================================


def export_build(result: BuildResult) -> dict[str, Any]:
    """Export resolved pages and their diagnostics as one envelope."""
    return {
        "format": EXPORT_FORMAT,
        "version": EXPORT_VERSION,
        "ok": result.ok,
        "pages": [to_dict(page) for page in result.pages],
        "diagnostics": [diagnostic_to_dict(d) for d in result.diagnostics],
    }


def import_build(data: Mapping[str, Any]) -> BuildResult:
    """Read an envelope written by :func:`export_build`.

    The ``ok`` flag is recomputed from the diagnostics, not trusted.

    Raises:
        ValueError: If ``data`` is not a build export of a supported version,
            or one of its pages is not a page node

    """
    if data.get("format") != EXPORT_FORMAT:
        msg = f"Not a {EXPORT_FORMAT} export (format={data.get('format')!r})"
        raise ValueError(msg)
    if data.get("version") != EXPORT_VERSION:
        msg = (
            f"Unsupported {EXPORT_FORMAT} version {data.get('version')!r}; "
            f"this reader understands version {EXPORT_VERSION}"
        )
        raise ValueError(msg)

    pages: list[PageNode] = []
    for index, raw in enumerate(data.get("pages", ())):
        page = from_dict(raw)
        if not isinstance(page, PageNode):
            msg = f"pages[{index}] is a '{page.kind}' node, expected 'page'"
            raise ValueError(msg)
        pages.append(page)

    diagnostics = tuple(diagnostic_from_dict(d) for d in data.get("diagnostics", ()))
    return BuildResult(pages=tuple(pages), report=DiagnosticReport(diagnostics))


# =============================================================================
# JSON
# =============================================================================


def to_json(obj: ViewNode | BuildResult, *, indent: int | None = 2) -> str:
    """Write a node or a whole build as JSON (2-space indent, None for compact)."""
    data = export_build(obj) if isinstance(obj, BuildResult) else to_dict(obj)
    return json.dumps(data, indent=indent)


def from_json(s: str) -> ViewNode | BuildResult:
    """Read JSON written by :func:`to_json`.

    Build envelopes are recognized by their ``format`` key; anything else is
    read as a single node.
    """
    data = json.loads(s)
    if isinstance(data, Mapping) and "format" in data:
        return import_build(data)
    return from_dict(data)
