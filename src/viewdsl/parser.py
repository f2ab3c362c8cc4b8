"""Parser: raw document tree to PageNode AST.

The input is whatever a document reader (YAML, JSON, ...) produced: nested
mappings, lists and scalars. Three steps run on every child node:

1. shorthand rewrite (``h1: Title``, ``line-chart: data.path``, inferred
   data tables), applied to a copy of the raw mapping
2. shape detection (``$ref``, ``$partial``, ``each``, ``$slot``,
   ``$fragment``, sections with ``widgets``/``sections``, then widgets)
3. conditional wrapping of sections and widgets carrying ``show``/``hide``
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from viewdsl.nodes import (
    AccessibilityConfig,
    Child,
    ConditionalNode,
    DataBinding,
    FragmentNode,
    LayoutConfig,
    LoaderConfig,
    LoopNode,
    PageNode,
    PartialNode,
    RefNode,
    ResponsiveConfig,
    SectionNode,
    SlotNode,
    SourceLocation,
    WidgetNode,
)
from viewdsl.resolver import PartialDef, PartialParam

logger = logging.getLogger(__name__)

UNKNOWN_WIDGET = "unknown"

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

CHART_SHORTHANDS = {
    "line-chart": "line",
    "area-chart": "area",
    "bar-chart": "bar",
    "donut-chart": "donut",
}

# Keys consumed by the parser; everything else on a widget lands in props.
STRUCTURAL_KEYS = frozenset({"type", "source", "name", "show", "hide", "layout"})

_REQUIRED_PAGE_KEYS = ("name", "type", "route")

_ACCESSIBILITY_KEYS = {
    "role": "role",
    "ariaLabel": "aria_label",
    "ariaLive": "aria_live",
    "landmark": "landmark",
    "skipNav": "skip_nav",
    "focusTrap": "focus_trap",
    "reduceMotion": "reduce_motion",
}


class ParseError(ValueError):
    """Raised when a document cannot become a page at all."""

    def __init__(self, message: str, file: str = "<inline>") -> None:
        super().__init__(message)
        self.file = file


# =============================================================================
# Shorthand rewrite
# =============================================================================


def expand_shorthand(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Rewrite terse forms into canonical widget mappings.

    At most one rule fires, and only on nodes without an explicit ``type``.
    Returns a new dict; ``raw`` is left untouched.
    """
    node = dict(raw)
    if "type" in node:
        return node

    for tag in HEADING_TAGS:
        if tag in node:
            text = node.pop(tag)
            return {**node, "type": "heading", "tag": tag, "text": text}

    for key, chart_type in CHART_SHORTHANDS.items():
        if key in node:
            source = node.pop(key)
            chart: dict[str, Any] = {"type": chart_type}
            if "x" in node:
                chart["xAxis"] = node.pop("x")
            if "y" in node:
                chart["yAxis"] = node.pop("y")
            return {**node, "type": "chart", "source": source, "chart": chart}

    if isinstance(node.get("columns"), list) and "source" in node:
        node["type"] = "data-table"

    return node


# =============================================================================
# Field helpers
# =============================================================================


def _binding(source: Any) -> DataBinding | None:
    if isinstance(source, str):
        return DataBinding(path=source)
    return None


def _layout(raw: Any) -> LayoutConfig | None:
    if not isinstance(raw, Mapping):
        return None
    return LayoutConfig(
        sm=raw.get("sm"),
        md=raw.get("md"),
        lg=raw.get("lg"),
        xl=raw.get("xl"),
    )


def _loader(raw: Any) -> LoaderConfig | None:
    if not isinstance(raw, Mapping):
        return None
    return LoaderConfig(
        source=str(raw.get("source", "")),
        params=tuple(raw.get("params") or ()),
    )


def _accessibility(raw: Any) -> AccessibilityConfig | None:
    if not isinstance(raw, Mapping):
        return None
    return AccessibilityConfig(
        **{attr: raw[key] for key, attr in _ACCESSIBILITY_KEYS.items() if key in raw},
    )


def _responsive(raw: Any) -> ResponsiveConfig | None:
    if not isinstance(raw, Mapping):
        return None
    breakpoints = raw.get("breakpoints")
    return ResponsiveConfig(
        strategy=raw.get("strategy"),
        breakpoints=dict(breakpoints) if isinstance(breakpoints, Mapping) else None,
    )


def _expression(value: object) -> str:
    """Render a show/hide value as expression source (``True`` -> ``true``)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _wrap_conditional(
    node: SectionNode | WidgetNode,
    raw: Mapping[str, Any],
) -> Child:
    show = raw.get("show")
    hide = raw.get("hide")
    if show is None and hide is None:
        return node
    condition = _expression(show) if show is not None else f"!{_expression(hide)}"
    return ConditionalNode(condition=condition, then=(node,), loc=node.loc)


# =============================================================================
# Children
# =============================================================================


def parse_children(raw: Any, file: str = "<inline>") -> tuple[Child, ...]:
    """Parse a list of raw child nodes, preserving order."""
    if not isinstance(raw, list):
        return ()
    return tuple(parse_child(item, file) for item in raw)


def parse_child(raw: Any, file: str = "<inline>") -> Child:
    """Parse one raw child node into a typed node."""
    loc = SourceLocation(file=file)

    if not isinstance(raw, Mapping):
        logger.debug("Non-mapping child %r in %s treated as unknown widget", raw, file)
        return WidgetNode(widget_type=UNKNOWN_WIDGET, loc=loc)

    node = expand_shorthand(raw)

    match node:
        case {"$ref": str(target)} if target:
            page, _, section = target.partition("#")
            return RefNode(target=target, page=page, section=section, loc=loc)

        case {"$partial": str(name)} if name:
            args = {k: v for k, v in node.items() if k != "$partial"}
            return PartialNode(name=name, args=args, loc=loc)

        case {"each": str(source)} if source:
            return LoopNode(
                source=source,
                as_=node.get("as") or "item",
                template=parse_child(node.get("template"), file),
                loc=loc,
            )

        case {"$slot": str(name)} if name:
            return SlotNode(
                name=name,
                description=node.get("description"),
                optional=bool(node.get("optional", False)),
                loc=loc,
            )

        case {"$fragment": list(items)}:
            return FragmentNode(children=parse_children(items, file), loc=loc)

    widgets, sections = node.get("widgets"), node.get("sections")
    if isinstance(widgets, list) or isinstance(sections, list):
        items = widgets if isinstance(widgets, list) else sections
        section = SectionNode(
            name=node.get("name"),
            layout=_layout(node.get("layout")),
            tag=node.get("tag"),
            aria_label=node.get("aria-label"),
            children=parse_children(items, file),
            loc=loc,
        )
        return _wrap_conditional(section, node)

    source = node.get("source")
    props = {k: v for k, v in node.items() if k not in STRUCTURAL_KEYS}
    if source is not None and not isinstance(source, str):
        props["source"] = source
    widget = WidgetNode(
        widget_type=str(node.get("type") or UNKNOWN_WIDGET),
        source=_binding(source),
        props=props,
        loc=loc,
    )
    return _wrap_conditional(widget, node)


# =============================================================================
# Documents
# =============================================================================


def parse_page(raw: Any, file: str = "<inline>") -> PageNode:
    """Parse a view document into a PageNode.

    Args:
        raw: Document tree as produced by a format reader
        file: Originating file name, recorded on every node

    Returns:
        The parsed page

    Raises:
        ParseError: If the document is not a mapping or lacks name, type or route

    """
    if not isinstance(raw, Mapping):
        msg = f"{file}: view document must be a mapping, got {type(raw).__name__}"
        raise ParseError(msg, file)

    missing = [key for key in _REQUIRED_PAGE_KEYS if raw.get(key) is None]
    if missing:
        msg = f"{file}: view document missing required key(s) {missing}"
        raise ParseError(msg, file)

    page_meta = raw.get("meta")
    page = PageNode(
        name=str(raw["name"]),
        type=str(raw["type"]),
        route=str(raw["route"]),
        auth=bool(raw.get("auth", False)),
        ssr=bool(raw.get("ssr", False)),
        loader=_loader(raw.get("loader")),
        page_meta=dict(page_meta) if isinstance(page_meta, Mapping) else None,
        accessibility=_accessibility(raw.get("accessibility")),
        responsive=_responsive(raw.get("responsive")),
        sections=parse_children(raw.get("sections"), file),
        loc=SourceLocation(file=file),
    )
    logger.debug("Parsed page %r from %s", page.name, file)
    return page


def parse_partial(raw: Any, file: str = "<inline>") -> PartialDef:
    """Parse a partial document (``name``, ``params``, ``template``).

    Raises:
        ParseError: If the document lacks a name or a template

    """
    if not isinstance(raw, Mapping) or not raw.get("name"):
        msg = f"{file}: partial document missing required key 'name'"
        raise ParseError(msg, file)
    if raw.get("template") is None:
        msg = f"{file}: partial '{raw['name']}' missing required key 'template'"
        raise ParseError(msg, file)

    params = tuple(
        PartialParam(
            name=str(p["name"]),
            type=str(p.get("type", "any")),
            default=p.get("default"),
            has_default="default" in p,
        )
        for p in raw.get("params") or ()
        if isinstance(p, Mapping) and p.get("name")
    )
    return PartialDef(
        name=str(raw["name"]),
        params=params,
        template=parse_child(raw["template"], file),
    )
