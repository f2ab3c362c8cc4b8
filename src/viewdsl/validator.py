"""Read-only checks over resolved pages.

Validation never raises and never rebuilds the tree; it only reports.
Unknown widget types are checked again here so the validator can run on
its own against an already-resolved page.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, assert_never

from viewdsl.diagnostics import (
    ACCESSIBILITY_WARNING,
    EMPTY_SECTIONS,
    MISSING_LOADER_FOR_BINDING,
    MISSING_REQUIRED_PROP,
    PAGE_MISSING_NAME,
    PAGE_MISSING_ROUTE,
    UNKNOWN_WIDGET_TYPE,
    UNRESOLVED_PARTIAL,
    UNRESOLVED_REF,
    Diagnostic,
)
from viewdsl.nodes import (
    Child,
    ConditionalNode,
    FragmentNode,
    LoopNode,
    PageNode,
    PartialNode,
    RefNode,
    SectionNode,
    SlotNode,
    WidgetNode,
)

if TYPE_CHECKING:
    from viewdsl.registry import WidgetRegistry, WidgetSchema

INTERACTIVE_WIDGETS = frozenset({"chat-input", "search-bar", "form"})


def _check_required_props(
    node: WidgetNode,
    schema: WidgetSchema,
    diagnostics: list[Diagnostic],
) -> None:
    for prop_name in schema.required_props():
        if prop_name in node.props:
            continue
        if prop_name == "source" and node.source is not None:
            continue
        diagnostics.append(
            Diagnostic.at(
                node,
                MISSING_REQUIRED_PROP,
                f'Widget "{node.widget_type}" missing required prop "{prop_name}"',
            ),
        )


def _check_accessibility(node: WidgetNode, diagnostics: list[Diagnostic]) -> None:
    props = node.props
    has_alt = "alt" in props or bool(props.get("aria-label"))
    if node.widget_type == "image" and not has_alt:
        diagnostics.append(
            Diagnostic.at(
                node,
                ACCESSIBILITY_WARNING,
                'Image widget missing "alt" text',
                severity="warning",
            ),
        )
    if node.widget_type in INTERACTIVE_WIDGETS and not (
        props.get("aria-label") or props.get("label")
    ):
        diagnostics.append(
            Diagnostic.at(
                node,
                ACCESSIBILITY_WARNING,
                f'Widget "{node.widget_type}" should have an aria-label or label',
                severity="info",
            ),
        )


def _check_widget(
    node: WidgetNode,
    registry: WidgetRegistry,
    diagnostics: list[Diagnostic],
    *,
    has_loader: bool,
) -> None:
    schema = registry.get(node.widget_type)
    if schema is None:
        diagnostics.append(
            Diagnostic.at(
                node,
                UNKNOWN_WIDGET_TYPE,
                f'Unknown widget type "{node.widget_type}"',
            ),
        )
    else:
        _check_required_props(node, schema, diagnostics)

    _check_accessibility(node, diagnostics)

    if node.source is not None and not has_loader:
        diagnostics.append(
            Diagnostic.at(
                node,
                MISSING_LOADER_FOR_BINDING,
                f'Widget "{node.widget_type}" has data binding '
                f'"{node.source.path}" but page has no loader',
                severity="warning",
            ),
        )


def _check_children(
    children: Iterable[Child],
    registry: WidgetRegistry,
    diagnostics: list[Diagnostic],
    *,
    has_loader: bool,
) -> None:
    for child in children:
        _check_child(child, registry, diagnostics, has_loader=has_loader)


def _check_child(
    node: Child,
    registry: WidgetRegistry,
    diagnostics: list[Diagnostic],
    *,
    has_loader: bool,
) -> None:
    match node:
        case WidgetNode():
            _check_widget(node, registry, diagnostics, has_loader=has_loader)
        case SectionNode() | FragmentNode():
            _check_children(node.children, registry, diagnostics, has_loader=has_loader)
        case ConditionalNode():
            _check_children(node.then, registry, diagnostics, has_loader=has_loader)
            _check_children(
                node.otherwise or (),
                registry,
                diagnostics,
                has_loader=has_loader,
            )
        case LoopNode():
            _check_child(node.template, registry, diagnostics, has_loader=has_loader)
        case RefNode():
            diagnostics.append(
                Diagnostic.at(
                    node,
                    UNRESOLVED_REF,
                    f'Unresolved $ref "{node.target}": run the resolver first',
                ),
            )
        case PartialNode():
            diagnostics.append(
                Diagnostic.at(
                    node,
                    UNRESOLVED_PARTIAL,
                    f'Unresolved $partial "{node.name}": run the resolver first',
                ),
            )
        case SlotNode():
            pass
        case _:
            assert_never(node)


def _check_page(page: PageNode, diagnostics: list[Diagnostic]) -> None:
    if not page.name:
        diagnostics.append(
            Diagnostic.at(page, PAGE_MISSING_NAME, 'Page missing "name"'),
        )
    if not page.route:
        diagnostics.append(
            Diagnostic.at(page, PAGE_MISSING_ROUTE, 'Page missing "route"'),
        )
    if not page.sections:
        diagnostics.append(
            Diagnostic.at(
                page,
                EMPTY_SECTIONS,
                f'Page "{page.name}" has no sections',
                severity="warning",
            ),
        )


def validate_page(page: PageNode, registry: WidgetRegistry) -> list[Diagnostic]:
    """Validate one page.

    Args:
        page: A page, normally after resolution
        registry: Widget registry providing schemas

    Returns:
        Diagnostics in tree order, page-level checks first

    """
    diagnostics: list[Diagnostic] = []
    _check_page(page, diagnostics)
    _check_children(
        page.sections,
        registry,
        diagnostics,
        has_loader=page.loader is not None,
    )
    return diagnostics


def validate_pages(
    pages: Iterable[PageNode],
    registry: WidgetRegistry,
) -> list[Diagnostic]:
    """Validate several pages and concatenate their diagnostics."""
    return [d for page in pages for d in validate_page(page, registry)]
