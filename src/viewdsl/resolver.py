"""Cross-document resolution of ``$ref`` and ``$partial`` nodes.

Resolution runs after every page has been parsed. It inlines referenced
sections, expands partial templates and checks widget types against the
registry. Problems are accumulated as diagnostics; the resolved pages are
always returned, with unresolvable nodes left in place.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, assert_never

from viewdsl.diagnostics import (
    CIRCULAR_REF,
    UNKNOWN_PARTIAL,
    UNKNOWN_REF_SECTION,
    UNKNOWN_REF_TARGET,
    UNKNOWN_WIDGET_TYPE,
    Diagnostic,
)
from viewdsl.nodes import (
    Child,
    ConditionalNode,
    DataBinding,
    FragmentNode,
    LoopNode,
    PageNode,
    PartialNode,
    PropValue,
    RefNode,
    SectionNode,
    SlotNode,
    WidgetNode,
)
from viewdsl.visitor import Visitor, child_slots, walk_child

if TYPE_CHECKING:
    from viewdsl.registry import WidgetRegistry

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SEPARATORS = re.compile(r"[\s_-]+")


def slugify(name: str) -> str:
    """Return the page-index key, e.g. ``AdminDashboard`` -> ``admin-dashboard``."""
    hyphenated = _CAMEL_BOUNDARY.sub("-", name.strip())
    return _SEPARATORS.sub("-", hyphenated).strip("-").lower()


# =============================================================================
# Partial definitions
# =============================================================================


@dataclass(frozen=True)
class PartialParam:
    """Declared partial parameter."""

    name: str
    type: str = "any"
    default: Any = None
    has_default: bool = False


@dataclass(frozen=True)
class PartialDef:
    """Named, parameterized template subtree."""

    name: str
    template: Child
    params: tuple[PartialParam, ...] = ()

    def defaults(self) -> dict[str, Any]:
        """Return the declared defaults, keyed by parameter name."""
        return {p.name: p.default for p in self.params if p.has_default}


# =============================================================================
# Context and result
# =============================================================================


@dataclass
class ResolverContext:
    """Shared state for one resolution run."""

    pages: Mapping[str, PageNode]
    partials: Mapping[str, PartialDef]
    registry: WidgetRegistry
    errors: list[Diagnostic] = field(default_factory=list)

    def report(
        self,
        node: RefNode | PartialNode | WidgetNode,
        code: str,
        message: str,
    ) -> None:
        """Record an error positioned at ``node``."""
        self.errors.append(Diagnostic.at(node, code, message))


@dataclass(frozen=True)
class ResolveResult:
    """Resolved pages plus every error met along the way."""

    pages: tuple[PageNode, ...]
    errors: tuple[Diagnostic, ...]

    @property
    def is_valid(self) -> bool:
        """Return True if resolution produced no errors."""
        return len(self.errors) == 0

    def __bool__(self) -> bool:
        return self.is_valid

    def __str__(self) -> str:
        if self.is_valid:
            return f"ResolveResult: {len(self.pages)} page(s) resolved"
        error_lines = "\n  ".join(str(e) for e in self.errors)
        return f"ResolveResult: {len(self.errors)} error(s)\n  {error_lines}"


# =============================================================================
# $ref
# =============================================================================


def find_section(children: Iterable[Child], name: str) -> SectionNode | None:
    """Depth-first search for the first section called ``name``."""
    for child in children:
        if isinstance(child, SectionNode) and child.name == name:
            return child
        if found := find_section(child_slots(child), name):
            return found
    return None


def _resolve_ref(node: RefNode, ctx: ResolverContext, in_progress: set[str]) -> Child:
    target_page = ctx.pages.get(slugify(node.page))
    if target_page is None:
        ctx.report(
            node,
            UNKNOWN_REF_TARGET,
            f'$ref target page "{node.page}" not found',
        )
        return node

    target = find_section(target_page.sections, node.section)
    if target is None:
        ctx.report(
            node,
            UNKNOWN_REF_SECTION,
            f'$ref target section "{node.section}" not found in "{node.page}"',
        )
        return node

    key = f"{slugify(node.page)}#{node.section}"
    if key in in_progress:
        ctx.report(node, CIRCULAR_REF, f"Circular $ref: {key}")
        return node

    logger.debug("Inlining %s into %s", key, node.loc.file)
    in_progress.add(key)
    try:
        return _resolve_child(target, ctx, in_progress)
    finally:
        in_progress.discard(key)


# =============================================================================
# $partial
# =============================================================================


def _substitute(value: PropValue, args: Mapping[str, Any]) -> PropValue:
    if isinstance(value, str) and value.startswith("$") and value[1:] in args:
        return args[value[1:]]
    return value


def substitute_args(template: Child, args: Mapping[str, Any]) -> Child:
    """Copy ``template`` with ``$name`` placeholders replaced by argument values.

    Only whole values are replaced: a prop or binding path equal to
    ``"$title"`` becomes ``args["title"]``, while ``"Hello $title"`` is kept
    verbatim.
    """

    def on_widget(widget: WidgetNode) -> WidgetNode:
        source: DataBinding | None = widget.source
        props = {k: _substitute(v, args) for k, v in widget.props.items()}
        if source is not None:
            path = _substitute(source.path, args)
            if isinstance(path, str):
                source = dataclasses.replace(source, path=path)
            else:
                # A non-string source is a prop value, not a binding.
                source = None
                props["source"] = path
        return dataclasses.replace(widget, source=source, props=props)

    return walk_child(copy.deepcopy(template), Visitor(on_widget=on_widget))


def _resolve_partial(
    node: PartialNode,
    ctx: ResolverContext,
    in_progress: set[str],
) -> Child:
    partial = ctx.partials.get(node.name)
    if partial is None:
        ctx.report(node, UNKNOWN_PARTIAL, f'Partial "{node.name}" not found')
        return node

    key = f"$partial:{partial.name}"
    if key in in_progress:
        ctx.report(node, CIRCULAR_REF, f"Circular $partial: {partial.name}")
        return node

    expanded = substitute_args(partial.template, {**partial.defaults(), **node.args})
    logger.debug("Expanded partial %r in %s", partial.name, node.loc.file)
    in_progress.add(key)
    try:
        return _resolve_child(expanded, ctx, in_progress)
    finally:
        in_progress.discard(key)


# =============================================================================
# Tree walk
# =============================================================================


def _resolve_widget(node: WidgetNode, ctx: ResolverContext) -> WidgetNode:
    if not ctx.registry.has(node.widget_type):
        ctx.report(
            node,
            UNKNOWN_WIDGET_TYPE,
            f'Unknown widget type "{node.widget_type}"',
        )
    return node


def _resolve_children(
    children: Iterable[Child],
    ctx: ResolverContext,
    in_progress: set[str],
) -> tuple[Child, ...]:
    return tuple(_resolve_child(c, ctx, in_progress) for c in children)


def _resolve_child(node: Child, ctx: ResolverContext, in_progress: set[str]) -> Child:
    match node:
        case RefNode():
            return _resolve_ref(node, ctx, in_progress)
        case PartialNode():
            return _resolve_partial(node, ctx, in_progress)
        case WidgetNode():
            return _resolve_widget(node, ctx)
        case SlotNode():
            return node
        case SectionNode():
            return dataclasses.replace(
                node,
                children=_resolve_children(node.children, ctx, in_progress),
            )
        case ConditionalNode():
            return dataclasses.replace(
                node,
                then=_resolve_children(node.then, ctx, in_progress),
                otherwise=(
                    _resolve_children(node.otherwise, ctx, in_progress)
                    if node.otherwise is not None
                    else None
                ),
            )
        case LoopNode():
            return dataclasses.replace(
                node,
                template=_resolve_child(node.template, ctx, in_progress),
            )
        case FragmentNode():
            return dataclasses.replace(
                node,
                children=_resolve_children(node.children, ctx, in_progress),
            )
        case _:
            assert_never(node)


def resolve_page(page: PageNode, ctx: ResolverContext) -> PageNode:
    """Resolve one page; each top-level child gets its own in-progress set."""
    return dataclasses.replace(
        page,
        sections=tuple(_resolve_child(s, ctx, set()) for s in page.sections),
    )


def index_partials(
    partials: Mapping[str, PartialDef] | Iterable[PartialDef] | None,
) -> dict[str, PartialDef]:
    """Index partials by their key (or name) and by its slug."""
    if partials is None:
        return {}
    items = (
        partials.items()
        if isinstance(partials, Mapping)
        else ((p.name, p) for p in partials)
    )
    index: dict[str, PartialDef] = {}
    for key, partial in items:
        index[key] = partial
        index.setdefault(slugify(key), partial)
    return index


def resolve_all(
    pages: Iterable[PageNode],
    registry: WidgetRegistry,
    partials: Mapping[str, PartialDef] | Iterable[PartialDef] | None = None,
) -> ResolveResult:
    """Resolve every page against the full page set.

    Args:
        pages: All parsed pages of the build
        registry: Widget registry used to check widget types
        partials: Partial templates, keyed by name or given as a sequence

    Returns:
        Resolved pages in input order, and the accumulated errors

    """
    page_list = list(pages)
    ctx = ResolverContext(
        pages={slugify(p.name): p for p in page_list},
        partials=index_partials(partials),
        registry=registry,
    )
    resolved = tuple(resolve_page(p, ctx) for p in page_list)
    logger.info(
        "Resolved %d page(s) with %d error(s)",
        len(resolved),
        len(ctx.errors),
    )
    return ResolveResult(pages=resolved, errors=tuple(ctx.errors))
