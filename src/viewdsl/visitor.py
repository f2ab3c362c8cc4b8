"""Generic bottom-up traversal over view ASTs.

A :class:`Visitor` holds one optional callback per node kind. Walking a
tree rebuilds it: children are walked first, then the callback for the
rebuilt parent runs. A missing callback leaves that node as it is, but its
children are still visited. Input trees are never mutated.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, assert_never, cast, overload

from viewdsl.nodes import (
    AnyNode,
    Child,
    ConditionalNode,
    FragmentNode,
    LoopNode,
    PageNode,
    PartialNode,
    RefNode,
    SectionNode,
    SlotNode,
    ViewNode,
    WidgetNode,
)


@dataclass(frozen=True)
class Visitor:
    """Per-kind callbacks; ``None`` means identity."""

    on_page: Callable[[PageNode], PageNode] | None = None
    on_section: Callable[[SectionNode], Child] | None = None
    on_widget: Callable[[WidgetNode], Child] | None = None
    on_ref: Callable[[RefNode], Child] | None = None
    on_partial: Callable[[PartialNode], Child] | None = None
    on_slot: Callable[[SlotNode], Child] | None = None
    on_conditional: Callable[[ConditionalNode], Child] | None = None
    on_loop: Callable[[LoopNode], Child] | None = None
    on_fragment: Callable[[FragmentNode], Child] | None = None


def _apply[N](callback: Callable[[N], Any] | None, node: N) -> Any:
    return callback(node) if callback is not None else node


def child_slots(node: ViewNode) -> tuple[Child, ...]:
    """Return the direct children of a node across all of its child slots."""
    match node:
        case PageNode():
            return node.sections
        case SectionNode() | FragmentNode():
            return node.children
        case ConditionalNode():
            return node.then + (node.otherwise or ())
        case LoopNode():
            return (node.template,)
        case _:
            return ()


def walk_children(children: Iterable[Child], visitor: Visitor) -> tuple[Child, ...]:
    """Walk each child in order and return the rebuilt sequence."""
    return tuple(walk_child(child, visitor) for child in children)


def walk_child(node: Child, visitor: Visitor) -> Child:
    """Walk a single non-page node."""
    match node:
        case SectionNode():
            walked = dataclasses.replace(
                node,
                children=walk_children(node.children, visitor),
            )
            return _apply(visitor.on_section, walked)
        case WidgetNode():
            return _apply(visitor.on_widget, node)
        case RefNode():
            return _apply(visitor.on_ref, node)
        case PartialNode():
            return _apply(visitor.on_partial, node)
        case SlotNode():
            return _apply(visitor.on_slot, node)
        case ConditionalNode():
            walked = dataclasses.replace(
                node,
                then=walk_children(node.then, visitor),
                otherwise=(
                    walk_children(node.otherwise, visitor)
                    if node.otherwise is not None
                    else None
                ),
            )
            return _apply(visitor.on_conditional, walked)
        case LoopNode():
            walked = dataclasses.replace(
                node,
                template=walk_child(node.template, visitor),
            )
            return _apply(visitor.on_loop, walked)
        case FragmentNode():
            walked = dataclasses.replace(
                node,
                children=walk_children(node.children, visitor),
            )
            return _apply(visitor.on_fragment, walked)
        case _:
            assert_never(node)


def walk_page(page: PageNode, visitor: Visitor) -> PageNode:
    """Walk a page and return the rebuilt page."""
    walked = dataclasses.replace(
        page,
        sections=walk_children(page.sections, visitor),
    )
    return _apply(visitor.on_page, walked)


@overload
def walk(node: PageNode, visitor: Visitor) -> PageNode: ...
@overload
def walk(node: Child, visitor: Visitor) -> Child: ...
def walk(node: AnyNode, visitor: Visitor) -> AnyNode:
    """Walk any node, page or child."""
    if isinstance(node, PageNode):
        return walk_page(node, visitor)
    return walk_child(node, visitor)


@overload
def collect_nodes[N: ViewNode](page: PageNode, kind: type[N]) -> list[N]: ...
@overload
def collect_nodes(page: PageNode, kind: str) -> list[ViewNode]: ...
def collect_nodes(page: PageNode, kind: type[ViewNode] | str) -> list[Any]:
    """Gather every node of one kind in document order.

    Callbacks fire bottom-up, so a matching container is inserted ahead of
    the matches already collected from its own subtree.

    Args:
        page: Page to search
        kind: Node class (``WidgetNode``) or kind string (``"widget"``)

    Returns:
        Matching nodes

    """
    wanted = kind if isinstance(kind, str) else kind.kind
    results: list[ViewNode] = []
    # id(node) -> number of matches in that node's subtree
    counts: dict[int, int] = {}

    def collect[N: ViewNode](node: N) -> N:
        below = sum(counts.get(id(child), 0) for child in child_slots(node))
        if node.kind == wanted:
            results.insert(len(results) - below, node)
            below += 1
        counts[id(node)] = below
        return node

    collector = Visitor(
        on_page=collect,
        on_section=collect,
        on_widget=collect,
        on_ref=collect,
        on_partial=collect,
        on_slot=collect,
        on_conditional=collect,
        on_loop=collect,
        on_fragment=collect,
    )
    walk_page(page, collector)
    return cast("list[Any]", results)
