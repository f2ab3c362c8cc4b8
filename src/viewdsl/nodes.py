"""View AST node model with automatic kind registration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal, dataclass_transform

type PropValue = (
    str | int | float | bool | None | list[PropValue] | dict[str, PropValue]
)


@dataclass(frozen=True)
class SourceLocation:
    """Where a node came from."""

    file: str = "<inline>"
    line: int = 1
    col: int = 1
    end_line: int | None = None
    end_col: int | None = None


@dataclass(frozen=True)
class DataBinding:
    """Opaque projection path into runtime data, e.g. ``metrics.totalUsers``."""

    path: str
    entity_type: str | None = None
    field_type: str | None = None


@dataclass(frozen=True)
class LayoutConfig:
    """Breakpoint to layout token mapping."""

    sm: str | None = None
    md: str | None = None
    lg: str | None = None
    xl: str | None = None


@dataclass(frozen=True)
class LoaderConfig:
    """Named data source for a page plus the route params it consumes."""

    source: str
    params: tuple[str, ...] = ()


@dataclass(frozen=True)
class AccessibilityConfig:
    """Page-level accessibility settings (``accessibility:`` block)."""

    role: str | None = None
    aria_label: str | None = None
    aria_live: Literal["polite", "assertive", "off"] | None = None
    landmark: str | None = None
    skip_nav: bool | None = None
    focus_trap: bool | None = None
    reduce_motion: bool | None = None


@dataclass(frozen=True)
class ResponsiveConfig:
    """Responsive strategy and named breakpoint widths."""

    strategy: Literal["mobile-first", "desktop-first"] | None = None
    breakpoints: dict[str, str] | None = None


@dataclass(frozen=True, kw_only=True)
@dataclass_transform(frozen_default=True, kw_only_default=True)
class ViewNode:
    """Base for view AST nodes.

    Subclasses become frozen keyword-only dataclasses and are registered
    under their ``kind``, derived from the class name unless given.
    """

    kind: ClassVar[str]
    registry: ClassVar[dict[str, type[ViewNode]]] = {}

    loc: SourceLocation = field(default_factory=SourceLocation)
    meta: dict[str, Any] = field(default_factory=dict, compare=False)

    def __init_subclass__(cls, kind: str | None = None) -> None:
        """Register node subclass with automatic kind derivation."""
        dataclass(frozen=True, kw_only=True)(cls)
        cls.kind = (
            kind if kind is not None else cls.__name__.lower().removesuffix("node")
        )

        if (existing := ViewNode.registry.get(cls.kind)) and existing is not cls:
            msg = (
                f"Kind '{cls.kind}' already registered to {existing}. "
                "Choose a different kind."
            )
            raise ValueError(msg)

        ViewNode.registry[cls.kind] = cls


class SectionNode(ViewNode):
    """Container node, and the target of ``$ref`` lookups by ``name``."""

    name: str | None = None
    layout: LayoutConfig | None = None
    tag: str | None = None
    aria_label: str | None = None
    children: tuple[Child, ...] = ()


class WidgetNode(ViewNode):
    """Leaf node bound to a registry schema."""

    widget_type: str
    source: DataBinding | None = None
    props: dict[str, PropValue] = field(default_factory=dict)


class RefNode(ViewNode):
    """Unresolved ``page#section`` reference."""

    target: str
    page: str
    section: str


class PartialNode(ViewNode):
    """Unresolved instantiation of a named partial template."""

    name: str
    args: dict[str, PropValue] = field(default_factory=dict)


class SlotNode(ViewNode):
    """Named insertion point; declarative only."""

    name: str
    description: str | None = None
    optional: bool = False


class ConditionalNode(ViewNode):
    """Children gated by a runtime boolean expression."""

    condition: str
    then: tuple[Child, ...] = ()
    otherwise: tuple[Child, ...] | None = None


class LoopNode(ViewNode):
    """Template instantiated once per element of ``source``."""

    source: str
    template: Child
    as_: str = "item"


class FragmentNode(ViewNode):
    """Transparent grouping of siblings."""

    children: tuple[Child, ...] = ()


class PageNode(ViewNode):
    """Root of one view document."""

    name: str
    type: str
    route: str
    auth: bool = False
    ssr: bool = False
    loader: LoaderConfig | None = None
    page_meta: dict[str, str] | None = None
    accessibility: AccessibilityConfig | None = None
    responsive: ResponsiveConfig | None = None
    sections: tuple[Child, ...] = ()


type Child = (
    SectionNode
    | WidgetNode
    | RefNode
    | PartialNode
    | SlotNode
    | ConditionalNode
    | LoopNode
    | FragmentNode
)
type AnyNode = PageNode | Child
