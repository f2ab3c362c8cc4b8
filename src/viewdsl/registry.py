"""Widget schema catalog with single-level inheritance."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class PropSchema:
    """Declared widget prop.

    ``type`` is one of string, number, boolean, enum, binding, icon, object,
    or a ``[]``-suffixed list of those.
    """

    type: str
    required: bool = False
    default: Any = None
    values: tuple[str, ...] | None = None
    description: str | None = None


@dataclass(frozen=True)
class SlotSchema:
    """Declared named slot of a widget."""

    description: str | None = None
    optional: bool = False


@dataclass(frozen=True)
class WidgetSchema:
    """Schema for one widget type."""

    name: str
    category: str = "custom"
    props: dict[str, PropSchema] = field(default_factory=dict)
    slots: dict[str, SlotSchema] = field(default_factory=dict)
    description: str | None = None
    extends: str | None = None
    accessibility: dict[str, Any] | None = None
    responsive: dict[str, Any] | None = None
    template: str | None = None

    def required_props(self) -> list[str]:
        """Return the names of the props a widget must set."""
        return [name for name, prop in self.props.items() if prop.required]


def _props(**props: PropSchema) -> dict[str, PropSchema]:
    return props


def _req(type_: str) -> PropSchema:
    return PropSchema(type=type_, required=True)


def _opt(
    type_: str,
    default: Any = None,
    values: tuple[str, ...] | None = None,
) -> PropSchema:
    return PropSchema(type=type_, default=default, values=values)


BUILT_IN_WIDGETS: tuple[WidgetSchema, ...] = (
    # Display
    WidgetSchema(
        "stat-card",
        "display",
        _props(
            source=_req("binding"),
            label=_req("string"),
            format=_opt(
                "enum",
                "number",
                ("number", "currency", "percent", "duration", "bytes"),
            ),
            icon=_opt("icon"),
        ),
    ),
    WidgetSchema(
        "badge",
        "display",
        _props(
            source=_req("binding"),
            variant=_opt("enum", "solid", ("solid", "outline", "subtle")),
            color=_opt("string"),
        ),
    ),
    WidgetSchema(
        "avatar",
        "display",
        _props(
            source=_req("binding"),
            alt=_req("string"),
            size=_opt("enum", "md", ("sm", "md", "lg", "xl")),
            fallback=_opt("enum", "initials", ("initials", "icon")),
        ),
    ),
    WidgetSchema(
        "progress",
        "display",
        _props(
            source=_req("binding"),
            max=_opt("number", 100),
            label=_opt("string"),
            color=_opt("string"),
        ),
    ),
    # Typography
    WidgetSchema(
        "heading",
        "typography",
        _props(
            source=_opt("binding"),
            text=_opt("string"),
            tag=_opt("enum", "h2", ("h1", "h2", "h3", "h4", "h5", "h6")),
        ),
    ),
    WidgetSchema(
        "paragraph",
        "typography",
        _props(
            source=_opt("binding"),
            content=_opt("string"),
            maxLines=_opt("number"),
            expandable=_opt("boolean", default=False),
        ),
    ),
    WidgetSchema("markdown", "typography", _props(source=_req("binding"))),
    # Data
    WidgetSchema(
        "data-table",
        "data",
        _props(
            source=_req("binding"),
            columns=_req("string[]"),
            actions=_opt("string[]"),
            sortable=_opt("boolean", default=True),
            filterable=_opt("boolean", default=False),
            paginate=_opt("boolean", default=True),
        ),
    ),
    WidgetSchema(
        "chart",
        "data",
        _props(
            source=_req("binding"),
            chart=_req("object"),
            animate=_opt("boolean", default=True),
        ),
    ),
    WidgetSchema(
        "bar-chart",
        "data",
        _props(bars=_req("object[]"), animate=_opt("boolean", default=True)),
    ),
    # Input
    WidgetSchema(
        "form",
        "input",
        _props(fields=_req("object[]"), submit=_opt("string")),
    ),
    WidgetSchema(
        "search-bar",
        "input",
        _props(
            placeholder=_opt("string", "Search..."),
            source=_opt("binding"),
        ),
    ),
    # Interactive
    WidgetSchema(
        "chat-messages",
        "interactive",
        _props(source=_req("binding"), features=_opt("object")),
    ),
    WidgetSchema("chat-input", "interactive"),
    # Layout
    WidgetSchema(
        "hero",
        "layout",
        _props(heading=_req("object"), subheading=_opt("object")),
    ),
    WidgetSchema(
        "feature-grid",
        "layout",
        _props(features=_req("object[]"), heading=_opt("object")),
    ),
    WidgetSchema(
        "team-grid",
        "layout",
        _props(members=_req("object[]"), heading=_opt("object")),
    ),
    WidgetSchema(
        "tabs",
        "layout",
        _props(items=_req("object[]"), default=_opt("string")),
        slots={"content": SlotSchema(description="Tab content")},
    ),
    # Navigation
    WidgetSchema("action-group", "navigation", _props(actions=_req("object[]"))),
    WidgetSchema(
        "cta",
        "navigation",
        _props(heading=_req("object"), actions=_req("object[]")),
    ),
    WidgetSchema("breadcrumb", "navigation", _props(items=_req("string[]"))),
    WidgetSchema(
        "sidebar-nav",
        "navigation",
        _props(items=_req("string[]"), active=_opt("string")),
    ),
    # Media
    WidgetSchema(
        "image",
        "media",
        _props(
            source=_req("binding"),
            alt=_req("string"),
            loading=_opt("enum", "lazy", ("lazy", "eager")),
        ),
    ),
    # Feedback
    WidgetSchema(
        "empty-state",
        "feedback",
        _props(icon=_opt("icon"), message=_req("string"), action=_opt("object")),
    ),
    WidgetSchema(
        "skeleton",
        "feedback",
        _props(
            lines=_opt("number", 3),
            type=_opt("enum", "text", ("text", "card", "table")),
        ),
    ),
    # Composite
    WidgetSchema(
        "stat-cards",
        "composite",
        _props(layout=_opt("object")),
        slots={"default": SlotSchema(description="Stat card children")},
    ),
    WidgetSchema(
        "card-grid",
        "composite",
        _props(layout=_opt("object")),
        slots={"default": SlotSchema(description="Card children")},
    ),
    # Special
    WidgetSchema("preview", "display"),
)


def prop_from_dict(data: Mapping[str, Any]) -> PropSchema:
    """Convert a raw prop declaration."""
    values = data.get("values")
    return PropSchema(
        type=str(data.get("type", "string")),
        required=bool(data.get("required", False)),
        default=data.get("default"),
        values=tuple(values) if values is not None else None,
        description=data.get("description"),
    )


def schema_from_dict(data: Mapping[str, Any]) -> WidgetSchema:
    """Convert a raw widget schema document to a WidgetSchema.

    Raises:
        ValueError: If the document has no ``name``

    """
    if not data.get("name"):
        msg = "Widget schema document is missing required key 'name'"
        raise ValueError(msg)
    return WidgetSchema(
        name=data["name"],
        category=data.get("category", "custom"),
        props={
            k: prop_from_dict(v or {}) for k, v in (data.get("props") or {}).items()
        },
        slots={
            k: SlotSchema(
                description=(v or {}).get("description"),
                optional=bool((v or {}).get("optional", False)),
            )
            for k, v in (data.get("slots") or {}).items()
        },
        description=data.get("description"),
        extends=data.get("extends"),
        accessibility=data.get("accessibility"),
        responsive=data.get("responsive"),
        template=data.get("template"),
    )


_INHERITED_FIELDS = ("description", "accessibility", "responsive", "template")


class WidgetRegistry:
    """Catalog of widget schemas keyed by name.

    ``extends`` is merged eagerly in :meth:`register`: a widget registered
    before its parent does not inherit anything, and later re-registration
    of the parent does not propagate to children.
    """

    def __init__(self, *, builtins: bool = True) -> None:
        self._widgets: dict[str, WidgetSchema] = {}
        if builtins:
            for schema in BUILT_IN_WIDGETS:
                self._widgets[schema.name] = schema

    def get(self, name: str) -> WidgetSchema | None:
        """Return the schema for ``name``, or None if it is not registered."""
        return self._widgets.get(name)

    def has(self, name: str) -> bool:
        """Return True if a widget called ``name`` is registered."""
        return name in self._widgets

    def register(self, schema: WidgetSchema) -> WidgetSchema:
        """Register a schema, merging its parent's props and slots.

        Returns:
            The schema as stored, after inheritance was applied

        """
        if schema.extends and (parent := self._widgets.get(schema.extends)):
            inherited = {
                name: getattr(parent, name)
                for name in _INHERITED_FIELDS
                if getattr(schema, name) is None
            }
            schema = dataclasses.replace(
                schema,
                props={**parent.props, **schema.props},
                slots={**parent.slots, **schema.slots},
                **inherited,
            )
        self._widgets[schema.name] = schema
        return schema

    def load(self, documents: Iterable[Mapping[str, Any]]) -> None:
        """Register raw schema documents in the given order."""
        for document in documents:
            self.register(schema_from_dict(document))

    def all(self) -> list[WidgetSchema]:
        """Return the registered schemas in registration order."""
        return list(self._widgets.values())

    def names(self) -> list[str]:
        """Return the registered widget names in registration order."""
        return list(self._widgets.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._widgets

    def __len__(self) -> int:
        return len(self._widgets)


def create_registry(
    documents: Iterable[Mapping[str, Any]] | None = None,
) -> WidgetRegistry:
    """Create a registry with built-ins plus optional custom schema documents."""
    registry = WidgetRegistry()
    if documents is not None:
        registry.load(documents)
    return registry
