"""Tests for viewdsl.registry module."""

import pytest

from viewdsl.registry import (
    BUILT_IN_WIDGETS,
    PropSchema,
    SlotSchema,
    WidgetRegistry,
    WidgetSchema,
    create_registry,
    schema_from_dict,
)


class TestBuiltIns:
    """Test the pre-registered catalog."""

    def test_has_built_in_widgets(self) -> None:
        """Test that common widgets are available at construction."""
        registry = WidgetRegistry()
        for name in ("stat-card", "data-table", "chart", "hero", "chat-messages"):
            assert registry.has(name)
            assert name in registry

    def test_unknown_widget(self) -> None:
        """Test lookups of unregistered names."""
        registry = WidgetRegistry()
        assert registry.get("foobar") is None
        assert not registry.has("foobar")

    def test_names_and_all(self) -> None:
        """Test listing the catalog."""
        registry = WidgetRegistry()
        names = registry.names()
        assert len(names) == len(BUILT_IN_WIDGETS)
        assert len(names) > 20
        assert "stat-card" in names
        assert [schema.name for schema in registry.all()] == names

    def test_required_props(self) -> None:
        """Test required prop declarations on built-ins."""
        registry = WidgetRegistry()
        stat_card = registry.get("stat-card")
        assert stat_card is not None
        assert stat_card.required_props() == ["source", "label"]
        assert stat_card.props["format"].default == "number"

    def test_without_builtins(self) -> None:
        """Test an empty registry."""
        registry = WidgetRegistry(builtins=False)
        assert len(registry) == 0
        assert registry.names() == []


class TestRegister:
    """Test registration and extends merging."""

    def test_register_custom_widget(self) -> None:
        """Test registering a new widget schema."""
        registry = WidgetRegistry()
        registry.register(
            WidgetSchema(
                name="usage-heatmap",
                category="data",
                props={
                    "source": PropSchema(type="binding", required=True),
                    "groupBy": PropSchema(type="enum", values=("hour", "day")),
                },
            ),
        )
        schema = registry.get("usage-heatmap")
        assert schema is not None
        assert schema.category == "data"

    def test_extends_inherits_parent_props(self) -> None:
        """Test that a child registered after its parent inherits its props."""
        registry = WidgetRegistry()
        registry.register(
            WidgetSchema(
                name="cost-chart",
                category="data",
                extends="chart",
                props={"currency": PropSchema(type="string", default="USD")},
            ),
        )
        schema = registry.get("cost-chart")
        assert schema is not None
        assert set(schema.props) == {"source", "chart", "animate", "currency"}
        assert schema.props["source"].required
        assert schema.props["currency"].default == "USD"

    def test_child_props_win(self) -> None:
        """Test that child props override parent props of the same name."""
        registry = WidgetRegistry()
        registry.register(
            WidgetSchema(
                name="loose-chart",
                extends="chart",
                props={"chart": PropSchema(type="object")},
            ),
        )
        schema = registry.get("loose-chart")
        assert schema is not None
        assert not schema.props["chart"].required
        assert schema.props["source"].required

    def test_parent_not_mutated(self) -> None:
        """Test that merging copies the parent's props."""
        registry = WidgetRegistry()
        registry.register(
            WidgetSchema(
                name="cost-chart",
                extends="chart",
                props={"currency": PropSchema(type="string")},
            ),
        )
        chart = registry.get("chart")
        assert chart is not None
        assert "currency" not in chart.props

    def test_slots_merged(self) -> None:
        """Test that slots are merged like props."""
        registry = WidgetRegistry()
        registry.register(
            WidgetSchema(
                name="wizard-tabs",
                extends="tabs",
                slots={"footer": SlotSchema(optional=True)},
            ),
        )
        schema = registry.get("wizard-tabs")
        assert schema is not None
        assert set(schema.slots) == {"content", "footer"}
        assert "items" in schema.props

    def test_unset_fields_inherited(self) -> None:
        """Test that descriptive fields fall back to the parent's."""
        registry = WidgetRegistry(builtins=False)
        registry.register(WidgetSchema(name="base", description="Base widget"))
        stored = registry.register(WidgetSchema(name="child", extends="base"))
        assert stored.description == "Base widget"

    def test_extends_before_parent_does_not_inherit(self) -> None:
        """Test that inheritance depends on registration order."""
        registry = WidgetRegistry(builtins=False)
        registry.register(
            WidgetSchema(
                name="child",
                extends="parent",
                props={"own": PropSchema(type="string")},
            ),
        )
        registry.register(
            WidgetSchema(
                name="parent",
                props={"inherited": PropSchema(type="string", required=True)},
            ),
        )
        child = registry.get("child")
        assert child is not None
        assert set(child.props) == {"own"}


class TestLoading:
    """Test bulk loading of raw schema documents."""

    def test_schema_from_dict(self) -> None:
        """Test converting a raw schema document."""
        schema = schema_from_dict(
            {
                "name": "kpi",
                "category": "display",
                "props": {
                    "source": {"type": "binding", "required": True},
                    "trend": {"type": "enum", "values": ["up", "down"]},
                },
                "slots": {"footer": {"description": "Footer", "optional": True}},
            },
        )
        assert schema.name == "kpi"
        assert schema.props["source"].required
        assert schema.props["trend"].values == ("up", "down")
        assert schema.slots["footer"].optional

    def test_schema_without_name(self) -> None:
        """Test that a schema document needs a name."""
        with pytest.raises(ValueError, match="missing required key 'name'"):
            schema_from_dict({"category": "display"})

    def test_load_in_order(self) -> None:
        """Test that documents are registered in the given order."""
        registry = WidgetRegistry()
        registry.load(
            [
                {"name": "fancy-chart", "extends": "chart", "props": {}},
                {"name": "fancier-chart", "extends": "fancy-chart"},
            ],
        )
        fancier = registry.get("fancier-chart")
        assert fancier is not None
        assert "chart" in fancier.props

    def test_create_registry(self) -> None:
        """Test the registry factory."""
        registry = create_registry([{"name": "kpi", "category": "display"}])
        assert registry.has("stat-card")
        assert registry.has("kpi")
