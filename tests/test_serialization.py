"""Tests for viewdsl.serialization module."""

import json

import pytest

from viewdsl.diagnostics import EMPTY_SECTIONS, PARSE_ERROR, Diagnostic
from viewdsl.nodes import (
    ConditionalNode,
    DataBinding,
    LoopNode,
    PageNode,
    SourceLocation,
    WidgetNode,
)
from viewdsl.parser import parse_page
from viewdsl.pipeline import BuildResult, build
from viewdsl.serialization import (
    EXPORT_FORMAT,
    EXPORT_VERSION,
    diagnostic_from_dict,
    diagnostic_to_dict,
    export_build,
    from_dict,
    from_json,
    import_build,
    to_dict,
    to_json,
)


def sample_page() -> PageNode:
    return parse_page(
        {
            "name": "AdminDashboard",
            "type": "dashboard",
            "route": "/admin",
            "auth": True,
            "loader": {"source": "AdminMetrics", "params": ["orgId"]},
            "accessibility": {"ariaLive": "polite", "skipNav": True},
            "sections": [
                {
                    "name": "Usage",
                    "layout": {"sm": "1", "lg": "3"},
                    "widgets": [
                        {
                            "type": "stat-card",
                            "source": "stats.users",
                            "label": "Users",
                        },
                        {
                            "type": "data-table",
                            "source": "users",
                            "columns": ["name", "email"],
                        },
                    ],
                },
                {"each": "alerts", "as": "alert", "template": {"h2": "Alert"}},
                {"type": "markdown", "source": "doc", "show": "doc.ready"},
            ],
        },
        file="admin.view.yaml",
    )


class TestToDict:
    """Test dictionary serialization."""

    def test_widget(self) -> None:
        """Test widget keys, including the kind discriminant."""
        widget = WidgetNode(
            widget_type="stat-card",
            source=DataBinding(path="stats.users"),
            props={"label": "Users"},
            loc=SourceLocation(file="a.view.yaml", line=3, col=7),
        )
        result = to_dict(widget)
        assert result["kind"] == "widget"
        assert result["widget_type"] == "stat-card"
        assert result["source"] == {
            "path": "stats.users",
            "entity_type": None,
            "field_type": None,
        }
        assert result["props"] == {"label": "Users"}
        assert result["loc"]["line"] == 3

    def test_loop_alias_key(self) -> None:
        """Test that the loop variable is stored under ``as``."""
        loop = LoopNode(source="rows", template=WidgetNode(widget_type="preview"))
        result = to_dict(loop)
        assert result["as"] == "item"
        assert "as_" not in result
        assert result["template"]["kind"] == "widget"

    def test_children_become_lists(self) -> None:
        """Test that child tuples serialize as lists."""
        cond = ConditionalNode(condition="x", then=(WidgetNode(widget_type="preview"),))
        result = to_dict(cond)
        assert result["kind"] == "conditional"
        assert isinstance(result["then"], list)
        assert result["otherwise"] is None

    def test_rejects_non_nodes(self) -> None:
        """Test serializing something that is not a node."""
        with pytest.raises(TypeError, match="expects a view node"):
            to_dict({"kind": "widget"})  # type: ignore[arg-type]


class TestFromDict:
    """Test dictionary deserialization."""

    def test_page_round_trip(self) -> None:
        """Test that a parsed page survives serialization intact."""
        page = sample_page()
        restored = from_dict(to_dict(page))
        assert restored == page
        assert isinstance(restored, PageNode)
        assert isinstance(restored.sections, tuple)
        assert restored.loader is not None
        assert restored.loader.params == ("orgId",)

    def test_loop_round_trip(self) -> None:
        """Test that ``as`` is read back into the loop variable."""
        loop = LoopNode(
            source="rows",
            as_="row",
            template=WidgetNode(widget_type="preview"),
        )
        restored = from_dict(to_dict(loop))
        assert isinstance(restored, LoopNode)
        assert restored.as_ == "row"
        assert restored == loop

    def test_missing_kind(self) -> None:
        """Test that the kind discriminant is required."""
        with pytest.raises(KeyError, match="kind"):
            from_dict({"widget_type": "preview"})

    def test_unknown_kind(self) -> None:
        """Test that unregistered kinds are rejected."""
        with pytest.raises(ValueError, match="'gadget' is not a view node kind"):
            from_dict({"kind": "gadget"})


class TestJSON:
    """Test JSON helpers."""

    def test_to_json(self) -> None:
        """Test that output is valid, indented JSON."""
        text = to_json(sample_page())
        assert "\n  " in text
        assert json.loads(text)["kind"] == "page"

    def test_compact(self) -> None:
        """Test compact output."""
        assert "\n" not in to_json(WidgetNode(widget_type="preview"), indent=None)

    def test_json_round_trip(self) -> None:
        """Test from_json over to_json."""
        page = sample_page()
        assert from_json(to_json(page)) == page


def sample_build() -> BuildResult:
    return build(
        {
            "broken.view.yaml": {"name": "Broken"},
            "empty.view.yaml": {"name": "Empty", "type": "page", "route": "/e"},
            "home.view.yaml": {
                "name": "Home",
                "type": "page",
                "route": "/",
                "sections": [{"h1": "Welcome"}],
            },
        },
    )


class TestBuildExport:
    """Test the envelope handed to code generators."""

    def test_envelope_keys(self) -> None:
        """Test format marker, status, pages and diagnostics."""
        data = export_build(sample_build())
        assert data["format"] == EXPORT_FORMAT
        assert data["version"] == EXPORT_VERSION
        assert data["ok"] is False
        assert [p["name"] for p in data["pages"]] == ["Empty", "Home"]
        assert all(p["kind"] == "page" for p in data["pages"])
        assert [d["code"] for d in data["diagnostics"]] == [
            PARSE_ERROR,
            EMPTY_SECTIONS,
        ]
        assert data["diagnostics"][0]["file"] == "broken.view.yaml"

    def test_envelope_is_json_ready(self) -> None:
        """Test that the envelope survives the json module unchanged."""
        data = export_build(sample_build())
        assert json.loads(json.dumps(data)) == data

    def test_import_round_trip(self) -> None:
        """Test reading an exported build back."""
        result = sample_build()
        restored = import_build(export_build(result))
        assert restored.pages == result.pages
        assert restored.diagnostics == result.diagnostics
        assert restored.ok is False

    def test_json_round_trip(self) -> None:
        """Test that from_json recognizes a build envelope."""
        result = sample_build()
        restored = from_json(to_json(result))
        assert isinstance(restored, BuildResult)
        assert restored.report == result.report

    def test_ok_recomputed(self) -> None:
        """Test that a tampered ok flag is ignored."""
        data = {**export_build(sample_build()), "ok": True}
        assert not import_build(data).ok

    def test_wrong_format(self) -> None:
        """Test that foreign documents are rejected."""
        with pytest.raises(ValueError, match="Not a viewdsl.build export"):
            import_build({"format": "other", "version": 1})

    def test_unsupported_version(self) -> None:
        """Test that future versions are rejected."""
        data = {**export_build(sample_build()), "version": EXPORT_VERSION + 1}
        with pytest.raises(ValueError, match="Unsupported viewdsl.build version 2"):
            import_build(data)

    def test_non_page_entry(self) -> None:
        """Test that every entry of pages must be a page node."""
        data = {
            "format": EXPORT_FORMAT,
            "version": EXPORT_VERSION,
            "pages": [to_dict(WidgetNode(widget_type="preview"))],
        }
        with pytest.raises(ValueError, match=r"pages\[0\] is a 'widget' node"):
            import_build(data)


class TestDiagnosticExport:
    """Test diagnostic records in plain data form."""

    def test_round_trip(self) -> None:
        """Test all fields are written and read back."""
        diagnostic = Diagnostic("warning", EMPTY_SECTIONS, "Empty", "a.yaml", 4, 2)
        data = diagnostic_to_dict(diagnostic)
        assert data == {
            "severity": "warning",
            "code": EMPTY_SECTIONS,
            "message": "Empty",
            "file": "a.yaml",
            "line": 4,
            "col": 2,
        }
        assert diagnostic_from_dict(data) == diagnostic

    def test_position_defaults(self) -> None:
        """Test that line and col may be omitted."""
        diagnostic = diagnostic_from_dict(
            {"severity": "error", "code": PARSE_ERROR, "message": "x", "file": "f"},
        )
        assert (diagnostic.line, diagnostic.col) == (1, 1)
