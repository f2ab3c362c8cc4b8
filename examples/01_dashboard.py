"""
Admin Dashboard Example
=======================

Compiling a small set of view documents demonstrating:
- Shorthand widgets and show/hide wrapping
- Cross-page $ref inlining
- $partial expansion with argument defaults
- Collecting nodes and exporting the build for a code generator
"""

import logging

from viewdsl import (
    WidgetNode,
    build,
    collect_nodes,
    create_registry,
    parse_partial,
    to_json,
)


# ============================================================================
# Documents (as a YAML reader would produce them)
# ============================================================================

DASHBOARD = {
    "name": "AdminDashboard",
    "type": "dashboard",
    "route": "/admin",
    "auth": True,
    "loader": {"source": "AdminMetrics", "params": ["orgId"]},
    "sections": [
        {"h1": "Admin"},
        {
            "name": "Usage Stats",
            "layout": {"md": "grid-2", "lg": "grid-4"},
            "widgets": [
                {"type": "stat-card", "source": "stats.users", "label": "Users"},
                {"type": "stat-card", "source": "stats.teams", "label": "Teams"},
                {"type": "kpi", "source": "stats.mrr"},
            ],
        },
        {"line-chart": "metrics.byDay", "x": "date", "y": "requests"},
        {
            "source": "audit.entries",
            "columns": ["actor", "action", "at"],
            "show": "user.isOwner",
        },
    ],
}

OVERVIEW = {
    "name": "Overview",
    "type": "page",
    "route": "/",
    "loader": {"source": "AdminMetrics"},
    "sections": [
        {"$ref": "admin-dashboard#Usage Stats"},
        {"$partial": "UserCard", "user": "session.user"},
        {"type": "sparkline", "source": "metrics.recent"},
    ],
}

USER_CARD = {
    "name": "UserCard",
    "params": [
        {"name": "user", "type": "binding"},
        {"name": "label", "type": "string", "default": "Signed in as"},
    ],
    "template": {
        "name": "Who",
        "widgets": [{"type": "stat-card", "source": "$user", "label": "$label"}],
    },
}

# Project-specific widget, registered next to the built-ins
KPI = {
    "name": "kpi",
    "category": "display",
    "extends": "stat-card",
    "props": {"label": {"type": "string", "default": "KPI"}},
}


def main():
    """
    Build both pages and report what came out.

    The overview references a section of the dashboard and uses a partial;
    its sparkline is deliberately unknown to show accumulated diagnostics.
    """
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    result = build(
        {"admin.view.yaml": DASHBOARD, "overview.view.yaml": OVERVIEW},
        registry=create_registry([KPI]),
        partials=[parse_partial(USER_CARD, "user-card.partial.yaml")],
    )

    for page in result.pages:
        widgets = collect_nodes(page, WidgetNode)
        print(f"{page.name} ({page.route}): {[w.widget_type for w in widgets]}")
    print()

    print(result.report)
    print(f"Build ok: {result.ok}")
    print()

    print("Build export (pages plus diagnostics):")
    print(to_json(result))


if __name__ == "__main__":
    main()
