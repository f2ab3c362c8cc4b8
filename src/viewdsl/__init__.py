"""viewdsl - Declarative view compiler front end for Python 3.12+."""

from viewdsl.diagnostics import (
    Diagnostic,
    DiagnosticReport,
    Severity,
)
from viewdsl.nodes import (
    AnyNode,
    Child,
    ConditionalNode,
    DataBinding,
    FragmentNode,
    LoaderConfig,
    LoopNode,
    PageNode,
    PartialNode,
    RefNode,
    SectionNode,
    SlotNode,
    SourceLocation,
    ViewNode,
    WidgetNode,
)
from viewdsl.parser import (
    ParseError,
    parse_child,
    parse_page,
    parse_partial,
)
from viewdsl.pipeline import (
    BuildResult,
    build,
)
from viewdsl.registry import (
    PropSchema,
    SlotSchema,
    WidgetRegistry,
    WidgetSchema,
    create_registry,
)
from viewdsl.resolver import (
    PartialDef,
    PartialParam,
    ResolveResult,
    resolve_all,
    slugify,
)
from viewdsl.serialization import (
    export_build,
    from_dict,
    from_json,
    import_build,
    to_dict,
    to_json,
)
from viewdsl.validator import (
    validate_page,
    validate_pages,
)
from viewdsl.visitor import (
    Visitor,
    collect_nodes,
    walk,
    walk_page,
)

__all__ = [
    # Nodes
    "AnyNode",
    # Pipeline
    "BuildResult",
    "Child",
    "ConditionalNode",
    "DataBinding",
    # Diagnostics
    "Diagnostic",
    "DiagnosticReport",
    "FragmentNode",
    "LoaderConfig",
    "LoopNode",
    "PageNode",
    # Parsing
    "ParseError",
    # Resolution
    "PartialDef",
    "PartialNode",
    "PartialParam",
    # Registry
    "PropSchema",
    "RefNode",
    "ResolveResult",
    "SectionNode",
    "Severity",
    "SlotNode",
    "SlotSchema",
    "SourceLocation",
    "ViewNode",
    # Traversal
    "Visitor",
    "WidgetNode",
    "WidgetRegistry",
    "WidgetSchema",
    "build",
    "collect_nodes",
    "create_registry",
    # Serialization
    "export_build",
    "from_dict",
    "from_json",
    "import_build",
    "parse_child",
    "parse_page",
    "parse_partial",
    "resolve_all",
    "slugify",
    "to_dict",
    "to_json",
    # Validation
    "validate_page",
    "validate_pages",
    "walk",
    "walk_page",
]
