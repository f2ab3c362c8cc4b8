"""Format adapters for exporting the view IR to code generators."""

from __future__ import annotations

import dataclasses
import types
from abc import ABC, abstractmethod
from typing import Any, TypeAliasType, Union, get_args, get_origin, get_type_hints

from viewdsl.nodes import ViewNode


def field_key(name: str) -> str:
    """Serialized key for a dataclass field (``as_`` -> ``as``)."""
    return name.rstrip("_")


class FormatAdapter(ABC):
    """Base class for format-specific serialization."""

    @abstractmethod
    def serialize_node(self, node: ViewNode) -> dict[str, Any]:
        """Serialize a node to dictionary format."""
        ...

    @abstractmethod
    def deserialize_node(self, data: dict[str, Any]) -> ViewNode:
        """Deserialize a dictionary to a node."""
        ...


class JSONAdapter(FormatAdapter):
    """JSON serialization adapter.

    Uses the node classes' type hints to rebuild tuples and support records
    (locations, bindings, layouts) that JSON flattens to lists and objects.
    """

    def serialize_node(self, node: ViewNode) -> dict[str, Any]:
        """Serialize a node to a JSON-compatible dictionary."""
        result = {
            field_key(f.name): self._serialize_value(getattr(node, f.name))
            for f in dataclasses.fields(node)
        }
        result["kind"] = type(node).kind
        return result

    def deserialize_node(self, data: dict[str, Any]) -> ViewNode:
        """Deserialize a JSON-compatible dictionary to a node."""
        kind = data["kind"]
        node_cls = ViewNode.registry.get(kind)
        if node_cls is None:
            msg = f"Unknown node kind: {kind}"
            raise ValueError(msg)
        return node_cls(**self._field_values(node_cls, data))

    def _field_values(self, cls: type, data: dict[str, Any]) -> dict[str, Any]:
        hints = get_type_hints(cls)
        return {
            f.name: self._deserialize_value(data[field_key(f.name)], hints[f.name])
            for f in dataclasses.fields(cls)
            if field_key(f.name) in data
        }

    def _serialize_value(self, value: Any) -> Any:
        """Serialize a Python value to JSON-compatible format."""
        if isinstance(value, ViewNode):
            return self.serialize_node(value)
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return {
                field_key(f.name): self._serialize_value(getattr(value, f.name))
                for f in dataclasses.fields(value)
            }
        if isinstance(value, list | tuple):
            return [self._serialize_value(item) for item in value]
        if isinstance(value, dict):
            return {k: self._serialize_value(v) for k, v in value.items()}
        return value

    def _deserialize_value(self, value: Any, hint: Any) -> Any:
        """Deserialize a JSON value using the declared field type."""
        if value is None:
            return None

        if isinstance(hint, TypeAliasType):
            return self._deserialize_value(value, hint.__value__)

        origin = get_origin(hint)
        args = get_args(hint)

        if isinstance(hint, types.UnionType) or origin is Union:
            return self._deserialize_union_value(value, args)

        # Nodes and support records
        if isinstance(hint, type) and issubclass(hint, ViewNode):
            return self.deserialize_node(value)
        if isinstance(hint, type) and dataclasses.is_dataclass(hint):
            return hint(**self._field_values(hint, value))

        # Child sequences and loader params
        if origin is tuple and isinstance(value, list):
            return tuple(self._deserialize_value(item, args[0]) for item in value)

        # Props, meta and primitives
        return value

    def _deserialize_union_value(self, value: Any, options: tuple[Any, ...]) -> Any:
        """Deserialize a value declared as a union of options."""
        options = tuple(o for o in options if o is not type(None))
        if len(options) == 1:
            return self._deserialize_value(value, options[0])

        # Union of node classes: dispatch on the kind discriminant
        if isinstance(value, dict) and "kind" in value:
            return self.deserialize_node(value)

        return value
