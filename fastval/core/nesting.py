from __future__ import annotations

import inspect
import typing
from typing import Any, Mapping, Protocol

from fastval.core.rules import STRICT_KEY, declare_field, get_inner_schema, get_schema


class TypeDescriptor(Protocol):
    def field_kind(self, name: str) -> Any: ...


class AnnotationTypeDescriptor:
    """Resolves a field's declared type from the owner's class annotations."""

    def __init__(self, owner: type):
        self.owner = owner

    def field_kind(self, name: str) -> Any:
        annotation = inspect.get_annotations(self.owner).get(name)
        if isinstance(annotation, str):
            # postponed annotations (from __future__ import annotations)
            annotation = typing.get_type_hints(self.owner).get(name)
        return annotation


def nested_rule(schema_type: Any, options: Mapping[str, Any] | None = None) -> dict[str, Any]:
    props = dict(get_schema(schema_type) or {})
    strict = props.pop(STRICT_KEY, False) or False
    return {**(options or {}), "props": props, "strict": strict, "type": "object"}


def declare_nested_field(
    target: type,
    key: str,
    options: Mapping[str, Any] | None = None,
    *,
    schema_type: Any = None,
    descriptor: TypeDescriptor | None = None,
) -> dict[str, Any]:
    """
    Declare `key` as an object whose props are the rule set of its declared type.

    The nested type's strictness flag moves from its props to the `strict`
    constraint of the parent's rule. Re-declaring replaces the rule.
    """
    if schema_type is None:
        descriptor = descriptor or AnnotationTypeDescriptor(target)
        schema_type = descriptor.field_kind(key)
    return declare_field(target, key, mandatory=nested_rule(schema_type, options))


def expand_items(options: Mapping[str, Any] | None) -> dict[str, Any]:
    """Replace a class given as array `items` with an inline object rule."""
    expanded = dict(options or {})
    items = expanded.get("items")
    if inspect.isclass(items):
        expanded["items"] = {"type": "object", "props": get_inner_schema(items)}
    return expanded
