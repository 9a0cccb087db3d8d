"""
Field declarators and the schema class decorator.

    @validation_schema(strict=True)
    class CreateUser:
        name = Alphabet(min=2)
        email = Email()
        age = Numeric(optional=True, min=18)
        address = NestedObject(Address)
        tags = ArrayOf(items=Tag, max=5)

Each declarator registers its rule on the owning class when the class body
is executed (via `__set_name__`), so `validation_schema` sees every field.
"""
from __future__ import annotations

import re
from typing import Any, Callable, Mapping

from fastval.core.compiler import get_compiled
from fastval.core.nesting import declare_nested_field, expand_items
from fastval.core.rules import declare_field, declare_schema_flags


class FieldDeclaration:
    def __init__(self, declare: Callable[[type, str], dict[str, Any]]):
        self._declare = declare
        self.rule: dict[str, Any] | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.rule = self._declare(owner, name)

    def __repr__(self) -> str:
        return f"FieldDeclaration({self.rule!r})"


def _options(options: Mapping[str, Any] | None, kwargs: dict[str, Any]) -> dict[str, Any]:
    return {**(options or {}), **kwargs}


def decorator_factory(mandatory: Mapping[str, Any] | None = None, defaults: Mapping[str, Any] | None = None):
    def declarator(options: Mapping[str, Any] | None = None, **kwargs: Any) -> FieldDeclaration:
        opts = _options(options, kwargs)
        return FieldDeclaration(lambda owner, key: declare_field(owner, key, mandatory, defaults, opts))

    return declarator


def decorator_factory_array(mandatory: Mapping[str, Any] | None = None, defaults: Mapping[str, Any] | None = None):
    def declarator(options: Mapping[str, Any] | None = None, **kwargs: Any) -> FieldDeclaration:
        opts = expand_items(_options(options, kwargs))
        return FieldDeclaration(lambda owner, key: declare_field(owner, key, mandatory, defaults, opts))

    return declarator


Field = decorator_factory({}, {})
Alphabet = decorator_factory({"type": "string"}, {"empty": False})
Boolean = decorator_factory({"type": "boolean"})
Numeric = decorator_factory({"type": "number"}, {"convert": True})
UUID = decorator_factory({"type": "uuid"})
ObjectId = decorator_factory(
    {"type": "string"},
    {
        "pattern": re.compile(r"^[a-f\d]{24}$", re.IGNORECASE),
        "messages": {"stringPattern": "The '{field}' field is not a valid objectId"},
    },
)
Email = decorator_factory({"type": "email"})
Date = decorator_factory({"type": "date"})
Enum = decorator_factory({"type": "enum"})
ArrayOf = decorator_factory_array({"type": "array"})
AnyValue = decorator_factory({"type": "any"})
EqualTo = decorator_factory({"type": "equal"})


def NestedObject(schema_type: Any = None, options: Mapping[str, Any] | None = None, **kwargs: Any) -> FieldDeclaration:
    """
    Embed another validated class as this field's props.

    Without `schema_type` the class is taken from the field's annotation:

        address: Address = NestedObject()
    """
    opts = _options(options, kwargs)
    return FieldDeclaration(
        lambda owner, key: declare_nested_field(owner, key, opts, schema_type=schema_type)
    )


def validation_schema(
    cls: type | None = None,
    *,
    strict: bool = False,
    messages: Mapping[str, str] | None = None,
    condition: Callable[..., Any] | None = None,
):
    """
    Class decorator: install schema flags, then compile the rule set.

    `condition` is a whole-object check, called like any custom checker:
    `condition(value, errors, schema, path, parent, context)` where `parent`
    is the object being validated. It reports failures by appending
    `{"type": ..., "expected": ..., "actual": ...}` to `errors`.
    """

    def wrap(target: type) -> type:
        declare_schema_flags(target, strict=strict, condition=condition)
        get_compiled(target, messages or {})
        return target

    if cls is not None:
        return wrap(cls)
    return wrap
