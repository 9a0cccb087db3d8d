from __future__ import annotations

from typing import Any, Callable, Mapping

from fastval.core.registry import registry

STRICT_KEY = "$$strict"
CONDITION_KEY = "condition"


def _merge(
    mandatory: Mapping[str, Any] | None,
    defaults: Mapping[str, Any] | None,
    options: Mapping[str, Any] | None,
) -> dict[str, Any]:
    # mandatory > user options > defaults
    return {**(defaults or {}), **(options or {}), **(mandatory or {})}


def inherited_schema(target: Any) -> dict[str, Any] | None:
    """Rule sets of the bases of `target`, nearest base winning per key."""
    merged: dict[str, Any] | None = None
    for base in reversed(getattr(target, "__mro__", ())[1:]):
        entry = registry.peek(base)
        if entry is not None and entry.rule_set is not None:
            merged = {**(merged or {}), **entry.rule_set}
    return merged


def update_schema(target: type, key: str, rule: Any) -> None:
    entry = registry.entry(target)
    if entry.rule_set is None:
        entry.rule_set = inherited_schema(target) or {}
    entry.rule_set[key] = rule


def declare_field(
    target: type,
    key: str,
    mandatory: Mapping[str, Any] | None = None,
    defaults: Mapping[str, Any] | None = None,
    options: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Store the merged rule for `key` on `target`.

    Redeclaring a key replaces the previous rule entirely.
    """
    rule = _merge(mandatory, defaults, options)
    update_schema(target, key, rule)
    return rule


def declare_schema_flags(
    target: type,
    *,
    strict: bool = False,
    condition: Callable[..., Any] | None = None,
) -> None:
    update_schema(target, STRICT_KEY, strict)
    if condition is not None:
        update_schema(
            target,
            CONDITION_KEY,
            {"custom": condition, "type": "custom", "optional": True},
        )


def get_schema(target: Any) -> dict[str, Any] | None:
    """
    Live rule set of `target`, or None when nothing was declared on it.

    A class that declares nothing itself gets a merged copy of its bases'
    rule sets.
    """
    entry = registry.peek(target)
    if entry is not None and entry.rule_set is not None:
        return entry.rule_set
    return inherited_schema(target)


def get_inner_schema(target: Any) -> dict[str, Any]:
    """Copy of the rule set without the strictness flag, for embedding."""
    schema = dict(get_schema(target) or {})
    schema.pop(STRICT_KEY, None)
    return schema
