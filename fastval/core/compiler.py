from __future__ import annotations

from typing import Mapping

import structlog

from fastval.core.engine import CompiledValidator, RuleEngine
from fastval.core.registry import registry
from fastval.core.rules import get_schema

logger = structlog.get_logger(__name__)


def get_compiled(target: type, messages: Mapping[str, str] | None = None) -> CompiledValidator:
    """
    Return the compiled validator of `target`, compiling it on first use.

    Compilation happens once per type. Later calls return the cached
    validator even when they pass different `messages` (first compile wins).
    Engine errors propagate unchanged.
    """
    entry = registry.entry(target)
    if entry.compiled is not None:
        return entry.compiled

    with entry.lock:
        # another thread may have compiled while we waited
        if entry.compiled is None:
            logger.info("Compile schema", schema=target.__name__)
            engine = RuleEngine(use_new_custom_checker_function=True, messages=messages or {})
            entry.compiled = engine.compile(get_schema(target) or {})
    return entry.compiled
