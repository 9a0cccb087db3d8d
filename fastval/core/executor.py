from __future__ import annotations

import copy
from typing import Any, Iterable

import structlog

from fastval.core.compiler import get_compiled
from fastval.core.engine import ErrorRecord
from fastval.core.exceptions import FORBIDDEN_KEYS, ValidationFailure
from fastval.core.rules import CONDITION_KEY

logger = structlog.get_logger(__name__)

GENERIC_TYPES = (object, dict, Any)


def is_generic(target: Any) -> bool:
    return target is None or any(target is t for t in GENERIC_TYPES)


def format_errors(errors: Iterable[ErrorRecord] | None, location: str) -> dict[str, str]:
    """
    Map error records to {field: message}.

    Records without a field go under "forbiddenKeys". A later record for the
    same field replaces an earlier one.
    """
    formatted: dict[str, str] = {}
    for error in errors or []:
        formatted[error.field or FORBIDDEN_KEYS] = (
            error.message.replace("field", f"field in {location}", 1).replace("'' ", "", 1)
        )
    return formatted


def execute(value: Any, target: Any, location: str = "body") -> Any:
    """
    Validate `value` against the rule set declared on `target`.

    Runs on a deep copy: the caller's object is left untouched and the
    returned value carries any defaults and conversions, without the
    synthetic "condition" key. Raises ValidationFailure on rejection.
    """
    if is_generic(target):
        return value

    compiled = get_compiled(target)
    candidate = copy.deepcopy(value)
    result = compiled(candidate)
    if result is not True:
        errors = format_errors(result, location)
        logger.info(
            "Validation failed",
            schema=getattr(target, "__name__", str(target)),
            location=location,
            fields=sorted(errors),
        )
        raise ValidationFailure(errors)

    if isinstance(candidate, dict):
        candidate.pop(CONDITION_KEY, None)
    return candidate
