from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterable, Literal

from fastapi import HTTPException, Request, status

from fastval.core.engine import ErrorRecord
from fastval.core.executor import execute, format_errors

ArgumentType = Literal["body", "query", "param", "custom"]


@dataclass(frozen=True)
class ArgumentMetadata:
    type: ArgumentType
    metatype: Any = None
    data: str | None = None


class ValidationPipe:
    def transform(self, value: Any, metadata: ArgumentMetadata) -> Any:
        return execute(value, metadata.metatype, metadata.type)

    def format_errors(self, errors: Iterable[ErrorRecord] | None, type: ArgumentType) -> dict[str, str]:
        return format_errors(errors, type)


async def _read_source(request: Request, source: ArgumentType) -> Any:
    if source == "query":
        return dict(request.query_params)
    if source == "param":
        return dict(request.path_params)

    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Malformed JSON body",
        )


def Validated(schema_type: Any, source: ArgumentType = "body", pipe: ValidationPipe | None = None):
    """
    Usage:
      payload: dict = Depends(Validated(CreateUser))
      query: dict = Depends(Validated(ListUsersQuery, source="query"))
    """
    pipe = pipe or ValidationPipe()
    metadata = ArgumentMetadata(type=source, metatype=schema_type)

    async def _dep(request: Request) -> Any:
        value = await _read_source(request, source)
        return pipe.transform(value, metadata)

    return _dep
