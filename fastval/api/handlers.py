from __future__ import annotations

import traceback

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fastval.core.config import settings
from fastval.core.exceptions import ValidationFailure
from fastval.schemas.errors import ValidationErrorOut

logger = structlog.get_logger(__name__)


class ValidationExceptionHandler:
    def __init__(self, show_stack: bool = False):
        self.show_stack = show_stack

    def catch(self, exception: ValidationFailure, request: Request | None = None) -> JSONResponse:
        status_code = exception.get_status()
        body = ValidationErrorOut(
            status=status_code,
            message=exception.message,
            stack="".join(traceback.format_exception(exception)) if self.show_stack else None,
            payload=exception.errors,
        )
        logger.debug(
            "Validation error response",
            path=request.url.path if request is not None else None,
            status=status_code,
        )
        return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))

    async def __call__(self, request: Request, exception: ValidationFailure) -> JSONResponse:
        return self.catch(exception, request)


def install_exception_handlers(app: FastAPI, show_stack: bool | None = None) -> ValidationExceptionHandler:
    handler = ValidationExceptionHandler(settings.SHOW_STACK if show_stack is None else show_stack)
    app.add_exception_handler(ValidationFailure, handler)
    return handler
