from fastval.api.handlers import ValidationExceptionHandler, install_exception_handlers
from fastval.api.pipe import ArgumentMetadata, Validated, ValidationPipe
from fastval.core.compiler import get_compiled
from fastval.core.exceptions import ErrorRecord, RuleCompileError, ValidationFailure
from fastval.core.executor import execute, format_errors
from fastval.core.rules import get_inner_schema, get_schema
from fastval.decorators import (
    Alphabet,
    AnyValue,
    ArrayOf,
    Boolean,
    Date,
    Email,
    Enum,
    EqualTo,
    Field,
    NestedObject,
    Numeric,
    ObjectId,
    UUID,
    decorator_factory,
    decorator_factory_array,
    validation_schema,
)

__all__ = [ "ValidationExceptionHandler", "install_exception_handlers", "ArgumentMetadata",
           "Validated", "ValidationPipe", "get_compiled", "ErrorRecord", "RuleCompileError",
           "ValidationFailure", "execute", "format_errors", "get_inner_schema", "get_schema",
           "Alphabet", "AnyValue", "ArrayOf", "Boolean", "Date", "Email", "Enum", "EqualTo",
           "Field", "NestedObject", "Numeric", "ObjectId", "UUID", "decorator_factory",
           "decorator_factory_array", "validation_schema" ]
