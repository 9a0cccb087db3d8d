"""
Rule engine: compiles a rule set into a callable validator.

A rule set is a mapping of field name to rule, where each rule names a `type`
(string, number, boolean, date, email, uuid, enum, array, object, equal, any,
custom) plus constraints for that type. Structure and primitive types are
checked by a pydantic model generated from the rule set; cross-field and
custom checks run over the plain value afterwards.

    compiled = RuleEngine(messages={...}).compile({"name": {"type": "string"}})
    compiled({"name": 1})  # -> [ErrorRecord(type="string", field="name", ...)]
    compiled({"name": "x"})  # -> True
"""
from __future__ import annotations

import copy
import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Any, Callable, Literal, Mapping, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    Strict,
    TypeAdapter,
    ValidationError,
    create_model,
)
from pydantic_core import PydanticCustomError

from fastval.core.messages import DEFAULT_MESSAGES, FALLBACK_MESSAGE
from fastval.core.rules import CONDITION_KEY, STRICT_KEY

EMAIL_QUICK = re.compile(r"^\S+@\S+\.\S+$")
EMAIL_PRECISE = re.compile(
    r'^(([^<>()\[\]\\.,;:\s@"]+(\.[^<>()\[\]\\.,;:\s@"]+)*)|(".+"))@'
    r"((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\])|(([a-zA-Z\-0-9]+\.)+[a-zA-Z]{2,}))$"
)

# pydantic error type -> message key
NATIVE_ERRORS = {
    "string_type": "string",
    "string_too_long": "stringMax",
    "float_type": "number",
    "float_parsing": "number",
    "finite_number": "number",
    "greater_than_equal": "numberMin",
    "less_than_equal": "numberMax",
    "greater_than": "numberPositive",
    "less_than": "numberNegative",
    "bool_type": "boolean",
    "bool_parsing": "boolean",
    "datetime_type": "date",
    "datetime_parsing": "date",
    "datetime_from_date_parsing": "date",
    "datetime_object_invalid": "date",
    "uuid_type": "uuid",
    "uuid_parsing": "uuid",
    "literal_error": "enumValue",
    "list_type": "array",
    "too_long": "arrayMax",
    "model_type": "object",
    "model_attributes_type": "object",
    "dict_type": "object",
}

EXPECTED_CTX_KEYS = ("min_length", "max_length", "ge", "le", "gt", "lt")

RULE_BOUNDS = {
    "stringMin": "min",
    "stringMax": "max",
    "numberMin": "min",
    "numberMax": "max",
    "arrayMin": "min",
    "arrayMax": "max",
}


class RuleCompileError(ValueError):
    """Raised by `RuleEngine.compile` for a rule set it cannot compile."""


@dataclass
class ErrorRecord:
    type: str
    message: str
    field: str | None = None
    actual: Any = None
    expected: Any = None


def _fail(error_type: str, expected: Any = None, actual: Any = None):
    raise PydanticCustomError(error_type, error_type, {"expected": expected, "actual": actual})


def _annotated(base: Any, *metadata: Any) -> Any:
    metadata = tuple(m for m in metadata if m is not None)
    return Annotated[(base, *metadata)] if metadata else base


def _constraints(**kwargs: Any) -> Any:
    present = {k: v for k, v in kwargs.items() if v is not None}
    return Field(**present) if present else None


def _to_string(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


def _plain(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple, set)):
        return ", ".join(str(v) for v in value)
    return str(value)


def _render(template: str, field: str, expected: Any, actual: Any) -> str:
    return (
        template.replace("{field}", field)
        .replace("{expected}", _text(expected))
        .replace("{actual}", _text(actual))
    )


def _path(loc: tuple) -> str:
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path


def _normalize(raw: Any) -> dict[str, Any]:
    if isinstance(raw, str):
        return {"type": raw}
    if isinstance(raw, Mapping):
        return dict(raw)
    raise RuleCompileError(f"Invalid rule in validator schema: {raw!r}")


def _prepare_rule(raw: Any) -> dict[str, Any]:
    rule = _normalize(raw)
    if isinstance(rule.get("props"), Mapping):
        rule["props"] = _prepare_props(rule["props"])
    if rule.get("items") is not None:
        rule["items"] = _prepare_rule(rule["items"])
    return rule


def _prepare_props(props: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    # "$$" keys are schema flags, not fields
    return {str(k): _prepare_rule(v) for k, v in props.items() if not str(k).startswith("$$")}


def _has_props(rule: Mapping[str, Any] | None) -> bool:
    return bool(rule) and rule.get("type") == "object" and bool(rule.get("props"))


def _within(prefix: str, paths: set) -> bool:
    """True when any of `paths` is `prefix` itself or lies below it."""
    return any(p == prefix or p.startswith(f"{prefix}.") or p.startswith(f"{prefix}[") for p in paths)


class RuleEngine:
    def __init__(
        self,
        *,
        use_new_custom_checker_function: bool = False,
        messages: Mapping[str, str] | None = None,
    ):
        self.use_new_custom_checker_function = use_new_custom_checker_function
        self.messages = {**DEFAULT_MESSAGES, **(messages or {})}

    def compile(self, schema: Mapping[str, Any]) -> CompiledValidator:
        props = _prepare_props(schema)
        model = self._model(props, strict=schema.get(STRICT_KEY) is True, name="RuleSet")
        # one validator per field, to convert the fields that passed when others failed
        adapters = {
            key: TypeAdapter(self._annotation(rule, name=f"RuleSet_{index}"))
            for index, (key, rule) in enumerate(props.items())
        }
        return CompiledValidator(
            model=model,
            adapters=adapters,
            props=props,
            messages=self.messages,
            use_new_custom_checker_function=self.use_new_custom_checker_function,
        )

    def _model(self, props: Mapping[str, dict[str, Any]], *, strict: bool, name: str) -> type[BaseModel]:
        fields: dict[str, Any] = {}
        for index, (key, rule) in enumerate(props.items()):
            annotation = self._annotation(rule, name=f"{name}_{index}")
            if rule.get("optional") or "default" in rule:
                info = Field(default=None, alias=key)
            else:
                info = Field(alias=key)
            # keys are arbitrary strings, so fields are positional and aliased
            fields[f"field_{index}"] = (annotation, info)
        config = ConfigDict(extra="forbid" if strict else "ignore")
        return create_model(name, __config__=config, **fields)

    def _annotation(self, rule: Mapping[str, Any], *, name: str) -> Any:
        kind = rule.get("type")
        builder = getattr(self, f"_build_{kind}", None) if isinstance(kind, str) else None
        if builder is None:
            raise RuleCompileError(f"Invalid '{kind}' type in validator schema.")
        annotation = builder(rule, name)
        if rule.get("optional") or rule.get("nullable"):
            annotation = Optional[annotation]
        return annotation

    def _build_string(self, rule, name):
        min_length = rule.get("min")
        if rule.get("empty") is False:
            min_length = max(min_length or 0, 1)
        length = rule.get("length")
        pattern = rule.get("pattern")
        if isinstance(pattern, str):
            pattern = re.compile(pattern)

        check = None
        if length is not None or pattern is not None:
            def check(value: str) -> str:
                if length is not None and len(value) != length:
                    _fail("stringLength", expected=length, actual=len(value))
                if pattern is not None and not pattern.search(value):
                    _fail("stringPattern", expected=pattern.pattern, actual=value)
                return value

        return _annotated(
            str,
            Strict(),
            _constraints(min_length=min_length, max_length=rule.get("max")),
            AfterValidator(check) if check else None,
            BeforeValidator(_to_string) if rule.get("convert") else None,
        )

    def _build_number(self, rule, name):
        equal = rule.get("equal")
        integer = rule.get("integer")

        check = None
        if equal is not None or integer:
            def check(value: float) -> float:
                if equal is not None and value != equal:
                    _fail("numberEqual", expected=equal, actual=value)
                if integer and not float(value).is_integer():
                    _fail("numberInteger", actual=value)
                return value

        return _annotated(
            float,
            None if rule.get("convert") else Strict(),
            _constraints(
                ge=rule.get("min"),
                le=rule.get("max"),
                gt=0 if rule.get("positive") else None,
                lt=0 if rule.get("negative") else None,
                allow_inf_nan=False,
            ),
            AfterValidator(check) if check else None,
        )

    def _build_boolean(self, rule, name):
        return _annotated(bool, None if rule.get("convert") else Strict())

    def _build_date(self, rule, name):
        return _annotated(datetime, None if rule.get("convert") else Strict())

    def _build_email(self, rule, name):
        pattern = EMAIL_PRECISE if rule.get("mode") == "precise" else EMAIL_QUICK
        allow_empty = rule.get("empty") is True

        def check(value: str) -> str:
            if value == "":
                if allow_empty:
                    return value
                _fail("emailEmpty", actual=value)
            if not pattern.search(value):
                _fail("email", actual=value)
            return value

        return _annotated(str, Strict(), AfterValidator(check))

    def _build_uuid(self, rule, name):
        version = rule.get("version")

        check = None
        if version is not None:
            def check(value: uuid.UUID) -> uuid.UUID:
                if value.version != version:
                    _fail("uuidVersion", expected=version, actual=value.version)
                return value

        return _annotated(uuid.UUID, AfterValidator(check) if check else None)

    def _build_enum(self, rule, name):
        values = rule.get("values")
        if not values:
            raise RuleCompileError("Enum values are required in validator schema.")
        return Literal[tuple(values)]

    def _build_array(self, rule, name):
        items = rule.get("items")
        item_annotation = self._annotation(items, name=f"{name}_item") if items is not None else Any
        min_length = rule.get("min")
        if rule.get("empty") is False:
            min_length = max(min_length or 0, 1)
        length = rule.get("length")
        unique = rule.get("unique")
        contains = rule.get("contains")
        allowed = rule.get("enum")

        def check(value: list) -> list:
            if length is not None and len(value) != length:
                _fail("arrayLength", expected=length, actual=len(value))
            if contains is not None and contains not in value:
                _fail("arrayContains", expected=contains, actual=value)
            if unique:
                duplicates = [item for i, item in enumerate(value) if item in value[:i]]
                if duplicates:
                    _fail("arrayUnique", expected=value, actual=duplicates)
            if allowed is not None:
                for item in value:
                    if item not in allowed:
                        _fail("arrayEnum", expected=allowed, actual=item)
            return value

        needs_check = length is not None or contains is not None or unique or allowed is not None
        return _annotated(
            list[item_annotation],
            _constraints(min_length=min_length, max_length=rule.get("max")),
            AfterValidator(check) if needs_check else None,
        )

    def _build_object(self, rule, name):
        props = rule.get("props")
        if props is None:
            return dict[str, Any]
        return self._model(props, strict=rule.get("strict") is True, name=name)

    def _build_equal(self, rule, name):
        if "value" not in rule:
            return Any
        expected = rule["value"]
        strict = rule.get("strict", False)

        def check(value: Any) -> Any:
            same = value == expected
            if strict:
                same = same and type(value) is type(expected)
            elif not same:
                same = str(value) == str(expected)
            if not same:
                _fail("equalValue", expected=expected, actual=value)
            return value

        return _annotated(Any, AfterValidator(check))

    def _build_any(self, rule, name):
        return Any

    def _build_custom(self, rule, name):
        return Any


class CompiledValidator:
    """Callable produced by `RuleEngine.compile`.

    Returns True for an accepted value, otherwise an ordered list of
    ErrorRecord. Defaults, conversions and custom checker results are written
    into the value passed in.
    """

    def __init__(
        self,
        *,
        model: type[BaseModel],
        adapters: Mapping[str, TypeAdapter],
        props: dict[str, dict[str, Any]],
        messages: Mapping[str, str],
        use_new_custom_checker_function: bool,
    ):
        self.model = model
        self.adapters = adapters
        self.props = props
        self.messages = messages
        self.use_new_custom_checker_function = use_new_custom_checker_function

    def __call__(self, value: Any) -> Literal[True] | list[ErrorRecord]:
        errors: list[ErrorRecord] = []
        if isinstance(value, dict):
            self._fill_defaults(self.props, value)

        try:
            validated = self.model.model_validate(value)
        except ValidationError as exc:
            errors.extend(self._translate(exc.errors()))
        else:
            self._apply_conversions(self.props, value, validated.model_dump(by_alias=True))

        if isinstance(value, dict):
            failed = {record.field for record in errors if record.field}
            if errors:
                self._convert_passed_fields(value, failed)
            self._cross_checks(self.props, value, "", value, errors, failed)
        return errors or True

    def _convert_passed_fields(self, obj: dict, failed: set) -> None:
        for key, rule in self.props.items():
            if key not in obj or _within(key, failed):
                continue
            adapter = self.adapters[key]
            converted = adapter.dump_python(adapter.validate_python(obj[key]), by_alias=True)
            self._apply_conversions({key: rule}, obj, {key: converted})

    def _record(
        self,
        error_type: str,
        field: str | None,
        rule: Mapping[str, Any] | None,
        *,
        expected: Any = None,
        actual: Any = None,
    ) -> ErrorRecord:
        overrides = (rule or {}).get("messages") or {}
        template = overrides.get(error_type) or self.messages.get(error_type) or FALLBACK_MESSAGE
        return ErrorRecord(
            type=error_type,
            message=_render(template, field or "", expected, actual),
            field=field,
            actual=actual,
            expected=expected,
        )

    def _rule_at(self, loc: tuple) -> dict[str, Any]:
        rule: dict[str, Any] = {"type": "object", "props": self.props}
        for part in loc:
            if isinstance(part, int):
                rule = rule.get("items") or {}
            else:
                rule = (rule.get("props") or {}).get(part) or {}
        return rule

    def _classify(self, error: Mapping[str, Any], rule: Mapping[str, Any]) -> tuple[str, Any]:
        error_type = error["type"]
        ctx = error.get("ctx") or {}
        if error_type == "missing" or (error.get("input") is None and error_type not in DEFAULT_MESSAGES):
            return "required", None
        if error_type in DEFAULT_MESSAGES:
            # raised by one of our own checks
            return error_type, ctx.get("expected")

        if error_type == "string_too_short":
            empty = error.get("input") == "" and rule.get("empty") is False
            key = "stringEmpty" if empty else "stringMin"
        elif error_type == "too_short":
            empty = error.get("input") == [] and rule.get("empty") is False
            key = "arrayEmpty" if empty else "arrayMin"
        else:
            key = NATIVE_ERRORS.get(error_type, error_type)

        if key == "enumValue":
            return key, rule.get("values")
        if key in RULE_BOUNDS:
            # report the bound as declared, not as pydantic coerced it
            return key, rule.get(RULE_BOUNDS[key])
        return key, next((ctx[k] for k in EXPECTED_CTX_KEYS if k in ctx), None)

    def _translate(self, raw_errors: list[Mapping[str, Any]]) -> list[ErrorRecord]:
        records: list[ErrorRecord] = []
        forbidden: dict[tuple, list[str]] = {}
        for error in raw_errors:
            loc = tuple(error.get("loc", ()))
            if error["type"] == "extra_forbidden":
                forbidden.setdefault(loc[:-1], []).append(str(loc[-1]))
                continue
            rule = self._rule_at(loc)
            error_type, expected = self._classify(error, rule)
            ctx = error.get("ctx") or {}
            actual = None if error_type == "required" else ctx.get("actual", error.get("input"))
            records.append(self._record(error_type, _path(loc) or None, rule, expected=expected, actual=actual))

        # one record per object listing all of its unknown keys
        for parent, keys in forbidden.items():
            records.append(
                self._record("objectStrict", _path(parent) or None, self._rule_at(parent), actual=", ".join(keys))
            )
        return records

    def _fill_defaults(self, props: Mapping[str, dict[str, Any]], obj: dict) -> None:
        for key, rule in props.items():
            if "default" in rule and obj.get(key) is None:
                default = rule["default"]
                obj[key] = default() if callable(default) else copy.deepcopy(default)
            child = obj.get(key)
            if _has_props(rule) and isinstance(child, dict):
                self._fill_defaults(rule["props"], child)
            elif rule.get("type") == "array" and _has_props(rule.get("items")) and isinstance(child, list):
                for item in child:
                    if isinstance(item, dict):
                        self._fill_defaults(rule["items"]["props"], item)

    def _apply_conversions(self, props: Mapping[str, dict[str, Any]], obj: dict, validated: Mapping) -> None:
        for key, rule in props.items():
            if key not in obj or key not in validated:
                continue
            current, result = obj[key], validated[key]
            if rule.get("convert"):
                obj[key] = _plain(result)
            elif _has_props(rule) and isinstance(current, dict) and isinstance(result, Mapping):
                self._apply_conversions(rule["props"], current, result)
            elif rule.get("type") == "array" and isinstance(current, list) and isinstance(result, list):
                items = rule.get("items") or {}
                for i, (item, converted) in enumerate(zip(current, result)):
                    if items.get("convert"):
                        current[i] = _plain(converted)
                    elif _has_props(items) and isinstance(item, dict) and isinstance(converted, Mapping):
                        self._apply_conversions(items["props"], item, converted)

    def _cross_checks(
        self,
        props: Mapping[str, dict[str, Any]],
        obj: dict,
        prefix: str,
        root: Any,
        errors: list[ErrorRecord],
        failed: set,
    ) -> None:
        for key, rule in props.items():
            path = f"{prefix}.{key}" if prefix else key
            if path in failed:
                continue
            value = obj.get(key)

            if rule.get("type") == "equal" and "field" in rule and not (value is None and rule.get("optional")):
                other = obj.get(rule["field"])
                same = value == other and (not rule.get("strict") or type(value) is type(other))
                if not same:
                    errors.append(self._record("equalField", path, rule, expected=rule["field"], actual=value))

            checker = rule.get("custom")
            # an absent optional field is not checked; the whole-object condition always is
            absent = value is None and rule.get("optional") and key != CONDITION_KEY
            if callable(checker) and not absent:
                self._run_custom(checker, value, rule, key, path, obj, root, errors)

            child = obj.get(key)
            if _has_props(rule) and isinstance(child, dict):
                self._cross_checks(rule["props"], child, path, root, errors, failed)
            elif rule.get("type") == "array" and _has_props(rule.get("items")) and isinstance(child, list):
                for i, item in enumerate(child):
                    if isinstance(item, dict):
                        self._cross_checks(rule["items"]["props"], item, f"{path}[{i}]", root, errors, failed)

    def _run_custom(
        self,
        checker: Callable[..., Any],
        value: Any,
        rule: Mapping[str, Any],
        key: str,
        path: str,
        parent: dict,
        root: Any,
        errors: list[ErrorRecord],
    ) -> None:
        context = {"data": root}
        if self.use_new_custom_checker_function:
            pending: list[Mapping[str, Any]] = []
            result = checker(value, pending, rule, path, parent, context)
            if result is not None:
                parent[key] = result
        else:
            result = checker(value, rule, path, parent, context)
            if result is True:
                return
            pending = result if isinstance(result, list) else [{"type": "custom"}]

        for item in pending:
            errors.append(
                self._record(
                    item.get("type", "custom"),
                    item.get("field", path),
                    rule,
                    expected=item.get("expected"),
                    actual=item.get("actual"),
                )
            )
