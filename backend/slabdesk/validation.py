from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from typing import Any


# Maximum price: $99,999,999.99 fits Numeric(10, 2)
MAX_PRICE = 99_999_999.99

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

_MISSING = object()


class ValidationError(ValueError):
    """
    400-level input problem.

    details follows the flattened shape clients already parse:
    {"formErrors": [...], "fieldErrors": {"field": ["message", ...]}}
    """

    def __init__(
        self,
        message: str = "Invalid input",
        *,
        field_errors: dict[str, list[str]] | None = None,
        form_errors: list[str] | None = None,
    ):
        super().__init__(message)
        self.field_errors = field_errors or {}
        self.form_errors = form_errors or []

    @property
    def details(self) -> dict:
        return {"formErrors": list(self.form_errors), "fieldErrors": dict(self.field_errors)}


@dataclass(frozen=True)
class FieldSpec:
    """
    One request field.

    kind: "string", "number", "boolean", "uuid", "enum", "email", "uuid_list"
    """
    kind: str
    required: bool = False
    nullable: bool = False
    min_value: float | None = None
    max_value: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    choices: tuple[str, ...] | None = None
    default: Any = _MISSING


@dataclass(frozen=True)
class RequestSchema:
    """
    Central policy for one request body.

    Unknown keys are dropped. require_any demands at least one known field
    (PATCH bodies); require_one_of demands at least one of the named fields
    to be present and non-empty.
    """
    fields: dict[str, FieldSpec]
    require_any: bool = False
    require_one_of: tuple[str, ...] = field(default_factory=tuple)
    require_one_of_message: str | None = None


def to_snake(name: str) -> str:
    return _CAMEL_RE.sub("_", name).lower()


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _coerce_value(spec: FieldSpec, value: Any) -> Any:
    """Return the coerced value or raise ValueError with a user-facing message."""
    kind = spec.kind

    if kind == "number":
        # Strict: booleans and numeric strings are rejected
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Expected number, received {_type_name(value)}")
        if value != value or value in (float("inf"), float("-inf")):
            raise ValueError("Expected a finite number")
        if spec.min_value is not None and value < spec.min_value:
            raise ValueError(f"Number must be greater than or equal to {spec.min_value:g}")
        if spec.max_value is not None and value > spec.max_value:
            raise ValueError(f"Number must be less than or equal to {spec.max_value:g}")
        return value

    if kind == "boolean":
        if not isinstance(value, bool):
            raise ValueError(f"Expected boolean, received {_type_name(value)}")
        return value

    if kind == "uuid_list":
        if not isinstance(value, list):
            raise ValueError(f"Expected array, received {_type_name(value)}")
        if spec.min_length is not None and len(value) < spec.min_length:
            raise ValueError(f"Array must contain at least {spec.min_length} element(s)")
        for item in value:
            _require_uuid(item)
        return list(value)

    if not isinstance(value, str):
        raise ValueError(f"Expected string, received {_type_name(value)}")

    if kind == "enum":
        if value not in (spec.choices or ()):
            options = " | ".join(f"'{c}'" for c in spec.choices or ())
            raise ValueError(f"Invalid enum value. Expected {options}, received '{value}'")
        return value

    if kind == "email" and not _EMAIL_RE.match(value):
        raise ValueError("Invalid email")

    if kind == "uuid":
        _require_uuid(value)

    if spec.min_length is not None and len(value) < spec.min_length:
        raise ValueError(f"String must contain at least {spec.min_length} character(s)")
    if spec.max_length is not None and len(value) > spec.max_length:
        raise ValueError(f"String must contain at most {spec.max_length} character(s)")

    return value


def _require_uuid(value: Any) -> None:
    if not isinstance(value, str):
        raise ValueError(f"Expected string, received {_type_name(value)}")
    try:
        uuid.UUID(value)
    except ValueError:
        raise ValueError("Invalid uuid")


def validate_payload(*, schema: RequestSchema, payload: Any) -> dict:
    """
    Validates + normalizes an incoming JSON body against a RequestSchema.

    Returns a dict keyed by snake_case field name containing only the fields
    that were provided (or defaulted). Absent optional fields are omitted so
    callers can tell "not supplied" from "set to null".
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError(form_errors=["Expected object"])

    field_errors: dict[str, list[str]] = {}
    form_errors: list[str] = []
    cleaned: dict = {}

    for name, spec in schema.fields.items():
        if name not in payload:
            if spec.default is not _MISSING:
                cleaned[to_snake(name)] = spec.default
            elif spec.required:
                field_errors.setdefault(name, []).append("Required")
            continue

        raw = payload[name]
        if raw is None:
            if spec.nullable:
                cleaned[to_snake(name)] = None
            else:
                field_errors.setdefault(name, []).append(
                    "Required" if spec.required else "Expected value, received null"
                )
            continue

        try:
            cleaned[to_snake(name)] = _coerce_value(spec, raw)
        except ValueError as exc:
            field_errors.setdefault(name, []).append(str(exc))

    if schema.require_any and not any(name in payload for name in schema.fields):
        form_errors.append("At least one field must be provided")

    if schema.require_one_of and not any(payload.get(name) for name in schema.require_one_of):
        form_errors.append(
            schema.require_one_of_message
            or f"Either {' or '.join(schema.require_one_of)} must be provided"
        )

    if field_errors or form_errors:
        raise ValidationError(field_errors=field_errors, form_errors=form_errors)

    return cleaned
