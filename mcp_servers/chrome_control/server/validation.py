"""
Argument validation against the tool input schemas.

Covers the schema subset used by TOOL_DEFINITIONS: object properties with
type, enum, minimum/maximum, minLength, array items, defaults, required and
additionalProperties=false.
"""

from __future__ import annotations

import copy
from typing import Any

from ..errors import ValidationError


def _type_ok(expected: str, value: Any) -> bool:
    if expected == "string":
        return isinstance(value, str)
    if expected == "boolean":
        return isinstance(value, bool)
    if expected == "integer":
        return isinstance(value, int) and not isinstance(value, bool)
    if expected == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected == "array":
        return isinstance(value, list)
    if expected == "object":
        return isinstance(value, dict)
    return True


def _coerce(expected: str | None, value: Any) -> Any:
    # JSON clients may send 5.0 for an integer field.
    if expected == "integer" and isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _check(path: str, schema: dict[str, Any], value: Any) -> Any:
    expected = schema.get("type")
    value = _coerce(expected, value)
    if expected and not _type_ok(expected, value):
        raise ValidationError(f"{path}: expected {expected}, got {type(value).__name__}")

    enum = schema.get("enum")
    if enum is not None and value not in enum:
        options = ", ".join(repr(v) for v in enum)
        raise ValidationError(f"{path}: must be one of {options}")

    if expected in ("integer", "number"):
        minimum = schema.get("minimum")
        maximum = schema.get("maximum")
        if minimum is not None and value < minimum:
            raise ValidationError(f"{path}: must be >= {minimum}")
        if maximum is not None and value > maximum:
            raise ValidationError(f"{path}: must be <= {maximum}")

    if expected == "string":
        min_length = schema.get("minLength")
        if min_length is not None and len(value) < min_length:
            raise ValidationError(f"{path}: must not be empty" if min_length == 1 else f"{path}: too short")

    if expected == "array":
        items = schema.get("items")
        if isinstance(items, dict) and items:
            value = [_check(f"{path}[{i}]", items, item) for i, item in enumerate(value)]

    return value


def validate_arguments(tool: dict[str, Any], arguments: dict[str, Any] | None) -> dict[str, Any]:
    """Return validated arguments with schema defaults filled in; raise ValidationError."""
    schema = tool.get("inputSchema") or {}
    args = arguments if arguments is not None else {}
    if not isinstance(args, dict):
        raise ValidationError(f"{tool['name']}: arguments must be an object")

    properties: dict[str, Any] = schema.get("properties") or {}
    if schema.get("additionalProperties") is False:
        unknown = sorted(set(args) - set(properties))
        if unknown:
            raise ValidationError(f"{tool['name']}: unknown argument(s): {', '.join(unknown)}")

    missing = [name for name in schema.get("required") or [] if args.get(name) is None]
    if missing:
        raise ValidationError(f"{tool['name']}: missing required argument(s): {', '.join(missing)}")

    out: dict[str, Any] = {}
    for name, prop in properties.items():
        value = args.get(name)
        if value is None:
            if "default" in prop:
                out[name] = copy.deepcopy(prop["default"])
            continue
        out[name] = _check(name, prop, value)
    return out


__all__ = ["validate_arguments"]
