"""Typed accessors for decoded JSON scheme objects.

Every accessor takes an error prefix (``"Layers[2]: "``) so failures read as
field-addressed messages. JSON has a single number type, so integral floats
are accepted as integers; booleans never are.
"""

from __future__ import annotations

import json
from typing import Any, List, Mapping, Optional

from tile_atlas.errors import SchemeShapeError
from tile_atlas.types import JsonObject

MISSING: Any = object()


def quoted_or_undefined(obj: JsonObject, key: str) -> str:
    if key not in obj:
        return "undefined"
    return json.dumps(obj[key])


def decode_json_object(text: str | bytes, what: str) -> JsonObject:
    """Decode ``text`` and require an object at the root."""
    try:
        doc = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SchemeShapeError(f"Could not parse {what} JSON: {exc}") from exc
    if not isinstance(doc, Mapping):
        raise SchemeShapeError(f"{what.capitalize()} JSON root element is not an object")
    return doc


def require_object(obj: Any, what: str) -> JsonObject:
    if not isinstance(obj, Mapping):
        raise SchemeShapeError(f"{what} is not an object")
    return obj


def as_int(value: Any) -> Optional[int]:
    """Return ``value`` as an int if it is a whole JSON number, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def get_positive_int(obj: JsonObject, key: str, prefix: str = "") -> int:
    value = as_int(obj.get(key, MISSING))
    if value is None or value <= 0:
        raise SchemeShapeError(f"{prefix}{key} is 0, negative, not whole or undefined")
    return value


def get_non_empty_string(obj: JsonObject, key: str, prefix: str = "") -> str:
    value = obj.get(key, MISSING)
    if not isinstance(value, str) or not value:
        raise SchemeShapeError(f"{prefix}{key} is empty or undefined")
    return value


def get_optional_string(obj: JsonObject, key: str, prefix: str = "") -> str:
    value = obj.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise SchemeShapeError(f"{prefix}{key} is not a string")
    return value


def get_optional_bool(
    obj: JsonObject, key: str, default: bool, prefix: str = ""
) -> bool:
    value = obj.get(key, MISSING)
    if value is MISSING:
        return default
    if not isinstance(value, bool):
        raise SchemeShapeError(f"{prefix}{key} is not a boolean")
    return value


def get_array(obj: JsonObject, key: str, prefix: str = "") -> List[Any]:
    value = obj.get(key, MISSING)
    if not isinstance(value, list):
        raise SchemeShapeError(f"{prefix}{key} is either undefined or not an array")
    return value
