"""
JSON value classification - maps sampled JSON values to property kinds

Strings are refined in a fixed order: date-time, then UUID, then absolute
URI, then plain string. The first successful parse wins.
"""

import re
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, NamedTuple, Optional
from urllib.parse import urlparse

from connector_generator.schema.models import PropertyKind

INT32_RANGE = (-(2 ** 31), 2 ** 31 - 1)
INT64_RANGE = (-(2 ** 63), 2 ** 63 - 1)

ISO_DATETIME_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d{1,6})?)?(?:Z|[+-]\d{2}:?\d{2})?)?$"
)
URI_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")
OPAQUE_URI_SCHEMES = {"mailto", "urn", "tel", "data", "file"}


class JsonKind(str, Enum):
    """Closed set of JSON value kinds"""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    NULL = "null"


class ScalarType(NamedTuple):
    """Kind, format and python type inferred for a scalar value"""
    kind: PropertyKind
    format: Optional[str]
    python_type: str


def json_kind(value: Any) -> JsonKind:
    """Tag a decoded JSON value with its kind."""
    if value is None:
        return JsonKind.NULL
    # bool before number: bool is an int subclass
    if isinstance(value, bool):
        return JsonKind.BOOLEAN
    if isinstance(value, (int, float)):
        return JsonKind.NUMBER
    if isinstance(value, str):
        return JsonKind.STRING
    if isinstance(value, list):
        return JsonKind.ARRAY
    if isinstance(value, dict):
        return JsonKind.OBJECT
    raise TypeError(f"Not a JSON value: {type(value).__name__}")


def classify_string(value: str) -> ScalarType:
    """Refine a string into date-time, UUID, URI or plain string."""
    if is_datetime(value):
        if len(value.strip()) == 10:
            return ScalarType(PropertyKind.DATETIME, "date", "date")
        return ScalarType(PropertyKind.DATETIME, "date-time", "datetime")
    if is_uuid(value):
        return ScalarType(PropertyKind.UUID, "uuid", "UUID")
    if is_absolute_uri(value):
        return ScalarType(PropertyKind.URI, "uri", "AnyUrl")
    return ScalarType(PropertyKind.STRING, None, "str")


def classify_number(value: Any) -> ScalarType:
    """Integers widen from 32 to 64 bits, anything else is a decimal."""
    if isinstance(value, int) and not isinstance(value, bool):
        if INT32_RANGE[0] <= value <= INT32_RANGE[1]:
            return ScalarType(PropertyKind.INTEGER, "int32", "int")
        if INT64_RANGE[0] <= value <= INT64_RANGE[1]:
            return ScalarType(PropertyKind.INTEGER, "int64", "int")
    return ScalarType(PropertyKind.NUMBER, "decimal", "Decimal")


def is_datetime(value: str) -> bool:
    """ISO-8601 date or timestamp (2024-01-15, 2024-01-15T10:30:00Z)."""
    text = value.strip()
    if not ISO_DATETIME_PATTERN.match(text):
        return False

    text = re.sub(r"Z$", "+00:00", text)
    text = re.sub(r"([+-]\d{2})(\d{2})$", r"\1:\2", text)
    try:
        datetime.fromisoformat(text)
    except ValueError:
        return False
    return True


def is_uuid(value: str) -> bool:
    """Canonical, braced, urn or bare-hex UUID."""
    try:
        uuid.UUID(value.strip())
    except ValueError:
        return False
    return True


def is_absolute_uri(value: str) -> bool:
    """URI with a scheme and either an authority or a known opaque scheme."""
    text = value.strip()
    if not text or " " in text:
        return False

    try:
        parsed = urlparse(text)
    except ValueError:
        return False

    if not parsed.scheme or not URI_SCHEME_PATTERN.match(parsed.scheme):
        return False

    if parsed.netloc:
        return True
    return parsed.scheme.lower() in OPAQUE_URI_SCHEMES and bool(parsed.path)
