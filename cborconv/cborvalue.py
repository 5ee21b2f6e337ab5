"""Converter passing raw CBOR and JSON values through unchanged."""
from __future__ import annotations

import base64
import json
import math
from typing import Any

from .core import (
    UNDEFINED,
    CborTag,
    CborType,
    DeserializationError,
    SerializationError,
    Tagged,
    TypeConverter,
)

CBOR_VALUE = "cbor.value"
CBOR_MAP = "cbor.map"
CBOR_ARRAY = "cbor.array"
CBOR_SIMPLE_TYPE = "cbor.simple_type"
JSON_VALUE = "json.value"
JSON_OBJECT = "json.object"
JSON_ARRAY = "json.array"
JSON_DOCUMENT = "json.document"

_CBOR_KINDS = frozenset({CBOR_VALUE, CBOR_MAP, CBOR_ARRAY, CBOR_SIMPLE_TYPE})
_JSON_KINDS = frozenset({JSON_VALUE, JSON_OBJECT, JSON_ARRAY, JSON_DOCUMENT})

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63


def _from_json(value: Any) -> Any:
    """Turn a JSON value into a CBOR value; integral doubles become integers."""
    if value is None or value is UNDEFINED or isinstance(value, (bool, str)):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer() and _INT64_MIN <= value < _INT64_MAX:
            return int(value)
        return value
    if isinstance(value, (list, tuple)):
        return [_from_json(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _from_json(item) for key, item in value.items()}
    raise SerializationError(f"Value of type {type(value).__name__} is not a JSON value")


def _json_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    return json.dumps(_to_json(key))


def _to_json(value: Any) -> Any:
    """Turn a CBOR value into the nearest JSON value."""
    if isinstance(value, Tagged):
        inner = value.value
        if isinstance(inner, (bytes, bytearray)):
            if value.tag == CborTag.EXPECTED_BASE64:
                return base64.b64encode(bytes(inner)).decode("ascii")
            if value.tag == CborTag.EXPECTED_BASE16:
                return bytes(inner).hex()
        return _to_json(inner)
    if value is None or value is UNDEFINED:
        return None
    if isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, (bytes, bytearray)):
        return base64.urlsafe_b64encode(bytes(value)).rstrip(b"=").decode("ascii")
    if isinstance(value, (list, tuple)):
        return [_to_json(item) for item in value]
    if isinstance(value, dict):
        return {_json_key(key): _to_json(item) for key, item in value.items()}
    return None


class CborConverter(TypeConverter):
    """Raw CBOR values, maps, arrays and simple values, and JSON values and documents."""

    def can_convert(self, type_: Any) -> bool:
        return type_ in _CBOR_KINDS or type_ in _JSON_KINDS

    def allowed_cbor_types(self, type_: Any, tag: int) -> list[CborType]:
        if type_ == CBOR_VALUE:
            return [kind for kind in CborType if kind is not CborType.INVALID]
        if type_ == JSON_VALUE:
            return [
                CborType.NULL,
                CborType.TRUE,
                CborType.FALSE,
                CborType.DOUBLE,
                CborType.STRING,
                CborType.ARRAY,
                CborType.MAP,
            ]
        if type_ == CBOR_SIMPLE_TYPE:
            return [
                CborType.SIMPLE_TYPE,
                CborType.TRUE,
                CborType.FALSE,
                CborType.NULL,
                CborType.UNDEFINED,
            ]
        if type_ in (CBOR_MAP, JSON_OBJECT):
            return [CborType.MAP]
        if type_ in (CBOR_ARRAY, JSON_ARRAY):
            return [CborType.ARRAY]
        if type_ == JSON_DOCUMENT:
            return [CborType.MAP, CborType.ARRAY, CborType.NULL]
        raise ValueError(f"unsupported type {type_!r}")

    def serialize(self, type_: Any, value: Any) -> Any:
        if type_ in _CBOR_KINDS:
            return value
        if type_ in _JSON_KINDS:
            return _from_json(value)
        raise SerializationError("Unsupported type")

    def deserialize_cbor(self, type_: Any, value: Any, parent: Any) -> Any:
        if type_ == JSON_VALUE:
            return _to_json(value)
        if type_ == JSON_OBJECT:
            result = _to_json(value)
            return result if isinstance(result, dict) else {}
        if type_ == JSON_ARRAY:
            result = _to_json(value)
            return result if isinstance(result, list) else []
        if type_ == JSON_DOCUMENT:
            result = _to_json(value)
            return result if isinstance(result, (dict, list)) else None
        if type_ in _CBOR_KINDS:
            return value
        raise DeserializationError("Unsupported type")