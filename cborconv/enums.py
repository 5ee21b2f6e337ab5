"""Converter for enumerations and flags."""
from __future__ import annotations

import enum
import math
from typing import Any

from .core import (
    CborTag,
    CborType,
    DeserializationError,
    Priority,
    SerializationError,
    Tagged,
    TypeConverter,
    untag,
)


def _get_enum(type_: Any, ser: bool) -> type[enum.Enum]:
    if isinstance(type_, type) and issubclass(type_, enum.Enum):
        return type_
    error = SerializationError if ser else DeserializationError
    raise error(f"Unable to get enumeration for type {getattr(type_, '__qualname__', type_)!r}")


def _is_flag(cls: type[enum.Enum]) -> bool:
    return issubclass(cls, enum.Flag)


def _members(cls: type[enum.Enum]) -> list[tuple[str, int]]:
    return [(name, int(member.value)) for name, member in cls.__members__.items()]


def _int_of(value: Any) -> int:
    if isinstance(value, enum.Enum):
        value = value.value
    return int(value)


def _value_to_key(cls: type[enum.Enum], number: int) -> str | None:
    return next((name for name, value in _members(cls) if value == number), None)


def _value_to_keys(cls: type[enum.Enum], number: int) -> str:
    remaining = number
    keys: list[str] = []
    for name, value in reversed(_members(cls)):
        if (value != 0 and remaining & value == value) or value == number:
            remaining &= ~value
            keys.insert(0, name)
    return "|".join(keys)


def _key_to_member(cls: type[enum.Enum], key: str) -> enum.Enum | None:
    return cls.__members__.get(key.strip().rsplit("::", 1)[-1])


def _keys_to_value(cls: type[enum.Enum], text: str) -> int | None:
    total = 0
    for part in text.split("|"):
        member = _key_to_member(cls, part)
        if member is None:
            return None
        total |= int(member.value)
    return total


def _to_integer(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return 0


def _make(cls: type[enum.Enum], number: int) -> Any:
    """Build a member; flag values outside the defined bits stay plain integers."""
    try:
        return cls(number)
    except ValueError:
        return number


class EnumConverter(TypeConverter):
    """Enumerations and flags as integers or as their member names."""

    def __init__(self) -> None:
        super().__init__(Priority.LOW)

    def can_convert(self, type_: Any) -> bool:
        return isinstance(type_, type) and issubclass(type_, enum.Enum)

    def allowed_cbor_tags(self, type_: Any) -> list[int]:
        cls = _get_enum(type_, False)
        return [CborTag.FLAGS if _is_flag(cls) else CborTag.ENUM]

    def allowed_cbor_types(self, type_: Any, tag: int) -> list[CborType]:
        return [CborType.INTEGER, CborType.STRING]

    def serialize(self, type_: Any, value: Any) -> Any:
        cls = _get_enum(type_, True)
        flag = _is_flag(cls)
        tag = CborTag.FLAGS if flag else CborTag.ENUM
        number = _int_of(value)
        if self.helper.get_property("enum_as_string"):
            if flag:
                return Tagged(tag, _value_to_keys(cls, number))
            return Tagged(tag, _value_to_key(cls, number) or "")
        return Tagged(tag, number)

    def deserialize_cbor(self, type_: Any, value: Any, parent: Any) -> Any:
        cls = _get_enum(type_, False)
        flag = _is_flag(cls)
        content = untag(value)
        if isinstance(content, str):
            if flag:
                number = _keys_to_value(cls, content)
                if number is not None:
                    return _make(cls, number)
                if not content:
                    return _make(cls, 0)
            else:
                member = _key_to_member(cls, content)
                if member is not None:
                    return member
            raise DeserializationError(
                f'Invalid value for enum type "{cls.__name__}": {content}'
            )
        number = _to_integer(content)
        if not flag and _value_to_key(cls, number) is None:
            raise DeserializationError(
                f"Invalid integer value. Not a valid enum/flags element: {number}"
            )
        return _make(cls, number)

    def deserialize_json(self, type_: Any, value: Any, parent: Any) -> Any:
        if isinstance(value, float) and not (math.isfinite(value) and value.is_integer()):
            raise DeserializationError(
                f"Invalid value (double) for enum type found: {value:g}"
            )
        return self.deserialize_cbor(type_, value, parent)