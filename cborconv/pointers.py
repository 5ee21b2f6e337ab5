"""Converter for smart pointers, serialized as the value they point to."""
from __future__ import annotations

from typing import Any

from .core import CborType, DeserializationError, SerializationError, TypeConverter

_POINTER_KINDS = ("pointer", "qpointer")


def _type_name(type_: Any) -> str:
    return type_.__qualname__ if isinstance(type_, type) else repr(type_)


class SmartPointerConverter(TypeConverter):
    """Pointer holders read and written through a pointer extractor."""

    def _extractor(self, type_: Any) -> Any:
        extractor = self.helper.extractor(type_) if self.helper is not None else None
        if extractor is not None and extractor.base_type() in _POINTER_KINDS:
            return extractor
        return None

    def can_convert(self, type_: Any) -> bool:
        return self._extractor(type_) is not None

    def allowed_cbor_types(self, type_: Any, tag: int) -> list[CborType]:
        return [kind for kind in CborType if kind is not CborType.INVALID]

    def serialize(self, type_: Any, value: Any) -> Any:
        extractor = self._extractor(type_)
        if extractor is None:
            raise SerializationError(
                f"Failed to get extractor for type {_type_name(type_)}."
                " Make sure to register an extractor for pointer types"
            )
        return self.helper.serialize_subtype(
            extractor.subtypes()[0], extractor.extract(value, 0), "data"
        )

    def deserialize_cbor(self, type_: Any, value: Any, parent: Any) -> Any:
        extractor = self._extractor(type_)
        if extractor is None:
            raise DeserializationError(
                f"Failed to get extractor for type {_type_name(type_)}."
                " Make sure to register an extractor for pointer types"
            )
        result = self.helper.deserialize_subtype(
            extractor.subtypes()[0],
            value,
            parent if extractor.base_type() == "qpointer" else None,
            "data",
        )
        return extractor.emplace(result, result, 0)