"""Converter for two-element pairs."""
from __future__ import annotations

from typing import Any

from .core import (
    CborTag,
    CborType,
    DeserializationError,
    SerializationError,
    Tagged,
    TypeConverter,
    untag,
)


def _type_name(type_: Any) -> str:
    return type_.__qualname__ if isinstance(type_, type) else repr(type_)


class PairConverter(TypeConverter):
    """Pairs as tagged two-element arrays, read through a pair extractor."""

    def _extractor(self, type_: Any) -> Any:
        extractor = self.helper.extractor(type_) if self.helper is not None else None
        if extractor is not None and extractor.base_type() == "pair":
            return extractor
        return None

    def can_convert(self, type_: Any) -> bool:
        return self._extractor(type_) is not None

    def allowed_cbor_tags(self, type_: Any) -> list[int]:
        return [CborTag.NO_TAG, CborTag.PAIR]

    def allowed_cbor_types(self, type_: Any, tag: int) -> list[CborType]:
        return [CborType.ARRAY]

    def serialize(self, type_: Any, value: Any) -> Any:
        extractor = self._extractor(type_)
        if extractor is None:
            raise SerializationError(
                f"Failed to get extractor for type {_type_name(type_)}."
                " Make sure to register an extractor for pair types"
            )
        first_type, second_type = extractor.subtypes()
        return Tagged(CborTag.PAIR, [
            self.helper.serialize_subtype(first_type, extractor.extract(value, 0), "first"),
            self.helper.serialize_subtype(second_type, extractor.extract(value, 1), "second"),
        ])

    def deserialize_cbor(self, type_: Any, value: Any, parent: Any) -> Any:
        extractor = self._extractor(type_)
        if extractor is None:
            raise DeserializationError(
                f"Failed to get extractor for type {_type_name(type_)}."
                " Make sure to register an extractor for pair types"
            )
        content = untag(value)
        array = content if isinstance(content, (list, tuple)) else []
        if len(array) != 2:
            raise DeserializationError(
                "CBOR/JSON array must have exactly 2 elements to be read as a pair"
            )
        first_type, second_type = extractor.subtypes()
        result = extractor.emplace(
            None, self.helper.deserialize_subtype(first_type, array[0], parent, "first"), 0
        )
        return extractor.emplace(
            result, self.helper.deserialize_subtype(second_type, array[1], parent, "second"), 1
        )