"""Converters for sequences, mappings and multi maps."""
from __future__ import annotations

import typing
from collections.abc import Iterable, Mapping
from typing import Any, Generic, Iterator, TypeVar

from .core import (
    CborTag,
    CborType,
    DeserializationError,
    MultiMapMode,
    SerializationError,
    Tagged,
    TypeConverter,
    cbor_type_of,
    untag,
)

K = TypeVar("K")
V = TypeVar("V")

_MISSING = object()
_SEQUENCES = (list, set, frozenset)
_SETS = (set, frozenset)


class MultiMap(Generic[K, V]):
    """An ordered mapping that may hold several values for one key."""

    def __init__(self, items: Iterable[tuple[K, V]] = ()) -> None:
        self._items: list[tuple[K, V]] = [(key, value) for key, value in items]

    def add(self, key: K, value: V) -> None:
        """Append a value for a key, keeping any earlier values."""
        self._items.append((key, value))

    def items(self) -> list[tuple[K, V]]:
        """All key-value pairs in insertion order."""
        return list(self._items)

    def __iter__(self) -> Iterator[tuple[K, V]]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MultiMap):
            return NotImplemented
        return self._items == other._items

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"MultiMap({self._items!r})"


def _type_name(type_: Any) -> str:
    return type_.__qualname__ if isinstance(type_, type) else repr(type_)


def _sequence_info(type_: Any) -> tuple[type, Any] | None:
    """Return the container class and element type of a sequence type."""
    origin = typing.get_origin(type_)
    if origin in _SEQUENCES:
        args = typing.get_args(type_)
        return origin, (args[0] if args else None)
    if isinstance(type_, type) and type_ in _SEQUENCES:
        return type_, None
    return None


def _mapping_info(type_: Any, container: type) -> tuple[Any, Any] | None:
    """Return the key and value types of a mapping type built on ``container``."""
    origin = typing.get_origin(type_)
    if origin is container:
        args = typing.get_args(type_)
        if len(args) == 2:
            return args[0], args[1]
        return None, None
    if type_ is container:
        return None, None
    return None


def _key_text(key: Any) -> str:
    return f"[{untag(key)}]"


def _check_hashable(key: Any, error: type[Exception]) -> None:
    try:
        hash(key)
    except TypeError:
        raise error(f"Map key {key!r} cannot be used as a key") from None


class ListConverter(TypeConverter):
    """Lists and sets as CBOR arrays; sets carry the set tag."""

    def can_convert(self, type_: Any) -> bool:
        return _sequence_info(type_) is not None

    def allowed_cbor_tags(self, type_: Any) -> list[int]:
        info = _sequence_info(type_)
        tags = [CborTag.NO_TAG, CborTag.HOMOGENEOUS]
        if info is not None and info[0] in _SETS:
            tags.append(CborTag.SET)
        return tags

    def allowed_cbor_types(self, type_: Any, tag: int) -> list[CborType]:
        return [CborType.ARRAY]

    def serialize(self, type_: Any, value: Any) -> Any:
        info = _sequence_info(type_)
        if info is None or not isinstance(value, Iterable) or isinstance(
            value, (str, bytes, bytearray, Mapping)
        ):
            raise SerializationError(
                f"Given type {_type_name(type_)} cannot be processed as a sequence"
            )
        container, element_type = info
        array = [
            self.helper.serialize_subtype(element_type, element, f"[{index}]")
            for index, element in enumerate(value)
        ]
        if container in _SETS:
            return Tagged(CborTag.SET, array)
        return array

    def deserialize_cbor(self, type_: Any, value: Any, parent: Any) -> Any:
        info = _sequence_info(type_)
        if info is None:
            raise DeserializationError(
                f"Given type {_type_name(type_)} cannot be accessed as a sequence"
            )
        container, element_type = info
        content = untag(value)
        array = content if isinstance(content, (list, tuple)) else []
        elements = [
            self.helper.deserialize_subtype(element_type, element, parent, f"[{index}]")
            for index, element in enumerate(array)
        ]
        try:
            return container(elements)
        except TypeError:
            raise DeserializationError(
                f"Elements cannot be stored in a {container.__name__}"
            ) from None


class MapConverter(TypeConverter):
    """Dictionaries as CBOR maps."""

    def can_convert(self, type_: Any) -> bool:
        return _mapping_info(type_, dict) is not None

    def allowed_cbor_tags(self, type_: Any) -> list[int]:
        return [CborTag.NO_TAG, CborTag.EXPLICIT_MAP]

    def allowed_cbor_types(self, type_: Any, tag: int) -> list[CborType]:
        return [CborType.MAP]

    def serialize(self, type_: Any, value: Any) -> Any:
        info = _mapping_info(type_, dict)
        if info is None or not isinstance(value, Mapping):
            raise SerializationError(
                f"Given type {_type_name(type_)} cannot be processed as a mapping"
            )
        key_type, value_type = info
        result: dict = {}
        for key, item in value.items():
            trace = _key_text(key)
            cbor_key = self.helper.serialize_subtype(key_type, key, trace + ".key")
            _check_hashable(cbor_key, SerializationError)
            result[cbor_key] = self.helper.serialize_subtype(value_type, item, trace + ".value")
        return result

    def deserialize_cbor(self, type_: Any, value: Any, parent: Any) -> Any:
        info = _mapping_info(type_, dict)
        if info is None:
            raise DeserializationError(
                f"Given type {_type_name(type_)} cannot be accessed as a mapping"
            )
        key_type, value_type = info
        content = untag(value)
        mapping = content if isinstance(content, dict) else {}
        result: dict = {}
        for cbor_key, item in mapping.items():
            trace = _key_text(cbor_key)
            key = self.helper.deserialize_subtype(key_type, cbor_key, parent, trace + ".key")
            _check_hashable(key, DeserializationError)
            result[key] = self.helper.deserialize_subtype(
                value_type, item, parent, trace + ".value"
            )
        return result


class MultiMapConverter(TypeConverter):
    """Multi maps as maps of value arrays, dense maps or arrays of pairs."""

    def can_convert(self, type_: Any) -> bool:
        return _mapping_info(type_, MultiMap) is not None

    def allowed_cbor_tags(self, type_: Any) -> list[int]:
        return [CborTag.NO_TAG, CborTag.MULTI_MAP, CborTag.EXPLICIT_MAP]

    def allowed_cbor_types(self, type_: Any, tag: int) -> list[CborType]:
        return [CborType.MAP, CborType.ARRAY]

    def serialize(self, type_: Any, value: Any) -> Any:
        info = _mapping_info(type_, MultiMap)
        if info is None or not isinstance(value, (MultiMap, Mapping)):
            raise SerializationError(
                f"Given type {_type_name(type_)} cannot be processed as a mapping"
            )
        key_type, value_type = info
        mode = MultiMapMode(self.helper.get_property("multi_map_mode"))
        pairs = list(value.items())

        if mode is MultiMapMode.LIST:
            array = []
            for key, item in pairs:
                trace = _key_text(key)
                array.append([
                    self.helper.serialize_subtype(key_type, key, trace + ".key"),
                    self.helper.serialize_subtype(value_type, item, trace + ".value"),
                ])
            return Tagged(CborTag.MULTI_MAP, array)

        result: dict = {}
        for key, item in pairs:
            trace = _key_text(key)
            cbor_key = self.helper.serialize_subtype(key_type, key, trace + ".key")
            _check_hashable(cbor_key, SerializationError)
            existing = result.get(cbor_key, _MISSING)
            cbor_value = self.helper.serialize_subtype(value_type, item, trace + ".value")
            if mode is MultiMapMode.MAP:
                previous = existing if isinstance(existing, list) else []
                result[cbor_key] = previous + [cbor_value]
            elif existing is _MISSING:
                result[cbor_key] = cbor_value
            elif isinstance(existing, list):
                result[cbor_key] = existing + [cbor_value]
            else:
                result[cbor_key] = [existing, cbor_value]
        return Tagged(CborTag.MULTI_MAP, result)

    def deserialize_cbor(self, type_: Any, value: Any, parent: Any) -> Any:
        info = _mapping_info(type_, MultiMap)
        if info is None:
            raise DeserializationError(
                f"Given type {_type_name(type_)} cannot be accessed as a mapping"
            )
        key_type, value_type = info
        content = untag(value)
        result: MultiMap = MultiMap()

        if isinstance(content, dict):
            for cbor_key, item in content.items():
                trace = _key_text(cbor_key)
                key = self.helper.deserialize_subtype(key_type, cbor_key, parent, trace + ".key")
                if isinstance(item, list):
                    for count, element in enumerate(item):
                        result.add(key, self.helper.deserialize_subtype(
                            value_type, element, parent, f"{trace}.value[{count}]"
                        ))
                else:
                    result.add(key, self.helper.deserialize_subtype(
                        value_type, item, parent, trace + ".value"
                    ))
            return result

        if isinstance(content, (list, tuple)):
            for element in content:
                pair = element if isinstance(element, (list, tuple)) else []
                if len(pair) != 2:
                    raise DeserializationError(
                        "CBOR/JSON array must have exactly 2 elements"
                        " to be read as a value of a multi map"
                    )
                trace = _key_text(pair[0])
                result.add(
                    self.helper.deserialize_subtype(key_type, pair[0], parent, trace + ".key"),
                    self.helper.deserialize_subtype(value_type, pair[1], parent, trace + ".value"),
                )
            return result

        raise DeserializationError(f"Unsupported CBOR/JSON-Type: {int(cbor_type_of(value))}")