"""CBOR value model, errors, serializer settings and converter dispatch."""
from __future__ import annotations

import enum
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Hashable, Iterable, Iterator, Mapping


class _Undefined:
    """The CBOR ``undefined`` simple value."""

    _instance: "_Undefined | None" = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


class CborTag(enum.IntEnum):
    """Well known CBOR tags plus the tags used by the converters."""

    DATE_TIME_STRING = 0
    UNIX_TIME_T = 1
    POSITIVE_BIGNUM = 2
    NEGATIVE_BIGNUM = 3
    DECIMAL = 4
    BIGFLOAT = 5
    EXPECTED_BASE64URL = 21
    EXPECTED_BASE64 = 22
    EXPECTED_BASE16 = 23
    ENCODED_CBOR = 24
    URL = 32
    BASE64URL = 33
    BASE64 = 34
    REGULAR_EXPRESSION = 35
    MIME_MESSAGE = 36
    UUID = 37
    SIGNATURE = 55799

    HOMOGENEOUS = 40100
    SET = 40101
    EXPLICIT_MAP = 40102
    MULTI_MAP = 40103
    GENERIC_OBJECT = 40104
    CONSTRUCTED_OBJECT = 40105
    ENUM = 40106
    FLAGS = 40107
    DATE = 40108
    TIME = 40109
    GEOM_SIZE = 40110
    GEOM_POINT = 40111
    GEOM_LINE = 40112
    GEOM_RECT = 40113
    LOCALE_ISO = 40114
    LOCALE_BCP47 = 40115
    BIT_ARRAY = 40116
    PAIR = 40117
    TUPLE = 40118
    VERSION_NUMBER = 40119
    CHRONO_NANO_SECONDS = 40120
    CHRONO_MICRO_SECONDS = 40121
    CHRONO_MILLI_SECONDS = 40122
    CHRONO_SECONDS = 40123
    CHRONO_MINUTES = 40124
    CHRONO_HOURS = 40125

    NO_TAG = 2**64 - 1


class CborType(enum.IntEnum):
    """The kind of a CBOR value."""

    INTEGER = 0x00
    BYTE_ARRAY = 0x40
    STRING = 0x60
    ARRAY = 0x80
    MAP = 0xA0
    TAG = 0xC0
    SIMPLE_TYPE = 0x100
    FALSE = 0x114
    TRUE = 0x115
    NULL = 0x116
    UNDEFINED = 0x117
    DOUBLE = 0x202
    INVALID = -1


@dataclass(frozen=True)
class Tagged:
    """A CBOR value carrying a tag."""

    tag: int
    value: Any


def untag(value: Any) -> Any:
    """Return the content of a tagged value, or the value itself."""
    return value.value if isinstance(value, Tagged) else value


def tag_of(value: Any) -> int:
    """Return the tag of a value, or ``CborTag.NO_TAG``."""
    return value.tag if isinstance(value, Tagged) else CborTag.NO_TAG


def cbor_type_of(value: Any) -> CborType:
    """Classify a Python value as a CBOR type."""
    if isinstance(value, Tagged):
        return CborType.TAG
    if value is None:
        return CborType.NULL
    if value is UNDEFINED:
        return CborType.UNDEFINED
    if value is True:
        return CborType.TRUE
    if value is False:
        return CborType.FALSE
    if isinstance(value, int):
        return CborType.INTEGER
    if isinstance(value, float):
        return CborType.DOUBLE
    if isinstance(value, (bytes, bytearray)):
        return CborType.BYTE_ARRAY
    if isinstance(value, str):
        return CborType.STRING
    if isinstance(value, (list, tuple)):
        return CborType.ARRAY
    if isinstance(value, dict):
        return CborType.MAP
    return CborType.INVALID


class SerializerError(Exception):
    """Base error of all serialization failures, with the property trace."""

    def __init__(self, message: str, trace: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.trace = list(trace)

    def __str__(self) -> str:
        if not self.trace:
            return self.message
        return f"{self.message} (property trace: {' -> '.join(self.trace)})"


class SerializationError(SerializerError):
    """Raised when a value cannot be serialized."""


class DeserializationError(SerializerError):
    """Raised when data cannot be deserialized."""


class Priority(enum.IntEnum):
    """Converter priorities; higher priorities are tried first."""

    EXTREMELY_LOW = -0x00FFFFFF
    VERY_LOW = -0x0000FFFF
    LOW = -0x000000FF
    STANDARD = 0
    HIGH = 0x000000FF
    VERY_HIGH = 0x0000FFFF
    EXTREMELY_HIGH = 0x00FFFFFF


class ValidationFlag(enum.Flag):
    """Extra validation done while deserializing."""

    STANDARD_VALIDATION = 0
    NO_EXTRA_PROPERTIES = 0x01
    ALL_PROPERTIES = 0x02
    STRICT_BASIC_TYPES = 0x04
    FULL_PROPERTY_VALIDATION = NO_EXTRA_PROPERTIES | ALL_PROPERTIES
    FULL_VALIDATION = FULL_PROPERTY_VALIDATION | STRICT_BASIC_TYPES


class Polymorphing(enum.Enum):
    """How object class information is written and read."""

    DISABLED = 0
    ENABLED = 1
    FORCED = 2


class MultiMapMode(enum.Enum):
    """How multi maps are laid out."""

    MAP = 0
    LIST = 1
    DENSE_MAP = 2


class ByteArrayFormat(enum.Enum):
    """Text encoding of byte strings in JSON."""

    BASE64 = 0
    BASE64URL = 1
    BASE16 = 2


_DEFAULT_PROPERTIES: dict[str, Any] = {
    "allow_null": False,
    "keep_object_name": False,
    "enum_as_string": False,
    "version_as_string": False,
    "date_as_time_stamp": False,
    "use_bcp47_locale": True,
    "validation_flags": ValidationFlag.STANDARD_VALIDATION,
    "polymorphing": Polymorphing.ENABLED,
    "multi_map_mode": MultiMapMode.MAP,
    "ignore_stored_attribute": False,
    "byte_array_format": ByteArrayFormat.BASE64,
    "validate_base64": True,
    "handle_special_numbers": False,
}

_PLAIN_TYPES = (type(None), bool, int, float, str, bytes, list, dict, Tagged)


def _is_plain(value: Any) -> bool:
    return value is UNDEFINED or isinstance(value, _PLAIN_TYPES)


def _type_name(type_: Any) -> str:
    return getattr(type_, "__qualname__", None) or repr(type_)


class TypeConverter(ABC):
    """Converts values of some types to CBOR values and back."""

    def __init__(self, priority: int = Priority.STANDARD) -> None:
        self.priority = int(priority)
        self.helper: SerializationHelper | None = None

    @abstractmethod
    def can_convert(self, type_: Any) -> bool:
        """Tell whether this converter handles the given type."""

    def allowed_cbor_tags(self, type_: Any) -> list[int]:
        """Tags accepted when reading the type; empty means any."""
        return []

    @abstractmethod
    def allowed_cbor_types(self, type_: Any, tag: int) -> list[CborType]:
        """CBOR types accepted when reading the type with the tag."""

    def guess_type(self, tag: int, data_type: CborType) -> Any:
        """Guess a type from tagged data, or None."""
        return None

    @abstractmethod
    def serialize(self, type_: Any, value: Any) -> Any:
        """Turn a value into a CBOR value."""

    @abstractmethod
    def deserialize_cbor(self, type_: Any, value: Any, parent: Any) -> Any:
        """Turn a CBOR value into a value of the type."""

    def deserialize_json(self, type_: Any, value: Any, parent: Any) -> Any:
        """Turn a JSON-derived value into a value of the type."""
        return self.deserialize_cbor(type_, value, parent)


class ThreadSafeStore:
    """A dictionary guarded by a lock."""

    def __init__(self, items: Mapping[Hashable, Any] | None = None) -> None:
        self._lock = threading.Lock()
        self._store: dict[Hashable, Any] = dict(items or {})

    def get(self, key: Hashable) -> Any:
        with self._lock:
            return self._store.get(key)

    def add(self, key: Hashable, item: Any) -> None:
        with self._lock:
            self._store[key] = item

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


class ConverterStore:
    """Converters kept ordered from highest to lowest priority."""

    def __init__(self, converters: Iterable[TypeConverter] = ()) -> None:
        self._lock = threading.RLock()
        self.store: list[TypeConverter] = sorted(converters, key=lambda c: -c.priority)
        self.factory_offset = 0

    def insert_sorted(self, converter: TypeConverter) -> None:
        with self._lock:
            for position, existing in enumerate(self.store):
                if existing.priority < converter.priority:
                    self.store.insert(position, converter)
                    return
            self.store.append(converter)

    def __iter__(self) -> Iterator[TypeConverter]:
        with self._lock:
            return iter(list(self.store))

    def __len__(self) -> int:
        with self._lock:
            return len(self.store)


class SerializationHelper:
    """Holds settings, extractors and converters, and dispatches sub-values."""

    def __init__(
        self,
        converters: Iterable[TypeConverter] = (),
        *,
        json: bool = False,
        extractors: Mapping[Hashable, Any] | None = None,
        type_tags: Mapping[Hashable, int] | None = None,
        **properties: Any,
    ) -> None:
        unknown = set(properties) - set(_DEFAULT_PROPERTIES)
        if unknown:
            raise TypeError(f"unknown properties: {', '.join(sorted(unknown))}")
        self.json = json
        self.properties = {**_DEFAULT_PROPERTIES, **properties}
        self._extractors = ThreadSafeStore(extractors)
        self._type_tags = dict(type_tags or {})
        self._converters = ConverterStore()
        self._ser_cache = ThreadSafeStore()
        self._deser_cache = ThreadSafeStore()
        for converter in converters:
            converter.helper = self
            self._converters.insert_sorted(converter)

    def get_property(self, name: str) -> Any:
        try:
            return self.properties[name]
        except KeyError:
            raise KeyError(f"unknown property {name!r}") from None

    def extractor(self, type_: Any) -> Any:
        return self._extractors.get(type_)

    def type_tag(self, type_: Any) -> int:
        return self._type_tags.get(type_, CborTag.NO_TAG)

    def _find_converter(self, type_: Any, cache: ThreadSafeStore) -> TypeConverter | None:
        converter = cache.get(type_)
        if converter is None:
            converter = next((c for c in self._converters if c.can_convert(type_)), None)
            if converter is not None:
                cache.add(type_, converter)
        return converter

    def serialize_subtype(self, type_: Any, value: Any, trace: str) -> Any:
        try:
            if type_ is None:
                type_ = type(value)
            converter = self._find_converter(type_, self._ser_cache)
            if converter is None:
                if _is_plain(value):
                    return value
                raise SerializationError(f"No converter found for type {_type_name(type_)}")
            return converter.serialize(type_, value)
        except SerializerError as exc:
            exc.trace.insert(0, trace)
            raise

    def deserialize_subtype(self, type_: Any, value: Any, parent: Any, trace: str) -> Any:
        try:
            if type_ is None:
                tag = tag_of(value)
                data_type = cbor_type_of(untag(value))
                type_ = next(
                    (g for g in (c.guess_type(tag, data_type) for c in self._converters) if g is not None),
                    None,
                )
                if type_ is None:
                    return untag(value)
            converter = self._find_converter(type_, self._deser_cache)
            if converter is None:
                content = untag(value)
                if isinstance(type_, type) and isinstance(content, type_):
                    return content
                raise DeserializationError(f"No converter found for type {_type_name(type_)}")
            if self.json:
                return converter.deserialize_json(type_, value, parent)
            return converter.deserialize_cbor(type_, value, parent)
        except SerializerError as exc:
            exc.trace.insert(0, trace)
            raise