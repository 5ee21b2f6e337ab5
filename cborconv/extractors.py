"""Extractors giving uniform access to the parts of generic values."""
from __future__ import annotations

import weakref
from abc import ABC, abstractmethod
from typing import Any


class TypeExtractor(ABC):
    """Reads and writes the parts of a composite value."""

    @abstractmethod
    def base_type(self) -> str:
        """The kind of composite, e.g. ``"pair"``."""

    @abstractmethod
    def subtypes(self) -> list[Any]:
        """The types of the parts."""

    @abstractmethod
    def extract(self, value: Any, index: int = 0) -> Any:
        """Return the part at ``index``."""

    @abstractmethod
    def emplace(self, target: Any, value: Any, index: int = 0) -> Any:
        """Return ``target`` with the part at ``index`` set to ``value``."""


class SmartPointerExtractor(TypeExtractor):
    """A reference to an object; weak references act as guarded pointers."""

    def __init__(self, pointee: Any, weak: bool = False) -> None:
        self.pointee = pointee
        self.weak = weak

    def base_type(self) -> str:
        return "qpointer" if self.weak else "pointer"

    def subtypes(self) -> list[Any]:
        return [self.pointee]

    def extract(self, value: Any, index: int = 0) -> Any:
        if isinstance(value, weakref.ref):
            return value()
        return value

    def emplace(self, target: Any, value: Any, index: int = 0) -> Any:
        if self.weak and value is not None:
            return weakref.ref(value)
        return value


class PairExtractor(TypeExtractor):
    """A two-element tuple."""

    def __init__(self, first: Any, second: Any) -> None:
        self.first = first
        self.second = second

    def base_type(self) -> str:
        return "pair"

    def subtypes(self) -> list[Any]:
        return [self.first, self.second]

    def extract(self, value: Any, index: int = 0) -> Any:
        return value[index] if index in (0, 1) else None

    def emplace(self, target: Any, value: Any, index: int = 0) -> Any:
        pair = list(target) if target is not None else [None, None]
        if index in (0, 1):
            pair[index] = value
        return tuple(pair)


class OptionalExtractor(TypeExtractor):
    """A value that may be None."""

    def __init__(self, value_type: Any) -> None:
        self.value_type = value_type

    def base_type(self) -> str:
        return "optional"

    def subtypes(self) -> list[Any]:
        return [self.value_type]

    def extract(self, value: Any, index: int = 0) -> Any:
        return value

    def emplace(self, target: Any, value: Any, index: int = 0) -> Any:
        return value


class TupleExtractor(TypeExtractor):
    """A fixed-size tuple of typed elements."""

    def __init__(self, *types: Any) -> None:
        self.types = list(types)

    def base_type(self) -> str:
        return "tuple"

    def subtypes(self) -> list[Any]:
        return list(self.types)

    def extract(self, value: Any, index: int = 0) -> Any:
        return value[index] if 0 <= index < len(self.types) else None

    def emplace(self, target: Any, value: Any, index: int = 0) -> Any:
        items = list(target) if target is not None else [None] * len(self.types)
        if 0 <= index < len(self.types):
            items[index] = value
        return tuple(items)


class VariantExtractor(TypeExtractor):
    """A value that is one of several types."""

    def __init__(self, *types: type) -> None:
        self.types = list(types)

    def base_type(self) -> str:
        return "variant"

    def subtypes(self) -> list[Any]:
        return list(self.types)

    def extract(self, value: Any, index: int = 0) -> Any:
        return value

    def emplace(self, target: Any, value: Any, index: int = 0) -> Any:
        if any(type(value) is t for t in self.types):
            return value
        return self.types[0]() if self.types else None