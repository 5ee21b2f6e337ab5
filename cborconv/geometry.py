"""Geometry value types and their converters."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .core import (
    CborTag,
    CborType,
    DeserializationError,
    Priority,
    SerializationError,
    Tagged,
    TypeConverter,
    cbor_type_of,
    untag,
)


@dataclass(frozen=True)
class Size:
    """An integer width and height."""

    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class SizeF:
    """A floating point width and height."""

    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class Point:
    """An integer point."""

    x: int = 0
    y: int = 0


@dataclass(frozen=True)
class PointF:
    """A floating point point."""

    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Line:
    """A line between two integer points."""

    p1: Point = field(default_factory=Point)
    p2: Point = field(default_factory=Point)


@dataclass(frozen=True)
class LineF:
    """A line between two floating point points."""

    p1: PointF = field(default_factory=PointF)
    p2: PointF = field(default_factory=PointF)


@dataclass(frozen=True)
class Rect:
    """An integer rectangle; the bottom-right corner is inclusive."""

    top_left: Point = field(default_factory=Point)
    size: Size = field(default_factory=Size)

    def bottom_right(self) -> Point:
        return Point(
            self.top_left.x + self.size.width - 1,
            self.top_left.y + self.size.height - 1,
        )

    @classmethod
    def from_corners(cls, top_left: Point, bottom_right: Point) -> "Rect":
        return cls(
            top_left,
            Size(bottom_right.x - top_left.x + 1, bottom_right.y - top_left.y + 1),
        )


@dataclass(frozen=True)
class RectF:
    """A floating point rectangle."""

    top_left: PointF = field(default_factory=PointF)
    size: SizeF = field(default_factory=SizeF)

    def bottom_right(self) -> PointF:
        return PointF(
            self.top_left.x + self.size.width,
            self.top_left.y + self.size.height,
        )

    @classmethod
    def from_corners(cls, top_left: PointF, bottom_right: PointF) -> "RectF":
        return cls(
            top_left,
            SizeF(bottom_right.x - top_left.x, bottom_right.y - top_left.y),
        )


_GEOM_TYPES = (Size, SizeF, Point, PointF, Line, LineF, Rect, RectF)
_FLOAT_TYPES = frozenset({SizeF, PointF, LineF, RectF})
_SIZES = frozenset({Size, SizeF})
_POINTS = frozenset({Point, PointF})
_LINES = frozenset({Line, LineF})
_RECTS = frozenset({Rect, RectF})
_POINT_OF = {Line: Point, LineF: PointF, Rect: Point, RectF: PointF}
_SIZE_OF = {Rect: Size, RectF: SizeF}
_TAG_OF = {
    Size: CborTag.GEOM_SIZE,
    SizeF: CborTag.GEOM_SIZE,
    Point: CborTag.GEOM_POINT,
    PointF: CborTag.GEOM_POINT,
    Line: CborTag.GEOM_LINE,
    LineF: CborTag.GEOM_LINE,
    Rect: CborTag.GEOM_RECT,
    RectF: CborTag.GEOM_RECT,
}
_GUESSES = {
    CborTag.GEOM_SIZE: SizeF,
    CborTag.GEOM_POINT: PointF,
    CborTag.GEOM_LINE: LineF,
    CborTag.GEOM_RECT: RectF,
}


def _extract(is_float: bool, value: Any) -> Any:
    """Read an integer, or a float that may also be given as an integer."""
    is_int = isinstance(value, int) and not isinstance(value, bool)
    if is_float:
        if not is_int and not isinstance(value, float):
            raise DeserializationError(
                f"Expected double, but got type {int(cbor_type_of(value))}"
            )
        return float(value)
    if not is_int:
        raise DeserializationError(
            f"Expected integer, but got type {int(cbor_type_of(value))}"
        )
    return value


def _number(is_float: bool, value: Any) -> Any:
    return float(value) if is_float else int(value)


class GeomConverter(TypeConverter):
    """Sizes, points, lines and rectangles as tagged two-element arrays."""

    def can_convert(self, type_: Any) -> bool:
        return type_ in _GEOM_TYPES

    def allowed_cbor_tags(self, type_: Any) -> list[int]:
        tag = _TAG_OF.get(type_)
        return [tag] if tag is not None else []

    def allowed_cbor_types(self, type_: Any, tag: int) -> list[CborType]:
        return [CborType.ARRAY]

    def guess_type(self, tag: int, data_type: CborType) -> Any:
        if data_type != CborType.ARRAY:
            return None
        return _GUESSES.get(tag)

    def serialize(self, type_: Any, value: Any) -> Any:
        if type_ not in _TAG_OF:
            raise SerializationError("Invalid type id")
        is_float = type_ in _FLOAT_TYPES
        tag = _TAG_OF[type_]
        if type_ in _SIZES:
            return Tagged(tag, [_number(is_float, value.width), _number(is_float, value.height)])
        if type_ in _POINTS:
            return Tagged(tag, [_number(is_float, value.x), _number(is_float, value.y)])
        point_type = _POINT_OF[type_]
        if type_ in _LINES:
            return Tagged(tag, [
                self.helper.serialize_subtype(point_type, value.p1, "p1"),
                self.helper.serialize_subtype(point_type, value.p2, "p2"),
            ])
        return Tagged(tag, [
            self.helper.serialize_subtype(point_type, value.top_left, "topLeft"),
            self.helper.serialize_subtype(_SIZE_OF[type_], value.size, "size"),
        ])

    def deserialize_cbor(self, type_: Any, value: Any, parent: Any) -> Any:
        content = untag(value)
        array = list(content) if isinstance(content, (list, tuple)) else []
        if type_ not in _TAG_OF:
            raise DeserializationError("Invalid type id")
        is_float = type_ in _FLOAT_TYPES
        if type_ in _SIZES:
            if len(array) != 2:
                raise DeserializationError("A size requires an array with exactly two numbers")
            return type_(_extract(is_float, array[0]), _extract(is_float, array[1]))
        if type_ in _POINTS:
            if len(array) != 2:
                raise DeserializationError("A point requires an array with exactly two numbers")
            return type_(_extract(is_float, array[0]), _extract(is_float, array[1]))
        point_type = _POINT_OF[type_]
        if type_ in _LINES:
            if len(array) != 2:
                raise DeserializationError("A line requires an array with exactly two points")
            return type_(
                self.helper.deserialize_subtype(point_type, array[0], None, "p1"),
                self.helper.deserialize_subtype(point_type, array[1], None, "p2"),
            )
        if len(array) != 2:
            raise DeserializationError("A line requires an array with exactly two points")
        return type_(
            self.helper.deserialize_subtype(point_type, array[0], None, "topLeft"),
            self.helper.deserialize_subtype(_SIZE_OF[type_], array[1], None, "size"),
        )


class LegacyGeomConverter(TypeConverter):
    """Reads the older JSON object layout of geometry values; never writes."""

    def __init__(self) -> None:
        super().__init__(Priority.VERY_LOW)

    def can_convert(self, type_: Any) -> bool:
        return type_ in _GEOM_TYPES

    def allowed_cbor_types(self, type_: Any, tag: int) -> list[CborType]:
        return [CborType.MAP]

    def serialize(self, type_: Any, value: Any) -> Any:
        raise SerializationError("The LegacyGeomConverter cannot serialize data")

    def deserialize_cbor(self, type_: Any, value: Any, parent: Any) -> Any:
        raise DeserializationError("The LegacyGeomConverter cannot deserialize CBOR data")

    def deserialize_json(self, type_: Any, value: Any, parent: Any) -> Any:
        content = untag(value)
        mapping = content if isinstance(content, dict) else {}
        if type_ not in _TAG_OF:
            raise DeserializationError("Invalid type id")
        is_float = type_ in _FLOAT_TYPES
        if type_ in _SIZES:
            self._require(mapping, "width", "height")
            return type_(
                _extract(is_float, mapping["width"]),
                _extract(is_float, mapping["height"]),
            )
        if type_ in _POINTS:
            self._require(mapping, "x", "y")
            return type_(_extract(is_float, mapping["x"]), _extract(is_float, mapping["y"]))
        point_type = _POINT_OF[type_]
        if type_ in _LINES:
            self._require(mapping, "p1", "p2")
            return type_(
                self.helper.deserialize_subtype(point_type, mapping["p1"], None, "p1"),
                self.helper.deserialize_subtype(point_type, mapping["p2"], None, "p2"),
            )
        self._require(mapping, "topLeft", "bottomRight")
        return type_.from_corners(
            self.helper.deserialize_subtype(point_type, mapping["topLeft"], None, "topLeft"),
            self.helper.deserialize_subtype(point_type, mapping["bottomRight"], None, "bottomRight"),
        )

    @staticmethod
    def _require(mapping: dict, first: str, second: str) -> None:
        if len(mapping) != 2 or first not in mapping or second not in mapping:
            raise DeserializationError(
                f"JSON object has no {first} or {second} properties"
                " or does have extra properties"
            )