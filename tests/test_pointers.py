from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from cborconv.core import (
    CborType,
    DeserializationError,
    SerializationError,
    SerializationHelper,
    TypeConverter,
)
from cborconv.pointers import SmartPointerConverter


@dataclass(frozen=True)
class Box:
    target: Any


class QBox(Box):
    pass


class NodeBox(Box):
    pass


class Node:
    def __init__(self, parent):
        self.parent = parent


class NodeConverter(TypeConverter):
    def can_convert(self, type_):
        return type_ is Node

    def allowed_cbor_types(self, type_, tag):
        return [CborType.MAP]

    def serialize(self, type_, value):
        return {"node": True}

    def deserialize_cbor(self, type_, value, parent):
        return Node(parent)


class BoxExtractor:
    def __init__(self, base, inner, holder):
        self.base = base
        self.inner = inner
        self.holder = holder

    def base_type(self):
        return self.base

    def subtypes(self):
        return [self.inner]

    def extract(self, value, index=0):
        return value.target if value is not None else None

    def emplace(self, target, value, index=0):
        return self.holder(value)


class PairLikeExtractor(BoxExtractor):
    pass


def make():
    converter = SmartPointerConverter()
    SerializationHelper(
        [converter, NodeConverter()],
        extractors={
            Box: BoxExtractor("pointer", int, Box),
            QBox: BoxExtractor("qpointer", Node, QBox),
            NodeBox: BoxExtractor("pointer", Node, NodeBox),
            tuple: PairLikeExtractor("pair", int, tuple),
        },
    )
    return converter


def test_can_convert_only_pointer_extractors():
    converter = make()
    assert converter.can_convert(Box)
    assert converter.can_convert(QBox)
    assert not converter.can_convert(tuple)
    assert not converter.can_convert(int)


def test_serialize_writes_pointee():
    converter = make()
    assert converter.serialize(Box, Box(5)) == 5
    assert converter.serialize(Box, Box(None)) is None
    assert converter.serialize(NodeBox, NodeBox(Node(None))) == {"node": True}


def test_round_trip():
    converter = make()
    data = converter.serialize(Box, Box(42))
    assert converter.deserialize_cbor(Box, data, None) == Box(42)


def test_qpointer_passes_parent_and_pointer_does_not():
    converter = make()
    owner = object()
    held = converter.deserialize_cbor(QBox, {"node": True}, owner)
    assert isinstance(held, QBox)
    assert held.target.parent is owner
    plain = converter.deserialize_cbor(NodeBox, {"node": True}, owner)
    assert plain.target.parent is None


def test_missing_extractor_raises():
    converter = make()
    with pytest.raises(SerializationError, match="Failed to get extractor"):
        converter.serialize(int, 5)
    with pytest.raises(DeserializationError, match="Failed to get extractor"):
        converter.deserialize_cbor(tuple, 5, None)


def test_allowed_types_cover_all_but_invalid():
    types = make().allowed_cbor_types(Box, 0)
    assert CborType.INVALID not in types
    assert set(types) == set(CborType) - {CborType.INVALID}