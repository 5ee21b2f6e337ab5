import pytest

from cborconv.extractors import (
    OptionalExtractor,
    PairExtractor,
    SmartPointerExtractor,
    TupleExtractor,
    VariantExtractor,
)


class Node:
    pass


def test_pointer_extractor():
    ex = SmartPointerExtractor(Node)
    node = Node()
    assert ex.base_type() == "pointer"
    assert ex.subtypes() == [Node]
    assert ex.extract(ex.emplace(None, node)) is node


def test_weak_pointer_extractor():
    ex = SmartPointerExtractor(Node, weak=True)
    node = Node()
    ref = ex.emplace(None, node)
    assert ex.base_type() == "qpointer"
    assert ex.extract(ref) is node
    assert ex.emplace(None, None) is None


def test_pair_extractor():
    ex = PairExtractor(int, str)
    pair = ex.emplace(None, 4, 0)
    pair = ex.emplace(pair, "x", 1)
    assert pair == (4, "x")
    assert ex.extract(pair, 0) == 4
    assert ex.extract(pair, 1) == "x"
    assert ex.extract(pair, 2) is None
    assert ex.base_type() == "pair"


def test_optional_extractor():
    ex = OptionalExtractor(int)
    assert ex.extract(None) is None
    assert ex.emplace(None, 3) == 3
    assert ex.subtypes() == [int]
    assert ex.base_type() == "optional"


def test_tuple_extractor():
    ex = TupleExtractor(int, str, float)
    value = None
    for index, item in enumerate([1, "a", 2.5]):
        value = ex.emplace(value, item, index)
    assert value == (1, "a", 2.5)
    assert [ex.extract(value, i) for i in range(3)] == [1, "a", 2.5]
    assert ex.extract(value, 5) is None
    assert ex.subtypes() == [int, str, float]


@pytest.mark.parametrize("value", [7, "seven"])
def test_variant_extractor_keeps_member_types(value):
    ex = VariantExtractor(int, str)
    assert ex.emplace(None, value) == value
    assert ex.extract(value) == value


def test_variant_extractor_defaults_foreign_values():
    ex = VariantExtractor(int, str)
    assert ex.emplace(None, 1.5) == int()
    assert ex.base_type() == "variant"