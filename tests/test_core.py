import pytest

from cborconv.core import (
    UNDEFINED,
    ByteArrayFormat,
    CborTag,
    CborType,
    ConverterStore,
    DeserializationError,
    Priority,
    SerializationError,
    SerializationHelper,
    Tagged,
    ThreadSafeStore,
    TypeConverter,
    cbor_type_of,
    tag_of,
    untag,
)


class Celsius(float):
    pass


class CelsiusConverter(TypeConverter):
    def __init__(self, priority=Priority.STANDARD, name="c"):
        super().__init__(priority)
        self.name = name

    def can_convert(self, type_):
        return type_ is Celsius

    def allowed_cbor_types(self, type_, tag):
        return [CborType.DOUBLE]

    def guess_type(self, tag, data_type):
        return Celsius if tag == CborTag.DECIMAL else None

    def serialize(self, type_, value):
        if value < -273.15:
            raise SerializationError("below absolute zero")
        return Tagged(CborTag.DECIMAL, float(value))

    def deserialize_cbor(self, type_, value, parent):
        return Celsius(untag(value))


def test_tag_helpers():
    t = Tagged(CborTag.BASE64, b"x")
    assert untag(t) == b"x"
    assert tag_of(t) == CborTag.BASE64
    assert untag(5) == 5
    assert tag_of(5) == CborTag.NO_TAG


@pytest.mark.parametrize(
    "value, expected",
    [
        (True, CborType.TRUE),
        (False, CborType.FALSE),
        (None, CborType.NULL),
        (UNDEFINED, CborType.UNDEFINED),
        (3, CborType.INTEGER),
        (1.5, CborType.DOUBLE),
        (b"a", CborType.BYTE_ARRAY),
        ("a", CborType.STRING),
        ([1], CborType.ARRAY),
        ({"a": 1}, CborType.MAP),
        (Tagged(1, 2), CborType.TAG),
        (object(), CborType.INVALID),
    ],
)
def test_cbor_type_of(value, expected):
    assert cbor_type_of(value) is expected


def test_thread_safe_store():
    store = ThreadSafeStore({1: "a"})
    assert store.get(1) == "a"
    assert store.get(2) is None
    store.add(2, "b")
    assert store.get(2) == "b"
    store.clear()
    assert store.get(1) is None


def test_converter_store_orders_by_priority():
    low = CelsiusConverter(Priority.LOW, "low")
    std1 = CelsiusConverter(Priority.STANDARD, "std1")
    high = CelsiusConverter(Priority.HIGH, "high")
    store = ConverterStore([low, std1])
    store.insert_sorted(high)
    std2 = CelsiusConverter(Priority.STANDARD, "std2")
    store.insert_sorted(std2)
    assert [c.name for c in store] == ["high", "std1", "std2", "low"]
    assert len(store) == 4


def test_helper_properties():
    helper = SerializationHelper(byte_array_format=ByteArrayFormat.BASE16)
    assert helper.get_property("byte_array_format") is ByteArrayFormat.BASE16
    assert helper.get_property("validate_base64") is True
    with pytest.raises(KeyError):
        helper.get_property("nope")
    with pytest.raises(TypeError):
        SerializationHelper(nope=1)


def test_type_tag_and_extractor():
    helper = SerializationHelper(type_tags={Celsius: CborTag.DECIMAL}, extractors={int: "ex"})
    assert helper.type_tag(Celsius) == CborTag.DECIMAL
    assert helper.type_tag(str) == CborTag.NO_TAG
    assert helper.extractor(int) == "ex"
    assert helper.extractor(str) is None


def test_round_trip_through_converter():
    conv = CelsiusConverter()
    helper = SerializationHelper([conv])
    assert conv.helper is helper
    data = helper.serialize_subtype(Celsius, Celsius(21.5), "temp")
    assert data == Tagged(CborTag.DECIMAL, 21.5)
    back = helper.deserialize_subtype(Celsius, data, None, "temp")
    assert isinstance(back, Celsius) and back == 21.5


def test_guessing_type():
    helper = SerializationHelper([CelsiusConverter()])
    back = helper.deserialize_subtype(None, Tagged(CborTag.DECIMAL, 3.0), None, "x")
    assert isinstance(back, Celsius)
    assert helper.deserialize_subtype(None, Tagged(CborTag.URL, "u"), None, "x") == "u"


def test_plain_fallback_and_errors():
    helper = SerializationHelper()
    assert helper.serialize_subtype(None, [1, "a"], "x") == [1, "a"]
    assert helper.deserialize_subtype(str, "a", None, "x") == "a"
    with pytest.raises(DeserializationError):
        helper.deserialize_subtype(str, 4, None, "x")
    with pytest.raises(SerializationError):
        helper.serialize_subtype(None, object(), "x")


def test_trace_is_recorded():
    helper = SerializationHelper([CelsiusConverter()])
    with pytest.raises(SerializationError) as info:
        helper.serialize_subtype(Celsius, Celsius(-500), "temp")
    assert info.value.trace == ["temp"]
    assert "temp" in str(info.value)


def test_default_json_delegates_to_cbor():
    conv = CelsiusConverter()
    helper = SerializationHelper([conv], json=True)
    assert helper.deserialize_subtype(Celsius, 4.0, None, "t") == Celsius(4.0)
    assert conv.allowed_cbor_tags(Celsius) == []