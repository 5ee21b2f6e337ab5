import pytest
from bitarray import bitarray

from cborconv.binary import BitArrayConverter, BytearrayConverter
from cborconv.core import (
    ByteArrayFormat,
    CborTag,
    CborType,
    DeserializationError,
    Priority,
    SerializationHelper,
    Tagged,
)


def _bytes_conv(**props):
    conv = BytearrayConverter()
    SerializationHelper([conv], json=True, **props)
    return conv


def test_bytearray_priority():
    assert BytearrayConverter().priority == Priority.STANDARD


@pytest.mark.parametrize(
    "tag",
    [CborTag.EXPECTED_BASE64, CborTag.EXPECTED_BASE64URL, CborTag.EXPECTED_BASE16],
)
def test_bytearray_meta(tag):
    conv = BytearrayConverter()
    assert conv.can_convert(bytes)
    assert tag in conv.allowed_cbor_tags(bytes)
    assert conv.allowed_cbor_types(bytes, tag) == [CborType.BYTE_ARRAY]
    assert conv.guess_type(tag, CborType.BYTE_ARRAY) is bytes


def test_bytearray_meta_negative():
    conv = BytearrayConverter()
    assert not conv.can_convert(str)
    assert CborTag.BASE64 not in conv.allowed_cbor_tags(bytes)
    assert CborTag.NO_TAG in conv.allowed_cbor_tags(bytes)
    assert conv.guess_type(CborTag.NO_TAG, CborType.BYTE_ARRAY) is None


def test_bytearray_serialize():
    conv = BytearrayConverter()
    assert conv.serialize(bytes, b"Hello World") == b"Hello World"
    assert conv.deserialize_cbor(bytes, b"Hello World", None) == b"Hello World"
    tagged = Tagged(CborTag.EXPECTED_BASE64, b"Hello World")
    assert conv.deserialize_cbor(bytes, tagged, None) == b"Hello World"


@pytest.mark.parametrize(
    "fmt, text",
    [
        (ByteArrayFormat.BASE64, "SGVsbG8gV29ybGQ="),
        (ByteArrayFormat.BASE64URL, "SGVsbG8gV29ybGQ"),
        (ByteArrayFormat.BASE16, "48656c6c6f20576f726c64"),
    ],
)
def test_bytearray_json_formats(fmt, text):
    conv = _bytes_conv(byte_array_format=fmt)
    assert conv.deserialize_json(bytes, text, None) == b"Hello World"


def test_unvalidated_base64():
    conv = _bytes_conv(validate_base64=False, byte_array_format=ByteArrayFormat.BASE64)
    assert conv.deserialize_json(bytes, "SGVsbG8#'gV29ybGQ=42", None) == b"Hello World8"


def test_unvalidated_base64url():
    conv = _bytes_conv(validate_base64=False, byte_array_format=ByteArrayFormat.BASE64URL)
    assert conv.deserialize_json(bytes, "SGVsbG8#'gV29ybGQ", None) == b"Hello World"


@pytest.mark.parametrize(
    "fmt, text",
    [
        (ByteArrayFormat.BASE64, "SGVsbG8#'gV29ybGQ=42"),
        (ByteArrayFormat.BASE64, "SGVsbG8gV29ybGQ2="),
        (ByteArrayFormat.BASE64, "SGVsbG%gV29ybGQ="),
        (ByteArrayFormat.BASE64URL, "SGVsbG8#'gV29ybGQ"),
        (ByteArrayFormat.BASE16, "48656ggc6c6f2057,nmn6f726c64"),
        (ByteArrayFormat.BASE16, "48656c6c6f20576f726c647"),
    ],
)
def test_validated_rejects(fmt, text):
    conv = _bytes_conv(validate_base64=True, byte_array_format=fmt)
    with pytest.raises(DeserializationError):
        conv.deserialize_json(bytes, text, None)


def test_bitarray_meta():
    conv = BitArrayConverter()
    assert conv.can_convert(bitarray)
    assert not conv.can_convert(bytes)
    assert conv.allowed_cbor_tags(bitarray) == [CborTag.BIT_ARRAY]
    assert conv.guess_type(CborTag.BIT_ARRAY, CborType.BYTE_ARRAY) is bitarray
    assert conv.guess_type(CborTag.BIT_ARRAY, CborType.STRING) is None


def test_bitarray_empty():
    conv = BitArrayConverter()
    assert conv.serialize(bitarray, bitarray()) == Tagged(CborTag.BIT_ARRAY, b"")
    assert len(conv.deserialize_cbor(bitarray, Tagged(CborTag.BIT_ARRAY, b""), None)) == 0


def test_bitarray_layout():
    conv = BitArrayConverter()
    data = conv.serialize(bitarray, bitarray("101"))
    assert data == Tagged(CborTag.BIT_ARRAY, bytes([3, 0b101]))


@pytest.mark.parametrize("bits", ["1", "10110011", "101100111", "0" * 16, "1101" * 5])
def test_bitarray_round_trip(bits):
    conv = BitArrayConverter()
    value = bitarray(bits)
    back = conv.deserialize_cbor(bitarray, conv.serialize(bitarray, value), None)
    assert back.to01() == bits


def test_bitarray_json_round_trip():
    import base64

    conv = BitArrayConverter()
    value = bitarray("1100101")
    raw = untagged = conv.serialize(bitarray, value).value
    text = base64.urlsafe_b64encode(raw).decode().rstrip("=")
    assert untagged == raw
    assert conv.deserialize_json(bitarray, text, None).to01() == "1100101"