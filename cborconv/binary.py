"""Converters for byte strings and bit arrays."""
from __future__ import annotations

import re
from typing import Any

from bitarray import bitarray

from .core import (
    ByteArrayFormat,
    CborTag,
    CborType,
    DeserializationError,
    Tagged,
    TypeConverter,
    untag,
)

_B64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
_B64_STD = {ch: i for i, ch in enumerate(_B64 + "+/")}
_B64_URL = {ch: i for i, ch in enumerate(_B64 + "-_")}

_RE_BASE64 = re.compile(r"[a-zA-Z0-9+/]*(={0,2})")
_RE_BASE64URL = re.compile(r"[a-zA-Z0-9\-_]*")
_RE_BASE16 = re.compile(r"[a-fA-F0-9]*")


def _lenient_base64(text: str, url: bool) -> bytes:
    """Decode base64, skipping every character outside the alphabet."""
    table = _B64_URL if url else _B64_STD
    out = bytearray()
    buf = 0
    nbits = 0
    for ch in text:
        digit = table.get(ch)
        if digit is None:
            continue
        buf = (buf << 6) | digit
        nbits += 6
        if nbits >= 8:
            nbits -= 8
            out.append(buf >> nbits)
            buf &= (1 << nbits) - 1
    return bytes(out)


def _lenient_hex(text: str) -> bytes:
    """Decode hex, skipping non-hex characters; an odd digit count pads the front."""
    digits = "".join(ch for ch in text if ch in "0123456789abcdefABCDEF")
    if len(digits) % 2:
        digits = "0" + digits
    return bytes.fromhex(digits)


class BitArrayConverter(TypeConverter):
    """Bit arrays as a byte string led by the count of bits in the last byte."""

    def can_convert(self, type_: Any) -> bool:
        return type_ is bitarray

    def allowed_cbor_tags(self, type_: Any) -> list[int]:
        return [CborTag.BIT_ARRAY]

    def allowed_cbor_types(self, type_: Any, tag: int) -> list[CborType]:
        return [CborType.BYTE_ARRAY]

    def guess_type(self, tag: int, data_type: CborType) -> Any:
        if tag == CborTag.BIT_ARRAY and data_type == CborType.BYTE_ARRAY:
            return bitarray
        return None

    def serialize(self, type_: Any, value: Any) -> Any:
        bits = bitarray(value, endian="little")
        if not bits:
            return Tagged(CborTag.BIT_ARRAY, b"")
        return Tagged(CborTag.BIT_ARRAY, bytes([len(bits) % 8]) + bits.tobytes())

    def deserialize_cbor(self, type_: Any, value: Any, parent: Any) -> Any:
        data = untag(value)
        data = bytes(data) if isinstance(data, (bytes, bytearray)) else b""
        bits = bitarray(endian="little")
        if not data:
            return bits
        byte_len = len(data) - 1
        rest = data[0]
        count = byte_len * 8 if rest == 0 else (byte_len - 1) * 8 + rest
        bits.frombytes(data[1:])
        return bits[:max(count, 0)]

    def deserialize_json(self, type_: Any, value: Any, parent: Any) -> Any:
        text = untag(value)
        text = text if isinstance(text, str) else ""
        return self.deserialize_cbor(type_, _lenient_base64(text, url=True), parent)


class BytearrayConverter(TypeConverter):
    """Byte strings; in JSON as base64, base64url or base16 text."""

    def can_convert(self, type_: Any) -> bool:
        return type_ is bytes

    def allowed_cbor_tags(self, type_: Any) -> list[int]:
        return [
            CborTag.NO_TAG,
            CborTag.EXPECTED_BASE64,
            CborTag.EXPECTED_BASE64URL,
            CborTag.EXPECTED_BASE16,
        ]

    def allowed_cbor_types(self, type_: Any, tag: int) -> list[CborType]:
        return [CborType.BYTE_ARRAY]

    def guess_type(self, tag: int, data_type: CborType) -> Any:
        if tag in (CborTag.EXPECTED_BASE64, CborTag.EXPECTED_BASE64URL, CborTag.EXPECTED_BASE16):
            return bytes
        return None

    def serialize(self, type_: Any, value: Any) -> Any:
        return bytes(value)

    def deserialize_cbor(self, type_: Any, value: Any, parent: Any) -> Any:
        data = untag(value)
        return bytes(data) if isinstance(data, (bytes, bytearray)) else b""

    def deserialize_json(self, type_: Any, value: Any, parent: Any) -> Any:
        mode = ByteArrayFormat(self.helper.get_property("byte_array_format"))
        text = untag(value)
        text = text if isinstance(text, str) else ""
        if self.helper.get_property("validate_base64"):
            self._validate(mode, text)
        if mode is ByteArrayFormat.BASE64:
            return _lenient_base64(text, url=False)
        if mode is ByteArrayFormat.BASE64URL:
            return _lenient_base64(text, url=True)
        return _lenient_hex(text)

    @staticmethod
    def _validate(mode: ByteArrayFormat, text: str) -> None:
        if mode is ByteArrayFormat.BASE64:
            if len(text) % 4:
                raise DeserializationError("String has invalid length for base64 encoding")
            if not _RE_BASE64.fullmatch(text):
                raise DeserializationError("String contains unallowed symbols for base64 encoding")
        elif mode is ByteArrayFormat.BASE64URL:
            if not _RE_BASE64URL.fullmatch(text):
                raise DeserializationError("String contains unallowed symbols for base64url encoding")
        else:
            if len(text) % 2:
                raise DeserializationError("String has invalid length for base16 encoding")
            if not _RE_BASE16.fullmatch(text):
                raise DeserializationError("String contains unallowed symbols for base16 encoding")