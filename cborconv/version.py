"""Version numbers and their converter."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable

from .core import (
    CborTag,
    CborType,
    DeserializationError,
    Tagged,
    TypeConverter,
    untag,
)

log = logging.getLogger("cborconv.converter.versionnumber")

_PREFIX_RE = re.compile(r"[0-9]+(?:\.[0-9]+)*")


def _parse_prefix(text: str) -> tuple[tuple[int, ...], int]:
    """Parse the leading dotted numbers; return the segments and where the rest begins."""
    match = _PREFIX_RE.match(text)
    if match is None:
        return (), 0
    return tuple(int(part) for part in match.group().split(".")), match.end()


@dataclass(frozen=True)
class VersionNumber:
    """A version made of integer segments."""

    segments: tuple[int, ...] = ()

    def __init__(self, segments: Iterable[int] = ()) -> None:
        object.__setattr__(self, "segments", tuple(segments))

    @classmethod
    def from_string(cls, text: str) -> "VersionNumber":
        """Parse the leading dotted numbers of the text; any suffix is dropped."""
        return cls(_parse_prefix(text)[0])

    @property
    def is_null(self) -> bool:
        return not self.segments

    def __str__(self) -> str:
        return ".".join(str(segment) for segment in self.segments)


class VersionNumberConverter(TypeConverter):
    """Version numbers as an integer array or a dotted string."""

    def can_convert(self, type_: Any) -> bool:
        return type_ is VersionNumber

    def allowed_cbor_tags(self, type_: Any) -> list[int]:
        return [CborTag.VERSION_NUMBER]

    def allowed_cbor_types(self, type_: Any, tag: int) -> list[CborType]:
        return [CborType.ARRAY, CborType.STRING]

    def guess_type(self, tag: int, data_type: CborType) -> Any:
        if tag == CborTag.VERSION_NUMBER and data_type in self.allowed_cbor_types(None, tag):
            return VersionNumber
        return None

    def serialize(self, type_: Any, value: Any) -> Any:
        if self.helper.get_property("version_as_string"):
            return Tagged(CborTag.VERSION_NUMBER, str(value))
        return Tagged(CborTag.VERSION_NUMBER, list(value.segments))

    def deserialize_cbor(self, type_: Any, value: Any, parent: Any) -> Any:
        content = untag(value)
        if isinstance(content, (list, tuple)):
            for position, segment in enumerate(content):
                if isinstance(segment, bool) or not isinstance(segment, int):
                    raise DeserializationError(
                        f"Segment at position {position} is not an integer"
                        " - a version number must be integers only!"
                    )
            return VersionNumber(content)
        if isinstance(content, str):
            if not content:
                return VersionNumber()
            segments, suffix_index = _parse_prefix(content)
            if not segments:
                raise DeserializationError("Invalid version number, no segments found")
            if suffix_index < len(content):
                log.warning("Parsed version number with suffix - suffixes are discarded!")
            return VersionNumber(segments)
        raise DeserializationError("Invalid type id")