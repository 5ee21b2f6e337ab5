"""Converter for date-times, dates and times."""
from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Any

from .core import (
    CborTag,
    CborType,
    SerializationError,
    Tagged,
    TypeConverter,
    tag_of,
    untag,
)


def _format_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.astimezone()
    text = value.isoformat(timespec="milliseconds")
    if value.utcoffset() is not None and value.utcoffset().total_seconds() == 0:
        text = text[: -len("+00:00")] + "Z"
    return text


def _parse_datetime_text(text: str) -> datetime | None:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _to_datetime(value: Any) -> datetime | None:
    """Read a tagged date-time, or None when it is not one."""
    tag = tag_of(value)
    content = untag(value)
    if tag == CborTag.DATE_TIME_STRING and isinstance(content, str):
        return _parse_datetime_text(content)
    if (
        tag == CborTag.UNIX_TIME_T
        and isinstance(content, (int, float))
        and not isinstance(content, bool)
    ):
        try:
            return datetime.fromtimestamp(content, timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    return None


class DateTimeConverter(TypeConverter):
    """Date-times as ISO strings or timestamps, dates and times as ISO strings."""

    def can_convert(self, type_: Any) -> bool:
        return type_ is datetime or type_ is date or type_ is time

    def allowed_cbor_tags(self, type_: Any) -> list[int]:
        if type_ is datetime:
            return [CborTag.DATE_TIME_STRING, CborTag.UNIX_TIME_T]
        if type_ is date:
            return [CborTag.DATE_TIME_STRING, CborTag.DATE]
        if type_ is time:
            return [CborTag.DATE_TIME_STRING, CborTag.TIME]
        return []

    def allowed_cbor_types(self, type_: Any, tag: int) -> list[CborType]:
        if tag == CborTag.UNIX_TIME_T:
            return [CborType.INTEGER]
        if tag in (CborTag.DATE_TIME_STRING, CborTag.DATE, CborTag.TIME):
            return [CborType.STRING]
        if type_ is datetime:
            return [CborType.STRING, CborType.INTEGER]
        return [CborType.STRING]

    def guess_type(self, tag: int, data_type: CborType) -> Any:
        if tag == CborTag.DATE_TIME_STRING and data_type == CborType.STRING:
            return datetime
        if tag == CborTag.UNIX_TIME_T and data_type == CborType.INTEGER:
            return datetime
        if tag == CborTag.DATE and data_type == CborType.STRING:
            return date
        if tag == CborTag.TIME and data_type == CborType.STRING:
            return time
        return None

    def serialize(self, type_: Any, value: Any) -> Any:
        if type_ is datetime:
            if self.helper.get_property("date_as_time_stamp"):
                return Tagged(CborTag.UNIX_TIME_T, int(value.timestamp()))
            return Tagged(CborTag.DATE_TIME_STRING, _format_datetime(value))
        if type_ is date:
            return Tagged(CborTag.DATE, value.isoformat())
        if type_ is time:
            return Tagged(CborTag.TIME, value.isoformat(timespec="milliseconds"))
        raise SerializationError("Invalid property type")

    def deserialize_cbor(self, type_: Any, value: Any, parent: Any) -> Any:
        content = untag(value)
        text = content if isinstance(content, str) else ""
        if type_ is datetime:
            return _to_datetime(value)
        if type_ is date:
            if tag_of(value) == CborTag.DATE_TIME_STRING:
                moment = _to_datetime(value)
                return moment.date() if moment is not None else None
            try:
                return date.fromisoformat(text)
            except ValueError:
                return None
        if type_ is time:
            if tag_of(value) == CborTag.DATE_TIME_STRING:
                moment = _to_datetime(value)
                return moment.timetz() if moment is not None else None
            try:
                return time.fromisoformat(text)
            except ValueError:
                return None
        raise SerializationError("Invalid property type")

    def deserialize_json(self, type_: Any, value: Any, parent: Any) -> Any:
        if type_ is datetime and isinstance(value, str):
            return self.deserialize_cbor(type_, Tagged(CborTag.DATE_TIME_STRING, value), parent)
        return self.deserialize_cbor(type_, value, parent)