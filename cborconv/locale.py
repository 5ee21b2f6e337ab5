"""Locales and their converter."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from .core import (
    CborTag,
    CborType,
    DeserializationError,
    Tagged,
    TypeConverter,
    untag,
)

_LOCALE_RE = re.compile(
    r"(?P<language>[A-Za-z]{2,3})"
    r"(?:[-_](?P<script>[A-Za-z]{4}))?"
    r"(?:[-_](?P<territory>[A-Za-z]{2}|[0-9]{3}))?"
    r"(?:\.[^@]*)?"
    r"(?:@.*)?"
)


@dataclass(frozen=True)
class Locale:
    """A language with optional script and territory; the default is the C locale."""

    language: str = "C"
    script: str = ""
    territory: str = ""

    @classmethod
    def parse(cls, text: str) -> "Locale":
        """Parse an ISO or BCP 47 locale name; anything unrecognised is the C locale."""
        match = _LOCALE_RE.fullmatch(text.strip())
        if match is None:
            return cls()
        return cls(
            language=match["language"].lower(),
            script=(match["script"] or "").title(),
            territory=(match["territory"] or "").upper(),
        )

    @property
    def is_c(self) -> bool:
        return self.language == "C"

    def name(self) -> str:
        """The ``language_TERRITORY`` form."""
        if self.is_c:
            return "C"
        return f"{self.language}_{self.territory}" if self.territory else self.language

    def bcp47_name(self) -> str:
        """The ``language-Script-TERRITORY`` form."""
        if self.is_c:
            return "C"
        return "-".join(part for part in (self.language, self.script, self.territory) if part)


class LocaleConverter(TypeConverter):
    """Locales as ISO or BCP 47 names."""

    def can_convert(self, type_: Any) -> bool:
        return type_ is Locale

    def allowed_cbor_tags(self, type_: Any) -> list[int]:
        return [CborTag.LOCALE_ISO, CborTag.LOCALE_BCP47]

    def allowed_cbor_types(self, type_: Any, tag: int) -> list[CborType]:
        return [CborType.STRING]

    def guess_type(self, tag: int, data_type: CborType) -> Any:
        if tag in self.allowed_cbor_tags(None) and data_type == CborType.STRING:
            return Locale
        return None

    def serialize(self, type_: Any, value: Any) -> Any:
        if self.helper.get_property("use_bcp47_locale"):
            return Tagged(CborTag.LOCALE_BCP47, value.bcp47_name())
        return Tagged(CborTag.LOCALE_ISO, value.name())

    def deserialize_cbor(self, type_: Any, value: Any, parent: Any) -> Any:
        content = untag(value)
        text = content if isinstance(content, str) else ""
        locale = Locale.parse(text)
        if locale.is_c:
            if text.upper() == "C" or not text:
                return Locale()
            raise DeserializationError("String cannot be interpreted as locale")
        return locale