import pytest

from cborconv.core import CborTag, CborType, DeserializationError, SerializationHelper, Tagged
from cborconv.locale import Locale, LocaleConverter


def make(**props):
    conv = LocaleConverter()
    SerializationHelper([conv], **props)
    return conv


def test_parse_iso():
    locale = Locale.parse("de_DE")
    assert locale == Locale("de", "", "DE")
    assert locale.name() == "de_DE"
    assert locale.bcp47_name() == "de-DE"


def test_parse_script():
    locale = Locale.parse("zh-hant-tw")
    assert locale == Locale("zh", "Hant", "TW")
    assert locale.bcp47_name() == "zh-Hant-TW"


def test_parse_codeset_ignored():
    assert Locale.parse("en_US.UTF-8") == Locale.parse("en_US")


def test_parse_garbage_is_c():
    assert Locale.parse("not a locale").is_c


def test_tags_and_types():
    conv = make()
    assert conv.allowed_cbor_tags(Locale) == [CborTag.LOCALE_ISO, CborTag.LOCALE_BCP47]
    assert conv.allowed_cbor_types(Locale, CborTag.LOCALE_ISO) == [CborType.STRING]
    assert conv.can_convert(Locale) and not conv.can_convert(str)


def test_guess_type():
    conv = make()
    assert conv.guess_type(CborTag.LOCALE_BCP47, CborType.STRING) is Locale
    assert conv.guess_type(CborTag.LOCALE_BCP47, CborType.INTEGER) is None
    assert conv.guess_type(CborTag.NO_TAG, CborType.STRING) is None


def test_serialize_bcp47_default():
    assert make().serialize(Locale, Locale("de", "", "AT")) == Tagged(CborTag.LOCALE_BCP47, "de-AT")


def test_serialize_iso():
    conv = make(use_bcp47_locale=False)
    assert conv.serialize(Locale, Locale("de", "", "AT")) == Tagged(CborTag.LOCALE_ISO, "de_AT")


@pytest.mark.parametrize("text", ["C", "c", ""])
def test_deserialize_c(text):
    assert make().deserialize_cbor(Locale, text, None) == Locale()


def test_deserialize_invalid():
    with pytest.raises(DeserializationError):
        make().deserialize_cbor(Locale, "???", None)


@pytest.mark.parametrize("bcp47", [True, False])
def test_round_trip(bcp47):
    conv = make(use_bcp47_locale=bcp47)
    for locale in (Locale("fr", "", "CA"), Locale("sr", "Latn", "RS"), Locale()):
        if not bcp47 and locale.script:
            continue
        assert conv.deserialize_cbor(Locale, conv.serialize(Locale, locale), None) == locale