# cborconv

`cborconv` is a set of type converters. Each converter turns a Python value
into plain CBOR-shaped data and reads such data back. That data is built from
`None`, booleans, integers, floats, strings, bytes, lists, dicts and `Tagged`
values. JSON-derived data can be read too.

A `SerializationHelper` holds the converters, the settings and the
extractors. It picks a converter for each type and calls it for nested values.

## Installation

```
pip install cborconv
```

To install the test tools as well:

```
pip install "cborconv[test]"
```

## Modules

| Module | Contents |
| --- | --- |
| `cborconv.core` | `TypeConverter` base class, `SerializationHelper`, `ThreadSafeStore`, `ConverterStore`, `CborTag`, `CborType`, `Tagged`, `UNDEFINED`, `untag`, `tag_of`, `cbor_type_of`, the enums `Priority`, `ValidationFlag`, `Polymorphing`, `MultiMapMode`, `ByteArrayFormat`, and the errors `SerializerError`, `SerializationError`, `DeserializationError` |
| `cborconv.extractors` | `TypeExtractor` and `SmartPointerExtractor`, `PairExtractor`, `OptionalExtractor`, `TupleExtractor`, `VariantExtractor` |
| `cborconv.binary` | `BitArrayConverter` (for `bitarray`) and `BytearrayConverter` (for `bytes`; Base64, Base64url or Base16 text in JSON) |
| `cborconv.cborvalue` | `CborConverter`: passes raw CBOR values through and converts JSON values, objects, arrays and documents. Types are named by the string constants `CBOR_VALUE`, `CBOR_MAP`, `CBOR_ARRAY`, `CBOR_SIMPLE_TYPE`, `JSON_VALUE`, `JSON_OBJECT`, `JSON_ARRAY` and `JSON_DOCUMENT` |
| `cborconv.temporal` | `DateTimeConverter` for `datetime`, `date` and `time` |
| `cborconv.enums` | `EnumConverter` for `enum.Enum` and `enum.Flag` types (low priority) |
| `cborconv.locale` | `Locale` (`parse`, `name`, `bcp47_name`) and `LocaleConverter` |
| `cborconv.version` | `VersionNumber` (`from_string`) and `VersionNumberConverter` |
| `cborconv.geometry` | `Size`, `SizeF`, `Point`, `PointF`, `Line`, `LineF`, `Rect`, `RectF`, `GeomConverter`, and `LegacyGeomConverter`, which only reads the older JSON object layout |
| `cborconv.containers` | `MultiMap`, `ListConverter` (`list`, `set`, `frozenset`, e.g. `list[int]`), `MapConverter` (`dict`, e.g. `dict[str, int]`), `MultiMapConverter` (`MultiMap[K, V]`) |
| `cborconv.pairs` | `PairConverter`, which works through a registered `PairExtractor` |
| `cborconv.pointers` | `SmartPointerConverter`, which works through a registered `SmartPointerExtractor` |

## Tagged values

A CBOR value that carries a tag is a `Tagged(tag, value)`. `untag(value)`
returns the value inside a tag, or the value itself if it has no tag.
`tag_of(value)` returns the tag, or `CborTag.NO_TAG`. `cbor_type_of(value)`
returns the `CborType` of any such value.

## The helper

```python
from cborconv.core import SerializationHelper, Tagged, CborTag
from cborconv.version import VersionNumber, VersionNumberConverter
from cborconv.containers import ListConverter

helper = SerializationHelper([VersionNumberConverter(), ListConverter()])

helper.serialize_subtype(VersionNumber((1, 2, 3)).__class__, VersionNumber((1, 2, 3)), "version")
# Tagged(tag=CborTag.VERSION_NUMBER, value=[1, 2, 3])

# With type None, the helper asks each converter to guess the type from the tag.
helper.deserialize_subtype(None, Tagged(CborTag.VERSION_NUMBER, "4.5"), None, "version")
# VersionNumber(segments=(4, 5))

helper.serialize_subtype(list[int], [1, 2, 3], "numbers")
# [1, 2, 3]
```

Converters are tried from the highest `priority` to the lowest. The first one
whose `can_convert` accepts the type is used, and that choice is cached. If no
converter takes a type, plain CBOR-shaped values pass through unchanged.
Otherwise a `SerializationError` or `DeserializationError` is raised.

With `json=True`, the helper calls `deserialize_json` instead of
`deserialize_cbor`:

```python
from cborconv.binary import BytearrayConverter
from cborconv.core import ByteArrayFormat, SerializationHelper

helper = SerializationHelper(
    [BytearrayConverter()], json=True, byte_array_format=ByteArrayFormat.BASE16
)
helper.deserialize_subtype(bytes, "48656c6c6f", None, "data")
# b"Hello"
```

Pairs and pointers need an extractor registered under the type key:

```python
from cborconv.core import SerializationHelper
from cborconv.extractors import PairExtractor
from cborconv.pairs import PairConverter

helper = SerializationHelper([PairConverter()], extractors={"coords": PairExtractor(int, int)})
helper.serialize_subtype("coords", (1, 2), "coords")
# Tagged(tag=CborTag.PAIR, value=[1, 2])
```

Each failure is a `SerializerError`. As it passes up through nested values,
the helper adds each trace name to `error.trace`. The trace is shown in the
message.

## Settings

Settings are keyword arguments to `SerializationHelper`. Converters read them
with `helper.get_property(name)`. An unknown name raises `TypeError`.

| Setting | Default | Read by |
| --- | --- | --- |
| `byte_array_format` | `ByteArrayFormat.BASE64` | `BytearrayConverter` when reading JSON |
| `validate_base64` | `True` | `BytearrayConverter`: check the text before decoding it |
| `enum_as_string` | `False` | `EnumConverter`: write member names instead of numbers |
| `version_as_string` | `False` | `VersionNumberConverter`: write `"1.2.3"` instead of an array |
| `date_as_time_stamp` | `False` | `DateTimeConverter`: write datetimes as Unix timestamps |
| `use_bcp47_locale` | `True` | `LocaleConverter`: BCP 47 names instead of ISO names |
| `multi_map_mode` | `MultiMapMode.MAP` | `MultiMapConverter`: map of arrays, dense map, or list of pairs |

The helper also accepts and stores these settings: `allow_null`,
`keep_object_name`, `validation_flags`, `polymorphing`,
`ignore_stored_attribute` and `handle_special_numbers`. No converter in this
package reads them.

## What the package does not do

- It produces and reads Python data structures only. It does not encode CBOR
  bytes or JSON text, and it does not decode them. Use a CBOR library or the
  `json` module for that.
- There are no converters for durations. There are none for optional, tuple
  or variant values, although `OptionalExtractor`, `TupleExtractor` and
  `VariantExtractor` exist. There are also none for objects or value classes
  with properties.
- There is no command-line tool.

## Running the tests

```
pytest
```