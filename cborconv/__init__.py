"""Type converters between Python values and CBOR- or JSON-shaped data.

Includes converters for bytes, bit arrays, raw CBOR/JSON values, dates and
times, enums, locales, version numbers, geometry, containers, pairs and
smart pointers.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]