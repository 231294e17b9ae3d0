"""Coercion of loosely typed expected values into the shape of actual values.

Expected values usually come from YAML, so they are plain ints, strings,
lists and mappings. Accessors on the object under test return richer types
(numpy scalars, datetimes, UUIDs, enums, domain classes). ``coerce`` converts
an expected value into the representation of a reference value so the two
can be compared structurally.

Types take part in text and binary coercion either through the parser
registries (``register_text_parser`` / ``register_binary_parser``) or by
defining ``parse_text`` / ``parse_bytes`` classmethods.
"""

from __future__ import annotations

import datetime
import enum
import ipaddress
import logging
import numbers
import uuid
from collections.abc import Callable, Mapping
from decimal import Decimal
from fractions import Fraction
from pathlib import PurePath
from typing import Any

import numpy as np

logger = logging.getLogger(__name__)

Parser = Callable[[type, Any], Any]

_TEXT_PARSERS: dict[type, Parser] = {}
_BINARY_PARSERS: dict[type, Parser] = {}

_BYTES_LIKE = (bytes, bytearray, memoryview)
_CONTAINERS = (list, tuple, dict, np.ndarray)
_PARSE_ERRORS = (ValueError, TypeError, ArithmeticError, KeyError)


class _NoMatch:
    pass


_NO_MATCH = _NoMatch()


def register_text_parser(cls: type, parser: Parser) -> None:
    """Teach ``coerce`` to build instances of *cls* (and subclasses) from text.

    *parser* is called as ``parser(reference_type, text)``.
    """
    _TEXT_PARSERS[cls] = parser


def register_binary_parser(cls: type, parser: Parser) -> None:
    """Teach ``coerce`` to build instances of *cls* (and subclasses) from bytes.

    *parser* is called as ``parser(reference_type, data)``.
    """
    _BINARY_PARSERS[cls] = parser


def _lookup(registry: dict[type, Parser], cls: type, hook: str) -> Parser | None:
    method = getattr(cls, hook, None)
    if callable(method):
        return lambda _cls, data: method(data)
    bases = cls.__mro__
    if issubclass(cls, enum.Enum):
        # IntEnum and friends also inherit from their value type
        bases = tuple(b for b in bases if issubclass(b, enum.Enum))
    for base in bases:
        if base in registry:
            return registry[base]
    return None


def _is_bool(value: Any) -> bool:
    return isinstance(value, (bool, np.bool_))


def _is_numeric(value: Any) -> bool:
    return isinstance(value, (numbers.Number, np.bool_))


def _convert(value: Any, reference: Any) -> Any:
    if _is_numeric(value) and _is_numeric(reference):
        if _is_bool(value) != _is_bool(reference):
            return _NO_MATCH
        if isinstance(value, float) and isinstance(reference, (Decimal, Fraction)):
            # shortest repr, not the exact binary expansion
            value = str(value)
        try:
            return type(reference)(value)
        except (TypeError, ValueError, ArithmeticError):
            return _NO_MATCH

    if isinstance(value, _BYTES_LIKE) and isinstance(reference, _BYTES_LIKE):
        return type(reference)(value)

    if (
        isinstance(value, str)
        and isinstance(reference, str)
        and not isinstance(reference, enum.Enum)
    ):
        return type(reference)(value)

    return _NO_MATCH


def _parse(registry: dict[type, Parser], hook: str, value: Any, reference: Any) -> Any:
    cls = type(reference)
    parser = _lookup(registry, cls, hook)
    if parser is None:
        return _NO_MATCH
    try:
        return parser(cls, value)
    except _PARSE_ERRORS as e:
        logger.debug(f"Could not parse {value!r} as {cls.__name__}: {e}")
        return _NO_MATCH


def _coerce_sequence(value: Any, reference: Any) -> Any:
    if isinstance(reference, np.ndarray):
        try:
            return np.asarray(value, dtype=reference.dtype)
        except (TypeError, ValueError, OverflowError):
            return _NO_MATCH

    if isinstance(reference, _BYTES_LIKE):
        try:
            return type(reference)(bytes(value))
        except (TypeError, ValueError):
            return _NO_MATCH

    if not isinstance(reference, (list, tuple)):
        return _NO_MATCH

    items = []
    for index, item in enumerate(value):
        if reference:
            items.append(coerce(item, reference[min(index, len(reference) - 1)]))
        else:
            items.append(item)
    return tuple(items) if isinstance(reference, tuple) else items


def _coerce_mapping(value: Mapping, reference: Mapping) -> dict:
    return {
        key: coerce(item, reference[key]) if key in reference else item
        for key, item in value.items()
    }


def coerce(value: Any, reference: Any) -> Any:
    """Return *value* represented in the same concrete type as *reference*.

    Tried in order: direct conversion between numeric, bytes-like or string
    types; parsing text into the reference type; element-wise coercion of
    sequences and mappings; parsing bytes into the reference type. When none
    applies, *value* is returned unchanged and a later comparison reports the
    mismatch.
    """
    logger.debug(
        f"Converting {type(value).__name__}:{value!r} to {type(reference).__name__}"
    )
    if type(value) is type(reference) and not isinstance(value, _CONTAINERS):
        return value

    steps: list[Callable[[], Any]] = [lambda: _convert(value, reference)]
    if isinstance(value, str):
        steps.append(lambda: _parse(_TEXT_PARSERS, "parse_text", value, reference))
    if isinstance(value, (list, tuple, np.ndarray)):
        steps.append(lambda: _coerce_sequence(value, reference))
    if isinstance(value, Mapping) and isinstance(reference, Mapping):
        steps.append(lambda: _coerce_mapping(value, reference))
    if isinstance(value, _BYTES_LIKE):
        steps.append(lambda: _parse(_BINARY_PARSERS, "parse_bytes", value, reference))

    for step in steps:
        result = step()
        if result is not _NO_MATCH:
            return result
    return value


def _parse_datetime(cls: type, text: str) -> datetime.datetime:
    text = text.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return cls.fromisoformat(text)


def _parse_hex(cls: type, text: str) -> Any:
    text = text.strip()
    if text[:2].lower() == "0x":
        text = text[2:]
    return cls(bytes.fromhex(text.replace(":", " ")))


def _parse_bool(cls: type, text: str) -> bool:
    lowered = text.strip().lower()
    if lowered in ("true", "yes", "on", "1"):
        return cls(True)
    if lowered in ("false", "no", "off", "0"):
        return cls(False)
    raise ValueError(f"{text!r} is not a boolean")


def _parse_number(cls: type, text: str) -> Any:
    text = text.strip()
    if issubclass(cls, numbers.Integral):
        try:
            return cls(int(text))
        except ValueError:
            return cls(int(text, 0))
    return cls(text)


def _parse_enum(cls: type[enum.Enum], text: str) -> enum.Enum:
    try:
        return cls[text]
    except KeyError:
        return cls(text)


register_text_parser(datetime.datetime, _parse_datetime)
register_text_parser(datetime.date, lambda cls, text: cls.fromisoformat(text.strip()))
register_text_parser(datetime.time, lambda cls, text: cls.fromisoformat(text.strip()))
register_text_parser(uuid.UUID, lambda cls, text: cls(text))
register_text_parser(ipaddress.IPv4Address, lambda cls, text: cls(text.strip()))
register_text_parser(ipaddress.IPv6Address, lambda cls, text: cls(text.strip()))
register_text_parser(ipaddress.IPv4Network, lambda cls, text: cls(text.strip()))
register_text_parser(ipaddress.IPv6Network, lambda cls, text: cls(text.strip()))
register_text_parser(PurePath, lambda cls, text: cls(text))
register_text_parser(enum.Enum, _parse_enum)
register_text_parser(bool, _parse_bool)
register_text_parser(np.bool_, _parse_bool)
register_text_parser(bytes, _parse_hex)
register_text_parser(bytearray, _parse_hex)
register_text_parser(Decimal, lambda cls, text: cls(text.strip()))
register_text_parser(int, _parse_number)
register_text_parser(float, _parse_number)
register_text_parser(np.number, _parse_number)

register_binary_parser(uuid.UUID, lambda cls, data: cls(bytes=bytes(data)))
register_binary_parser(ipaddress.IPv4Address, lambda cls, data: cls(bytes(data)))
register_binary_parser(ipaddress.IPv6Address, lambda cls, data: cls(bytes(data)))
