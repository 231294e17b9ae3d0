"""Declarative fixtures: bit-packed payloads and accessor-based expectations."""

from fixturekit.bits import BitBuffer, FieldOverlapError, find_overlaps, pack_fields
from fixturekit.coerce import coerce, register_binary_parser, register_text_parser
from fixturekit.compare import Result, assert_matches, compare, deep_equal
from fixturekit.fixtures import (
    FieldDeclaration,
    Fixture,
    FixtureIncompleteError,
    iterate_fixtures,
    load_fixtures,
)
from fixturekit.getters import NotAGetterError, getter, resolve_getter

__all__ = [
    "BitBuffer",
    "FieldDeclaration",
    "FieldOverlapError",
    "Fixture",
    "FixtureIncompleteError",
    "NotAGetterError",
    "Result",
    "assert_matches",
    "coerce",
    "compare",
    "deep_equal",
    "find_overlaps",
    "getter",
    "iterate_fixtures",
    "load_fixtures",
    "pack_fields",
    "register_binary_parser",
    "register_text_parser",
    "resolve_getter",
]
