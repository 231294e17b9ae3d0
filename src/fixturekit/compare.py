"""Comparison of expected accessor values against a live object."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from fixturekit.coerce import coerce
from fixturekit.getters import NotAGetterError, resolve_getter

_logger = logging.getLogger(__name__)

Expected = Sequence[Mapping[str, Any]]


@dataclass
class Result:
    """Failures collected by one comparison run.

    Attributes:
        failures: Human-readable failure messages in the order they were found.
    """

    failures: list[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return len(self.failures) > 0

    def add(self, message: str) -> None:
        self.failures.append(message)

    def addf(self, template: str, *args: Any, **kwargs: Any) -> None:
        self.failures.append(template.format(*args, **kwargs))

    def merge(self, other: Result, prefix: str = "") -> None:
        """Append the failures of *other*, each optionally prefixed."""
        for failure in other.failures:
            self.failures.append(prefix + failure)

    def __iter__(self) -> Iterator[str]:
        return iter(self.failures)

    def __str__(self) -> str:
        return "\n".join(f"\t{failure}" for failure in self.failures)


def deep_equal(a: Any, b: Any) -> bool:
    """Structural equality that also requires identical concrete types.

    Unlike ``==``, ``1`` and ``1.0`` (or ``128`` and ``numpy.uint64(128)``)
    are not equal here: both sides must have exactly the same type at every
    level of nesting.
    """
    if type(a) is not type(b):
        return False
    if isinstance(a, np.ndarray):
        return a.dtype == b.dtype and a.shape == b.shape and bool(np.array_equal(a, b))
    if isinstance(a, (list, tuple)):
        return len(a) == len(b) and all(deep_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, Mapping):
        return a.keys() == b.keys() and all(deep_equal(a[k], b[k]) for k in a)
    return bool(a == b)


def _is_nested(value: Any) -> bool:
    """True when *value* is itself a list of assertion mappings."""
    return (
        isinstance(value, list)
        and len(value) > 0
        and all(
            isinstance(item, Mapping) and all(isinstance(k, str) for k in item)
            for item in value
        )
    )


def compare(
    expected: Expected,
    obj: Any,
    *,
    logger: logging.Logger | None = None,
) -> Result:
    """Check every ``path: value`` pair in *expected* against *obj*.

    Each path is resolved with resolve_getter and the accessor's return value
    is compared with the expected value after coercing the expected value to
    the actual value's representation. A nested list of assertion mappings is
    compared recursively against the object the accessor returns. Every pair
    is evaluated; resolution failures and mismatches are collected in the
    returned Result rather than raised. Exceptions raised by an accessor
    itself propagate to the caller and end the run.
    """
    logger = logger or _logger
    result = Result()

    for assertion in expected:
        for path, expected_value in assertion.items():
            logger.debug(
                f"Comparing {path} to {type(expected_value).__name__}:{expected_value!r}"
            )
            try:
                accessor = resolve_getter(path, obj)
            except NotAGetterError as e:
                logger.warning(f"Cannot resolve {path}: {e}")
                result.add(str(e))
                continue

            actual = accessor()
            if _is_nested(expected_value) and not isinstance(
                actual, (list, tuple, Mapping, np.ndarray)
            ):
                nested = compare(expected_value, actual, logger=logger)
                result.merge(nested, prefix=f"{path}.")
                continue

            expected_value = coerce(expected_value, actual)
            if not deep_equal(actual, expected_value):
                logger.info(f"{path} mismatch: expected={expected_value!r} actual={actual!r}")
                result.addf("{} Expected {} but got {}", path, expected_value, actual)

    return result


def assert_matches(expected: Expected, obj: Any) -> None:
    """Raise AssertionError listing every failure if *obj* does not match."""
    result = compare(expected, obj)
    if result.failed:
        raise AssertionError(
            f"{len(result.failures)} expectation(s) failed:\n{result}"
        )
