from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from fixturekit.bits import pack_fields
from fixturekit.compare import Result, compare

logger = logging.getLogger(__name__)


class FixtureIncompleteError(ValueError):
    """A fixture supplies neither literal input nor bit definitions."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Neither input nor bit definitions were specified for test {name}"
        )
        self.name = name


class FieldDeclaration(BaseModel):
    model_config = ConfigDict(extra="forbid")
    byte: int = Field(ge=0)
    bit: int = Field(default=0, ge=0)
    width: int = Field(gt=0)
    value: int


def _parse_hex(text: str) -> bytes:
    text = text.strip()
    if text[:2].lower() == "0x":
        text = text[2:]
    return bytes.fromhex(text.replace(":", " "))


class Fixture(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str
    bits: list[FieldDeclaration] = []
    input: bytes = b""
    expected: list[dict[str, Any]] = []
    error: str | None = None

    @field_validator("input", mode="before")
    @classmethod
    def normalize_input(cls, v: Any) -> Any:
        """Accept ``!!binary`` bytes, a hex string or a list of byte values."""
        if v is None:
            return b""
        if isinstance(v, str):
            return _parse_hex(v)
        if isinstance(v, list):
            return bytes(v)
        return v

    def check(self, obj: Any) -> Result:
        """Compare *obj* against this fixture's expected values."""
        return compare(self.expected, obj)

    def check_error(self, error: BaseException | None) -> Result:
        """Compare the error raised for this fixture's input with ``error``."""
        result = Result()
        if self.error is None:
            if error is not None:
                result.addf("Unexpected error: {}", error)
        elif error is None:
            result.addf("Expected error {!r} but got none", self.error)
        elif self.error not in str(error):
            result.addf("Expected error {!r} but got {!r}", self.error, str(error))
        return result


def load_fixtures(path: Path) -> dict[str, Fixture]:
    """Load and validate the named fixtures in a YAML file.

    Fixtures without literal ``input`` have it built from their ``bits``.
    """
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f)

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"Expected a mapping of fixture names in {path}")

    fixtures: dict[str, Fixture] = {}
    for name, record in raw.items():
        if record is None:
            record = {}
        if not isinstance(record, dict):
            raise ValueError(f"Fixture {name} in {path} must be a mapping")
        fixture = Fixture.model_validate({**record, "name": str(name)})

        # Materialize input from bit definitions
        if not fixture.input:
            if not fixture.bits:
                raise FixtureIncompleteError(str(name))
            fixture.input = pack_fields(fixture.bits)
        fixtures[fixture.name] = fixture

    logger.info(f"Loaded {len(fixtures)} fixtures from {path}")
    return fixtures


def iterate_fixtures(path: Path, callback: Callable[[str, Fixture], Any]) -> None:
    """Call ``callback(name, fixture)`` for every fixture in a YAML file.

    All fixtures are loaded before the first callback, so a loading error
    is raised without any callback having run.
    """
    for name, fixture in load_fixtures(path).items():
        logger.debug(f"Running fixture {name}")
        callback(name, fixture)
