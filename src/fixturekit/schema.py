"""Generate JSON Schema and docs for the fixture YAML format."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from fixturekit.fixtures import FieldDeclaration, Fixture

_INPUT_SCHEMA = {
    "anyOf": [
        {"type": "string", "description": "Hex string or !!binary data"},
        {"type": "array", "items": {"type": "integer", "minimum": 0, "maximum": 255}},
    ],
    "title": "Input",
}


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _collect_refs(obj: object) -> set[str]:
    """Return all ``$defs`` names referenced via ``$ref`` inside *obj*."""
    refs: set[str] = set()
    if isinstance(obj, dict):
        if "$ref" in obj:
            ref = obj["$ref"]
            if ref.startswith("#/$defs/"):
                refs.add(ref.removeprefix("#/$defs/"))
        for v in obj.values():
            refs |= _collect_refs(v)
    elif isinstance(obj, list):
        for v in obj:
            refs |= _collect_refs(v)
    return refs


def _order_defs(defs: dict) -> dict:
    """Topologically sort ``$defs`` so referenced types precede referencing types."""
    ordered: dict[str, dict] = {}
    visited: set[str] = set()

    def _visit(name: str) -> None:
        if name in visited or name not in defs:
            return
        visited.add(name)
        for dep in _collect_refs(defs[name]):
            _visit(dep)
        ordered[name] = defs[name]

    for name in defs:
        _visit(name)
    return ordered


def generate_json_schema() -> dict:
    """Schema for a fixture file: a mapping of fixture name to fixture record.

    The record name comes from the mapping key, so it is not a record field.
    """
    record = Fixture.model_json_schema()
    defs = record.pop("$defs", {})

    record["properties"].pop("name", None)
    record["required"] = [r for r in record.get("required", []) if r != "name"]
    if not record["required"]:
        del record["required"]
    record["properties"]["input"] = dict(_INPUT_SCHEMA)
    defs["Fixture"] = record

    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "title": "fixturekit fixtures",
        "type": "object",
        "additionalProperties": {"$ref": "#/$defs/Fixture"},
        "$defs": _order_defs(defs),
    }


def write_json_schema(path: Path) -> None:
    _ensure_parent(path)
    schema = generate_json_schema()
    path.write_text(json.dumps(schema, indent=2) + "\n")


def _format_fields(fields: Iterable[str]) -> str:
    return ", ".join(fields)


def generate_schema_doc() -> str:
    schema = generate_json_schema()
    defs = schema["$defs"]
    fixture_fields = defs["Fixture"]["properties"].keys()
    declaration = FieldDeclaration.model_json_schema()
    required = set(declaration.get("required", []))

    lines: list[str] = []
    lines.append("# fixturekit YAML Schema")
    lines.append("")
    lines.append("This doc is generated from the Pydantic models.")
    lines.append("")
    lines.append("## Top-level keys")
    lines.append("- each key is a fixture name mapping to a fixture record.")
    lines.append("")
    lines.append("## Fixture record")
    lines.append(f"- fields: {_format_fields(fixture_fields)}")
    lines.append("- `input`: hex string, `!!binary` data or list of byte values")
    lines.append("- `bits`: array of field declarations, packed into `input` when it is empty")
    lines.append("- `expected`: array of mappings from accessor path to expected value")
    lines.append("- `error`: string (optional) - expected error message")
    lines.append("")
    lines.append("## Field declaration")
    for field_name in declaration["properties"]:
        status = "required" if field_name in required else "optional"
        lines.append(f"- `{field_name}`: integer ({status})")

    lines.append("")
    return "\n".join(lines)


def write_schema_doc(path: Path) -> None:
    _ensure_parent(path)
    path.write_text(generate_schema_doc())
