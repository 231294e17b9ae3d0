"""Tests for fixture schema generation."""

import json

from fixturekit.schema import (
    generate_json_schema,
    generate_schema_doc,
    write_json_schema,
    write_schema_doc,
)


def test_schema_describes_named_records():
    schema = generate_json_schema()
    assert schema["type"] == "object"
    assert schema["additionalProperties"] == {"$ref": "#/$defs/Fixture"}

    record = schema["$defs"]["Fixture"]
    assert "name" not in record["properties"]
    assert set(record["properties"]) == {"bits", "input", "expected", "error"}
    assert record["additionalProperties"] is False


def test_schema_input_accepts_text_or_byte_list():
    record = generate_json_schema()["$defs"]["Fixture"]
    kinds = [option["type"] for option in record["properties"]["input"]["anyOf"]]
    assert kinds == ["string", "array"]


def test_schema_defs_are_ordered_by_dependency():
    names = list(generate_json_schema()["$defs"])
    assert names.index("FieldDeclaration") < names.index("Fixture")


def test_write_json_schema(tmp_path):
    out = tmp_path / "nested" / "fixturekit.schema.json"
    write_json_schema(out)
    assert json.loads(out.read_text()) == generate_json_schema()


def test_schema_doc(tmp_path):
    doc = generate_schema_doc()
    assert doc.startswith("# fixturekit YAML Schema")
    assert "- `byte`: integer (required)" in doc
    assert "- `bit`: integer (optional)" in doc

    out = tmp_path / "docs" / "schema.md"
    write_schema_doc(out)
    assert out.read_text() == doc
