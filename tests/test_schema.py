import json

import pytest

from inkcontract.schema import (
    SchemaVerificationError,
    SchemaVerificationResult,
    verify_schema,
)

STRICT_SOURCE_SCHEMA = {
    "type": "object",
    "required": ["source", "contract"],
    "properties": {
        "source": {
            "type": "object",
            "properties": {"hash": {"type": "string"}},
            "additionalProperties": False,
        },
        "contract": {"type": "object"},
    },
}

BUNDLE = {
    "source": {"hash": "0x00", "wasm": "0x0061736d"},
    "contract": {"name": "flipper"},
}


@pytest.fixture
def files(tmp_path):
    schema = tmp_path / "schema.json"
    schema.write_text(json.dumps(STRICT_SOURCE_SCHEMA))
    bundle = tmp_path / "flipper.contract"
    bundle.write_text(json.dumps(BUNDLE))
    return schema, bundle


def test_bundle_wasm_is_ignored(files):
    schema, bundle = files
    result = verify_schema(schema, bundle, None, False, False)
    assert result.is_verified is True
    assert result.metadata_source == str(bundle)
    assert result.schema == str(schema)


def test_metadata_file_keeps_wasm(files):
    schema, bundle = files
    with pytest.raises(SchemaVerificationError) as info:
        verify_schema(schema, None, bundle, False, False)
    assert str(info.value).startswith("Error during schema validation:\n\n")
    assert "wasm" in str(info.value)


def test_no_metadata_validates_null(files):
    schema, _ = files
    with pytest.raises(SchemaVerificationError, match="Error during schema validation"):
        verify_schema(schema, None, None, False, False)


def test_invalid_schema_fails_to_compile(tmp_path, files):
    _, bundle = files
    schema = tmp_path / "bad.json"
    schema.write_text(json.dumps({"type": 5}))
    with pytest.raises(SchemaVerificationError, match="Failed to compile schema"):
        verify_schema(schema, bundle, None, False, False)


def test_missing_schema_file(tmp_path, files):
    _, bundle = files
    missing = tmp_path / "missing.json"
    with pytest.raises(SchemaVerificationError, match="Failed to open schema file"):
        verify_schema(missing, bundle, None, False, False)


def test_malformed_bundle(tmp_path, files):
    schema, _ = files
    bundle = tmp_path / "broken.contract"
    bundle.write_text("{not json")
    with pytest.raises(SchemaVerificationError, match="Failed to deserialize contract bundle"):
        verify_schema(schema, bundle, None, False, False)


def test_conflicting_options(files):
    schema, bundle = files
    with pytest.raises(SchemaVerificationError):
        verify_schema(schema, bundle, bundle, False, False)
    with pytest.raises(SchemaVerificationError):
        verify_schema(schema, bundle, None, True, True)


def test_serialize_json_round_trip(files):
    schema, bundle = files
    result = verify_schema(schema, bundle, None, True, False)
    data = json.loads(result.serialize_json())
    assert data == {
        "is_verified": True,
        "metadata_source": str(bundle),
        "schema": str(schema),
    }
    assert result.output_json is True


def test_display_mentions_paths():
    result = SchemaVerificationResult(True, "a.contract", "s.json")
    text = result.display()
    assert "`a.contract`" in text
    assert text.endswith("`s.json`!")
    assert "Successfully verified metadata in" in text