import json

import pytest

from inkcontract.cli import format_err, main
from inkcontract.version import current_platform


def _write_schema(tmp_path):
    schema = {
        "type": "object",
        "required": ["source"],
        "properties": {"source": {"type": "object"}},
    }
    path = tmp_path / "schema.json"
    path.write_text(json.dumps(schema))
    return path


def test_format_err_plain_message():
    assert format_err(ValueError("boom")) == "ERROR: boom"


def test_format_err_includes_cause():
    try:
        try:
            raise OSError("inner")
        except OSError as exc:
            raise ValueError("outer") from exc
    except ValueError as err:
        text = format_err(err)
    assert text.startswith("ERROR: outer")
    assert "inner" in text


def test_verify_schema_json_output(tmp_path, capsys):
    schema = _write_schema(tmp_path)
    metadata = tmp_path / "meta.json"
    metadata.write_text(json.dumps({"source": {"hash": "0x00"}}))
    code = main(["contract", "verify-schema", "--schema", str(schema),
                 "--metadata", str(metadata), "--output-json"])
    assert code == 0
    data = json.loads(capsys.readouterr().out)
    assert data["is_verified"] is True
    assert data["metadata_source"] == str(metadata)
    assert data["schema"] == str(schema)


def test_verify_schema_human_output(tmp_path, capsys):
    schema = _write_schema(tmp_path)
    bundle = tmp_path / "c.contract"
    bundle.write_text(json.dumps({"source": {"wasm": "0x00"}}))
    assert main(["verify-schema", "--schema", str(schema), "--bundle", str(bundle)]) == 0
    out = capsys.readouterr().out
    assert "Successfully verified metadata in" in out
    assert str(bundle) in out


def test_verify_schema_quiet_prints_nothing(tmp_path, capsys):
    schema = _write_schema(tmp_path)
    metadata = tmp_path / "meta.json"
    metadata.write_text(json.dumps({"source": {}}))
    assert main(["verify-schema", "--schema", str(schema),
                 "--metadata", str(metadata), "-q"]) == 0
    assert capsys.readouterr().out == ""


def test_verify_schema_failure(tmp_path, capsys):
    schema = _write_schema(tmp_path)
    metadata = tmp_path / "meta.json"
    metadata.write_text(json.dumps({"other": 1}))
    code = main(["verify-schema", "--schema", str(schema), "--metadata", str(metadata)])
    assert code == 1
    err = capsys.readouterr().err
    assert "ERROR:" in err
    assert "Error during schema validation" in err


def test_verify_equivalent_wasm(tmp_path, capsys):
    reference = tmp_path / "reference.wasm"
    built = tmp_path / "built.wasm"
    reference.write_bytes(b"\0asm\x01\0\0\0")
    built.write_bytes(b"\0asm\x01\0\0\0")
    code = main(["contract", "verify", "--wasm", str(reference),
                 "--built", str(built), "--output-json"])
    assert code == 0
    assert '"is_verified": true' in capsys.readouterr().out


def test_verify_different_wasm(tmp_path, capsys):
    reference = tmp_path / "reference.wasm"
    built = tmp_path / "built.wasm"
    reference.write_bytes(b"\0asm\x01\0\0\0")
    built.write_bytes(b"\0asm\x01\0\0\0\0")
    code = main(["verify", "--wasm", str(reference), "--built", str(built), "--output-json"])
    assert code == 1
    assert "Failed to verify the authenticity of wasm binary at" in capsys.readouterr().err


def test_verify_missing_reference(tmp_path, capsys):
    built = tmp_path / "built.wasm"
    built.write_bytes(b"x")
    code = main(["verify", "--wasm", str(tmp_path / "missing.wasm"), "--built", str(built)])
    assert code == 1
    assert "Failed to read contract binary" in capsys.readouterr().err


def test_version_contains_platform(capsys):
    with pytest.raises(SystemExit) as info:
        main(["--version"])
    assert info.value.code == 0
    assert current_platform() in capsys.readouterr().out


def test_missing_command_is_usage_error():
    with pytest.raises(SystemExit) as info:
        main(["contract"])
    assert info.value.code == 2