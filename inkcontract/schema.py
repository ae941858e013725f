"""Verification of contract metadata against a JSON schema."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import jsonschema
from jsonschema.exceptions import SchemaError

PathLike = Union[str, Path]


class SchemaVerificationError(Exception):
    """Raised when metadata cannot be loaded or does not match the schema."""


def _load_json(path: Path, what: str) -> Any:
    try:
        with path.open("rb") as handle:
            raw = handle.read()
    except OSError as exc:
        raise SchemaVerificationError(f"Failed to open {what} {path}") from exc
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise SchemaVerificationError(f"Failed to deserialize {what} {path}") from exc


def _load_metadata(path: Path, what: str) -> dict:
    data = _load_json(path, what)
    if not isinstance(data, dict):
        raise SchemaVerificationError(f"Failed to deserialize {what} {path}")
    return data


@dataclass
class SchemaVerificationResult:
    """The outcome of a successful schema verification."""

    is_verified: bool
    metadata_source: str
    schema: str
    output_json: bool = False
    verbose: bool = False

    def display(self) -> str:
        """A human readable summary."""
        return (
            f"\nSuccessfully verified metadata in `{self.metadata_source}` "
            f"against schema `{self.schema}`!"
        )

    def serialize_json(self) -> str:
        """The result as pretty printed JSON."""
        return json.dumps(
            {
                "is_verified": self.is_verified,
                "metadata_source": self.metadata_source,
                "schema": self.schema,
            },
            indent=2,
        )


def verify_schema(
    schema: PathLike,
    contract_bundle: Optional[PathLike] = None,
    metadata: Optional[PathLike] = None,
    output_json: bool = False,
    verbose: bool = False,
) -> SchemaVerificationResult:
    """Validate the metadata of a bundle or metadata file against a schema file."""
    if contract_bundle is not None and metadata is not None:
        raise SchemaVerificationError("--bundle cannot be used together with --metadata")
    if output_json and verbose:
        raise SchemaVerificationError("--output-json cannot be used together with --verbose")

    document: Any = None
    metadata_source = ""

    if contract_bundle is not None:
        path = Path(contract_bundle)
        document = _load_metadata(path, "contract bundle")
        source = document.get("source")
        if isinstance(source, dict):
            source.pop("wasm", None)
        metadata_source = str(path)

    if metadata is not None:
        path = Path(metadata)
        document = _load_metadata(path, "metadata file")
        metadata_source = str(path)

    schema_path = Path(schema)
    schema_doc = _load_json(schema_path, "schema file")

    try:
        validator_cls = jsonschema.validators.validator_for(schema_doc)
        validator_cls.check_schema(schema_doc)
        validator = validator_cls(schema_doc)
    except (SchemaError, TypeError) as exc:
        raise SchemaVerificationError("Failed to compile schema to validation tree") from exc

    errors = list(validator.iter_errors(document))
    if errors:
        message = "Error during schema validation:\n"
        for error in errors:
            message = f"{message}\n{error.message}"
        raise SchemaVerificationError(message)

    return SchemaVerificationResult(
        is_verified=True,
        metadata_source=metadata_source,
        schema=str(schema_path),
        output_json=output_json,
        verbose=verbose,
    )