"""Verification of a contract binary against a reference build."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


class VerificationError(Exception):
    """Raised when a contract cannot be verified against its reference."""


def code_hash(data: bytes) -> bytes:
    """The 32 byte BLAKE2b hash of contract code."""
    return hashlib.blake2b(bytes(data), digest_size=32).digest()


def _format_hash(digest: bytes) -> str:
    return "0x" + digest.hex()


def _read_binary(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise VerificationError(f"Failed to read contract binary {path}") from exc


@dataclass
class VerificationResult:
    """The outcome of a successful verification."""

    is_verified: bool
    contract: str
    reference_contract: str
    image: Optional[str] = None
    output_json: bool = False
    verbose: bool = False

    def display(self) -> str:
        """A human readable summary."""
        return (
            f"\nSuccessfully verified contract `{self.contract}` "
            f"against reference contract `{self.reference_contract}`!"
        )

    def serialize_json(self) -> str:
        """The result as pretty printed JSON."""
        return json.dumps(
            {
                "is_verified": self.is_verified,
                "image": self.image,
                "contract": self.contract,
                "reference_contract": self.reference_contract,
            },
            indent=2,
        )


def compare_wasm(
    reference_path: PathLike,
    built_path: PathLike,
    output_json: bool = False,
    verbose: bool = False,
) -> VerificationResult:
    """Check that a built Wasm binary has the same code hash as a reference binary."""
    if output_json and verbose:
        raise VerificationError("--output-json cannot be used together with --verbose")

    reference = Path(reference_path)
    built = Path(built_path)

    reference_hash = code_hash(_read_binary(reference))
    output_hash = code_hash(_read_binary(built))

    if output_hash != reference_hash:
        raise VerificationError(
            f"\nFailed to verify the authenticity of wasm binary at `{reference}` "
            f"against the workspace \nfound at `{built}`.\n "
            f"Expected {_format_hash(reference_hash)}, found {_format_hash(output_hash)}"
        )

    return VerificationResult(
        is_verified=True,
        contract=str(built),
        reference_contract=str(reference),
        image=None,
        output_json=output_json,
        verbose=verbose,
    )