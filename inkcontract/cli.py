"""Command line entry point for the contract tools."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from .schema import SchemaVerificationError, verify_schema
from .verification import VerificationError, compare_wasm
from .version import get_version, git_commit

_BRIGHT_RED = "91"
_BRIGHT_RED_BOLD = "1;91"


def _style(text: str, code: str) -> str:
    if sys.stderr.isatty():
        return f"\x1b[{code}m{text}\x1b[0m"
    return text


def format_err(err: BaseException) -> str:
    """Render an error as a highlighted ``ERROR:`` line."""
    message = str(err)
    cause = err.__cause__
    while cause is not None:
        message = f"{message}\n\nCaused by:\n    {cause}"
        cause = cause.__cause__
    return f"{_style('ERROR:', _BRIGHT_RED_BOLD)} {_style(message, _BRIGHT_RED)}"


def _add_verbosity(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("-q", "--quiet", action="store_true", help="No output printed to stdout")
    group.add_argument("-v", "--verbose", action="store_true", help="Use verbose output")
    parser.add_argument("--output-json", action="store_true", help="Output the result in JSON format")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cargo contract",
        description="Utilities to develop Wasm smart contracts.",
    )
    parser.add_argument("--version", action="version", version=get_version(git_commit()))
    commands = parser.add_subparsers(dest="command", required=True)

    verify = commands.add_parser(
        "verify",
        help="Verifies that a given contract binary matches a built contract binary.",
    )
    verify.add_argument(
        "--wasm", required=True,
        help="The reference Wasm contract binary (*.wasm) to check against.",
    )
    verify.add_argument(
        "--built", required=True,
        help="The Wasm binary built from the workspace.",
    )
    _add_verbosity(verify)

    schema = commands.add_parser(
        "verify-schema",
        help="Verify schema from the current metadata specification.",
    )
    schema.add_argument("--schema", required=True, help="The path to the schema")
    source = schema.add_mutually_exclusive_group()
    source.add_argument("--bundle", help="The .contract path to verify the metadata")
    source.add_argument("--metadata", help="The metadata file to verify")
    _add_verbosity(schema)
    return parser


def _report(result, args: argparse.Namespace) -> None:
    if args.output_json:
        print(result.serialize_json())
    elif not args.quiet:
        print(result.display())


def _exec(args: argparse.Namespace) -> None:
    if args.command == "verify":
        result = compare_wasm(
            args.wasm, args.built, output_json=args.output_json, verbose=args.verbose
        )
    else:
        result = verify_schema(
            args.schema,
            contract_bundle=args.bundle,
            metadata=args.metadata,
            output_json=args.output_json,
            verbose=args.verbose,
        )
    _report(result, args)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run a command and return the process exit status."""
    arguments = list(sys.argv[1:] if argv is None else argv)
    if arguments and arguments[0] == "contract":
        arguments = arguments[1:]
    args = _build_parser().parse_args(arguments)
    try:
        _exec(args)
    except (SchemaVerificationError, VerificationError, ValueError, OSError) as err:
        print(format_err(err), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())