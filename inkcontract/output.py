"""Console output helpers shared by the contract commands."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any, Callable, Iterable

DEFAULT_KEY_COL_WIDTH = 12

_STORAGE_DEPOSIT_KEY = "Storage Total Deposit"
MAX_KEY_COL_WIDTH = len(_STORAGE_DEPOSIT_KEY) + 1

_GREEN_BOLD = "1;32"
_BRIGHT_WHITE_BOLD = "1;97"
_BOLD = "1"
_YELLOW_BOLD = "1;33"


class PromptDeclined(RuntimeError):
    """Raised when the user does not confirm an action."""


def _style(text: str, code: str) -> str:
    if sys.stdout.isatty():
        return f"\x1b[{code}m{text}\x1b[0m"
    return text


def _debug(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)


@dataclass(frozen=True)
class Weight:
    """Execution weight: computation time and proof size."""

    ref_time: int = 0
    proof_size: int = 0

    def __str__(self) -> str:
        return f"Weight {{ ref_time: {self.ref_time}, proof_size: {self.proof_size} }}"


@dataclass
class ExecResult:
    """The fields of a dry-run result that are shown to the user."""

    gas_consumed: Weight
    gas_required: Weight
    storage_deposit: Any
    debug_message: bytes = b""


@dataclass
class ExtendedContractInfo:
    """Information about an on-chain contract, including its source language."""

    trie_id: Any
    code_hash: Any
    storage_items: int
    storage_items_deposit: Any
    storage_total_deposit: Any
    source_language: str


def name_value_line(name: str, value: Any, width: int = DEFAULT_KEY_COL_WIDTH) -> str:
    """A line with ``name`` right-aligned to ``width`` followed by ``value``."""
    return f"{name:>{width}} {value}"


def _print_name_value(name: str, value: Any, width: int = DEFAULT_KEY_COL_WIDTH) -> None:
    print(f"{_style(f'{name:>{width}}', _GREEN_BOLD)} {value}")


def decode_hex(text: str) -> bytes:
    """Decode a hex string, with or without a ``0x`` prefix."""
    digits = text[2:] if text.startswith("0x") else text
    try:
        return bytes.fromhex(digits)
    except ValueError as exc:
        raise ValueError(f"Invalid hex string: {text}") from exc


def parse_code_hash(text: str) -> bytes:
    """Parse a hex encoded 32 byte hash."""
    data = decode_hex(text)
    if len(data) != 32:
        raise ValueError("Code hash should be 32 bytes in length")
    return data


def _debug_lines(message: bytes) -> list[str]:
    try:
        text = bytes(message).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ValueError("Error decoding UTF8 debug message bytes") from exc
    if text.endswith("\n"):
        text = text[:-1]
    if not text:
        return []
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


def _print_debug_message(lines: list[str], width: int) -> None:
    for position, line in enumerate(lines):
        _print_name_value("Debug Message" if position == 0 else "", line, width)


def display_contract_exec_result(result: ExecResult, width: int = MAX_KEY_COL_WIDTH) -> None:
    """Print the fields of an instantiate or call dry-run result."""
    lines = _debug_lines(result.debug_message)
    _print_name_value("Gas Consumed", result.gas_consumed, width)
    _print_name_value("Gas Required", result.gas_required, width)
    _print_name_value(_STORAGE_DEPOSIT_KEY, result.storage_deposit, width)
    _print_debug_message(lines, width)


def display_contract_exec_result_debug(
    result: ExecResult, width: int = DEFAULT_KEY_COL_WIDTH
) -> None:
    """Print only the debug message of a dry-run result."""
    _print_debug_message(_debug_lines(result.debug_message), width)


def display_dry_run_result_warning(command: str) -> None:
    """Tell the user the call was only dry-run."""
    print(f"Your {command} call {_style('has not', _BOLD)} been executed.")
    print(
        "To submit the transaction and execute the call on chain, add "
        f"{_style('-x/--execute', _BOLD)} flag to the command."
    )


def _read_answer(prompt: str) -> str:
    try:
        answer = input(prompt)
    except EOFError:
        answer = ""
    return answer.strip().lower()


def prompt_confirm_tx(show_details: Callable[[], None]) -> None:
    """Ask the user to confirm a transaction; the default answer is yes."""
    print(
        f"{_style('Confirm transaction details:', _BRIGHT_WHITE_BOLD)} "
        "(skip with --skip-confirm or -y)"
    )
    show_details()
    answer = _read_answer(
        f"{_style('Submit?', _BRIGHT_WHITE_BOLD)} ({_style('Y', _BRIGHT_WHITE_BOLD)}/n): "
    )
    if answer in ("y", ""):
        return
    if answer == "n":
        raise PromptDeclined("Transaction not submitted")
    raise PromptDeclined(f"Expected either 'y' or 'n', got '{answer}'")


def prompt_confirm_unverifiable_upload(chain: str) -> None:
    """Ask the user to confirm uploading unverifiable code; the default is no."""
    print(_style("Confirm upload:", _BRIGHT_WHITE_BOLD))
    warning = (
        f"Warning: You are about to upload unverifiable code to {chain} mainnet.\n"
        "A third party won't be able to confirm that your uploaded contract Wasm blob "
        "matches a particular contract source code.\n\n"
        "You can use `cargo contract build --verifiable` to make the contract verifiable.\n"
        "See the contract verification documentation for more info."
    )
    print(_style(warning, _YELLOW_BOLD), end="")
    print(
        f"{_style(chr(10) + 'Continue?', _BRIGHT_WHITE_BOLD)} "
        f"({_style('y/N', _BRIGHT_WHITE_BOLD)}): "
    )
    answer = _read_answer("")
    if answer == "y":
        return
    if answer in ("n", ""):
        raise PromptDeclined("Upload cancelled!")
    raise PromptDeclined(f"Expected either 'y' or 'n', got '{answer}'")


def print_dry_running_status(msg: str) -> None:
    """Announce that a dry-run is in progress."""
    label = _style(f"{'Dry-running':>{DEFAULT_KEY_COL_WIDTH}}", _GREEN_BOLD)
    print(f"{label} {_style(msg, _BRIGHT_WHITE_BOLD)} (skip with --skip-dry-run)")


def print_gas_required_success(gas: Weight) -> None:
    """Report the gas estimate of a successful dry-run."""
    label = _style(f"{'Success!':>{DEFAULT_KEY_COL_WIDTH}}", _GREEN_BOLD)
    print(f"{label} Gas required estimated at {gas}")


def basic_display_format_extended_contract_info(info: ExtendedContractInfo) -> None:
    """Print contract information as aligned name/value lines."""
    width = MAX_KEY_COL_WIDTH
    _print_name_value("TrieId", _debug(info.trie_id), width)
    _print_name_value("Code Hash", _debug(info.code_hash), width)
    _print_name_value("Storage Items", _debug(info.storage_items), width)
    _print_name_value("Storage Items Deposit", _debug(info.storage_items_deposit), width)
    _print_name_value(_STORAGE_DEPOSIT_KEY, _debug(info.storage_total_deposit), width)
    _print_name_value("Source Language", info.source_language, width)


def display_all_contracts(contracts: Iterable[Any]) -> None:
    """Print every contract address on its own line."""
    for contract in contracts:
        print(contract)