"""Detection of the source language of a contract from its Wasm code."""

from __future__ import annotations

import enum

from .wasm import FuncType, Module, ValType, WasmError, parse_module


class Language(enum.Enum):
    """Languages a contract can be written in."""

    INK = "ink!"
    SOLIDITY = "Solidity"
    ASSEMBLY_SCRIPT = "AssemblyScript"

    def __str__(self) -> str:
        return self.value


class UnsupportedLanguageError(ValueError):
    """Raised when no known language can be recognised."""

    def __init__(self) -> None:
        super().__init__("Language unsupported or unrecognized.")


_DENY_PAYMENT_SIG = FuncType([], [ValType.I32])
_TRANSFERRED_VALUE_SIG = FuncType([ValType.I32], [])


def is_ink_function_present(module: Module) -> bool:
    """Whether a function with an ink! payment-check signature calls value_transferred."""
    index = module.function_import_index("value_transferred")
    if index is None:
        index = module.function_import_index("seal_value_transferred")
    if index is None:
        return False

    functions = []
    for signature in (_DENY_PAYMENT_SIG, _TRANSFERRED_VALUE_SIG):
        try:
            functions.extend(module.functions_by_type(signature))
        except WasmError:
            continue

    return any(
        op.name == "call" and op.args[0] == index
        for body in functions
        for op in body
    )


def _has_ink_env_name(module: Module) -> bool:
    try:
        return module.has_function_name("ink_env")
    except WasmError:
        return False


def determine_language(code: bytes) -> Language:
    """Guess the source language of a contract from its Wasm binary."""
    module = parse_module(code)
    has_start = module.start_section is not None

    if not has_start and "producers" in module.custom_sections:
        return Language.SOLIDITY
    if has_start and "sourceMappingURL" in module.custom_sections:
        return Language.ASSEMBLY_SCRIPT
    if not has_start and (is_ink_function_present(module) or _has_ink_env_name(module)):
        return Language.INK
    raise UnsupportedLanguageError()