"""Wasm smart contract tools: language detection, chains, schema and code hash checks."""

__version__ = "0.1.0"
__all__ = ["__version__"]