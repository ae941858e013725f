# inkcontract

A small library and command for working with WebAssembly smart contracts:

- read a Wasm binary and guess the language the contract was written in
  (ink!, Solidity or AssemblyScript);
- resolve chain settings, including a fixed list of known production chains;
- validate contract metadata against a JSON schema;
- check that a built Wasm binary has the same code hash (BLAKE2b-256) as a
  reference binary.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command line

The package installs one command, `inkcontract`, with two subcommands. A
leading `contract` argument is accepted and ignored.

```
inkcontract --help
inkcontract --version
```

`--version` prints the package version, the short git commit of the current
directory (or `unknown`) and a platform name.

### verify

Compare a built Wasm binary with a reference binary:

```
inkcontract verify --wasm reference.wasm --built target/ink/flipper.wasm
```

### verify-schema

Validate a `.contract` bundle (its `source.wasm` field is dropped first) or
a metadata file against a JSON schema:

```
inkcontract verify-schema --schema schema.json --bundle flipper.contract
inkcontract verify-schema --schema schema.json --metadata metadata.json
```

Both subcommands take `--output-json` to print the result as JSON,
`-v/--verbose` to print a summary line and `-q/--quiet` to print nothing;
without `--output-json` or `--quiet` the summary line is printed.
`--output-json` cannot be combined with `--verbose`.

Errors are printed to standard error prefixed with `ERROR:` and the command
exits with status 1. Malformed arguments exit with status 2.

## Library use

Detect the source language of a contract binary:

```python
from inkcontract.analyze import determine_language, UnsupportedLanguageError

with open("flipper.wasm", "rb") as fh:
    code = fh.read()

try:
    language = determine_language(code)
except UnsupportedLanguageError as err:
    print(err)  # Language unsupported or unrecognized.
else:
    print(language)  # "ink!", "Solidity" or "AssemblyScript"
```

A binary that cannot be read raises `inkcontract.wasm.WasmError`.

Inspect a Wasm module directly:

```python
from inkcontract.wasm import FuncType, ValType, parse_module

module = parse_module(code)
print(module.function_import_index("value_transferred"))
print(module.functions_by_type(FuncType([], [ValType.I32])))
```

Pick a chain. A URL and config that match a production chain resolve to that
chain; URLs are compared after `url_to_string` spells out the default port:

```python
from inkcontract.chains import ChainOptions, ProductionChain, resolve_config

chain = ChainOptions().chain()  # ws://localhost:9944 with the Polkadot config
print(chain.url(), chain.config(), chain.production())

astar = ProductionChain.parse("Astar")
print(astar.url(), astar.config())

print(ChainOptions(url="wss://rpc.astar.network", config="Polkadot").chain().production())
print(resolve_config("Substrate"))
```

Unknown chain or configuration names raise `ChainError`.

Verify metadata against a schema:

```python
from inkcontract.schema import verify_schema

result = verify_schema("schema.json", contract_bundle="flipper.contract")
print(result.serialize_json())
```

Compare a freshly built binary with a reference:

```python
from inkcontract.verification import compare_wasm, code_hash

result = compare_wasm("reference.wasm", "target/ink/flipper.wasm")
print(result.display())
```

`compare_wasm` raises `VerificationError` when the two code hashes differ.

`inkcontract.output` holds console helpers: aligned name/value lines,
`decode_hex`, `parse_code_hash` (a 32 byte hex hash), printing of dry-run
results and contract information, and yes/no prompts that raise
`PromptDeclined` when the user declines.

## What this package does not do

It does not compile contracts, create contract projects or talk to a node:
there is no build, upload, instantiate, call, remove, info, storage, rpc,
encode or decode command, and no schema generation. `verify` does not build
the workspace itself; it compares two binaries that already exist.