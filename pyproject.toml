[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "inkcontract"
version = "0.1.0"
description = "Tools for Wasm smart contracts: source language detection, chain selection, schema and code hash verification"
requires-python = ">=3.10"
keywords = ["wasm", "webassembly", "smart-contracts", "ink", "substrate", "verification"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]
dependencies = [
    "jsonschema",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
inkcontract = "inkcontract.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["inkcontract"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
