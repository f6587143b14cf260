[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ethkit"
version = "0.1.0"
description = "Ethereum data types, RLP and JSON codecs, key signing, EIP-155 transactions and log stores"
requires-python = ">=3.10"
dependencies = [
    "pycryptodome",
]
keywords = [
    "ethereum",
    "rlp",
    "json-rpc",
    "secp256k1",
    "eip-155",
    "logs",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[tool.hatch.build.targets.wheel]
packages = ["ethkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
