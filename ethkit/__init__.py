"""Ethereum data types, RLP and JSON codecs, key signing, log stores and test helpers."""

__version__ = "0.1.0"

__all__ = [
    "contract",
    "decoding",
    "filestore",
    "inmem",
    "key",
    "mock",
    "rlp",
    "signer",
    "sqlstore",
    "store",
    "structs",
    "units",
]