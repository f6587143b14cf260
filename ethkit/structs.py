"""Core chain data types with their JSON and RLP encodings."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from Crypto.Hash import keccak

from . import rlp
from .rlp import RLPError


def keccak256(data: bytes) -> bytes:
    """Return the Keccak-256 digest of data."""
    return keccak.new(digest_bits=256, data=bytes(data)).digest()


def _decode_hex(text: str) -> bytes:
    if text.startswith(("0x", "0X")):
        text = text[2:]
    if len(text) % 2:
        text = "0" + text
    return bytes.fromhex(text)


def _hex_num(value: int) -> str:
    return f"0x{value:x}"


def _hex_bytes(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def _dumps(obj) -> str:
    return json.dumps(obj, separators=(",", ":"))


class _FixedBytes(bytes):
    size = 0

    def __new__(cls, data=None):
        data = bytes(cls.size) if data is None else bytes(data)
        if len(data) != cls.size:
            raise ValueError(f"{cls.__name__} must be {cls.size} bytes, got {len(data)}")
        return super().__new__(cls, data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self}')"


class Address(_FixedBytes):
    """A 20-byte account address; str() gives the checksummed form."""

    size = 20

    def __str__(self) -> str:
        lower = self.hex()
        digest = keccak256(lower.encode("ascii")).hex()
        return "0x" + "".join(
            char.upper() if int(nibble, 16) >= 8 else char
            for char, nibble in zip(lower, digest)
        )


class Hash(_FixedBytes):
    """A 32-byte hash; str() gives lower-case 0x hex."""

    size = 32

    def __str__(self) -> str:
        return "0x" + self.hex()


ZERO_ADDRESS = Address()
ZERO_HASH = Hash()


def bytes_to_address(data: bytes) -> Address:
    """Right-align data into an address, keeping its last 20 bytes."""
    data = bytes(data)[-Address.size:]
    return Address(data.rjust(Address.size, b"\x00"))


def bytes_to_hash(data: bytes) -> Hash:
    """Right-align data into a hash, keeping its last 32 bytes."""
    data = bytes(data)[-Hash.size:]
    return Hash(data.rjust(Hash.size, b"\x00"))


def hex_to_address(text: str) -> Address:
    return bytes_to_address(_decode_hex(text))


def hex_to_hash(text: str) -> Hash:
    return bytes_to_hash(_decode_hex(text))


_BLOCK_TAGS = {-1: "latest", -2: "pending", -3: "earliest"}


class BlockNumber(int):
    """A block number, where negative values name the latest, pending and earliest tags."""

    def __str__(self) -> str:
        tag = _BLOCK_TAGS.get(int(self))
        if tag is not None:
            return tag
        if self < 0:
            raise ValueError(f"invalid negative block number {int(self)}")
        return _hex_num(int(self))

    def __repr__(self) -> str:
        return f"BlockNumber({int(self)})"


LATEST = BlockNumber(-1)
PENDING = BlockNumber(-2)
EARLIEST = BlockNumber(-3)


class TransactionType(IntEnum):
    LEGACY = 0
    ACCESS_LIST = 1
    DYNAMIC_FEE = 2


def _as_bytes(item) -> bytes:
    if not isinstance(item, bytes):
        raise RLPError("expected bytes but found a list")
    return item


def _as_list(item) -> list:
    if not isinstance(item, list):
        raise RLPError("expected a list but found bytes")
    return item


def _as_uint64(item) -> int:
    data = _as_bytes(item)
    if len(data) > 8:
        raise RLPError(f"value of {len(data)} bytes does not fit in 64 bits")
    return int.from_bytes(data, "big")


def _as_bigint(item) -> int:
    return int.from_bytes(_as_bytes(item), "big")


def _as_address(item) -> Address:
    data = _as_bytes(item)
    if len(data) != Address.size:
        raise RLPError(f"address must be {Address.size} bytes, found {len(data)}")
    return Address(data)


def _as_hash(item) -> Hash:
    data = _as_bytes(item)
    if len(data) != Hash.size:
        raise RLPError(f"hash must be {Hash.size} bytes, found {len(data)}")
    return Hash(data)


@dataclass
class AccessEntry:
    address: Address = field(default_factory=Address)
    storage: list[Hash] = field(default_factory=list)


class AccessList(list):
    """A list of AccessEntry items."""

    def _rlp_item(self) -> list:
        return [[bytes(entry.address), [bytes(key) for key in entry.storage]] for entry in self]

    def _json_value(self) -> list:
        return [
            {"address": str(entry.address), "storageKeys": [str(key) for key in entry.storage]}
            for entry in self
        ]

    def marshal_rlp(self) -> bytes:
        return rlp.encode(self._rlp_item())


def _access_list_from_item(item) -> AccessList:
    result = AccessList()
    for elem in _as_list(item):
        parts = _as_list(elem)
        if len(parts) != 2:
            raise RLPError(f"two elems expected but {len(parts)} found")
        address = _as_address(parts[0])
        storage = [_as_hash(key) for key in _as_list(parts[1])]
        result.append(AccessEntry(address=address, storage=storage))
    return result


def decode_access_list_rlp(data: bytes) -> AccessList:
    return _access_list_from_item(rlp.decode(data))


@dataclass
class Log:
    removed: bool = False
    log_index: int = 0
    transaction_index: int = 0
    transaction_hash: Hash = field(default_factory=Hash)
    block_hash: Hash = field(default_factory=Hash)
    block_number: int = 0
    address: Address = field(default_factory=Address)
    data: bytes = b""
    topics: list[Hash] = field(default_factory=list)

    def to_json(self) -> str:
        return _dumps({
            "removed": self.removed,
            "logIndex": _hex_num(self.log_index),
            "transactionIndex": _hex_num(self.transaction_index),
            "transactionHash": str(self.transaction_hash),
            "blockHash": str(self.block_hash),
            "blockNumber": _hex_num(self.block_number),
            "address": str(self.address),
            "data": _hex_bytes(self.data),
            "topics": [str(topic) for topic in self.topics],
        })


@dataclass
class Transaction:
    type: TransactionType = TransactionType.LEGACY
    hash: Hash = field(default_factory=Hash)
    from_: Address = field(default_factory=Address)
    input: bytes = b""
    gas_price: int = 0
    gas: int = 0
    value: Optional[int] = None
    nonce: int = 0
    to: Optional[Address] = None
    v: bytes = b""
    r: bytes = b""
    s: bytes = b""
    block_hash: Hash = field(default_factory=Hash)
    block_number: int = 0
    txn_index: int = 0
    chain_id: Optional[int] = None
    access_list: Optional[AccessList] = None
    max_priority_fee_per_gas: Optional[int] = None
    max_fee_per_gas: Optional[int] = None

    def _json_value(self) -> dict:
        obj: dict = {"hash": str(self.hash), "from": str(self.from_)}
        if self.input:
            obj["input"] = _hex_bytes(self.input)
        if self.value is not None:
            obj["value"] = _hex_num(self.value)
        obj["gasPrice"] = _hex_num(self.gas_price)
        if self.gas:
            obj["gas"] = _hex_num(self.gas)
        if self.max_priority_fee_per_gas is not None:
            obj["maxPriorityFeePerGas"] = _hex_num(self.max_priority_fee_per_gas)
        if self.max_fee_per_gas is not None:
            obj["maxFeePerGas"] = _hex_num(self.max_fee_per_gas)
        if self.nonce:
            obj["nonce"] = _hex_num(self.nonce)
        obj["to"] = None if self.to is None else str(self.to)
        obj["v"] = _hex_bytes(self.v)
        obj["r"] = _hex_bytes(self.r)
        obj["s"] = _hex_bytes(self.s)
        if self.block_hash == ZERO_HASH:
            # a pending transaction has no block metadata
            obj["blockHash"] = None
            obj["blockNumber"] = None
            obj["transactionIndex"] = None
        else:
            obj["blockHash"] = str(self.block_hash)
            obj["blockNumber"] = _hex_num(self.block_number)
            obj["transactionIndex"] = _hex_num(self.txn_index)
        if self.chain_id is not None:
            obj["chainId"] = _hex_num(self.chain_id)
        if self.access_list is not None:
            obj["accessList"] = AccessList(self.access_list)._json_value()
        return obj

    def to_json(self) -> str:
        return _dumps(self._json_value())

    def _rlp_fields(self) -> list:
        typed = self.type != TransactionType.LEGACY
        fields: list = []
        if typed:
            fields.append(self.chain_id or 0)
        fields.append(self.nonce)
        if self.type == TransactionType.DYNAMIC_FEE:
            fields.append(self.max_priority_fee_per_gas or 0)
            fields.append(self.max_fee_per_gas or 0)
        else:
            fields.append(self.gas_price)
        fields.append(self.gas)
        fields.append(b"" if self.to is None else bytes(self.to))
        fields.append(self.value or 0)
        fields.append(bytes(self.input))
        if typed:
            fields.append(AccessList(self.access_list or [])._rlp_item())
        fields.extend([bytes(self.v), bytes(self.r), bytes(self.s)])
        return fields

    def marshal_rlp(self) -> bytes:
        """Encode the transaction, prefixed with its type byte unless legacy."""
        raw = rlp.encode(self._rlp_fields())
        if self.type == TransactionType.LEGACY:
            return raw
        return bytes([int(self.type)]) + raw

    def get_hash(self) -> Hash:
        return Hash(keccak256(self.marshal_rlp()))


_TX_FIELD_COUNTS = {
    TransactionType.LEGACY: 9,
    TransactionType.ACCESS_LIST: 11,
    TransactionType.DYNAMIC_FEE: 12,
}


def decode_transaction_rlp(data: bytes) -> Transaction:
    """Decode a raw (possibly typed) transaction; its hash is that of the input."""
    data = bytes(data)
    if not data:
        raise RLPError("expecting 1 byte but 0 byte provided")
    tx = Transaction(hash=Hash(keccak256(data)))
    if data[0] <= 0x7F:
        if data[0] not in (TransactionType.ACCESS_LIST, TransactionType.DYNAMIC_FEE):
            raise RLPError(f"type byte {data[0]} not found")
        tx.type = TransactionType(data[0])
        data = data[1:]

    elems = _as_list(rlp.decode(data))
    expected = _TX_FIELD_COUNTS[tx.type]
    if len(elems) != expected:
        raise RLPError(
            f"not enough elements to decode transaction, expected {expected} but found {len(elems)}"
        )

    items = iter(elems)
    typed = tx.type != TransactionType.LEGACY
    if typed:
        tx.chain_id = _as_bigint(next(items))
    tx.nonce = _as_uint64(next(items))
    if tx.type == TransactionType.DYNAMIC_FEE:
        tx.max_priority_fee_per_gas = _as_bigint(next(items))
        tx.max_fee_per_gas = _as_bigint(next(items))
    else:
        tx.gas_price = _as_uint64(next(items))
    tx.gas = _as_uint64(next(items))
    to_item = next(items)
    if isinstance(to_item, bytes) and len(to_item) == Address.size:
        tx.to = Address(to_item)
    tx.value = _as_bigint(next(items))
    tx.input = _as_bytes(next(items))
    if typed:
        tx.access_list = _access_list_from_item(next(items))
    tx.v = _as_bytes(next(items))
    tx.r = _as_bytes(next(items))
    tx.s = _as_bytes(next(items))
    return tx


@dataclass
class Block:
    number: int = 0
    hash: Hash = field(default_factory=Hash)
    parent_hash: Hash = field(default_factory=Hash)
    sha3_uncles: Hash = field(default_factory=Hash)
    transactions_root: Hash = field(default_factory=Hash)
    state_root: Hash = field(default_factory=Hash)
    receipts_root: Hash = field(default_factory=Hash)
    miner: Address = field(default_factory=Address)
    gas_limit: int = 0
    gas_used: int = 0
    timestamp: int = 0
    difficulty: Optional[int] = None
    extra_data: bytes = b""
    mix_hash: Hash = field(default_factory=Hash)
    nonce: bytes = bytes(8)
    uncles: list[Hash] = field(default_factory=list)
    transactions_hashes: list[Hash] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)

    def to_json(self) -> str:
        obj: dict = {
            "number": _hex_num(self.number),
            "hash": str(self.hash),
            "parentHash": str(self.parent_hash),
            "sha3Uncles": str(self.sha3_uncles),
            "transactionsRoot": str(self.transactions_root),
            "stateRoot": str(self.state_root),
            "receiptsRoot": str(self.receipts_root),
            "miner": str(self.miner),
            "gasLimit": _hex_num(self.gas_limit),
            "gasUsed": _hex_num(self.gas_used),
            "timestamp": _hex_num(self.timestamp),
            "difficulty": _hex_num(self.difficulty or 0),
            "extraData": _hex_bytes(self.extra_data),
            "mixHash": _hex_bytes(self.mix_hash),
            "nonce": _hex_bytes(self.nonce),
        }
        if self.uncles:
            obj["uncles"] = [str(uncle) for uncle in self.uncles]
        if self.transactions_hashes:
            obj["transactions"] = [str(txn) for txn in self.transactions_hashes]
        if self.transactions:
            obj["transactions"] = [txn._json_value() for txn in self.transactions]
        return _dumps(obj)


@dataclass
class Receipt:
    from_: Address = field(default_factory=Address)
    to: Optional[Address] = None
    contract_address: Address = field(default_factory=Address)
    transaction_hash: Hash = field(default_factory=Hash)
    transaction_index: int = 0
    block_hash: Hash = field(default_factory=Hash)
    block_number: int = 0
    gas_used: int = 0
    cumulative_gas_used: int = 0
    logs_bloom: bytes = b""
    status: int = 0
    logs: list[Log] = field(default_factory=list)


@dataclass
class CallMsg:
    from_: Address = field(default_factory=Address)
    to: Optional[Address] = None
    data: bytes = b""
    gas_price: int = 0
    value: Optional[int] = None
    gas: Optional[int] = None

    def to_json(self) -> str:
        obj: dict = {"from": str(self.from_)}
        if self.to is not None:
            obj["to"] = str(self.to)
        if self.data:
            obj["data"] = _hex_bytes(self.data)
        if self.gas_price:
            obj["gasPrice"] = _hex_num(self.gas_price)
        if self.value is not None:
            obj["value"] = _hex_num(self.value)
        if self.gas is not None:
            obj["gas"] = _hex_num(self.gas)
        return _dumps(obj)


@dataclass
class LogFilter:
    address: list[Address] = field(default_factory=list)
    topics: Optional[list[Optional[list[Optional[Hash]]]]] = None
    block_hash: Optional[Hash] = None
    from_block: Optional[BlockNumber] = None
    to_block: Optional[BlockNumber] = None

    def set_from(self, number: int) -> None:
        self.from_block = BlockNumber(number)

    def set_to(self, number: int) -> None:
        self.to_block = BlockNumber(number)

    def to_json(self) -> str:
        obj: dict = {}
        if len(self.address) == 1:
            obj["address"] = str(self.address[0])
        elif self.address:
            obj["address"] = [str(addr) for addr in self.address]
        obj["topics"] = [
            None if position is None
            else [None if topic is None else str(topic) for topic in position]
            for position in (self.topics or [])
        ]
        if self.block_hash is not None:
            obj["blockHash"] = str(self.block_hash)
        if self.from_block is not None:
            obj["fromBlock"] = str(BlockNumber(self.from_block))
        if self.to_block is not None:
            obj["toBlock"] = str(BlockNumber(self.to_block))
        return _dumps(obj)


@dataclass
class OverrideAccount:
    nonce: Optional[int] = None
    code: Optional[bytes] = None
    balance: Optional[int] = None
    state: Optional[dict[Hash, Hash]] = None
    state_diff: Optional[dict[Hash, Hash]] = None


class StateOverride(dict):
    """A mapping of Address to OverrideAccount used in call overrides."""

    def to_json(self) -> str:
        obj: dict = {}
        for addr, account in self.items():
            entry: dict = {}
            if account.nonce is not None:
                entry["nonce"] = _hex_num(account.nonce)
            if account.balance is not None:
                entry["balance"] = _hex_num(account.balance)
            if account.code is not None:
                entry["code"] = _hex_bytes(account.code)
            if account.state is not None:
                entry["state"] = {str(k): str(v) for k, v in account.state.items()}
            if account.state_diff is not None:
                entry["stateDiff"] = {str(k): str(v) for k, v in account.state_diff.items()}
            obj[str(addr)] = entry
        return _dumps(obj)