"""Decoding of JSON-RPC objects into the core chain data types."""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from .structs import (
    AccessEntry,
    AccessList,
    Address,
    Block,
    BlockNumber,
    Hash,
    Log,
    LogFilter,
    Receipt,
    Transaction,
    TransactionType,
)

_UNSIGNED_HEX = re.compile(r"[0-9a-fA-F]+")
_SIGNED_HEX = re.compile(r"[+-]?[0-9a-fA-F]+")

_UINT64_LIMIT = 1 << 64
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1

_NONCE_SIZE = 8
_BLOOM_SIZE = 256


class DecodeError(ValueError):
    """Raised when a JSON object cannot be decoded into a chain data type."""


def _parse(raw) -> dict:
    try:
        value = json.loads(raw)
    except (ValueError, TypeError) as exc:
        raise DecodeError(f"invalid JSON input: {exc}") from exc
    return _expect_object(value)


def _expect_object(value: Any) -> dict:
    if not isinstance(value, dict):
        raise DecodeError("expected a JSON object")
    return value


def _text(value: Any) -> str:
    text = value if isinstance(value, str) else json.dumps(value)
    return text.strip('"')


def _hex_digits(obj: dict, key: str) -> str:
    if key not in obj:
        raise DecodeError(f"field '{key}' not found")
    text = _text(obj[key])
    if not text.startswith("0x"):
        raise DecodeError(f"field '{key}' does not have 0x prefix: '{text}'")
    return text[2:]


def _uint(obj: dict, key: str) -> int:
    digits = _hex_digits(obj, key) or "0"
    if not _UNSIGNED_HEX.fullmatch(digits):
        raise DecodeError(f"field '{key}' failed to decode uint: {digits}")
    value = int(digits, 16)
    if value >= _UINT64_LIMIT:
        raise DecodeError(f"field '{key}' failed to decode uint: {digits}")
    return value


def _int64(obj: dict, key: str) -> int:
    digits = _hex_digits(obj, key) or "0"
    if not _SIGNED_HEX.fullmatch(digits):
        raise DecodeError(f"field '{key}' failed to decode int64: {digits}")
    value = int(digits, 16)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise DecodeError(f"field '{key}' failed to decode int64: {digits}")
    return value


def _bigint(obj: dict, key: str) -> int:
    digits = _hex_digits(obj, key)
    if not _SIGNED_HEX.fullmatch(digits):
        raise DecodeError(f"field '{key}' failed to decode big int: '0x{digits}'")
    return int(digits, 16)


def _bytes(obj: dict, key: str, size: Optional[int] = None) -> bytes:
    digits = _hex_digits(obj, key)
    if len(digits) % 2:
        digits = "0" + digits
    try:
        data = bytes.fromhex(digits)
    except ValueError as exc:
        raise DecodeError(f"field '{key}' is not valid hex: {digits}") from exc
    if size is not None and len(data) != size:
        raise DecodeError(
            f"field '{key}' invalid length, expected {size} but found {len(data)}: {digits}"
        )
    return data


def _bool(obj: dict, key: str) -> bool:
    if key not in obj:
        raise DecodeError(f"field '{key}' not found")
    value = obj[key]
    if value is True or value is False:
        return value
    raise DecodeError(f"field '{key}' with content '{json.dumps(value)}' cannot be decoded as bool")


def _fixed_bytes(text: str, size: int) -> bytes:
    text = text.strip('"')
    if not text.startswith("0x"):
        raise DecodeError("0x prefix not found")
    try:
        data = bytes.fromhex(text[2:])
    except ValueError as exc:
        raise DecodeError(f"invalid hex: {text}") from exc
    if len(data) != size:
        raise DecodeError(f"length {len(data)} is not correct, expected {size}")
    return data


def _require_str(value: Any) -> str:
    if not isinstance(value, str):
        raise DecodeError(f"value {json.dumps(value)} is not a string")
    return value


def _hash_text(value: Any) -> Hash:
    return Hash(_fixed_bytes(_require_str(value), Hash.size))


def _address_text(value: Any) -> Address:
    return Address(_fixed_bytes(_require_str(value), Address.size))


def _string_field(obj: dict, key: str) -> str:
    value = obj.get(key)
    if not isinstance(value, str) or not value:
        raise DecodeError(f"field '{key}' not found")
    return value


def _hash(obj: dict, key: str) -> Hash:
    return Hash(_fixed_bytes(_string_field(obj, key), Hash.size))


def _address(obj: dict, key: str) -> Address:
    return Address(_fixed_bytes(_string_field(obj, key), Address.size))


def _nonce(obj: dict, key: str) -> bytes:
    return _fixed_bytes(_string_field(obj, key), _NONCE_SIZE)


def _is_set(obj: dict, key: str) -> bool:
    return obj.get(key) is not None


def _array(obj: dict, key: str) -> list:
    value = obj.get(key)
    return value if isinstance(value, list) else []


def _optional_to(obj: dict) -> Optional[Address]:
    if _is_set(obj, "to"):
        return _address(obj, "to")
    return None


def _access_list_from(value: Any) -> AccessList:
    if not isinstance(value, list):
        raise DecodeError("accessList is not an array")
    result = AccessList()
    for elem in value:
        elem = _expect_object(elem)
        address = _address(elem, "address")
        keys = elem.get("storageKeys")
        if not isinstance(keys, list):
            raise DecodeError("storageKeys is not an array")
        result.append(AccessEntry(address=address, storage=[_hash_text(key) for key in keys]))
    return result


def _transaction_from(obj: Any) -> Transaction:
    obj = _expect_object(obj)
    if _is_set(obj, "chainId"):
        if _is_set(obj, "maxFeePerGas"):
            typ = TransactionType.DYNAMIC_FEE
        else:
            typ = TransactionType.ACCESS_LIST
    else:
        typ = TransactionType.LEGACY

    tx = Transaction(type=typ)
    tx.hash = _hash(obj, "hash")
    tx.from_ = _address(obj, "from")
    tx.gas_price = _uint(obj, "gasPrice")
    tx.input = _bytes(obj, "input")
    tx.value = _bigint(obj, "value")
    tx.nonce = _uint(obj, "nonce")
    tx.to = _optional_to(obj)
    tx.v = _bytes(obj, "v")
    tx.r = _bytes(obj, "r")
    tx.s = _bytes(obj, "s")

    if typ != TransactionType.LEGACY:
        tx.chain_id = _bigint(obj, "chainId")
        if _is_set(obj, "accessList"):
            tx.access_list = _access_list_from(obj["accessList"])

    tx.gas = _uint(obj, "gas")

    if typ == TransactionType.DYNAMIC_FEE:
        tx.max_priority_fee_per_gas = _bigint(obj, "maxPriorityFeePerGas")
        tx.max_fee_per_gas = _bigint(obj, "maxFeePerGas")

    # only sealed transactions carry block metadata
    if _is_set(obj, "blockHash"):
        tx.block_hash = _hash(obj, "blockHash")
        tx.block_number = _uint(obj, "blockNumber")
        tx.txn_index = _uint(obj, "transactionIndex")
    return tx


def _log_from(obj: Any) -> Log:
    obj = _expect_object(obj)
    log = Log()
    if "removed" in obj:
        log.removed = _bool(obj, "removed")
    log.log_index = _uint(obj, "logIndex")
    log.block_number = _uint(obj, "blockNumber")
    log.transaction_index = _uint(obj, "transactionIndex")
    log.transaction_hash = _hash(obj, "transactionHash")
    if "blockHash" in obj:
        log.block_hash = _hash(obj, "blockHash")
    log.address = _address(obj, "address")
    log.data = _bytes(obj, "data")
    log.topics = [_hash_text(topic) for topic in _array(obj, "topics")]
    return log


def decode_block(raw) -> Block:
    """Decode a block from its JSON-RPC form, with either hashes or full transactions."""
    obj = _parse(raw)
    block = Block()
    block.hash = _hash(obj, "hash")
    block.parent_hash = _hash(obj, "parentHash")
    block.sha3_uncles = _hash(obj, "sha3Uncles")
    block.transactions_root = _hash(obj, "transactionsRoot")
    block.state_root = _hash(obj, "stateRoot")
    block.receipts_root = _hash(obj, "receiptsRoot")
    block.miner = _address(obj, "miner")
    block.number = _uint(obj, "number")
    block.gas_limit = _uint(obj, "gasLimit")
    block.gas_used = _uint(obj, "gasUsed")
    block.mix_hash = _hash(obj, "mixHash")
    block.nonce = _nonce(obj, "nonce")
    block.timestamp = _uint(obj, "timestamp")
    block.difficulty = _bigint(obj, "difficulty")
    block.extra_data = _bytes(obj, "extraData")

    elems = _array(obj, "transactions")
    if elems:
        if isinstance(elems[0], str):
            block.transactions_hashes = [_hash_text(elem) for elem in elems]
        else:
            block.transactions = [_transaction_from(elem) for elem in elems]

    block.uncles = [_hash_text(elem) for elem in _array(obj, "uncles")]
    return block


def decode_transaction(raw) -> Transaction:
    """Decode a transaction, detecting its type from the fields present."""
    return _transaction_from(_parse(raw))


def decode_receipt(raw) -> Receipt:
    """Decode a transaction receipt with its logs."""
    obj = _parse(raw)
    receipt = Receipt()
    receipt.from_ = _address(obj, "from")
    if _is_set(obj, "contractAddress"):
        receipt.contract_address = _address(obj, "contractAddress")
    receipt.transaction_hash = _hash(obj, "transactionHash")
    receipt.block_hash = _hash(obj, "blockHash")
    receipt.transaction_index = _uint(obj, "transactionIndex")
    receipt.block_number = _uint(obj, "blockNumber")
    receipt.gas_used = _uint(obj, "gasUsed")
    receipt.cumulative_gas_used = _uint(obj, "cumulativeGasUsed")
    receipt.logs_bloom = _bytes(obj, "logsBloom", _BLOOM_SIZE)
    if "status" in obj:
        # only present after the byzantium fork
        receipt.status = _uint(obj, "status")
    receipt.to = _optional_to(obj)
    receipt.logs = [_log_from(elem) for elem in _array(obj, "logs")]
    return receipt


def decode_log(raw) -> Log:
    """Decode a single log entry."""
    return _log_from(_parse(raw))


def decode_log_filter(raw) -> LogFilter:
    """Decode a log filter, accepting one address or a list of them."""
    try:
        obj = _parse(raw)
    except DecodeError as exc:
        raise DecodeError(f"unable to parse input, {exc}") from exc

    log_filter = LogFilter()
    addresses = [_address_text(value) for value in _array(obj, "address")]
    single = obj.get("address")
    if isinstance(single, str):
        addresses.append(_address_text(single))
    log_filter.address = addresses

    if "blockHash" in obj:
        log_filter.block_hash = _hash(obj, "blockHash")
    if "fromBlock" in obj:
        log_filter.from_block = BlockNumber(_int64(obj, "fromBlock"))
    if "toBlock" in obj:
        log_filter.to_block = BlockNumber(_int64(obj, "toBlock"))

    topics: list = []
    for position in _array(obj, "topics"):
        if position is None:
            topics.append(None)
            continue
        if not isinstance(position, list):
            raise DecodeError("topic position is not an array")
        topics.append([_hash_text(topic) for topic in position])
    if topics:
        log_filter.topics = topics
    return log_filter