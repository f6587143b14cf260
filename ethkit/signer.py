"""EIP-155 transaction signing and sender recovery."""

from __future__ import annotations

from dataclasses import dataclass

from . import rlp
from .key import Key, ecrecover
from .structs import Address, Transaction, TransactionType, keccak256

_UINT64_MASK = (1 << 64) - 1


def trim_bytes_zeros(data: bytes) -> bytes:
    """Drop leading zero bytes."""
    return bytes(data).lstrip(b"\x00")


def _access_list_item(tx: Transaction) -> list:
    return [
        [bytes(entry.address), [bytes(key) for key in entry.storage]]
        for entry in tx.access_list or []
    ]


def sign_hash(tx: Transaction, chain_id: int) -> bytes:
    """Return the digest a signer signs for tx on the given chain."""
    typed = tx.type != TransactionType.LEGACY
    fields: list = []
    if typed:
        fields.append(tx.chain_id or 0)
    fields.append(tx.nonce)
    if tx.type == TransactionType.DYNAMIC_FEE:
        fields.append(tx.max_priority_fee_per_gas or 0)
        fields.append(tx.max_fee_per_gas or 0)
    else:
        fields.append(tx.gas_price)
    fields.append(tx.gas)
    fields.append(b"" if tx.to is None else bytes(tx.to))
    fields.append(tx.value or 0)
    fields.append(bytes(tx.input))
    if typed:
        fields.append(_access_list_item(tx))
    if chain_id != 0 and not typed:
        fields.extend([chain_id, 0, 0])

    payload = rlp.encode(fields)
    if typed:
        payload = bytes([int(tx.type)]) + payload
    return keccak256(payload)


def _encode_signature(r: bytes, s: bytes, v: int) -> bytes:
    if len(r) > 32 or len(s) > 32:
        raise ValueError("signature values longer than 32 bytes")
    return bytes(r).rjust(32, b"\x00") + bytes(s).rjust(32, b"\x00") + bytes([v])


@dataclass(frozen=True)
class EIP155Signer:
    """Signs transactions for one chain, with replay protection on legacy ones."""

    chain_id: int

    def sign_tx(self, tx: Transaction, key: Key) -> Transaction:
        """Fill in the v, r and s fields of tx and return it."""
        digest = sign_hash(tx, self.chain_id)
        signature = key.sign(digest)

        v = signature[64]
        if tx.type == TransactionType.LEGACY:
            v = (v + 35 + self.chain_id * 2) & _UINT64_MASK

        tx.r = trim_bytes_zeros(signature[:32])
        tx.s = trim_bytes_zeros(signature[32:64])
        tx.v = v.to_bytes((v.bit_length() + 7) // 8, "big")
        return tx

    def recover_sender(self, tx: Transaction) -> Address:
        """Return the address that signed tx."""
        v = int.from_bytes(bytes(tx.v), "big") & _UINT64_MASK
        if v > 1:
            v = (v - 27) & _UINT64_MASK
            if v > 1:
                v = (v - self.chain_id * 2) & _UINT64_MASK
                v = (v - 8) & _UINT64_MASK
        signature = _encode_signature(tx.r, tx.s, v & 0xFF)
        return ecrecover(sign_hash(tx, self.chain_id), signature)