"""Recursive Length Prefix (RLP) encoding and decoding."""

from __future__ import annotations

from typing import Union

Item = Union[bytes, list]


class RLPError(ValueError):
    """Raised when data is not valid, canonical RLP or has the wrong shape."""


def _length_prefix(length: int, offset: int) -> bytes:
    if length <= 55:
        return bytes([offset + length])
    encoded = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([offset + 55 + len(encoded)]) + encoded


def encode(item) -> bytes:
    """Encode bytes, non-negative integers and (nested) lists of them."""
    if isinstance(item, bool):
        raise TypeError("cannot RLP-encode a bool")
    if isinstance(item, int):
        if item < 0:
            raise ValueError("cannot RLP-encode a negative integer")
        item = item.to_bytes((item.bit_length() + 7) // 8, "big")
    if isinstance(item, (bytes, bytearray, memoryview)):
        data = bytes(item)
        if len(data) == 1 and data[0] < 0x80:
            return data
        return _length_prefix(len(data), 0x80) + data
    if isinstance(item, (list, tuple)):
        payload = b"".join(encode(elem) for elem in item)
        return _length_prefix(len(payload), 0xC0) + payload
    raise TypeError(f"cannot RLP-encode {type(item).__name__}")


def decode(data) -> Item:
    """Decode one RLP item; lists come back as lists, strings as bytes."""
    data = bytes(data)
    if not data:
        raise RLPError("cannot decode empty input")
    item, end = _decode_item(data, 0, len(data))
    if end != len(data):
        raise RLPError(f"{len(data) - end} trailing bytes after RLP item")
    return item


def _decode_item(data: bytes, pos: int, limit: int) -> tuple[Item, int]:
    if pos >= limit:
        raise RLPError("unexpected end of input")
    prefix = data[pos]
    if prefix < 0x80:
        return data[pos:pos + 1], pos + 1

    is_list = prefix >= 0xC0
    short = prefix - (0xC0 if is_list else 0x80)
    if short <= 55:
        start = pos + 1
        length = short
    else:
        size = short - 55
        start = pos + 1 + size
        if start > limit:
            raise RLPError("truncated length field")
        length_bytes = data[pos + 1:start]
        if length_bytes[0] == 0:
            raise RLPError("length field has leading zeros")
        length = int.from_bytes(length_bytes, "big")
        if length <= 55:
            raise RLPError("non-canonical long length")

    end = start + length
    if end > limit:
        raise RLPError(f"item of length {length} exceeds the available input")

    if not is_list:
        value = data[start:end]
        if length == 1 and value[0] < 0x80:
            raise RLPError("non-canonical single byte encoding")
        return value, end

    items: list = []
    cursor = start
    while cursor < end:
        elem, cursor = _decode_item(data, cursor, end)
        items.append(elem)
    return items, end