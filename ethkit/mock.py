"""An in-memory chain used to drive the tracker and its tests."""

from __future__ import annotations

import threading
from typing import Callable, Optional

from .structs import LATEST, Block, BlockNumber, Hash, Log, LogFilter

_DEFAULT_CHAIN_ID = 1337


def _decode_data(text: str) -> bytes:
    if text.startswith("0x"):
        text = text[2:]
    if len(text) % 2 == 1:
        text = text + "0"
    return bytes.fromhex(text)


def _encode_hash(text: str) -> Hash:
    if len(text) > 64:
        raise ValueError(f"'{text}' is too long for a hash")
    return Hash(bytes.fromhex(text.rjust(64, "0")))


class MockBlock:
    """A block description whose hash is built from its number and extra data."""

    def __init__(self, hash_text: str, num: int, parent: str) -> None:
        self._hash = hash_text
        self._extra = ""
        self._parent = parent
        self._num = num
        self._logs: list[str] = []

    def __repr__(self) -> str:
        return f"MockBlock(num={self._num}, hash={self.hash()})"

    @property
    def number(self) -> int:
        return self._num

    def extra(self, data: str) -> "MockBlock":
        self._extra = data
        return self

    def log(self, data: str) -> "MockBlock":
        self._logs.append(data)
        return self

    def num(self, number: int) -> "MockBlock":
        self._num = number
        return self

    def parent(self, number: int) -> "MockBlock":
        self._parent = str(number)
        self._num = number + 1
        return self

    def hash(self) -> Hash:
        return _encode_hash(self._extra + self._hash)

    def get_logs(self) -> list[Log]:
        block_hash = self.hash()
        return [
            Log(data=_decode_data(data), block_number=self._num, block_hash=block_hash)
            for data in self._logs
        ]

    def block(self) -> Block:
        block = Block(hash=self.hash(), number=self._num)
        if self._num != 0:
            block.parent_hash = _encode_hash(self._parent)
        return block


def mock(number: int) -> MockBlock:
    return MockBlock(str(number), number, str(number - 1))


class MockList(list):
    """A list of MockBlock items."""

    def create(self, start: int, stop: int, callback: Callable[[MockBlock], object]) -> None:
        for number in range(start, stop):
            block = mock(number)
            callback(block)
            self.append(block)

    def get_logs(self) -> list[Log]:
        return [log for block in self for log in block.get_logs()]

    def to_blocks(self) -> list[Block]:
        return [block.block() for block in self]


class MockClient:
    """A provider answering from blocks and logs added by scenarios."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._num = 0
        self._block_num: dict[int, Hash] = {}
        self._blocks: dict[Hash, Block] = {}
        self._logs: dict[Hash, list[Log]] = {}
        self._chain_id: Optional[int] = None

    def set_chain_id(self, chain_id: int) -> None:
        self._chain_id = chain_id

    def chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = _DEFAULT_CHAIN_ID
        return self._chain_id

    def get_last_blocks(self, n: int) -> list[Block]:
        if self._num == 0:
            return []
        count = n if self._num >= n else self._num + 1
        return [
            self._blocks[self._block_num[self._num - back]]
            for back in range(count - 1, -1, -1)
        ]

    def get_all_logs(self) -> list[Log]:
        if self._num == 0:
            return []
        result: list[Log] = []
        for number in range(self._num + 1):
            block = self._blocks[self._block_num[number]]
            result.extend(self._logs.get(block.hash, []))
        return result

    def add_scenario(self, blocks) -> None:
        with self._lock:
            for item in blocks:
                block = Block(hash=item.hash(), number=item.number)
                if item.number != 0:
                    try:
                        previous = self._block_by_number(item.number - 1)
                    except LookupError:
                        # partial histories have no previous block
                        block.parent_hash = _encode_hash(str(item.number - 1))
                    else:
                        block.parent_hash = previous.hash
                self._add_blocks(block)
                self._logs.pop(block.hash, None)
                self.add_logs(item.get_logs())

    def add_logs(self, logs) -> None:
        with self._lock:
            for log in logs:
                self._logs.setdefault(log.block_hash, []).append(log)

    def _add_blocks(self, *blocks: Block) -> None:
        for block in blocks:
            if block.number > self._num:
                self._num = block.number
            self._blocks[block.hash] = block
            self._block_num[block.number] = block.hash

    def _block_by_number(self, number: int) -> Block:
        block_hash = self._block_num.get(number)
        if block_hash is None:
            raise LookupError(f"number {number} not found")
        return self._blocks[block_hash]

    def block_number(self) -> int:
        with self._lock:
            return self._num

    def get_block_by_hash(self, block_hash: Hash, full: bool) -> Block:
        with self._lock:
            block = self._blocks.get(block_hash)
            if block is None:
                raise LookupError(f"hash {block_hash} not found")
            return block

    def get_block_by_number(self, number, full: bool) -> Block:
        with self._lock:
            number = BlockNumber(number)
            if number < 0:
                if number == LATEST:
                    if self._num == 0:
                        return Block(number=0)
                    return self._block_by_number(self._num)
                raise ValueError("getBlockByNumber query not supported")
            return self._block_by_number(int(number))

    def get_logs(self, log_filter: LogFilter) -> list[Log]:
        with self._lock:
            if log_filter.block_hash is not None:
                return list(self._logs.get(log_filter.block_hash, []))

            start, stop = int(log_filter.from_block), int(log_filter.to_block)
            if start > stop:
                raise ValueError("from higher than to")
            if stop > len(self._blocks):
                raise ValueError("out of bounds")

            result: list[Log] = []
            for number in range(start, stop + 1):
                block = self._block_by_number(number)
                result.extend(self._logs.get(block.hash, []))
            return result


def compare_logs(one: list[Log], two: list[Log]) -> bool:
    if len(one) != len(two):
        return False
    return list(one) == list(two)


def compare_blocks(one: list[Block], two: list[Block]) -> bool:
    """Compare blocks ignoring difficulty, which is reset to zero on both sides."""
    if len(one) != len(two):
        return False
    if not one:
        return True
    for block in (*one, *two):
        if block.transactions is None:
            block.transactions = []
        block.difficulty = 0
    return list(one) == list(two)