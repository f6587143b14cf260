import pytest

from ethkit.mock import MockClient, MockList, compare_blocks, compare_logs, mock
from ethkit.structs import LATEST, PENDING, Block, Hash, LogFilter, hex_to_hash


def _scenario(count=5, log_every=1):
    blocks = MockList()
    blocks.create(0, count, lambda b: b.log("0x01") if b.number % log_every == 0 else None)
    client = MockClient()
    client.add_scenario(blocks)
    return client, blocks


def test_mock_hash_from_number():
    assert mock(5).hash() == hex_to_hash("5")
    assert mock(5).extra("1").hash() == hex_to_hash("15")


def test_parent_sets_number_and_parent_hash():
    block = mock(0x30).parent(2).block()
    assert block.number == 3
    assert block.parent_hash == hex_to_hash("2")
    assert block.hash == hex_to_hash("48")


def test_genesis_block_has_zero_parent():
    assert mock(0).block().parent_hash == Hash()


def test_num_overrides_number():
    assert mock(7).num(9).number == 9


def test_block_logs_carry_block_data():
    block = mock(4).log("0x01").log("0x02")
    logs = block.get_logs()
    assert [log.data for log in logs] == [b"\x01", b"\x02"]
    assert all(log.block_hash == block.hash() for log in logs)
    assert all(log.block_number == 4 for log in logs)


def test_mock_list_create_and_convert():
    blocks = MockList()
    blocks.create(2, 6, lambda b: None)
    assert [b.number for b in blocks] == [2, 3, 4, 5]
    assert [b.number for b in blocks.to_blocks()] == [2, 3, 4, 5]


def test_chain_id_default_and_override():
    client = MockClient()
    assert client.chain_id() == 1337
    client.set_chain_id(1)
    assert client.chain_id() == 1


def test_scenario_links_parents():
    client, _ = _scenario()
    assert client.block_number() == 4
    for number in range(1, 5):
        block = client.get_block_by_number(number, False)
        parent = client.get_block_by_number(number - 1, False)
        assert block.parent_hash == parent.hash
        assert client.get_block_by_hash(block.hash, False) is block


def test_latest_and_unsupported_tags():
    client, _ = _scenario()
    assert client.get_block_by_number(LATEST, False).number == 4
    with pytest.raises(ValueError):
        client.get_block_by_number(PENDING, False)
    assert MockClient().get_block_by_number(LATEST, False).number == 0


def test_missing_blocks_raise():
    client, _ = _scenario()
    with pytest.raises(LookupError):
        client.get_block_by_hash(hex_to_hash("ff"), False)
    with pytest.raises(LookupError):
        client.get_block_by_number(10, False)


def test_get_logs_by_range_and_hash():
    client, blocks = _scenario()
    log_filter = LogFilter()
    log_filter.set_from(1)
    log_filter.set_to(3)
    logs = client.get_logs(log_filter)
    assert [log.block_number for log in logs] == [1, 2, 3]

    by_hash = LogFilter(block_hash=blocks[2].hash())
    assert client.get_logs(by_hash) == blocks[2].get_logs()


def test_get_logs_errors():
    client, _ = _scenario()
    backwards = LogFilter()
    backwards.set_from(3)
    backwards.set_to(1)
    with pytest.raises(ValueError):
        client.get_logs(backwards)
    too_far = LogFilter()
    too_far.set_from(0)
    too_far.set_to(50)
    with pytest.raises(ValueError):
        client.get_logs(too_far)


def test_last_blocks():
    client, _ = _scenario()
    assert [b.number for b in client.get_last_blocks(3)] == [2, 3, 4]
    assert [b.number for b in client.get_last_blocks(20)] == [0, 1, 2, 3, 4]
    assert MockClient().get_last_blocks(3) == []


def test_all_logs_match_scenario():
    client, blocks = _scenario(log_every=2)
    assert compare_logs(client.get_all_logs(), blocks.get_logs())


def test_fork_replaces_logs():
    client, _ = _scenario()
    fork = MockList()
    fork.create(0, 5, lambda b: b.extra("9").log("0x03") if b.number >= 3 else b.log("0x01"))
    client.add_scenario(fork)
    assert compare_logs(client.get_all_logs(), fork.get_logs())
    assert client.get_block_by_number(3, False).hash == fork[3].hash()


def test_compare_logs():
    a = mock(1).log("0x01").get_logs()
    b = mock(1).log("0x01").get_logs()
    assert compare_logs(a, b)
    assert compare_logs([], [])
    assert not compare_logs(a, [])
    assert not compare_logs(a, mock(1).log("0x02").get_logs())


def test_compare_blocks_ignores_difficulty():
    one = [Block(number=1, difficulty=5)]
    two = [Block(number=1)]
    assert compare_blocks(one, two)
    assert one[0].difficulty == 0
    assert not compare_blocks([Block(number=1)], [Block(number=2)])
    assert not compare_blocks([Block()], [])