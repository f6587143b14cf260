import pytest
from hypothesis import given
from hypothesis import strategies as st

from ethkit.rlp import RLPError, decode, encode

items = st.recursive(
    st.binary(max_size=80),
    lambda children: st.lists(children, max_size=5),
    max_leaves=20,
)


def test_short_string_wire_format():
    assert encode(b"dog") == b"\x83dog"


def test_empty_list_and_empty_string():
    assert encode([]) == b"\xc0"
    assert encode(b"") == b"\x80"


def test_single_low_byte_is_its_own_encoding():
    assert encode(b"\x01") == b"\x01"
    assert decode(b"\x01") == b"\x01"


def test_integers_encode_as_big_endian_bytes():
    assert encode(0) == encode(b"")
    assert encode(1024) == encode(b"\x04\x00")


def test_negative_integer_rejected():
    with pytest.raises(ValueError):
        encode(-1)


def test_unsupported_type_rejected():
    with pytest.raises(TypeError):
        encode(1.5)


@given(items)
def test_round_trip(item):
    assert decode(encode(item)) == item


@given(st.binary(min_size=56, max_size=300))
def test_long_strings_round_trip(data):
    encoded = encode(data)
    assert encoded.endswith(data)
    assert decode(encoded) == data


def test_decode_empty_input_fails():
    with pytest.raises(RLPError):
        decode(b"")


def test_trailing_bytes_rejected():
    with pytest.raises(RLPError):
        decode(encode(b"dog") + b"\x00")


def test_truncated_input_rejected():
    with pytest.raises(RLPError):
        decode(encode(b"a longer value")[:-1])


def test_non_canonical_single_byte_rejected():
    with pytest.raises(RLPError):
        decode(b"\x81\x01")


def test_non_canonical_long_length_rejected():
    with pytest.raises(RLPError):
        decode(b"\xb8\x01a")


def test_list_item_overrunning_list_rejected():
    # list claims one byte of payload, but its element needs more
    with pytest.raises(RLPError):
        decode(b"\xc1\x82ab")