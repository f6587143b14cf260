import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from ethkit.key import CURVE_ORDER, Key, generate_key, new_wallet_from_priv_key
from ethkit.signer import EIP155Signer, sign_hash, trim_bytes_zeros
from ethkit.structs import Address, Transaction, TransactionType, bytes_to_address


@settings(max_examples=20, deadline=None)
@given(
    typed=st.booleans(),
    to=st.one_of(st.none(), st.binary(max_size=32)),
    chain_id=st.integers(min_value=0, max_value=2**64 - 1),
    scalar=st.integers(min_value=1, max_value=CURVE_ORDER - 1),
)
def test_sign_and_recover(typed, to, chain_id, scalar):
    txn = Transaction()
    if to is not None:
        txn.to = bytes_to_address(to)
    if typed:
        txn.type = TransactionType.ACCESS_LIST

    signer = EIP155Signer(chain_id)
    key = Key(scalar)

    signed = signer.sign_tx(txn, key)
    assert signer.recover_sender(signed) == key.address


def test_sign_eip155():
    signer = EIP155Signer(1337)
    addr0 = Address(b"\x01" + bytes(19))
    key = generate_key()

    txn = Transaction(to=addr0, value=10, gas_price=0)
    txn = signer.sign_tx(txn, key)
    assert signer.recover_sender(txn) == key.address


@pytest.mark.parametrize(
    "data, expected",
    [
        (bytes([0x1, 0x2]), bytes([0x1, 0x2])),
        (bytes([0x0, 0x1]), bytes([0x1])),
        (bytes([0x0, 0x0]), b""),
    ],
)
def test_trim_bytes_zeros(data, expected):
    assert trim_bytes_zeros(data) == expected


def _eip155_example() -> Transaction:
    return Transaction(
        nonce=9,
        gas_price=20 * 10**9,
        gas=21000,
        to=Address(b"\x35" * 20),
        value=10**18,
        v=bytes([0x25]),
        r=bytes.fromhex("28ef61340bd939bc2195fe537567866003e1a15d3c71ff63e1590620aa636276"),
        s=bytes.fromhex("67cbe9d8997f761aecb703304b3800ccf555c9f3dc64214b297fb1966a3b6d83"),
    )


def test_eip155_example_signing_hash():
    digest = sign_hash(_eip155_example(), 1)
    assert digest.hex() == "daf5a779ae972f972197303d7b574746c7ef83eadac0f2791ad23db92e4c8e53"


def test_eip155_example_recovers_sender():
    key = new_wallet_from_priv_key(b"\x46" * 32)
    assert EIP155Signer(1).recover_sender(_eip155_example()) == key.address


def test_eip155_example_raw_encoding():
    raw = _eip155_example().marshal_rlp()
    assert raw.hex() == (
        "f86c098504a817c800825208943535353535353535353535353535353535353535"
        "880de0b6b3a76400008025a028ef61340bd939bc2195fe537567866003e1a15d3c"
        "71ff63e1590620aa636276a067cbe9d8997f761aecb703304b3800ccf555c9f3dc"
        "64214b297fb1966a3b6d83"
    )


def test_legacy_v_carries_chain_id():
    key = generate_key()
    txn = EIP155Signer(1337).sign_tx(Transaction(nonce=1, gas=21000), key)
    assert int.from_bytes(txn.v, "big") - 35 - 2 * 1337 in (0, 1)


def test_typed_v_is_recovery_bit():
    key = generate_key()
    txn = Transaction(type=TransactionType.DYNAMIC_FEE, chain_id=5, max_fee_per_gas=3)
    signer = EIP155Signer(5)
    signer.sign_tx(txn, key)
    assert txn.v in (b"", b"\x01")
    assert signer.recover_sender(txn) == key.address


def test_typed_hash_ignores_signer_chain():
    txn = Transaction(type=TransactionType.ACCESS_LIST, chain_id=5, nonce=3)
    assert sign_hash(txn, 1) == sign_hash(txn, 5)


def test_legacy_hash_depends_on_chain():
    txn = Transaction(nonce=3)
    assert sign_hash(txn, 0) != sign_hash(txn, 1)
    assert len(sign_hash(txn, 0)) == 32


def test_signed_tx_round_trips_through_rlp():
    key = generate_key()
    signer = EIP155Signer(5)
    txn = signer.sign_tx(Transaction(nonce=2, gas=21000, value=7), key)
    assert txn.get_hash() == txn.get_hash()
    assert signer.recover_sender(txn) == key.address


def test_recover_rejects_oversized_r():
    txn = Transaction(v=b"\x25", r=bytes(33), s=b"\x01")
    with pytest.raises(ValueError):
        EIP155Signer(1).recover_sender(txn)