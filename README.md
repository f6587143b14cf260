# ethkit

Building blocks for working with Ethereum data in Python.

- **Core types** (`ethkit.structs`): `Address`, `Hash`, `BlockNumber`,
  `TransactionType`, `Transaction`, `Block`, `Log`, `Receipt`, `CallMsg`,
  `LogFilter`, `AccessList`, `OverrideAccount` and `StateOverride`.
  Most have a `to_json()` method giving their JSON-RPC form. Transactions
  and access lists also encode to RLP (`Transaction.marshal_rlp`,
  `Transaction.get_hash`, `AccessList.marshal_rlp`) and decode from it
  (`decode_transaction_rlp`, `decode_access_list_rlp`). `str(Address)`
  gives the checksummed form. Helpers: `keccak256`, `hex_to_address`,
  `hex_to_hash`, `bytes_to_address`, `bytes_to_hash`.
- **RLP** (`ethkit.rlp`): `encode` accepts bytes, non-negative integers and
  nested lists. `decode` accepts only canonical input and raises `RLPError`
  on anything else.
- **JSON decoding** (`ethkit.decoding`): `decode_block`,
  `decode_transaction`, `decode_receipt`, `decode_log` and
  `decode_log_filter` turn JSON-RPC objects into the core types. They raise
  `DecodeError` on bad input. A transaction's type is taken from the fields
  that are present.
- **Units** (`ethkit.units`): `ether` and `gwei` convert whole amounts to wei.
- **Keys** (`ethkit.key`): secp256k1 `Key` objects with deterministic
  signing (`sign`, `sign_msg`) and `private_key_bytes`. Also
  `generate_key`, `parse_private_key`, `new_wallet_from_priv_key`,
  `recover_pubkey`, `ecrecover` and `ecrecover_msg`.
- **Transaction signing** (`ethkit.signer`): `EIP155Signer(chain_id)` signs
  legacy, access-list and dynamic-fee transactions with `sign_tx` and
  recovers their sender with `recover_sender`. `sign_hash` gives the digest
  that is signed.
- **Log stores**: key/value settings plus ordered, truncatable log entries.
  All follow the `Store` / `Entry` interface of `ethkit.store`.
  - `ethkit.inmem.InmemStore` keeps everything in memory.
  - `ethkit.filestore.FileStore(path)` keeps everything in one SQLite file.
  - `ethkit.sqlstore.SQLStore(connection, paramstyle="qmark")` works over
    any DB-API 2 connection. `paramstyle` may be `qmark`, `format`,
    `pyformat` or `numeric`.

  Stores work as context managers and close on exit.
- **Test helpers**:
  - `ethkit.mock` provides an in-memory chain made of `MockClient`,
    `MockBlock`, `MockList` and `mock`, along with `compare_logs` and
    `compare_blocks`.
  - `ethkit.contract` builds the Solidity source of a sample contract with
    events: `Contract`, `Event`, `new_event` and `method_sig`.

## Installing

```
pip install ethkit
```

To run the test suite:

```
pip install "ethkit[test]"
pytest
```

## Examples

Converting units:

```python
from ethkit.units import ether, gwei

assert ether(1) == 10**18
assert gwei(3) == 3 * 10**9
```

Signing a message and recovering the signer:

```python
from ethkit.key import generate_key, ecrecover_msg

key = generate_key()
signature = key.sign_msg(b"hello world")
assert ecrecover_msg(b"hello world", signature) == key.address
```

Signing a transaction for a chain and getting its raw bytes:

```python
from ethkit.key import generate_key
from ethkit.signer import EIP155Signer
from ethkit.structs import Transaction, decode_transaction_rlp

key = generate_key()
signer = EIP155Signer(1337)

signed = signer.sign_tx(Transaction(value=10), key)
raw = signed.marshal_rlp()
assert signer.recover_sender(signed) == key.address
assert decode_transaction_rlp(raw).value == 10
```

Encoding a log to JSON and decoding it back:

```python
from ethkit.decoding import decode_log
from ethkit.structs import Log

log = Log(block_number=5, data=b"\x01")
assert decode_log(log.to_json()) == log
```

Keeping logs in a store:

```python
from ethkit.inmem import InmemStore
from ethkit.structs import Log

with InmemStore() as store:
    store.set("genesis", "0x00")
    entry = store.get_entry("my-filter")
    entry.store_logs([Log(block_number=1), Log(block_number=2)])
    assert entry.last_index() == 2
    entry.remove_logs(1)
    assert entry.get_log(0).block_number == 1
```

The same data kept in an SQL database:

```python
import sqlite3

from ethkit.sqlstore import SQLStore

store = SQLStore(sqlite3.connect(":memory:"))
store.set("val1", "a")
assert store.list_prefix("val") == ["a"]
```

Building a fake chain for tests:

```python
from ethkit.mock import MockClient, MockList

blocks = MockList()
blocks.create(0, 10, lambda b: b.log("0x01"))

client = MockClient()
client.add_scenario(blocks)
assert client.block_number() == 9
```

## What the package does not do

- It has no JSON-RPC client and does not talk to a node. `MockClient` is the
  only provider it includes.
- It has no log tracker that follows the chain or handles reorganisations.
  The stores only hold what they are given.
- It does not derive keys from mnemonics or HD derivation paths, and it does
  not read encrypted JSON key files. Keys come from raw private key bytes or
  from `generate_key`.
- `ethkit.contract` only writes Solidity source. It does not compile or
  deploy contracts.