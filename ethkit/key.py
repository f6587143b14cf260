"""secp256k1 keys: deterministic signing, public-key recovery and addresses."""

from __future__ import annotations

import hashlib
import hmac
import secrets
from typing import Optional

from .structs import Address, keccak256

_P = 2**256 - 2**32 - 977
CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_HALF_ORDER = CURVE_ORDER >> 1
_G = (
    0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798,
    0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8,
)

_SIGNATURE_SIZE = 65

Point = tuple[int, int]
_Jacobian = tuple[int, int, int]
_INFINITY: _Jacobian = (1, 1, 0)


def _jacobian_double(pt: _Jacobian) -> _Jacobian:
    x, y, z = pt
    if z == 0 or y == 0:
        return _INFINITY
    ysq = y * y % _P
    s = 4 * x * ysq % _P
    m = 3 * x * x % _P
    nx = (m * m - 2 * s) % _P
    ny = (m * (s - nx) - 8 * ysq * ysq) % _P
    nz = 2 * y * z % _P
    return nx, ny, nz


def _jacobian_add(a: _Jacobian, b: _Jacobian) -> _Jacobian:
    if a[2] == 0:
        return b
    if b[2] == 0:
        return a
    x1, y1, z1 = a
    x2, y2, z2 = b
    z1sq = z1 * z1 % _P
    z2sq = z2 * z2 % _P
    u1 = x1 * z2sq % _P
    u2 = x2 * z1sq % _P
    s1 = y1 * z2sq * z2 % _P
    s2 = y2 * z1sq * z1 % _P
    if u1 == u2:
        return _jacobian_double(a) if s1 == s2 else _INFINITY
    h = (u2 - u1) % _P
    r = (s2 - s1) % _P
    h2 = h * h % _P
    h3 = h * h2 % _P
    u1h2 = u1 * h2 % _P
    nx = (r * r - h3 - 2 * u1h2) % _P
    ny = (r * (u1h2 - nx) - s1 * h3) % _P
    nz = h * z1 * z2 % _P
    return nx, ny, nz


def _jacobian_multiply(k: int, pt: Point) -> _Jacobian:
    result = _INFINITY
    addend: _Jacobian = (pt[0], pt[1], 1)
    while k:
        if k & 1:
            result = _jacobian_add(result, addend)
        addend = _jacobian_double(addend)
        k >>= 1
    return result


def _to_affine(pt: _Jacobian) -> Optional[Point]:
    x, y, z = pt
    if z == 0:
        return None
    zinv = pow(z, -1, _P)
    zinv2 = zinv * zinv % _P
    return x * zinv2 % _P, y * zinv2 * zinv % _P


def _multiply(k: int, pt: Point) -> Optional[Point]:
    return _to_affine(_jacobian_multiply(k, pt))


def _hash_to_int(digest: bytes) -> int:
    return int.from_bytes(bytes(digest)[:32], "big")


def _address_of(point: Point) -> Address:
    x, y = point
    return Address(keccak256(x.to_bytes(32, "big") + y.to_bytes(32, "big"))[12:])


def _mac(key: bytes, data: bytes) -> bytes:
    return hmac.new(key, data, hashlib.sha256).digest()


def _rfc6979_nonce(private_key: int, digest: bytes) -> int:
    z = _hash_to_int(digest)
    if z >= CURVE_ORDER:
        z -= CURVE_ORDER
    seed = private_key.to_bytes(32, "big") + z.to_bytes(32, "big")
    v = b"\x01" * 32
    k = b"\x00" * 32
    k = _mac(k, v + b"\x00" + seed)
    v = _mac(k, v)
    k = _mac(k, v + b"\x01" + seed)
    v = _mac(k, v)
    while True:
        v = _mac(k, v)
        candidate = int.from_bytes(v, "big")
        if 1 <= candidate < CURVE_ORDER:
            return candidate
        k = _mac(k, v + b"\x00")
        v = _mac(k, v)


def _decompress(x: int, odd: int) -> Point:
    y_squared = (pow(x, 3, _P) + 7) % _P
    y = pow(y_squared, (_P + 1) // 4, _P)
    if y * y % _P != y_squared:
        raise ValueError("invalid square root")
    if y & 1 != odd:
        y = _P - y
    return x, y


def _recover_point(r: int, s: int, recid: int, digest: bytes) -> Point:
    if not (0 < r < CURVE_ORDER and 0 < s < CURVE_ORDER):
        raise ValueError("signature values out of range")
    x = r + (recid // 2) * CURVE_ORDER
    if x >= _P:
        raise ValueError("calculated Rx is larger than curve P")
    point_r = _decompress(x, recid % 2)
    e = _hash_to_int(digest)
    r_inv = pow(r, -1, CURVE_ORDER)
    u1 = (-e * r_inv) % CURVE_ORDER
    u2 = s * r_inv % CURVE_ORDER
    q = _to_affine(_jacobian_add(_jacobian_multiply(u1, _G), _jacobian_multiply(u2, point_r)))
    if q is None:
        raise ValueError("recovered public key is the point at infinity")
    return q


class Key:
    """A secp256k1 private key together with its public key and address."""

    __slots__ = ("private_key", "public_key", "address")

    def __init__(self, private_key: int) -> None:
        if not 0 < private_key < CURVE_ORDER:
            raise ValueError("private key is out of range for secp256k1")
        self.private_key = private_key
        point = _multiply(private_key, _G)
        assert point is not None
        self.public_key: Point = point
        self.address: Address = _address_of(point)

    def __repr__(self) -> str:
        return f"Key(address={self.address})"

    def private_key_bytes(self) -> bytes:
        """Return the 32-byte big-endian private key."""
        return self.private_key.to_bytes(32, "big")

    def sign(self, digest: bytes) -> bytes:
        """Sign a digest, returning r || s || v with v the recovery bit (0 or 1)."""
        digest = bytes(digest)
        e = _hash_to_int(digest)
        k = _rfc6979_nonce(self.private_key, digest)
        point = _multiply(k, _G)
        assert point is not None
        r = point[0] % CURVE_ORDER
        if r == 0:
            raise ValueError("calculated R is zero")
        s = pow(k, -1, CURVE_ORDER) * (e + self.private_key * r) % CURVE_ORDER
        if s == 0:
            raise ValueError("calculated S is zero")
        if s > _HALF_ORDER:
            s = CURVE_ORDER - s

        for recid in range(4):
            try:
                if _recover_point(r, s, recid, digest) == self.public_key:
                    break
            except ValueError:
                continue
        else:
            raise ValueError("no valid solution for pubkey found")
        term = 1 if recid == 1 else 0
        return r.to_bytes(32, "big") + s.to_bytes(32, "big") + bytes([term])

    def sign_msg(self, msg: bytes) -> bytes:
        """Sign the Keccak-256 digest of msg."""
        return self.sign(keccak256(msg))


def generate_key() -> Key:
    """Create a key from a fresh random secp256k1 scalar."""
    return Key(secrets.randbelow(CURVE_ORDER - 1) + 1)


def parse_private_key(data: bytes) -> int:
    """Read a big-endian private key scalar, rejecting values outside the curve order."""
    value = int.from_bytes(bytes(data), "big")
    if not 0 < value < CURVE_ORDER:
        raise ValueError("private key is out of range for secp256k1")
    return value


def new_wallet_from_priv_key(data: bytes) -> Key:
    return Key(parse_private_key(data))


def recover_pubkey(signature: bytes, digest: bytes) -> Point:
    """Recover the (x, y) public key from a 65-byte r || s || v signature."""
    signature = bytes(signature)
    if len(signature) != _SIGNATURE_SIZE:
        raise ValueError(
            f"invalid compact signature size, expected {_SIGNATURE_SIZE} but found {len(signature)}"
        )
    recid = 1 if signature[-1] == 1 else 0
    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:64], "big")
    return _recover_point(r, s, recid, bytes(digest))


def ecrecover(digest: bytes, signature: bytes) -> Address:
    """Return the address that produced signature over digest."""
    return _address_of(recover_pubkey(signature, digest))


def ecrecover_msg(msg: bytes, signature: bytes) -> Address:
    return ecrecover(keccak256(msg), signature)