"""
Domain-separated hash functions for MKLHS.

Two kinds of hashing are needed:

* **Label hash**  H : {0,1}* → G1, the random oracle of the scheme.
  This is the standard RFC 9380 suite
  ``BLS12381G1_XMD:SHA-256_SSWU_RO_`` as implemented by py_ecc; the
  domain separation tag comes from :class:`mklhs.params.Params`, so two
  parameter sets never share an oracle.

* **Tagged hashes** for deriving fixed-length label tags from
  application names.  Convention follows BIP-340 tagged hashes:

      H_tag(x) = SHA-256( SHA-256(tag) ‖ SHA-256(tag) ‖ x )
"""

from __future__ import annotations

import hashlib
from typing import Any

from py_ecc.bls.hash_to_curve import hash_to_G1

from .curve import Scalar, G1Point
from .errors import InvalidParameters


# ── domain tags ─────────────────────────────────────────────────────────
_TAG_LABEL = b"MKLHS/v1/label_tag"

MAX_DST_BYTES = 255


# ── internal helpers ────────────────────────────────────────────────────
def _tagged_hasher(tag: bytes) -> "hashlib._Hash":
    """Return a SHA-256 context pre-loaded with the BIP-340 tag prefix."""
    tag_hash = hashlib.sha256(tag).digest()
    h = hashlib.sha256()
    h.update(tag_hash)
    h.update(tag_hash)
    return h


# ── item encoding ───────────────────────────────────────────────────────
# One type byte in front of every item keeps "ab", b"ab" and 0x6162
# apart.
_KIND_BYTES = b"\x01"
_KIND_STR = b"\x02"
_KIND_INT = b"\x03"
_KIND_SCALAR = b"\x04"
_KIND_SEQUENCE = b"\x05"
_KIND_BOOL = b"\x06"


def _encode_item(item: Any) -> bytes:
    """
    Canonical, type-tagged encoding of a hash input.

    Variable-length items (bytes, str, ints, lists) are length-prefixed
    so that concatenations parse unambiguously.
    """
    if isinstance(item, bytes):
        return _KIND_BYTES + len(item).to_bytes(4, "big") + item
    if isinstance(item, str):
        data = item.encode("utf-8")
        return _KIND_STR + len(data).to_bytes(4, "big") + data
    if isinstance(item, bool):
        return _KIND_BOOL + bytes([item])
    if isinstance(item, int):
        data = item.to_bytes((item.bit_length() + 8) // 8, "big", signed=True)
        return _KIND_INT + len(data).to_bytes(4, "big") + data
    if isinstance(item, Scalar):
        return _KIND_SCALAR + item.to_bytes()
    if isinstance(item, (list, tuple)):
        parts = b"".join(_encode_item(x) for x in item)
        return _KIND_SEQUENCE + len(item).to_bytes(4, "big") + parts
    raise TypeError(f"cannot hash {type(item).__name__}")


def tagged_hash(tag: bytes, *args: Any) -> bytes:
    """Compute BIP-340 tagged hash over arbitrary encodable items."""
    h = _tagged_hasher(tag)
    for a in args:
        h.update(_encode_item(a))
    return h.digest()


# ── public hash functions ───────────────────────────────────────────────

def derive_tag(item: Any, length: int) -> bytes:
    """
    Fixed-length label tag for an application-level item name.

    Truncated SHA-256, so *length* is at most 32 bytes.
    """
    if not 0 < length <= hashlib.sha256().digest_size:
        raise ValueError(f"tag length {length} out of range")
    return tagged_hash(_TAG_LABEL, item)[:length]


def check_dst(dst: bytes) -> None:
    """RFC 9380 requires a non-empty DST of at most 255 bytes."""
    if not isinstance(dst, bytes):
        raise InvalidParameters("DST must be bytes")
    if not 0 < len(dst) <= MAX_DST_BYTES:
        raise InvalidParameters(
            f"DST must be 1..{MAX_DST_BYTES} bytes, got {len(dst)}"
        )


def hash_to_g1(data: bytes, dst: bytes) -> G1Point:
    r"""
    Random-oracle hash  H(data) ∈ G1  (RFC 9380, SSWU, random-oracle
    variant).  Deterministic; different *dst* values give independent
    functions.
    """
    check_dst(dst)
    return G1Point(hash_to_G1(data, dst, hashlib.sha256))
