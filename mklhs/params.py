"""
Public parameters for MKLHS.

A :class:`Params` value fixes everything signers, evaluators and
verifiers must agree on: the curve, the generators *g1* and *g2*, the
domain separation tag of the label hash *H*, and the byte length *K*
of signer identities and label tags.  It is immutable and always passed
explicitly, so differently configured instances (say a test DST next to
a production one) never interfere.

Wire form::

    len(curve) ‖ curve ‖ g1 (48) ‖ g2 (96) ‖ len(dst) ‖ dst ‖ K
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .curve import G1Point, G2Point, G1_BYTES, G2_BYTES
from .errors import InvalidInput, InvalidParameters, MalformedEncoding
from .hash import check_dst, derive_tag, hash_to_g1
from .labels import Label

CURVE_NAME = "BLS12-381"
DEFAULT_DST = b"MKLHS-V01-CS01-with-BLS12381G1_XMD:SHA-256_SSWU_RO_"
DEFAULT_ID_LENGTH = 32
MAX_ID_LENGTH = 32


@dataclass(frozen=True)
class Params:
    """Immutable public parameters (see module docstring)."""

    dst: bytes = DEFAULT_DST
    id_length: int = DEFAULT_ID_LENGTH
    g1: G1Point = field(default_factory=G1Point.generator)
    g2: G2Point = field(default_factory=G2Point.generator)
    curve: str = CURVE_NAME

    def __post_init__(self) -> None:
        if self.curve != CURVE_NAME:
            raise InvalidParameters(f"unsupported curve {self.curve!r}")
        check_dst(self.dst)
        if isinstance(self.id_length, bool) or not isinstance(self.id_length, int):
            raise InvalidParameters("id_length must be an int")
        if not 1 <= self.id_length <= MAX_ID_LENGTH:
            raise InvalidParameters(
                f"id_length must be 1..{MAX_ID_LENGTH}, got {self.id_length}"
            )
        if not isinstance(self.g1, G1Point) or self.g1.is_identity():
            raise InvalidParameters("g1 must be a non-identity G1 point")
        if not isinstance(self.g2, G2Point) or self.g2.is_identity():
            raise InvalidParameters("g2 must be a non-identity G2 point")

    @classmethod
    def default(cls) -> Params:
        return cls()

    # ── label handling ─────────────────────────────────────────────────

    def hash_label(self, label: Label) -> G1Point:
        """H(ℓ) ∈ G1 under this parameter set's DST."""
        return hash_to_g1(label.to_bytes(), self.dst)

    def label(self, signer_id: bytes, item: Any) -> Label:
        """
        Build the label of *item* for *signer_id*.

        ``bytes`` of exactly ``id_length`` are used verbatim as the tag;
        anything else (ints, strings, other bytes, tuples) is hashed into a
        tag with :func:`mklhs.hash.derive_tag`, whose encoding is
        type-tagged, so ``7``, ``"7"`` and ``b"7"`` name different items.
        """
        self.check_id(signer_id)
        if isinstance(item, bytes) and len(item) == self.id_length:
            tag = item
        else:
            try:
                tag = derive_tag(item, self.id_length)
            except TypeError as exc:
                raise InvalidInput(str(exc)) from exc
        return Label(signer_id=signer_id, tag=tag)

    def check_id(self, signer_id: bytes) -> None:
        if not isinstance(signer_id, bytes) or len(signer_id) != self.id_length:
            raise InvalidInput(
                f"signer identities are {self.id_length} bytes"
            )

    def check_label(self, label: Label) -> None:
        self.check_id(label.signer_id)
        if not isinstance(label.tag, bytes) or len(label.tag) != self.id_length:
            raise InvalidInput(f"label tags are {self.id_length} bytes")

    # ── serialisation ──────────────────────────────────────────────────

    def to_bytes(self) -> bytes:
        curve = self.curve.encode("ascii")
        return (
            len(curve).to_bytes(1, "big")
            + curve
            + self.g1.to_bytes()
            + self.g2.to_bytes()
            + len(self.dst).to_bytes(1, "big")
            + self.dst
            + self.id_length.to_bytes(1, "big")
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> Params:
        """Decode; every defect is reported as ``InvalidParameters``."""
        try:
            pos = 0
            n = data[pos]
            pos += 1
            curve = data[pos: pos + n].decode("ascii")
            pos += n
            if curve != CURVE_NAME:
                raise InvalidParameters(f"unsupported curve {curve!r}")
            g1 = G1Point.from_bytes(data[pos: pos + G1_BYTES])
            pos += G1_BYTES
            g2 = G2Point.from_bytes(data[pos: pos + G2_BYTES])
            pos += G2_BYTES
            n = data[pos]
            pos += 1
            dst = bytes(data[pos: pos + n])
            if len(dst) != n:
                raise InvalidParameters("DST truncated")
            pos += n
            id_length = data[pos]
            pos += 1
        except (IndexError, UnicodeDecodeError, MalformedEncoding) as exc:
            raise InvalidParameters("malformed parameter encoding") from exc
        if pos != len(data):
            raise InvalidParameters("trailing bytes after parameters")
        return cls(dst=dst, id_length=id_length, g1=g1, g2=g2, curve=curve)
