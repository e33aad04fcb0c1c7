"""
Key management.

Every signer runs :func:`keygen` on its own; no coordination or shared
secret between signers is needed.  That independence is what makes the
scheme *multi-key*: a verifier simply looks up each contributing
signer's public key by identity.

    sk = (id, x),   x ←$ Z_r \\ {0}
    pk = (id, X),   X = x · g2
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Tuple

from .curve import Scalar, G2Point, RandBytes, SCALAR_BYTES, G2_BYTES, random_bytes
from .errors import MalformedEncoding
from .params import Params

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublicKey:
    """Public key  (id, X = x·g2);  wire form  id ‖ X."""

    signer_id: bytes
    point: G2Point

    def to_bytes(self) -> bytes:
        return self.signer_id + self.point.to_bytes()

    @classmethod
    def from_bytes(cls, data: bytes, params: Params) -> PublicKey:
        k = params.id_length
        if len(data) != k + G2_BYTES:
            raise MalformedEncoding(
                f"public key needs {k + G2_BYTES} bytes, got {len(data)}"
            )
        point = G2Point.from_bytes(data[k:])
        if point.is_identity():
            raise MalformedEncoding("public key is the identity")
        return cls(signer_id=bytes(data[:k]), point=point)

    def __repr__(self) -> str:
        return f"PublicKey({self.signer_id.hex()[:8]}…)"


class SecretKey:
    """
    Secret key  (id, x).

    The scalar lives behind a lock so that a concurrent :meth:`clear`
    and a signing operation never observe a half-scrubbed key.  Use as a
    context manager to scrub on exit; a key that is garbage collected
    is scrubbed as well.  Scrubbing is best-effort in Python: it drops
    the only reference this object holds.
    """

    __slots__ = ("_id", "_x", "_lock")

    def __init__(self, signer_id: bytes, value: Scalar) -> None:
        if value.is_zero():
            raise ValueError("secret scalar must be non-zero")
        self._id = signer_id
        self._x: Optional[Scalar] = value
        self._lock = threading.Lock()

    @property
    def signer_id(self) -> bytes:
        return self._id

    def secret_scalar(self) -> Scalar:
        """The scalar *x*; raises ``RuntimeError`` once cleared."""
        with self._lock:
            x = self._x
        if x is None:
            raise RuntimeError("secret key has been cleared")
        return x

    def public_key(self, params: Params) -> PublicKey:
        return PublicKey(self._id, self.secret_scalar() * params.g2)

    def clear(self) -> None:
        """Overwrite the secret (best-effort in Python)."""
        with self._lock:
            self._x = None

    @property
    def is_cleared(self) -> bool:
        with self._lock:
            return self._x is None

    def __enter__(self) -> SecretKey:
        return self

    def __exit__(self, *exc_info) -> None:
        self.clear()

    def __del__(self) -> None:
        # the lock is missing when __init__ rejected the scalar
        if getattr(self, "_lock", None) is not None:
            self.clear()

    # serialisation ----------------------------------------------------------
    def to_bytes(self) -> bytes:
        """``id ‖ x``; the only export of the secret."""
        return self._id + self.secret_scalar().to_bytes()

    @classmethod
    def from_bytes(cls, data: bytes, params: Params) -> SecretKey:
        k = params.id_length
        if len(data) != k + SCALAR_BYTES:
            raise MalformedEncoding(
                f"secret key needs {k + SCALAR_BYTES} bytes, got {len(data)}"
            )
        x = Scalar.from_bytes(data[k:])
        if x.is_zero():
            raise MalformedEncoding("secret scalar is zero")
        return cls(bytes(data[:k]), x)

    def __repr__(self) -> str:
        state = "cleared" if self.is_cleared else "<redacted>"
        return f"SecretKey({self._id.hex()[:8]}…, {state})"


def keygen(
    params: Params,
    randbytes: Optional[RandBytes] = None,
    signer_id: Optional[bytes] = None,
) -> Tuple[SecretKey, PublicKey]:
    """
    Sample a fresh key pair.

    Parameters
    ----------
    params : Params
        Public parameters (supplies *g2* and the identity length).
    randbytes : callable, optional
        ``n -> bytes`` entropy source; defaults to ``secrets.token_bytes``.
        Any failure surfaces as ``RandomnessFailure`` and is not retried.
    signer_id : bytes, optional
        Use this identity instead of a random one.
    """
    if signer_id is None:
        signer_id = random_bytes(params.id_length, randbytes)
    else:
        params.check_id(signer_id)

    x = Scalar.random(randbytes)
    sk = SecretKey(signer_id, x)
    pk = PublicKey(signer_id, x * params.g2)

    logger.debug("generated key pair for signer %s", signer_id.hex())
    return sk, pk
