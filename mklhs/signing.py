"""
Signing of individual labelled data items.

A signer with key  (id, x)  authenticates value *m* under its label
ℓ = (id, τ)  as

    γ = x · (H(ℓ) + m · g1)        μ = m

and publishes the share  σ = (id, γ, μ).  The pairing check

    e(γ, g2) == e(H(ℓ) + μ · g1, X)

holds for an honest share; the evaluator and verifier extend it
linearly (see :mod:`mklhs.evaluation`, :mod:`mklhs.verification`).

Labels must never be reused by one key for two different values.
:func:`sign` is stateless and leaves that bookkeeping to the caller;
:class:`Signer` tracks the labels it has issued and refuses reuse.

References
----------
- Aranha, Pagnin (2019). "The Simplest Multi-key Linearly Homomorphic
  Signature Scheme."  LATINCRYPT 2019, ePrint 2019/830.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .curve import Scalar, G1Point, RandBytes, SCALAR_BYTES, G1_BYTES
from .errors import InvalidInput, MalformedEncoding
from .keys import PublicKey, SecretKey, keygen
from .labels import Coefficient, Label
from .params import Params

logger = logging.getLogger(__name__)


# ── data structures ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class SignShare:
    """One signer's signature on one labelled value."""

    signer_id: bytes
    gamma: G1Point       # γ = x · (H(ℓ) + m · g1)
    mu: Scalar           # μ = m

    def to_bytes(self) -> bytes:
        """``id ‖ γ (48) ‖ μ (32)``."""
        return self.signer_id + self.gamma.to_bytes() + self.mu.to_bytes()

    @classmethod
    def from_bytes(cls, data: bytes, params: Params) -> SignShare:
        k = params.id_length
        if len(data) != k + G1_BYTES + SCALAR_BYTES:
            raise MalformedEncoding(
                f"signature needs {k + G1_BYTES + SCALAR_BYTES} bytes, "
                f"got {len(data)}"
            )
        return cls(
            signer_id=bytes(data[:k]),
            gamma=G1Point.from_bytes(data[k: k + G1_BYTES]),
            mu=Scalar.from_bytes(data[k + G1_BYTES:]),
        )


# ── signing ─────────────────────────────────────────────────────────────

def sign(
    params: Params,
    sk: SecretKey,
    label: Label,
    message: Coefficient,
) -> SignShare:
    """
    Sign value *message* under *label* with *sk*.

    Any ``int`` is accepted and reduced mod *r*; there is no failure
    mode for well-formed inputs.  Raises ``InvalidInput`` when the label
    has the wrong shape or belongs to another signer.
    """
    params.check_label(label)
    if label.signer_id != sk.signer_id:
        raise InvalidInput("label belongs to a different signer")

    m = Scalar.coerce(message)
    h = params.hash_label(label)
    gamma = sk.secret_scalar() * (h + m * params.g1)

    return SignShare(signer_id=sk.signer_id, gamma=gamma, mu=m)


# ── signer ──────────────────────────────────────────────────────────────

class Signer:
    """
    A single signer: its key pair plus the labels it has issued.

    Signing the same item twice with the same value is allowed (the
    result is identical); with a different value it is refused.
    """

    def __init__(
        self,
        params: Params,
        secret_key: SecretKey,
        public_key: Optional[PublicKey] = None,
    ) -> None:
        self.params = params
        self._sk = secret_key
        self._pk = public_key or secret_key.public_key(params)
        if self._pk.signer_id != secret_key.signer_id:
            raise InvalidInput("public key belongs to a different signer")

        self._issued: Dict[Label, Scalar] = {}
        self._lock = threading.Lock()

    @classmethod
    def generate(
        cls,
        params: Params,
        randbytes: Optional[RandBytes] = None,
        signer_id: Optional[bytes] = None,
    ) -> Signer:
        sk, pk = keygen(params, randbytes=randbytes, signer_id=signer_id)
        return cls(params, sk, pk)

    @property
    def signer_id(self) -> bytes:
        return self._pk.signer_id

    @property
    def public_key(self) -> PublicKey:
        return self._pk

    def label(self, item: Any) -> Label:
        return self.params.label(self.signer_id, item)

    def sign(self, item: Any, value: Coefficient) -> Tuple[Label, SignShare]:
        """Label *item* and sign *value* under that label."""
        label = item if isinstance(item, Label) else self.label(item)
        self.params.check_label(label)
        if label.signer_id != self.signer_id:
            raise InvalidInput("label belongs to a different signer")
        m = Scalar.coerce(value)

        with self._lock:
            previous = self._issued.get(label)
            if previous is not None and previous != m:
                raise InvalidInput(
                    f"label {label!r} already signed with a different value"
                )
            share = sign(self.params, self._sk, label, m)
            self._issued[label] = m

        logger.debug("signer %s signed %r", self.signer_id.hex()[:8], label)
        return label, share

    @property
    def issued_labels(self) -> Tuple[Label, ...]:
        with self._lock:
            return tuple(self._issued)

    def close(self) -> None:
        """Scrub the secret key; further signing raises ``RuntimeError``."""
        self._sk.clear()

    def __repr__(self) -> str:
        return f"Signer({self.signer_id.hex()[:8]}…, {len(self._issued)} labels)"
