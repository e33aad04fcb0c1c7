"""
Public verification of evaluated signatures.

A verifier holding  f = {ℓ ↦ c_ℓ},  the signers' public keys
{X_id},  an aggregate  (γ, {μ_id})  and a claimed result *y* accepts
iff

    (1)  y == Σ_id μ_id
    (2)  e(γ, g2) == Π_id e( Σ_{ℓ ∈ id} c_ℓ · H(ℓ) + μ_id · g1 ,  X_id )

Equation (2) is checked as one multi-pairing

    e(γ, −g2) · Π_id e(A_id, X_id) == 1

with a single final exponentiation.  Together the two checks bind every
contributing share to its signer and label, the coefficients of *f*,
and the result *y*.

The outcome is a plain ``bool``.  Why a claim was rejected is logged at
DEBUG level and never returned, so callers cannot be used as an oracle.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .curve import G1Point, G2Point, Scalar, inner_product, pairing_product_is_one
from .errors import InvalidInput, MalformedEncoding, VerificationFailed
from .evaluation import AggregateSignature
from .keys import PublicKey
from .labels import Coefficient, LinearFunction
from .params import Params

logger = logging.getLogger(__name__)

KeyDirectory = Union[Mapping[bytes, PublicKey], Iterable[PublicKey]]


def _key_directory(public_keys: KeyDirectory) -> Dict[bytes, PublicKey]:
    if isinstance(public_keys, Mapping):
        return dict(public_keys)
    return {pk.signer_id: pk for pk in public_keys}


def _rejection_reason(
    params: Params,
    f: LinearFunction,
    keys: Mapping[bytes, PublicKey],
    signature: AggregateSignature,
    y: Scalar,
) -> Optional[str]:
    """``None`` when the claim verifies, otherwise a short reason."""
    if signature.result() != y:
        return "claimed result differs from the partial results"

    groups = f.by_signer()
    for sid, mu in signature.partials:
        if sid not in groups and not mu.is_zero():
            return "partial result for a signer outside the function"

    pairs: List[Tuple[G1Point, G2Point]] = [(signature.gamma, -params.g2)]
    for sid, terms in groups.items():
        pk = keys.get(sid)
        if pk is None or pk.signer_id != sid:
            return "no public key for a contributing signer"
        try:
            hashed = []
            for label, _ in terms:
                params.check_label(label)
                hashed.append(params.hash_label(label))
        except InvalidInput:
            return "label does not match the parameter set"
        a = inner_product([c for _, c in terms], hashed)
        a = a + signature.mu(sid) * params.g1
        pairs.append((a, pk.point))

    if not pairing_product_is_one(pairs):
        return "pairing equation does not hold"
    return None


def verify(
    params: Params,
    f: LinearFunction,
    public_keys: KeyDirectory,
    signature: AggregateSignature,
    result: Coefficient,
) -> bool:
    """
    Accept or reject the claim  "signature attests  f(m) = result".

    *public_keys* is either a mapping  id → PublicKey  or an iterable of
    ``PublicKey``.  Returns ``True`` or ``False``; never raises on a
    mismatching claim.
    """
    reason = _rejection_reason(
        params, f, _key_directory(public_keys), signature, Scalar.coerce(result),
    )
    if reason is not None:
        logger.debug("rejected: %s", reason)
        return False
    logger.debug("accepted claim over %d terms", len(f))
    return True


def verify_encoded(
    params: Params,
    f: LinearFunction,
    public_keys: KeyDirectory,
    signature: bytes,
    result: Coefficient,
) -> bool:
    """As :func:`verify` for a wire-encoded aggregate; malformed → ``False``."""
    try:
        aggregate = AggregateSignature.from_bytes(signature, params)
    except MalformedEncoding:
        logger.debug("rejected: malformed aggregate encoding")
        return False
    return verify(params, f, public_keys, aggregate, result)


class Verifier:
    """Parameters plus a directory of known public keys."""

    def __init__(
        self,
        params: Params,
        public_keys: KeyDirectory = (),
    ) -> None:
        self.params = params
        self._keys: Dict[bytes, PublicKey] = _key_directory(public_keys)

    def add_key(self, pk: PublicKey) -> None:
        self.params.check_id(pk.signer_id)
        self._keys[pk.signer_id] = pk

    @property
    def public_keys(self) -> Dict[bytes, PublicKey]:
        return dict(self._keys)

    def verify(
        self,
        f: LinearFunction,
        signature: AggregateSignature,
        result: Coefficient,
    ) -> bool:
        return verify(self.params, f, self._keys, signature, result)

    def verify_encoded(
        self,
        f: LinearFunction,
        signature: bytes,
        result: Coefficient,
    ) -> bool:
        return verify_encoded(self.params, f, self._keys, signature, result)

    def require(
        self,
        f: LinearFunction,
        signature: AggregateSignature,
        result: Coefficient,
    ) -> None:
        """Like :meth:`verify` but raise ``VerificationFailed`` on reject."""
        if not self.verify(f, signature, result):
            raise VerificationFailed()
