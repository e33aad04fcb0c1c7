"""
Homomorphic evaluation of linear functions over signature shares.

Given  f = {ℓ_i ↦ c_i}  and shares  σ_i = (id_i, γ_i, μ_i), the
evaluator outputs

    γ    = Σ c_i · γ_i                    (in G1)
    μ_id = Σ_{i : id_i = id} c_i · μ_i    (one partial result per signer)
    y    = Σ c_i · μ_i  = Σ_id μ_id

The evaluator is untrusted and holds no key.  It must hold a share for
every label of *f*: a missing one raises ``MissingSignature`` and is
never skipped.  Zero coefficients contribute the identity.

Aggregates are themselves homomorphic: :func:`combine_aggregates`
combines already-combined signatures, which then verify against
``LinearFunction.compose`` of the underlying functions.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Tuple

from .curve import Scalar, G1Point, SCALAR_BYTES, G1_BYTES
from .errors import InvalidInput, MalformedEncoding, MissingSignature
from .labels import Coefficient, Label, LinearFunction
from .params import Params
from .signing import SignShare

logger = logging.getLogger(__name__)


# ── data structures ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class AggregateSignature:
    """
    Combined signature  (γ, {id ↦ μ_id}).

    ``partials`` is kept sorted by signer id; a signer absent from it
    has  μ_id = 0.  Unlike a single group element, the partials disclose
    each contributing signer's share  Σ c_ℓ · m_ℓ  of the result.
    """

    gamma: G1Point
    partials: Tuple[Tuple[bytes, Scalar], ...] = ()

    @classmethod
    def from_partials(
        cls,
        gamma: G1Point,
        partials: Mapping[bytes, Scalar],
    ) -> AggregateSignature:
        return cls(gamma=gamma, partials=tuple(sorted(partials.items())))

    @property
    def mus(self) -> Dict[bytes, Scalar]:
        return dict(self.partials)

    def mu(self, signer_id: bytes) -> Scalar:
        for sid, value in self.partials:
            if sid == signer_id:
                return value
        return Scalar.zero()

    def result(self) -> Scalar:
        """Σ_id μ_id, the value the aggregate attests to."""
        return sum((value for _, value in self.partials), Scalar.zero())

    # serialisation ----------------------------------------------------------
    def to_bytes(self) -> bytes:
        """``γ (48) ‖ n (4) ‖ (id ‖ μ_id)*n``."""
        out = bytearray(self.gamma.to_bytes())
        out += len(self.partials).to_bytes(4, "big")
        for sid, value in self.partials:
            out += sid
            out += value.to_bytes()
        return bytes(out)

    @classmethod
    def from_bytes(cls, data: bytes, params: Params) -> AggregateSignature:
        head = G1_BYTES + 4
        if len(data) < head:
            raise MalformedEncoding("aggregate signature truncated")
        gamma = G1Point.from_bytes(data[:G1_BYTES])
        n = int.from_bytes(data[G1_BYTES:head], "big")
        width = params.id_length + SCALAR_BYTES
        if len(data) != head + n * width:
            raise MalformedEncoding(
                f"aggregate of {n} signers needs {head + n * width} bytes, "
                f"got {len(data)}"
            )
        partials: Dict[bytes, Scalar] = {}
        for i in range(n):
            chunk = data[head + i * width: head + (i + 1) * width]
            sid = bytes(chunk[: params.id_length])
            if sid in partials:
                raise MalformedEncoding("duplicate signer in aggregate")
            partials[sid] = Scalar.from_bytes(chunk[params.id_length:])
        return cls.from_partials(gamma, partials)


# ── combination ─────────────────────────────────────────────────────────

def combine(
    f: LinearFunction,
    signatures: Mapping[Label, SignShare],
) -> Tuple[AggregateSignature, Scalar]:
    """
    Evaluate *f* over *signatures*; return the aggregate and  y = f(m).

    Raises
    ------
    MissingSignature
        If some label of *f* (zero coefficient or not) has no share.
    InvalidInput
        If a share under a non-zero coefficient was produced by a signer
        other than its label's owner.  Zero-coefficient terms are never
        inspected beyond the presence check.
    """
    points = []
    partials: Dict[bytes, Scalar] = {}
    y = Scalar.zero()

    for label, c in f:
        share = signatures.get(label)
        if share is None:
            raise MissingSignature(label)
        if c.is_zero():
            continue
        if share.signer_id != label.signer_id:
            raise InvalidInput(f"share for {label!r} is from another signer")
        points.append(c * share.gamma)
        term = c * share.mu
        partials[label.signer_id] = partials.get(label.signer_id, Scalar.zero()) + term
        y = y + term

    aggregate = AggregateSignature.from_partials(
        G1Point.sum_points(points), partials,
    )
    logger.debug(
        "combined %d terms from %d signers", len(points), len(partials),
    )
    return aggregate, y


def combine_aggregates(
    parts: Iterable[Tuple[AggregateSignature, Coefficient]],
) -> AggregateSignature:
    """
    Nested evaluation:  Σ a_j · σ_j.

    The result verifies against  ``LinearFunction.compose([(f_j, a_j)])``
    with result  Σ a_j · y_j.
    """
    points = []
    partials: Dict[bytes, Scalar] = {}
    for aggregate, a in parts:
        a = Scalar.coerce(a)
        if a.is_zero():
            continue
        points.append(a * aggregate.gamma)
        for sid, value in aggregate.partials:
            partials[sid] = partials.get(sid, Scalar.zero()) + a * value
    return AggregateSignature.from_partials(G1Point.sum_points(points), partials)


# ── evaluator ───────────────────────────────────────────────────────────

class Evaluator:
    """
    Collects signature shares and evaluates linear functions over them.

    Holds public data only and may be shared between threads; each
    evaluation works on a snapshot of the shares collected so far.
    """

    def __init__(
        self,
        shares: Optional[Mapping[Label, SignShare]] = None,
    ) -> None:
        self._shares: Dict[Label, SignShare] = dict(shares or {})
        self._lock = threading.Lock()

    def add(self, label: Label, share: SignShare) -> None:
        if share.signer_id != label.signer_id:
            raise InvalidInput(f"share for {label!r} is from another signer")
        with self._lock:
            self._shares[label] = share

    def extend(self, items: Iterable[Tuple[Label, SignShare]]) -> None:
        for label, share in items:
            self.add(label, share)

    def __contains__(self, label: object) -> bool:
        return label in self._shares

    def __len__(self) -> int:
        return len(self._shares)

    def evaluate(self, f: LinearFunction) -> Tuple[AggregateSignature, Scalar]:
        with self._lock:
            shares = dict(self._shares)
        return combine(f, shares)
