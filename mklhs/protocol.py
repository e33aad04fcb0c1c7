"""
High-level MKLHS orchestration.

Provides a single ``MKLHSProtocol`` class that ties key generation,
signing, evaluation and verification together behind one object.  It
plays every role in one process, which is what integration tests and
benchmarks want; real deployments run each role separately with the
functions in :mod:`mklhs.signing`, :mod:`mklhs.evaluation` and
:mod:`mklhs.verification`.

Usage
-----
::

    from mklhs import MKLHSProtocol, LinearFunction

    proto = MKLHSProtocol.setup(num_signers=2)
    alice, bob = proto.signer_ids

    la = proto.sign(alice, "reading-1", 7)
    lb = proto.sign(bob, "reading-1", 5)

    f = LinearFunction({la: 3, lb: 2})
    sig, y = proto.evaluate(f)          # y == 31
    assert proto.verify(f, sig, y)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from .curve import RandBytes, Scalar
from .errors import InvalidInput
from .evaluation import AggregateSignature, Evaluator
from .keys import PublicKey
from .labels import Coefficient, Label, LinearFunction
from .params import Params
from .signing import Signer
from .verification import Verifier

logger = logging.getLogger(__name__)


class MKLHSProtocol:
    """
    End-to-end MKLHS protocol.

    Encapsulates the full lifecycle:
    1. Setup: fix parameters, generate one key pair per signer.
    2. Sign: each signer authenticates labelled values.
    3. Evaluate: combine shares along a linear function.
    4. Verify: one pairing-product check against the public keys.
    """

    def __init__(
        self,
        params: Optional[Params] = None,
        randbytes: Optional[RandBytes] = None,
    ) -> None:
        self.params = params or Params.default()
        self._randbytes = randbytes
        self._signers: Dict[bytes, Signer] = {}
        self._evaluator = Evaluator()
        self._verifier = Verifier(self.params)

    # ── factories ──────────────────────────────────────────────────────

    @classmethod
    def setup(
        cls,
        num_signers: int,
        params: Optional[Params] = None,
        randbytes: Optional[RandBytes] = None,
    ) -> MKLHSProtocol:
        """Create an instance with *num_signers* freshly keyed signers."""
        if num_signers < 1:
            raise ValueError("need at least one signer")
        proto = cls(params, randbytes)
        for _ in range(num_signers):
            proto.add_signer()
        return proto

    def add_signer(self, signer_id: Optional[bytes] = None) -> Signer:
        if signer_id is not None and signer_id in self._signers:
            raise InvalidInput("signer identity already registered")
        signer = Signer.generate(
            self.params, randbytes=self._randbytes, signer_id=signer_id,
        )
        if signer.signer_id in self._signers:
            raise InvalidInput("randomness produced a duplicate identity")
        self._signers[signer.signer_id] = signer
        self._verifier.add_key(signer.public_key)
        logger.debug("registered signer %s", signer.signer_id.hex()[:8])
        return signer

    # ── signing ────────────────────────────────────────────────────────

    def signer(self, signer_id: bytes) -> Signer:
        try:
            return self._signers[signer_id]
        except KeyError:
            raise InvalidInput("unknown signer") from None

    def label(self, signer_id: bytes, item: Any) -> Label:
        return self.signer(signer_id).label(item)

    def sign(self, signer_id: bytes, item: Any, value: Coefficient) -> Label:
        """Sign *value* as *item* of *signer_id*; the share goes to the evaluator."""
        label, share = self.signer(signer_id).sign(item, value)
        self._evaluator.add(label, share)
        return label

    # ── evaluation / verification ──────────────────────────────────────

    def evaluate(self, f: LinearFunction) -> Tuple[AggregateSignature, Scalar]:
        return self._evaluator.evaluate(f)

    def verify(
        self,
        f: LinearFunction,
        signature: AggregateSignature,
        result: Coefficient,
    ) -> bool:
        return self._verifier.verify(f, signature, result)

    # ── accessors ──────────────────────────────────────────────────────

    @property
    def signer_ids(self) -> List[bytes]:
        return list(self._signers)

    @property
    def public_keys(self) -> Dict[bytes, PublicKey]:
        return self._verifier.public_keys

    @property
    def verifier(self) -> Verifier:
        return self._verifier

    def __repr__(self) -> str:
        return f"MKLHSProtocol({len(self._signers)} signers)"
