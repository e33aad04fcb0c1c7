"""
MKLHS: Multi-Key Linearly Homomorphic Signatures over BLS12-381.

Several mutually untrusting signers authenticate numeric data under
their own keys; an untrusted evaluator combines the signatures along a
linear function; anyone holding the signers' public keys checks the
combined result with one pairing-product equation.

- **Construction**: Aranha & Pagnin, "The Simplest Multi-key Linearly
  Homomorphic Signature Scheme" [LATINCRYPT 2019, ePrint 2019/830]
- **Label hash**: RFC 9380 ``BLS12381G1_XMD:SHA-256_SSWU_RO_``

Security: unforgeability in the Random Oracle Model under the
co-CDH assumption in the bilinear groups of BLS12-381.

Quick start
-----------
::

    from mklhs import Params, LinearFunction, keygen, sign, combine, verify

    pp = Params.default()
    sk_a, pk_a = keygen(pp)
    sk_b, pk_b = keygen(pp)

    la = pp.label(sk_a.signer_id, "dataset-1/item-0")
    lb = pp.label(sk_b.signer_id, "dataset-1/item-0")
    shares = {la: sign(pp, sk_a, la, 7), lb: sign(pp, sk_b, lb, 5)}

    f = LinearFunction({la: 3, lb: 2})
    sig, y = combine(f, shares)          # y == 31
    assert verify(pp, f, [pk_a, pk_b], sig, y)
"""

__version__ = "0.1.0"

# ── algebra ─────────────────────────────────────────────────────────────
from .curve import (
    Scalar,
    G1Point,
    G2Point,
    GTElement,
    ORDER,
    pairing,
    pairing_product_is_one,
)
from .hash import hash_to_g1, derive_tag

# ── parameters & labels ─────────────────────────────────────────────────
from .params import Params, CURVE_NAME, DEFAULT_DST, DEFAULT_ID_LENGTH
from .labels import Label, LinearFunction

# ── roles ───────────────────────────────────────────────────────────────
from .keys import SecretKey, PublicKey, keygen
from .signing import SignShare, Signer, sign
from .evaluation import (
    AggregateSignature,
    Evaluator,
    combine,
    combine_aggregates,
)
from .verification import Verifier, verify, verify_encoded

# ── protocol ────────────────────────────────────────────────────────────
from .protocol import MKLHSProtocol

# ── errors ──────────────────────────────────────────────────────────────
from .errors import (
    MKLHSError,
    InvalidParameters,
    RandomnessFailure,
    MalformedEncoding,
    InvalidInput,
    MissingSignature,
    VerificationFailed,
)

__all__ = [
    # version
    "__version__",
    # algebra
    "Scalar", "G1Point", "G2Point", "GTElement", "ORDER",
    "pairing", "pairing_product_is_one", "hash_to_g1", "derive_tag",
    # parameters & labels
    "Params", "CURVE_NAME", "DEFAULT_DST", "DEFAULT_ID_LENGTH",
    "Label", "LinearFunction",
    # roles
    "SecretKey", "PublicKey", "keygen",
    "SignShare", "Signer", "sign",
    "AggregateSignature", "Evaluator", "combine", "combine_aggregates",
    "Verifier", "verify", "verify_encoded",
    # protocol
    "MKLHSProtocol",
    # errors
    "MKLHSError", "InvalidParameters", "RandomnessFailure",
    "MalformedEncoding", "InvalidInput", "MissingSignature",
    "VerificationFailed",
]
