"""
Exception hierarchy for MKLHS.

Each error also derives from the built-in type callers would naturally
catch (``ValueError``, ``RuntimeError``, ``LookupError``), so code that
predates this module keeps working.  No message ever carries secret key
material.
"""

from __future__ import annotations

from typing import Any


class MKLHSError(Exception):
    """Base class for every error raised by this package."""


class InvalidParameters(MKLHSError, ValueError):
    """Malformed curve identifier, generator, DST or identity length."""


class RandomnessFailure(MKLHSError, RuntimeError):
    """The entropy source failed.  Fatal: never retried or downgraded."""


class MalformedEncoding(MKLHSError, ValueError):
    """A byte string does not decode to a valid scalar or group element."""


class InvalidInput(MKLHSError, ValueError):
    """A caller broke an operation's contract (not a cryptographic failure)."""


class MissingSignature(MKLHSError, LookupError):
    """The evaluator holds no signature for a label named by the function."""

    def __init__(self, label: Any) -> None:
        super().__init__(f"no signature for label {label!r}")
        self.label = label


class VerificationFailed(MKLHSError):
    """
    Raised only by :meth:`mklhs.verification.Verifier.require`.

    :func:`mklhs.verification.verify` reports rejection as ``False``; the
    reason is deliberately not carried here.
    """

    def __init__(self) -> None:
        super().__init__("signature does not verify")
