"""Shared fixtures for the MKLHS test-suite."""

import random

from mklhs import LinearFunction, Params, keygen, sign


def seeded(seed):
    """Deterministic ``n -> bytes`` source for reproducible keys."""
    return random.Random(seed).randbytes


class TwoSignersMixin:
    """
    Signers A and B of the reference scenario: A signs 7, B signs 5,
    the evaluator computes  3·m_A + 2·m_B = 31.
    """

    @classmethod
    def setUpClass(cls):
        cls.params = Params.default()
        cls.sk_a, cls.pk_a = keygen(cls.params, randbytes=seeded(1))
        cls.sk_b, cls.pk_b = keygen(cls.params, randbytes=seeded(2))
        cls.label_a = cls.params.label(cls.sk_a.signer_id, "reading/0")
        cls.label_b = cls.params.label(cls.sk_b.signer_id, "reading/0")
        cls.shares = {
            cls.label_a: sign(cls.params, cls.sk_a, cls.label_a, 7),
            cls.label_b: sign(cls.params, cls.sk_b, cls.label_b, 5),
        }
        cls.f = LinearFunction({cls.label_a: 3, cls.label_b: 2})
        cls.public_keys = {
            cls.pk_a.signer_id: cls.pk_a,
            cls.pk_b.signer_id: cls.pk_b,
        }
