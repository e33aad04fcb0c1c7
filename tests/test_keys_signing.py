import logging
import unittest

from mklhs.curve import Scalar, pairing_product_is_one
from mklhs.errors import InvalidInput, MalformedEncoding, RandomnessFailure
from mklhs.keys import PublicKey, SecretKey, keygen
from mklhs.labels import Label
from mklhs.params import Params
from mklhs.signing import SignShare, Signer, sign

from tests.helpers import TwoSignersMixin, seeded


class TestKeyGen(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.params = Params.default()

    def test_public_key_is_g2_power(self):
        sk, pk = keygen(self.params)
        self.assertEqual(pk.signer_id, sk.signer_id)
        self.assertEqual(len(sk.signer_id), self.params.id_length)
        self.assertFalse(sk.secret_scalar().is_zero())
        self.assertEqual(pk.point, sk.secret_scalar() * self.params.g2)
        self.assertEqual(sk.public_key(self.params), pk)

    def test_seeded_source_is_reproducible(self):
        sk1, pk1 = keygen(self.params, randbytes=seeded(42))
        sk2, pk2 = keygen(self.params, randbytes=seeded(42))
        self.assertEqual(pk1, pk2)
        self.assertEqual(sk1.to_bytes(), sk2.to_bytes())

    def test_explicit_identity(self):
        sid = b"\x07" * 32
        sk, pk = keygen(self.params, signer_id=sid)
        self.assertEqual(pk.signer_id, sid)
        with self.assertRaises(InvalidInput):
            keygen(self.params, signer_id=b"short")

    def test_randomness_failure_is_fatal(self):
        calls = []

        def failing(n):
            calls.append(n)
            raise OSError("no entropy")

        with self.assertRaises(RandomnessFailure):
            keygen(self.params, randbytes=failing)
        self.assertEqual(len(calls), 1)
        with self.assertRaises(RandomnessFailure):
            keygen(self.params, randbytes=lambda n: b"")

        def exhausted(n):
            raise RuntimeError("entropy pool gone")

        with self.assertRaises(RandomnessFailure) as ctx:
            keygen(self.params, randbytes=exhausted)
        self.assertIsInstance(ctx.exception.__cause__, RuntimeError)
        with self.assertRaises(RandomnessFailure):
            Scalar.random(lambda n: None)

    def test_finalizer_scrubs(self):
        sk, _ = keygen(self.params, randbytes=seeded(8))
        sk.__del__()
        self.assertTrue(sk.is_cleared)
        # a key whose constructor failed has nothing to scrub
        SecretKey.__new__(SecretKey).__del__()
        with self.assertRaises(ValueError):
            SecretKey(sk.signer_id, Scalar.zero())

    def test_key_encodings(self):
        sk, pk = keygen(self.params, randbytes=seeded(3))
        self.assertEqual(PublicKey.from_bytes(pk.to_bytes(), self.params), pk)
        sk2 = SecretKey.from_bytes(sk.to_bytes(), self.params)
        self.assertEqual(sk2.secret_scalar(), sk.secret_scalar())
        with self.assertRaises(MalformedEncoding):
            PublicKey.from_bytes(pk.to_bytes()[:-1], self.params)
        with self.assertRaises(MalformedEncoding):
            SecretKey.from_bytes(sk.signer_id + bytes(32), self.params)

    def test_secret_never_rendered(self):
        sk, _ = keygen(self.params, randbytes=seeded(4))
        secret_hex = sk.secret_scalar().to_bytes().hex()
        self.assertNotIn(secret_hex, repr(sk))
        self.assertNotIn(str(sk.secret_scalar().value), repr(sk))

    def test_clear(self):
        sk, _ = keygen(self.params)
        with sk:
            self.assertFalse(sk.is_cleared)
        self.assertTrue(sk.is_cleared)
        self.assertIn("cleared", repr(sk))
        with self.assertRaises(RuntimeError):
            sk.secret_scalar()
        label = self.params.label(sk.signer_id, 1)
        with self.assertRaises(RuntimeError):
            sign(self.params, sk, label, 1)


class TestSign(TwoSignersMixin, unittest.TestCase):
    def test_share_satisfies_pairing_relation(self):
        share = self.shares[self.label_a]
        self.assertEqual(share.signer_id, self.sk_a.signer_id)
        self.assertEqual(share.mu, Scalar(7))
        lhs = self.params.hash_label(self.label_a) + share.mu * self.params.g1
        self.assertTrue(pairing_product_is_one(
            [(share.gamma, -self.params.g2), (lhs, self.pk_a.point)]
        ))

    def test_deterministic(self):
        again = sign(self.params, self.sk_a, self.label_a, 7)
        self.assertEqual(again, self.shares[self.label_a])

    def test_any_integer_is_signable(self):
        share = sign(self.params, self.sk_a, self.label_a, -3)
        self.assertEqual(share.mu, Scalar(-3))

    def test_label_must_belong_to_key(self):
        with self.assertRaises(InvalidInput):
            sign(self.params, self.sk_a, self.label_b, 1)
        with self.assertRaises(InvalidInput):
            sign(self.params, self.sk_a, Label(self.sk_a.signer_id, b"x"), 1)

    def test_share_encoding(self):
        share = self.shares[self.label_b]
        data = share.to_bytes()
        self.assertEqual(len(data), 32 + 48 + 32)
        self.assertEqual(SignShare.from_bytes(data, self.params), share)
        with self.assertRaises(MalformedEncoding):
            SignShare.from_bytes(data + b"\x00", self.params)

    def test_no_secret_in_logs(self):
        sk, _ = keygen(self.params, randbytes=seeded(9))
        secret_hex = sk.secret_scalar().to_bytes().hex()
        signer = Signer(self.params, sk)
        with self.assertLogs("mklhs", level=logging.DEBUG) as captured:
            signer.sign("item", 12)
        self.assertTrue(captured.output)
        for line in captured.output:
            self.assertNotIn(secret_hex, line)


class TestSigner(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.params = Params.default()

    def test_label_reuse_is_refused(self):
        signer = Signer.generate(self.params, randbytes=seeded(5))
        label, first = signer.sign("sensor/1", 10)
        _, second = signer.sign("sensor/1", 10)
        self.assertEqual(first, second)
        with self.assertRaises(InvalidInput):
            signer.sign("sensor/1", 11)
        self.assertEqual(signer.issued_labels, (label,))

    def test_foreign_label_refused(self):
        signer = Signer.generate(self.params, randbytes=seeded(6))
        other = Label(b"\x01" * 32, b"\x02" * 32)
        with self.assertRaises(InvalidInput):
            signer.sign(other, 1)
        self.assertEqual(signer.issued_labels, ())

    def test_close_scrubs_key(self):
        signer = Signer.generate(self.params)
        signer.close()
        with self.assertRaises(RuntimeError):
            signer.sign(1, 1)

    def test_mismatched_public_key(self):
        sk, _ = keygen(self.params)
        _, other_pk = keygen(self.params)
        with self.assertRaises(InvalidInput):
            Signer(self.params, sk, other_pk)


if __name__ == "__main__":
    unittest.main()
