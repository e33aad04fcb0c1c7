import unittest

from mklhs.curve import G1Point, Scalar
from mklhs.errors import InvalidInput, MalformedEncoding, MissingSignature
from mklhs.evaluation import (
    AggregateSignature,
    Evaluator,
    combine,
    combine_aggregates,
)
from mklhs.labels import Label, LinearFunction

from tests.helpers import TwoSignersMixin


class TestLinearFunction(unittest.TestCase):
    def setUp(self):
        self.a = Label(b"\x01" * 4, b"\x00\x00\x00\x01")
        self.b = Label(b"\x02" * 4, b"\x00\x00\x00\x01")
        self.c = Label(b"\x01" * 4, b"\x00\x00\x00\x02")

    def test_order_and_lookup(self):
        f = LinearFunction.from_terms([(self.b, 2), (self.a, 3)])
        self.assertEqual(f.labels, [self.b, self.a])
        self.assertEqual(f[self.a], Scalar(3))
        self.assertEqual(f.coefficient(self.c), Scalar.zero())
        self.assertIn(self.b, f)
        self.assertEqual(len(f), 2)

    def test_duplicates_rejected(self):
        with self.assertRaises(InvalidInput):
            LinearFunction.from_terms([(self.a, 1), (self.a, 2)])

    def test_grouping_skips_zero_terms(self):
        f = LinearFunction({self.a: 1, self.b: 0, self.c: 4})
        self.assertEqual(
            f.by_signer(),
            {b"\x01" * 4: [(self.a, Scalar(1)), (self.c, Scalar(4))]},
        )
        self.assertEqual(f.signer_ids(), [b"\x01" * 4])
        self.assertEqual(f.support().labels, [self.a, self.c])
        self.assertEqual(f, f.support())

    def test_compose_and_apply(self):
        f1 = LinearFunction({self.a: 1, self.b: 2})
        f2 = LinearFunction({self.b: 1, self.c: 5})
        g = LinearFunction.compose([(f1, 3), (f2, -1)])
        self.assertEqual(g, LinearFunction({self.a: 3, self.b: 5, self.c: -5}))
        values = {self.a: 7, self.b: 5, self.c: 1}
        self.assertEqual(g.apply(values), 3 * f1.apply(values) - f2.apply(values))
        with self.assertRaises(InvalidInput):
            g.apply({self.a: 1})

    def test_encoding_preserves_order(self):
        f = LinearFunction.from_terms([(self.c, -1), (self.a, 9)])
        data = f.to_bytes()
        self.assertEqual(len(data), 4 + 2 * (8 + 32))
        g = LinearFunction.from_bytes(data, 4)
        self.assertEqual(g.labels, f.labels)
        self.assertEqual(g, f)
        with self.assertRaises(MalformedEncoding):
            LinearFunction.from_bytes(data[:-1], 4)
        dup = LinearFunction.from_terms([(self.a, 1)]).to_bytes()
        with self.assertRaises(MalformedEncoding):
            LinearFunction.from_bytes(
                b"\x00\x00\x00\x02" + dup[4:] * 2, 4,
            )


class TestCombine(TwoSignersMixin, unittest.TestCase):
    def test_result_and_partials(self):
        sig, y = combine(self.f, self.shares)
        self.assertEqual(y, Scalar(31))
        self.assertEqual(sig.mu(self.sk_a.signer_id), Scalar(21))
        self.assertEqual(sig.mu(self.sk_b.signer_id), Scalar(10))
        self.assertEqual(sig.result(), y)
        expected = (
            Scalar(3) * self.shares[self.label_a].gamma
            + Scalar(2) * self.shares[self.label_b].gamma
        )
        self.assertEqual(sig.gamma, expected)

    def test_missing_signature_is_explicit(self):
        stray = self.params.label(self.sk_a.signer_id, "never-signed")
        f = LinearFunction({self.label_a: 1, stray: 4})
        with self.assertRaises(MissingSignature) as ctx:
            combine(f, self.shares)
        self.assertEqual(ctx.exception.label, stray)
        self.assertIsInstance(ctx.exception, LookupError)

    def test_zero_coefficient_still_needs_signature(self):
        stray = self.params.label(self.sk_b.signer_id, "never-signed")
        with self.assertRaises(MissingSignature):
            combine(LinearFunction({stray: 0}), self.shares)

    def test_zero_coefficient_contributes_identity(self):
        f = LinearFunction({self.label_a: 3, self.label_b: 0})
        sig, y = combine(f, self.shares)
        self.assertEqual(y, Scalar(21))
        self.assertEqual(sig.gamma, Scalar(3) * self.shares[self.label_a].gamma)
        self.assertEqual(sig.mus, {self.sk_a.signer_id: Scalar(21)})

    def test_share_from_wrong_signer(self):
        swapped = {self.label_a: self.shares[self.label_b]}
        with self.assertRaises(InvalidInput):
            combine(LinearFunction({self.label_a: 1}), swapped)
        with self.assertRaises(InvalidInput):
            Evaluator().add(self.label_a, self.shares[self.label_b])

    def test_zero_coefficient_accepts_any_share(self):
        stray = self.params.label(self.sk_b.signer_id, "reading/9")
        shares = dict(self.shares)
        shares[stray] = self.shares[self.label_a]
        f = LinearFunction({self.label_a: 3, stray: 0, self.label_b: 2})
        self.assertEqual(combine(f, shares), combine(self.f, self.shares))

    def test_empty_function(self):
        sig, y = combine(LinearFunction(), self.shares)
        self.assertTrue(sig.gamma.is_identity())
        self.assertEqual(y, Scalar.zero())
        self.assertEqual(sig.partials, ())

    def test_evaluator(self):
        ev = Evaluator()
        ev.extend(self.shares.items())
        self.assertEqual(len(ev), 2)
        self.assertIn(self.label_a, ev)
        self.assertEqual(ev.evaluate(self.f), combine(self.f, self.shares))

    def test_nested_combination_matches_composed_function(self):
        f1 = LinearFunction({self.label_a: 1, self.label_b: 4})
        f2 = LinearFunction({self.label_a: 2})
        s1, y1 = combine(f1, self.shares)
        s2, y2 = combine(f2, self.shares)
        nested = combine_aggregates([(s1, 5), (s2, -2)])
        direct, y = combine(LinearFunction.compose([(f1, 5), (f2, -2)]), self.shares)
        self.assertEqual(nested, direct)
        self.assertEqual(y, Scalar(5) * y1 - Scalar(2) * y2)


class TestAggregateEncoding(TwoSignersMixin, unittest.TestCase):
    def test_roundtrip(self):
        sig, _ = combine(self.f, self.shares)
        data = sig.to_bytes()
        self.assertEqual(len(data), 48 + 4 + 2 * (32 + 32))
        self.assertEqual(AggregateSignature.from_bytes(data, self.params), sig)

    def test_malformed(self):
        sig, _ = combine(self.f, self.shares)
        data = sig.to_bytes()
        with self.assertRaises(MalformedEncoding):
            AggregateSignature.from_bytes(data[:40], self.params)
        with self.assertRaises(MalformedEncoding):
            AggregateSignature.from_bytes(data[:-1], self.params)
        entry = data[52:52 + 64]
        dup = data[:48] + (2).to_bytes(4, "big") + entry + entry
        with self.assertRaises(MalformedEncoding):
            AggregateSignature.from_bytes(dup, self.params)

    def test_identity_gamma_roundtrips(self):
        sig = AggregateSignature.from_partials(G1Point.identity(), {})
        self.assertEqual(
            AggregateSignature.from_bytes(sig.to_bytes(), self.params), sig,
        )


if __name__ == "__main__":
    unittest.main()
