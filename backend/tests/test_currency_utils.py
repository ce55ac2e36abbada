from decimal import Decimal
import random
import unittest

from splitledger.core.errors import InvalidInput
from splitledger.utils.currency_utils import (
    compute_shares,
    distribute,
    from_cents,
    round_to_cent,
    to_cents,
)


class TestCurrencyUtils(unittest.TestCase):
    def test_distribute_ten_three_ways(self):
        """Extra cent goes to the first participant."""
        shares = distribute(Decimal("10.00"), 3)
        self.assertEqual(shares, [Decimal("3.34"), Decimal("3.33"), Decimal("3.33")])
        self.assertEqual(sum(shares), Decimal("10.00"))

    def test_distribute_equal_split(self):
        shares = distribute(Decimal("9.00"), 3)
        for share in shares:
            self.assertEqual(share, Decimal("3.00"))

    def test_distribute_exact_and_fair(self):
        """Shares sum to the total and differ by at most one cent."""
        rng = random.Random(42)
        for _ in range(300):
            total = from_cents(rng.randint(0, 1_000_000))
            n = rng.randint(1, 25)
            shares = distribute(total, n)
            self.assertEqual(len(shares), n)
            self.assertEqual(sum(shares), total)
            self.assertLessEqual(max(shares) - min(shares), Decimal("0.01"))

    def test_distribute_zero_participants(self):
        self.assertEqual(distribute(Decimal("12.50"), 0), [])

    def test_distribute_less_than_a_cent_each(self):
        self.assertEqual(distribute(Decimal("0.02"), 3), [Decimal("0.01"), Decimal("0.01"), Decimal("0.00")])

    def test_distribute_float_input_is_rounded_not_truncated(self):
        # 0.1 + 0.2 == 0.30000000000000004
        self.assertEqual(distribute(0.1 + 0.2, 1), [Decimal("0.30")])
        self.assertEqual(distribute(10.005, 1), [Decimal("10.01")])

    def test_distribute_rejects_bad_input(self):
        with self.assertRaises(InvalidInput):
            distribute(Decimal("10.00"), -1)
        with self.assertRaises(InvalidInput):
            distribute(Decimal("-5.00"), 2)
        with self.assertRaises(InvalidInput):
            distribute(float("nan"), 2)
        with self.assertRaises(InvalidInput):
            distribute(float("inf"), 2)
        with self.assertRaises(InvalidInput):
            distribute(Decimal("10.00"), 2.5)

    def test_distribute_rejects_out_of_range_amounts(self):
        with self.assertRaises(InvalidInput):
            distribute(Decimal("1e30"), 3)
        with self.assertRaises(InvalidInput):
            distribute(Decimal("10000000000.00"), 2)
        with self.assertRaises(InvalidInput):
            round_to_cent(Decimal("-1e12"))
        self.assertEqual(sum(distribute(Decimal("9999999999.99"), 7)), Decimal("9999999999.99"))

    def test_invalid_input_is_a_value_error(self):
        with self.assertRaises(ValueError):
            distribute("ten", 2)

    def test_round_to_cent_snaps_negative_zero(self):
        result = round_to_cent(Decimal("-0.004"))
        self.assertEqual(result, Decimal("0"))
        self.assertEqual(str(result), "0.00")

    def test_cents_conversion(self):
        self.assertEqual(to_cents(Decimal("12.345")), 1235)
        self.assertEqual(to_cents("-1.50"), -150)
        self.assertEqual(from_cents(-150), Decimal("-1.50"))

    def test_compute_shares_follows_input_order(self):
        shares = compute_shares(Decimal("10.00"), ["u3", "u1", "u2"])
        self.assertEqual(shares, {"u3": Decimal("3.34"), "u1": Decimal("3.33"), "u2": Decimal("3.33")})

    def test_compute_shares_rejects_duplicates(self):
        with self.assertRaises(InvalidInput):
            compute_shares(Decimal("10.00"), ["u1", "u1"])


if __name__ == "__main__":
    unittest.main()
