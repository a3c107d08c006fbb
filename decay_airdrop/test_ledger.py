"""
Test the in-memory ledger used for balances and payouts.
"""
import unittest
from decay_airdrop.ledger import Ledger, InsufficientFunds, AIRDROP, NATIVE


class TestLedger(unittest.TestCase):
    def setUp(self):
        self.ledger = Ledger()
        self.alice = b'\x01' * 20
        self.bob = b'\x02' * 20

    def test_unknown_address_has_zero_balance(self):
        self.assertEqual(self.ledger.balance_of(self.alice), 0)
        self.assertEqual(self.ledger.balance_of(self.alice, AIRDROP), 0)

    def test_credit_and_transfer(self):
        self.ledger.credit(self.alice, 100, AIRDROP)
        self.ledger.transfer(self.alice, self.bob, 40, AIRDROP)

        self.assertEqual(self.ledger.balance_of(self.alice, AIRDROP), 60)
        self.assertEqual(self.ledger.balance_of(self.bob, AIRDROP), 40)
        self.assertEqual(self.ledger.balance_of(self.bob, NATIVE), 0)
        self.assertEqual(self.ledger.stats['total_transfers'], 1)

    def test_overdraft_rejected(self):
        self.ledger.credit(self.alice, 10)
        with self.assertRaises(InsufficientFunds):
            self.ledger.transfer(self.alice, self.bob, 11)
        self.assertEqual(self.ledger.balance_of(self.alice), 10)
        self.assertEqual(self.ledger.stats['total_failed'], 1)

    def test_unknown_asset(self):
        with self.assertRaises(ValueError):
            self.ledger.balance_of(self.alice, 'usd')

    def test_negative_amounts(self):
        with self.assertRaises(ValueError):
            self.ledger.credit(self.alice, -1)
        with self.assertRaises(ValueError):
            self.ledger.transfer(self.alice, self.bob, -1)


if __name__ == '__main__':
    unittest.main()
