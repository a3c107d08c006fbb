"""
In-memory token ledger used as the balance and transfer backend for claims.
"""
import logging
import threading
from collections import defaultdict

logger = logging.getLogger(__name__)

NATIVE = 'native'
AIRDROP = 'airdrop'
ASSETS = (NATIVE, AIRDROP)

# Reserved address holding the undistributed airdrop pool
AIRDROP_POOL_ADDRESS = b'\x00' * 19 + b'\x0A'


class InsufficientFunds(Exception):
    """Raised when a transfer exceeds the sender's balance."""
    pass


class Ledger:
    def __init__(self):
        # {asset: {address: balance}}
        self.balances = defaultdict(lambda: defaultdict(int))
        self.lock = threading.Lock()
        self.stats = {
            'total_transfers': 0,
            'total_failed': 0,
        }

    def balance_of(self, address: bytes, asset: str = NATIVE) -> int:
        self._check_asset(asset)
        with self.lock:
            return self.balances[asset][address]

    def credit(self, address: bytes, amount: int, asset: str = NATIVE):
        """Add funds to an address (genesis allocations, faucets, tests)."""
        self._check_asset(asset)
        if amount < 0:
            raise ValueError("Credit amount must be non-negative")
        with self.lock:
            self.balances[asset][address] += amount

    def transfer(self, sender: bytes, recipient: bytes, amount: int, asset: str = NATIVE):
        """
        Move `amount` of `asset` from sender to recipient.

        Raises:
            InsufficientFunds: if the sender cannot cover the amount
        """
        self._check_asset(asset)
        if amount < 0:
            raise ValueError("Transfer amount must be non-negative")

        with self.lock:
            available = self.balances[asset][sender]
            if available < amount:
                self.stats['total_failed'] += 1
                raise InsufficientFunds(
                    f"{sender.hex()[:8]} holds {available} {asset}, needs {amount}"
                )
            self.balances[asset][sender] = available - amount
            self.balances[asset][recipient] += amount
            self.stats['total_transfers'] += 1

        logger.debug(f"Transferred {amount} {asset}: {sender.hex()[:8]} -> {recipient.hex()[:8]}")

    @staticmethod
    def _check_asset(asset: str):
        if asset not in ASSETS:
            raise ValueError(f"Unknown asset: {asset}")
