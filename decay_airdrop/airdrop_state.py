"""
Airdrop state - remaining supply, current claim ratio and the claimed set.
"""
from dataclasses import dataclass

# Token amounts carry 18 decimal places
TOKEN_UNIT = 10 ** 18

AGGREGATE_SUPPLY = 1_337_069_420 * 10 ** 21
MARKET_SUPPLY = 1_069_655_536 * 10 ** 21
INITIAL_AIRDROP_SUPPLY = AGGREGATE_SUPPLY - MARKET_SUPPLY

# 1e18 represents 1% (the true fraction is ratio / 1e20)
INITIAL_CLAIM_RATIO = 10 ** 18

MAX_UINT256 = 2 ** 256 - 1


def _encode_identity(identity):
    """Bytes identities are tagged so they decode back to bytes."""
    if isinstance(identity, bytes):
        return {'bytes': identity.hex()}
    return identity


def _decode_identity(value):
    if isinstance(value, dict):
        return bytes.fromhex(value['bytes'])
    if isinstance(value, list):
        # JSON has no tuples
        return tuple(value)
    return value


class AirdropState:
    """
    Mutable airdrop state owned by a single engine.

    Holds the pool not yet distributed, the ratio applied to the next claim,
    the identities that already claimed and the number of successful claims.
    """

    def __init__(self, data: dict = None):
        """
        Initialize airdrop state.

        Args:
            data: Dict with 'supply', 'ratio', 'claimed', 'claim_count' and
                optionally 'initial_supply'. Missing keys take launch values.
        """
        if data is None:
            data = {}

        self.initial_supply = int(data.get('initial_supply', data.get('supply', INITIAL_AIRDROP_SUPPLY)))
        self.supply = int(data.get('supply', self.initial_supply))
        self.ratio = int(data.get('ratio', INITIAL_CLAIM_RATIO))
        self.claimed = set(_decode_identity(i) for i in data.get('claimed', ()))
        self.claim_count = int(data.get('claim_count', 0))
        self._validate()

    @classmethod
    def from_supplies(cls, aggregate_supply: int, market_supply: int,
                      ratio: int = INITIAL_CLAIM_RATIO) -> 'AirdropState':
        """Build the launch state from the aggregate and market supplies."""
        return cls({
            'initial_supply': aggregate_supply - market_supply,
            'ratio': ratio,
        })

    def to_dict(self) -> dict:
        """
        Convert to dict for storage or reporting.
        """
        return {
            'initial_supply': self.initial_supply,
            'supply': self.supply,
            'ratio': self.ratio,
            'claimed': sorted((_encode_identity(i) for i in self.claimed), key=repr),
            'claim_count': self.claim_count,
        }

    def copy(self) -> 'AirdropState':
        """Independent snapshot of this state."""
        clone = AirdropState.__new__(AirdropState)
        clone.initial_supply = self.initial_supply
        clone.supply = self.supply
        clone.ratio = self.ratio
        clone.claimed = set(self.claimed)
        clone.claim_count = self.claim_count
        return clone

    @property
    def distributed(self) -> int:
        """Tokens paid out so far."""
        return self.initial_supply - self.supply

    def __repr__(self) -> str:
        """String representation for debugging."""
        supply_tokens = self.supply // TOKEN_UNIT
        percent = self.ratio / 10 ** 18

        return (
            f"AirdropState("
            f"supply={supply_tokens} tokens, "
            f"ratio={percent:.6f}%, "
            f"claims={self.claim_count})"
        )

    def _validate(self):
        """Ensure state consistency."""
        for name in ('initial_supply', 'supply', 'ratio'):
            value = getattr(self, name)
            if value < 0 or value > MAX_UINT256:
                raise ValueError(f"{name} must fit in an unsigned 256-bit integer, got {value}")

        if self.supply > self.initial_supply:
            raise ValueError("Remaining supply cannot exceed initial supply")

        if self.claim_count < 0:
            raise ValueError("Claim count cannot be negative")

        if self.claim_count < len(self.claimed):
            raise ValueError("Claim count cannot be lower than the number of claimants")


@dataclass(frozen=True)
class ClaimRecord:
    """One successful claim: the ratio it used, what it paid and what remained."""
    claim_number: int
    claim_ratio: int
    claim_amount: int
    remaining_supply: int

    def to_row(self) -> list:
        return [self.claim_number, self.claim_ratio, self.claim_amount, self.remaining_supply]
