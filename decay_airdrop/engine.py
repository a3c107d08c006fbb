"""
Decay-allocation engine for the airdrop.

Every successful claim pays `supply * ratio / 1e20` of the remaining pool and
then shrinks the ratio by `ratio * 1e16 / 1e20` (0.01% of itself). All math is
unsigned integer floor division so results match the on-chain contract exactly.
"""
import enum
import logging
import threading
from typing import Callable, Hashable, Optional

from decay_airdrop.airdrop_state import AirdropState, ClaimRecord, MAX_UINT256

logger = logging.getLogger(__name__)

# Represents 0.01%
CLAIM_REDUCTION = 10 ** 16
# Represents dividing by 100 as a percentage
CLAIM_DIVISOR = 10 ** 20

# Native balance a claimant must hold (0.3 units at 18 decimals)
MINIMUM_BALANCE = 3 * 10 ** 17


class AirdropError(Exception):
    """Base class for claim rejections."""
    reason = "Claim rejected."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.reason)


class AlreadyClaimed(AirdropError):
    """Identity has already claimed. Permanent for that identity."""
    reason = "Already claimed."


class BalanceTooLow(AirdropError):
    """Claimant balance is under the minimum threshold."""
    reason = "Balance too low."


class SupplyExhausted(AirdropError):
    """Claim would pay nothing."""
    reason = "Airdrop supply exhausted."


class ZeroClaimPolicy(enum.Enum):
    """What to do with a claim whose amount truncates to zero."""
    REJECT = "reject"
    ACCEPT = "accept"


def compute_claim(supply: int, ratio: int,
                  reduction: int = CLAIM_REDUCTION,
                  divisor: int = CLAIM_DIVISOR) -> tuple[int, int, int]:
    """
    Compute one claim step.

    Returns:
        (amount, new_supply, new_ratio)
    """
    amount = supply * ratio // divisor
    new_supply = supply - amount
    new_ratio = ratio - ratio * reduction // divisor
    return amount, new_supply, new_ratio


class AirdropEngine:
    """
    Owns an AirdropState and applies claims to it one at a time.

    The external world supplies the claimant identity and its balance, and
    optionally a transfer callback that must succeed before the state commits.
    """

    def __init__(self, state: Optional[AirdropState] = None,
                 minimum_balance: int = MINIMUM_BALANCE,
                 zero_claim_policy: ZeroClaimPolicy = ZeroClaimPolicy.REJECT,
                 reduction: int = CLAIM_REDUCTION,
                 divisor: int = CLAIM_DIVISOR):
        if divisor <= 0:
            raise ValueError("Divisor must be positive")
        if reduction < 0 or reduction > divisor:
            raise ValueError("Reduction must be between 0 and the divisor")
        if minimum_balance < 0 or minimum_balance > MAX_UINT256:
            raise ValueError("Minimum balance must fit in an unsigned 256-bit integer")

        self.state = state if state is not None else AirdropState()
        # amount <= supply only holds while ratio <= divisor
        if self.state.ratio > divisor:
            raise ValueError("Claim ratio cannot exceed the divisor")
        self.minimum_balance = minimum_balance
        self.zero_claim_policy = ZeroClaimPolicy(zero_claim_policy)
        self.reduction = reduction
        self.divisor = divisor
        # claim is a read-modify-write over (supply, ratio, claimed)
        self.lock = threading.Lock()

    def current_supply(self) -> int:
        with self.lock:
            return self.state.supply

    def current_ratio(self) -> int:
        with self.lock:
            return self.state.ratio

    @property
    def claim_count(self) -> int:
        with self.lock:
            return self.state.claim_count

    def has_claimed(self, identity: Hashable) -> bool:
        with self.lock:
            return identity in self.state.claimed

    def snapshot(self) -> AirdropState:
        """Copy of the current state, safe to inspect while claims continue."""
        with self.lock:
            return self.state.copy()

    def preview_claim(self, identity: Hashable, balance: int) -> int:
        """
        Amount `claim` would pay right now, without changing any state.

        Raises the same errors as `claim`.
        """
        with self.lock:
            amount, _, _ = self._check(identity, balance)
            return amount

    def claim(self, identity: Hashable, balance: int,
              transfer_out: Optional[Callable[[Hashable, int], None]] = None) -> int:
        """
        Claim the next airdrop share for `identity`.

        Args:
            identity: Stable claimant key (e.g. a 20-byte address)
            balance: Claimant's native balance, used for the eligibility gate
            transfer_out: Called with (identity, amount) before the state
                commits. If it raises, the claim is not recorded.

        Returns:
            Amount paid to the claimant (smallest token unit)
        """
        return self.claim_with_record(identity, balance, transfer_out).claim_amount

    def claim_with_record(self, identity: Hashable, balance: int,
                          transfer_out: Optional[Callable[[Hashable, int], None]] = None) -> ClaimRecord:
        """Same as `claim`, but returns the full ClaimRecord of the step."""
        with self.lock:
            amount, new_supply, new_ratio = self._check(identity, balance)

            if transfer_out is not None:
                transfer_out(identity, amount)

            record = ClaimRecord(
                claim_number=self.state.claim_count + 1,
                claim_ratio=self.state.ratio,
                claim_amount=amount,
                remaining_supply=new_supply,
            )
            self.state.supply = new_supply
            self.state.ratio = new_ratio
            self.state.claimed.add(identity)
            self.state.claim_count = record.claim_number

        logger.debug(
            f"Claim #{record.claim_number}: ratio={record.claim_ratio} "
            f"amount={amount} remaining={new_supply}"
        )
        return record

    def _check(self, identity: Hashable, balance: int) -> tuple[int, int, int]:
        """Run the preconditions in order and compute the claim. Caller holds the lock."""
        if identity is None:
            raise ValueError("Identity is required")
        if balance < 0:
            raise ValueError("Balance cannot be negative")

        if identity in self.state.claimed:
            raise AlreadyClaimed()

        if balance < self.minimum_balance:
            raise BalanceTooLow()

        amount, new_supply, new_ratio = compute_claim(
            self.state.supply, self.state.ratio, self.reduction, self.divisor
        )

        if amount == 0 and self.zero_claim_policy is ZeroClaimPolicy.REJECT:
            raise SupplyExhausted()

        return amount, new_supply, new_ratio

    def __repr__(self) -> str:
        return (
            f"AirdropEngine({self.state!r}, "
            f"minimum_balance={self.minimum_balance}, "
            f"zero_claim_policy={self.zero_claim_policy.value})"
        )
