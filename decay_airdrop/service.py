"""
Claim service: authenticates claim requests, checks the claimant's balance and
pays the airdrop out of the pool before the engine records the claim.
"""
import logging
import time
from dataclasses import dataclass, asdict

from decay_airdrop.core import ClaimRequest
from decay_airdrop.engine import AirdropEngine, AirdropError
from decay_airdrop.ledger import Ledger, AIRDROP, NATIVE, AIRDROP_POOL_ADDRESS

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Raised when a claim request fails validation."""
    pass


@dataclass(frozen=True)
class ClaimReceipt:
    """Outcome of one successful claim."""
    claim_number: int
    identity: bytes
    ratio: int
    amount: int
    remaining_supply: int

    def to_dict(self) -> dict:
        data = asdict(self)
        data['identity'] = self.identity.hex()
        return data


class AirdropService:
    def __init__(self, engine: AirdropEngine, ledger: Ledger,
                 chain_id: int = 1,
                 pool_address: bytes = AIRDROP_POOL_ADDRESS,
                 monitor=None):
        self.engine = engine
        self.ledger = ledger
        self.chain_id = chain_id
        self.pool_address = pool_address
        self.monitor = monitor

    def fund_pool(self):
        """Credit the pool with whatever the engine has not yet distributed."""
        missing = self.engine.current_supply() - self.ledger.balance_of(self.pool_address, AIRDROP)
        if missing > 0:
            self.ledger.credit(self.pool_address, missing, AIRDROP)
            logger.info(f"Airdrop pool funded with {missing}")

    def preview(self, request: ClaimRequest) -> int:
        """Amount the request would receive now. Nothing is recorded."""
        identity = self._authenticate(request)
        balance = self.ledger.balance_of(identity, NATIVE)
        return self.engine.preview_claim(identity, balance)

    def submit(self, request: ClaimRequest) -> ClaimReceipt:
        """
        Process a claim request end to end.

        Raises:
            ValidationError: bad signature, wrong chain, or a request that is expired or future-dated
            AirdropError: the engine rejected the claim
            InsufficientFunds: the pool could not cover the payout
        """
        start = time.time()
        status = 'accepted'
        try:
            identity = self._authenticate(request)
            balance = self.ledger.balance_of(identity, NATIVE)

            record = self.engine.claim_with_record(identity, balance, transfer_out=self._pay)

            receipt = ClaimReceipt(
                claim_number=record.claim_number,
                identity=identity,
                ratio=record.claim_ratio,
                amount=record.claim_amount,
                remaining_supply=record.remaining_supply,
            )
            logger.info(f"Claim #{receipt.claim_number} by {identity.hex()[:8]}: {receipt.amount}")
            return receipt
        except ValidationError as e:
            status = 'invalid'
            logger.warning(f"Claim request rejected: {e}")
            raise
        except AirdropError as e:
            status = type(e).__name__
            logger.info(f"Claim rejected: {e}")
            raise
        except Exception as e:
            status = 'failed'
            logger.error(f"Claim failed: {e}")
            raise
        finally:
            if self.monitor is not None:
                self.monitor.record_claim(status, time.time() - start)
                self.monitor.update()

    def _authenticate(self, request: ClaimRequest) -> bytes:
        is_valid, error = request.validate_basic(chain_id=self.chain_id)
        if not is_valid:
            raise ValidationError(error)
        return request.claimant_address

    def _pay(self, identity: bytes, amount: int):
        if amount > 0:
            self.ledger.transfer(self.pool_address, identity, amount, AIRDROP)
