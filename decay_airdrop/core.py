"""
Claim requests submitted by claimants.
"""
import time
import msgpack
from typing import Optional
from .crypto import (
    generate_hash,
    public_key_to_address,
    sign,
    verify_signature,
)

CLAIM_AIRDROP = "CLAIM_AIRDROP"

# Requests stamped further ahead than this are rejected
MAX_CLOCK_DRIFT = 300
# Requests older than this are treated as stale
MAX_REQUEST_AGE = 3600


class ClaimRequest:
    def __init__(self,
                 claimant_public_key: str,
                 signature: Optional[bytes] = None,
                 timestamp: Optional[float] = None,
                 chain_id: Optional[int] = 1):  # Replay protection
        self.claimant_public_key = claimant_public_key
        self.request_type = CLAIM_AIRDROP
        self.timestamp = timestamp or time.time()
        self.signature = signature
        self.chain_id = chain_id

    @classmethod
    def from_dict(cls, data: dict):
        """Creates a ClaimRequest from a dictionary."""
        signature = data.get("signature")
        if isinstance(signature, str):
            signature = bytes.fromhex(signature)
        return cls(
            claimant_public_key=data["claimant_public_key"],
            signature=signature,
            timestamp=data.get("timestamp"),
            chain_id=data.get("chain_id", 1),
        )

    def to_dict(self, include_signature=True):
        data = {
            "claimant_public_key": self.claimant_public_key,
            "request_type": self.request_type,
            "timestamp": self.timestamp,
            "chain_id": self.chain_id,
        }
        if include_signature and self.signature:
            data["signature"] = self.signature
        return data

    def get_signing_data(self) -> bytes:
        """Returns the canonical byte representation for signing."""
        return msgpack.packb(self.to_dict(include_signature=False), use_bin_type=True)

    def sign(self, private_key):
        """Signs the request."""
        self.signature = sign(private_key, self.get_signing_data())

    def verify_signature(self):
        """Verifies the request's signature."""
        if not self.signature:
            return False
        return verify_signature(
            self.claimant_public_key,
            self.signature,
            self.get_signing_data()
        )

    @property
    def id(self) -> bytes:
        """The unique hash identifier of the request."""
        return generate_hash(self.get_signing_data())

    @property
    def claimant_address(self) -> bytes:
        return public_key_to_address(self.claimant_public_key)

    def validate_basic(self, chain_id: Optional[int] = None) -> tuple[bool, str]:
        """
        Performs basic validation checks on the request.
        Returns (is_valid, error_message)
        """
        if not self.verify_signature():
            return False, "Invalid signature"

        if chain_id is not None and self.chain_id != chain_id:
            return False, f"Wrong chain id: {self.chain_id} != {chain_id}"

        now = time.time()
        if self.timestamp > now + MAX_CLOCK_DRIFT:
            return False, "Timestamp too far in future"

        if self.timestamp < now - MAX_REQUEST_AGE:
            return False, "Request expired"

        return True, ""

    def __repr__(self) -> str:
        return f"ClaimRequest(id={self.id.hex()[:16]}, chain_id={self.chain_id})"
