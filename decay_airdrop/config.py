"""
Configuration management for the airdrop.
"""
import json
import os
from dataclasses import dataclass, asdict

from decay_airdrop.airdrop_state import (
    AirdropState,
    AGGREGATE_SUPPLY,
    MARKET_SUPPLY,
    INITIAL_CLAIM_RATIO,
)
from decay_airdrop.engine import (
    AirdropEngine,
    ZeroClaimPolicy,
    CLAIM_REDUCTION,
    CLAIM_DIVISOR,
    MINIMUM_BALANCE,
)
from decay_airdrop.ledger import Ledger
from decay_airdrop.monitoring import Monitor
from decay_airdrop.service import AirdropService


@dataclass
class AirdropConfig:
    """Airdrop economics and eligibility policy."""
    aggregate_supply: int = AGGREGATE_SUPPLY
    market_supply: int = MARKET_SUPPLY
    initial_ratio: int = INITIAL_CLAIM_RATIO
    claim_reduction: int = CLAIM_REDUCTION
    claim_divisor: int = CLAIM_DIVISOR
    minimum_balance: int = MINIMUM_BALANCE
    zero_claim_policy: str = ZeroClaimPolicy.REJECT.value
    chain_id: int = 1

    def __post_init__(self):
        if self.market_supply > self.aggregate_supply:
            raise ValueError("Market supply cannot exceed aggregate supply")
        # Raises ValueError on an unknown policy name
        ZeroClaimPolicy(self.zero_claim_policy)

    @property
    def initial_supply(self) -> int:
        return self.aggregate_supply - self.market_supply


@dataclass
class MonitoringConfig:
    """Monitoring configuration."""
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 9090


@dataclass
class SimulationConfig:
    """Claim simulation report configuration."""
    output: str = "claim-simulation.csv"
    limit: int = None


@dataclass
class Config:
    """Main configuration."""
    airdrop: AirdropConfig
    monitoring: MonitoringConfig
    simulation: SimulationConfig

    @classmethod
    def default(cls) -> 'Config':
        """Create default configuration."""
        return cls(
            airdrop=AirdropConfig(),
            monitoring=MonitoringConfig(),
            simulation=SimulationConfig()
        )

    @classmethod
    def from_file(cls, path: str) -> 'Config':
        """Load configuration from JSON file."""
        with open(path, 'r') as f:
            data = json.load(f)

        return cls(
            airdrop=AirdropConfig(**data.get('airdrop', {})),
            monitoring=MonitoringConfig(**data.get('monitoring', {})),
            simulation=SimulationConfig(**data.get('simulation', {}))
        )

    def to_file(self, path: str):
        """Save configuration to JSON file."""
        os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'airdrop': asdict(self.airdrop),
            'monitoring': asdict(self.monitoring),
            'simulation': asdict(self.simulation)
        }


def build_state(config: AirdropConfig) -> AirdropState:
    """Launch state for the configured supplies."""
    return AirdropState.from_supplies(
        config.aggregate_supply,
        config.market_supply,
        ratio=config.initial_ratio,
    )


def build_engine(config: AirdropConfig) -> AirdropEngine:
    """Create an engine at launch state using the configured policy."""
    return AirdropEngine(
        state=build_state(config),
        minimum_balance=config.minimum_balance,
        zero_claim_policy=ZeroClaimPolicy(config.zero_claim_policy),
        reduction=config.claim_reduction,
        divisor=config.claim_divisor,
    )


def build_service(config: Config, ledger: Ledger) -> AirdropService:
    """
    Wire an engine, the configured chain id and, when enabled, a metrics
    monitor into a claim service. The pool is funded on the given ledger.
    """
    engine = build_engine(config.airdrop)

    monitor = None
    if config.monitoring.enabled:
        monitor = Monitor(engine, host=config.monitoring.host, port=config.monitoring.port)

    service = AirdropService(engine, ledger, chain_id=config.airdrop.chain_id, monitor=monitor)
    service.fund_pool()
    return service
