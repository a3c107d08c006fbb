"""
Test airdrop metrics collection.
"""
import pytest
from decay_airdrop.airdrop_state import INITIAL_AIRDROP_SUPPLY
from decay_airdrop.engine import AirdropEngine, MINIMUM_BALANCE
from decay_airdrop.monitoring import Monitor


@pytest.fixture
def engine():
    return AirdropEngine()


def test_update_reads_engine_state(engine):
    monitor = Monitor(engine, start_server=False)
    engine.claim(b'\x01' * 20, MINIMUM_BALANCE)
    monitor.update()

    registry = monitor.registry
    assert registry.get_sample_value('airdrop_claim_count') == 1
    assert registry.get_sample_value('airdrop_claim_ratio') == 999900000000000000
    assert registry.get_sample_value('airdrop_remaining_supply') == pytest.approx(
        float(INITIAL_AIRDROP_SUPPLY - INITIAL_AIRDROP_SUPPLY // 100)
    )
    assert registry.get_sample_value('system_cpu_percent') is not None


def test_record_claim(engine):
    monitor = Monitor(engine, start_server=False)
    monitor.record_claim('accepted', 0.01)
    monitor.record_claim('BalanceTooLow', 0.02)

    registry = monitor.registry
    assert registry.get_sample_value('airdrop_claims_total', {'status': 'accepted'}) == 1
    assert registry.get_sample_value('airdrop_claims_total', {'status': 'BalanceTooLow'}) == 1
    assert registry.get_sample_value('airdrop_claim_latency_seconds_count') == 2


def test_server_start_and_stop(engine):
    monitor = Monitor(engine, host="127.0.0.1", port=0)
    assert monitor.thread.is_alive()
    assert monitor.port == monitor.server.server_port
    assert monitor.port != 0
    monitor.stop_server()
    assert monitor.server is None
