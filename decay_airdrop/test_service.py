"""
Test the claim service end to end: signed request, balance gate, payout.
"""
import pytest
from decay_airdrop.airdrop_state import TOKEN_UNIT, INITIAL_AIRDROP_SUPPLY
from decay_airdrop.core import ClaimRequest
from decay_airdrop.crypto import generate_key_pair, serialize_public_key, public_key_to_address
from decay_airdrop.engine import AirdropEngine, AlreadyClaimed, BalanceTooLow
from decay_airdrop.ledger import Ledger, InsufficientFunds, AIRDROP, NATIVE, AIRDROP_POOL_ADDRESS
from decay_airdrop.monitoring import Monitor
from decay_airdrop.service import AirdropService, ValidationError


@pytest.fixture
def ledger():
    return Ledger()


@pytest.fixture
def service(ledger):
    svc = AirdropService(AirdropEngine(), ledger, chain_id=1)
    svc.fund_pool()
    return svc


def make_claimant(ledger, native_balance):
    """Create a random claimant and send it some native currency."""
    priv_key, pub_key = generate_key_pair()
    pub_key_pem = serialize_public_key(pub_key)
    address = public_key_to_address(pub_key_pem)
    ledger.credit(address, native_balance, NATIVE)
    return {
        'priv_key': priv_key,
        'pub_key_pem': pub_key_pem,
        'address': address,
    }


def signed_request(claimant, chain_id=1):
    request = ClaimRequest(claimant_public_key=claimant['pub_key_pem'], chain_id=chain_id)
    request.sign(claimant['priv_key'])
    return request


def test_fund_pool(service, ledger):
    assert ledger.balance_of(AIRDROP_POOL_ADDRESS, AIRDROP) == INITIAL_AIRDROP_SUPPLY
    service.fund_pool()
    assert ledger.balance_of(AIRDROP_POOL_ADDRESS, AIRDROP) == INITIAL_AIRDROP_SUPPLY


def test_claim_pays_claimant(service, ledger):
    claimant = make_claimant(ledger, 4 * TOKEN_UNIT // 10)
    receipt = service.submit(signed_request(claimant))

    assert receipt.claim_number == 1
    assert receipt.identity == claimant['address']
    assert receipt.ratio == 10 ** 18
    assert receipt.amount == 2674138840000000000000000000
    assert receipt.remaining_supply == 264739745160000000000000000000
    assert ledger.balance_of(claimant['address'], AIRDROP) == receipt.amount
    assert ledger.balance_of(AIRDROP_POOL_ADDRESS, AIRDROP) == receipt.remaining_supply
    assert receipt.to_dict()['identity'] == claimant['address'].hex()


def test_preview_matches_claim(service, ledger):
    claimant = make_claimant(ledger, TOKEN_UNIT)
    request = signed_request(claimant)

    preview = service.preview(request)
    assert ledger.balance_of(claimant['address'], AIRDROP) == 0
    assert service.submit(request).amount == preview


def test_second_claim_from_same_address(service, ledger):
    claimant = make_claimant(ledger, TOKEN_UNIT)
    service.submit(signed_request(claimant))

    with pytest.raises(AlreadyClaimed):
        service.submit(signed_request(claimant))


def test_low_balance_rejected(service, ledger):
    claimant = make_claimant(ledger, 2 * TOKEN_UNIT // 10)
    with pytest.raises(BalanceTooLow):
        service.submit(signed_request(claimant))
    assert ledger.balance_of(claimant['address'], AIRDROP) == 0


def test_unsigned_request_rejected(service, ledger):
    claimant = make_claimant(ledger, TOKEN_UNIT)
    request = ClaimRequest(claimant_public_key=claimant['pub_key_pem'])

    with pytest.raises(ValidationError):
        service.submit(request)
    assert not service.engine.has_claimed(claimant['address'])


def test_wrong_chain_rejected(service, ledger):
    claimant = make_claimant(ledger, TOKEN_UNIT)
    with pytest.raises(ValidationError):
        service.submit(signed_request(claimant, chain_id=5))


def test_unfunded_pool_does_not_record_claim(ledger):
    service = AirdropService(AirdropEngine(), ledger)
    claimant = make_claimant(ledger, TOKEN_UNIT)

    with pytest.raises(InsufficientFunds):
        service.submit(signed_request(claimant))

    assert not service.engine.has_claimed(claimant['address'])
    assert service.engine.current_supply() == INITIAL_AIRDROP_SUPPLY
    assert service.engine.current_ratio() == 10 ** 18


def test_claims_are_reported_to_monitor(ledger):
    engine = AirdropEngine()
    monitor = Monitor(engine, start_server=False)
    service = AirdropService(engine, ledger, monitor=monitor)
    service.fund_pool()

    claimant = make_claimant(ledger, TOKEN_UNIT)
    service.submit(signed_request(claimant))
    with pytest.raises(AlreadyClaimed):
        service.submit(signed_request(claimant))

    registry = monitor.registry
    assert registry.get_sample_value('airdrop_claims_total', {'status': 'accepted'}) == 1
    assert registry.get_sample_value('airdrop_claims_total', {'status': 'AlreadyClaimed'}) == 1
    assert registry.get_sample_value('airdrop_claim_count') == 1
