import time

import pytest

from core.adapters.native_adapter import NativeAdapter
from core.errors import Expired, InsufficientAllowance, SlippageExceeded, ZeroAmount
from core.ledger import ConfidentialLedger
from core.services import LiquidityCoordinator, LiquidityRequest, SwapEngine, default_liquidity_request
from router_stub.models import RouterPosition
from router_stub.router import configure_shares

from .conftest import HALF_ETH, ONE_ETH, QUARTER_ETH

pytestmark = pytest.mark.django_db


@pytest.fixture
def minted(funded, alice, coordinator):
    """
    alice swapped 1 ETH and approved the coordinator for everything she holds
    """
    SwapEngine.swap(alice.address, ONE_ETH, alice.address)
    ConfidentialLedger.approve(alice.address, coordinator, 3100_000000)


def make_request(recipient, *, desired=1550_000000, min_token=775_000000, min_base=QUARTER_ETH, deadline=None):
    if deadline is None:
        deadline = int(time.time()) + 3600
    return LiquidityRequest(desired_token=desired, min_token=min_token, min_base=min_base, deadline=deadline, recipient=recipient)


def test_partial_fill_refunds_exactly(minted, alice, coordinator, router):
    configure_shares(7000, 5000)

    outcome = LiquidityCoordinator.provide_liquidity(alice.address, make_request(alice.address), HALF_ETH)

    assert outcome.token_consumed == 1085_000000
    assert outcome.base_consumed == QUARTER_ETH
    assert outcome.token_refunded == 465_000000
    assert outcome.base_refunded == QUARTER_ETH
    assert outcome.token_consumed + outcome.token_refunded == 1550_000000
    assert outcome.base_consumed + outcome.base_refunded == HALF_ETH

    assert ConfidentialLedger.balance_of(alice.address) == 3100_000000 - 1085_000000
    assert NativeAdapter.balance(alice.address) == 4 * ONE_ETH - QUARTER_ETH
    assert ConfidentialLedger.balance_of(router) == 1085_000000
    assert NativeAdapter.balance(router) == QUARTER_ETH
    assert ConfidentialLedger.balance_of(coordinator) == 0
    assert NativeAdapter.balance(coordinator) == 0

    # the whole desired amount was pulled, refunds do not restore the allowance
    assert ConfidentialLedger.allowance(alice.address, coordinator) == 1550_000000
    assert ConfidentialLedger.allowance(coordinator, router) == 0
    assert ConfidentialLedger.total_supply() == 3100_000000


def test_partial_fill_records_position(minted, alice, coordinator):
    configure_shares(7000, 5000)
    outcome = LiquidityCoordinator.provide_liquidity(alice.address, make_request(alice.address), HALF_ETH)

    position = RouterPosition.objects.get()
    assert position.sender == coordinator
    assert position.recipient == alice.address
    assert position.token_amount == 1085_000000
    assert position.base_amount_wei == QUARTER_ETH
    assert position.liquidity == outcome.liquidity > 0


def test_full_fill_has_no_refunds(minted, alice, coordinator, router):
    outcome = LiquidityCoordinator.provide_liquidity(alice.address, make_request(alice.address), HALF_ETH)

    assert (outcome.token_refunded, outcome.base_refunded) == (0, 0)
    assert ConfidentialLedger.balance_of(router) == 1550_000000
    assert NativeAdapter.balance(router) == HALF_ETH
    assert ConfidentialLedger.balance_of(alice.address) == 1550_000000
    assert NativeAdapter.balance(alice.address) == 4 * ONE_ETH - HALF_ETH
    assert ConfidentialLedger.balance_of(coordinator) == 0


def test_past_deadline_is_expired(minted, alice, snapshot):
    before = snapshot()
    request = make_request(alice.address, deadline=int(time.time()) - 1)

    with pytest.raises(Expired):
        LiquidityCoordinator.provide_liquidity(alice.address, request, HALF_ETH)

    assert snapshot() == before
    assert not RouterPosition.objects.exists()


def test_slippage_rolls_back_everything(minted, alice, snapshot):
    configure_shares(4000, 5000)
    before = snapshot()

    with pytest.raises(SlippageExceeded) as exc:
        LiquidityCoordinator.provide_liquidity(alice.address, make_request(alice.address), HALF_ETH)

    assert "token leg" in exc.value.message
    assert snapshot() == before
    assert not RouterPosition.objects.exists()


def test_base_leg_slippage(minted, alice, snapshot):
    configure_shares(10000, 4000)
    before = snapshot()

    with pytest.raises(SlippageExceeded) as exc:
        LiquidityCoordinator.provide_liquidity(alice.address, make_request(alice.address), HALF_ETH)

    assert "base leg" in exc.value.message
    assert snapshot() == before


def test_missing_approval(funded, alice, coordinator, snapshot):
    SwapEngine.swap(alice.address, ONE_ETH, alice.address)
    before = snapshot()

    with pytest.raises(InsufficientAllowance):
        LiquidityCoordinator.provide_liquidity(alice.address, make_request(alice.address), HALF_ETH)

    # the attached ETH is rolled back together with the failed pull
    assert snapshot() == before
    assert NativeAdapter.balance(alice.address) == 4 * ONE_ETH


@pytest.mark.parametrize("desired, supplied", [(0, HALF_ETH), (1550_000000, 0)])
def test_zero_amounts(minted, alice, snapshot, desired, supplied):
    before = snapshot()
    with pytest.raises(ZeroAmount):
        LiquidityCoordinator.provide_liquidity(alice.address, make_request(alice.address, desired=desired, min_token=0), supplied)
    assert snapshot() == before


def test_reserve_refund_policy(minted, alice, minter, settings):
    settings.LIQUIDITY_BASE_REFUND_POLICY = "reserve"
    configure_shares(7000, 5000)

    LiquidityCoordinator.provide_liquidity(alice.address, make_request(alice.address), HALF_ETH)

    assert NativeAdapter.balance(minter) == ONE_ETH + QUARTER_ETH
    assert NativeAdapter.balance(alice.address) == 4 * ONE_ETH - HALF_ETH
    assert ConfidentialLedger.balance_of(alice.address) == 3100_000000 - 1085_000000


def test_default_request_uses_one_percent_floor(alice, settings):
    settings.DEFAULT_SLIPPAGE_BPS = 100
    settings.LIQUIDITY_DEADLINE_SECONDS = 900
    now = int(time.time())

    request = default_liquidity_request(1550_000000, HALF_ETH, alice.address)

    assert request.min_token == 1534_500000
    assert request.min_base == HALF_ETH * 99 // 100
    assert now + 900 <= request.deadline <= int(time.time()) + 900
    assert request.recipient == alice.address
