import pytest
from eth_account import Account

from core.adapters.native_adapter import NativeAdapter
from core.constants import WEI_PER_ETH
from core.ledger import ConfidentialLedger
from core.services import LiquidityCoordinator, SwapEngine
from router_stub.router import router_address

ALICE_KEY = "0x" + "11" * 32
BOB_KEY = "0x" + "22" * 32

ONE_ETH = WEI_PER_ETH
HALF_ETH = WEI_PER_ETH // 2
QUARTER_ETH = WEI_PER_ETH // 4


@pytest.fixture
def alice():
    return Account.from_key(ALICE_KEY)


@pytest.fixture
def bob():
    return Account.from_key(BOB_KEY)


@pytest.fixture
def funded(db, alice, bob):
    NativeAdapter.credit(alice.address, 5 * ONE_ETH)
    NativeAdapter.credit(bob.address, 5 * ONE_ETH)


@pytest.fixture
def minter(db):
    return SwapEngine.address()


@pytest.fixture
def coordinator():
    return LiquidityCoordinator.address()


@pytest.fixture
def router():
    return router_address()


@pytest.fixture
def snapshot(alice, coordinator, router):
    """
    Every balance a liquidity call could touch, for before/after comparisons.
    """
    def take():
        return {
            "alice_token": ConfidentialLedger.balance_of(alice.address),
            "alice_handle": ConfidentialLedger.confidential_balance_of(alice.address),
            "alice_native": NativeAdapter.balance(alice.address),
            "alice_allowance": ConfidentialLedger.allowance(alice.address, coordinator),
            "coordinator_token": ConfidentialLedger.balance_of(coordinator),
            "coordinator_native": NativeAdapter.balance(coordinator),
            "router_token": ConfidentialLedger.balance_of(router),
            "router_native": NativeAdapter.balance(router),
            "supply": ConfidentialLedger.total_supply(),
        }
    return take
