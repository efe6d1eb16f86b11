import json

import pytest

from core.ledger import ConfidentialLedger
from router_stub.router import configure_shares

from .conftest import HALF_ETH, ONE_ETH

pytestmark = pytest.mark.django_db


def post(client, url, payload, **extra):
    return client.post(url, data=json.dumps(payload), content_type="application/json", **extra)


def test_health(client):
    assert client.get("/api/health").json() == {"ok": True}


def test_quote_endpoint(client):
    resp = client.get("/api/quote", {"base_wei": str(ONE_ETH)})
    assert resp.status_code == 200
    body = resp.json()
    assert body["token_units"] == "3100000000"
    assert body["token"] == "3100.000000"
    assert body["rate"] == 3100


def test_quote_rejects_garbage(client):
    assert client.get("/api/quote", {"base_wei": "lots"}).status_code == 400


def test_faucet_swap_and_balance(client, alice):
    resp = post(client, "/api/demo/native/credit", {"address": alice.address, "amount_eth": "2"})
    assert resp.status_code == 201
    assert resp.json()["balance_wei"] == str(2 * ONE_ETH)

    resp = post(client, "/api/swap", {"payer": alice.address, "base_amount_wei": str(ONE_ETH)})
    assert resp.status_code == 201
    assert resp.json()["token_amount"] == "3100000000"

    body = client.get(f"/api/balance/{alice.address}").json()
    assert body["balance_units"] == "3100000000"
    assert body["balance"] == "3100.000000"
    assert body["native_balance_wei"] == str(ONE_ETH)
    assert body["confidential_handle"] == ConfidentialLedger.confidential_balance_of(alice.address)

    events = client.get("/api/mint-events").json()
    assert len(events) == 1
    assert events[0]["payer"] == alice.address


def test_swap_idempotency_header(client, funded, alice):
    payload = {"payer": alice.address, "base_amount_wei": str(ONE_ETH)}
    first = post(client, "/api/swap", payload, HTTP_IDEMPOTENCY_KEY="abc-1").json()
    second = post(client, "/api/swap", payload, HTTP_IDEMPOTENCY_KEY="abc-1").json()

    assert first["event_id"] == second["event_id"]
    assert ConfidentialLedger.balance_of(alice.address) == 3100_000000


def test_swap_zero_is_a_400_with_code(client, funded, alice):
    resp = post(client, "/api/swap", {"payer": alice.address, "base_amount_wei": "0"})
    assert resp.status_code == 400
    assert resp.json()["code"] == "zero_amount"


def test_swap_requires_post(client):
    assert client.get("/api/swap").status_code == 400


def test_liquidity_through_api(client, funded, alice, coordinator):
    post(client, "/api/swap", {"payer": alice.address, "base_amount_wei": str(ONE_ETH)})
    resp = post(client, "/api/approve", {"owner": alice.address, "spender": coordinator, "amount_units": "3100000000"})
    assert resp.json()["allowance_units"] == "3100000000"
    assert client.get(f"/api/allowance/{alice.address}/{coordinator}").json()["allowance_units"] == "3100000000"

    resp = post(client, "/stub/router/shares", {"token_share_bps": 7000, "base_share_bps": 5000})
    assert resp.json() == {"token_share_bps": 7000, "base_share_bps": 5000}

    resp = post(client, "/api/liquidity", {
        "caller": alice.address,
        "desired_token": "1550000000",
        "supplied_base_wei": str(HALF_ETH),
        "min_token": "775000000",
        "min_base": str(HALF_ETH // 2),
    })
    assert resp.status_code == 201
    assert resp.json()["token_consumed"] == "1085000000"
    assert resp.json()["token_refunded"] == "465000000"
    assert resp.json()["base_refunded"] == str(HALF_ETH // 2)

    positions = client.get("/stub/router/positions").json()
    assert positions[0]["token_amount"] == "1085000000"


def test_liquidity_default_slippage_rejects_partial_fill(client, funded, alice, coordinator):
    post(client, "/api/swap", {"payer": alice.address, "base_amount_wei": str(ONE_ETH)})
    post(client, "/api/approve", {"owner": alice.address, "spender": coordinator, "amount_units": "3100000000"})
    configure_shares(7000, 5000)

    resp = post(client, "/api/liquidity", {
        "caller": alice.address,
        "desired_token": "1550000000",
        "supplied_base_wei": str(HALF_ETH),
    })
    assert resp.status_code == 400
    assert resp.json()["code"] == "slippage_exceeded"
    assert ConfidentialLedger.balance_of(alice.address) == 3100_000000


def test_liquidity_missing_field(client, alice):
    assert post(client, "/api/liquidity", {"caller": alice.address}).status_code == 400


def test_handle_info_hides_value(client, alice, minter):
    ConfidentialLedger.mint(alice.address, 42_000000, minter=minter)
    handle = ConfidentialLedger.confidential_balance_of(alice.address)

    body = client.get(f"/stub/fhe/handles/{handle}").json()
    assert body["type"] == "euint64"
    assert body["owner"] == alice.address
    assert "value" not in body
    assert "42000000" not in json.dumps(body)


def test_debug_summary(client, funded, alice):
    post(client, "/api/swap", {"payer": alice.address, "base_amount_wei": str(ONE_ETH)})

    body = client.get("/api/debug/summary").json()
    assert body["supply"]["match"] is True
    assert body["supply"]["total_supply_units"] == "3100000000"
    assert body["reserve_wei"] == str(ONE_ETH)
    assert body["token"]["symbol"] == "cUSDC"


def test_native_stub_history(client, funded, alice):
    post(client, "/api/swap", {"payer": alice.address, "base_amount_wei": str(ONE_ETH)})

    history = client.get(f"/stub/native/transactions/{alice.address}").json()
    assert sorted(tx["memo"] for tx in history) == ["faucet", "swapEthForCusdc"]


def test_swap_paid_by_reserve_is_refused(client, funded, alice, minter):
    post(client, "/api/swap", {"payer": alice.address, "base_amount_wei": str(ONE_ETH)})

    resp = post(client, "/api/swap", {"payer": minter, "base_amount_wei": str(ONE_ETH), "recipient": alice.address})
    assert resp.status_code == 400
    assert resp.json()["code"] == "unauthorized"
    assert client.get("/api/debug/summary").json()["reserve_wei"] == str(ONE_ETH)


def test_native_stub_accepts_lowercase_addresses(client, funded, alice):
    lower = alice.address.lower()

    body = client.get(f"/stub/native/balance/{lower}").json()
    assert body["address"] == alice.address
    assert body["balance_wei"] == str(5 * ONE_ETH)

    history = client.get(f"/stub/native/transactions/{lower}").json()
    assert [tx["memo"] for tx in history] == ["faucet"]


def test_native_stub_rejects_bad_address(client):
    assert client.get("/stub/native/balance/not-an-address").status_code == 400
