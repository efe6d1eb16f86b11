"""Public API surface for the vault.

- /demo/native/credit: faucet for native ETH
- /swap, /approve, /liquidity: ledger-mutating operations
- /quote, /balance, /allowance, /mint-events, /debug/summary: read-only views
"""

from django.urls import path
from .views_demo import native_credit
from .views_ops import health, swap, approve, add_liquidity
from .views_read import quote, balance, allowance, mint_events, debug_summary


urlpatterns = [
	path("health", health),
	path("demo/native/credit", native_credit),
	path("swap", swap),
	path("approve", approve),
	path("liquidity", add_liquidity),
	path("quote", quote),
	path("balance/<str:address>", balance),
	path("allowance/<str:owner>/<str:spender>", allowance),
	path("mint-events", mint_events),
	path("debug/summary", debug_summary),
]
