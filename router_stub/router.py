"""Mock of a Uniswap V2 style router's addLiquidityETH.

The router decides how much of each leg it takes (configured shares), reverts when
that falls below the caller's minimums, keeps what it used and sends unused ETH
back to the sender. Token pulls go through the cUSDC ledger like a real
transferFrom from the router.
"""

import logging
import math
import time

from django.conf import settings
from django.db import transaction
from eth_utils import to_checksum_address

from core.adapters.native_adapter import NativeAdapter
from core.ledger import ConfidentialLedger
from .models import RouterConfig, RouterPosition

logger = logging.getLogger(__name__)

BPS = 10_000


class RouterError(Exception):
	pass


class RouterExpired(RouterError):
	pass


class InsufficientTokenAmount(RouterError):
	pass


class InsufficientBaseAmount(RouterError):
	pass


def router_address() -> str:
	return to_checksum_address(settings.ROUTER_ADDRESS)


def current_config() -> RouterConfig:
	cfg, _ = RouterConfig.objects.get_or_create(pk=1)
	return cfg


def configure_shares(token_share_bps: int, base_share_bps: int) -> RouterConfig:
	"""
	Set how much of each offered leg future calls consume (10000 = all of it)
	"""
	for name, bps in (("token_share_bps", token_share_bps), ("base_share_bps", base_share_bps)):
		if not 0 <= int(bps) <= BPS:
			raise ValueError(f"{name} must be within 0..{BPS}, got {bps}")
	cfg = current_config()
	cfg.token_share_bps = int(token_share_bps)
	cfg.base_share_bps = int(base_share_bps)
	cfg.save(update_fields=["token_share_bps", "base_share_bps"])
	return cfg


@transaction.atomic
def add_liquidity_eth(sender: str, amount_token_desired: int, amount_token_min: int, amount_base_min: int,
					  to: str, deadline: int, value: int) -> dict:
	"""
	`value` is the ETH attached by `sender`; the router must already be approved
	for amount_token_desired.

	Returns {"token_consumed", "base_consumed", "liquidity"}.
	"""
	if int(time.time()) > int(deadline):
		raise RouterExpired("UniswapV2Router: EXPIRED")

	cfg = current_config()
	token_used = amount_token_desired * cfg.token_share_bps // BPS
	base_used = value * cfg.base_share_bps // BPS
	if token_used < amount_token_min:
		raise InsufficientTokenAmount(f"UniswapV2Router: INSUFFICIENT_A_AMOUNT ({token_used} < {amount_token_min})")
	if base_used < amount_base_min:
		raise InsufficientBaseAmount(f"UniswapV2Router: INSUFFICIENT_B_AMOUNT ({base_used} < {amount_base_min})")

	router = router_address()
	NativeAdapter.transfer(sender, router, value, memo="addLiquidityETH")
	if token_used:
		ConfidentialLedger.transfer_from(sender, router, token_used)
	if value > base_used:
		# refund dust eth
		NativeAdapter.transfer(router, sender, value - base_used, memo="addLiquidityETH refund")

	liquidity = math.isqrt(token_used * base_used)
	RouterPosition.objects.create(
		sender=to_checksum_address(sender),
		recipient=to_checksum_address(to),
		token_amount=token_used,
		base_amount_wei=base_used,
		liquidity=liquidity,
	)
	logger.info("addLiquidityETH: used %s token units and %s wei of %s/%s offered", token_used, base_used, amount_token_desired, value)
	return {"token_consumed": token_used, "base_consumed": base_used, "liquidity": liquidity}
