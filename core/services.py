"""Business orchestration for the vault.

This module coordinates: ETH in -> fixed-rate cUSDC mint (SwapEngine), and
cUSDC + ETH -> router liquidity with exact refunds (LiquidityCoordinator).
Each operation is wrapped in @transaction.atomic so it fully commits or leaves
every balance as it was.
"""

import logging
import time
from dataclasses import dataclass

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import transaction
from django.db.models import Sum

from .adapters.native_adapter import NativeAdapter
from .adapters.router_adapter import RouterAdapter
from .constants import BPS_DENOMINATOR, normalize_address, quote
from .errors import Expired, Unauthorized, ZeroAmount
from .ledger import ConfidentialLedger
from .models import MintEvent, ReconciliationRun

logger = logging.getLogger(__name__)


class SwapEngine:

	@staticmethod
	def address() -> str:
		"""
		The swap contract: sole cUSDC minter and holder of the ETH reserve
		"""
		return normalize_address(settings.SWAP_ADDRESS)

	@staticmethod
	def preview(base_amount_wei: int) -> int:
		return quote(base_amount_wei)

	@staticmethod
	@transaction.atomic
	def swap(payer: str, base_amount_wei: int, recipient: str, *, idempotency_key: str | None = None) -> MintEvent:
		"""
		Take `base_amount_wei` from payer into the reserve and mint the quoted cUSDC to recipient.

		The ETH stays in the reserve as backing. Mint and MintEvent commit together.
		"""
		# If a key was provided and this swap already happened, return it without side-effects
		if idempotency_key:
			existing = MintEvent.objects.filter(idempotency_key=idempotency_key).first()
			if existing:
				return existing

		base_amount_wei = int(base_amount_wei)
		if base_amount_wei <= 0:
			raise ZeroAmount(f"base_amount must be > 0 wei, got {base_amount_wei}")
		token_amount = quote(base_amount_wei)
		if token_amount == 0:
			raise ZeroAmount(f"{base_amount_wei} wei is below the smallest mintable cUSDC unit")

		payer, recipient = normalize_address(payer), normalize_address(recipient)
		reserve = SwapEngine.address()
		if payer == reserve:
			logger.warning("swap rejected: reserve %s tried to pay itself", reserve)
			raise Unauthorized(f"the swap reserve {reserve} cannot pay for a swap; its ETH already backs minted cUSDC")

		NativeAdapter.transfer(payer, reserve, base_amount_wei, memo="swapEthForCusdc")
		ConfidentialLedger.mint(recipient, token_amount, minter=reserve)
		event = MintEvent.objects.create(
			payer=payer,
			recipient=recipient,
			base_amount_wei=base_amount_wei,
			token_amount=token_amount,
			idempotency_key=idempotency_key,
		)
		logger.info("swap: %s paid %s wei, minted %s units to %s", payer, base_amount_wei, token_amount, recipient)
		return event

	@staticmethod
	@transaction.atomic
	def reconcile(notes: str = "") -> ReconciliationRun:
		"""
		Snapshot the ETH reserve against MintEvents and the ledger supply.

		ok when the reserve covers every wei ever swapped in and supply equals minted units.
		"""
		reserve_wei = NativeAdapter.balance(SwapEngine.address())
		totals = MintEvent.objects.aggregate(base=Sum("base_amount_wei"), units=Sum("token_amount"))
		minted_base = totals["base"] or 0
		minted_units = totals["units"] or 0
		supply = ConfidentialLedger.total_supply()

		run = ReconciliationRun.objects.create(
			reserve_balance_wei=reserve_wei,
			minted_base_wei=minted_base,
			minted_units=minted_units,
			total_supply_units=supply,
			ok=reserve_wei >= minted_base and supply == minted_units,
			notes=notes,
		)
		if not run.ok:
			logger.warning("reconciliation mismatch: reserve=%s minted_wei=%s supply=%s minted_units=%s",
						   reserve_wei, minted_base, supply, minted_units)
		return run


@dataclass(frozen=True)
class LiquidityRequest:
	desired_token: int
	min_token: int
	min_base: int
	deadline: int  # unix seconds
	recipient: str


@dataclass(frozen=True)
class LiquidityOutcome:
	token_consumed: int
	base_consumed: int
	token_refunded: int
	base_refunded: int
	liquidity: int = 0


def default_liquidity_request(desired_token: int, supplied_base: int, recipient: str, *,
							  slippage_bps: int | None = None, deadline_seconds: int | None = None) -> LiquidityRequest:
	"""
	Request with the dApp defaults: mins at (1 - slippage) of each leg, deadline a few minutes out
	"""
	if slippage_bps is None:
		slippage_bps = getattr(settings, "DEFAULT_SLIPPAGE_BPS", 100)
	if deadline_seconds is None:
		deadline_seconds = getattr(settings, "LIQUIDITY_DEADLINE_SECONDS", 900)
	keep = BPS_DENOMINATOR - int(slippage_bps)
	return LiquidityRequest(
		desired_token=int(desired_token),
		min_token=int(desired_token) * keep // BPS_DENOMINATOR,
		min_base=int(supplied_base) * keep // BPS_DENOMINATOR,
		deadline=int(time.time()) + int(deadline_seconds),
		recipient=recipient,
	)


class LiquidityCoordinator:

	@staticmethod
	def address() -> str:
		return normalize_address(settings.LIQUIDITY_ADDRESS)

	@staticmethod
	def base_refund_destination(caller: str) -> str:
		policy = getattr(settings, "LIQUIDITY_BASE_REFUND_POLICY", "caller")
		if policy == "caller":
			return caller
		if policy == "reserve":
			return SwapEngine.address()
		raise ImproperlyConfigured(f"LIQUIDITY_BASE_REFUND_POLICY must be 'caller' or 'reserve', got {policy!r}")

	@staticmethod
	@transaction.atomic
	def provide_liquidity(caller: str, request: LiquidityRequest, supplied_base: int) -> LiquidityOutcome:
		"""
		Pull desired_token from caller (needs a prior approve), add liquidity with the
		attached ETH, and refund whatever the router did not use.

		Order (atomic): attach ETH -> pull tokens -> router -> refund tokens -> refund ETH
		"""
		now = int(time.time())
		if now > request.deadline:
			logger.warning("liquidity rejected: deadline %s passed (now %s)", request.deadline, now)
			raise Expired(f"deadline {request.deadline} has passed (now {now})")
		desired_token = int(request.desired_token)
		supplied_base = int(supplied_base)
		if desired_token <= 0:
			raise ZeroAmount(f"desired_token must be > 0, got {desired_token}")
		if supplied_base <= 0:
			raise ZeroAmount(f"supplied_base must be > 0 wei, got {supplied_base}")

		caller = normalize_address(caller)
		coordinator = LiquidityCoordinator.address()
		router = RouterAdapter.address()
		held_token = ConfidentialLedger.balance_of(coordinator)
		held_base = NativeAdapter.balance(coordinator)

		NativeAdapter.transfer(caller, coordinator, supplied_base, memo="addLiquidity value")
		ConfidentialLedger.transfer_from(caller, coordinator, desired_token)

		ConfidentialLedger.approve(coordinator, router, desired_token)
		receipt = RouterAdapter.add_liquidity(
			sender=coordinator,
			token_amount=desired_token,
			min_token=request.min_token,
			min_base=request.min_base,
			deadline=request.deadline,
			recipient=normalize_address(request.recipient),
			value=supplied_base,
		)
		ConfidentialLedger.approve(coordinator, router, 0)

		token_consumed = int(receipt["token_consumed"])
		base_consumed = int(receipt["base_consumed"])
		if not (0 <= token_consumed <= desired_token and 0 <= base_consumed <= supplied_base):
			raise RuntimeError(f"router reported consumption outside the offer: {receipt}")

		# refunds come from what the router reports, never from an estimate
		token_refunded = desired_token - token_consumed
		base_refunded = supplied_base - base_consumed
		if token_refunded:
			ConfidentialLedger.transfer(coordinator, caller, token_refunded)
		if base_refunded:
			NativeAdapter.transfer(coordinator, LiquidityCoordinator.base_refund_destination(caller), base_refunded, memo="addLiquidity refund")

		if ConfidentialLedger.balance_of(coordinator) != held_token or NativeAdapter.balance(coordinator) != held_base:
			raise RuntimeError("liquidity coordinator would keep a residual balance")

		logger.info("liquidity for %s: used %s/%s units and %s/%s wei", caller, token_consumed, desired_token, base_consumed, supplied_base)
		return LiquidityOutcome(
			token_consumed=token_consumed,
			base_consumed=base_consumed,
			token_refunded=token_refunded,
			base_refunded=base_refunded,
			liquidity=int(receipt.get("liquidity", 0)),
		)
