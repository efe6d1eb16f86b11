"""Read-only endpoints: balances, handles, allowances, quotes, mint events, supply summary."""

from django.conf import settings
from django.http import JsonResponse, HttpResponseBadRequest
from core.adapters.native_adapter import NativeAdapter
from core.constants import format_units
from core.errors import CusdcError
from core.ledger import ConfidentialLedger
from core.models import MintEvent
from core.services import SwapEngine


def quote(request):
	"""
	GET ?base_wei=...: cUSDC units a swap of that many wei would mint
	"""
	try:
		base_wei = int(request.GET.get("base_wei", ""))
	except ValueError:
		return HttpResponseBadRequest("base_wei must be an integer")
	try:
		units = SwapEngine.preview(base_wei)
	except CusdcError as e:
		return JsonResponse({"error": e.message, "code": e.code}, status=400)
	return JsonResponse({
		"base_wei": str(base_wei),
		"token_units": str(units),
		"token": format_units(units),
		"rate": getattr(settings, "CUSDC_PER_ETH", 3100),
	})


def balance(request, address: str):
	"""
	GET: Public balance, confidential handle and native balance for an address
	"""
	try:
		units = ConfidentialLedger.balance_of(address)
	except ValueError:
		return HttpResponseBadRequest("invalid address")
	return JsonResponse({
		"address": address,
		"balance_units": str(units),
		"balance": format_units(units),
		"confidential_handle": ConfidentialLedger.confidential_balance_of(address),
		"native_balance_wei": str(NativeAdapter.balance(address)),
		"token_decimals": getattr(settings, "TOKEN_DECIMALS", 6),
	})


def allowance(request, owner: str, spender: str):
	try:
		units = ConfidentialLedger.allowance(owner, spender)
	except ValueError:
		return HttpResponseBadRequest("invalid address")
	return JsonResponse({"owner": owner, "spender": spender, "allowance_units": str(units)})


def mint_events(request):
	"""
	GET: Recent swaps (newest first) for auditing reserve vs. supply
	"""
	rows = MintEvent.objects.order_by("-created_at")[:50]
	data = [
		{
			"id": str(r.id),
			"payer": r.payer,
			"recipient": r.recipient,
			"base_amount_wei": str(r.base_amount_wei),
			"token_amount": str(r.token_amount),
			"created_at": r.created_at.isoformat(),
		}
		for r in rows
	]
	return JsonResponse(data, safe=False)


def debug_summary(request):
	supply = ConfidentialLedger.supply_summary()
	reserve_wei = NativeAdapter.balance(SwapEngine.address())
	token = ConfidentialLedger.token()
	return JsonResponse({
		"supply": {
			"total_supply_units": str(supply["total_supply_units"]),
			"minted_units": str(supply["minted_units"]),
			"accounts": supply["accounts"],
			"match": supply["ok"],
		},
		"reserve_wei": str(reserve_wei),
		"token": {"name": token.name, "symbol": token.symbol, "minter": token.minter},
		"notes": "total_supply_units should equal minted_units when everything is consistent.",
	})
