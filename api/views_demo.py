"""Demo helpers: fund an address with native ETH so it can swap."""

import json
from django.http import JsonResponse, HttpResponseBadRequest
from django.views.decorators.csrf import csrf_exempt
from core.adapters.native_adapter import NativeAdapter
from core.constants import parse_ether
from core.errors import CusdcError


@csrf_exempt
def native_credit(request):
	"""
	POST: {"address": "0x..", "amount_eth": "2.5"} -> simulated faucet deposit
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	body = json.loads(request.body or b"{}")
	address = body.get("address")
	amount_eth = body.get("amount_eth")
	if not address or not amount_eth:
		return HttpResponseBadRequest("address and amount_eth required")
	try:
		tx_id = NativeAdapter.credit(address, parse_ether(amount_eth), body.get("memo", "faucet"))
	except CusdcError as e:
		return JsonResponse({"error": e.message, "code": e.code}, status=400)
	return JsonResponse({"tx_id": tx_id, "balance_wei": str(NativeAdapter.balance(address))}, status=201)
