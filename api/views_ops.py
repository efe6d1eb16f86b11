"""Operational endpoints that move the ledger forward (swap/approve/liquidity)."""

import json
from django.http import JsonResponse, HttpResponseBadRequest
from django.views.decorators.csrf import csrf_exempt
from django.core.exceptions import ValidationError
from core.ledger import ConfidentialLedger
from core.services import LiquidityCoordinator, LiquidityRequest, SwapEngine, default_liquidity_request


def health(request):
	return JsonResponse({"ok": True})


def _error(e: ValidationError):
	return JsonResponse({"error": e.message, "code": e.code}, status=400)


@csrf_exempt
def swap(request):
	"""
	POST: {"payer": "0x..", "base_amount_wei": "1000000000000000000", "recipient": "0x.."}
	recipient defaults to payer.
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	body = json.loads(request.body or b"{}")
	payer = body.get("payer")
	if not payer or "base_amount_wei" not in body:
		return HttpResponseBadRequest("payer and base_amount_wei required")

	# Read idempotency key (optional)
	idempo = request.headers.get("Idempotency-Key")

	try:
		event = SwapEngine.swap(payer, int(body["base_amount_wei"]), body.get("recipient") or payer, idempotency_key=idempo)
	except ValidationError as e:
		return _error(e)
	except ValueError as e:
		return HttpResponseBadRequest(str(e))

	return JsonResponse({
		"event_id": str(event.id),
		"payer": event.payer,
		"recipient": event.recipient,
		"base_amount_wei": str(event.base_amount_wei),
		"token_amount": str(event.token_amount),
	}, status=201)


@csrf_exempt
def approve(request):
	"""
	POST: {"owner": "0x..", "spender": "0x..", "amount_units": "1550000000"}
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	body = json.loads(request.body or b"{}")
	try:
		allowance = ConfidentialLedger.approve(body["owner"], body["spender"], int(body["amount_units"]))
	except KeyError as e:
		return HttpResponseBadRequest(f"Missing field: {e}")
	except ValidationError as e:
		return _error(e)
	except ValueError as e:
		return HttpResponseBadRequest(str(e))
	return JsonResponse({"owner": allowance.owner, "spender": allowance.spender, "allowance_units": str(allowance.amount_units)})


@csrf_exempt
def add_liquidity(request):
	"""
	POST: Pull cUSDC from caller, add liquidity with the attached ETH, refund the rest.
	Body:
	{
	  "caller": "0x..", "desired_token": "1550000000", "supplied_base_wei": "500000000000000000",
	  "min_token": "...", "min_base": "...", "deadline": 1700000000,   // optional: dApp defaults
	  "recipient": "0x.."                                              // optional: caller
	}
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	body = json.loads(request.body or b"{}")
	try:
		caller = body["caller"]
		desired = int(body["desired_token"])
		supplied = int(body["supplied_base_wei"])
		recipient = body.get("recipient") or caller
		liquidity_request = default_liquidity_request(desired, supplied, recipient)
		if any(k in body for k in ("min_token", "min_base", "deadline")):
			liquidity_request = LiquidityRequest(
				desired_token=desired,
				min_token=int(body.get("min_token", liquidity_request.min_token)),
				min_base=int(body.get("min_base", liquidity_request.min_base)),
				deadline=int(body.get("deadline", liquidity_request.deadline)),
				recipient=recipient,
			)
		outcome = LiquidityCoordinator.provide_liquidity(caller, liquidity_request, supplied)
	except KeyError as e:
		return HttpResponseBadRequest(f"Missing field: {e}")
	except ValidationError as e:
		return _error(e)
	except ValueError as e:
		return HttpResponseBadRequest(str(e))

	return JsonResponse({
		"token_consumed": str(outcome.token_consumed),
		"base_consumed": str(outcome.base_consumed),
		"token_refunded": str(outcome.token_refunded),
		"base_refunded": str(outcome.base_refunded),
		"liquidity": str(outcome.liquidity),
	}, status=201)
