"""HTTP endpoints for the router stub (shares configuration, position listing)"""

import json
from django.http import JsonResponse, HttpResponseBadRequest
from django.views.decorators.csrf import csrf_exempt
from .models import RouterPosition
from .router import configure_shares, current_config


@csrf_exempt
def shares(request):
	"""
	GET: Current fill shares
	POST: {"token_share_bps": 7000, "base_share_bps": 5000}
	"""
	if request.method == "POST":
		body = json.loads(request.body or b"{}")
		try:
			cfg = configure_shares(int(body["token_share_bps"]), int(body["base_share_bps"]))
		except (KeyError, ValueError) as e:
			return HttpResponseBadRequest(str(e))
	else:
		cfg = current_config()
	return JsonResponse({"token_share_bps": cfg.token_share_bps, "base_share_bps": cfg.base_share_bps})


def positions(request):
	"""
	GET: Liquidity positions minted by the router, newest first
	"""
	rows = RouterPosition.objects.order_by("-created_at")[:50]
	data = [
		{
			"recipient": r.recipient,
			"token_amount": str(r.token_amount),
			"base_amount_wei": str(r.base_amount_wei),
			"liquidity": str(r.liquidity),
			"created_at": r.created_at.isoformat(),
		}
		for r in rows
	]
	return JsonResponse(data, safe=False)
