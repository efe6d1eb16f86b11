"""HTTP endpoints for the confidential-computation stub mirroring a relayer surface"""

import json
from django.http import JsonResponse, HttpResponseBadRequest, HttpResponseNotFound
from django.views.decorators.csrf import csrf_exempt
from . import relayer
from .models import Ciphertext


def handle_info(request, handle: str):
	"""
	GET: Public metadata of a handle (never its value)
	"""
	ct = Ciphertext.objects.filter(handle=handle).first()
	if ct is None:
		return HttpResponseNotFound("unknown handle")
	return JsonResponse({
		"handle": ct.handle,
		"type": ct.fhe_type,
		"contract": ct.contract_address,
		"owner": ct.owner,
	})


@csrf_exempt
def user_decrypt(request):
	"""
	POST: Signed user-decrypt request; returns values sealed to the request's public key
	Body:
	{
	  "handleContractPairs": [{"handle": "0x..", "contractAddress": "0x.."}],
	  "publicKey": "..", "signature": "0x..", "contractAddresses": ["0x.."],
	  "userAddress": "0x..", "startTimestamp": 1700000000, "durationDays": 10
	}
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	try:
		body = json.loads(request.body or b"{}")
		pairs = [(p["handle"], p["contractAddress"]) for p in body["handleContractPairs"]]
		result = relayer.user_decrypt(
			pairs,
			public_key=body["publicKey"],
			signature=body["signature"],
			contract_addresses=body["contractAddresses"],
			requester=body["userAddress"],
			start_timestamp=body["startTimestamp"],
			duration_days=body["durationDays"],
		)
	except (KeyError, TypeError, ValueError) as e:
		return HttpResponseBadRequest(f"Malformed request: {e}")
	except relayer.RelayerError as e:
		return JsonResponse({"error": str(e), "type": type(e).__name__}, status=403)
	except ConnectionError as e:
		return JsonResponse({"error": str(e)}, status=503)
	return JsonResponse({"result": result})
