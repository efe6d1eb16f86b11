"""HTTP endpoints for the native currency stub.

The adapters use ORM access for determinism; these endpoints mirror what a node
would expose (balance, transaction history).
"""

from django.http import JsonResponse, HttpResponseBadRequest
from eth_utils import to_checksum_address
from .models import NativeAccount, NativeTx


def balance(request, address: str):
	"""
	GET: Current wei balance of an address (0 when never funded)
	"""
	try:
		address = to_checksum_address(address)
	except ValueError:
		return HttpResponseBadRequest("invalid address")
	acct = NativeAccount.objects.filter(address=address).first()
	return JsonResponse({"address": address, "balance_wei": str(acct.balance_wei if acct else 0)})


def transactions(request, address: str):
	"""
	GET: Chronological list of value movements touching an address
	"""
	try:
		address = to_checksum_address(address)
	except ValueError:
		return HttpResponseBadRequest("invalid address")
	qs = (NativeTx.objects.filter(from_address=address) | NativeTx.objects.filter(to_address=address)).order_by("occurred_at")
	data = [
		{
			"tx_id": tx.tx_id,
			"from": tx.from_address or None,
			"to": tx.to_address,
			"amount_wei": str(tx.amount_wei),
			"memo": tx.memo,
			"occurred_at": tx.occurred_at.isoformat().replace("+00:00", "Z"),
		}
		for tx in qs
	]
	return JsonResponse(data, safe=False)
