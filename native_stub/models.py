"""Deterministic in-process native currency (ETH) book.

Holds one balance per address in wei and an append-only transfer log. Used to
simulate the value attached to swap and liquidity calls without a node.
"""

import uuid
from django.db import models
from django.utils.timezone import now


class NativeAccount(models.Model):
	"""
	Native balance of an externally owned account or contract (wei)
	"""
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	address = models.CharField(max_length=42, unique=True)
	balance_wei = models.BigIntegerField(default=0)


def gen_native_tx_id():
	# Named function = migration-friendly
	return f"0x{uuid.uuid4().hex}"


class NativeTx(models.Model):
	"""
	Append-only list of value movements with unique tx_id.

	from_address is blank for faucet credits.
	"""
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	tx_id = models.CharField(max_length=100, unique=True, default=gen_native_tx_id)
	from_address = models.CharField(max_length=42, blank=True)
	to_address = models.CharField(max_length=42)
	amount_wei = models.BigIntegerField()
	memo = models.TextField(blank=True)
	occurred_at = models.DateTimeField(default=now)
