"""In-process AMM router state: configurable fill shares and the positions it minted"""

import uuid
from django.db import models


class RouterConfig(models.Model):
	"""
	Singleton (pk=1). Share of each offered leg the router consumes, in basis points.
	"""
	id = models.PositiveSmallIntegerField(primary_key=True, default=1, editable=False)
	token_share_bps = models.PositiveIntegerField(default=10_000)
	base_share_bps = models.PositiveIntegerField(default=10_000)


class RouterPosition(models.Model):
	"""
	Liquidity added through the router, credited to `recipient`
	"""
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	sender = models.CharField(max_length=42)
	recipient = models.CharField(max_length=42)
	token_amount = models.BigIntegerField()
	base_amount_wei = models.BigIntegerField()
	liquidity = models.BigIntegerField()
	created_at = models.DateTimeField(auto_now_add=True)
