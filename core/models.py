"""Database models for the vault.


Tables:
- TokenConfig: cUSDC metadata plus the owner and the single authorized minter
- Account: dual balance views (public mirror + confidential handle) per address
- Allowance: (owner, spender) -> approved token units
- MintEvent: append-only record of every ETH -> cUSDC swap
- LedgerEntry: debit/credit audit rows for every balance movement
- ReconciliationRun: snapshot of ETH reserve vs. outstanding supply
"""

import uuid
from django.db import models


ZERO_HANDLE = "0x" + "00" * 32


class TokenConfig(models.Model):
	"""
	Singleton row (pk=1) describing the token, seeded from settings on first use
	"""
	id = models.PositiveSmallIntegerField(primary_key=True, default=1, editable=False)
	name = models.CharField(max_length=64)
	symbol = models.CharField(max_length=16)
	decimals = models.PositiveSmallIntegerField(default=6)
	owner = models.CharField(max_length=42)
	minter = models.CharField(max_length=42)
	updated_at = models.DateTimeField(auto_now=True)


class Account(models.Model):
	"""
	One holder of cUSDC.

	public_balance and confidential_handle always describe the same value;
	only core.ledger writes them, always together.
	"""
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	address = models.CharField(max_length=42, unique=True)
	public_balance = models.BigIntegerField(default=0)  # token units (6 decimals)
	confidential_handle = models.CharField(max_length=66, default=ZERO_HANDLE)
	updates = models.PositiveIntegerField(default=0)
	created_at = models.DateTimeField(auto_now_add=True)
	last_updated = models.DateTimeField(auto_now=True)


class Allowance(models.Model):
	id = models.BigAutoField(primary_key=True)
	owner = models.CharField(max_length=42)
	spender = models.CharField(max_length=42)
	amount_units = models.BigIntegerField(default=0)
	approved_at = models.DateTimeField(auto_now=True)

	class Meta:
		unique_together = (("owner", "spender"),)


class MintEvent(models.Model):
	"""
	Immutable record of a swap: who paid how much ETH and how much cUSDC was minted.

	The sum of base_amount_wei is what the swap reserve must hold.
	"""
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	payer = models.CharField(max_length=42)
	recipient = models.CharField(max_length=42)
	base_amount_wei = models.BigIntegerField()
	token_amount = models.BigIntegerField()
	created_at = models.DateTimeField(auto_now_add=True)
	idempotency_key = models.CharField(max_length=64, null=True, blank=True, unique=True)

	class Meta:
		ordering = ["created_at"]


class LedgerEntry(models.Model):
	"""
	Audit rows for balance movements.

	A mint writes one credit; a transfer writes a debit and a credit sharing ref_id.
	"""
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	address = models.CharField(max_length=42)
	side = models.CharField(max_length=10) # 'debit' | 'credit'
	amount_units = models.BigIntegerField()
	ref_type = models.CharField(max_length=20) # 'mint'|'transfer'
	ref_id = models.UUIDField()
	created_at = models.DateTimeField(auto_now_add=True)


class ReconciliationRun(models.Model):
	"""
	Snapshot for ETH reserve vs. minted supply.
	"""
	id = models.BigAutoField(primary_key=True)
	reserve_balance_wei = models.BigIntegerField()
	minted_base_wei = models.BigIntegerField()
	minted_units = models.BigIntegerField()
	total_supply_units = models.BigIntegerField()
	ok = models.BooleanField(default=True)
	notes = models.TextField(blank=True, default="")
	created_at = models.DateTimeField(auto_now_add=True)
