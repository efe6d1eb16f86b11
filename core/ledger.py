"""cUSDC ledger with a public mirror and a confidential handle per account.

Every mutation runs inside one @transaction.atomic block, locks the touched
account rows, and rewrites both views together: the public balance and a fresh
handle from the confidential-computation service for the same value.
"""

import logging
import uuid

from django.conf import settings
from django.db import transaction
from django.db.models import Sum

from .adapters.confidential_adapter import ConfidentialAdapter
from .constants import MAX_UNITS, TOKEN_DECIMALS, normalize_address
from .errors import InsufficientAllowance, InsufficientBalance, Overflow, Unauthorized, ZeroAmount
from .models import ZERO_HANDLE, Account, Allowance, LedgerEntry, TokenConfig

logger = logging.getLogger(__name__)


def _require_positive(amount: int, what: str) -> int:
	amount = int(amount)
	if amount <= 0:
		raise ZeroAmount(f"{what} must be > 0, got {amount}")
	return amount


def _lock(address: str) -> Account:
	acct, _ = Account.objects.select_for_update().get_or_create(address=address)
	return acct


def _write_balance(acct: Account, new_balance: int):
	"""
	The only place balances change: public mirror and handle in one save.
	"""
	acct.public_balance = new_balance
	acct.confidential_handle = ConfidentialAdapter.encrypt_and_store(new_balance, owner=acct.address)
	acct.updates += 1
	acct.save(update_fields=["public_balance", "confidential_handle", "updates", "last_updated"])


class ConfidentialLedger:

	@staticmethod
	def token() -> TokenConfig:
		"""
		Token metadata; seeded with the deployer as owner and the swap engine as minter
		"""
		token, _ = TokenConfig.objects.get_or_create(
			pk=1,
			defaults={
				"name": "Confidential USDC",
				"symbol": "cUSDC",
				"decimals": TOKEN_DECIMALS,
				"owner": normalize_address(settings.CUSDC_OWNER_ADDRESS),
				"minter": normalize_address(settings.SWAP_ADDRESS),
			},
		)
		return token

	@staticmethod
	@transaction.atomic
	def set_minter(caller: str, minter: str) -> TokenConfig:
		token = ConfidentialLedger.token()
		caller = normalize_address(caller)
		if caller != token.owner:
			raise Unauthorized(f"only the token owner {token.owner} can set the minter, not {caller}")
		token.minter = normalize_address(minter)
		token.save(update_fields=["minter", "updated_at"])
		logger.info("minter set to %s", token.minter)
		return token

	# -- mutations ------------------------------------------------------------

	@staticmethod
	@transaction.atomic
	def mint(account: str, amount: int, *, minter: str) -> Account:
		"""
		Credit `amount` units to `account`. Only the configured minter may call this.

		Balances are stored in a signed 64-bit column, so a balance may not exceed
		MAX_UNITS (2**63 - 1) even though the confidential type is an unsigned 64-bit
		integer; a mint past that raises Overflow and leaves both views untouched.
		"""
		amount = _require_positive(amount, "mint amount")
		minter = normalize_address(minter)
		token = ConfidentialLedger.token()
		if minter != token.minter:
			raise Unauthorized(f"{minter} is not the cUSDC minter")

		acct = _lock(normalize_address(account))
		new_balance = acct.public_balance + amount
		if new_balance > MAX_UNITS:
			raise Overflow(f"balance of {acct.address} would be {new_balance} units, above {MAX_UNITS}")
		_write_balance(acct, new_balance)

		LedgerEntry.objects.create(address=acct.address, side="credit", amount_units=amount, ref_type="mint", ref_id=uuid.uuid4())
		logger.info("mint %s units to %s (handle %s...)", amount, acct.address, acct.confidential_handle[:18])
		return acct

	@staticmethod
	@transaction.atomic
	def approve(owner: str, spender: str, amount: int) -> Allowance:
		"""
		Replace the allowance of spender over owner's units (0 clears it).
		"""
		amount = int(amount)
		if not 0 <= amount <= MAX_UNITS:
			raise Overflow(f"allowance must be within 0..{MAX_UNITS}, got {amount}")
		allowance, _ = Allowance.objects.select_for_update().get_or_create(
			owner=normalize_address(owner), spender=normalize_address(spender),
		)
		allowance.amount_units = amount
		allowance.save(update_fields=["amount_units", "approved_at"])
		return allowance

	@staticmethod
	@transaction.atomic
	def transfer(sender: str, recipient: str, amount: int) -> uuid.UUID:
		amount = _require_positive(amount, "transfer amount")
		return ConfidentialLedger._move(normalize_address(sender), normalize_address(recipient), amount)

	@staticmethod
	@transaction.atomic
	def transfer_from(owner: str, spender: str, amount: int, recipient: str | None = None) -> uuid.UUID:
		"""
		Spend `amount` of owner's units on behalf of spender; recipient defaults to spender.
		"""
		amount = _require_positive(amount, "transfer amount")
		owner, spender = normalize_address(owner), normalize_address(spender)
		recipient = normalize_address(recipient) if recipient else spender

		allowance = Allowance.objects.select_for_update().filter(owner=owner, spender=spender).first()
		available = allowance.amount_units if allowance else 0
		if available < amount:
			logger.warning("transferFrom rejected: %s may spend %s of %s, asked %s", spender, available, owner, amount)
			raise InsufficientAllowance(f"allowance of {spender} over {owner} is {available} units, needs {amount}")

		ref_id = ConfidentialLedger._move(owner, recipient, amount)
		allowance.amount_units = available - amount
		allowance.save(update_fields=["amount_units"])
		return ref_id

	@staticmethod
	def _move(sender: str, recipient: str, amount: int) -> uuid.UUID:
		# lock in address order so concurrent transfers cannot deadlock
		locked = {addr: _lock(addr) for addr in sorted({sender, recipient})}
		src, dst = locked[sender], locked[recipient]
		if src.public_balance < amount:
			logger.warning("transfer rejected: %s holds %s units, needs %s", sender, src.public_balance, amount)
			raise InsufficientBalance(f"balance of {sender} is {src.public_balance} units, needs {amount}")

		if sender != recipient:
			credited = dst.public_balance + amount
			if credited > MAX_UNITS:
				raise Overflow(f"balance of {recipient} would be {credited} units, above {MAX_UNITS}")
			_write_balance(src, src.public_balance - amount)
			_write_balance(dst, credited)

		ref_id = uuid.uuid4()
		LedgerEntry.objects.bulk_create([
			LedgerEntry(address=sender, side="debit", amount_units=amount, ref_type="transfer", ref_id=ref_id),
			LedgerEntry(address=recipient, side="credit", amount_units=amount, ref_type="transfer", ref_id=ref_id),
		])
		logger.info("transfer %s units %s -> %s", amount, sender, recipient)
		return ref_id

	# -- reads ----------------------------------------------------------------

	@staticmethod
	def balance_of(account: str) -> int:
		balance = Account.objects.filter(address=normalize_address(account)).values_list("public_balance", flat=True).first()
		return balance or 0

	@staticmethod
	def confidential_balance_of(account: str) -> str:
		"""
		The opaque handle only; cleartext needs a decryption grant.
		"""
		handle = Account.objects.filter(address=normalize_address(account)).values_list("confidential_handle", flat=True).first()
		return handle or ZERO_HANDLE

	@staticmethod
	def allowance(owner: str, spender: str) -> int:
		amount = (
			Allowance.objects.filter(owner=normalize_address(owner), spender=normalize_address(spender))
			.values_list("amount_units", flat=True).first()
		)
		return amount or 0

	@staticmethod
	def total_supply() -> int:
		return Account.objects.aggregate(s=Sum("public_balance"))["s"] or 0

	@staticmethod
	def supply_summary() -> dict:
		"""
		Sum of balances must equal everything ever minted (there is no burn).
		"""
		supply = ConfidentialLedger.total_supply()
		minted = LedgerEntry.objects.filter(ref_type="mint").aggregate(s=Sum("amount_units"))["s"] or 0
		return {
			"total_supply_units": supply,
			"minted_units": minted,
			"accounts": Account.objects.count(),
			"ok": supply == minted,
		}
