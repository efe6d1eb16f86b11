"""Adapter over the local native currency stub.

In production, value moves with the transaction itself (msg.value) and balances
come from the node. Here we call the stub's ORM models directly for repeatable,
deterministic tests.
"""

from django.db import transaction
from native_stub.models import NativeAccount, NativeTx

from ..constants import MAX_UNITS, normalize_address
from ..errors import InsufficientBalance, Overflow, ZeroAmount


class NativeAdapter:
	"""
	Static wrappers for native credits/transfers/reads (amounts in wei)
	"""

	@staticmethod
	def ensure_account(address: str, *, lock: bool = False) -> NativeAccount:
		qs = NativeAccount.objects.select_for_update() if lock else NativeAccount.objects
		acct, _ = qs.get_or_create(address=normalize_address(address), defaults={"balance_wei": 0})
		return acct


	@staticmethod
	@transaction.atomic
	def credit(address: str, amount_wei: int, memo: str = "faucet") -> str:
		"""
		Fund an address out of thin air (demo faucet / test setup).
		"""
		amount_wei = int(amount_wei)
		if amount_wei <= 0:
			raise ZeroAmount("credit amount must be > 0 wei")
		acct = NativeAdapter.ensure_account(address, lock=True)
		if acct.balance_wei + amount_wei > MAX_UNITS:
			raise Overflow(f"balance of {acct.address} would exceed {MAX_UNITS} wei")
		tx = NativeTx.objects.create(to_address=acct.address, amount_wei=amount_wei, memo=memo)
		acct.balance_wei += amount_wei
		acct.save(update_fields=["balance_wei"])
		return tx.tx_id


	@staticmethod
	@transaction.atomic
	def transfer(from_address: str, to_address: str, amount_wei: int, memo: str = "") -> str:
		"""
		Move value between two distinct addresses; both rows are locked in address order.
		"""
		amount_wei = int(amount_wei)
		if amount_wei <= 0:
			raise ZeroAmount("transfer amount must be > 0 wei")
		src_addr, dst_addr = normalize_address(from_address), normalize_address(to_address)
		if src_addr == dst_addr:
			raise ValueError(f"native transfer from {src_addr} to itself")
		locked = {addr: NativeAdapter.ensure_account(addr, lock=True) for addr in sorted({src_addr, dst_addr})}
		src, dst = locked[src_addr], locked[dst_addr]
		if src.balance_wei < amount_wei:
			raise InsufficientBalance(f"native balance of {src_addr} is {src.balance_wei} wei, needs {amount_wei}")
		if dst.balance_wei + amount_wei > MAX_UNITS:
			raise Overflow(f"native balance of {dst_addr} would exceed {MAX_UNITS} wei")
		src.balance_wei -= amount_wei
		dst.balance_wei += amount_wei
		src.save(update_fields=["balance_wei"])
		dst.save(update_fields=["balance_wei"])
		tx = NativeTx.objects.create(from_address=src_addr, to_address=dst_addr, amount_wei=amount_wei, memo=memo)
		return tx.tx_id


	@staticmethod
	def balance(address: str) -> int:
		acct = NativeAccount.objects.filter(address=normalize_address(address)).first()
		return acct.balance_wei if acct else 0


	@staticmethod
	def list_transactions(address: str):
		"""
		Return node-shaped dicts, oldest first
		"""
		address = normalize_address(address)
		qs = (NativeTx.objects.filter(from_address=address) | NativeTx.objects.filter(to_address=address)).order_by("occurred_at")
		return [
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
