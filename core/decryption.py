"""Client-side user decryption of confidential balances.

A grant binds an ephemeral X25519 public key, the handles, the requester and a
validity window into EIP-712 typed data. The wallet signs it once, the relayer
checks the signature and seals each value to the public key, and only this
process (holding the private half) can open the result. Grants are single use.
"""

import logging
import time
from dataclasses import dataclass, field

from django.conf import settings
from nacl.public import PrivateKey

from .adapters.confidential_adapter import ConfidentialAdapter
from .constants import normalize_address
from .errors import NoHandles, SignerUnavailable, StaleGrant
from .ledger import ConfidentialLedger
from .models import ZERO_HANDLE

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86_400
MAX_VALIDITY_DAYS = 365


@dataclass
class DecryptionGrant:
	requester: str
	handle_contract_pairs: tuple
	contract_addresses: tuple
	public_key: str
	private_key: PrivateKey | None = field(repr=False)
	start_timestamp: int
	duration_days: int
	payload: dict = field(repr=False)
	consumed: bool = False

	@property
	def handles(self) -> list:
		return [handle for handle, _ in self.handle_contract_pairs]

	@property
	def expires_at(self) -> int:
		return self.start_timestamp + self.duration_days * SECONDS_PER_DAY

	def is_stale(self, now: int | None = None) -> bool:
		now = int(time.time()) if now is None else now
		return now > self.expires_at

	def discard_key(self):
		self.private_key = None
		self.consumed = True


class DecryptionAuthorizer:

	@staticmethod
	def build_grant(requester: str, handles, validity_days: int | None = None, *,
					contract_address: str | None = None, start_timestamp: int | None = None) -> DecryptionGrant:
		"""
		Fresh keypair + unsigned typed-data payload for decrypting `handles`.
		"""
		handles = list(handles)
		if not handles:
			raise NoHandles("at least one handle is required to build a decryption grant")
		if validity_days is None:
			validity_days = getattr(settings, "DECRYPTION_DEFAULT_DAYS", 10)
		validity_days = int(validity_days)
		if not 1 <= validity_days <= MAX_VALIDITY_DAYS:
			raise ValueError(f"validity_days must be within 1..{MAX_VALIDITY_DAYS}, got {validity_days}")

		requester = normalize_address(requester)
		contract = normalize_address(contract_address or settings.CUSDC_ADDRESS)
		start = int(time.time()) if start_timestamp is None else int(start_timestamp)

		private_key = PrivateKey.generate()
		public_key = bytes(private_key.public_key).hex()
		payload = ConfidentialAdapter.create_eip712(public_key, [contract], handles, requester, start, validity_days)
		return DecryptionGrant(
			requester=requester,
			handle_contract_pairs=tuple((handle, contract) for handle in handles),
			contract_addresses=(contract,),
			public_key=public_key,
			private_key=private_key,
			start_timestamp=start,
			duration_days=validity_days,
			payload=payload,
		)

	@staticmethod
	def sign(payload: dict, signer) -> str:
		"""
		Wallet signature over the typed payload (e.g. an eth_account LocalAccount).
		"""
		if signer is None or not callable(getattr(signer, "sign_typed_data", None)):
			raise SignerUnavailable("no wallet able to sign typed data is connected")
		signed = signer.sign_typed_data(
			domain_data=payload["domain"],
			message_types=payload["types"],
			message_data=payload["message"],
		)
		signature = getattr(signed, "signature", signed)
		if isinstance(signature, str):
			return signature if signature.startswith("0x") else "0x" + signature
		return "0x" + bytes(signature).hex()

	@staticmethod
	def submit(grant: DecryptionGrant, signature: str) -> dict:
		"""
		Exchange the signed grant for {handle: cleartext}. The grant is spent
		whatever the outcome; retrying means building and signing a new one.
		"""
		if grant.consumed or grant.private_key is None:
			raise StaleGrant("grant was already submitted; build and sign a fresh one")
		if grant.is_stale():
			grant.discard_key()
			raise StaleGrant(f"grant validity window ended at {grant.expires_at}")

		try:
			values = ConfidentialAdapter.user_decrypt(
				grant.handle_contract_pairs,
				private_key=grant.private_key,
				public_key=grant.public_key,
				signature=signature,
				contract_addresses=grant.contract_addresses,
				requester=grant.requester,
				start_timestamp=grant.start_timestamp,
				duration_days=grant.duration_days,
			)
		finally:
			grant.discard_key()
		logger.info("decryption grant for %s redeemed (%d handles)", grant.requester, len(values))
		return values

	@staticmethod
	def decrypt_balance(signer, account: str | None = None, validity_days: int | None = None) -> int:
		"""
		Full round-trip for one account's balance handle: build, sign, submit.
		"""
		if signer is None:
			raise SignerUnavailable("no wallet able to sign typed data is connected")
		requester = account or signer.address
		handle = ConfidentialLedger.confidential_balance_of(requester)
		if handle == ZERO_HANDLE:
			return 0
		grant = DecryptionAuthorizer.build_grant(requester, [handle], validity_days)
		signature = DecryptionAuthorizer.sign(grant.payload, signer)
		return DecryptionAuthorizer.submit(grant, signature)[handle]
