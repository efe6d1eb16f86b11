"""Adapter over the local confidential-computation stub.

In production, encryption happens inside the FHE coprocessor and user decryption
goes through the relayer SDK. Here we call the stub relayer in-process; the
sealed-box opening still happens on this side with the caller's private key.
"""

import logging

from django.conf import settings
from fhe_stub import eip712, relayer
from nacl.exceptions import CryptoError
from nacl.public import PrivateKey, SealedBox

from ..errors import DecryptionDenied, DecryptionUnavailable, StaleGrant

logger = logging.getLogger(__name__)


class ConfidentialAdapter:
	"""
	encrypt_and_store / create_eip712 / user_decrypt over the relayer stub
	"""

	@staticmethod
	def encrypt_and_store(value: int, owner: str, contract_address: str | None = None) -> str:
		"""
		Store `value` encrypted for `owner` and return its opaque handle.
		"""
		return relayer.encrypt(value, owner, contract_address or settings.CUSDC_ADDRESS)


	@staticmethod
	def create_eip712(public_key: str, contract_addresses, handles, requester: str, start_timestamp: int, duration_days: int) -> dict:
		return eip712.create_eip712(public_key, contract_addresses, handles, requester, start_timestamp, duration_days)


	@staticmethod
	def user_decrypt(handle_contract_pairs, private_key: PrivateKey, public_key: str, signature: str,
					 contract_addresses, requester: str, start_timestamp: int, duration_days: int) -> dict:
		"""
		Ask the relayer for the values behind the handles and open them locally.

		Returns {handle: int}. The private key is only used here, never sent.
		"""
		try:
			sealed = relayer.user_decrypt(
				handle_contract_pairs,
				public_key=public_key,
				signature=signature,
				contract_addresses=contract_addresses,
				requester=requester,
				start_timestamp=start_timestamp,
				duration_days=duration_days,
			)
		except relayer.RequestExpired as e:
			raise StaleGrant(str(e)) from e
		except relayer.RelayerError as e:
			logger.warning("user decrypt rejected for %s: %s", requester, e)
			raise DecryptionDenied(str(e)) from e
		except (ConnectionError, TimeoutError) as e:
			raise DecryptionUnavailable(f"decryption service unreachable: {e}") from e

		box = SealedBox(private_key)
		try:
			return {handle: int(box.decrypt(bytes.fromhex(blob)).decode()) for handle, blob in sealed.items()}
		except CryptoError as e:
			raise DecryptionDenied("relayer response was not sealed to this request's key") from e
