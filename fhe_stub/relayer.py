"""Cleartext-passthrough relayer for the confidential-computation stub.

encrypt stores a value and hands back an opaque handle. user_decrypt checks the
signed request (signer, window, ACL) and returns each value sealed to the
requester's ephemeral public key, so only the holder of the private half can read it.
"""

import logging
import time

from django.conf import settings
from eth_keys.exceptions import BadSignature
from eth_utils import keccak, to_checksum_address
from nacl.public import PublicKey, SealedBox

from .eip712 import create_eip712, recover_signer
from .models import Ciphertext

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86_400
MAX_DURATION_DAYS = 365


class RelayerError(Exception):
	pass


class InvalidSignature(RelayerError):
	pass


class AclDenied(RelayerError):
	pass


class InvalidRequest(RelayerError):
	pass


class RequestExpired(RelayerError):
	pass


def _ensure_online():
	if not getattr(settings, "FHE_RELAYER_ENABLED", True):
		raise ConnectionError("confidential-computation relayer is offline")


def encrypt(value: int, owner: str, contract_address: str) -> str:
	"""
	Store value as a euint64 readable by owner through contract_address.

	Handles are derived from (contract, owner, sequence) so runs are reproducible.
	"""
	seq = Ciphertext.objects.count() + 1
	owner = to_checksum_address(owner)
	contract_address = to_checksum_address(contract_address)
	handle = "0x" + keccak(text=f"fhe:{contract_address}:{owner}:{seq}").hex()
	Ciphertext.objects.create(handle=handle, value=int(value), owner=owner, contract_address=contract_address)
	return handle


def user_decrypt(handle_contract_pairs, public_key: str, signature: str, contract_addresses,
				 requester: str, start_timestamp: int, duration_days: int) -> dict:
	"""
	Returns {handle: sealed_hex}. Raises a RelayerError subclass when the request
	is not honored, ConnectionError when the relayer is offline.
	"""
	_ensure_online()

	duration_days = int(duration_days)
	start_timestamp = int(start_timestamp)
	if not 1 <= duration_days <= MAX_DURATION_DAYS:
		raise InvalidRequest(f"durationDays must be within 1..{MAX_DURATION_DAYS}, got {duration_days}")
	now = int(time.time())
	if start_timestamp > now:
		raise InvalidRequest("startTimestamp is in the future")
	if now > start_timestamp + duration_days * SECONDS_PER_DAY:
		raise RequestExpired(f"request window ended at {start_timestamp + duration_days * SECONDS_PER_DAY}")

	requester = to_checksum_address(requester)
	contract_addresses = [to_checksum_address(a) for a in contract_addresses]
	handles = [h for h, _ in handle_contract_pairs]

	payload = create_eip712(public_key, contract_addresses, handles, requester, start_timestamp, duration_days)
	try:
		signer = recover_signer(payload, signature)
	except (ValueError, BadSignature) as e:
		raise InvalidSignature(f"malformed signature: {e}") from e
	if signer != requester:
		raise InvalidSignature(f"signature is from {signer}, not requester {requester}")

	box = SealedBox(PublicKey(bytes.fromhex(public_key[2:] if public_key.startswith("0x") else public_key)))
	sealed = {}
	for handle, contract in handle_contract_pairs:
		contract = to_checksum_address(contract)
		ct = Ciphertext.objects.filter(handle=handle).first()
		if ct is None:
			raise AclDenied(f"unknown handle {handle[:18]}...")
		if contract not in contract_addresses or ct.contract_address != contract:
			raise AclDenied(f"handle {handle[:18]}... is not bound to contract {contract}")
		if ct.owner != requester:
			raise AclDenied(f"{requester} is not allowed to decrypt handle {handle[:18]}...")
		sealed[handle] = box.encrypt(str(ct.value).encode()).hex()

	logger.info("user decrypt honored for %s (%d handles)", requester, len(sealed))
	return sealed
