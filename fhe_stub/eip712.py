"""Typed-data schema the relayer expects a user-decrypt request to be signed with.

Both sides build the payload from the same primitive fields, so the relayer
never trusts a client-supplied payload: it rebuilds it and recovers the signer.
"""

from django.conf import settings
from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_utils import to_checksum_address

DOMAIN_NAME = "Decryption"
DOMAIN_VERSION = "1"
PRIMARY_TYPE = "UserDecryptRequestVerification"

USER_DECRYPT_TYPES = {
	PRIMARY_TYPE: [
		{"name": "publicKey", "type": "bytes"},
		{"name": "contractAddresses", "type": "address[]"},
		{"name": "handles", "type": "bytes32[]"},
		{"name": "requester", "type": "address"},
		{"name": "startTimestamp", "type": "uint256"},
		{"name": "durationDays", "type": "uint256"},
	],
}


def _hex_bytes(value: str) -> bytes:
	return bytes.fromhex(value[2:] if value.startswith("0x") else value)


def create_eip712(public_key: str, contract_addresses, handles, requester: str, start_timestamp: int, duration_days: int) -> dict:
	"""
	Domain-separated payload binding the ephemeral public key, the handles,
	the requester and the validity window.
	"""
	return {
		"domain": {
			"name": DOMAIN_NAME,
			"version": DOMAIN_VERSION,
			"chainId": settings.CHAIN_ID,
			"verifyingContract": to_checksum_address(settings.DECRYPTION_VERIFIER_ADDRESS),
		},
		"types": USER_DECRYPT_TYPES,
		"primaryType": PRIMARY_TYPE,
		"message": {
			"publicKey": _hex_bytes(public_key),
			"contractAddresses": [to_checksum_address(a) for a in contract_addresses],
			"handles": [_hex_bytes(h) for h in handles],
			"requester": to_checksum_address(requester),
			"startTimestamp": int(start_timestamp),
			"durationDays": int(duration_days),
		},
	}


def recover_signer(payload: dict, signature: str) -> str:
	signable = encode_typed_data(
		domain_data=payload["domain"],
		message_types=payload["types"],
		message_data=payload["message"],
	)
	return Account.recover_message(signable, signature=_hex_bytes(signature))
