"""Failure taxonomy for the vault.

Every error is a ValidationError so the API layer can return a clean 400 with
the message, and each message names the precondition that was violated.
"""

from django.core.exceptions import ValidationError


class CusdcError(ValidationError):
	code = "cusdc_error"

	def __init__(self, message: str):
		super().__init__(message, code=self.code)

	def __str__(self):
		return self.message


class ZeroAmount(CusdcError):
	code = "zero_amount"


class Overflow(CusdcError):
	code = "overflow"


class InsufficientBalance(CusdcError):
	code = "insufficient_balance"


class InsufficientAllowance(CusdcError):
	code = "insufficient_allowance"


class Unauthorized(CusdcError):
	code = "unauthorized"


class Expired(CusdcError):
	code = "expired"


class SlippageExceeded(CusdcError):
	code = "slippage_exceeded"


# Decryption protocol: local to the client round-trip, never touch the ledger

class NoHandles(CusdcError):
	code = "no_handles"


class SignerUnavailable(CusdcError):
	code = "signer_unavailable"


class DecryptionDenied(CusdcError):
	code = "decryption_denied"


class DecryptionUnavailable(CusdcError):
	code = "decryption_unavailable"


class StaleGrant(CusdcError):
	code = "stale_grant"
