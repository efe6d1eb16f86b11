"""Unit conversion and the fixed-rate quote shared across the vault.


- TOKEN_DECIMALS controls the cUSDC granularity (6).
- CUSDC_PER_ETH is the fixed swap rate, read once at import (deploy-time constant).
- quote converts wei to token units, always rounding down.
"""

from decimal import Decimal, ROUND_DOWN

from django.conf import settings
from eth_utils import to_checksum_address

from .errors import Overflow

TOKEN_DECIMALS = getattr(settings, "TOKEN_DECIMALS", 6)
NATIVE_DECIMALS = getattr(settings, "NATIVE_DECIMALS", 18)
TEN_POW = 10 ** TOKEN_DECIMALS
WEI_PER_ETH = 10 ** NATIVE_DECIMALS

CUSDC_PER_ETH = getattr(settings, "CUSDC_PER_ETH", 3100)

# Balances and wei amounts live in BigIntegerField columns
MAX_UNITS = 2 ** 63 - 1

BPS_DENOMINATOR = 10_000


def quote(base_amount_wei: int) -> int:
    """
    Convert a wei amount to cUSDC units at the fixed rate (floor).

    1 ETH (10**18 wei) -> CUSDC_PER_ETH * 10**TOKEN_DECIMALS units.
    """
    token_units = (int(base_amount_wei) * CUSDC_PER_ETH * TEN_POW) // WEI_PER_ETH
    if token_units > MAX_UNITS:
        raise Overflow(f"quote for {base_amount_wei} wei is {token_units} units, above the {MAX_UNITS} unit limit")
    return token_units


def parse_units(amount: str | Decimal) -> int:
    """
    Convert a human-readable cUSDC string (e.g., "3100.5") to integer token units
    """
    amount = Decimal(amount)
    return int((amount * Decimal(TEN_POW)).quantize(Decimal("1"), rounding=ROUND_DOWN))


def format_units(amount_units: int) -> str:
    """
    Render integer token units with all 6 decimals, e.g. 3100000000 -> "3100.000000"
    """
    return f"{(Decimal(amount_units) / Decimal(TEN_POW)).quantize(Decimal(1).scaleb(-TOKEN_DECIMALS)):f}"


def parse_ether(amount: str | Decimal) -> int:
    amount = Decimal(amount)
    return int((amount * Decimal(WEI_PER_ETH)).quantize(Decimal("1"), rounding=ROUND_DOWN))


def normalize_address(address: str) -> str:
    """
    EIP-55 checksum form; every address is compared in this form.
    """
    return to_checksum_address(address)
