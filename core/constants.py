"""Unit conversion helpers and fixed contract constants shared across the demo.


- TOKEN_DECIMALS / NATIVE_DECIMALS control token and ETH granularity.
- parse_units / format_units convert between human amounts and integer base units.
- STAKING_APY is the fixed reward table (days -> APY percent).
"""

from django.conf import settings
from decimal import Decimal, ROUND_DOWN, localcontext

TOKEN_DECIMALS = getattr(settings, "TOKEN_DECIMALS", 18)
NATIVE_DECIMALS = getattr(settings, "NATIVE_DECIMALS", 18)

# uint256 needs 78 decimal digits
UINT256_DIGITS = 78

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

SECONDS_PER_DAY = 24 * 60 * 60
DAYS_PER_YEAR = 365

# 5% APY for 1 month, 8% for 3 months, 12% for 6 months, 20% for 1 year
STAKING_APY = {
    30: 5,
    90: 8,
    180: 12,
    365: 20,
}


def parse_units(amount: str | Decimal, decimals: int = TOKEN_DECIMALS) -> int:
    """
    Convert a human-readable amount (e.g., "1000.5") to integer base units, truncating extra digits
    """
    with localcontext() as ctx:
        ctx.prec = UINT256_DIGITS
        amount = Decimal(str(amount))
        return int(amount.scaleb(decimals).quantize(Decimal("1"), rounding=ROUND_DOWN))


def format_units(amount_units: int, decimals: int = TOKEN_DECIMALS) -> str:
    """
    Convert integer base units back to a plain decimal string without trailing zeros.
    """
    with localcontext() as ctx:
        ctx.prec = UINT256_DIGITS
        value = Decimal(int(amount_units)).scaleb(-decimals)
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def parse_ether(amount: str | Decimal) -> int:
    return parse_units(amount, NATIVE_DECIMALS)


def format_ether(amount_wei: int) -> str:
    return format_units(amount_wei, NATIVE_DECIMALS)


def apy_for_duration(duration_seconds: int) -> int | None:
    """
    Look up the APY percent for a stake duration given in seconds; None when unlisted.
    """
    if duration_seconds <= 0 or duration_seconds % SECONDS_PER_DAY:
        return None
    return STAKING_APY.get(duration_seconds // SECONDS_PER_DAY)


def staking_reward(amount_units: int, apy_percent: int, duration_seconds: int) -> int:
    """
    principal x APY x (duration / 365 days), floored to whole base units.
    """
    return amount_units * apy_percent * duration_seconds // (100 * DAYS_PER_YEAR * SECONDS_PER_DAY)
