"""Fixed tenor to interest rate table"""

from decimal import Decimal
from types import MappingProxyType
from typing import Mapping, Tuple

from loan_approval.domain.exceptions import UnsupportedTenorError

SUPPORTED_TENORS: Tuple[int, ...] = (3, 6, 9, 12)

# Add-on rate applied once over the full tenor, not per month
RATE_TABLE: Mapping[int, Decimal] = MappingProxyType(
    {
        3: Decimal("0.07"),
        6: Decimal("0.13"),
        9: Decimal("0.20"),
        12: Decimal("0.30"),
    }
)


def validate_rate_table(table: Mapping[int, Decimal]) -> None:
    """Check the table covers exactly the supported tenors with rates in (0, 1)"""
    if tuple(sorted(table)) != SUPPORTED_TENORS:
        raise RuntimeError(f"Rate table must cover tenors {SUPPORTED_TENORS}, got {tuple(sorted(table))}")
    for tenor, rate in table.items():
        if not Decimal(0) < rate < Decimal(1):
            raise RuntimeError(f"Rate for {tenor} months out of range: {rate}")


def rate_for(tenor_months: int) -> Decimal:
    """Look up the interest rate for a tenor"""
    try:
        return RATE_TABLE[tenor_months]
    except KeyError:
        raise UnsupportedTenorError(tenor_months) from None


validate_rate_table(RATE_TABLE)
