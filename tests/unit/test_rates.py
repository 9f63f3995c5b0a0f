"""Unit tests for the tenor rate table"""

import pytest
from decimal import Decimal
from loan_approval.domain.exceptions import UnsupportedTenorError
from loan_approval.domain.rates import RATE_TABLE, SUPPORTED_TENORS, rate_for, validate_rate_table


def test_rate_table_values():
    assert SUPPORTED_TENORS == (3, 6, 9, 12)
    assert dict(RATE_TABLE) == {
        3: Decimal("0.07"),
        6: Decimal("0.13"),
        9: Decimal("0.20"),
        12: Decimal("0.30"),
    }


def test_rate_table_is_read_only():
    with pytest.raises(TypeError):
        RATE_TABLE[24] = Decimal("0.5")


def test_rate_for_unsupported_tenor():
    with pytest.raises(UnsupportedTenorError) as exc_info:
        rate_for(5)
    assert exc_info.value.tenor_months == 5


def test_validate_rate_table_missing_tenor():
    with pytest.raises(RuntimeError):
        validate_rate_table({3: Decimal("0.07"), 6: Decimal("0.13"), 9: Decimal("0.20")})


def test_validate_rate_table_extra_tenor():
    table = dict(RATE_TABLE)
    table[24] = Decimal("0.5")
    with pytest.raises(RuntimeError):
        validate_rate_table(table)


@pytest.mark.parametrize("rate", [Decimal("0"), Decimal("1"), Decimal("-0.1")])
def test_validate_rate_table_rate_out_of_range(rate):
    table = dict(RATE_TABLE)
    table[12] = rate
    with pytest.raises(RuntimeError):
        validate_rate_table(table)
