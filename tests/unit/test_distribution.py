"""Unit tests for income distribution"""

import pytest
from decimal import Decimal
from fundflow.domain.distribution import (
    AUTO_DEBT_DESCRIPTION,
    AUTO_SAVINGS_DESCRIPTION,
    apply_distribution,
    distribute,
    reverse_distribution,
    validate_percentage,
)
from fundflow.domain.exceptions import InvalidAmountError, InvalidPercentageError
from fundflow.domain.ledger import FundLedger
from fundflow.domain.models import Fund


def test_distribute_default_split():
    """1000 at 30% / 20% gives 300 / 200 / 500"""
    result = distribute("1000", 30, 20)

    assert result.debt_amount == Decimal("300.00")
    assert result.savings_amount == Decimal("200.00")
    assert result.remainder_amount == Decimal("500.00")


@pytest.mark.parametrize(
    "amount,debt_pct,savings_pct",
    [
        ("100.01", 33, 33),
        ("0.03", 50, 50),
        ("1234.57", "12.5", "7.25"),
        ("999.99", "33.33", "33.33"),
    ],
)
def test_distribute_parts_sum_exactly(amount, debt_pct, savings_pct):
    """Rounding never loses or creates a cent"""
    result = distribute(amount, debt_pct, savings_pct)

    assert result.debt_amount + result.savings_amount + result.remainder_amount == Decimal(amount)


def test_distribute_remainder_takes_rounding():
    """Shares round half-up and the remainder absorbs the difference"""
    result = distribute("100.01", 33, 33)

    assert result.debt_amount == Decimal("33.00")
    assert result.savings_amount == Decimal("33.00")
    assert result.remainder_amount == Decimal("34.01")


def test_distribute_over_allocated_gives_negative_remainder():
    """Percentages above 100 in total are allowed"""
    result = distribute("1000", 60, 50)

    assert result.remainder_amount == Decimal("-100.00")


@pytest.mark.parametrize("amount", ["0", "-10"])
def test_distribute_rejects_non_positive(amount):
    with pytest.raises(InvalidAmountError):
        distribute(amount, 30, 20)


@pytest.mark.parametrize("value", [-1, "100.01", 150])
def test_validate_percentage_out_of_range(value):
    with pytest.raises(InvalidPercentageError):
        validate_percentage(value)


def test_apply_distribution_credits_funds():
    """All three funds are credited and one transfer per credited fund is produced"""
    ledger = FundLedger()

    balance_delta, entries = apply_distribution(ledger, distribute("1000", 30, 20))

    assert balance_delta == Decimal("500.00")
    assert ledger.snapshot() == {
        Fund.BALANCE: Decimal("500.00"),
        Fund.DEBT_FUND: Decimal("300.00"),
        Fund.SAVINGS_FUND: Decimal("200.00"),
    }
    assert entries == [
        (Fund.DEBT_FUND, Decimal("300.00"), AUTO_DEBT_DESCRIPTION),
        (Fund.SAVINGS_FUND, Decimal("200.00"), AUTO_SAVINGS_DESCRIPTION),
    ]


def test_apply_distribution_skips_zero_shares():
    """A 0% share produces no transfer entry"""
    ledger = FundLedger()

    _, entries = apply_distribution(ledger, distribute("100", 0, 10))

    assert [fund for fund, _, _ in entries] == [Fund.SAVINGS_FUND]


def test_apply_distribution_negative_remainder_floors_balance():
    """A negative remainder draws from balance, but never below zero"""
    ledger = FundLedger(balance="40")

    balance_delta, _ = apply_distribution(ledger, distribute("1000", 60, 50))

    assert balance_delta == Decimal("-40.00")
    assert ledger.balance == Decimal("0.00")
    assert ledger.debt_fund == Decimal("600.00")
    assert ledger.savings_fund == Decimal("500.00")


def test_reverse_distribution_restores_funds():
    """Reversing with the recorded amounts returns the ledger to its prior state"""
    ledger = FundLedger(balance="10", debt_fund="20", savings_fund="30")
    before = ledger.snapshot()
    distribution = distribute("1000", 30, 20)
    balance_delta, _ = apply_distribution(ledger, distribution)

    reverse_distribution(ledger, distribution.debt_amount, distribution.savings_amount, balance_delta)

    assert ledger.snapshot() == before


def test_reverse_distribution_negative_delta_credits_balance():
    """Balance withdrawn by an over-allocated income is given back"""
    ledger = FundLedger(balance="40")
    distribution = distribute("1000", 60, 50)
    balance_delta, _ = apply_distribution(ledger, distribution)

    reverse_distribution(ledger, distribution.debt_amount, distribution.savings_amount, balance_delta)

    assert ledger.balance == Decimal("40.00")
    assert ledger.debt_fund == Decimal("0.00")
    assert ledger.savings_fund == Decimal("0.00")


def test_reverse_distribution_floors_drained_funds():
    """Funds spent in the meantime are floored at zero, not driven negative"""
    ledger = FundLedger(balance="500", debt_fund="100", savings_fund="200")

    applied = reverse_distribution(ledger, Decimal("300"), Decimal("200"), Decimal("500"))

    assert ledger.total == Decimal("0.00")
    assert applied.deltas[Fund.DEBT_FUND] == Decimal("-100.00")
