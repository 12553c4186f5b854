"""Unit tests for the fund ledger"""

import pytest
from decimal import Decimal
from fundflow.domain.exceptions import InsufficientFundsError, InvalidAmountError, SameFundError
from fundflow.domain.ledger import FundAdjustment, FundLedger
from fundflow.domain.models import Fund


def test_transfer_conserves_total():
    """A transfer moves money without changing the total"""
    ledger = FundLedger(balance="500", debt_fund="300", savings_fund="200")

    ledger.transfer(Fund.BALANCE, Fund.SAVINGS_FUND, "125.50")

    assert ledger.balance == Decimal("374.50")
    assert ledger.savings_fund == Decimal("325.50")
    assert ledger.debt_fund == Decimal("300.00")
    assert ledger.total == Decimal("1000.00")


def test_transfer_exact_balance_empties_source():
    """Moving the full balance is allowed and leaves zero"""
    ledger = FundLedger(debt_fund="300")

    ledger.transfer(Fund.DEBT_FUND, Fund.BALANCE, "300")

    assert ledger.debt_fund == Decimal("0.00")
    assert ledger.balance == Decimal("300.00")


def test_transfer_insufficient_funds_changes_nothing():
    """Overdrawing the source fails and leaves every fund as it was"""
    ledger = FundLedger(balance="100", debt_fund="50", savings_fund="10")
    before = ledger.snapshot()

    with pytest.raises(InsufficientFundsError):
        ledger.transfer(Fund.DEBT_FUND, Fund.BALANCE, "50.01")

    assert ledger.snapshot() == before


def test_transfer_same_fund_rejected():
    """Source and destination must differ"""
    ledger = FundLedger(balance="100")

    with pytest.raises(SameFundError):
        ledger.transfer(Fund.BALANCE, Fund.BALANCE, "10")


@pytest.mark.parametrize("amount", ["0", "-5", "0.001"])
def test_non_positive_amounts_rejected(amount):
    """Zero, negative and sub-cent amounts are invalid"""
    ledger = FundLedger(balance="100")

    with pytest.raises(InvalidAmountError):
        ledger.transfer(Fund.BALANCE, Fund.DEBT_FUND, amount)

    assert ledger.balance == Decimal("100.00")


def test_transfer_accepts_string_fund_names():
    """Fund names from requests are coerced to the enum"""
    ledger = FundLedger(balance="100")

    ledger.transfer("balance", "savings_fund", "40")

    assert ledger.savings_fund == Decimal("40.00")


def test_withdraw_up_to_floors_at_zero():
    """Withdrawing more than available removes only what is there"""
    ledger = FundLedger(balance="30")

    removed = ledger.withdraw_up_to(Fund.BALANCE, "50")

    assert removed == Decimal("30.00")
    assert ledger.balance == Decimal("0.00")


def test_adjustment_inverse_restores_ledger():
    """Applying an adjustment then its inverse is a no-op"""
    ledger = FundLedger(balance="100", debt_fund="20", savings_fund="5")
    before = ledger.snapshot()
    adjustment = FundAdjustment().add(Fund.BALANCE, "-60").add(Fund.DEBT_FUND, "40").add(Fund.SAVINGS_FUND, "20")

    ledger.apply(adjustment)
    assert ledger.balance == Decimal("40.00")
    assert ledger.total == Decimal("125.00")

    ledger.apply(adjustment.inverse())
    assert ledger.snapshot() == before


def test_adjustment_refused_when_fund_would_go_negative():
    """apply validates every delta before changing anything"""
    ledger = FundLedger(balance="100", debt_fund="10")
    before = ledger.snapshot()
    adjustment = FundAdjustment().add(Fund.BALANCE, "50").add(Fund.DEBT_FUND, "-11")

    with pytest.raises(InsufficientFundsError):
        ledger.apply(adjustment)

    assert ledger.snapshot() == before


def test_empty_adjustment():
    assert FundAdjustment().is_empty()
    assert FundAdjustment().add(Fund.BALANCE, "0").is_empty()


def test_movement_inverse_undoes_transfer():
    """A transfer is undone by applying the inverse of its movement"""
    ledger = FundLedger(balance="500")
    ledger.transfer(Fund.BALANCE, Fund.SAVINGS_FUND, "120.50")
    assert ledger.savings_fund == Decimal("120.50")

    ledger.apply(FundAdjustment.movement(Fund.BALANCE, Fund.SAVINGS_FUND, "120.50").inverse())

    assert ledger.balance == Decimal("500.00")
    assert ledger.savings_fund == Decimal("0.00")


def test_movement_inverse_refused_when_destination_drained():
    ledger = FundLedger(balance="500")
    ledger.transfer(Fund.BALANCE, Fund.DEBT_FUND, "100")
    ledger.debit(Fund.DEBT_FUND, "30")
    before = ledger.snapshot()

    with pytest.raises(InsufficientFundsError) as exc_info:
        ledger.apply(FundAdjustment.movement(Fund.BALANCE, Fund.DEBT_FUND, "100").inverse())

    assert exc_info.value.context == {"fund": "debt_fund", "available": "70.00", "requested": "100.00"}
    assert ledger.snapshot() == before


def test_draw_inverse_refunds_debit():
    ledger = FundLedger(savings_fund="80")
    ledger.debit(Fund.SAVINGS_FUND, "25")

    ledger.apply(FundAdjustment.draw(Fund.SAVINGS_FUND, "25").inverse())

    assert ledger.savings_fund == Decimal("80.00")
    assert FundAdjustment.draw(Fund.SAVINGS_FUND, "0").is_empty()


def test_balance_of_accepts_fund_names():
    ledger = FundLedger(balance="12.5", debt_fund="3")

    assert ledger.balance_of("balance") == Decimal("12.50")
    assert ledger.balance_of(Fund.DEBT_FUND) == Decimal("3.00")
    assert ledger.balance_of(Fund.SAVINGS_FUND) == Decimal("0.00")
