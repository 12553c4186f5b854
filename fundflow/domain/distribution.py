"""Income distribution engine - splits income across the debt, savings and balance funds"""

from decimal import Decimal
from typing import List, Tuple

from fundflow.domain.exceptions import InvalidPercentageError
from fundflow.domain.ledger import FundAdjustment, FundLedger
from fundflow.domain.models import Distribution, Fund, ZERO, to_amount, to_money

HUNDRED = Decimal("100")

AUTO_DEBT_DESCRIPTION = "Automatic debt fund distribution"
AUTO_SAVINGS_DESCRIPTION = "Automatic savings fund distribution"


def validate_percentage(value, name: str = "percentage") -> Decimal:
    value = Decimal(str(value))
    if value < 0 or value > HUNDRED:
        raise InvalidPercentageError(f"{name} must be between 0 and 100, got {value}", field=name)
    return value


def distribute(amount, debt_percentage, savings_percentage) -> Distribution:
    """
    Split an income amount by the configured percentages.

    Debt and savings shares are rounded to cents; the remainder is computed
    by subtraction so the three parts always sum to the income exactly.
    Percentages summing above 100 give a negative remainder. That is allowed
    and not clamped here.

    Example:
        1000 at 30% / 20% → debt 300.00, savings 200.00, remainder 500.00
        100.01 at 33% / 33% → debt 33.00, savings 33.00, remainder 34.01
    """
    amount = to_amount(amount)

    debt_pct = validate_percentage(debt_percentage, "debt_percentage")
    savings_pct = validate_percentage(savings_percentage, "savings_percentage")

    debt_amount = to_money(amount * debt_pct / HUNDRED)
    savings_amount = to_money(amount * savings_pct / HUNDRED)
    remainder = amount - debt_amount - savings_amount

    return Distribution(
        amount=amount,
        debt_percentage=debt_pct,
        savings_percentage=savings_pct,
        debt_amount=debt_amount,
        savings_amount=savings_amount,
        remainder_amount=remainder,
    )


def apply_distribution(ledger: FundLedger, distribution: Distribution) -> Tuple[Decimal, List[Tuple[Fund, Decimal, str]]]:
    """
    Credit the ledger with a distribution.

    Returns the signed change actually applied to `balance` (a negative
    remainder is withdrawn with a zero floor) and the automatic transfer
    entries to journal as (to_fund, amount, description).
    """
    if distribution.remainder_amount > 0:
        ledger.credit(Fund.BALANCE, distribution.remainder_amount)
        balance_delta = distribution.remainder_amount
    else:
        balance_delta = -ledger.withdraw_up_to(Fund.BALANCE, -distribution.remainder_amount)

    entries = []
    if distribution.debt_amount > 0:
        ledger.credit(Fund.DEBT_FUND, distribution.debt_amount)
        entries.append((Fund.DEBT_FUND, distribution.debt_amount, AUTO_DEBT_DESCRIPTION))
    if distribution.savings_amount > 0:
        ledger.credit(Fund.SAVINGS_FUND, distribution.savings_amount)
        entries.append((Fund.SAVINGS_FUND, distribution.savings_amount, AUTO_SAVINGS_DESCRIPTION))

    return balance_delta, entries


def reverse_distribution(
    ledger: FundLedger,
    debt_amount: Decimal,
    savings_amount: Decimal,
    balance_delta: Decimal,
) -> FundAdjustment:
    """
    Undo a distribution with a zero floor on every fund.

    Returns the adjustment that was actually applied, which can differ from
    the exact inverse when intervening activity already drained a fund.
    """
    applied = FundAdjustment()
    balance_delta = to_money(balance_delta or 0)
    if balance_delta > 0:
        applied.add(Fund.BALANCE, -ledger.withdraw_up_to(Fund.BALANCE, balance_delta))
    elif balance_delta < 0:
        ledger.credit(Fund.BALANCE, -balance_delta)
        applied.add(Fund.BALANCE, -balance_delta)
    applied.add(Fund.DEBT_FUND, -ledger.withdraw_up_to(Fund.DEBT_FUND, debt_amount or ZERO))
    applied.add(Fund.SAVINGS_FUND, -ledger.withdraw_up_to(Fund.SAVINGS_FUND, savings_amount or ZERO))
    return applied
