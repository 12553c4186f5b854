"""In-memory fund ledger: the three per-user buckets and their atomic mutations"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict

from fundflow.domain.exceptions import InsufficientFundsError, SameFundError
from fundflow.domain.models import Fund, ZERO, to_amount, to_money


@dataclass
class FundAdjustment:
    """
    Signed per-fund deltas applied as one unit.

    The inverse is computed from the same deltas, so undoing an adjustment
    always restores exactly what applying it changed.
    """

    deltas: Dict[Fund, Decimal] = field(default_factory=dict)

    @classmethod
    def movement(cls, from_fund: Fund, to_fund: Fund, amount) -> "FundAdjustment":
        """Money leaving `from_fund` and arriving in `to_fund`"""
        amount = to_money(amount)
        return cls().add(Fund(from_fund), -amount).add(Fund(to_fund), amount)

    @classmethod
    def draw(cls, fund: Fund, amount) -> "FundAdjustment":
        """Money leaving `fund` for a payment or contribution outside the ledger"""
        return cls().add(Fund(fund), -to_money(amount))

    def add(self, fund: Fund, delta: Decimal) -> "FundAdjustment":
        delta = to_money(delta)
        if delta != 0:
            self.deltas[fund] = self.deltas.get(fund, ZERO) + delta
        return self

    def inverse(self) -> "FundAdjustment":
        return FundAdjustment({fund: -delta for fund, delta in self.deltas.items()})

    def is_empty(self) -> bool:
        return not any(self.deltas.values())


class FundLedger:
    """
    Balances of `balance`, `debt_fund` and `savings_fund` for one user.

    Every operation validates completely before mutating anything, so a
    failed call leaves all three buckets untouched.
    """

    def __init__(self, balance=ZERO, debt_fund=ZERO, savings_fund=ZERO):
        self._funds: Dict[Fund, Decimal] = {
            Fund.BALANCE: to_money(balance or 0),
            Fund.DEBT_FUND: to_money(debt_fund or 0),
            Fund.SAVINGS_FUND: to_money(savings_fund or 0),
        }

    def __repr__(self) -> str:
        return (
            f"FundLedger(balance={self.balance}, debt_fund={self.debt_fund}, "
            f"savings_fund={self.savings_fund})"
        )

    @property
    def balance(self) -> Decimal:
        return self._funds[Fund.BALANCE]

    @property
    def debt_fund(self) -> Decimal:
        return self._funds[Fund.DEBT_FUND]

    @property
    def savings_fund(self) -> Decimal:
        return self._funds[Fund.SAVINGS_FUND]

    @property
    def total(self) -> Decimal:
        return sum(self._funds.values(), ZERO)

    def balance_of(self, fund: Fund) -> Decimal:
        return self._funds[Fund(fund)]

    def snapshot(self) -> Dict[Fund, Decimal]:
        return dict(self._funds)

    def credit(self, fund: Fund, amount) -> Decimal:
        amount = to_amount(amount)
        fund = Fund(fund)
        self._funds[fund] += amount
        return self._funds[fund]

    def debit(self, fund: Fund, amount) -> Decimal:
        fund = Fund(fund)
        self.apply(FundAdjustment.draw(fund, to_amount(amount)))
        return self._funds[fund]

    def transfer(self, from_fund: Fund, to_fund: Fund, amount) -> None:
        from_fund, to_fund = Fund(from_fund), Fund(to_fund)
        if from_fund == to_fund:
            raise SameFundError(f"Cannot transfer {from_fund.value} to itself", fund=from_fund.value)
        self.apply(FundAdjustment.movement(from_fund, to_fund, to_amount(amount)))

    def withdraw_up_to(self, fund: Fund, amount) -> Decimal:
        """Subtract with a zero floor; returns the amount actually removed"""
        amount = to_money(amount)
        fund = Fund(fund)
        if amount <= 0:
            return ZERO
        removed = min(amount, self._funds[fund])
        self._funds[fund] -= removed
        return removed

    def apply(self, adjustment: FundAdjustment) -> None:
        """Apply signed deltas atomically; refuses if any fund would go negative"""
        if adjustment.is_empty():
            return
        for fund, delta in adjustment.deltas.items():
            available = self.balance_of(fund)
            if available + delta < 0:
                raise InsufficientFundsError(
                    f"{fund.value} has {available}, cannot debit {-delta}",
                    fund=fund.value,
                    available=str(available),
                    requested=str(-delta),
                )
        for fund, delta in adjustment.deltas.items():
            self._funds[fund] += delta


