"""Debt service - debts, installment payments and payoff planning"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from fundflow.domain.exceptions import NotFoundError, ValidationError
from fundflow.domain.ledger import FundAdjustment
from fundflow.domain.models import DebtCategory, Fund, to_amount
from fundflow.infrastructure.database.models import Debt, Payment
from fundflow.infrastructure.database.repositories import DebtRepository
from fundflow.services.unit_of_work import ledger_transaction, write_transaction
from fundflow.utils.date_utils import add_months

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "description",
    "total_amount",
    "due_date",
    "installment_count",
    "monthly_repeat",
    "next_payment_date",
    "category",
)


class DebtService:
    """Debt bookkeeping for one user"""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id
        self.debt_repo = DebtRepository(db)

    def list_debts(self) -> List[Debt]:
        return self.debt_repo.list_by_user(self.user_id)

    def get_debt(self, debt_id) -> Debt:
        debt = self.debt_repo.get_for_user(debt_id, self.user_id)
        if debt is None:
            raise NotFoundError(f"Debt {debt_id} not found", entity="debt")
        return debt

    def create_debt(
        self,
        description: str,
        total_amount,
        due_date: date,
        installment_count: int = 1,
        monthly_repeat: bool = False,
        next_payment_date: Optional[date] = None,
        category: str = "other",
    ) -> Debt:
        fields = _validated(
            {
                "description": description,
                "total_amount": total_amount,
                "due_date": due_date,
                "installment_count": installment_count,
                "monthly_repeat": monthly_repeat,
                "next_payment_date": next_payment_date,
                "category": category,
            }
        )
        with write_transaction(self.db, self.user_id, "create_debt"):
            debt = self.debt_repo.create_debt(self.user_id, **fields)
        return debt

    def update_debt(self, debt_id, **updates) -> Debt:
        fields = _validated({k: v for k, v in updates.items() if k in UPDATABLE_FIELDS and v is not None})
        with write_transaction(self.db, self.user_id, "update_debt"):
            debt = self.get_debt(debt_id)
            for name, value in fields.items():
                setattr(debt, name, value)
        return debt

    def delete_debt(self, debt_id) -> None:
        """Delete a debt and its payment history; paid money is not returned to any fund"""
        with write_transaction(self.db, self.user_id, "delete_debt"):
            self.debt_repo.delete(self.get_debt(debt_id))

    def add_payment(self, debt_id, amount, payment_date: date, from_debt_fund: bool = False) -> Payment:
        """
        Record an installment payment.

        When `from_debt_fund` is set the amount is debited from the debt fund
        in the same transaction. The next payment date moves one calendar
        month past the current next date (or the due date when none is set).
        """
        amount = to_amount(amount)

        with ledger_transaction(self.db, self.user_id, "add_payment") as (_, ledger):
            debt = self.get_debt(debt_id)
            if from_debt_fund:
                ledger.debit(Fund.DEBT_FUND, amount)
            payment = self.debt_repo.add_payment(debt, amount, payment_date, from_debt_fund)

            if debt.monthly_repeat or debt.installment_count > 0:
                debt.next_payment_date = add_months(debt.next_payment_date or debt.due_date, 1)

        logger.info(
            "Payment recorded",
            extra={
                "user_id": self.user_id,
                "debt_id": str(debt_id),
                "step": "payment_added",
                "amount": str(amount),
                "from_debt_fund": from_debt_fund,
            },
        )
        return payment

    def delete_payment(self, payment_id) -> Debt:
        """Remove a payment; one drawn from the debt fund is refunded to it"""
        with ledger_transaction(self.db, self.user_id, "delete_payment") as (_, ledger):
            payment = self.debt_repo.get_payment_for_user(payment_id, self.user_id)
            if payment is None:
                raise NotFoundError(f"Payment {payment_id} not found", entity="payment")
            debt = payment.debt
            if payment.from_debt_fund:
                ledger.apply(FundAdjustment.draw(Fund.DEBT_FUND, payment.amount).inverse())
            self.debt_repo.delete_payment(payment)
        return debt


def _validated(fields: dict) -> dict:
    if "total_amount" in fields:
        fields["total_amount"] = to_amount(fields["total_amount"], "total_amount")
    if "installment_count" in fields and int(fields["installment_count"]) < 1:
        raise ValidationError("Installment count must be at least 1", field="installment_count")
    if "category" in fields:
        try:
            fields["category"] = DebtCategory(fields["category"]).value
        except ValueError as e:
            raise ValidationError(str(e), field="category") from e
    return fields
