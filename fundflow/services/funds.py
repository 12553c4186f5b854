"""Fund service - settings, income distribution and the transfer journal for one user"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from fundflow.domain.distribution import apply_distribution, distribute, reverse_distribution, validate_percentage
from fundflow.domain.exceptions import InvalidTransferError, NotFoundError
from fundflow.domain.ledger import FundAdjustment, FundLedger
from fundflow.domain.models import DebtStrategy, Fund, TransferType, to_amount, to_money
from fundflow.infrastructure.database.models import Income, Transfer, UserSettings
from fundflow.infrastructure.database.repositories import (
    IncomeRepository,
    SettingsRepository,
    TransferRepository,
)
from fundflow.infrastructure.observability.logging import log_distribution, log_transfer
from fundflow.infrastructure.observability.metrics import income_distribution_counter, record_transfer
from fundflow.services.unit_of_work import ledger_transaction, write_transaction
from fundflow.utils.date_utils import day_bounds

logger = logging.getLogger(__name__)


class FundService:
    """
    Owns one user's settings row and fund ledger.

    Every mutating method is a single transaction: the settings row is read
    with a row lock, the ledger is changed in memory, journal rows are
    written, and everything commits together or not at all.
    """

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id
        self.settings_repo = SettingsRepository(db)
        self.income_repo = IncomeRepository(db)
        self.transfer_repo = TransferRepository(db)

    # Settings

    def get_settings(self) -> UserSettings:
        """Current settings, created with defaults on first access"""
        with write_transaction(self.db, self.user_id, "load_settings"):
            row = self.settings_repo.get_or_create(self.user_id)
        return row

    def update_settings(
        self,
        debt_percentage: Optional[Decimal] = None,
        savings_percentage: Optional[Decimal] = None,
        debt_strategy: Optional[DebtStrategy] = None,
    ) -> UserSettings:
        """Change allocation percentages or repayment strategy; balances are not settable"""
        with ledger_transaction(self.db, self.user_id, "update_settings") as (row, _):
            if debt_percentage is not None:
                row.debt_percentage = validate_percentage(debt_percentage, "debt_percentage")
            if savings_percentage is not None:
                row.savings_percentage = validate_percentage(savings_percentage, "savings_percentage")
            if debt_strategy is not None:
                row.debt_strategy = DebtStrategy(debt_strategy).value
        return row

    def get_ledger(self) -> FundLedger:
        return self.settings_repo.load_ledger(self.get_settings())

    # Incomes

    def list_incomes(self) -> List[Income]:
        return self.income_repo.list_by_user(self.user_id)

    def add_income(
        self,
        description: str,
        amount,
        income_date: date,
        category: str = "other",
        monthly_repeat: bool = False,
        next_income_date: Optional[date] = None,
    ) -> Income:
        """
        Record income and distribute it across the funds.

        Flow:
        1. Split the amount by the current debt/savings percentages
        2. Credit balance, debt fund and savings fund
        3. Persist the income with a snapshot of the split
        4. Journal one automatic transfer per credited fund
        """
        with ledger_transaction(self.db, self.user_id, "add_income") as (row, ledger):
            distribution = distribute(amount, row.debt_percentage, row.savings_percentage)
            balance_delta, entries = apply_distribution(ledger, distribution)

            income = self.income_repo.create_income(
                user_id=self.user_id,
                description=description,
                income_date=income_date,
                category=category,
                monthly_repeat=monthly_repeat,
                next_income_date=next_income_date,
                distribution=distribution,
                balance_delta=balance_delta,
            )
            for to_fund, fund_amount, note in entries:
                self.transfer_repo.create_transfer(
                    user_id=self.user_id,
                    from_fund=Fund.BALANCE,
                    to_fund=to_fund,
                    amount=fund_amount,
                    transfer_type=TransferType.AUTOMATIC,
                    description=note,
                    income_id=income.id,
                )

        income_distribution_counter.labels(outcome="distributed").inc()
        for _ in entries:
            record_transfer(TransferType.AUTOMATIC.value, "created")
        log_distribution(
            self.user_id,
            str(income.id),
            distribution.debt_amount,
            distribution.savings_amount,
            distribution.remainder_amount,
        )
        return income

    def delete_income(self, income_id) -> None:
        """
        Delete income and take its distribution back out of the funds.

        Uses the split recorded when the income was added. Rows without a
        snapshot fall back to the current percentages and to the automatic
        transfers created on the income's calendar day.
        """
        with ledger_transaction(self.db, self.user_id, "delete_income") as (row, ledger):
            income = self.income_repo.get_for_user(income_id, self.user_id)
            if income is None:
                raise NotFoundError(f"Income {income_id} not found", entity="income")

            if income.debt_amount is not None:
                applied = reverse_distribution(ledger, income.debt_amount, income.savings_amount, income.balance_delta)
                removed = self.transfer_repo.delete_for_income(income.id)
            else:
                legacy = distribute(income.amount, row.debt_percentage, row.savings_percentage)
                applied = reverse_distribution(ledger, legacy.debt_amount, legacy.savings_amount, legacy.remainder_amount)
                start, end = day_bounds(income.date)
                removed = self.transfer_repo.delete_automatic_between(self.user_id, start, end)

            self.income_repo.delete(income)

        income_distribution_counter.labels(outcome="reversed").inc()
        logger.info(
            "Income deleted",
            extra={
                "user_id": self.user_id,
                "income_id": str(income_id),
                "step": "income_deleted",
                "transfers_removed": removed,
                "reversed": {fund.value: str(delta) for fund, delta in applied.deltas.items()},
            },
        )

    # Transfers

    def list_transfers(self, limit: int = 50) -> List[Transfer]:
        return self.transfer_repo.list_by_user(self.user_id, limit=limit)

    def request_transfer(self, from_fund, to_fund, amount, description: Optional[str] = None) -> Transfer:
        """
        Move money between two funds and journal it as a manual transfer.

        Validation order: amount > 0, distinct funds, sufficient source
        balance. The balance check happens under the row lock, so two
        overlapping requests cannot both spend the same money.
        """
        amount = to_amount(amount)
        try:
            from_fund, to_fund = Fund(from_fund), Fund(to_fund)
        except ValueError as e:
            raise InvalidTransferError(str(e)) from e

        try:
            with ledger_transaction(self.db, self.user_id, "request_transfer") as (_, ledger):
                ledger.transfer(from_fund, to_fund, amount)
                transfer = self.transfer_repo.create_transfer(
                    user_id=self.user_id,
                    from_fund=from_fund,
                    to_fund=to_fund,
                    amount=amount,
                    transfer_type=TransferType.MANUAL,
                    description=description,
                )
        except Exception:
            record_transfer(TransferType.MANUAL.value, "rejected")
            raise

        record_transfer(TransferType.MANUAL.value, "created")
        log_transfer(self.user_id, str(transfer.id), from_fund.value, to_fund.value, amount, "transfer_created")
        return transfer

    def delete_transfer(self, transfer_id) -> None:
        """
        Reverse a journaled transfer and remove it.

        The inverse movement needs the destination fund to still hold the
        amount; otherwise InsufficientFundsError is raised and nothing
        changes.
        """
        with ledger_transaction(self.db, self.user_id, "delete_transfer") as (_, ledger):
            transfer = self.transfer_repo.get_for_user(transfer_id, self.user_id)
            if transfer is None:
                raise NotFoundError(f"Transfer {transfer_id} not found", entity="transfer")

            from_fund, to_fund, amount = Fund(transfer.from_fund), Fund(transfer.to_fund), to_money(transfer.amount)
            ledger.apply(FundAdjustment.movement(from_fund, to_fund, amount).inverse())

            if transfer.income_id is not None:
                self._detach_from_income(transfer, amount)
            transfer_type = transfer.transfer_type
            self.transfer_repo.delete(transfer)

        record_transfer(transfer_type, "reverted")
        log_transfer(self.user_id, str(transfer_id), from_fund.value, to_fund.value, amount, "transfer_reverted")

    def _detach_from_income(self, transfer: Transfer, amount: Decimal) -> None:
        """Keep the income snapshot in step once its automatic transfer was undone"""
        income = self.income_repo.get_for_user(transfer.income_id, self.user_id)
        if income is None or income.debt_amount is None:
            return
        # The reverted amount now sits in balance, so reversing the income takes it from there
        if transfer.to_fund == Fund.DEBT_FUND.value:
            income.debt_amount = to_money(income.debt_amount) - amount
        elif transfer.to_fund == Fund.SAVINGS_FUND.value:
            income.savings_amount = to_money(income.savings_amount) - amount
        income.balance_delta = to_money(income.balance_delta or 0) + amount
