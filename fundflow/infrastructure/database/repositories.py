"""Data access layer for budgeting entities"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fundflow.config import settings
from fundflow.domain.exceptions import NotFoundError
from fundflow.domain.ledger import FundLedger
from fundflow.domain.models import (
    DebtSnapshot,
    Distribution,
    EntityType,
    Fund,
    GoalSnapshot,
    Milestone,
    MilestoneCandidate,
    TransferType,
    ZERO,
    to_money,
)
from fundflow.infrastructure.database.models import (
    Debt,
    Income,
    MilestoneLog,
    Payment,
    Profile,
    SavingContribution,
    SavingGoal,
    Transfer,
    UserSettings,
)


def parse_id(value, entity: str = "entity") -> uuid.UUID:
    """Parse a path identifier; malformed IDs are reported as not found"""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise NotFoundError(f"{entity} {value} not found", entity=entity)


class SettingsRepository:
    """Repository for per-user settings and fund balances"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str, for_update: bool = False) -> Optional[UserSettings]:
        query = self.db.query(UserSettings).filter(UserSettings.user_id == user_id)
        if for_update:
            # Serializes overlapping mutations of the same user's funds
            query = query.with_for_update()
        return query.first()

    def get_or_create(self, user_id: str, for_update: bool = False) -> UserSettings:
        """Fetch settings, creating the defaults on first access"""
        row = self.get(user_id, for_update=for_update)
        if row is not None:
            return row

        row = UserSettings(
            user_id=user_id,
            debt_percentage=Decimal(str(settings.default_debt_percentage)),
            savings_percentage=Decimal(str(settings.default_savings_percentage)),
            debt_strategy="snowball",
            balance=ZERO,
            debt_fund=ZERO,
            savings_fund=ZERO,
        )
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError:
            # Concurrent first access created it; nothing else is pending yet
            self.db.rollback()
            return self.get(user_id, for_update=for_update)
        return row

    @staticmethod
    def load_ledger(row: UserSettings) -> FundLedger:
        return FundLedger(balance=row.balance, debt_fund=row.debt_fund, savings_fund=row.savings_fund)

    @staticmethod
    def store_ledger(row: UserSettings, ledger: FundLedger) -> None:
        row.balance = ledger.balance
        row.debt_fund = ledger.debt_fund
        row.savings_fund = ledger.savings_fund


class IncomeRepository:
    """Repository for incomes"""

    def __init__(self, db: Session):
        self.db = db

    def create_income(
        self,
        user_id: str,
        description: str,
        income_date: date,
        category: str,
        monthly_repeat: bool,
        next_income_date: Optional[date],
        distribution: Distribution,
        balance_delta: Decimal,
    ) -> Income:
        """Persist income together with its distribution snapshot"""
        row = Income(
            user_id=user_id,
            description=description,
            amount=distribution.amount,
            date=income_date,
            category=category,
            monthly_repeat=monthly_repeat,
            next_income_date=next_income_date,
            debt_percentage=distribution.debt_percentage,
            savings_percentage=distribution.savings_percentage,
            debt_amount=distribution.debt_amount,
            savings_amount=distribution.savings_amount,
            remainder_amount=distribution.remainder_amount,
            balance_delta=balance_delta,
        )
        self.db.add(row)
        self.db.flush()  # Get ID for linked transfers
        return row

    def get_for_user(self, income_id, user_id: str) -> Optional[Income]:
        return (
            self.db.query(Income)
            .filter(Income.id == parse_id(income_id, "income"), Income.user_id == user_id)
            .first()
        )

    def list_by_user(self, user_id: str) -> List[Income]:
        return (
            self.db.query(Income)
            .filter(Income.user_id == user_id)
            .order_by(Income.date.desc(), Income.created_at.desc())
            .all()
        )

    def delete(self, income: Income) -> None:
        self.db.delete(income)


class TransferRepository:
    """Repository for the transfer journal"""

    def __init__(self, db: Session):
        self.db = db

    def create_transfer(
        self,
        user_id: str,
        from_fund: Fund,
        to_fund: Fund,
        amount: Decimal,
        transfer_type: TransferType,
        description: Optional[str] = None,
        income_id: Optional[uuid.UUID] = None,
    ) -> Transfer:
        """Append one journal entry"""
        row = Transfer(
            user_id=user_id,
            from_fund=Fund(from_fund).value,
            to_fund=Fund(to_fund).value,
            amount=to_money(amount),
            description=description,
            transfer_type=TransferType(transfer_type).value,
            income_id=income_id,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def get_for_user(self, transfer_id, user_id: str) -> Optional[Transfer]:
        return (
            self.db.query(Transfer)
            .filter(Transfer.id == parse_id(transfer_id, "transfer"), Transfer.user_id == user_id)
            .first()
        )

    def list_by_user(self, user_id: str, limit: int = 50) -> List[Transfer]:
        """Most recent entries first"""
        return (
            self.db.query(Transfer)
            .filter(Transfer.user_id == user_id)
            .order_by(Transfer.created_at.desc())
            .limit(limit)
            .all()
        )

    def delete(self, transfer: Transfer) -> None:
        self.db.delete(transfer)

    def delete_for_income(self, income_id: uuid.UUID) -> int:
        """Remove automatic entries produced by one income's distribution"""
        return (
            self.db.query(Transfer)
            .filter(
                Transfer.income_id == income_id,
                Transfer.transfer_type == TransferType.AUTOMATIC.value,
            )
            .delete(synchronize_session=False)
        )

    def delete_automatic_between(self, user_id: str, start: datetime, end: datetime) -> int:
        """Remove unlinked automatic entries created in [start, end)"""
        return (
            self.db.query(Transfer)
            .filter(
                Transfer.user_id == user_id,
                Transfer.transfer_type == TransferType.AUTOMATIC.value,
                Transfer.income_id.is_(None),
                Transfer.created_at >= start,
                Transfer.created_at < end,
            )
            .delete(synchronize_session=False)
        )


class DebtRepository:
    """Repository for debts and their payments"""

    def __init__(self, db: Session):
        self.db = db

    def create_debt(self, user_id: str, **fields) -> Debt:
        row = Debt(user_id=user_id, **fields)
        self.db.add(row)
        self.db.flush()
        return row

    def get_for_user(self, debt_id, user_id: str) -> Optional[Debt]:
        return (
            self.db.query(Debt)
            .filter(Debt.id == parse_id(debt_id, "debt"), Debt.user_id == user_id)
            .first()
        )

    def list_by_user(self, user_id: str) -> List[Debt]:
        return (
            self.db.query(Debt)
            .filter(Debt.user_id == user_id)
            .order_by(Debt.created_at.desc())
            .all()
        )

    def delete(self, debt: Debt) -> None:
        self.db.delete(debt)

    def add_payment(self, debt: Debt, amount: Decimal, payment_date: date, from_debt_fund: bool) -> Payment:
        payment = Payment(debt_id=debt.id, amount=amount, date=payment_date, from_debt_fund=from_debt_fund)
        debt.payments.append(payment)
        self.db.flush()
        return payment

    def get_payment_for_user(self, payment_id, user_id: str) -> Optional[Payment]:
        """Payments are owned through their debt"""
        return (
            self.db.query(Payment)
            .join(Debt, Payment.debt_id == Debt.id)
            .filter(Payment.id == parse_id(payment_id, "payment"), Debt.user_id == user_id)
            .first()
        )

    def delete_payment(self, payment: Payment) -> None:
        payment.debt.payments.remove(payment)
        self.db.flush()

    def snapshots(self, user_id: Optional[str] = None) -> List[DebtSnapshot]:
        """Debts with payment totals in one grouped query (all users when user_id is None)"""
        paid = func.coalesce(func.sum(Payment.amount), 0)
        query = (
            self.db.query(Debt, paid.label("paid"), func.count(Payment.id).label("payment_count"))
            .outerjoin(Payment, Payment.debt_id == Debt.id)
            .group_by(Debt.id)
        )
        if user_id is not None:
            query = query.filter(Debt.user_id == user_id)

        return [
            DebtSnapshot(
                debt_id=str(debt.id),
                user_id=debt.user_id,
                description=debt.description,
                total_amount=to_money(debt.total_amount),
                paid_amount=to_money(paid_amount or 0),
                payment_count=payment_count,
                installment_count=debt.installment_count,
            )
            for debt, paid_amount, payment_count in query.all()
        ]


class SavingGoalRepository:
    """Repository for savings goals and contributions"""

    def __init__(self, db: Session):
        self.db = db

    def create_goal(self, user_id: str, **fields) -> SavingGoal:
        row = SavingGoal(user_id=user_id, current_amount=ZERO, **fields)
        self.db.add(row)
        self.db.flush()
        return row

    def get_for_user(self, goal_id, user_id: str) -> Optional[SavingGoal]:
        return (
            self.db.query(SavingGoal)
            .filter(SavingGoal.id == parse_id(goal_id, "saving goal"), SavingGoal.user_id == user_id)
            .first()
        )

    def list_by_user(self, user_id: str) -> List[SavingGoal]:
        return (
            self.db.query(SavingGoal)
            .filter(SavingGoal.user_id == user_id)
            .order_by(SavingGoal.created_at.desc())
            .all()
        )

    def delete(self, goal: SavingGoal) -> None:
        self.db.delete(goal)

    def add_contribution(
        self,
        goal: SavingGoal,
        amount: Decimal,
        contribution_date: date,
        description: Optional[str],
        from_savings_fund: bool,
    ) -> SavingContribution:
        contribution = SavingContribution(
            saving_goal_id=goal.id,
            amount=amount,
            date=contribution_date,
            description=description,
            from_savings_fund=from_savings_fund,
        )
        goal.contributions.append(contribution)
        goal.current_amount = to_money(goal.current_amount or 0) + amount
        self.db.flush()
        return contribution

    def get_contribution_for_user(self, contribution_id, user_id: str) -> Optional[SavingContribution]:
        return (
            self.db.query(SavingContribution)
            .join(SavingGoal, SavingContribution.saving_goal_id == SavingGoal.id)
            .filter(
                SavingContribution.id == parse_id(contribution_id, "contribution"),
                SavingGoal.user_id == user_id,
            )
            .first()
        )

    def delete_contribution(self, contribution: SavingContribution) -> SavingGoal:
        """Remove a contribution and decrement its goal by the same amount"""
        goal = contribution.goal
        goal.contributions.remove(contribution)
        goal.current_amount = max(ZERO, to_money(goal.current_amount) - to_money(contribution.amount))
        self.db.flush()
        return goal

    def snapshots(self) -> List[GoalSnapshot]:
        return [
            GoalSnapshot(
                goal_id=str(goal.id),
                user_id=goal.user_id,
                title=goal.title,
                target_amount=to_money(goal.target_amount),
                current_amount=to_money(goal.current_amount or 0),
            )
            for goal in self.db.query(SavingGoal).all()
        ]


class MilestoneLogRepository:
    """Repository for the milestone dedupe log"""

    def __init__(self, db: Session):
        self.db = db

    def logged_entity_ids(self, entity_type: EntityType, milestone: Milestone, entity_ids: Iterable[str]) -> Set[str]:
        """Entity IDs among the candidates that already have a log row"""
        entity_ids = list(entity_ids)
        if not entity_ids:
            return set()
        rows = (
            self.db.query(MilestoneLog.entity_id)
            .filter(
                MilestoneLog.entity_type == EntityType(entity_type).value,
                MilestoneLog.milestone == Milestone(milestone).value,
                MilestoneLog.entity_id.in_(entity_ids),
            )
            .all()
        )
        return {row.entity_id for row in rows}

    def create_log(self, candidate: MilestoneCandidate) -> MilestoneLog:
        row = MilestoneLog(
            user_id=candidate.user_id,
            entity_id=candidate.entity_id,
            entity_type=candidate.entity_type.value,
            milestone=candidate.milestone.value,
        )
        self.db.add(row)
        self.db.flush()
        return row


class ProfileRepository:
    """Read access to user profiles (push targets)"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_user_ids(self, user_ids: Iterable[str]) -> Dict[str, Profile]:
        user_ids = [u for u in set(user_ids) if u]
        if not user_ids:
            return {}
        profiles = self.db.query(Profile).filter(Profile.user_id.in_(user_ids)).all()
        return {p.user_id: p for p in profiles}
