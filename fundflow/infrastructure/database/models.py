"""SQLAlchemy ORM models for the budgeting store"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

Money = Numeric(14, 2)
Percentage = Numeric(5, 2)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserSettings(Base):
    """Allocation percentages, repayment strategy and the three fund balances"""

    __tablename__ = "user_settings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, unique=True)
    debt_percentage = Column(Percentage, nullable=False, default=30)
    savings_percentage = Column(Percentage, nullable=False, default=20)
    debt_strategy = Column(Text, nullable=False, default="snowball")
    balance = Column(Money, nullable=False, default=0)
    debt_fund = Column(Money, nullable=False, default=0)
    savings_fund = Column(Money, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_settings_balance_non_negative"),
        CheckConstraint("debt_fund >= 0", name="ck_settings_debt_fund_non_negative"),
        CheckConstraint("savings_fund >= 0", name="ck_settings_savings_fund_non_negative"),
    )


class Income(Base):
    """Recorded income with the distribution snapshot taken when it was added"""

    __tablename__ = "incomes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    description = Column(Text, nullable=False)
    amount = Column(Money, nullable=False)
    date = Column(Date, nullable=False)
    category = Column(Text, nullable=False, default="other")
    monthly_repeat = Column(Boolean, nullable=False, default=False)
    next_income_date = Column(Date, nullable=True)
    # Distribution snapshot; NULL on rows created before snapshots existed
    debt_percentage = Column(Percentage, nullable=True)
    savings_percentage = Column(Percentage, nullable=True)
    debt_amount = Column(Money, nullable=True)
    savings_amount = Column(Money, nullable=True)
    remainder_amount = Column(Money, nullable=True)
    balance_delta = Column(Money, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (CheckConstraint("amount > 0", name="ck_income_amount_positive"),)


class Debt(Base):
    """Debt repaid through installment payments"""

    __tablename__ = "debts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    description = Column(Text, nullable=False)
    total_amount = Column(Money, nullable=False)
    due_date = Column(Date, nullable=False)
    installment_count = Column(Integer, nullable=False, default=1)
    monthly_repeat = Column(Boolean, nullable=False, default=False)
    next_payment_date = Column(Date, nullable=True)
    category = Column(Text, nullable=False, default="other")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    payments = relationship(
        "Payment",
        back_populates="debt",
        cascade="all, delete-orphan",
        order_by="Payment.date.desc()",
    )

    @property
    def paid_amount(self):
        return sum((p.amount for p in self.payments), Decimal("0.00"))

    __table_args__ = (
        CheckConstraint("total_amount > 0", name="ck_debt_total_positive"),
        CheckConstraint("installment_count >= 1", name="ck_debt_installments_positive"),
    )


class Payment(Base):
    """Single installment payment against a debt"""

    __tablename__ = "payments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    debt_id = Column(Uuid, ForeignKey("debts.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Money, nullable=False)
    date = Column(Date, nullable=False)
    from_debt_fund = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    debt = relationship("Debt", back_populates="payments")

    __table_args__ = (CheckConstraint("amount > 0", name="ck_payment_amount_positive"),)


class SavingGoal(Base):
    """Savings target; current_amount always equals the sum of its contributions"""

    __tablename__ = "saving_goals"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    title = Column(Text, nullable=False)
    target_amount = Column(Money, nullable=False)
    current_amount = Column(Money, nullable=False, default=0)
    category = Column(Text, nullable=False, default="other")
    deadline = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    contributions = relationship(
        "SavingContribution",
        back_populates="goal",
        cascade="all, delete-orphan",
        order_by="SavingContribution.date.desc()",
    )

    __table_args__ = (CheckConstraint("target_amount > 0", name="ck_goal_target_positive"),)


class SavingContribution(Base):
    """Money put towards a savings goal"""

    __tablename__ = "saving_contributions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    saving_goal_id = Column(Uuid, ForeignKey("saving_goals.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Money, nullable=False)
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
    from_savings_fund = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    goal = relationship("SavingGoal", back_populates="contributions")

    __table_args__ = (CheckConstraint("amount > 0", name="ck_contribution_amount_positive"),)


class Transfer(Base):
    """Journal entry for one movement between two funds"""

    __tablename__ = "transfers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    from_fund = Column(Text, nullable=False)
    to_fund = Column(Text, nullable=False)
    amount = Column(Money, nullable=False)
    description = Column(Text, nullable=True)
    transfer_type = Column(Text, nullable=False, default="manual")
    income_id = Column(Uuid, ForeignKey("incomes.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transfer_amount_positive"),
        CheckConstraint("from_fund <> to_fund", name="ck_transfer_different_funds"),
        CheckConstraint(
            "from_fund IN ('balance', 'debt_fund', 'savings_fund')", name="ck_transfer_from_fund"
        ),
        CheckConstraint("to_fund IN ('balance', 'debt_fund', 'savings_fund')", name="ck_transfer_to_fund"),
        CheckConstraint("transfer_type IN ('manual', 'automatic')", name="ck_transfer_type"),
    )


class MilestoneLog(Base):
    """Existence of a row means the milestone notification was already attempted"""

    __tablename__ = "financial_milestones_log"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    entity_id = Column(Text, nullable=False)
    entity_type = Column(Text, nullable=False)
    milestone = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("entity_type", "entity_id", "milestone", name="uq_milestone_entity"),
    )


class Profile(Base):
    """User profile holding the push notification target"""

    __tablename__ = "profiles"

    user_id = Column(Text, primary_key=True)
    display_name = Column(Text, nullable=True)
    push_token = Column(Text, nullable=True)
