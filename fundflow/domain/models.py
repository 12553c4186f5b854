"""Domain models - pure Python dataclasses and enums representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import List, Optional

from fundflow.domain.exceptions import AmountOutOfRangeError, InvalidAmountError

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")
# Largest value a NUMERIC(14, 2) column holds
MAX_AMOUNT = Decimal("999999999999.99")


def to_money(value) -> Decimal:
    """Quantize any numeric value to currency precision (2 places, half-up)"""
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value))
        except InvalidOperation as e:
            raise InvalidAmountError(f"Amount {value!r} is not a number", amount=str(value)) from e
    if not value.is_finite():
        raise InvalidAmountError(f"Amount {value} is not a finite number", amount=str(value))
    try:
        return value.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise AmountOutOfRangeError(f"Amount {value} is outside the supported range", amount=str(value)) from e


def to_amount(value, field: str = "amount") -> Decimal:
    """Money supplied by a caller: strictly positive and storable"""
    amount = to_money(value)
    if amount <= 0:
        raise InvalidAmountError(f"{field} must be positive, got {amount}", field=field)
    if amount > MAX_AMOUNT:
        raise AmountOutOfRangeError(f"{field} exceeds {MAX_AMOUNT}", field=field)
    return amount


class Fund(str, Enum):
    """The three named buckets every user owns"""

    BALANCE = "balance"
    DEBT_FUND = "debt_fund"
    SAVINGS_FUND = "savings_fund"


class TransferType(str, Enum):
    MANUAL = "manual"
    AUTOMATIC = "automatic"


class DebtStrategy(str, Enum):
    SNOWBALL = "snowball"  # smallest remaining balance first
    AVALANCHE = "avalanche"  # largest installment first


class DebtCategory(str, Enum):
    CREDIT_CARD = "credit-card"
    LOAN = "loan"
    MORTGAGE = "mortgage"
    CAR_LOAN = "car-loan"
    BILL = "bill"
    INSTALLMENT = "installment"
    OTHER = "other"


class GoalCategory(str, Enum):
    HOUSE = "house"
    CAR = "car"
    VACATION = "vacation"
    EDUCATION = "education"
    OTHER = "other"


class EntityType(str, Enum):
    DEBT = "debt"
    SAVING_GOAL = "saving_goal"


class Milestone(str, Enum):
    PAID_OFF = "paid_off"
    HALFWAY = "halfway"


@dataclass
class Distribution:
    """Three-way split of one income amount"""

    amount: Decimal
    debt_percentage: Decimal
    savings_percentage: Decimal
    debt_amount: Decimal
    savings_amount: Decimal
    remainder_amount: Decimal


@dataclass
class DebtSnapshot:
    """Debt with its aggregated payment history, used by analysis and milestones"""

    debt_id: str
    user_id: str
    description: str
    total_amount: Decimal
    paid_amount: Decimal
    payment_count: int
    installment_count: int = 1

    @property
    def remaining_amount(self) -> Decimal:
        return self.total_amount - self.paid_amount

    @property
    def is_paid_off(self) -> bool:
        return self.remaining_amount <= 0

    @property
    def installment_amount(self) -> Decimal:
        """Remaining amount spread over the installments still outstanding"""
        remaining_installments = max(1, self.installment_count - self.payment_count)
        return self.remaining_amount / remaining_installments


@dataclass
class GoalSnapshot:
    """Savings goal progress as seen by milestone detection"""

    goal_id: str
    user_id: str
    title: str
    target_amount: Decimal
    current_amount: Decimal


@dataclass
class MilestoneCandidate:
    """Entity that currently satisfies a milestone predicate"""

    user_id: str
    entity_type: EntityType
    entity_id: str
    milestone: Milestone
    name: str


@dataclass
class Notification:
    """Localized push message ready for delivery"""

    title: dict
    body: dict
    data: dict


@dataclass
class ScoreComponent:
    """One 25-point slice of the financial health score"""

    category: str
    score: int
    max_score: int
    value: float
    status: str  # excellent | good | warning | critical


@dataclass
class HealthScore:
    total_score: int
    components: List[ScoreComponent] = field(default_factory=list)


@dataclass
class DebtPlan:
    """Debt payoff projection for a repayment strategy"""

    strategy: DebtStrategy
    total_remaining: Decimal
    monthly_minimum: Decimal
    estimated_months: int
    extra_payment: Decimal
    ordered_debts: List[DebtSnapshot] = field(default_factory=list)


@dataclass
class MonthlyReport:
    month: str
    start: date
    end: date
    total_income: Decimal
    debt_payments: Decimal
    savings_contributions: Decimal
    net_amount: Decimal
    income_count: int = 0
    top_income_category: Optional[str] = None
