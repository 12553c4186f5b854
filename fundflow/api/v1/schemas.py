"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field, UUID4
import datetime as dt
from decimal import Decimal
from typing import Dict, List, Optional

from fundflow.domain.models import DebtCategory, DebtStrategy, GoalCategory


class SettingsUpdate(BaseModel):
    """Request body for PUT /v1/settings"""

    debt_percentage: Optional[Decimal] = Field(None, description="Share of income routed to the debt fund")
    savings_percentage: Optional[Decimal] = Field(None, description="Share of income routed to the savings fund")
    debt_strategy: Optional[DebtStrategy] = None


class SettingsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    debt_percentage: Decimal
    savings_percentage: Decimal
    debt_strategy: str
    allocation_exceeds_income: bool = False


class FundsResponse(BaseModel):
    """Response for GET /v1/funds"""

    balance: Decimal
    debt_fund: Decimal
    savings_fund: Decimal
    total: Decimal


class IncomeCreate(BaseModel):
    """Request body for POST /v1/incomes"""

    description: str = Field(..., min_length=1)
    amount: Decimal
    date: dt.date
    category: str = "other"
    monthly_repeat: bool = False
    next_income_date: Optional[dt.date] = None


class IncomeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    description: str
    amount: Decimal
    date: dt.date
    category: str
    monthly_repeat: bool
    next_income_date: Optional[dt.date] = None
    debt_amount: Optional[Decimal] = None
    savings_amount: Optional[Decimal] = None
    remainder_amount: Optional[Decimal] = None
    created_at: dt.datetime


class TransferCreate(BaseModel):
    """Request body for POST /v1/transfers"""

    from_fund: str
    to_fund: str
    amount: Decimal
    description: Optional[str] = None


class TransferResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    from_fund: str
    to_fund: str
    amount: Decimal
    description: Optional[str] = None
    transfer_type: str
    income_id: Optional[UUID4] = None
    created_at: dt.datetime


class PaymentCreate(BaseModel):
    """Request body for POST /v1/debts/{debt_id}/payments"""

    amount: Decimal
    date: dt.date
    from_debt_fund: bool = False


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    debt_id: UUID4
    amount: Decimal
    date: dt.date
    from_debt_fund: bool


class DebtCreate(BaseModel):
    """Request body for POST /v1/debts"""

    description: str = Field(..., min_length=1)
    total_amount: Decimal
    due_date: dt.date
    installment_count: int = Field(1, ge=1)
    monthly_repeat: bool = False
    next_payment_date: Optional[dt.date] = None
    category: DebtCategory = DebtCategory.OTHER


class DebtUpdate(BaseModel):
    """Request body for PATCH /v1/debts/{debt_id}; omitted fields stay unchanged"""

    description: Optional[str] = None
    total_amount: Optional[Decimal] = None
    due_date: Optional[dt.date] = None
    installment_count: Optional[int] = Field(None, ge=1)
    monthly_repeat: Optional[bool] = None
    next_payment_date: Optional[dt.date] = None
    category: Optional[DebtCategory] = None


class DebtResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    description: str
    total_amount: Decimal
    paid_amount: Decimal = Decimal("0.00")
    due_date: dt.date
    installment_count: int
    monthly_repeat: bool
    next_payment_date: Optional[dt.date] = None
    category: str
    payments: List[PaymentResponse] = []


class ContributionCreate(BaseModel):
    """Request body for POST /v1/goals/{goal_id}/contributions"""

    amount: Decimal
    date: Optional[dt.date] = None
    description: Optional[str] = None
    from_savings_fund: bool = False


class ContributionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    saving_goal_id: UUID4
    amount: Decimal
    date: dt.date
    description: Optional[str] = None
    from_savings_fund: bool


class GoalCreate(BaseModel):
    """Request body for POST /v1/goals"""

    title: str = Field(..., min_length=1)
    target_amount: Decimal
    category: GoalCategory = GoalCategory.OTHER
    deadline: Optional[dt.date] = None
    initial_amount: Decimal = Decimal("0")


class GoalUpdate(BaseModel):
    """Request body for PATCH /v1/goals/{goal_id}"""

    title: Optional[str] = None
    target_amount: Optional[Decimal] = None
    category: Optional[GoalCategory] = None
    deadline: Optional[dt.date] = None


class GoalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    title: str
    target_amount: Decimal
    current_amount: Decimal
    category: str
    deadline: Optional[dt.date] = None
    contributions: List[ContributionResponse] = []


class ScoreComponentSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category: str
    score: int
    max_score: int
    value: float
    status: str


class DebtPlanItem(BaseModel):
    debt_id: str
    description: str
    remaining_amount: Decimal
    installment_amount: Decimal


class DebtPlanSchema(BaseModel):
    strategy: str
    total_remaining: Decimal
    monthly_minimum: Decimal
    estimated_months: int
    extra_payment: Decimal
    debts: List[DebtPlanItem]


class SummaryResponse(BaseModel):
    """Response for GET /v1/reports/summary"""

    total_income: Decimal
    total_debt_remaining: Decimal
    total_savings: Decimal
    debt_to_income_ratio: float
    savings_rate: float
    health_score: int
    health_components: List[ScoreComponentSchema]
    debt_plan: DebtPlanSchema


class MonthlyReportResponse(BaseModel):
    """Response for GET /v1/reports/monthly"""

    model_config = ConfigDict(from_attributes=True)

    month: str
    start: dt.date
    end: dt.date
    total_income: Decimal
    debt_payments: Decimal
    savings_contributions: Decimal
    net_amount: Decimal
    income_count: int
    top_income_category: Optional[str] = None


class MilestoneRunResponse(BaseModel):
    """Response for the milestone detection job"""

    ok: bool
    checkedDebts: int
    newlyPaidOff: int
    debtNotificationsSent: int
    checkedSavingGoals: int
    newlyHalfway: int
    savingsNotificationsSent: int


class ErrorResponse(BaseModel):
    detail: str
    code: str


ERROR_RESPONSES: Dict[int, dict] = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}
