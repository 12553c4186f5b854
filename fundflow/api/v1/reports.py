"""GET /v1/reports - financial summary and monthly report"""

from fastapi import APIRouter, Depends, Query

from fundflow.api.dependencies import get_report_service
from fundflow.api.v1.schemas import (
    ERROR_RESPONSES,
    DebtPlanItem,
    DebtPlanSchema,
    MonthlyReportResponse,
    ScoreComponentSchema,
    SummaryResponse,
)
from fundflow.domain.models import to_money
from fundflow.services.reports import ReportService
from fundflow.utils.date_utils import month_key

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("/reports/summary", response_model=SummaryResponse)
def get_summary(service: ReportService = Depends(get_report_service)):
    """
    Debt-to-income ratio, savings rate, health score and the payoff plan
    for the user's configured repayment strategy.
    """
    summary = service.summary()
    plan = summary.debt_plan

    return SummaryResponse(
        total_income=summary.total_income,
        total_debt_remaining=summary.total_debt_remaining,
        total_savings=summary.total_savings,
        debt_to_income_ratio=summary.debt_to_income_ratio,
        savings_rate=summary.savings_rate,
        health_score=summary.health.total_score,
        health_components=[ScoreComponentSchema.model_validate(c) for c in summary.health.components],
        debt_plan=DebtPlanSchema(
            strategy=plan.strategy.value,
            total_remaining=plan.total_remaining,
            monthly_minimum=plan.monthly_minimum,
            estimated_months=plan.estimated_months,
            extra_payment=plan.extra_payment,
            debts=[
                DebtPlanItem(
                    debt_id=d.debt_id,
                    description=d.description,
                    remaining_amount=d.remaining_amount,
                    installment_amount=to_money(d.installment_amount),
                )
                for d in plan.ordered_debts
            ],
        ),
    )


@router.get("/reports/monthly", response_model=MonthlyReportResponse)
def get_monthly_report(
    month: str = Query(None, description="Month as YYYY-MM, defaults to the current month"),
    service: ReportService = Depends(get_report_service),
):
    return service.monthly(month or month_key())
