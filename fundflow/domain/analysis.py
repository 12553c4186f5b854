"""Financial analysis - ratios, health score and debt payoff projection"""

import math
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Tuple

from fundflow.domain.models import (
    DebtPlan,
    DebtSnapshot,
    DebtStrategy,
    HealthScore,
    MonthlyReport,
    ScoreComponent,
    ZERO,
    to_money,
)
from fundflow.utils.date_utils import month_bounds


def debt_to_income_ratio(total_debt_remaining: Decimal, total_income: Decimal) -> float:
    """Remaining debt as a percentage of income (0 when there is no income)"""
    if total_income <= 0:
        return 0.0
    return float(total_debt_remaining / total_income * 100)


def savings_rate(total_savings: Decimal, total_income: Decimal) -> float:
    """Savings as a percentage of income (0 when there is no income)"""
    if total_income <= 0:
        return 0.0
    return float(total_savings / total_income * 100)


def _band(value: float, bands: List[Tuple[float, int, str]], fallback: Tuple[int, str]) -> Tuple[int, str]:
    for threshold, score, status in bands:
        if value >= threshold:
            return score, status
    return fallback


def calculate_health_score(
    total_income: Decimal,
    total_debt_remaining: Decimal,
    total_savings: Decimal,
    monthly_expenses: Decimal,
    emergency_fund: Decimal,
) -> HealthScore:
    """
    Score overall financial health from 0 to 100.

    Four components, 25 points each:
    - Debt management: debt-to-income ≤20% → 25, ≤30% → 18, ≤40% → 10, else 5
    - Savings habit: savings rate ≥20% → 25, ≥15% → 20, ≥10% → 15, ≥5% → 10, else 5
    - Emergency fund: months of expenses covered ≥6 → 25, ≥4 → 20, ≥2 → 15, ≥1 → 10, else 5
    - Income status: any income → 20, none → 5
    """
    components = []

    dti = debt_to_income_ratio(total_debt_remaining, total_income)
    if dti > 40:
        debt_score, debt_status = 5, "critical"
    elif dti > 30:
        debt_score, debt_status = 10, "warning"
    elif dti > 20:
        debt_score, debt_status = 18, "good"
    else:
        debt_score, debt_status = 25, "excellent"
    components.append(ScoreComponent("debt_management", debt_score, 25, round(dti, 1), debt_status))

    rate = savings_rate(total_savings, total_income)
    savings_score, savings_status = _band(
        rate,
        [(20, 25, "excellent"), (15, 20, "good"), (10, 15, "warning"), (5, 10, "warning")],
        (5, "critical"),
    )
    components.append(ScoreComponent("savings_habit", savings_score, 25, round(rate, 1), savings_status))

    months_covered = float(emergency_fund / monthly_expenses) if monthly_expenses > 0 else 0.0
    emergency_score, emergency_status = _band(
        months_covered,
        [(6, 25, "excellent"), (4, 20, "good"), (2, 15, "warning"), (1, 10, "warning")],
        (5, "critical"),
    )
    components.append(
        ScoreComponent("emergency_fund", emergency_score, 25, round(months_covered, 1), emergency_status)
    )

    # Single income figure only; source diversity is not tracked
    if total_income > 0:
        components.append(ScoreComponent("income_status", 20, 25, float(total_income), "good"))
    else:
        components.append(ScoreComponent("income_status", 5, 25, 0.0, "critical"))

    return HealthScore(total_score=sum(c.score for c in components), components=components)


def order_debts(debts: Iterable[DebtSnapshot], strategy: DebtStrategy) -> List[DebtSnapshot]:
    """
    Order debts for repayment.

    - snowball: smallest remaining balance first
    - avalanche: largest per-installment amount first (interest rates are not
      tracked, so the installment size stands in for cost)
    """
    if DebtStrategy(strategy) == DebtStrategy.SNOWBALL:
        return sorted(debts, key=lambda d: d.remaining_amount)
    return sorted(debts, key=lambda d: d.installment_amount, reverse=True)


def build_debt_plan(debts: Iterable[DebtSnapshot], strategy: DebtStrategy, available_debt_fund: Decimal) -> DebtPlan:
    """Project payoff of all open debts using the current debt fund as the monthly budget"""
    open_debts = [d for d in debts if not d.is_paid_off]
    total_remaining = sum((d.remaining_amount for d in open_debts), ZERO)
    monthly_minimum = to_money(sum((d.installment_amount for d in open_debts), ZERO))

    estimated_months = math.ceil(total_remaining / available_debt_fund) if available_debt_fund > 0 else 0

    return DebtPlan(
        strategy=DebtStrategy(strategy),
        total_remaining=to_money(total_remaining),
        monthly_minimum=monthly_minimum,
        estimated_months=estimated_months,
        extra_payment=to_money(max(ZERO, available_debt_fund - monthly_minimum)),
        ordered_debts=order_debts(open_debts, strategy),
    )


def build_monthly_report(
    month: str,
    incomes: Iterable[Tuple[date, Decimal, str]],
    payments: Iterable[Tuple[date, Decimal]],
    contributions: Iterable[Tuple[date, Decimal]],
) -> MonthlyReport:
    """
    Aggregate one calendar month (YYYY-MM).

    Inputs are (date, amount[, category]) tuples; entries outside the month
    are ignored so callers can pass wider ranges.
    """
    start, end = month_bounds(month)

    def in_month(d: date) -> bool:
        return start <= d <= end

    month_incomes = [(d, a, c) for d, a, c in incomes if in_month(d)]
    total_income = sum((a for _, a, _ in month_incomes), ZERO)
    debt_payments = sum((a for d, a in payments if in_month(d)), ZERO)
    savings = sum((a for d, a in contributions if in_month(d)), ZERO)

    by_category = {}
    for _, amount, category in month_incomes:
        by_category[category] = by_category.get(category, ZERO) + amount
    top_category = max(by_category, key=by_category.get) if by_category else None

    return MonthlyReport(
        month=month,
        start=start,
        end=end,
        total_income=to_money(total_income),
        debt_payments=to_money(debt_payments),
        savings_contributions=to_money(savings),
        net_amount=to_money(total_income - debt_payments),
        income_count=len(month_incomes),
        top_income_category=top_category,
    )
