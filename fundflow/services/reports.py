"""Report service - financial summary and monthly totals for one user"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from fundflow.domain.analysis import (
    build_debt_plan,
    build_monthly_report,
    calculate_health_score,
    debt_to_income_ratio,
    savings_rate,
)
from fundflow.domain.models import DebtPlan, DebtStrategy, HealthScore, MonthlyReport, ZERO, to_money
from fundflow.domain.exceptions import ValidationError
from fundflow.infrastructure.database.repositories import (
    DebtRepository,
    IncomeRepository,
    SavingGoalRepository,
    SettingsRepository,
)
from fundflow.services.unit_of_work import write_transaction
from fundflow.utils.date_utils import month_bounds


@dataclass
class FinancialSummary:
    total_income: Decimal
    total_debt_remaining: Decimal
    total_savings: Decimal
    debt_to_income_ratio: float
    savings_rate: float
    health: HealthScore
    debt_plan: DebtPlan


class ReportService:
    """Read-only aggregation over a user's incomes, debts, goals and funds"""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    def summary(self) -> FinancialSummary:
        """
        Ratios, health score and payoff plan.

        - total savings = savings fund + amounts already put into goals
        - monthly expenses = minimum monthly debt installments
        - emergency fund = savings fund
        """
        settings_repo = SettingsRepository(self.db)
        with write_transaction(self.db, self.user_id, "load_settings"):
            row = settings_repo.get_or_create(self.user_id)
        ledger = settings_repo.load_ledger(row)

        incomes = IncomeRepository(self.db).list_by_user(self.user_id)
        debts = DebtRepository(self.db).snapshots(self.user_id)
        goals = SavingGoalRepository(self.db).list_by_user(self.user_id)

        total_income = to_money(sum((i.amount for i in incomes), ZERO))
        total_goal_savings = to_money(sum((g.current_amount for g in goals), ZERO))
        total_savings = ledger.savings_fund + total_goal_savings

        plan = build_debt_plan(debts, DebtStrategy(row.debt_strategy), ledger.debt_fund)
        health = calculate_health_score(
            total_income=total_income,
            total_debt_remaining=plan.total_remaining,
            total_savings=total_savings,
            monthly_expenses=plan.monthly_minimum,
            emergency_fund=ledger.savings_fund,
        )

        return FinancialSummary(
            total_income=total_income,
            total_debt_remaining=plan.total_remaining,
            total_savings=total_savings,
            debt_to_income_ratio=round(debt_to_income_ratio(plan.total_remaining, total_income), 1),
            savings_rate=round(savings_rate(total_savings, total_income), 1),
            health=health,
            debt_plan=plan,
        )

    def monthly(self, month: str) -> MonthlyReport:
        try:
            month_bounds(month)
        except ValueError as e:
            raise ValidationError("month must be YYYY-MM", field="month") from e

        incomes = IncomeRepository(self.db).list_by_user(self.user_id)
        debts = DebtRepository(self.db).list_by_user(self.user_id)
        goals = SavingGoalRepository(self.db).list_by_user(self.user_id)

        return build_monthly_report(
            month,
            incomes=[(i.date, to_money(i.amount), i.category) for i in incomes],
            payments=[(p.date, to_money(p.amount)) for d in debts for p in d.payments],
            contributions=[(c.date, to_money(c.amount)) for g in goals for c in g.contributions],
        )
