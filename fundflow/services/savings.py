"""Savings service - goals and contributions"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from fundflow.domain.exceptions import InvalidAmountError, NotFoundError, ValidationError
from fundflow.domain.ledger import FundAdjustment
from fundflow.domain.models import Fund, GoalCategory, ZERO, to_amount, to_money
from fundflow.infrastructure.database.models import SavingContribution, SavingGoal
from fundflow.infrastructure.database.repositories import SavingGoalRepository
from fundflow.services.unit_of_work import ledger_transaction, write_transaction

logger = logging.getLogger(__name__)

OPENING_CONTRIBUTION = "Opening balance"


class SavingsService:
    """
    Savings goals for one user.

    A goal's current amount is always the sum of its contributions: it is
    only changed by adding or deleting a contribution, never set directly.
    """

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id
        self.goal_repo = SavingGoalRepository(db)

    def list_goals(self) -> List[SavingGoal]:
        return self.goal_repo.list_by_user(self.user_id)

    def get_goal(self, goal_id) -> SavingGoal:
        goal = self.goal_repo.get_for_user(goal_id, self.user_id)
        if goal is None:
            raise NotFoundError(f"Saving goal {goal_id} not found", entity="saving_goal")
        return goal

    def create_goal(
        self,
        title: str,
        target_amount,
        category: str = "other",
        deadline: Optional[date] = None,
        initial_amount=ZERO,
    ) -> SavingGoal:
        """Create a goal; a starting amount is recorded as an opening contribution"""
        target_amount = to_amount(target_amount, "target_amount")
        initial_amount = to_money(initial_amount or 0)
        if initial_amount < 0:
            raise InvalidAmountError("Initial amount cannot be negative", field="initial_amount")
        if initial_amount > 0:
            initial_amount = to_amount(initial_amount, "initial_amount")

        with write_transaction(self.db, self.user_id, "create_goal"):
            goal = self.goal_repo.create_goal(
                self.user_id,
                title=title,
                target_amount=target_amount,
                category=_category(category),
                deadline=deadline,
            )
            if initial_amount > 0:
                self.goal_repo.add_contribution(goal, initial_amount, date.today(), OPENING_CONTRIBUTION, False)
        return goal

    def update_goal(
        self,
        goal_id,
        title: Optional[str] = None,
        target_amount=None,
        category: Optional[str] = None,
        deadline: Optional[date] = None,
    ) -> SavingGoal:
        with write_transaction(self.db, self.user_id, "update_goal"):
            goal = self.get_goal(goal_id)
            if title is not None:
                goal.title = title
            if target_amount is not None:
                goal.target_amount = to_amount(target_amount, "target_amount")
            if category is not None:
                goal.category = _category(category)
            if deadline is not None:
                goal.deadline = deadline
        return goal

    def delete_goal(self, goal_id) -> None:
        """Delete a goal; contributions drawn from the savings fund go back to it"""
        with ledger_transaction(self.db, self.user_id, "delete_goal") as (_, ledger):
            goal = self.get_goal(goal_id)
            drawn = sum((to_money(c.amount) for c in goal.contributions if c.from_savings_fund), ZERO)
            ledger.apply(FundAdjustment.draw(Fund.SAVINGS_FUND, drawn).inverse())
            self.goal_repo.delete(goal)

    def add_contribution(
        self,
        goal_id,
        amount,
        contribution_date: Optional[date] = None,
        description: Optional[str] = None,
        from_savings_fund: bool = False,
    ) -> SavingContribution:
        """Add money to a goal, optionally debiting the savings fund in the same transaction"""
        amount = to_amount(amount)
        with ledger_transaction(self.db, self.user_id, "add_contribution") as (_, ledger):
            goal = self.get_goal(goal_id)
            if from_savings_fund:
                ledger.debit(Fund.SAVINGS_FUND, amount)
            contribution = self.goal_repo.add_contribution(
                goal, amount, contribution_date or date.today(), description, from_savings_fund
            )

        logger.info(
            "Contribution recorded",
            extra={"user_id": self.user_id, "goal_id": str(goal_id), "step": "contribution_added", "amount": str(amount)},
        )
        return contribution

    def delete_contribution(self, contribution_id) -> SavingGoal:
        """Remove a contribution: the goal drops by the same amount and a fund draw is refunded"""
        with ledger_transaction(self.db, self.user_id, "delete_contribution") as (_, ledger):
            contribution = self.goal_repo.get_contribution_for_user(contribution_id, self.user_id)
            if contribution is None:
                raise NotFoundError(f"Contribution {contribution_id} not found", entity="contribution")
            if contribution.from_savings_fund:
                ledger.apply(FundAdjustment.draw(Fund.SAVINGS_FUND, contribution.amount).inverse())
            goal = self.goal_repo.delete_contribution(contribution)
        return goal


def _category(value: str) -> str:
    try:
        return GoalCategory(value).value
    except ValueError as e:
        raise ValidationError(str(e), field="category") from e
