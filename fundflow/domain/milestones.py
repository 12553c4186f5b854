"""Milestone detection rules and notification content"""

from decimal import Decimal
from typing import Iterable, List, Set

from fundflow.domain.models import (
    DebtSnapshot,
    EntityType,
    GoalSnapshot,
    Milestone,
    MilestoneCandidate,
    Notification,
)

HALFWAY_RATIO = Decimal("0.5")


def is_debt_paid_off(debt: DebtSnapshot) -> bool:
    """A debt is paid off once its payments cover the total amount"""
    return debt.paid_amount >= debt.total_amount


def is_goal_halfway(goal: GoalSnapshot) -> bool:
    """A goal is half-way once current/target reaches 0.5 (target must be positive)"""
    return goal.target_amount > 0 and goal.current_amount / goal.target_amount >= HALFWAY_RATIO


def paid_off_candidates(debts: Iterable[DebtSnapshot]) -> List[MilestoneCandidate]:
    return [
        MilestoneCandidate(
            user_id=d.user_id,
            entity_type=EntityType.DEBT,
            entity_id=d.debt_id,
            milestone=Milestone.PAID_OFF,
            name=d.description,
        )
        for d in debts
        if is_debt_paid_off(d)
    ]


def halfway_candidates(goals: Iterable[GoalSnapshot]) -> List[MilestoneCandidate]:
    return [
        MilestoneCandidate(
            user_id=g.user_id,
            entity_type=EntityType.SAVING_GOAL,
            entity_id=g.goal_id,
            milestone=Milestone.HALFWAY,
            name=g.title,
        )
        for g in goals
        if is_goal_halfway(g)
    ]


def newly_met(candidates: List[MilestoneCandidate], already_logged: Set[str]) -> List[MilestoneCandidate]:
    """Candidates whose (entity, milestone) pair has no log entry yet"""
    return [c for c in candidates if c.entity_id not in already_logged]


def build_notification(candidate: MilestoneCandidate) -> Notification:
    """Localized (en/tr) push content for a newly met milestone"""
    if candidate.milestone == Milestone.PAID_OFF:
        name_en = candidate.name or "Debt"
        name_tr = candidate.name or "Borç"
        return Notification(
            title={"en": "Congratulations!", "tr": "Tebrikler!"},
            body={
                "en": f"You have fully paid off {name_en}! 🥳",
                "tr": f"{name_tr} borcunu tamamen kapattın! 🥳",
            },
            data={"entity_type": EntityType.DEBT.value, "milestone": Milestone.PAID_OFF.value, "debt_id": candidate.entity_id},
        )

    name_en = candidate.name or "Goal"
    name_tr = candidate.name or "Hedef"
    return Notification(
        title={"en": "Great progress!", "tr": "Harika ilerleme!"},
        body={
            "en": f"You are half-way to your {name_en} goal! 🚀",
            "tr": f"{name_tr} hedefine giden yolda %50'yi tamamladın! 🚀",
        },
        data={"entity_type": EntityType.SAVING_GOAL.value, "milestone": Milestone.HALFWAY.value, "goal_id": candidate.entity_id},
    )
