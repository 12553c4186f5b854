"""Milestone detector - batch job that notifies each financial milestone at most once"""

import logging
import time
from typing import Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from fundflow.domain.exceptions import NotificationDeliveryError
from fundflow.domain.milestones import build_notification, halfway_candidates, newly_met, paid_off_candidates
from fundflow.domain.models import EntityType, Milestone, MilestoneCandidate
from fundflow.infrastructure.clients.push import PushClient
from fundflow.infrastructure.database.models import Profile
from fundflow.infrastructure.database.repositories import (
    DebtRepository,
    MilestoneLogRepository,
    ProfileRepository,
    SavingGoalRepository,
)
from fundflow.infrastructure.observability.logging import log_milestone_run
from fundflow.infrastructure.observability.metrics import milestone_counter, record_notification

logger = logging.getLogger(__name__)


class MilestoneDetector:
    """
    Detect paid-off debts and half-way savings goals across all users.

    Each newly met (entity, milestone) pair is first claimed by inserting
    its log row and committing, then notified. The claim is what makes the
    notification at-most-once: a failed delivery is never retried, and an
    interrupted run leaves every entity processed so far logged.
    """

    def __init__(self, db: Session, push_client: PushClient):
        self.db = db
        self.push_client = push_client
        self.debt_repo = DebtRepository(db)
        self.goal_repo = SavingGoalRepository(db)
        self.log_repo = MilestoneLogRepository(db)
        self.profile_repo = ProfileRepository(db)

    async def run(self) -> Dict[str, int]:
        start_time = time.time()

        debts = self.debt_repo.snapshots()
        newly_paid_off, debt_sent = await self._process(
            paid_off_candidates(debts), EntityType.DEBT, Milestone.PAID_OFF
        )

        goals = self.goal_repo.snapshots()
        newly_halfway, savings_sent = await self._process(
            halfway_candidates(goals), EntityType.SAVING_GOAL, Milestone.HALFWAY
        )

        summary = {
            "checkedDebts": len(debts),
            "newlyPaidOff": newly_paid_off,
            "debtNotificationsSent": debt_sent,
            "checkedSavingGoals": len(goals),
            "newlyHalfway": newly_halfway,
            "savingsNotificationsSent": savings_sent,
        }
        log_milestone_run(summary, (time.time() - start_time) * 1000)
        return summary

    async def _process(
        self,
        candidates: List[MilestoneCandidate],
        entity_type: EntityType,
        milestone: Milestone,
    ) -> Tuple[int, int]:
        """Returns (newly claimed, notifications sent)"""
        if not candidates:
            return 0, 0

        already_logged = self.log_repo.logged_entity_ids(entity_type, milestone, [c.entity_id for c in candidates])
        fresh = newly_met(candidates, already_logged)
        if not fresh:
            return 0, 0

        profiles = self.profile_repo.get_by_user_ids(c.user_id for c in fresh)

        claimed = 0
        sent = 0
        for candidate in fresh:
            if not self._claim(candidate):
                continue
            claimed += 1
            milestone_counter.labels(entity_type=entity_type.value, milestone=milestone.value).inc()
            if await self._notify(candidate, profiles.get(candidate.user_id)):
                sent += 1
        return claimed, sent

    def _claim(self, candidate: MilestoneCandidate) -> bool:
        try:
            self.log_repo.create_log(candidate)
            self.db.commit()
            return True
        except IntegrityError:
            self.db.rollback()
            logger.info(
                "Milestone already claimed by another run",
                extra={"entity_id": candidate.entity_id, "milestone": candidate.milestone.value},
            )
            return False
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                f"Failed to insert milestone log: {e}",
                extra={"entity_id": candidate.entity_id, "milestone": candidate.milestone.value},
            )
            return False

    async def _notify(self, candidate: MilestoneCandidate, profile: Optional[Profile]) -> bool:
        entity_type = candidate.entity_type.value
        push_token = profile.push_token if profile is not None else None
        if not push_token:
            record_notification(entity_type, "no_target")
            logger.info(
                "No push token for user, skipping notification",
                extra={"user_id": candidate.user_id, "entity_id": candidate.entity_id},
            )
            return False

        notification = build_notification(candidate)
        try:
            await self.push_client.send(push_token, notification.title, notification.body, notification.data)
        except NotificationDeliveryError as e:
            record_notification(entity_type, "failed")
            logger.error(
                f"Failed to send milestone notification: {e}",
                extra={"user_id": candidate.user_id, "entity_id": candidate.entity_id},
            )
            return False

        record_notification(entity_type, "sent")
        return True
