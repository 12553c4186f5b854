"""Transaction scope shared by every mutating service operation"""

import logging
from contextlib import contextmanager
from typing import Iterator, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fundflow.domain.exceptions import PersistenceError
from fundflow.domain.ledger import FundLedger
from fundflow.infrastructure.database.models import UserSettings
from fundflow.infrastructure.database.repositories import SettingsRepository

logger = logging.getLogger(__name__)


@contextmanager
def write_transaction(db: Session, user_id: str, operation: str) -> Iterator[None]:
    """
    Commit-or-rollback scope.

    The session is committed only when the block finishes cleanly. Any
    exception rolls back everything done inside the block; store errors
    surface as PersistenceError with the detail kept in the server log.
    """
    try:
        yield
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            f"Store failure during {operation}: {e}",
            extra={"user_id": user_id, "step": operation},
        )
        raise PersistenceError(f"Could not complete {operation}") from e
    except Exception:
        db.rollback()
        raise


@contextmanager
def ledger_transaction(db: Session, user_id: str, operation: str) -> Iterator[Tuple[UserSettings, FundLedger]]:
    """Lock the user's settings row and expose its ledger inside one write_transaction"""
    settings_repo = SettingsRepository(db)
    with write_transaction(db, user_id, operation):
        row = settings_repo.get_or_create(user_id, for_update=True)
        ledger = settings_repo.load_ledger(row)
        yield row, ledger
        settings_repo.store_ledger(row, ledger)
