"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from fundflow.infrastructure.clients.push import PushClient
from fundflow.infrastructure.database.session import get_db
from fundflow.services.debts import DebtService
from fundflow.services.funds import FundService
from fundflow.services.reports import ReportService
from fundflow.services.savings import SavingsService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_user_id(x_user_id: str = Header(..., min_length=1, description="Authenticated user identifier")) -> str:
    """Caller identity, set by the authenticating proxy in front of the service"""
    return x_user_id


def get_push_client() -> PushClient:
    """Provide push notification client instance"""
    return PushClient()


def get_fund_service(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)) -> FundService:
    return FundService(db, user_id)


def get_debt_service(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)) -> DebtService:
    return DebtService(db, user_id)


def get_savings_service(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)) -> SavingsService:
    return SavingsService(db, user_id)


def get_report_service(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)) -> ReportService:
    return ReportService(db, user_id)
