"""GET/PUT /v1/settings and GET /v1/funds - allocation settings and fund balances"""

from fastapi import APIRouter, Depends

from fundflow.api.dependencies import get_fund_service
from fundflow.api.v1.schemas import ERROR_RESPONSES, FundsResponse, SettingsResponse, SettingsUpdate
from fundflow.infrastructure.database.models import UserSettings
from fundflow.services.funds import FundService

router = APIRouter(responses=ERROR_RESPONSES)


def _settings_response(row: UserSettings) -> SettingsResponse:
    response = SettingsResponse.model_validate(row)
    # Allowed, but every income then draws the excess out of balance
    response.allocation_exceeds_income = row.debt_percentage + row.savings_percentage > 100
    return response


@router.get("/settings", response_model=SettingsResponse)
def get_settings(service: FundService = Depends(get_fund_service)):
    return _settings_response(service.get_settings())


@router.put("/settings", response_model=SettingsResponse)
def update_settings(body: SettingsUpdate, service: FundService = Depends(get_fund_service)):
    """Change allocation percentages and/or repayment strategy"""
    row = service.update_settings(
        debt_percentage=body.debt_percentage,
        savings_percentage=body.savings_percentage,
        debt_strategy=body.debt_strategy,
    )
    return _settings_response(row)


@router.get("/funds", response_model=FundsResponse)
def get_funds(service: FundService = Depends(get_fund_service)):
    ledger = service.get_ledger()
    return FundsResponse(
        balance=ledger.balance,
        debt_fund=ledger.debt_fund,
        savings_fund=ledger.savings_fund,
        total=ledger.total,
    )
