"""/v1/incomes - record income and distribute it across the funds"""

from typing import List

from fastapi import APIRouter, Depends, Response

from fundflow.api.dependencies import get_fund_service
from fundflow.api.v1.schemas import ERROR_RESPONSES, IncomeCreate, IncomeResponse
from fundflow.services.funds import FundService

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("/incomes", response_model=List[IncomeResponse])
def list_incomes(service: FundService = Depends(get_fund_service)):
    return service.list_incomes()


@router.post("/incomes", response_model=IncomeResponse, status_code=201)
def add_income(body: IncomeCreate, service: FundService = Depends(get_fund_service)):
    """
    Record income.

    The amount is split by the user's current percentages: the debt and
    savings shares go to their funds, the rest to balance. One automatic
    transfer is journaled per credited fund.
    """
    return service.add_income(
        description=body.description,
        amount=body.amount,
        income_date=body.date,
        category=body.category,
        monthly_repeat=body.monthly_repeat,
        next_income_date=body.next_income_date,
    )


@router.delete("/incomes/{income_id}", status_code=204)
def delete_income(income_id: str, service: FundService = Depends(get_fund_service)):
    """Delete income and take its distribution back out of the funds"""
    service.delete_income(income_id)
    return Response(status_code=204)
