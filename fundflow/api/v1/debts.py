"""/v1/debts and /v1/payments - debts and installment payments"""

from typing import List

from fastapi import APIRouter, Depends, Response

from fundflow.api.dependencies import get_debt_service
from fundflow.api.v1.schemas import (
    ERROR_RESPONSES,
    DebtCreate,
    DebtResponse,
    DebtUpdate,
    PaymentCreate,
    PaymentResponse,
)
from fundflow.services.debts import DebtService

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("/debts", response_model=List[DebtResponse])
def list_debts(service: DebtService = Depends(get_debt_service)):
    return service.list_debts()


@router.post("/debts", response_model=DebtResponse, status_code=201)
def create_debt(body: DebtCreate, service: DebtService = Depends(get_debt_service)):
    return service.create_debt(**body.model_dump())


@router.patch("/debts/{debt_id}", response_model=DebtResponse)
def update_debt(debt_id: str, body: DebtUpdate, service: DebtService = Depends(get_debt_service)):
    return service.update_debt(debt_id, **body.model_dump(exclude_unset=True))


@router.delete("/debts/{debt_id}", status_code=204)
def delete_debt(debt_id: str, service: DebtService = Depends(get_debt_service)):
    service.delete_debt(debt_id)
    return Response(status_code=204)


@router.post("/debts/{debt_id}/payments", response_model=PaymentResponse, status_code=201)
def add_payment(debt_id: str, body: PaymentCreate, service: DebtService = Depends(get_debt_service)):
    """Record a payment; with from_debt_fund the amount is taken from the debt fund"""
    return service.add_payment(debt_id, body.amount, body.date, from_debt_fund=body.from_debt_fund)


@router.delete("/payments/{payment_id}", response_model=DebtResponse)
def delete_payment(payment_id: str, service: DebtService = Depends(get_debt_service)):
    return service.delete_payment(payment_id)
