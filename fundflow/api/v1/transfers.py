"""/v1/transfers - manual fund transfers and the transfer journal"""

from typing import List

from fastapi import APIRouter, Depends, Query, Response

from fundflow.api.dependencies import get_fund_service
from fundflow.api.v1.schemas import ERROR_RESPONSES, TransferCreate, TransferResponse
from fundflow.services.funds import FundService

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("/transfers", response_model=List[TransferResponse])
def list_transfers(
    limit: int = Query(50, ge=1, le=500, description="Maximum number of entries"),
    service: FundService = Depends(get_fund_service),
):
    """Journal entries, most recent first"""
    return service.list_transfers(limit=limit)


@router.post("/transfers", response_model=TransferResponse, status_code=201)
def create_transfer(body: TransferCreate, service: FundService = Depends(get_fund_service)):
    return service.request_transfer(body.from_fund, body.to_fund, body.amount, body.description)


@router.delete("/transfers/{transfer_id}", status_code=204)
def delete_transfer(transfer_id: str, service: FundService = Depends(get_fund_service)):
    """
    Reverse a transfer and remove it from the journal.

    Returns 409 when the destination fund no longer holds the amount.
    """
    service.delete_transfer(transfer_id)
    return Response(status_code=204)
