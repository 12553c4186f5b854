"""/jobs/check-financial-milestones - scheduled milestone detection"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from fundflow.api.dependencies import get_push_client, get_request_id
from fundflow.api.v1.schemas import MilestoneRunResponse
from fundflow.domain.exceptions import DomainException
from fundflow.infrastructure.clients.push import PushClient
from fundflow.infrastructure.database.session import get_db
from fundflow.services.milestones import MilestoneDetector

router = APIRouter()


@router.api_route("/check-financial-milestones", methods=["GET", "POST"], response_model=MilestoneRunResponse)
async def check_financial_milestones(
    request: Request,
    db: Session = Depends(get_db),
    push_client: PushClient = Depends(get_push_client),
):
    """
    Detect newly paid-off debts and half-way savings goals and notify owners.

    Safe to call repeatedly: each milestone is notified at most once. Called
    by a scheduler; preflight OPTIONS is answered by JobCORSMiddleware.

    Returns:
        Run counters, or 500 with {"error"} when the job cannot run
    """
    request_id = get_request_id(request)

    if not push_client.configured:
        logging.error("Push credentials are not configured", extra={"request_id": request_id})
        return JSONResponse(status_code=500, content={"error": "Push notification credentials are not configured"})

    try:
        summary = await MilestoneDetector(db, push_client).run()
    except DomainException as e:
        db.rollback()
        logging.error(f"Milestone check failed: {e}", extra={"request_id": request_id})
        return JSONResponse(status_code=500, content={"error": str(e)})
    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error in milestone check: {e}", extra={"request_id": request_id})
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    return MilestoneRunResponse(ok=True, **summary)
