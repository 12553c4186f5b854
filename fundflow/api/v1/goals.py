"""/v1/goals and /v1/contributions - savings goals"""

from typing import List

from fastapi import APIRouter, Depends, Response

from fundflow.api.dependencies import get_savings_service
from fundflow.api.v1.schemas import (
    ERROR_RESPONSES,
    ContributionCreate,
    ContributionResponse,
    GoalCreate,
    GoalResponse,
    GoalUpdate,
)
from fundflow.services.savings import SavingsService

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("/goals", response_model=List[GoalResponse])
def list_goals(service: SavingsService = Depends(get_savings_service)):
    return service.list_goals()


@router.post("/goals", response_model=GoalResponse, status_code=201)
def create_goal(body: GoalCreate, service: SavingsService = Depends(get_savings_service)):
    return service.create_goal(
        title=body.title,
        target_amount=body.target_amount,
        category=body.category.value,
        deadline=body.deadline,
        initial_amount=body.initial_amount,
    )


@router.patch("/goals/{goal_id}", response_model=GoalResponse)
def update_goal(goal_id: str, body: GoalUpdate, service: SavingsService = Depends(get_savings_service)):
    return service.update_goal(
        goal_id,
        title=body.title,
        target_amount=body.target_amount,
        category=body.category.value if body.category else None,
        deadline=body.deadline,
    )


@router.delete("/goals/{goal_id}", status_code=204)
def delete_goal(goal_id: str, service: SavingsService = Depends(get_savings_service)):
    """Delete a goal; contributions drawn from the savings fund are refunded"""
    service.delete_goal(goal_id)
    return Response(status_code=204)


@router.post("/goals/{goal_id}/contributions", response_model=ContributionResponse, status_code=201)
def add_contribution(goal_id: str, body: ContributionCreate, service: SavingsService = Depends(get_savings_service)):
    return service.add_contribution(
        goal_id,
        body.amount,
        contribution_date=body.date,
        description=body.description,
        from_savings_fund=body.from_savings_fund,
    )


@router.delete("/contributions/{contribution_id}", response_model=GoalResponse)
def delete_contribution(contribution_id: str, service: SavingsService = Depends(get_savings_service)):
    """Remove a contribution and return the updated goal"""
    return service.delete_contribution(contribution_id)
