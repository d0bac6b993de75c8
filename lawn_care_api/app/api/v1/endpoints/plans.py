"""
Plan endpoints for API v1.

All routes require a bearer token.  Plans are only visible to their
owner; for anyone else they answer 404 exactly as for a plan that does
not exist.
"""

from fastapi import APIRouter, Depends, Path, status

from lawn_care_api.app.core.security import get_current_user
from lawn_care_api.app.schemas.base import MAX_ROW_ID, MessageResponse
from lawn_care_api.app.schemas.plan import (
    PlanCreate,
    PlanRead,
    PlanStepCreate,
    PlanStepRead,
    PlanUpdate,
    StepCompletion,
)
from lawn_care_api.app.services.plan_service import PlanService


router = APIRouter()


@router.post("/new", response_model=PlanRead, status_code=status.HTTP_201_CREATED)
async def create_plan(
    plan: PlanCreate,
    current_user: dict = Depends(get_current_user),
) -> PlanRead:
    """Create a new, empty plan for the current user."""
    return await PlanService.create_plan(current_user["user_id"], plan)


@router.get("/{plan_id}", response_model=PlanRead)
async def get_plan(
    plan_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    current_user: dict = Depends(get_current_user),
) -> PlanRead:
    """Fetch a plan with its steps ordered by due date."""
    return await PlanService.get_plan(plan_id, current_user["user_id"])


@router.put("/{plan_id}", response_model=PlanRead)
async def update_plan(
    updates: PlanUpdate,
    plan_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    current_user: dict = Depends(get_current_user),
) -> PlanRead:
    """Update a plan and upsert its steps in one transaction.

    Steps carrying ``planStepId`` are updated, all others are added.
    Returns the plan as stored after the update.
    """
    return await PlanService.update_plan(plan_id, current_user["user_id"], updates)


@router.put("/{plan_id}/complete", response_model=PlanRead)
async def complete_plan(
    plan_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    current_user: dict = Depends(get_current_user),
) -> PlanRead:
    """Complete a plan together with all of its open steps."""
    return await PlanService.complete_plan(plan_id, current_user["user_id"])


@router.delete("/{plan_id}", response_model=MessageResponse)
async def delete_plan(
    plan_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    current_user: dict = Depends(get_current_user),
) -> MessageResponse:
    await PlanService.delete_plan(plan_id, current_user["user_id"])
    return MessageResponse(message="Plan deleted successfully")


@router.post("/{plan_id}/steps", response_model=PlanStepRead, status_code=status.HTTP_201_CREATED)
async def add_step(
    step: PlanStepCreate,
    plan_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    current_user: dict = Depends(get_current_user),
) -> PlanStepRead:
    """Append a custom step to a plan."""
    return await PlanService.add_step(plan_id, current_user["user_id"], step)


@router.put("/{plan_id}/steps/{step_id}", response_model=PlanStepRead)
async def set_step_completion(
    completion: StepCompletion,
    plan_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    step_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    current_user: dict = Depends(get_current_user),
) -> PlanStepRead:
    """Mark a step as completed (or open again)."""
    return await PlanService.set_step_completion(plan_id, step_id, current_user["user_id"], completion)


@router.delete("/{plan_id}/steps/{step_id}", response_model=MessageResponse)
async def delete_step(
    plan_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    step_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    current_user: dict = Depends(get_current_user),
) -> MessageResponse:
    await PlanService.delete_step(plan_id, step_id, current_user["user_id"])
    return MessageResponse(message="Step deleted successfully")
