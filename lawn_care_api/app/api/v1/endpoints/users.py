"""
User-scoped plan endpoints for API v1.

The ``user_id`` in the path must be the authenticated user; asking for
someone else's plans is answered with 403.
"""

from typing import List

from fastapi import APIRouter, Depends, Path

from lawn_care_api.app.core.security import get_current_user
from lawn_care_api.app.schemas.base import MAX_ROW_ID, MessageResponse
from lawn_care_api.app.schemas.plan import PlanRead, SavePlanRequest
from lawn_care_api.app.services.plan_service import PlanService


router = APIRouter()


@router.get("/{user_id}/plans", response_model=List[PlanRead])
async def list_user_plans(
    user_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    current_user: dict = Depends(get_current_user),
) -> List[PlanRead]:
    """List a user's plans, newest first, with their steps."""
    return await PlanService.list_plans(user_id, current_user["user_id"])


@router.post("/{user_id}/plans", response_model=MessageResponse)
async def save_plan_to_profile(
    body: SavePlanRequest,
    user_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    current_user: dict = Depends(get_current_user),
) -> MessageResponse:
    """Confirm that a plan is saved to the user's profile.

    Plans belong to their creator already, so this only verifies
    ownership and writes nothing.
    """
    await PlanService.save_to_profile(user_id, body.plan_id, current_user["user_id"])
    return MessageResponse(message="Plan saved to profile successfully")
