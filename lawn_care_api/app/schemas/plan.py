"""
Pydantic models for user plans and their steps.

A plan belongs to one user and one grass species.  ``PlanRead``
embeds the plan's steps, ordered by due date.  Steps created by the
user carry no ``template_id``.
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from .base import MAX_ROW_ID, CamelModel


class PlanType(str, Enum):
    NEW_LAWN = "new_lawn"
    LAWN_IMPROVEMENT = "lawn_improvement"


class PlanStepRead(CamelModel):
    """Schema for reading a plan step."""

    plan_step_id: int
    user_plan_id: int
    template_id: Optional[int] = None
    step_description: str
    due_date: date
    completed: bool = False
    completed_at: Optional[datetime] = None
    step_order: int
    created_at: Optional[datetime] = None


class PlanStepCreate(CamelModel):
    """Schema for appending a step to a plan."""

    step_description: str = Field(..., min_length=1, examples=["Mow"])
    due_date: date = Field(..., examples=["2024-05-01"])
    completed: bool = False


class PlanStepUpdate(CamelModel):
    """A step inside a plan update.

    Steps carrying ``plan_step_id`` are updated in place; steps without
    one are inserted as new user-authored steps.
    """

    plan_step_id: Optional[int] = Field(None, ge=1, le=MAX_ROW_ID)
    step_description: str = Field(..., min_length=1)
    due_date: date
    completed: bool = False
    completed_at: Optional[datetime] = None


class StepCompletion(CamelModel):
    """Body of the step completion endpoint.

    When ``completed`` is true and no ``completed_at`` is sent, the
    server stamps the current time.
    """

    completed: bool
    completed_at: Optional[datetime] = None


class PlanCreate(CamelModel):
    """Schema for creating a plan."""

    grass_species_id: int = Field(..., ge=1, le=MAX_ROW_ID, examples=[1])
    plan_type: PlanType = Field(..., examples=["new_lawn"])
    establishment_type: Optional[str] = Field(None, examples=["sod_plugs"])


class PlanUpdate(CamelModel):
    """Full replacement of a plan's scalar fields plus step upserts.

    Steps missing from ``steps`` are left untouched.
    """

    grass_species_id: int = Field(..., ge=1, le=MAX_ROW_ID)
    plan_type: PlanType
    establishment_type: Optional[str] = None
    is_completed: bool = False
    is_archived: bool = False
    steps: List[PlanStepUpdate] = Field(default_factory=list)


class PlanRead(CamelModel):
    """Schema for reading a plan with its steps."""

    user_plan_id: int
    user_id: int
    grass_species_id: int
    grass_species_name: Optional[str] = None
    plan_type: PlanType
    establishment_type: Optional[str] = None
    is_completed: bool = False
    is_archived: bool = False
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    steps: List[PlanStepRead] = Field(default_factory=list)


class SavePlanRequest(CamelModel):
    """Body of the save-to-profile endpoint."""

    plan_id: int = Field(..., ge=1, le=MAX_ROW_ID)
