"""Grass species reference endpoints for API v1."""

from typing import List

from fastapi import APIRouter, Depends, Path

from lawn_care_api.app.core.security import get_current_user
from lawn_care_api.app.schemas.base import MAX_ROW_ID
from lawn_care_api.app.schemas.grass_species import GrassSpeciesRead, PlanTypeOption
from lawn_care_api.app.services.grass_species_service import GrassSpeciesService


router = APIRouter()


@router.get("/", response_model=List[GrassSpeciesRead])
async def list_species() -> List[GrassSpeciesRead]:
    return await GrassSpeciesService.list_species()


@router.get("/{grass_species_id}/plan-types", response_model=List[PlanTypeOption])
async def list_plan_types(
    grass_species_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    current_user: dict = Depends(get_current_user),
) -> List[PlanTypeOption]:
    """Plan types (and establishment types for new lawns) offered for a species."""
    return await GrassSpeciesService.list_plan_types(grass_species_id)
