"""Pydantic models for grass species reference data."""

from typing import Optional

from .base import CamelModel
from .plan import PlanType


class GrassSpeciesRead(CamelModel):
    grass_species_id: int
    name: str


class PlanTypeOption(CamelModel):
    """A plan type a species supports.

    ``establishment_type`` is only set for ``new_lawn`` options (for
    example ``seed`` or ``sod_plugs``).
    """

    plan_type: PlanType
    establishment_type: Optional[str] = None
