"""
Read-only access to grass species reference data.

Species and the plan types they support are seeded by the database
migrations; nothing in the API writes to these tables.
"""

from typing import List

from lawn_care_api.app.core.db import get_connection
from lawn_care_api.app.core.exceptions import NotFoundError
from lawn_care_api.app.schemas.grass_species import GrassSpeciesRead, PlanTypeOption


class GrassSpeciesService:

    @classmethod
    async def list_species(cls) -> List[GrassSpeciesRead]:
        conn = get_connection()
        try:
            rows = conn.execute(
                "SELECT grass_species_id, name FROM GrassSpecies ORDER BY grass_species_id"
            ).fetchall()
            return [GrassSpeciesRead.model_validate(dict(row)) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def list_plan_types(cls, grass_species_id: int) -> List[PlanTypeOption]:
        """Plan type options for a species.

        Raises ``NotFoundError`` if the species does not exist.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            exists = cursor.execute(
                "SELECT 1 FROM GrassSpecies WHERE grass_species_id = ?",
                (grass_species_id,),
            ).fetchone()
            if not exists:
                raise NotFoundError("Grass species not found")
            rows = cursor.execute(
                """
                SELECT plan_type, establishment_type
                FROM GrassSpeciesPlanTypes
                WHERE grass_species_id = ?
                ORDER BY plan_type DESC, establishment_type
                """,
                (grass_species_id,),
            ).fetchall()
            return [PlanTypeOption.model_validate(dict(row)) for row in rows]
        finally:
            conn.close()
