"""
Top‑level router for version 1 of the API.

This router aggregates domain‑specific routers (accounts, grass
species, plans) under a unified prefix.  When new endpoints are added,
update this file to include their routers.
"""

from fastapi import APIRouter

from .endpoints import auth, grass_species, plans, users

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(grass_species.router, prefix="/grass-species", tags=["grass-species"])
router.include_router(plans.router, prefix="/plans", tags=["plans"])
# Only the ``/users/{user_id}/plans`` routes live here; accounts are under ``/auth``.
router.include_router(users.router, prefix="/users", tags=["plans"])
