"""
Business logic for user plans and plan steps.

Every operation is scoped to the requesting user.  A plan owned by
another user is reported exactly like a missing plan (``NotFoundError``)
so that plan ids of other users cannot be probed.  Operations that
write more than one row run inside a single ``unit_of_work`` and are
all-or-nothing.
"""

import logging
from datetime import datetime
from typing import List, Optional

from lawn_care_api.app.core.db import get_connection, unit_of_work, utc_now
from lawn_care_api.app.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from lawn_care_api.app.repositories.plan_repository import Ownership, PlanRepository, group_plan_rows
from lawn_care_api.app.schemas.plan import (
    PlanCreate,
    PlanRead,
    PlanStepCreate,
    PlanStepRead,
    PlanType,
    PlanUpdate,
    StepCompletion,
)

logger = logging.getLogger(__name__)

PLAN_NOT_FOUND = "Plan not found"
STEP_NOT_FOUND = "Step not found"


def _timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _completion_stamp(completed: bool, completed_at: Optional[datetime]) -> Optional[str]:
    """Timestamp to store for a step with the given completion state.

    A completed step always gets a timestamp (now, if none was sent);
    an open step never keeps one.
    """
    if not completed:
        return None
    return _timestamp(completed_at) or utc_now()


def _establishment_type(plan_type: PlanType, establishment_type: Optional[str]) -> Optional[str]:
    """Establishment type to store; only new lawns have one."""
    if plan_type is not PlanType.NEW_LAWN:
        return None
    return establishment_type or None


def _check_plan_type(
    repo: PlanRepository,
    grass_species_id: int,
    plan_type: PlanType,
    establishment_type: Optional[str],
) -> None:
    if not repo.species_exists(grass_species_id):
        raise BadRequestError("Unknown grass species")
    if not repo.plan_type_supported(grass_species_id, plan_type.value, establishment_type):
        raise BadRequestError("Plan type not offered for this grass species")


def _ensure_owned(repo: PlanRepository, plan_id: int, user_id: int) -> None:
    ownership = repo.check_ownership(plan_id, user_id)
    if ownership is Ownership.FORBIDDEN:
        logger.warning("User %s requested plan %s owned by another user", user_id, plan_id)
    if ownership is not Ownership.PRESENT:
        raise NotFoundError(PLAN_NOT_FOUND)


def _read_plan(repo: PlanRepository, plan_id: int, user_id: int) -> PlanRead:
    plan = repo.fetch_plan(plan_id, user_id)
    if plan is None:
        raise NotFoundError(PLAN_NOT_FOUND)
    plan["steps"] = repo.fetch_steps(plan_id)
    return PlanRead.model_validate(plan)


class PlanService:
    """Service for creating, reading and changing lawn care plans."""

    @classmethod
    async def create_plan(cls, user_id: int, data: PlanCreate) -> PlanRead:
        """Create an empty plan for ``user_id``.

        Raises ``BadRequestError`` if the grass species does not exist or
        does not offer the plan type.  The establishment type is only kept
        for ``new_lawn`` plans.
        """
        establishment_type = _establishment_type(data.plan_type, data.establishment_type)
        with unit_of_work() as uow:
            repo = PlanRepository(uow.cursor)
            _check_plan_type(repo, data.grass_species_id, data.plan_type, establishment_type)
            plan_id = repo.insert_plan(
                user_id,
                data.grass_species_id,
                data.plan_type.value,
                establishment_type,
                utc_now(),
            )
            plan = _read_plan(repo, plan_id, user_id)
            uow.commit()
        logger.info("User %s created plan %s (%s)", user_id, plan_id, data.plan_type.value)
        return plan

    @classmethod
    async def get_plan(cls, plan_id: int, user_id: int) -> PlanRead:
        """Return a plan with its steps ordered by due date."""
        conn = get_connection()
        try:
            return _read_plan(PlanRepository(conn.cursor()), plan_id, user_id)
        finally:
            conn.close()

    @classmethod
    async def list_plans(cls, user_id: int, authenticated_user_id: int) -> List[PlanRead]:
        """Return all plans of a user, newest first, each with its steps.

        Raises ``ForbiddenError`` when asking for another user's plans.
        """
        if user_id != authenticated_user_id:
            raise ForbiddenError("Unauthorized to access plans for this user")
        conn = get_connection()
        try:
            rows = PlanRepository(conn.cursor()).fetch_user_plan_rows(user_id)
        finally:
            conn.close()
        return [PlanRead.model_validate(plan) for plan in group_plan_rows(rows)]

    @classmethod
    async def update_plan(cls, plan_id: int, user_id: int, data: PlanUpdate) -> PlanRead:
        """Update a plan's fields and upsert the given steps atomically.

        Steps with a ``plan_step_id`` must belong to the plan; otherwise
        the whole update is rolled back with ``NotFoundError``.  New
        steps are appended after the current last step.
        """
        now = utc_now()
        establishment_type = _establishment_type(data.plan_type, data.establishment_type)
        with unit_of_work() as uow:
            repo = PlanRepository(uow.cursor)
            _ensure_owned(repo, plan_id, user_id)
            _check_plan_type(repo, data.grass_species_id, data.plan_type, establishment_type)
            updated = repo.update_plan(
                plan_id,
                user_id,
                data.grass_species_id,
                data.plan_type.value,
                establishment_type,
                data.is_completed,
                data.is_archived,
                now,
            )
            if not updated:
                raise NotFoundError(PLAN_NOT_FOUND)

            for step in data.steps:
                if step.plan_step_id:
                    if not repo.update_step(
                        step.plan_step_id,
                        plan_id,
                        step.step_description,
                        step.due_date.isoformat(),
                        step.completed,
                        _timestamp(step.completed_at),
                        now,
                    ):
                        raise NotFoundError(STEP_NOT_FOUND)
                else:
                    repo.insert_step(
                        plan_id,
                        step.step_description,
                        step.due_date.isoformat(),
                        step.completed,
                        _completion_stamp(step.completed, step.completed_at),
                        repo.next_step_order(plan_id),
                        now,
                    )

            plan = _read_plan(repo, plan_id, user_id)
            uow.commit()
        logger.info("User %s updated plan %s (%d steps in payload)", user_id, plan_id, len(data.steps))
        return plan

    @classmethod
    async def complete_plan(cls, plan_id: int, user_id: int) -> PlanRead:
        """Mark a plan and all of its open steps as completed."""
        now = utc_now()
        with unit_of_work() as uow:
            repo = PlanRepository(uow.cursor)
            _ensure_owned(repo, plan_id, user_id)
            repo.mark_plan_completed(plan_id, now)
            closed = repo.complete_open_steps(plan_id, now)
            plan = _read_plan(repo, plan_id, user_id)
            uow.commit()
        logger.info("User %s completed plan %s (%d open steps closed)", user_id, plan_id, closed)
        return plan

    @classmethod
    async def delete_plan(cls, plan_id: int, user_id: int) -> None:
        """Delete a plan and its steps.

        The step deletion is undone if the plan itself cannot be deleted
        for this user.
        """
        with unit_of_work() as uow:
            repo = PlanRepository(uow.cursor)
            removed_steps = repo.delete_steps(plan_id)
            if not repo.delete_plan(plan_id, user_id):
                raise NotFoundError(PLAN_NOT_FOUND)
            uow.commit()
        logger.info("User %s deleted plan %s and %d steps", user_id, plan_id, removed_steps)

    @classmethod
    async def set_step_completion(
        cls, plan_id: int, step_id: int, user_id: int, data: StepCompletion
    ) -> PlanStepRead:
        """Mark a single step completed or open again."""
        completed_at = _completion_stamp(data.completed, data.completed_at)
        with unit_of_work() as uow:
            repo = PlanRepository(uow.cursor)
            _ensure_owned(repo, plan_id, user_id)
            if not repo.set_step_completion(step_id, plan_id, data.completed, completed_at):
                raise NotFoundError(STEP_NOT_FOUND)
            step = repo.fetch_step(step_id, plan_id)
            uow.commit()
        return PlanStepRead.model_validate(step)

    @classmethod
    async def add_step(cls, plan_id: int, user_id: int, data: PlanStepCreate) -> PlanStepRead:
        """Append a user-authored step; its order is one past the current maximum."""
        with unit_of_work() as uow:
            repo = PlanRepository(uow.cursor)
            _ensure_owned(repo, plan_id, user_id)
            step_order = repo.next_step_order(plan_id)
            step_id = repo.insert_step(
                plan_id,
                data.step_description,
                data.due_date.isoformat(),
                data.completed,
                _completion_stamp(data.completed, None),
                step_order,
                utc_now(),
            )
            step = repo.fetch_step(step_id, plan_id)
            uow.commit()
        logger.info("User %s added step %s to plan %s at order %s", user_id, step_id, plan_id, step_order)
        return PlanStepRead.model_validate(step)

    @classmethod
    async def delete_step(cls, plan_id: int, step_id: int, user_id: int) -> None:
        with unit_of_work() as uow:
            repo = PlanRepository(uow.cursor)
            _ensure_owned(repo, plan_id, user_id)
            if not repo.delete_step(step_id, plan_id):
                raise NotFoundError(STEP_NOT_FOUND)
            uow.commit()
        logger.info("User %s deleted step %s from plan %s", user_id, step_id, plan_id)

    @classmethod
    async def save_to_profile(cls, user_id: int, plan_id: int, authenticated_user_id: int) -> None:
        """Confirm that a plan is saved to the user's profile.

        Plans are tied to their owner on creation, so this only checks
        that the plan belongs to the user; nothing is written.
        """
        if user_id != authenticated_user_id:
            raise ForbiddenError("Unauthorized to save plan for this user")
        conn = get_connection()
        try:
            ownership = PlanRepository(conn.cursor()).check_ownership(plan_id, user_id)
        finally:
            conn.close()
        if ownership is not Ownership.PRESENT:
            raise NotFoundError("Plan not found or does not belong to the user")
