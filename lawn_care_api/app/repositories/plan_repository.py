"""
Plan Repository
===============
Data access layer for ``UserPlans`` and ``PlanSteps``.

Every statement that touches a step is scoped by its parent plan id,
and every statement that touches a plan on behalf of a user is scoped
by the owner id.  Rows are returned as plain dicts keyed by column
name.
"""

from __future__ import annotations

import logging
import sqlite3
from enum import Enum
from typing import Any, Iterable

logger = logging.getLogger(__name__)

PLAN_COLUMNS = (
    "up.user_plan_id, up.user_id, up.grass_species_id, up.plan_type, "
    "up.establishment_type, up.is_completed, up.is_archived, "
    "up.created_at, up.completed_at, gs.name AS grass_species_name"
)

STEP_COLUMNS = (
    "plan_step_id, user_plan_id, template_id, step_description, due_date, "
    "completed, completed_at, step_order, created_at"
)


class Ownership(Enum):
    """Result of checking a plan against the requesting user."""

    PRESENT = "present"
    ABSENT = "absent"
    FORBIDDEN = "forbidden"


class PlanRepository:
    """Repository for plan and plan step rows."""

    def __init__(self, cursor: sqlite3.Cursor) -> None:
        self.cursor = cursor

    # --- Ownership -------------------------------------------------------------
    def check_ownership(self, plan_id: int, user_id: int) -> Ownership:
        row = self.cursor.execute(
            "SELECT user_id FROM UserPlans WHERE user_plan_id = ?",
            (plan_id,),
        ).fetchone()
        if row is None:
            return Ownership.ABSENT
        if row["user_id"] != user_id:
            return Ownership.FORBIDDEN
        return Ownership.PRESENT

    # --- Reads -----------------------------------------------------------------
    def species_exists(self, grass_species_id: int) -> bool:
        row = self.cursor.execute(
            "SELECT 1 FROM GrassSpecies WHERE grass_species_id = ?",
            (grass_species_id,),
        ).fetchone()
        return row is not None

    def plan_type_supported(
        self, grass_species_id: int, plan_type: str, establishment_type: str | None
    ) -> bool:
        """Whether the species offers this plan type and establishment type pair."""
        row = self.cursor.execute(
            """
            SELECT 1 FROM GrassSpeciesPlanTypes
            WHERE grass_species_id = ? AND plan_type = ? AND establishment_type IS ?
            """,
            (grass_species_id, plan_type, establishment_type),
        ).fetchone()
        return row is not None

    def fetch_plan(self, plan_id: int, user_id: int) -> dict[str, Any] | None:
        """Plan row joined with its species name, or ``None`` if not owned."""
        row = self.cursor.execute(
            f"""
            SELECT {PLAN_COLUMNS}
            FROM UserPlans up
            JOIN GrassSpecies gs ON up.grass_species_id = gs.grass_species_id
            WHERE up.user_plan_id = ? AND up.user_id = ?
            """,
            (plan_id, user_id),
        ).fetchone()
        return dict(row) if row else None

    def fetch_steps(self, plan_id: int) -> list[dict[str, Any]]:
        """Steps of a plan ordered by due date (then insertion order)."""
        rows = self.cursor.execute(
            f"""
            SELECT {STEP_COLUMNS}
            FROM PlanSteps
            WHERE user_plan_id = ?
            ORDER BY due_date ASC, step_order ASC, plan_step_id ASC
            """,
            (plan_id,),
        ).fetchall()
        return [dict(row) for row in rows]

    def fetch_step(self, step_id: int, plan_id: int) -> dict[str, Any] | None:
        row = self.cursor.execute(
            f"SELECT {STEP_COLUMNS} FROM PlanSteps WHERE plan_step_id = ? AND user_plan_id = ?",
            (step_id, plan_id),
        ).fetchone()
        return dict(row) if row else None

    def fetch_user_plan_rows(self, user_id: int) -> list[dict[str, Any]]:
        """Flat plan/step join for all plans of a user.

        Plans without steps yield a single row whose step columns are
        ``NULL``.  Step columns that clash with plan columns are
        prefixed with ``step_``.
        """
        rows = self.cursor.execute(
            f"""
            SELECT {PLAN_COLUMNS},
                   ps.plan_step_id, ps.template_id, ps.step_description,
                   ps.due_date, ps.completed, ps.step_order,
                   ps.completed_at AS step_completed_at,
                   ps.created_at AS step_created_at
            FROM UserPlans up
            JOIN GrassSpecies gs ON up.grass_species_id = gs.grass_species_id
            LEFT JOIN PlanSteps ps ON up.user_plan_id = ps.user_plan_id
            WHERE up.user_id = ?
            ORDER BY up.created_at DESC, up.user_plan_id DESC,
                     ps.due_date ASC, ps.step_order ASC, ps.plan_step_id ASC
            """,
            (user_id,),
        ).fetchall()
        return [dict(row) for row in rows]

    def next_step_order(self, plan_id: int) -> int:
        row = self.cursor.execute(
            "SELECT MAX(step_order) AS max_order FROM PlanSteps WHERE user_plan_id = ?",
            (plan_id,),
        ).fetchone()
        return (row["max_order"] or 0) + 1

    # --- Plan writes -----------------------------------------------------------
    def insert_plan(
        self,
        user_id: int,
        grass_species_id: int,
        plan_type: str,
        establishment_type: str | None,
        created_at: str,
    ) -> int:
        self.cursor.execute(
            """
            INSERT INTO UserPlans (user_id, grass_species_id, plan_type, establishment_type,
                                   is_completed, is_archived, created_at)
            VALUES (?, ?, ?, ?, 0, 0, ?)
            """,
            (user_id, grass_species_id, plan_type, establishment_type, created_at),
        )
        return self.cursor.lastrowid

    def update_plan(
        self,
        plan_id: int,
        user_id: int,
        grass_species_id: int,
        plan_type: str,
        establishment_type: str | None,
        is_completed: bool,
        is_archived: bool,
        now: str,
    ) -> bool:
        """Overwrite the scalar fields of an owned plan.

        Completion is one-way: a completed plan stays completed and
        keeps its original ``completed_at``.
        """
        self.cursor.execute(
            """
            UPDATE UserPlans
            SET grass_species_id = ?,
                plan_type = ?,
                establishment_type = ?,
                is_archived = ?,
                completed_at = CASE
                    WHEN is_completed = 1 THEN completed_at
                    WHEN ? = 1 THEN ?
                    ELSE NULL
                END,
                is_completed = CASE WHEN is_completed = 1 THEN 1 ELSE ? END
            WHERE user_plan_id = ? AND user_id = ?
            """,
            (
                grass_species_id,
                plan_type,
                establishment_type,
                int(is_archived),
                int(is_completed),
                now,
                int(is_completed),
                plan_id,
                user_id,
            ),
        )
        return self.cursor.rowcount > 0

    def mark_plan_completed(self, plan_id: int, now: str) -> None:
        self.cursor.execute(
            """
            UPDATE UserPlans
            SET is_completed = 1, completed_at = COALESCE(completed_at, ?)
            WHERE user_plan_id = ?
            """,
            (now, plan_id),
        )

    def delete_plan(self, plan_id: int, user_id: int) -> bool:
        self.cursor.execute(
            "DELETE FROM UserPlans WHERE user_plan_id = ? AND user_id = ?",
            (plan_id, user_id),
        )
        return self.cursor.rowcount > 0

    # --- Step writes -----------------------------------------------------------
    def insert_step(
        self,
        plan_id: int,
        step_description: str,
        due_date: str,
        completed: bool,
        completed_at: str | None,
        step_order: int,
        created_at: str,
        template_id: int | None = None,
    ) -> int:
        self.cursor.execute(
            """
            INSERT INTO PlanSteps (user_plan_id, template_id, step_description, due_date,
                                   completed, completed_at, step_order, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                plan_id,
                template_id,
                step_description,
                due_date,
                int(completed),
                completed_at,
                step_order,
                created_at,
            ),
        )
        return self.cursor.lastrowid

    def update_step(
        self,
        step_id: int,
        plan_id: int,
        step_description: str,
        due_date: str,
        completed: bool,
        completed_at: str | None,
        now: str,
    ) -> bool:
        """Overwrite a step of the plan.

        An open step loses its completion time.  A completed step takes
        ``completed_at`` if given, else keeps the stored one, else ``now``.
        """
        self.cursor.execute(
            """
            UPDATE PlanSteps
            SET step_description = ?,
                due_date = ?,
                completed_at = CASE WHEN ? = 0 THEN NULL ELSE COALESCE(?, completed_at, ?) END,
                completed = ?
            WHERE plan_step_id = ? AND user_plan_id = ?
            """,
            (
                step_description,
                due_date,
                int(completed),
                completed_at,
                now,
                int(completed),
                step_id,
                plan_id,
            ),
        )
        return self.cursor.rowcount > 0

    def set_step_completion(
        self, step_id: int, plan_id: int, completed: bool, completed_at: str | None
    ) -> bool:
        self.cursor.execute(
            """
            UPDATE PlanSteps
            SET completed = ?, completed_at = ?
            WHERE plan_step_id = ? AND user_plan_id = ?
            """,
            (int(completed), completed_at, step_id, plan_id),
        )
        return self.cursor.rowcount > 0

    def complete_open_steps(self, plan_id: int, now: str) -> int:
        self.cursor.execute(
            """
            UPDATE PlanSteps
            SET completed = 1, completed_at = ?
            WHERE user_plan_id = ? AND completed = 0
            """,
            (now, plan_id),
        )
        return self.cursor.rowcount

    def delete_steps(self, plan_id: int) -> int:
        self.cursor.execute("DELETE FROM PlanSteps WHERE user_plan_id = ?", (plan_id,))
        return self.cursor.rowcount

    def delete_step(self, step_id: int, plan_id: int) -> bool:
        self.cursor.execute(
            "DELETE FROM PlanSteps WHERE plan_step_id = ? AND user_plan_id = ?",
            (step_id, plan_id),
        )
        return self.cursor.rowcount > 0


def group_plan_rows(rows: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Rebuild nested plans from flat plan/step join rows.

    Plans keep the order in which they first appear; steps keep row
    order within their plan.  Rows without a step (``plan_step_id`` is
    ``NULL``) only contribute the plan itself.
    """
    plans: dict[int, dict[str, Any]] = {}
    for row in rows:
        plan_id = row["user_plan_id"]
        if plan_id not in plans:
            plans[plan_id] = {
                "user_plan_id": plan_id,
                "user_id": row["user_id"],
                "grass_species_id": row["grass_species_id"],
                "grass_species_name": row["grass_species_name"],
                "plan_type": row["plan_type"],
                "establishment_type": row["establishment_type"],
                "is_completed": row["is_completed"],
                "is_archived": row["is_archived"],
                "created_at": row["created_at"],
                "completed_at": row["completed_at"],
                "steps": [],
            }
        if row.get("plan_step_id") is None:
            continue
        plans[plan_id]["steps"].append(
            {
                "plan_step_id": row["plan_step_id"],
                "user_plan_id": plan_id,
                "template_id": row["template_id"],
                "step_description": row["step_description"],
                "due_date": row["due_date"],
                "completed": row["completed"],
                "completed_at": row["step_completed_at"],
                "step_order": row["step_order"],
                "created_at": row["step_created_at"],
            }
        )
    return list(plans.values())
