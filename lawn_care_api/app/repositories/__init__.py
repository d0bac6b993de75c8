"""
Data access helpers.

Repositories wrap a cursor obtained from ``core.db`` and only issue
SQL; transaction boundaries and error translation belong to the
services that use them.
"""

from .plan_repository import Ownership, PlanRepository, group_plan_rows  # noqa: F401
