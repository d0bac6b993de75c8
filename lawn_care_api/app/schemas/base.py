"""
Shared base model for API payloads.

Field names are snake_case in Python and camelCase on the wire
(``user_plan_id`` <-> ``userPlanId``).  Both spellings are accepted on
input.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

# Largest value an SQLite INTEGER column can hold.  Ids outside
# ``1..MAX_ROW_ID`` are rejected during validation.
MAX_ROW_ID = 2**63 - 1


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


class MessageResponse(BaseModel):
    """Plain confirmation returned by delete and save endpoints."""

    message: str
