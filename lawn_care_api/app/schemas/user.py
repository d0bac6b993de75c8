"""
Pydantic models for user accounts.

Passwords are only ever accepted on input; ``UserRead`` never carries
the stored hash.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class UserCredentials(CamelModel):
    """Username and password, used for both sign-up and sign-in."""

    username: str = Field(..., min_length=1, max_length=150, examples=["lawnlover"])
    password: str = Field(..., min_length=1, examples=["strongpassword"])


class UserRead(CamelModel):
    """Schema for reading a user from the API."""

    user_id: int
    username: str
    created_at: Optional[datetime] = None


class SignInResponse(CamelModel):
    """Authenticated user together with the bearer token to use."""

    user: UserRead
    token: str
