"""
Business logic for user accounts.

Users sign up with a username and password; the password is stored
as a salted PBKDF2 hash (see ``core.security``).  Signing in returns
the user together with a bearer token for the plan endpoints.
"""

import logging
import sqlite3
from typing import Optional

from lawn_care_api.app.core.db import get_connection, utc_now
from lawn_care_api.app.core.exceptions import ConflictError, UnauthorizedError
from lawn_care_api.app.core.security import create_access_token, hash_password, verify_password
from lawn_care_api.app.schemas.user import SignInResponse, UserCredentials, UserRead

logger = logging.getLogger(__name__)


class UserService:
    """Service for registering and authenticating users."""

    @classmethod
    async def create_user(cls, data: UserCredentials) -> UserRead:
        """Create a new user.

        Raises ``ConflictError`` if the username is already taken.
        """
        logger.info("Registering user %s", data.username)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            try:
                cursor.execute(
                    "INSERT INTO users (username, hashed_password, created_at) VALUES (?, ?, ?)",
                    (data.username, hash_password(data.password), utc_now()),
                )
            except sqlite3.IntegrityError:
                conn.rollback()
                raise ConflictError("Username already taken")
            user_id = cursor.lastrowid
            conn.commit()
            row = cursor.execute(
                "SELECT user_id, username, created_at FROM users WHERE user_id = ?",
                (user_id,),
            ).fetchone()
            return UserRead.model_validate(dict(row))
        finally:
            conn.close()

    @classmethod
    async def authenticate(cls, username: str, password: str) -> Optional[UserRead]:
        """Return the user if the credentials match, otherwise ``None``."""
        conn = get_connection()
        try:
            row = conn.execute(
                "SELECT user_id, username, hashed_password, created_at FROM users WHERE username = ?",
                (username,),
            ).fetchone()
        finally:
            conn.close()
        if not row or not verify_password(password, row["hashed_password"]):
            return None
        return UserRead(user_id=row["user_id"], username=row["username"], created_at=row["created_at"])

    @classmethod
    async def sign_in(cls, data: UserCredentials) -> SignInResponse:
        user = await cls.authenticate(data.username, data.password)
        if user is None:
            logger.warning("Failed sign-in for %s", data.username)
            raise UnauthorizedError("Invalid login")
        token = create_access_token({"sub": str(user.user_id)})
        return SignInResponse(user=user, token=token)
