"""
Account endpoints for API v1: sign-up and sign-in.

Sign-in returns the user and a bearer token to send as
``Authorization: Bearer <token>`` on every other request.
"""

from fastapi import APIRouter, status

from lawn_care_api.app.schemas.user import SignInResponse, UserCredentials, UserRead
from lawn_care_api.app.services.user_service import UserService


router = APIRouter()


@router.post("/sign-up", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def sign_up(credentials: UserCredentials) -> UserRead:
    """Register a new user.  Usernames are unique (409 if taken)."""
    return await UserService.create_user(credentials)


@router.post("/sign-in", response_model=SignInResponse)
async def sign_in(credentials: UserCredentials) -> SignInResponse:
    return await UserService.sign_in(credentials)
