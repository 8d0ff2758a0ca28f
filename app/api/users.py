"""User profile and statistics endpoints."""

from fastapi import APIRouter, Query

from app.api.deps import CurrentUser, DBSession
from app.models.base import MessageResponse
from app.models.user import (
    PasswordChange,
    ProfileUpdate,
    UserResponse,
    UserSearchResponse,
    UserStatsResponse,
    UserSummary,
)
from app.services.users import change_password, get_user_stats, search_users, update_profile

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("/profile", response_model=UserResponse)
def get_profile_endpoint(current_user: CurrentUser) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.put("/profile", response_model=UserResponse)
def update_profile_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    profile_data: ProfileUpdate,
) -> UserResponse:
    """Update name and/or email."""
    user = update_profile(session, current_user, profile_data)
    return UserResponse.model_validate(user)


@router.put("/password", response_model=MessageResponse)
def change_password_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    password_data: PasswordChange,
) -> MessageResponse:
    change_password(session, current_user, password_data)
    return MessageResponse(message="Password updated successfully")


@router.get("/stats", response_model=UserStatsResponse, response_model_exclude_none=True)
def user_stats_endpoint(session: DBSession, current_user: CurrentUser) -> UserStatsResponse:
    """Counters, task breakdown and completions over the last week."""
    return get_user_stats(session, current_user)


@router.get("/search", response_model=UserSearchResponse)
def search_users_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    q: str | None = Query(default=None, max_length=100),
) -> UserSearchResponse:
    """Search other users by name or email, for room invitations."""
    users = search_users(session, current_user.id, q)
    return UserSearchResponse(users=[UserSummary.model_validate(u) for u in users])
