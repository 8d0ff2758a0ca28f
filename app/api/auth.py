"""Authentication API endpoints."""

from fastapi import APIRouter, status

from app.api.deps import CurrentUser, DBSession
from app.errors import ConflictError, UnauthenticatedError, ValidationError
from app.models.base import MessageResponse
from app.models.user import AuthResponse, UserCreate, UserLogin, UserResponse
from app.services.auth import (
    authenticate_user,
    create_auth_response,
    create_user,
    get_user_by_email,
    validate_email,
    validate_password_policy,
)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register_user(session: DBSession, user_data: UserCreate) -> AuthResponse:
    """Register a new user account."""
    # Validate email format
    if not validate_email(user_data.email):
        raise ValidationError("Invalid email format", details={"field": "email"})

    # Validate password policy
    is_valid, error_msg = validate_password_policy(user_data.password)
    if not is_valid:
        raise ValidationError(error_msg, details={"field": "password"})

    # Check email uniqueness
    existing_user = get_user_by_email(session, user_data.email)
    if existing_user:
        raise ConflictError("Email already registered", details={"field": "email"})

    user = create_user(session, user_data)
    return create_auth_response(user)


@router.post("/login", response_model=AuthResponse)
def login_user(session: DBSession, credentials: UserLogin) -> AuthResponse:
    """Sign in with email and password."""
    user = authenticate_user(session, credentials.email, credentials.password)
    if user is None:
        # Generic error message to prevent enumeration
        raise UnauthenticatedError("Invalid credentials")

    return create_auth_response(user)


@router.get("/me", response_model=UserResponse)
def get_me(current_user: CurrentUser) -> UserResponse:
    """Return the authenticated user."""
    return UserResponse.model_validate(current_user)


@router.post("/logout", response_model=MessageResponse)
def logout_user(current_user: CurrentUser) -> MessageResponse:
    """Sign out (invalidate session)."""
    # JWT is stateless, so logout is handled client-side by discarding the token.
    return MessageResponse(message="Logged out successfully")
