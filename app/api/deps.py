"""API dependencies for dependency injection."""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from app.db.session import get_session
from app.errors import UnauthenticatedError
from app.models.user import User
from app.services.auth import decode_jwt

# auto_error is off so a missing header yields our 401 body rather than FastAPI's
security = HTTPBearer(auto_error=False)


def get_db_session() -> Generator[Session, None, None]:
    """Get database session dependency."""
    yield from get_session()


DBSession = Annotated[Session, Depends(get_db_session)]


def get_current_user(
    session: DBSession,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> User:
    """Get current authenticated user from JWT token."""
    if credentials is None:
        raise UnauthenticatedError()

    user_id = decode_jwt(credentials.credentials)
    user = session.get(User, user_id)
    if user is None:
        raise UnauthenticatedError("Invalid or expired token")

    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
