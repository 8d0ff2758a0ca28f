"""User entity model."""

from datetime import date, datetime
from uuid import UUID, uuid4

from pydantic import EmailStr
from pydantic import Field as SchemaField
from sqlmodel import Field, SQLModel

from app.models.base import APIModel
from app.models.stats import TaskStatsResponse


class UserBase(SQLModel):
    """Base User schema."""

    email: str = Field(max_length=255, unique=True, index=True)


class User(UserBase, table=True):
    """User database model.

    ``hashed_password`` is absent for accounts created through an external
    identity provider; those carry ``google_id`` instead.
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    hashed_password: str | None = Field(default=None, max_length=255)
    google_id: str | None = Field(default=None, max_length=255, unique=True)
    full_name: str = Field(max_length=100)
    avatar: str = Field(default="", max_length=500)

    # Task counters change only through atomic UPDATE statements, streaks under a row lock
    total_tasks: int = Field(default=0)
    completed_tasks: int = Field(default=0)
    current_streak: int = Field(default=0)
    max_streak: int = Field(default=0)
    last_task_date: date | None = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class UserCreate(APIModel):
    """Schema for user registration."""

    email: EmailStr
    password: str = SchemaField(min_length=8, max_length=128)
    full_name: str = SchemaField(min_length=2, max_length=100)


class UserLogin(APIModel):
    """Schema for user login."""

    email: EmailStr
    password: str


class ProfileUpdate(APIModel):
    full_name: str | None = SchemaField(default=None, min_length=2, max_length=100)
    email: EmailStr | None = None


class PasswordChange(APIModel):
    current_password: str = SchemaField(min_length=1)
    new_password: str = SchemaField(min_length=8, max_length=128)


class UserSummary(APIModel):
    """Public projection of a user, embedded in rooms, tasks and search results."""

    id: UUID
    full_name: str
    email: str
    avatar: str = ""


class UserResponse(APIModel):
    """Schema for user response (no password)."""

    id: UUID
    email: str
    full_name: str
    avatar: str
    total_tasks: int
    completed_tasks: int
    current_streak: int
    max_streak: int
    last_task_date: date | None
    created_at: datetime


class AuthResponse(APIModel):
    """Schema for authentication response."""

    user: UserResponse
    token: str
    expires_at: datetime


class UserSearchResponse(APIModel):
    users: list[UserSummary]


class UserStatsProfile(APIModel):
    full_name: str
    email: str
    total_tasks: int
    completed_tasks: int
    current_streak: int
    max_streak: int
    joined_at: datetime


class DailyCompletions(APIModel):
    day: date = SchemaField(alias="date")
    count: int


class UserStatsResponse(APIModel):
    user: UserStatsProfile
    stats: TaskStatsResponse
    weekly_stats: list[DailyCompletions]
