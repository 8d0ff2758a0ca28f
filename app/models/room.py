"""Room and membership entity models."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Annotated
from uuid import UUID, uuid4

from pydantic import Field as SchemaField
from pydantic import StringConstraints
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from app.models.base import APIModel
from app.models.stats import TaskStatsResponse
from app.models.user import UserSummary

if TYPE_CHECKING:
    from app.models.user import User

INVITE_CODE_LENGTH = 6

RoomName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
RoomDescription = Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]
InviteCode = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True,
        min_length=INVITE_CODE_LENGTH,
        max_length=INVITE_CODE_LENGTH,
    ),
]


class MemberRole(str, Enum):
    """Membership roles, see ``ROLE_RANK`` in the authorization service for ordering."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class Room(SQLModel, table=True):
    """Room database model."""

    __tablename__ = "rooms"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=100)
    description: str | None = Field(default=None, max_length=500)
    owner_id: UUID = Field(foreign_key="users.id", index=True)
    invite_code: str = Field(max_length=INVITE_CODE_LENGTH, unique=True, index=True)
    is_public: bool = Field(default=False)
    allow_member_invite: bool = Field(default=True)
    auto_assign_tasks: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    owner: "User" = Relationship()
    members: list["RoomMember"] = Relationship(
        back_populates="room",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "RoomMember.joined_at",
        },
    )


class RoomMember(SQLModel, table=True):
    """Membership of a user in a room. A user appears at most once per room."""

    __tablename__ = "room_members"
    __table_args__ = (
        UniqueConstraint("room_id", "user_id", name="uq_room_members_room_user"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    room_id: UUID = Field(foreign_key="rooms.id", index=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    role: MemberRole = Field(default=MemberRole.MEMBER)
    joined_at: datetime = Field(default_factory=datetime.utcnow)

    room: Room = Relationship(back_populates="members")
    user: "User" = Relationship()


class RoomSettings(APIModel):
    allow_member_invite: bool = True
    auto_assign_tasks: bool = False


class RoomSettingsUpdate(APIModel):
    allow_member_invite: bool | None = None
    auto_assign_tasks: bool | None = None


class RoomCreate(APIModel):
    """Schema for room creation."""

    name: RoomName
    description: RoomDescription | None = None
    is_public: bool = False


class RoomUpdate(APIModel):
    """Schema for room update. Ownership and invite code are not editable here."""

    name: RoomName | None = None
    description: RoomDescription | None = None
    is_public: bool | None = None
    settings: RoomSettingsUpdate | None = None


class JoinRoomRequest(APIModel):
    invite_code: InviteCode


class MemberResponse(APIModel):
    user: UserSummary
    role: MemberRole
    joined_at: datetime


class RoomResponse(APIModel):
    """Schema for room response."""

    id: UUID
    name: str
    description: str | None
    owner: UserSummary
    members: list[MemberResponse]
    invite_code: str
    is_public: bool
    settings: RoomSettings
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_room(cls, room: Room) -> "RoomResponse":
        return cls(
            id=room.id,
            name=room.name,
            description=room.description,
            owner=UserSummary.model_validate(room.owner),
            members=[
                MemberResponse(
                    user=UserSummary.model_validate(member.user),
                    role=member.role,
                    joined_at=member.joined_at,
                )
                for member in room.members
            ],
            invite_code=room.invite_code,
            is_public=room.is_public,
            settings=RoomSettings(
                allow_member_invite=room.allow_member_invite,
                auto_assign_tasks=room.auto_assign_tasks,
            ),
            created_at=room.created_at,
            updated_at=room.updated_at,
        )


class RoomListResponse(APIModel):
    rooms: list[RoomResponse]
    total: int


class RoomStatsResponse(APIModel):
    stats: TaskStatsResponse
    member_count: int = SchemaField(ge=0)
