"""Room API endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from app.api.deps import CurrentUser, DBSession
from app.models.base import MessageResponse
from app.models.room import (
    JoinRoomRequest,
    RoomCreate,
    RoomListResponse,
    RoomResponse,
    RoomStatsResponse,
    RoomUpdate,
)
from app.services.rooms import (
    create_room,
    delete_room,
    get_room_for_member,
    get_room_stats,
    join_room,
    leave_room,
    list_user_rooms,
    update_room,
)

router = APIRouter(prefix="/api/rooms", tags=["Rooms"])


@router.get("", response_model=RoomListResponse)
def list_rooms_endpoint(session: DBSession, current_user: CurrentUser) -> RoomListResponse:
    """List rooms the authenticated user belongs to."""
    rooms = list_user_rooms(session, current_user.id)
    return RoomListResponse(
        rooms=[RoomResponse.from_room(room) for room in rooms],
        total=len(rooms),
    )


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    room_data: RoomCreate,
) -> RoomResponse:
    """Create a room owned by the authenticated user."""
    room = create_room(session, current_user.id, room_data)
    return RoomResponse.from_room(room)


@router.post("/join", response_model=RoomResponse)
def join_room_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    join_data: JoinRoomRequest,
) -> RoomResponse:
    """Join a room by invite code (case-insensitive)."""
    room = join_room(session, current_user.id, join_data.invite_code)
    return RoomResponse.from_room(room)


@router.get("/{room_id}", response_model=RoomResponse)
def get_room_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    room_id: UUID,
) -> RoomResponse:
    """Get a room the user is a member of."""
    room = get_room_for_member(session, room_id, current_user.id)
    return RoomResponse.from_room(room)


@router.post("/{room_id}/leave", response_model=MessageResponse)
def leave_room_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    room_id: UUID,
) -> MessageResponse:
    """Leave a room. The owner cannot leave."""
    leave_room(session, current_user.id, room_id)
    return MessageResponse(message="Left room successfully")


@router.put("/{room_id}", response_model=RoomResponse)
def update_room_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    room_id: UUID,
    room_data: RoomUpdate,
) -> RoomResponse:
    """Update room details (owner or admin)."""
    room = update_room(session, current_user.id, room_id, room_data)
    return RoomResponse.from_room(room)


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_room_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    room_id: UUID,
) -> None:
    """Delete a room and all of its tasks (owner only)."""
    delete_room(session, current_user.id, room_id)


@router.get(
    "/{room_id}/stats",
    response_model=RoomStatsResponse,
    response_model_exclude_none=True,
)
def room_stats_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    room_id: UUID,
) -> RoomStatsResponse:
    """Task counts and member count for a room."""
    return get_room_stats(session, current_user.id, room_id)
