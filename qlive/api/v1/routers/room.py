from fastapi import APIRouter, Depends, Query

from qlive.api.v1.dependency import CurrentAccountId
from qlive.api.v1.schemas.base import ApiOut
from qlive.api.v1.schemas.room import (
    CreateRoomIn,
    CreateRoomOut,
    ListRoomsOut,
    PKOut,
    RequestPKIn,
    RoomIdIn,
    RoomOut,
)
from qlive.domain.room.room_domain import RoomService
from qlive.domain.room.room_models import RoomResponse

router = APIRouter(prefix="/rooms")

# Singleton instance
_room_service = RoomService()


def get_room_service() -> RoomService:
    """Get the singleton RoomService instance."""
    return _room_service


def _room_out(room: RoomResponse) -> RoomOut:
    return RoomOut(
        room_id=room.room_id,
        room_name=room.name,
        creator=room.creator,
        play_url=room.play_url,
        status=room.status,
        pk_partner=room.pk_partner,
        created_at=room.created_at,
    )


@router.get("")
async def list_rooms(
    account_id: CurrentAccountId,
    service: RoomService = Depends(get_room_service),
    can_pk: bool = Query(False, description="Only rooms of other users that can start a PK"),
) -> ApiOut[ListRoomsOut]:
    """List live rooms."""
    if can_pk:
        result = await service.list_pk_candidates(account_id)
    else:
        result = await service.list_rooms()

    return ApiOut[ListRoomsOut](results=ListRoomsOut(rooms=[_room_out(room) for room in result.rooms]))


@router.get("/get_room")
async def get_room(
    account_id: CurrentAccountId,
    room_id: str = Query(..., description="Room ID"),
    service: RoomService = Depends(get_room_service),
) -> ApiOut[RoomOut]:
    room = await service.get_room(room_id)
    return ApiOut[RoomOut](results=_room_out(room))


@router.post("/create_room")
async def create_room(
    body: CreateRoomIn,
    account_id: CurrentAccountId,
    service: RoomService = Depends(get_room_service),
) -> ApiOut[CreateRoomOut]:
    room = await service.create_room(creator_id=account_id, name=body.room_name)

    return ApiOut[CreateRoomOut](
        results=CreateRoomOut(
            room_id=room.room_id,
            room_name=room.name,
            play_url=room.play_url,
            rtc_room=room.rtc_room,
        )
    )


@router.post("/close_room")
async def close_room(
    body: RoomIdIn,
    account_id: CurrentAccountId,
    service: RoomService = Depends(get_room_service),
) -> ApiOut[str]:
    await service.close_room(caller_id=account_id, room_id=body.room_id)
    return ApiOut[str](results="OK")


@router.post("/request_pk")
async def request_pk(
    body: RequestPKIn,
    account_id: CurrentAccountId,
    service: RoomService = Depends(get_room_service),
) -> ApiOut[PKOut]:
    """Pair the caller's room with another single room."""
    result = await service.request_pk(body.room_id, body.target_room_id, caller_id=account_id)
    return ApiOut[PKOut](results=PKOut(room=_room_out(result.room), partner=_room_out(result.partner)))


@router.post("/end_pk")
async def end_pk(
    body: RoomIdIn,
    account_id: CurrentAccountId,
    service: RoomService = Depends(get_room_service),
) -> ApiOut[RoomOut]:
    room = await service.end_pk(caller_id=account_id, room_id=body.room_id)
    return ApiOut[RoomOut](results=_room_out(room))
