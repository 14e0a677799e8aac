"""Unit tests for room router endpoints."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from qlive.api.v1.dependency import get_current_account_id
from qlive.api.v1.errors import app_error_handler
from qlive.api.v1.routers.room import get_room_service, router
from qlive.domain.room.room_domain import RoomService
from qlive.domain.room.room_models import PKResult, RoomListResponse, RoomResponse
from qlive.schemas import RoomStatus
from qlive.utils.app_errors import AppError, AppErrorCode

NOW = datetime(2024, 11, 1, 8, 0, 0, tzinfo=timezone.utc)


def make_room(room_id: str, name: str, creator: str = "alice", **kwargs) -> RoomResponse:
    fields = dict(
        room_id=room_id,
        name=name,
        creator=creator,
        play_url=f"rtmp://live.example.com/qlive/{room_id}",
        rtc_room=room_id,
        status=RoomStatus.SINGLE,
        created_at=NOW,
        updated_at=NOW,
    )
    fields.update(kwargs)
    return RoomResponse(**fields)


@pytest.fixture
def mock_room_service() -> AsyncMock:
    return AsyncMock(spec=RoomService)


@pytest.fixture
def test_app(mock_room_service: AsyncMock) -> FastAPI:
    app = FastAPI()
    app.dependency_overrides[get_current_account_id] = lambda: "alice"
    app.dependency_overrides[get_room_service] = lambda: mock_room_service
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.include_router(router)
    return app


@pytest.fixture
def client(test_app: FastAPI) -> TestClient:
    return TestClient(test_app)


class TestListRooms:
    def test_lists_open_rooms(self, client: TestClient, mock_room_service: AsyncMock):
        mock_room_service.list_rooms.return_value = RoomListResponse(
            rooms=[make_room("r1", "alice_stream"), make_room("r2", "bob_stream", creator="bob")]
        )

        response = client.get("/rooms")

        assert response.status_code == 200
        rooms = response.json()["results"]["rooms"]
        assert [r["room_name"] for r in rooms] == ["alice_stream", "bob_stream"]
        assert rooms[0]["created_at"] == "2024-11-01T08:00:00+00:00"
        mock_room_service.list_pk_candidates.assert_not_awaited()

    def test_can_pk_lists_candidates(self, client: TestClient, mock_room_service: AsyncMock):
        mock_room_service.list_pk_candidates.return_value = RoomListResponse(
            rooms=[make_room("r2", "bob_stream", creator="bob")]
        )

        response = client.get("/rooms", params={"can_pk": "true"})

        assert response.status_code == 200
        assert response.json()["results"]["rooms"][0]["creator"] == "bob"
        mock_room_service.list_pk_candidates.assert_awaited_once_with("alice")


class TestGetRoom:
    def test_success(self, client: TestClient, mock_room_service: AsyncMock):
        mock_room_service.get_room.return_value = make_room("r1", "alice_stream")

        response = client.get("/rooms/get_room", params={"room_id": "r1"})

        assert response.status_code == 200
        assert response.json()["results"]["room_name"] == "alice_stream"
        mock_room_service.get_room.assert_awaited_once_with("r1")

    def test_missing_room(self, client: TestClient, mock_room_service: AsyncMock):
        mock_room_service.get_room.side_effect = AppError(AppErrorCode.E_ROOM_NO_EXIST)

        response = client.get("/rooms/get_room", params={"room_id": "r9"})

        assert response.status_code == 404
        assert response.json()["errcode"] == "E_ROOM_NO_EXIST"


class TestCreateRoom:
    def test_success(self, client: TestClient, mock_room_service: AsyncMock):
        mock_room_service.create_room.return_value = make_room("r1", "alice_stream")

        response = client.post("/rooms/create_room", json={"room_name": "alice_stream"})

        assert response.status_code == 200
        results = response.json()["results"]
        assert results["room_id"] == "r1"
        assert results["play_url"] == "rtmp://live.example.com/qlive/r1"
        assert results["rtc_room"] == "r1"
        assert results["rtc_token"] == ""
        mock_room_service.create_room.assert_awaited_once_with(creator_id="alice", name="alice_stream")

    def test_name_used(self, client: TestClient, mock_room_service: AsyncMock):
        mock_room_service.create_room.side_effect = AppError(
            AppErrorCode.E_ROOM_NAME_USED, "Room name in use: alice_stream"
        )

        response = client.post("/rooms/create_room", json={"room_name": "alice_stream"})

        assert response.status_code == 409
        data = response.json()
        assert data["errcode"] == "E_ROOM_NAME_USED"
        assert data["errmesg"] == "room name used"


class TestCloseRoom:
    def test_success(self, client: TestClient, mock_room_service: AsyncMock):
        mock_room_service.close_room.return_value = make_room("r1", "alice_stream", status=RoomStatus.CLOSED)

        response = client.post("/rooms/close_room", json={"room_id": "r1"})

        assert response.status_code == 200
        mock_room_service.close_room.assert_awaited_once_with(caller_id="alice", room_id="r1")

    def test_no_permission(self, client: TestClient, mock_room_service: AsyncMock):
        mock_room_service.close_room.side_effect = AppError(AppErrorCode.E_NO_PERMISSION)

        response = client.post("/rooms/close_room", json={"room_id": "r2"})

        assert response.status_code == 403
        assert response.json()["errcode"] == "E_NO_PERMISSION"


class TestPK:
    def test_request_pk(self, client: TestClient, mock_room_service: AsyncMock):
        mock_room_service.request_pk.return_value = PKResult(
            room=make_room("r1", "alice_stream", status=RoomStatus.PK_CONNECTED, pk_partner="r2"),
            partner=make_room("r2", "bob_stream", creator="bob", status=RoomStatus.PK_CONNECTED, pk_partner="r1"),
        )

        response = client.post("/rooms/request_pk", json={"room_id": "r1", "target_room_id": "r2"})

        assert response.status_code == 200
        results = response.json()["results"]
        assert results["room"]["pk_partner"] == "r2"
        assert results["partner"]["pk_partner"] == "r1"
        assert results["partner"]["status"] == "pk_connected"
        mock_room_service.request_pk.assert_awaited_once_with("r1", "r2", caller_id="alice")

    def test_request_pk_room_in_pk(self, client: TestClient, mock_room_service: AsyncMock):
        mock_room_service.request_pk.side_effect = AppError(AppErrorCode.E_ROOM_IN_PK)

        response = client.post("/rooms/request_pk", json={"room_id": "r1", "target_room_id": "r2"})

        assert response.status_code == 409
        assert response.json()["errmesg"] == "room in PK"

    def test_end_pk_not_in_pk(self, client: TestClient, mock_room_service: AsyncMock):
        mock_room_service.end_pk.side_effect = AppError(AppErrorCode.E_ROOM_NOT_IN_PK)

        response = client.post("/rooms/end_pk", json={"room_id": "r1"})

        assert response.status_code == 409
        assert response.json()["errcode"] == "E_ROOM_NOT_IN_PK"
        mock_room_service.end_pk.assert_awaited_once_with(caller_id="alice", room_id="r1")
