import pytest
from aiohttp.test_utils import TestClient, TestServer

from pokerroom.app import create_app, main
from pokerroom.handlers import AppState


@pytest.mark.asyncio
async def test_create_and_join_over_http():
    state = AppState()
    async with TestClient(TestServer(create_app(state))) as client:
        response = await client.post("/room", json={"creator_name": "Ana"})
        assert response.status == 200
        created = await response.json()
        assert created["room_id"] in state.rooms
        assert response.headers["Access-Control-Allow-Origin"] == "*"

        response = await client.post(
            f"/room/{created['room_id']}/join", json={"player_name": "Bia"}
        )
        joined = await response.json()
        assert joined["success"] is True
        assert joined["player_id"] in state.rooms[created["room_id"]].players


@pytest.mark.asyncio
async def test_missing_room_gives_not_found():
    async with TestClient(TestServer(create_app())) as client:
        join = await client.post("/room/missing/join", json={"player_name": "Bia"})
        start = await client.post("/room/missing/start")
        assert (join.status, start.status) == (404, 404)


@pytest.mark.asyncio
async def test_bad_bodies_are_rejected():
    state = AppState()
    async with TestClient(TestServer(create_app(state))) as client:
        broken = await client.post("/room", data="{not json")
        missing = await client.post("/room", json={"max_players": 4})
        assert broken.status == 400
        assert missing.status == 422
        assert state.rooms == {}


@pytest.mark.asyncio
async def test_preflight_is_permitted():
    async with TestClient(TestServer(create_app())) as client:
        response = await client.options(
            "/room",
            headers={"Origin": "http://localhost", "Access-Control-Request-Method": "POST"},
        )
        assert response.status == 200
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert response.headers["Access-Control-Allow-Methods"] == "*"


@pytest.mark.asyncio
async def test_start_game_over_http():
    state = AppState()
    async with TestClient(TestServer(create_app(state))) as client:
        created = await (await client.post("/room", json={"creator_name": "Ana"})).json()
        room_id = created["room_id"]
        alone = await (await client.post(f"/room/{room_id}/start")).json()
        assert alone["success"] is False
        await client.post(f"/room/{room_id}/join", json={"player_name": "Bia"})
        started = await (await client.post(f"/room/{room_id}/start")).json()
        assert started["success"] is True
        assert started["game_state"]["game_id"] == state.rooms[room_id].game.id


@pytest.mark.asyncio
async def test_websocket_join_and_game_start():
    state = AppState()
    async with TestClient(TestServer(create_app(state))) as client:
        created = await (await client.post("/room", json={"creator_name": "Ana"})).json()
        room_id = created["room_id"]
        await client.post(f"/room/{room_id}/join", json={"player_name": "Bia"})

        ws = await client.ws_connect(f"/room/{room_id}/ws")
        await ws.send_json(
            {"message_type": "join", "data": {"player_id": created["player_id"]}}
        )
        room_state = await ws.receive_json(timeout=5)
        assert room_state["type"] == "room_state"
        assert room_state["data"]["room_id"] == room_id

        await client.post(f"/room/{room_id}/start")
        started = await ws.receive_json(timeout=5)
        assert started["type"] == "game_started"
        assert started["data"]["game_id"] == state.rooms[room_id].game.id
        await ws.close()


def test_main_rejects_bad_port():
    with pytest.raises(SystemExit) as excinfo:
        main(["--port", "abc"])
    assert excinfo.value.code == 2