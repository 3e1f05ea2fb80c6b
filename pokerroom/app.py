"""HTTP application: routes, permissive CORS and the server entry point."""

from __future__ import annotations

import argparse
from typing import Any, Awaitable, Callable

from aiohttp import web

from pokerroom.handlers import AppState, RoomNotFound, create_room, join_room, start_game
from pokerroom.models import CreateRoomRequest, JoinRoomRequest
from pokerroom.websocket import STATE_KEY, websocket_handler

_Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def _cors_headers(headers: Any) -> None:
    headers["Access-Control-Allow-Origin"] = "*"
    headers["Access-Control-Expose-Headers"] = "*"


@web.middleware
async def _cors(request: web.Request, handler: _Handler) -> web.StreamResponse:
    if request.method == "OPTIONS" and "Access-Control-Request-Method" in request.headers:
        response = web.Response()
        _cors_headers(response.headers)
        response.headers["Access-Control-Allow-Methods"] = "*"
        response.headers["Access-Control-Allow-Headers"] = "*"
        return response
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        _cors_headers(exc.headers)
        raise
    if not response.prepared:
        _cors_headers(response.headers)
    return response


async def _read_json(request: web.Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        raise web.HTTPBadRequest(text="invalid JSON body") from None


async def _create_room(request: web.Request) -> web.Response:
    body = await _read_json(request)
    try:
        payload = CreateRoomRequest.from_dict(body)
    except ValueError as exc:
        raise web.HTTPUnprocessableEntity(text=str(exc)) from None
    response = create_room(request.app[STATE_KEY], payload)
    return web.json_response(response.to_dict())


async def _join_room(request: web.Request) -> web.Response:
    body = await _read_json(request)
    try:
        payload = JoinRoomRequest.from_dict(body)
    except ValueError as exc:
        raise web.HTTPUnprocessableEntity(text=str(exc)) from None
    try:
        response = join_room(request.app[STATE_KEY], request.match_info["room_id"], payload)
    except RoomNotFound:
        raise web.HTTPNotFound() from None
    return web.json_response(response.to_dict())


async def _start_game(request: web.Request) -> web.Response:
    try:
        result = start_game(request.app[STATE_KEY], request.match_info["room_id"])
    except RoomNotFound:
        raise web.HTTPNotFound() from None
    return web.json_response(result)


def create_app(state: AppState | None = None) -> web.Application:
    """Build the application serving the rooms held in ``state``."""
    app = web.Application(middlewares=[_cors])
    app[STATE_KEY] = state if state is not None else AppState()
    app.router.add_post("/room", _create_room)
    app.router.add_post("/room/{room_id}/join", _join_room)
    app.router.add_get("/room/{room_id}/ws", websocket_handler)
    app.router.add_post("/room/{room_id}/start", _start_game)
    return app


def main(argv: list[str] | None = None) -> None:
    """Run the poker room server."""
    parser = argparse.ArgumentParser(prog="pokerroom", description="Poker room server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=3000)
    args = parser.parse_args(argv)
    print(f"Servidor rodando em http://{args.host}:{args.port}")
    web.run_app(create_app(), host=args.host, port=args.port, print=None)