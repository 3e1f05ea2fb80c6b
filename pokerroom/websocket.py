"""Per-socket message handling and game-action dispatch."""

from __future__ import annotations

import asyncio
import contextlib
import json
from typing import Any

import aiohttp
from aiohttp import web

from pokerroom.game import GameError
from pokerroom.handlers import AppState
from pokerroom.models import GameActionMessage, GameState, PlayerAction, WebSocketMessage

STATE_KEY = web.AppKey("state", AppState)

_ROUND_RESTART_DELAY = 5.0


def _encode(message: Any) -> str:
    return json.dumps(message, ensure_ascii=False, separators=(",", ":"))


def _send_all(senders: list[Any], message: Any) -> None:
    text = _encode(message)
    for sender in senders:
        try:
            sender.put_nowait(text)
        except Exception:
            continue


class Connection:
    """State of one socket: the room it talks to and the player it joined as."""

    def __init__(self, state: AppState, room_id: str, queue: Any) -> None:
        self.state = state
        self.room_id = room_id
        self.queue = queue
        self.player_id: str | None = None

    async def handle_text(self, text: str) -> None:
        """Act on one text frame; malformed or unknown messages are ignored."""
        try:
            message = WebSocketMessage.from_dict(json.loads(text))
        except (ValueError, RecursionError):
            return

        if message.message_type == "join":
            self._join(message.data)
        elif message.message_type == "game_action" and self.player_id is not None:
            try:
                action_message = GameActionMessage.from_dict(message.data)
            except ValueError:
                return
            await handle_game_action(
                self.state, self.room_id, self.player_id, action_message.action
            )

    def _join(self, data: Any) -> None:
        if not isinstance(data, dict):
            return
        player_id = data.get("player_id")
        if not isinstance(player_id, str):
            return
        self.player_id = player_id

        room = self.state.rooms.get(self.room_id)
        if room is None:
            return
        room.websocket_senders[player_id] = self.queue
        room_state = {
            "type": "room_state",
            "data": {
                "room_id": room.id,
                "players": [p.to_dict() for p in room.players.values()],
                "game": room.game.get_game_state() if room.game is not None else None,
            },
        }
        self.queue.put_nowait(_encode(room_state))

    def close(self) -> None:
        """Unregister the joined player's socket from the room."""
        if self.player_id is None:
            return
        room = self.state.rooms.get(self.room_id)
        if room is not None:
            room.websocket_senders.pop(self.player_id, None)


async def handle_game_action(
    state: AppState,
    room_id: str,
    player_id: str,
    action: PlayerAction,
    restart_delay: float = _ROUND_RESTART_DELAY,
) -> None:
    """Apply a player's action and tell the room what happened.

    When the round finishes, a new one is dealt after ``restart_delay`` seconds
    if at least two players still have chips.
    """
    room = state.rooms.get(room_id)
    if room is None or room.game is None:
        return
    senders = list(room.websocket_senders.values())
    player_sender = room.websocket_senders.get(player_id)
    game = room.game

    try:
        game.process_action(player_id, action)
    except GameError as error:
        if player_sender is not None:
            _send_all([player_sender], {"type": "error", "data": {"message": str(error)}})
        return

    _send_all(senders, {"type": "game_update", "data": game.get_game_state()})
    if game.state is not GameState.FINISHED:
        return

    _send_all(
        senders,
        {"type": "round_finished", "data": {"winner": "TBD", "pot": game.pot}},
    )
    await asyncio.sleep(restart_delay)

    if sum(1 for p in game.players if p.chips > 0) >= 2:
        game.dealer_index = (game.dealer_index + 1) % len(game.players)
        game.start_round()
        _send_all(senders, {"type": "new_round", "data": game.get_game_state()})


async def _pump(queue: asyncio.Queue[str], ws: web.WebSocketResponse) -> None:
    try:
        while True:
            text = await queue.get()
            await ws.send_str(text)
    except (ConnectionError, RuntimeError):
        with contextlib.suppress(Exception):
            await ws.close()


async def websocket_handler(request: web.Request) -> web.WebSocketResponse:
    """Upgrade to a websocket and serve one player's connection to a room."""
    state = request.app[STATE_KEY]
    room_id = request.match_info["room_id"]
    ws = web.WebSocketResponse()
    await ws.prepare(request)

    queue: asyncio.Queue[str] = asyncio.Queue()
    connection = Connection(state, room_id, queue)
    sender = asyncio.create_task(_pump(queue, ws))
    try:
        async for message in ws:
            if message.type is aiohttp.WSMsgType.TEXT:
                await connection.handle_text(message.data)
            elif message.type is aiohttp.WSMsgType.ERROR:
                break
    finally:
        connection.close()
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sender
    return ws