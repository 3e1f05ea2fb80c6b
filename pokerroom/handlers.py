"""Room lifecycle: creating rooms, joining them and starting a game."""

from __future__ import annotations

import copy
import json
import uuid
from dataclasses import dataclass, field
from typing import Any

from pokerroom.game import Game
from pokerroom.models import (
    CreateRoomRequest,
    CreateRoomResponse,
    JoinRoomRequest,
    JoinRoomResponse,
    Player,
    Room,
)

_STARTING_CHIPS = 1000
_DEFAULT_MAX_PLAYERS = 6


class RoomNotFound(LookupError):
    """No room is registered under the given id."""


@dataclass
class AppState:
    """Rooms shared by every request, keyed by room id."""

    rooms: dict[str, Room] = field(default_factory=dict)


def broadcast(room: Room, message: Any) -> None:
    """Send ``message`` as JSON text to every socket registered in ``room``."""
    text = json.dumps(message, ensure_ascii=False, separators=(",", ":"))
    for sender in list(room.websocket_senders.values()):
        try:
            sender.put_nowait(text)
        except Exception:  # a dead receiver must not stop the others
            continue


def _new_player(name: str) -> Player:
    return Player(id=str(uuid.uuid4()), name=name, chips=_STARTING_CHIPS)


def _get_room(state: AppState, room_id: str) -> Room:
    try:
        return state.rooms[room_id]
    except KeyError:
        raise RoomNotFound(room_id) from None


def create_room(state: AppState, request: CreateRoomRequest) -> CreateRoomResponse:
    """Open a new room with its creator seated in it."""
    room_id = str(uuid.uuid4())[:8]
    creator = _new_player(request.creator_name)
    max_players = (
        request.max_players if request.max_players is not None else _DEFAULT_MAX_PLAYERS
    )
    state.rooms[room_id] = Room(
        id=room_id,
        creator_id=creator.id,
        players={creator.id: creator},
        max_players=max_players,
    )
    return CreateRoomResponse(room_id=room_id, player_id=creator.id)


def join_room(state: AppState, room_id: str, request: JoinRoomRequest) -> JoinRoomResponse:
    """Seat a new player in the room unless it is full or already playing.

    Raises RoomNotFound when the room does not exist.
    """
    room = _get_room(state, room_id)
    if len(room.players) >= room.max_players:
        return JoinRoomResponse(success=False, message="Sala lotada")
    if room.game is not None:
        return JoinRoomResponse(success=False, message="Jogo já iniciado")

    player = _new_player(request.player_name)
    room.players[player.id] = player
    broadcast(
        room,
        {
            "type": "player_joined",
            "data": {"players": [p.to_dict() for p in room.players.values()]},
        },
    )
    return JoinRoomResponse(
        success=True, message="Entrou na sala com sucesso", player_id=player.id
    )


def start_game(state: AppState, room_id: str) -> dict[str, Any]:
    """Deal the first round for the room's players.

    Raises RoomNotFound when the room does not exist.
    """
    room = _get_room(state, room_id)
    if len(room.players) < 2:
        return {
            "success": False,
            "message": "Precisa de pelo menos 2 jogadores para iniciar",
        }
    if room.game is not None:
        return {"success": False, "message": "Jogo já iniciado"}

    game = Game([copy.deepcopy(p) for p in room.players.values()])
    game.start_round()
    game_state = game.get_game_state()
    broadcast(room, {"type": "game_started", "data": game_state})
    room.game = game
    return {"success": True, "message": "Jogo iniciado", "game_state": game_state}