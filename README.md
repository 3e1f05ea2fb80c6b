# pokerroom

A small Texas Hold'em room server. Players create and join rooms over
HTTP, then play hands over a WebSocket connection that pushes every game
update to everyone in the room.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Running the server

```
pokerroom
```

By default the server listens on `0.0.0.0:3000`. Use `--host` and
`--port` to change that:

```
pokerroom --host 127.0.0.1 --port 8080
```

## HTTP API

| Method | Path                    | Body                                         |
|--------|-------------------------|----------------------------------------------|
| POST   | `/room`                 | `{"creator_name": "Ana", "max_players": 6}`  |
| POST   | `/room/{room_id}/join`  | `{"player_name": "Bruno"}`                   |
| POST   | `/room/{room_id}/start` | none                                         |
| GET    | `/room/{room_id}/ws`    | WebSocket upgrade                            |

- Creating a room returns `room_id` (8 characters) and the creator's
  `player_id`. `max_players` is optional and defaults to 6.
- Joining returns `success`, `message` and the new `player_id`. A join is
  refused (`success: false`) when the room is full or a game is already
  running.
- Starting needs at least two players. On success it answers with
  `success`, `message` and the first `game_state`.
- Unknown rooms answer with status 404. A body that is not JSON answers
  with 400; a JSON body with missing or mistyped fields answers with 422.
- Every response carries permissive CORS headers, and CORS preflight
  requests are answered directly.

Every player starts with 1000 chips. The small blind is 5 and the big
blind is 10.

## WebSocket protocol

Messages the client sends are JSON objects with a `message_type` and
`data`:

```json
{"message_type": "join", "data": {"player_id": "..."}}
{"message_type": "game_action", "data": {"player_id": "...", "action": "Call"}}
```

An action is one of `"Fold"`, `"Check"`, `"Call"`, `"AllIn"`, or
`{"Raise": 50}`. A `game_action` is accepted only after a `join` on the
same connection, and it is applied for the player that joined on that
connection. Malformed or unknown messages are ignored.

The server sends JSON objects with a `type` and `data`:

- `room_state`: sent after a `join`, with the room id, its players and
  its game (or `null`).
- `player_joined`: a new player joined over HTTP.
- `game_started`: the game began.
- `game_update`: the state after an accepted action.
- `round_finished`: the hand is over. Five seconds later a new hand is
  dealt, with the dealer button moved one seat, if at least two players
  still have chips.
- `new_round`: the state of the next hand.
- `error`: sent only to the acting player when an action is refused.

Hole cards appear in game states only once the hand reaches showdown.

## Using it as a library

`pokerroom.app.create_app` builds the `aiohttp` application around an
`AppState` from `pokerroom.handlers`; the functions `create_room`,
`join_room` and `start_game` in that module work on an `AppState`
directly and raise `RoomNotFound` for unknown rooms.

`pokerroom.game.Game` can be driven on its own. It takes a list of
players and, optionally, a `random.Random` used to shuffle the deck:

```python
import random

from pokerroom.game import Game, GameError
from pokerroom.models import ActionKind, Player, PlayerAction

game = Game(
    [Player(id="a", name="Ana", chips=1000), Player(id="b", name="Bruno", chips=1000)],
    rng=random.Random(7),
)
game.start_round()
state = game.get_game_state()
game.process_action(state["current_player"], PlayerAction(ActionKind.CALL))
```

Refused actions (out of turn, checking against a bet, raising more than
the player holds) raise `pokerroom.game.GameError`.
`PlayerAction.from_json` parses the action values shown above.

## Limitations

- Hands are not ranked. At showdown the pot goes to a player only when
  every other player has folded; otherwise it stays where it is, and
  `round_finished` reports the winner as `"TBD"`.
- There are no side pots.
- The game plays with copies of the room's players, so chip counts in a
  room's player list are not updated by play.
- Rooms live in memory only and are lost when the server stops.
- There is no client; any HTTP and WebSocket client can be used.