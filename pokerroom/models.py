"""Data model shared by the game engine and the room server."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pokerroom.game import Game


class Suit(enum.Enum):
    """Card suit, valued by its wire name."""

    HEARTS = "Hearts"
    DIAMONDS = "Diamonds"
    CLUBS = "Clubs"
    SPADES = "Spades"


class Rank(enum.IntEnum):
    """Card rank, valued by its strength (two is low, ace is high)."""

    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    @property
    def label(self) -> str:
        """Name used on the wire, e.g. ``"Ace"``."""
        return self.name.title()

    @classmethod
    def from_label(cls, label: str) -> Rank:
        try:
            return cls[label.upper()]
        except (KeyError, AttributeError):
            raise ValueError(f"unknown rank: {label!r}") from None


@dataclass(frozen=True)
class Card:
    suit: Suit
    rank: Rank

    def to_dict(self) -> dict[str, str]:
        return {"suit": self.suit.value, "rank": self.rank.label}

    @classmethod
    def from_dict(cls, data: Any) -> Card:
        if not isinstance(data, dict):
            raise ValueError("card must be an object")
        try:
            suit = Suit(data.get("suit"))
        except ValueError:
            raise ValueError(f"unknown suit: {data.get('suit')!r}") from None
        return cls(suit=suit, rank=Rank.from_label(data.get("rank")))


@dataclass
class Player:
    id: str
    name: str
    chips: int
    hand: list[Card] = field(default_factory=list)
    current_bet: int = 0
    is_folded: bool = False
    is_all_in: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "chips": self.chips,
            "hand": [card.to_dict() for card in self.hand],
            "current_bet": self.current_bet,
            "is_folded": self.is_folded,
            "is_all_in": self.is_all_in,
        }


class GameState(enum.Enum):
    WAITING = "Waiting"
    PRE_FLOP = "PreFlop"
    FLOP = "Flop"
    TURN = "Turn"
    RIVER = "River"
    SHOWDOWN = "Showdown"
    FINISHED = "Finished"


class ActionKind(enum.Enum):
    FOLD = "Fold"
    CHECK = "Check"
    CALL = "Call"
    RAISE = "Raise"
    ALL_IN = "AllIn"


def _non_negative_int(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{what} must be a non-negative integer")
    return value


@dataclass(frozen=True)
class PlayerAction:
    """A player's move; ``amount`` only matters for a raise."""

    kind: ActionKind
    amount: int = 0

    @classmethod
    def from_json(cls, data: Any) -> PlayerAction:
        """Parse ``"Fold"``-style strings or ``{"Raise": n}`` objects."""
        if isinstance(data, str):
            try:
                kind = ActionKind(data)
            except ValueError:
                raise ValueError(f"unknown action: {data!r}") from None
            if kind is ActionKind.RAISE:
                raise ValueError("a raise needs an amount")
            return cls(kind)
        if isinstance(data, dict) and len(data) == 1:
            ((name, value),) = data.items()
            if name != ActionKind.RAISE.value:
                raise ValueError(f"unknown action: {name!r}")
            return cls(ActionKind.RAISE, _non_negative_int(value, "raise amount"))
        raise ValueError(f"invalid action: {data!r}")

    def to_json(self) -> str | dict[str, int]:
        if self.kind is ActionKind.RAISE:
            return {ActionKind.RAISE.value: self.amount}
        return self.kind.value


@dataclass
class Room:
    id: str
    creator_id: str
    players: dict[str, Player] = field(default_factory=dict)
    game: Game | None = None
    max_players: int = 6
    websocket_senders: dict[str, Any] = field(default_factory=dict)


def _require_object(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    return data


def _require_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


@dataclass(frozen=True)
class CreateRoomRequest:
    creator_name: str
    max_players: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> CreateRoomRequest:
        data = _require_object(data)
        max_players = data.get("max_players")
        if max_players is not None:
            max_players = _non_negative_int(max_players, "max_players")
        return cls(_require_str(data, "creator_name"), max_players)


@dataclass(frozen=True)
class CreateRoomResponse:
    room_id: str
    player_id: str

    def to_dict(self) -> dict[str, str]:
        return {"room_id": self.room_id, "player_id": self.player_id}


@dataclass(frozen=True)
class JoinRoomRequest:
    player_name: str

    @classmethod
    def from_dict(cls, data: Any) -> JoinRoomRequest:
        return cls(_require_str(_require_object(data), "player_name"))


@dataclass(frozen=True)
class JoinRoomResponse:
    success: bool
    message: str
    player_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "player_id": self.player_id,
        }


@dataclass(frozen=True)
class WebSocketMessage:
    message_type: str
    data: Any

    @classmethod
    def from_dict(cls, data: Any) -> WebSocketMessage:
        data = _require_object(data)
        if "data" not in data:
            raise ValueError("field 'data' is missing")
        return cls(_require_str(data, "message_type"), data["data"])


@dataclass(frozen=True)
class GameActionMessage:
    player_id: str
    action: PlayerAction

    @classmethod
    def from_dict(cls, data: Any) -> GameActionMessage:
        data = _require_object(data)
        if "action" not in data:
            raise ValueError("field 'action' is missing")
        return cls(_require_str(data, "player_id"), PlayerAction.from_json(data["action"]))