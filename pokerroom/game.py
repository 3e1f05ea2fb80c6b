"""Texas hold'em table: dealing, blinds, betting and street progression."""

from __future__ import annotations

import random
import uuid
from typing import Any

from pokerroom.models import ActionKind, Card, GameState, Player, PlayerAction, Rank, Suit


class GameError(Exception):
    """An action that the table rejects."""


def create_deck() -> list[Card]:
    """Return the 52 cards ordered by suit, then by rank."""
    return [Card(suit, rank) for suit in Suit for rank in Rank]


_NEXT_STREET = {
    GameState.PRE_FLOP: GameState.FLOP,
    GameState.FLOP: GameState.TURN,
    GameState.TURN: GameState.RIVER,
    GameState.RIVER: GameState.SHOWDOWN,
}


class Game:
    """One table of players sharing a shuffled deck."""

    def __init__(self, players: list[Player], rng: random.Random | None = None) -> None:
        self.id = str(uuid.uuid4())
        self.players = players
        self.deck = create_deck()
        (rng or random.Random()).shuffle(self.deck)
        self.community_cards: list[Card] = []
        self.pot = 0
        self.current_bet = 0
        self.current_player_index = 0
        self.dealer_index = 0
        self.small_blind = 5
        self.big_blind = 10
        self.state = GameState.PRE_FLOP
        self.round_bets: dict[str, int] = {}

    def start_round(self) -> None:
        """Reset the table, deal hole cards and post the blinds."""
        for player in self.players:
            player.hand.clear()
            player.current_bet = 0
            player.is_folded = False
            player.is_all_in = False

        self.community_cards.clear()
        self.pot = 0
        self.current_bet = 0
        self.round_bets.clear()
        self.state = GameState.PRE_FLOP

        self._deal_hole_cards()
        self._post_blinds()
        self.current_player_index = (self.dealer_index + 3) % len(self.players)

    def _deal_hole_cards(self) -> None:
        for _ in range(2):
            for player in self.players:
                if self.deck:
                    player.hand.append(self.deck.pop())

    def _post_blind(self, index: int, blind: int) -> int:
        player = self.players[index]
        amount = min(blind, player.chips)
        player.chips -= amount
        player.current_bet = amount
        self.pot += amount
        self.round_bets[player.id] = amount
        return amount

    def _post_blinds(self) -> None:
        count = len(self.players)
        self._post_blind((self.dealer_index + 1) % count, self.small_blind)
        self.current_bet = self._post_blind((self.dealer_index + 2) % count, self.big_blind)

    def _commit(self, player: Player, amount: int) -> None:
        player.chips -= amount
        player.current_bet += amount
        self.pot += amount
        self.round_bets[player.id] = self.round_bets.get(player.id, 0) + amount

    def process_action(self, player_id: str, action: PlayerAction) -> None:
        """Apply ``action`` for the player whose turn it is.

        Raises GameError when it is not that player's turn or the move is illegal.
        """
        player = self.players[self.current_player_index]
        if player.id != player_id:
            raise GameError("Não é sua vez de jogar")
        if player.is_folded:
            raise GameError("Jogador já foldou")

        match action.kind:
            case ActionKind.FOLD:
                player.is_folded = True
            case ActionKind.CHECK:
                if self.current_bet > player.current_bet:
                    raise GameError(
                        "Não é possível dar check, há uma aposta a ser igualada"
                    )
            case ActionKind.CALL:
                to_call = self.current_bet - player.current_bet
                self._commit(player, min(to_call, player.chips))
                if player.chips == 0:
                    player.is_all_in = True
            case ActionKind.RAISE:
                total = self.current_bet - player.current_bet + action.amount
                if total > player.chips:
                    raise GameError("Fichas insuficientes para essa aposta")
                self._commit(player, total)
                self.current_bet = player.current_bet
            case ActionKind.ALL_IN:
                self._commit(player, player.chips)
                player.is_all_in = True
                self.current_bet = max(self.current_bet, player.current_bet)

        self._next_player()
        self._check_round_completion()

    def _next_player(self) -> None:
        while True:
            self.current_player_index = (self.current_player_index + 1) % len(self.players)
            player = self.players[self.current_player_index]
            if not player.is_folded and not player.is_all_in:
                return
            if self.current_player_index == self.dealer_index:
                self._advance_game_state()
                return

    def _active_players(self) -> list[Player]:
        return [p for p in self.players if not p.is_folded and not p.is_all_in]

    def _check_round_completion(self) -> None:
        active = self._active_players()
        if len(active) <= 1 or all(p.current_bet == self.current_bet for p in active):
            self._advance_game_state()

    def _advance_game_state(self) -> None:
        for player in self.players:
            player.current_bet = 0
        self.current_bet = 0
        self.round_bets.clear()

        next_state = _NEXT_STREET.get(self.state)
        if next_state is not None:
            self.state = next_state
            if next_state is GameState.FLOP:
                self._deal_community(3)
            elif next_state in (GameState.TURN, GameState.RIVER):
                self._deal_community(1)
            else:
                self._determine_winner()

        self.current_player_index = (self.dealer_index + 1) % len(self.players)

    def _deal_community(self, count: int) -> None:
        if self.deck:
            self.deck.pop()  # burn
        for _ in range(count):
            if self.deck:
                self.community_cards.append(self.deck.pop())

    def _determine_winner(self) -> None:
        # Only an uncontested pot is awarded; hands are not ranked.
        remaining = [p for p in self.players if not p.is_folded]
        if len(remaining) == 1:
            remaining[0].chips += self.pot
            self.pot = 0
        self.state = GameState.FINISHED

    def get_game_state(self) -> dict[str, Any]:
        """Public view of the table; hole cards are shown only after showdown."""
        reveal = self.state in (GameState.SHOWDOWN, GameState.FINISHED)
        return {
            "game_id": self.id,
            "state": self.state.value,
            "pot": self.pot,
            "current_bet": self.current_bet,
            "current_player": (
                self.players[self.current_player_index].id if self.players else None
            ),
            "community_cards": [card.to_dict() for card in self.community_cards],
            "players": [
                {
                    "id": p.id,
                    "name": p.name,
                    "chips": p.chips,
                    "current_bet": p.current_bet,
                    "is_folded": p.is_folded,
                    "is_all_in": p.is_all_in,
                    "hand": [card.to_dict() for card in p.hand] if reveal else [],
                }
                for p in self.players
            ],
        }