import random

import pytest

from pokerroom.game import Game, GameError, create_deck
from pokerroom.models import ActionKind, GameState, Player, PlayerAction

FOLD = PlayerAction(ActionKind.FOLD)
CHECK = PlayerAction(ActionKind.CHECK)
CALL = PlayerAction(ActionKind.CALL)
ALL_IN = PlayerAction(ActionKind.ALL_IN)


def make_game(count=3, chips=1000, seed=7):
    players = [Player(f"p{i}", f"Player {i}", chips) for i in range(count)]
    game = Game(players, random.Random(seed))
    game.start_round()
    return game


def total_chips(game):
    return sum(p.chips for p in game.players) + game.pot


def test_create_deck_has_52_distinct_cards():
    deck = create_deck()
    assert len(deck) == 52
    assert len(set(deck)) == 52


def test_new_game_shuffles_full_deck():
    game = Game([], random.Random(1))
    assert sorted(game.deck, key=lambda c: (c.suit.value, c.rank)) == sorted(
        create_deck(), key=lambda c: (c.suit.value, c.rank)
    )
    assert game.state is GameState.PRE_FLOP


def test_same_seed_same_shuffle():
    first = Game([], random.Random(3)).deck
    second = Game([], random.Random(3)).deck
    assert len(first) == 52
    assert first == second
    assert first != create_deck()


def test_same_seed_deals_same_hands():
    first = make_game(seed=11)
    second = make_game(seed=11)
    assert [p.hand for p in first.players] == [p.hand for p in second.players]
    assert first.deck == second.deck


def test_start_round_deals_and_posts_blinds():
    game = make_game()
    assert all(len(p.hand) == 2 for p in game.players)
    assert len(game.deck) == 52 - 6
    assert game.pot == game.small_blind + game.big_blind
    assert game.current_bet == game.big_blind
    assert game.players[1].current_bet == game.small_blind
    assert game.players[2].current_bet == game.big_blind
    assert game.round_bets == {"p1": game.small_blind, "p2": game.big_blind}
    assert game.current_player_index == 0
    assert total_chips(game) == 3000


def test_wrong_player_rejected():
    game = make_game()
    with pytest.raises(GameError, match="Não é sua vez de jogar"):
        game.process_action("p1", CALL)


def test_check_facing_bet_rejected():
    game = make_game()
    with pytest.raises(GameError, match="check"):
        game.process_action("p0", CHECK)
    assert game.current_player_index == 0


def test_raise_beyond_chips_rejected_without_change():
    game = make_game()
    with pytest.raises(GameError, match="Fichas insuficientes"):
        game.process_action("p0", PlayerAction(ActionKind.RAISE, 5000))
    assert game.pot == game.small_blind + game.big_blind
    assert game.players[0].chips == 1000


def test_calls_complete_preflop_and_deal_flop():
    game = make_game()
    game.process_action("p0", CALL)
    assert game.state is GameState.PRE_FLOP
    assert game.current_player_index == 1
    game.process_action("p1", CALL)
    assert game.state is GameState.FLOP
    assert len(game.community_cards) == 3
    assert game.current_bet == 0
    assert all(p.current_bet == 0 for p in game.players)
    assert game.round_bets == {}
    assert game.current_player_index == 1
    assert game.pot == 3 * game.big_blind


def test_checks_run_to_finished_and_reveal_hands():
    game = make_game()
    game.process_action("p0", CALL)
    game.process_action("p1", CALL)
    for expected in (GameState.TURN, GameState.RIVER, GameState.FINISHED):
        game.process_action("p1", CHECK)
        assert game.state is expected
    assert len(game.community_cards) == 5
    assert len(game.deck) == 52 - 6 - 3 - 5
    view = game.get_game_state()
    assert view["state"] == "Finished"
    assert all(len(p["hand"]) == 2 for p in view["players"])
    # No uncontested winner: the pot stays on the table.
    assert view["pot"] == 3 * game.big_blind


def test_last_remaining_player_takes_pot():
    game = make_game()
    game.process_action("p0", FOLD)
    game.process_action("p1", CALL)
    assert game.state is GameState.FLOP
    game.process_action("p1", PlayerAction(ActionKind.RAISE, 20))
    assert game.current_bet == 20
    game.process_action("p2", FOLD)
    assert game.state is GameState.RIVER
    game.process_action("p1", CHECK)
    assert game.state is GameState.FINISHED
    assert game.pot == 0
    assert total_chips(game) == 3000
    assert max(game.players, key=lambda p: p.chips).id == "p1"
    assert game.players[0].chips == 1000


def test_heads_up_fold_leaves_folded_player_to_act():
    game = make_game(count=2)
    assert game.current_player_index == 1
    game.process_action("p1", FOLD)
    assert game.state is GameState.FLOP
    with pytest.raises(GameError, match="Jogador já foldou"):
        game.process_action("p1", CHECK)


def test_all_in_marks_player_and_raises_bet():
    game = make_game(count=2)
    game.process_action("p1", ALL_IN)
    player = game.players[1]
    assert player.chips == 0
    assert player.is_all_in
    assert game.pot == 1000 + game.big_blind
    assert total_chips(game) == 2000
    assert game.state is GameState.FLOP


def test_call_with_short_stack_goes_all_in():
    players = [Player("a", "A", 4), Player("b", "B", 1000), Player("c", "C", 1000)]
    game = Game(players, random.Random(2))
    game.start_round()
    game.process_action("a", CALL)
    assert players[0].chips == 0
    assert players[0].is_all_in
    assert game.pot == 4 + game.small_blind + game.big_blind


def test_game_state_view_hides_hands_before_showdown():
    game = make_game()
    view = game.get_game_state()
    assert view["game_id"] == game.id
    assert view["state"] == "PreFlop"
    assert view["current_player"] == "p0"
    assert view["community_cards"] == []
    assert [p["id"] for p in view["players"]] == ["p0", "p1", "p2"]
    assert all(p["hand"] == [] for p in view["players"])


def test_game_state_view_without_players():
    view = Game([], random.Random(0)).get_game_state()
    assert view["current_player"] is None
    assert view["players"] == []


def test_start_round_resets_after_finish():
    game = make_game()
    game.process_action("p0", FOLD)
    game.process_action("p1", CALL)
    game.process_action("p1", PlayerAction(ActionKind.RAISE, 20))
    game.process_action("p2", FOLD)
    game.process_action("p1", CHECK)
    game.dealer_index = 1
    game.start_round()
    assert game.state is GameState.PRE_FLOP
    assert game.community_cards == []
    assert not any(p.is_folded for p in game.players)
    assert game.round_bets == {"p2": game.small_blind, "p0": game.big_blind}
    assert game.current_player_index == 1
    assert total_chips(game) == 3000