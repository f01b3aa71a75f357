from __future__ import annotations

import pytest

from aetherduel.engine.actions import EndTurnAction, SummonAction
from aetherduel.engine.match import cast_spell, end_turn, new_match, step, summon_unit
from aetherduel.engine.serialize import snapshot
from aetherduel.engine.turns import draw_card, draw_count
from aetherduel.engine.victory import check_winner
from aetherduel.paths import get_paths
from aetherduel.services.content import ContentService


def _load_cards():
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    return content.load_templates()


def _match(seed: int = 1, difficulty: str = "NORMAL"):
    cards = _load_cards()
    deck = ["t_c2"] * 10  # Fireball, cost 3
    return new_match(cards, deck, deck, seed=seed, difficulty=difficulty)  # type: ignore[arg-type]


def test_opening_turn() -> None:
    state = _match()

    assert state.phase == "PLAYER_MAIN"
    assert state.turn == 1
    assert state.player.mana == 2
    # starting hand plus the first draw
    assert len(state.player.hand) == 4
    assert len(state.enemy.hand) == 3
    assert state.player.shield == 0
    assert state.player.status == {"burn": 0, "poison": 0, "freeze": 0}
    assert state.event_log[0]["type"] == "MATCH_STARTED"


def test_mana_stays_in_range_and_caps() -> None:
    state = _match(seed=7)

    for _ in range(12):
        for side in ("player", "enemy"):
            res = end_turn(state, side)  # type: ignore[arg-type]
            assert res.ok and res.state is not None
            state = res.state
            for ps in (state.player, state.enemy):
                assert 0 <= ps.mana <= 10

    assert state.turn == 13
    assert state.player.mana == 10


def test_enemy_mana_follows_turn_counter() -> None:
    state = _match()
    res = end_turn(state, "player")
    assert res.state is not None
    assert res.state.phase == "ENEMY_TURN"
    assert res.state.turn == 1
    assert res.state.enemy.mana == 1

    res = end_turn(res.state, "enemy")
    assert res.state is not None
    assert res.state.phase == "PLAYER_MAIN"
    assert res.state.turn == 2
    assert res.state.player.mana == 2


def test_late_game_draws_three() -> None:
    state = _match()
    state.turn = 10
    assert draw_count(state) == 1
    state.turn = 11
    assert draw_count(state) == 3


def test_reshuffle_graveyard_when_deck_is_empty() -> None:
    state = _match()
    ps = state.player
    ps.deck = []
    ps.graveyard = [state.new_instance("t_u2") for _ in range(3)]
    hand_before = len(ps.hand)

    draw_card(state, "player")

    assert ps.graveyard == []
    assert len(ps.deck) == 2
    assert len(ps.hand) == hand_before + 1
    types = [e["type"] for e in state.event_log]
    assert "DECK_RESHUFFLED" in types
    assert types[-1] == "CARD_DRAWN"


def test_no_draw_from_empty_deck_and_graveyard() -> None:
    state = _match()
    ps = state.player
    ps.deck = []
    ps.graveyard = []
    hand_before = len(ps.hand)

    draw_card(state, "player")

    assert len(ps.hand) == hand_before
    assert ps.deck == []


def test_draw_at_hand_cap_burns_card() -> None:
    state = _match()
    ps = state.player
    while len(ps.hand) < state.config.max_hand:
        ps.hand.append(state.new_instance("t_u2"))
    top = ps.deck[-1]

    draw_card(state, "player")

    assert len(ps.hand) == state.config.max_hand
    assert ps.graveyard[-1] is top
    assert state.event_log[-1]["type"] == "CARD_BURNED"


def test_turn_start_readies_own_board() -> None:
    state = _match()
    unit = state.new_instance("t_u2")
    state.player.board[3] = unit
    assert unit.exhausted

    res = end_turn(state, "player")
    assert res.state is not None
    # only the active side is readied
    assert res.state.player.board[3].exhausted  # type: ignore[union-attr]

    res = end_turn(res.state, "enemy")
    assert res.state is not None
    assert not res.state.player.board[3].exhausted  # type: ignore[union-attr]


def test_frozen_card_skips_one_refresh() -> None:
    state = _match()
    unit = state.new_instance("t_u2")
    unit.frozen = True
    state.player.board[3] = unit

    res = end_turn(state, "player")
    assert res.state is not None
    res = end_turn(res.state, "enemy")
    assert res.state is not None
    frozen = res.state.player.board[3]
    assert frozen is not None
    assert frozen.exhausted
    assert not frozen.frozen

    res = end_turn(res.state, "player")
    assert res.state is not None
    res = end_turn(res.state, "enemy")
    assert res.state is not None
    assert not res.state.player.board[3].exhausted  # type: ignore[union-attr]


def test_step_never_mutates_input() -> None:
    state = _match()
    state.player.mana = 10
    before = snapshot(state)
    uid = state.player.hand[0].uid

    res = cast_spell(state, "player", uid, 0)

    assert res.ok
    assert res.state is not state
    assert snapshot(state) == before
    assert state.enemy.leader is not None and state.enemy.leader.health == 30
    assert res.state is not None
    assert res.state.enemy.leader is not None and res.state.enemy.leader.health == 27
    assert res.state.cards is state.cards


def test_rejections_carry_reason_and_no_state() -> None:
    state = _match()
    before = snapshot(state)
    uid = state.player.hand[0].uid

    res = end_turn(state, "enemy")
    assert not res.ok
    assert res.reason == "NOT_YOUR_TURN"
    assert res.state is None
    assert res.events == []

    # Fireball costs 3, opening mana is 2
    res = cast_spell(state, "player", uid, 0)
    assert res.reason == "INSUFFICIENT_MANA"

    res = cast_spell(state, "player", "nope", 0)
    assert res.reason == "UNKNOWN_CARD"

    res = summon_unit(state, "player", uid, 3)
    assert res.reason == "NOT_A_UNIT"

    unit = state.new_instance("t_u2")
    state.player.hand.append(unit)
    res = cast_spell(state, "player", unit.uid, 0)
    assert res.reason == "NOT_A_SPELL"

    res = step(state, object())  # type: ignore[arg-type]
    assert res.reason == "UNKNOWN_ACTION"

    state.player.hand.remove(unit)
    assert snapshot(state) == before


def test_successful_step_is_logged() -> None:
    state = _match()
    res = step(state, EndTurnAction(side="player"))
    assert res.ok and res.state is not None
    assert res.state.action_log == [EndTurnAction(side="player")]
    assert [e["type"] for e in res.events][0] == "TURN_ENDED"
    assert res.events[-1]["type"] == "TURN_STARTED"
    assert all("type" in e for e in res.events)


def test_leader_kill_ends_match() -> None:
    state = _match()
    state.player.mana = 3
    assert state.enemy.leader is not None
    state.enemy.leader.health = 3

    res = cast_spell(state, "player", state.player.hand[0].uid, 0)

    assert res.ok and res.state is not None
    assert res.state.winner == "player"
    assert res.state.phase == "GAME_OVER"
    assert res.events[-1]["type"] == "GAME_OVER"

    after = end_turn(res.state, "player")
    assert not after.ok
    assert after.reason == "GAME_OVER"
    after = step(res.state, SummonAction(side="player", card_uid="x", slot=3))
    assert after.reason == "GAME_OVER"


def test_double_knockout_goes_to_enemy() -> None:
    state = _match()
    assert state.player.leader is not None and state.enemy.leader is not None
    state.player.leader.health = 0
    state.enemy.leader.health = -2

    assert check_winner(state)
    assert state.winner == "enemy"


def test_missing_leader_loses() -> None:
    state = _match()
    state.enemy.board[0] = None
    assert check_winner(state)
    assert state.winner == "player"


def test_no_winner_check_during_init() -> None:
    state = _match()
    state.phase = "INIT"
    state.player.board[0] = None
    assert not check_winner(state)
    assert state.winner is None


@pytest.mark.parametrize(
    ("difficulty", "health", "shield"),
    [("EASY", 20, 0), ("NORMAL", 30, 0), ("HARD", 40, 3), ("HARDCORE", 50, 5)],
)
def test_difficulty_adjusts_enemy_leader(difficulty: str, health: int, shield: int) -> None:
    state = _match(difficulty=difficulty)
    leader = state.enemy.leader
    assert leader is not None
    assert leader.health == health
    assert leader.max_health == health
    assert state.enemy.shield == shield
    assert state.player.leader is not None and state.player.leader.health == 30


def test_invalid_decks_raise() -> None:
    cards = _load_cards()
    good = ["t_c2"] * 10
    with pytest.raises(ValueError):
        new_match(cards, ["t_c2"] * 5, good, seed=1)
    with pytest.raises(ValueError):
        new_match(cards, good, ["t_leader"] + ["t_c2"] * 9, seed=1)
    with pytest.raises(ValueError):
        new_match(cards, good, ["no_such_card"] * 10, seed=1)


def test_instance_uids_are_unique() -> None:
    state = _match()
    uids = []
    for ps in (state.player, state.enemy):
        uids += [c.uid for c in ps.hand + ps.deck + ps.graveyard]
        uids += [c.uid for c in ps.board if c is not None]
    assert len(uids) == len(set(uids)) == 22
