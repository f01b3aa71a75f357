from __future__ import annotations

from aetherduel.engine.actions import AttackAction, CastAction, EndTurnAction, SummonAction
from aetherduel.engine.match import (
    new_match,
    replay,
    step,
    valid_attack_targets,
    valid_spell_targets,
    valid_summon_slots,
)
from aetherduel.engine.serialize import snapshot
from aetherduel.paths import get_paths
from aetherduel.services.content import ContentService


def _load_cards():
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    return content.load_templates()


def _choose_action(state) -> object:
    side = state.active_side
    ps = state.side(side)

    # Prefer playable units
    for card in ps.hand:
        if card.cost > ps.mana:
            continue
        slots = valid_summon_slots(state, side, card.uid)
        if slots:
            return SummonAction(side=side, card_uid=card.uid, slot=slots[0])

    # Then spells, aimed at the Leader when it is a legal target
    for card in ps.hand:
        if card.cost > ps.mana or card.category in ("UNIT", "SUMMONER", "TOKEN", "MAGE"):
            continue
        targets = valid_spell_targets(state, side, card.uid)
        return CastAction(side=side, card_uid=card.uid, target_slot=targets[0] if targets else None)

    # Then attacks
    targets = valid_attack_targets(state, side)
    for slot, c in enumerate(ps.board):
        if c is None or c.exhausted or c.attack <= 0 or not targets:
            continue
        return AttackAction(side=side, attacker_slot=slot, defender_slot=targets[0])

    return EndTurnAction(side=side)


def test_engine_determinism_replay() -> None:
    cards = _load_cards()

    # Mixed decks so shuffling matters, but deterministic via seed.
    deck0 = (["t_u2"] * 5) + (["t_c2"] * 5) + (["t_mage_pyro"] * 2)
    deck1 = (["t_u1"] * 5) + (["t_c3"] * 5) + (["t_u5"] * 2)

    seed = 424242
    state1 = new_match(cards, deck0, deck1, seed=seed)

    actions = []
    for _ in range(80):
        if state1.winner is not None:
            break
        a = _choose_action(state1)
        res = step(state1, a)
        assert res.ok and res.state is not None
        actions.append(a)
        state1 = res.state

    snap1 = snapshot(state1)

    state2 = replay(cards, deck0, deck1, seed=seed, actions=actions)
    snap2 = snapshot(state2)

    assert snap1 == snap2
    assert state1.event_log == state2.event_log


def test_same_seed_same_opening() -> None:
    cards = _load_cards()
    deck = ["t_u1", "t_u2", "t_u3", "t_u4", "t_u5", "t_c1", "t_c2", "t_c3", "t_c4", "t_c5"]

    a = new_match(cards, deck, deck, seed=99)
    b = new_match(cards, deck, deck, seed=99)

    assert snapshot(a) == snapshot(b)
    assert [c.template_id for c in a.player.hand] == [c.template_id for c in b.player.hand]
