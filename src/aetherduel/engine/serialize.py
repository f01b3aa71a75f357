from __future__ import annotations

from .actions import Action, AttackAction, CastAction, EndTurnAction, SummonAction
from .state import CardInstance, MatchState, SideState


def action_to_dict(a: Action) -> dict[str, object]:
    if isinstance(a, SummonAction):
        return {"type": "summon", "side": a.side, "card_uid": a.card_uid, "slot": a.slot}
    if isinstance(a, CastAction):
        return {
            "type": "cast",
            "side": a.side,
            "card_uid": a.card_uid,
            "target_slot": a.target_slot,
        }
    if isinstance(a, AttackAction):
        return {
            "type": "attack",
            "side": a.side,
            "attacker_slot": a.attacker_slot,
            "defender_slot": a.defender_slot,
        }
    if isinstance(a, EndTurnAction):
        return {"type": "end_turn", "side": a.side}
    # should be unreachable
    return {"type": "unknown"}


def _card_to_dict(c: CardInstance | None) -> dict[str, object] | None:
    if c is None:
        return None
    return {
        "uid": c.uid,
        "card_id": c.template_id,
        "attack": c.attack,
        "health": c.health,
        "max_health": c.max_health,
        "exhausted": c.exhausted,
        "frozen": c.frozen,
        "ability_used": c.ability_used,
    }


def _side_to_dict(p: SideState) -> dict[str, object]:
    return {
        "mana": p.mana,
        "max_mana": p.max_mana,
        "shield": p.shield,
        "deck": [c.uid for c in p.deck],
        "hand": [c.uid for c in p.hand],
        "board": [_card_to_dict(c) for c in p.board],
        "graveyard": [c.uid for c in p.graveyard],
        "status": dict(p.status),
    }


def snapshot(state: MatchState) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current match state."""
    return {
        "seed": state.seed,
        "turn": state.turn,
        "phase": state.phase,
        "winner": state.winner,
        "difficulty": state.difficulty,
        "player": _side_to_dict(state.player),
        "enemy": _side_to_dict(state.enemy),
        "action_log": [action_to_dict(a) for a in state.action_log],  # type: ignore[arg-type]
    }
