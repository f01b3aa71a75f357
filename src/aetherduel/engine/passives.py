"""Turn-start passive effects: mage auras and per-turn unit abilities."""

from __future__ import annotations

from .board import MAGE_SLOTS, TANK_SLOTS
from .combat import damage_card, destroy_dead, heal_card
from .state import LEADER_SLOT, MatchState
from .types import MagePassive, Side, opponent_of

PASSIVE_MAGNITUDE = 1


def _report(
    state: MatchState,
    side: Side,
    effect: str,
    source_slot: int,
    target_side: Side,
    target_slot: int,
    amount: int,
) -> None:
    state.emit(
        "PASSIVE",
        side=side,
        effect=effect,
        source_side=side,
        source_slot=source_slot,
        target_side=target_side,
        target_slot=target_slot,
        amount=amount,
    )


def _apply_mage(state: MatchState, side: Side, source_slot: int, passive: MagePassive) -> None:
    foe_side = opponent_of(side)
    own = state.side(side)
    foe = state.side(foe_side)

    if passive == "DAMAGE_ENEMY_TANKS":
        for slot in TANK_SLOTS:
            target = foe.board[slot]
            if target is None or not target.is_alive():
                continue
            dealt = damage_card(state, foe_side, slot, PASSIVE_MAGNITUDE, side, source_slot)
            _report(state, side, passive, source_slot, foe_side, slot, dealt)
        destroy_dead(state)
        return

    if passive == "HEAL_FRIENDLY_TANKS":
        slots: tuple[int, ...] = TANK_SLOTS
    else:
        slots = tuple(i for i in range(len(own.board)) if i != LEADER_SLOT)
    for slot in slots:
        target = own.board[slot]
        if target is None or not target.is_damaged():
            continue
        healed = heal_card(state, side, slot, PASSIVE_MAGNITUDE, source_slot=source_slot)
        _report(state, side, passive, source_slot, side, slot, healed)


def resolve_passives(state: MatchState, side: Side) -> None:
    """Run `side`'s passives against the opposing board, mage slot 5 before 6."""
    own = state.side(side)
    for slot in MAGE_SLOTS:
        mage = own.board[slot]
        if mage is None or mage.category != "MAGE" or mage.exhausted:
            continue
        if mage.mage_passive is None:
            continue
        _apply_mage(state, side, slot, mage.mage_passive)

    foe_side = opponent_of(side)
    foe = state.side(foe_side)
    for slot, unit in enumerate(own.board):
        if unit is None or unit.unit_ability != "AOE_FIRE_DAMAGE_TURN" or not unit.is_alive():
            continue
        for target_slot, target in enumerate(foe.board):
            if target is None or target_slot == LEADER_SLOT or not target.is_alive():
                continue
            dealt = damage_card(state, foe_side, target_slot, PASSIVE_MAGNITUDE, side, slot)
            _report(state, side, "AOE_FIRE_DAMAGE_TURN", slot, foe_side, target_slot, dealt)
        destroy_dead(state)
