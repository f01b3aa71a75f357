from __future__ import annotations

from typing import Callable

from .board import TANK_SLOTS, is_mage_swap, spell_target_slot
from .state import LEADER_SLOT, CardInstance, MatchState, SideState
from .types import DAMAGE_SPELL_CATEGORIES, Side, opponent_of

ICE_SPEAR_TEMPLATE_ID = "t_s_ice_spear"
DARK_TANKER_HEALTH_BONUS = 3


def send_to_graveyard(state: MatchState, owner: SideState, card: CardInstance) -> None:
    card.reset(state.cards.get(card.template_id))
    owner.graveyard.append(card)


def damage_card(
    state: MatchState,
    side: Side,
    slot: int,
    amount: int,
    source_side: Side | None = None,
    source_slot: int | None = None,
) -> int:
    """Apply `amount` damage to the card in `slot` and return the health lost.

    A Leader spends its side's shield before losing health.
    """
    owner = state.side(side)
    card = owner.board[slot]
    if card is None or amount <= 0:
        return 0
    remainder = amount
    if card.category == "LEADER" and owner.shield > 0:
        absorbed = min(owner.shield, amount)
        owner.shield -= absorbed
        remainder = amount - absorbed
        state.emit(
            "SHIELD_ABSORBED",
            side=side,
            source_side=source_side,
            source_slot=source_slot,
            target_side=side,
            target_slot=slot,
            amount=absorbed,
        )
    if remainder <= 0:
        return 0
    card.health -= remainder
    state.emit(
        "DAMAGE",
        side=side,
        source_side=source_side,
        source_slot=source_slot,
        target_side=side,
        target_slot=slot,
        amount=remainder,
    )
    return remainder


def heal_card(
    state: MatchState,
    side: Side,
    slot: int,
    amount: int,
    source_slot: int | None = None,
) -> int:
    card = state.side(side).board[slot]
    if card is None or amount <= 0 or not card.is_alive():
        return 0
    before = card.health
    card.health = min(card.max_health, card.health + amount)
    healed = card.health - before
    if healed > 0:
        state.emit(
            "HEAL",
            side=side,
            source_side=side,
            source_slot=source_slot,
            target_side=side,
            target_slot=slot,
            amount=healed,
        )
    return healed


def destroy_dead(state: MatchState) -> None:
    """Move every non-Leader card at zero health or below to its graveyard."""
    for owner in (state.player, state.enemy):
        for slot, card in enumerate(owner.board):
            if card is None or slot == LEADER_SLOT:
                continue
            if card.health <= 0:
                owner.board[slot] = None
                send_to_graveyard(state, owner, card)
                state.emit(
                    "UNIT_DESTROYED",
                    side=owner.id,
                    target_side=owner.id,
                    target_slot=slot,
                    card_id=card.template_id,
                )


def resolve_melee(state: MatchState, side: Side, attacker_slot: int, defender_slot: int) -> None:
    """Bidirectional exchange between two validated board slots."""
    foe_side = opponent_of(side)
    attacker = state.side(side).board[attacker_slot]
    defender = state.side(foe_side).board[defender_slot]
    assert attacker is not None and defender is not None

    # both numbers come from the pre-exchange board
    damage_to_defender = attacker.attack
    damage_to_attacker = defender.attack

    state.emit(
        "ATTACK",
        side=side,
        source_side=side,
        source_slot=attacker_slot,
        target_side=foe_side,
        target_slot=defender_slot,
        amount=damage_to_defender,
    )
    damage_card(state, foe_side, defender_slot, damage_to_defender, side, attacker_slot)

    if (
        attacker.unit_ability == "DAMAGE_TO_HEAL"
        and not attacker.ability_used
        and damage_to_attacker > 0
    ):
        attacker.ability_used = True
        state.emit(
            "ABILITY_TRIGGERED",
            side=side,
            ability="DAMAGE_TO_HEAL",
            source_slot=attacker_slot,
            target_side=side,
            target_slot=attacker_slot,
            amount=damage_to_attacker,
        )
        heal_card(state, side, attacker_slot, damage_to_attacker, source_slot=attacker_slot)
    elif damage_to_attacker > 0:
        damage_card(state, side, attacker_slot, damage_to_attacker, foe_side, defender_slot)

    attacker.exhausted = True
    destroy_dead(state)


def resolve_spell(
    state: MatchState, side: Side, card: CardInstance, target_slot: int | None
) -> None:
    """Resolve a paid spell that has already left its caster's hand."""
    caster = state.side(side)
    foe_side = opponent_of(side)
    slot = spell_target_slot(card, target_slot)
    state.emit(
        "SPELL_CAST",
        side=side,
        card_id=card.template_id,
        target_side=foe_side if card.category in DAMAGE_SPELL_CATEGORIES else side,
        target_slot=slot,
        amount=card.value,
    )

    if card.category in DAMAGE_SPELL_CATEGORIES:
        target = state.side(foe_side).board[slot]
        dealt = damage_card(state, foe_side, slot, card.value, side, None)
        if card.category == "SPELL_FREEZE" and target is not None and target.is_alive():
            target.exhausted = True
            target.frozen = True
            state.emit("FROZEN", side=foe_side, target_side=foe_side, target_slot=slot)
        if card.category == "SPELL_VAMPIRIC" and dealt > 0:
            heal_card(state, side, LEADER_SLOT, dealt)
        destroy_dead(state)
    elif card.category == "SPELL_HEAL":
        heal_card(state, side, LEADER_SLOT, card.value)
    elif card.category == "DEFENSE":
        caster.shield += card.value
        state.emit(
            "SHIELD_GAINED",
            side=side,
            target_side=side,
            target_slot=LEADER_SLOT,
            amount=card.value,
        )


def grant_card(
    state: MatchState, side: Side, template_id: str, prefix: str = "gen"
) -> CardInstance | None:
    """Put a freshly generated card into `side`'s hand if there is room."""
    owner = state.side(side)
    if len(owner.hand) >= state.config.max_hand:
        state.emit("HAND_FULL", side=side, card_id=template_id)
        return None
    inst = state.new_instance(template_id, prefix=prefix)
    owner.hand.append(inst)
    state.emit("CARD_GENERATED", side=side, card_id=template_id, uid=inst.uid)
    return inst


def _attack_to_health(state: MatchState, side: Side, card: CardInstance, slot: int) -> None:
    if slot not in TANK_SLOTS or card.attack <= 0:
        return
    bonus = card.attack
    card.attack = 0
    card.health += bonus
    card.max_health += bonus
    state.emit(
        "PLACEMENT_BONUS",
        side=side,
        bonus="ATTACK_TO_HEALTH",
        target_side=side,
        target_slot=slot,
        amount=bonus,
    )


def _dark_tanker(state: MatchState, side: Side, card: CardInstance, slot: int) -> None:
    if slot not in TANK_SLOTS:
        return
    card.health += DARK_TANKER_HEALTH_BONUS
    card.max_health += DARK_TANKER_HEALTH_BONUS
    state.emit(
        "PLACEMENT_BONUS",
        side=side,
        bonus="TANK_HEALTH",
        target_side=side,
        target_slot=slot,
        amount=DARK_TANKER_HEALTH_BONUS,
    )


def _ice_vanguard(state: MatchState, side: Side, card: CardInstance, slot: int) -> None:
    grant_card(state, side, ICE_SPEAR_TEMPLATE_ID)


PlacementBonus = Callable[[MatchState, Side, CardInstance, int], None]

# One-off placement rules, keyed by template id.
PLACEMENT_BONUSES: dict[str, PlacementBonus] = {
    "t_u1": _attack_to_health,
    "t_u3": _attack_to_health,
    "t_u_dark_tanker": _dark_tanker,
    "t_u_ice_vanguard": _ice_vanguard,
}


def summon(state: MatchState, side: Side, card: CardInstance, slot: int) -> None:
    """Place a paid card that has already left its owner's hand."""
    owner = state.side(side)
    if is_mage_swap(owner, card, slot):
        incumbent = owner.board[slot]
        assert incumbent is not None
        owner.board[slot] = None
        send_to_graveyard(state, owner, incumbent)
        state.emit(
            "MAGE_SWAPPED",
            side=side,
            target_side=side,
            target_slot=slot,
            card_id=incumbent.template_id,
        )

    card.reset(state.cards.get(card.template_id))
    card.health = card.max_health
    owner.board[slot] = card
    state.emit(
        "UNIT_SUMMONED",
        side=side,
        card_id=card.template_id,
        uid=card.uid,
        target_side=side,
        target_slot=slot,
    )

    bonus = PLACEMENT_BONUSES.get(card.template_id)
    if bonus is not None:
        bonus(state, side, card, slot)
    if card.category == "SUMMONER":
        grant_card(state, side, state.config.token_template_id, prefix="token")
