from __future__ import annotations

from collections.abc import Sequence

from .state import LEADER_SLOT, CardInstance, SideState
from .types import (
    BOARD_UNIT_CATEGORIES,
    DAMAGE_SPELL_CATEGORIES,
    SELF_SPELL_CATEGORIES,
    RejectReason,
    SlotRole,
)

SLOT_ROLES: tuple[SlotRole, ...] = (
    "LEADER",
    "TANK",
    "TANK",
    "UNIT",
    "UNIT",
    "MAGE",
    "MAGE",
    "UNIT",
)

TANK_SLOTS: tuple[int, ...] = (1, 2)
UNIT_SLOTS: tuple[int, ...] = (3, 4, 7)
MAGE_SLOTS: tuple[int, ...] = (5, 6)
BACKLINE_SLOTS: tuple[int, ...] = (LEADER_SLOT, 5, 6)


def slot_role(slot: int) -> SlotRole:
    return SLOT_ROLES[slot]


def _living(board: Sequence[CardInstance | None], slots: Sequence[int]) -> list[int]:
    out: list[int] = []
    for i in slots:
        c = board[i]
        if c is not None and c.is_alive():
            out.append(i)
    return out


def placement_error(side: SideState, card: CardInstance, slot: int) -> RejectReason | None:
    """Why `card` may not be placed into `slot` of `side`'s board, or None."""
    if slot < 0 or slot >= len(side.board):
        return "ILLEGAL_SLOT"
    role = slot_role(slot)
    if card.category in BOARD_UNIT_CATEGORIES:
        if role not in ("TANK", "UNIT"):
            return "ILLEGAL_SLOT"
    elif card.category == "MAGE":
        if role != "MAGE":
            return "ILLEGAL_SLOT"
    else:
        return "NOT_A_UNIT"

    occupant = side.board[slot]
    if occupant is None:
        return None
    if role == "MAGE" and card.category == "MAGE" and occupant.category == "MAGE":
        return None
    return "SLOT_OCCUPIED"


def can_place_unit(side: SideState, card: CardInstance, slot: int) -> bool:
    return placement_error(side, card, slot) is None


def is_mage_swap(side: SideState, card: CardInstance, slot: int) -> bool:
    occupant = side.board[slot]
    return (
        slot in MAGE_SLOTS
        and card.category == "MAGE"
        and occupant is not None
        and occupant.category == "MAGE"
    )


def spell_target_slot(card: CardInstance, target_slot: int | None) -> int:
    """The slot a spell lands on; self spells always hit the caster's Leader."""
    if card.category in SELF_SPELL_CATEGORIES or target_slot is None:
        return LEADER_SLOT
    return target_slot


def spell_target_error(
    caster: SideState, opponent: SideState, card: CardInstance, target_slot: int | None = None
) -> RejectReason | None:
    if card.category in SELF_SPELL_CATEGORIES:
        if caster.leader is None:
            return "NO_TARGET"
        return None
    if card.category not in DAMAGE_SPELL_CATEGORIES:
        return "NOT_A_SPELL"
    slot = spell_target_slot(card, target_slot)
    if slot < 0 or slot >= len(opponent.board):
        return "NO_TARGET"
    if opponent.board[slot] is None:
        return "NO_TARGET"
    return None


def can_cast_spell(
    caster: SideState, opponent: SideState, card: CardInstance, target_slot: int | None = None
) -> bool:
    if card.cost > caster.mana:
        return False
    return spell_target_error(caster, opponent, card, target_slot) is None


def legal_attack_targets(defender: SideState) -> list[int]:
    """Slots an attacker may hit under the frontline priority law.

    Living Tanks shield everything else; with no Tanks, living Units shield
    the backline (Leader and Mages).
    """
    tanks = _living(defender.board, TANK_SLOTS)
    if tanks:
        return tanks
    units = _living(defender.board, UNIT_SLOTS)
    if units:
        return units
    return [i for i in BACKLINE_SLOTS if defender.board[i] is not None]


def resolve_attack_target(defender: SideState, declared_slot: int) -> int | None:
    if declared_slot in legal_attack_targets(defender):
        return declared_slot
    return None


def slot_threat(card: CardInstance | None) -> int:
    if card is None or card.health <= 0:
        return 0
    return card.attack * 2 + card.health


def board_threat(side: SideState) -> int:
    return sum(slot_threat(c) for i, c in enumerate(side.board) if i != LEADER_SLOT)
