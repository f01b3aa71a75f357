from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

CardCategory = Literal[
    "UNIT",
    "SUMMONER",
    "MAGE",
    "LEADER",
    "TOKEN",
    "ATTACK",
    "SPELL_DAMAGE",
    "SPELL_HEAL",
    "SPELL_FREEZE",
    "SPELL_VAMPIRIC",
    "DEFENSE",
]
MagePassive = Literal["DAMAGE_ENEMY_TANKS", "HEAL_FRIENDLY_TANKS", "HEAL_ALL_FRIENDLY"]
UnitAbility = Literal["DAMAGE_TO_HEAL", "AOE_FIRE_DAMAGE_TURN"]

SlotRole = Literal["LEADER", "TANK", "UNIT", "MAGE"]
Side = Literal["player", "enemy"]
Phase = Literal["INIT", "PLAYER_MAIN", "ENEMY_TURN", "GAME_OVER"]
Difficulty = Literal["EASY", "NORMAL", "HARD", "HARDCORE"]

RejectReason = Literal[
    "GAME_OVER",
    "NOT_YOUR_TURN",
    "UNKNOWN_CARD",
    "NOT_A_UNIT",
    "NOT_A_SPELL",
    "INSUFFICIENT_MANA",
    "ILLEGAL_SLOT",
    "SLOT_OCCUPIED",
    "NO_ATTACKER",
    "ATTACKER_EXHAUSTED",
    "NO_ATTACK",
    "TARGET_PRIORITY",
    "NO_TARGET",
    "UNKNOWN_ACTION",
]

SIDES: tuple[Side, Side] = ("player", "enemy")

# Cards that occupy a board slot when played from hand.
BOARD_UNIT_CATEGORIES: frozenset[str] = frozenset({"UNIT", "SUMMONER", "TOKEN"})
DAMAGE_SPELL_CATEGORIES: frozenset[str] = frozenset(
    {"ATTACK", "SPELL_DAMAGE", "SPELL_FREEZE", "SPELL_VAMPIRIC"}
)
SELF_SPELL_CATEGORIES: frozenset[str] = frozenset({"SPELL_HEAL", "DEFENSE"})
SPELL_CATEGORIES: frozenset[str] = DAMAGE_SPELL_CATEGORIES | SELF_SPELL_CATEGORIES


def opponent_of(side: Side) -> Side:
    return "enemy" if side == "player" else "player"


@dataclass(frozen=True)
class CardTemplate:
    id: str
    name: str
    cost: int
    value: int
    category: CardCategory
    description: str
    attack: int | None = None
    health: int | None = None
    max_health: int | None = None
    mage_passive: MagePassive | None = None
    unit_ability: UnitAbility | None = None

    @property
    def is_spell(self) -> bool:
        return self.category in SPELL_CATEGORIES

    @property
    def is_board_card(self) -> bool:
        return self.category in BOARD_UNIT_CATEGORIES or self.category == "MAGE"


@dataclass(frozen=True)
class TemplateRegistry:
    """Immutable card template lookup shared by every state of a match."""

    cards: dict[str, CardTemplate]

    def get(self, template_id: str) -> CardTemplate:
        return self.cards[template_id]

    def all_ids(self) -> Sequence[str]:
        return list(self.cards.keys())

    def find_category(self, category: CardCategory) -> list[CardTemplate]:
        return [c for c in self.cards.values() if c.category == category]

    def __deepcopy__(self, memo: dict[int, object]) -> "TemplateRegistry":
        return self
