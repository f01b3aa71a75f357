from __future__ import annotations

import random
from dataclasses import dataclass, field

from .types import (
    CardCategory,
    CardTemplate,
    Difficulty,
    MagePassive,
    Phase,
    Side,
    TemplateRegistry,
    UnitAbility,
    opponent_of,
)

Event = dict[str, object]

LEADER_SLOT = 0


@dataclass(frozen=True)
class MatchConfig:
    starting_hand: int = 3
    max_hand: int = 7
    max_mana: int = 10
    board_slots: int = 8
    min_deck_size: int = 10
    max_deck_size: int = 20
    late_game_turn: int = 10
    early_draws: int = 1
    late_draws: int = 3
    leader_template_id: str = "t_leader"
    token_template_id: str = "t_token_wolf"


@dataclass(frozen=True)
class DifficultyModifiers:
    enemy_leader_health: int
    enemy_shield: int


DIFFICULTY_MODIFIERS: dict[Difficulty, DifficultyModifiers] = {
    "EASY": DifficultyModifiers(enemy_leader_health=20, enemy_shield=0),
    "NORMAL": DifficultyModifiers(enemy_leader_health=30, enemy_shield=0),
    "HARD": DifficultyModifiers(enemy_leader_health=40, enemy_shield=3),
    "HARDCORE": DifficultyModifiers(enemy_leader_health=50, enemy_shield=5),
}


@dataclass
class CardInstance:
    """A card on the battlefield, in a hand, deck or graveyard.

    Battlefield fields (attack, health, exhaustion, ability usage) live here;
    everything else is read from the template.
    """

    uid: str
    template_id: str
    name: str
    category: CardCategory
    cost: int
    value: int
    attack: int = 0
    health: int = 0
    max_health: int = 0
    exhausted: bool = True
    ability_used: bool = False
    frozen: bool = False
    mage_passive: MagePassive | None = None
    unit_ability: UnitAbility | None = None

    @staticmethod
    def from_template(uid: str, template: CardTemplate) -> "CardInstance":
        inst = CardInstance(
            uid=uid,
            template_id=template.id,
            name=template.name,
            category=template.category,
            cost=template.cost,
            value=template.value,
            mage_passive=template.mage_passive,
            unit_ability=template.unit_ability,
        )
        inst.reset(template)
        return inst

    def reset(self, template: CardTemplate) -> None:
        """Restore battlefield fields to the template's printed values."""
        max_health = template.max_health
        if max_health is None:
            max_health = template.health or 0
        self.attack = template.attack or 0
        self.health = template.health if template.health is not None else max_health
        self.max_health = max_health
        self.exhausted = True
        self.ability_used = False
        self.frozen = False

    def is_alive(self) -> bool:
        return self.health > 0

    def is_damaged(self) -> bool:
        return 0 < self.health < self.max_health


@dataclass
class SideState:
    id: Side
    mana: int
    max_mana: int
    hand: list[CardInstance]
    deck: list[CardInstance]
    board: list[CardInstance | None]
    graveyard: list[CardInstance] = field(default_factory=list)
    shield: int = 0
    # reserved for status effects; nothing decrements them yet
    status: dict[str, int] = field(
        default_factory=lambda: {"burn": 0, "poison": 0, "freeze": 0}
    )

    @property
    def leader(self) -> CardInstance | None:
        return self.board[LEADER_SLOT]

    def find_in_hand(self, uid: str) -> CardInstance | None:
        for card in self.hand:
            if card.uid == uid:
                return card
        return None


@dataclass
class MatchState:
    cards: TemplateRegistry
    config: MatchConfig
    seed: int
    rng: random.Random
    player: SideState
    enemy: SideState
    turn: int = 1
    phase: Phase = "INIT"
    winner: Side | None = None
    difficulty: Difficulty = "NORMAL"
    action_log: list[object] = field(default_factory=list)
    event_log: list[Event] = field(default_factory=list)
    next_uid: int = 0

    def side(self, side: Side) -> SideState:
        return self.player if side == "player" else self.enemy

    def opponent(self, side: Side) -> SideState:
        return self.side(opponent_of(side))

    @property
    def active_side(self) -> Side | None:
        if self.phase == "PLAYER_MAIN":
            return "player"
        if self.phase == "ENEMY_TURN":
            return "enemy"
        return None

    def new_instance(self, template_id: str, prefix: str = "c") -> CardInstance:
        self.next_uid += 1
        return CardInstance.from_template(f"{prefix}{self.next_uid}", self.cards.get(template_id))

    def emit(self, event_type: str, **payload: object) -> Event:
        event: Event = {"type": event_type, **payload}
        self.event_log.append(event)
        return event
