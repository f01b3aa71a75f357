from __future__ import annotations

import copy
import logging
import random
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .actions import Action, AttackAction, CastAction, EndTurnAction, SummonAction
from .board import (
    legal_attack_targets,
    placement_error,
    resolve_attack_target,
    spell_target_error,
)
from .combat import resolve_melee, resolve_spell, summon
from .state import (
    DIFFICULTY_MODIFIERS,
    LEADER_SLOT,
    Event,
    MatchConfig,
    MatchState,
    SideState,
)
from .turns import start_turn
from .types import (
    BOARD_UNIT_CATEGORIES,
    DAMAGE_SPELL_CATEGORIES,
    SPELL_CATEGORIES,
    Difficulty,
    RejectReason,
    Side,
    TemplateRegistry,
    opponent_of,
)
from .victory import check_winner

logger = logging.getLogger(__name__)


@dataclass
class StepResult:
    ok: bool
    events: list[Event] = field(default_factory=list)
    state: MatchState | None = None
    error: str | None = None
    reason: RejectReason | None = None


def _reject(reason: RejectReason, error: str) -> StepResult:
    logger.debug("intent_rejected", extra={"reason": reason, "error": error})
    return StepResult(ok=False, events=[], state=None, error=error, reason=reason)


def _check_turn(state: MatchState, side: Side) -> StepResult | None:
    if state.active_side != side:
        return _reject("NOT_YOUR_TURN", "Not your turn.")
    return None


def _summon(state: MatchState, action: SummonAction) -> StepResult | None:
    chk = _check_turn(state, action.side)
    if chk:
        return chk
    ps = state.side(action.side)
    card = ps.find_in_hand(action.card_uid)
    if card is None:
        return _reject("UNKNOWN_CARD", "Card is not in hand.")
    if card.category not in BOARD_UNIT_CATEGORIES and card.category != "MAGE":
        return _reject("NOT_A_UNIT", "Only units and mages can be summoned.")
    if card.cost > ps.mana:
        return _reject("INSUFFICIENT_MANA", "Not enough mana.")
    reason = placement_error(ps, card, action.slot)
    if reason is not None:
        return _reject(reason, f"Cannot place {card.name} in slot {action.slot}.")

    ps.mana -= card.cost
    ps.hand.remove(card)
    summon(state, action.side, card, action.slot)
    return None


def _cast(state: MatchState, action: CastAction) -> StepResult | None:
    chk = _check_turn(state, action.side)
    if chk:
        return chk
    ps = state.side(action.side)
    card = ps.find_in_hand(action.card_uid)
    if card is None:
        return _reject("UNKNOWN_CARD", "Card is not in hand.")
    if card.category not in SPELL_CATEGORIES:
        return _reject("NOT_A_SPELL", "Only spells can be cast.")
    if card.cost > ps.mana:
        return _reject("INSUFFICIENT_MANA", "Not enough mana.")
    reason = spell_target_error(ps, state.opponent(action.side), card, action.target_slot)
    if reason is not None:
        return _reject(reason, "No legal target for that spell.")

    ps.mana -= card.cost
    ps.hand.remove(card)
    ps.graveyard.append(card)
    resolve_spell(state, action.side, card, action.target_slot)
    return None


def _attack(state: MatchState, action: AttackAction) -> StepResult | None:
    chk = _check_turn(state, action.side)
    if chk:
        return chk
    ps = state.side(action.side)
    if action.attacker_slot < 0 or action.attacker_slot >= len(ps.board):
        return _reject("NO_ATTACKER", "Invalid attacker slot.")
    attacker = ps.board[action.attacker_slot]
    if attacker is None:
        return _reject("NO_ATTACKER", "No unit in that slot.")
    if attacker.exhausted:
        return _reject("ATTACKER_EXHAUSTED", "Unit is exhausted.")
    if attacker.attack <= 0:
        return _reject("NO_ATTACK", "Unit has no attack.")

    defender = state.opponent(action.side)
    if resolve_attack_target(defender, action.defender_slot) is None:
        if not legal_attack_targets(defender):
            return _reject("NO_TARGET", "Nothing to attack.")
        return _reject("TARGET_PRIORITY", "Blocked by frontline.")

    resolve_melee(state, action.side, action.attacker_slot, action.defender_slot)
    return None


def _end_turn(state: MatchState, action: EndTurnAction) -> StepResult | None:
    chk = _check_turn(state, action.side)
    if chk:
        return chk
    state.emit("TURN_ENDED", side=action.side, turn=state.turn)
    start_turn(state, opponent_of(action.side))
    return None


def step(state: MatchState, action: Action) -> StepResult:
    """Validate and apply one intent.

    `state` is never mutated: the intent is applied to a copy, which is
    returned on success. A rejection carries no state and no events.
    """
    if state.phase == "GAME_OVER" or state.winner is not None:
        return _reject("GAME_OVER", "Match already ended.")

    nxt = copy.deepcopy(state)
    mark = len(nxt.event_log)

    if isinstance(action, SummonAction):
        rejected = _summon(nxt, action)
    elif isinstance(action, CastAction):
        rejected = _cast(nxt, action)
    elif isinstance(action, AttackAction):
        rejected = _attack(nxt, action)
    elif isinstance(action, EndTurnAction):
        rejected = _end_turn(nxt, action)
    else:
        return _reject("UNKNOWN_ACTION", "Unknown action.")
    if rejected is not None:
        return rejected

    nxt.action_log.append(action)
    check_winner(nxt)
    return StepResult(ok=True, events=nxt.event_log[mark:], state=nxt)


def summon_unit(state: MatchState, side: Side, card_uid: str, slot: int) -> StepResult:
    return step(state, SummonAction(side=side, card_uid=card_uid, slot=slot))


def cast_spell(
    state: MatchState, side: Side, card_uid: str, target_slot: int | None = None
) -> StepResult:
    return step(state, CastAction(side=side, card_uid=card_uid, target_slot=target_slot))


def declare_attack(
    state: MatchState, side: Side, attacker_slot: int, defender_slot: int
) -> StepResult:
    return step(
        state, AttackAction(side=side, attacker_slot=attacker_slot, defender_slot=defender_slot)
    )


def end_turn(state: MatchState, side: Side) -> StepResult:
    return step(state, EndTurnAction(side=side))


def valid_summon_slots(state: MatchState, side: Side, card_uid: str) -> list[int]:
    ps = state.side(side)
    card = ps.find_in_hand(card_uid)
    if card is None:
        return []
    return [i for i in range(len(ps.board)) if placement_error(ps, card, i) is None]


def valid_spell_targets(state: MatchState, side: Side, card_uid: str) -> list[int]:
    """Opposing slots a damage spell may hit. Self spells need no target and return []."""
    card = state.side(side).find_in_hand(card_uid)
    if card is None or card.category not in DAMAGE_SPELL_CATEGORIES:
        return []
    return [i for i, c in enumerate(state.opponent(side).board) if c is not None]


def valid_attack_targets(state: MatchState, side: Side) -> list[int]:
    return legal_attack_targets(state.opponent(side))


def deck_problems(cards: TemplateRegistry, deck: Sequence[str], config: MatchConfig) -> list[str]:
    problems: list[str] = []
    if len(deck) < config.min_deck_size or len(deck) > config.max_deck_size:
        problems.append(
            f"Deck must hold between {config.min_deck_size} and {config.max_deck_size} cards."
        )
    for card_id in deck:
        if card_id not in cards.cards:
            problems.append(f"Unknown card: {card_id}")
            continue
        if cards.get(card_id).category in ("LEADER", "TOKEN"):
            problems.append(f"{card_id} cannot be put in a deck.")
    return problems


def _new_side(side: Side, cfg: MatchConfig) -> SideState:
    return SideState(
        id=side,
        mana=0,
        max_mana=cfg.max_mana,
        hand=[],
        deck=[],
        board=[None for _ in range(cfg.board_slots)],
    )


def _fill_side(state: MatchState, ps: SideState, deck: Sequence[str]) -> None:
    ps.deck = [state.new_instance(card_id) for card_id in deck]
    state.rng.shuffle(ps.deck)
    ps.board[LEADER_SLOT] = state.new_instance(state.config.leader_template_id, prefix="leader")


def new_match(
    cards: TemplateRegistry,
    player_deck: Sequence[str],
    enemy_deck: Sequence[str],
    seed: int,
    difficulty: Difficulty = "NORMAL",
    config: MatchConfig | None = None,
) -> MatchState:
    cfg = config or MatchConfig()
    for deck in (player_deck, enemy_deck):
        problems = deck_problems(cards, deck, cfg)
        if problems:
            raise ValueError("; ".join(problems))

    state = MatchState(
        cards=cards,
        config=cfg,
        seed=seed,
        rng=random.Random(seed),
        player=_new_side("player", cfg),
        enemy=_new_side("enemy", cfg),
        difficulty=difficulty,
    )
    _fill_side(state, state.player, player_deck)
    _fill_side(state, state.enemy, enemy_deck)

    mods = DIFFICULTY_MODIFIERS[difficulty]
    enemy_leader = state.enemy.leader
    assert enemy_leader is not None
    enemy_leader.health = mods.enemy_leader_health
    enemy_leader.max_health = mods.enemy_leader_health
    state.enemy.shield = mods.enemy_shield

    for ps in (state.player, state.enemy):
        for _ in range(cfg.starting_hand):
            if ps.deck:
                ps.hand.append(ps.deck.pop())

    state.emit("MATCH_STARTED", seed=seed, difficulty=difficulty)
    start_turn(state, "player")
    check_winner(state)
    return state


def replay(
    cards: TemplateRegistry,
    player_deck: Sequence[str],
    enemy_deck: Sequence[str],
    seed: int,
    actions: Iterable[Action],
    difficulty: Difficulty = "NORMAL",
    config: MatchConfig | None = None,
) -> MatchState:
    state = new_match(cards, player_deck, enemy_deck, seed, difficulty=difficulty, config=config)
    for a in actions:
        res = step(state, a)
        if res.ok and res.state is not None:
            state = res.state
        if state.winner is not None:
            break
    return state
