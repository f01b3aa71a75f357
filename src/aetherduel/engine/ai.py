from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable

from .actions import Action, AttackAction, CastAction, EndTurnAction, SummonAction
from .board import (
    MAGE_SLOTS,
    TANK_SLOTS,
    UNIT_SLOTS,
    board_threat,
    can_cast_spell,
    can_place_unit,
    legal_attack_targets,
    slot_threat,
)
from .match import StepResult, step
from .state import LEADER_SLOT, CardInstance, Event, MatchState, SideState
from .types import BOARD_UNIT_CATEGORIES, DAMAGE_SPELL_CATEGORIES, SPELL_CATEGORIES, Side

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AISpec:
    """Thresholds for the rule-based opponent.

    heal_threshold: Leader health ratio below which a heal is an emergency.
    pressure_threshold: Leader health ratio below which shields are raised.
    pressure_board_threat: opposing board threat that also counts as pressure.
    spell_threat_floor: damage spells are held unless a target beats this.
    """

    heal_threshold: float = 0.3
    pressure_threshold: float = 0.4
    pressure_board_threat: int = 20
    spell_threat_floor: int = 5


Rule = Callable[[MatchState, Side, AISpec], Action | None]


def _affordable(ps: SideState) -> list[CardInstance]:
    return [c for c in ps.hand if c.cost <= ps.mana]


def _leader_ratio(ps: SideState) -> float:
    leader = ps.leader
    if leader is None or leader.max_health <= 0:
        return 0.0
    return leader.health / leader.max_health


def is_tank_profile(card: CardInstance) -> bool:
    return card.health >= 4 and card.attack <= 3


def _emergency_heal(state: MatchState, side: Side, spec: AISpec) -> Action | None:
    ps = state.side(side)
    if _leader_ratio(ps) >= spec.heal_threshold:
        return None
    for c in _affordable(ps):
        if c.category == "SPELL_HEAL":
            return CastAction(side=side, card_uid=c.uid)
    return None


def _deploy_mage(state: MatchState, side: Side, spec: AISpec) -> Action | None:
    ps = state.side(side)
    mages = [c for c in _affordable(ps) if c.category == "MAGE"]
    if not mages:
        return None
    candidate = max(mages, key=slot_threat)
    for slot in MAGE_SLOTS:
        if ps.board[slot] is None:
            return SummonAction(side=side, card_uid=candidate.uid, slot=slot)
    weakest = min(MAGE_SLOTS, key=lambda i: slot_threat(ps.board[i]))
    upgrade = slot_threat(candidate) > slot_threat(ps.board[weakest])
    if upgrade and can_place_unit(ps, candidate, weakest):
        return SummonAction(side=side, card_uid=candidate.uid, slot=weakest)
    return None


def _deploy_unit(state: MatchState, side: Side, spec: AISpec) -> Action | None:
    ps = state.side(side)
    units = [c for c in _affordable(ps) if c.category in BOARD_UNIT_CATEGORIES]
    units.sort(key=slot_threat, reverse=True)
    for c in units:
        order = TANK_SLOTS + UNIT_SLOTS if is_tank_profile(c) else UNIT_SLOTS + TANK_SLOTS
        for slot in order:
            if can_place_unit(ps, c, slot):
                return SummonAction(side=side, card_uid=c.uid, slot=slot)
    return None


def _damage_spell(state: MatchState, side: Side, spec: AISpec) -> Action | None:
    ps = state.side(side)
    spells = [c for c in _affordable(ps) if c.category in DAMAGE_SPELL_CATEGORIES]
    if not spells:
        return None
    foe = state.opponent(side)
    target = max(range(len(foe.board)), key=lambda i: slot_threat(foe.board[i]))
    if slot_threat(foe.board[target]) <= spec.spell_threat_floor:
        return None
    spell = max(spells, key=lambda c: (c.value, c.cost))
    if not can_cast_spell(ps, foe, spell, target):
        return None
    return CastAction(side=side, card_uid=spell.uid, target_slot=target)


def _shield_up(state: MatchState, side: Side, spec: AISpec) -> Action | None:
    ps = state.side(side)
    pressured = (
        _leader_ratio(ps) < spec.pressure_threshold
        or board_threat(state.opponent(side)) > spec.pressure_board_threat
    )
    if not pressured:
        return None
    for c in _affordable(ps):
        if c.category == "DEFENSE":
            return CastAction(side=side, card_uid=c.uid)
    return None


def _support_spell(state: MatchState, side: Side, spec: AISpec) -> Action | None:
    ps = state.side(side)
    foe = state.opponent(side)
    spells = [c for c in _affordable(ps) if c.category in SPELL_CATEGORIES]
    spells.sort(key=lambda c: c.cost, reverse=True)
    for c in spells:
        if can_cast_spell(ps, foe, c):
            return CastAction(side=side, card_uid=c.uid)
    return None


# First match wins.
RULES: list[tuple[str, Rule]] = [
    ("emergency_heal", _emergency_heal),
    ("deploy_mage", _deploy_mage),
    ("deploy_unit", _deploy_unit),
    ("damage_spell", _damage_spell),
    ("shield_up", _shield_up),
    ("support_spell", _support_spell),
]


def get_enemy_move(state: MatchState, side: Side = "enemy", spec: AISpec | None = None) -> Action:
    """Pick exactly one intent for `side`. Reads `state` only."""
    spec = spec or AISpec()
    for name, rule in RULES:
        action = rule(state, side, spec)
        if action is not None:
            logger.debug("ai_rule_matched", extra={"rule": name, "side": side})
            return action
    return EndTurnAction(side=side)


def choose_attack(state: MatchState, side: Side, rng: random.Random) -> AttackAction | None:
    """First ready attacker against a uniformly random legal target."""
    targets = legal_attack_targets(state.opponent(side))
    if not targets:
        return None
    for slot, c in enumerate(state.side(side).board):
        if c is None or slot == LEADER_SLOT:
            continue
        if c.exhausted or c.attack <= 0 or not c.is_alive():
            continue
        return AttackAction(side=side, attacker_slot=slot, defender_slot=rng.choice(targets))
    return None


def ai_take_turn(
    state: MatchState,
    side: Side = "enemy",
    spec: AISpec | None = None,
    rng: random.Random | None = None,
) -> StepResult:
    """Play out `side`'s whole turn: every ready attack, then one intent per cycle.

    Randomness comes from `rng` (seeded from the match seed and turn by
    default) so the match state's own generator is left untouched.
    """
    if state.active_side != side:
        return StepResult(ok=False, error="Not your turn.", reason="NOT_YOUR_TURN")
    spec = spec or AISpec()
    rng = rng or random.Random(state.seed * 7919 + state.turn)
    events: list[Event] = []

    while state.winner is None:
        atk = choose_attack(state, side, rng)
        if atk is None:
            break
        res = step(state, atk)
        if not res.ok or res.state is None:
            break
        state = res.state
        events.extend(res.events)

    while state.winner is None and state.active_side == side:
        move = get_enemy_move(state, side, spec)
        res = step(state, move)
        if not res.ok:
            logger.warning("ai_move_rejected", extra={"side": side, "reason": res.reason})
            res = step(state, EndTurnAction(side=side))
        if not res.ok or res.state is None:
            break
        state = res.state
        events.extend(res.events)

    return StepResult(ok=True, events=events, state=state)
