"""Deterministic, headless rules engine for Aether Duel.

IMPORTANT: This package must never import presentation code.
"""

from .actions import AttackAction, CastAction, EndTurnAction, SummonAction
from .ai import AISpec, ai_take_turn, get_enemy_move
from .match import (
    StepResult,
    cast_spell,
    declare_attack,
    end_turn,
    new_match,
    step,
    summon_unit,
)
from .state import CardInstance, MatchConfig, MatchState, SideState
from .types import CardCategory, CardTemplate, Side, TemplateRegistry

__all__ = [
    "AISpec",
    "AttackAction",
    "CardCategory",
    "CardInstance",
    "CardTemplate",
    "CastAction",
    "EndTurnAction",
    "MatchConfig",
    "MatchState",
    "Side",
    "SideState",
    "StepResult",
    "SummonAction",
    "TemplateRegistry",
    "ai_take_turn",
    "cast_spell",
    "declare_attack",
    "end_turn",
    "get_enemy_move",
    "new_match",
    "step",
    "summon_unit",
]
