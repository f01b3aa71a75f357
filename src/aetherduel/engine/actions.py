from __future__ import annotations

from dataclasses import dataclass

from .types import Side


@dataclass(frozen=True)
class SummonAction:
    side: Side
    card_uid: str
    slot: int


@dataclass(frozen=True)
class CastAction:
    side: Side
    card_uid: str
    target_slot: int | None = None


@dataclass(frozen=True)
class AttackAction:
    side: Side
    attacker_slot: int
    defender_slot: int


@dataclass(frozen=True)
class EndTurnAction:
    side: Side


Action = SummonAction | CastAction | AttackAction | EndTurnAction
