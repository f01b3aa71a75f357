from __future__ import annotations

import logging

from .state import MatchState
from .types import SIDES, Side, opponent_of

logger = logging.getLogger(__name__)


def leader_defeated(state: MatchState, side: Side) -> bool:
    leader = state.side(side).leader
    return leader is None or leader.health <= 0


def check_winner(state: MatchState) -> bool:
    """Declare a winner if a Leader has fallen. Returns True once the match is over."""
    if state.phase == "GAME_OVER":
        return True
    if state.phase == "INIT":
        return False
    for side in SIDES:
        if leader_defeated(state, side):
            state.winner = opponent_of(side)
            state.phase = "GAME_OVER"
            state.emit("GAME_OVER", side=state.winner, turn=state.turn)
            logger.info("match_over", extra={"winner": state.winner, "turn": state.turn})
            return True
    return False
