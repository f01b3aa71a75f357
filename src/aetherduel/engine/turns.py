from __future__ import annotations

from .passives import resolve_passives
from .state import MatchState
from .types import Side


def turn_mana(state: MatchState, side: Side) -> int:
    """Mana for `side`'s turn; the player's curve runs one turn ahead."""
    bonus = 1 if side == "player" else 0
    return max(0, min(state.turn + bonus, state.config.max_mana))


def draw_count(state: MatchState) -> int:
    if state.turn > state.config.late_game_turn:
        return state.config.late_draws
    return state.config.early_draws


def draw_card(state: MatchState, side: Side) -> None:
    ps = state.side(side)
    if not ps.deck and ps.graveyard:
        ps.deck = list(ps.graveyard)
        ps.graveyard = []
        state.rng.shuffle(ps.deck)
        state.emit("DECK_RESHUFFLED", side=side, amount=len(ps.deck))
    if not ps.deck:
        return
    card = ps.deck.pop()
    if len(ps.hand) < state.config.max_hand:
        ps.hand.append(card)
        state.emit("CARD_DRAWN", side=side, card_id=card.template_id, uid=card.uid)
    else:
        ps.graveyard.append(card)
        state.emit("CARD_BURNED", side=side, card_id=card.template_id, uid=card.uid)


def start_turn(state: MatchState, side: Side) -> None:
    ps = state.side(side)
    from_init = state.phase == "INIT"

    ps.mana = turn_mana(state, side)
    for _ in range(draw_count(state)):
        draw_card(state, side)

    for card in ps.board:
        if card is None:
            continue
        if card.frozen:
            card.frozen = False
            continue
        card.exhausted = False

    resolve_passives(state, side)

    if side == "player":
        state.phase = "PLAYER_MAIN"
        if not from_init:
            state.turn += 1
    else:
        state.phase = "ENEMY_TURN"
    state.emit("TURN_STARTED", side=side, turn=state.turn, amount=ps.mana)
