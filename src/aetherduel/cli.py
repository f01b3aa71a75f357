from __future__ import annotations

import argparse
import logging
from pathlib import Path

from aetherduel.engine.ai import AISpec, ai_take_turn
from aetherduel.engine.match import new_match
from aetherduel.engine.serialize import snapshot
from aetherduel.paths import get_paths
from aetherduel.services.content import ContentService
from aetherduel.services.telemetry import TelemetryService

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="aetherduel-sim", description="Run a headless AI-versus-AI match."
    )
    parser.add_argument("--seed", type=int, default=1)
    parser.add_argument(
        "--difficulty", choices=["EASY", "NORMAL", "HARD", "HARDCORE"], default="NORMAL"
    )
    parser.add_argument("--player-deck", default="base")
    parser.add_argument("--enemy-deck", default="base")
    parser.add_argument("--max-turns", type=int, default=60)
    parser.add_argument(
        "--telemetry",
        nargs="?",
        const="auto",
        default=None,
        help="JSONL event log path; bare flag writes under userdata/matches",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    cards = content.load_templates()
    decks = content.load_decks()
    for name in (args.player_deck, args.enemy_deck):
        if name not in decks:
            parser.error(f"unknown deck {name!r}; choose from {', '.join(sorted(decks))}")
    telemetry = None
    if args.telemetry == "auto":
        telemetry = TelemetryService(paths.match_log(args.seed))
    elif args.telemetry:
        telemetry = TelemetryService(Path(args.telemetry))

    state = new_match(
        cards,
        decks[args.player_deck],
        decks[args.enemy_deck],
        seed=args.seed,
        difficulty=args.difficulty,
    )
    if telemetry:
        telemetry.log_events(state.event_log)

    spec = AISpec()
    while state.winner is None and state.turn <= args.max_turns:
        side = state.active_side
        if side is None:
            break
        res = ai_take_turn(state, side, spec)
        if not res.ok or res.state is None:
            logger.error("turn_failed: %s", res.error)
            return 1
        state = res.state
        if telemetry:
            telemetry.log_events(res.events)

    if telemetry:
        telemetry.log("FINAL_SNAPSHOT", snapshot(state))

    if state.winner is None:
        print(f"No winner after {state.turn} turns.")
    else:
        print(f"Winner: {state.winner} on turn {state.turn}.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
