from __future__ import annotations

import json
from pathlib import Path

from aetherduel.cli import main
from aetherduel.services.telemetry import TelemetryService


def test_telemetry_appends_jsonl(tmp_path: Path) -> None:
    path = tmp_path / "logs" / "events.jsonl"
    telemetry = TelemetryService(path)

    telemetry.log("MATCH_STARTED", {"seed": 1})
    n = telemetry.log_events([{"type": "DAMAGE", "amount": 3}, {"amount": 1}])

    assert n == 2
    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [rec["type"] for rec in lines] == ["MATCH_STARTED", "DAMAGE", "UNKNOWN"]
    assert lines[1]["payload"] == {"amount": 3}
    assert all("ts" in rec for rec in lines)


def test_cli_runs_a_match(tmp_path: Path, capsys) -> None:
    path = tmp_path / "match.jsonl"

    code = main(["--seed", "3", "--max-turns", "30", "--telemetry", str(path)])

    assert code == 0
    out = capsys.readouterr().out
    assert out.startswith("Winner:") or out.startswith("No winner")
    records = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert records[0]["type"] == "MATCH_STARTED"
    assert records[-1]["type"] == "FINAL_SNAPSHOT"
    assert records[-1]["payload"]["seed"] == 3
