from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Paths:
    repo_root: Path
    package_dir: Path
    data_dir: Path
    schema_dir: Path
    match_log_dir: Path

    def match_log(self, seed: int) -> Path:
        return self.match_log_dir / f"match_{seed}.jsonl"


def get_paths() -> Paths:
    # Card data ships inside the package; match logs go beside the checkout.
    package_dir = Path(__file__).resolve().parent
    repo_root = package_dir.parents[1]
    data_dir = package_dir / "data"
    return Paths(
        repo_root=repo_root,
        package_dir=package_dir,
        data_dir=data_dir,
        schema_dir=data_dir / "schemas",
        match_log_dir=repo_root / "userdata" / "matches",
    )
