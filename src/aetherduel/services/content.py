from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping, Sequence

from jsonschema import Draft202012Validator

from aetherduel.engine.match import deck_problems
from aetherduel.engine.state import MatchConfig
from aetherduel.engine.types import CardTemplate, TemplateRegistry

logger = logging.getLogger(__name__)


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int):
        raise ContentError(f"Expected int for {key}")
    return v


def _optional_int(obj: Mapping[str, object], key: str) -> int | None:
    v = obj.get(key)
    if v is None:
        return None
    if not isinstance(v, int):
        raise ContentError(f"Expected int for {key}")
    return v


def _optional_str(obj: Mapping[str, object], key: str) -> str | None:
    v = obj.get(key)
    if v is None:
        return None
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _parse_template(item: Mapping[str, object]) -> CardTemplate:
    # enum values are trusted from the schema
    return CardTemplate(
        id=_require_str(item, "id"),
        name=_require_str(item, "name"),
        cost=_require_int(item, "cost"),
        value=_require_int(item, "value"),
        category=_require_str(item, "category"),  # type: ignore[arg-type]
        description=_require_str(item, "description"),
        attack=_optional_int(item, "attack"),
        health=_optional_int(item, "health"),
        max_health=_optional_int(item, "max_health"),
        mage_passive=_optional_str(item, "mage_passive"),  # type: ignore[arg-type]
        unit_ability=_optional_str(item, "unit_ability"),  # type: ignore[arg-type]
    )


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def _load_catalog(self) -> Mapping[str, object]:
        cards_path = self._data_dir / "cards.json"
        raw = _load_json(cards_path)
        schema = _load_json(self._schema_dir / "cards.schema.json")
        validate_json(raw, schema, context=str(cards_path))
        if not isinstance(raw, dict):
            raise ContentError("cards.json must be an object")
        return raw

    def load_templates(self) -> TemplateRegistry:
        raw = self._load_catalog()
        raw_cards = raw.get("cards")
        if not isinstance(raw_cards, list):
            raise ContentError("cards.json.cards must be a list")

        cards: dict[str, CardTemplate] = {}
        for item in raw_cards:
            if not isinstance(item, dict):
                continue
            card = _parse_template(item)
            if card.id in cards:
                raise ContentError(f"Duplicate card id: {card.id}")
            cards[card.id] = card
        logger.info("templates_loaded", extra={"count": len(cards)})
        return TemplateRegistry(cards=cards)

    def load_decks(self) -> dict[str, tuple[str, ...]]:
        raw = self._load_catalog()
        raw_decks = raw.get("decks")
        if not isinstance(raw_decks, dict):
            raise ContentError("cards.json.decks must be an object")
        decks: dict[str, tuple[str, ...]] = {}
        for name, lst in raw_decks.items():
            if not isinstance(name, str) or not isinstance(lst, list):
                continue
            decks[name] = tuple(c for c in lst if isinstance(c, str))
        return decks

    def validate_deck(
        self,
        registry: TemplateRegistry,
        deck: Sequence[str],
        config: MatchConfig | None = None,
    ) -> None:
        problems = deck_problems(registry, deck, config or MatchConfig())
        if problems:
            raise ContentError("Invalid deck:\n" + "\n".join(f"- {p}" for p in problems))

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        registry = self.load_templates()
        for deck in self.load_decks().values():
            self.validate_deck(registry, deck)
