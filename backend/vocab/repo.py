"""Loading and validating the vocabulary seed file.

The seed is a JSON array of records. Malformed records are dropped with a
warning; a file that is not an array, or that has no valid record at all,
fails fast with ``VocabLoadError``.
"""

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from backend.config import settings
from backend.vocab.types import Level, Topic, VocabItem

logger = logging.getLogger(__name__)


class VocabLoadError(Exception):
    """Raised when the vocabulary pool cannot be loaded."""


class VocabRecord(BaseModel):
    """Shape of one record in the seed file."""

    id: str = Field(min_length=1)
    topic: Topic
    level: Level
    hebrew: str = Field(min_length=1)
    english: str = Field(min_length=1)
    example: str = Field(min_length=1)
    transliteration: str | None = None

    def to_item(self) -> VocabItem:
        return VocabItem(
            id=self.id,
            topic=self.topic,
            level=self.level,
            hebrew=self.hebrew,
            english=self.english,
            example=self.example,
            transliteration=self.transliteration,
        )


def parse_vocab(raw: object) -> list[VocabItem]:
    """Validate decoded seed data and return the usable items."""
    if not isinstance(raw, list):
        raise VocabLoadError("Invalid vocab data: expected array")

    items: list[VocabItem] = []
    seen: set[str] = set()
    for index, entry in enumerate(raw):
        try:
            record = VocabRecord.model_validate(entry)
        except ValidationError as e:
            logger.warning(
                "Skipping malformed vocab record #%d: %d validation error(s)",
                index,
                e.error_count(),
            )
            continue
        if record.id in seen:
            logger.warning("Skipping duplicate vocab id %r", record.id)
            continue
        seen.add(record.id)
        items.append(record.to_item())

    if not items:
        raise VocabLoadError("No valid vocab items found")

    logger.info("Loaded %d vocab items (%d records)", len(items), len(raw))
    return items


def load_vocab(path: Path | None = None) -> list[VocabItem]:
    """Read and validate the vocabulary seed file."""
    path = path or settings.vocab_path
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise VocabLoadError(f"Cannot read vocab data from {path}: {e}") from e
    return parse_vocab(raw)


def filter_by_topic(items: Iterable[VocabItem], topic: Topic | str | None) -> list[VocabItem]:
    if topic is None:
        return list(items)
    return [item for item in items if item.topic == topic]
