"""Quote data models."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..alignment.models import WordAlignment


class QuoteCategory(str, Enum):
    """Categories a daily quote can belong to."""

    MOTIVATION = "motivation"
    WISDOM = "wisdom"
    GRINDSET = "grindset"
    REFLECTION = "reflection"
    DISCIPLINE = "discipline"


QUOTE_CATEGORIES: tuple[QuoteCategory, ...] = tuple(QuoteCategory)


@dataclass
class Quote:
    """A stored daily quote.

    Attributes:
        id: Database identifier
        date_created: Publication date (YYYY-MM-DD)
        content: Quote text
        category: Quote category name
        audio_url: Public URL of the narration, if generated
        audio_duration: Narration length in seconds, if known
        created_at: Row creation timestamp
        updated_at: Row update timestamp
        word_alignment: Word timings for narration highlighting
    """

    id: str
    date_created: str
    content: str
    category: str
    audio_url: str | None = None
    audio_duration: float | None = None
    created_at: str | None = None
    updated_at: str | None = None
    word_alignment: list[WordAlignment] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date_created": self.date_created,
            "content": self.content,
            "category": self.category,
            "audio_url": self.audio_url,
            "audio_duration": self.audio_duration,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "word_alignment": [w.to_dict() for w in self.word_alignment]
            if self.word_alignment is not None
            else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Quote":
        alignment = data.get("word_alignment")
        return cls(
            id=data["id"],
            date_created=data["date_created"],
            content=data["content"],
            category=data["category"],
            audio_url=data.get("audio_url"),
            audio_duration=data.get("audio_duration"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            word_alignment=[WordAlignment.from_dict(w) for w in alignment]
            if alignment is not None
            else None,
        )
