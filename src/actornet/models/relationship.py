"""Relationship record model - one extracted (actor, action, target) triple."""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a record timestamp into a datetime.

    Accepts full ISO datetimes, plain dates, ``YYYY-MM`` and bare years.
    Results are always UTC-aware; values without an offset are read as UTC.
    Returns None for missing or unparseable values.
    """
    if not value:
        return None
    text = value.strip()
    if not text:
        return None
    parsed = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        for fmt in ("%Y-%m", "%Y"):
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class RelationshipRecord:
    """
    A timestamped relationship between two entities, sourced from a document.

    Records are immutable: consumers never edit them in place, the controller
    replaces the whole list when filters change.
    """

    id: int
    actor: str
    action: str
    target: str
    doc_id: str
    timestamp: str | None = None  # None means undated
    location: str | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)
    explicit_topic: str | None = None

    @property
    def is_valid(self) -> bool:
        """Both endpoints must be non-empty names."""
        return bool(self.actor) and bool(self.target)

    @property
    def is_dated(self) -> bool:
        return self.timestamp is not None

    @property
    def parsed_timestamp(self) -> datetime | None:
        return parse_timestamp(self.timestamp)

    @property
    def timestamp_date(self) -> date | None:
        parsed = self.parsed_timestamp
        return parsed.date() if parsed else None

    def involves(self, name: str) -> bool:
        """Check whether an entity is the actor or the target."""
        return self.actor == name or self.target == name

    def counterparty(self, name: str) -> str:
        """Return the other endpoint relative to ``name``."""
        return self.target if self.actor == name else self.actor

    def describe(self) -> str:
        """One-line human readable summary used in prompts."""
        when = self.timestamp or "unknown date"
        where = f" at {self.location}" if self.location else ""
        return f"{when}: {self.actor} {self.action} {self.target}{where}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "actor": self.actor,
            "action": self.action,
            "target": self.target,
            "doc_id": self.doc_id,
            "timestamp": self.timestamp,
            "location": self.location,
            "tags": list(self.tags),
            "explicit_topic": self.explicit_topic,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RelationshipRecord":
        """Create from a query service payload."""
        tags = data.get("tags") or ()
        if isinstance(tags, str):
            tags = tuple(t.strip() for t in tags.split(",") if t.strip())
        return cls(
            id=int(data["id"]),
            actor=data.get("actor") or "",
            action=data.get("action") or "",
            target=data.get("target") or "",
            doc_id=str(data.get("doc_id") or ""),
            timestamp=data.get("timestamp") or None,
            location=data.get("location") or None,
            tags=tuple(tags),
            explicit_topic=data.get("explicit_topic"),
        )
