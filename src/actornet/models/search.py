"""Records returned by the query service besides relationships."""

from dataclasses import dataclass, field
from typing import Any

from actornet.models.relationship import RelationshipRecord


@dataclass(frozen=True)
class Actor:
    """Actor match from a name search."""

    name: str
    connection_count: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Actor":
        return cls(
            name=data["name"],
            connection_count=int(data.get("connection_count") or 0),
        )


@dataclass(frozen=True)
class DocumentSummary:
    doc_id: str
    category: str = "Unknown"
    one_sentence_summary: str | None = None
    paragraph_summary: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DocumentSummary":
        return cls(
            doc_id=str(data["doc_id"]),
            category=data.get("category") or "Unknown",
            one_sentence_summary=data.get("one_sentence_summary"),
            paragraph_summary=data.get("paragraph_summary"),
        )


@dataclass(frozen=True)
class Excerpt:
    """Verbatim text surrounding a search hit inside a document."""

    doc_id: str
    context: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Excerpt":
        return cls(doc_id=str(data["doc_id"]), context=data.get("context") or "")


@dataclass
class DeepSearchResult:
    """Full-text/entity search hits for one query term."""

    query: str
    events: list[RelationshipRecord] = field(default_factory=list)
    documents: list[DocumentSummary] = field(default_factory=list)
    actors: list[Actor] = field(default_factory=list)
    excerpts: list[Excerpt] = field(default_factory=list)
    total_excerpts: int = 0

    @property
    def is_empty(self) -> bool:
        return not (self.events or self.documents or self.actors or self.excerpts)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeepSearchResult":
        excerpts = [Excerpt.from_dict(e) for e in data.get("excerpts") or []]
        return cls(
            query=data.get("query") or "",
            events=[RelationshipRecord.from_dict(e) for e in data.get("events") or []],
            documents=[DocumentSummary.from_dict(d) for d in data.get("documents") or []],
            actors=[Actor.from_dict(a) for a in data.get("actors") or []],
            excerpts=excerpts,
            total_excerpts=int(data.get("totalExcerpts") or len(excerpts)),
        )


@dataclass(frozen=True)
class DocumentView:
    """Document shown when inspecting the source of a record."""

    doc_id: str
    category: str
    summary: str | None
    text: str
    is_loaded: bool = True  # False when the text could not be fetched


@dataclass(frozen=True)
class TagCluster:
    id: int
    name: str
    tags: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TagCluster":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            tags=tuple(data.get("exemplars") or data.get("tags") or ()),
        )


@dataclass(frozen=True)
class Stats:
    total_documents: int = 0
    total_relationships: int = 0
    total_actors: int = 0
    categories: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Stats":
        def count(key: str) -> int:
            value = data.get(key) or 0
            if isinstance(value, dict):
                value = value.get("count") or 0
            return int(value)

        return cls(
            total_documents=count("totalDocuments"),
            total_relationships=count("totalTriples"),
            total_actors=count("totalActors"),
            categories=tuple(c["category"] for c in data.get("categories") or []),
        )
