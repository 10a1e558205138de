"""Pytest configuration and fixtures."""

import itertools
from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from actornet.chat.llm_client import LLMClient
from actornet.config import Settings, get_test_settings, settings
from actornet.models import (
    DeepSearchResult,
    DocumentSummary,
    RelationshipRecord,
    Stats,
    TagCluster,
)
from actornet.storage import QueryServiceClient

PRINCIPAL = "Jeffrey Epstein"

RecordFactory = Callable[..., RelationshipRecord]


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with short timers."""
    return get_test_settings()


@pytest.fixture(autouse=True)
def fast_timers(monkeypatch: pytest.MonkeyPatch, test_settings: Settings) -> None:
    """Use short timers and few simulation ticks on the global settings."""
    for name in (
        "filter_debounce_seconds",
        "force_iterations",
        "animation_frame_interval",
        "bubble_zoom_duration",
    ):
        monkeypatch.setattr(settings, name, getattr(test_settings, name))
    monkeypatch.setattr(settings, "principal_entity", PRINCIPAL)


@pytest.fixture
def make_record() -> RecordFactory:
    """Factory for relationship records with sequential ids."""
    counter = itertools.count(1)

    def _make(
        actor: str,
        target: str,
        timestamp: str | None = None,
        location: str | None = None,
        action: str = "met with",
        doc_id: str | None = None,
        tags: tuple[str, ...] = (),
        record_id: int | None = None,
    ) -> RelationshipRecord:
        rid = record_id if record_id is not None else next(counter)
        return RelationshipRecord(
            id=rid,
            actor=actor,
            action=action,
            target=target,
            doc_id=doc_id or f"DOC-{rid:04d}",
            timestamp=timestamp,
            location=location,
            tags=tags,
        )

    return _make


@pytest.fixture
def sample_records(make_record: RecordFactory) -> list[RelationshipRecord]:
    """
    Small network around the principal.

    Alice and Bob are one hop out, Carol two, Dave three; Eve and Frank
    form a separate component. The last record has an empty actor.
    """
    return [
        make_record(PRINCIPAL, "Alice", "1999-03-01", "Palm Beach, Florida"),
        make_record(PRINCIPAL, "Alice", "2001-06-15", "Little St. James"),
        make_record("Alice", PRINCIPAL, "2003-01-10", "New York City"),
        make_record(PRINCIPAL, "Bob", "1995-05-05", "Zorro Ranch, New Mexico"),
        make_record("Bob", "Carol", None, None),
        make_record("Carol", "Dave", "2004-02-02", "Unknown"),
        make_record("Eve", "Frank", None, "Atlanta"),
        make_record("", "Ghost", "2000-01-01", "London"),
    ]


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Mock LLM client for testing without an actual endpoint."""
    client = MagicMock(spec=LLMClient)
    client.is_configured = True
    client.complete_chat = AsyncMock(return_value="Test response")
    client.close = AsyncMock()
    return client


@pytest.fixture
def mock_query_client(sample_records: list[RelationshipRecord]) -> QueryServiceClient:
    """Mock query service returning the sample network."""
    client = MagicMock(spec=QueryServiceClient)
    client.fetch_relationships = AsyncMock(return_value=sample_records)
    client.fetch_tag_clusters = AsyncMock(
        return_value=[TagCluster(id=1, name="Travel"), TagCluster(id=2, name="Finance")]
    )
    client.fetch_stats = AsyncMock(
        return_value=Stats(
            total_documents=10,
            total_relationships=len(sample_records),
            total_actors=8,
            categories=("court_filing", "email"),
        )
    )
    client.search_actors = AsyncMock(return_value=[])
    client.deep_search = AsyncMock(
        side_effect=lambda term, thorough=False: DeepSearchResult(query=term)
    )
    client.fetch_document_text = AsyncMock(return_value="Full document text.")
    client.fetch_document = AsyncMock(
        side_effect=lambda doc_id: DocumentSummary(
            doc_id=doc_id, category="email", one_sentence_summary="An email."
        )
    )
    client.close = AsyncMock()
    return client
