"""Unit tests for search merging and chat context assembly."""

from actornet.chat.context import (
    build_chat_context,
    excerpt_key,
    merge_search_results,
    relevant_relationships,
)
from actornet.models import (
    Actor,
    DeepSearchResult,
    DocumentSummary,
    Excerpt,
    RelationshipRecord,
)

PRINCIPAL = "Jeffrey Epstein"


class TestMergeSearchResults:
    """Tests for merge_search_results."""

    def test_nothing_to_merge(self) -> None:
        assert merge_search_results([], query="x") is None

    def test_first_occurrence_wins(self, make_record) -> None:
        first = DeepSearchResult(
            query="island",
            events=[make_record("A", "B", record_id=1, action="visited")],
            documents=[DocumentSummary(doc_id="D1", category="email")],
            actors=[Actor(name="A", connection_count=5)],
            excerpts=[Excerpt(doc_id="D1", context="on the island " * 10)],
        )
        second = DeepSearchResult(
            query="plane",
            events=[
                make_record("A", "B", record_id=1, action="flew with"),
                make_record("C", "D", record_id=2),
            ],
            documents=[DocumentSummary(doc_id="D1", category="court_filing")],
            actors=[Actor(name="A", connection_count=1), Actor(name="C")],
            excerpts=[
                Excerpt(doc_id="D1", context="on the island " * 10 + "plane"),
                Excerpt(doc_id="D2", context="plane"),
            ],
        )

        merged = merge_search_results([first, second], query="island")

        assert merged.query == "island"
        assert [e.action for e in merged.events] == ["visited", "met with"]
        assert merged.documents[0].category == "email"
        assert [a.connection_count for a in merged.actors] == [5, 0]
        assert [e.doc_id for e in merged.excerpts] == ["D1", "D2"]
        assert merged.total_excerpts == 2

    def test_excerpt_key(self) -> None:
        assert excerpt_key("D1", "x" * 80) == "D1:" + "x" * 50


class TestRelevantRelationships:
    """Tests for relevant_relationships."""

    def test_person_matches_first(self, make_record) -> None:
        records = [
            make_record(PRINCIPAL, "Alice"),
            make_record(PRINCIPAL, "Bob"),
        ]

        relevant = relevant_relationships(records, "What about bob?")

        assert relevant == [records[1], records[0]]

    def test_location_narrows(self, make_record) -> None:
        records = [
            make_record(PRINCIPAL, "Alice", location="Paris"),
            make_record(PRINCIPAL, "Bob", location="London"),
            make_record("Carol", "Dave", location="Tokyo"),
        ]

        relevant = relevant_relationships(records, "Who was with Bob in Paris?")

        assert relevant == [records[0], records[1]]

    def test_empty_names_never_match(self, make_record) -> None:
        records = [make_record("", "Ghost"), make_record("Alice", "Bob")]

        relevant = relevant_relationships(records, "Tell me about alice")

        assert relevant[0] is records[1]


class TestBuildChatContext:
    """Tests for build_chat_context."""

    def test_sections(self, sample_records: list[RelationshipRecord]) -> None:
        search = DeepSearchResult(
            query="island",
            excerpts=[Excerpt(doc_id="D9", context="flew to the island")],
            total_excerpts=1,
            documents=[DocumentSummary(doc_id="D9", category="email", paragraph_summary="p" * 400)],
        )

        context = build_chat_context(sample_records, "Tell me about Alice", search)

        assert context.startswith("[EVIDENCE DATABASE OVERVIEW]")
        assert "Known locations: Palm Beach, Florida, Little St. James" in context
        assert "[DIRECT EVIDENCE - EXACT TEXT FROM DOCUMENTS]" in context
        assert 'Found "island" in 1 places' in context
        assert "Details: " + "p" * 300 + "..." in context
        assert "[RELEVANT RECORDS]" in context
        assert context.index("[RELEVANT RECORDS]") < context.index("[INTERROGATOR'S QUESTION]")
        assert "IMPORTANT:" in context

    def test_empty_search_notes_no_matches(self, sample_records: list[RelationshipRecord]) -> None:
        context = build_chat_context(sample_records, "Anything?", DeepSearchResult(query="anything"))

        assert 'No direct matches found in database for: "anything"' in context

    def test_caps(self, make_record) -> None:
        records = [make_record(f"P{i}", f"Q{i}", location=f"L{i}") for i in range(40)]

        context = build_chat_context(records, "Who?")

        assert "L9" in context
        assert "L10" not in context.split("\n")[1]
        assert context.count("\n- ") == 10

    def test_no_search_results(self) -> None:
        context = build_chat_context([], "Who?")

        assert "[DIRECT EVIDENCE" not in context
        assert "[RELEVANT RECORDS]" not in context
        assert context.rstrip().endswith("Cite document IDs.")
