"""Merging deep-search results and assembling the bounded evidence context."""

import logging
from collections.abc import Sequence

from actornet.config import settings
from actornet.models import DeepSearchResult, RelationshipRecord

logger = logging.getLogger(__name__)

EXCERPT_KEY_LENGTH = 50
PARAGRAPH_SUMMARY_LIMIT = 300
MAX_EVENT_TAGS = 3


def excerpt_key(doc_id: str, context: str) -> str:
    return f"{doc_id}:{context[:EXCERPT_KEY_LENGTH]}"


def merge_search_results(
    results: Sequence[DeepSearchResult],
    query: str,
) -> DeepSearchResult | None:
    """
    Merge per-term results in issue order.

    Events are keyed by id, documents by doc_id, actors by name and
    excerpts by document plus the start of their text. The first
    occurrence of a key wins, so the most specific term takes priority.
    Returns None when there is nothing to merge.
    """
    if not results:
        return None

    merged = DeepSearchResult(query=query)
    seen_events: set[int] = set()
    seen_docs: set[str] = set()
    seen_actors: set[str] = set()
    seen_excerpts: set[str] = set()

    for result in results:
        for event in result.events:
            if event.id not in seen_events:
                seen_events.add(event.id)
                merged.events.append(event)
        for doc in result.documents:
            if doc.doc_id not in seen_docs:
                seen_docs.add(doc.doc_id)
                merged.documents.append(doc)
        for actor in result.actors:
            if actor.name not in seen_actors:
                seen_actors.add(actor.name)
                merged.actors.append(actor)
        for excerpt in result.excerpts:
            key = excerpt_key(excerpt.doc_id, excerpt.context)
            if key not in seen_excerpts:
                seen_excerpts.add(key)
                merged.excerpts.append(excerpt)

    merged.total_excerpts = len(merged.excerpts)
    return merged


def _mentioned(name: str, text: str) -> bool:
    return bool(name) and name.lower() in text


def relevant_relationships(
    relationships: Sequence[RelationshipRecord],
    question: str,
) -> list[RelationshipRecord]:
    """
    Relationships ordered by how directly the question points at them.

    When the question names a known location, only records at that
    location are kept, followed by records naming a mentioned person.
    Otherwise records naming a mentioned person come first, then the rest.
    """
    question_lower = question.lower()

    location_matches = [
        r for r in relationships
        if r.location and r.location.lower() in question_lower
    ]
    person_matches = [
        r for r in relationships
        if _mentioned(r.actor, question_lower) or _mentioned(r.target, question_lower)
    ]

    if location_matches:
        ordered = location_matches + person_matches
    else:
        ordered = person_matches + list(relationships)

    relevant: list[RelationshipRecord] = []
    seen: set[int] = set()
    for record in ordered:
        if id(record) not in seen:
            seen.add(id(record))
            relevant.append(record)
    return relevant


def _format_search_context(results: DeepSearchResult) -> str:
    sections: list[str] = []

    if results.excerpts:
        excerpts = "\n\n".join(
            f'[{i}] Document {ex.doc_id}:\n"{ex.context}"'
            for i, ex in enumerate(results.excerpts[:settings.chat_max_excerpts], start=1)
        )
        sections.append(
            "[DIRECT EVIDENCE - EXACT TEXT FROM DOCUMENTS]\n"
            f'Found "{results.query}" in {results.total_excerpts} places:\n\n{excerpts}'
        )

    if results.events:
        lines = []
        for e in results.events[:settings.chat_max_events]:
            date = e.timestamp or "unknown date"
            loc = f" at {e.location}" if e.location else ""
            tags = f" [{', '.join(e.tags[:MAX_EVENT_TAGS])}]" if e.tags else ""
            topic = f" - Topic: {e.explicit_topic}" if e.explicit_topic else ""
            lines.append(f"- Doc {e.doc_id} | {date}: {e.actor} {e.action} {e.target}{loc}{tags}{topic}")
        sections.append("[RELATED EVENTS FROM DATABASE]\n" + "\n".join(lines))

    if results.documents:
        lines = []
        for d in results.documents[:settings.chat_max_documents]:
            summary = d.one_sentence_summary or "No summary"
            details = ""
            if d.paragraph_summary:
                details = f"\n  Details: {d.paragraph_summary[:PARAGRAPH_SUMMARY_LIMIT]}..."
            lines.append(f"- {d.doc_id} ({d.category}): {summary}{details}")
        sections.append("[DOCUMENTS CONTAINING THIS TERM]\n" + "\n".join(lines))

    if results.actors:
        sections.append(
            "[PEOPLE CONNECTED TO THIS TERM]\n"
            + "\n".join(
                f"- {a.name} ({a.connection_count} connections)"
                for a in results.actors[:settings.chat_max_actors]
            )
        )

    if results.is_empty:
        sections.append(
            f'[SEARCH RESULTS]\nNo direct matches found in database for: "{results.query}"'
        )

    return "\n\n".join(sections)


def build_chat_context(
    relationships: Sequence[RelationshipRecord],
    question: str,
    search_results: DeepSearchResult | None = None,
) -> str:
    """
    User prompt for the interrogation chat.

    Known locations and associates come first, then direct document
    excerpts, matched events, documents and actors, then the relationships
    most relevant to the question. Each category is capped.
    """
    locations = list(dict.fromkeys(r.location for r in relationships if r.location))
    people = list(dict.fromkeys(name for r in relationships for name in (r.actor, r.target)))

    relevant = relevant_relationships(relationships, question)[:settings.chat_max_relationships]

    parts = [
        "[EVIDENCE DATABASE OVERVIEW]",
        f"Known locations: {', '.join(locations[:settings.chat_max_locations])}",
        f"Known associates: {', '.join(people[:settings.chat_max_associates])}",
    ]
    if search_results is not None:
        parts.append("")
        parts.append(_format_search_context(search_results))
    if relevant:
        parts.append("")
        parts.append("[RELEVANT RECORDS]")
        parts.extend(f"- {r.describe()}" for r in relevant)
    parts.extend([
        "",
        "[INTERROGATOR'S QUESTION]",
        question,
        "",
        "IMPORTANT: If evidence was found above, you MUST reference it specifically. "
        "Quote the exact text when relevant. Cite document IDs.",
    ])
    return "\n".join(parts)
