"""Interrogation-style answers about the dataset.

Every public coroutine here returns a string and never raises for
collaborator failures: a missing API key, a failed search or a failed
completion all turn into fixed in-character replies.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

from actornet.chat import prompts
from actornet.chat.context import build_chat_context, merge_search_results
from actornet.chat.llm_client import LLMClient, get_llm_client
from actornet.chat.terms import extract_search_terms, rank_search_terms
from actornet.config import settings
from actornet.models import DeepSearchResult, RelationshipRecord
from actornet.storage import QueryServiceClient, get_query_client

logger = logging.getLogger(__name__)

NO_KEY_ANSWER = "I'm not answering questions without my lawyer present."
EMPTY_QUESTION_ANSWER = "What would you like to know?"
DECLINE_ANSWER = "I decline to answer that question."
FAILURE_ANSWER = "I'm invoking my Fifth Amendment rights on that one."
UNKNOWN_ENTITY_ANSWER = "I don't believe I know that person. You'll have to be more specific."

EVENT_NO_KEY_ANSWER = "I have nothing to say about that."
EVENT_EMPTY_ANSWER = "No comment."
EVENT_FAILURE_ANSWER = DECLINE_ANSWER

DOCUMENT_NO_KEY_ANSWER = "I have nothing to say without my lawyer present."
DOCUMENT_EMPTY_ANSWER = "I don't recall that document."
DOCUMENT_FAILURE_ANSWER = "I'm invoking my Fifth Amendment rights."


class Interrogator:
    """Answers questions in the principal's voice using search + LLM."""

    def __init__(
        self,
        search_client: QueryServiceClient | None = None,
        llm_client: LLMClient | None = None,
        principal: str | None = None,
    ) -> None:
        self.search_client = search_client or get_query_client()
        self.llm_client = llm_client or get_llm_client()
        self.principal = principal or settings.principal_entity

    async def search_evidence(self, question: str) -> DeepSearchResult | None:
        """
        Deep-search the most specific terms of a question in parallel.

        All lookups finish before merging; a failed lookup is logged and
        left out. Returns None when no term was searched successfully.
        """
        terms = rank_search_terms(extract_search_terms(question))
        if not terms:
            return None

        results = await asyncio.gather(
            *(
                self.search_client.deep_search(term, thorough=settings.chat_thorough_search)
                for term in terms
            ),
            return_exceptions=True,
        )

        succeeded: list[DeepSearchResult] = []
        for term, result in zip(terms, results):
            if isinstance(result, BaseException):
                logger.warning(f"Search failed for term {term!r}: {result}")
                continue
            succeeded.append(result)

        logger.debug(f"Deep search: {len(succeeded)}/{len(terms)} terms returned results")
        return merge_search_results(succeeded, query=terms[0])

    async def ask(self, question: str, relationships: Sequence[RelationshipRecord]) -> str:
        """Answer a free-text question about the current record set."""
        if not self.llm_client.is_configured:
            return NO_KEY_ANSWER
        if not question.strip():
            return EMPTY_QUESTION_ANSWER

        try:
            evidence = await self.search_evidence(question)
            answer = await self.llm_client.complete_chat(
                prompts.chat_system_prompt(self.principal),
                build_chat_context(relationships, question, evidence),
                max_tokens=settings.chat_max_tokens,
            )
        except Exception as e:
            logger.error(f"AI chat error: {e}")
            return FAILURE_ANSWER

        return answer or DECLINE_ANSWER

    async def explain_entity(
        self,
        entity: str,
        relationships: Sequence[RelationshipRecord],
    ) -> str:
        """Short in-character account of the principal's ties to ``entity``."""
        if not self.llm_client.is_configured:
            return NO_KEY_ANSWER
        if not relationships:
            return UNKNOWN_ENTITY_ANSWER

        try:
            answer = await self.llm_client.complete_chat(
                prompts.entity_system_prompt(self.principal),
                prompts.entity_user_prompt(
                    self.principal, entity, relationships, settings.entity_prompt_max_events
                ),
                max_tokens=settings.entity_max_tokens,
            )
        except Exception as e:
            logger.error(f"AI generation error: {e}")
            return FAILURE_ANSWER

        return answer or DECLINE_ANSWER

    async def explain_event(self, event: RelationshipRecord) -> str:
        if not self.llm_client.is_configured:
            return EVENT_NO_KEY_ANSWER

        try:
            answer = await self.llm_client.complete_chat(
                prompts.event_system_prompt(self.principal),
                prompts.event_user_prompt(self.principal, event),
                max_tokens=settings.event_max_tokens,
            )
        except Exception as e:
            logger.error(f"Event explanation error: {e}")
            return EVENT_FAILURE_ANSWER

        return answer or EVENT_EMPTY_ANSWER

    async def explain_document(self, event: RelationshipRecord, text: str) -> str:
        """Summary of a source document, grounded only in its (truncated) text."""
        if not self.llm_client.is_configured:
            return DOCUMENT_NO_KEY_ANSWER

        try:
            answer = await self.llm_client.complete_chat(
                prompts.document_system_prompt(self.principal),
                prompts.document_user_prompt(
                    self.principal, event, text[:settings.document_text_limit]
                ),
                max_tokens=settings.document_max_tokens,
            )
        except Exception as e:
            logger.error(f"Document explanation error: {e}")
            return DOCUMENT_FAILURE_ANSWER

        return answer or DOCUMENT_EMPTY_ANSWER


async def ask_ai(
    question: str,
    relationships: Sequence[RelationshipRecord],
    search_client: QueryServiceClient | None = None,
    llm_client: LLMClient | None = None,
) -> str:
    """Answer ``question`` with the global clients unless others are given."""
    interrogator = Interrogator(search_client=search_client, llm_client=llm_client)
    return await interrogator.ask(question, relationships)


async def generate_explanation(
    entity: str,
    relationships: Sequence[RelationshipRecord],
    search_client: QueryServiceClient | None = None,
    llm_client: LLMClient | None = None,
) -> str:
    interrogator = Interrogator(search_client=search_client, llm_client=llm_client)
    return await interrogator.explain_entity(entity, relationships)


@dataclass
class ChatMessage:
    role: Literal["user", "assistant"]
    content: str


@dataclass
class ChatSession:
    """Transcript of one interrogation chat."""

    interrogator: Interrogator
    messages: list[ChatMessage] = field(default_factory=list)
    loading: bool = False

    async def ask(self, question: str, relationships: Sequence[RelationshipRecord]) -> str:
        self.messages.append(ChatMessage(role="user", content=question))
        self.loading = True
        try:
            answer = await self.interrogator.ask(question, relationships)
            self.messages.append(ChatMessage(role="assistant", content=answer))
            return answer
        finally:
            self.loading = False

    def clear(self) -> None:
        self.messages.clear()
