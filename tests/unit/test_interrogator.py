"""Unit tests for the interrogation persona."""

from unittest.mock import AsyncMock

import pytest

from actornet.chat import prompts
from actornet.chat.interrogator import (
    DECLINE_ANSWER,
    DOCUMENT_EMPTY_ANSWER,
    DOCUMENT_NO_KEY_ANSWER,
    EMPTY_QUESTION_ANSWER,
    EVENT_EMPTY_ANSWER,
    EVENT_NO_KEY_ANSWER,
    FAILURE_ANSWER,
    NO_KEY_ANSWER,
    UNKNOWN_ENTITY_ANSWER,
    ChatSession,
    Interrogator,
    ask_ai,
    generate_explanation,
)
from actornet.models import DeepSearchResult, Excerpt, RelationshipRecord

PRINCIPAL = "Jeffrey Epstein"


@pytest.fixture
def interrogator(mock_query_client, mock_llm_client) -> Interrogator:
    return Interrogator(
        search_client=mock_query_client,
        llm_client=mock_llm_client,
        principal=PRINCIPAL,
    )


class TestAsk:
    """Tests for free-text questions."""

    @pytest.mark.asyncio
    async def test_answer(
        self,
        interrogator: Interrogator,
        mock_llm_client,
        sample_records: list[RelationshipRecord],
    ) -> None:
        answer = await interrogator.ask("Who is Alice?", sample_records)

        assert answer == "Test response"
        system_prompt, user_prompt = mock_llm_client.complete_chat.call_args.args
        assert PRINCIPAL in system_prompt
        assert "Who is Alice?" in user_prompt

    @pytest.mark.asyncio
    async def test_no_key(self, interrogator: Interrogator, mock_llm_client) -> None:
        mock_llm_client.is_configured = False

        assert await interrogator.ask("Who is Alice?", []) == NO_KEY_ANSWER
        mock_llm_client.complete_chat.assert_not_called()

    @pytest.mark.asyncio
    async def test_blank_question(self, interrogator: Interrogator) -> None:
        assert await interrogator.ask("   ", []) == EMPTY_QUESTION_ANSWER

    @pytest.mark.asyncio
    async def test_llm_failure(self, mock_query_client, mock_llm_client) -> None:
        """A failing completion turns into the fixed refusal, never an exception."""
        mock_llm_client.complete_chat = AsyncMock(side_effect=RuntimeError("boom"))

        answer = await ask_ai(
            "anything", [], search_client=mock_query_client, llm_client=mock_llm_client
        )

        assert answer == FAILURE_ANSWER

    @pytest.mark.asyncio
    async def test_empty_answer_declines(self, interrogator: Interrogator, mock_llm_client) -> None:
        mock_llm_client.complete_chat = AsyncMock(return_value="")

        assert await interrogator.ask("Who is Alice?", []) == DECLINE_ANSWER


class TestSearchEvidence:
    """Tests for parallel deep search."""

    @pytest.mark.asyncio
    async def test_failed_term_is_dropped(
        self, interrogator: Interrogator, mock_query_client
    ) -> None:
        async def search(term: str, thorough: bool = False) -> DeepSearchResult:
            if term == "island":
                raise RuntimeError("timeout")
            return DeepSearchResult(query=term, excerpts=[Excerpt(doc_id="D1", context=term)])

        mock_query_client.deep_search = AsyncMock(side_effect=search)

        merged = await interrogator.search_evidence("Tell me about the island airplane")

        assert mock_query_client.deep_search.await_count == 2
        assert merged.query == "airplane"
        assert [e.context for e in merged.excerpts] == ["airplane"]

    @pytest.mark.asyncio
    async def test_no_terms(self, interrogator: Interrogator, mock_query_client) -> None:
        assert await interrogator.search_evidence("who is the?") is None
        mock_query_client.deep_search.assert_not_called()

    @pytest.mark.asyncio
    async def test_all_terms_fail(self, interrogator: Interrogator, mock_query_client) -> None:
        mock_query_client.deep_search = AsyncMock(side_effect=RuntimeError("down"))

        assert await interrogator.search_evidence("island airplane") is None

    @pytest.mark.asyncio
    async def test_search_failure_still_answers(
        self, interrogator: Interrogator, mock_query_client
    ) -> None:
        mock_query_client.deep_search = AsyncMock(side_effect=RuntimeError("down"))

        assert await interrogator.ask("island airplane", []) == "Test response"


class TestExplanations:
    """Tests for entity, event and document explanations."""

    @pytest.mark.asyncio
    async def test_entity(
        self,
        interrogator: Interrogator,
        mock_llm_client,
        sample_records: list[RelationshipRecord],
    ) -> None:
        answer = await interrogator.explain_entity("Alice", sample_records[:3])

        assert answer == "Test response"
        _, user_prompt = mock_llm_client.complete_chat.call_args.args
        assert "Mr. Epstein" in user_prompt
        assert "Alice" in user_prompt

    @pytest.mark.asyncio
    async def test_entity_without_records(self, mock_query_client, mock_llm_client) -> None:
        answer = await generate_explanation(
            "Nobody", [], search_client=mock_query_client, llm_client=mock_llm_client
        )

        assert answer == UNKNOWN_ENTITY_ANSWER

    @pytest.mark.asyncio
    async def test_event_fallbacks(
        self,
        interrogator: Interrogator,
        mock_llm_client,
        sample_records: list[RelationshipRecord],
    ) -> None:
        mock_llm_client.complete_chat = AsyncMock(return_value="")
        assert await interrogator.explain_event(sample_records[0]) == EVENT_EMPTY_ANSWER

        mock_llm_client.is_configured = False
        assert await interrogator.explain_event(sample_records[0]) == EVENT_NO_KEY_ANSWER

    @pytest.mark.asyncio
    async def test_document_text_truncated(
        self,
        interrogator: Interrogator,
        mock_llm_client,
        sample_records: list[RelationshipRecord],
    ) -> None:
        text = "a" * 8000 + "TAIL"

        await interrogator.explain_document(sample_records[0], text)

        _, user_prompt = mock_llm_client.complete_chat.call_args.args
        assert "a" * 8000 in user_prompt
        assert "TAIL" not in user_prompt

    @pytest.mark.asyncio
    async def test_document_fallbacks(
        self,
        interrogator: Interrogator,
        mock_llm_client,
        sample_records: list[RelationshipRecord],
    ) -> None:
        mock_llm_client.complete_chat = AsyncMock(return_value="")
        assert await interrogator.explain_document(sample_records[0], "x") == DOCUMENT_EMPTY_ANSWER

        mock_llm_client.is_configured = False
        assert await interrogator.explain_document(sample_records[0], "x") == DOCUMENT_NO_KEY_ANSWER


class TestChatSession:
    """Tests for the chat transcript."""

    @pytest.mark.asyncio
    async def test_transcript(self, interrogator: Interrogator) -> None:
        session = ChatSession(interrogator)

        await session.ask("Who is Alice?", [])

        assert [(m.role, m.content) for m in session.messages] == [
            ("user", "Who is Alice?"),
            ("assistant", "Test response"),
        ]
        assert not session.loading

        session.clear()
        assert session.messages == []


class TestPrompts:
    def test_surname(self) -> None:
        assert prompts.surname_of("Jeffrey Epstein") == "Epstein"
        assert prompts.surname_of("Madonna") == "Madonna"

    def test_event_prompt_defaults(self, make_record) -> None:
        prompt = prompts.event_user_prompt(PRINCIPAL, make_record("A", "B"))

        assert "an unknown date" in prompt
        assert "an unknown location" in prompt
