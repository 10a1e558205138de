"""Conversational query builder and interrogation persona."""

from actornet.chat.context import build_chat_context, merge_search_results
from actornet.chat.interrogator import (
    ChatMessage,
    ChatSession,
    Interrogator,
    ask_ai,
    generate_explanation,
)
from actornet.chat.llm_client import LLMClient, close_llm_client, get_llm_client
from actornet.chat.terms import extract_search_terms, rank_search_terms

__all__ = [
    "ChatMessage",
    "ChatSession",
    "Interrogator",
    "LLMClient",
    "ask_ai",
    "build_chat_context",
    "close_llm_client",
    "extract_search_terms",
    "generate_explanation",
    "get_llm_client",
    "merge_search_results",
    "rank_search_terms",
]
