"""Search term extraction from free-text questions."""

import re

from actornet.config import settings

STOP_WORDS = frozenset({
    "what", "is", "the", "a", "an", "who", "where", "when", "how", "why",
    "did", "do", "does", "was", "were", "are", "about", "tell", "me", "you",
    "your", "know", "can", "could", "would", "should", "have", "has", "had",
    "with", "for", "that", "this", "there", "their", "they", "them", "any",
    "some",
})

PUNCTUATION_PATTERN = re.compile(r"[?!.,'\"]")
QUOTED_PATTERN = re.compile(r"\"([^\"]+)\"|'([^']+)'")
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._-]+@[a-zA-Z0-9.-]+")
USERNAME_PATTERN = re.compile(r"\b[a-zA-Z]+[0-9]+[a-zA-Z0-9]*\b")

MIN_WORD_LENGTH = 3


def extract_search_terms(question: str) -> list[str]:
    """
    Candidate search terms from a question, de-duplicated in first-seen order.

    Plain words are lowercased, stripped of punctuation and filtered against
    the stop-word list. Quoted strings, email addresses and username-like
    tokens (letters followed by digits) are always kept verbatim.
    """
    words = [
        word
        for word in PUNCTUATION_PATTERN.sub("", question.lower()).split()
        if len(word) >= MIN_WORD_LENGTH and word not in STOP_WORDS
    ]

    for match in QUOTED_PATTERN.finditer(question):
        quoted = (match.group(1) or match.group(2) or "").strip()
        if quoted:
            words.append(quoted)
    words.extend(EMAIL_PATTERN.findall(question))
    words.extend(USERNAME_PATTERN.findall(question))

    return list(dict.fromkeys(words))


def rank_search_terms(terms: list[str], limit: int | None = None) -> list[str]:
    """Longest (most specific) terms first; ties keep extraction order."""
    limit = limit if limit is not None else settings.chat_max_search_terms
    return sorted(terms, key=len, reverse=True)[:limit]
