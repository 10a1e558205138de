"""Unit tests for search term extraction."""

from actornet.chat.terms import extract_search_terms, rank_search_terms


class TestExtractSearchTerms:
    """Tests for extract_search_terms."""

    def test_drops_stop_words_and_short_words(self) -> None:
        terms = extract_search_terms("Who did you fly with to Paris in 2002?")

        assert terms == ["fly", "paris", "2002"]

    def test_keeps_quoted_phrases_verbatim(self) -> None:
        terms = extract_search_terms('What did "Little St. James" host?')

        assert "Little St. James" in terms
        assert "little" in terms
        assert "host" in terms
        assert "st" not in terms

    def test_keeps_email_addresses(self) -> None:
        terms = extract_search_terms("Did jeevacation@gmail.com write to you?")

        assert "jeevacation@gmail.com" in terms
        assert "write" in terms

    def test_usernames_are_deduplicated(self) -> None:
        assert extract_search_terms("Who is jsmith42?") == ["jsmith42"]

    def test_only_stop_words(self) -> None:
        assert extract_search_terms("Who is the one?") == ["one"]
        assert extract_search_terms("what is that?") == []
        assert extract_search_terms("") == []


class TestRankSearchTerms:
    """Tests for rank_search_terms."""

    def test_longest_first_with_stable_ties(self) -> None:
        assert rank_search_terms(["aa", "bbbb", "cc", "ddd"], limit=3) == ["bbbb", "ddd", "aa"]

    def test_default_cap(self) -> None:
        terms = [f"term{i}" for i in range(8)]

        assert rank_search_terms(terms) == terms[:5]
