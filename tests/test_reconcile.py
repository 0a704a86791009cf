"""Tests for reconcile()."""
from conftest import entry
from sentidash.core.types import Sentiment, fallback_result
from sentidash.sentiment.reconcile import index_entries, reconcile


class TestReconcile:
    """Tests for exact-text alignment of model entries."""

    def test_length_matches_input(self):
        texts = ["one", "two", "three", "four"]
        results = reconcile(texts, [entry("two"), entry("four")])

        assert len(results) == len(texts)
        assert [r.original_text for r in results] == texts

    def test_exact_match_only(self):
        results = reconcile(["Hello"], [entry("hello"), entry("Hello ")])

        assert results[0] == fallback_result("Hello")

    def test_entry_emitted_verbatim(self):
        raw = entry("good", "Negative", 0.33, keywords=["x", "y"], explanation="why")
        result = reconcile(["good"], [raw])[0]

        assert result.to_dict() == raw

    def test_duplicate_lines_share_one_entry(self):
        results = reconcile(["same", "other", "same"], [entry("same", "Negative", 0.7)])

        assert results[0] is results[2]
        assert results[0].sentiment == Sentiment.NEGATIVE
        assert results[1].is_fallback

    def test_first_entry_wins(self):
        results = reconcile(["a"], [entry("a", "Negative"), entry("a", "Positive")])

        assert results[0].sentiment == Sentiment.NEGATIVE

    def test_invalid_entries_are_skipped(self):
        bad_sentiment = entry("a", "Mixed")
        missing_field = {"originalText": "b", "sentiment": "Positive"}
        results = reconcile(["a", "b", "c"], [bad_sentiment, missing_field, "c", entry("c")])

        assert results[0].is_fallback
        assert results[1].is_fallback
        assert results[2].sentiment == Sentiment.POSITIVE


class TestIndexEntries:
    def test_bool_confidence_rejected(self):
        assert index_entries([entry("a", confidence=True)]) == {}

    def test_integer_confidence_kept(self):
        index = index_entries([entry("a", confidence=1)])
        assert index["a"].confidence == 1
