"""Tests for the evaluation engine and reference set."""
import json

import pytest

from conftest import make_result
from sentidash.core.types import LABELS, Sentiment
from sentidash.evaluation import (
    GroundTruth,
    default_ground_truth,
    empty_matrix,
    evaluate,
    load_ground_truth,
)

P, N, U = Sentiment.POSITIVE, Sentiment.NEGATIVE, Sentiment.NEUTRAL


class TestEvaluate:
    """Tests for evaluate()."""

    def test_single_correct_prediction(self):
        gt = GroundTruth.from_pairs([("good", P)])
        report = evaluate([make_result("good", P, confidence=0.9)], gt)

        assert report is not None
        assert report.matrix[P][P] == 1
        cells = [report.matrix[a][p] for a in LABELS for p in LABELS]
        assert sum(cells) == 1
        assert report.accuracy == 1.0
        assert report.evaluated == 1

        pos = report.metrics[P]
        assert (pos.precision, pos.recall, pos.f1) == (1.0, 1.0, 1.0)
        for label in (N, U):
            m = report.metrics[label]
            assert (m.precision, m.recall, m.f1) == (0.0, 0.0, 0.0)

    def test_no_overlap_returns_none(self, small_ground_truth):
        results = [make_result("something else", P), make_result("Good", P)]
        assert evaluate(results, small_ground_truth) is None

    def test_empty_results_return_none(self, small_ground_truth):
        assert evaluate([], small_ground_truth) is None

    def test_unmatched_results_excluded(self, small_ground_truth):
        results = [make_result("good", P), make_result("not in set", N)]
        report = evaluate(results, small_ground_truth)

        assert report.evaluated == 1
        assert report.accuracy == 1.0

    def test_mixed_predictions(self):
        gt = GroundTruth.from_pairs([("p1", P), ("p2", P), ("n1", N), ("u1", U)])
        results = [
            make_result("p1", P),
            make_result("p2", N),  # actual Positive predicted Negative
            make_result("n1", N),
            make_result("u1", P),  # actual Neutral predicted Positive
        ]
        report = evaluate(results, gt)

        assert report.matrix[P] == {P: 1, N: 1, U: 0}
        assert report.matrix[N] == {P: 0, N: 1, U: 0}
        assert report.matrix[U] == {P: 1, N: 0, U: 0}
        assert report.accuracy == pytest.approx(0.5)

        # Positive: TP=1, FP=1 (u1), FN=1 (p2)
        assert report.metrics[P].precision == pytest.approx(0.5)
        assert report.metrics[P].recall == pytest.approx(0.5)
        assert report.metrics[P].f1 == pytest.approx(0.5)
        # Negative: TP=1, FP=1 (p2), FN=0
        assert report.metrics[N].precision == pytest.approx(0.5)
        assert report.metrics[N].recall == pytest.approx(1.0)
        assert report.metrics[N].f1 == pytest.approx(2 / 3)
        # Neutral: TP=0, FN=1 -> all zero
        assert report.metrics[U].f1 == 0.0

    def test_duplicate_results_each_count(self, small_ground_truth):
        results = [make_result("bad", N), make_result("bad", N)]
        report = evaluate(results, small_ground_truth)

        assert report.matrix[N][N] == 2
        assert report.evaluated == 2

    def test_empty_matrix_shape(self):
        m = empty_matrix()
        assert list(m) == list(LABELS)
        assert all(list(row) == list(LABELS) for row in m.values())
        assert all(v == 0 for row in m.values() for v in row.values())


class TestGroundTruth:
    """Tests for the read-only reference table."""

    def test_first_entry_wins(self):
        gt = GroundTruth.from_pairs([("x", P), ("x", N)])
        assert gt.get("x") == P
        assert len(gt) == 1
        assert len(gt.entries) == 2

    def test_lookup(self, small_ground_truth):
        assert "good" in small_ground_truth
        assert "nope" not in small_ground_truth
        assert small_ground_truth.get("nope") is None

    def test_default_is_shared(self):
        gt = default_ground_truth()
        assert gt is default_ground_truth()
        assert len(gt) > 0
        assert {e.sentiment for e in gt} == set(LABELS)

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "gt.json"
        path.write_text(json.dumps([{"text": "fine", "sentiment": "Neutral"}]), encoding="utf-8")

        gt = load_ground_truth(path)

        assert gt.get("fine") == U

    def test_load_rejects_bad_label(self, tmp_path):
        path = tmp_path / "gt.json"
        path.write_text(json.dumps([{"text": "fine", "sentiment": "Meh"}]), encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid sentiment"):
            load_ground_truth(path)

    def test_load_rejects_non_array(self, tmp_path):
        path = tmp_path / "gt.json"
        path.write_text("{}", encoding="utf-8")

        with pytest.raises(ValueError, match="JSON array"):
            load_ground_truth(path)
