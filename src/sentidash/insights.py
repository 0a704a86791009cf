from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np

from sentidash.core.types import LABELS, AnalysisResult, Sentiment
from sentidash.evaluation import EvaluationReport, GroundTruth, evaluate

TOP_KEYWORDS = 10
HISTOGRAM_BINS = 10

# Placeholder keyword carried by fallback results
_SENTINEL_KEYWORD = "n/a"


class KeywordAggregator:
    """Counts normalized keywords per sentiment label.

    Keywords are stripped and lower-cased; empty strings and the "n/a"
    placeholder are ignored.
    """

    def __init__(self) -> None:
        self._counts: dict[Sentiment, dict[str, int]] = {label: {} for label in LABELS}

    def add(self, result: AnalysisResult) -> None:
        counts = self._counts[result.sentiment]
        for keyword in result.keywords:
            key = keyword.strip().lower()
            if key and key != _SENTINEL_KEYWORD:
                counts[key] = counts.get(key, 0) + 1

    def update(self, results: Iterable[AnalysisResult]) -> "KeywordAggregator":
        for result in results:
            self.add(result)
        return self

    def top(self, label: Sentiment, n: int = TOP_KEYWORDS) -> list[tuple[str, int]]:
        # sorted() is stable: ties keep discovery order
        ranked = sorted(self._counts[label].items(), key=lambda kv: kv[1], reverse=True)
        return ranked[:n]


def top_keywords(
    results: Iterable[AnalysisResult],
    n: int = TOP_KEYWORDS,
) -> dict[Sentiment, list[tuple[str, int]]]:
    agg = KeywordAggregator().update(results)
    return {label: agg.top(label, n) for label in LABELS}


def sentiment_counts(results: Iterable[AnalysisResult]) -> dict[Sentiment, int]:
    counts = {label: 0 for label in LABELS}
    for r in results:
        counts[r.sentiment] += 1
    return counts


def sentiment_distribution(results: Sequence[AnalysisResult]) -> list[tuple[Sentiment, int, float]]:
    """(label, count, share) for each label present in the results."""
    total = len(results)
    if total == 0:
        return []
    return [
        (label, count, count / total)
        for label, count in sentiment_counts(results).items()
        if count > 0
    ]


def confidence_histogram(results: Sequence[AnalysisResult]) -> list[tuple[str, int]]:
    """Ten 10%-wide confidence bins; a confidence of 1.0 lands in the last bin."""
    labels = [f"{i * 10}-{(i + 1) * 10}" for i in range(HISTOGRAM_BINS)]
    if not results:
        return [(name, 0) for name in labels]

    conf = np.array([float(r.confidence) for r in results], dtype=float)
    bins = np.clip(np.floor(conf * HISTOGRAM_BINS).astype(int), 0, HISTOGRAM_BINS - 1)
    counts = np.bincount(bins, minlength=HISTOGRAM_BINS)
    return [(name, int(c)) for name, c in zip(labels, counts)]


@dataclass(frozen=True)
class DashboardSummary:
    total: int
    counts: dict[Sentiment, int]
    distribution: list[tuple[Sentiment, int, float]]
    histogram: list[tuple[str, int]]
    keywords: dict[Sentiment, list[tuple[str, int]]]
    evaluation: Optional[EvaluationReport]


def summarize(results: Sequence[AnalysisResult], ground_truth: GroundTruth) -> DashboardSummary:
    return DashboardSummary(
        total=len(results),
        counts=sentiment_counts(results),
        distribution=sentiment_distribution(results),
        histogram=confidence_histogram(results),
        keywords=top_keywords(results),
        evaluation=evaluate(results, ground_truth),
    )
