"""Pytest configuration and fixtures for sentidash tests."""
from __future__ import annotations

import json
import os
from typing import Any, Callable, Sequence

import httpx
import pytest

# Set test environment variables before importing modules
os.environ.setdefault("GEMINI_API_KEY", "test_key")

from sentidash.config import Settings, reload_settings
from sentidash.core.errors import AnalysisServiceError
from sentidash.core.types import AnalysisResult, Sentiment
from sentidash.evaluation import GroundTruth
from sentidash.sentiment.base import SentimentClient
from sentidash.sentiment.gemini import GeminiSentimentClient


def gemini_body(payload: Any) -> dict:
    """Wrap a model payload (list or raw string) in a generateContent response."""
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": text}]},
                "finishReason": "STOP",
            }
        ]
    }


def entry(text: str, sentiment: str = "Positive", confidence: float = 0.9, **overrides: Any) -> dict:
    data = {
        "originalText": text,
        "sentiment": sentiment,
        "confidence": confidence,
        "keywords": ["good"],
        "explanation": "Upbeat wording.",
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_gemini_client() -> Callable[..., GeminiSentimentClient]:
    """Build a client whose HTTP layer is served by a handler function."""
    clients: list[GeminiSentimentClient] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> GeminiSentimentClient:
        http = httpx.Client(transport=httpx.MockTransport(handler))
        client = GeminiSentimentClient(api_key="test_key", model="gemini-test", client=http)
        clients.append(client)
        return client

    yield _make
    for c in clients:
        c.close()


@pytest.fixture
def sample_results() -> list[AnalysisResult]:
    """A small mixed batch of results."""
    return [
        AnalysisResult(
            original_text="I absolutely love this product, it exceeded all my expectations!",
            sentiment=Sentiment.POSITIVE,
            confidence=0.97,
            keywords=("love", "exceeded all my expectations"),
            explanation="Strongly positive language.",
        ),
        AnalysisResult(
            original_text="The app keeps crashing and I lost all my data.",
            sentiment=Sentiment.NEGATIVE,
            confidence=0.92,
            keywords=("crashing", "lost all my data"),
            explanation="Describes a failure and data loss.",
        ),
        AnalysisResult(
            original_text="The package was delivered on Tuesday.",
            sentiment=Sentiment.NEUTRAL,
            confidence=0.85,
            keywords=("delivered",),
            explanation="A factual statement.",
        ),
    ]


@pytest.fixture
def small_ground_truth() -> GroundTruth:
    return GroundTruth.from_pairs(
        [
            ("good", Sentiment.POSITIVE),
            ("bad", Sentiment.NEGATIVE),
            ("meh", Sentiment.NEUTRAL),
        ]
    )


@pytest.fixture
def test_settings() -> Settings:
    """Settings reloaded from the test environment."""
    return reload_settings()


def make_result(text: str, sentiment: Sentiment, keywords: Sequence[str] = (), confidence: float = 0.9) -> AnalysisResult:
    return AnalysisResult(
        original_text=text,
        sentiment=sentiment,
        confidence=confidence,
        keywords=tuple(keywords),
        explanation="",
    )


class FakeClient(SentimentClient):
    """Echoes each line back as Positive, or fails on demand."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[list[str]] = []
        self.session = None

    def analyze_batch(self, texts: Sequence[str]) -> list[AnalysisResult]:
        self.calls.append(list(texts))
        if self.session is not None:
            assert self.session.is_loading
        if self.fail:
            raise AnalysisServiceError("Failed to analyze sentiment. The API might be temporarily unavailable.")
        return [make_result(t, Sentiment.POSITIVE, keywords=["nice"]) for t in texts]
