from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from collections.abc import Mapping
from typing import Any


class Sentiment(str, Enum):
    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    NEUTRAL = "Neutral"

    def __str__(self) -> str:
        return self.value


# Fixed display / iteration order
LABELS: tuple[Sentiment, ...] = (Sentiment.POSITIVE, Sentiment.NEGATIVE, Sentiment.NEUTRAL)

FALLBACK_CONFIDENCE = 0.5
FALLBACK_KEYWORDS: tuple[str, ...] = ("N/A",)
FALLBACK_EXPLANATION = "Model did not return a result for this specific text."


@dataclass(frozen=True)
class AnalysisResult:
    """One classified input line.

    Field names are snake_case; the wire / export shape uses ``originalText``.
    """

    original_text: str
    sentiment: Sentiment
    confidence: float  # 0..1
    keywords: tuple[str, ...]
    explanation: str

    @property
    def is_fallback(self) -> bool:
        """True for the sentinel result emitted when the model skipped a line."""
        return (
            self.sentiment is Sentiment.NEUTRAL
            and self.confidence == FALLBACK_CONFIDENCE
            and self.keywords == FALLBACK_KEYWORDS
            and self.explanation == FALLBACK_EXPLANATION
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "originalText": self.original_text,
            "sentiment": self.sentiment.value,
            "confidence": self.confidence,
            "keywords": list(self.keywords),
            "explanation": self.explanation,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalysisResult":
        """Build a result from a wire object.

        Raises:
            ValueError: if a required field is missing or has the wrong type
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Expected an object, got {type(data).__name__}")

        missing = [
            k for k in ("originalText", "sentiment", "confidence", "keywords", "explanation")
            if k not in data
        ]
        if missing:
            raise ValueError(f"Missing fields: {', '.join(missing)}")

        text = data["originalText"]
        if not isinstance(text, str):
            raise ValueError(f"originalText must be a string, got {type(text).__name__}")

        try:
            sentiment = Sentiment(data["sentiment"])
        except ValueError:
            raise ValueError(f"Invalid sentiment: {data['sentiment']!r}") from None

        confidence = data["confidence"]
        # bool is an int subclass; reject it explicitly
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            raise ValueError(f"confidence must be a number, got {confidence!r}")

        keywords = data["keywords"]
        if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
            raise ValueError("keywords must be a list of strings")

        explanation = data["explanation"]
        if not isinstance(explanation, str):
            raise ValueError("explanation must be a string")

        return cls(
            original_text=text,
            sentiment=sentiment,
            confidence=confidence,
            keywords=tuple(keywords),
            explanation=explanation,
        )


def fallback_result(text: str) -> AnalysisResult:
    """Neutral placeholder for a line the model returned nothing for."""
    return AnalysisResult(
        original_text=text,
        sentiment=Sentiment.NEUTRAL,
        confidence=FALLBACK_CONFIDENCE,
        keywords=FALLBACK_KEYWORDS,
        explanation=FALLBACK_EXPLANATION,
    )


@dataclass(frozen=True)
class GroundTruthEntry:
    text: str
    sentiment: Sentiment
