from __future__ import annotations

import json
from typing import Any, Optional, Sequence

import httpx

from sentidash.core.errors import (
    AnalysisServiceError,
    ConfigurationError,
    EmptyInputError,
    MalformedResponseError,
)
from sentidash.core.logger import get_logger, log_error_with_context
from sentidash.core.types import LABELS, AnalysisResult
from sentidash.sentiment.base import SentimentClient
from sentidash.sentiment.reconcile import reconcile

log = get_logger("gemini")

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash"

SERVICE_ERROR_MESSAGE = "Failed to analyze sentiment. The API might be temporarily unavailable."

INSTRUCTION_PROMPT = """You are a highly accurate sentiment analysis expert. For each text provided, you must perform the following tasks and return the result in a structured JSON format:
1.  **Classify Sentiment**: Determine if the sentiment is 'Positive', 'Negative', or 'Neutral'.
2.  **Confidence Score**: Provide a confidence score between 0.0 and 1.0 for your classification.
3.  **Extract Keywords**: Identify and list the key words or phrases that are the primary drivers of the sentiment.
4.  **Provide Explanation**: Write a concise, one-sentence explanation for your sentiment classification.
5.  **Include Original Text**: Return the original text for reference.

Analyze the following texts:
"""

# Gemini responseSchema (OpenAPI subset): array of 5-field objects
RESULT_SCHEMA: dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "originalText": {
                "type": "STRING",
                "description": "The original text that was analyzed.",
            },
            "sentiment": {
                "type": "STRING",
                "enum": [label.value for label in LABELS],
                "description": "The sentiment of the text.",
            },
            "confidence": {
                "type": "NUMBER",
                "description": "A confidence score from 0.0 to 1.0 for the sentiment classification.",
            },
            "keywords": {
                "type": "ARRAY",
                "items": {"type": "STRING"},
                "description": "A list of keywords or phrases that contributed to the sentiment.",
            },
            "explanation": {
                "type": "STRING",
                "description": "A brief explanation of why the text was assigned its sentiment.",
            },
        },
        "required": ["originalText", "sentiment", "confidence", "keywords", "explanation"],
    },
}


def build_prompt(texts: Sequence[str]) -> str:
    """Instruction followed by the texts as a 1-based numbered list."""
    numbered = "\n".join(f"{i + 1}. {t}" for i, t in enumerate(texts))
    return f"{INSTRUCTION_PROMPT}{numbered}\n"


def build_payload(texts: Sequence[str]) -> dict[str, Any]:
    return {
        "contents": [{"role": "user", "parts": [{"text": build_prompt(texts)}]}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESULT_SCHEMA,
        },
    }


def parse_results_payload(content: str) -> list[Any]:
    """Parse the model's JSON text into the raw result array.

    Raises:
        MalformedResponseError: if the text is not JSON or not an array
    """
    try:
        parsed = json.loads(content.strip())
    except json.JSONDecodeError as e:
        log.error(f"Model returned invalid JSON: {content[:100]}")
        raise MalformedResponseError("The API returned an unexpected data format.") from e

    if not isinstance(parsed, list):
        log.error(f"Model returned a non-array response: {str(parsed)[:100]}")
        raise MalformedResponseError("The API returned an unexpected data format.")
    return parsed


def extract_text(data: Any) -> str:
    """Pull the generated text out of a generateContent response body.

    Raises:
        MalformedResponseError: if the envelope carries no text
    """
    try:
        parts = data["candidates"][0]["content"]["parts"]
        content = "".join(p.get("text", "") for p in parts)
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        raise MalformedResponseError("The API response contained no candidates.") from e

    if not content.strip():
        raise MalformedResponseError("The API response was empty.")
    return content


class GeminiSentimentClient(SentimentClient):
    """Batch sentiment client for the Gemini generateContent API.

    Sends every line in a single structured-output request and reconciles
    the returned array back onto the input order.

    Configuration:
        GEMINI_API_KEY: Your Gemini API key
        GEMINI_BASE_URL: API base URL (default: https://generativelanguage.googleapis.com/v1beta)
        GEMINI_MODEL: Model to use (default: gemini-2.5-flash)

    Usage:
        with GeminiSentimentClient(api_key="your_key") as client:
            results = client.analyze_batch(["I love it", "Meh"])
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        timeout: float = 60.0,
        client: Optional[httpx.Client] = None,
    ):
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY is required")

        self.base_url = base_url.rstrip("/")
        self.model = model

        self.client = client or httpx.Client(timeout=timeout)
        self.client.headers.update(
            {
                "x-goog-api-key": api_key,
                "Content-Type": "application/json",
            }
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()
        log.debug("Gemini client closed")

    def __enter__(self) -> "GeminiSentimentClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def analyze_batch(self, texts: Sequence[str]) -> list[AnalysisResult]:
        """Analyze all texts with one request.

        Args:
            texts: Non-empty lines to classify

        Returns:
            One AnalysisResult per input text, in input order

        Raises:
            EmptyInputError: if texts is empty
            AnalysisServiceError: if the call fails or the payload is unusable
        """
        texts = list(texts)
        if not texts:
            raise EmptyInputError("Please enter some text to analyze.")

        log.info(f"Analyzing {len(texts)} line(s) with {self.model}")

        try:
            response = self.client.post(self.endpoint, json=build_payload(texts))

            if response.status_code == 429:
                raise AnalysisServiceError("Rate limit exceeded")

            if response.status_code in (401, 403):
                raise AnalysisServiceError("Invalid API key")

            response.raise_for_status()
            data = response.json()

        except httpx.HTTPStatusError as e:
            log_error_with_context(log, "Gemini API error", e, batch_size=len(texts))
            raise AnalysisServiceError(SERVICE_ERROR_MESSAGE) from e
        except httpx.RequestError as e:
            log_error_with_context(log, "Gemini request error", e, batch_size=len(texts))
            raise AnalysisServiceError(SERVICE_ERROR_MESSAGE) from e
        except ValueError as e:
            # JSONDecodeError or UnicodeDecodeError
            log_error_with_context(log, "Gemini returned an unreadable body", e, batch_size=len(texts))
            raise MalformedResponseError("The API returned an unexpected data format.") from e

        entries = parse_results_payload(extract_text(data))
        results = reconcile(texts, entries)
        log.debug(f"Received {len(entries)} entries for {len(texts)} line(s)")
        return results
