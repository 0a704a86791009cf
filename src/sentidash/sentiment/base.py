from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from sentidash.core.types import AnalysisResult


class SentimentClient(ABC):
    @abstractmethod
    def analyze_batch(self, texts: Sequence[str]) -> list[AnalysisResult]:
        """Classify all texts in one call; results align 1:1 with input order."""
        raise NotImplementedError
