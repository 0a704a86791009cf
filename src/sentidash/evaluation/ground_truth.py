from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Union

from sentidash.core.logger import get_logger
from sentidash.core.types import GroundTruthEntry, Sentiment

log = get_logger("ground_truth")

_P, _N, _U = Sentiment.POSITIVE, Sentiment.NEGATIVE, Sentiment.NEUTRAL

# Pre-labeled samples; analyzed lines matching one of these exactly are scored.
REFERENCE_SAMPLES: tuple[tuple[str, Sentiment], ...] = (
    ("I absolutely love this product, it exceeded all my expectations!", _P),
    ("The customer service was fantastic and resolved my issue quickly.", _P),
    ("Best purchase I've made all year, highly recommend it.", _P),
    ("The new update makes the app so much faster and easier to use.", _P),
    ("What a wonderful experience, the staff were friendly and helpful.", _P),
    ("This is the worst experience I have ever had with a company.", _N),
    ("The item arrived broken and nobody answered my emails.", _N),
    ("I'm really disappointed with the quality, it fell apart after a week.", _N),
    ("The app keeps crashing and I lost all my data.", _N),
    ("Terrible service, I will never order from them again.", _N),
    ("The package was delivered on Tuesday.", _U),
    ("The store opens at 9 AM and closes at 6 PM.", _U),
    ("I ordered the blue version of the jacket.", _U),
    ("The meeting has been moved to the second floor.", _U),
    ("This model comes in three different sizes.", _U),
)


class GroundTruth:
    """Immutable text -> label reference table.

    Built once and shared read-only; the first entry wins when a text is
    listed more than once.
    """

    def __init__(self, entries: Iterable[GroundTruthEntry]):
        self._entries = tuple(entries)
        index: dict[str, Sentiment] = {}
        for entry in self._entries:
            index.setdefault(entry.text, entry.sentiment)
        self._index: Mapping[str, Sentiment] = MappingProxyType(index)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, Union[Sentiment, str]]]) -> "GroundTruth":
        return cls(GroundTruthEntry(text=t, sentiment=Sentiment(s)) for t, s in pairs)

    @property
    def entries(self) -> tuple[GroundTruthEntry, ...]:
        return self._entries

    def get(self, text: str) -> Optional[Sentiment]:
        return self._index.get(text)

    def __contains__(self, text: object) -> bool:
        return text in self._index

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> Iterator[GroundTruthEntry]:
        return iter(self._entries)


def load_ground_truth(path: Union[str, Path]) -> GroundTruth:
    """Load a reference set from a JSON array of {"text", "sentiment"} objects.

    Raises:
        ValueError: if the file is not an array of valid entries
    """
    p = Path(path)
    data = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"Ground truth file must contain a JSON array: {p}")

    entries = []
    for i, item in enumerate(data):
        if not isinstance(item, dict) or not isinstance(item.get("text"), str):
            raise ValueError(f"Invalid ground truth entry #{i} in {p}")
        try:
            sentiment = Sentiment(item.get("sentiment"))
        except ValueError:
            raise ValueError(f"Invalid sentiment in ground truth entry #{i}: {item.get('sentiment')!r}") from None
        entries.append(GroundTruthEntry(text=item["text"], sentiment=sentiment))

    log.info(f"Loaded {len(entries)} ground truth entries from {p}")
    return GroundTruth(entries)


@lru_cache(maxsize=1)
def default_ground_truth() -> GroundTruth:
    """The bundled reference set, built once per process."""
    return GroundTruth.from_pairs(REFERENCE_SAMPLES)
