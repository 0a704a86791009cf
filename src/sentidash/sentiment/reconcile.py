from __future__ import annotations

from typing import Any, Sequence

from sentidash.core.logger import get_logger
from sentidash.core.types import AnalysisResult, fallback_result

log = get_logger("reconcile")


def index_entries(entries: Sequence[Any]) -> dict[str, AnalysisResult]:
    """Index model entries by their exact ``originalText``.

    The first valid entry for a text wins. Non-object entries and entries
    that fail validation are skipped.
    """
    index: dict[str, AnalysisResult] = {}
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            log.warning(f"Skipping non-object entry #{i}: {str(entry)[:80]}")
            continue
        try:
            result = AnalysisResult.from_dict(entry)
        except ValueError as e:
            log.warning(f"Skipping invalid entry #{i}: {e}")
            continue
        index.setdefault(result.original_text, result)
    return index


def reconcile(texts: Sequence[str], entries: Sequence[Any]) -> list[AnalysisResult]:
    """Align model entries back onto the input lines.

    Returns exactly one result per input text, in input order. Lookups do
    not consume entries: every occurrence of a duplicated line maps to the
    same returned entry. Lines with no exact match get ``fallback_result``.
    """
    index = index_entries(entries)

    results: list[AnalysisResult] = []
    missing = 0
    for text in texts:
        found = index.get(text)
        if found is None:
            missing += 1
            results.append(fallback_result(text))
        else:
            results.append(found)

    if missing:
        log.warning(f"Model returned no result for {missing}/{len(texts)} line(s); using fallback")
    return results
