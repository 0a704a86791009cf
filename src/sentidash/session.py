from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from sentidash.core.errors import AnalysisServiceError, EmptyInputError
from sentidash.core.logger import LogContext, get_logger, set_correlation_id
from sentidash.core.types import AnalysisResult
from sentidash.evaluation import GroundTruth, default_ground_truth
from sentidash.export import export_results
from sentidash.ingest import split_lines
from sentidash.insights import DashboardSummary, summarize
from sentidash.sentiment.base import SentimentClient

log = get_logger("session")


class AnalysisSession:
    """State of one dashboard: current results, error banner, loading flag.

    Batch-level failures never escape ``run``; they land in ``error`` and
    the result list stays empty.

    Usage:
        session = AnalysisSession(client)
        session.run("Great service\\nAwful food")
        if session.error:
            print(session.error)
        session.export("csv", "out/")
    """

    def __init__(self, client: SentimentClient, ground_truth: Optional[GroundTruth] = None):
        self.client = client
        self.ground_truth = ground_truth if ground_truth is not None else default_ground_truth()
        self.results: list[AnalysisResult] = []
        self.error: Optional[str] = None
        self.is_loading = False

    @contextmanager
    def loading(self) -> Iterator[None]:
        self.is_loading = True
        try:
            yield
        finally:
            self.is_loading = False

    def run(self, text: str) -> list[AnalysisResult]:
        """Analyze multi-line text; returns the results (empty on failure)."""
        self.error = None
        self.results = []

        try:
            lines = split_lines(text)
        except EmptyInputError as e:
            self.error = str(e)
            return []

        cid = set_correlation_id()
        with LogContext(batch_size=len(lines)), self.loading():
            try:
                results = self.client.analyze_batch(lines)
            except AnalysisServiceError as e:
                log.error(f"Batch {cid} failed: {e}")
                self.error = str(e)
                return []

        self.results = results
        fallbacks = sum(1 for r in results if r.is_fallback)
        log.info(f"Batch {cid} done: {len(results)} result(s), {fallbacks} fallback(s)")
        return results

    def clear(self) -> None:
        self.results = []
        self.error = None

    def summary(self) -> DashboardSummary:
        return summarize(self.results, self.ground_truth)

    def export(self, fmt: str, out_dir: Union[str, Path] = ".") -> Optional[Path]:
        return export_results(self.results, fmt, out_dir)
