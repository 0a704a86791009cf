from __future__ import annotations

import warnings
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from sentidash.core.errors import ExportNoResultsWarning
from sentidash.core.logger import LogContext, get_logger
from sentidash.core.types import AnalysisResult
from sentidash.export.serializers import to_csv, to_json, to_pdf

log = get_logger("export")

EXPORT_FORMATS: dict[str, tuple[str, Callable[[Sequence[AnalysisResult]], bytes]]] = {
    "json": ("sentiment_analysis.json", to_json),
    "csv": ("sentiment_analysis.csv", to_csv),
    "pdf": ("sentiment_analysis_report.pdf", to_pdf),
}


def export_results(
    results: Sequence[AnalysisResult],
    fmt: str,
    out_dir: Union[str, Path] = ".",
) -> Optional[Path]:
    """Write results in the given format under its fixed filename.

    Returns the written path, or None (with an ExportNoResultsWarning) when
    there is nothing to export.

    Raises:
        ValueError: if fmt is not json, csv or pdf
    """
    key = fmt.lower()
    if key not in EXPORT_FORMATS:
        raise ValueError(f"Unknown export format: {fmt!r} (expected one of {sorted(EXPORT_FORMATS)})")

    if not results:
        warnings.warn(ExportNoResultsWarning("No results to export."), stacklevel=2)
        log.warning("No results to export.")
        return None

    filename, serialize = EXPORT_FORMATS[key]
    path = Path(out_dir) / filename
    path.parent.mkdir(parents=True, exist_ok=True)

    with LogContext(export_format=key, path=str(path)):
        path.write_bytes(serialize(results))
        log.info(f"Exported {len(results)} result(s) to {path}")
    return path
