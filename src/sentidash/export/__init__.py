from __future__ import annotations

from .files import EXPORT_FORMATS, export_results
from .serializers import report_rows, to_csv, to_json, to_pdf

__all__ = [
    "EXPORT_FORMATS",
    "export_results",
    "report_rows",
    "to_csv",
    "to_json",
    "to_pdf",
]
