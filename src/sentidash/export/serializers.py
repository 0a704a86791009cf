from __future__ import annotations

import json
import re
from typing import Any, Sequence

import pandas as pd
from fpdf import FPDF
from fpdf.fonts import FontFace

from sentidash.core.types import AnalysisResult

CSV_HEADER = ["ID", "Text", "Sentiment", "Confidence", "Keywords", "Explanation"]
REPORT_HEADER = ["Sentiment", "Confidence", "Text", "Keywords"]
REPORT_TITLE = "Sentiment Analysis Report"

_NEWLINES = re.compile(r"\r\n|\n|\r")

# Report colours (RGB)
_HEADER_FILL = (20, 184, 166)
_HEADER_TEXT = (255, 255, 255)
_ALT_ROW_FILL = (243, 244, 246)
_BODY_TEXT = (17, 24, 39)


def _format_number(value: float) -> str:
    """Render a number the way it reads in the JSON export (1 -> "1", 0.9 -> "0.9")."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def _csv_field(value: Any) -> str:
    return _NEWLINES.sub(" ", str(value))


def to_json(results: Sequence[AnalysisResult]) -> bytes:
    """Pretty-printed JSON array of all results."""
    data = [r.to_dict() for r in results]
    return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")


def to_csv(results: Sequence[AnalysisResult]) -> bytes:
    """CSV with a 1-based ID column; newlines in values collapse to spaces.

    Fields containing a comma or quote are quoted with doubled inner quotes.
    """
    rows = [
        [
            _csv_field(i),
            _csv_field(r.original_text),
            _csv_field(r.sentiment.value),
            _csv_field(_format_number(r.confidence)),
            _csv_field("; ".join(r.keywords)),
            _csv_field(r.explanation),
        ]
        for i, r in enumerate(results, start=1)
    ]
    df = pd.DataFrame(rows, columns=CSV_HEADER)
    return df.to_csv(index=False, lineterminator="\n").encode("utf-8")


def report_rows(results: Sequence[AnalysisResult]) -> list[list[str]]:
    """Body rows of the tabular report, in result order."""
    return [
        [
            r.sentiment.value,
            f"{float(r.confidence):.2f}",
            r.original_text,
            ", ".join(r.keywords),
        ]
        for r in results
    ]


def _latin1(text: str) -> str:
    # Core PDF fonts only cover Latin-1
    return text.encode("latin-1", errors="replace").decode("latin-1")


def to_pdf(results: Sequence[AnalysisResult]) -> bytes:
    """A4 report: title heading plus a Sentiment/Confidence/Text/Keywords table."""
    pdf = FPDF(orientation="P", unit="mm", format="A4")
    pdf.set_margins(15, 15, 15)
    pdf.add_page()

    pdf.set_font("helvetica", style="B", size=22)
    pdf.set_text_color(*_BODY_TEXT)
    pdf.text(15, 20, REPORT_TITLE)

    pdf.set_y(30)
    pdf.set_font("helvetica", size=10)
    headings_style = FontFace(emphasis="BOLD", color=_HEADER_TEXT, fill_color=_HEADER_FILL)
    with pdf.table(
        col_widths=(30, 25, 70, 55),
        headings_style=headings_style,
        cell_fill_color=_ALT_ROW_FILL,
        cell_fill_mode="ROWS",
        text_align="LEFT",
    ) as table:
        for data_row in [REPORT_HEADER, *report_rows(results)]:
            row = table.row()
            for datum in data_row:
                row.cell(_latin1(datum))

    return bytes(pdf.output())
