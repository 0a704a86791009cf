from __future__ import annotations

from pathlib import Path
from typing import Union

from sentidash.core.errors import EmptyInputError
from sentidash.core.logger import get_logger

log = get_logger("ingest")


def split_lines(text: str) -> list[str]:
    """Split raw input into the lines to analyze.

    Lines that are blank after stripping are dropped; kept lines are
    returned verbatim so they can be matched exactly against model output.

    Raises:
        EmptyInputError: if no non-blank line remains
    """
    lines = [line for line in (text or "").split("\n") if line.strip()]
    if not lines:
        raise EmptyInputError("Please enter some text to analyze.")
    return lines


def read_upload(path: Union[str, Path]) -> str:
    """Read an uploaded text file; the content is treated like typed input."""
    p = Path(path)
    content = p.read_text(encoding="utf-8")
    log.debug(f"Read {len(content)} chars from {p}")
    return content
