# finals_schedule/extraction/normalizer.py
from __future__ import annotations

import re
from typing import List, Optional

# (pattern, replacement); each rewrite is independent of the others
ARTIFACT_REWRITES = (
    (re.compile(r"^\*\s+", re.MULTILINE), ""),  # "* ARCH1500 ..." amendment marker
    (re.compile(r"Date & Time Change[ \t]*$", re.IGNORECASE | re.MULTILINE), ""),
    (re.compile(r"FINAL SCHEDULE INFORMATION.*$", re.IGNORECASE | re.MULTILINE), ""),
    (re.compile(r"Schedule as of [\d/]+[ \t]*$", re.IGNORECASE | re.MULTILINE), ""),
    (re.compile(r"UPDATED\s+(?=FALL|SPRING|SUMMER|WINTER)", re.IGNORECASE), ""),
)


def normalize_text(text: Optional[str]) -> str:
    """
    Strip document-generation artifacts from pdftotext output.

    Never raises; empty or None input yields "".
    """
    if not text:
        return ""
    out = text
    for pattern, repl in ARTIFACT_REWRITES:
        out = pattern.sub(repl, out)
    return out


def split_lines(text: str) -> List[str]:
    return [ln.strip() for ln in text.splitlines() if ln.strip()]
