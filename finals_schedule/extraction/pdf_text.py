# pdftotext (poppler) or pdfplumber text extraction

# finals_schedule/extraction/pdf_text.py
from __future__ import annotations

import io
import os
import re
import subprocess
from typing import List, Optional

PDFTOTEXT = "pdftotext"
PDFPLUMBER = "pdfplumber"
ENGINES = (PDFTOTEXT, PDFPLUMBER)


class TextExtractionError(RuntimeError):
    """The document produced no text to parse. Fatal for the whole run."""


def extract_text_pdftotext(pdf_bytes: bytes) -> str:
    """
    Plain text via poppler's pdftotext (must be on PATH).

    The column-block and interleaved-row layouts were observed in this
    tool's default (non -layout) output.
    """
    try:
        proc = subprocess.run(
            [PDFTOTEXT, "-", "-"],
            input=pdf_bytes,
            check=True,
            capture_output=True,
        )
    except FileNotFoundError as e:
        raise TextExtractionError(
            "Failed to extract text from PDF: 'pdftotext' is not installed/available on PATH. "
            "Install poppler (apt install poppler-utils / brew install poppler) "
            "or set FINALS_TEXT_ENGINE=pdfplumber."
        ) from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
        raise TextExtractionError(f"Failed to extract text from PDF: {stderr[:500] or 'Unknown error'}") from e

    return proc.stdout.decode("utf-8", errors="replace")


def extract_text_pdfplumber(pdf_bytes: bytes) -> str:
    """
    Text per page using pdfplumber, joined with newlines.
    """
    import pdfplumber  # local import to reduce editor import sensitivity

    pages: List[str] = []
    try:
        with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
            for page in pdf.pages:
                t = page.extract_text() or ""
                t = re.sub(r"[ \t]+", " ", t)
                pages.append(t.strip())
    except Exception as e:
        raise TextExtractionError(f"pdfplumber failed to read PDF: {e}") from e
    return "\n".join(pages)


def extract_pdf_text(pdf_bytes: bytes, engine: Optional[str] = None) -> str:
    """
    Returns the document text. Raises TextExtractionError when nothing usable comes out.

    engine: "pdftotext" (default) or "pdfplumber"; falls back to FINALS_TEXT_ENGINE.
    """
    if not pdf_bytes:
        raise TextExtractionError("PDF content is required")

    engine = (engine or os.getenv("FINALS_TEXT_ENGINE") or PDFTOTEXT).strip().lower()
    if engine not in ENGINES:
        raise ValueError(f"Unknown text engine {engine!r}; expected one of {', '.join(ENGINES)}")

    if engine == PDFPLUMBER:
        text = extract_text_pdfplumber(pdf_bytes)
    else:
        text = extract_text_pdftotext(pdf_bytes)

    if not text.strip():
        raise TextExtractionError("PDF contains no extractable text (image-only scan?)")
    return text
