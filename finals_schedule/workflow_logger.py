# finals_schedule/workflow_logger.py
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
import json
import os
from pathlib import Path
from typing import Dict, Iterator, List, Optional

_LOG_PATHS: Dict[str, Path] = {}
_CAPTURE: ContextVar[Optional[List[str]]] = ContextVar("finals_log_capture", default=None)


# One file per run and log directory
# First call creates <WORKFLOW_LOG_DIR>/run_YYYYMMDDTHHMMSSZ.log
def _get_log_path() -> Path:
    log_dir = Path(os.getenv("WORKFLOW_LOG_DIR", "logs"))
    key = str(log_dir)
    if key not in _LOG_PATHS:
        log_dir.mkdir(parents=True, exist_ok=True)
        ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        _LOG_PATHS[key] = log_dir / f"run_{ts}.log"
    return _LOG_PATHS[key]


def log_event(*, schedule_id: str, status: str, actor: str, event: str, extra: dict | None = None) -> None:
    ts = datetime.now(timezone.utc).isoformat(timespec="seconds")
    extra = extra or {}

    line = (
        f"{ts} | schedule_id={schedule_id} | status={status} | actor={actor} | "
        f"{event} | json={json.dumps(extra, ensure_ascii=False, default=str)}"
    )

    # print to console for real-time monitoring
    print(line, flush=True)
    with _get_log_path().open("a", encoding="utf-8") as f:
        f.write(line + "\n")


def log_line(message: str) -> None:
    """Parser diagnostics (console only), held back while captured_lines() is active."""
    captured = _CAPTURE.get()
    if captured is not None:
        captured.append(message)
        return
    print(f"[finals] {message}", flush=True)


@contextmanager
def captured_lines() -> Iterator[List[str]]:
    """Collect log_line messages instead of printing them; replay the ones you keep."""
    captured: List[str] = []
    token = _CAPTURE.set(captured)
    try:
        yield captured
    finally:
        _CAPTURE.reset(token)
