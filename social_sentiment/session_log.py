from __future__ import annotations

import json
import traceback
import uuid
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, TextIO

LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")

MESSAGE_LIMIT = 2000
TRACEBACK_LIMIT = 12000


def _clip(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: max(0, limit - 1)] + "…"


def describe_exception(exc: BaseException) -> dict[str, str]:
    tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return {
        "type": type(exc).__name__,
        "message": _clip(str(exc), MESSAGE_LIMIT),
        "traceback": _clip(tb, TRACEBACK_LIMIT),
    }


class SessionLog:
    """
    JSONL diagnostics for one analysis session.

    Every line carries the session id; lines emitted while handling a submitted
    query also carry that query's `request` number, so superseded requests can
    be told apart from the one that was finally shown.
    """

    def __init__(self, stream: TextIO, *, session_id: str | None = None, owns_stream: bool = False) -> None:
        self._stream: TextIO | None = stream
        self._owns_stream = owns_stream
        self._session_id = (session_id or "").strip() or uuid.uuid4().hex
        self._lock = Lock()
        self._written = 0

    @classmethod
    def open(cls, path: str | Path, *, overwrite: bool = False, session_id: str | None = None) -> "SessionLog":
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        stream = p.open("w" if overwrite else "a", encoding="utf-8", newline="\n")
        return cls(stream, session_id=session_id, owns_stream=True)

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def records_written(self) -> int:
        return self._written

    def close(self) -> None:
        with self._lock:
            stream, self._stream = self._stream, None
        if stream is None:
            return
        stream.flush()
        if self._owns_stream:
            stream.close()

    def __enter__(self) -> "SessionLog":
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    def info(self, event: str, *, request: int | None = None, **data: Any) -> None:
        self.record("INFO", event, request=request, **data)

    def warning(self, event: str, *, request: int | None = None, **data: Any) -> None:
        self.record("WARN", event, request=request, **data)

    def exception(self, event: str, *, exc: BaseException, request: int | None = None, **data: Any) -> None:
        self.record("ERROR", event, request=request, error=describe_exception(exc), **data)

    def record(self, level: str, event: str, *, request: int | None = None, **data: Any) -> None:
        lvl = level.upper()
        if lvl not in LEVELS:
            raise ValueError(f"Unknown log level: {level!r}")

        entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": lvl,
            "event": event,
            "session_id": self._session_id,
        }
        if request is not None:
            entry["request"] = request
        if data:
            entry["data"] = data

        line = json.dumps(entry, ensure_ascii=False, sort_keys=True, separators=(",", ":"), default=str)

        with self._lock:
            # Records after close() are dropped.
            if self._stream is None:
                return
            self._stream.write(line + "\n")
            self._stream.flush()
            self._written += 1
