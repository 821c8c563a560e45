from __future__ import annotations

import json
import traceback
import uuid
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, TextIO


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _truncate(text: str, *, limit: int) -> str:
    s = str(text or "")
    if len(s) <= limit:
        return s
    return s[: max(0, limit - 1)] + "…"


class RunLogger:
    """
    JSONL event log for one browsing session.

    Every line is a JSON object with ts, level, event and session_id; the
    participant's condition is attached once the session has one.
    """

    def __init__(self, path: str | Path, *, session_id: str | None = None) -> None:
        self._path = Path(path)
        self._session_id = (session_id or "").strip() or uuid.uuid4().hex
        self._condition: str | None = None
        self._fp: TextIO | None = None
        self._lock = Lock()
        self._closed = False

    @classmethod
    def open(cls, path: str | Path, *, session_id: str | None = None) -> "RunLogger":
        logger = cls(path, session_id=session_id)
        logger._ensure_open()
        return logger

    def close(self) -> None:
        with self._lock:
            if self._fp is not None:
                try:
                    self._fp.flush()
                finally:
                    self._fp.close()
                self._fp = None
            self._closed = True

    def __enter__(self) -> "RunLogger":
        self._ensure_open()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    def bind_condition(self, condition: str) -> None:
        value = (condition or "").strip()
        if value:
            self._condition = value

    def info(self, event: str, *, url: str | None = None, **data: Any) -> None:
        self.log("INFO", event, url=url, **data)

    def warning(self, event: str, *, url: str | None = None, **data: Any) -> None:
        self.log("WARN", event, url=url, **data)

    def exception(self, event: str, *, exc: BaseException, **data: Any) -> None:
        err = {
            "type": type(exc).__name__,
            "message": _truncate(str(exc), limit=2000),
            "cause": _truncate(repr(exc.__cause__), limit=2000) if exc.__cause__ else None,
            "traceback": _truncate(
                "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
                limit=12000,
            ),
        }
        self.log("ERROR", event, error=err, **data)

    def log(self, level: str, event: str, *, url: str | None = None, **data: Any) -> None:
        record: dict[str, Any] = {
            "ts": _utc_now_iso(),
            "level": (level or "").strip().upper() or "INFO",
            "event": (event or "").strip() or "event",
            "session_id": self._session_id,
        }

        if self._condition:
            record["condition"] = self._condition

        u = (url or "").strip()
        if u:
            record["url"] = u

        if data:
            record["data"] = data

        self._write(record)

    def _ensure_open(self) -> None:
        with self._lock:
            if self._fp is not None or self._closed:
                return
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._fp = self._path.open("w", encoding="utf-8", newline="\n")

    def _write(self, record: dict[str, Any]) -> None:
        payload = json.dumps(
            record,
            ensure_ascii=False,
            sort_keys=True,
            separators=(",", ":"),
            default=str,
        )

        self._ensure_open()
        with self._lock:
            if self._fp is None:
                return
            self._fp.write(payload + "\n")
            self._fp.flush()
