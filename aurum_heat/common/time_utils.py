"""UTC-focused helpers for cycle metadata."""

from __future__ import annotations

import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def utc_timestamp_iso() -> str:
    return utc_now().isoformat(timespec="milliseconds")


def elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
