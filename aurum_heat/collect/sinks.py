"""Destinations for emitted metrics and reported errors."""

from __future__ import annotations

import json
from datetime import datetime
from typing import IO, Protocol

from aurum_heat.common.models import Metric


class MetricSink(Protocol):
    def add_fields(
        self,
        name: str,
        fields: dict[str, float],
        tags: dict[str, str],
        timestamp: datetime | None = None,
    ) -> None: ...


class ErrorReporter(Protocol):
    def add_error(self, error: BaseException) -> None: ...


class MemoryAccumulator:
    """Keeps metrics and errors in memory, one list per channel."""

    def __init__(self) -> None:
        self.metrics: list[Metric] = []
        self.errors: list[BaseException] = []

    def add_fields(
        self,
        name: str,
        fields: dict[str, float],
        tags: dict[str, str],
        timestamp: datetime | None = None,
    ) -> None:
        self.metrics.append(Metric(name=name, tags=dict(tags), fields=dict(fields), timestamp=timestamp))

    def add_error(self, error: BaseException) -> None:
        self.errors.append(error)


class JsonLinesSink:
    def __init__(self, stream: IO[str]) -> None:
        self.stream = stream
        self.count = 0

    def add_fields(
        self,
        name: str,
        fields: dict[str, float],
        tags: dict[str, str],
        timestamp: datetime | None = None,
    ) -> None:
        metric = Metric(name=name, tags=tags, fields=fields, timestamp=timestamp)
        self.stream.write(json.dumps(metric.to_dict(), ensure_ascii=False, sort_keys=True))
        self.stream.write("\n")
        self.count += 1
