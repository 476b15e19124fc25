"""Collection cycle orchestration: authenticate, list sources, fetch actuals, map."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import TracebackType
from typing import Callable

from aurum_heat.collect.actuals import fetch_actuals, map_to_metrics
from aurum_heat.collect.auth import authenticate
from aurum_heat.collect.registry import resolve_collectors
from aurum_heat.collect.sinks import ErrorReporter, MetricSink
from aurum_heat.collect.sources import SourceCatalog, fetch_sources
from aurum_heat.common.config_loader import CollectorConfig
from aurum_heat.common.constants import DESCRIPTION
from aurum_heat.common.errors import CollectorError, ConfigError
from aurum_heat.common.http import Deadline, HttpClient
from aurum_heat.common.ids import generate_cycle_id
from aurum_heat.common.logging import log_event
from aurum_heat.common.models import Credentials, Metric, Session
from aurum_heat.common.time_utils import elapsed_ms, utc_now

logger = logging.getLogger(__name__)


class CycleState(str, Enum):
    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    CATALOG_FETCHING = "catalog_fetching"
    ACTUALS_FETCHING = "actuals_fetching"
    MAPPING = "mapping"
    FAILED = "failed"


@dataclass
class _Cycle:
    cycle_id: str
    deadline: Deadline
    started: float = field(default_factory=time.monotonic)
    session: Session = field(default_factory=Session.empty)


@dataclass
class GatherResult:
    cycle_id: str
    metrics: list[Metric] = field(default_factory=list)
    unmapped: int = 0
    error: CollectorError | None = None
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


class HeatCollector:
    """Pulls heat usage from the account service, one sequential cycle per ``gather`` call.

    Each cycle opens its own session and throws it away at the end, so the
    next cycle always authenticates again. Overlapping cycles on the same
    instance are refused.
    """

    def __init__(
        self,
        config: CollectorConfig,
        *,
        http_client: HttpClient | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if not config.username:
            raise ConfigError("username cannot be empty")
        if not config.password:
            raise ConfigError("password cannot be empty")

        self.config = config
        self.credentials = Credentials(username=config.username, password=config.password)
        self.collectors = resolve_collectors(config.collectors)
        self.base_url = config.base_url.rstrip("/")
        self.state = CycleState.IDLE
        self.clock = clock

        self._owns_client = http_client is None
        self._client = http_client
        self._cycle: _Cycle | None = None
        self._lock = threading.Lock()

    @staticmethod
    def description() -> str:
        return DESCRIPTION

    @property
    def session(self) -> Session:
        cycle = self._cycle
        if cycle is None:
            return Session.empty()
        return cycle.session

    @property
    def client(self) -> HttpClient:
        if self._client is None:
            self._client = HttpClient(timeout=self.config.timeout, transport=self.config.transport)
        return self._client

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "HeatCollector":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _transition(self, cycle: _Cycle, state: CycleState, **event_fields) -> None:
        self.state = state
        log_event(
            logger,
            f"cycle {state.value}",
            level=logging.DEBUG,
            cycle_id=cycle.cycle_id,
            stage=state.value,
            event="STATE_ENTER",
            status="ok",
            duration_ms=elapsed_ms(cycle.started),
            **event_fields,
        )

    def _run(self, cycle: _Cycle) -> tuple[list[Metric], int]:
        client = self.client
        timeout = self.config.timeout

        self._transition(cycle, CycleState.AUTHENTICATING)
        cycle.session = authenticate(
            client, self.base_url, self.credentials, timeout=timeout, deadline=cycle.deadline
        )

        self._transition(cycle, CycleState.CATALOG_FETCHING)
        catalog = SourceCatalog.build(
            fetch_sources(client, self.base_url, cycle.session, timeout=timeout, deadline=cycle.deadline)
        )

        self._transition(cycle, CycleState.ACTUALS_FETCHING, records_in=len(catalog))
        records = fetch_actuals(
            client,
            self.base_url,
            cycle.session,
            catalog.source_ids(),
            timeout=timeout,
            deadline=cycle.deadline,
        )

        self._transition(cycle, CycleState.MAPPING, records_in=len(records))
        mapped = map_to_metrics(
            records,
            catalog,
            self.collectors,
            metric_name=self.config.metric_name,
            timestamp=self.clock(),
        )
        return mapped.metrics, len(mapped.unmapped)

    def gather(
        self,
        sink: MetricSink,
        errors: ErrorReporter | None = None,
        *,
        raise_on_error: bool = False,
    ) -> GatherResult:
        """Run one collection cycle.

        Metrics go to ``sink`` only once every call has succeeded. A failing
        call aborts the cycle and is reported once to ``errors`` (defaulting to
        ``sink`` when it can take errors) and returned on the result.
        """
        if not self._lock.acquire(blocking=False):
            raise CollectorError("a gather cycle is already in flight on this collector")

        reporter = errors
        if reporter is None and hasattr(sink, "add_error"):
            reporter = sink
        cycle = _Cycle(cycle_id=generate_cycle_id(), deadline=Deadline(self.config.cycle_timeout))
        self._cycle = cycle
        try:
            try:
                metrics, unmapped = self._run(cycle)
                for metric in metrics:
                    sink.add_fields(metric.name, metric.fields, metric.tags, metric.timestamp)
            except CollectorError as exc:
                self.state = CycleState.FAILED
                log_event(
                    logger,
                    f"cycle failed: {exc}",
                    level=logging.ERROR,
                    cycle_id=cycle.cycle_id,
                    event="CYCLE_FAIL",
                    status="error",
                    duration_ms=elapsed_ms(cycle.started),
                    error_code=exc.error_code,
                )
                if reporter is not None:
                    reporter.add_error(exc)
                if raise_on_error:
                    raise
                return GatherResult(cycle_id=cycle.cycle_id, error=exc, duration_ms=elapsed_ms(cycle.started))
            except BaseException:
                self.state = CycleState.FAILED
                raise
        finally:
            cycle.session = Session.empty()
            self._cycle = None
            self._lock.release()

        self.state = CycleState.IDLE
        duration = elapsed_ms(cycle.started)
        log_event(
            logger,
            "cycle complete",
            cycle_id=cycle.cycle_id,
            event="CYCLE_END",
            status="ok",
            duration_ms=duration,
            metrics_out=len(metrics),
        )
        return GatherResult(cycle_id=cycle.cycle_id, metrics=metrics, unmapped=unmapped, duration_ms=duration)
