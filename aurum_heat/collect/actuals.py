"""Actuals retrieval and mapping into tagged metrics."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable

from aurum_heat.collect.auth import users_url
from aurum_heat.collect.registry import HEAT
from aurum_heat.collect.sources import SourceCatalog
from aurum_heat.common.constants import METRIC_NAME
from aurum_heat.common.errors import DecodeError
from aurum_heat.common.http import Deadline, HttpClient, TimeoutConfig
from aurum_heat.common.models import ActualRecord, Metric, Session, Source

logger = logging.getLogger(__name__)


def decode_actuals(payload: object) -> list[ActualRecord]:
    if not isinstance(payload, dict):
        raise DecodeError("actuals response is not an object")
    raw_actuals = payload.get("actuals")
    if raw_actuals is None:
        raise DecodeError("actuals response has no 'actuals' array")
    if not isinstance(raw_actuals, list):
        raise DecodeError("'actuals' is not an array")
    return [ActualRecord.from_payload(item) for item in raw_actuals]


def fetch_actuals(
    client: HttpClient,
    base_url: str,
    session: Session,
    source_ids: str,
    *,
    timeout: TimeoutConfig | None = None,
    deadline: Deadline | None = None,
) -> list[ActualRecord]:
    payload = client.get_json(
        users_url(base_url, session, "actuals"),
        token=session.token,
        params={"sources": source_ids},
        timeout=timeout,
        deadline=deadline,
    )
    return decode_actuals(payload)


def _usage_tags(record: ActualRecord, source: Source) -> dict[str, str]:
    return {
        "source": record.source_id,
        "source_type": record.type,
        "rate_unit": source.rate_unit,
        "unit": source.unit,
        "meter_id": source.meter_id,
        "location_id": source.location_id,
    }


def map_heat(record: ActualRecord, source: Source, name: str, timestamp: datetime | None) -> Metric:
    return Metric(
        name=name,
        tags=_usage_tags(record, source),
        fields=record.usage_fields(),
        timestamp=timestamp,
    )


Mapper = Callable[[ActualRecord, Source, str, datetime | None], Metric]

MAPPERS: dict[str, Mapper] = {
    HEAT: map_heat,
}


@dataclass
class MappingResult:
    metrics: list[Metric] = field(default_factory=list)
    unmapped: list[ActualRecord] = field(default_factory=list)


def map_to_metrics(
    records: Iterable[ActualRecord],
    catalog: SourceCatalog,
    enabled_collectors: Iterable[str],
    *,
    metric_name: str = METRIC_NAME,
    timestamp: datetime | None = None,
) -> MappingResult:
    enabled = set(enabled_collectors)
    result = MappingResult()
    for record in records:
        if record.type not in enabled:
            continue
        mapper = MAPPERS.get(record.type)
        if mapper is None:
            continue
        source = catalog.lookup(record.type)
        if source is None:
            result.unmapped.append(record)
            logger.warning(
                "no catalog source of type %r for actual %s, skipping",
                record.type,
                record.source_id,
            )
            continue
        result.metrics.append(mapper(record, source, metric_name, timestamp))
    return result
