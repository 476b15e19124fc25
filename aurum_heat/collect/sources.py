"""Source catalog discovery for the authenticated account."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from aurum_heat.collect.auth import users_url
from aurum_heat.common.errors import DecodeError
from aurum_heat.common.http import Deadline, HttpClient, TimeoutConfig
from aurum_heat.common.models import Session, Source

logger = logging.getLogger(__name__)


def decode_sources(payload: object) -> list[Source]:
    if not isinstance(payload, dict):
        raise DecodeError("sources response is not an object")
    raw_sources = payload.get("sources")
    if raw_sources is None:
        raise DecodeError("sources response has no 'sources' array")
    if not isinstance(raw_sources, list):
        raise DecodeError("'sources' is not an array")
    return [Source.from_payload(item) for item in raw_sources]


def fetch_sources(
    client: HttpClient,
    base_url: str,
    session: Session,
    *,
    timeout: TimeoutConfig | None = None,
    deadline: Deadline | None = None,
) -> list[Source]:
    payload = client.get_json(
        users_url(base_url, session, "sources"),
        token=session.token,
        timeout=timeout,
        deadline=deadline,
    )
    return decode_sources(payload)


def source_id_csv(sources: Iterable[Source]) -> str:
    return ",".join(source.source_id for source in sources)


@dataclass(frozen=True)
class SourceCatalog:
    """Sources of one cycle, indexed by usage type.

    When several sources share a type the first one in catalog order is the
    metadata donor for that type; the rest are logged and ignored.
    """

    sources: tuple[Source, ...]
    by_type: dict[str, Source]

    @classmethod
    def build(cls, sources: Sequence[Source]) -> "SourceCatalog":
        by_type: dict[str, Source] = {}
        for source in sources:
            existing = by_type.get(source.type)
            if existing is None:
                by_type[source.type] = source
                continue
            logger.warning(
                "duplicate source type %r: keeping %s, ignoring %s",
                source.type,
                existing.source_id,
                source.source_id,
            )
        return cls(sources=tuple(sources), by_type=by_type)

    def lookup(self, source_type: str) -> Source | None:
        return self.by_type.get(source_type)

    def source_ids(self) -> str:
        return source_id_csv(self.sources)

    def __len__(self) -> int:
        return len(self.sources)
