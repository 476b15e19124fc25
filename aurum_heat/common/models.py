"""Data models shared by the collection steps."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from aurum_heat.common.errors import DecodeError

PERIODS = ("day", "week", "month", "year")
PERIOD_KEYS = {
    "day": "thisDay",
    "week": "thisWeek",
    "month": "thisMonth",
    "year": "thisYear",
}


def _as_float(value: object, ctx: str) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"Expected a number for {ctx}, got {type(value).__name__}")
    return float(value)


def _as_str(value: object) -> str:
    if value is None:
        return ""
    return str(value)


def _as_mapping(value: object, ctx: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DecodeError(f"Expected an object for {ctx}, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class Session:
    token: str
    user_id: str

    @classmethod
    def empty(cls) -> "Session":
        return cls(token="", user_id="")

    @property
    def is_empty(self) -> bool:
        return not self.token and not self.user_id


@dataclass(frozen=True)
class Source:
    source_id: str
    type: str
    unit: str = ""
    rate_unit: str = ""
    meter_id: str = ""
    location_id: str = ""
    is_default: bool = False

    @classmethod
    def from_payload(cls, payload: object) -> "Source":
        data = _as_mapping(payload, "source")
        return cls(
            source_id=_as_str(data.get("source")),
            type=_as_str(data.get("type")),
            unit=_as_str(data.get("unit")),
            rate_unit=_as_str(data.get("rateUnit")),
            meter_id=_as_str(data.get("meterId")),
            location_id=_as_str(data.get("locationId")),
            is_default=bool(data.get("isDefault") or False),
        )


@dataclass(frozen=True)
class PeriodUsage:
    value: float = 0.0
    cost: float = 0.0

    @classmethod
    def from_payload(cls, payload: object, ctx: str) -> "PeriodUsage":
        data = _as_mapping(payload, ctx)
        return cls(
            value=_as_float(data.get("value"), f"{ctx}.value"),
            cost=_as_float(data.get("cost"), f"{ctx}.cost"),
        )


@dataclass(frozen=True)
class ActualRecord:
    source_id: str
    type: str
    baseline: float = 0.0
    measurements: tuple[Any, ...] = ()
    day: PeriodUsage = PeriodUsage()
    week: PeriodUsage = PeriodUsage()
    month: PeriodUsage = PeriodUsage()
    year: PeriodUsage = PeriodUsage()

    @classmethod
    def from_payload(cls, payload: object) -> "ActualRecord":
        data = _as_mapping(payload, "actual")
        measurements = data.get("measurements") or []
        if not isinstance(measurements, list):
            raise DecodeError("Expected a list for actual.measurements")
        periods = {
            period: PeriodUsage.from_payload(data.get(key), key) for period, key in PERIOD_KEYS.items()
        }
        return cls(
            source_id=_as_str(data.get("source")),
            type=_as_str(data.get("type")),
            baseline=_as_float(data.get("baseline"), "baseline"),
            measurements=tuple(measurements),
            **periods,
        )

    def usage_fields(self) -> dict[str, float]:
        fields: dict[str, float] = {}
        for period in PERIODS:
            usage: PeriodUsage = getattr(self, period)
            fields[f"{period}_value"] = usage.value
            fields[f"{period}_cost"] = usage.cost
        return fields


@dataclass(frozen=True)
class Metric:
    name: str
    tags: dict[str, str]
    fields: dict[str, float]
    timestamp: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["timestamp"] = self.timestamp.isoformat() if self.timestamp is not None else None
        return out
