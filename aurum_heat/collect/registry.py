"""Usage types the collector knows how to map."""

from __future__ import annotations

from typing import Iterable

from aurum_heat.common.errors import ConfigError

HEAT = "heat"
AVAILABLE_COLLECTORS = (HEAT,)


def resolve_collectors(requested: Iterable[str] | None) -> frozenset[str]:
    names = [name.strip().lower() for name in (requested or ()) if name and name.strip()]
    if not names:
        return frozenset(AVAILABLE_COLLECTORS)
    unknown = sorted(set(names) - set(AVAILABLE_COLLECTORS))
    if unknown:
        raise ConfigError(
            f"Unknown collectors: {', '.join(unknown)} (available: {', '.join(AVAILABLE_COLLECTORS)})"
        )
    return frozenset(names)
