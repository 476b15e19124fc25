"""Configuration loading and validation."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from aurum_heat.common.constants import DEFAULT_BASE_URL, ENV_PASSWORD, ENV_USERNAME, METRIC_NAME
from aurum_heat.common.errors import ConfigError
from aurum_heat.common.fs import read_yaml
from aurum_heat.common.http import TimeoutConfig, TransportConfig
from aurum_heat.common.schema import validate_collector_config


@dataclass(frozen=True)
class CollectorConfig:
    username: str
    password: str = field(repr=False)
    collectors: tuple[str, ...] = ()
    base_url: str = DEFAULT_BASE_URL
    metric_name: str = METRIC_NAME
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    cycle_timeout: float | None = None
    transport: TransportConfig = field(default_factory=TransportConfig)


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    base = read_yaml(path) or {}
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    if overlay is None:
        return base
    if not isinstance(overlay, dict):
        raise ConfigError(f"Overlay config must be a mapping: {overlay_path}")
    return _deep_merge(base, overlay)


def _transport_from(tls: Mapping[str, Any]) -> TransportConfig:
    cert = tls.get("cert")
    if cert is not None and tls.get("key") is not None:
        cert = (cert, tls["key"])
    return TransportConfig(
        verify=tls.get("verify", True),
        cert=cert,
        proxies=tls.get("proxies"),
    )


def build_config(raw: Mapping[str, Any], *, allow_unknown: bool = False) -> CollectorConfig:
    cfg = validate_collector_config(dict(raw), allow_unknown=allow_unknown)
    timeout = cfg.get("timeout") or {}
    defaults = TimeoutConfig()
    return CollectorConfig(
        username=cfg.get("username") or "",
        password=cfg.get("password") or "",
        collectors=tuple(cfg.get("collectors") or ()),
        base_url=(cfg.get("base_url") or DEFAULT_BASE_URL).rstrip("/"),
        metric_name=cfg.get("metric_name") or METRIC_NAME,
        timeout=TimeoutConfig(
            connect=float(timeout.get("connect", defaults.connect)),
            read=float(timeout.get("read", defaults.read)),
        ),
        cycle_timeout=cfg.get("cycle_timeout"),
        transport=_transport_from(cfg.get("tls") or {}),
    )


def load_config(
    path: Path,
    *,
    overlay_path: Path | None = None,
    allow_unknown: bool = False,
    environ: Mapping[str, str] | None = None,
) -> CollectorConfig:
    """Read a YAML config, merge the optional overlay, then apply credential env overrides."""
    raw = _load_yaml_with_overlay(path, overlay_path)
    if not isinstance(raw, dict):
        raise ConfigError(f"Config must be a mapping: {path}")

    env = os.environ if environ is None else environ
    if env.get(ENV_USERNAME):
        raw["username"] = env[ENV_USERNAME]
    if env.get(ENV_PASSWORD):
        raw["password"] = env[ENV_PASSWORD]

    return build_config(raw, allow_unknown=allow_unknown)
