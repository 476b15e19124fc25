"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from aurum_heat.common.errors import ConfigError

TOP_KNOWN = {
    "username",
    "password",
    "collectors",
    "base_url",
    "metric_name",
    "timeout",
    "cycle_timeout",
    "tls",
}
TIMEOUT_KNOWN = {"connect", "read"}
TLS_KNOWN = {"verify", "cert", "key", "proxies"}


def _assert_mapping(obj: object, ctx: str) -> dict:
    if obj is None:
        return {}
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    return obj


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive_number(value: object, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive number")


def validate_collector_config(cfg: object, *, allow_unknown: bool = False) -> dict:
    cfg = _assert_mapping(cfg, "collector config")
    _assert_no_unknown_keys(cfg, TOP_KNOWN, "collector config", allow_unknown)

    for key in ("username", "password", "base_url", "metric_name"):
        if key in cfg and cfg[key] is not None and not isinstance(cfg[key], str):
            raise ConfigError(f"{key} must be a string")

    collectors = cfg.get("collectors")
    if collectors is not None:
        if not isinstance(collectors, list) or not all(isinstance(c, str) for c in collectors):
            raise ConfigError("collectors must be a list of strings")

    timeout = _assert_mapping(cfg.get("timeout"), "timeout")
    _assert_no_unknown_keys(timeout, TIMEOUT_KNOWN, "timeout", allow_unknown)
    for key in TIMEOUT_KNOWN & set(timeout):
        _assert_positive_number(timeout[key], f"timeout.{key}")

    if cfg.get("cycle_timeout") is not None:
        _assert_positive_number(cfg["cycle_timeout"], "cycle_timeout")

    tls = _assert_mapping(cfg.get("tls"), "tls")
    _assert_no_unknown_keys(tls, TLS_KNOWN, "tls", allow_unknown)
    if "key" in tls and "cert" not in tls:
        raise ConfigError("tls.key requires tls.cert")

    return cfg
