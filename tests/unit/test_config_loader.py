from __future__ import annotations

from pathlib import Path

import pytest

from aurum_heat.collect.registry import resolve_collectors
from aurum_heat.common.config_loader import build_config, load_config
from aurum_heat.common.errors import ConfigError
from aurum_heat.common.http import TimeoutConfig


def test_load_config_from_repo_config_dir():
    cfg = load_config(Path(__file__).parents[2] / "config" / "aurum_heat.yml", environ={})

    assert cfg.base_url == "https://mijnaurum.nl"
    assert cfg.collectors == ("heat",)
    assert cfg.cycle_timeout == 60
    assert cfg.transport.verify is True


def test_build_config_defaults():
    cfg = build_config({"username": "u", "password": "p"})

    assert cfg.base_url == "https://mijnaurum.nl"
    assert cfg.metric_name == "heat usage"
    assert cfg.collectors == ()
    assert cfg.timeout == TimeoutConfig()
    assert cfg.cycle_timeout is None


def test_load_config_applies_overlay_and_env(tmp_path: Path):
    base = tmp_path / "base.yml"
    overlay = tmp_path / "secrets.yml"
    base.write_text(
        """username: someone
password: ""
timeout:
  connect: 5
  read: 20
tls:
  verify: false
""",
        encoding="utf-8",
    )
    overlay.write_text(
        """password: from-overlay
timeout:
  read: 45
""",
        encoding="utf-8",
    )

    cfg = load_config(base, overlay_path=overlay, environ={"AURUM_USERNAME": "env-user"})

    assert cfg.username == "env-user"
    assert cfg.password == "from-overlay"
    assert cfg.timeout == TimeoutConfig(connect=5.0, read=45.0)
    assert cfg.transport.verify is False


def test_load_config_ignores_empty_overlay(tmp_path: Path):
    base = tmp_path / "base.yml"
    overlay = tmp_path / "overlay.yml"
    base.write_text("username: u\npassword: p\n", encoding="utf-8")
    overlay.write_text("", encoding="utf-8")

    assert load_config(base, overlay_path=overlay, environ={}).password == "p"


def test_load_config_rejects_non_mapping_overlay(tmp_path: Path):
    base = tmp_path / "base.yml"
    overlay = tmp_path / "overlay.yml"
    base.write_text("username: u\npassword: p\n", encoding="utf-8")
    overlay.write_text("- not\n- a\n- mapping\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(base, overlay_path=overlay, environ={})


def test_load_config_missing_file(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.yml", environ={})


@pytest.mark.parametrize(
    "raw",
    [
        {"username": "u", "password": "p", "extra": 1},
        {"username": "u", "password": "p", "collectors": "heat"},
        {"username": "u", "password": "p", "timeout": {"read": 0}},
        {"username": "u", "password": "p", "tls": {"key": "k.pem"}},
        {"username": "u", "password": "p", "cycle_timeout": -1},
    ],
)
def test_build_config_rejects_invalid_values(raw):
    with pytest.raises(ConfigError):
        build_config(raw)


def test_build_config_pairs_cert_and_key():
    cfg = build_config({"username": "u", "password": "p", "tls": {"cert": "c.pem", "key": "k.pem"}})

    assert cfg.transport.cert == ("c.pem", "k.pem")


def test_resolve_collectors():
    assert resolve_collectors([]) == {"heat"}
    assert resolve_collectors(None) == {"heat"}
    assert resolve_collectors(["Heat"]) == {"heat"}
    with pytest.raises(ConfigError):
        resolve_collectors(["electricity"])
