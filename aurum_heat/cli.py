"""CLI entrypoint for the aurum heat usage collector."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from aurum_heat.collect.gather import HeatCollector
from aurum_heat.collect.sinks import JsonLinesSink
from aurum_heat.common.config_loader import load_config
from aurum_heat.common.constants import DESCRIPTION, EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS
from aurum_heat.common.errors import CollectorError, ConfigError
from aurum_heat.common.logging import build_logger, log_event


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=["gather", "describe"])
    parser.add_argument("--config", default="./config/aurum_heat.yml")
    parser.add_argument("--overlay", default=None)
    parser.add_argument("--output", default="-")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--strict", action="store_true")
    return parser.parse_args(argv)


def run_gather(args: argparse.Namespace) -> int:
    config = load_config(
        Path(args.config),
        overlay_path=Path(args.overlay) if args.overlay else None,
    )
    with HeatCollector(config) as collector:
        if args.output == "-":
            result = collector.gather(JsonLinesSink(sys.stdout))
        else:
            output = Path(args.output)
            output.parent.mkdir(parents=True, exist_ok=True)
            with output.open("a", encoding="utf-8") as stream:
                result = collector.gather(JsonLinesSink(stream))

    if result.ok:
        return EXIT_SUCCESS
    if args.strict:
        return EXIT_HARD_FAIL
    return EXIT_PARTIAL


def run_command(args: argparse.Namespace) -> int:
    logger = build_logger(
        level=args.log_level,
        log_path=Path(args.log_file) if args.log_file else None,
    )

    if args.command == "describe":
        print(DESCRIPTION)
        return EXIT_SUCCESS

    try:
        return run_gather(args)
    except ConfigError as exc:
        log_event(logger, f"invalid configuration: {exc}", event="CONFIG_FAIL", status="error", error_code=exc.error_code)
        return EXIT_HARD_FAIL
    except CollectorError as exc:
        log_event(logger, f"gather failed: {exc}", event="CYCLE_FAIL", status="error", error_code=exc.error_code)
        return EXIT_HARD_FAIL


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except Exception:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
