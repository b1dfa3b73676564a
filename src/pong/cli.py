"""Command-line entry point: load config and endpoints, then run the dashboard."""

from __future__ import annotations

import argparse
import contextlib
import json
import logging
import os
import sys
from collections.abc import Sequence
from logging.handlers import RotatingFileHandler
from typing import Any

from .config import AppConfig, load_app_config
from .contracts.error import BadInputError, guard_cli
from .core.snapshot import StatsSnapshot
from .dashboard import Dashboard
from .endpoints import DEFAULT_ENDPOINTS, Endpoint, filter_endpoints, load_endpoints
from .probe.prober import HttpProber
from .render import TextRenderer

# --------------------------------------------------------------------
# Logging
# --------------------------------------------------------------------
logger = logging.getLogger("pong")
logger.setLevel(logging.INFO)
logger.propagate = False

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"
DEFAULT_LOG_MAX_BYTES = 5_000_000
DEFAULT_LOG_BACKUP_COUNT = 5
DEFAULT_PLAIN_DURATION = 10.0


class JsonFormatter(logging.Formatter):
    """Render log records as JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, DEFAULT_LOG_DATEFMT),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(
    use_json: bool = False,
    log_file: str | None = None,
    *,
    max_bytes: int = DEFAULT_LOG_MAX_BYTES,
    backup_count: int = DEFAULT_LOG_BACKUP_COUNT,
    level: int | str = logging.INFO,
    console: bool = True,
) -> None:
    """Configure console (and optional rotating file) logging.

    The full-screen UI owns the terminal, so it runs with ``console=False``
    and logs only reach ``log_file`` when one is given.
    """

    formatter: logging.Formatter
    if use_json:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(DEFAULT_LOG_FORMAT, DEFAULT_LOG_DATEFMT)

    for handler in list(logger.handlers):
        with contextlib.suppress(Exception):
            handler.close()
        logger.removeHandler(handler)

    logger.setLevel(level)
    if console:
        stream = logging.StreamHandler()
        stream.setFormatter(formatter)
        logger.addHandler(stream)

    if log_file:
        handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())


configure_logging()


def emit_report(
    snapshots: Sequence[StatsSnapshot], total_samples: int, *, as_json: bool
) -> None:
    if as_json:
        payload: dict[str, Any] = {
            "ok": True,
            "command": "report",
            "total_samples": total_samples,
            "endpoints": [snapshot.to_dict() for snapshot in snapshots],
        }
        sys.stdout.write(json.dumps(payload, ensure_ascii=False) + "\n")
        sys.stdout.flush()
        return
    TextRenderer(sys.stdout).draw(snapshots, total_samples)


# --------------------------------------------------------------------
# CLI
# --------------------------------------------------------------------
def _positive_float(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a number, got {raw!r}") from exc
    if value < 0:
        raise argparse.ArgumentTypeError(f"expected a value >= 0, got {raw!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="pong",
        description="Live round-trip latency dashboard for a fixed set of endpoints.",
    )
    p.add_argument("--config", default=None, help="Path to TOML config file")
    p.add_argument(
        "--endpoints",
        default=None,
        help="TOML/JSON endpoint list (default: built-in AWS DynamoDB regions)",
    )
    p.add_argument(
        "--only",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Probe only endpoints whose name contains PATTERN (repeatable)",
    )
    p.add_argument(
        "--warmup",
        type=_positive_float,
        default=None,
        help="Seconds to probe before recording and rendering results",
    )
    p.add_argument("--interval", type=_positive_float, default=None, help="Seconds between probes")
    p.add_argument("--timeout", type=_positive_float, default=None, help="Per-probe timeout (s)")
    p.add_argument("--retries", type=int, default=None, help="Attempts per probe cycle")
    p.add_argument("--capacity", type=int, default=None, help="Rolling window size (power of 2)")
    p.add_argument(
        "--plain",
        action="store_true",
        help="Run headless for --duration seconds and print a final report",
    )
    p.add_argument(
        "--duration",
        type=_positive_float,
        default=DEFAULT_PLAIN_DURATION,
        help="Headless run length in seconds (default: %(default)s)",
    )
    p.add_argument("--json", action="store_true", help="Emit the --plain report as JSON")
    p.add_argument("--log-json", action="store_true", help="Emit logs in JSON format")
    p.add_argument(
        "--log-file",
        default=None,
        help="Optional log file path (rotates at 5MB, keeps 5 backups by default)",
    )
    p.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: %(default)s)",
    )
    return p


def apply_cli_overrides(cfg: AppConfig, args: argparse.Namespace) -> AppConfig:
    if args.warmup is not None:
        cfg.display.warmup = args.warmup
    if args.interval is not None:
        cfg.probe.interval = args.interval
    if args.timeout is not None:
        cfg.probe.timeout = args.timeout
    if args.retries is not None:
        cfg.probe.retries = args.retries
    if args.capacity is not None:
        cfg.display.capacity = args.capacity
    if args.endpoints:
        cfg.endpoints_file = args.endpoints
    cfg.validate()
    return cfg


def resolve_endpoints(cfg: AppConfig, patterns: Sequence[str]) -> tuple[Endpoint, ...]:
    endpoints = load_endpoints(cfg.endpoints_file) if cfg.endpoints_file else DEFAULT_ENDPOINTS
    return filter_endpoints(endpoints, patterns)


@guard_cli
def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.json and not args.plain:
        raise BadInputError("--json requires --plain", hint="Add --plain for a headless report.")

    configure_logging(
        args.log_json,
        args.log_file,
        level=args.log_level,
        console=args.plain,
    )

    cfg_path = args.config or os.getenv("PONG_CONFIG")
    cfg = apply_cli_overrides(load_app_config(cfg_path), args)
    if cfg_path:
        logger.info("Loaded config from %s", cfg_path)
    endpoints = resolve_endpoints(cfg, args.only)

    dashboard = Dashboard(endpoints, HttpProber(cfg.probe.user_agent), cfg)
    if args.plain:
        with dashboard:
            dashboard.run(duration=args.duration)
        snapshots, total = dashboard.collect()
        emit_report(snapshots, total, as_json=args.json)
        return 0

    from .tui.app import run_tui

    with dashboard:
        run_tui(dashboard)
    return 0


def console_main() -> None:
    """Entry point for console_scripts."""

    try:
        raise SystemExit(main(sys.argv[1:]))
    except KeyboardInterrupt:
        raise SystemExit(130) from None


__all__ = [
    "JsonFormatter",
    "build_parser",
    "configure_logging",
    "console_main",
    "emit_report",
    "main",
]
