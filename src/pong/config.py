"""Typed configuration loader for the pong dashboard."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from .contracts.error import BadInputError
from .core.latency import DEFAULT_CAPACITY


def _check_field_types(policy: Any, section: str) -> None:
    """Reject wrongly-typed values; ints are widened for float fields."""

    for f in fields(policy):
        value = getattr(policy, f.name)
        key = f"{section}.{f.name}"
        if isinstance(value, bool):
            raise BadInputError(f"{key} must be a {f.type}, got a boolean")
        if f.type == "int" and not isinstance(value, int):
            raise BadInputError(f"{key} must be an integer, got {value!r}")
        if f.type == "float":
            if not isinstance(value, int | float):
                raise BadInputError(f"{key} must be a number, got {value!r}")
            setattr(policy, f.name, float(value))
        if f.type == "str" and not isinstance(value, str):
            raise BadInputError(f"{key} must be a string, got {value!r}")


@dataclass
class ProbePolicy:
    interval: float = 1.0
    timeout: float = 3.0
    retries: int = 3
    retry_delay: float = 0.5
    sleep_quantum: float = 0.025
    user_agent: str = "pong"

    def validate(self) -> None:
        _check_field_types(self, "probe")
        if self.interval < 0:
            raise BadInputError("probe.interval must be >= 0")
        if self.timeout <= 0:
            raise BadInputError("probe.timeout must be > 0")
        if self.retries < 1:
            raise BadInputError("probe.retries must be >= 1")
        if self.retry_delay < 0:
            raise BadInputError("probe.retry_delay must be >= 0")
        if self.sleep_quantum <= 0:
            raise BadInputError("probe.sleep_quantum must be > 0")
        if not self.user_agent.strip():
            raise BadInputError("probe.user_agent must not be empty")


@dataclass
class DisplayPolicy:
    capacity: int = DEFAULT_CAPACITY
    render_interval: float = 0.1
    warmup: float = 0.0

    def validate(self) -> None:
        _check_field_types(self, "display")
        if self.capacity <= 0 or (self.capacity & (self.capacity - 1)) != 0:
            raise BadInputError("display.capacity must be a power of two > 0")
        if self.render_interval <= 0:
            raise BadInputError("display.render_interval must be > 0")
        if self.warmup < 0:
            raise BadInputError("display.warmup must be >= 0")


def _section(data: Mapping[str, Any], name: str, policy_cls: type[Any]) -> Any:
    raw = data.get(name, {})
    if not isinstance(raw, dict):
        raise BadInputError(f"[{name}] section must be a table")
    known = {f.name for f in fields(policy_cls)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise BadInputError(f"Unknown keys in [{name}]: {', '.join(unknown)}")
    try:
        return policy_cls(**raw)
    except TypeError as exc:
        raise BadInputError(f"Invalid [{name}] section: {exc}") from exc


@dataclass
class AppConfig:
    probe: ProbePolicy = field(default_factory=ProbePolicy)
    display: DisplayPolicy = field(default_factory=DisplayPolicy)
    endpoints_file: str | None = None

    @classmethod
    def load(cls, path: Path | None, env: Mapping[str, str] | None = None) -> AppConfig:
        if path is None:
            cfg = cls()
        else:
            try:
                data = tomllib.loads(path.read_text(encoding="utf-8"))
            except FileNotFoundError as exc:
                raise BadInputError(f"Config file not found: {path}") from exc
            except tomllib.TOMLDecodeError as exc:
                raise BadInputError(f"Invalid TOML: {exc}") from exc
            cfg = cls.from_dict(data)
        cfg.apply_env_overrides(os.environ if env is None else env)
        cfg.validate()
        return cfg

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        probe = _section(data, "probe", ProbePolicy)
        display = _section(data, "display", DisplayPolicy)
        endpoints_file = data.get("endpoints_file")
        if endpoints_file is not None and not isinstance(endpoints_file, str):
            raise BadInputError("endpoints_file must be a string path")
        return cls(probe=probe, display=display, endpoints_file=endpoints_file)

    def apply_env_overrides(self, env: Mapping[str, str]) -> None:
        mapping: dict[str, tuple[Any, str, Callable[[str], Any]]] = {
            "PONG_PROBE_INTERVAL": (self.probe, "interval", float),
            "PONG_PROBE_TIMEOUT": (self.probe, "timeout", float),
            "PONG_PROBE_RETRIES": (self.probe, "retries", int),
            "PONG_RETRY_DELAY": (self.probe, "retry_delay", float),
            "PONG_SLEEP_QUANTUM": (self.probe, "sleep_quantum", float),
            "PONG_CAPACITY": (self.display, "capacity", int),
            "PONG_RENDER_INTERVAL": (self.display, "render_interval", float),
            "PONG_WARMUP": (self.display, "warmup", float),
        }
        for key, (target, attr, caster) in mapping.items():
            raw_value = env.get(key)
            if raw_value is None:
                continue
            try:
                value = caster(raw_value)
            except ValueError as exc:
                raise BadInputError(f"Invalid env override {key}={raw_value!r}") from exc
            setattr(target, attr, value)

        endpoints_file = env.get("PONG_ENDPOINTS_FILE")
        if endpoints_file:
            self.endpoints_file = endpoints_file

    def validate(self) -> None:
        self.probe.validate()
        self.display.validate()


def load_app_config(path: str | None) -> AppConfig:
    config_path = Path(path) if path else None
    return AppConfig.load(config_path)


__all__ = ["AppConfig", "DisplayPolicy", "ProbePolicy", "load_app_config"]
