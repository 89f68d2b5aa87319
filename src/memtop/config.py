"""Configuration loading and dataclasses."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import yaml


class ConfigError(Exception):
    pass


@dataclass
class MonitorConfig:
    runtime_minutes: float = -1
    max_line_length: int = 80
    max_lines: int = 30
    refresh_seconds: float = 10
    write_prefix: str | None = None
    write_strftime: str | None = None
    proc_root: str = "/proc"
    timestamp_format: str = "%Y-%m-%d %H:%M:%S"


@dataclass
class LoggingConfig:
    level: str = "WARNING"


@dataclass
class RootConfig:
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _get(data: dict[str, Any], key: str, default: Any) -> Any:
    return data.get(key, default) if isinstance(data, dict) else default


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def load_config(path: str) -> RootConfig:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except OSError as exc:
        raise ConfigError(f"cannot read config {path}: {exc.strerror}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"config {path} must be a mapping, got {type(raw).__name__}")

    monitor_raw = _get(raw, "monitor", {})
    logging_raw = _get(raw, "logging", {})

    try:
        monitor = MonitorConfig(
            runtime_minutes=float(_get(monitor_raw, "runtime_minutes", MonitorConfig.runtime_minutes)),
            max_line_length=int(_get(monitor_raw, "max_line_length", MonitorConfig.max_line_length)),
            max_lines=int(_get(monitor_raw, "max_lines", MonitorConfig.max_lines)),
            refresh_seconds=float(_get(monitor_raw, "refresh_seconds", MonitorConfig.refresh_seconds)),
            write_prefix=_optional_str(_get(monitor_raw, "write_prefix", MonitorConfig.write_prefix)),
            write_strftime=_optional_str(_get(monitor_raw, "write_strftime", MonitorConfig.write_strftime)),
            proc_root=str(_get(monitor_raw, "proc_root", MonitorConfig.proc_root)),
            timestamp_format=str(_get(monitor_raw, "timestamp_format", MonitorConfig.timestamp_format)),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid monitor settings in {path}: {exc}") from exc

    log_cfg = LoggingConfig(
        level=str(_get(logging_raw, "level", LoggingConfig.level)).upper(),
    )

    return RootConfig(monitor=monitor, logging=log_cfg)
