"""Client configuration: frozen dataclasses loaded from YAML with ${ENV} expansion."""

from __future__ import annotations

import dataclasses
import os
import re
import types
import typing
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError

# ${NAME} or ${NAME:-default}
_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")

_TRUE = frozenset({"true", "yes", "on", "1"})
_FALSE = frozenset({"false", "no", "off", "0"})


def _expand_env(value: str, path: str) -> str:
    """Expand ${NAME} and ${NAME:-default} from the process environment."""

    def _replace(match: re.Match) -> str:
        name, default = match.group(1), match.group(2)
        resolved = os.environ.get(name, default)
        if resolved is None:
            raise ConfigError(f"{path}: Environment variable '{name}' is not set")
        return resolved

    return _ENV_PATTERN.sub(_replace, value)


def _expand_tree(obj: Any, path: str = "") -> Any:
    if isinstance(obj, str):
        return _expand_env(obj, path or "<root>")
    if isinstance(obj, dict):
        return {k: _expand_tree(v, f"{path}.{k}" if path else str(k)) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_tree(v, f"{path}[{i}]") for i, v in enumerate(obj)]
    return obj


@dataclass(frozen=True)
class CloudStackConfig:
    endpoint: str = "http://localhost:8080/client/api"
    api_key: str = ""
    secret_key: str = ""
    timeout: int = 30
    verify_ssl: bool = True


@dataclass(frozen=True)
class ExecutorConfig:
    max_workers: int = 8  # pool backing the *_async operations


@dataclass(frozen=True)
class JobPollingConfig:
    interval_seconds: float = 1.0
    max_interval_seconds: float | None = None  # None keeps the interval fixed
    backoff: float = 1.0
    max_attempts: int | None = None
    timeout_seconds: float = 600.0


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    format: str = "json"  # "json" or "text"


@dataclass(frozen=True)
class AppConfig:
    cloudstack: CloudStackConfig = field(default_factory=CloudStackConfig)
    executor: ExecutorConfig = field(default_factory=ExecutorConfig)
    jobs: JobPollingConfig = field(default_factory=JobPollingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _strip_optional(hint: Any) -> Any:
    """``X | None`` -> ``X``; anything else unchanged."""
    if isinstance(hint, types.UnionType) or typing.get_origin(hint) is typing.Union:
        args = [a for a in typing.get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def _coerce(value: Any, hint: Any, path: str) -> Any:
    """Convert strings produced by env expansion into the annotated scalar type."""
    target = _strip_optional(hint)
    if not isinstance(value, str) or target not in (int, float, bool):
        return value
    if target is bool:
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ConfigError(f"{path} must be a boolean, got '{value}'")
    try:
        return target(value)
    except ValueError:
        raise ConfigError(f"{path} must be {target.__name__}, got '{value}'") from None


def _from_mapping(cls: type, data: Any, path: str) -> Any:
    """Build a frozen dataclass from a mapping, recursing into nested sections. Unknown keys are ignored."""
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must be a mapping")
    hints = typing.get_type_hints(cls)
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if f.name not in data:
            continue
        value, hint = data[f.name], _strip_optional(hints[f.name])
        where = f"{path}.{f.name}" if path else f.name
        if dataclasses.is_dataclass(hint):
            kwargs[f.name] = _from_mapping(hint, value, where)
        else:
            kwargs[f.name] = _coerce(value, hint, where)
    return cls(**kwargs)


def load_config(path: str | Path) -> AppConfig:
    """Load and validate configuration from a YAML file."""
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ConfigError("Configuration file must be a YAML mapping")

    config = _from_mapping(AppConfig, _expand_tree(raw), "")
    validate(config)
    return config


def validate(config: AppConfig) -> None:
    """Validate configuration values."""
    endpoint = config.cloudstack.endpoint
    if not endpoint:
        raise ConfigError("cloudstack.endpoint is required")
    if not endpoint.startswith(("http://", "https://")):
        raise ConfigError("cloudstack.endpoint must be an http:// or https:// URL")

    if config.cloudstack.timeout <= 0:
        raise ConfigError("cloudstack.timeout must be > 0")

    if config.executor.max_workers < 1:
        raise ConfigError("executor.max_workers must be >= 1")

    jobs = config.jobs
    if jobs.interval_seconds <= 0:
        raise ConfigError("jobs.interval_seconds must be > 0")
    if jobs.max_interval_seconds is not None and jobs.max_interval_seconds < jobs.interval_seconds:
        raise ConfigError("jobs.max_interval_seconds must be >= jobs.interval_seconds")
    if jobs.backoff < 1:
        raise ConfigError("jobs.backoff must be >= 1")
    if jobs.max_attempts is not None and jobs.max_attempts < 1:
        raise ConfigError("jobs.max_attempts must be >= 1")
    if jobs.timeout_seconds <= 0:
        raise ConfigError("jobs.timeout_seconds must be > 0")

    if config.logging.format not in ("json", "text"):
        raise ConfigError("logging.format must be 'json' or 'text'")
