"""Runtime configuration.

Values are resolved in this order, later sources winning:

1. ``CalculatorConfig`` defaults
2. a YAML file (``path`` argument or ``CALC_HISTORY_CONFIG``)
3. ``CALC_HISTORY_*`` environment variables

Example YAML::

    initial_value: 100
    log_level: DEBUG
    session_ttl_seconds: 900
    cors_origins: ["http://localhost:5173"]
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from calc_history.core.commands import check_number, coerce_number
from calc_history.core.errors import CalculatorError

_log = logging.getLogger(__name__)

ENV_PREFIX = "CALC_HISTORY_"

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class ConfigError(ValueError):
    """Raised when a configuration value cannot be used."""


@dataclass
class CalculatorConfig:
    initial_value: float = 0
    log_level: str = "INFO"
    session_ttl_seconds: int = 3600
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    host: str = "127.0.0.1"
    port: int | None = None  # None: pick a free port at launch

    @property
    def cors_allow_credentials(self) -> bool:
        # allow_credentials is incompatible with allow_origins=["*"]
        return "*" not in self.cors_origins


# ---------------------------------------------------------------------------
# Parsers (shared by YAML and environment sources)
# ---------------------------------------------------------------------------


def _parse_number(raw: Any) -> float:
    try:
        return check_number(coerce_number(raw))
    except CalculatorError as exc:
        raise ConfigError(f"initial_value: {exc}") from None


def _parse_level(raw: Any) -> str:
    level = str(raw).strip().upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(f"log_level: {raw!r} is not one of {sorted(_LOG_LEVELS)}")
    return level


def _parse_positive_int(name: str):
    def _parse(raw: Any) -> int:
        try:
            value = int(raw)
        except (TypeError, ValueError):
            raise ConfigError(f"{name}: {raw!r} is not an integer") from None
        if value <= 0:
            raise ConfigError(f"{name}: must be positive, got {value}")
        return value

    return _parse


def _parse_origins(raw: Any) -> list[str]:
    if isinstance(raw, str):
        if raw.strip() in ("*", ""):
            return ["*"]
        return [o.strip() for o in raw.split(",") if o.strip()]
    if isinstance(raw, list):
        return [str(o) for o in raw]
    raise ConfigError(f"cors_origins: expected a list or a comma-separated string, got {raw!r}")


def _parse_port(raw: Any) -> int | None:
    if raw is None or raw == "":
        return None
    return _parse_positive_int("port")(raw)


_PARSERS = {
    "initial_value": _parse_number,
    "log_level": _parse_level,
    "session_ttl_seconds": _parse_positive_int("session_ttl_seconds"),
    "cors_origins": _parse_origins,
    "host": str,
    "port": _parse_port,
}

_ENV_KEYS = {
    "INITIAL_VALUE": "initial_value",
    "LOG_LEVEL": "log_level",
    "SESSION_TTL": "session_ttl_seconds",
    "CORS_ORIGINS": "cors_origins",
    "HOST": "host",
    "PORT": "port",
}


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return data


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> CalculatorConfig:
    """Build a CalculatorConfig from defaults, an optional YAML file and the environment."""
    env = os.environ if environ is None else environ
    known = {f.name for f in fields(CalculatorConfig)}
    values: dict[str, Any] = {}

    if path is None:
        path = env.get(f"{ENV_PREFIX}CONFIG") or None
    if path is not None:
        for key, raw in _read_yaml(Path(path)).items():
            if key not in known:
                _log.warning("Ignoring unknown config key %r in %s", key, path)
                continue
            values[key] = _PARSERS[key](raw)

    for suffix, key in _ENV_KEYS.items():
        raw = env.get(ENV_PREFIX + suffix)
        if raw is not None:
            values[key] = _PARSERS[key](raw)

    return CalculatorConfig(**values)
