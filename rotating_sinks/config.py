"""Sink configuration: frozen dataclass built from defaults, an optional YAML file and env vars."""

import logging
import os
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable

import yaml

from rotating_sinks.errors import ConfigurationError
from rotating_sinks.filenames import dated, dated_date_only
from rotating_sinks.sinks import (
    BaseSink,
    DailyFileSink,
    NullLock,
    RotatingFileSink,
    SimpleFileSink,
)

logger = logging.getLogger(__name__)

SINK_KINDS = ("simple", "rotating", "daily")


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class SinkConfig:
    kind: str = "rotating"
    filename: str = "./logs/application.log"
    max_file_size_bytes: int = 10 * 1024 * 1024  # 10 MB
    max_files: int = 5
    rotation_hour: int = 0
    rotation_minute: int = 0
    date_only: bool = False
    force_flush: bool = False
    truncate: bool = False
    thread_safe: bool = True


# field -> parser, applied to env strings and to YAML scalars alike
_FIELD_PARSERS = {
    "kind": str,
    "filename": str,
    "max_file_size_bytes": int,
    "max_files": int,
    "rotation_hour": int,
    "rotation_minute": int,
    "date_only": _parse_bool,
    "force_flush": _parse_bool,
    "truncate": _parse_bool,
    "thread_safe": _parse_bool,
}

# env var -> field
_ENV_FIELDS = {
    "SINK_KIND": "kind",
    "LOG_FILENAME": "filename",
    "MAX_FILES": "max_files",
    "ROTATION_HOUR": "rotation_hour",
    "ROTATION_MINUTE": "rotation_minute",
    "DATE_ONLY": "date_only",
    "FORCE_FLUSH": "force_flush",
    "TRUNCATE": "truncate",
    "THREAD_SAFE": "thread_safe",
}

_PARSE_ERRORS = (TypeError, ValueError, OverflowError)


def load_yaml_config(path: str | None) -> dict:
    """Return the ``sink`` section of a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    logger.info("Loaded YAML config from %s", path)
    section = data.get("sink", {}) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"'sink' section in {path} must be a mapping")
    return section


def _coerce_yaml(section: dict) -> dict:
    unknown = set(section) - set(_FIELD_PARSERS)
    if unknown:
        raise ConfigurationError(f"Unknown sink settings: {', '.join(sorted(map(str, unknown)))}")
    values = {}
    for name, raw in section.items():
        if raw is None or isinstance(raw, (dict, list)):
            raise ConfigurationError(f"Invalid value for sink setting {name}: {raw!r}")
        try:
            values[name] = _FIELD_PARSERS[name](str(raw))
        except _PARSE_ERRORS as e:
            raise ConfigurationError(f"Invalid value for sink setting {name}: {raw!r}") from e
    return values


def _from_env() -> dict:
    values = {}
    # MAX_FILE_SIZE_BYTES takes precedence over MAX_FILE_SIZE_MB
    raw_bytes = os.environ.get("MAX_FILE_SIZE_BYTES")
    raw_mb = os.environ.get("MAX_FILE_SIZE_MB")
    try:
        if raw_bytes is not None:
            values["max_file_size_bytes"] = int(raw_bytes)
        elif raw_mb is not None:
            values["max_file_size_bytes"] = int(float(raw_mb) * 1024 * 1024)
        for env_name, field_name in _ENV_FIELDS.items():
            raw = os.environ.get(env_name)
            if raw is not None:
                values[field_name] = _FIELD_PARSERS[field_name](raw)
    except _PARSE_ERRORS as e:
        raise ConfigurationError(f"Invalid environment value: {e}") from e
    return values


def load_config(yaml_path: str | None = None) -> SinkConfig:
    """Build SinkConfig: defaults, then the YAML ``sink`` section, then env vars."""
    config = replace(SinkConfig(), **_coerce_yaml(load_yaml_config(yaml_path)))
    config = replace(config, **_from_env())
    if config.kind not in SINK_KINDS:
        raise ConfigurationError(
            f"Unknown sink kind {config.kind!r}, expected one of {', '.join(SINK_KINDS)}"
        )
    return config


def build_sink(config: SinkConfig, clock: Callable[[], datetime] | None = None) -> BaseSink:
    """Instantiate the sink described by *config*."""
    lock = None if config.thread_safe else NullLock()
    if config.kind == "simple":
        sink = SimpleFileSink(config.filename, truncate=config.truncate, lock=lock)
    elif config.kind == "rotating":
        sink = RotatingFileSink(
            config.filename, config.max_file_size_bytes, config.max_files, lock=lock
        )
    elif config.kind == "daily":
        sink = DailyFileSink(
            config.filename,
            rotation_hour=config.rotation_hour,
            rotation_minute=config.rotation_minute,
            filename_calculator=dated_date_only if config.date_only else dated,
            clock=clock,
            lock=lock,
        )
    else:
        raise ConfigurationError(f"Unknown sink kind {config.kind!r}")
    sink.set_force_flush(config.force_flush)
    logger.info("Created %s sink writing to %s", config.kind, sink.filename)
    return sink
