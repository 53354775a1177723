"""Configuration for running and serving packaged eBPF programs."""

from __future__ import annotations

import json
import logging
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

from .exporter import ExportFormat

logger = logging.getLogger(__name__)

_MISSING = object()


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _is_list(value: Any) -> bool:
    return isinstance(value, list)


def _pick(data: Any, name: str, check: Callable[[Any], bool], default: Any) -> Any:
    """Return ``data[name]`` if present and of the right kind, else ``default``."""
    value = data.get(name, _MISSING) if isinstance(data, Mapping) else _MISSING
    if value is _MISSING or not check(value):
        logger.warning("%s use default value", name)
        return default
    return value


@dataclass
class TrackerConfig:
    """Where to find one eBPF program package and how to export its events."""

    url: str = ""
    json_data: str = ""
    args: list[str] = field(default_factory=list)
    export_format: ExportFormat = ExportFormat.PLANT_TEXT

    @classmethod
    def from_dict(cls, data: Any) -> TrackerConfig:
        """Build from a mapping; missing or ill-typed fields keep their defaults."""
        return cls(
            url=_pick(data, "url", _is_str, ""),
            json_data=_pick(data, "json_data", _is_str, ""),
            args=list(_pick(data, "args", _is_str_list, [])),
        )

    @classmethod
    def from_json_str(cls, json_str: str) -> TrackerConfig:
        """Parse a JSON document; an unparsable one yields the default config."""
        try:
            data = json.loads(json_str)
        except (TypeError, ValueError):
            logger.error("json parse error for tracker_config_data! %s", json_str)
            return cls()
        return cls.from_dict(data)


@dataclass
class EunomiaConfig:
    """Settings shared by the command line and the configuration file."""

    run_selected: str = "server"
    enabled_trackers: list[TrackerConfig] = field(default_factory=list)
    exit_after: int = 0
    server_port: int = 8527
    server_host: str = "localhost"

    @classmethod
    def from_dict(cls, data: Any) -> EunomiaConfig:
        """Build from a mapping; missing or ill-typed fields keep their defaults."""
        trackers = _pick(data, "enabled_trackers", _is_list, [])
        return cls(
            run_selected=_pick(data, "run_selected", _is_str, "server"),
            enabled_trackers=[TrackerConfig.from_dict(item) for item in trackers],
            server_host=_pick(data, "server_host", _is_str, "localhost"),
            server_port=int(_pick(data, "server_port", _is_number, 8527)),
            exit_after=int(_pick(data, "exit_after", _is_number, 0)),
        )

    @classmethod
    def from_toml_file(cls, file_path: str) -> EunomiaConfig:
        """Read a TOML file; an unreadable or invalid file yields the default config."""
        try:
            with open(file_path, "rb") as handle:
                data = tomllib.load(handle)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            logger.error("parse toml file error: %s", exc)
            return cls()
        return cls.from_dict(data)

    @classmethod
    def from_json_file(cls, file_path: str) -> EunomiaConfig:
        """Read a JSON file. Raises OSError or ValueError if it cannot be read."""
        with open(file_path, encoding="utf-8") as handle:
            data = json.load(handle)
        return cls.from_dict(data)