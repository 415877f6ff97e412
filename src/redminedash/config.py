from __future__ import annotations

import dataclasses
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from redminedash.redmine import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SERVER_NAME = "My Redmine Server"


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _to_int(value: Any, default: int, minimum: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        parsed = default
    return max(minimum, parsed)


def _to_str(value: Any, default: str) -> str:
    if value is None:
        return default
    return str(value).strip()


@dataclass(frozen=True)
class AppConfig:
    server_name: str = DEFAULT_SERVER_NAME
    server_url: str = ""
    api_key: str = ""
    request_timeout_seconds: int = 10
    config_source: str = "defaults/env"

    @classmethod
    def from_env(cls) -> "AppConfig":
        config = cls(
            server_name=os.getenv("REDMINE_SERVER_NAME", "").strip() or DEFAULT_SERVER_NAME,
            server_url=os.getenv("REDMINE_URL", "").strip(),
            api_key=os.getenv("REDMINE_API_KEY", "").strip(),
            request_timeout_seconds=max(1, _get_int_env("RD_REQUEST_TIMEOUT", 10)),
        )
        config_path = os.getenv("RD_CONFIG_PATH", "redminedash.config.json")
        return config.merge_file(Path(config_path))

    def merge_file(self, path: Path) -> "AppConfig":
        if not path.exists():
            return self
        loaded = self._load_config_file(path)
        if not loaded:
            return self
        merged = dict(self.__dict__)
        for key in merged:
            if key in loaded:
                merged[key] = loaded[key]
        merged["server_name"] = _to_str(merged["server_name"], self.server_name) or DEFAULT_SERVER_NAME
        merged["server_url"] = _to_str(merged["server_url"], self.server_url)
        merged["api_key"] = _to_str(merged["api_key"], self.api_key)
        merged["request_timeout_seconds"] = _to_int(
            merged["request_timeout_seconds"], self.request_timeout_seconds, 1
        )
        merged["config_source"] = str(path)
        return AppConfig(**merged)

    def _load_config_file(self, path: Path) -> dict[str, Any]:
        suffix = path.suffix.lower()
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Could not read config file %s: %s", path, e)
            return {}
        if suffix == ".json":
            try:
                parsed = json.loads(text)
            except json.JSONDecodeError as e:
                logger.warning("Ignoring invalid JSON config %s: %s", path, e)
                return {}
            return parsed if isinstance(parsed, dict) else {}
        if suffix in {".yml", ".yaml"}:
            try:
                parsed = yaml.safe_load(text)
            except yaml.YAMLError as e:
                logger.warning("Ignoring invalid YAML config %s: %s", path, e)
                return {}
            return parsed if isinstance(parsed, dict) else {}
        logger.warning("Unsupported config file type: %s", path)
        return {}

    def missing_settings(self) -> tuple[str, ...]:
        missing: list[str] = []
        if not self.server_url.strip():
            missing.append("server_url")
        if not self.api_key.strip():
            missing.append("api_key")
        return tuple(missing)

    def require_connection(self) -> None:
        missing = self.missing_settings()
        if missing:
            raise ConfigurationError(missing)

    def with_connection(self, server_name: str, server_url: str, api_key: str) -> "AppConfig":
        return dataclasses.replace(
            self,
            server_name=server_name.strip() or DEFAULT_SERVER_NAME,
            server_url=server_url.strip(),
            api_key=api_key.strip(),
            config_source="session",
        )
