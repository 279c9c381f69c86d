"""
Server configuration

``server.conf`` is a Java-properties style file (``key=value`` lines,
``#``/``!`` comments) holding three keys: ``web_port``,
``enable_start_run`` and ``monitor_web_status``.
"""

import logging
import re
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, Union

from pydantic import BaseModel, ValidationError, field_validator

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE = "server.conf"
DEFAULT_WEB_PORT = 11000

_ESCAPE = re.compile(r"\\(.)")


class ServerConfig(BaseModel):
    """Validated configuration values."""

    web_port: int = DEFAULT_WEB_PORT
    enable_start_run: bool = True
    monitor_web_status: str = ""

    @field_validator('web_port')
    @classmethod
    def _check_port(cls, v: int) -> int:
        if not 1 <= v <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return v

    @field_validator('enable_start_run', mode='before')
    @classmethod
    def _parse_bool(cls, v):
        if isinstance(v, str):
            lowered = v.strip().lower()
            if lowered not in ("true", "false"):
                raise ValueError("must be true or false")
            return lowered == "true"
        return v

    @field_validator('monitor_web_status', mode='before')
    @classmethod
    def _strip_target(cls, v):
        return v.strip() if isinstance(v, str) else v

    def to_properties(self) -> Dict[str, str]:
        return {
            'web_port': str(self.web_port),
            'enable_start_run': 'true' if self.enable_start_run else 'false',
            'monitor_web_status': self.monitor_web_status,
        }


def parse_properties(text: str) -> Dict[str, str]:
    """Parse ``key=value`` / ``key: value`` lines, skipping blanks and comments."""
    values: Dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line[0] in "#!":
            continue
        positions = [p for p in (line.find("="), line.find(":")) if p != -1]
        if not positions:
            values[line] = ""
            continue
        sep = min(positions)
        # Java writers escape ':' and '=' in values (http\://host)
        values[line[:sep].strip()] = _ESCAPE.sub(r"\1", line[sep + 1:].strip())
    return values


def format_properties(values: Dict[str, str], comment: str = "") -> str:
    lines = []
    if comment:
        lines.append(f"#{comment}")
    lines.append(f"#{datetime.now().strftime('%a %b %d %H:%M:%S %Y')}")
    lines.extend(f"{key}={value}" for key, value in values.items())
    return "\n".join(lines) + "\n"


class ConfigManager:
    """
    Loads, validates and persists ``server.conf``.

    A missing file is created with defaults. An unreadable file or an
    invalid value is logged and the default is used in its place.
    """

    def __init__(self, path: Union[str, Path] = CONFIG_FILE):
        self.path = Path(path)
        self._lock = threading.Lock()
        self.config = ServerConfig()
        self.load()

    def load(self) -> ServerConfig:
        if not self.path.exists():
            logger.info(f"Config file {self.path} not found, creating defaults")
            self.config = ServerConfig()
            self.save()
            return self.config

        try:
            raw = parse_properties(self.path.read_text(encoding="utf-8"))
        except OSError as e:
            logger.error(f"Failed to read config file {self.path}: {e}")
            return self.config

        self.config = self._validate(raw)
        logger.info(f"Loaded config file: {self.path}")
        return self.config

    @staticmethod
    def _validate(raw: Dict[str, str]) -> ServerConfig:
        known = {key: value for key, value in raw.items() if key in ServerConfig.model_fields}
        if known.get('web_port', None) == "":
            known.pop('web_port')
        if 'enable_start_run' in known:
            # Only "true" enables the script when read from the file
            flag = known['enable_start_run'].strip().lower()
            if flag not in ("true", "false"):
                logger.warning(f"enable_start_run={known['enable_start_run']!r} is not true/false, treating as false")
            known['enable_start_run'] = "true" if flag == "true" else "false"
        try:
            return ServerConfig(**known)
        except ValidationError as e:
            # Keep the valid keys, fall back to defaults for the rest
            bad = {str(err['loc'][0]) for err in e.errors()}
            for key in bad:
                logger.error(f"Invalid value for {key}: {known[key]!r}, using default")
                known.pop(key)
            return ServerConfig(**known)

    def save(self) -> None:
        with self._lock:
            try:
                self.path.write_text(
                    format_properties(self.config.to_properties(), "docslot server configuration"),
                    encoding="utf-8",
                )
                logger.info(f"Config file saved: {self.path}")
            except OSError as e:
                logger.error(f"Failed to save config file {self.path}: {e}")

    def set(self, key: str, value: str) -> ServerConfig:
        """
        Validate and persist one key.

        Raises:
            ConfigError: Unknown key or invalid value.
        """
        key = key.lower()
        if key not in ServerConfig.model_fields:
            raise ConfigError(
                f"Unknown config key: {key}",
                detail=f"available keys: {', '.join(ServerConfig.model_fields)}",
            )
        data = self.config.model_dump()
        data[key] = value
        try:
            updated = ServerConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid value for {key}: {value!r}", detail=e.errors()[0]['msg']) from e
        self.config = updated
        self.save()
        return updated

    # Accessors named after the keys they read

    def get_web_port(self) -> int:
        return self.config.web_port

    def is_start_run_enabled(self) -> bool:
        return self.config.enable_start_run

    def get_monitor_web_status(self) -> str:
        return self.config.monitor_web_status

    def set_web_port(self, port: int) -> None:
        self.set('web_port', str(port))

    def set_start_run_enabled(self, enabled: bool) -> None:
        self.set('enable_start_run', 'true' if enabled else 'false')

    def set_monitor_web_status(self, url: str) -> None:
        self.set('monitor_web_status', url)
