from __future__ import annotations
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from shared.log import get_logger
from shared.utils import parse_hostport

logger = get_logger(__name__)

FRAMING_MODES = ("chunk", "line")


class ConfigError(Exception):
    """Raised when a configuration source holds an unusable value."""
    pass


@dataclass(frozen=True)
class ClientConfig:
    host: str = "127.0.0.1"
    port: int = 4000
    username: Optional[str] = None
    chunk_size: int = 1024
    line_terminator: str = ""          # "\n" for newline-delimited servers
    quit_sentinel: str = "/quit"
    framing: str = "chunk"          # "chunk" or "line"
    timestamps: bool = False
    color: Optional[bool] = None    # None = auto-detect terminal
    connect_timeout: Optional[float] = None
    log_level: str = "WARNING"
    log_file: Optional[Path] = None

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def validate(self) -> "ClientConfig":
        if not self.host:
            raise ConfigError("host must not be empty")
        if not 0 < self.port <= 65535:
            raise ConfigError(f"port out of range: {self.port}")
        if self.chunk_size <= 0:
            raise ConfigError(f"chunk_size must be positive: {self.chunk_size}")
        if self.framing not in FRAMING_MODES:
            raise ConfigError(f"framing must be one of {FRAMING_MODES}, got {self.framing!r}")
        if not self.quit_sentinel:
            raise ConfigError("quit_sentinel must not be empty")
        if self.connect_timeout is not None and self.connect_timeout <= 0:
            raise ConfigError(f"connect_timeout must be positive: {self.connect_timeout}")
        return self

    def merged(self, **overrides: Any) -> "ClientConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "server" in changes:
            changes.update(_server_fields(changes.pop("server")))
        return replace(self, **changes)


# Expected YAML value types per field; None is accepted for Optional fields.
_FIELD_TYPES: Dict[str, tuple] = {
    "host": (str,),
    "port": (int,),
    "username": (str,),
    "chunk_size": (int,),
    "line_terminator": (str,),
    "quit_sentinel": (str,),
    "framing": (str,),
    "timestamps": (bool,),
    "color": (bool,),
    "connect_timeout": (int, float),
    "log_level": (str,),
    "log_file": (str,),
}


def default_config_path() -> Path:
    return Path.home() / ".duplexchat" / "client.yaml"


def _server_fields(server: str) -> Dict[str, Any]:
    try:
        host, port = parse_hostport(server)
    except ValueError as e:
        raise ConfigError(str(e)) from None
    return {"host": host, "port": port}


def load_config_file(path: Path) -> Dict[str, Any]:
    """Read client settings from YAML. Returns an empty dict when the file is absent."""
    if not path.exists():
        logger.debug("No config file at %s; using defaults", path)
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")

    known = {f.name for f in fields(ClientConfig)}
    result: Dict[str, Any] = {}
    for key, value in data.items():
        if key == "server":
            result.update(_server_fields(str(value)))
            continue
        if key not in known:
            logger.warning("Ignoring unknown config key %r in %s", key, path)
            continue
        expected = _FIELD_TYPES[key]
        # bool is an int subclass; keep it out of numeric fields
        if value is not None and (not isinstance(value, expected) or (isinstance(value, bool) and bool not in expected)):
            raise ConfigError(f"{path}: {key!r} has wrong type {type(value).__name__}")
        result[key] = Path(value).expanduser() if key == "log_file" and value else value
    return result


def load_env() -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    server = os.getenv("CHAT_SERVER")
    if server:
        result.update(_server_fields(server))
    level = os.getenv("CHAT_LOG_LEVEL")
    if level:
        result["log_level"] = level
    log_file = os.getenv("CHAT_LOG_FILE")
    if log_file:
        result["log_file"] = Path(log_file).expanduser()
    return result


def load_config(path: Optional[Path] = None, **overrides: Any) -> ClientConfig:
    """
    Build the effective configuration.

    Precedence, lowest first: defaults, YAML file, environment, ``overrides``
    (CLI options; None values are ignored).
    """
    config = ClientConfig()
    config = replace(config, **load_config_file(path or default_config_path()))
    config = replace(config, **load_env())
    return config.merged(**overrides).validate()
