from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_API_BASE_URL = "https://main.api.agoric.net:443/agoric/vstorage"
DEFAULT_ROOT_PATH = "published"
DEFAULT_COLUMN_COUNT = 6
DEFAULT_TIMEOUT = 10.0
DEFAULT_CONNECT_TIMEOUT = 3.05
DEFAULT_LOG_FILE = "/tmp/vsttui_debug.log"


class ConfigError(RuntimeError):
    pass


@dataclass
class Config:
    api_base_url: str = DEFAULT_API_BASE_URL
    root_path: str = DEFAULT_ROOT_PATH
    column_count: int = DEFAULT_COLUMN_COUNT
    timeout: float = DEFAULT_TIMEOUT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    log_file: str = DEFAULT_LOG_FILE
    source_path: Optional[Path] = None

    def to_json(self) -> str:
        # Path values serialize as plain strings
        return json.dumps(asdict(self), default=str, indent=2, sort_keys=True)

    def with_overrides(
        self, api_base_url: Optional[str] = None, root_path: Optional[str] = None
    ) -> "Config":
        """Return a copy with command-line overrides applied and validated."""
        cfg = Config(
            api_base_url=api_base_url or self.api_base_url,
            root_path=root_path or self.root_path,
            column_count=self.column_count,
            timeout=self.timeout,
            connect_timeout=self.connect_timeout,
            log_file=self.log_file,
            source_path=self.source_path,
        )
        _validate(cfg)
        return cfg


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        # Expand ${VAR} style
        return os.path.expandvars(value)
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    return value


def _validate(cfg: Config) -> None:
    if not cfg.api_base_url:
        raise ConfigError("api_base_url must not be empty")
    if not cfg.root_path or any(not part for part in cfg.root_path.split(".")):
        raise ConfigError(f"Invalid root_path: {cfg.root_path!r}")
    if cfg.column_count < 1:
        raise ConfigError(f"column_count must be at least 1, got {cfg.column_count}")
    if cfg.timeout <= 0:
        raise ConfigError(f"timeout must be positive, got {cfg.timeout}")
    if cfg.connect_timeout <= 0:
        raise ConfigError(f"connect_timeout must be positive, got {cfg.connect_timeout}")


def resolve_config_path() -> Optional[Path]:
    """Locate the config file; None means built-in defaults apply."""
    # Highest priority: explicit override
    override = os.environ.get("VSTCTL_CONFIG")
    if override:
        p = Path(override).expanduser()
        if p.is_file():
            return p
        raise ConfigError(f"VSTCTL_CONFIG path not found: {p}")

    # XDG base dirs
    xdg_home = Path(os.environ.get("XDG_CONFIG_HOME", "~/.config")).expanduser()
    candidates = [xdg_home / "vstctl" / "config.yaml"]

    xdg_dirs = os.environ.get("XDG_CONFIG_DIRS", "/etc/xdg")
    for d in xdg_dirs.split(":"):
        if d:
            candidates.append(Path(d) / "vstctl" / "config.yaml")

    for c in candidates:
        if c.is_file():
            return c

    return None


def load_config(path: Optional[Path] = None) -> Config:
    cfg_path = path or resolve_config_path()
    if cfg_path is None:
        return Config()

    try:
        data = yaml.safe_load(cfg_path.read_text()) or {}
    except FileNotFoundError as e:
        raise ConfigError(str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {cfg_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {cfg_path} must contain a mapping")

    data: Dict[str, Any] = _expand_env(data)
    try:
        cfg = Config(
            api_base_url=str(data.get("api_base_url") or DEFAULT_API_BASE_URL).rstrip("/"),
            root_path=str(data.get("root_path") or DEFAULT_ROOT_PATH),
            column_count=int(data.get("column_count", DEFAULT_COLUMN_COUNT)),
            timeout=float(data.get("timeout", DEFAULT_TIMEOUT)),
            connect_timeout=float(data.get("connect_timeout", DEFAULT_CONNECT_TIMEOUT)),
            log_file=str(data.get("log_file") or DEFAULT_LOG_FILE),
            source_path=cfg_path,
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value in {cfg_path}: {e}") from e

    _validate(cfg)
    return cfg
