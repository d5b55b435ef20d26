"""
Config Loader — Build the daemon configuration from env vars and YAML.

## Environment Variables

- LOHR_HOME: Directory holding the mirrors (default: ./)
- LOHR_SECRET: Shared webhook secret (required)
- LOHR_CONFIG: Path to the configuration document
  (default: <LOHR_HOME>/lohr-config.yaml)

## Usage

    from lohr.config.loader import load_daemon_config

    config = load_daemon_config()
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic import ValidationError

from ..errors import ConfigError
from .settings import DaemonConfig, GlobalSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "lohr-config.yaml"


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping. An empty document is an empty mapping."""
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def load_settings(path: Optional[Path], required: bool = False) -> GlobalSettings:
    """
    Load GlobalSettings from a YAML document.

    Args:
        path: Configuration document. None means "no document".
        required: When True, a missing document is an error instead of
                  falling back to defaults.
    """
    if path is None or not path.exists():
        if required:
            raise ConfigError(f"Configuration file not found: {path}")
        logger.info("No configuration file found, using default settings")
        return GlobalSettings()

    data = load_yaml(path)
    try:
        settings = GlobalSettings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}:\n{e}")

    logger.info(
        f"Loaded settings from {path}: "
        f"{len(settings.default_remotes)} default remote(s), "
        f"{len(settings.additional_remotes)} additional remote(s), "
        f"{len(settings.blacklist)} blacklist pattern(s)"
    )
    return settings


def resolve_homedir(home: Optional[str] = None) -> Path:
    """Canonicalize the mirror home directory; it must already exist."""
    raw = home or os.environ.get("LOHR_HOME") or "./"
    path = Path(raw).expanduser()
    if not path.is_dir():
        raise ConfigError(f"LOHR_HOME isn't valid: {raw}")
    return path.resolve()


def load_secret() -> bytes:
    secret = os.environ.get("LOHR_SECRET")
    if not secret:
        raise ConfigError(
            "please provide a secret (LOHR_SECRET), "
            "otherwise anyone can send you a malicious webhook"
        )
    return secret.encode("utf-8")


def find_config_path(homedir: Path, config: Optional[str] = None) -> Tuple[Path, bool]:
    """
    Pick the configuration document.

    Returns (path, explicit): explicit is True when the path came from the
    caller or LOHR_CONFIG, in which case it must exist.
    """
    explicit = config or os.environ.get("LOHR_CONFIG")
    if explicit:
        return Path(explicit).expanduser(), True
    return homedir / DEFAULT_CONFIG_NAME, False


def load_daemon_config(
    home: Optional[str] = None,
    config: Optional[str] = None,
    require_secret: bool = True,
) -> DaemonConfig:
    """Assemble the immutable DaemonConfig used by the server and the worker."""
    homedir = resolve_homedir(home)
    secret = load_secret() if require_secret else os.environ.get("LOHR_SECRET", "").encode("utf-8")
    path, explicit = find_config_path(homedir, config)
    settings = load_settings(path, required=explicit)
    return DaemonConfig(homedir=homedir, secret=secret, settings=settings)
