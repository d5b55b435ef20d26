"""
Config Module — Daemon settings and their loading.
"""

from .loader import load_daemon_config, load_settings
from .settings import DaemonConfig, GlobalSettings

__all__ = [
    "DaemonConfig",
    "GlobalSettings",
    "load_daemon_config",
    "load_settings",
]
