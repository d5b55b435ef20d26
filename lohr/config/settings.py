"""
Settings Models — Pydantic schema for the daemon configuration.

The configuration document (lohr-config.yaml) looks like:

    default_remotes:
      - "git@github.com:example"
    additional_remotes:
      - "/srv/backup"
    blacklist:
      - ".*-private$"

Every field is optional and defaults to an empty list.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GlobalSettings(BaseModel):
    """Daemon-wide mirroring settings, read-only once loaded."""

    model_config = ConfigDict(frozen=True)

    # Remote stems used when a repository has no usable `.lohr` file
    default_remotes: List[str] = Field(default_factory=list)
    # Remote stems pushed to for every repository
    additional_remotes: List[str] = Field(default_factory=list)
    # Regexes; a matching full_name is never mirrored, even with a `.lohr` file
    blacklist: List[str] = Field(default_factory=list)

    @field_validator("default_remotes", "additional_remotes", "blacklist", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return [] if value is None else value

    @field_validator("blacklist")
    @classmethod
    def _patterns_compile(cls, patterns: List[str]) -> List[str]:
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid blacklist pattern {pattern!r}: {e}")
        return patterns


@dataclass(frozen=True)
class DaemonConfig:
    """Process-wide configuration shared by request handlers and the worker."""

    homedir: Path
    secret: bytes
    settings: GlobalSettings
