"""
Models — Records passed between the webhook layer and the worker.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Repository:
    """A repository announced by a webhook."""

    full_name: str  # e.g. "owner/name"; determines the mirror location
    source_url: str  # the one URL the mirror is cloned from
    name: str = ""

    def __post_init__(self):
        if not self.name:
            object.__setattr__(self, "name", self.full_name.rstrip("/").rsplit("/", 1)[-1])
