"""
Remote Resolver — Decide where a mirror gets pushed.

Resolution order for one job:

1. `.lohr` committed at HEAD of the mirror: each non-blank line is a
   literal remote URL, and the list replaces default_remotes.
2. Otherwise, default_remotes stems expanded with the mirror's
   directory name.
3. additional_remotes stems, expanded the same way, are always appended.

The result keeps duplicates and may be empty.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from ..config.settings import GlobalSettings
from ..errors import ProcessError, RemoteResolutionError
from . import git

logger = logging.getLogger(__name__)

CONTROL_FILE = ".lohr"

# git (LC_ALL=C) stderr fragments meaning "there is no such file to read"
_ABSENT_MARKERS = (
    "does not exist in",
    "exists on disk, but not in",
    # empty mirror: HEAD has no commit yet
    "invalid object name 'HEAD'",
)


def expand_stem(stem: str, repo_dir_name: str) -> str:
    """Turn a remote stem into a full URL for one repository."""
    if not stem.endswith("/"):
        stem += "/"
    return stem + repo_dir_name


def parse_control_file(content: str) -> List[str]:
    """Non-blank lines of a `.lohr` file, in order."""
    return [line.strip() for line in content.splitlines() if line.strip()]


def read_control_file(local_path: Path) -> Optional[str]:
    """
    Return the `.lohr` content at HEAD, or None when the file is absent.

    Raises RemoteResolutionError for any other read failure, including
    content that is not valid UTF-8.
    """
    try:
        output = git.show_file(local_path, CONTROL_FILE)
    except ProcessError as e:
        if any(marker in e.stderr for marker in _ABSENT_MARKERS):
            return None
        raise RemoteResolutionError(
            f"couldn't read {CONTROL_FILE} in {local_path}: {e}"
        ) from e

    try:
        return output.stdout.decode("utf-8")
    except UnicodeDecodeError as e:
        raise RemoteResolutionError(
            f"couldn't read {CONTROL_FILE} in {local_path}: not valid UTF-8 ({e})"
        ) from e


def resolve_remotes(local_path: Path, settings: GlobalSettings) -> List[str]:
    """Ordered push targets for the mirror at local_path."""
    repo_dir_name = local_path.name
    remotes: List[str] = []

    content = read_control_file(local_path)
    if content is not None:
        remotes = parse_control_file(content)
        if remotes:
            logger.info(f"[remotes] {repo_dir_name}: {len(remotes)} remote(s) from {CONTROL_FILE}")

    if not remotes:
        remotes = [expand_stem(stem, repo_dir_name) for stem in settings.default_remotes]

    remotes.extend(expand_stem(stem, repo_dir_name) for stem in settings.additional_remotes)
    return remotes
