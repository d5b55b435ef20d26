"""
Git — Run git commands against local mirrors.

Every git invocation in lohr goes through run_git(), which captures
output and turns an unsuccessful exit into a ProcessError. The higher
level helpers (clone, update, push, show) only compose arguments.

No timeout is applied: a hung network operation blocks the caller.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..errors import ProcessError

logger = logging.getLogger(__name__)

GIT = "git"


@dataclass
class GitOutput:
    """
    Captured output of a successful git command.

    stdout is kept as raw bytes: callers decide how strictly to decode it.
    """

    returncode: int
    stdout: bytes
    stderr: str


def _git_env() -> dict:
    # Stable, untranslated error messages (show_file() inspects them)
    env = dict(os.environ)
    env["LC_ALL"] = "C"
    return env


def run_git(
    operation: str,
    *args: str,
    cwd: Optional[Path] = None,
    target: Optional[str] = None,
) -> GitOutput:
    """
    Run ``git <args>`` and return its output.

    Raises ProcessError on a non-zero exit or when git is killed by a signal.
    """
    cmd = [GIT] + list(args)
    logger.debug(f"[git] {' '.join(cmd)}")

    result = subprocess.run(
        cmd,
        cwd=str(cwd) if cwd else None,
        capture_output=True,
        env=_git_env(),
    )
    # stderr is only ever logged or matched against ASCII markers
    stderr = (result.stderr or b"").decode("utf-8", errors="replace")

    if result.returncode != 0:
        raise ProcessError(
            operation,
            cmd,
            result.returncode,
            stderr=stderr.strip(),
            target=target,
        )

    return GitOutput(result.returncode, result.stdout or b"", stderr)


def clone_mirror(source_url: str, local_path: Path) -> GitOutput:
    """Create a bare mirror clone of source_url at local_path."""
    return run_git("mirror repo", "clone", "--mirror", source_url, str(local_path))


def update_mirror(local_path: Path) -> GitOutput:
    """Fetch origin into an existing mirror, dropping refs deleted upstream."""
    return run_git(
        "update origin remote",
        "-C", str(local_path),
        "remote", "update", "origin",
        # without --prune, deleted branches and tags linger locally
        "--prune",
    )


def push_mirror(local_path: Path, remote: str) -> GitOutput:
    """Push every ref of the mirror to remote."""
    return run_git(
        "push mirror",
        "-C", str(local_path),
        "push", "--mirror", remote,
        target=remote,
    )


def show_file(local_path: Path, filename: str, ref: str = "HEAD") -> GitOutput:
    """Read filename as committed at ref, without a working tree."""
    return run_git(
        "read control file",
        "-C", str(local_path),
        "show", f"{ref}:{filename}",
    )
