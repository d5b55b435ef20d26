"""
Mirror Job — Clone or update one repository, then push it everywhere.

    START ──(no local dir)──▶ MIRRORING ─┐
      │                                  ├─▶ PUSHING_REMOTES ─▶ DONE
      └──(local dir exists)─▶ UPDATING ──┘          │
                                                    ▼
                      (any failure) ───────────▶ FAILED

The first failing push aborts the job: later remotes are not attempted.
Jobs are never retried.
"""

from __future__ import annotations

import logging
import time
import uuid
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..config.settings import GlobalSettings
from ..errors import LohrError
from ..models import Repository
from ..observability.metrics import metrics
from . import git
from .remotes import resolve_remotes

logger = logging.getLogger(__name__)


class JobState(str, Enum):
    START = "start"
    MIRRORING = "mirroring"
    UPDATING = "updating"
    PUSHING_REMOTES = "pushing_remotes"
    DONE = "done"
    FAILED = "failed"


class MirrorJob:
    """A single webhook event's worth of mirroring work."""

    def __init__(self, repo: Repository):
        self.repo = repo
        self.id = uuid.uuid4().hex[:8]
        self.local_path: Optional[Path] = None
        self.state = JobState.START
        self.history: List[JobState] = [JobState.START]
        self.remotes: List[str] = []
        self.pushed: List[str] = []
        self.error: Optional[Exception] = None

    def __repr__(self) -> str:
        return f"MirrorJob({self.repo.full_name!r}, id={self.id}, state={self.state.value})"

    @property
    def _log_extra(self) -> dict:
        return {"repo": self.repo.full_name, "job_id": self.id}

    def _transition(self, state: JobState) -> None:
        logger.debug(f"[job] {self.repo.full_name}: {self.state.value} → {state.value}", extra=self._log_extra)
        self.state = state
        self.history.append(state)

    def _fail(self, error: Exception, status: str) -> None:
        self.error = error
        self._transition(JobState.FAILED)
        metrics.increment("jobs_total", labels={"status": status})

    def repo_exists(self) -> bool:
        return self.local_path is not None and self.local_path.is_dir()

    # ─── Steps ──────────────────────────────────────────────

    def mirror_repo(self) -> None:
        self._transition(JobState.MIRRORING)
        logger.info(f"[job] Cloning repo {self.repo.full_name}...", extra=self._log_extra)
        git.clone_mirror(self.repo.source_url, self.local_path)
        logger.warning(
            f"[job] {self.repo.full_name}: git LFS objects are not mirrored",
            extra=self._log_extra,
        )

    def update_repo(self) -> None:
        self._transition(JobState.UPDATING)
        logger.info(f"[job] Updating repo {self.repo.full_name}...", extra=self._log_extra)
        git.update_mirror(self.local_path)

    def update_mirrors(self, settings: GlobalSettings) -> None:
        self._transition(JobState.PUSHING_REMOTES)
        self.remotes = resolve_remotes(self.local_path, settings)

        if not self.remotes:
            logger.info(f"[job] {self.repo.full_name}: no remotes to push to", extra=self._log_extra)

        for remote in self.remotes:
            logger.info(
                f"[job] Updating mirror {remote}...",
                extra={**self._log_extra, "remote": remote},
            )
            try:
                git.push_mirror(self.local_path, remote)
            except LohrError:
                metrics.increment("pushes_total", labels={"status": "failed"})
                raise
            metrics.increment("pushes_total", labels={"status": "ok"})
            self.pushed.append(remote)

    # ─── Entry point ────────────────────────────────────────

    def run(self, homedir: Path, settings: GlobalSettings) -> JobState:
        """
        Drive the job to a terminal state.

        Returns JobState.DONE, or re-raises the error that moved the
        job to JobState.FAILED.
        """
        started = time.monotonic()
        try:
            local_path = Path(homedir) / self.repo.full_name
            if not local_path.is_absolute():
                raise ValueError(f"mirror path must be absolute: {local_path}")
            self.local_path = local_path

            if not self.repo_exists():
                self.mirror_repo()
            else:
                self.update_repo()
            self.update_mirrors(settings)
        except LohrError as e:
            self._fail(e, "failed")
            raise
        except Exception as e:
            self._fail(e, "error")
            raise
        finally:
            metrics.timing("job_duration_seconds", time.monotonic() - started)

        self._transition(JobState.DONE)
        metrics.increment("jobs_total", labels={"status": "done"})
        logger.info(
            f"[job] {self.repo.full_name}: mirrored to {len(self.pushed)} remote(s)",
            extra=self._log_extra,
        )
        return self.state
