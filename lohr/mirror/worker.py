"""
Worker — The single consumer of the mirror job queue.

Webhook handlers enqueue jobs from any thread; exactly one worker thread
runs them, one at a time, in arrival order. Nothing else touches the
mirror directories, so no per-repository locking is needed.

## Usage

    queue = JobQueue()
    worker = Worker(queue, config)
    worker.start()          # background thread
    queue.put(MirrorJob(repo))
"""

from __future__ import annotations

import logging
import queue as queue_lib
import threading
from typing import Optional, Union

from ..config.settings import DaemonConfig
from ..errors import LohrError, ProcessError
from ..observability.metrics import metrics
from .job import MirrorJob

logger = logging.getLogger(__name__)


class _Stop:
    """Sentinel telling the worker loop to exit."""


_STOP = _Stop()


class JobQueue:
    """Unbounded in-memory FIFO of mirror jobs. put() never blocks."""

    def __init__(self):
        self._queue: "queue_lib.Queue[Union[MirrorJob, _Stop]]" = queue_lib.Queue()

    def put(self, job: Union[MirrorJob, _Stop]) -> None:
        self._queue.put_nowait(job)
        metrics.set_gauge("queue_size", self._queue.qsize())

    def get(self, block: bool = True) -> Union[MirrorJob, _Stop]:
        item = self._queue.get(block=block)
        metrics.set_gauge("queue_size", self._queue.qsize())
        return item

    def __len__(self) -> int:
        return self._queue.qsize()


class Worker:
    """Runs queued jobs strictly one at a time."""

    def __init__(self, job_queue: JobQueue, config: DaemonConfig):
        self.queue = job_queue
        self.config = config
        self._thread: Optional[threading.Thread] = None

    def run_job(self, job: MirrorJob) -> None:
        """Run one job, logging (never raising) its failure."""
        try:
            job.run(self.config.homedir, self.config.settings)
        except ProcessError as e:
            logger.error(
                f"[worker] couldn't process job for {job.repo.full_name}: {e}",
                extra={"repo": job.repo.full_name, "job_id": job.id, "remote": e.target},
            )
        except LohrError as e:
            logger.error(
                f"[worker] couldn't process job for {job.repo.full_name}: {e}",
                extra={"repo": job.repo.full_name, "job_id": job.id},
            )
        except Exception:
            logger.exception(
                f"[worker] unexpected error in job for {job.repo.full_name}",
                extra={"repo": job.repo.full_name, "job_id": job.id},
            )

    def run_forever(self) -> None:
        """Block on the queue and run jobs until stop() is called."""
        logger.info(f"[worker] Started (homedir={self.config.homedir})")
        while True:
            job = self.queue.get()
            if job is _STOP:
                break
            self.run_job(job)
        logger.info("[worker] Stopped")

    def run_pending(self) -> int:
        """Run every job currently queued on the calling thread. Returns the count."""
        count = 0
        while True:
            try:
                job = self.queue.get(block=False)
            except queue_lib.Empty:
                return count
            if job is _STOP:
                return count
            self.run_job(job)
            count += 1

    def start(self) -> threading.Thread:
        self._thread = threading.Thread(
            target=self.run_forever, name="lohr-worker", daemon=True
        )
        self._thread.start()
        return self._thread

    def stop(self, timeout: Optional[float] = None) -> None:
        """Let the current and already-queued jobs finish, then exit."""
        self.queue.put(_STOP)
        if self._thread is not None:
            self._thread.join(timeout)
