"""
Shared fixtures for webhook and mirror tests.

Provides a Flask test app wired to a temporary mirror home and a job
queue that the tests can inspect.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from lohr.config.settings import DaemonConfig, GlobalSettings
from lohr.mirror.worker import JobQueue

from helpers import SECRET


@pytest.fixture
def homedir(tmp_path: Path) -> Path:
    home = tmp_path / "mirrors"
    home.mkdir()
    return home


@pytest.fixture
def settings() -> GlobalSettings:
    return GlobalSettings(
        default_remotes=["git@github.com:example"],
        additional_remotes=["/srv/backup"],
        blacklist=[".*-test$"],
    )


@pytest.fixture
def config(homedir: Path, settings: GlobalSettings) -> DaemonConfig:
    return DaemonConfig(homedir=homedir, secret=SECRET, settings=settings)


@pytest.fixture
def job_queue() -> JobQueue:
    return JobQueue()


@pytest.fixture
def app(config, job_queue):
    """Create a Flask test app around the temp configuration."""
    from lohr.server import create_app

    app = create_app(config, job_queue)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()
