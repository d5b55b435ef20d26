"""
Tests for the click entry point.
"""

from __future__ import annotations

import json
import logging
from unittest import mock

import pytest
from click.testing import CliRunner

from lohr.main import cli


@pytest.fixture
def runner(monkeypatch):
    for name in ("LOHR_HOME", "LOHR_SECRET", "LOHR_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield CliRunner()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


class TestCheckConfig:

    def test_prints_settings(self, runner, tmp_path):
        (tmp_path / "lohr-config.yaml").write_text(
            "default_remotes: [git@gh:org]\nblacklist: ['-test$']\n"
        )
        result = runner.invoke(cli, ["check-config", "--home", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "git@gh:org" in result.output
        assert "-test$" in result.output
        assert "LOHR_SECRET is not set" in result.output

    def test_json_output(self, runner, tmp_path):
        # keep INFO log lines (stderr) out of the JSON document
        result = runner.invoke(
            cli, ["--log-level", "WARNING", "check-config", "--home", str(tmp_path), "--json"]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["homedir"] == str(tmp_path.resolve())
        assert data["default_remotes"] == []

    def test_invalid_config_fails(self, runner, tmp_path):
        (tmp_path / "lohr-config.yaml").write_text("blacklist: ['(']\n")
        result = runner.invoke(cli, ["check-config", "--home", str(tmp_path)])

        assert result.exit_code != 0
        assert "Invalid configuration" in result.output


class TestServe:

    def test_requires_secret(self, runner, tmp_path):
        with mock.patch("lohr.server.run_server") as run_server:
            result = runner.invoke(cli, ["serve", "--home", str(tmp_path)])

        assert result.exit_code != 0
        assert "LOHR_SECRET" in result.output
        run_server.assert_not_called()

    def test_starts_server(self, runner, tmp_path, monkeypatch):
        monkeypatch.setenv("LOHR_SECRET", "hunter2")
        with mock.patch("lohr.server.run_server") as run_server:
            result = runner.invoke(cli, ["serve", "--home", str(tmp_path), "--port", "9000"])

        assert result.exit_code == 0, result.output
        config = run_server.call_args[0][0]
        assert config.secret == b"hunter2"
        assert run_server.call_args.kwargs == {"host": "0.0.0.0", "port": 9000}
