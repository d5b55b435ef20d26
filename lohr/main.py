"""
lohr — CLI Entry Point

Usage:
    lohr serve [--host 0.0.0.0] [--port 8000] [--home DIR] [--config FILE]
    lohr check-config [--home DIR] [--config FILE] [--json]
"""

from __future__ import annotations

# Load .env FIRST, before anything reads LOHR_* variables
from pathlib import Path
from dotenv import load_dotenv

_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

import json
from typing import Optional

import click

from .config.loader import load_daemon_config
from .errors import ConfigError
from .logging_config import setup_logging


@click.group()
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR (default: $LOG_LEVEL or INFO)")
@click.option("--log-format", type=click.Choice(["text", "json"]), default=None, help="Log output format")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], log_format: Optional[str]) -> None:
    """lohr — mirror git repositories when a webhook says they changed."""
    ctx.ensure_object(dict)
    setup_logging(level=log_level, format_type=log_format)


@cli.command()
@click.option("--host", default="0.0.0.0", help="Bind address")
@click.option("--port", type=int, default=8000, help="Port (default: 8000)")
@click.option("--home", default=None, help="Mirror directory (default: $LOHR_HOME or ./)")
@click.option("--config", "config_path", default=None, help="Settings YAML (default: $LOHR_CONFIG or <home>/lohr-config.yaml)")
def serve(host: str, port: int, home: Optional[str], config_path: Optional[str]) -> None:
    """Run the webhook server and the mirror worker."""
    from .server import run_server

    try:
        config = load_daemon_config(home=home, config=config_path)
    except ConfigError as e:
        raise click.ClickException(str(e))

    run_server(config, host=host, port=port)


@cli.command("check-config")
@click.option("--home", default=None, help="Mirror directory (default: $LOHR_HOME or ./)")
@click.option("--config", "config_path", default=None, help="Settings YAML")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def check_config(home: Optional[str], config_path: Optional[str], as_json: bool) -> None:
    """Load the configuration and print the resolved settings."""
    try:
        config = load_daemon_config(home=home, config=config_path, require_secret=False)
    except ConfigError as e:
        raise click.ClickException(str(e))

    settings = config.settings
    if as_json:
        data = {"homedir": str(config.homedir), **settings.model_dump()}
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"Home:               {config.homedir}")
    click.echo(f"Secret:             {'set' if config.secret else 'MISSING'}")
    for label, values in (
        ("Default remotes", settings.default_remotes),
        ("Additional remotes", settings.additional_remotes),
        ("Blacklist", settings.blacklist),
    ):
        click.echo(f"{label + ':':19} {len(values)}")
        for value in values:
            click.echo(f"  - {value}")

    if not config.secret:
        click.secho("⚠ LOHR_SECRET is not set; `lohr serve` will refuse to start", fg="yellow")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
