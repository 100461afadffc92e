"""CLI entry point for the email triage server."""

import logging

import click
from dotenv import load_dotenv

from inbox_triage.config import TriageConfig, configure_logging

logger = logging.getLogger(__name__)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Email triage: serve the MCP tools, authorize Gmail, or inspect the inbox."""
    load_dotenv()
    configure_logging("WARNING")  # keep CLI output clean; `serve` raises it
    ctx.obj = TriageConfig.from_env()


# Import and register commands after cli is defined to avoid circular imports.
from inbox_triage.cli.commands import auth, important, serve, summary  # noqa: E402

cli.add_command(serve)
cli.add_command(auth)
cli.add_command(important)
cli.add_command(summary)
