"""CLI command implementations."""

from __future__ import annotations

import asyncio
import logging

import click
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from inbox_triage.config import TriageConfig, configure_logging
from inbox_triage.errors import TriageError
from inbox_triage.mail.credentials import CredentialStore
from inbox_triage.server.main import create_app, run_server
from inbox_triage.triage.categories import Category

logger = logging.getLogger(__name__)
console = Console(width=200)

_CATEGORY_STYLE: dict[Category, str] = {
    Category.URGENT: "bold red",
    Category.IMPORTANT: "yellow",
    Category.NORMAL: "default",
    Category.LIKELY_SPAM: "dim",
}


@click.command()
@click.pass_obj
def serve(config: TriageConfig) -> None:
    """Run the MCP server on stdio (for Claude Desktop or any MCP client)."""
    configure_logging(config.log_level, force=True)
    run_server(config)


@click.command()
@click.pass_obj
def auth(config: TriageConfig) -> None:
    """One-time Gmail authorization: visit a URL, paste the code, store the token.

    Run this in a terminal, never from the MCP client: it reads from stdin.
    """
    store = CredentialStore(config.credentials_path, config.token_path)
    try:
        if store.has_token():
            store.load()
            console.print(f"[green]Token already exists at {store.token_path}[/green]")
            console.print("You're all set! The MCP server can now use this token.")
            return

        flow = store.build_flow()
        url = store.authorization_url(flow)
        console.print("[bold]Gmail Authentication Required[/bold]\n")
        console.print("Authorize this app by visiting this URL:\n")
        console.print(escape(url), soft_wrap=True)  # unwrapped so it can be copied
        console.print("\nAfter authorization, you'll get a code. Enter it below.")
        code = click.prompt("Enter the code")
        store.exchange_code(flow, code)
    except TriageError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise SystemExit(1) from exc
    except Exception as exc:  # noqa: BLE001
        logger.error("Authorization failed: %s", exc)
        console.print(f"[red]Error getting token: {escape(str(exc))}[/red]")
        raise SystemExit(1) from exc

    console.print(f"[green]Token stored successfully at {store.token_path}[/green]")
    console.print("The MCP server can now access your Gmail!")


@click.command()
@click.option("--hours", default=24.0, show_default=True, help="How many hours back to check.")
@click.option("--min-importance", default=30, show_default=True, help="Minimum score (0-100).")
@click.option("--limit", default=10, show_default=True, help="Maximum emails to show.")
@click.pass_obj
def important(config: TriageConfig, hours: float, min_importance: int, limit: int) -> None:
    """Show the most important unread emails as a table."""
    app = create_app(config)
    try:
        emails = asyncio.run(app.service.fetch_important(hours, min_importance, limit))
    except TriageError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise SystemExit(1) from exc

    if not emails:
        console.print(f"[green]No unread emails scored {min_importance}+ in the last {hours:g} hours.[/green]")
        return

    table = Table(box=box.ROUNDED, show_header=True, header_style="bold cyan")
    table.add_column("Score", width=6)
    table.add_column("Subject", max_width=50)
    table.add_column("From", max_width=32)
    table.add_column("Received", width=16)
    table.add_column("ID", style="dim")

    for scored in emails:
        m = scored.message
        style = _CATEGORY_STYLE[scored.category]
        table.add_row(
            f"[{style}]{scored.importance_score}[/{style}]",
            escape(m.subject),
            escape(m.sender),
            m.received_at.strftime("%Y-%m-%d %H:%M"),
            escape(m.id),
        )

    console.print(f"\nFound {len(emails)} important emails in last {hours:g} hours\n")
    console.print(table)


@click.command()
@click.option("--hours", default=24.0, show_default=True, help="How many hours back to check.")
@click.pass_obj
def summary(config: TriageConfig, hours: float) -> None:
    """Count unread emails by urgency category."""
    app = create_app(config)
    try:
        result = asyncio.run(app.service.summarize(hours))
    except TriageError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise SystemExit(1) from exc

    body = (
        f"Total unread: [bold]{result.total}[/bold]\n"
        f"[bold red]Urgent[/bold red]:      {result.urgent}\n"
        f"[yellow]Important[/yellow]:   {result.important}\n"
        f"Normal:      {result.normal}\n"
        f"[dim]Likely spam[/dim]: {result.likely_spam}\n\n"
        f"{result.recommendation}"
    )
    console.print(Panel(body, title=f"[bold]Last {hours:g} hours[/bold]", border_style="blue"))
