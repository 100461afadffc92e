"""Process wiring: one registry, one Gmail client and one service per process."""

import logging
from dataclasses import dataclass

from mcp.server.fastmcp import FastMCP

from inbox_triage.config import TriageConfig
from inbox_triage.mail.credentials import CredentialStore
from inbox_triage.mail.gmail_client import GmailClient, create_gmail_client
from inbox_triage.server.tools import TriageTools, build_server
from inbox_triage.triage.service import TriageService
from inbox_triage.triage.vip import VipRegistry

logger = logging.getLogger(__name__)


@dataclass
class TriageApp:
    """Everything one hosting process owns for its lifetime."""

    store: CredentialStore
    gmail: GmailClient
    vip_registry: VipRegistry
    service: TriageService


def create_app(config: TriageConfig) -> TriageApp:
    """Wire the triage engine. Does not touch Gmail: authentication is lazy."""
    store = CredentialStore(config.credentials_path, config.token_path)
    gmail = create_gmail_client(store, page_size=config.page_size)
    registry = VipRegistry(config.vip_domains)
    service = TriageService(gmail, registry)
    return TriageApp(store=store, gmail=gmail, vip_registry=registry, service=service)


def create_mcp_server(app: TriageApp) -> FastMCP:
    return build_server(TriageTools(app.service, app.vip_registry))


def run_server(config: TriageConfig) -> None:
    """Serve the triage tools over stdio until the client disconnects."""
    app = create_app(config)
    server = create_mcp_server(app)
    logger.info(
        "Email triage MCP server running on stdio (%d VIP domain(s) seeded)",
        len(app.vip_registry),
    )
    server.run()
