"""MCP tool surface: exposes the triage engine to a calling agent over stdio."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any

from mcp.server.fastmcp import FastMCP

from inbox_triage.errors import TriageError
from inbox_triage.mail.types import ScoredMessage
from inbox_triage.triage.service import TriageService
from inbox_triage.triage.vip import VipRegistry

logger = logging.getLogger(__name__)

SERVER_NAME = "email-triage"
SNIPPET_CHARS = 150


def _as_error_text(fn: Callable[..., Awaitable[str]]) -> Callable[..., Awaitable[str]]:
    """Report expected failures as an "Error: ..." result instead of raising."""

    @wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> str:
        try:
            return await fn(*args, **kwargs)
        except (TriageError, ValueError) as exc:
            logger.warning("%s failed: %s", fn.__name__, exc)
            return f"Error: {exc}"

    return wrapper


def _email_to_dict(scored: ScoredMessage) -> dict[str, Any]:
    m = scored.message
    return {
        "id": m.id,
        "from": m.sender,
        "subject": m.subject,
        "snippet": m.body[:SNIPPET_CHARS] + "...",
        "received": m.received_at.isoformat(),
        "importance_score": scored.importance_score,
        "is_direct": m.is_direct,
        "has_attachments": m.has_attachments,
    }


class TriageTools:
    """Tool handlers, one method per MCP tool. Each returns the text result."""

    def __init__(self, service: TriageService, vip_registry: VipRegistry) -> None:
        self._service = service
        self._vips = vip_registry

    @_as_error_text
    async def get_important_emails(
        self,
        hours_back: float = 24,
        min_importance: int = 30,
        max_results: int = 10,
    ) -> str:
        emails = await self._service.fetch_important(hours_back, min_importance, max_results)
        result = {
            "total_important": len(emails),
            "summary": f"Found {len(emails)} important emails in last {hours_back:g} hours",
            "emails": [_email_to_dict(e) for e in emails],
        }
        return json.dumps(result, indent=2)

    @_as_error_text
    async def mark_email_handled(self, email_id: str) -> str:
        if not email_id:
            raise ValueError("email_id is required")
        await self._service.mark_handled(email_id)
        return f"Successfully marked email {email_id} as read"

    @_as_error_text
    async def add_vip_domain(self, domain: str) -> str:
        if not domain:
            raise ValueError("domain is required")
        self._vips.add(domain)
        return (
            f'Added "{domain}" to VIP list. Emails from this domain will be prioritized.\n'
            f"Current VIP domains: {', '.join(self._vips.list())}"
        )

    async def get_vip_domains(self) -> str:
        domains = self._vips.list()
        if not domains:
            return (
                "No VIP domains configured yet. "
                "Use add_vip_domain to add important sender domains."
            )
        return f"VIP Domains: {', '.join(domains)}"

    @_as_error_text
    async def get_email_summary(self, hours_back: float = 24) -> str:
        summary = await self._service.summarize(hours_back)
        result = {
            "timeframe": f"Last {hours_back:g} hours",
            "total_unread": summary.total,
            "breakdown": {
                "urgent": summary.urgent,
                "important": summary.important,
                "normal": summary.normal,
                "likely_spam": summary.likely_spam,
            },
            "recommendation": summary.recommendation,
        }
        return json.dumps(result, indent=2)


def build_server(tools: TriageTools) -> FastMCP:
    """Register the five triage tools on a FastMCP server."""
    server = FastMCP(SERVER_NAME)

    @server.tool()
    async def get_important_emails(
        hours_back: float = 24,
        min_importance: int = 30,
        max_results: int = 10,
    ) -> str:
        """Get a filtered list of important unread emails, excluding spam and
        low-priority items. Returns emails sorted by importance score (0-100)."""
        return await tools.get_important_emails(hours_back, min_importance, max_results)

    @server.tool()
    async def mark_email_handled(email_id: str) -> str:
        """Mark an email as read to remove it from future reminders."""
        return await tools.mark_email_handled(email_id)

    @server.tool()
    async def add_vip_domain(domain: str) -> str:
        """Add a sender domain to the VIP list for higher priority (e.g. 'company.com')."""
        return await tools.add_vip_domain(domain)

    @server.tool()
    async def get_vip_domains() -> str:
        """List all VIP domains currently configured."""
        return await tools.get_vip_domains()

    @server.tool()
    async def get_email_summary(hours_back: float = 24) -> str:
        """Get a quick summary of unread emails by category and urgency."""
        return await tools.get_email_summary(hours_back)

    return server
