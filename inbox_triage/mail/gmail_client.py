"""Gmail client: wraps the Gmail REST API behind a typed async API."""

import asyncio
import base64
import logging
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any

from google.auth.exceptions import GoogleAuthError, RefreshError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from httplib2 import HttpLib2Error

from inbox_triage.config import DEFAULT_PAGE_SIZE
from inbox_triage.errors import AuthRequired, FetchError, NotFound, TriageError
from inbox_triage.mail.credentials import CredentialStore
from inbox_triage.mail.types import Message

logger = logging.getLogger(__name__)

# Gmail system label ID (not user-created; used directly)
_UNREAD = "UNREAD"

# A Gmail message part or payload, as returned by messages.get(format="full")
_Part = dict[str, Any]

# Remote failures that are not the token being rejected
_REQUEST_ERRORS = (HttpError, GoogleAuthError, HttpLib2Error, OSError)


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


class GmailSession:
    """Lazily authenticated handle on the Gmail API service.

    Nothing happens at construction time. The first operation that needs
    Gmail calls ensure_authenticated(), which loads the token from the
    CredentialStore and builds the service. Once AUTHENTICATED, later calls
    return the memoized service. A FAILED session tries again on the next
    call, so running `inbox-triage auth` fixes a live server without restart.

    Never prompts: when no token exists the store raises AuthRequired.
    """

    def __init__(self, store: CredentialStore) -> None:
        self._store = store
        self._service: Any = None
        self._state = SessionState.UNAUTHENTICATED
        self._lock = asyncio.Lock()

    @property
    def state(self) -> SessionState:
        return self._state

    async def ensure_authenticated(self) -> Any:
        """Return the Gmail API service, authenticating first if needed."""
        if self._state is SessionState.AUTHENTICATED:
            return self._service

        async with self._lock:
            if self._state is SessionState.AUTHENTICATED:
                return self._service
            try:
                creds = await asyncio.to_thread(self._store.load)
                self._service = await asyncio.to_thread(
                    build, "gmail", "v1", credentials=creds, cache_discovery=False
                )
            except TriageError:
                self._state = SessionState.FAILED
                raise
            except Exception as exc:
                self._state = SessionState.FAILED
                raise FetchError(f"Could not build Gmail service: {exc}") from exc

            self._state = SessionState.AUTHENTICATED
            logger.info("Gmail session authenticated")
            return self._service

    def invalidate(self) -> None:
        """Drop the service after Google rejects the token; the next call re-authenticates."""
        self._service = None
        self._state = SessionState.FAILED
        logger.warning("Gmail token rejected; session reset")

    def authorization_url(self) -> str:
        return self._store.authorization_url()


class GmailClient:
    """Fetches unread mail and clears the UNREAD marker.

    Google's client library is blocking, so every request is executed in a
    worker thread. Message bodies are fetched one at a time, in order.
    """

    def __init__(self, session: GmailSession, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self._session = session
        self._page_size = page_size

    # ── Public API ─────────────────────────────────────────────────────────────

    async def fetch_unread(self, hours_back: float = 24) -> list[Message]:
        """Return unread messages received in the last `hours_back` hours.

        Messages that cannot be fetched or parsed are logged and skipped.

        Raises:
            AuthRequired: Google rejected the token; the session is reset.
            FetchError: if the search itself fails.
        """
        service = await self._session.ensure_authenticated()
        after = datetime.now(timezone.utc) - timedelta(hours=hours_back)
        query = f"is:unread after:{int(after.timestamp())}"

        try:
            response = await self._execute(
                service.users().messages().list(userId="me", q=query, maxResults=self._page_size)
            )
        except _REQUEST_ERRORS as exc:
            raise FetchError(f"Gmail search failed: {exc}") from exc

        ids = [str(m["id"]) for m in response.get("messages", []) if m.get("id")]
        logger.debug("Search %r matched %d message(s)", query, len(ids))

        messages: list[Message] = []
        for message_id in ids:
            try:
                raw = await self._execute(
                    service.users().messages().get(userId="me", id=message_id, format="full")
                )
                messages.append(self._parse_message(raw))
            except AuthRequired:
                raise
            except Exception as exc:  # noqa: BLE001
                logger.warning("Skipping message %s: %s", message_id, exc)
        return messages

    async def mark_read(self, email_id: str) -> None:
        """Remove the UNREAD label from a message.

        Raises:
            AuthRequired: Google rejected the token; the session is reset.
            NotFound: Gmail rejects the ID.
            FetchError: any other API or transport failure.
        """
        service = await self._session.ensure_authenticated()
        try:
            await self._execute(
                service.users().messages().modify(
                    userId="me", id=email_id, body={"removeLabelIds": [_UNREAD]}
                )
            )
        except HttpError as exc:
            if exc.resp.status in (400, 404):
                raise NotFound(email_id) from exc
            raise FetchError(f"Could not mark {email_id} as read: {exc}") from exc
        except _REQUEST_ERRORS as exc:
            raise FetchError(f"Could not mark {email_id} as read: {exc}") from exc
        logger.info("Marked message %s as read", email_id)

    async def _execute(self, request: Any) -> Any:
        """Run a request in a worker thread, resetting the session if the token is rejected."""
        try:
            return await asyncio.to_thread(request.execute)
        except RefreshError as exc:
            self._session.invalidate()
            raise AuthRequired(self._session.authorization_url()) from exc

    # ── Parsing ────────────────────────────────────────────────────────────────

    @staticmethod
    def _parse_message(data: dict[str, Any]) -> Message:
        """Map a messages.get(format="full") response to a Message."""
        payload: _Part = data.get("payload") or {}
        headers: dict[str, str] = {}
        for h in payload.get("headers", []):
            # first occurrence wins for repeated headers
            headers.setdefault(str(h.get("name", "")).lower(), str(h.get("value", "")))
        return Message(
            id=str(data["id"]),
            sender=headers.get("from") or "Unknown",
            subject=headers.get("subject") or "No Subject",
            body=_extract_body(payload),
            received_at=_received_at(headers.get("date", ""), data.get("internalDate")),
            is_direct=bool(headers.get("to")),
            has_attachments=_has_attachments(payload),
            labels=frozenset(data.get("labelIds", [])),
        )


def _walk_parts(part: _Part) -> Iterator[_Part]:
    """Yield every nested part below `part`, depth-first, in document order."""
    for child in part.get("parts") or []:
        yield child
        yield from _walk_parts(child)


def _decode(data: str) -> str:
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")


def _extract_body(payload: _Part) -> str:
    """First text/plain part found depth-first, else the top-level body."""
    for part in _walk_parts(payload):
        data = (part.get("body") or {}).get("data")
        if part.get("mimeType") == "text/plain" and data:
            return _decode(data)
    data = (payload.get("body") or {}).get("data")
    return _decode(data) if data else ""


def _has_attachments(payload: _Part) -> bool:
    return any(
        part.get("filename") and (part.get("body") or {}).get("attachmentId")
        for part in _walk_parts(payload)
    )


def _received_at(date_header: str, internal_date: str | None) -> datetime:
    """Parse the Date header; fall back to Gmail's internalDate, then to now."""
    if date_header:
        try:
            parsed = parsedate_to_datetime(date_header)
        except (TypeError, ValueError):
            parsed = None
        if parsed is not None:
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc)
    if internal_date:
        return datetime.fromtimestamp(int(internal_date) / 1000, tz=timezone.utc)
    return datetime.now(timezone.utc)


def create_gmail_client(store: CredentialStore, page_size: int = DEFAULT_PAGE_SIZE) -> GmailClient:
    """Build an unauthenticated GmailClient; authentication happens on first use."""
    return GmailClient(GmailSession(store), page_size=page_size)
