"""Credential store: OAuth client secrets and the persisted Gmail token."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow

from inbox_triage.errors import AuthInvalid, AuthRequired, FetchError

logger = logging.getLogger(__name__)

SCOPES: list[str] = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.modify",
]

_CONSOLE_URL = "https://console.cloud.google.com/apis/credentials"
_TOKEN_URI = "https://oauth2.googleapis.com/token"


class CredentialStore:
    """Reads the OAuth client file and reads/writes the token file.

    Only reports "present" vs "absent" and hands back usable Credentials;
    the interactive code exchange is driven by the `auth` CLI command.
    """

    def __init__(self, credentials_path: Path, token_path: Path) -> None:
        self.credentials_path = Path(credentials_path)
        self.token_path = Path(token_path)

    def load_client_config(self) -> dict[str, Any]:
        """Return the parsed client file; accepts "installed" and "web" apps."""
        try:
            config = json.loads(self.credentials_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise AuthInvalid(
                f"Error loading {self.credentials_path}. Please download it from "
                f"Google Cloud Console.\nVisit: {_CONSOLE_URL}\nError: {exc}"
            ) from exc

        section = None
        if isinstance(config, dict):
            section = config.get("installed") or config.get("web")
        if not isinstance(section, dict) or not section.get("client_id"):
            raise AuthInvalid(
                f"{self.credentials_path} has no 'installed' or 'web' client section"
            )
        return config

    def build_flow(self) -> Flow:
        config = self.load_client_config()
        section = config.get("installed") or config["web"]
        redirect_uris = section.get("redirect_uris") or ["http://localhost"]
        return Flow.from_client_config(config, scopes=SCOPES, redirect_uri=redirect_uris[0])

    def authorization_url(self, flow: Flow | None = None) -> str:
        """Offline-access consent URL the user can follow to obtain a code."""
        url, _state = (flow or self.build_flow()).authorization_url(
            access_type="offline", prompt="consent"
        )
        return str(url)

    def has_token(self) -> bool:
        return self.token_path.is_file()

    def load(self) -> Credentials:
        """Load the token, refreshing and re-saving it if it has expired.

        Raises:
            AuthRequired: no token file, or the refresh token was rejected.
            AuthInvalid: the client file or token file is malformed.
            FetchError: the token endpoint could not be reached.
        """
        if not self.has_token():
            raise AuthRequired(self.authorization_url())

        try:
            info = json.loads(self.token_path.read_text(encoding="utf-8"))
            creds = Credentials.from_authorized_user_info(
                self._normalize_token(info), scopes=SCOPES
            )
        except (OSError, ValueError, TypeError, AttributeError) as exc:
            raise AuthInvalid(f"Malformed token file {self.token_path}: {exc}") from exc

        if creds.expired and creds.refresh_token:
            logger.info("Gmail token expired; refreshing")
            try:
                creds.refresh(Request())
            except RefreshError as exc:
                logger.warning("Token refresh rejected: %s", exc)
                raise AuthRequired(self.authorization_url()) from exc
            except TransportError as exc:
                raise FetchError(f"Could not refresh Gmail token: {exc}") from exc
            self.save(creds)
        return creds

    def save(self, creds: Credentials) -> None:
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        self.token_path.write_text(creds.to_json(), encoding="utf-8")
        logger.info("Token stored at %s", self.token_path)

    def exchange_code(self, flow: Flow, code: str) -> Credentials:
        """Trade an authorization code for a token and persist it.

        `flow` must be the one that produced the authorization URL.
        """
        flow.fetch_token(code=code.strip())
        creds = flow.credentials
        self.save(creds)
        return creds

    def _normalize_token(self, info: dict[str, Any]) -> dict[str, Any]:
        """Fill the fields google-auth requires from the client file.

        Also accepts tokens written by the Node `googleapis` client, which
        use `access_token` and an `expiry_date` in epoch milliseconds.
        """
        token = dict(info)
        if "token" not in token and "access_token" in token:
            token["token"] = token.pop("access_token")
        if "expiry" not in token and token.get("expiry_date"):
            expiry = datetime.fromtimestamp(int(token.pop("expiry_date")) / 1000, tz=timezone.utc)
            token["expiry"] = expiry.replace(tzinfo=None).isoformat()
        if not token.get("client_id") or not token.get("client_secret"):
            config = self.load_client_config()
            section = config.get("installed") or config["web"]
            token["client_id"] = token.get("client_id") or section.get("client_id")
            token["client_secret"] = token.get("client_secret") or section.get("client_secret")
            token.setdefault("token_uri", section.get("token_uri", _TOKEN_URI))
        return token
