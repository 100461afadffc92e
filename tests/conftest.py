"""Shared pytest fixtures."""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for recency-dependent scoring."""
    return NOW


@pytest.fixture
def client_secrets(tmp_path: Path) -> Path:
    """An installed-app OAuth client file, as downloaded from Google Cloud Console."""
    path = tmp_path / "credentials.json"
    path.write_text(json.dumps({
        "installed": {
            "client_id": "client-123.apps.googleusercontent.com",
            "client_secret": "shh",
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": ["http://localhost"],
        }
    }))
    return path
