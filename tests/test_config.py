"""Tests for TriageConfig and process wiring."""

import subprocess
import sys
from pathlib import Path

import pytest

from inbox_triage.config import DEFAULT_PAGE_SIZE, TriageConfig
from inbox_triage.mail.gmail_client import SessionState
from inbox_triage.server.main import create_app, create_mcp_server


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("GMAIL_CREDENTIALS_PATH", "GMAIL_TOKEN_PATH", "TRIAGE_PAGE_SIZE",
                "VIP_DOMAINS", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)


class TestFromEnv:
    def test_defaults(self) -> None:
        config = TriageConfig.from_env()
        assert config.credentials_path == Path("credentials.json")
        assert config.token_path == Path("token.json")
        assert config.page_size == DEFAULT_PAGE_SIZE == 50
        assert config.vip_domains == []
        assert config.log_level == "INFO"

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GMAIL_CREDENTIALS_PATH", "/etc/triage/client.json")
        monkeypatch.setenv("GMAIL_TOKEN_PATH", "/var/lib/triage/token.json")
        monkeypatch.setenv("TRIAGE_PAGE_SIZE", "25")
        monkeypatch.setenv("VIP_DOMAINS", " acme.com, ,example.org ")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        config = TriageConfig.from_env()

        assert config.credentials_path == Path("/etc/triage/client.json")
        assert config.token_path == Path("/var/lib/triage/token.json")
        assert config.page_size == 25
        assert config.vip_domains == ["acme.com", "example.org"]
        assert config.log_level == "DEBUG"

    @pytest.mark.parametrize("raw", ["abc", "0", "-5"])
    def test_invalid_page_size_falls_back(self, monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
        monkeypatch.setenv("TRIAGE_PAGE_SIZE", raw)
        assert TriageConfig.from_env().page_size == DEFAULT_PAGE_SIZE


class TestCreateApp:
    def test_wires_without_authenticating(self, tmp_path: Path) -> None:
        config = TriageConfig(
            credentials_path=tmp_path / "missing.json",
            token_path=tmp_path / "token.json",
            vip_domains=["acme.com", "acme.com"],
        )
        app = create_app(config)
        assert app.vip_registry.list() == ["acme.com"]
        assert app.gmail._session.state is SessionState.UNAUTHENTICATED

    async def test_server_exposes_seeded_vips(self, tmp_path: Path) -> None:
        app = create_app(TriageConfig(token_path=tmp_path / "t.json", vip_domains=["acme.com"]))
        server = create_mcp_server(app)
        assert len(await server.list_tools()) == 5
        assert app.vip_registry.list() == ["acme.com"]


class TestImportWeight:
    def test_config_does_not_load_gmail_sdk(self) -> None:
        code = (
            "import sys, inbox_triage.config; "
            "assert 'googleapiclient' not in sys.modules, sorted(sys.modules)"
        )
        result = subprocess.run(
            [sys.executable, "-c", code],
            cwd=Path(__file__).resolve().parents[1],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0, result.stderr

    def test_message_types_do_not_load_triage_service(self) -> None:
        code = (
            "import sys, inbox_triage.mail.types; "
            "assert 'inbox_triage.triage.service' not in sys.modules"
        )
        result = subprocess.run(
            [sys.executable, "-c", code],
            cwd=Path(__file__).resolve().parents[1],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0, result.stderr
