"""Tests for CLI commands: the triage app is mocked, CliRunner used throughout."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

from click.testing import CliRunner, Result

from inbox_triage.errors import AuthRequired
from inbox_triage.mail.types import Message, ScoredMessage
from inbox_triage.triage.service import TriageSummary


# ── Helpers ─────────────────────────────────────────────────────────────────────


def _make_scored(
    email_id: str = "msg_1",
    score: int = 75,
    subject: str = "Budget review",
    sender: str = "alice@example.com",
) -> ScoredMessage:
    return ScoredMessage(
        message=Message(
            id=email_id,
            sender=sender,
            subject=subject,
            body="Please review the budget.",
            received_at=datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc),
        ),
        importance_score=score,
    )


def _make_app() -> MagicMock:
    app = MagicMock()
    app.service.fetch_important = AsyncMock(return_value=[])
    app.service.summarize = AsyncMock()
    return app


def _invoke(app: MagicMock, *args: str, input: str | None = None) -> Result:
    from inbox_triage.cli.main import cli

    runner = CliRunner()
    with patch("inbox_triage.cli.main.load_dotenv"), patch(
        "inbox_triage.cli.commands.create_app", return_value=app
    ):
        return runner.invoke(cli, list(args), input=input)


# ── important ───────────────────────────────────────────────────────────────────


class TestImportantCommand:
    def test_displays_table(self) -> None:
        app = _make_app()
        app.service.fetch_important.return_value = [_make_scored()]
        result = _invoke(app, "important")
        assert result.exit_code == 0
        assert "Budget review" in result.output
        assert "75" in result.output
        assert "Found 1 important emails in last 24 hours" in result.output

    def test_bracketed_text_is_shown_literally(self) -> None:
        app = _make_app()
        app.service.fetch_important.return_value = [
            _make_scored(subject="Re: budget [/b] final", sender="[ops] <ops@example.com>")
        ]
        result = _invoke(app, "important")
        assert result.exit_code == 0, result.output
        assert "Re: budget [/b] final" in result.output
        assert "[ops] <ops@example.com>" in result.output

    def test_passes_options(self) -> None:
        app = _make_app()
        _invoke(app, "important", "--hours", "6", "--min-importance", "50", "--limit", "3")
        app.service.fetch_important.assert_awaited_once_with(6.0, 50, 3)

    def test_nothing_found(self) -> None:
        result = _invoke(_make_app(), "important")
        assert result.exit_code == 0
        assert "No unread emails scored 30+" in result.output

    def test_auth_error_exits_nonzero(self) -> None:
        app = _make_app()
        app.service.fetch_important.side_effect = AuthRequired("https://accounts.google.com/x")
        result = _invoke(app, "important")
        assert result.exit_code == 1
        assert "inbox-triage auth" in result.output


# ── summary ─────────────────────────────────────────────────────────────────────


class TestSummaryCommand:
    def test_shows_breakdown_and_recommendation(self) -> None:
        app = _make_app()
        app.service.summarize.return_value = TriageSummary(
            hours_back=24, total=4, urgent=1, important=1, normal=1, likely_spam=1
        )
        result = _invoke(app, "summary")
        assert result.exit_code == 0
        assert "Total unread: 4" in result.output
        assert "You have 1 urgent email(s) that need attention!" in result.output

    def test_hours_option(self) -> None:
        app = _make_app()
        app.service.summarize.return_value = TriageSummary(hours_back=48, total=0)
        result = _invoke(app, "summary", "--hours", "48")
        app.service.summarize.assert_awaited_once_with(48.0)
        assert "All caught up!" in result.output


# ── auth ────────────────────────────────────────────────────────────────────────


class TestAuthCommand:
    def test_existing_token_is_reported(self) -> None:
        store = MagicMock()
        store.has_token.return_value = True
        with patch("inbox_triage.cli.commands.CredentialStore", return_value=store):
            result = _invoke(_make_app(), "auth")
        assert result.exit_code == 0
        assert "Token already exists" in result.output
        store.exchange_code.assert_not_called()

    def test_prompts_for_code_and_stores_token(self) -> None:
        store = MagicMock()
        store.has_token.return_value = False
        store.authorization_url.return_value = "https://accounts.google.com/o/oauth2/auth?x=1"
        with patch("inbox_triage.cli.commands.CredentialStore", return_value=store):
            result = _invoke(_make_app(), "auth", input="the-code\n")

        assert result.exit_code == 0
        assert "https://accounts.google.com/o/oauth2/auth?x=1" in result.output
        store.exchange_code.assert_called_once_with(store.build_flow.return_value, "the-code")
        assert "Token stored successfully" in result.output

    def test_exchange_failure_exits_nonzero(self) -> None:
        store = MagicMock()
        store.has_token.return_value = False
        store.authorization_url.return_value = "https://accounts.google.com/"
        store.exchange_code.side_effect = RuntimeError("invalid_grant")
        with patch("inbox_triage.cli.commands.CredentialStore", return_value=store):
            result = _invoke(_make_app(), "auth", input="bad\n")
        assert result.exit_code == 1
        assert "invalid_grant" in result.output


# ── serve ───────────────────────────────────────────────────────────────────────


class TestServeCommand:
    def test_runs_server_with_config(self) -> None:
        with patch("inbox_triage.cli.commands.run_server") as run_server, patch(
            "inbox_triage.cli.commands.configure_logging"
        ) as configure_logging:
            result = _invoke(_make_app(), "serve")
        assert result.exit_code == 0
        run_server.assert_called_once()
        assert configure_logging.call_args.kwargs == {"force": True}
