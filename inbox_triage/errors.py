"""Error kinds surfaced by the triage engine to its callers."""


class TriageError(Exception):
    """Base class for failures reported back to the calling agent as a result."""


class AuthRequired(TriageError):
    """No persisted token exists; the user must run `inbox-triage auth` first.

    Raised instead of prompting: stdin belongs to the MCP protocol.
    """

    def __init__(self, auth_url: str) -> None:
        self.auth_url = auth_url
        super().__init__(
            "No Gmail token found. Gmail authentication required.\n"
            "Run `inbox-triage auth` once to complete the OAuth flow, "
            "or visit this URL to get an authorization code:\n"
            f"{auth_url}"
        )


class AuthInvalid(TriageError):
    """The OAuth client file or token file is missing, unreadable or malformed."""


class FetchError(TriageError):
    """A Gmail API call failed."""


class NotFound(TriageError):
    """Gmail does not know the given message ID."""

    def __init__(self, email_id: str) -> None:
        self.email_id = email_id
        super().__init__(f"Email {email_id!r} not found")
