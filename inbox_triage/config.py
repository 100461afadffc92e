"""Environment-driven configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

# One page per query; no incremental pagination.
DEFAULT_PAGE_SIZE = 50

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s — %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _parse_page_size(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        logger.warning("Invalid TRIAGE_PAGE_SIZE %r; defaulting to %d", raw, DEFAULT_PAGE_SIZE)
        return DEFAULT_PAGE_SIZE
    return value


@dataclass
class TriageConfig:
    """File locations and tunables for one triage process."""

    credentials_path: Path = field(default_factory=lambda: Path("credentials.json"))
    token_path: Path = field(default_factory=lambda: Path("token.json"))
    page_size: int = DEFAULT_PAGE_SIZE
    vip_domains: list[str] = field(default_factory=list)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> TriageConfig:
        """Build TriageConfig from environment variables (call load_dotenv() first)."""
        raw_vips = os.environ.get("VIP_DOMAINS", "")
        return cls(
            credentials_path=Path(os.environ.get("GMAIL_CREDENTIALS_PATH", "credentials.json")),
            token_path=Path(os.environ.get("GMAIL_TOKEN_PATH", "token.json")),
            page_size=_parse_page_size(os.environ.get("TRIAGE_PAGE_SIZE", str(DEFAULT_PAGE_SIZE))),
            vip_domains=[d.strip() for d in raw_vips.split(",") if d.strip()],
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO", *, force: bool = False) -> None:
    """Send logs to stderr; stdout carries the MCP protocol."""
    numeric = logging.getLevelName(level.upper())
    logging.basicConfig(
        level=numeric if isinstance(numeric, int) else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        force=force,
    )
