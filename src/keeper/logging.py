"""Centralized logging configuration for Keeper.

Entry points (the CLI) call configure_logging() once at startup.

Logging Levels:
- DEBUG: systemctl/journalctl/loginctl invocations and exit codes
- INFO: unit files written, backed up or removed; scope fallbacks
- WARNING: best-effort steps that failed, ignored configuration
- ERROR: failures that abort an operation

Unit files carry the daemon's environment, which often holds API keys, so
every record passes through a redactor before it is emitted.
"""

import logging
import os
import re
from dataclasses import dataclass, field

DEFAULT_REDACT_PATTERNS: list[str] = [
    # API key prefixes (Anthropic/OpenAI, GitHub, Slack)
    r"\b(sk-[A-Za-z0-9_-]{20,})\b",
    r"\b(ghp_[A-Za-z0-9]{20,})\b",
    r"\b(github_pat_[A-Za-z0-9_]{20,})\b",
    r"\b(xox[baprs]-[A-Za-z0-9-]{10,})\b",
    # Environment assignments as written into Environment= lines
    r"\b[A-Z0-9_]+(?:KEY|TOKEN|SECRET|PASSWORD|PASSWD)\s*[=:]\s*([^\s\"']{8,})",
    r"\bBearer\s+([A-Za-z0-9._\-+=]{20,})\b",
]

LOG_LEVEL_ENV_VAR = "KEEPER_LOG_LEVEL"


@dataclass
class SecretRedactor:
    """Masks secrets in text, keeping the first and last four characters."""

    patterns: list[re.Pattern[str]] = field(default_factory=list)
    enabled: bool = True

    def __post_init__(self) -> None:
        if not self.patterns:
            self.patterns = [
                re.compile(p, re.IGNORECASE) for p in DEFAULT_REDACT_PATTERNS
            ]

    def redact(self, text: str) -> str:
        if not self.enabled or not text:
            return text
        result = text
        for pattern in self.patterns:
            result = pattern.sub(self._mask_match, result)
        return result

    def _mask_match(self, match: re.Match[str]) -> str:
        full = match.group(0)
        token = match.group(1) if match.lastindex else full
        if "..." in token:
            return full
        if len(token) < 12:
            return full.replace(token, "***")
        return full.replace(token, f"{token[:4]}...{token[-4:]}")


class RedactingFilter(logging.Filter):
    """Replaces each record's message with its redacted rendering."""

    def __init__(self, redactor: SecretRedactor | None = None):
        super().__init__()
        self._redactor = redactor or SecretRedactor()

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self._redactor.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class ComponentFormatter(logging.Formatter):
    """Formatter that extracts component name from logger path.

    - keeper.service.systemd -> service
    - keeper.config.models -> config
    """

    def format(self, record: logging.LogRecord) -> str:
        parts = record.name.split(".")
        if len(parts) >= 2 and parts[0] == "keeper":
            record.component = parts[1]
        else:
            record.component = parts[0]
        return super().format(record)


def resolve_level(level: str | None = None) -> str:
    """Pick the log level from the argument or KEEPER_LOG_LEVEL, default INFO."""
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV_VAR, "INFO")
    level = level.upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        level = "INFO"
    return level


def configure_logging(level: str | None = None, use_rich: bool = False) -> None:
    """Configure logging for Keeper.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
            If None, uses KEEPER_LOG_LEVEL env var or INFO.
        use_rich: Use Rich handler for colorful console output.
    """
    log_level = getattr(logging, resolve_level(level))

    if use_rich:
        from rich.logging import RichHandler

        handler: logging.Handler = RichHandler(
            rich_tracebacks=False,
            show_path=False,
            show_time=True,
            markup=False,
        )
        handler.setFormatter(ComponentFormatter("%(component)s | %(message)s"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%H:%M:%S",
            )
        )
    handler.addFilter(RedactingFilter())

    logging.basicConfig(level=log_level, handlers=[handler], force=True)
