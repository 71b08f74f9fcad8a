"""Centralized logging configuration for Guess the Commit."""

import logging
import re
import sys
from typing import Literal

from src.config import get_settings

# Classic (ghp_, gho_, ghu_, ghs_, ghr_) and fine-grained (github_pat_) tokens
_TOKEN_PATTERN = re.compile(r"\b(?:gh[pousr]_[A-Za-z0-9]+|github_pat_[A-Za-z0-9_]+)")
_AUTH_HEADER_PATTERN = re.compile(r"(Authorization['\"]?\s*[:=]\s*['\"]?token\s+)\S+", re.I)


class TokenRedactingFilter(logging.Filter):
    """Masks anything that looks like a GitHub credential.

    Attached to the root handlers so third-party loggers (httpx, uvicorn)
    are covered as well as our own.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def redact(text: str) -> str:
    """Replace GitHub tokens in ``text`` with a placeholder."""
    text = _AUTH_HEADER_PATTERN.sub(r"\1[REDACTED]", text)
    return _TOKEN_PATTERN.sub("[REDACTED]", text)


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] | None = None
) -> None:
    """Configure logging for the application.

    Args:
        level: Override log level (default: INFO for production, DEBUG for development)
    """
    settings = get_settings()

    if level is None:
        level = "INFO" if settings.is_production else "DEBUG"

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(TokenRedactingFilter())

    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[handler],
    )

    # httpx logs every request URL at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LogContext:
    """Prefixes log messages with ``[key=value]`` pairs.

    Usage:
        log = LogContext(logger, repo="acme/api", author="octocat")
        log.info("Fetched 12 commits")  # "[repo=acme/api] [author=octocat] Fetched 12 commits"
    """

    def __init__(self, logger: logging.Logger, **context: str) -> None:
        self.logger = logger
        self.prefix = " ".join(f"[{k}={v}]" for k, v in context.items())

    def _log(self, level: int, msg: str, *args, **kwargs) -> None:
        self.logger.log(level, f"{self.prefix} {msg}", *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.WARNING, msg, *args, **kwargs)
