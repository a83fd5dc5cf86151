"""Configuration and logging helpers for the Azure Repos scaffolder actions."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Mapping, Optional

from .exceptions import ConfigurationError

# Custom log levels
# ------------------------------------------------------------------------------
#
# CHAT: short progress messages meant for the template run log.
# DETAILED: verbose operational logging (git commands, REST calls) that is more
# detailed than INFO but less noisy than full DEBUG.

DETAILED_LEVEL = 15
CHAT_LEVEL = 25


def _install_custom_log_levels() -> None:
    if not hasattr(logging, "DETAILED"):
        logging.addLevelName(DETAILED_LEVEL, "DETAILED")
        setattr(logging, "DETAILED", DETAILED_LEVEL)

    if not hasattr(logging, "CHAT"):
        logging.addLevelName(CHAT_LEVEL, "CHAT")
        setattr(logging, "CHAT", CHAT_LEVEL)

    # Add Logger helpers: logger.chat(...), logger.detailed(...)
    if not hasattr(logging.Logger, "detailed"):
        def detailed(self: logging.Logger, msg, *args, **kwargs):
            if self.isEnabledFor(DETAILED_LEVEL):
                self._log(DETAILED_LEVEL, msg, args, **kwargs)
        logging.Logger.detailed = detailed  # type: ignore[attr-defined]

    if not hasattr(logging.Logger, "chat"):
        def chat(self: logging.Logger, msg, *args, **kwargs):
            if self.isEnabledFor(CHAT_LEVEL):
                self._log(CHAT_LEVEL, msg, args, **kwargs)
        logging.Logger.chat = chat  # type: ignore[attr-defined]


def _resolve_log_level(level_name: str | None) -> int:
    if not level_name:
        return logging.INFO

    name = str(level_name).strip().upper()
    if not name:
        return logging.INFO

    # Numeric levels are allowed.
    if name.lstrip("-").isdigit():
        return int(name)

    if name == "DETAILED":
        return DETAILED_LEVEL
    if name == "CHAT":
        return CHAT_LEVEL

    return getattr(logging, name, logging.INFO)


def log_chat(logger: logging.Logger, msg: str, *args: Any) -> None:
    """Log a progress line at CHAT, falling back to INFO for foreign loggers."""

    log_fn = getattr(logger, "chat", None)
    if callable(log_fn):
        log_fn(msg, *args)
    else:
        logger.info(msg, *args)


def _env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    """Return a stripped environment value, treating blank values as unset."""

    value = os.environ.get(name)
    if value is None:
        return default
    value = value.strip()
    return value or default


_install_custom_log_levels()

# Configuration and globals
# ------------------------------------------------------------------------------

DEFAULT_AZURE_HOST = _env_str("AZURE_DEFAULT_HOST", "dev.azure.com")
AZURE_DEVOPS_API_VERSION = _env_str("AZURE_DEVOPS_API_VERSION", "7.1")

HTTPX_TIMEOUT = float(os.environ.get("HTTPX_TIMEOUT", 60))
GIT_COMMAND_TIMEOUT_SECONDS = int(os.environ.get("GIT_COMMAND_TIMEOUT_SECONDS", 600))

# Placeholder username sent with token-based git credentials. Azure Repos only
# checks the password (the PAT) but git refuses an empty username.
GIT_AUTH_USERNAME = "notempty"
DEFAULT_ORGANIZATION = "notempty"

DEFAULT_GIT_AUTHOR_NAME = "Scaffolder"
DEFAULT_GIT_AUTHOR_EMAIL = "scaffolder@backstage.io"
DEFAULT_COMMIT_MESSAGE = "Initial commit"
DEFAULT_CLONE_BRANCH = "main"
DEFAULT_PUSH_BRANCH = "scaffolder"
DEFAULT_TARGET_BRANCH = "main"
DEFAULT_REMOTE = "origin"

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_STYLE = os.environ.get("LOG_STYLE", "color").lower()

# Default to a compact, scannable format.
LOG_FORMAT = os.environ.get(
    "LOG_FORMAT",
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)


class _ColorFormatter(logging.Formatter):
    """Level-colored formatter for console logs."""

    _C = {
        "DEBUG": "\x1b[36m",  # cyan
        "DETAILED": "\x1b[36m",  # cyan
        "INFO": "\x1b[32m",  # green
        "CHAT": "\x1b[34m",  # blue
        "WARNING": "\x1b[33m",  # yellow
        "ERROR": "\x1b[31m",  # red
        "CRITICAL": "\x1b[35m",  # magenta
        "RESET": "\x1b[0m",
    }

    def __init__(self, fmt: str, *, use_color: bool) -> None:
        super().__init__(fmt)
        self._use_color = bool(use_color)

    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - formatting
        levelname = record.levelname
        if self._use_color and levelname in self._C:
            record.levelname = f"{self._C[levelname]}{levelname}{self._C['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def _configure_logging() -> None:
    # Only configure our own logger tree; the host owns the root logger.
    base = logging.getLogger("azure_repo_actions")
    if getattr(base, "_azure_repo_actions_configured", False):
        return

    use_color = LOG_STYLE in {"color", "ansi", "colored"}

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(_ColorFormatter(LOG_FORMAT, use_color=use_color))
    base.addHandler(console_handler)
    base.setLevel(_resolve_log_level(LOG_LEVEL))

    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    setattr(base, "_azure_repo_actions_configured", True)


_configure_logging()

BASE_LOGGER = logging.getLogger("azure_repo_actions")
GIT_LOGGER = logging.getLogger("azure_repo_actions.git")
AZURE_DEVOPS_LOGGER = logging.getLogger("azure_repo_actions.azure_devops")
ACTIONS_LOGGER = logging.getLogger("azure_repo_actions.actions")


class ScaffolderConfig:
    """Read-only key/value view over the host's scaffolder configuration.

    Keys are dotted paths into a nested mapping, e.g.
    ``scaffolder.defaultAuthor.name``.
    """

    def __init__(self, data: Optional[Mapping[str, Any]] = None) -> None:
        self._data: Mapping[str, Any] = data or {}

    def get_optional(self, key: str) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return node

    def get_optional_string(self, key: str) -> Optional[str]:
        value = self.get_optional(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise TypeError(f"Invalid type in config for key '{key}', expected string")
        return value

    @classmethod
    def from_env(cls) -> "ScaffolderConfig":
        """Build the config from ``SCAFFOLDER_CONFIG`` plus per-key overrides."""

        raw = os.environ.get("SCAFFOLDER_CONFIG", "").strip()
        try:
            data: dict[str, Any] = json.loads(raw) if raw else {}
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"SCAFFOLDER_CONFIG must be valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError("SCAFFOLDER_CONFIG must decode to a JSON object")

        scaffolder = dict(data.get("scaffolder") or {})
        author = dict(scaffolder.get("defaultAuthor") or {})

        name = _env_str("SCAFFOLDER_DEFAULT_AUTHOR_NAME")
        email = _env_str("SCAFFOLDER_DEFAULT_AUTHOR_EMAIL")
        message = _env_str("SCAFFOLDER_DEFAULT_COMMIT_MESSAGE")
        if name:
            author["name"] = name
        if email:
            author["email"] = email
        if author:
            scaffolder["defaultAuthor"] = author
        if message:
            scaffolder["defaultCommitMessage"] = message
        if scaffolder:
            data["scaffolder"] = scaffolder
        return cls(data)


__all__ = [
    "ACTIONS_LOGGER",
    "AZURE_DEVOPS_API_VERSION",
    "AZURE_DEVOPS_LOGGER",
    "BASE_LOGGER",
    "CHAT_LEVEL",
    "DEFAULT_AZURE_HOST",
    "DEFAULT_CLONE_BRANCH",
    "DEFAULT_COMMIT_MESSAGE",
    "DEFAULT_GIT_AUTHOR_EMAIL",
    "DEFAULT_GIT_AUTHOR_NAME",
    "DEFAULT_ORGANIZATION",
    "DEFAULT_PUSH_BRANCH",
    "DEFAULT_REMOTE",
    "DEFAULT_TARGET_BRANCH",
    "DETAILED_LEVEL",
    "GIT_AUTH_USERNAME",
    "GIT_COMMAND_TIMEOUT_SECONDS",
    "GIT_LOGGER",
    "HTTPX_TIMEOUT",
    "ScaffolderConfig",
    "log_chat",
]
