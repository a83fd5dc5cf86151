"""Utilities for producing consistent action-failure payloads.

The payload shape should remain stable so the host can render it. Building a
payload never replaces raising: callers log it and re-raise.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict

import jsonschema

from .exceptions import ActionError, AzureDevOpsAPIError, GitCommandError


def _summarize_exception(exc: BaseException) -> str:
    """Create a short human-readable message."""
    if isinstance(exc, jsonschema.ValidationError):
        path = list(exc.path)
        base_message = exc.message or exc.__class__.__name__
        if path:
            path_display = " -> ".join(str(p) for p in path)
            return f"{base_message} (at {path_display})"
        return base_message

    return str(exc) or exc.__class__.__name__


def _classify_category(exc: BaseException, message: str) -> str:
    if isinstance(exc, GitCommandError) and exc.timed_out:
        return "timeout"
    if isinstance(exc, ActionError):
        return exc.category

    if isinstance(exc, (jsonschema.ValidationError, ValueError, TypeError)):
        return "validation"

    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return "timeout"

    lowered = (message or "").lower()
    if "timeout" in lowered or "timed out" in lowered:
        return "timeout"

    return "unknown"


def _is_retryable(exc: BaseException, category: str) -> bool:
    if category == "timeout":
        return True
    if isinstance(exc, AzureDevOpsAPIError) and exc.status_code is not None:
        return exc.status_code == 429 or exc.status_code >= 500
    return bool(getattr(exc, "retryable", False))


def structured_action_error(exc: BaseException, *, context: str) -> Dict[str, Any]:
    """Build a serializable error payload for the host."""

    message = _summarize_exception(exc)
    category = _classify_category(exc, message)
    payload: Dict[str, Any] = {
        "error": exc.__class__.__name__,
        "message": message,
        "context": context,
        "category": category,
        "retryable": _is_retryable(exc, category),
    }

    if isinstance(exc, GitCommandError):
        payload["exit_code"] = exc.exit_code
    status_code = getattr(exc, "status_code", None)
    if status_code is not None:
        payload["status_code"] = status_code
    field = getattr(exc, "field", None)
    if field:
        payload["field"] = field
    return {"error": payload}


__all__ = ["structured_action_error"]
