"""Lightweight package shim for azure_repo_actions.

Hosts usually only need the action factories, so those are re-exported
lazily; importing the package does not pull in httpx or jsonschema until an
action is actually built."""

from __future__ import annotations

import importlib
from typing import Any

_LAZY = {
    "create_builtin_actions": "actions",
    "create_clone_action": "actions",
    "create_push_action": "actions",
    "create_pull_request_action": "actions",
    "ActionContext": "actions",
    "TemplateAction": "actions",
    "StaticIntegrationRegistry": "integrations",
    "ScaffolderConfig": "config",
}

__all__ = sorted(_LAZY)


def __getattr__(name: str) -> Any:
    if name in _LAZY:
        module = importlib.import_module(f"{__name__}.{_LAZY[name]}")
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + __all__)
