"""Scaffolder actions for Azure Repos."""

from __future__ import annotations

from typing import List, Optional

from ..config import ScaffolderConfig
from ..integrations import IntegrationRegistry
from ._shared import ActionContext, TemplateAction
from .clone import create_clone_action
from .pull_request import create_pull_request_action
from .push import create_push_action


def create_builtin_actions(
    integrations: IntegrationRegistry,
    config: Optional[ScaffolderConfig] = None,
) -> List[TemplateAction]:
    """Return the clone, push and pull request actions."""

    return [
        create_clone_action(integrations),
        create_push_action(integrations, config),
        create_pull_request_action(integrations),
    ]


__all__ = [
    "ActionContext",
    "TemplateAction",
    "create_builtin_actions",
    "create_clone_action",
    "create_pull_request_action",
    "create_push_action",
]
