"""Custom exception types used across the Azure Repos scaffolder actions."""

from __future__ import annotations

from typing import Any, Optional


class ActionError(Exception):
    """Base class for failures surfaced to the invoking template run."""

    category = "internal"
    retryable = False


class ConfigurationError(ActionError):
    """Raised when no integration entry or token can be resolved for a host."""

    category = "configuration"


class PathError(ActionError):
    """Raised when a workspace-relative path escapes the workspace root."""

    category = "path"


class ActionInputError(ActionError):
    """Raised when action input fails schema validation.

    ``field`` is the offending input property when one can be identified.
    """

    category = "validation"

    def __init__(self, action_id: str, message: str, field: Optional[str] = None) -> None:
        detail = f"{action_id}: {message}"
        if field:
            detail = f"{detail} (field={field})"
        super().__init__(detail)
        self.action_id = action_id
        self.field = field


class OperationError(ActionError):
    """Raised when a delegated Git or REST operation fails."""

    category = "operation"


class GitCommandError(OperationError):
    def __init__(
        self,
        message: str,
        *,
        command: str,
        exit_code: Optional[int],
        stderr: str = "",
        timed_out: bool = False,
    ) -> None:
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        self.timed_out = timed_out


class AzureDevOpsAPIError(OperationError):
    category = "azure_devops"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        response_payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_payload = response_payload


class AzureDevOpsAuthError(AzureDevOpsAPIError):
    category = "azure_devops_auth"


__all__ = [
    "ActionError",
    "ActionInputError",
    "AzureDevOpsAPIError",
    "AzureDevOpsAuthError",
    "ConfigurationError",
    "GitCommandError",
    "OperationError",
    "PathError",
]
