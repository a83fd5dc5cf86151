"""Token resolution for Azure Repos actions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from . import config
from .exceptions import ConfigurationError
from .integrations import IntegrationRegistry, credential_secret


@dataclass(frozen=True)
class GitAuth:
    """Username/password pair handed to the git transport."""

    password: str
    username: str = config.GIT_AUTH_USERNAME

    def __repr__(self) -> str:
        return f"GitAuth(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class OrgTokenAuth:
    """Organization plus PAT for the Azure DevOps REST API."""

    org: str
    token: str

    def __repr__(self) -> str:
        return f"OrgTokenAuth(org={self.org!r}, token='***')"


def resolve_token(
    registry: IntegrationRegistry,
    host: Optional[str] = None,
    explicit_token: Optional[str] = None,
) -> str:
    """Return the token to use for ``host``.

    The host must have at least one configured integration credential even
    when an explicit token is supplied. The explicit token wins over the
    secret of the first configured credential.
    """

    host = (host or "").strip() or config.DEFAULT_AZURE_HOST
    credentials = list(registry.lookup(host))
    if not credentials:
        raise ConfigurationError(
            f"No matching integration configuration for host {host}, "
            "please check your integrations config"
        )

    if explicit_token and explicit_token.strip():
        return explicit_token.strip()

    token = credential_secret(credentials[0])
    if not token:
        raise ConfigurationError(f"No token provided for Azure Integration {host}")
    return token


__all__ = ["GitAuth", "OrgTokenAuth", "resolve_token"]
