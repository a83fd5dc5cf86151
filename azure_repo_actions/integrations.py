"""Azure integration configuration: credential records keyed by host.

The host platform owns this configuration. Actions only read it through the
:class:`IntegrationRegistry` protocol, which keeps tests free of global state.

Credential records mirror the ``integrations.azure`` config block::

    [
      {
        "host": "dev.azure.com",
        "credentials": [
          {"kind": "PersonalAccessToken", "personalAccessToken": "..."},
          {"kind": "ClientSecret", "clientId": "...", "clientSecret": "...", "tenantId": "..."},
          {"kind": "ManagedIdentity", "clientId": "..."}
        ]
      }
    ]
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple, Union

from . import config
from .exceptions import ConfigurationError


@dataclass(frozen=True)
class PersonalAccessTokenCredential:
    personal_access_token: str
    organizations: Tuple[str, ...] = ()
    kind: str = field(default="PersonalAccessToken", init=False)


@dataclass(frozen=True)
class ClientSecretCredential:
    client_id: str
    client_secret: str
    tenant_id: str
    organizations: Tuple[str, ...] = ()
    kind: str = field(default="ClientSecret", init=False)


@dataclass(frozen=True)
class ManagedIdentityCredential:
    client_id: str
    organizations: Tuple[str, ...] = ()
    kind: str = field(default="ManagedIdentity", init=False)


IntegrationCredential = Union[
    PersonalAccessTokenCredential,
    ClientSecretCredential,
    ManagedIdentityCredential,
]


def credential_secret(credential: IntegrationCredential) -> Optional[str]:
    """Return the token a credential can hand to git/REST calls, if any.

    Only personal access tokens are usable directly. Service principal and
    managed identity credentials would need an Azure AD token exchange, which
    these actions do not perform.
    """

    if isinstance(credential, PersonalAccessTokenCredential):
        token = credential.personal_access_token.strip()
        return token or None
    if isinstance(credential, (ClientSecretCredential, ManagedIdentityCredential)):
        return None
    raise TypeError(f"Unknown credential type: {type(credential).__name__}")


def _require(raw: Mapping[str, Any], key: str, kind: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"Azure integration credential of kind {kind} is missing '{key}'")
    return value


def parse_credential(raw: Mapping[str, Any]) -> IntegrationCredential:
    """Parse one credential record from integration config."""

    if not isinstance(raw, Mapping):
        raise ConfigurationError("Azure integration credentials must be objects")

    organizations = tuple(raw.get("organizations") or ())
    kind = raw.get("kind")
    # Records without a kind but with a token are treated as PAT credentials.
    if kind is None and "personalAccessToken" in raw:
        kind = "PersonalAccessToken"

    if kind == "PersonalAccessToken":
        return PersonalAccessTokenCredential(
            personal_access_token=_require(raw, "personalAccessToken", kind),
            organizations=organizations,
        )
    if kind == "ClientSecret":
        return ClientSecretCredential(
            client_id=_require(raw, "clientId", kind),
            client_secret=_require(raw, "clientSecret", kind),
            tenant_id=_require(raw, "tenantId", kind),
            organizations=organizations,
        )
    if kind == "ManagedIdentity":
        return ManagedIdentityCredential(
            client_id=_require(raw, "clientId", kind),
            organizations=organizations,
        )
    raise ConfigurationError(f"Unsupported Azure integration credential kind: {kind!r}")


@dataclass(frozen=True)
class AzureIntegration:
    """One ``integrations.azure`` entry: a host and its ordered credentials."""

    host: str
    credentials: Tuple[IntegrationCredential, ...] = ()

    @classmethod
    def from_config(cls, record: Mapping[str, Any]) -> "AzureIntegration":
        if not isinstance(record, Mapping):
            raise ConfigurationError("Azure integration entries must be objects")
        host = str(record.get("host") or config.DEFAULT_AZURE_HOST).strip().lower()
        creds = [parse_credential(raw) for raw in record.get("credentials") or ()]
        # Legacy shorthand: a bare token on the integration entry.
        token = record.get("token")
        if isinstance(token, str) and token.strip():
            creds.append(PersonalAccessTokenCredential(personal_access_token=token))
        return cls(host=host, credentials=tuple(creds))


class IntegrationRegistry(Protocol):
    def lookup(self, host: str) -> Sequence[IntegrationCredential]:
        """Return the ordered credentials configured for ``host``."""
        ...


class StaticIntegrationRegistry:
    """In-memory registry built from integration config records."""

    def __init__(self, entries: Optional[Mapping[str, Sequence[IntegrationCredential]]] = None) -> None:
        self._entries: Dict[str, List[IntegrationCredential]] = {
            host.lower(): list(creds) for host, creds in (entries or {}).items()
        }

    def lookup(self, host: str) -> Sequence[IntegrationCredential]:
        return list(self._entries.get(host.strip().lower(), ()))

    @property
    def hosts(self) -> List[str]:
        return sorted(self._entries)

    @classmethod
    def from_config(cls, records: Sequence[Mapping[str, Any]]) -> "StaticIntegrationRegistry":
        entries: Dict[str, List[IntegrationCredential]] = {}
        for record in records:
            integration = AzureIntegration.from_config(record)
            entries.setdefault(integration.host, []).extend(integration.credentials)
        return cls(entries)

    @classmethod
    def from_env(cls) -> "StaticIntegrationRegistry":
        """Build the registry from the ``AZURE_INTEGRATIONS`` JSON list."""

        raw = os.environ.get("AZURE_INTEGRATIONS", "").strip()
        if not raw:
            return cls()
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"AZURE_INTEGRATIONS must be valid JSON: {exc}") from exc
        if not isinstance(records, list):
            raise ConfigurationError("AZURE_INTEGRATIONS must decode to a JSON list")
        return cls.from_config(records)


__all__ = [
    "AzureIntegration",
    "ClientSecretCredential",
    "IntegrationCredential",
    "IntegrationRegistry",
    "ManagedIdentityCredential",
    "PersonalAccessTokenCredential",
    "StaticIntegrationRegistry",
    "credential_secret",
    "parse_credential",
]
