"""Azure DevOps REST client for pull request creation.

A client is built per call from the server, organization and token. Nothing is
cached between calls, so a rotated token takes effect on the next action run.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
from urllib.parse import quote

import httpx

from . import config
from .credentials import OrgTokenAuth
from .exceptions import AzureDevOpsAPIError, AzureDevOpsAuthError, OperationError


@dataclass(frozen=True)
class PullRequestSpec:
    source_ref_name: str
    target_ref_name: str
    title: str
    description: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "sourceRefName": self.source_ref_name,
            "targetRefName": self.target_ref_name,
            "title": self.title,
        }
        if self.description:
            payload["description"] = self.description
        return payload


def branch_ref(branch: str) -> str:
    """Return ``refs/heads/<branch>``, leaving full ref names untouched."""

    branch = branch.strip()
    if branch.startswith("refs/"):
        return branch
    return f"refs/heads/{branch}"


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return (resp.text or "").strip()[:500] or resp.reason_phrase


class AzureDevOpsClient:
    """One REST session against ``https://<server>/<org>``."""

    def __init__(
        self,
        server: str,
        auth: OrgTokenAuth,
        *,
        client_factory: Optional[Callable[..., httpx.AsyncClient]] = None,
        api_version: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.server = server.strip().rstrip("/")
        self.auth = auth
        self.base_url = f"https://{self.server}/{quote(auth.org, safe='')}"
        self.api_version = api_version or config.AZURE_DEVOPS_API_VERSION
        self._client_factory = client_factory or httpx.AsyncClient
        self._logger = logger or config.AZURE_DEVOPS_LOGGER

    def _build_client(self) -> httpx.AsyncClient:
        return self._client_factory(
            base_url=self.base_url,
            auth=httpx.BasicAuth("PAT", self.auth.token),
            timeout=config.HTTPX_TIMEOUT,
            headers={"Accept": "application/json"},
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        start = time.time()
        async with self._build_client() as client:
            try:
                resp = await client.request(method, path, params=params, json=json_body)
            except httpx.TimeoutException as exc:
                raise OperationError(f"Azure DevOps request timed out: {method} {path}") from exc
            except httpx.HTTPError as exc:
                raise OperationError(f"Azure DevOps request failed: {exc}") from exc

        duration_ms = int((time.time() - start) * 1000)
        self._logger.debug(
            "%s %s%s -> %s (%sms)", method, self.base_url, path, resp.status_code, duration_ms
        )

        if resp.status_code in (401, 403):
            raise AzureDevOpsAuthError(
                f"Azure DevOps authentication failed: {resp.status_code} {_error_message(resp)}",
                status_code=resp.status_code,
            )
        if resp.is_error:
            try:
                payload = resp.json()
            except ValueError:
                payload = None
            raise AzureDevOpsAPIError(
                f"Azure DevOps API error: {resp.status_code} {_error_message(resp)}",
                status_code=resp.status_code,
                response_payload=payload,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise AzureDevOpsAPIError(
                "Azure DevOps returned a non-JSON response",
                status_code=resp.status_code,
            ) from exc

    async def create_pull_request(
        self,
        pull_request: PullRequestSpec,
        repo_id: str,
        project: Optional[str] = None,
        supports_iterations: Optional[bool] = None,
    ) -> Dict[str, Any]:
        path = ""
        if project:
            path += "/" + quote(project, safe="")
        path += f"/_apis/git/repositories/{quote(repo_id, safe='')}/pullrequests"

        params: Dict[str, Any] = {"api-version": self.api_version}
        if supports_iterations is not None:
            params["supportsIterations"] = "true" if supports_iterations else "false"

        result = await self._request("POST", path, params=params, json_body=pull_request.to_payload())
        if not isinstance(result, dict):
            raise AzureDevOpsAPIError("Unexpected pull request response shape", response_payload=result)
        return result


__all__ = ["AzureDevOpsClient", "PullRequestSpec", "branch_ref"]
