"""Git and Azure DevOps operations shared by the repo actions."""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, Mapping, Optional

import httpx

from . import config
from .azure_devops import AzureDevOpsClient, PullRequestSpec
from .credentials import GitAuth, OrgTokenAuth
from .git import GitClient, Runner


def _git_client(auth: GitAuth, logger: logging.Logger, runner: Optional[Runner]) -> GitClient:
    return GitClient(auth=auth, logger=logger, runner=runner)


async def clone_repo(
    dir: str,
    auth: GitAuth,
    logger: logging.Logger,
    remote_url: str,
    branch: str = config.DEFAULT_CLONE_BRANCH,
    remote: str = config.DEFAULT_REMOTE,
    *,
    runner: Optional[Runner] = None,
) -> None:
    """Clone ``remote_url`` into ``dir`` and check out ``branch``.

    ``git clone`` refuses a non-empty destination, so a populated directory
    is initialized in place and the branch is checked out from the fetched
    remote, keeping the files already there.
    """

    git = _git_client(auth, logger, runner)
    if os.path.isdir(dir) and os.listdir(dir):
        await git.init(dir)
        await git.add_remote(dir, remote, remote_url)
        await git.fetch(dir, remote)
        await git.checkout(dir, branch, start_point=f"{remote}/{branch}")
        return

    await git.clone(remote_url, dir)
    await git.add_remote(dir, remote, remote_url)
    await git.checkout(dir, branch)


async def commit_and_push_branch(
    dir: str,
    auth: GitAuth,
    logger: logging.Logger,
    commit_message: str,
    git_author_info: Optional[Mapping[str, Optional[str]]] = None,
    branch: str = config.DEFAULT_PUSH_BRANCH,
    remote: str = config.DEFAULT_REMOTE,
    *,
    runner: Optional[Runner] = None,
) -> str:
    """Commit everything under ``dir`` and push it to ``remote``/``branch``.

    A local commit is kept when the push fails.
    """

    author_info = git_author_info or {}
    author_name = author_info.get("name") or config.DEFAULT_GIT_AUTHOR_NAME
    author_email = author_info.get("email") or config.DEFAULT_GIT_AUTHOR_EMAIL

    git = _git_client(auth, logger, runner)
    current = await git.current_branch(dir)
    if current != branch:
        if await git.branch_exists(dir, branch):
            await git.checkout(dir, branch)
        else:
            await git.create_branch(dir, branch)

    await git.add(dir, ".")
    sha = await git.commit(dir, commit_message, author_name, author_email)
    config.log_chat(logger, "Committed %s on %s", sha[:12], branch)
    await git.push(dir, remote, branch)
    return sha


async def create_ado_pull_request(
    pull_request: PullRequestSpec,
    server: str,
    auth: OrgTokenAuth,
    repo_id: str,
    project: Optional[str] = None,
    supports_iterations: Optional[bool] = None,
    *,
    client_factory: Optional[Callable[..., httpx.AsyncClient]] = None,
) -> Dict[str, Any]:
    """Create one pull request and return the created resource."""

    client = AzureDevOpsClient(server, auth, client_factory=client_factory)
    return await client.create_pull_request(
        pull_request,
        repo_id,
        project=project,
        supports_iterations=supports_iterations,
    )


__all__ = ["clone_repo", "commit_and_push_branch", "create_ado_pull_request"]
