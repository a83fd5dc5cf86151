from __future__ import annotations

import logging

import pytest

from azure_repo_actions.credentials import GitAuth
from azure_repo_actions.exceptions import GitCommandError
from azure_repo_actions.helpers import clone_repo, commit_and_push_branch

LOGGER = logging.getLogger("azure_repo_actions.tests")


@pytest.mark.asyncio
async def test_clone_repo_runs_clone_remote_checkout_in_order(fake_git, tmp_path):
    target = str(tmp_path / "svc")

    await clone_repo(
        dir=target,
        auth=GitAuth(password="pat"),
        logger=LOGGER,
        remote_url="https://dev.azure.com/org/project/_git/repo",
        branch="develop",
        runner=fake_git,
    )

    assert fake_git.argv() == [
        ["clone", "https://dev.azure.com/org/project/_git/repo", target],
        ["remote", "get-url", "origin"],
        ["remote", "set-url", "origin", "https://dev.azure.com/org/project/_git/repo"],
        ["checkout", "develop"],
    ]


@pytest.mark.asyncio
async def test_clone_repo_stops_at_first_failure(fake_git, tmp_path):
    fake_git.responses[("clone",)] = {"exit_code": 128, "stderr": "fatal: repository not found"}

    with pytest.raises(GitCommandError, match="repository not found"):
        await clone_repo(
            dir=str(tmp_path / "svc"),
            auth=GitAuth(password="pat"),
            logger=LOGGER,
            remote_url="https://dev.azure.com/org/_git/missing",
            runner=fake_git,
        )

    assert len(fake_git.calls) == 1


@pytest.mark.asyncio
async def test_commit_and_push_creates_branch_and_pushes(fake_git):
    fake_git.responses[("symbolic-ref",)] = {"stdout": "main\n"}
    fake_git.responses[("rev-parse", "--verify")] = {"exit_code": 1}
    fake_git.responses[("rev-parse", "HEAD")] = {"stdout": "0123456789abcdef\n"}

    sha = await commit_and_push_branch(
        dir="/repo",
        auth=GitAuth(password="pat"),
        logger=LOGGER,
        commit_message="Initial commit",
        runner=fake_git,
    )

    assert sha == "0123456789abcdef"
    assert fake_git.argv() == [
        ["symbolic-ref", "--short", "-q", "HEAD"],
        ["rev-parse", "--verify", "--quiet", "refs/heads/scaffolder"],
        ["checkout", "-b", "scaffolder"],
        ["add", "--all", "--", "."],
        ["commit", "-m", "Initial commit"],
        ["rev-parse", "HEAD"],
        ["push", "origin", "scaffolder:refs/heads/scaffolder"],
    ]
    commit_env = fake_git.calls[4]["env"]
    assert commit_env["GIT_AUTHOR_NAME"] == "Scaffolder"
    assert commit_env["GIT_COMMITTER_EMAIL"] == "scaffolder@backstage.io"


@pytest.mark.asyncio
async def test_commit_and_push_switches_to_existing_branch(fake_git):
    fake_git.responses[("symbolic-ref",)] = {"stdout": "main\n"}

    await commit_and_push_branch(
        dir="/repo",
        auth=GitAuth(password="pat"),
        logger=LOGGER,
        commit_message="msg",
        git_author_info={"name": "Jane", "email": None},
        branch="feature",
        remote="upstream",
        runner=fake_git,
    )

    argv = fake_git.argv()
    assert ["checkout", "feature"] in argv
    assert argv[-1] == ["push", "upstream", "feature:refs/heads/feature"]
    commit_env = next(c["env"] for c in fake_git.calls if c["args"][0] == "commit")
    assert commit_env["GIT_AUTHOR_NAME"] == "Jane"
    assert commit_env["GIT_AUTHOR_EMAIL"] == "scaffolder@backstage.io"


@pytest.mark.asyncio
async def test_commit_and_push_stays_on_current_branch(fake_git):
    fake_git.responses[("symbolic-ref",)] = {"stdout": "scaffolder\n"}

    await commit_and_push_branch(
        dir="/repo",
        auth=GitAuth(password="pat"),
        logger=LOGGER,
        commit_message="msg",
        runner=fake_git,
    )

    assert not any(args[0] == "checkout" for args in fake_git.argv())


@pytest.mark.asyncio
async def test_push_failure_keeps_local_commit(fake_git):
    fake_git.responses[("symbolic-ref",)] = {"stdout": "scaffolder\n"}
    fake_git.responses[("push",)] = {"exit_code": 1, "stderr": "rejected"}

    with pytest.raises(GitCommandError, match="rejected"):
        await commit_and_push_branch(
            dir="/repo",
            auth=GitAuth(password="pat"),
            logger=LOGGER,
            commit_message="msg",
            runner=fake_git,
        )

    assert not any(args[0] in {"reset", "revert"} for args in fake_git.argv())


@pytest.mark.asyncio
async def test_clone_repo_initializes_populated_directory_in_place(fake_git, tmp_path):
    target = tmp_path / "workspace"
    target.mkdir()
    (target / "catalog-info.yaml").write_text("kind: Component\n")
    fake_git.responses[("remote", "get-url")] = {"exit_code": 2}

    await clone_repo(
        dir=str(target),
        auth=GitAuth(password="pat"),
        logger=LOGGER,
        remote_url="https://dev.azure.com/org/project/_git/repo",
        branch="develop",
        runner=fake_git,
    )

    assert fake_git.argv() == [
        ["init"],
        ["remote", "get-url", "origin"],
        ["remote", "add", "origin", "https://dev.azure.com/org/project/_git/repo"],
        ["fetch", "origin"],
        ["checkout", "-B", "develop", "origin/develop"],
    ]
    assert all(call["cwd"] == str(target) for call in fake_git.calls)
