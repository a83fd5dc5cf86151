import asyncio
import inspect
import os
import shutil
import subprocess

import pytest

from azure_repo_actions.integrations import (
    PersonalAccessTokenCredential,
    StaticIntegrationRegistry,
)


def pytest_configure(config):
    config.addinivalue_line("markers", "asyncio: mark test to run in event loop")
    config.addinivalue_line("markers", "git: requires a git executable on PATH")


def pytest_collection_modifyitems(config, items):
    if shutil.which("git"):
        return
    skip_git = pytest.mark.skip(reason="git executable not available")
    for item in items:
        if item.get_closest_marker("git") is not None:
            item.add_marker(skip_git)


def pytest_pyfunc_call(pyfuncitem):
    if "asyncio" not in pyfuncitem.keywords:
        return None

    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None

    argnames = pyfuncitem._fixtureinfo.argnames
    kwargs = {name: pyfuncitem.funcargs[name] for name in argnames}

    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        loop.run_until_complete(test_func(**kwargs))
    finally:
        loop.close()
        asyncio.set_event_loop(None)

    return True


@pytest.fixture
def registry():
    return StaticIntegrationRegistry(
        {"dev.azure.com": [PersonalAccessTokenCredential(personal_access_token="configured-pat")]}
    )


@pytest.fixture
def empty_registry():
    return StaticIntegrationRegistry()


@pytest.fixture
def workspace(tmp_path):
    path = tmp_path / "workspace"
    path.mkdir()
    return path


class FakeGitRunner:
    """Records git invocations and replies from a scripted table.

    ``responses`` maps a tuple prefix of the git argv to a result dict; the
    longest matching prefix wins. Unmatched commands succeed with no output.
    """

    def __init__(self, responses=None):
        self.calls = []
        self.responses = dict(responses or {})

    def argv(self):
        return [call["args"] for call in self.calls]

    async def __call__(self, args, cwd=None, timeout_seconds=300, env=None):
        self.calls.append({"args": list(args), "cwd": cwd, "env": dict(env or {})})
        best = None
        for prefix, result in self.responses.items():
            if tuple(args[: len(prefix)]) == tuple(prefix):
                if best is None or len(prefix) > len(best[0]):
                    best = (prefix, result)
        result = {"exit_code": 0, "timed_out": False, "stdout": "", "stderr": ""}
        if best is not None:
            result.update(best[1])
        return result


@pytest.fixture
def fake_git():
    return FakeGitRunner()


def run_git(*args, cwd=None):
    env = {
        **os.environ,
        "GIT_AUTHOR_NAME": "Test",
        "GIT_AUTHOR_EMAIL": "test@example.com",
        "GIT_COMMITTER_NAME": "Test",
        "GIT_COMMITTER_EMAIL": "test@example.com",
        "GIT_CONFIG_NOSYSTEM": "1",
    }
    return subprocess.run(
        ["git", *args],
        cwd=cwd,
        env=env,
        check=True,
        capture_output=True,
        text=True,
    ).stdout.strip()


@pytest.fixture
def bare_remote(tmp_path):
    """A local bare repository with ``main`` and ``develop`` branches."""

    remote = tmp_path / "remote.git"
    seed = tmp_path / "seed"
    run_git("init", "--bare", str(remote))
    run_git("init", str(seed))
    run_git("symbolic-ref", "HEAD", "refs/heads/main", cwd=seed)
    (seed / "README.md").write_text("hello\n")
    run_git("add", "README.md", cwd=seed)
    run_git("commit", "-m", "seed", cwd=seed)
    run_git("checkout", "-b", "develop", cwd=seed)
    (seed / "DEVELOP.md").write_text("develop\n")
    run_git("add", "DEVELOP.md", cwd=seed)
    run_git("commit", "-m", "develop", cwd=seed)
    run_git("push", str(remote), "main", "develop", cwd=seed)
    run_git("symbolic-ref", "HEAD", "refs/heads/main", cwd=remote)
    return remote


@pytest.fixture
def git_cli():
    return run_git
