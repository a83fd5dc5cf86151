from __future__ import annotations

import os

import pytest

from azure_repo_actions.exceptions import PathError
from azure_repo_actions.paths import resolve_source_path, resolve_workspace_path


def test_workspace_path_defaults_to_root(workspace):
    root = os.path.realpath(workspace)
    assert resolve_workspace_path(str(workspace)) == root
    assert resolve_workspace_path(str(workspace), "./") == root


def test_workspace_path_joins_subdirectory(workspace):
    assert resolve_workspace_path(str(workspace), "svc") == os.path.join(
        os.path.realpath(workspace), "svc"
    )


@pytest.mark.parametrize("target", ["../../etc", "..", "svc/../../other", "/etc"])
def test_workspace_path_rejects_escapes(workspace, target):
    with pytest.raises(PathError):
        resolve_workspace_path(str(workspace), target)

    assert os.listdir(workspace) == []


def test_workspace_path_accepts_absolute_path_inside_workspace(workspace):
    inside = os.path.join(os.path.realpath(workspace), "svc")

    assert resolve_workspace_path(str(workspace), inside) == inside


def test_workspace_path_rejects_symlink_escape(workspace, tmp_path):
    outside = tmp_path / "outside"
    outside.mkdir()
    os.symlink(outside, workspace / "link")

    with pytest.raises(PathError):
        resolve_workspace_path(str(workspace), "link")


def test_source_path_defaults_to_root(workspace):
    assert resolve_source_path(str(workspace)) == os.path.realpath(workspace)
    assert resolve_source_path(str(workspace), "") == os.path.realpath(workspace)


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("repo", "repo"),
        ("../repo", "repo"),
        ("../../repo/sub", os.path.join("repo", "sub")),
        ("/repo", "repo"),
        ("..", ""),
    ],
)
def test_source_path_strips_leading_parent_segments(workspace, source, expected):
    root = os.path.realpath(workspace)
    assert resolve_source_path(str(workspace), source) == os.path.normpath(os.path.join(root, expected))
