"""Workspace path resolution with a traversal guard."""

from __future__ import annotations

import os
from typing import Optional

from .exceptions import PathError


def _is_within(root: str, candidate: str) -> bool:
    return candidate == root or candidate.startswith(root + os.sep)


def resolve_workspace_path(workspace_path: str, target_path: Optional[str] = None) -> str:
    """Join ``target_path`` onto the workspace root, refusing escapes.

    Targets resolving outside the root raise :class:`PathError`. Absolute
    targets are accepted when they point inside the workspace. The root
    itself (``"./"``) is allowed.
    """

    root = os.path.realpath(workspace_path)
    rel = (target_path or "").strip() or "./"
    candidate = os.path.realpath(os.path.join(root, rel))
    if not _is_within(root, candidate):
        raise PathError(f"Path is not allowed to refer to a directory outside the workspace: {rel}")
    return candidate


def resolve_source_path(workspace_path: str, source_path: Optional[str] = None) -> str:
    """Resolve a push source directory.

    Leading ``../`` segments are stripped after normalization so the path is
    always anchored inside the workspace; the result is still verified.
    """

    root = os.path.realpath(workspace_path)
    if not source_path or not source_path.strip():
        return root

    normalized = os.path.normpath(source_path.strip().replace("\\", "/")).replace(os.sep, "/")
    normalized = normalized.lstrip("/")
    while normalized == ".." or normalized.startswith("../"):
        normalized = normalized[3:] if normalized.startswith("../") else ""

    candidate = os.path.realpath(os.path.join(root, normalized or "."))
    if not _is_within(root, candidate):
        raise PathError(f"Relative path is not allowed to refer to a directory outside the workspace: {source_path}")
    return candidate


__all__ = ["resolve_source_path", "resolve_workspace_path"]
