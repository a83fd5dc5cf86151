"""``azure:repo:clone``: clone an Azure Repos repository into the workspace."""

from __future__ import annotations

from typing import Optional

from .. import config
from ..credentials import GitAuth, resolve_token
from ..git import Runner
from ..helpers import clone_repo
from ..integrations import IntegrationRegistry
from ..paths import resolve_workspace_path
from ._shared import COMMON_PROPERTIES, ActionContext, TemplateAction, input_with_default

ACTION_ID = "azure:repo:clone"

INPUT_SCHEMA = {
    "type": "object",
    "required": ["remoteUrl"],
    "additionalProperties": False,
    "properties": {
        "remoteUrl": {
            "type": "string",
            "title": "Remote URL",
            "description": "The Git URL to the repository.",
        },
        "branch": {
            "type": "string",
            "title": "Repository Branch",
            "description": "The branch to checkout to.",
        },
        "targetPath": {
            "type": "string",
            "title": "Working Subdirectory",
            "description": "The subdirectory of the working directory to clone the repository into.",
        },
        **COMMON_PROPERTIES,
    },
}


def create_clone_action(
    integrations: IntegrationRegistry,
    *,
    git_runner: Optional[Runner] = None,
) -> TemplateAction:
    async def handler(ctx: ActionContext) -> None:
        data = ctx.input
        remote_url = data["remoteUrl"]
        branch = input_with_default(data, "branch", config.DEFAULT_CLONE_BRANCH)
        target_path = input_with_default(data, "targetPath", "./")
        host = input_with_default(data, "server", config.DEFAULT_AZURE_HOST)

        token = resolve_token(integrations, host, data.get("token"))
        outdir = resolve_workspace_path(ctx.workspace_path, target_path)

        config.log_chat(ctx.logger, "Cloning %s (%s) into %s", remote_url, branch, outdir)
        await clone_repo(
            dir=outdir,
            auth=GitAuth(password=token),
            logger=ctx.logger,
            remote_url=remote_url,
            branch=branch,
            runner=git_runner,
        )

    return TemplateAction(
        id=ACTION_ID,
        description="Clone an Azure repository into the workspace directory.",
        schema=INPUT_SCHEMA,
        handler=handler,
    )


__all__ = ["ACTION_ID", "INPUT_SCHEMA", "create_clone_action"]
