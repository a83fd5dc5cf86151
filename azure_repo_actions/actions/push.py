"""``azure:repo:push``: commit workspace changes and push them to a branch."""

from __future__ import annotations

from typing import Optional

from .. import config
from ..config import ScaffolderConfig
from ..credentials import GitAuth, resolve_token
from ..git import Runner
from ..helpers import commit_and_push_branch
from ..integrations import IntegrationRegistry
from ..paths import resolve_source_path
from ._shared import COMMON_PROPERTIES, ActionContext, TemplateAction, input_with_default

ACTION_ID = "azure:repo:push"

INPUT_SCHEMA = {
    "type": "object",
    "required": [],
    "additionalProperties": False,
    "properties": {
        "branch": {
            "type": "string",
            "title": "Repository Branch",
            "description": "The branch to checkout to.",
        },
        "sourcePath": {
            "type": "string",
            "title": "Working Subdirectory",
            "description": "The subdirectory of the working directory containing the repository.",
        },
        "gitCommitMessage": {
            "type": "string",
            "title": "Git Commit Message",
            "description": "Sets the commit message on the repository. The default value is 'Initial commit'",
        },
        "gitAuthorName": {
            "type": "string",
            "title": "Default Author Name",
            "description": "Sets the default author name for the commit. The default value is 'Scaffolder'.",
        },
        "gitAuthorEmail": {
            "type": "string",
            "title": "Default Author Email",
            "description": "Sets the default author email for the commit.",
        },
        **COMMON_PROPERTIES,
    },
}


def create_push_action(
    integrations: IntegrationRegistry,
    scaffolder_config: Optional[ScaffolderConfig] = None,
    *,
    git_runner: Optional[Runner] = None,
) -> TemplateAction:
    cfg = scaffolder_config or ScaffolderConfig()

    async def handler(ctx: ActionContext) -> None:
        data = ctx.input
        branch = input_with_default(data, "branch", config.DEFAULT_PUSH_BRANCH)
        host = input_with_default(data, "server", config.DEFAULT_AZURE_HOST)

        token = resolve_token(integrations, host, data.get("token"))
        source_path = resolve_source_path(ctx.workspace_path, data.get("sourcePath"))

        git_author_info = {
            "name": data.get("gitAuthorName")
            or cfg.get_optional_string("scaffolder.defaultAuthor.name"),
            "email": data.get("gitAuthorEmail")
            or cfg.get_optional_string("scaffolder.defaultAuthor.email"),
        }
        commit_message = (
            data.get("gitCommitMessage")
            or cfg.get_optional_string("scaffolder.defaultCommitMessage")
            or config.DEFAULT_COMMIT_MESSAGE
        )

        config.log_chat(ctx.logger, "Pushing %s to branch %s", source_path, branch)
        sha = await commit_and_push_branch(
            dir=source_path,
            auth=GitAuth(password=token),
            logger=ctx.logger,
            commit_message=commit_message,
            git_author_info=git_author_info,
            branch=branch,
            runner=git_runner,
        )
        ctx.set_output("commitHash", sha)

    return TemplateAction(
        id=ACTION_ID,
        description="Push the content in the workspace to a remote Azure repository.",
        schema=INPUT_SCHEMA,
        handler=handler,
    )


__all__ = ["ACTION_ID", "INPUT_SCHEMA", "create_push_action"]
