"""``azure:repo:pr``: open a pull request in Azure DevOps."""

from __future__ import annotations

from typing import Any, Callable, Optional

from .. import config
from ..azure_devops import PullRequestSpec, branch_ref
from ..credentials import OrgTokenAuth, resolve_token
from ..helpers import create_ado_pull_request
from ..integrations import IntegrationRegistry
from ._shared import COMMON_PROPERTIES, ActionContext, TemplateAction, input_with_default

ACTION_ID = "azure:repo:pr"

INPUT_SCHEMA = {
    "type": "object",
    "required": ["repoId", "title"],
    "additionalProperties": False,
    "properties": {
        "organization": {
            "type": "string",
            "title": "Organization Name",
            "description": "The name of the organization in Azure DevOps.",
        },
        "sourceBranch": {
            "type": "string",
            "title": "Source Branch",
            "description": "The branch to merge into the source.",
        },
        "targetBranch": {
            "type": "string",
            "title": "Target Branch",
            "description": "The branch to merge into (default: main).",
        },
        "title": {
            "type": "string",
            "title": "Title",
            "description": "The title of the pull request.",
        },
        "description": {
            "type": "string",
            "title": "Description",
            "description": "The description of the pull request.",
        },
        "repoId": {
            "type": "string",
            "title": "Remote Repo ID",
            "description": "Repo ID of the pull request.",
        },
        "project": {
            "type": "string",
            "title": "ADO Project",
            "description": "The Project in Azure DevOps.",
        },
        "supportsIterations": {
            "type": "boolean",
            "title": "Supports Iterations",
            "description": "Whether or not the PR supports iterations.",
        },
        **COMMON_PROPERTIES,
    },
}


def create_pull_request_action(
    integrations: IntegrationRegistry,
    *,
    client_factory: Optional[Callable[..., Any]] = None,
) -> TemplateAction:
    async def handler(ctx: ActionContext) -> None:
        data = ctx.input
        host = input_with_default(data, "server", config.DEFAULT_AZURE_HOST)
        organization = input_with_default(data, "organization", config.DEFAULT_ORGANIZATION)
        source_branch = input_with_default(data, "sourceBranch", config.DEFAULT_PUSH_BRANCH)
        target_branch = input_with_default(data, "targetBranch", config.DEFAULT_TARGET_BRANCH)

        token = resolve_token(integrations, host, data.get("token"))
        pull_request = PullRequestSpec(
            source_ref_name=branch_ref(source_branch),
            target_ref_name=branch_ref(target_branch),
            title=data["title"],
            description=data.get("description"),
        )

        created = await create_ado_pull_request(
            pull_request,
            server=host,
            auth=OrgTokenAuth(org=organization, token=token),
            repo_id=data["repoId"],
            project=data.get("project"),
            supports_iterations=data.get("supportsIterations"),
            client_factory=client_factory,
        )
        pr_id = created.get("pullRequestId")
        config.log_chat(ctx.logger, "Created pull request %s: %s", pr_id, created.get("url"))
        ctx.set_output("pullRequestId", pr_id)

    return TemplateAction(
        id=ACTION_ID,
        description="Create a PR to a repository in Azure DevOps.",
        schema=INPUT_SCHEMA,
        handler=handler,
    )


__all__ = ["ACTION_ID", "INPUT_SCHEMA", "create_pull_request_action"]
