from logging import Logger
from typing import Any

from fastmcp.server import FastMCP
from fastmcp.tools import Tool
from fastmcp.utilities.logging import get_logger
from pydantic import ValidationError

from github_docs_editor.clients.errors.github import BadRequestError
from github_docs_editor.clients.github import GitHubDocsClient
from github_docs_editor.models.publish import PublishRequest, PublishResult
from github_docs_editor.publishing.coordinator import PublishCoordinator
from github_docs_editor.servers.shared.annotations import (
    BASE_BRANCH,
    BASE_SHA,
    MARKDOWN,
    OWNER,
    PATH,
    PR_BODY,
    PR_TITLE,
    REPO,
)

MISSING_FIELDS_MESSAGE = "owner, repo, path, baseSha, and markdown are required"


def parse_publish_request(payload: Any) -> PublishRequest:  # pyright: ignore[reportAny]
    """Validate a publish payload, accepting both camelCase and snake_case keys."""

    try:
        return PublishRequest.model_validate(payload)
    except ValidationError as e:
        raise BadRequestError(message=MISSING_FIELDS_MESSAGE) from e


class PublisherServer:
    """Publish edits of Markdown files as pull requests."""

    publish_coordinator: PublishCoordinator
    logger: Logger

    def __init__(self, github_client: GitHubDocsClient | None = None, logger: Logger | None = None):
        self.logger = logger or get_logger(name=__name__)
        self.publish_coordinator = PublishCoordinator(github_client=github_client or GitHubDocsClient(), logger=self.logger)

    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.publish_markdown_file))

        return fastmcp

    async def publish(self, request: PublishRequest) -> PublishResult:
        return await self.publish_coordinator.publish(request=request)

    async def publish_markdown_file(
        self,
        owner: OWNER,
        repo: REPO,
        path: PATH,
        base_sha: BASE_SHA,
        markdown: MARKDOWN,
        base_branch: BASE_BRANCH = None,
        pr_title: PR_TITLE = None,
        pr_body: PR_BODY = None,
    ) -> PublishResult:
        """Publish an edited Markdown file as a pull request on a new branch.

        If the file changed upstream since `base_sha`, nothing is written and the current content and blob SHA of the
        file are returned instead so the edit can be re-based."""

        request: PublishRequest = parse_publish_request(
            {
                "owner": owner,
                "repo": repo,
                "path": path,
                "base_sha": base_sha,
                "markdown": markdown,
                "base_branch": base_branch,
                "pr_title": pr_title,
                "pr_body": pr_body,
            }
        )

        return await self.publish(request=request)
