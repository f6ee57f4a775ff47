from logging import Logger
from typing import Any

from fastmcp.server import FastMCP
from fastmcp.tools import Tool
from fastmcp.utilities.logging import get_logger

from github_docs_editor.clients.github import GitHubDocsClient
from github_docs_editor.clients.models.github import MarkdownFile, RateLimitStatus
from github_docs_editor.models.repository.tree import MarkdownFileTree
from github_docs_editor.servers.shared.annotations import (
    BRANCH,
    OWNER,
    PATH,
    REF,
    REPO,
)


class BrowserServer:
    """Browse the Markdown files of a repository."""

    github_client: GitHubDocsClient
    logger: Logger

    def __init__(self, github_client: GitHubDocsClient | None = None, logger: Logger | None = None):
        self.logger = logger or get_logger(name=__name__)
        self.github_client = github_client or GitHubDocsClient()

    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.list_markdown_files))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.get_markdown_file))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.get_rate_limit))

        return fastmcp

    async def list_markdown_files(self, owner: OWNER, repo: REPO, branch: BRANCH = None) -> MarkdownFileTree:
        """List the Markdown files (.md, .markdown) on a branch of a repository, sorted by path."""

        markdown_file_tree: MarkdownFileTree = await self.github_client.get_markdown_tree(owner=owner, repo=repo, branch=branch)

        self.logger.info(f"Found {len(markdown_file_tree.files)} Markdown files on {owner}/{repo}@{markdown_file_tree.branch}")

        return markdown_file_tree

    async def get_markdown_file(self, owner: OWNER, repo: REPO, path: PATH, ref: REF = None) -> MarkdownFile:
        """Get a Markdown file with its decoded content and blob SHA."""

        return await self.github_client.get_file(owner=owner, repo=repo, path=path, ref=ref, error_on_not_found=True)

    async def get_rate_limit(self) -> RateLimitStatus:
        """Get the core REST API rate limit of the configured credential."""

        return await self.github_client.get_rate_limit()
