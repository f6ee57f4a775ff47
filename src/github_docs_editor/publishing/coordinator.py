"""Lands an edited Markdown file as a pull request, guarded by an optimistic-concurrency check.

The blob SHA the editor loaded is the version token. Before anything is written the coordinator compares it with
the file's current SHA and hands back the fresh upstream state on mismatch. The comparison is only a fast path: the
commit itself names the same SHA as the required parent, so GitHub rejects a write that races in between.

A failure after the scratch branch exists (commit or pull request) triggers a best-effort delete of that branch
before the original error is raised."""

from collections.abc import Callable
from logging import Logger

from fastmcp.utilities.logging import get_logger

from github_docs_editor.clients.errors.github import BadRequestError, ClientError, ResourceConflictError
from github_docs_editor.clients.github import GitHubDocsClient
from github_docs_editor.clients.models.github import CreatedPullRequest, GitReference, MarkdownFile
from github_docs_editor.models.publish import PublishConflict, PublishRequest, PublishResult, PublishSuccess
from github_docs_editor.publishing.branches import new_branch_name

NO_CHANGES_MESSAGE = "No changes to publish"


class PublishCoordinator:
    github_client: GitHubDocsClient
    logger: Logger
    branch_namer: Callable[[str], str]

    def __init__(
        self,
        github_client: GitHubDocsClient,
        logger: Logger | None = None,
        branch_namer: Callable[[str], str] | None = None,
    ):
        self.github_client = github_client
        self.logger = logger or get_logger(name=__name__)
        self.branch_namer = branch_namer or new_branch_name

    async def publish(self, request: PublishRequest) -> PublishResult:
        """Open a pull request with the edited Markdown, or return the upstream state if the file changed."""

        owner, repo, path = request.owner, request.repo, request.path

        base_branch: str = request.base_branch or await self.github_client.get_default_branch(owner=owner, repo=repo)

        current_file: MarkdownFile = await self.github_client.get_file(
            owner=owner, repo=repo, path=path, ref=base_branch, error_on_not_found=True
        )

        if current_file.sha != request.base_sha:
            self.logger.info(f"{owner}/{repo}:{path} changed upstream ({request.base_sha} -> {current_file.sha}), not publishing.")
            return conflict_from_file(current_file)

        if current_file.markdown == request.markdown:
            raise BadRequestError(message=NO_CHANGES_MESSAGE, extra_info={"path": path})

        head: GitReference = await self.github_client.get_branch_head(owner=owner, repo=repo, branch=base_branch)

        branch: str = self.branch_namer(path)

        await self.github_client.create_branch(owner=owner, repo=repo, branch=branch, sha=head.sha)

        self.logger.info(f"Created branch {branch} on {owner}/{repo} at {head.sha}")

        try:
            await self.github_client.commit_file(
                owner=owner,
                repo=repo,
                path=path,
                branch=branch,
                content=request.markdown,
                message=request.commit_message,
                sha=current_file.sha,
            )

            pull_request: CreatedPullRequest = await self.github_client.create_pull_request(
                owner=owner, repo=repo, title=request.title, body=request.body, head=branch, base=base_branch
            )
        except ResourceConflictError:
            await self._delete_branch(owner=owner, repo=repo, branch=branch)
            return await self._refetch_conflict(request=request, base_branch=base_branch)
        except ClientError:
            await self._delete_branch(owner=owner, repo=repo, branch=branch)
            raise

        self.logger.info(f"Opened pull request #{pull_request.number} from {branch} into {base_branch} on {owner}/{repo}")

        return PublishSuccess(pr_url=pull_request.url, pr_number=pull_request.number)

    async def _refetch_conflict(self, request: PublishRequest, base_branch: str) -> PublishConflict:
        """The commit was rejected because the file moved on after the check. Re-read it so the caller can re-base."""

        self.logger.info(f"{request.owner}/{request.repo}:{request.path} changed upstream while publishing, re-reading it.")

        try:
            current_file: MarkdownFile = await self.github_client.get_file(
                owner=request.owner, repo=request.repo, path=request.path, ref=base_branch, error_on_not_found=True
            )
        except ClientError as e:
            raise ResourceConflictError(action="Publish file", resource=request.path) from e

        return conflict_from_file(current_file)

    async def _delete_branch(self, owner: str, repo: str, branch: str) -> None:
        """Remove the scratch branch of a publish that did not complete. A failed cleanup is reported, not raised."""

        try:
            await self.github_client.delete_branch(owner=owner, repo=repo, branch=branch)
        except ClientError:
            self.logger.exception(f"Could not delete branch {branch} on {owner}/{repo}, it is left behind.")
            return

        self.logger.warning(f"Deleted branch {branch} on {owner}/{repo} after a failed publish.")


def conflict_from_file(markdown_file: MarkdownFile) -> PublishConflict:
    return PublishConflict(upstream_sha=markdown_file.sha, upstream_markdown=markdown_file.markdown)
