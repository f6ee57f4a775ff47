import os
from collections.abc import Awaitable, Callable
from logging import Logger
from typing import TYPE_CHECKING, Any, Literal, overload

from fastmcp.utilities.logging import get_logger
from githubkit import GitHub as GitHubKit
from githubkit.auth import TokenAuthStrategy, UnauthAuthStrategy
from githubkit.exception import GitHubException as GitHubKitGitHubException
from githubkit.exception import RequestFailed as GitHubKitRequestFailed
from githubkit.response import Response as GitHubKitResponse
from githubkit.versions.v2022_11_28.models import ContentFile as GitHubKitContentFile

from github_docs_editor.clients.errors.github import (
    RequestError,
    ResourceTypeMismatchError,
    classify_request_failure,
)
from github_docs_editor.clients.models.github import (
    CommittedFile,
    CreatedPullRequest,
    GitReference,
    MarkdownFile,
    RateLimitStatus,
    Repository,
)
from github_docs_editor.models.repository.tree import MarkdownFileTree
from github_docs_editor.servers.shared.utility import GITHUBKIT_RESPONSE_TYPE, encode_content, extract_response

if TYPE_CHECKING:
    from githubkit.versions.v2022_11_28.models import GitTree as GitHubKitGitTree

NOT_FOUND_ERROR = 404

USER_AGENT = "github-docs-editor/1.0.0"


def get_github_token() -> str | None:
    env_vars: tuple[str, ...] = ("GITHUB_TOKEN", "GITHUB_PERSONAL_ACCESS_TOKEN")
    for env_var in env_vars:
        if token := os.environ.get(env_var):
            return token
    return None


def get_github_base_url() -> str | None:
    return os.environ.get("GITHUB_BASE_URL") or None


def get_githubkit_client(token: str | None = None, base_url: str | None = None) -> GitHubKit[Any]:
    # No automatic retries, writes are not idempotent.
    token = token or get_github_token()
    base_url = base_url or get_github_base_url()

    if token:
        return GitHubKit[TokenAuthStrategy](
            auth=TokenAuthStrategy(token=token), base_url=base_url, user_agent=USER_AGENT, auto_retry=False
        )

    get_logger(name=__name__).warning("No GitHub token configured, using unauthenticated requests with a lower rate limit.")

    return GitHubKit[UnauthAuthStrategy](auth=UnauthAuthStrategy(), base_url=base_url, user_agent=USER_AGENT, auto_retry=False)


def branch_ref(branch: str) -> str:
    return f"heads/{branch}"


class GitHubDocsClient:
    githubkit_client: GitHubKit[Any]
    logger: Logger

    log_requests: bool
    log_responses: bool
    log_on_error: bool

    def __init__(
        self,
        githubkit_client: GitHubKit[Any] | None = None,
        logger: Logger | None = None,
        log_requests: bool = True,
        log_responses: bool = False,
        log_on_error: bool = True,
    ):
        self.githubkit_client = githubkit_client or get_githubkit_client()
        self.logger = logger or get_logger(name=__name__)
        self.log_requests = log_requests
        self.log_responses = log_responses
        self.log_on_error = log_on_error

    def _get_loggers(
        self, log_request: bool | None = None, log_response: bool | None = None, log_on_error: bool | None = None
    ) -> tuple[Callable[[str], Any], Callable[[str], Any], Callable[[str], Any]]:
        request_logger = self.logger.info if log_request or self.log_requests else self.logger.debug
        response_logger = self.logger.info if log_response or self.log_responses else self.logger.debug
        error_logger = self.logger.exception if log_on_error or self.log_on_error else self.logger.debug
        return request_logger, response_logger, error_logger

    @overload
    async def _perform_rest_request[T: GITHUBKIT_RESPONSE_TYPE](
        self,
        action: str,
        log_request: bool | None = None,
        log_response: bool | None = None,
        log_on_error: bool | None = None,
        error_on_not_found: Literal[False] = False,
        *,
        method: Callable[..., Awaitable[GitHubKitResponse[T]]],
        expect_content: bool = True,
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> T | None: ...

    @overload
    async def _perform_rest_request[T: GITHUBKIT_RESPONSE_TYPE](
        self,
        action: str,
        log_request: bool | None = None,
        log_response: bool | None = None,
        log_on_error: bool | None = None,
        error_on_not_found: Literal[True] = True,
        *,
        method: Callable[..., Awaitable[GitHubKitResponse[T]]],
        expect_content: bool = True,
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> T: ...

    async def _perform_rest_request[T: GITHUBKIT_RESPONSE_TYPE](
        self,
        action: str,
        log_request: bool | None = None,
        log_response: bool | None = None,
        log_on_error: bool | None = None,
        error_on_not_found: bool | None = None,
        *,
        method: Callable[..., Awaitable[GitHubKitResponse[T]]],
        expect_content: bool = True,
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> T | None:
        """Perform a request and extract the response.

        Args:
            action: The action being performed.
            log_request: Whether to log the request.
            log_response: Whether to log the response.
            log_on_error: Whether to log on error.
            error_on_not_found: Whether to raise an error if the resource is not found.
            expect_content: Whether the response has a body to parse. GitHub answers some writes with 204 No Content.

        Raises:
            ResourceNotFoundError: If the resource is not found and error_on_not_found is True.
            UnauthorizedError: If GitHub rejects the credential.
            RateLimitedError: If GitHub is throttling the caller.
            ResourceConflictError: If GitHub reports a conflicting write.
            RequestError: If the request fails for any other reason.
        """

        request_logger, response_logger, error_logger = self._get_loggers(
            log_request=log_request, log_response=log_response, log_on_error=log_on_error
        )

        request_logger(f"Performing {action} using {method.__name__} with args {_loggable_args(request_args)}")

        try:
            response: GitHubKitResponse[T] = await method(**request_args)
        except GitHubKitRequestFailed as e:
            status_code: int = e.response.status_code

            if status_code == NOT_FOUND_ERROR and not error_on_not_found:
                return None

            error_logger(f"RequestFailed error performing {action} using {method.__name__}: {status_code}")

            raise classify_request_failure(
                action=action,
                status_code=status_code,
                resource=e.request.url.path,
                headers=e.response.headers,
                body=e.response.text,
            ) from e
        except GitHubKitGitHubException as e:
            error_logger(f"Error performing {action} using {method.__name__}: {e}")

            raise RequestError(action=action, message=str(e)) from e

        if not expect_content:
            response_logger(f"Completed {action} using {method.__name__}: {response.status_code}")

            return None

        extracted_response = extract_response(response)

        response_logger(f"Extracted response for {action} using {method.__name__}: {extracted_response}")

        return extracted_response

    @overload
    async def get_repository(self, owner: str, repo: str, error_on_not_found: Literal[True] = True) -> Repository: ...

    @overload
    async def get_repository(self, owner: str, repo: str, error_on_not_found: Literal[False] = False) -> Repository | None: ...

    async def get_repository(
        self,
        owner: str,
        repo: str,
        error_on_not_found: bool = False,
    ) -> Repository | None:
        """Get a repository."""

        if githubkit_repository := await self._perform_rest_request(
            action="Get repository",
            error_on_not_found=error_on_not_found,
            method=self.githubkit_client.rest.repos.async_get,
            owner=owner,
            repo=repo,
        ):
            return Repository.from_full_repository(full_repository=githubkit_repository)

        return None

    async def get_default_branch(self, owner: str, repo: str) -> str:
        """Get the default branch of a repository."""

        repository: Repository = await self.get_repository(owner=owner, repo=repo, error_on_not_found=True)

        return repository.default_branch

    @overload
    async def get_git_ref(self, owner: str, repo: str, ref: str, error_on_not_found: Literal[False] = False) -> GitReference | None: ...

    @overload
    async def get_git_ref(self, owner: str, repo: str, ref: str, error_on_not_found: Literal[True] = True) -> GitReference: ...

    async def get_git_ref(self, owner: str, repo: str, ref: str, error_on_not_found: bool = False) -> GitReference | None:
        """Get details about a git ref from the repository.

        Args:
            owner: The owner of the repository.
            repo: The name of the repository.
            ref: The ref of the branch or tag to get the details from, e.g. `heads/main`.
            error_on_not_found: Whether to raise an error if the ref is not found.
        """

        if git_ref := await self._perform_rest_request(
            action="Get git ref",
            error_on_not_found=error_on_not_found,
            method=self.githubkit_client.rest.git.async_get_ref,
            owner=owner,
            repo=repo,
            ref=ref,
        ):
            return GitReference.from_git_ref(git_ref=git_ref)

        return None

    async def get_branch_head(self, owner: str, repo: str, branch: str) -> GitReference:
        """Get the ref of a branch, whose SHA is the branch's tip commit."""

        return await self.get_git_ref(owner=owner, repo=repo, ref=branch_ref(branch), error_on_not_found=True)

    async def get_markdown_tree(self, owner: str, repo: str, branch: str | None = None) -> MarkdownFileTree:
        """List the Markdown files on a branch of a repository.

        Args:
            owner: The owner of the repository.
            repo: The name of the repository.
            branch: The branch to list. If not provided, the default branch will be used.
        """

        if branch is None:
            branch = await self.get_default_branch(owner=owner, repo=repo)

        head: GitReference = await self.get_branch_head(owner=owner, repo=repo, branch=branch)

        tree: GitHubKitGitTree = await self._perform_rest_request(
            action="Get repository tree",
            error_on_not_found=True,
            method=self.githubkit_client.rest.git.async_get_tree,
            owner=owner,
            repo=repo,
            tree_sha=head.sha,
            recursive="1",
        )

        if tree.truncated:
            self.logger.warning(f"The tree of {owner}/{repo}@{branch} was truncated by GitHub, the listing is incomplete.")

        return MarkdownFileTree.from_git_tree(git_tree=tree, branch=branch)

    @overload
    async def get_file(
        self, owner: str, repo: str, path: str, ref: str | None = None, error_on_not_found: Literal[False] = False
    ) -> MarkdownFile | None: ...

    @overload
    async def get_file(
        self, owner: str, repo: str, path: str, ref: str | None = None, error_on_not_found: Literal[True] = True
    ) -> MarkdownFile: ...

    async def get_file(
        self,
        owner: str,
        repo: str,
        path: str,
        ref: str | None = None,
        error_on_not_found: bool = False,
    ) -> MarkdownFile | None:
        """Get a file from a repository with its content decoded.

        Args:
            owner: The owner of the repository.
            repo: The name of the repository.
            path: The path of the file.
            ref: The ref of the branch or tag to get the file from. If not provided, the default branch will be used.
            error_on_not_found: Whether to raise an error if the file is not found.

        Raises:
            ResourceTypeMismatchError: If the path is a directory, symlink or submodule.
        """

        if file := await self._perform_rest_request(
            action="Get file",
            error_on_not_found=error_on_not_found,
            method=self.githubkit_client.rest.repos.async_get_content,
            owner=owner,
            repo=repo,
            path=path,
            **({"ref": ref} if ref is not None else {}),
        ):
            if not isinstance(file, GitHubKitContentFile):
                raise ResourceTypeMismatchError(
                    action="Get file", resource=path, expected_type=GitHubKitContentFile, actual_type=type(file)
                )

            return MarkdownFile.from_content_file(content_file=file)

        return None

    async def create_branch(self, owner: str, repo: str, branch: str, sha: str) -> GitReference:
        """Create a branch pointing at a commit."""

        git_ref = await self._perform_rest_request(
            action="Create branch",
            error_on_not_found=True,
            method=self.githubkit_client.rest.git.async_create_ref,
            owner=owner,
            repo=repo,
            ref=f"refs/{branch_ref(branch)}",
            sha=sha,
        )

        return GitReference.from_git_ref(git_ref=git_ref)

    async def delete_branch(self, owner: str, repo: str, branch: str) -> None:
        """Delete a branch."""

        await self._perform_rest_request(
            action="Delete branch",
            error_on_not_found=True,
            method=self.githubkit_client.rest.git.async_delete_ref,
            owner=owner,
            repo=repo,
            ref=branch_ref(branch),
            expect_content=False,
        )

    async def commit_file(
        self, owner: str, repo: str, path: str, branch: str, content: str, message: str, sha: str
    ) -> CommittedFile:
        """Write a file to a branch.

        Args:
            owner: The owner of the repository.
            repo: The name of the repository.
            path: The path of the file to write.
            branch: The branch to commit to.
            content: The new text content of the file.
            message: The commit message.
            sha: The blob SHA the file must currently have. GitHub rejects the write with a conflict otherwise.
        """

        file_commit = await self._perform_rest_request(
            action="Commit file",
            error_on_not_found=True,
            method=self.githubkit_client.rest.repos.async_create_or_update_file_contents,
            owner=owner,
            repo=repo,
            path=path,
            message=message,
            content=encode_content(content),
            branch=branch,
            sha=sha,
        )

        return CommittedFile.from_file_commit(file_commit=file_commit, path=path)

    async def create_pull_request(self, owner: str, repo: str, title: str, body: str, head: str, base: str) -> CreatedPullRequest:
        """Open a pull request from `head` into `base`."""

        pull_request = await self._perform_rest_request(
            action="Create pull request",
            error_on_not_found=True,
            method=self.githubkit_client.rest.pulls.async_create,
            owner=owner,
            repo=repo,
            title=title,
            body=body,
            head=head,
            base=base,
        )

        return CreatedPullRequest.from_pull_request(pull_request=pull_request)

    async def get_rate_limit(self) -> RateLimitStatus:
        """Get the core REST API rate limit of the configured credential."""

        rate_limit_overview = await self._perform_rest_request(
            action="Get rate limit",
            error_on_not_found=True,
            method=self.githubkit_client.rest.rate_limit.async_get,
        )

        return RateLimitStatus.from_rate_limit_overview(rate_limit_overview=rate_limit_overview)


def _loggable_args(request_args: dict[str, Any]) -> dict[str, Any]:
    """File contents can be large, log their size instead."""

    return {key: f"<{len(value)} characters>" if key == "content" else value for key, value in request_args.items()}
