from datetime import UTC, datetime
from typing import Self

from githubkit.versions.v2022_11_28.models import ContentFile as GitHubKitContentFile
from githubkit.versions.v2022_11_28.models import FileCommit as GitHubKitFileCommit
from githubkit.versions.v2022_11_28.models import (
    FullRepository as GitHubKitFullRepository,
)
from githubkit.versions.v2022_11_28.models import (
    GitRef as GitHubKitGitRef,
)
from githubkit.versions.v2022_11_28.models import PullRequest as GitHubKitPullRequest
from githubkit.versions.v2022_11_28.models import RateLimitOverview as GitHubKitRateLimitOverview
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from github_docs_editor.servers.shared.utility import decode_content


class CamelCaseModel(BaseModel):
    """A model that is exchanged with the browser using camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Repository(BaseModel):
    """A repository."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(description="The name of the repository.")
    default_branch: str = Field(description="The default branch of the repository.")
    private: bool = Field(description="Whether the repository is private.")
    url: str = Field(description="The URL of the repository.")

    @classmethod
    def from_full_repository(cls, full_repository: GitHubKitFullRepository) -> Self:
        return cls(
            name=full_repository.name,
            default_branch=full_repository.default_branch,
            private=full_repository.private,
            url=full_repository.url,
        )


class GitReference(BaseModel):
    """A git reference."""

    name: str = Field(description="The name of the reference.")
    sha: str = Field(description="The SHA of the reference.")
    ref_type: str = Field(description="The type of the reference.")

    @classmethod
    def from_git_ref(cls, git_ref: GitHubKitGitRef) -> Self:
        return cls(name=git_ref.ref, sha=git_ref.object_.sha, ref_type=git_ref.object_.type)


class MarkdownFile(BaseModel):
    """A Markdown file at a specific blob SHA, with its content decoded to text."""

    markdown: str = Field(description="The decoded Markdown content of the file.")
    sha: str = Field(description="The blob SHA of this version of the file.")
    name: str = Field(description="The name of the file.")
    path: str = Field(description="The path of the file in the repository.")

    @classmethod
    def from_content_file(cls, content_file: GitHubKitContentFile) -> Self:
        return cls(
            markdown=decode_content(content_file.content),
            sha=content_file.sha,
            name=content_file.name,
            path=content_file.path,
        )


class CommittedFile(BaseModel):
    """The result of writing a file to a branch."""

    path: str = Field(description="The path of the file that was written.")
    content_sha: str | None = Field(description="The blob SHA of the new file content.")
    commit_sha: str | None = Field(description="The SHA of the commit that wrote the file.")

    @classmethod
    def from_file_commit(cls, file_commit: GitHubKitFileCommit, path: str) -> Self:
        content_sha: str | None = file_commit.content.sha if file_commit.content else None

        return cls(path=path, content_sha=content_sha, commit_sha=file_commit.commit.sha)


class CreatedPullRequest(BaseModel):
    """A pull request that was opened on behalf of the editor."""

    number: int = Field(description="The number of the pull request.")
    url: str = Field(description="The HTML URL of the pull request.")

    @classmethod
    def from_pull_request(cls, pull_request: GitHubKitPullRequest) -> Self:
        return cls(number=pull_request.number, url=pull_request.html_url)


def format_reset_date(reset: int) -> str:
    """Render an epoch-seconds reset time as an ISO-8601 UTC timestamp with millisecond precision."""

    return datetime.fromtimestamp(reset, tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class RateLimitStatus(CamelCaseModel):
    """The core REST API rate limit of the configured credential."""

    remaining: int = Field(description="The number of requests remaining in the current window.")
    limit: int = Field(description="The maximum number of requests per window.")
    reset: int = Field(description="When the current window resets, in epoch seconds.")
    reset_date: str = Field(description="When the current window resets, as an ISO-8601 UTC timestamp.")

    @classmethod
    def from_rate_limit_overview(cls, rate_limit_overview: GitHubKitRateLimitOverview) -> Self:
        rate = rate_limit_overview.rate

        return cls(remaining=rate.remaining, limit=rate.limit, reset=rate.reset, reset_date=format_reset_date(rate.reset))
