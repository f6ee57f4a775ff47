from typing import Annotated

from pydantic import Field

from github_docs_editor.clients.models.github import CamelCaseModel

CONFLICT_ERROR_MESSAGE = "File changed upstream"

DEFAULT_COMMIT_MESSAGE = "docs: update {path} via editor"
DEFAULT_PR_TITLE = "Update {path}"
DEFAULT_PR_BODY = "Edited via the Markdown editor"

RequiredText = Annotated[str, Field(min_length=1)]


class PublishRequest(CamelCaseModel):
    """An edit of a Markdown file, tied to the blob SHA the edit was based on."""

    owner: RequiredText = Field(description="The owner of the repository.")
    repo: RequiredText = Field(description="The name of the repository.")
    path: RequiredText = Field(description="The path of the file that was edited.")
    base_branch: str | None = Field(default=None, description="The branch to open the pull request against. Defaults to the default branch.")
    base_sha: RequiredText = Field(description="The blob SHA of the file the edit was based on.")
    markdown: RequiredText = Field(description="The edited Markdown content.")
    pr_title: str | None = Field(default=None, description="The title of the pull request.")
    pr_body: str | None = Field(default=None, description="The body of the pull request.")

    @property
    def title(self) -> str:
        return self.pr_title or DEFAULT_PR_TITLE.format(path=self.path)

    @property
    def body(self) -> str:
        return self.pr_body or DEFAULT_PR_BODY

    @property
    def commit_message(self) -> str:
        return DEFAULT_COMMIT_MESSAGE.format(path=self.path)


class PublishSuccess(CamelCaseModel):
    """The edit landed as a pull request."""

    pr_url: str = Field(description="The HTML URL of the pull request.")
    pr_number: int = Field(description="The number of the pull request.")


class PublishConflict(CamelCaseModel):
    """The file changed upstream since the edit's base SHA. Carries the fresh state so the edit can be re-based."""

    error: str = Field(default=CONFLICT_ERROR_MESSAGE, description="A description of the conflict.")
    upstream_sha: str = Field(description="The current blob SHA of the file.")
    upstream_markdown: str = Field(description="The current Markdown content of the file.")


PublishResult = PublishSuccess | PublishConflict
