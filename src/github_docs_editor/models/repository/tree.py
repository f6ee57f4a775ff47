from collections.abc import Iterable
from typing import Self

from githubkit.versions.v2022_11_28.models import GitTree
from pydantic import BaseModel, Field, field_validator

MARKDOWN_EXTENSIONS: tuple[str, ...] = (".md", ".markdown")


def is_markdown_path(path: str) -> bool:
    return path.endswith(MARKDOWN_EXTENSIONS)


def sorted_unique_paths(paths: Iterable[str]) -> list[str]:
    return sorted(set(paths))


class MarkdownFileTree(BaseModel):
    """A snapshot of the Markdown files on one branch of a repository."""

    branch: str = Field(description="The branch the listing was taken from.")
    files: list[str] = Field(description="The paths of the Markdown files on the branch, sorted lexicographically.")

    @field_validator("files")
    @classmethod
    def validate_files(cls, v: list[str]) -> list[str]:
        return sorted_unique_paths(path for path in v if is_markdown_path(path))

    @classmethod
    def from_git_tree(cls, git_tree: GitTree, branch: str) -> Self:
        blob_paths: list[str] = [tree_item.path for tree_item in git_tree.tree if tree_item.type == "blob" and tree_item.path]

        return cls(branch=branch, files=blob_paths)
