import base64
import hashlib
import itertools
from collections.abc import AsyncGenerator, Callable
from types import SimpleNamespace
from typing import Any

import httpx
import pytest
from fastmcp import FastMCP
from githubkit.exception import RequestFailed
from githubkit.response import Response
from githubkit.versions.v2022_11_28.models import ContentFile

from github_docs_editor.clients.github import GitHubDocsClient
from github_docs_editor.main import create_mcp_server

OWNER = "acme"
REPO = "docs"
DEFAULT_BRANCH = "main"

GETTING_STARTED_PATH = "docs/Getting Started.md"
GETTING_STARTED_MARKDOWN = "# Getting started\n\nInstall the package and run it.\n"

RATE_LIMIT = 5000
RATE_LIMIT_REMAINING = 4999
RATE_LIMIT_RESET = 1700000000


def blob_sha(content: str | bytes) -> str:
    data = content if isinstance(content, bytes) else content.encode("utf-8")
    return hashlib.sha1(f"blob {len(data)}\0".encode() + data).hexdigest()  # noqa: S324


class FakeRequestFailed(RequestFailed):
    """A githubkit request failure without a real HTTP exchange behind it."""

    def __init__(self, status_code: int, path: str = "/", headers: dict[str, str] | None = None, text: str = ""):
        Exception.__init__(self, f"{status_code} {path}")
        self.response = SimpleNamespace(status_code=status_code, headers=httpx.Headers(headers or {}), text=text)  # pyright: ignore[reportAttributeAccessIssue]
        self.request = httpx.Request(method="GET", url=f"https://api.github.com{path}")  # pyright: ignore[reportAttributeAccessIssue]


def rate_limited(path: str = "/") -> FakeRequestFailed:
    return FakeRequestFailed(403, path=path, headers={"x-ratelimit-remaining": "0"}, text="API rate limit exceeded")


class FakeRepository:
    """A repository as a set of branches pointing at file snapshots."""

    def __init__(self, name: str, default_branch: str, files: dict[str, str | bytes], directories: set[str] | None = None):
        self.name = name
        self.default_branch = default_branch
        self.directories: set[str] = directories or set()
        self.commits: dict[str, dict[str, str | bytes]] = {}
        self.branches: dict[str, str] = {}
        self.pull_requests: list[SimpleNamespace] = []
        self.commit_messages: list[str] = []
        self._commit_counter = itertools.count(1)

        self.branches[default_branch] = self.add_commit(files)

    def add_commit(self, files: dict[str, str | bytes]) -> str:
        commit_sha = hashlib.sha1(f"commit {next(self._commit_counter)}".encode()).hexdigest()  # noqa: S324
        self.commits[commit_sha] = dict(files)
        return commit_sha

    def files_on(self, branch: str) -> dict[str, str | bytes]:
        return self.commits[self.branches[branch]]

    def write_file(self, branch: str, path: str, content: str | bytes) -> None:
        self.branches[branch] = self.add_commit({**self.files_on(branch), path: content})


class FakeGitHub:
    """An in-memory stand-in for the githubkit client, covering the REST calls the docs client makes."""

    def __init__(self):
        self.repositories: dict[tuple[str, str], FakeRepository] = {}
        self.calls: list[str] = []
        self.failures: dict[str, Exception] = {}
        self.hooks: dict[str, Callable[[], None]] = {}
        self.truncated: bool = False

        self.rest = SimpleNamespace(
            repos=FakeReposRest(self),
            git=FakeGitRest(self),
            pulls=FakePullsRest(self),
            rate_limit=FakeRateLimitRest(self),
        )

    def add_repository(self, owner: str, repository: FakeRepository) -> FakeRepository:
        self.repositories[(owner, repository.name)] = repository
        return repository

    def record(self, call: str) -> None:
        self.calls.append(call)

        if hook := self.hooks.get(call):
            hook()

        if failure := self.failures.get(call):
            raise failure

    def repository(self, owner: str, repo: str) -> FakeRepository:
        if (owner, repo) not in self.repositories:
            raise FakeRequestFailed(404, path=f"/repos/{owner}/{repo}")
        return self.repositories[(owner, repo)]

    def branch(self, owner: str, repo: str, branch: str) -> str:
        repository = self.repository(owner, repo)
        if branch not in repository.branches:
            raise FakeRequestFailed(404, path=f"/repos/{owner}/{repo}/git/ref/heads/{branch}")
        return branch


def respond(parsed_data: Any) -> SimpleNamespace:
    return SimpleNamespace(parsed_data=parsed_data)


class FakeReposRest:
    def __init__(self, github: FakeGitHub):
        self.github = github

    async def async_get(self, owner: str, repo: str) -> SimpleNamespace:
        self.github.record("repos.async_get")
        repository = self.github.repository(owner, repo)

        return respond(
            SimpleNamespace(
                name=repository.name,
                default_branch=repository.default_branch,
                private=False,
                url=f"https://api.github.com/repos/{owner}/{repo}",
            )
        )

    async def async_get_content(self, owner: str, repo: str, path: str, ref: str | None = None) -> SimpleNamespace:
        self.github.record("repos.async_get_content")
        repository = self.github.repository(owner, repo)
        files = repository.files_on(self.github.branch(owner, repo, ref or repository.default_branch))

        if path in repository.directories:
            return respond([SimpleNamespace(type="file", path=child) for child in files if child.startswith(f"{path}/")])

        if path not in files:
            raise FakeRequestFailed(404, path=f"/repos/{owner}/{repo}/contents/{path}")

        content = files[path]
        data = content if isinstance(content, bytes) else content.encode("utf-8")

        return respond(
            ContentFile.model_construct(
                type="file",
                encoding="base64",
                size=len(data),
                name=path.rsplit("/", 1)[-1],
                path=path,
                content=base64.b64encode(data).decode("ascii"),
                sha=blob_sha(content),
            )
        )

    async def async_create_or_update_file_contents(
        self, owner: str, repo: str, path: str, message: str, content: str, branch: str, sha: str
    ) -> SimpleNamespace:
        self.github.record("repos.async_create_or_update_file_contents")
        repository = self.github.repository(owner, repo)
        files = repository.files_on(self.github.branch(owner, repo, branch))

        if path not in files or blob_sha(files[path]) != sha:
            raise FakeRequestFailed(409, path=f"/repos/{owner}/{repo}/contents/{path}", text=f"{path} does not match {sha}")

        text = base64.b64decode(content).decode("utf-8")
        repository.write_file(branch, path, text)
        repository.commit_messages.append(message)

        return respond(
            SimpleNamespace(content=SimpleNamespace(sha=blob_sha(text)), commit=SimpleNamespace(sha=repository.branches[branch]))
        )


class FakeGitRest:
    def __init__(self, github: FakeGitHub):
        self.github = github

    async def async_get_ref(self, owner: str, repo: str, ref: str) -> SimpleNamespace:
        self.github.record("git.async_get_ref")
        branch = self.github.branch(owner, repo, ref.removeprefix("heads/"))
        commit_sha = self.github.repository(owner, repo).branches[branch]

        return respond(SimpleNamespace(ref=f"refs/{ref}", object_=SimpleNamespace(sha=commit_sha, type="commit")))

    async def async_get_tree(self, owner: str, repo: str, tree_sha: str, recursive: str) -> SimpleNamespace:
        self.github.record("git.async_get_tree")
        repository = self.github.repository(owner, repo)

        if tree_sha not in repository.commits:
            raise FakeRequestFailed(404, path=f"/repos/{owner}/{repo}/git/trees/{tree_sha}")

        entries = [SimpleNamespace(path=path, type="blob") for path in repository.commits[tree_sha]]
        entries += [SimpleNamespace(path=path, type="tree") for path in sorted(repository.directories)]

        return respond(SimpleNamespace(sha=tree_sha, truncated=self.github.truncated, tree=entries))

    async def async_create_ref(self, owner: str, repo: str, ref: str, sha: str) -> SimpleNamespace:
        self.github.record("git.async_create_ref")
        repository = self.github.repository(owner, repo)
        branch = ref.removeprefix("refs/heads/")

        if branch in repository.branches:
            raise FakeRequestFailed(422, path=f"/repos/{owner}/{repo}/git/refs", text="Reference already exists")

        repository.branches[branch] = sha

        return respond(SimpleNamespace(ref=ref, object_=SimpleNamespace(sha=sha, type="commit")))

    async def async_delete_ref(self, owner: str, repo: str, ref: str) -> Response[Any]:
        self.github.record("git.async_delete_ref")
        repository = self.github.repository(owner, repo)
        branch = ref.removeprefix("heads/")

        if branch not in repository.branches:
            raise FakeRequestFailed(422, path=f"/repos/{owner}/{repo}/git/refs/{ref}", text="Reference does not exist")

        del repository.branches[branch]

        request = httpx.Request(method="DELETE", url=f"https://api.github.com/repos/{owner}/{repo}/git/refs/{ref}")

        return Response(httpx.Response(204, request=request), Any)


class FakePullsRest:
    def __init__(self, github: FakeGitHub):
        self.github = github

    async def async_create(self, owner: str, repo: str, title: str, body: str, head: str, base: str) -> SimpleNamespace:
        self.github.record("pulls.async_create")
        repository = self.github.repository(owner, repo)
        self.github.branch(owner, repo, head)
        self.github.branch(owner, repo, base)

        number = len(repository.pull_requests) + 1
        pull_request = SimpleNamespace(
            number=number,
            html_url=f"https://github.com/{owner}/{repo}/pull/{number}",
            title=title,
            body=body,
            head=head,
            base=base,
        )
        repository.pull_requests.append(pull_request)

        return respond(pull_request)


class FakeRateLimitRest:
    def __init__(self, github: FakeGitHub):
        self.github = github

    async def async_get(self) -> SimpleNamespace:
        self.github.record("rate_limit.async_get")

        return respond(SimpleNamespace(rate=SimpleNamespace(limit=RATE_LIMIT, remaining=RATE_LIMIT_REMAINING, reset=RATE_LIMIT_RESET)))


@pytest.fixture
def fake_github() -> FakeGitHub:
    fake_github = FakeGitHub()

    repository = fake_github.add_repository(
        OWNER,
        FakeRepository(
            name=REPO,
            default_branch=DEFAULT_BRANCH,
            files={
                "README.md": "# Docs\n",
                GETTING_STARTED_PATH: GETTING_STARTED_MARKDOWN,
                "docs/guide.markdown": "# Guide\n",
                "docs/notes.MD": "# Notes\n",
                "src/app.py": "print('hello')\n",
            },
            directories={"docs", "src"},
        ),
    )

    repository.branches["dev"] = repository.add_commit({**repository.files_on(DEFAULT_BRANCH), "docs/new.md": "# New\n"})

    return fake_github


@pytest.fixture
def fake_repository(fake_github: FakeGitHub) -> FakeRepository:
    return fake_github.repositories[(OWNER, REPO)]


@pytest.fixture
def github_client(fake_github: FakeGitHub) -> GitHubDocsClient:
    return GitHubDocsClient(githubkit_client=fake_github)  # pyright: ignore[reportArgumentType]


@pytest.fixture
def fastmcp() -> FastMCP[Any]:
    return FastMCP(name="GitHub Docs Editor")


@pytest.fixture
def mcp_server(github_client: GitHubDocsClient) -> FastMCP[None]:
    return create_mcp_server(github_client=github_client)


@pytest.fixture
async def http_client(mcp_server: FastMCP[None]) -> AsyncGenerator[httpx.AsyncClient, Any]:
    transport = httpx.ASGITransport(app=mcp_server.http_app())

    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client
