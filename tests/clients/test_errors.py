import pytest
from inline_snapshot import snapshot

from github_docs_editor.clients.errors.github import (
    BadRequestError,
    ForbiddenError,
    RateLimitedError,
    RequestError,
    ResourceConflictError,
    ResourceNotFoundError,
    ResourceTypeMismatchError,
    UnauthorizedError,
    classify_request_failure,
    is_rate_limit_response,
)


@pytest.mark.parametrize(
    ("status_code", "headers", "body", "expected_type"),
    [
        (401, {}, "Bad credentials", UnauthorizedError),
        (403, {"x-ratelimit-remaining": "0"}, "", RateLimitedError),
        (403, {}, "API rate limit exceeded for 1.2.3.4", RateLimitedError),
        (403, {"x-ratelimit-remaining": "42"}, "Resource not accessible by integration", ForbiddenError),
        (429, {}, "", RateLimitedError),
        (404, {}, "Not Found", ResourceNotFoundError),
        (409, {}, "does not match", ResourceConflictError),
        (422, {}, "Reference already exists", RequestError),
        (500, {}, "", RequestError),
    ],
)
def test_classify_request_failure(status_code: int, headers: dict[str, str], body: str, expected_type: type[RequestError]) -> None:
    error = classify_request_failure(action="Get file", status_code=status_code, resource="/repos/acme/docs", headers=headers, body=body)

    assert type(error) is expected_type


def test_classify_request_failure_without_headers() -> None:
    assert type(classify_request_failure(action="Get file", status_code=403)) is ForbiddenError


def test_is_rate_limit_response() -> None:
    assert is_rate_limit_response(headers={"x-ratelimit-remaining": "0"}, body=None)
    assert is_rate_limit_response(headers={}, body="You have exceeded a secondary Rate Limit.")
    assert not is_rate_limit_response(headers={"x-ratelimit-remaining": "10"}, body="Forbidden")
    assert not is_rate_limit_response(headers={}, body=None)


def test_error_messages() -> None:
    assert str(RateLimitedError(action="Get file")) == snapshot(
        "A request error occured. (action: Get file, message: The rate limit has been exceeded.)"
    )

    assert str(ResourceNotFoundError(action="Get file", resource="/repos/acme/docs/contents/missing.md")) == snapshot(
        "A request error occured. (action: Get file, message: The resource could not be found., resource: /repos/acme/docs/contents/missing.md)"
    )

    assert str(ResourceTypeMismatchError(action="Get file", resource="docs", expected_type=str, actual_type=list)) == snapshot(
        "A request error occured. (action: Get file, message: docs: Expected str, got list)"
    )

    assert str(BadRequestError(message="No changes to publish", extra_info={"path": "README.md"})) == snapshot(
        "No changes to publish (path: README.md)"
    )


def test_request_errors_share_a_base() -> None:
    for error in (
        UnauthorizedError(action="a"),
        ForbiddenError(action="a"),
        RateLimitedError(action="a"),
        ResourceNotFoundError(action="a"),
        ResourceConflictError(action="a"),
    ):
        assert isinstance(error, RequestError)

    assert isinstance(ForbiddenError(action="a"), UnauthorizedError)
    assert not isinstance(BadRequestError(message="bad"), RequestError)


def test_forbidden_message() -> None:
    assert str(ForbiddenError(action="Create pull request")) == snapshot(
        "A request error occured. (action: Create pull request, message: The request was forbidden.)"
    )
