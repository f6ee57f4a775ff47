"""Translation of client errors into the HTTP status codes and messages the editor front end expects."""

from pydantic import BaseModel, ConfigDict

from github_docs_editor.clients.errors.github import (
    BadRequestError,
    ClientError,
    ForbiddenError,
    RateLimitedError,
    ResourceConflictError,
    ResourceNotFoundError,
    ResourceTypeMismatchError,
    UnauthorizedError,
)

UNAUTHORIZED_MESSAGE = "Unauthorized or insufficient scope. Check GITHUB_TOKEN."
RATE_LIMITED_MESSAGE = "Rate limit exceeded. Add or adjust GITHUB_TOKEN."
CONFLICT_MESSAGE = "File changed upstream"


class ErrorResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status_code: int
    message: str


class EndpointErrors(BaseModel):
    """The messages and status codes one endpoint answers with when an operation fails.

    Only endpoints that write have a conflict message. Elsewhere a conflict (e.g. GitHub answering 409 for an empty
    repository) is reported as a failure."""

    model_config = ConfigDict(frozen=True)

    failure_message: str
    not_found_message: str
    not_a_file_message: str = "Not a file"
    rate_limited_status: int = 403
    conflict_message: str | None = None

    def translate(self, error: ClientError) -> ErrorResponse:
        match error:
            case BadRequestError():
                return ErrorResponse(status_code=400, message=str(error))
            case ResourceTypeMismatchError():
                return ErrorResponse(status_code=400, message=self.not_a_file_message)
            case ForbiddenError():
                return ErrorResponse(status_code=403, message=UNAUTHORIZED_MESSAGE)
            case UnauthorizedError():
                return ErrorResponse(status_code=401, message=UNAUTHORIZED_MESSAGE)
            case RateLimitedError():
                return ErrorResponse(status_code=self.rate_limited_status, message=RATE_LIMITED_MESSAGE)
            case ResourceNotFoundError():
                return ErrorResponse(status_code=404, message=self.not_found_message)
            case ResourceConflictError() if self.conflict_message is not None:
                return ErrorResponse(status_code=409, message=self.conflict_message)
            case _:
                return ErrorResponse(status_code=500, message=self.failure_message)


TREE_ERRORS = EndpointErrors(
    failure_message="Failed to fetch repository tree",
    not_found_message="Repository not found or branch does not exist",
)

FILE_ERRORS = EndpointErrors(
    failure_message="Failed to fetch file content",
    not_found_message="Repo or path not found.",
)

PUBLISH_ERRORS = EndpointErrors(
    failure_message="Failed to create pull request",
    not_found_message="Repo or path not found.",
    not_a_file_message="Path is not a file",
    rate_limited_status=429,
    conflict_message=CONFLICT_MESSAGE,
)

RATE_LIMIT_ERRORS = EndpointErrors(
    failure_message="Failed to fetch rate limit information",
    not_found_message="Rate limit information not available.",
)
