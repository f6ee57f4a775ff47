from collections.abc import Mapping

ExtraInfoType = dict[str, str | None]

RATE_LIMIT_REMAINING_HEADER = "x-ratelimit-remaining"


class ClientError(Exception):
    """An error from the GitHub Docs Editor client."""

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        msg = message
        if extra_info:
            msg += " (" + ", ".join([f"{key}: {value}" for key, value in extra_info.items() if value is not None]) + ")"
        super().__init__(msg)


class BadRequestError(ClientError):
    """The caller supplied an invalid or incomplete request."""

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        super().__init__(message=message, extra_info=extra_info)


class RequestError(ClientError):
    """A request to GitHub failed for a reason we do not classify further."""

    def __init__(self, action: str, message: str | None = None, extra_info: ExtraInfoType | None = None):
        if not extra_info:
            extra_info = {}
        super().__init__(message="A request error occured.", extra_info={"action": action, "message": message, **extra_info})


class UnauthorizedError(RequestError):
    """The credential is missing, invalid, or lacks the required scope."""

    def __init__(self, action: str, message: str = "The request was not authorized.", extra_info: ExtraInfoType | None = None):
        super().__init__(action=action, message=message, extra_info=extra_info)


class ForbiddenError(UnauthorizedError):
    """The credential is valid but lacks permission for the resource."""

    def __init__(self, action: str, extra_info: ExtraInfoType | None = None):
        super().__init__(action=action, message="The request was forbidden.", extra_info=extra_info)


class RateLimitedError(RequestError):
    """GitHub is throttling the caller."""

    def __init__(self, action: str, extra_info: ExtraInfoType | None = None):
        super().__init__(action=action, message="The rate limit has been exceeded.", extra_info=extra_info)


class ResourceNotFoundError(RequestError):
    """A not found error from the GitHub Docs Editor client."""

    def __init__(self, action: str, resource: str | None = None, extra_info: ExtraInfoType | None = None):
        if not extra_info:
            extra_info = {}
        super().__init__(
            action=action,
            message="The resource could not be found.",
            extra_info={"resource": resource, **extra_info},
        )


class ResourceTypeMismatchError(RequestError):
    """The path resolved to something other than the expected kind of object, e.g. a directory instead of a file."""

    def __init__(self, action: str, resource: str, expected_type: type, actual_type: type):
        super().__init__(action, f"{resource}: Expected {expected_type.__name__}, got {actual_type.__name__}")


class ResourceConflictError(RequestError):
    """The resource changed upstream since the version the caller based its write on."""

    def __init__(self, action: str, resource: str | None = None, extra_info: ExtraInfoType | None = None):
        if not extra_info:
            extra_info = {}
        super().__init__(
            action=action,
            message="The resource changed upstream.",
            extra_info={"resource": resource, **extra_info},
        )


def is_rate_limit_response(headers: Mapping[str, str], body: str | None) -> bool:
    if headers.get(RATE_LIMIT_REMAINING_HEADER) == "0":
        return True

    return body is not None and "rate limit" in body.lower()


def classify_request_failure(
    action: str,
    status_code: int,
    resource: str | None = None,
    headers: Mapping[str, str] | None = None,
    body: str | None = None,
) -> RequestError:
    """Map a failed GitHub response onto the client error taxonomy.

    401 is unauthorized. 403 is a rate limit when GitHub says so (remaining quota of zero or a rate limit message),
    otherwise forbidden. 429 is a rate limit, 404 is not found and 409 is a conflict. Everything else is a
    generic request error."""

    headers = headers or {}

    match status_code:
        case 401:
            return UnauthorizedError(action=action)
        case 403 if is_rate_limit_response(headers=headers, body=body):
            return RateLimitedError(action=action)
        case 403:
            return ForbiddenError(action=action)
        case 429:
            return RateLimitedError(action=action)
        case 404:
            return ResourceNotFoundError(action=action, resource=resource)
        case 409:
            return ResourceConflictError(action=action, resource=resource)
        case _:
            return RequestError(action=action, message=f"GitHub responded with status {status_code}")
