"""JSON endpoints for the browser-based editor, served next to the MCP endpoint on the streamable-http app.

Every endpoint answers with a JSON body. Failures are reported as `{"error": "..."}` with a status code chosen by the
endpoint's error table in `servers.shared.errors`."""

import json
from collections.abc import Awaitable, Callable
from logging import Logger
from typing import Any

from fastmcp.server import FastMCP
from fastmcp.utilities.logging import get_logger
from pydantic import BaseModel
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from github_docs_editor.clients.errors.github import BadRequestError, ClientError
from github_docs_editor.models.publish import PublishConflict, PublishRequest, PublishResult
from github_docs_editor.servers.browser import BrowserServer
from github_docs_editor.servers.converter import ConverterServer
from github_docs_editor.servers.publisher import PublisherServer, parse_publish_request
from github_docs_editor.servers.shared.errors import (
    FILE_ERRORS,
    PUBLISH_ERRORS,
    RATE_LIMIT_ERRORS,
    TREE_ERRORS,
    EndpointErrors,
    ErrorResponse,
)

CONFLICT_STATUS = 409

DOCUMENT_ERRORS = EndpointErrors(failure_message="Failed to convert document", not_found_message="Not found")


def json_response(model: BaseModel, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=model.model_dump(by_alias=True, mode="json"), status_code=status_code)


def error_response(error: ErrorResponse) -> JSONResponse:
    return JSONResponse(content={"error": error.message}, status_code=error.status_code)


def required_query_params(request: Request, names: list[str], message: str) -> dict[str, str]:
    """Collect query parameters that must be present and non-empty."""

    values: dict[str, str] = {name: request.query_params.get(name, "") for name in names}

    if not all(values.values()):
        raise BadRequestError(message=message)

    return values


def optional_query_param(request: Request, name: str) -> str | None:
    return request.query_params.get(name) or None


async def read_json_object(request: Request) -> dict[str, Any]:
    try:
        payload = await request.json()  # pyright: ignore[reportAny]
    except json.JSONDecodeError as e:
        raise BadRequestError(message="Request body must be valid JSON") from e

    if not isinstance(payload, dict):
        raise BadRequestError(message="Request body must be a JSON object")

    return payload  # pyright: ignore[reportUnknownVariableType]


def required_string(payload: dict[str, Any], name: str) -> str:
    value = payload.get(name)

    if not isinstance(value, str):
        raise BadRequestError(message=f"{name} is required")

    return value


class HttpServer:
    """Serves the browser, publisher and converter operations as JSON endpoints."""

    browser_server: BrowserServer
    publisher_server: PublisherServer
    converter_server: ConverterServer
    logger: Logger

    def __init__(
        self,
        browser_server: BrowserServer,
        publisher_server: PublisherServer,
        converter_server: ConverterServer,
        logger: Logger | None = None,
    ):
        self.browser_server = browser_server
        self.publisher_server = publisher_server
        self.converter_server = converter_server
        self.logger = logger or get_logger(name=__name__)

    def register_routes(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.custom_route(path="/tree", methods=["GET"])(self.get_tree)
        _ = fastmcp.custom_route(path="/file", methods=["GET"])(self.get_file)
        _ = fastmcp.custom_route(path="/pr", methods=["POST"])(self.create_pull_request)
        _ = fastmcp.custom_route(path="/ratelimit", methods=["GET"])(self.get_rate_limit)
        _ = fastmcp.custom_route(path="/render", methods=["POST"])(self.render)
        _ = fastmcp.custom_route(path="/convert", methods=["POST"])(self.convert)

        return fastmcp

    async def _handle(self, endpoint: str, errors: EndpointErrors, handler: Callable[[], Awaitable[Response]]) -> Response:
        try:
            return await handler()
        except BadRequestError as e:
            self.logger.info(f"Rejected {endpoint} request: {e}")
            return error_response(errors.translate(e))
        except ClientError as e:
            self.logger.exception(f"Error handling {endpoint} request")
            return error_response(errors.translate(e))

    async def get_tree(self, request: Request) -> Response:
        async def handler() -> Response:
            params = required_query_params(request, ["owner", "repo"], message="owner and repo are required")

            markdown_file_tree = await self.browser_server.list_markdown_files(
                owner=params["owner"], repo=params["repo"], branch=optional_query_param(request, "branch")
            )

            return json_response(markdown_file_tree)

        return await self._handle(endpoint="GET /tree", errors=TREE_ERRORS, handler=handler)

    async def get_file(self, request: Request) -> Response:
        async def handler() -> Response:
            params = required_query_params(request, ["owner", "repo", "path"], message="owner, repo, and path are required")

            markdown_file = await self.browser_server.get_markdown_file(
                owner=params["owner"], repo=params["repo"], path=params["path"], ref=optional_query_param(request, "ref")
            )

            return json_response(markdown_file)

        return await self._handle(endpoint="GET /file", errors=FILE_ERRORS, handler=handler)

    async def create_pull_request(self, request: Request) -> Response:
        async def handler() -> Response:
            publish_request: PublishRequest = parse_publish_request(await read_json_object(request))

            result: PublishResult = await self.publisher_server.publish(request=publish_request)

            if isinstance(result, PublishConflict):
                return json_response(result, status_code=CONFLICT_STATUS)

            return json_response(result)

        return await self._handle(endpoint="POST /pr", errors=PUBLISH_ERRORS, handler=handler)

    async def get_rate_limit(self, request: Request) -> Response:  # noqa: ARG002
        async def handler() -> Response:
            return json_response(await self.browser_server.get_rate_limit())

        return await self._handle(endpoint="GET /ratelimit", errors=RATE_LIMIT_ERRORS, handler=handler)

    async def render(self, request: Request) -> Response:
        async def handler() -> Response:
            payload = await read_json_object(request)

            return json_response(self.converter_server.render_markdown(markdown=required_string(payload, "markdown")))

        return await self._handle(endpoint="POST /render", errors=DOCUMENT_ERRORS, handler=handler)

    async def convert(self, request: Request) -> Response:
        async def handler() -> Response:
            payload = await read_json_object(request)

            original_markdown = payload.get("markdown")
            if original_markdown is not None and not isinstance(original_markdown, str):
                raise BadRequestError(message="markdown must be a string")

            converted_document = self.converter_server.convert_html_to_markdown(
                html=required_string(payload, "html"), original_markdown=original_markdown
            )

            return json_response(converted_document)

        return await self._handle(endpoint="POST /convert", errors=DOCUMENT_ERRORS, handler=handler)
