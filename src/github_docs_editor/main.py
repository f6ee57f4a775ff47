from logging import Logger
from typing import Literal

import click
from fastmcp import FastMCP
from fastmcp.server.middleware.logging import LoggingMiddleware
from fastmcp.utilities.logging import configure_logging, get_logger

from github_docs_editor.clients.github import GitHubDocsClient
from github_docs_editor.servers.browser import BrowserServer
from github_docs_editor.servers.converter import ConverterServer
from github_docs_editor.servers.http import HttpServer
from github_docs_editor.servers.publisher import PublisherServer

logger: Logger = get_logger(name=__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
DEFAULT_LOG_LEVEL = "INFO"

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def create_mcp_server(github_client: GitHubDocsClient | None = None) -> FastMCP[None]:
    """Build the server with the browser, publisher and converter tools, plus the JSON endpoints used by the editor."""

    github_client = github_client or GitHubDocsClient(logger=logger)

    fastmcp: FastMCP[None] = FastMCP[None](name="GitHub Docs Editor")

    fastmcp.add_middleware(middleware=LoggingMiddleware(include_payloads=True, logger=logger))

    browser_server: BrowserServer = BrowserServer(github_client=github_client, logger=logger)
    _ = browser_server.register_tools(fastmcp=fastmcp)

    publisher_server: PublisherServer = PublisherServer(github_client=github_client, logger=logger)
    _ = publisher_server.register_tools(fastmcp=fastmcp)

    converter_server: ConverterServer = ConverterServer(logger=logger)
    _ = converter_server.register_tools(fastmcp=fastmcp)

    http_server: HttpServer = HttpServer(
        browser_server=browser_server, publisher_server=publisher_server, converter_server=converter_server, logger=logger
    )
    _ = http_server.register_routes(fastmcp=fastmcp)

    return fastmcp


mcp: FastMCP[None] = create_mcp_server()


@click.command()
@click.option(
    "--transport",
    type=click.Choice(["streamable-http", "stdio"]),
    default="streamable-http",
    help="The transport to run the server on. The editor endpoints are only served over streamable-http.",
)
@click.option("--host", default=DEFAULT_HOST, show_default=True, help="The host to listen on when using streamable-http.")
@click.option("--port", type=int, default=DEFAULT_PORT, show_default=True, help="The port to listen on when using streamable-http.")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    envvar="LOG_LEVEL",
    default=DEFAULT_LOG_LEVEL,
    show_default=True,
    help="The log level. Can also be set with the LOG_LEVEL environment variable.",
)
def run(transport: Literal["streamable-http", "stdio"], host: str, port: int, log_level: str):
    configure_logging(level=log_level.upper())  # pyright: ignore[reportArgumentType]

    if transport == "stdio":
        mcp.run(transport=transport)
        return

    logger.info(f"Serving the editor API and MCP endpoint on http://{host}:{port}")

    mcp.run(transport=transport, host=host, port=port)


if __name__ == "__main__":
    run()
