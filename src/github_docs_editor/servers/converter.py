from logging import Logger
from typing import Any

from fastmcp.server import FastMCP
from fastmcp.tools import Tool
from fastmcp.utilities.logging import get_logger
from pydantic import BaseModel, Field

from github_docs_editor.rendering.convert import DocumentConverter
from github_docs_editor.servers.shared.annotations import HTML, MARKDOWN, ORIGINAL_MARKDOWN


class RenderedDocument(BaseModel):
    html: str = Field(description="The rendered HTML.")


class ConvertedDocument(BaseModel):
    markdown: str = Field(description="The converted Markdown.")
    changed: bool | None = Field(
        default=None, description="Whether the converted Markdown differs from the original. Null when no original was provided."
    )


class ConverterServer:
    """Convert documents between the Markdown stored in the repository and the HTML edited in the editor."""

    document_converter: DocumentConverter
    logger: Logger

    def __init__(self, document_converter: DocumentConverter | None = None, logger: Logger | None = None):
        self.logger = logger or get_logger(name=__name__)
        self.document_converter = document_converter or DocumentConverter()

    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.render_markdown))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.convert_html_to_markdown))

        return fastmcp

    def render_markdown(self, markdown: MARKDOWN) -> RenderedDocument:
        """Render Markdown to HTML (CommonMark with tables and strikethrough)."""

        return RenderedDocument(html=self.document_converter.render_markdown(markdown))

    def convert_html_to_markdown(self, html: HTML, original_markdown: ORIGINAL_MARKDOWN = None) -> ConvertedDocument:
        """Convert HTML produced by the editor back to Markdown, optionally reporting whether it changed."""

        markdown: str = self.document_converter.convert_html_to_markdown(html)

        changed: bool | None = None
        if original_markdown is not None:
            changed = self.document_converter.has_changes(original_markdown=original_markdown, edited_html=html)

        return ConvertedDocument(markdown=markdown, changed=changed)
