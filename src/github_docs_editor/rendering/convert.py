"""Conversion between the Markdown stored in the repository and the HTML edited in the browser.

Markdown is rendered with markdown-it-py (CommonMark plus tables and strikethrough, which covers what the editor
produces). Edited HTML is turned back into Markdown with markdownify using ATX headings, `-` bullets and fenced code
blocks so that an unedited document survives the round trip."""

from typing import TYPE_CHECKING

from markdown_it import MarkdownIt
from markdownify import ATX, markdownify

if TYPE_CHECKING:
    from bs4 import Tag

LANGUAGE_CLASS_PREFIX = "language-"


def new_markdown_renderer() -> MarkdownIt:
    return MarkdownIt("commonmark", {"html": True}).enable(["table", "strikethrough"])


def code_language(pre: "Tag") -> str:
    """Recover the fence language markdown-it wrote onto the `<code>` element as a `language-*` class."""

    code = pre.find("code")
    if code is None:
        return ""

    classes: list[str] = code.get("class") or []  # pyright: ignore[reportAssignmentType]

    for css_class in classes:
        if css_class.startswith(LANGUAGE_CLASS_PREFIX):
            return css_class.removeprefix(LANGUAGE_CLASS_PREFIX)

    return ""


class DocumentConverter:
    renderer: MarkdownIt

    def __init__(self, renderer: MarkdownIt | None = None):
        self.renderer = renderer or new_markdown_renderer()

    def render_markdown(self, markdown: str) -> str:
        """Render Markdown to HTML for the editor."""

        return self.renderer.render(markdown)

    def convert_html_to_markdown(self, html: str) -> str:
        """Convert HTML produced by the editor back to Markdown."""

        markdown: str = markdownify(
            html,
            heading_style=ATX,
            bullets="-",
            code_language_callback=code_language,
        )

        return markdown.strip() + "\n"

    def has_changes(self, original_markdown: str, edited_html: str) -> bool:
        """Whether the edited document differs from the Markdown it was loaded from, ignoring surrounding whitespace."""

        return self.convert_html_to_markdown(edited_html).strip() != original_markdown.strip()
