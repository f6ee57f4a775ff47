from typing import Annotated

from pydantic import Field

OWNER = Annotated[str, Field(description="The owner of the repository.")]
REPO = Annotated[str, Field(description="The name of the repository.")]
BRANCH = Annotated[str | None, Field(description="The branch to use. If not provided, the default branch of the repository is used.")]
PATH = Annotated[str, Field(description="The path of the Markdown file in the repository, e.g. `docs/index.md`.")]
REF = Annotated[
    str | None, Field(description="The branch, tag or commit to read the file from. If not provided, the default branch is used.")
]

# Publishing Fields

BASE_BRANCH = Annotated[
    str | None, Field(description="The branch to open the pull request against. If not provided, the default branch is used.")
]
BASE_SHA = Annotated[str, Field(description="The blob SHA of the file the edit was based on, as returned by `get_markdown_file`.")]
PR_TITLE = Annotated[str | None, Field(description="The title of the pull request. Defaults to `Update <path>`.")]
PR_BODY = Annotated[str | None, Field(description="The body of the pull request.")]

# Conversion Fields

MARKDOWN = Annotated[str, Field(description="The Markdown content.")]
HTML = Annotated[str, Field(description="The HTML content produced by the editor.")]
ORIGINAL_MARKDOWN = Annotated[
    str | None,
    Field(description="The Markdown the document was loaded from. When provided, the result reports whether the edit changed it."),
]
