import re
import secrets
from datetime import UTC, datetime

BRANCH_PREFIX = "docs/"
MAX_SLUG_LENGTH = 40
EMPTY_SLUG = "file"
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"
TOKEN_BYTES = 3

NON_SLUG_CHARACTERS = re.compile(r"[^a-zA-Z0-9\-]")


def slugify_path(path: str) -> str:
    """Turn a file path into a short branch-safe slug, e.g. `docs/Getting Started.md` -> `docs-gettingstartedmd`."""

    slug: str = NON_SLUG_CHARACTERS.sub("", path.replace("/", "-")).lower()[:MAX_SLUG_LENGTH]

    return slug or EMPTY_SLUG


def format_timestamp(now: datetime | None = None) -> str:
    return (now or datetime.now(tz=UTC)).astimezone(UTC).strftime(TIMESTAMP_FORMAT)


def new_branch_name(path: str, now: datetime | None = None, token: str | None = None) -> str:
    """Name a scratch branch for an edit of `path`.

    The timestamp only has second granularity, so a short random token keeps two publishes of the same path within
    the same second from colliding."""

    token = token or secrets.token_hex(TOKEN_BYTES)

    return f"{BRANCH_PREFIX}{slugify_path(path)}-{format_timestamp(now)}-{token}"
