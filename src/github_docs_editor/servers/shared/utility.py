import base64
from collections.abc import Sequence

from githubkit.response import Response
from pydantic import BaseModel

GITHUBKIT_RESPONSE_TYPE = BaseModel | Sequence[BaseModel] | None


def extract_response[T: GITHUBKIT_RESPONSE_TYPE](response: Response[T], /) -> T:
    """Extract the response from a response."""

    return response.parsed_data


def decode_content(content: str) -> str:
    """Decode base64 file content as UTF-8, replacing bytes that are not valid UTF-8."""

    return base64.b64decode(content).decode("utf-8", errors="replace")


def encode_content(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")
