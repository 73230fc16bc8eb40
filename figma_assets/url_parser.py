import re
from typing import NamedTuple, Optional
from urllib.parse import parse_qs, unquote, urlparse

from .exceptions import InvalidFigmaUrl, MissingNodeId

FILE_PATH_PATTERN = re.compile(r'/(?:design|file)/([a-zA-Z0-9]+)')


class FigmaUrlInfo(NamedTuple):
    file_id: str
    node_id: Optional[str] = None


def parse_figma_url(url: str) -> FigmaUrlInfo:
    """Extract file id and optional node id from a Figma design/file URL.

    URLs carry node ids as ``7905-291614``; the API expects ``7905:291614``.
    """
    parsed = urlparse(url.strip())
    if not parsed.scheme or not parsed.netloc:
        raise InvalidFigmaUrl(url, "not an absolute URL")

    match = FILE_PATH_PATTERN.search(parsed.path)
    if not match:
        raise InvalidFigmaUrl(url, "expected /design/<file-id> or /file/<file-id>")

    node_id = None
    node_values = parse_qs(parsed.query).get('node-id')
    if node_values and node_values[0]:
        node_id = unquote(node_values[0]).replace('-', ':', 1)

    return FigmaUrlInfo(file_id=match.group(1), node_id=node_id)


def require_node_id(info: FigmaUrlInfo, url: str) -> str:
    if not info.node_id:
        raise MissingNodeId(url)
    return info.node_id
