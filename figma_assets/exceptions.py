"""Error taxonomy shared by the Figma client, the exporter and the extractors."""

from typing import Optional


class FigmaError(Exception):
    """Base class for every error raised by this package"""


class AccessDenied(FigmaError):
    """The remote API rejected the token or the file permissions (HTTP 403)"""

    def __init__(self, message: str = "Access denied. Check your Figma token and file permissions."):
        super().__init__(message)


class NotFound(FigmaError):
    """The file or node does not exist on the remote (HTTP 404)"""

    def __init__(self, message: str = "File not found. Check your file key."):
        super().__init__(message)


class RemoteError(FigmaError):
    """Any other transport-level failure; status is None when no response arrived"""

    def __init__(self, status: Optional[int], message: str):
        self.status = status
        self.message = message
        if status is None:
            super().__init__(f"Figma request failed: {message}")
        else:
            super().__init__(f"Figma request failed ({status}): {message}")

    @property
    def is_transient(self) -> bool:
        return self.status is not None and (self.status == 429 or self.status >= 500)


class JobFailed(FigmaError):
    """The export request was accepted but the remote reported a rendering failure"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Image export failed: {message}")

    @property
    def is_expired(self) -> bool:
        lowered = self.message.lower()
        return 'expired' in lowered or 'timeout' in lowered


class NodeNotFound(FigmaError):
    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Node not found: {node_id}")


class MissingNodeId(FigmaError):
    def __init__(self, url: str):
        self.url = url
        super().__init__(
            "The URL has no node-id parameter; this operation needs one. "
            f"Got: {url}"
        )


class InvalidFigmaUrl(FigmaError):
    def __init__(self, url: str, reason: str):
        self.url = url
        super().__init__(f"Could not parse Figma URL ({reason}): {url}")


class ImageNotRendered(FigmaError):
    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Figma returned no image URL for node {node_id}")
