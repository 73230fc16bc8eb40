import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import ValidationError

from .exceptions import AccessDenied, JobFailed, NotFound, RemoteError
from .models import FileDocument, Node

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.figma.com/v1"


class FigmaClient:
    """Async Figma REST API client: files, node subtrees, image fills and export jobs"""

    def __init__(self, api_token: str, base_url: str = DEFAULT_API_BASE, timeout: float = 30.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_token = api_token
        self.base_url = base_url.rstrip('/')
        self.session = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                'X-Figma-Token': self.api_token,
                'User-Agent': 'Figma-Assets-MCP/1.0'
            },
            timeout=timeout,
            transport=transport
        )
        # Signed asset URLs live on a CDN and must not receive the API token
        self.download_session = httpx.AsyncClient(timeout=timeout, transport=transport)

        # Processing statistics
        self.stats = {
            'api_calls': 0,
            'errors': 0
        }

    async def __aenter__(self) -> 'FigmaClient':
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self.session.aclose()
        await self.download_session.aclose()

    async def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """GET an API endpoint and map failures onto the error taxonomy"""
        self.stats['api_calls'] += 1
        try:
            response = await self.session.get(endpoint, params=params)
        except httpx.HTTPError as e:
            self.stats['errors'] += 1
            logger.error(f"Request error for {endpoint}: {e}")
            raise RemoteError(None, str(e) or type(e).__name__) from e

        if response.status_code == 200:
            try:
                return response.json()
            except ValueError as e:
                self.stats['errors'] += 1
                logger.error(f"Invalid JSON from {endpoint}: {e}")
                raise RemoteError(response.status_code, f"Invalid JSON response from {endpoint}") from e

        self.stats['errors'] += 1
        message = self._error_message(response)
        if response.status_code == 403:
            logger.error("Access denied. Check your API token and file permissions.")
            raise AccessDenied()
        elif response.status_code == 404:
            logger.error(f"Not found: {endpoint}")
            raise NotFound(f"Not found: {message}")

        logger.error(f"API request failed: {response.status_code} - {message}")
        raise RemoteError(response.status_code, message)

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(body, dict):
            return str(body.get('message') or body.get('err') or body)
        return str(body)

    def _parse(self, build, data: Any, what: str):
        """Build a model from a 200 response body; malformed bodies become RemoteError"""
        try:
            return build(data)
        except (ValidationError, TypeError, AttributeError) as e:
            self.stats['errors'] += 1
            logger.error(f"Malformed payload for {what}: {e}")
            raise RemoteError(200, f"Malformed payload for {what}") from e

    async def validate_token(self) -> bool:
        """Validate the API token"""
        try:
            user_info = await self._get('/me')
        except (AccessDenied, NotFound, RemoteError) as e:
            logger.error(f"Token validation failed: {e}")
            return False
        logger.info(f"Authenticated as: {user_info.get('email', 'Unknown user')}")
        return True

    async def fetch_whole_file(self, file_id: str) -> FileDocument:
        """Fetch the complete document tree with file-level metadata"""
        logger.info(f"Fetching file data for: {file_id}")
        data = await self._get(f"/files/{file_id}")
        file_doc = self._parse(FileDocument.from_payload, data, f"file {file_id}")
        logger.info(f"Successfully fetched file: {file_doc.name or 'Unknown'}")
        return file_doc

    async def fetch_subtree(self, file_id: str, node_id: str) -> Optional[Node]:
        """Fetch exactly the subtree rooted at node_id, or None if the file has no such node"""
        logger.info(f"Fetching node {node_id} from file {file_id}")
        data = await self._get(f"/files/{file_id}/nodes", params={'ids': node_id})

        node_data = (data.get('nodes') or {}).get(node_id)
        if not node_data or not node_data.get('document'):
            logger.warning(f"Node {node_id} not present in response")
            return None
        return self._parse(Node.from_payload, node_data['document'], f"node {node_id}")

    async def fetch_file_styles(self, file_id: str) -> Dict[str, Any]:
        file_doc = await self.fetch_whole_file(file_id)
        return file_doc.styles

    async def fetch_image_reference_table(self, file_id: str) -> Dict[str, str]:
        """Resolve every image fill reference in the file to a download URL"""
        logger.info("Fetching image fill references...")
        data = await self._get(f"/files/{file_id}/images")

        images = (data.get('meta') or {}).get('images')
        if images is None:
            images = data.get('images') or {}
        return {ref: url for ref, url in images.items() if url}

    async def submit_export_job(self, file_id: str, node_ids: Sequence[str], format: str = 'png',
                                scale: float = 1, version: Optional[str] = None) -> Dict[str, str]:
        """Render nodes as images; returns node id -> URL for nodes that rendered"""
        if not node_ids:
            raise ValueError("submit_export_job needs at least one node id")

        params: Dict[str, Any] = {
            'ids': ','.join(node_ids),
            'format': format,
            'scale': scale
        }
        if version:
            params['version'] = version

        logger.info(f"Exporting {len(node_ids)} nodes as {format} @{scale}x")
        data = await self._get(f"/images/{file_id}", params=params)

        if data.get('err'):
            logger.error(f"API Error: {data['err']}")
            raise JobFailed(str(data['err']))

        images = data.get('images') or {}
        return {node_id: url for node_id, url in images.items() if url}

    async def download_text(self, url: str) -> str:
        """Download a rendered artifact (e.g. SVG markup) from its signed URL"""
        try:
            response = await self.download_session.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self.stats['errors'] += 1
            raise RemoteError(e.response.status_code, f"Download failed for {url}") from e
        except httpx.HTTPError as e:
            self.stats['errors'] += 1
            raise RemoteError(None, f"Download failed for {url}: {e}") from e
        return response.text

    def get_stats(self) -> Dict[str, int]:
        return dict(self.stats)


def list_pages(file_doc: FileDocument) -> List[Node]:
    return list(file_doc.document.children or [])
