import asyncio
import logging
from typing import List, Optional, Sequence

from .exceptions import ImageNotRendered, NodeNotFound
from .exporter import BatchExporter
from .figma_client import FigmaClient
from .models import ImageExportOptions, ImageResult, Node
from .traversal import iter_nodes
from .url_parser import parse_figma_url, require_node_id

logger = logging.getLogger(__name__)


class ImageExtractor:
    """Renders nodes to downloadable images"""

    def __init__(self, client: FigmaClient, exporter: BatchExporter):
        self.client = client
        self.exporter = exporter

    async def get_image_from_url(self, figma_url: str,
                                 options: Optional[ImageExportOptions] = None) -> List[ImageResult]:
        options = options or ImageExportOptions()
        info = parse_figma_url(figma_url)
        node_id = require_node_id(info, figma_url)

        node = await self.client.fetch_subtree(info.file_id, node_id)
        if node is None:
            raise NodeNotFound(node_id)

        images = await self.exporter.export(info.file_id, [node_id], options)
        image_url = images.get(node_id)
        if not image_url:
            raise ImageNotRendered(node_id)

        return [self._result(image_url, node_id, node, options)]

    async def get_multiple_images(self, file_id: str, node_ids: Sequence[str],
                                  options: Optional[ImageExportOptions] = None) -> List[ImageResult]:
        """Export many nodes; nodes that are missing or did not render are left out"""
        if not node_ids:
            return []
        options = options or ImageExportOptions()

        node_infos = await asyncio.gather(
            *(self.client.fetch_subtree(file_id, node_id) for node_id in node_ids)
        )
        images = await self.exporter.export(file_id, node_ids, options)

        results = []
        for node_id, node in zip(node_ids, node_infos):
            image_url = images.get(node_id)
            if image_url and node is not None:
                results.append(self._result(image_url, node_id, node, options))
            else:
                logger.warning(f"No image for node {node_id}")
        return results

    async def get_page_images(self, file_id: str, page_id: Optional[str] = None,
                              options: Optional[ImageExportOptions] = None) -> List[ImageResult]:
        """Export every visible, named, non-text node of one page (or of all pages)"""
        file_doc = await self.client.fetch_whole_file(file_id)

        target = file_doc.document
        if page_id:
            page = next((child for child in target.children or [] if child.id == page_id), None)
            if page is None:
                raise NodeNotFound(page_id)
            target = page

        exportable = []
        for child in target.children or []:
            exportable.extend(
                node.id for node in iter_nodes(child)
                if node.type != 'TEXT' and node.name and node.visible
            )

        if not exportable:
            return []
        return await self.get_multiple_images(file_id, exportable, options)

    @staticmethod
    def _result(url: str, node_id: str, node: Node, options: ImageExportOptions) -> ImageResult:
        return ImageResult(
            url=url,
            node_id=node_id,
            node_name=node.name,
            format=options.format,
            scale=options.scale
        )
