"""
MCP tool layer.

FigmaToolService turns extraction results into JSON-ready payloads and never
lets an exception escape: failures come back as ``success: false`` payloads
with static troubleshooting hints. create_server registers the service's
operations as FastMCP tools.
"""

import json
import logging
from typing import Annotated, Any, Dict, List

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from .config import Config
from .element_extractor import ElementExtractor, generate_elements_summary
from .exporter import BatchExporter
from .figma_client import FigmaClient, list_pages
from .image_extractor import ImageExtractor
from .models import ImageExportOptions, ImageFormat
from .retry import MAX_ATTEMPTS
from .style_extractor import StyleExtractor, generate_css
from .url_parser import parse_figma_url, require_node_id
from .utils import css_class_name

logger = logging.getLogger(__name__)

URL_FORMAT = 'https://www.figma.com/design/{fileId}/{name}?node-id={nodeId}'

IMAGE_HINTS = {
    'commonIssues': [
        'Check that the Figma URL contains a node-id parameter',
        'Make sure the Figma token is valid',
        'Verify that you have access to the file',
        'Check that the node exists and is visible',
    ],
    'urlFormat': URL_FORMAT,
}

STYLE_HINTS = {
    'commonIssues': [
        'Check that the Figma URL points to a design or file',
        'Make sure the Figma token is valid',
        'Verify that you have access to the file',
    ],
    'urlFormat': URL_FORMAT,
}

EXPORT_HINTS = {
    'commonIssues': [
        'Check that the file id and node ids are correct (node ids look like 1:2)',
        'Make sure the Figma token is valid',
        'Large exports may hit rate limits; try again later',
    ],
}

FILE_INFO_HINTS = {
    'commonIssues': [
        'Check that the Figma URL points to a design or file',
        'Make sure the Figma token is valid',
        'Verify that you have access to the file',
    ],
    'urlFormat': URL_FORMAT,
}

NODE_IMAGES_HINTS = {
    'commonIssues': [
        'Check that the Figma URL contains a node-id parameter',
        'Check that the node contains image fills',
        'Verify that you have access to the file',
    ],
    'urlFormat': URL_FORMAT,
}

SVG_HINTS = {
    'commonIssues': [
        'Check that the node is a vector or can be exported as SVG',
        'Make sure the Figma token has sufficient permissions',
        'Verify that the node id format is correct',
    ],
}

ELEMENTS_HINTS = {
    'commonIssues': [
        'Check that the Figma URL contains a node-id parameter',
        'Verify that you have access to the file and node',
        'Check that the node exists and contains design elements',
    ],
    'tip': 'Use includeDetails=true to get the full element lists',
}


def success(data: Dict[str, Any]) -> Dict[str, Any]:
    return {'success': True, 'data': data}


def failure(error: Exception, hints: Dict[str, Any]) -> Dict[str, Any]:
    return {'success': False, 'error': str(error) or type(error).__name__, 'troubleshooting': hints}


def render(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


class FigmaToolService:
    """One async method per MCP tool, each returning a success or failure payload"""

    def __init__(self, client: FigmaClient, exporter: BatchExporter):
        self.client = client
        self.exporter = exporter
        self.images = ImageExtractor(client, exporter)
        self.elements = ElementExtractor(client, exporter)
        self.styles = StyleExtractor(client)

    @classmethod
    def from_config(cls, config: Config) -> 'FigmaToolService':
        client = FigmaClient(config.figma_token, base_url=config.api_base, timeout=config.request_timeout)
        exporter = BatchExporter(
            client,
            batch_size=config.export_batch_size,
            max_concurrent_batches=config.max_concurrent_batches
        )
        # Configuration can only lower the attempt cap
        exporter.retry_policy.max_attempts = min(max(1, config.max_retries), MAX_ATTEMPTS)
        return cls(client, exporter)

    async def get_figma_image(self, url: str, format: str = 'png', scale: float = 1) -> Dict[str, Any]:
        try:
            logger.info(f"Processing image request: {url}")
            options = ImageExportOptions(format=format, scale=scale)
            result = (await self.images.get_image_from_url(url, options))[0]
            logger.info(f"Image export succeeded: {result.node_name} ({result.node_id})")
            return success({
                'imageUrl': result.url,
                'nodeId': result.node_id,
                'nodeName': result.node_name,
                'format': result.format,
                'scale': result.scale,
            })
        except Exception as e:
            logger.error(f"Image export failed: {e}")
            return failure(e, IMAGE_HINTS)

    async def get_figma_styles(self, url: str, generate_css_code: bool = False) -> Dict[str, Any]:
        try:
            style_data = await self.styles.get_styles_from_url(url)
            payload = style_data.to_payload()
            data = {
                'fileInfo': payload['fileInfo'],
                'styles': payload['styles'],
                'globalStyles': payload['globalStyles'],
            }

            if generate_css_code and style_data.styles:
                css_rules = []
                for style in style_data.styles:
                    css = generate_css(style)
                    if css:
                        css_rules.append(f".{css_class_name(style.node_name)} {{\n  {css}\n}}")
                if css_rules:
                    data['generatedCSS'] = '\n\n'.join(css_rules)

            return success(data)
        except Exception as e:
            logger.error(f"Style extraction failed: {e}")
            return failure(e, STYLE_HINTS)

    async def export_multiple_images(self, file_id: str, node_ids: List[str], format: str = 'png',
                                     scale: float = 1) -> Dict[str, Any]:
        try:
            options = ImageExportOptions(format=format, scale=scale)
            results = await self.images.get_multiple_images(file_id, node_ids, options)
            return success({
                'images': [result.to_payload() for result in results],
                'totalCount': len(results),
            })
        except Exception as e:
            logger.error(f"Batch export failed: {e}")
            return failure(e, EXPORT_HINTS)

    async def get_file_info(self, url: str) -> Dict[str, Any]:
        try:
            info = parse_figma_url(url)
            file_doc = await self.client.fetch_whole_file(info.file_id)
            return success({
                'fileId': info.file_id,
                'fileName': file_doc.name,
                'lastModified': file_doc.last_modified,
                'version': file_doc.version,
                'componentsCount': len(file_doc.components),
                'stylesCount': len(file_doc.styles),
                'pagesCount': len(list_pages(file_doc)),
            })
        except Exception as e:
            logger.error(f"File info lookup failed: {e}")
            return failure(e, FILE_INFO_HINTS)

    async def get_node_images(self, url: str) -> Dict[str, Any]:
        try:
            logger.info(f"Collecting node image resources: {url}")
            info = parse_figma_url(url)
            node_id = require_node_id(info, url)
            images = await self.elements.get_node_images(info.file_id, node_id)
            logger.info(f"Found {len(images)} image resources")
            return success({
                'images': [image.to_payload() for image in images],
                'totalCount': len(images),
            })
        except Exception as e:
            logger.error(f"Node image lookup failed: {e}")
            return failure(e, NODE_IMAGES_HINTS)

    async def get_node_svg(self, url: str) -> Dict[str, Any]:
        try:
            logger.info(f"Fetching node SVG: {url}")
            info = parse_figma_url(url)
            node_id = require_node_id(info, url)
            svg = await self.elements.get_node_as_svg(info.file_id, node_id)
            logger.info(f"Fetched SVG markup, {len(svg)} characters")
            return success({
                'svg': svg,
                'fileId': info.file_id,
                'nodeId': node_id,
                'dataLength': len(svg),
            })
        except Exception as e:
            logger.error(f"SVG lookup failed: {e}")
            return failure(e, SVG_HINTS)

    async def extract_node_elements(self, url: str, include_details: bool = False) -> Dict[str, Any]:
        try:
            logger.info(f"Extracting node elements: {url}")
            elements = await self.elements.get_elements_from_url(url)
            logger.info(f"Extracted {elements.total_elements} design elements")

            data: Dict[str, Any] = {
                'nodeId': elements.node_id,
                'nodeName': elements.node_name,
                'summary': {
                    'totalElements': elements.total_elements,
                    'images': len(elements.images),
                    'vectors': len(elements.vectors),
                    'components': len(elements.components),
                },
            }
            if include_details:
                payload = elements.to_payload()
                data['elements'] = {
                    'images': payload['images'],
                    'vectors': payload['vectors'],
                    'components': payload['components'],
                }
            else:
                data['textSummary'] = generate_elements_summary(elements)
            return success(data)
        except Exception as e:
            logger.error(f"Element extraction failed: {e}")
            return failure(e, ELEMENTS_HINTS)


READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True)

FigmaUrl = Annotated[str, Field(description="Figma file URL, e.g. " + URL_FORMAT)]
Scale = Annotated[float, Field(description="Image scale factor", ge=0.01, le=4)]
Format = Annotated[ImageFormat, Field(description="Image format")]


def create_server(service: FigmaToolService) -> FastMCP:
    mcp = FastMCP("figma-assets")

    @mcp.tool(name="get_figma_image", description="Render the node of a Figma URL as an image",
              annotations=READ_ONLY)
    async def get_figma_image(url: FigmaUrl, format: Format = 'png', scale: Scale = 1) -> str:
        return render(await service.get_figma_image(url, format, scale))

    @mcp.tool(name="get_figma_styles", description="Extract style data for the node of a Figma URL",
              annotations=READ_ONLY)
    async def get_figma_styles(
        url: FigmaUrl,
        generateCSS: Annotated[bool, Field(description="Also generate CSS rules")] = False,
    ) -> str:
        return render(await service.get_figma_styles(url, generateCSS))

    @mcp.tool(name="export_multiple_images", description="Export images for several nodes of a file",
              annotations=READ_ONLY)
    async def export_multiple_images(
        fileId: Annotated[str, Field(description="Figma file id")],
        nodeIds: Annotated[List[str], Field(description="Node ids, e.g. 1:2")],
        format: Format = 'png',
        scale: Scale = 1,
    ) -> str:
        return render(await service.export_multiple_images(fileId, nodeIds, format, scale))

    @mcp.tool(name="get_file_info", description="Basic information about a Figma file",
              annotations=READ_ONLY)
    async def get_file_info(url: FigmaUrl) -> str:
        return render(await service.get_file_info(url))

    @mcp.tool(name="get_node_images", description="List the image resources inside a node",
              annotations=READ_ONLY)
    async def get_node_images(url: FigmaUrl) -> str:
        return render(await service.get_node_images(url))

    @mcp.tool(name="get_node_svg", description="Get the SVG markup of a node", annotations=READ_ONLY)
    async def get_node_svg(url: FigmaUrl) -> str:
        return render(await service.get_node_svg(url))

    @mcp.tool(name="extract_node_elements",
              description="Extract every design element (images, vectors, components) in a node",
              annotations=READ_ONLY)
    async def extract_node_elements(
        url: FigmaUrl,
        includeDetails: Annotated[bool, Field(description="Include the full element lists")] = False,
    ) -> str:
        return render(await service.extract_node_elements(url, includeDetails))

    return mcp
