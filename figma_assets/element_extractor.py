import logging
from typing import List

from .classifier import component_ref_for, image_resources_for, vector_element_for
from .exceptions import FigmaError, ImageNotRendered, NodeNotFound
from .exporter import BatchExporter
from .figma_client import FigmaClient
from .models import ComponentRef, ImageExportOptions, ImageResource, Node, NodeElements, VectorElement
from .traversal import iter_nodes
from .url_parser import parse_figma_url, require_node_id

logger = logging.getLogger(__name__)


def deduplicate_images(images: List[ImageResource]) -> List[ImageResource]:
    """Drop later images whose key (id, else url, else name) was already seen; order is kept"""
    seen = set()
    unique = []
    for image in images:
        key = image.id or image.url or image.name
        if key in seen:
            continue
        seen.add(key)
        unique.append(image)
    return unique


def generate_elements_summary(elements: NodeElements) -> str:
    """Human readable report of a node's elements; empty sections are left out"""
    summary = [
        f"Node name: {elements.node_name}",
        f"Total elements: {elements.total_elements}",
    ]

    if elements.images:
        summary.append(f"\n📸 Images ({len(elements.images)}):")
        for idx, img in enumerate(elements.images, 1):
            summary.append(f"  {idx}. {img.name} ({img.category})")

    if elements.vectors:
        summary.append(f"\n🎨 Vectors ({len(elements.vectors)}):")
        for idx, vec in enumerate(elements.vectors, 1):
            summary.append(f"  {idx}. {vec.name} ({vec.type})")

    if elements.components:
        summary.append(f"\n🧩 Components ({len(elements.components)}):")
        for idx, comp in enumerate(elements.components, 1):
            summary.append(f"  {idx}. {comp.name} ({comp.type})")

    return '\n'.join(summary)


class ElementExtractor:
    """Collects images, vectors and components from a node subtree"""

    def __init__(self, client: FigmaClient, exporter: BatchExporter):
        self.client = client
        self.exporter = exporter

    async def get_node(self, file_id: str, node_id: str) -> Node:
        node = await self.client.fetch_subtree(file_id, node_id)
        if node is None:
            raise NodeNotFound(node_id)
        return node

    async def get_node_images(self, file_id: str, node_id: str) -> List[ImageResource]:
        node = await self.get_node(file_id, node_id)
        return await self.collect_images(file_id, node)

    async def collect_images(self, file_id: str, root: Node) -> List[ImageResource]:
        """Image fills of the subtree, with URLs resolved through the file's image fill table"""
        images = []
        for node in iter_nodes(root):
            images.extend(image_resources_for(node))

        if images:
            try:
                image_refs = await self.client.fetch_image_reference_table(file_id)
            except FigmaError as e:
                # URLs stay unset; the resources themselves are still useful
                logger.warning(f"Could not resolve image URLs for file {file_id}: {e}")
            else:
                for image in images:
                    if image.id in image_refs:
                        image.url = image_refs[image.id]

        logger.info(f"Found {len(images)} image fills under {root.id}")
        return deduplicate_images(images)

    def extract_vector_elements(self, root: Node) -> List[VectorElement]:
        vectors = []
        for node in iter_nodes(root):
            vector = vector_element_for(node)
            if vector is not None:
                vectors.append(vector)
        return vectors

    def collect_components(self, root: Node) -> List[ComponentRef]:
        components = []
        for node in iter_nodes(root):
            component = component_ref_for(node)
            if component is not None:
                components.append(component)
        return components

    async def get_all_node_elements(self, file_id: str, node_id: str) -> NodeElements:
        """Fetch the subtree once and gather every image, vector and component in it"""
        node = await self.get_node(file_id, node_id)

        images = await self.collect_images(file_id, node)
        vectors = self.extract_vector_elements(node)
        components = self.collect_components(node)

        elements = NodeElements(
            node_id=node_id,
            node_name=node.name or 'Unnamed Node',
            images=images,
            vectors=vectors,
            components=components
        )
        logger.info(
            f"Extracted {elements.total_elements} elements from {node_id}: "
            f"{len(images)} images, {len(vectors)} vectors, {len(components)} components"
        )
        return elements

    async def get_elements_from_url(self, figma_url: str) -> NodeElements:
        info = parse_figma_url(figma_url)
        node_id = require_node_id(info, figma_url)
        return await self.get_all_node_elements(info.file_id, node_id)

    async def get_node_as_svg(self, file_id: str, node_id: str) -> str:
        """Render a node as SVG and return the markup"""
        images = await self.exporter.export(file_id, [node_id], ImageExportOptions(format='svg'))
        svg_url = images.get(node_id)
        if not svg_url:
            raise ImageNotRendered(node_id)
        return await self.client.download_text(svg_url)
