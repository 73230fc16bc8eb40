"""
Node classification into images, vectors and components.

The three checks are independent: a single node may produce an image resource,
a vector element and a component reference at the same time.
"""

from typing import List, Optional

from .models import (
    COMPONENT_TYPES,
    VECTOR_TYPES,
    ComponentRef,
    ImageResource,
    Node,
    Size,
    VectorElement,
)


def image_resources_for(node: Node) -> List[ImageResource]:
    """One embedded image resource per IMAGE fill carrying an image reference"""
    resources = []
    for fill in node.fills or []:
        if fill.type == 'IMAGE' and fill.image_ref:
            box = node.absolute_bounding_box
            resources.append(ImageResource(
                id=fill.image_ref,
                name=node.name or f"Image in {node.id}",
                category='EMBEDDED',
                size=Size(width=box.width, height=box.height) if box else None
            ))
    return resources


def is_vector_node(node: Node) -> bool:
    """Vector type tag, OR any non-image fill, OR any stroke"""
    if node.type in VECTOR_TYPES:
        return True
    if any(fill.type != 'IMAGE' for fill in node.fills or []):
        return True
    return bool(node.strokes)


def is_component_node(node: Node) -> bool:
    return node.type in COMPONENT_TYPES


def vector_element_for(node: Node) -> Optional[VectorElement]:
    if not is_vector_node(node):
        return None
    return VectorElement(
        id=node.id,
        name=node.name or f"Vector {node.id}",
        type=node.type,
        fills=node.fills,
        strokes=node.strokes,
        bounding_box=node.absolute_bounding_box
    )


def component_ref_for(node: Node) -> Optional[ComponentRef]:
    if not is_component_node(node):
        return None
    return ComponentRef(
        id=node.id,
        name=node.name,
        type=node.type,
        component_id=node.component_id or None
    )
