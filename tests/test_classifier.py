"""Tests for image/vector/component classification."""

from __future__ import annotations

from figma_assets.classifier import (
    component_ref_for,
    image_resources_for,
    is_component_node,
    is_vector_node,
    vector_element_for,
)
from figma_assets.models import Node
from tests.conftest import image_fill, rect, solid_fill


def test_rectangle_with_only_image_fill_is_image_and_vector():
    node = Node.model_validate(rect("1:1", fills=[image_fill("ref")]))
    assert [img.id for img in image_resources_for(node)] == ["ref"]
    assert is_vector_node(node)


def test_text_without_fills_is_nothing():
    node = Node.model_validate({"id": "1:2", "name": "Label", "type": "TEXT"})
    assert image_resources_for(node) == []
    assert not is_vector_node(node)
    assert not is_component_node(node)


def test_frame_with_only_image_fill_is_not_vector():
    node = Node.model_validate({"id": "1:3", "type": "FRAME", "fills": [image_fill("ref")]})
    assert not is_vector_node(node)
    assert len(image_resources_for(node)) == 1


def test_non_image_fill_makes_vector():
    node = Node.model_validate({"id": "1:4", "type": "FRAME", "fills": [solid_fill()]})
    assert is_vector_node(node)


def test_stroke_makes_vector():
    node = Node.model_validate({"id": "1:5", "type": "GROUP", "strokes": [solid_fill()]})
    assert is_vector_node(node)


def test_empty_strokes_do_not_make_vector():
    node = Node.model_validate({"id": "1:6", "type": "GROUP", "strokes": [], "fills": []})
    assert not is_vector_node(node)


def test_instance_with_image_fill_and_stroke_fires_all_three():
    node = Node.model_validate({
        "id": "2:1", "name": "Avatar", "type": "INSTANCE", "componentId": "9:9",
        "fills": [image_fill("face")], "strokes": [solid_fill()],
    })
    assert len(image_resources_for(node)) == 1
    assert vector_element_for(node) is not None
    component = component_ref_for(node)
    assert component.type == "INSTANCE"
    assert component.component_id == "9:9"


def test_each_image_fill_yields_a_resource():
    node = Node.model_validate(rect("3:1", fills=[image_fill("a"), solid_fill(), image_fill("b")]))
    assert [img.id for img in image_resources_for(node)] == ["a", "b"]


def test_image_fill_without_reference_is_skipped():
    node = Node.model_validate(rect("3:2", fills=[image_fill(None)]))
    assert image_resources_for(node) == []


def test_image_name_falls_back_to_node_id():
    node = Node.model_validate({"id": "3:3", "type": "FRAME", "fills": [image_fill("a")]})
    image = image_resources_for(node)[0]
    assert image.name == "Image in 3:3"
    assert image.category == "EMBEDDED"
    assert image.url is None
    assert image.size is None


def test_image_size_copied_from_bounding_box():
    node = Node.model_validate(rect("3:4", fills=[image_fill("a")]))
    size = image_resources_for(node)[0].size
    assert (size.width, size.height) == (100, 50)


def test_malformed_bounding_box_is_passed_through():
    node = Node.model_validate(rect(
        "4:1", absoluteBoundingBox={"x": 5, "y": 6, "width": -10, "height": 0},
    ))
    vector = vector_element_for(node)
    assert vector.bounding_box.width == -10
    assert vector.bounding_box.height == 0


def test_vector_name_fallback_and_copied_paints():
    node = Node.model_validate({"id": "4:2", "type": "STAR", "strokes": [solid_fill()]})
    vector = vector_element_for(node)
    assert vector.name == "Vector 4:2"
    assert vector.type == "STAR"
    assert vector.strokes[0].type == "SOLID"
    assert vector.fills is None


def test_component_detection():
    assert is_component_node(Node(id="5:1", type="COMPONENT"))
    assert not is_component_node(Node(id="5:2", type="COMPONENT_SET"))
    assert component_ref_for(Node(id="5:3", type="FRAME")) is None
