"""Shared test fixtures: sample node trees and an in-memory Figma client."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

import pytest

from figma_assets.models import FileDocument, Node


def rect(node_id: str, name: str = "Rect", **extra) -> dict:
    node = {
        "id": node_id,
        "name": name,
        "type": "RECTANGLE",
        "absoluteBoundingBox": {"x": 0, "y": 0, "width": 100, "height": 50},
    }
    node.update(extra)
    return node


def image_fill(ref: Optional[str]) -> dict:
    fill = {"type": "IMAGE", "scaleMode": "FILL"}
    if ref is not None:
        fill["imageRef"] = ref
    return fill


def solid_fill(r: float = 1, g: float = 0, b: float = 0, a: float = 1) -> dict:
    return {"type": "SOLID", "color": {"r": r, "g": g, "b": b, "a": a}}


# Node 7905:291614: a RECTANGLE with an image fill and a TEXT node without fills
HERO_NODE = {
    "id": "7905:291614",
    "name": "Hero",
    "type": "FRAME",
    "children": [
        rect("7905:1", "Photo", fills=[image_fill("img1")]),
        {"id": "7905:2", "name": "Title", "type": "TEXT"},
    ],
}

HERO_IMAGE_REFS = {"img1": "https://cdn/x.png"}


def sample_file(pages: Optional[List[dict]] = None) -> dict:
    return {
        "name": "Design System",
        "lastModified": "2024-05-01T10:00:00Z",
        "version": "123",
        "document": {
            "id": "0:0",
            "name": "Document",
            "type": "DOCUMENT",
            "children": pages if pages is not None else [
                {"id": "0:1", "name": "Page 1", "type": "CANVAS", "children": [HERO_NODE]},
            ],
        },
        "components": {"1:1": {"key": "abc", "name": "Button"}},
        "styles": {"S:1": {"key": "def", "name": "Primary", "styleType": "FILL"}},
    }


class RecordingSleep:
    """Stands in for asyncio.sleep and records requested delays"""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeFigmaClient:
    """In-memory stand-in for FigmaClient with call recording"""

    def __init__(self, nodes: Optional[Dict[str, dict]] = None, image_refs=None,
                 export_handler: Optional[Callable[[List[str]], Dict[str, str]]] = None,
                 file: Optional[dict] = None, texts: Optional[Dict[str, str]] = None):
        self.nodes = nodes or {}
        self.image_refs = image_refs if image_refs is not None else {}
        self.export_handler = export_handler
        self.file = file
        self.texts = texts or {}
        self.export_calls: List[List[str]] = []
        self.calls: List[str] = []

    async def fetch_subtree(self, file_id: str, node_id: str) -> Optional[Node]:
        self.calls.append("fetch_subtree")
        data = self.nodes.get(node_id)
        return Node.from_payload(data) if data else None

    async def fetch_whole_file(self, file_id: str) -> FileDocument:
        self.calls.append("fetch_whole_file")
        return FileDocument.from_payload(self.file or sample_file())

    async def fetch_image_reference_table(self, file_id: str) -> Dict[str, str]:
        self.calls.append("fetch_image_reference_table")
        if isinstance(self.image_refs, Exception):
            raise self.image_refs
        return dict(self.image_refs)

    async def submit_export_job(self, file_id, node_ids, format="png", scale=1, version=None):
        self.calls.append("submit_export_job")
        self.export_calls.append(list(node_ids))
        if self.export_handler is not None:
            return self.export_handler(list(node_ids))
        return {node_id: f"https://cdn.example/{node_id}.{format}" for node_id in node_ids}

    async def download_text(self, url: str) -> str:
        self.calls.append("download_text")
        return self.texts.get(url, "<svg/>")


@pytest.fixture
def hero_client() -> FakeFigmaClient:
    return FakeFigmaClient(nodes={"7905:291614": HERO_NODE}, image_refs=HERO_IMAGE_REFS)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()
