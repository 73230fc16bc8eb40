"""
Style extraction and CSS generation for Figma nodes.

Colors are converted from Figma's 0-1 floats to 0-255 integers; alpha stays
in 0-1 and defaults to 1 when the API leaves it out.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import Field

from .figma_client import FigmaClient
from .models import Color, FigmaModel, Node, Rectangle
from .traversal import iter_nodes
from .url_parser import parse_figma_url

logger = logging.getLogger(__name__)

STYLED_TYPES = frozenset({'RECTANGLE', 'ELLIPSE', 'POLYGON', 'TEXT', 'COMPONENT', 'INSTANCE'})


class RGBA(FigmaModel):
    r: int
    g: int
    b: int
    a: float = 1

    def css(self) -> str:
        if self.a == 1:
            return f"rgb({self.r}, {self.g}, {self.b})"
        return f"rgba({self.r}, {self.g}, {self.b}, {self.a})"


class GradientStop(FigmaModel):
    color: RGBA
    position: float


class FillStyle(FigmaModel):
    type: str
    color: Optional[RGBA] = None
    gradient_stops: Optional[List[GradientStop]] = Field(default=None, alias='gradientStops')


class StrokeStyle(FigmaModel):
    type: str
    color: Optional[RGBA] = None


class Offset(FigmaModel):
    x: float
    y: float


class EffectStyle(FigmaModel):
    type: str
    visible: bool
    radius: Optional[float] = None
    color: Optional[RGBA] = None
    offset: Optional[Offset] = None


class TextStyle(FigmaModel):
    font_family: Optional[str] = Field(default=None, alias='fontFamily')
    font_size: Optional[float] = Field(default=None, alias='fontSize')
    font_weight: Optional[float] = Field(default=None, alias='fontWeight')
    letter_spacing: Optional[float] = Field(default=None, alias='letterSpacing')
    line_height: Optional[float] = Field(default=None, alias='lineHeight')
    text_align: Optional[str] = Field(default=None, alias='textAlign')
    text_color: Optional[RGBA] = Field(default=None, alias='textColor')


class Constraints(FigmaModel):
    vertical: Optional[str] = None
    horizontal: Optional[str] = None


class StyleData(FigmaModel):
    node_id: str = Field(alias='nodeId')
    node_name: str = Field(alias='nodeName')
    node_type: str = Field(alias='nodeType')
    position: Optional[Rectangle] = None
    fills: Optional[List[FillStyle]] = None
    strokes: Optional[List[StrokeStyle]] = None
    stroke_weight: Optional[float] = Field(default=None, alias='strokeWeight')
    corner_radius: Optional[float] = Field(default=None, alias='cornerRadius')
    effects: Optional[List[EffectStyle]] = None
    text_style: Optional[TextStyle] = Field(default=None, alias='textStyle')
    constraints: Optional[Constraints] = None


class FileInfo(FigmaModel):
    file_id: str = Field(alias='fileId')
    file_name: str = Field(alias='fileName')
    last_modified: Optional[str] = Field(default=None, alias='lastModified')


class ComponentStyles(FigmaModel):
    file_info: FileInfo = Field(alias='fileInfo')
    styles: List[StyleData] = Field(default_factory=list)
    global_styles: Dict[str, Any] = Field(default_factory=dict, alias='globalStyles')


def to_rgba(color: Color) -> RGBA:
    return RGBA(
        r=round(color.r * 255),
        g=round(color.g * 255),
        b=round(color.b * 255),
        a=1 if color.a is None else color.a
    )


def is_styled_node(node: Node) -> bool:
    """Whether a node carries style information worth reporting"""
    return bool(
        node.fills
        or node.strokes
        or node.effects
        or node.corner_radius is not None
        or node.style
        or node.type in STYLED_TYPES
    )


def extract_node_style(node: Node) -> StyleData:
    style = StyleData(node_id=node.id, node_name=node.name, node_type=node.type)

    if node.absolute_bounding_box:
        style.position = node.absolute_bounding_box.model_copy()

    if node.fills:
        style.fills = [
            FillStyle(
                type=fill.type,
                color=to_rgba(fill.color) if fill.color else None,
                gradient_stops=[
                    GradientStop(color=to_rgba(stop.color), position=stop.position)
                    for stop in fill.gradient_stops
                ] if fill.gradient_stops else None
            )
            for fill in node.fills
        ]

    if node.strokes:
        style.strokes = [
            StrokeStyle(type=stroke.type, color=to_rgba(stroke.color) if stroke.color else None)
            for stroke in node.strokes
        ]

    style.stroke_weight = node.stroke_weight
    style.corner_radius = node.corner_radius

    if node.effects:
        style.effects = [
            EffectStyle(
                type=effect.type,
                visible=effect.visible is not False,
                radius=effect.radius,
                color=to_rgba(effect.color) if effect.color else None,
                offset=Offset(x=effect.offset.x, y=effect.offset.y) if effect.offset else None
            )
            for effect in node.effects
        ]

    if node.style:
        text_style = TextStyle(
            font_family=node.style.font_family,
            font_size=node.style.font_size,
            font_weight=node.style.font_weight,
            letter_spacing=node.style.letter_spacing,
            line_height=node.style.line_height_px,
            text_align=node.style.text_align_horizontal
        )
        if node.type == 'TEXT' and node.fills and node.fills[0].color:
            text_style.text_color = to_rgba(node.fills[0].color)
        style.text_style = text_style

    if node.constraints:
        style.constraints = Constraints(
            vertical=node.constraints.vertical,
            horizontal=node.constraints.horizontal
        )

    return style


def extract_main_components(document: Node) -> List[Node]:
    """Every styled node below the document root (pages included)"""
    styled = []
    for page in document.children or []:
        styled.extend(node for node in iter_nodes(page) if is_styled_node(node))
    return styled


def _px(value: float) -> str:
    return f"{value:g}px"


def generate_css(style: StyleData) -> str:
    """CSS declarations for a node's style, or an empty string"""
    css_rules = []

    if style.position:
        css_rules.append(f"width: {_px(style.position.width)}")
        css_rules.append(f"height: {_px(style.position.height)}")

    if style.fills and style.fills[0].color:
        css_rules.append(f"background-color: {style.fills[0].color.css()}")

    if style.strokes and style.strokes[0].color:
        weight = style.stroke_weight or 1
        css_rules.append(f"border: {_px(weight)} solid {style.strokes[0].color.css()}")

    if style.corner_radius is not None:
        css_rules.append(f"border-radius: {_px(style.corner_radius)}")

    text = style.text_style
    if text:
        if text.font_family:
            css_rules.append(f'font-family: "{text.font_family}"')
        if text.font_size:
            css_rules.append(f"font-size: {_px(text.font_size)}")
        if text.font_weight:
            css_rules.append(f"font-weight: {text.font_weight:g}")
        if text.letter_spacing:
            css_rules.append(f"letter-spacing: {_px(text.letter_spacing)}")
        if text.line_height:
            css_rules.append(f"line-height: {_px(text.line_height)}")
        if text.text_align:
            css_rules.append(f"text-align: {text.text_align.lower()}")
        if text.text_color:
            css_rules.append(f"color: {text.text_color.css()}")

    if style.effects:
        shadows = []
        for effect in style.effects:
            if effect.type != 'DROP_SHADOW' or not effect.visible or not effect.color:
                continue
            x = effect.offset.x if effect.offset else 0
            y = effect.offset.y if effect.offset else 0
            blur = effect.radius or 0
            c = effect.color
            shadows.append(f"{_px(x)} {_px(y)} {_px(blur)} rgba({c.r}, {c.g}, {c.b}, {c.a})")
        if shadows:
            css_rules.append(f"box-shadow: {', '.join(shadows)}")

    return ';\n  '.join(css_rules) + ';' if css_rules else ''


class StyleExtractor:
    def __init__(self, client: FigmaClient):
        self.client = client

    async def get_styles_from_url(self, figma_url: str) -> ComponentStyles:
        """Styles of the URL's node, or of every styled node in the file when it has none"""
        info = parse_figma_url(figma_url)
        file_doc = await self.client.fetch_whole_file(info.file_id)

        if info.node_id:
            node = await self.client.fetch_subtree(info.file_id, info.node_id)
            target_nodes = [node] if node else []
        else:
            target_nodes = extract_main_components(file_doc.document)

        logger.info(f"Extracting styles from {len(target_nodes)} nodes")
        return ComponentStyles(
            file_info=FileInfo(
                file_id=info.file_id,
                file_name=file_doc.name,
                last_modified=file_doc.last_modified
            ),
            styles=[extract_node_style(node) for node in target_nodes],
            global_styles=file_doc.styles
        )
