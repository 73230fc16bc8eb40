"""
Typed records for Figma node payloads and extraction results.

Node payloads come from the Figma REST API in camelCase; every model accepts
either the API alias or the Python field name and ignores fields it does not
declare. Results are dumped with ``to_payload`` to get camelCase JSON back.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

# Type tags that always classify a node as a vector element
VECTOR_TYPES = frozenset({'VECTOR', 'ELLIPSE', 'POLYGON', 'STAR', 'LINE', 'RECTANGLE'})
COMPONENT_TYPES = frozenset({'COMPONENT', 'INSTANCE'})

ImageFormat = Literal['png', 'jpg', 'svg', 'pdf']
ImageCategory = Literal['EMBEDDED', 'EXTERNAL']


class FigmaModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# ============================================================================
# NODE PAYLOADS
# ============================================================================

class Color(FigmaModel):
    r: float = 0
    g: float = 0
    b: float = 0
    a: Optional[float] = None


class ColorStop(FigmaModel):
    color: Color
    position: float = 0


class Vector2(FigmaModel):
    x: float = 0
    y: float = 0


class Rectangle(FigmaModel):
    """Bounding box; malformed (negative/zero) sizes are kept as received"""
    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0


class Paint(FigmaModel):
    """A fill or stroke descriptor, tagged by ``type`` (SOLID, IMAGE, GRADIENT_LINEAR, ...)"""
    type: str
    visible: bool = True
    opacity: Optional[float] = None
    color: Optional[Color] = None
    gradient_stops: Optional[List[ColorStop]] = Field(default=None, alias='gradientStops')
    image_ref: Optional[str] = Field(default=None, alias='imageRef')
    scale_mode: Optional[str] = Field(default=None, alias='scaleMode')


class Effect(FigmaModel):
    type: str
    visible: Optional[bool] = None
    radius: Optional[float] = None
    color: Optional[Color] = None
    offset: Optional[Vector2] = None


class TypeStyle(FigmaModel):
    font_family: Optional[str] = Field(default=None, alias='fontFamily')
    font_size: Optional[float] = Field(default=None, alias='fontSize')
    font_weight: Optional[float] = Field(default=None, alias='fontWeight')
    letter_spacing: Optional[float] = Field(default=None, alias='letterSpacing')
    line_height_px: Optional[float] = Field(default=None, alias='lineHeightPx')
    text_align_horizontal: Optional[str] = Field(default=None, alias='textAlignHorizontal')
    text_align_vertical: Optional[str] = Field(default=None, alias='textAlignVertical')


class LayoutConstraint(FigmaModel):
    vertical: Optional[str] = None
    horizontal: Optional[str] = None


class Node(FigmaModel):
    """One element of the design tree (document, page, frame, shape, text, ...)"""
    id: str
    name: str = ''
    type: str = 'UNKNOWN'
    visible: bool = True
    fills: Optional[List[Paint]] = None
    strokes: Optional[List[Paint]] = None
    stroke_weight: Optional[float] = Field(default=None, alias='strokeWeight')
    corner_radius: Optional[float] = Field(default=None, alias='cornerRadius')
    effects: Optional[List[Effect]] = None
    constraints: Optional[LayoutConstraint] = None
    component_id: Optional[str] = Field(default=None, alias='componentId')
    absolute_bounding_box: Optional[Rectangle] = Field(default=None, alias='absoluteBoundingBox')
    style: Optional[TypeStyle] = None
    children: Optional[List['Node']] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> 'Node':
        """Build a node tree from its API payload, one node at a time.

        ``model_validate`` recurses into ``children`` and pydantic gives up past a
        few hundred levels; here each node is validated without its children and
        the tree is linked up with an explicit stack, so depth is unbounded.
        """
        root = cls._shallow(data)
        stack = [(root, data.get('children'))]
        while stack:
            node, children = stack.pop()
            if children is None:
                continue
            node.children = []
            for child_data in children:
                child = cls._shallow(child_data)
                node.children.append(child)
                stack.append((child, child_data.get('children')))
        return root

    @classmethod
    def _shallow(cls, data: Dict[str, Any]) -> 'Node':
        return cls.model_validate({key: value for key, value in data.items() if key != 'children'})


class FileDocument(FigmaModel):
    """Whole-file response: document tree plus file-level metadata"""
    name: str = ''
    last_modified: Optional[str] = Field(default=None, alias='lastModified')
    version: Optional[str] = None
    thumbnail_url: Optional[str] = Field(default=None, alias='thumbnailUrl')
    document: Node
    components: Dict[str, Any] = Field(default_factory=dict)
    styles: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> 'FileDocument':
        fields = dict(data)
        if fields.get('document') is not None:
            fields['document'] = Node.from_payload(fields['document'])
        return cls.model_validate(fields)


# ============================================================================
# EXTRACTION RESULTS
# ============================================================================

class Size(FigmaModel):
    width: float
    height: float


class ImageResource(FigmaModel):
    id: str
    name: str
    category: ImageCategory = Field(default='EMBEDDED', alias='type')
    url: Optional[str] = None
    format: Optional[str] = None
    size: Optional[Size] = None


class VectorElement(FigmaModel):
    id: str
    name: str
    type: str
    fills: Optional[List[Paint]] = None
    strokes: Optional[List[Paint]] = None
    bounding_box: Optional[Rectangle] = Field(default=None, alias='boundingBox')


class ComponentRef(FigmaModel):
    id: str
    name: str
    type: str
    component_id: Optional[str] = Field(default=None, alias='componentId')


class NodeElements(FigmaModel):
    node_id: str = Field(alias='nodeId')
    node_name: str = Field(alias='nodeName')
    images: List[ImageResource] = Field(default_factory=list)
    vectors: List[VectorElement] = Field(default_factory=list)
    components: List[ComponentRef] = Field(default_factory=list)

    @computed_field(alias='totalElements')
    @property
    def total_elements(self) -> int:
        return len(self.images) + len(self.vectors) + len(self.components)


class ImageExportOptions(FigmaModel):
    format: ImageFormat = 'png'
    scale: float = Field(default=1, ge=0.01, le=4)
    version: Optional[str] = None


class ImageResult(FigmaModel):
    url: str
    node_id: str = Field(alias='nodeId')
    node_name: str = Field(alias='nodeName')
    format: str
    scale: float
