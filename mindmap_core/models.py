"""
Core data models for mind maps.

These models define the canonical schema for a mind map:
- Nodes (topics) with a label, optional color, attached documents and a
  canvas position
- Edges connecting nodes, each bound to a connection style at creation time
- Documents attached to exactly one node

Field Naming Convention:
- Edges use `source` and `target` (the canvas naming convention)
- Positions are opaque to the model; only the canvas interprets them
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from .styles import ConnectionStyle


# Default topic colors, picked by creation index
NODE_PALETTE = (
    "#FF9B9B",  # Soft Red
    "#9BFFC4",  # Soft Green
    "#9BB5FF",  # Soft Blue
    "#FFE89B",  # Soft Yellow
    "#E2A2FF",  # Soft Purple
)

CENTRAL_TOPIC_LABEL = "Central Topic"
CENTRAL_TOPIC_COLOR = "#FFB6C1"
NEW_TOPIC_LABEL = "New Topic"


class DocumentType(str, Enum):
    """MIME types accepted as node attachments."""
    PDF = "application/pdf"
    TEXT = "text/plain"
    MARKDOWN = "text/markdown"
    MSWORD = "application/msword"
    DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


ALLOWED_DOCUMENT_TYPES = tuple(t.value for t in DocumentType)

# Types whose content is kept as decoded text rather than an encoded blob
TEXT_DOCUMENT_TYPES = (DocumentType.TEXT.value, DocumentType.MARKDOWN.value)


def palette_color(creation_index: int) -> str:
    """Default color for the node created at the given ordinal."""
    return NODE_PALETTE[creation_index % len(NODE_PALETTE)]


class Position(BaseModel):
    """Canvas coordinates of a node."""
    x: float = 0
    y: float = 0


class Document(BaseModel):
    """A file attached to a node."""
    name: str
    type: str
    size: int = 0
    # Decoded text for text types, a data: URL for everything else
    content: Optional[str] = None

    @property
    def is_text(self) -> bool:
        return self.type in TEXT_DOCUMENT_TYPES


class Node(BaseModel):
    """A topic in the mind map."""
    id: str
    label: str = NEW_TOPIC_LABEL
    color: Optional[str] = None
    creation_index: int = 0
    documents: list[Document] = Field(default_factory=list)
    position: Position = Field(default_factory=Position)

    @property
    def resolved_color(self) -> str:
        """The explicit color, or the palette default for this node."""
        return self.color or palette_color(self.creation_index)

    def with_document(self, document: Document) -> "Node":
        """Return a copy of this node with the document appended."""
        return self.model_copy(update={"documents": [*self.documents, document]})

    def to_json_dict(self) -> dict:
        """Convert to a JSON-serializable dict for the canvas."""
        result = self.model_dump()
        result["color"] = self.resolved_color
        return result


class Edge(BaseModel):
    """
    A directed connection between two nodes.

    The rendering fields are copied from the connection style when the edge
    is created, so later changes to the selected style never affect it.
    """
    id: str
    source: str  # Source node ID
    target: str  # Target node ID
    style: str   # Connection style ID
    stroke: str
    stroke_width: float = 2.0
    stroke_dasharray: Optional[str] = None
    marker_start: Optional[str] = None
    marker_end: Optional[str] = None
    animated: bool = False
    # Canvas handle identifiers, passed through untouched
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None

    @classmethod
    def from_style(
        cls,
        id: str,
        source: str,
        target: str,
        style: ConnectionStyle,
        source_handle: Optional[str] = None,
        target_handle: Optional[str] = None,
    ) -> "Edge":
        """Create an edge bound to the given connection style."""
        return cls(
            id=id,
            source=source,
            target=target,
            style=style.id,
            stroke=style.stroke,
            stroke_width=style.stroke_width,
            stroke_dasharray=style.stroke_dasharray,
            marker_start=style.marker_start,
            marker_end=style.marker_end,
            animated=style.animated,
            source_handle=source_handle,
            target_handle=target_handle,
        )

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        result = self.model_dump(exclude={"source_handle", "target_handle"})
        # Only include handles if they're set
        if self.source_handle:
            result["source_handle"] = self.source_handle
        if self.target_handle:
            result["target_handle"] = self.target_handle
        return result


# --- API Request/Response Models ---

class CreateNodeRequest(BaseModel):
    """Request to create a new topic."""
    label: str = NEW_TOPIC_LABEL
    color: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None


class UpdateNodeRequest(BaseModel):
    """Request to update an existing topic (partial update)."""
    label: Optional[str] = None
    color: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None


class ConnectRequest(BaseModel):
    """
    Request to connect two nodes.

    When `style` is omitted the currently selected connection style is used.
    """
    source: str = ""
    target: str = ""
    style: Optional[str] = None
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None

    @model_validator(mode='before')
    @classmethod
    def convert_canvas_fields(cls, data: Any) -> Any:
        """Accept the canvas' camelCase handle names."""
        if isinstance(data, dict):
            if 'sourceHandle' in data and 'source_handle' not in data:
                data['source_handle'] = data.pop('sourceHandle')
            if 'targetHandle' in data and 'target_handle' not in data:
                data['target_handle'] = data.pop('targetHandle')
        return data


class SelectStyleRequest(BaseModel):
    """Request to change the connection style used for new edges."""
    style: str


class NodeChange(BaseModel):
    """A single node change emitted by the canvas."""
    type: str  # "position" or "remove"
    id: str
    position: Optional[Position] = None


class EdgeChange(BaseModel):
    """A single edge change emitted by the canvas."""
    type: str  # "remove"
    id: str
